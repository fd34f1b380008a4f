"""
DEPENDENCIES (Dependências)
============================

Funções que são injetadas nas rotas para validação.
"""

from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from leaddesk.infrastructure.database import get_db
from leaddesk.infrastructure.services import crm_store
from leaddesk.infrastructure.services.auth_service import decode_access_token
from leaddesk.domain.entities import User

# Esquema de autenticação Bearer (sem auto_error: sem token é 401, não 403)
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Valida o token e retorna o usuário autenticado.

    Uso nas rotas:
        @router.get("/rota-protegida")
        async def rota(user: User = Depends(get_current_user)):
            # user está disponível aqui
    """
    if credentials is None:
        raise _unauthorized("Não autenticado")

    payload = decode_access_token(credentials.credentials)
    if not payload:
        raise _unauthorized("Token inválido ou expirado")

    user_id = payload.get("sub")
    if not user_id or not str(user_id).isdigit():
        raise _unauthorized("Token inválido")

    user = await crm_store.get_user(db, int(user_id))

    if not user or not user.is_active:
        raise _unauthorized("Usuário não encontrado")

    return user
