"""
ROTAS DE AUTENTICAÇÃO
======================

Login por portal (cada role tem o seu) e dados do usuário logado.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from leaddesk.infrastructure.database import get_db
from leaddesk.infrastructure.services.auth_service import authenticate, create_token_for_user
from leaddesk.api.schemas import LoginRequest, TokenResponse, UserResponse
from leaddesk.api.dependencies import get_current_user
from leaddesk.api.routes.users import users_to_response
from leaddesk.domain.entities import User

router = APIRouter(prefix="/auth", tags=["Autenticação"])


@router.post("/login", response_model=TokenResponse)
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Faz login e retorna token JWT.

    O usuário precisa ter o mesmo role do portal em que está entrando.
    """
    user = await authenticate(db, payload.username, payload.password, payload.portal_role.value)
    token = create_token_for_user(user)

    [user_data] = await users_to_response(db, [user])
    return TokenResponse(access_token=token, user=user_data)


@router.get("/me", response_model=UserResponse)
async def get_me(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Retorna dados do usuário logado."""
    [user_data] = await users_to_response(db, [user])
    return user_data
