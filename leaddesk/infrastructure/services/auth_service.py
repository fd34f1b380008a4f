"""
SERVIÇO DE AUTENTICAÇÃO
========================

Gerencia hash de senhas, tokens JWT e o login por portal
(cada role entra pelo seu portal: ADMIN, MANAGER ou EXECUTIVE).
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
import hashlib
import logging
import secrets
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from leaddesk.config import get_settings
from leaddesk.domain.entities import User, utcnow
from leaddesk.domain.errors import UnauthenticatedError, AuthorizationError
from leaddesk.infrastructure.services import crm_store

logger = logging.getLogger(__name__)

# Configurações JWT
ALGORITHM = "HS256"


def hash_password(password: str) -> str:
    """Gera hash da senha usando SHA256 + salt."""
    salt = secrets.token_hex(16)
    pwd_hash = hashlib.sha256((password + salt).encode()).hexdigest()
    return f"{salt}${pwd_hash}"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verifica se a senha está correta."""
    try:
        salt, pwd_hash = hashed_password.split("$")
    except ValueError:
        return False
    candidate = hashlib.sha256((plain_password + salt).encode()).hexdigest()
    return secrets.compare_digest(candidate, pwd_hash)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Cria token JWT.

    Args:
        data: Dados a incluir no token (ex: {"sub": user_id})
        expires_delta: Tempo de expiração

    Returns:
        Token JWT assinado
    """
    settings = get_settings()
    to_encode = data.copy()

    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)

    to_encode.update({"exp": datetime.now(timezone.utc) + expires_delta})

    return jwt.encode(to_encode, settings.secret_key, algorithm=ALGORITHM)


def create_token_for_user(user: User) -> str:
    return create_access_token({"sub": str(user.id), "role": user.role})


def decode_access_token(token: str) -> Optional[dict]:
    """
    Decodifica e valida token JWT.

    Returns:
        Dados do token ou None se inválido
    """
    try:
        return jwt.decode(token, get_settings().secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return None


async def authenticate(
    db: AsyncSession,
    username: str,
    password: str,
    requested_role: str,
) -> User:
    """
    Valida credenciais para o portal pedido.

    A mensagem é a mesma para usuário inexistente, senha errada
    e portal errado, para não revelar quais usernames existem.
    """
    user = await crm_store.get_user_by_username(db, username)

    if not user or not verify_password(password, user.password_hash):
        logger.info("Login recusado", extra={"username": username, "reason": "invalid_credentials"})
        raise UnauthenticatedError("Usuário ou senha incorretos")

    if user.role != requested_role:
        logger.info(
            "Login recusado",
            extra={"username": username, "reason": "wrong_portal", "portal": requested_role},
        )
        raise UnauthenticatedError("Usuário ou senha incorretos")

    if not user.is_active:
        raise AuthorizationError("Usuário inativo. Fale com o administrador.")

    user.last_login_at = utcnow()
    await db.flush()

    logger.info("Login realizado", extra={"user_id": user.id, "role": user.role})
    return user
