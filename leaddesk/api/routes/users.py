"""
ROTAS DE USUÁRIOS
==================

Admin gerencia todos os usuários.
Gestor lista e cadastra apenas executivos da própria equipe.
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from leaddesk.infrastructure.database import get_db
from leaddesk.infrastructure.services import crm_store
from leaddesk.infrastructure.services.auth_service import hash_password
from leaddesk.api.schemas import UserCreate, UserUpdate, UserResponse, LinkManagerRequest
from leaddesk.api.dependencies import get_current_user
from leaddesk.domain.entities import User, UserRole
from leaddesk.domain.errors import NotFoundError, ValidationError
from leaddesk.services.permissions import permissions

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Usuários"])


# ==========================================
# HELPERS
# ==========================================

async def users_to_response(db: AsyncSession, users: list[User]) -> list[UserResponse]:
    """Monta a resposta incluindo os gestores de cada executivo."""
    manager_ids = await crm_store.get_manager_ids(db, [u.id for u in users])

    return [
        UserResponse.model_validate(u).model_copy(update={"manager_ids": manager_ids.get(u.id, [])})
        for u in users
    ]


async def _ensure_active_manager(db: AsyncSession, manager_id: int) -> User:
    manager = await crm_store.get_user(db, manager_id)

    if not manager or not manager.has_role(UserRole.MANAGER) or not manager.is_active:
        raise ValidationError("manager_id precisa ser um gestor ativo", field="manager_id")

    return manager


# ==========================================
# ENDPOINTS
# ==========================================

@router.get("", response_model=list[UserResponse])
async def list_users(
    role: Optional[UserRole] = None,
    manager_id: Optional[int] = None,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Lista usuários.

    Admin pode filtrar por role e gestor; gestor sempre recebe só a equipe.
    """
    role_filter, manager_filter = permissions.user_list_filters(
        user, role.value if role else None, manager_id
    )
    users = await crm_store.list_users(db, role=role_filter, manager_id=manager_filter)
    return await users_to_response(db, users)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: UserCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Cria usuário. Executivo criado por gestor já entra na equipe dele."""
    role, manager_id = permissions.resolve_new_user(user, payload.role.value, payload.manager_id)

    if await crm_store.get_user_by_username(db, payload.username):
        raise ValidationError("Username já cadastrado", field="username")

    # Gestor só cria executivo para a própria equipe (já validado)
    if manager_id is not None and not user.has_role(UserRole.MANAGER):
        await _ensure_active_manager(db, manager_id)

    new_user = await crm_store.create_user(
        db,
        username=payload.username,
        password_hash=hash_password(payload.password),
        role=role,
        name=payload.name,
        email=payload.email,
        mobile=payload.mobile,
        is_active=payload.is_active,
    )

    if manager_id is not None:
        await crm_store.link_executive(db, manager_id, new_user.id)

    logger.info(
        "Usuário criado",
        extra={"user_id": new_user.id, "role": role, "created_by": user.id},
    )

    [user_data] = await users_to_response(db, [new_user])
    return user_data


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    payload: UserUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Atualiza dados cadastrais ou ativa/desativa o usuário (admin)."""
    permissions.require(user, "manage_users", "Só o admin pode editar usuários")

    updates = payload.model_dump(exclude_unset=True)
    for field, value in updates.items():
        if value is None:
            raise ValidationError(f"{field} não pode ser vazio", field=field)

    updated = await crm_store.update_user(db, user_id, updates)

    [user_data] = await users_to_response(db, [updated])
    return user_data


@router.post("/{user_id}/managers", response_model=UserResponse)
async def link_manager(
    user_id: int,
    payload: LinkManagerRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Vincula o executivo a mais um gestor (admin)."""
    permissions.require(user, "manage_users", "Só o admin pode vincular executivos")

    executive = await crm_store.get_user(db, user_id)
    if not executive:
        raise NotFoundError("Usuário não encontrado")

    if not executive.has_role(UserRole.EXECUTIVE):
        raise ValidationError("Só executivos são vinculados a gestores", field="user_id")

    await _ensure_active_manager(db, payload.manager_id)
    await crm_store.link_executive(db, payload.manager_id, executive.id)

    [user_data] = await users_to_response(db, [executive])
    return user_data
