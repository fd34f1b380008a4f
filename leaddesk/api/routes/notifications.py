"""
ROTAS: NOTIFICAÇÕES
====================

Sino do portal. Cada usuário só vê e marca as próprias notificações.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from leaddesk.config import get_settings
from leaddesk.infrastructure.database import get_db
from leaddesk.infrastructure.services import crm_store
from leaddesk.api.schemas import NotificationResponse
from leaddesk.api.dependencies import get_current_user
from leaddesk.domain.entities import User

router = APIRouter(prefix="/notifications", tags=["Notificações"])


@router.get("", response_model=list[NotificationResponse])
async def list_notifications(
    unread_only: bool = False,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Lista notificações do usuário (mais recentes primeiro).
    """
    return await crm_store.list_notifications(
        db,
        user.id,
        limit=get_settings().notifications_limit,
        unread_only=unread_only,
    )


@router.get("/count")
async def count_unread(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Retorna contagem de notificações não lidas.
    """
    count = await crm_store.count_unread_notifications(db, user.id)
    return {"unread_count": count}


@router.patch("/read-all")
async def mark_all_as_read(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Marca todas as notificações como lidas.
    """
    await crm_store.mark_all_notifications_read(db, user.id)
    return {"success": True}


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
async def mark_as_read(
    notification_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Marca notificação como lida. Repetir a chamada não muda nada.
    """
    return await crm_store.mark_notification_read(db, notification_id, user.id)
