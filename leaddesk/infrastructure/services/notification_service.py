"""
NOTIFICATION SERVICE
====================

Notificações do sino do portal.

`notify` é "dispara e esquece": se o banco falhar ao gravar a
notificação, o erro vai para o log e a operação que chamou segue.
"""

import logging
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from leaddesk.domain.entities import Notification, NotificationType, Lead, User

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTES
# =============================================================================

NOTIFICATION_TITLES = {
    NotificationType.LEAD_ASSIGNED.value: "Novo Lead Atribuído",
    NotificationType.LEAD_REASSIGNED.value: "Lead Reatribuído para Você",
}


async def notify(
    db: AsyncSession,
    user_id: int,
    type: str,
    title: str,
    message: str,
    related_lead_id: Optional[int] = None,
) -> Optional[Notification]:
    """
    Cria notificação para um usuário.

    Roda num savepoint: uma falha aqui não derruba a transação do chamador.
    Retorna None quando não foi possível gravar.
    """
    notification = Notification(
        user_id=user_id,
        type=type,
        title=title,
        message=message,
        related_lead_id=related_lead_id,
        is_read=False,
    )

    try:
        async with db.begin_nested():
            db.add(notification)
    except SQLAlchemyError:
        logger.warning(
            "Falha ao gravar notificação",
            extra={"user_id": user_id, "type": type, "lead_id": related_lead_id},
            exc_info=True,
        )
        return None

    return notification


async def notify_lead_assigned(
    db: AsyncSession,
    lead: Lead,
    recipient: User,
    reassigned: bool = False,
) -> Optional[Notification]:
    """Avisa o gestor/executivo que recebeu o lead."""
    notification_type = (
        NotificationType.LEAD_REASSIGNED if reassigned else NotificationType.LEAD_ASSIGNED
    ).value

    return await notify(
        db,
        user_id=recipient.id,
        type=notification_type,
        title=NOTIFICATION_TITLES[notification_type],
        message=f"Você recebeu o lead: {lead.name}",
        related_lead_id=lead.id,
    )
