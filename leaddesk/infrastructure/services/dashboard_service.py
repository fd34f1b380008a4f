"""
SERVIÇO DE DASHBOARD
=====================

Contadores do painel, sempre calculados na hora (sem cache)
e com o mesmo escopo de visibilidade da listagem de leads.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional, Tuple
from sqlalchemy.exc import OperationalError, ProgrammingError
from sqlalchemy.ext.asyncio import AsyncSession

from leaddesk.domain.entities import User, Lead, UserRole, LeadStatus, AssignmentStage, utcnow
from leaddesk.infrastructure.services import crm_store
from leaddesk.services.permissions import permissions

logger = logging.getLogger(__name__)

SCHEMA_MISMATCH = "schema_mismatch"


def day_bounds(now: datetime) -> Tuple[datetime, datetime]:
    """Início de hoje e início de amanhã."""
    start = datetime(now.year, now.month, now.day)
    return start, start + timedelta(days=1)


def empty_stats() -> dict:
    return {
        "total_leads": 0,
        "today_follow_ups": 0,
        "overdue_follow_ups": 0,
        "converted_count": 0,
        "closed_count": 0,
    }


async def get_dashboard_stats(
    db: AsyncSession,
    user: User,
    now: Optional[datetime] = None,
) -> dict:
    """
    Estatísticas do painel para o usuário.

    Se o banco estiver com schema desatualizado (coluna/tabela faltando),
    devolve tudo zerado com `error` em vez de quebrar o painel.
    """
    try:
        return await _compute_stats(db, user, now or utcnow())
    except (ProgrammingError, OperationalError):
        logger.error("Falha ao calcular dashboard", extra={"user_id": user.id}, exc_info=True)
        await db.rollback()

        stats = empty_stats()
        stats["error"] = SCHEMA_MISMATCH
        return stats


async def _compute_stats(db: AsyncSession, user: User, now: datetime) -> dict:
    scope = permissions.lead_scope(user)
    today, tomorrow = day_bounds(now)
    follow_up = Lead.status == LeadStatus.FOLLOW_UP.value

    stats = {
        "total_leads": await crm_store.count_leads(db, *scope),
        "today_follow_ups": await crm_store.count_leads(
            db, *scope, follow_up, Lead.follow_up_at >= today, Lead.follow_up_at < tomorrow
        ),
        "overdue_follow_ups": await crm_store.count_leads(
            db, *scope, follow_up, Lead.follow_up_at < today
        ),
        "converted_count": await crm_store.count_leads(
            db, *scope, Lead.status == LeadStatus.CONVERTED.value
        ),
        "closed_count": await crm_store.count_leads(
            db, *scope, Lead.status == LeadStatus.CLOSED.value
        ),
    }

    if permissions.can_perform_action(user, "view_team_performance"):
        stats["stage_stats"] = {
            stage.value.lower(): await crm_store.count_leads(
                db, *scope, Lead.assignment_stage == stage.value
            )
            for stage in AssignmentStage
        }
        stats["team_performance"] = await get_team_performance(db, user)

    return stats


async def get_team_performance(db: AsyncSession, user: User) -> list[dict]:
    """
    Uma linha por executivo ativo (admin: todos; gestor: a própria equipe).

    assigned_count conta todo lead que o executivo já recebeu,
    mesmo que depois tenha sido reatribuído. Para o gestor, os dois
    contadores só consideram leads que estão com ele (um executivo
    compartilhado não traz os leads de outros gestores).
    """
    manager_id = None if user.has_role(UserRole.ADMIN) else user.id
    executives = await crm_store.list_users(
        db,
        role=UserRole.EXECUTIVE.value,
        manager_id=manager_id,
        active_only=True,
    )
    ids = [e.id for e in executives]
    scope = [] if manager_id is None else [Lead.assigned_manager_id == manager_id]

    assigned = await crm_store.assigned_lead_ids_by_executive(db, ids, manager_id=manager_id)
    converted = await crm_store.count_leads_by(
        db,
        Lead.assigned_executive_id,
        ids,
        statuses=(LeadStatus.CONVERTED.value,),
        scope=scope,
    )

    return [
        {
            "executive_id": e.id,
            "name": e.name,
            "assigned_count": len(assigned[e.id]),
            "converted_count": converted[e.id],
        }
        for e in executives
    ]
