"""
SERVIÇO DE DISTRIBUIÇÃO DE LEADS
=================================

Responsável por decidir qual gestor e qual executivo recebem cada lead.

Fluxo automático (na criação do lead):
1. auto_assign_level1 -> escolhe o próximo gestor (rodízio)
2. auto_assign_level2 -> escolhe o próximo executivo da equipe desse gestor

O "último atribuído" de cada fila é sempre lido do histórico gravado,
nunca de um contador em memória: sobrevive a restart e é o mesmo
para todas as instâncias da API.

Não achar candidato NÃO é erro: o lead simplesmente para no estágio
em que está (UNASSIGNED ou MANAGER_ASSIGNED).
"""

import logging
from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession

from leaddesk.domain.entities import (
    User,
    Lead,
    AssignmentHistory,
    UserRole,
    AssignmentStage,
    AssignmentLevel,
)
from leaddesk.domain.errors import NotFoundError, ValidationError, AuthorizationError
from leaddesk.infrastructure.services import crm_store
from leaddesk.infrastructure.services.notification_service import notify_lead_assigned
from leaddesk.services.permissions import permissions

logger = logging.getLogger(__name__)


# ==========================================
# FUNÇÕES DE SELEÇÃO (PURAS)
# ==========================================

def select_by_round_robin(
    candidates: List[User],
    last_assigned_id: Optional[int],
) -> Optional[User]:
    """
    Seleciona o candidato seguinte ao último atribuído.

    Volta para o primeiro quando:
    - não há último atribuído
    - o último saiu da lista (desativado)
    - o último era o final da fila
    """
    if not candidates:
        return None

    # Ordena por ID (ordem de criação) para consistência
    ordered = sorted(candidates, key=lambda u: u.id)
    ids = [u.id for u in ordered]

    if last_assigned_id is None or last_assigned_id not in ids:
        return ordered[0]

    next_index = (ids.index(last_assigned_id) + 1) % len(ordered)
    return ordered[next_index]


def select_least_busy(
    candidates: List[User],
    workload: dict[int, int],
) -> Optional[User]:
    """
    Seleciona o candidato com menos leads abertos.
    Em caso de empate, ganha o primeiro na ordem de criação.
    """
    if not candidates:
        return None

    ordered = sorted(candidates, key=lambda u: u.id)
    return min(ordered, key=lambda u: workload.get(u.id, 0))


# ==========================================
# CANDIDATOS
# ==========================================

async def get_active_managers(db: AsyncSession) -> List[User]:
    return await crm_store.list_users(db, role=UserRole.MANAGER.value, active_only=True)


async def get_active_team(db: AsyncSession, manager_id: int) -> List[User]:
    """Executivos ativos vinculados ao gestor."""
    return await crm_store.list_users(
        db,
        role=UserRole.EXECUTIVE.value,
        manager_id=manager_id,
        active_only=True,
    )


# ==========================================
# ESTRATÉGIA: RODÍZIO (usada na criação)
# ==========================================

async def select_next_manager(db: AsyncSession) -> Optional[User]:
    candidates = await get_active_managers(db)
    last = await crm_store.last_history(db, AssignmentLevel.MANAGER_LEVEL.value)
    return select_by_round_robin(candidates, last.to_user_id if last else None)


async def select_next_executive(db: AsyncSession, manager_id: int) -> Optional[User]:
    """Rodízio dentro da equipe, olhando só o que este gestor já distribuiu."""
    candidates = await get_active_team(db, manager_id)
    last = await crm_store.last_history(
        db,
        AssignmentLevel.EXECUTIVE_LEVEL.value,
        from_user_id=manager_id,
    )
    return select_by_round_robin(candidates, last.to_user_id if last else None)


# ==========================================
# ESTRATÉGIA: MENOR CARGA (políticas alternativas)
# ==========================================

async def select_least_loaded_manager(db: AsyncSession) -> Optional[User]:
    candidates = await get_active_managers(db)
    workload = await crm_store.count_leads_by(
        db, Lead.assigned_manager_id, [c.id for c in candidates]
    )
    return select_least_busy(candidates, workload)


async def select_least_loaded_executive(db: AsyncSession, manager_id: int) -> Optional[User]:
    candidates = await get_active_team(db, manager_id)
    workload = await crm_store.count_leads_by(
        db, Lead.assigned_executive_id, [c.id for c in candidates]
    )
    return select_least_busy(candidates, workload)


# ==========================================
# REGISTRO
# ==========================================

async def _record_assignment(
    db: AsyncSession,
    lead: Lead,
    level: AssignmentLevel,
    from_user: Optional[User],
    to_user: User,
    reason: Optional[str] = None,
) -> AssignmentHistory:
    entry = await crm_store.append_history(
        db,
        lead_id=lead.id,
        from_user_id=from_user.id if from_user else None,
        from_role=from_user.role if from_user else None,
        to_user_id=to_user.id,
        to_role=to_user.role,
        level=level.value,
        reason=reason,
    )

    logger.info(
        "Lead atribuído",
        extra={
            "lead_id": lead.id,
            "level": level.value,
            "from_user_id": entry.from_user_id,
            "to_user_id": to_user.id,
        },
    )
    return entry


# ==========================================
# FUNÇÃO PRINCIPAL DE DISTRIBUIÇÃO
# ==========================================

async def assign_lead(
    db: AsyncSession,
    lead: Lead,
    actor: Optional[User],
) -> dict:
    """
    Distribui um lead recém-criado conforme as flags de auto atribuição.

    Returns:
        {
            "manager": User ou None,
            "executive": User ou None,
            "stage": str (estágio final do lead),
        }
    """
    outcome = {"manager": None, "executive": None, "stage": lead.assignment_stage}

    if not lead.auto_assign_level1:
        return outcome

    manager = await select_next_manager(db)
    if not manager:
        logger.info("Nenhum gestor ativo - lead fica sem atribuição", extra={"lead_id": lead.id})
        return outcome

    lead.assigned_manager_id = manager.id
    lead.assignment_stage = AssignmentStage.MANAGER_ASSIGNED.value
    await _record_assignment(db, lead, AssignmentLevel.MANAGER_LEVEL, actor, manager)
    await notify_lead_assigned(db, lead, manager)
    outcome["manager"] = manager

    if lead.auto_assign_level2:
        executive = await select_next_executive(db, manager.id)

        if executive:
            lead.assigned_executive_id = executive.id
            lead.assignment_stage = AssignmentStage.EXECUTIVE_ASSIGNED.value
            await _record_assignment(db, lead, AssignmentLevel.EXECUTIVE_LEVEL, manager, executive)
            await notify_lead_assigned(db, lead, executive)
            outcome["executive"] = executive
        else:
            logger.info(
                "Gestor sem executivo ativo - lead fica com o gestor",
                extra={"lead_id": lead.id, "manager_id": manager.id},
            )

    await db.flush()
    outcome["stage"] = lead.assignment_stage
    return outcome


# ==========================================
# ATRIBUIÇÃO MANUAL
# ==========================================

async def _get_lead_or_404(db: AsyncSession, lead_id: int) -> Lead:
    lead = await crm_store.get_lead(db, lead_id)
    if not lead:
        raise NotFoundError("Lead não encontrado")
    return lead


async def _get_active_user_with_role(
    db: AsyncSession,
    user_id: int,
    role: UserRole,
    field: str,
) -> User:
    user = await crm_store.get_user(db, user_id)

    if not user:
        raise NotFoundError("Usuário não encontrado")

    if user.role != role.value:
        raise ValidationError(f"Usuário {user_id} não é {role.value}", field=field)

    if not user.is_active:
        raise ValidationError(f"Usuário {user_id} está inativo", field=field)

    return user


async def manual_assign_manager(
    db: AsyncSession,
    lead_id: int,
    manager_id: int,
    reason: Optional[str],
    actor: User,
) -> Lead:
    """
    Admin troca o gestor do lead.

    O executivo anterior é removido: quem escolhe o executivo é o novo gestor.
    """
    permissions.require(actor, "assign_manager", "Só o admin pode atribuir gestor")

    lead = await _get_lead_or_404(db, lead_id)
    manager = await _get_active_user_with_role(db, manager_id, UserRole.MANAGER, "manager_id")
    reassigned = lead.assigned_manager_id is not None

    lead = await crm_store.update_lead(
        db,
        lead.id,
        {
            "assigned_manager_id": manager.id,
            "assigned_executive_id": None,
            "assignment_stage": AssignmentStage.MANAGER_ASSIGNED.value,
            "assigned_by": actor.id,
        },
    )
    await _record_assignment(db, lead, AssignmentLevel.MANAGER_LEVEL, actor, manager, reason)
    await notify_lead_assigned(db, lead, manager, reassigned=reassigned)

    return lead


async def manual_assign_executive(
    db: AsyncSession,
    lead_id: int,
    executive_id: int,
    reason: Optional[str],
    actor: User,
) -> Lead:
    """Admin, ou o gestor dono do lead, define o executivo."""
    lead = await _get_lead_or_404(db, lead_id)

    if not permissions.can_assign_executive(actor, lead):
        raise AuthorizationError("Sem permissão para atribuir executivo neste lead")

    executive = await _get_active_user_with_role(
        db, executive_id, UserRole.EXECUTIVE, "executive_id"
    )

    # Gestor só distribui para a própria equipe
    if actor.has_role(UserRole.MANAGER) and not await crm_store.is_in_team(db, actor.id, executive.id):
        raise AuthorizationError("Executivo não pertence à sua equipe")

    reassigned = lead.assigned_executive_id is not None

    lead = await crm_store.update_lead(
        db,
        lead.id,
        {
            "assigned_executive_id": executive.id,
            "assignment_stage": AssignmentStage.EXECUTIVE_ASSIGNED.value,
            "assigned_by": actor.id,
        },
    )
    await _record_assignment(db, lead, AssignmentLevel.EXECUTIVE_LEVEL, actor, executive, reason)
    await notify_lead_assigned(db, lead, executive, reassigned=reassigned)

    return lead


async def get_assignment_history(db: AsyncSession, lead_id: int) -> List[AssignmentHistory]:
    return await crm_store.list_history(db, lead_id)
