"""
ROTAS: LEADS
=============

Listagem, cadastro, edição e atribuição de leads.
Cada usuário só enxerga os leads do seu escopo (ver PermissionService).
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from leaddesk.infrastructure.database import get_db
from leaddesk.infrastructure.services import crm_store, distribution_service
from leaddesk.api.schemas import (
    LeadCreate,
    LeadUpdate,
    LeadResponse,
    LeadDetailResponse,
    AssignManagerRequest,
    AssignExecutiveRequest,
    AssignmentHistoryResponse,
)
from leaddesk.api.dependencies import get_current_user
from leaddesk.domain.entities import User, Lead, LeadStatus, AssignmentStage
from leaddesk.domain.errors import NotFoundError, ValidationError
from leaddesk.services.permissions import permissions

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/leads", tags=["Leads"])

UNASSIGNED_NAME = "Unassigned"

# Campos que a edição aceita limpar com null
NULLABLE_UPDATE_FIELDS = {"follow_up_at"}


# ==========================================
# HELPERS
# ==========================================

async def get_visible_lead(db: AsyncSession, lead_id: int, user: User) -> Lead:
    """Busca o lead e garante que está no escopo do usuário."""
    lead = await crm_store.get_lead(db, lead_id)
    if not lead:
        raise NotFoundError("Lead não encontrado")

    permissions.ensure_can_view_lead(user, lead)
    return lead


async def leads_to_response(db: AsyncSession, leads: list[Lead]) -> list[LeadResponse]:
    """Inclui o nome do gestor e do executivo (ou "Unassigned")."""
    user_ids = [lead.assigned_manager_id for lead in leads] + [
        lead.assigned_executive_id for lead in leads
    ]
    users = await crm_store.get_users_by_ids(db, user_ids)

    def display_name(user_id: Optional[int]) -> str:
        user = users.get(user_id)
        if not user or not user.is_active:
            return UNASSIGNED_NAME
        return user.name

    return [
        LeadResponse.model_validate(lead).model_copy(
            update={
                "manager_name": display_name(lead.assigned_manager_id),
                "executive_name": display_name(lead.assigned_executive_id),
            }
        )
        for lead in leads
    ]


async def lead_detail(db: AsyncSession, lead: Lead) -> LeadDetailResponse:
    [data] = await leads_to_response(db, [lead])
    history = await distribution_service.get_assignment_history(db, lead.id)

    return LeadDetailResponse(
        **data.model_dump(),
        history=[AssignmentHistoryResponse.model_validate(h) for h in history],
    )


def ensure_follow_up_date(status_value: str, follow_up_at) -> None:
    """Lead em FOLLOW_UP precisa de data de retorno."""
    if status_value == LeadStatus.FOLLOW_UP.value and follow_up_at is None:
        raise ValidationError("Informe a data de follow-up", field="follow_up_at")


# ==========================================
# LISTAGEM E CADASTRO
# ==========================================

@router.get("", response_model=list[LeadResponse])
async def list_leads(
    status: Optional[LeadStatus] = None,
    search: Optional[str] = None,
    assignment_stage: Optional[AssignmentStage] = None,
    assigned_manager_id: Optional[int] = None,
    assigned_executive_id: Optional[int] = None,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Lista leads do escopo do usuário, mais recentes primeiro.

    `search` procura em nome, telefone e cidade.
    """
    leads = await crm_store.list_leads(
        db,
        permissions.lead_scope(user),
        status=status.value if status else None,
        search=search,
        assignment_stage=assignment_stage.value if assignment_stage else None,
        assigned_manager_id=assigned_manager_id,
        assigned_executive_id=assigned_executive_id,
    )
    return await leads_to_response(db, leads)


@router.post("", response_model=LeadDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_lead(
    payload: LeadCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Cadastra lead e dispara a distribuição automática, se marcada."""
    ensure_follow_up_date(payload.status.value, payload.follow_up_at)

    lead = await crm_store.create_lead(
        db,
        name=payload.name,
        mobile=payload.mobile,
        service_type=payload.service_type,
        city=payload.city,
        source=payload.source,
        status=payload.status.value,
        follow_up_at=payload.follow_up_at,
        auto_assign_level1=payload.auto_assign_level1,
        auto_assign_level2=payload.auto_assign_level2,
        assigned_by=user.id,
    )
    logger.info("Lead criado", extra={"lead_id": lead.id, "created_by": user.id})

    await distribution_service.assign_lead(db, lead, user)

    return await lead_detail(db, lead)


# ==========================================
# DETALHE E EDIÇÃO
# ==========================================

@router.get("/{lead_id}", response_model=LeadDetailResponse)
async def get_lead(
    lead_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Lead com o histórico de atribuição."""
    lead = await get_visible_lead(db, lead_id, user)
    return await lead_detail(db, lead)


@router.put("/{lead_id}", response_model=LeadDetailResponse)
async def update_lead(
    lead_id: int,
    payload: LeadUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Edição genérica do lead.

    Troca de gestor/executivo passa pelo serviço de distribuição,
    então fica registrada no histórico como uma atribuição manual.
    """
    lead = await crm_store.get_lead(db, lead_id)
    if not lead:
        raise NotFoundError("Lead não encontrado")

    updates = {
        field: value
        for field, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or field in NULLABLE_UPDATE_FIELDS
    }
    if "status" in updates:
        updates["status"] = updates["status"].value

    permissions.ensure_can_update_lead(user, lead, updates)

    ensure_follow_up_date(
        updates.get("status", lead.status),
        updates["follow_up_at"] if "follow_up_at" in updates else lead.follow_up_at,
    )

    manager_id = updates.pop("assigned_manager_id", None)
    executive_id = updates.pop("assigned_executive_id", None)

    if updates:
        lead = await crm_store.update_lead(db, lead.id, updates)

    if manager_id is not None and manager_id != lead.assigned_manager_id:
        lead = await distribution_service.manual_assign_manager(db, lead.id, manager_id, None, user)

    if executive_id is not None and executive_id != lead.assigned_executive_id:
        lead = await distribution_service.manual_assign_executive(db, lead.id, executive_id, None, user)

    return await lead_detail(db, lead)


# ==========================================
# ATRIBUIÇÃO
# ==========================================

@router.get("/{lead_id}/history", response_model=list[AssignmentHistoryResponse])
async def get_lead_history(
    lead_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Histórico de atribuição, do mais antigo para o mais novo."""
    lead = await get_visible_lead(db, lead_id, user)
    return await distribution_service.get_assignment_history(db, lead.id)


@router.post("/{lead_id}/assign-manager", response_model=LeadDetailResponse)
async def assign_manager(
    lead_id: int,
    payload: AssignManagerRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Admin define (ou troca) o gestor do lead."""
    lead = await distribution_service.manual_assign_manager(
        db, lead_id, payload.manager_id, payload.reason, user
    )
    return await lead_detail(db, lead)


@router.post("/{lead_id}/assign-executive", response_model=LeadDetailResponse)
async def assign_executive(
    lead_id: int,
    payload: AssignExecutiveRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Admin ou o gestor do lead define (ou troca) o executivo."""
    lead = await distribution_service.manual_assign_executive(
        db, lead_id, payload.executive_id, payload.reason, user
    )
    return await lead_detail(db, lead)
