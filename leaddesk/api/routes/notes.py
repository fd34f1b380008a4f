"""
ROTAS: NOTAS DO LEAD
=====================

Anotações de acompanhamento. Quem vê o lead pode ler e escrever notas.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from leaddesk.infrastructure.database import get_db
from leaddesk.infrastructure.services import crm_store
from leaddesk.api.schemas import NoteCreate, NoteResponse
from leaddesk.api.dependencies import get_current_user
from leaddesk.api.routes.leads import get_visible_lead
from leaddesk.domain.entities import User

router = APIRouter(prefix="/leads/{lead_id}/notes", tags=["Notas"])


@router.get("", response_model=list[NoteResponse])
async def list_notes(
    lead_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Notas do lead, mais recentes primeiro."""
    await get_visible_lead(db, lead_id, user)
    notes = await crm_store.list_notes(db, lead_id)

    return [
        NoteResponse.model_validate(note).model_copy(update={"author_name": author_name})
        for note, author_name in notes
    ]


@router.post("", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
async def create_note(
    lead_id: int,
    payload: NoteCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await get_visible_lead(db, lead_id, user)
    note = await crm_store.create_note(db, lead_id, user.id, payload.note_text)

    return NoteResponse.model_validate(note).model_copy(update={"author_name": user.name})
