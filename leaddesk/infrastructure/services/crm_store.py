"""
CRM STORE (PERSISTÊNCIA)
=========================

Operações de banco para usuários, leads, notas, notificações,
histórico de atribuição e vínculo gestor/executivo.

Regras:
- get/list nunca levantam erro por resultado vazio (None / lista vazia)
- create devolve a linha já com id e timestamps (flush)
- update devolve a linha atualizada ou levanta NotFoundError
- violação de constraint no flush vira InternalError
"""

from typing import Any, Iterable, Optional, Sequence

from sqlalchemy import select, func, update, insert, or_, ColumnElement
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from leaddesk.domain.entities import (
    User,
    Lead,
    LeadNote,
    Notification,
    AssignmentHistory,
    manager_executives,
    utcnow,
    OPEN_LEAD_STATUSES,
    AssignmentLevel,
)
from leaddesk.domain.errors import NotFoundError, InternalError


async def _flush(db: AsyncSession) -> None:
    try:
        await db.flush()
    except IntegrityError as exc:
        raise InternalError("Falha ao gravar no banco") from exc


# ==========================================
# USUÁRIOS
# ==========================================

async def get_user(db: AsyncSession, user_id: int) -> Optional[User]:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_username(db: AsyncSession, username: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def has_any_user(db: AsyncSession) -> bool:
    result = await db.execute(select(func.count(User.id)))
    return (result.scalar() or 0) > 0


async def create_user(db: AsyncSession, **fields: Any) -> User:
    user = User(**fields)
    db.add(user)
    await _flush(db)
    return user


async def update_user(db: AsyncSession, user_id: int, updates: dict) -> User:
    user = await get_user(db, user_id)
    if not user:
        raise NotFoundError("Usuário não encontrado")

    for field, value in updates.items():
        setattr(user, field, value)
    user.updated_at = utcnow()

    await _flush(db)
    return user


async def list_users(
    db: AsyncSession,
    role: Optional[str] = None,
    manager_id: Optional[int] = None,
    active_only: bool = False,
) -> list[User]:
    """Lista usuários em ordem de criação, com filtros opcionais."""
    query = select(User)

    if role:
        query = query.where(User.role == role)

    if manager_id is not None:
        query = query.join(
            manager_executives, manager_executives.c.executive_id == User.id
        ).where(manager_executives.c.manager_id == manager_id)

    if active_only:
        query = query.where(User.is_active == True)

    result = await db.execute(query.order_by(User.id))
    return list(result.scalars().all())


async def get_users_by_ids(db: AsyncSession, user_ids: Iterable[Optional[int]]) -> dict[int, User]:
    ids = {uid for uid in user_ids if uid is not None}
    if not ids:
        return {}

    result = await db.execute(select(User).where(User.id.in_(ids)))
    return {u.id: u for u in result.scalars().all()}


# ==========================================
# VÍNCULO GESTOR <-> EXECUTIVO
# ==========================================

async def is_in_team(db: AsyncSession, manager_id: int, executive_id: int) -> bool:
    result = await db.execute(
        select(func.count())
        .select_from(manager_executives)
        .where(manager_executives.c.manager_id == manager_id)
        .where(manager_executives.c.executive_id == executive_id)
    )
    return (result.scalar() or 0) > 0


async def link_executive(db: AsyncSession, manager_id: int, executive_id: int) -> None:
    """Vincula executivo ao gestor (idempotente)."""
    if await is_in_team(db, manager_id, executive_id):
        return

    await db.execute(
        insert(manager_executives).values(
            manager_id=manager_id,
            executive_id=executive_id,
            created_at=utcnow(),
        )
    )


async def get_manager_ids(db: AsyncSession, executive_ids: Iterable[int]) -> dict[int, list[int]]:
    """Mapa executivo -> gestores (ordenados)."""
    ids = set(executive_ids)
    if not ids:
        return {}

    result = await db.execute(
        select(manager_executives.c.executive_id, manager_executives.c.manager_id)
        .where(manager_executives.c.executive_id.in_(ids))
        .order_by(manager_executives.c.manager_id)
    )

    mapping: dict[int, list[int]] = {}
    for executive_id, manager_id in result.all():
        mapping.setdefault(executive_id, []).append(manager_id)
    return mapping


# ==========================================
# LEADS
# ==========================================

async def get_lead(db: AsyncSession, lead_id: int) -> Optional[Lead]:
    result = await db.execute(select(Lead).where(Lead.id == lead_id))
    return result.scalar_one_or_none()


async def create_lead(db: AsyncSession, **fields: Any) -> Lead:
    lead = Lead(**fields)
    db.add(lead)
    await _flush(db)
    return lead


async def update_lead(db: AsyncSession, lead_id: int, updates: dict) -> Lead:
    lead = await get_lead(db, lead_id)
    if not lead:
        raise NotFoundError("Lead não encontrado")

    for field, value in updates.items():
        setattr(lead, field, value)
    lead.updated_at = utcnow()

    await _flush(db)
    return lead


def escape_like(text: str) -> str:
    """Busca literal: % e _ digitados não viram curinga do LIKE."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _lead_filters(
    status: Optional[str] = None,
    search: Optional[str] = None,
    assignment_stage: Optional[str] = None,
    assigned_manager_id: Optional[int] = None,
    assigned_executive_id: Optional[int] = None,
) -> list[ColumnElement[bool]]:
    conditions: list[ColumnElement[bool]] = []

    if status:
        conditions.append(Lead.status == status)

    if search:
        search_filter = f"%{escape_like(search.lower())}%"
        conditions.append(
            or_(
                func.lower(Lead.name).like(search_filter, escape="\\"),
                func.lower(Lead.mobile).like(search_filter, escape="\\"),
                func.lower(Lead.city).like(search_filter, escape="\\"),
            )
        )

    if assignment_stage:
        conditions.append(Lead.assignment_stage == assignment_stage)

    if assigned_manager_id is not None:
        conditions.append(Lead.assigned_manager_id == assigned_manager_id)

    if assigned_executive_id is not None:
        conditions.append(Lead.assigned_executive_id == assigned_executive_id)

    return conditions


async def list_leads(
    db: AsyncSession,
    scope: Sequence[ColumnElement[bool]] = (),
    **filters: Any,
) -> list[Lead]:
    """
    Lista leads mais recentes primeiro.

    `scope` vem da camada de permissões; os filtros opcionais
    (status, search, assignment_stage, assigned_*_id) são somados com AND.
    """
    query = select(Lead).where(*scope, *_lead_filters(**filters))
    result = await db.execute(query.order_by(Lead.created_at.desc(), Lead.id.desc()))
    return list(result.scalars().all())


async def count_leads(db: AsyncSession, *conditions: ColumnElement[bool]) -> int:
    result = await db.execute(select(func.count(Lead.id)).where(*conditions))
    return int(result.scalar() or 0)


async def count_leads_by(
    db: AsyncSession,
    column: Any,
    user_ids: Iterable[int],
    statuses: Sequence[str] = OPEN_LEAD_STATUSES,
    scope: Sequence[ColumnElement[bool]] = (),
) -> dict[int, int]:
    """
    Leads atribuídos a cada usuário nos status dados.
    O padrão (NEW/FOLLOW_UP) é a carga de trabalho aberta.

    `column` é Lead.assigned_manager_id ou Lead.assigned_executive_id;
    `scope` restringe os leads contados (ex.: só os de um gestor).
    """
    ids = list(user_ids)
    counts = {uid: 0 for uid in ids}
    if not ids:
        return counts

    result = await db.execute(
        select(column, func.count(Lead.id))
        .where(column.in_(ids))
        .where(Lead.status.in_(statuses))
        .where(*scope)
        .group_by(column)
    )
    for user_id, total in result.all():
        counts[user_id] = int(total)
    return counts


# ==========================================
# NOTAS
# ==========================================

async def create_note(db: AsyncSession, lead_id: int, created_by: int, note_text: str) -> LeadNote:
    note = LeadNote(lead_id=lead_id, created_by=created_by, note_text=note_text)
    db.add(note)
    await _flush(db)
    return note


async def list_notes(db: AsyncSession, lead_id: int) -> list[tuple[LeadNote, Optional[str]]]:
    """Notas do lead (mais recentes primeiro) com o nome do autor."""
    result = await db.execute(
        select(LeadNote, User.name)
        .outerjoin(User, User.id == LeadNote.created_by)
        .where(LeadNote.lead_id == lead_id)
        .order_by(LeadNote.created_at.desc(), LeadNote.id.desc())
    )
    return [(note, author_name) for note, author_name in result.all()]


# ==========================================
# NOTIFICAÇÕES
# ==========================================

async def list_notifications(
    db: AsyncSession,
    user_id: int,
    limit: int = 50,
    unread_only: bool = False,
) -> list[Notification]:
    query = select(Notification).where(Notification.user_id == user_id)

    if unread_only:
        query = query.where(Notification.is_read == False)

    query = query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all())


async def count_unread_notifications(db: AsyncSession, user_id: int) -> int:
    result = await db.execute(
        select(func.count(Notification.id))
        .where(Notification.user_id == user_id)
        .where(Notification.is_read == False)
    )
    return int(result.scalar() or 0)


async def mark_notification_read(db: AsyncSession, notification_id: int, user_id: int) -> Notification:
    """Marca como lida. Chamar de novo não muda nada nem dá erro."""
    result = await db.execute(
        select(Notification)
        .where(Notification.id == notification_id)
        .where(Notification.user_id == user_id)
    )
    notification = result.scalar_one_or_none()

    if not notification:
        raise NotFoundError("Notificação não encontrada")

    if not notification.is_read:
        notification.is_read = True
        await db.flush()

    return notification


async def mark_all_notifications_read(db: AsyncSession, user_id: int) -> None:
    await db.execute(
        update(Notification)
        .where(Notification.user_id == user_id)
        .where(Notification.is_read == False)
        .values(is_read=True)
    )


# ==========================================
# HISTÓRICO DE ATRIBUIÇÃO
# ==========================================

async def append_history(db: AsyncSession, **fields: Any) -> AssignmentHistory:
    entry = AssignmentHistory(**fields)
    db.add(entry)
    await _flush(db)
    return entry


async def list_history(db: AsyncSession, lead_id: int) -> list[AssignmentHistory]:
    """Histórico do lead, do mais antigo para o mais novo."""
    result = await db.execute(
        select(AssignmentHistory)
        .where(AssignmentHistory.lead_id == lead_id)
        .order_by(AssignmentHistory.id)
    )
    return list(result.scalars().all())


async def last_history(
    db: AsyncSession,
    level: str,
    from_user_id: Optional[int] = None,
) -> Optional[AssignmentHistory]:
    """Registro mais recente de um nível (opcionalmente de um remetente)."""
    query = select(AssignmentHistory).where(AssignmentHistory.level == level)

    if from_user_id is not None:
        query = query.where(AssignmentHistory.from_user_id == from_user_id)

    result = await db.execute(query.order_by(AssignmentHistory.id.desc()).limit(1))
    return result.scalar_one_or_none()


async def assigned_lead_ids_by_executive(
    db: AsyncSession,
    executive_ids: Iterable[int],
    manager_id: Optional[int] = None,
) -> dict[int, set[int]]:
    """
    Todos os leads que cada executivo já recebeu (histórico + atual).

    Com `manager_id`, só entram leads que hoje estão com esse gestor.
    """
    ids = list(executive_ids)
    assigned: dict[int, set[int]] = {uid: set() for uid in ids}
    if not ids:
        return assigned

    scope = [] if manager_id is None else [Lead.assigned_manager_id == manager_id]

    history = await db.execute(
        select(AssignmentHistory.to_user_id, AssignmentHistory.lead_id)
        .join(Lead, Lead.id == AssignmentHistory.lead_id)
        .where(AssignmentHistory.to_user_id.in_(ids))
        .where(AssignmentHistory.level == AssignmentLevel.EXECUTIVE_LEVEL.value)
        .where(*scope)
    )
    current = await db.execute(
        select(Lead.assigned_executive_id, Lead.id)
        .where(Lead.assigned_executive_id.in_(ids))
        .where(*scope)
    )
    for user_id, lead_id in [*history.all(), *current.all()]:
        assigned[user_id].add(lead_id)
    return assigned
