"""
SCHEMAS DE VALIDAÇÃO
=====================

Define a estrutura de dados de entrada e saída da API.
Pydantic valida automaticamente os dados.
"""

from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator

from leaddesk.domain.entities import UserRole, LeadStatus


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """O banco guarda UTC sem fuso; datas com fuso são convertidas."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


# ============================================
# AUTENTICAÇÃO
# ============================================

class LoginRequest(BaseModel):
    """Login pelo portal de um role."""

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    portal_role: UserRole


# ============================================
# USER
# ============================================

class UserCreate(BaseModel):
    """Dados para criar usuário. Gestor só cria EXECUTIVE (o role é forçado)."""

    username: str = Field(..., min_length=3, max_length=100)
    password: str = Field(..., min_length=6)
    role: UserRole = UserRole.EXECUTIVE
    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=3, max_length=255)
    mobile: str = Field(..., min_length=1, max_length=20)
    manager_id: Optional[int] = Field(None, description="Gestor do executivo")
    is_active: bool = True


class UserUpdate(BaseModel):
    """Dados para atualizar usuário (admin)."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    email: Optional[str] = Field(None, min_length=3, max_length=255)
    mobile: Optional[str] = Field(None, min_length=1, max_length=20)
    is_active: Optional[bool] = None


class LinkManagerRequest(BaseModel):
    """Vincula o executivo a mais um gestor."""

    manager_id: int


class UserResponse(BaseModel):
    """Usuário na resposta (sem hash de senha)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    role: str
    name: str
    email: str
    mobile: str
    is_active: bool
    last_login_at: Optional[datetime] = None
    created_at: datetime
    manager_ids: list[int] = Field(default_factory=list)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


# ============================================
# LEAD
# ============================================

class LeadCreate(BaseModel):
    """Dados para criar lead."""

    name: str = Field(..., min_length=1, max_length=200)
    mobile: str = Field(..., min_length=1, max_length=20)
    service_type: str = Field(..., min_length=1, max_length=100)
    city: str = Field(..., min_length=1, max_length=100)
    source: str = Field(..., min_length=1, max_length=100)
    status: LeadStatus = LeadStatus.NEW
    follow_up_at: Optional[datetime] = None

    # Distribuição automática
    auto_assign_level1: bool = False
    auto_assign_level2: bool = False

    @field_validator("follow_up_at")
    @classmethod
    def normalize_follow_up(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value)


class LeadUpdate(BaseModel):
    """Dados para atualizar lead (edição genérica)."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    mobile: Optional[str] = Field(None, min_length=1, max_length=20)
    service_type: Optional[str] = Field(None, min_length=1, max_length=100)
    city: Optional[str] = Field(None, min_length=1, max_length=100)
    source: Optional[str] = Field(None, min_length=1, max_length=100)
    status: Optional[LeadStatus] = None
    follow_up_at: Optional[datetime] = None
    assigned_manager_id: Optional[int] = None
    assigned_executive_id: Optional[int] = None

    @field_validator("follow_up_at")
    @classmethod
    def normalize_follow_up(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value)


class AssignManagerRequest(BaseModel):
    manager_id: int
    reason: Optional[str] = None


class AssignExecutiveRequest(BaseModel):
    executive_id: int
    reason: Optional[str] = None


class AssignmentHistoryResponse(BaseModel):
    """Registro do histórico de atribuição."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    lead_id: int
    from_user_id: Optional[int]
    from_role: Optional[str]
    to_user_id: int
    to_role: str
    level: str
    reason: Optional[str]
    created_at: datetime


class LeadResponse(BaseModel):
    """Lead completo na resposta."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    mobile: str
    service_type: str
    city: str
    source: str
    status: str
    follow_up_at: Optional[datetime]
    assigned_manager_id: Optional[int]
    assigned_executive_id: Optional[int]
    assigned_by: Optional[int]
    assignment_stage: str
    auto_assign_level1: bool
    auto_assign_level2: bool
    created_at: datetime
    updated_at: datetime

    # Nome de quem está com o lead ("Unassigned" quando não há responsável ativo)
    manager_name: str = "Unassigned"
    executive_name: str = "Unassigned"


class LeadDetailResponse(LeadResponse):
    """Lead com histórico de atribuição."""

    history: list[AssignmentHistoryResponse] = Field(default_factory=list)


# ============================================
# NOTAS
# ============================================

class NoteCreate(BaseModel):
    note_text: str = Field(..., min_length=1)


class NoteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    lead_id: int
    note_text: str
    created_by: int
    created_at: datetime
    author_name: Optional[str] = None


# ============================================
# NOTIFICAÇÕES
# ============================================

class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    type: str
    title: str
    message: str
    related_lead_id: Optional[int]
    is_read: bool
    created_at: datetime
