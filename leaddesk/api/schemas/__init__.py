"""Schemas da API."""
from .schemas import (
    LoginRequest,
    TokenResponse,
    UserCreate,
    UserUpdate,
    UserResponse,
    LinkManagerRequest,
    LeadCreate,
    LeadUpdate,
    LeadResponse,
    LeadDetailResponse,
    AssignManagerRequest,
    AssignExecutiveRequest,
    AssignmentHistoryResponse,
    NoteCreate,
    NoteResponse,
    NotificationResponse,
)

__all__ = [
    "LoginRequest",
    "TokenResponse",
    "UserCreate",
    "UserUpdate",
    "UserResponse",
    "LinkManagerRequest",
    "LeadCreate",
    "LeadUpdate",
    "LeadResponse",
    "LeadDetailResponse",
    "AssignManagerRequest",
    "AssignExecutiveRequest",
    "AssignmentHistoryResponse",
    "NoteCreate",
    "NoteResponse",
    "NotificationResponse",
]
