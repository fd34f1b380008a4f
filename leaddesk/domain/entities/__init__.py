"""Entidades do domínio."""
from .base import Base, TimestampMixin, utcnow
from .enums import (
    UserRole,
    LeadStatus,
    OPEN_LEAD_STATUSES,
    AssignmentStage,
    AssignmentLevel,
    NotificationType,
)
from .models import User, Notification, manager_executives
from .lead import Lead
from .lead_note import LeadNote
from .assignment_history import AssignmentHistory

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "utcnow",
    # Enums
    "UserRole",
    "LeadStatus",
    "OPEN_LEAD_STATUSES",
    "AssignmentStage",
    "AssignmentLevel",
    "NotificationType",
    # Models
    "User",
    "Notification",
    "manager_executives",
    "Lead",
    "LeadNote",
    "AssignmentHistory",
]
