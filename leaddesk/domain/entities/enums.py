"""Enums - valores fixos que se repetem no sistema."""

from enum import Enum


class UserRole(str, Enum):
    """Nível de acesso do usuário (cada um tem seu portal)."""
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    EXECUTIVE = "EXECUTIVE"


class LeadStatus(str, Enum):
    """Status do lead no funil."""
    NEW = "NEW"              # Acabou de chegar
    FOLLOW_UP = "FOLLOW_UP"  # Retorno agendado (follow_up_at)
    CONVERTED = "CONVERTED"  # Virou cliente
    CLOSED = "CLOSED"        # Encerrado sem conversão


# Leads que ainda contam como carga de trabalho
OPEN_LEAD_STATUSES = (LeadStatus.NEW.value, LeadStatus.FOLLOW_UP.value)


class AssignmentStage(str, Enum):
    """Até onde o lead desceu na hierarquia."""
    UNASSIGNED = "UNASSIGNED"
    MANAGER_ASSIGNED = "MANAGER_ASSIGNED"
    EXECUTIVE_ASSIGNED = "EXECUTIVE_ASSIGNED"


class AssignmentLevel(str, Enum):
    """Nível de uma atribuição no histórico."""
    MANAGER_LEVEL = "MANAGER_LEVEL"
    EXECUTIVE_LEVEL = "EXECUTIVE_LEVEL"


class NotificationType(str, Enum):
    """Tipos de notificação do sino."""
    LEAD_ASSIGNED = "LEAD_ASSIGNED"
    LEAD_REASSIGNED = "LEAD_REASSIGNED"
