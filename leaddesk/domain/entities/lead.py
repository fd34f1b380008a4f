# leaddesk/domain/entities/lead.py

from datetime import datetime
from typing import Optional
from sqlalchemy import String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin
from .enums import LeadStatus, AssignmentStage


class Lead(Base, TimestampMixin):
    __tablename__ = "leads"

    # ===============================
    # IDENTIDADE
    # ===============================
    id: Mapped[int] = mapped_column(primary_key=True)

    # ===============================
    # DADOS DO LEAD
    # ===============================
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    mobile: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    service_type: Mapped[str] = mapped_column(String(100), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    source: Mapped[str] = mapped_column(String(100), nullable=False)

    # ===============================
    # STATUS / FOLLOW-UP
    # ===============================
    status: Mapped[str] = mapped_column(String(20), default=LeadStatus.NEW.value, nullable=False, index=True)
    follow_up_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True, index=True)

    # ===============================
    # ATRIBUIÇÃO
    # ===============================
    # O responsável atual SEMPRE vem daqui, nunca do histórico
    assigned_manager_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    assigned_executive_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    assigned_by: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    assignment_stage: Mapped[str] = mapped_column(
        String(30), default=AssignmentStage.UNASSIGNED.value, nullable=False, index=True
    )

    # Distribuição automática na criação
    auto_assign_level1: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    auto_assign_level2: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def __repr__(self) -> str:
        return f"<Lead(id={self.id}, status={self.status}, stage={self.assignment_stage})>"
