"""
LeadNote - Anotações Internas dos Leads
========================================

Permite executivos/gestores adicionarem notas sobre leads.
Notas não são editadas nem apagadas.
"""
from datetime import datetime
from sqlalchemy import ForeignKey, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, utcnow


class LeadNote(Base):
    """Anotação interna sobre um lead."""

    __tablename__ = "lead_notes"

    id: Mapped[int] = mapped_column(primary_key=True)
    lead_id: Mapped[int] = mapped_column(
        ForeignKey("leads.id", ondelete="CASCADE"),
        index=True,
        nullable=False
    )
    created_by: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False
    )
    note_text: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<LeadNote(id={self.id}, lead_id={self.lead_id}, created_by={self.created_by})>"
