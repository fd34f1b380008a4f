"""
MODELO: HISTÓRICO DE ATRIBUIÇÃO (ASSIGNMENT HISTORY)
=====================================================

Histórico de atribuições de leads na hierarquia.
Importante para:
- Auditoria (quem passou o lead para quem)
- Rodízio (o último registro de cada nível define o próximo da fila)
- Métricas (quantos leads cada executivo já recebeu)

Só é escrito pelo serviço de distribuição e nunca é alterado.
"""

from datetime import datetime
from typing import Optional
from sqlalchemy import String, ForeignKey, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, utcnow


class AssignmentHistory(Base):
    """
    Registro de atribuição de lead.

    Cada vez que um lead é atribuído (ou reatribuído),
    um novo registro é criado aqui.
    """

    __tablename__ = "assignment_history"

    id: Mapped[int] = mapped_column(primary_key=True)

    # ==========================================
    # REFERÊNCIAS
    # ==========================================
    lead_id: Mapped[int] = mapped_column(ForeignKey("leads.id", ondelete="CASCADE"), index=True)

    # Quem atribuiu (admin, gestor) e quem recebeu
    from_user_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    from_role: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    to_user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    to_role: Mapped[str] = mapped_column(String(20), nullable=False)

    # ==========================================
    # DETALHES DA ATRIBUIÇÃO
    # ==========================================
    # MANAGER_LEVEL ou EXECUTIVE_LEVEL
    level: Mapped[str] = mapped_column(String(20), nullable=False, index=True)

    # Motivo da atribuição/reatribuição (manual)
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    def __repr__(self) -> str:
        return (
            f"<AssignmentHistory(id={self.id}, lead_id={self.lead_id}, "
            f"level={self.level}, to={self.to_user_id})>"
        )
