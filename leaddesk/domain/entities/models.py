"""
MODELOS DO BANCO DE DADOS
==========================

Usuários, vínculo gestor/executivo e notificações.
Leads, notas e histórico de atribuição ficam em arquivos próprios.
"""
from datetime import datetime
from typing import Optional
from sqlalchemy import String, Boolean, ForeignKey, Text, Integer, DateTime, Table, Column
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin, utcnow
from .enums import UserRole


# ============================================
# TABELA DE ASSOCIAÇÃO (Gestor <-> Executivo)
# ============================================
# Um executivo pode atender mais de um gestor.

manager_executives = Table(
    "manager_executives",
    Base.metadata,
    Column("manager_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("executive_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("created_at", DateTime, default=utcnow, nullable=False),
)


# ============================================
# USER - Admin, Gestor ou Executivo
# ============================================

class User(Base, TimestampMixin):
    """Usuário que acessa o portal."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    mobile: Mapped[str] = mapped_column(String(20), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    last_login_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    def has_role(self, role: UserRole) -> bool:
        return self.role == role.value

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username!r}, role={self.role})>"


# ============================================
# NOTIFICATION - Sino do portal
# ============================================

class Notification(Base):
    """Notificação para um usuário (ex: lead atribuído)."""

    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    related_lead_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("leads.id", ondelete="SET NULL"), nullable=True
    )
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
