"""
ROTAS: DASHBOARD
=================

Contadores do painel, sempre no escopo do usuário logado.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from leaddesk.infrastructure.database import get_db
from leaddesk.infrastructure.services.dashboard_service import get_dashboard_stats
from leaddesk.api.dependencies import get_current_user
from leaddesk.domain.entities import User

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/stats")
async def dashboard_stats(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Totais de leads, follow-ups de hoje/atrasados e fechamentos.

    Admin e gestor recebem também a distribuição por estágio
    e o desempenho da equipe.
    """
    return await get_dashboard_stats(db, user)
