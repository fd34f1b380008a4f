"""
HEALTH CHECK
=============

Verifica se a API está de pé e se o banco responde.
"""

import logging
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from leaddesk.infrastructure.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Retorna 200 se tudo OK, 503 se o banco não respondeu.
    """
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.error("Health check: banco indisponível", exc_info=True)
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "checks": {"database": "error"}},
        )

    return {"status": "healthy", "checks": {"database": "ok"}}
