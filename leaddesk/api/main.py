"""
LEADDESK API - Ponto de Entrada
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from leaddesk import __version__
from leaddesk.config import get_settings
from leaddesk.infrastructure.logging_config import setup_logging
from leaddesk.infrastructure.database import init_db, async_session
from leaddesk.infrastructure.services import crm_store
from leaddesk.infrastructure.services.auth_service import hash_password
from leaddesk.domain.entities import UserRole
from leaddesk.domain.errors import CRMError, UnauthenticatedError

# Routers
from leaddesk.api.routes import (
    auth_router,
    users_router,
    leads_router,
    notes_router,
    dashboard_router,
    notifications_router,
    health_router,
)

settings = get_settings()

setup_logging(settings.log_level, json_logs=not settings.is_development)
logger = logging.getLogger(__name__)


# ============================================================
# PRIMEIRO ADMIN
# ============================================================
async def create_default_admin():
    """Cria o admin inicial quando o banco ainda não tem nenhum usuário."""
    if not settings.seed_admin_configured:
        return

    async with async_session() as session:
        if await crm_store.has_any_user(session):
            logger.info("Usuários já cadastrados. Pulando criação do admin inicial.")
            return

        admin = await crm_store.create_user(
            session,
            username=settings.seed_admin_username,
            password_hash=hash_password(settings.seed_admin_password),
            role=UserRole.ADMIN.value,
            name="Administrador",
            email=settings.seed_admin_email,
            mobile="",
            is_active=True,
        )
        await session.commit()
        logger.info("Admin inicial criado", extra={"user_id": admin.id})


# ============================================================
# LIFESPAN
# ============================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Iniciando LeadDesk API", extra={"environment": settings.environment})

    await init_db()
    await create_default_admin()

    yield

    logger.info("Encerrando LeadDesk API")


# ============================================================
# FASTAPI APP
# ============================================================
app = FastAPI(
    title="LeadDesk API",
    description="CRM de leads com distribuição por gestor e executivo",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================
# TRATAMENTO DE ERROS
# ============================================================
@app.exception_handler(CRMError)
async def crm_error_handler(request: Request, exc: CRMError):
    content = {"detail": exc.message}

    field = getattr(exc, "field", None)
    if field:
        content["field"] = field

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthenticatedError) else None

    if exc.status_code >= 500:
        logger.error("Erro interno", extra={"path": request.url.path}, exc_info=exc)

    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Entrada inválida vira 400 apontando o primeiro campo com problema."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    loc = first.get("loc") or ()

    content = {"detail": first.get("msg", "Dados inválidos")}
    if loc:
        content["field"] = str(loc[-1])

    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=content)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Erro não tratado", extra={"path": request.url.path})
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Erro interno do servidor"},
    )


# ============================================================
# ROTAS
# ============================================================
app.include_router(auth_router, prefix="/api/v1")
app.include_router(users_router, prefix="/api/v1")
app.include_router(leads_router, prefix="/api/v1")
app.include_router(notes_router, prefix="/api/v1")
app.include_router(dashboard_router, prefix="/api/v1")
app.include_router(notifications_router, prefix="/api/v1")
app.include_router(health_router, prefix="/api/v1")


@app.get("/")
async def root():
    return {"name": "LeadDesk API", "status": "running", "version": __version__}
