"""Gerencia conexão com PostgreSQL."""
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from leaddesk.config import get_settings

settings = get_settings()


def normalize_database_url(url: str) -> str:
    """
    Converte URL para formato async se necessário.
    Provedores fornecem postgresql:// mas asyncpg precisa de postgresql+asyncpg://
    """
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    return url


database_url = normalize_database_url(settings.database_url)

# SQLite (testes/dev local) não aceita parâmetros de pool
engine_options = {"echo": settings.debug}
if not database_url.startswith("sqlite"):
    engine_options.update(pool_pre_ping=True, pool_size=10, max_overflow=20)

engine = create_async_engine(database_url, **engine_options)

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency do FastAPI para injetar sessão do banco."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Cria tabelas do banco (usar só em dev)."""
    from leaddesk.domain.entities import Base
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
