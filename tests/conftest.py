import os

# Precisa estar definido antes de importar leaddesk (get_settings é lido no import)
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from typing import AsyncGenerator, Awaitable, Callable

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession

from leaddesk.api.main import app
from leaddesk.domain.entities import Base, User, UserRole
from leaddesk.infrastructure.database import get_db
from tests.utils import make_test_engine, make_session_factory, create_user


@pytest.fixture
async def engine(tmp_path):
    """
    Banco SQLite novo para cada teste (schema criado do zero).
    """
    engine = make_test_engine(f"sqlite+aiosqlite:///{tmp_path / 'leaddesk.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """
    Sessão para testes de serviço (sem passar pela API).
    """
    async with session_factory() as session:
        yield session


@pytest.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Cliente HTTP com o get_db da API apontando para o banco do teste."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session_factory) -> Callable[..., Awaitable[User]]:
    """
    Cria e comita um usuário numa sessão própria (para testes de API).

    Uso:
        manager = await make_user("gestor1", UserRole.MANAGER)
        executive = await make_user("exec1", UserRole.EXECUTIVE, manager=manager)
    """

    async def _make_user(username: str, role: UserRole, **kwargs) -> User:
        async with session_factory() as session:
            user = await create_user(session, username, role, **kwargs)
            await session.commit()
            return user

    return _make_user


@pytest.fixture
async def admin(make_user) -> User:
    return await make_user("admin", UserRole.ADMIN)
