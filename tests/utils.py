"""Helpers compartilhados pelos testes."""

from typing import Optional
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from leaddesk.domain.entities import User, Lead, UserRole
from leaddesk.infrastructure.services import crm_store
from leaddesk.infrastructure.services.auth_service import hash_password, create_token_for_user

DEFAULT_PASSWORD = "senha123"


def make_test_engine(database_url: str):
    """
    Engine SQLite para testes.

    O driver do sqlite abre transações por conta própria; os listeners
    deixam o SQLAlchemy emitir o BEGIN para os SAVEPOINTs funcionarem.
    """
    engine = create_async_engine(database_url)

    @event.listens_for(engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


def make_session_factory(engine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_user(
    db: AsyncSession,
    username: str,
    role: UserRole,
    manager: Optional[User] = None,
    is_active: bool = True,
    password: str = DEFAULT_PASSWORD,
) -> User:
    user = await crm_store.create_user(
        db,
        username=username,
        password_hash=hash_password(password),
        role=role.value,
        name=username.title(),
        email=f"{username}@test.com",
        mobile="11999990000",
        is_active=is_active,
    )
    if manager is not None:
        await crm_store.link_executive(db, manager.id, user.id)
    return user


async def create_lead(db: AsyncSession, **overrides) -> Lead:
    fields = {
        "name": "Maria Souza",
        "mobile": "11988887777",
        "service_type": "Consultoria",
        "city": "Porto Alegre",
        "source": "site",
    }
    fields.update(overrides)
    return await crm_store.create_lead(db, **fields)


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_token_for_user(user)}"}
