"""Shared fixtures: a throwaway SQLite database per test.

Each test gets its own file-backed aiosqlite database with the full schema,
so several sessions can be opened against it.  pysqlite's implicit
transaction handling is switched off and BEGIN is emitted explicitly,
otherwise SAVEPOINT does not behave.
"""

from __future__ import annotations

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import src.infrastructure.persistence.models  # noqa: F401
from src.infrastructure.database import Base
from src.infrastructure.persistence.models import Category, User
from src.infrastructure.persistence.unit_of_work import SqlUnitOfWork


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'recipehub.db'}")

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_implicit_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _explicit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def uow(session_factory):
    async with SqlUnitOfWork(session_factory) as uow:
        yield uow


@pytest.fixture
async def author(session_factory) -> User:
    async with session_factory() as session:
        user = User(username="ana", full_name="Ana Souza")
        session.add(user)
        await session.commit()
    return user


@pytest.fixture
async def category(session_factory) -> Category:
    async with session_factory() as session:
        category = Category(name="Sobremesas")
        session.add(category)
        await session.commit()
    return category

