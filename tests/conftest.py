"""Pytest fixtures for newsdesk ledger tests."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import date
from decimal import Decimal
from typing import Any, AsyncGenerator, TypeVar

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from newsdesk_ledger.actions import LedgerActions
from newsdesk_ledger.cache import TaggedCache
from newsdesk_ledger.database import create_schema, make_session_factory
from newsdesk_ledger.identity import Identity
from newsdesk_ledger.models import Order, User
from newsdesk_ledger.services import OrderService

# In-memory SQLite shared across sessions through a single static connection
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

T = TypeVar("T")
Runner = Callable[[Callable[[AsyncSession], Awaitable[Any]]], Awaitable[Any]]


@pytest_asyncio.fixture
async def engine():
    """Create a fresh test database for each test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await create_schema(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return make_session_factory(engine)


@pytest_asyncio.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Plain session for read-only assertions."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def run(session_factory) -> Runner:
    """Run a callable inside its own committed transaction."""

    async def _run(fn: Callable[[AsyncSession], Awaitable[T]]) -> T:
        async with session_factory() as session:
            async with session.begin():
                return await fn(session)

    return _run


@pytest.fixture
def cache() -> TaggedCache:
    return TaggedCache(default_ttl=30.0)


@pytest.fixture
def actions(session_factory, cache) -> LedgerActions:
    return LedgerActions(session_factory, cache)


async def create_user(
    session_factory: async_sessionmaker[AsyncSession],
    username: str,
    role: str,
    display_name: str | None = None,
) -> Identity:
    """Insert a user and return its identity."""
    async with session_factory() as session:
        async with session.begin():
            user = User(username=username, display_name=display_name, role=role)
            session.add(user)
            await session.flush()
            return Identity.from_user(user)


@pytest_asyncio.fixture
async def admin(session_factory) -> Identity:
    return await create_user(session_factory, "admin", "ADMIN", "Anna Admin")


@pytest_asyncio.fixture
async def chief_editor(session_factory) -> Identity:
    return await create_user(session_factory, "chief", "CHIEF_EDITOR", "Boris Chief")


@pytest_asyncio.fixture
async def editor(session_factory) -> Identity:
    return await create_user(session_factory, "editor", "EDITOR", "Elena Editor")


@pytest_asyncio.fixture
async def author(session_factory) -> Identity:
    return await create_user(session_factory, "ivan", "AUTHOR", "Ivan")


@pytest_asyncio.fixture
async def order(run, admin, author) -> Order:
    """PENDING order O1 with no payouts, assigned to Ivan."""
    return await run(
        lambda s: OrderService(s).create_order(
            admin,
            client="Acme Bakery",
            description="Front page banner, one week",
            total_price=Decimal("1200.00"),
            quantity=7,
            package_type="banner",
            employee_id=author.id,
        )
    )


@pytest.fixture
def today() -> date:
    return date(2024, 3, 15)
