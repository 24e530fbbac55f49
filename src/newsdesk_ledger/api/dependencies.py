"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from newsdesk_ledger.actions import LedgerActions
from newsdesk_ledger.cache import TaggedCache, get_cache
from newsdesk_ledger.database import init_db
from newsdesk_ledger.identity import Identity, resolve_identity


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get the process-wide session factory."""
    _, factory = init_db()
    return factory


def get_ledger_cache() -> TaggedCache:
    """Get the business view cache."""
    return get_cache()


SessionFactory = Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)]


async def get_db_session(factory: SessionFactory) -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    async with factory() as session:
        try:
            yield session
        finally:
            await session.close()


async def get_identity(
    factory: SessionFactory,
    x_user_id: Annotated[str | None, Header()] = None,
) -> Identity | None:
    """Resolve the acting user from the X-User-ID header.

    A missing, malformed or unknown id yields None; operations that need an
    identity reject the call themselves.
    """
    if not x_user_id:
        return None
    async with factory() as session:
        return await resolve_identity(session, x_user_id)


def get_actions(
    factory: SessionFactory,
    cache: Annotated[TaggedCache, Depends(get_ledger_cache)],
) -> LedgerActions:
    """Build the operation boundary for this request."""
    return LedgerActions(factory, cache)


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
CurrentIdentity = Annotated[Identity | None, Depends(get_identity)]
Actions = Annotated[LedgerActions, Depends(get_actions)]
LedgerCache = Annotated[TaggedCache, Depends(get_ledger_cache)]
