"""Caller identity and role checks."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

from newsdesk_ledger.errors import (
    ForbiddenError,
    InvalidIdentifierError,
    UnauthorizedError,
    parse_identifier,
)
from newsdesk_ledger.models import User

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


class Role(str, Enum):
    """Staff roles."""

    ADMIN = "ADMIN"
    CHIEF_EDITOR = "CHIEF_EDITOR"
    EDITOR = "EDITOR"
    AUTHOR = "AUTHOR"


# Roles allowed to manage manual ledger entries
PRIVILEGED_ROLES = frozenset({Role.ADMIN, Role.CHIEF_EDITOR})


@dataclass(frozen=True)
class Identity:
    """Acting user, passed explicitly into every operation."""

    id: UUID
    display_name: str
    role: Role

    @classmethod
    def from_user(cls, user: User) -> Identity:
        """Build an identity from a stored user record."""
        return cls(id=user.id, display_name=user.name, role=Role(user.role))


async def resolve_identity(session: AsyncSession, user_id: str | UUID | None) -> Identity | None:
    """Look up the stored user and return its identity, or None if unknown."""
    if not user_id:
        return None
    try:
        uid = parse_identifier(user_id)
    except InvalidIdentifierError:
        return None
    user = await session.get(User, uid)
    if user is None:
        return None
    return Identity.from_user(user)


def require_identity(identity: Identity | None) -> Identity:
    """Ensure the call is authenticated."""
    if identity is None:
        raise UnauthorizedError()
    return identity


async def require_role(
    session: AsyncSession,
    identity: Identity | None,
    allowed: frozenset[Role] = PRIVILEGED_ROLES,
) -> Identity:
    """Ensure the caller's stored role is in the allowed set.

    The role is re-read from the user record so that a demoted user loses
    access without waiting for their session to expire.
    """
    identity = require_identity(identity)
    user = await session.get(User, identity.id, populate_existing=True)
    if user is None:
        raise UnauthorizedError()
    if Role(user.role) not in allowed:
        raise ForbiddenError("Forbidden: insufficient role", role=user.role)
    return Identity.from_user(user)
