"""Back-office user model."""

from __future__ import annotations

from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, String
from sqlalchemy.orm import Mapped, mapped_column

from newsdesk_ledger.models.base import Base, TimestampMixin


class User(Base, TimestampMixin):
    """Staff account. The role drives authorization of ledger operations."""

    __tablename__ = "app_user"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    username: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    display_name: Mapped[str | None] = mapped_column(String, nullable=True)
    role: Mapped[str] = mapped_column(String, nullable=False, default="AUTHOR")

    __table_args__ = (
        CheckConstraint(
            "role IN ('ADMIN', 'CHIEF_EDITOR', 'EDITOR', 'AUTHOR')",
            name="app_user_role_check",
        ),
    )

    @property
    def name(self) -> str:
        """Display name with username fallback."""
        return self.display_name or self.username
