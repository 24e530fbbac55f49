"""Advertising notification campaigns and their send history."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import JSON, Date, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from newsdesk_ledger.models.base import Base, TimestampMixin


class Notification(Base, TimestampMixin):
    """Notification campaign.

    history is an ordered JSON list of send records:
        {"user_name", "timestamp", "is_paid", "employee_payment_id"}
    Entries are never updated individually; every edit writes the whole list.
    """

    __tablename__ = "notification"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    customer: Mapped[str] = mapped_column(String, nullable=False)
    ad_text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    quantity: Mapped[int] = mapped_column(nullable=False, default=1)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    author: Mapped[str | None] = mapped_column(String, nullable=True)
    sent_count: Mapped[int] = mapped_column(nullable=False, default=0)
    last_sent_time: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    is_archived: Mapped[bool] = mapped_column(nullable=False, default=False)
    history: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    @property
    def campaign_days(self) -> int:
        """Inclusive number of days the campaign runs."""
        return abs((self.end_date - self.start_date).days) + 1

    @property
    def total_limit(self) -> int:
        """Total sends allowed over the whole campaign."""
        return self.quantity * self.campaign_days
