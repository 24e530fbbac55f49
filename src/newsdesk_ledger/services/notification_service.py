"""Notification campaign service.

Each send is appended to Notification.history. Staff are paid per send;
settling marks entries paid and may tag them with the EmployeePayment that
covered them. The employee payment service clears those tags when the
payout is deleted.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk_ledger.errors import NotFoundError, ValidationError, parse_identifier
from newsdesk_ledger.identity import Identity, require_identity, require_role
from newsdesk_ledger.models import EmployeePayment, Notification

logger = logging.getLogger(__name__)


def _parse_timestamp(value: str | datetime) -> datetime:
    if isinstance(value, datetime):
        ts = value
    else:
        ts = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


class NotificationService:
    """Campaign CRUD and send-history bookkeeping. Callers own the transaction."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_notification(
        self,
        identity: Identity | None,
        *,
        customer: str,
        ad_text: str,
        quantity: int,
        start_date: date,
        end_date: date,
    ) -> Notification:
        """Create a campaign with empty history."""
        identity = require_identity(identity)
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1")

        note = Notification(
            customer=customer,
            ad_text=ad_text,
            quantity=quantity,
            start_date=start_date,
            end_date=end_date,
            author=identity.display_name,
            sent_count=0,
            is_archived=False,
            history=[],
        )
        self.session.add(note)
        await self.session.flush()
        return note

    async def get_notification(self, notification_id: str | UUID) -> Notification:
        nid = parse_identifier(notification_id)
        note = await self.session.get(Notification, nid, populate_existing=True)
        if note is None:
            raise NotFoundError("Notification", nid)
        return note

    async def list_notifications(self) -> list[Notification]:
        result = await self.session.scalars(
            select(Notification).order_by(Notification.created_at.desc())
        )
        return list(result.all())

    async def record_send(
        self,
        identity: Identity | None,
        notification_id: str | UUID,
        now: datetime | None = None,
    ) -> Notification:
        """Append a send to the history.

        Enforces the per-day limit (quantity) and archives the campaign once
        the campaign total is reached.
        """
        identity = require_identity(identity)
        note = await self.get_notification(notification_id)
        now = now or datetime.now(timezone.utc)

        start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
        sent_today = sum(
            1 for entry in note.history or [] if _parse_timestamp(entry["timestamp"]) >= start_of_day
        )
        if sent_today >= note.quantity:
            raise ValidationError("Daily limit reached")

        entry: dict[str, Any] = {
            "user_name": identity.display_name,
            "timestamp": now.isoformat(),
            "is_paid": False,
            "employee_payment_id": None,
        }
        note.history = [*(note.history or []), entry]
        note.sent_count += 1
        note.last_sent_time = now
        if note.sent_count >= note.total_limit:
            note.is_archived = True
        await self.session.flush()

        logger.info("Recorded send %d on notification %s by %s", note.sent_count, note.id, identity.id)
        return note

    async def toggle_payout(
        self,
        identity: Identity | None,
        notification_id: str | UUID,
        timestamp: str | datetime,
    ) -> Notification:
        """Flip is_paid on the history entry sent at timestamp."""
        require_identity(identity)
        note = await self.get_notification(notification_id)
        target = _parse_timestamp(timestamp)

        found = False
        history = []
        for entry in note.history or []:
            if _parse_timestamp(entry["timestamp"]) == target:
                entry = {**entry, "is_paid": not entry.get("is_paid", False)}
                found = True
            history.append(entry)
        if not found:
            raise NotFoundError("History entry", timestamp)

        note.history = history
        await self.session.flush()
        return note

    async def settle_sends(
        self,
        identity: Identity | None,
        user_name: str,
        employee_payment_id: str | UUID | None = None,
    ) -> int:
        """Mark every unpaid send by user_name as paid.

        When employee_payment_id is given, settled entries are tagged with it.
        Returns the number of entries settled.
        """
        require_identity(identity)
        tag = None
        if employee_payment_id:
            payment_id = parse_identifier(employee_payment_id)
            if await self.session.get(EmployeePayment, payment_id) is None:
                raise NotFoundError("Employee payment", payment_id)
            tag = str(payment_id)

        settled = 0
        for note in await self.list_notifications():
            history = []
            changed = False
            for entry in note.history or []:
                if entry.get("user_name") == user_name and not entry.get("is_paid"):
                    entry = {**entry, "is_paid": True, "employee_payment_id": tag}
                    changed = True
                    settled += 1
                history.append(entry)
            if changed:
                note.history = history
        await self.session.flush()

        logger.info("Settled %d sends for %s (payout %s)", settled, user_name, tag)
        return settled

    async def toggle_archive(self, identity: Identity | None, notification_id: str | UUID) -> Notification:
        require_identity(identity)
        note = await self.get_notification(notification_id)
        note.is_archived = not note.is_archived
        await self.session.flush()
        return note

    async def delete_notification(self, identity: Identity | None, notification_id: str | UUID) -> UUID:
        """Delete a campaign. ADMIN and CHIEF_EDITOR only."""
        await require_role(self.session, identity)
        note = await self.get_notification(notification_id)
        await self.session.delete(note)
        await self.session.flush()
        return note.id
