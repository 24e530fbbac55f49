"""Manual ledger entry service.

Create, update and delete all require a privileged role (ADMIN or
CHIEF_EDITOR), re-read from the stored user record on every call.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk_ledger.errors import NotFoundError, ValidationError, parse_identifier
from newsdesk_ledger.identity import Identity, require_role
from newsdesk_ledger.models import LedgerTransaction, TransactionType

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset({"type", "amount", "description", "category", "date"})
CLEARABLE_FIELDS = frozenset({"category"})


def _validate_type(value: str) -> str:
    try:
        return TransactionType(str(value).upper()).value
    except ValueError:
        raise ValidationError(f"Invalid transaction type: {value}") from None


def _validate_amount(value: Decimal | int | str) -> Decimal:
    amount = Decimal(str(value))
    if amount <= 0:
        raise ValidationError("Amount must be positive")
    return amount


class TransactionService:
    """Free-standing income/expense entries entered by staff."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_transaction(
        self,
        identity: Identity | None,
        *,
        type: str,
        amount: Decimal | int | str,
        description: str,
        date: date,
        category: str | None = None,
        order_id: str | UUID | None = None,
    ) -> LedgerTransaction:
        """Create a manual ledger entry."""
        identity = await require_role(self.session, identity)

        entry = LedgerTransaction(
            type=_validate_type(type),
            amount=_validate_amount(amount),
            description=description,
            category=category,
            date=date,
            created_by=identity.display_name,
            created_by_id=identity.id,
            order_id=parse_identifier(order_id) if order_id else None,
        )
        self.session.add(entry)
        await self.session.flush()

        logger.info(
            "Created %s transaction %s of %s by %s",
            entry.type,
            entry.id,
            entry.amount,
            identity.id,
        )
        return entry

    async def update_transaction(
        self,
        identity: Identity | None,
        transaction_id: str | UUID,
        **fields: Any,
    ) -> LedgerTransaction:
        """Partially update a ledger entry."""
        identity = await require_role(self.session, identity)
        tid = parse_identifier(transaction_id)

        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        if fields.get("type") is not None:
            fields["type"] = _validate_type(fields["type"])
        if fields.get("amount") is not None:
            fields["amount"] = _validate_amount(fields["amount"])

        entry = await self.session.get(LedgerTransaction, tid)
        if entry is None:
            raise NotFoundError("Transaction", tid)

        for name, value in fields.items():
            if value is not None or name in CLEARABLE_FIELDS:
                setattr(entry, name, value)
        await self.session.flush()

        logger.info("Updated transaction %s fields=%s by %s", tid, sorted(fields), identity.id)
        return entry

    async def delete_transaction(
        self,
        identity: Identity | None,
        transaction_id: str | UUID,
    ) -> UUID:
        """Delete a ledger entry."""
        identity = await require_role(self.session, identity)
        tid = parse_identifier(transaction_id)

        entry = await self.session.get(LedgerTransaction, tid)
        if entry is None:
            raise NotFoundError("Transaction", tid)

        await self.session.delete(entry)
        await self.session.flush()

        logger.info("Deleted transaction %s by %s", tid, identity.id)
        return tid
