"""Customer payment service."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk_ledger.errors import NotFoundError, ValidationError, parse_identifier
from newsdesk_ledger.identity import Identity, require_identity
from newsdesk_ledger.models import Order, Payment

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset(
    {"amount", "payment_date", "payment_method", "received_by", "receipt_number", "notes"}
)
# Fields an update may set back to None
CLEARABLE_FIELDS = frozenset({"received_by", "receipt_number", "notes"})


@dataclass(frozen=True)
class DeleteResult:
    """Result of an idempotent delete.

    deleted is False when the row was already gone; callers treat that as
    success and surface a warning.
    """

    payment_id: UUID
    deleted: bool


class PaymentService:
    """Customer payments against orders.

    Customer payments are plain rows: they do not adjust any stored order
    total. Callers own the transaction.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def add_payment(
        self,
        identity: Identity | None,
        *,
        order_id: str | UUID,
        amount: Decimal | int | str,
        payment_date: date,
        payment_method: str,
        received_by: str | None = None,
        receipt_number: str | None = None,
        notes: str | None = None,
    ) -> Payment:
        """Record a customer payment, attributed to the caller."""
        identity = require_identity(identity)
        oid = parse_identifier(order_id)
        amount = Decimal(str(amount))
        if amount <= 0:
            raise ValidationError("Amount must be positive")

        exists = await self.session.scalar(select(Order.id).where(Order.id == oid))
        if exists is None:
            raise NotFoundError("Order", oid)

        payment = Payment(
            order_id=oid,
            amount=amount,
            payment_date=payment_date,
            payment_method=payment_method,
            received_by=received_by or identity.display_name,
            received_by_id=identity.id,
            receipt_number=receipt_number,
            notes=notes,
        )
        self.session.add(payment)
        await self.session.flush()

        logger.info("Recorded payment %s of %s on order %s", payment.id, amount, oid)
        return payment

    async def update_payment(
        self,
        identity: Identity | None,
        payment_id: str | UUID,
        **fields: Any,
    ) -> Payment:
        """Partially update a payment. Unknown fields are rejected."""
        require_identity(identity)
        pid = parse_identifier(payment_id)

        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        if "amount" in fields and fields["amount"] is not None:
            fields["amount"] = Decimal(str(fields["amount"]))
            if fields["amount"] <= 0:
                raise ValidationError("Amount must be positive")

        payment = await self.session.get(Payment, pid)
        if payment is None:
            raise NotFoundError("Payment", pid)

        for name, value in fields.items():
            if value is not None or name in CLEARABLE_FIELDS:
                setattr(payment, name, value)
        await self.session.flush()

        logger.info("Updated payment %s fields=%s", pid, sorted(fields))
        return payment

    async def delete_payment(
        self,
        identity: Identity | None,
        payment_id: str | UUID,
    ) -> DeleteResult:
        """Delete a payment. Deleting an already-deleted payment succeeds.

        Raises:
            UnauthorizedError: No identity
            InvalidIdentifierError: Malformed id (never valid, unlike gone)
        """
        require_identity(identity)
        pid = parse_identifier(payment_id)

        result = await self.session.execute(delete(Payment).where(Payment.id == pid))
        if result.rowcount == 0:
            logger.warning("Payment %s already deleted", pid)
            return DeleteResult(payment_id=pid, deleted=False)

        logger.info("Deleted payment %s", pid)
        return DeleteResult(payment_id=pid, deleted=True)
