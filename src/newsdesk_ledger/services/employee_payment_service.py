"""Employee payout service - keeps order payout totals and the ledger in sync.

Every payout touches three aggregates inside one datastore transaction:
- the EmployeePayment row itself
- Order.employee_paid_amount (increment on add, decrement on delete)
- the ledger (EXPENSE on add, compensating INCOME on delete)

Deletion also clears Notification history entries that were settled by the
deleted payout. Original EXPENSE entries are never removed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import String, cast, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk_ledger.errors import NotFoundError, ValidationError, parse_identifier
from newsdesk_ledger.identity import Identity, require_identity
from newsdesk_ledger.models import (
    EmployeePayment,
    LedgerTransaction,
    Notification,
    Order,
    TransactionType,
)

logger = logging.getLogger(__name__)

PAYOUT_CATEGORY = "payout"
PAYOUT_CANCELLATION_CATEGORY = "payout-cancellation"


@dataclass(frozen=True)
class PayoutResult:
    """Outcome of recording a payout."""

    employee_payment_id: UUID
    order_id: UUID
    amount: Decimal
    expense_transaction_id: UUID


@dataclass(frozen=True)
class PayoutReversalResult:
    """Outcome of deleting a payout."""

    employee_payment_id: UUID
    order_id: UUID
    amount: Decimal
    reversal_transaction_id: UUID
    notifications_updated: int


def _short_order_id(order_id: UUID) -> str:
    return str(order_id)[-4:]


class EmployeePaymentService:
    """Records and reverses employee payouts.

    Callers own the transaction: every public method must run inside
    ``session.begin()`` so that a failure in any step rolls back all of them.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def add_employee_payment(
        self,
        identity: Identity | None,
        *,
        order_id: str | UUID,
        amount: Decimal | int | str,
        payment_date: date,
        payment_method: str,
        notes: str | None = None,
        employee_name: str | None = None,
        target_employee_id: str | UUID | None = None,
    ) -> PayoutResult:
        """Record a payout against an order.

        Args:
            identity: Acting user (recorded as processed_by)
            order_id: Order the payout belongs to
            amount: Positive payout amount
            payment_date: Date the money changed hands
            payment_method: CASH, CARD, BANK_TRANSFER or free text
            notes: Optional free text
            employee_name: Name of the employee who received the money
            target_employee_id: Recipient picked in the form; not stored,
                recipient comes from employee_name only

        Returns:
            PayoutResult with the new payment and its EXPENSE entry

        Raises:
            UnauthorizedError: No identity
            ValidationError: Amount is not positive
            NotFoundError: Order does not exist
        """
        identity = require_identity(identity)
        oid = parse_identifier(order_id)
        amount = Decimal(str(amount))
        if amount <= 0:
            raise ValidationError("Amount must be positive")

        # Order update runs first: a missing order is NotFound rather than an FK violation
        await self._adjust_paid_amount(oid, amount)

        payment = EmployeePayment(
            order_id=oid,
            amount=amount,
            payment_date=payment_date,
            payment_method=payment_method,
            notes=notes,
            recipient=employee_name,
            processed_by=identity.display_name,
            processed_by_id=identity.id,
        )
        self.session.add(payment)
        await self.session.flush()

        legacy_employee = await self._order_employee(oid)
        expense = await self._record_expense(identity, payment, legacy_employee)

        logger.info(
            "Recorded payout %s of %s on order %s (expense %s)",
            payment.id,
            amount,
            oid,
            expense.id,
        )
        return PayoutResult(
            employee_payment_id=payment.id,
            order_id=oid,
            amount=amount,
            expense_transaction_id=expense.id,
        )

    async def delete_employee_payment(
        self,
        identity: Identity | None,
        employee_payment_id: str | UUID,
    ) -> PayoutReversalResult:
        """Delete a payout and post the compensating ledger entry.

        The payment row is read inside the caller's transaction with a row
        lock, so the decrement always uses the amount that is being deleted.

        Raises:
            UnauthorizedError: No identity
            InvalidIdentifierError: Malformed id
            NotFoundError: Payment does not exist
        """
        identity = require_identity(identity)
        pid = parse_identifier(employee_payment_id)

        payment = await self.session.scalar(
            select(EmployeePayment).where(EmployeePayment.id == pid).with_for_update()
        )
        if payment is None:
            raise NotFoundError("Payment", pid)

        amount = payment.amount
        oid = payment.order_id
        recipient = payment.recipient

        await self.session.delete(payment)
        await self.session.flush()

        await self._adjust_paid_amount(oid, -amount)

        legacy_employee = await self._order_employee(oid)
        name = recipient or legacy_employee or "employee"
        reversal = LedgerTransaction(
            type=TransactionType.INCOME.value,
            amount=amount,
            category=PAYOUT_CANCELLATION_CATEGORY,
            date=date.today(),
            description=f"Payout cancelled for {name} (order #{_short_order_id(oid)})",
            created_by=identity.display_name,
            created_by_id=identity.id,
            order_id=oid,
        )
        self.session.add(reversal)
        await self.session.flush()

        updated = await self._release_notification_history(pid)

        logger.info(
            "Reversed payout %s of %s on order %s (reversal %s, %d notifications reset)",
            pid,
            amount,
            oid,
            reversal.id,
            updated,
        )
        return PayoutReversalResult(
            employee_payment_id=pid,
            order_id=oid,
            amount=amount,
            reversal_transaction_id=reversal.id,
            notifications_updated=updated,
        )

    async def _adjust_paid_amount(self, order_id: UUID, delta: Decimal) -> None:
        """Increment (or decrement, for negative delta) the order payout total."""
        result = await self.session.execute(
            update(Order)
            .where(Order.id == order_id)
            .values(employee_paid_amount=Order.employee_paid_amount + delta)
        )
        if result.rowcount == 0:
            raise NotFoundError("Order", order_id)

    async def _order_employee(self, order_id: UUID) -> str | None:
        return await self.session.scalar(select(Order.employee).where(Order.id == order_id))

    async def _record_expense(
        self,
        identity: Identity,
        payment: EmployeePayment,
        legacy_employee: str | None,
    ) -> LedgerTransaction:
        """Mirror a payout as an EXPENSE ledger entry."""
        name = payment.recipient or legacy_employee or "employee"
        expense = LedgerTransaction(
            type=TransactionType.EXPENSE.value,
            amount=payment.amount,
            category=PAYOUT_CATEGORY,
            date=payment.payment_date,
            description=f"Payout to {name} (order #{_short_order_id(payment.order_id)})",
            created_by=identity.display_name,
            created_by_id=identity.id,
            employee_payment_id=payment.id,
            order_id=payment.order_id,
        )
        self.session.add(expense)
        await self.session.flush()
        return expense

    async def _release_notification_history(self, employee_payment_id: UUID) -> int:
        """Reset history entries settled by a deleted payout.

        Matching entries get is_paid=False and employee_payment_id=None; the
        whole history list is written back. Returns notifications changed.
        """
        key = str(employee_payment_id)
        candidates = await self.session.scalars(
            select(Notification).where(cast(Notification.history, String).contains(key))
        )

        updated = 0
        for note in candidates:
            changed = False
            history = []
            for entry in note.history or []:
                if entry.get("employee_payment_id") == key:
                    entry = {**entry, "is_paid": False, "employee_payment_id": None}
                    changed = True
                history.append(entry)
            if changed:
                note.history = history
                updated += 1

        if updated:
            await self.session.flush()
        return updated
