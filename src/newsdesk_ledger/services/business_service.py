"""Business data view: orders, payments, ledger and staff in display form.

Every *_by_id link is resolved to the user's display name, falling back to
the legacy free-text column for rows created before identity linking.
The view is cached briefly and dropped by tag when a mutation commits.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from newsdesk_ledger.cache import TaggedCache, get_cache
from newsdesk_ledger.models import LedgerTransaction, Order, Payment, User
from newsdesk_ledger.serialization import row_to_json

BUSINESS_CACHE_KEY = "business-data"
BUSINESS_CACHE_TAGS = ("business", "orders", "payments", "transactions")


def _resolve(names: dict[UUID, str], user_id: UUID | None, legacy: str | None) -> str | None:
    if user_id is not None and user_id in names:
        return names[user_id]
    return legacy


class BusinessService:
    """Builds the aggregated business view."""

    def __init__(self, session: AsyncSession, cache: TaggedCache | None = None):
        self.session = session
        self.cache = cache or get_cache()

    async def get_business_data(self) -> dict[str, Any]:
        """Get the cached business view, recomputing it when stale."""
        return await self.cache.get_or_compute(
            BUSINESS_CACHE_KEY,
            self.load_business_data,
            tags=BUSINESS_CACHE_TAGS,
        )

    async def load_business_data(self) -> dict[str, Any]:
        """Build the business view straight from the datastore."""
        users = (await self.session.scalars(select(User))).all()
        names = {user.id: user.name for user in users}

        orders = (
            await self.session.scalars(
                select(Order)
                .options(selectinload(Order.payments), selectinload(Order.employee_payments))
                .order_by(Order.created_at.desc())
                .execution_options(populate_existing=True)
            )
        ).all()
        payments = (
            await self.session.scalars(
                select(Payment)
                .options(selectinload(Payment.order))
                .order_by(Payment.payment_date.desc(), Payment.created_at.desc())
            )
        ).all()
        transactions = (
            await self.session.scalars(
                select(LedgerTransaction).order_by(
                    LedgerTransaction.date.desc(), LedgerTransaction.created_at.desc()
                )
            )
        ).all()

        return {
            "orders": [self._order_view(order, names) for order in orders],
            "payments": [self._payment_list_view(payment, names) for payment in payments],
            "transactions": [self._transaction_view(entry, names) for entry in transactions],
            "employees": [{"id": str(user.id), "name": user.name} for user in users],
        }

    def _payment_view(self, payment: Payment, names: dict[UUID, str]) -> dict[str, Any]:
        data = row_to_json(payment)
        data["received_by_name"] = _resolve(names, payment.received_by_id, payment.received_by)
        return data

    def _payment_list_view(self, payment: Payment, names: dict[UUID, str]) -> dict[str, Any]:
        data = self._payment_view(payment, names)
        data["client"] = payment.order.client if payment.order else None
        data["order_description"] = payment.order.description if payment.order else None
        return data

    def _order_view(self, order: Order, names: dict[UUID, str]) -> dict[str, Any]:
        data = row_to_json(order)
        data["payments"] = [self._payment_view(p, names) for p in order.payments]
        data["employee_payments"] = [
            {
                **row_to_json(ep),
                "processed_by_name": _resolve(names, ep.processed_by_id, ep.processed_by),
            }
            for ep in order.employee_payments
        ]
        data["paid_amount"] = str(sum((p.amount for p in order.payments), Decimal("0")))
        data["employee_name"] = _resolve(names, order.employee_id, order.employee)
        data["created_by_name"] = _resolve(names, order.created_by_id, order.created_by)
        return data

    def _transaction_view(self, entry: LedgerTransaction, names: dict[UUID, str]) -> dict[str, Any]:
        data = row_to_json(entry)
        data["created_by_name"] = _resolve(names, entry.created_by_id, entry.created_by)
        return data
