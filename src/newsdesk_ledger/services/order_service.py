"""Order service: creation, lookup and payout-total integrity checks."""

from __future__ import annotations

import logging
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk_ledger.errors import NotFoundError, ValidationError, parse_identifier
from newsdesk_ledger.identity import Identity, require_identity
from newsdesk_ledger.models import EmployeePayment, Order, User

logger = logging.getLogger(__name__)

ORDER_STATUSES = ("PENDING", "ACTIVE", "COMPLETED", "CANCELLED")


class OrderService:
    """Orders and the employee_paid_amount invariant.

    Invariant: Order.employee_paid_amount equals the sum of the amounts of
    the order's EmployeePayment rows.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_order(
        self,
        identity: Identity | None,
        *,
        client: str,
        description: str = "",
        total_price: Decimal | int | str = Decimal("0"),
        quantity: int = 1,
        package_type: str | None = None,
        employee: str | None = None,
        employee_id: str | UUID | None = None,
        notes: str | None = None,
    ) -> Order:
        """Create a PENDING order with no payouts."""
        identity = require_identity(identity)
        total_price = Decimal(str(total_price))
        if total_price < 0:
            raise ValidationError("Total price cannot be negative")

        employee_uid = parse_identifier(employee_id) if employee_id else None
        if employee_uid is not None and employee is None:
            user = await self.session.get(User, employee_uid)
            employee = user.name if user else None

        order = Order(
            client=client,
            description=description,
            total_price=total_price,
            quantity=quantity,
            package_type=package_type,
            employee=employee,
            employee_id=employee_uid,
            notes=notes,
            status="PENDING",
            created_by=identity.display_name,
            created_by_id=identity.id,
            employee_paid_amount=Decimal("0"),
        )
        self.session.add(order)
        await self.session.flush()

        logger.info("Created order %s for %s", order.id, client)
        return order

    async def get_order(self, order_id: str | UUID) -> Order:
        """Get an order by id."""
        oid = parse_identifier(order_id)
        order = await self.session.get(Order, oid, populate_existing=True)
        if order is None:
            raise NotFoundError("Order", oid)
        return order

    async def update_status(self, identity: Identity | None, order_id: str | UUID, status: str) -> Order:
        """Change the order status."""
        require_identity(identity)
        if status not in ORDER_STATUSES:
            raise ValidationError(f"Invalid order status: {status}")
        order = await self.get_order(order_id)
        order.status = status
        await self.session.flush()
        return order

    async def payout_sum(self, order_id: UUID) -> Decimal:
        """Sum of EmployeePayment amounts for an order."""
        total = await self.session.scalar(
            select(func.coalesce(func.sum(EmployeePayment.amount), 0)).where(
                EmployeePayment.order_id == order_id
            )
        )
        return Decimal(str(total))

    async def verify_order(self, order_id: str | UUID) -> tuple[bool, list[str]]:
        """Verify that the stored payout total matches the payout rows.

        Returns (is_valid, list_of_errors).
        """
        order = await self.get_order(order_id)
        expected = await self.payout_sum(order.id)
        stored = Decimal(str(order.employee_paid_amount))

        errors: list[str] = []
        if stored != expected:
            errors.append(
                f"Payout mismatch: order shows {stored}, "
                f"employee payments sum to {expected}"
            )
        return len(errors) == 0, errors

    async def verify_all(self) -> dict[UUID, list[str]]:
        """Verify every order. Returns errors keyed by order id."""
        order_ids = (await self.session.scalars(select(Order.id))).all()
        problems: dict[UUID, list[str]] = {}
        for oid in order_ids:
            ok, errors = await self.verify_order(oid)
            if not ok:
                problems[oid] = errors
        return problems

    async def recompute_employee_paid_amount(self, order_id: str | UUID) -> Decimal:
        """Overwrite the stored payout total with the sum of payout rows."""
        order = await self.get_order(order_id)
        expected = await self.payout_sum(order.id)
        if Decimal(str(order.employee_paid_amount)) != expected:
            logger.warning(
                "Repairing order %s payout total %s -> %s",
                order.id,
                order.employee_paid_amount,
                expected,
            )
            order.employee_paid_amount = expected
            await self.session.flush()
        return expected
