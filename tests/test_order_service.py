"""Tests for OrderService - creation and payout total integrity."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import update

from newsdesk_ledger.errors import InvalidIdentifierError, NotFoundError, ValidationError
from newsdesk_ledger.models import Order
from newsdesk_ledger.services import EmployeePaymentService, OrderService


async def _drift(run, order_id, value):
    """Corrupt the stored payout total behind the service's back."""
    await run(
        lambda s: s.execute(
            update(Order).where(Order.id == order_id).values(employee_paid_amount=Decimal(value))
        )
    )


class TestCreateOrder:
    """Test order creation."""

    async def test_new_order_defaults(self, order, admin):
        assert order.status == "PENDING"
        assert Decimal(str(order.employee_paid_amount)) == Decimal("0")
        assert order.employee == "Ivan"
        assert order.created_by == "Anna Admin"
        assert order.created_by_id == admin.id

    async def test_negative_price_rejected(self, run, admin):
        with pytest.raises(ValidationError):
            await run(lambda s: OrderService(s).create_order(admin, client="X", total_price="-1"))

    async def test_update_status(self, run, admin, order):
        updated = await run(lambda s: OrderService(s).update_status(admin, order.id, "ACTIVE"))
        assert updated.status == "ACTIVE"

    async def test_update_status_invalid(self, run, admin, order):
        with pytest.raises(ValidationError):
            await run(lambda s: OrderService(s).update_status(admin, order.id, "ARCHIVED"))


class TestGetOrder:
    async def test_missing(self, run):
        with pytest.raises(NotFoundError):
            await run(lambda s: OrderService(s).get_order(uuid4()))

    async def test_malformed(self, run):
        with pytest.raises(InvalidIdentifierError):
            await run(lambda s: OrderService(s).get_order("O1"))


class TestVerifyOrder:
    """Verify and repair employee_paid_amount."""

    async def test_consistent_order_verifies(self, run, admin, order):
        await run(
            lambda s: EmployeePaymentService(s).add_employee_payment(
                admin,
                order_id=order.id,
                amount="150.00",
                payment_date=date(2024, 3, 15),
                payment_method="CASH",
            )
        )

        ok, errors = await run(lambda s: OrderService(s).verify_order(order.id))

        assert ok is True
        assert errors == []

    async def test_drift_detected(self, run, order):
        await _drift(run, order.id, "75.00")

        ok, errors = await run(lambda s: OrderService(s).verify_order(order.id))

        assert ok is False
        assert len(errors) == 1
        assert "Payout mismatch" in errors[0]

        problems = await run(lambda s: OrderService(s).verify_all())
        assert list(problems) == [order.id]

    async def test_recompute_repairs_drift(self, run, admin, order):
        await run(
            lambda s: EmployeePaymentService(s).add_employee_payment(
                admin,
                order_id=order.id,
                amount="200.00",
                payment_date=date(2024, 3, 15),
                payment_method="CASH",
            )
        )
        await _drift(run, order.id, "999.00")

        total = await run(lambda s: OrderService(s).recompute_employee_paid_amount(order.id))

        assert total == Decimal("200.00")
        ok, _ = await run(lambda s: OrderService(s).verify_order(order.id))
        assert ok is True
