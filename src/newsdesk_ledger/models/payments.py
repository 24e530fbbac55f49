"""Customer payment and employee payout models."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from newsdesk_ledger.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from newsdesk_ledger.models.order import Order


class Payment(Base, TimestampMixin):
    """Customer payment received against an order.

    Does not feed any stored total on the order.
    """

    __tablename__ = "payment"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    order_id: Mapped[UUID] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    payment_method: Mapped[str] = mapped_column(String, nullable=False)
    received_by: Mapped[str | None] = mapped_column(String, nullable=True)
    received_by_id: Mapped[UUID | None] = mapped_column(nullable=True)
    receipt_number: Mapped[str | None] = mapped_column(String, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (Index("payment_by_order", "order_id"),)

    # Relationships
    order: Mapped[Order] = relationship(back_populates="payments")


class EmployeePayment(Base, TimestampMixin):
    """Payout to an employee for work on an order.

    Each row is mirrored by an EXPENSE ledger transaction and counted in
    Order.employee_paid_amount.
    """

    __tablename__ = "employee_payment"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    order_id: Mapped[UUID] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    payment_method: Mapped[str] = mapped_column(String, nullable=False)
    recipient: Mapped[str | None] = mapped_column(String, nullable=True)
    processed_by: Mapped[str | None] = mapped_column(String, nullable=True)
    processed_by_id: Mapped[UUID | None] = mapped_column(nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("amount > 0", name="employee_payment_amount_check"),
        Index("employee_payment_by_order", "order_id"),
    )

    # Relationships
    order: Mapped[Order] = relationship(back_populates="employee_payments")
