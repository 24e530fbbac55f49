"""Order model."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from newsdesk_ledger.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from newsdesk_ledger.models.payments import EmployeePayment, Payment


class Order(Base, TimestampMixin):
    """Billable advertising order.

    employee_paid_amount is a stored running total of employee payouts. It is
    only changed by the employee payment service, inside the same transaction
    as the EmployeePayment insert/delete.
    """

    __tablename__ = "orders"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    client: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    package_type: Mapped[str | None] = mapped_column(String, nullable=True)
    quantity: Mapped[int] = mapped_column(nullable=False, default=1)
    total_price: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0")
    )
    status: Mapped[str] = mapped_column(String, nullable=False, default="PENDING")
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Legacy free-text name, kept for rows created before identity linking
    employee: Mapped[str | None] = mapped_column(String, nullable=True)
    employee_id: Mapped[UUID | None] = mapped_column(nullable=True)
    created_by: Mapped[str | None] = mapped_column(String, nullable=True)
    created_by_id: Mapped[UUID | None] = mapped_column(nullable=True)

    employee_paid_amount: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0")
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('PENDING', 'ACTIVE', 'COMPLETED', 'CANCELLED')",
            name="orders_status_check",
        ),
    )

    # Relationships
    payments: Mapped[list[Payment]] = relationship(
        back_populates="order", passive_deletes=True
    )
    employee_payments: Mapped[list[EmployeePayment]] = relationship(
        back_populates="order", passive_deletes=True
    )
