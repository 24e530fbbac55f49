"""Financial ledger entries."""

from __future__ import annotations

import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Date, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from newsdesk_ledger.models.base import Base, TimestampMixin


class TransactionType(str, Enum):
    """Ledger entry direction."""

    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class LedgerTransaction(Base, TimestampMixin):
    """Income or expense entry in the finance ledger.

    order_id and employee_payment_id are weak references: no foreign key,
    so audit entries survive deletion of what they point at.
    """

    __tablename__ = "ledger_transaction"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    type: Mapped[str] = mapped_column(String, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    category: Mapped[str | None] = mapped_column(String, nullable=True)
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_by: Mapped[str | None] = mapped_column(String, nullable=True)
    created_by_id: Mapped[UUID | None] = mapped_column(nullable=True)
    order_id: Mapped[UUID | None] = mapped_column(nullable=True)
    employee_payment_id: Mapped[UUID | None] = mapped_column(nullable=True)

    __table_args__ = (
        CheckConstraint("type IN ('INCOME', 'EXPENSE')", name="ledger_transaction_type_check"),
        CheckConstraint("amount > 0", name="ledger_transaction_amount_check"),
        Index("ledger_transaction_by_order", "order_id"),
        Index("ledger_transaction_by_employee_payment", "employee_payment_id"),
    )
