"""SQLAlchemy models for the newsdesk ledger."""

from newsdesk_ledger.models.base import Base, TimestampMixin, utcnow
from newsdesk_ledger.models.ledger import LedgerTransaction, TransactionType
from newsdesk_ledger.models.notification import Notification
from newsdesk_ledger.models.order import Order
from newsdesk_ledger.models.payments import EmployeePayment, Payment
from newsdesk_ledger.models.user import User

__all__ = [
    "Base",
    "TimestampMixin",
    "utcnow",
    "User",
    "Order",
    "Payment",
    "EmployeePayment",
    "LedgerTransaction",
    "TransactionType",
    "Notification",
]
