"""Newsdesk ledger services."""

from newsdesk_ledger.services.backup_service import BackupService
from newsdesk_ledger.services.business_service import BusinessService
from newsdesk_ledger.services.employee_payment_service import (
    EmployeePaymentService,
    PayoutResult,
    PayoutReversalResult,
)
from newsdesk_ledger.services.notification_service import NotificationService
from newsdesk_ledger.services.order_service import OrderService
from newsdesk_ledger.services.payment_service import DeleteResult, PaymentService
from newsdesk_ledger.services.transaction_service import TransactionService

__all__ = [
    "BackupService",
    "BusinessService",
    "EmployeePaymentService",
    "PayoutResult",
    "PayoutReversalResult",
    "NotificationService",
    "OrderService",
    "PaymentService",
    "DeleteResult",
    "TransactionService",
]
