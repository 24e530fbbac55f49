"""Operation boundary for ledger mutations.

Each action:
1. Opens a session and runs the service call inside one transaction
2. Converts expected failures (LedgerError) into their public message
3. Logs any other failure in full and returns only a generic message
4. Applies the action's cache invalidation after a successful commit

Nothing is retried; a failed action leaves no partial writes.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from newsdesk_ledger.cache import (
    EMPLOYEE_PAYMENTS_INVALIDATION,
    NOTIFICATIONS_INVALIDATION,
    ORDERS_INVALIDATION,
    PAYMENTS_INVALIDATION,
    RESTORE_INVALIDATION,
    TRANSACTIONS_INVALIDATION,
    Invalidation,
    TaggedCache,
    get_cache,
)
from newsdesk_ledger.errors import LedgerError, OperationFailedError
from newsdesk_ledger.identity import Identity, Role, require_identity, require_role
from newsdesk_ledger.serialization import row_to_json, to_jsonable
from newsdesk_ledger.services import (
    BackupService,
    BusinessService,
    EmployeePaymentService,
    NotificationService,
    OrderService,
    PaymentService,
    TransactionService,
)

logger = logging.getLogger(__name__)

ADMIN_ONLY = frozenset({Role.ADMIN})


@dataclass(frozen=True)
class OperationResult:
    """Tagged result returned to callers. Never carries internal detail."""

    success: bool
    error: str | None = None
    code: str | None = None
    warning: str | None = None
    data: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {k: v for k, v in dataclasses.asdict(self).items() if v is not None}


def _payload(value: Any) -> Any:
    if value is None:
        return None
    if hasattr(value, "to_dict") and hasattr(value, "__table__"):
        return row_to_json(value)
    if dataclasses.is_dataclass(value):
        return to_jsonable(dataclasses.asdict(value))
    return to_jsonable(value)


class LedgerActions:
    """Entry points used by the API and CLI."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        cache: TaggedCache | None = None,
    ):
        self.session_factory = session_factory
        self.cache = cache or get_cache()

    async def run_operation(
        self,
        name: str,
        operation: Callable[[AsyncSession], Awaitable[Any]],
        *,
        failure_message: str,
        invalidation: Invalidation = Invalidation(),
    ) -> OperationResult:
        """Run one mutation atomically and translate its outcome."""
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    outcome = await operation(session)
        except LedgerError as exc:
            logger.info("%s rejected: %s (%s)", name, exc.message, exc.code)
            return OperationResult(success=False, error=exc.message, code=exc.code)
        except Exception:
            logger.exception("Error in %s", name)
            failure = OperationFailedError(failure_message)
            return OperationResult(success=False, error=failure.message, code=failure.code)

        self.cache.apply(invalidation)
        if isinstance(outcome, OperationResult):
            return outcome
        return OperationResult(success=True, data=_payload(outcome))

    # ------------------------------------------------------------------
    # Employee payouts
    # ------------------------------------------------------------------

    async def add_employee_payment(self, identity: Identity | None, **fields: Any) -> OperationResult:
        return await self.run_operation(
            "add_employee_payment",
            lambda s: EmployeePaymentService(s).add_employee_payment(identity, **fields),
            failure_message="Failed to add payment",
            invalidation=EMPLOYEE_PAYMENTS_INVALIDATION,
        )

    async def delete_employee_payment(
        self, identity: Identity | None, employee_payment_id: str | UUID
    ) -> OperationResult:
        return await self.run_operation(
            "delete_employee_payment",
            lambda s: EmployeePaymentService(s).delete_employee_payment(identity, employee_payment_id),
            failure_message="Failed to delete payment",
            invalidation=EMPLOYEE_PAYMENTS_INVALIDATION,
        )

    # ------------------------------------------------------------------
    # Customer payments
    # ------------------------------------------------------------------

    async def add_payment(self, identity: Identity | None, **fields: Any) -> OperationResult:
        return await self.run_operation(
            "add_payment",
            lambda s: PaymentService(s).add_payment(identity, **fields),
            failure_message="Failed to add payment",
            invalidation=PAYMENTS_INVALIDATION,
        )

    async def update_payment(
        self, identity: Identity | None, payment_id: str | UUID, **fields: Any
    ) -> OperationResult:
        return await self.run_operation(
            "update_payment",
            lambda s: PaymentService(s).update_payment(identity, payment_id, **fields),
            failure_message="Failed to update payment",
            invalidation=PAYMENTS_INVALIDATION,
        )

    async def delete_payment(self, identity: Identity | None, payment_id: str | UUID) -> OperationResult:
        async def operation(session: AsyncSession) -> OperationResult:
            result = await PaymentService(session).delete_payment(identity, payment_id)
            if not result.deleted:
                return OperationResult(
                    success=True,
                    warning="Payment already deleted",
                    data=_payload(result),
                )
            return OperationResult(success=True, data=_payload(result))

        return await self.run_operation(
            "delete_payment",
            operation,
            failure_message="Failed to delete payment",
            invalidation=PAYMENTS_INVALIDATION,
        )

    # ------------------------------------------------------------------
    # Manual ledger entries
    # ------------------------------------------------------------------

    async def create_transaction(self, identity: Identity | None, **fields: Any) -> OperationResult:
        return await self.run_operation(
            "create_transaction",
            lambda s: TransactionService(s).create_transaction(identity, **fields),
            failure_message="Failed to create transaction",
            invalidation=TRANSACTIONS_INVALIDATION,
        )

    async def update_transaction(
        self, identity: Identity | None, transaction_id: str | UUID, **fields: Any
    ) -> OperationResult:
        return await self.run_operation(
            "update_transaction",
            lambda s: TransactionService(s).update_transaction(identity, transaction_id, **fields),
            failure_message="Failed to update transaction",
            invalidation=TRANSACTIONS_INVALIDATION,
        )

    async def delete_transaction(
        self, identity: Identity | None, transaction_id: str | UUID
    ) -> OperationResult:
        return await self.run_operation(
            "delete_transaction",
            lambda s: TransactionService(s).delete_transaction(identity, transaction_id),
            failure_message="Failed to delete transaction",
            invalidation=TRANSACTIONS_INVALIDATION,
        )

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    async def create_order(self, identity: Identity | None, **fields: Any) -> OperationResult:
        return await self.run_operation(
            "create_order",
            lambda s: OrderService(s).create_order(identity, **fields),
            failure_message="Failed to create order",
            invalidation=ORDERS_INVALIDATION,
        )

    async def update_order_status(
        self, identity: Identity | None, order_id: str | UUID, status: str
    ) -> OperationResult:
        return await self.run_operation(
            "update_order_status",
            lambda s: OrderService(s).update_status(identity, order_id, status),
            failure_message="Failed to update status",
            invalidation=ORDERS_INVALIDATION,
        )

    async def repair_order(self, identity: Identity | None, order_id: str | UUID) -> OperationResult:
        async def operation(session: AsyncSession) -> Any:
            await require_role(session, identity, ADMIN_ONLY)
            return await OrderService(session).recompute_employee_paid_amount(order_id)

        return await self.run_operation(
            "repair_order",
            operation,
            failure_message="Failed to repair order",
            invalidation=ORDERS_INVALIDATION,
        )

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    async def create_notification(self, identity: Identity | None, **fields: Any) -> OperationResult:
        return await self.run_operation(
            "create_notification",
            lambda s: NotificationService(s).create_notification(identity, **fields),
            failure_message="Failed to create",
            invalidation=NOTIFICATIONS_INVALIDATION,
        )

    async def record_send(self, identity: Identity | None, notification_id: str | UUID) -> OperationResult:
        return await self.run_operation(
            "record_send",
            lambda s: NotificationService(s).record_send(identity, notification_id),
            failure_message="Failed to process send",
            invalidation=NOTIFICATIONS_INVALIDATION,
        )

    async def toggle_payout(
        self, identity: Identity | None, notification_id: str | UUID, timestamp: str
    ) -> OperationResult:
        return await self.run_operation(
            "toggle_payout",
            lambda s: NotificationService(s).toggle_payout(identity, notification_id, timestamp),
            failure_message="Failed to toggle payout",
            invalidation=NOTIFICATIONS_INVALIDATION,
        )

    async def settle_sends(
        self,
        identity: Identity | None,
        user_name: str,
        employee_payment_id: str | UUID | None = None,
    ) -> OperationResult:
        return await self.run_operation(
            "settle_sends",
            lambda s: NotificationService(s).settle_sends(identity, user_name, employee_payment_id),
            failure_message="Failed to pay all",
            invalidation=NOTIFICATIONS_INVALIDATION,
        )

    async def toggle_archive(self, identity: Identity | None, notification_id: str | UUID) -> OperationResult:
        return await self.run_operation(
            "toggle_archive",
            lambda s: NotificationService(s).toggle_archive(identity, notification_id),
            failure_message="Failed to update",
            invalidation=NOTIFICATIONS_INVALIDATION,
        )

    async def delete_notification(
        self, identity: Identity | None, notification_id: str | UUID
    ) -> OperationResult:
        return await self.run_operation(
            "delete_notification",
            lambda s: NotificationService(s).delete_notification(identity, notification_id),
            failure_message="Failed to delete",
            invalidation=NOTIFICATIONS_INVALIDATION,
        )

    # ------------------------------------------------------------------
    # Backup
    # ------------------------------------------------------------------

    async def export_backup(self, identity: Identity | None) -> OperationResult:
        async def operation(session: AsyncSession) -> Any:
            await require_role(session, identity, ADMIN_ONLY)
            return await BackupService(session).export_backup()

        return await self.run_operation(
            "export_backup",
            operation,
            failure_message="Failed to generate backup",
        )

    async def restore_backup(self, identity: Identity | None, backup: dict[str, Any]) -> OperationResult:
        async def operation(session: AsyncSession) -> Any:
            await require_role(session, identity, ADMIN_ONLY)
            return await BackupService(session).restore_backup(backup)

        return await self.run_operation(
            "restore_backup",
            operation,
            failure_message="Failed to restore backup",
            invalidation=RESTORE_INVALIDATION,
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_business_data(self, identity: Identity | None) -> OperationResult:
        """Cached business view."""

        async def operation(session: AsyncSession) -> Any:
            require_identity(identity)
            return await BusinessService(session, self.cache).get_business_data()

        return await self.run_operation(
            "get_business_data",
            operation,
            failure_message="Failed to load business data",
        )

    async def get_order(self, identity: Identity | None, order_id: str | UUID) -> OperationResult:
        async def operation(session: AsyncSession) -> Any:
            require_identity(identity)
            return await OrderService(session).get_order(order_id)

        return await self.run_operation("get_order", operation, failure_message="Failed to load order")

    async def verify_order(self, identity: Identity | None, order_id: str | UUID) -> OperationResult:
        async def operation(session: AsyncSession) -> Any:
            require_identity(identity)
            valid, errors = await OrderService(session).verify_order(order_id)
            return {"valid": valid, "errors": errors}

        return await self.run_operation("verify_order", operation, failure_message="Failed to verify order")

    async def list_notifications(self, identity: Identity | None) -> OperationResult:
        async def operation(session: AsyncSession) -> Any:
            require_identity(identity)
            return [row_to_json(note) for note in await NotificationService(session).list_notifications()]

        return await self.run_operation(
            "list_notifications",
            operation,
            failure_message="Failed to load notifications",
        )
