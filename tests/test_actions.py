"""Tests for the operation boundary."""

from datetime import date

from newsdesk_ledger.actions import OperationResult
from newsdesk_ledger.cache import Invalidation
from newsdesk_ledger.errors import NotFoundError


class TestOperationResult:
    def test_to_dict_omits_empty_fields(self):
        assert OperationResult(success=True).to_dict() == {"success": True}
        assert OperationResult(success=True, warning="w", data=[]).to_dict() == {
            "success": True,
            "warning": "w",
            "data": [],
        }


class TestRunOperation:
    """Outcome translation and post-commit invalidation."""

    async def test_ledger_error_keeps_public_message(self, actions, cache):
        cache.set("business-data", {}, tags=("business",))

        async def missing(session):
            raise NotFoundError("Order", "abc")

        result = await actions.run_operation(
            "tally",
            missing,
            failure_message="Failed",
            invalidation=Invalidation(tags=("business",)),
        )

        assert result == OperationResult(success=False, error="Order not found", code="NOT_FOUND")
        assert cache.get("business-data") == {}

    async def test_unexpected_error_is_logged_not_leaked(self, actions, caplog):
        async def explode(session):
            raise RuntimeError("password=hunter2")

        result = await actions.run_operation("tally", explode, failure_message="Failed to tally")

        assert result.error == "Failed to tally"
        assert result.code == "OPERATION_FAILED"
        assert "hunter2" not in result.to_dict().values()
        assert any("Error in tally" in r.message for r in caplog.records)

    async def test_success_applies_invalidation(self, actions, cache):
        cache.set("business-data", {}, tags=("business",))

        async def noop(session):
            return {"ok": True}

        result = await actions.run_operation(
            "tally",
            noop,
            failure_message="Failed",
            invalidation=Invalidation(tags=("business",), paths=("/admin/business",)),
        )

        assert result.data == {"ok": True}
        assert cache.get("business-data") is None
        assert cache.pop_stale_paths() == {"/admin/business"}

    async def test_validation_error_surfaces(self, actions, admin, order):
        result = await actions.add_employee_payment(
            admin,
            order_id=str(order.id),
            amount="-5",
            payment_date=date(2024, 3, 15),
            payment_method="CASH",
        )
        assert result.success is False
        assert result.code == "VALIDATION_ERROR"
        assert result.error == "Amount must be positive"
