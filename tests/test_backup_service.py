"""Tests for backup export, restore and file rotation."""

import json
from datetime import date, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from newsdesk_ledger.database import create_schema, make_session_factory
from newsdesk_ledger.errors import ValidationError
from newsdesk_ledger.models import LedgerTransaction, Order
from newsdesk_ledger.services import BackupService, EmployeePaymentService, PaymentService
from newsdesk_ledger.services.backup_service import COLLECTIONS, load_backup_file, prune_backups

RESTORE_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def empty_factory():
    """Second, empty database to restore into."""
    engine = create_async_engine(
        RESTORE_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await create_schema(engine)
    yield make_session_factory(engine)
    await engine.dispose()


async def _restore(factory, payload):
    async with factory() as session:
        async with session.begin():
            return await BackupService(session).restore_backup(payload)


async def _counts(factory) -> dict[str, int]:
    async with factory() as session:
        return {
            name: await session.scalar(select(func.count()).select_from(model))
            for name, model in COLLECTIONS.items()
        }


@pytest_asyncio.fixture
async def populated(run, admin, editor, order):
    """Order with one customer payment and one payout."""
    await run(
        lambda s: PaymentService(s).add_payment(
            editor,
            order_id=order.id,
            amount="300.00",
            payment_date=date(2024, 3, 15),
            payment_method="CASH",
        )
    )
    await run(
        lambda s: EmployeePaymentService(s).add_employee_payment(
            admin,
            order_id=order.id,
            amount="500.00",
            payment_date=date(2024, 3, 15),
            payment_method="CASH",
            employee_name="Ivan",
        )
    )
    return order


class TestExportRestore:
    """Round trip through the JSON payload."""

    async def test_export_shape(self, run, populated):
        backup = await run(lambda s: BackupService(s).export_backup())

        assert backup["version"] == "1.0"
        assert set(backup["data"]) == set(COLLECTIONS)
        assert len(backup["data"]["orders"]) == 1
        assert len(backup["data"]["employee_payments"]) == 1
        # Payload must be plain JSON
        json.dumps(backup)

    async def test_restore_into_empty_database(self, run, session_factory, empty_factory, populated):
        backup = await run(lambda s: BackupService(s).export_backup())

        counts = await _restore(empty_factory, backup)

        assert counts == await _counts(session_factory)
        assert await _counts(empty_factory) == await _counts(session_factory)

        async with empty_factory() as session:
            restored = await session.get(Order, populated.id)
        assert Decimal(str(restored.employee_paid_amount)) == Decimal("500.00")
        assert restored.client == "Acme Bakery"

    async def test_restore_is_an_upsert(self, run, session_factory, populated):
        backup = await run(lambda s: BackupService(s).export_backup())
        backup["data"]["orders"][0]["client"] = "Acme Bakery Ltd"

        await _restore(session_factory, backup)

        async with session_factory() as session:
            order = await session.get(Order, populated.id)
            total = await session.scalar(select(func.count()).select_from(Order))
        assert order.client == "Acme Bakery Ltd"
        assert total == 1

    async def test_orphaned_references_accepted(self, empty_factory):
        """Restore performs no referential validation on weak links."""
        missing_order = str(uuid4())
        payload = {
            "data": {
                "orders": [
                    {
                        "id": str(uuid4()),
                        "client": "Ghost Co",
                        "description": "",
                        "employee_id": str(uuid4()),
                        "created_by_id": str(uuid4()),
                        "total_price": "10.00",
                        "employee_paid_amount": "0",
                    }
                ],
                "transactions": [
                    {
                        "id": str(uuid4()),
                        "type": "EXPENSE",
                        "amount": "25.00",
                        "date": "2024-03-15",
                        "description": "Payout to nobody",
                        "order_id": missing_order,
                        "employee_payment_id": str(uuid4()),
                    }
                ],
            }
        }

        counts = await _restore(empty_factory, payload)

        assert counts["orders"] == 1
        assert counts["transactions"] == 1
        assert counts["users"] == 0
        async with empty_factory() as session:
            entry = await session.scalar(select(LedgerTransaction))
        assert str(entry.order_id) == missing_order

    @pytest.mark.parametrize("payload", [{}, {"timestamp": "x"}, {"data": []}])
    async def test_missing_data_rejected(self, empty_factory, payload):
        with pytest.raises(ValidationError):
            await _restore(empty_factory, payload)


class TestBackupFiles:
    """Daily files and rotation."""

    async def test_write_and_load(self, session, populated, tmp_path):
        path = await BackupService(session).write_backup_file(tmp_path, today=date(2024, 3, 15))

        assert path.name == "backup_2024-03-15.json"
        loaded = load_backup_file(path)
        assert len(loaded["data"]["orders"]) == 1

    async def test_rotation_keeps_newest_seven(self, session, tmp_path):
        start = date(2024, 3, 1)
        for offset in range(9):
            await BackupService(session).write_backup_file(tmp_path, keep=7, today=start + timedelta(days=offset))

        names = sorted(p.name for p in tmp_path.glob("backup_*.json"))
        assert len(names) == 7
        assert names[0] == "backup_2024-03-03.json"
        assert names[-1] == "backup_2024-03-09.json"

    def test_prune_ignores_other_files(self, tmp_path):
        (tmp_path / "notes.txt").write_text("keep me")
        for day in range(1, 4):
            (tmp_path / f"backup_2024-01-0{day}.json").write_text("{}")

        removed = prune_backups(tmp_path, keep=1)

        assert [p.name for p in removed] == ["backup_2024-01-02.json", "backup_2024-01-01.json"]
        assert (tmp_path / "notes.txt").exists()
