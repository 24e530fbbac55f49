"""Full-database JSON backup and restore.

Backups are keyed by collection name. Restore upserts every record by
primary key without validating references: orphaned foreign keys are
accepted as they are.
"""

from __future__ import annotations

import json
import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any
from uuid import UUID

from sqlalchemy import Date, DateTime, Numeric, Uuid, select
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk_ledger.errors import ValidationError
from newsdesk_ledger.models import (
    Base,
    EmployeePayment,
    LedgerTransaction,
    Notification,
    Order,
    Payment,
    User,
)
from newsdesk_ledger.serialization import row_to_json

logger = logging.getLogger(__name__)

BACKUP_VERSION = "1.0"
BACKUP_PREFIX = "backup_"

# Restore order: referenced collections first
COLLECTIONS: dict[str, type[Base]] = {
    "users": User,
    "orders": Order,
    "payments": Payment,
    "employee_payments": EmployeePayment,
    "transactions": LedgerTransaction,
    "notifications": Notification,
}


def _coerce(column_type: Any, value: Any) -> Any:
    """Turn a JSON value back into the column's Python type."""
    if value is None:
        return None
    if isinstance(column_type, Uuid):
        return value if isinstance(value, UUID) else UUID(str(value))
    if isinstance(column_type, DateTime):
        return datetime.fromisoformat(value) if isinstance(value, str) else value
    if isinstance(column_type, Date):
        return date.fromisoformat(value[:10]) if isinstance(value, str) else value
    if isinstance(column_type, Numeric):
        return Decimal(str(value))
    return value


class BackupService:
    """Exports and restores every ledger collection."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def export_backup(self) -> dict[str, Any]:
        """Dump all collections into a JSON-safe dict."""
        data: dict[str, list[dict[str, Any]]] = {}
        for name, model in COLLECTIONS.items():
            rows = (await self.session.scalars(select(model))).all()
            data[name] = [row_to_json(row) for row in rows]

        return {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": BACKUP_VERSION,
            "data": data,
        }

    async def restore_backup(self, backup: dict[str, Any]) -> dict[str, int]:
        """Upsert every record of a backup by primary key.

        Returns the number of records restored per collection.

        Raises:
            ValidationError: If the payload has no "data" section
        """
        if not isinstance(backup, dict) or not isinstance(backup.get("data"), dict):
            raise ValidationError('Invalid backup format: missing "data" property')

        counts: dict[str, int] = {}
        for name, model in COLLECTIONS.items():
            records = backup["data"].get(name) or []
            columns = {attr.key: attr.columns[0] for attr in model.__mapper__.column_attrs}
            for record in records:
                values = {
                    key: _coerce(columns[key].type, value)
                    for key, value in record.items()
                    if key in columns
                }
                await self.session.merge(model(**values))
            counts[name] = len(records)
            if records:
                logger.info("Restored %d %s", len(records), name)

        await self.session.flush()
        return counts

    async def write_backup_file(
        self,
        directory: str | Path,
        keep: int = 7,
        today: date | None = None,
    ) -> Path:
        """Write backup_YYYY-MM-DD.json into directory and prune old files.

        Only the newest `keep` backups are retained.
        """
        backup_dir = Path(directory)
        backup_dir.mkdir(parents=True, exist_ok=True)

        payload = await self.export_backup()
        day = (today or datetime.now(timezone.utc).date()).isoformat()
        path = backup_dir / f"{BACKUP_PREFIX}{day}.json"
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        logger.info("Saved backup to %s", path)

        for old in prune_backups(backup_dir, keep):
            logger.info("Pruned old backup: %s", old.name)
        return path


def prune_backups(directory: str | Path, keep: int = 7) -> list[Path]:
    """Delete all but the newest `keep` backup files. Returns deleted paths."""
    files = sorted(
        (p for p in Path(directory).glob(f"{BACKUP_PREFIX}*.json") if p.is_file()),
        key=lambda p: p.name,
        reverse=True,
    )
    stale = files[keep:]
    for path in stale:
        path.unlink()
    return stale


def load_backup_file(path: str | Path) -> dict[str, Any]:
    """Read a backup file written by write_backup_file."""
    return json.loads(Path(path).read_text(encoding="utf-8"))
