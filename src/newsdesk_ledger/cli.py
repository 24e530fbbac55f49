"""Ledger Command Line Interface.

Provides operational tools for:
- Daily JSON backups with rotation
- Restoring a backup file
- Verifying (and repairing) order payout totals
- Creating the schema on a fresh database
- Running the API server

Usage:
    python -m newsdesk_ledger.cli backup --dir backups --keep 7
    python -m newsdesk_ledger.cli restore backups/backup_2024-01-31.json
    python -m newsdesk_ledger.cli verify [--order-id X] [--repair]
    python -m newsdesk_ledger.cli init-db
    python -m newsdesk_ledger.cli serve
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Awaitable, Callable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from newsdesk_ledger.cache import RESTORE_INVALIDATION, get_cache
from newsdesk_ledger.config import configure_logging, get_settings
from newsdesk_ledger.database import create_schema, dispose_db, init_db
from newsdesk_ledger.errors import LedgerError
from newsdesk_ledger.services import BackupService, OrderService
from newsdesk_ledger.services.backup_service import load_backup_file

logger = logging.getLogger(__name__)


class LedgerCli:
    """Ledger Command Line Interface."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        self.parser = self._build_parser()
        self._session_factory = session_factory
        self._owns_engine = session_factory is None

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        settings = get_settings()
        parser = argparse.ArgumentParser(
            prog="newsdesk-ledger",
            description="Newsdesk ledger operational tools",
        )
        parser.add_argument(
            "--log-level",
            type=str,
            default=None,
            help=f"Logging level (default: {settings.log_level})",
        )
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        # backup command
        backup = subparsers.add_parser("backup", help="Write today's backup file")
        backup.add_argument(
            "--dir",
            type=str,
            default=settings.backup_dir,
            help=f"Backup directory (default: {settings.backup_dir})",
        )
        backup.add_argument(
            "--keep",
            type=int,
            default=settings.backup_keep,
            help=f"Number of backups to keep (default: {settings.backup_keep})",
        )

        # restore command
        restore = subparsers.add_parser("restore", help="Restore a backup file")
        restore.add_argument("path", type=Path, help="Backup file to restore")

        # verify command
        verify = subparsers.add_parser(
            "verify",
            help="Check employee_paid_amount against payout rows",
        )
        verify.add_argument("--order-id", type=str, help="Verify a single order")
        verify.add_argument(
            "--repair",
            action="store_true",
            help="Overwrite drifted totals with the payout sum",
        )

        subparsers.add_parser("init-db", help="Create all tables")
        subparsers.add_parser("serve", help="Run the API server")

        return parser

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parsed = self.parser.parse_args(args)

        if not parsed.command:
            self.parser.print_help()
            return 1

        configure_logging(parsed.log_level)

        # Dispatch to command handler
        handlers: dict[str, Callable[[argparse.Namespace], int]] = {
            "backup": self._cmd_backup,
            "restore": self._cmd_restore,
            "verify": self._cmd_verify,
            "init-db": self._cmd_init_db,
            "serve": self._cmd_serve,
        }

        handler = handlers.get(parsed.command)
        if handler:
            return handler(parsed)

        print(f"Unknown command: {parsed.command}", file=sys.stderr)
        return 1

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            _, self._session_factory = init_db()
        return self._session_factory

    def _execute(self, coro_fn: Callable[[], Awaitable[int]]) -> int:
        """Run an async command, disposing the global engine afterwards."""

        async def runner() -> int:
            try:
                return await coro_fn()
            finally:
                if self._owns_engine:
                    await dispose_db()
                    self._session_factory = None

        return asyncio.run(runner())

    def _cmd_backup(self, args: argparse.Namespace) -> int:
        """Write backup_YYYY-MM-DD.json and prune old files."""

        async def backup() -> int:
            async with self.session_factory() as session:
                path = await BackupService(session).write_backup_file(args.dir, keep=args.keep)
            print(f"Backup written: {path}")
            return 0

        return self._execute(backup)

    def _cmd_restore(self, args: argparse.Namespace) -> int:
        """Restore a backup file."""
        if not args.path.is_file():
            print(f"Backup file not found: {args.path}", file=sys.stderr)
            return 1

        async def restore() -> int:
            payload = load_backup_file(args.path)
            try:
                async with self.session_factory() as session:
                    async with session.begin():
                        counts = await BackupService(session).restore_backup(payload)
            except LedgerError as exc:
                print(f"Restore failed: {exc.message}", file=sys.stderr)
                return 1
            get_cache().apply(RESTORE_INVALIDATION)
            for name, count in counts.items():
                print(f"  {name}: {count}")
            print("Restore complete")
            return 0

        return self._execute(restore)

    def _cmd_verify(self, args: argparse.Namespace) -> int:
        """Verify payout totals, optionally repairing them."""

        async def verify() -> int:
            async with self.session_factory() as session:
                async with session.begin():
                    service = OrderService(session)
                    try:
                        if args.order_id:
                            order = await service.get_order(args.order_id)
                            ok, errors = await service.verify_order(order.id)
                            problems = {} if ok else {order.id: errors}
                        else:
                            problems = await service.verify_all()
                    except LedgerError as exc:
                        print(f"Verify failed: {exc.message}", file=sys.stderr)
                        return 1

                    for order_id, errors in problems.items():
                        print(f"Order {order_id}:")
                        for error in errors:
                            print(f"  - {error}")
                        if args.repair:
                            total = await service.recompute_employee_paid_amount(order_id)
                            print(f"  repaired: employee_paid_amount = {total}")

            if not problems:
                print("All payout totals match")
                return 0
            return 0 if args.repair else 1

        return self._execute(verify)

    def _cmd_init_db(self, args: argparse.Namespace) -> int:
        """Create all tables."""

        async def init() -> int:
            engine = self.session_factory.kw["bind"]
            await create_schema(engine)
            print("Schema created")
            return 0

        return self._execute(init)

    def _cmd_serve(self, args: argparse.Namespace) -> int:
        """Run the API server."""
        from newsdesk_ledger.__main__ import main as serve

        serve()
        return 0


def main() -> int:
    """CLI entry point."""
    cli = LedgerCli()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
