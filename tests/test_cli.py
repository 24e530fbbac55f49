"""Tests for the operational CLI."""

import json

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from newsdesk_ledger.cli import LedgerCli
from newsdesk_ledger.database import make_session_factory


@pytest.fixture
def cli(tmp_path) -> LedgerCli:
    """CLI bound to a file database; every command runs in its own event loop."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}", poolclass=NullPool)
    cli = LedgerCli(make_session_factory(engine))
    assert cli.run(["init-db"]) == 0
    return cli


class TestLedgerCli:
    def test_no_command_prints_help(self, cli):
        assert cli.run([]) == 1

    def test_backup_then_restore(self, cli, tmp_path, capsys):
        backup_dir = tmp_path / "backups"

        assert cli.run(["backup", "--dir", str(backup_dir), "--keep", "3"]) == 0

        files = list(backup_dir.glob("backup_*.json"))
        assert len(files) == 1
        payload = json.loads(files[0].read_text())
        assert payload["version"] == "1.0"

        assert cli.run(["restore", str(files[0])]) == 0
        assert "Restore complete" in capsys.readouterr().out

    def test_restore_missing_file(self, cli, tmp_path):
        assert cli.run(["restore", str(tmp_path / "nope.json")]) == 1

    def test_restore_invalid_payload(self, cli, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"version": "1.0"}))

        assert cli.run(["restore", str(path)]) == 1
        assert "Invalid backup format" in capsys.readouterr().err

    def test_verify_empty_database(self, cli, capsys):
        assert cli.run(["verify"]) == 0
        assert "All payout totals match" in capsys.readouterr().out

    def test_verify_unknown_order(self, cli):
        assert cli.run(["verify", "--order-id", "not-an-id"]) == 1
