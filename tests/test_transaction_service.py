"""Tests for manual ledger entries and their authorization."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from newsdesk_ledger.errors import ForbiddenError, NotFoundError, UnauthorizedError, ValidationError
from newsdesk_ledger.models import LedgerTransaction, User
from newsdesk_ledger.services import TransactionService


def _create(identity, **kwargs):
    kwargs.setdefault("type", "EXPENSE")
    kwargs.setdefault("amount", "120.00")
    kwargs.setdefault("description", "Printer paper")
    kwargs.setdefault("date", date(2024, 3, 15))
    return lambda s: TransactionService(s).create_transaction(identity, **kwargs)


async def _count(run) -> int:
    return await run(lambda s: s.scalar(select(func.count()).select_from(LedgerTransaction)))


@pytest.fixture
def users(admin, chief_editor, editor, author):
    return {
        "admin": admin,
        "chief_editor": chief_editor,
        "editor": editor,
        "author": author,
    }


class TestCreateTransaction:
    """Create requires a privileged role."""

    @pytest.mark.parametrize("who", ["admin", "chief_editor"])
    async def test_privileged_roles_succeed(self, run, users, who):
        identity = users[who]

        entry = await run(_create(identity, category="office"))

        assert entry.type == "EXPENSE"
        assert Decimal(str(entry.amount)) == Decimal("120.00")
        assert entry.category == "office"
        assert entry.created_by_id == identity.id
        assert await _count(run) == 1

    @pytest.mark.parametrize("who", ["editor", "author"])
    async def test_other_roles_forbidden(self, run, users, who):
        identity = users[who]

        with pytest.raises(ForbiddenError):
            await run(_create(identity))
        assert await _count(run) == 0

    async def test_no_identity(self, run):
        with pytest.raises(UnauthorizedError):
            await run(_create(None))

    async def test_type_normalized(self, run, admin):
        entry = await run(_create(admin, type="income"))
        assert entry.type == "INCOME"

    @pytest.mark.parametrize("field,value", [("type", "REFUND"), ("amount", "0")])
    async def test_invalid_values(self, run, admin, field, value):
        with pytest.raises(ValidationError):
            await run(_create(admin, **{field: value}))

    async def test_demoted_user_loses_access(self, run, admin):
        """The role is re-read from the stored user on every call."""

        async def demote(s):
            user = await s.get(User, admin.id)
            user.role = "EDITOR"

        await run(demote)

        with pytest.raises(ForbiddenError):
            await run(_create(admin))


class TestUpdateDeleteTransaction:
    """Update and delete share the same privileged policy."""

    async def test_update_by_chief_editor(self, run, admin, chief_editor):
        entry = await run(_create(admin))

        updated = await run(
            lambda s: TransactionService(s).update_transaction(
                chief_editor, entry.id, amount="99.90", description="Toner"
            )
        )

        assert Decimal(str(updated.amount)) == Decimal("99.90")
        assert updated.description == "Toner"

    async def test_update_clears_category(self, run, admin):
        entry = await run(_create(admin, category="office"))

        updated = await run(
            lambda s: TransactionService(s).update_transaction(admin, entry.id, category=None)
        )

        assert updated.category is None
        assert updated.description == "Printer paper"

    async def test_update_forbidden_for_editor(self, run, admin, editor):
        entry = await run(_create(admin))
        with pytest.raises(ForbiddenError):
            await run(lambda s: TransactionService(s).update_transaction(editor, entry.id, amount="1"))

    async def test_delete_forbidden_leaves_row(self, actions, run, admin, author):
        entry = await run(_create(admin))

        result = await actions.delete_transaction(author, str(entry.id))

        assert result.success is False
        assert result.code == "FORBIDDEN"
        assert await _count(run) == 1

    async def test_delete_by_admin(self, actions, run, admin):
        entry = await run(_create(admin))

        result = await actions.delete_transaction(admin, str(entry.id))

        assert result.success is True
        assert await _count(run) == 0

    async def test_delete_missing(self, run, admin):
        with pytest.raises(NotFoundError):
            await run(lambda s: TransactionService(s).delete_transaction(admin, uuid4()))
