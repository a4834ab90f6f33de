from __future__ import annotations

from dataclasses import replace
from datetime import date

from adapters.sqlite_storage import SQLiteStore
from core.models import Account, Group, Transaction


def _store(tmp_path) -> SQLiteStore:
    store = SQLiteStore(str(tmp_path / "bankalerts.db"))
    store.init_db()
    return store


def test_get_accounts_skips_unknown_ids(tmp_path) -> None:
    store = _store(tmp_path)
    card = Account(
        id="CC1",
        label="Card",
        balance=0.0,
        type="CreditCard",
        coming_balance=-20.0,
        checking_account="A1",
        debit_date=date(2024, 2, 5),
    )
    store.save_accounts([Account(id="A1", label="Main", balance=12.5), card])

    accounts = store.get_accounts(["A1", "CC1", "missing"])

    assert [account.id for account in accounts] == ["A1", "CC1"]
    assert accounts[1] == card
    assert store.get_accounts([]) == []


def test_groups_are_returned_in_full(tmp_path) -> None:
    store = _store(tmp_path)
    groups = [Group(id="g1", label="Family", accounts=("A1", "A2")), Group(id="g2", label="Work")]
    store.save_groups(groups)
    assert store.get_groups() == groups


def test_transactions_to_categorize(tmp_path) -> None:
    store = _store(tmp_path)
    pending = Transaction(
        id="t1",
        account="A1",
        date=date(2024, 1, 2),
        amount=-3.5,
        label="Coffee",
        to_categorize=True,
        bills=("b1",),
    )
    done = Transaction(id="t2", account="A1", date=date(2024, 1, 3), amount=-1.0)
    store.save_transactions([pending, done])

    assert store.get_transactions_to_categorize() == [pending]

    store.save_transactions([replace(pending, to_categorize=False)])
    assert store.get_transactions_to_categorize() == []


def test_settings_document(tmp_path) -> None:
    store = _store(tmp_path)
    assert store.get_settings() is None
    store.save_settings({"notifications": {"healthBillLinked": {"enabled": True}}})
    store.save_settings({"notifications": {"healthBillLinked": {"enabled": False}}})
    assert store.get_settings() == {"notifications": {"healthBillLinked": {"enabled": False}}}
