from __future__ import annotations

import asyncio
from datetime import date

import pytest

from core.dispatcher import NotificationDispatcher, PlatformContext, send_notifications
from core.i18n import Translation
from core.models import Account, DispatchOptions, Group, Notification, Transaction
from core.notification_classes import BALANCE_LOWER, NotificationClass


class FakeStore:
    def __init__(self, accounts: list[Account], groups: list[Group] | None = None) -> None:
        self._accounts = {account.id: account for account in accounts}
        self._groups = groups or []

    def get_accounts(self, ids) -> list[Account]:
        return [self._accounts[i] for i in ids if i in self._accounts]

    def get_groups(self) -> list[Group]:
        return list(self._groups)


class BrokenGroupsStore(FakeStore):
    def get_groups(self) -> list[Group]:
        raise ConnectionError("groups unavailable")


class FakeNotifier:
    def __init__(self, fail_for: set[str] | None = None) -> None:
        self.sent: list[Notification] = []
        self._fail_for = fail_for or set()

    async def send(self, notification: Notification) -> None:
        if notification.category in self._fail_for:
            raise RuntimeError(f"cannot deliver {notification.category}")
        self.sent.append(notification)


class RecordingClass:
    """Builds a notification and remembers the options it received."""

    def __init__(self, key: str, multiple: bool = False, fail: bool = False) -> None:
        self.options: list[DispatchOptions] = []
        self._fail = fail
        self.descriptor = NotificationClass(
            setting_key=key,
            build=self._build,
            supports_multiple_rules=multiple,
        )

    def _build(self, options: DispatchOptions) -> Notification:
        self.options.append(options)
        if self._fail:
            raise ValueError("broken template")
        return Notification(category=self.descriptor.setting_key, title="title")


def _context(store, notifier) -> PlatformContext:
    return PlatformContext(
        client=object(),
        store=store,
        notifier=notifier,
        translation=Translation("en", {"hello": "Hello %{name}"}),
    )


def _tx(tx_id: str, account: str, amount: float = -10.0) -> Transaction:
    return Transaction(id=tx_id, account=account, date=date(2024, 1, 1), amount=amount)


def test_balance_lower_scenario_sends_once_with_reconciled_accounts() -> None:
    account = Account(id="A1", label="Main", balance=50.0)
    notifier = FakeNotifier()
    dispatcher = NotificationDispatcher(_context(FakeStore([account]), notifier))
    config = {"balanceLower": {"enabled": True, "threshold": 100}}

    assert dispatcher.enabled_classes(config) == [BALANCE_LOWER]

    asyncio.run(dispatcher.send_notifications(config, [_tx("t1", "A1")]))

    assert len(notifier.sent) == 1
    assert notifier.sent[0].category == "balanceLower"
    assert notifier.sent[0].data["account_ids"] == ["A1"]


def test_disabled_configuration_sends_nothing() -> None:
    notifier = FakeNotifier()
    store = FakeStore([Account(id="A1", label="Main", balance=0.0)])
    config = {"balanceLower": {"enabled": False}}

    asyncio.run(send_notifications(config, [_tx("t1", "A1")], _context(store, notifier)))

    assert notifier.sent == []


def test_missing_account_still_dispatches_with_empty_accounts(caplog) -> None:
    caplog.set_level("WARNING", logger="core.accounts")
    recorder = RecordingClass("custom")
    notifier = FakeNotifier()
    dispatcher = NotificationDispatcher(_context(FakeStore([]), notifier), [recorder.descriptor])

    asyncio.run(dispatcher.send_notifications({"custom": {"enabled": True}}, [_tx("t1", "A2")]))

    assert recorder.options[0].data.accounts == []
    assert len(notifier.sent) == 1
    assert "A2" in caplog.text


def test_one_failing_class_does_not_block_the_others(caplog) -> None:
    caplog.set_level("WARNING", logger="core.dispatcher")
    first = RecordingClass("first")
    broken = RecordingClass("broken", fail=True)
    last = RecordingClass("last")
    notifier = FakeNotifier()
    dispatcher = NotificationDispatcher(
        _context(FakeStore([]), notifier),
        [first.descriptor, broken.descriptor, last.descriptor],
    )
    config = {key: {"enabled": True} for key in ("first", "broken", "last")}

    asyncio.run(dispatcher.send_notifications(config, []))

    assert [n.category for n in notifier.sent] == ["first", "last"]
    assert len(broken.options) == 1
    assert "Failed to send broken notification" in caplog.text
    assert '"name": "ValueError"' in caplog.text


def test_delivery_failure_is_contained() -> None:
    first = RecordingClass("first")
    second = RecordingClass("second")
    third = RecordingClass("third")
    notifier = FakeNotifier(fail_for={"second"})
    dispatcher = NotificationDispatcher(
        _context(FakeStore([]), notifier),
        [first.descriptor, second.descriptor, third.descriptor],
    )
    config = {key: {"enabled": True} for key in ("first", "second", "third")}

    asyncio.run(dispatcher.send_notifications(config, []))

    assert [n.category for n in notifier.sent] == ["first", "third"]


def test_store_failure_propagates() -> None:
    recorder = RecordingClass("custom")
    dispatcher = NotificationDispatcher(
        _context(BrokenGroupsStore([]), FakeNotifier()), [recorder.descriptor]
    )
    with pytest.raises(ConnectionError):
        asyncio.run(dispatcher.send_notifications({"custom": {"enabled": True}}, []))
    assert recorder.options == []


def test_multi_rule_class_receives_enabled_rules() -> None:
    recorder = RecordingClass("multi", multiple=True)
    dispatcher = NotificationDispatcher(_context(FakeStore([]), FakeNotifier()), [recorder.descriptor])
    config = {
        "multi": [
            {"enabled": True, "threshold": 1},
            {"enabled": False, "threshold": 2},
            {"enabled": True, "threshold": 3},
        ]
    }

    asyncio.run(dispatcher.send_notifications(config, []))

    options = recorder.options[0]
    assert options.rules == [{"enabled": True, "threshold": 1}, {"enabled": True, "threshold": 3}]
    assert options.fields == {}


def test_single_rule_class_receives_flattened_fields() -> None:
    recorder = RecordingClass("single")
    group = Group(id="g1", label="Family", accounts=("A1",))
    account = Account(id="A1", label="Main", balance=10.0)
    client = object()
    context = PlatformContext(
        client=client,
        store=FakeStore([account], [group]),
        notifier=FakeNotifier(),
        translation=Translation("en", {"hello": "Hello %{name}"}),
    )
    dispatcher = NotificationDispatcher(context, [recorder.descriptor])
    transactions = [_tx("t1", "A1")]

    asyncio.run(
        dispatcher.send_notifications({"single": {"enabled": True, "days": 4, "client": "x"}}, transactions)
    )

    options = recorder.options[0]
    assert options.rules == []
    assert options.option("days") == 4
    # Rule fields never shadow the shared context.
    assert options.client is client
    assert options.option("client") == "x"
    assert options.lang == "en"
    assert options.locales == {"en": {"hello": "Hello %{name}"}}
    assert options.t("hello", name="Ana") == "Hello Ana"
    assert options.data.accounts == [account]
    assert options.data.groups == [group]
    assert options.data.transactions == transactions


def test_builder_returning_none_sends_nothing() -> None:
    descriptor = NotificationClass(setting_key="quiet", build=lambda options: None)
    notifier = FakeNotifier()
    dispatcher = NotificationDispatcher(_context(FakeStore([]), notifier), [descriptor])

    asyncio.run(dispatcher.send_notifications({"quiet": {"enabled": True}}, []))

    assert notifier.sent == []


def test_numeric_account_references_reach_the_notification() -> None:
    store = FakeStore([Account.from_dict({"id": 7, "label": "Main", "balance": 10})])
    notifier = FakeNotifier()
    transactions = [Transaction.from_dict({"id": 1, "account": 7, "date": "2024-01-01", "amount": -5})]

    asyncio.run(
        send_notifications(
            {"balanceLower": {"enabled": True, "threshold": 100}},
            transactions,
            _context(store, notifier),
        )
    )

    assert [n.data["account_ids"] for n in notifier.sent] == [["7"]]


def test_builders_cannot_change_the_configuration() -> None:
    def _mutating_build(options: DispatchOptions) -> None:
        for rule in options.rules:
            rule["threshold"] = 0
        return None

    descriptor = NotificationClass(setting_key="multi", build=_mutating_build, supports_multiple_rules=True)
    dispatcher = NotificationDispatcher(_context(FakeStore([]), FakeNotifier()), [descriptor])
    config = {"multi": [{"enabled": True, "threshold": 5}]}

    asyncio.run(dispatcher.send_notifications(config, []))

    assert config == {"multi": [{"enabled": True, "threshold": 5}]}
