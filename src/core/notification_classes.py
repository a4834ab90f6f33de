"""Notification kinds known to the dispatcher.

Each kind is a descriptor record holding its settings key and the
capabilities the dispatcher calls, rather than a subclass of a base
notification type.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Callable, Iterable, List, Mapping, Optional

from core.models import Account, DispatchOptions, Notification, Transaction

CURRENCY = "€"
HEALTH_CATEGORY_PREFIX = "4006"
REIMBURSED = "reimbursed"
CREDIT_CARD = "CreditCard"
MAX_RULE_DAYS = 3650


@dataclass(frozen=True)
class NotificationClass:
    setting_key: str
    build: Callable[[DispatchOptions], Optional[Notification]]
    supports_multiple_rules: bool = False
    is_valid_rule: Optional[Callable[[Mapping[str, Any]], bool]] = None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _has_numeric_threshold(rule: Mapping[str, Any]) -> bool:
    return _is_number(rule.get("threshold"))


def _has_positive_days(rule: Mapping[str, Any]) -> bool:
    days = rule.get("days")
    return _is_number(days) and 0 < days <= MAX_RULE_DAYS


def _format_amount(value: float) -> str:
    return f"{value:,.2f}"


def _account_ids_for_rule(rule: Mapping[str, Any], options: DispatchOptions) -> Optional[set[str]]:
    """Return the account ids a rule is restricted to, or None for all accounts."""

    target = rule.get("account_or_group")
    if not isinstance(target, Mapping):
        return None
    if target.get("type") == "group":
        for group in options.data.groups:
            if group.id == str(target.get("id")):
                return set(group.accounts)
        return set()
    return {str(target.get("id"))}


def _is_health_expense(transaction: Transaction) -> bool:
    category = transaction.category_id or transaction.local_category_id or ""
    return transaction.amount < 0 and category.startswith(HEALTH_CATEGORY_PREFIX)


def _unique(items: Iterable[Any]) -> List[Any]:
    seen: set[str] = set()
    unique: List[Any] = []
    for item in items:
        if item.id in seen:
            continue
        seen.add(item.id)
        unique.append(item)
    return unique


def build_balance_lower(options: DispatchOptions) -> Optional[Notification]:
    matched: List[Account] = []
    thresholds: List[float] = []
    for rule in options.rules:
        threshold = rule["threshold"]
        allowed = _account_ids_for_rule(rule, options)
        hits = [
            account
            for account in options.data.accounts
            if account.balance < threshold and (allowed is None or account.id in allowed)
        ]
        if hits:
            matched.extend(hits)
            thresholds.append(threshold)

    accounts = _unique(matched)
    if not accounts:
        return None

    title = options.t(
        "notifications.balance_lower.title",
        smart_count=len(accounts),
        threshold=_format_amount(max(thresholds)),
        currency=CURRENCY,
    )
    body = tuple(
        options.t(
            "notifications.balance_lower.line",
            label=account.label,
            balance=_format_amount(account.balance),
            currency=CURRENCY,
        )
        for account in accounts
    )
    return Notification(
        category="balanceLower",
        title=title,
        body=body,
        data={"route": "balances", "account_ids": [account.id for account in accounts]},
    )


def build_transaction_greater(options: DispatchOptions) -> Optional[Notification]:
    matched: List[Transaction] = []
    thresholds: List[float] = []
    for rule in options.rules:
        threshold = rule["threshold"]
        allowed = _account_ids_for_rule(rule, options)
        hits = [
            transaction
            for transaction in options.data.transactions
            if abs(transaction.amount) > threshold
            and (allowed is None or transaction.account in allowed)
        ]
        if hits:
            matched.extend(hits)
            thresholds.append(threshold)

    transactions = _unique(matched)
    if not transactions:
        return None

    title = options.t(
        "notifications.transaction_greater.title",
        smart_count=len(transactions),
        threshold=_format_amount(min(thresholds)),
        currency=CURRENCY,
    )
    body = tuple(
        options.t(
            "notifications.transaction_greater.line",
            label=transaction.label,
            amount=_format_amount(transaction.amount),
            currency=CURRENCY,
            date=transaction.date.isoformat(),
        )
        for transaction in transactions
    )
    return Notification(
        category="transactionGreater",
        title=title,
        body=body,
        data={"route": "transactions", "transaction_ids": [t.id for t in transactions]},
    )


def build_health_bill_linked(options: DispatchOptions) -> Optional[Notification]:
    transactions = [
        transaction
        for transaction in options.data.transactions
        if _is_health_expense(transaction) and transaction.bills
    ]
    if not transactions:
        return None

    title = options.t("notifications.health_bill_linked.title", smart_count=len(transactions))
    body = tuple(
        options.t(
            "notifications.health_bill_linked.line",
            label=transaction.label,
            amount=_format_amount(transaction.amount),
            currency=CURRENCY,
            bills=len(transaction.bills),
        )
        for transaction in transactions
    )
    return Notification(
        category="healthBillLinked",
        title=title,
        body=body,
        data={"route": "reimbursements", "transaction_ids": [t.id for t in transactions]},
    )


def build_late_health_reimbursement(options: DispatchOptions) -> Optional[Notification]:
    days = options.option("days")
    cutoff = date.today() - timedelta(days=days)
    transactions = [
        transaction
        for transaction in options.data.transactions
        if _is_health_expense(transaction)
        and transaction.date < cutoff
        and transaction.reimbursement_status != REIMBURSED
    ]
    if not transactions:
        return None

    title = options.t(
        "notifications.late_health_reimbursement.title",
        smart_count=len(transactions),
        days=days,
    )
    body = tuple(
        options.t(
            "notifications.late_health_reimbursement.line",
            label=transaction.label,
            amount=_format_amount(transaction.amount),
            currency=CURRENCY,
            date=transaction.date.isoformat(),
        )
        for transaction in transactions
    )
    return Notification(
        category="lateHealthReimbursement",
        title=title,
        body=body,
        data={"route": "reimbursements", "transaction_ids": [t.id for t in transactions]},
    )


def build_delayed_debit(options: DispatchOptions) -> Optional[Notification]:
    days = options.option("days")
    horizon = date.today() + timedelta(days=days)
    by_id = {account.id: account for account in options.data.accounts}

    lines: List[str] = []
    card_ids: List[str] = []
    for card in options.data.accounts:
        if card.type != CREDIT_CARD or card.debit_date is None or not card.coming_balance:
            continue
        if not date.today() <= card.debit_date <= horizon:
            continue
        checking = by_id.get(card.checking_account)
        if checking is None:
            continue
        if checking.balance + card.coming_balance >= 0:
            continue
        card_ids.append(card.id)
        lines.append(
            options.t(
                "notifications.delayed_debit.line",
                card=card.label,
                amount=_format_amount(card.coming_balance),
                currency=CURRENCY,
                date=card.debit_date.isoformat(),
                checking=checking.label,
                balance=_format_amount(checking.balance),
            )
        )

    if not card_ids:
        return None

    return Notification(
        category="delayedDebit",
        title=options.t("notifications.delayed_debit.title", smart_count=len(card_ids)),
        body=tuple(lines),
        data={"route": "balances", "account_ids": card_ids},
    )


BALANCE_LOWER = NotificationClass(
    setting_key="balanceLower",
    build=build_balance_lower,
    supports_multiple_rules=True,
    is_valid_rule=_has_numeric_threshold,
)

TRANSACTION_GREATER = NotificationClass(
    setting_key="transactionGreater",
    build=build_transaction_greater,
    supports_multiple_rules=True,
    is_valid_rule=_has_numeric_threshold,
)

HEALTH_BILL_LINKED = NotificationClass(
    setting_key="healthBillLinked",
    build=build_health_bill_linked,
)

LATE_HEALTH_REIMBURSEMENT = NotificationClass(
    setting_key="lateHealthReimbursement",
    build=build_late_health_reimbursement,
    is_valid_rule=_has_positive_days,
)

DELAYED_DEBIT = NotificationClass(
    setting_key="delayedDebit",
    build=build_delayed_debit,
    is_valid_rule=_has_positive_days,
)

NOTIFICATION_CLASSES = (
    BALANCE_LOWER,
    TRANSACTION_GREATER,
    HEALTH_BILL_LINKED,
    LATE_HEALTH_REIMBURSEMENT,
    DELAYED_DEBIT,
)
