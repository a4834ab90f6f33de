"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any storage or delivery specific types.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Callable, Mapping, Optional


def _parse_date(value: Any) -> Optional[date]:
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _optional_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _optional_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)


@dataclass(frozen=True)
class Transaction:
    """A bank operation imported by a connector."""

    id: str
    account: Optional[str]
    date: date
    amount: float
    label: str = ""
    category_id: Optional[str] = None
    to_categorize: bool = False
    local_category_id: Optional[str] = None
    local_category_proba: Optional[float] = None
    bills: tuple[str, ...] = ()
    reimbursement_status: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Transaction":
        return cls(
            id=str(raw["id"]),
            account=_optional_str(raw.get("account")),
            date=_parse_date(raw["date"]),
            amount=float(raw.get("amount", 0)),
            label=raw.get("label", ""),
            category_id=raw.get("category_id"),
            to_categorize=bool(raw.get("to_categorize", False)),
            local_category_id=raw.get("local_category_id"),
            local_category_proba=raw.get("local_category_proba"),
            bills=tuple(raw.get("bills") or ()),
            reimbursement_status=raw.get("reimbursement_status"),
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["date"] = self.date.isoformat()
        data["bills"] = list(self.bills)
        return data


@dataclass(frozen=True)
class Account:
    """A bank account. Credit cards reference the account they are debited from."""

    id: str
    label: str
    balance: float
    type: str = "Checkings"
    coming_balance: Optional[float] = None
    checking_account: Optional[str] = None
    debit_date: Optional[date] = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Account":
        return cls(
            id=str(raw["id"]),
            label=raw.get("label", ""),
            balance=float(raw.get("balance", 0)),
            type=raw.get("type", "Checkings"),
            coming_balance=_optional_float(raw.get("coming_balance")),
            checking_account=_optional_str(raw.get("checking_account")),
            debit_date=_parse_date(raw.get("debit_date")),
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        if self.debit_date is not None:
            data["debit_date"] = self.debit_date.isoformat()
        return data


@dataclass(frozen=True)
class Group:
    """A user-defined collection of accounts."""

    id: str
    label: str
    accounts: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Group":
        return cls(
            id=str(raw["id"]),
            label=raw.get("label", ""),
            accounts=tuple(str(account_id) for account_id in raw.get("accounts") or ()),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "label": self.label, "accounts": list(self.accounts)}


@dataclass(frozen=True)
class Notification:
    """A constructed notification, ready to be handed to a notifier."""

    category: str
    title: str
    body: tuple[str, ...] = ()
    data: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DispatchData:
    """Data shared by every notification class during one run."""

    accounts: list[Account]
    groups: list[Group]
    transactions: list[Transaction]


@dataclass(frozen=True)
class DispatchOptions:
    """Per-class bundle built fresh for every class of every run.

    Multi-rule classes read ``rules``. Single-rule classes read their rule
    fields from ``fields`` through :meth:`option`.
    """

    client: Any
    t: Callable[..., str]
    locales: Mapping[str, Mapping[str, Any]]
    lang: str
    data: DispatchData
    rules: list[Mapping[str, Any]] = field(default_factory=list)
    fields: Mapping[str, Any] = field(default_factory=dict)

    def option(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)
