"""Ports (interfaces) used by the core services.

Ports define the minimal contracts for storage, delivery and categorization
adapters so that the core can be reused with different backends.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Protocol

from core.models import Account, Group, Notification, Transaction


class StorePort(Protocol):
    """Document store operations required by the core services."""

    def get_accounts(self, ids: Iterable[str]) -> list[Account]:
        ...

    def get_groups(self) -> list[Group]:
        ...

    def get_transactions_to_categorize(self) -> list[Transaction]:
        ...

    def save_transactions(self, transactions: Iterable[Transaction]) -> None:
        ...

    def get_settings(self) -> Optional[dict[str, Any]]:
        ...

    def save_settings(self, settings: dict[str, Any]) -> None:
        ...


class NotifierPort(Protocol):
    """Notification delivery required by the dispatcher."""

    async def send(self, notification: Notification) -> None:
        ...


class CategorizerPort(Protocol):
    """Opaque categorization model."""

    def categorize(self, transactions: list[Transaction]) -> list[Transaction]:
        ...
