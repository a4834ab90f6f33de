"""Resolve the accounts and groups a batch of transactions refers to."""

from __future__ import annotations

import logging
from typing import Iterable, List

from core.models import Account, Group, Transaction
from core.ports import StorePort

LOGGER = logging.getLogger(__name__)


def resolve_accounts(transactions: Iterable[Transaction], store: StorePort) -> List[Account]:
    """Fetch the accounts referenced by ``transactions`` in one lookup.

    Referenced accounts missing from the store are reported and skipped, so
    callers must accept fewer accounts than referenced ids.
    """

    account_ids = {transaction.account for transaction in transactions if transaction.account}
    accounts = store.get_accounts(sorted(account_ids))
    existing_ids = {account.id for account in accounts}
    absent_ids = account_ids - existing_ids

    if absent_ids:
        LOGGER.warning(
            "%s account(s) do not exist (ids: %s)",
            len(absent_ids),
            ",".join(sorted(map(str, absent_ids))),
        )

    return list(accounts)


def fetch_groups(store: StorePort) -> List[Group]:
    return list(store.get_groups())
