"""Deterministic keyword categorizer.

Rules are evaluated in the configured order and the first pattern found in
the transaction label wins.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, List, Mapping

from core.models import Transaction

MATCH_PROBA = 1.0
NO_MATCH_PROBA = 0.0


class KeywordCategorizer:
    def __init__(self, rules: Iterable[Mapping[str, str]]) -> None:
        self._rules = [
            (rule["pattern"].lower(), rule["category_id"])
            for rule in rules
            if rule.get("pattern") and rule.get("category_id")
        ]

    def _match(self, label: str) -> str | None:
        lowered = label.lower()
        for pattern, category_id in self._rules:
            if pattern in lowered:
                return category_id
        return None

    def categorize(self, transactions: List[Transaction]) -> List[Transaction]:
        categorized: List[Transaction] = []
        for transaction in transactions:
            category_id = self._match(transaction.label)
            categorized.append(
                replace(
                    transaction,
                    local_category_id=category_id,
                    local_category_proba=MATCH_PROBA if category_id else NO_MATCH_PROBA,
                )
            )
        return categorized
