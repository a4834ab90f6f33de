"""Time-budgeted categorization of imported transactions.

Connectors flag new operations with ``to_categorize``. They are categorized
newest first, chunk by chunk, until the next chunk would probably not fit in
the remaining time budget. Whatever is left stays flagged for the next run.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace
from typing import Callable, List

from core.config import CategorizationConfig
from core.models import Transaction
from core.ports import CategorizerPort, StorePort

LOGGER = logging.getLogger(__name__)

CHUNK_SIZE = 100
LOCAL_MODEL_USAGE_THRESHOLD = 0.8


@dataclass(frozen=True)
class CategorizationResult:
    categorized: int
    remaining: int


class TimeBudget:
    """Track elapsed time and the slowest chunk seen so far."""

    def __init__(self, time_limit: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.clock = clock
        self._start = clock()
        self.time_limit = time_limit
        self.highest_time = 0.0

    def record(self, elapsed: float) -> None:
        self.highest_time = max(self.highest_time, elapsed)

    def elapsed(self) -> float:
        return self.clock() - self._start

    def can_process_next(self) -> bool:
        """Assume the next chunk takes as long as the slowest one so far."""

        return self.elapsed() + self.highest_time < self.time_limit


def fetch_chunks_to_categorize(store: StorePort, chunk_size: int = CHUNK_SIZE) -> List[List[Transaction]]:
    pending = sorted(store.get_transactions_to_categorize(), key=lambda t: t.date, reverse=True)
    return [pending[index : index + chunk_size] for index in range(0, len(pending), chunk_size)]


def count_local_model_usage(transactions: List[Transaction]) -> int:
    return sum(
        1
        for transaction in transactions
        if (transaction.local_category_proba or 0) > LOCAL_MODEL_USAGE_THRESHOLD
    )


def categorize_chunk(
    categorizer: CategorizerPort,
    store: StorePort,
    chunk: List[Transaction],
    clock: Callable[[], float] = time.monotonic,
) -> float:
    """Categorize and save one chunk, returning the seconds it took."""

    start = clock()
    categorized = [replace(t, to_categorize=False) for t in categorizer.categorize(chunk)]
    store.save_transactions(categorized)
    LOGGER.info(
        "%s/%s transactions use the local category",
        count_local_model_usage(categorized),
        len(categorized),
    )
    return clock() - start


def run_categorization(
    categorizer: CategorizerPort,
    store: StorePort,
    config: CategorizationConfig,
    budget: TimeBudget | None = None,
) -> CategorizationResult:
    budget = budget or TimeBudget(config.time_limit_seconds)
    chunks = fetch_chunks_to_categorize(store, config.chunk_size)
    categorized = 0
    remaining = sum(len(chunk) for chunk in chunks)

    for chunk in chunks:
        if not budget.can_process_next():
            LOGGER.info("Not enough time left, %s transactions left to categorize", remaining)
            break
        budget.record(categorize_chunk(categorizer, store, chunk, clock=budget.clock))
        categorized += len(chunk)
        remaining -= len(chunk)

    return CategorizationResult(categorized=categorized, remaining=remaining)
