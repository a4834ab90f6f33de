"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CategorizationConfig:
    """Chunking and time budget for one categorization run."""

    chunk_size: int
    time_limit_seconds: float
