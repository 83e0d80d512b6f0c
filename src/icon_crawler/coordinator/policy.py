from __future__ import annotations

import random
from dataclasses import dataclass


@dataclass(frozen=True)
class RetryPolicy:
    """Delay schedule for re-attempting a rejected enqueue.

    The defaults give a fixed one-second interval, and an overflowed item
    is retried until it fits. Set ``backoff_multiplier`` > 1 and raise ``max_backoff_ms`` for
    exponential backoff; ``jitter`` scales each delay into [50%, 100%].
    """

    initial_backoff_ms: int = 1000
    max_backoff_ms: int = 1000
    backoff_multiplier: float = 1.0
    jitter: bool = False

    def __post_init__(self) -> None:
        if self.initial_backoff_ms < 0:
            raise ValueError("initial_backoff_ms must be >= 0")
        if self.max_backoff_ms < self.initial_backoff_ms:
            object.__setattr__(self, "max_backoff_ms", self.initial_backoff_ms)
        if self.backoff_multiplier < 1.0:
            raise ValueError("backoff_multiplier must be >= 1.0")

    @classmethod
    def fixed(cls, interval_ms: int) -> "RetryPolicy":
        return cls(initial_backoff_ms=interval_ms, max_backoff_ms=interval_ms)

    def next_backoff_ms(self, attempt: int) -> int:
        """Delay before retry number ``attempt`` (1-based)."""
        attempt = max(1, attempt)
        base = self.initial_backoff_ms * (self.backoff_multiplier ** (attempt - 1))
        base = min(base, self.max_backoff_ms)
        if self.jitter:
            base *= random.uniform(0.5, 1.0)
        return int(base)

    def next_backoff_sec(self, attempt: int) -> float:
        return self.next_backoff_ms(attempt) / 1000.0
