"""
Saturation feedback for the crawl producer.

Provides in-process pub/sub for queue saturation signals. The producer
publishes when it enters overflow mode and when its overflow buffer has been
fully re-enqueued; subscribers (logging, metrics, pacing hooks) react.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from loguru import logger


class BackpressureLevel(str, Enum):
    """Queue saturation levels."""

    OK = "ok"  # Producer enqueues directly
    SATURATED = "saturated"  # Queue rejected an enqueue - producer is buffering


@dataclass(frozen=True)
class FeedbackEvent:
    """Immutable saturation event.

    Attributes:
        coordinator_id: Identifies the coordinator (e.g., "crawl")
        queue_size: Queue depth when the event was emitted
        capacity: Maximum queue capacity
        level: OK or SATURATED
        buffered: Items waiting in the producer's overflow buffer
        reason: Optional context (e.g., "queue_full", "overflow_drained")
    """

    coordinator_id: str
    queue_size: int
    capacity: int
    level: BackpressureLevel
    buffered: int = 0
    reason: str | None = None

    @property
    def utilization(self) -> float:
        """Queue utilization as a fraction (0.0 to 1.0)."""
        return self.queue_size / self.capacity if self.capacity > 0 else 0.0


class FeedbackSubscriber(Protocol):
    """Async callable accepting FeedbackEvent. Exceptions are caught and logged."""

    async def __call__(self, event: FeedbackEvent) -> None: ...


class FeedbackBus:
    """In-process pub/sub bus for saturation feedback.

    One subscriber's failure does not affect others. Best-effort delivery.

    Example:
        bus = FeedbackBus()

        async def on_feedback(event: FeedbackEvent):
            if event.level == BackpressureLevel.SATURATED:
                logger.warning("crawl queue saturated")

        bus.subscribe(on_feedback)
    """

    def __init__(self) -> None:
        self._subs: list[FeedbackSubscriber] = []

    def subscribe(self, callback: FeedbackSubscriber) -> None:
        if callback not in self._subs:
            self._subs.append(callback)
            logger.debug(f"Feedback subscriber added (total: {len(self._subs)})")

    def unsubscribe(self, callback: FeedbackSubscriber) -> None:
        """Remove a subscriber. No-op if it was never added."""
        try:
            self._subs.remove(callback)
            logger.debug(f"Feedback subscriber removed (total: {len(self._subs)})")
        except ValueError:
            pass

    async def publish(self, event: FeedbackEvent) -> None:
        """Deliver ``event`` to every subscriber in registration order."""
        if not self._subs:
            return

        logger.debug(
            f"Publishing feedback: coord={event.coordinator_id} "
            f"level={event.level.value} "
            f"queue={event.queue_size}/{event.capacity} ({event.utilization:.1%}) "
            f"buffered={event.buffered}"
        )

        # Iterate over copy to allow unsubscribe during iteration
        for callback in list(self._subs):
            try:
                await callback(event)
            except Exception as exc:
                logger.warning(f"Feedback subscriber error (ignored): {type(exc).__name__}: {exc}")

    @property
    def subscriber_count(self) -> int:
        return len(self._subs)


_bus: Optional[FeedbackBus] = None


def feedback_bus() -> FeedbackBus:
    """Process-wide FeedbackBus singleton."""
    global _bus
    if _bus is None:
        _bus = FeedbackBus()
        logger.debug("FeedbackBus singleton initialized")
    return _bus
