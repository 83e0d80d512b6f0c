from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ..errors import CrawlerError, QueueClosedError, QueueFullError, SinkWriteError  # noqa: F401
from ..sinks.base import Sink  # noqa: F401


@dataclass(frozen=True)
class WorkItem:
    """One institution website to visit."""

    identifier: str
    website: str
    name: str = ""


@dataclass(frozen=True)
class EnrichedResult:
    """A WorkItem plus the favicon links found on its home page."""

    identifier: str
    website: str
    name: str
    icon_urls: Tuple[str, ...] = ()

    @classmethod
    def from_item(cls, item: WorkItem, website: str, icon_urls: List[str]) -> "EnrichedResult":
        return cls(
            identifier=item.identifier,
            website=website,
            name=item.name,
            icon_urls=tuple(icon_urls),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nama": self.name,
            "kode": self.identifier,
            "website": self.website,
            "icon_urls": list(self.icon_urls),
        }


@dataclass(frozen=True)
class CrawlOutcome:
    """Tagged result of one unit of work: ok(result) or skip(reason)."""

    item: WorkItem
    result: Optional[EnrichedResult] = None
    reason: Optional[str] = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.result is not None

    @classmethod
    def success(cls, item: WorkItem, result: EnrichedResult) -> "CrawlOutcome":
        return cls(item=item, result=result)

    @classmethod
    def skip(cls, item: WorkItem, reason: str, detail: str = "") -> "CrawlOutcome":
        return cls(item=item, reason=reason, detail=detail)


@dataclass
class CoordinatorHealth:
    workers_alive: int
    queue_size: int
    capacity: int
    buffered: int
    producer_done: bool


@dataclass
class CrawlReport:
    """Counters for one finished run."""

    produced: int = 0
    enqueued: int = 0
    overflow_events: int = 0
    retry_waits: int = 0
    dequeued: int = 0
    succeeded: int = 0
    skipped: Dict[str, int] = field(default_factory=dict)

    @property
    def skipped_total(self) -> int:
        return sum(self.skipped.values())


def describe_item(item: WorkItem) -> str:
    return f"{item.name or item.identifier} <{item.website}>"
