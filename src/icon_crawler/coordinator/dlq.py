from __future__ import annotations

import asyncio
import dataclasses
import json
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Generic, List, Sequence, TypeVar

from loguru import logger

from ..sinks.ndjson import NdjsonSink

T = TypeVar("T")


@dataclass
class DLQRecord:
    ts: float
    error: str
    items: List[Dict[str, Any]]
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


def _item_dict(item: Any) -> Dict[str, Any]:
    if dataclasses.is_dataclass(item) and not isinstance(item, type):
        return dataclasses.asdict(item)
    if hasattr(item, "model_dump"):
        return item.model_dump(mode="json")
    if isinstance(item, dict):
        return item
    return {"value": item}


class DeadLetterQueue(Generic[T]):
    """File-based NDJSON record of work items the pipeline gave up on.

    Each line is ``{"ts", "error", "items", "metadata"}``. Appends share the
    NdjsonSink locking, so concurrent workers never interleave records.
    """

    def __init__(self, path: str | Path, *, mkdirs: bool = True):
        self.path = Path(path)
        self._mkdirs = mkdirs
        self._sink = NdjsonSink(self.path, mkdirs=mkdirs, name="dlq")

    async def save(
        self,
        items: Sequence[T],
        error: BaseException | str,
        metadata: Dict[str, Any] | None = None,
    ) -> None:
        err = error if isinstance(error, str) else f"{type(error).__name__}: {error}"
        rec = DLQRecord(
            ts=time.time(),
            error=err,
            items=[_item_dict(i) for i in items],
            metadata=dict(metadata or {}),
        )
        await self._sink.append(rec)
        logger.debug(f"DLQ saved {len(items)} item(s) to {self.path}: {err}")

    async def replay(self, max_records: int = 100) -> List[DLQRecord]:
        """Read back up to ``max_records`` records, oldest first."""
        if not self.path.exists():
            return []
        return await asyncio.to_thread(self._read, max_records)

    async def close(self) -> None:
        await self._sink.close()

    def _read(self, max_records: int) -> List[DLQRecord]:
        out: List[DLQRecord] = []
        with open(self.path, "r", encoding="utf-8") as fh:
            for line in fh:
                if len(out) >= max_records:
                    break
                line = line.strip()
                if not line:
                    continue
                try:
                    doc = json.loads(line)
                except json.JSONDecodeError:
                    logger.warning(f"DLQ: skipping malformed line in {self.path}")
                    continue
                out.append(
                    DLQRecord(
                        ts=float(doc.get("ts", 0.0)),
                        error=str(doc.get("error", "")),
                        items=list(doc.get("items", [])),
                        metadata=dict(doc.get("metadata") or {}),
                    )
                )
        return out
