from __future__ import annotations

import asyncio
import dataclasses
import json
import time
from pathlib import Path
from typing import IO, Any, Optional

from loguru import logger
from pydantic import BaseModel

from ..errors import SinkWriteError
from .base import Sink
from .metrics import SINK_WRITES_TOTAL, SINK_WRITE_LATENCY


def encode_record(record: Any) -> bytes:
    """One JSON document plus the line delimiter, as a single bytes payload."""
    if hasattr(record, "to_dict"):
        doc = record.to_dict()
    elif isinstance(record, BaseModel):
        doc = record.model_dump(mode="json")
    elif dataclasses.is_dataclass(record) and not isinstance(record, type):
        doc = dataclasses.asdict(record)
    else:
        doc = record
    return json.dumps(doc, ensure_ascii=False, default=str).encode("utf-8") + b"\n"


class NdjsonSink(Sink[Any]):
    """Append-only newline-delimited JSON file shared by all workers.

    The file is opened in append mode on first use (created if absent, never
    truncated). An asyncio.Lock serializes appends, and each record is handed
    to the OS as one write, so lines from concurrent workers never interleave.

    Usage:

        async with NdjsonSink("univResult.json") as sink:
            await sink.append(result)
    """

    def __init__(self, path: str | Path, *, mkdirs: bool = True, name: str = "ndjson"):
        self.path = Path(path)
        self.name = name
        self._mkdirs = mkdirs
        self._fh: Optional[IO[bytes]] = None
        self._lock = asyncio.Lock()
        self.records_written = 0

    async def open(self) -> None:
        async with self._lock:
            try:
                await self._ensure_open()
            except OSError as e:
                raise SinkWriteError(f"cannot open {self.path}: {e}") from e

    async def close(self) -> None:
        async with self._lock:
            if self._fh is not None:
                fh, self._fh = self._fh, None
                await asyncio.to_thread(fh.close)
                logger.debug(f"{self.name} sink closed: {self.path} ({self.records_written} records)")

    async def append(self, record: Any) -> None:
        """Append one record. Raises SinkWriteError if it could not be persisted."""
        t0 = time.perf_counter()
        try:
            payload = encode_record(record)
        except (TypeError, ValueError) as e:
            SINK_WRITES_TOTAL.labels(sink=self.name, status="failure").inc()
            raise SinkWriteError(f"cannot encode record for {self.path}: {e}") from e

        async with self._lock:
            try:
                await self._ensure_open()
                await asyncio.to_thread(self._write, payload)
            except OSError as e:
                SINK_WRITES_TOTAL.labels(sink=self.name, status="failure").inc()
                raise SinkWriteError(f"append to {self.path} failed: {e}") from e
            self.records_written += 1

        SINK_WRITES_TOTAL.labels(sink=self.name, status="success").inc()
        SINK_WRITE_LATENCY.labels(sink=self.name).observe(time.perf_counter() - t0)

    async def _ensure_open(self) -> None:
        if self._fh is not None:
            return
        self._fh = await asyncio.to_thread(self._open_file)
        logger.debug(f"{self.name} sink opened: {self.path}")

    def _open_file(self) -> IO[bytes]:
        if self._mkdirs:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        return open(self.path, "ab")

    def _write(self, payload: bytes) -> None:
        assert self._fh is not None
        self._fh.write(payload)
        self._fh.flush()
