from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

T = TypeVar("T")


class Sink(ABC, Generic[T]):
    """Append-only destination shared by all workers.

    Implementations must serialize concurrent ``append`` calls and raise
    SinkWriteError when the record could not be persisted.
    """

    async def open(self) -> None:
        return None

    async def close(self) -> None:
        return None

    async def __aenter__(self) -> "Sink[T]":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @abstractmethod
    async def append(self, record: T) -> None: ...
