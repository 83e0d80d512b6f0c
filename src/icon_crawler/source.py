from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator, Sequence, Union

from loguru import logger

from pddikti_client.models import ProfileDetail
from pddikti_client.utils import iter_models

from .coordinator.types import WorkItem, describe_item  # noqa: F401


class ItemSource:
    """Turns resolved institution profiles into crawl work items.

    ``produce()`` is lazy and can be called any number of times; every call
    walks the same static records again.
    """

    def __init__(self, records: Sequence[ProfileDetail]):
        self._records = list(records)

    def __len__(self) -> int:
        return len(self._records)

    @classmethod
    def from_ndjson(cls, path: Union[str, Path]) -> "ItemSource":
        """Load profile records from an NDJSON file (bad lines are logged and skipped)."""
        records = list(iter_models(ProfileDetail, path))
        logger.info(f"Loaded {len(records)} institution profiles from {path}")
        return cls(records)

    @classmethod
    def from_records(cls, records: Iterable[ProfileDetail]) -> "ItemSource":
        return cls(list(records))

    def produce(self) -> Iterator[WorkItem]:
        for rec in self._records:
            website = (rec.website or "").strip()
            if not website:
                logger.warning(f"URL is empty, skipping {rec.nm_lemb or rec.npsn or '<unnamed>'}")
                continue
            identifier = (rec.npsn or "").strip()
            if not identifier:
                logger.warning(f"Institution code is empty, skipping {rec.nm_lemb or website}")
                continue
            yield WorkItem(identifier=identifier, website=rec.website, name=rec.nm_lemb)
