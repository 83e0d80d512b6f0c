from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

from loguru import logger

from .client import PDDikti
from .errors import InstitutionNotFound, PDDiktiError
from .models import Institution
from .utils import append_ndjson


@dataclass
class ResolveStats:
    seen: int = 0
    resolved: int = 0
    not_found: int = 0
    failed: int = 0
    without_website: int = 0


def resolve_all(
    api: PDDikti,
    institutions: Iterable[Institution],
    output: Union[str, Path],
    *,
    start_from: Optional[str] = None,
    pause_every: int = 100,
    pause_sec: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> ResolveStats:
    """
    Resolve each institution to its profile detail and append it to ``output``.

    Args:
        api: Directory client
        institutions: Rows from the institutions CSV
        output: NDJSON file receiving one ProfileDetail per line
        start_from: Skip rows until this institution code is reached (inclusive)
        pause_every: Sleep ``pause_sec`` after every this-many rows
        sleep: Injectable for tests

    Per-institution errors are logged and skipped; the run continues.
    """
    stats = ResolveStats()
    started = start_from is None

    for i, inst in enumerate(institutions):
        if not started:
            if inst.kode != start_from:
                continue
            started = True
            logger.info(f"Resuming at {inst.nama} ({inst.kode})")

        if i > 0 and pause_every > 0 and i % pause_every == 0 and pause_sec > 0:
            sleep(pause_sec)

        stats.seen += 1
        try:
            detail = api.resolve(inst)
        except InstitutionNotFound as e:
            stats.not_found += 1
            logger.warning(f"Dikti code for {inst.nama} ({inst.kode}) is empty: {e}")
            continue
        except PDDiktiError as e:
            stats.failed += 1
            logger.error(f"Failed to resolve {inst.nama} ({inst.kode}): {type(e).__name__}: {e}")
            continue

        if not detail.website.strip():
            stats.without_website += 1
            logger.warning(f"{inst.nama} has no website on record")

        append_ndjson(output, detail)
        stats.resolved += 1

    if not started:
        logger.warning(f"Start code {start_from} never appeared in the input")

    logger.success(
        f"Resolve finished: seen={stats.seen} resolved={stats.resolved} "
        f"not_found={stats.not_found} failed={stats.failed}"
    )
    return stats
