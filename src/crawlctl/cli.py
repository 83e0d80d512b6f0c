import asyncio
import json
import sys
import time
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from prometheus_client import start_http_server

from crawlctl.config import get_settings
from icon_crawler.coordinator import (
    BackpressureLevel,
    CoordinatorRuntimeSettings,
    CrawlCoordinator,
    CrawlReport,
    DeadLetterQueue,
    FeedbackEvent,
    feedback_bus,
)
from icon_crawler.errors import SinkWriteError
from icon_crawler.sinks import NdjsonSink
from icon_crawler.source import ItemSource
from pddikti_client import PDDikti, PDDiktiError, resolve_all
from pddikti_client.utils import read_institutions_csv

app = typer.Typer(help="PDDikti institution resolver and website favicon crawler")


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Loguru level (default: LOG_LEVEL setting)"
    ),
):
    level = (log_level or get_settings().LOG_LEVEL).upper()
    logger.remove()
    logger.add(sys.stderr, level=level)


def _api() -> PDDikti:
    settings = get_settings()
    return PDDikti({"base_url": settings.PDDIKTI_BASE_URL, "timeout": settings.PDDIKTI_TIMEOUT_SEC})


@app.command()
def lookup(code: str = typer.Argument(..., help="Institution code (kode PT)")):
    """Resolve one institution code and print its profile detail."""
    try:
        with _api() as api:
            profile_id = api.get_profile_id(code)
            detail = api.get_profile(profile_id)
    except PDDiktiError as e:
        logger.error(f"Lookup failed for {code}: {type(e).__name__}: {e}")
        sys.exit(1)
    typer.echo(json.dumps(detail.model_dump(mode="json"), indent=2, ensure_ascii=False))


@app.command()
def resolve(
    csv_path: Optional[Path] = typer.Option(None, "--csv", help="Institutions CSV (nama,kode)"),
    output: Optional[Path] = typer.Option(None, "--output", help="NDJSON file for profile details"),
    start_from: Optional[str] = typer.Option(
        None, "--start-from", help="Skip rows until this institution code"
    ),
    pause_every: int = typer.Option(100, "--pause-every", help="Pause after this many rows"),
    pause_sec: float = typer.Option(1.0, "--pause-sec", help="Pause length in seconds"),
):
    """Look up every institution in the CSV and append its profile to an NDJSON file."""
    settings = get_settings()
    csv_path = csv_path or Path(settings.INSTITUTIONS_CSV)
    output = output or Path(settings.RESOLVED_PATH or f"./data-{int(time.time())}.json")

    try:
        institutions = read_institutions_csv(csv_path)
    except (OSError, ValueError) as e:
        logger.error(f"Cannot read institutions CSV {csv_path}: {e}")
        sys.exit(1)

    logger.info(f"Resolving {len(institutions)} institutions from {csv_path} into {output}")
    try:
        with _api() as api:
            resolve_all(
                api,
                institutions,
                output,
                start_from=start_from,
                pause_every=pause_every,
                pause_sec=pause_sec,
            )
    except OSError as e:
        logger.error(f"Failed to write {output}: {e}")
        sys.exit(1)


async def _log_feedback(event: FeedbackEvent) -> None:
    if event.level == BackpressureLevel.SATURATED:
        logger.warning(
            f"Crawl queue saturated ({event.queue_size}/{event.capacity}), "
            f"producer buffering {event.buffered} item(s)"
        )
    else:
        logger.info(f"Crawl queue accepting again ({event.queue_size}/{event.capacity})")


async def _crawl(
    source: ItemSource,
    output: Path,
    dlq_path: Optional[Path],
    cfg: CoordinatorRuntimeSettings,
) -> CrawlReport:
    bus = feedback_bus()
    bus.subscribe(_log_feedback)
    dlq = DeadLetterQueue(dlq_path) if dlq_path else None
    try:
        async with NdjsonSink(output) as sink:
            coord = CrawlCoordinator(
                source.produce(),
                sink,
                capacity=cfg.coordinator_capacity,
                workers=cfg.coordinator_workers,
                retry_policy=cfg.retry_policy(),
                fetch_timeout=cfg.fetch_timeout_sec,
                user_agent=cfg.fetch_user_agent,
                max_connections=cfg.fetch_max_connections,
                dlq=dlq,
                feedback=bus,
                coord_id=cfg.coordinator_id,
            )
            return await coord.run()
    finally:
        bus.unsubscribe(_log_feedback)
        if dlq is not None:
            await dlq.close()


@app.command()
def crawl(
    input_path: Optional[Path] = typer.Option(None, "--input", help="NDJSON of profile details"),
    output: Optional[Path] = typer.Option(None, "--output", help="NDJSON file for results"),
    workers: Optional[int] = typer.Option(None, "--workers", min=1),
    capacity: Optional[int] = typer.Option(None, "--capacity", min=1),
    retry_interval_ms: Optional[int] = typer.Option(None, "--retry-interval-ms", min=0),
    fetch_timeout: Optional[float] = typer.Option(None, "--fetch-timeout"),
    dlq_path: Optional[Path] = typer.Option(None, "--dlq", help="NDJSON file for skipped items"),
    metrics_port: Optional[int] = typer.Option(None, "--metrics-port"),
):
    """Crawl every institution website and record its favicon links."""
    settings = get_settings()
    overrides = {
        "coordinator_workers": workers,
        "coordinator_capacity": capacity,
        "coordinator_retry_interval_ms": retry_interval_ms,
        "fetch_timeout_sec": fetch_timeout,
    }
    cfg = CoordinatorRuntimeSettings(**{k: v for k, v in overrides.items() if v is not None})

    input_path = input_path or Path(settings.INPUT_PATH)
    output = output or Path(settings.OUTPUT_PATH)
    dlq_path = dlq_path or (Path(settings.DLQ_PATH) if settings.DLQ_PATH else None)
    metrics_port = metrics_port or settings.METRICS_PORT

    if metrics_port:
        start_http_server(metrics_port)
        logger.info(f"Prometheus metrics available at http://localhost:{metrics_port}/metrics")

    try:
        source = ItemSource.from_ndjson(input_path)
    except OSError as e:
        logger.error(f"Cannot read input {input_path}: {e}")
        sys.exit(1)

    logger.info(
        f"Crawling {len(source)} institutions: workers={cfg.coordinator_workers} "
        f"capacity={cfg.coordinator_capacity} retry={cfg.coordinator_retry_interval_ms}ms "
        f"-> {output}"
    )
    try:
        report = asyncio.run(_crawl(source, output, dlq_path, cfg))
    except SinkWriteError as e:
        logger.error(f"Crawl aborted: {e}")
        sys.exit(1)
    typer.echo(
        json.dumps(
            {
                "produced": report.produced,
                "enqueued": report.enqueued,
                "overflow_events": report.overflow_events,
                "succeeded": report.succeeded,
                "skipped": report.skipped,
            },
            indent=2,
        )
    )


if __name__ == "__main__":
    app()
