"""
End-to-end crawl: profile NDJSON -> ItemSource -> CrawlCoordinator -> NdjsonSink.

HTTP is served in-process by httpx.MockTransport.
"""

import asyncio
import json

import httpx
import pytest

from icon_crawler.coordinator import CrawlCoordinator, DeadLetterQueue, RetryPolicy
from icon_crawler.sinks import NdjsonSink
from icon_crawler.source import ItemSource

pytestmark = pytest.mark.integration


def _write_profiles(path, rows):
    with open(path, "w", encoding="utf-8") as fh:
        for npsn, name, website in rows:
            fh.write(json.dumps({"npsn": npsn, "nm_lemb": name, "website": website}) + "\n")
        fh.write("{truncated\n")


@pytest.mark.asyncio
async def test_profiles_to_result_file(tmp_path, icon_page, site_transport):
    src_path = tmp_path / "result.json"
    out_path = tmp_path / "univResult.json"
    dlq_path = tmp_path / "skipped.ndjson"
    _write_profiles(
        src_path,
        [
            ("001", "Universitas Satu", "satu.ac.id"),
            ("002", "Universitas Dua", ""),
            ("003", "Universitas Tiga", "http://tiga.ac.id"),
            ("004", "Universitas Empat", "empat-offline.ac.id"),
        ],
    )
    pages = {"satu.ac.id": icon_page, "tiga.ac.id": b"<html><head></head></html>"}

    source = ItemSource.from_ndjson(src_path)
    dlq = DeadLetterQueue(dlq_path)
    async with httpx.AsyncClient(transport=site_transport(pages)) as client:
        async with NdjsonSink(out_path) as sink:
            report = await asyncio.wait_for(
                CrawlCoordinator(
                    source.produce(),
                    sink,
                    capacity=1,
                    workers=2,
                    retry_policy=RetryPolicy.fixed(1),
                    client=client,
                    dlq=dlq,
                ).run(),
                timeout=10.0,
            )
    await dlq.close()

    assert report.produced == 3
    assert report.succeeded == 2
    assert report.skipped == {"transport_error": 1}

    results = {d["kode"]: d for d in map(json.loads, out_path.read_text(encoding="utf-8").splitlines())}
    assert results["001"] == {
        "nama": "Universitas Satu",
        "kode": "001",
        "website": "https://satu.ac.id",
        "icon_urls": ["/favicon.ico", "/favicon-32.png"],
    }
    assert results["003"]["website"] == "http://tiga.ac.id"
    assert results["003"]["icon_urls"] == []

    skipped = await DeadLetterQueue(dlq_path).replay()
    assert [r.items[0]["identifier"] for r in skipped] == ["004"]


@pytest.mark.asyncio
async def test_rerun_appends_to_existing_results(tmp_path, icon_page, site_transport):
    src_path = tmp_path / "result.json"
    out_path = tmp_path / "univResult.json"
    _write_profiles(src_path, [("001", "Universitas Satu", "satu.ac.id")])
    source = ItemSource.from_ndjson(src_path)

    async with httpx.AsyncClient(transport=site_transport({"satu.ac.id": icon_page})) as client:
        for _ in range(2):
            async with NdjsonSink(out_path) as sink:
                await CrawlCoordinator(source.produce(), sink, capacity=4, workers=4, client=client).run()

    assert len(out_path.read_text(encoding="utf-8").splitlines()) == 2
