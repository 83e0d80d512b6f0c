"""
Unit tests for the shared NDJSON result sink.
"""

import asyncio
import json

import pytest

from icon_crawler.coordinator import EnrichedResult
from icon_crawler.errors import SinkWriteError
from icon_crawler.sinks import NdjsonSink, encode_record
from pddikti_client.models import ProfileDetail


def test_encode_record_shapes():
    r = EnrichedResult("001", "https://ui.ac.id", "Universitas Indonesia", ("/f.ico",))
    assert json.loads(encode_record(r)) == {
        "nama": "Universitas Indonesia",
        "kode": "001",
        "website": "https://ui.ac.id",
        "icon_urls": ["/f.ico"],
    }
    assert encode_record({"a": 1}) == b'{"a": 1}\n'
    assert json.loads(encode_record(ProfileDetail(npsn="1", website="x")))["npsn"] == "1"


@pytest.mark.asyncio
async def test_concurrent_appends_never_interleave(tmp_path):
    """10 writers x 1000 records -> exactly 10000 whole JSON lines."""
    path = tmp_path / "results.ndjson"

    async with NdjsonSink(path) as sink:

        async def writer(w: int):
            for i in range(1000):
                await sink.append(
                    EnrichedResult(f"{w}-{i}", f"https://{w}.ac.id", "x" * 50, ("/favicon.ico",) * 3)
                )

        await asyncio.gather(*(writer(w) for w in range(10)))
        assert sink.records_written == 10000

    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 10000
    kodes = {json.loads(line)["kode"] for line in lines}
    assert len(kodes) == 10000


@pytest.mark.asyncio
async def test_existing_file_is_appended_not_truncated(tmp_path):
    path = tmp_path / "results.ndjson"
    path.write_text('{"kode": "old"}\n', encoding="utf-8")

    async with NdjsonSink(path) as sink:
        await sink.append({"kode": "new"})

    assert [json.loads(x)["kode"] for x in path.read_text().splitlines()] == ["old", "new"]


@pytest.mark.asyncio
async def test_unicode_written_verbatim(tmp_path):
    path = tmp_path / "results.ndjson"
    async with NdjsonSink(path) as sink:
        await sink.append({"nama": "Institut Teknologi Sepuluh Nopember – ITS"})
    assert "–" in path.read_text(encoding="utf-8")


@pytest.mark.asyncio
async def test_open_failure_raises_sink_write_error(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    with pytest.raises(SinkWriteError):
        async with NdjsonSink(blocker / "sub" / "out.ndjson"):
            pass


@pytest.mark.asyncio
async def test_unencodable_record_raises(tmp_path):
    sink = NdjsonSink(tmp_path / "out.ndjson")
    with pytest.raises(SinkWriteError):
        await sink.append(_Circular())
    await sink.close()


class _Circular(dict):
    def __init__(self):
        super().__init__()
        self["self"] = self
