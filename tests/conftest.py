"""
Pytest configuration and fixtures for univ-icon-crawler.

Provides cross-platform event loop configuration, sample profiles and
in-process HTTP mocks (httpx.MockTransport) so no test touches the network.
"""

import asyncio
import sys
from typing import Any, Callable, Dict, List

import httpx
import pytest

from icon_crawler.errors import SinkWriteError
from icon_crawler.sinks import Sink
from pddikti_client.models import ProfileDetail

# Set policy *before* pytest-asyncio creates any loops
if sys.platform.startswith("win"):
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())


ICON_PAGE = b"""<!doctype html>
<html>
  <head>
    <title>Universitas Contoh</title>
    <link rel="icon" href="/favicon.ico">
    <link rel="stylesheet" href="/style.css">
    <link rel=" icon " href="/favicon-32.png" sizes="32x32">
    <link rel="shortcut icon" href="/legacy.ico">
  </head>
  <body><link rel="icon" href="/not-in-head.ico"></body>
</html>
"""


@pytest.fixture
def icon_page() -> bytes:
    return ICON_PAGE


@pytest.fixture
def make_profile() -> Callable[..., ProfileDetail]:
    """Factory for minimal PDDikti profile records."""

    def _make(npsn: str = "001002", website: str = "ui.ac.id", nm_lemb: str = "Universitas Contoh"):
        return ProfileDetail(npsn=npsn, nm_lemb=nm_lemb, website=website)

    return _make


@pytest.fixture
def site_transport() -> Callable[[Dict[str, bytes]], httpx.MockTransport]:
    """MockTransport serving ``pages`` by host; unknown hosts fail to connect."""

    def _build(pages: Dict[str, bytes]) -> httpx.MockTransport:
        def handler(request: httpx.Request) -> httpx.Response:
            body = pages.get(request.url.host)
            if body is None:
                raise httpx.ConnectError("name resolution failed", request=request)
            return httpx.Response(200, content=body, headers={"content-type": "text/html"})

        return httpx.MockTransport(handler)

    return _build


class MemorySink(Sink):
    """In-memory sink; set ``fail`` to make every append raise SinkWriteError."""

    def __init__(self):
        self.records: List[Any] = []
        self.fail = False

    async def append(self, record: Any) -> None:
        if self.fail:
            raise SinkWriteError("disk full")
        self.records.append(record)


@pytest.fixture
def memory_sink() -> MemorySink:
    return MemorySink()
