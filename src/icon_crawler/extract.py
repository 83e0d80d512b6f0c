"""
Favicon link extraction.

A pure transform from an HTML document to the ``href`` of every
``<link rel="icon">`` in its ``<head>``, in document order.
"""

from __future__ import annotations

from typing import List, Union

from bs4 import BeautifulSoup

from .errors import CrawlerError

ICON_REL = "icon"


class DocumentParseError(CrawlerError):
    """The document could not be parsed at all."""


def _rel_value(rel) -> str:
    # BeautifulSoup splits multi-valued ``rel`` on whitespace
    if isinstance(rel, (list, tuple)):
        return " ".join(rel).strip()
    return str(rel).strip()


def extract_icon_links(document: Union[str, bytes], parser: str = "lxml") -> List[str]:
    """Return favicon hrefs declared in the document head.

    Only links whose ``rel`` is exactly ``icon`` (after trimming) count, so
    ``rel="shortcut icon"`` is not matched. Links without ``href`` are skipped.
    """
    try:
        soup = BeautifulSoup(document, parser)
    except Exception as e:
        raise DocumentParseError(f"{type(e).__name__}: {e}") from e

    hrefs: List[str] = []
    for head in soup.find_all("head"):
        for link in head.find_all("link"):
            rel = link.get("rel")
            if rel is None or _rel_value(rel) != ICON_REL:
                continue
            href = link.get("href")
            if href is None:
                continue
            hrefs.append(href)
    return hrefs
