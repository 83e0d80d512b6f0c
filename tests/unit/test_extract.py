"""
Unit tests for favicon link extraction.
"""

import pytest

import icon_crawler.extract as extract_mod
from icon_crawler.extract import DocumentParseError, extract_icon_links


def test_icon_links_in_head_in_document_order(icon_page):
    assert extract_icon_links(icon_page) == ["/favicon.ico", "/favicon-32.png"]


def test_accepts_text_documents(icon_page):
    assert extract_icon_links(icon_page.decode()) == ["/favicon.ico", "/favicon-32.png"]


def test_shortcut_icon_is_not_matched():
    doc = '<html><head><link rel="shortcut icon" href="/s.ico"></head></html>'
    assert extract_icon_links(doc) == []


def test_link_without_href_attribute_is_ignored():
    doc = '<html><head><link rel="icon"><link rel="icon" href=""></head></html>'
    assert extract_icon_links(doc) == [""]


def test_absolute_and_data_hrefs_returned_verbatim():
    doc = (
        "<html><head>"
        '<link rel="icon" href="https://cdn.example.org/i.png">'
        '<link rel="icon" href="data:image/x-icon;base64,AAAA">'
        "</head></html>"
    )
    assert extract_icon_links(doc) == ["https://cdn.example.org/i.png", "data:image/x-icon;base64,AAAA"]


@pytest.mark.parametrize(
    "doc",
    [
        b"",
        b"not html at all",
        b"<html><body><p>no head</p></body></html>",
    ],
)
def test_documents_without_icons(doc):
    assert extract_icon_links(doc) == []


def test_parser_failure_becomes_document_parse_error(monkeypatch):
    def explode(*args, **kwargs):
        raise RuntimeError("parser exploded")

    monkeypatch.setattr(extract_mod, "BeautifulSoup", explode)
    with pytest.raises(DocumentParseError, match="parser exploded"):
        extract_icon_links(b"<html></html>")
