import pytest

from icon_crawler.urls import DEFAULT_SCHEME, has_scheme, normalize_website


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("example.org", "https://example.org"),
        ("  ui.ac.id  ", "https://ui.ac.id"),
        ("http://foo.test", "http://foo.test"),
        ("https://foo.test/path", "https://foo.test/path"),
        ("HTTP://UPPER.ac.id", "HTTP://UPPER.ac.id"),
        ("www.itb.ac.id/", "https://www.itb.ac.id/"),
    ],
)
def test_normalize_website(raw, expected):
    assert normalize_website(raw) == expected


@pytest.mark.parametrize("raw", ["example.org", " http://a.b ", "https://c.d", "ftp.e.f"])
def test_normalize_is_idempotent(raw):
    once = normalize_website(raw)
    assert normalize_website(once) == once


def test_custom_default_scheme():
    assert normalize_website("a.ac.id", default_scheme="http://") == "http://a.ac.id"


def test_has_scheme():
    assert DEFAULT_SCHEME == "https://"
    assert has_scheme("https://x")
    assert not has_scheme("x.ac.id")
