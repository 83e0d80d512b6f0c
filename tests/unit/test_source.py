"""
Unit tests for ItemSource (profiles -> work items).
"""

import json

from icon_crawler.coordinator import WorkItem
from icon_crawler.source import ItemSource, describe_item


def test_blank_websites_are_skipped(make_profile):
    src = ItemSource.from_records(
        [
            make_profile("1", "example.org", "A"),
            make_profile("2", "", "B"),
            make_profile("3", "http://foo.test", "C"),
        ]
    )
    items = list(src.produce())
    assert items == [
        WorkItem("1", "example.org", "A"),
        WorkItem("3", "http://foo.test", "C"),
    ]
    assert len(src) == 3


def test_whitespace_website_and_blank_code_are_skipped(make_profile):
    src = ItemSource([make_profile("1", "   "), make_profile("  ", "x.ac.id"), make_profile(" 9 ", "y.ac.id")])
    assert [i.identifier for i in src.produce()] == ["9"]


def test_produce_is_repeatable(make_profile):
    src = ItemSource([make_profile("1", "a"), make_profile("2", "b")])
    assert list(src.produce()) == list(src.produce())


def test_from_ndjson_skips_malformed_lines(tmp_path):
    path = tmp_path / "result.json"
    lines = [
        json.dumps({"npsn": "001", "nm_lemb": "A", "website": "a.ac.id"}),
        "{not json",
        "",
        json.dumps(["not", "an", "object"]),
        json.dumps({"npsn": "002", "nm_lemb": "B", "website": "b.ac.id", "extra_field": 1}),
    ]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")

    src = ItemSource.from_ndjson(path)
    assert len(src) == 2
    assert [i.identifier for i in src.produce()] == ["001", "002"]


def test_describe_item():
    assert describe_item(WorkItem("1", "a.ac.id", "Kampus")) == "Kampus <a.ac.id>"
    assert describe_item(WorkItem("1", "a.ac.id")) == "1 <a.ac.id>"
