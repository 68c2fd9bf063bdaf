from __future__ import annotations

from typing import Any

import pytest

from eduka2pdf.errors import UnexpectedResponse
from eduka2pdf.source.parsing import (
    parse_book_id,
    parse_book_title,
    parse_is_downloadable,
    parse_outline,
    parse_package,
    parse_page_shift,
    parse_page_urls,
)
from eduka2pdf.types import OutlineNode


def test_parse_package() -> None:
    pkg = parse_package(
        {
            "id": 77,
            "authors": "J. Jonaitis",
            "publishing_house": "Briedis",
            "teaching_tools": [{"id": 101}, {"id": 102, "name": "x"}],
        }
    )
    assert pkg.id == 77
    assert pkg.authors == "J. Jonaitis"
    assert pkg.publishing_house == "Briedis"
    assert pkg.teaching_tool_ids == [101, 102]


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"id": 1},
        {"id": "1", "teaching_tools": []},
        {"id": 1, "teaching_tools": [{"name": "no id"}]},
        {"id": True, "teaching_tools": []},
    ],
)
def test_parse_package_rejects_malformed(payload: Any) -> None:
    with pytest.raises(UnexpectedResponse):
        parse_package(payload)


def test_parse_book_title_joins_collection_and_first_part() -> None:
    data = {"title": "Lietuvių kalba 6", "parts": [{"title": "1 dalis"}, {"title": "2 dalis"}]}
    assert parse_book_title(data, 5) == "Lietuvių kalba 6: 1 dalis"


def test_parse_book_title_without_parts_fails() -> None:
    with pytest.raises(UnexpectedResponse) as excinfo:
        parse_book_title({"title": "T", "parts": []}, 5)
    assert excinfo.value.book_id == 5


def test_parse_is_downloadable() -> None:
    assert parse_is_downloadable({"isDownloadable": True}, 1) is True
    assert parse_is_downloadable({"isDownloadable": False}, 1) is False
    with pytest.raises(UnexpectedResponse):
        parse_is_downloadable({"isDownloadable": "yes"}, 1)


def test_parse_page_urls_prefixes_fragments_and_skips_missing() -> None:
    data = {
        "pages": [
            {"img": {"1140": "/media/p1.png", "600": "/media/s1.png"}},
            {"img": {"600": "/media/s2.png"}},
            {"img": {"1140": "/media/p3.png"}},
        ]
    }
    assert parse_page_urls(data, 9, base_url="https://e.test") == [
        "https://e.test/media/p1.png",
        "https://e.test/media/p3.png",
    ]


def test_parse_page_urls_requires_list() -> None:
    with pytest.raises(UnexpectedResponse):
        parse_page_urls({"pages": None}, 9)


def test_parse_page_shift() -> None:
    assert parse_page_shift({"pageShift": 4}, 1) == 4
    assert parse_page_shift({"pageShift": -2}, 1) == -2
    for bad in ({}, {"pageShift": "4"}, {"pageShift": 1.5}):
        with pytest.raises(UnexpectedResponse):
            parse_page_shift(bad, 1)


def test_parse_outline_nested_lessons_and_defaults() -> None:
    data = {
        "chapters": [
            {"title": "Skyrius 1", "lessons": [{"title": "Pamoka 1", "startPage": 4}]},
            {"title": "Skyrius 2", "startPage": 9, "lessons": None},
            {"title": "Skyrius 3", "startPage": None},
        ]
    }
    assert parse_outline(data, 1) == [
        OutlineNode.of("Skyrius 1", 0, [OutlineNode.of("Pamoka 1", 4)]),
        OutlineNode.of("Skyrius 2", 9),
        OutlineNode.of("Skyrius 3", 0),
    ]


@pytest.mark.parametrize(
    "chapters",
    [
        None,
        [{"startPage": 1}],
        [{"title": "x", "startPage": -1}],
        [{"title": "x", "startPage": "3"}],
        [{"title": "x", "lessons": {"title": "y"}}],
    ],
)
def test_parse_outline_rejects_malformed(chapters: Any) -> None:
    with pytest.raises(UnexpectedResponse):
        parse_outline({"chapters": chapters}, 1)


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://klase.eduka.lt/student/teaching-package/1234", 1234),
        ("https://klase.eduka.lt/student/teaching-package/1234/", 1234),
        ("https://klase.eduka.lt/package/55?tab=books", 55),
    ],
)
def test_parse_book_id(url: str, expected: int) -> None:
    assert parse_book_id(url) == expected


@pytest.mark.parametrize("url", ["https://klase.eduka.lt", "https://klase.eduka.lt/package/abc"])
def test_parse_book_id_rejects_urls_without_numeric_tail(url: str) -> None:
    with pytest.raises(ValueError) as excinfo:
        parse_book_id(url)
    assert url in str(excinfo.value)
