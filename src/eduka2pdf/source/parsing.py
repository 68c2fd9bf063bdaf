"""Turn Eduka JSON payloads into Package/Book records.

All shape checks happen here so that malformed metadata surfaces as
``UnexpectedResponse`` before any page of the book is downloaded.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlparse

from eduka2pdf.errors import UnexpectedResponse
from eduka2pdf.model.book import Package
from eduka2pdf.types import OutlineNode

logger = logging.getLogger(__name__)

BASE_URL = "https://klase.eduka.lt"
PAGE_IMAGE_WIDTH = "1140"


def _as_int(value: Any) -> int | None:
    # bool is an int subclass but never a valid id or page number
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def parse_package(data: Any) -> Package:
    if not isinstance(data, dict):
        raise UnexpectedResponse("package payload is not an object")
    package_id = _as_int(data.get("id"))
    tools = data.get("teaching_tools")
    if package_id is None or not isinstance(tools, list):
        raise UnexpectedResponse("package payload lacks id or teaching_tools")

    tool_ids: list[int] = []
    for tool in tools:
        tool_id = _as_int(tool.get("id")) if isinstance(tool, dict) else None
        if tool_id is None:
            raise UnexpectedResponse(f"teaching tool without id in package {package_id}")
        tool_ids.append(tool_id)

    return Package(
        id=package_id,
        authors=str(data.get("authors") or ""),
        publishing_house=str(data.get("publishing_house") or ""),
        teaching_tool_ids=tool_ids,
    )


def parse_book_title(data: Any, book_id: int) -> str:
    """Build ``"<collection title>: <first part title>"``."""
    if not isinstance(data, dict) or not isinstance(data.get("title"), str):
        raise UnexpectedResponse("part listing lacks a title", book_id=book_id)
    parts = data.get("parts")
    if not isinstance(parts, list) or not parts:
        raise UnexpectedResponse("part listing has no parts", book_id=book_id)
    first = parts[0]
    if not isinstance(first, dict) or not isinstance(first.get("title"), str):
        raise UnexpectedResponse("first part lacks a title", book_id=book_id)
    return f"{data['title']}: {first['title']}"


def parse_is_downloadable(data: Any, book_id: int) -> bool:
    if not isinstance(data, dict) or not isinstance(data.get("isDownloadable"), bool):
        raise UnexpectedResponse("is-downloadable payload lacks isDownloadable", book_id=book_id)
    return bool(data["isDownloadable"])


def parse_page_urls(data: Any, book_id: int, *, base_url: str = BASE_URL) -> list[str]:
    """Collect page image URLs in listing order.

    Pages without an image of the expected width are logged and left out, so
    the indices of the returned list stay contiguous.
    """
    if not isinstance(data, dict) or not isinstance(data.get("pages"), list):
        raise UnexpectedResponse("pages payload lacks a pages list", book_id=book_id)

    urls: list[str] = []
    for position, page in enumerate(data["pages"]):
        img = page.get("img") if isinstance(page, dict) else None
        fragment = img.get(PAGE_IMAGE_WIDTH) if isinstance(img, dict) else None
        if not isinstance(fragment, str) or not fragment:
            logger.warning("Book %d: no %spx image for listed page %d", book_id, PAGE_IMAGE_WIDTH, position)
            continue
        urls.append(base_url + fragment)
    return urls


def parse_page_shift(data: Any, book_id: int) -> int:
    shift = _as_int(data.get("pageShift")) if isinstance(data, dict) else None
    if shift is None:
        raise UnexpectedResponse("pages payload lacks an integer pageShift", book_id=book_id)
    return shift


def _parse_node(raw: Any, book_id: int) -> OutlineNode:
    if not isinstance(raw, dict) or not isinstance(raw.get("title"), str):
        raise UnexpectedResponse("chapter without a title", book_id=book_id)
    page = raw.get("startPage", 0)
    if page is None:
        page = 0
    if _as_int(page) is None or page < 0:
        raise UnexpectedResponse(f"chapter {raw['title']!r} has invalid startPage", book_id=book_id)
    lessons = raw.get("lessons") or []
    if not isinstance(lessons, list):
        raise UnexpectedResponse(f"chapter {raw['title']!r} has invalid lessons", book_id=book_id)
    return OutlineNode.of(raw["title"], page, [_parse_node(c, book_id) for c in lessons])


def parse_outline(data: Any, book_id: int) -> list[OutlineNode]:
    chapters = data.get("chapters") if isinstance(data, dict) else None
    if not isinstance(chapters, list):
        raise UnexpectedResponse("pages payload lacks a chapters list", book_id=book_id)
    return [_parse_node(c, book_id) for c in chapters]


def parse_book_id(url: str) -> int:
    """Extract the numeric id that ends an Eduka package URL.

    Raises:
        ValueError: If the URL has no path or its last segment is not a number
    """
    path = urlparse(url).path
    segments = [s for s in path.split("/") if s]
    if not segments:
        raise ValueError(f"URL {url} has no path segments; is it a book URL?")
    last = segments[-1]
    if not last.isdigit():
        raise ValueError(f"URL {url} does not end with a book id")
    return int(last)


__all__ = [
    "BASE_URL",
    "PAGE_IMAGE_WIDTH",
    "parse_book_id",
    "parse_book_title",
    "parse_is_downloadable",
    "parse_outline",
    "parse_package",
    "parse_page_shift",
    "parse_page_urls",
]
