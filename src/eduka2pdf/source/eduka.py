"""Async client for the Eduka (klase.eduka.lt) API.

One ``httpx.AsyncClient`` carries the session cookie set by ``login`` and is
shared with the page downloader afterwards.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from eduka2pdf.errors import AuthenticationError, UnexpectedResponse
from eduka2pdf.model.book import Book, Package
from eduka2pdf.source.parsing import (
    BASE_URL,
    parse_book_title,
    parse_is_downloadable,
    parse_outline,
    parse_package,
    parse_page_shift,
    parse_page_urls,
)

logger = logging.getLogger(__name__)

LOGIN_PATH = "/api/anonymously/login"
PACKAGE_PATH = "/api/authenticated/teaching-package/{id}"
IS_DOWNLOADABLE_PATH = "/api/authenticated/teaching-tool/is-downloadable/{id}"
PARTS_PATH = "/api/authenticated/part/show-by-teaching-tool/{id}"
PAGES_PATH = "/api/authenticated/teaching-tool/pages/{id}"


def make_http_client(*, timeout: float = 60.0, max_connections: int = 20) -> httpx.AsyncClient:
    """Create the shared client (cookie jar, timeouts, connection limits)."""
    return httpx.AsyncClient(
        base_url=BASE_URL,
        timeout=httpx.Timeout(timeout, connect=min(timeout, 30.0)),
        limits=httpx.Limits(max_connections=max_connections, max_keepalive_connections=max_connections),
        follow_redirects=True,
        headers={"Accept": "application/json, image/*"},
    )


class EdukaClient:
    def __init__(self, http: httpx.AsyncClient, *, base_url: str = BASE_URL) -> None:
        self.http = http
        self.base_url = base_url

    async def login(self, username: str, password: str) -> None:
        response = await self.http.post(
            self.base_url + LOGIN_PATH, json={"username": username, "password": password}
        )
        if response.status_code != httpx.codes.OK:
            raise AuthenticationError(username, response.status_code)
        logger.info("Logged in as %s", username)

    async def _get_json(
        self, path: str, *, book_id: int | None = None, params: dict[str, str] | None = None
    ) -> Any:
        response = await self.http.get(self.base_url + path, params=params)
        if response.status_code != httpx.codes.OK:
            raise UnexpectedResponse(f"HTTP {response.status_code} from {path}", book_id=book_id)
        try:
            return response.json()
        except ValueError as exc:
            raise UnexpectedResponse(f"non-JSON body from {path}", book_id=book_id, cause=exc) from exc

    async def fetch_package(self, package_id: int) -> Package:
        data = await self._get_json(
            PACKAGE_PATH.format(id=package_id), params={"withTeachingTools": "1"}
        )
        return parse_package(data)

    async def fetch_book(self, tool_id: int) -> Book:
        """Collect title, page URLs, page shift and outline of one teaching tool.

        Raises:
            UnexpectedResponse: If any of the three listings is malformed
        """
        downloadable = parse_is_downloadable(
            await self._get_json(IS_DOWNLOADABLE_PATH.format(id=tool_id), book_id=tool_id), tool_id
        )
        title = parse_book_title(
            await self._get_json(PARTS_PATH.format(id=tool_id), book_id=tool_id), tool_id
        )
        pages = await self._get_json(PAGES_PATH.format(id=tool_id), book_id=tool_id)

        book = Book(
            id=tool_id,
            title=title,
            page_shift=parse_page_shift(pages, tool_id),
            native_downloadable=downloadable,
            page_urls=parse_page_urls(pages, tool_id, base_url=self.base_url),
            outline=parse_outline(pages, tool_id),
        )
        logger.debug(
            "Book %d %r: %d pages, shift %d, %d top-level chapters",
            book.id,
            book.title,
            len(book.page_urls),
            book.page_shift,
            len(book.outline),
        )
        return book


__all__ = ["EdukaClient", "make_http_client"]
