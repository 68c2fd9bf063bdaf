"""Exception types raised by the download, assembly and outline stages.

Every error keeps the context needed to diagnose it from the message alone
(book id, node title, page numbers, URL) and exposes the same values as
attributes for callers that report failures programmatically.
"""

from __future__ import annotations

from pathlib import Path


class Eduka2PdfError(Exception):
    """Base class for all eduka2pdf errors."""


class AuthenticationError(Eduka2PdfError):
    def __init__(self, username: str, status_code: int | None = None) -> None:
        self.username = username
        self.status_code = status_code
        msg = f"Login failed for user {username!r}"
        if status_code is not None:
            msg += f" (HTTP {status_code})"
        super().__init__(msg)


class UnexpectedResponse(Eduka2PdfError):
    """The platform returned data that does not match the expected shape."""

    def __init__(self, what: str, *, book_id: int | None = None, cause: Exception | None = None):
        self.what = what
        self.book_id = book_id
        self.cause = cause
        msg = f"Unexpected response: {what}"
        if book_id is not None:
            msg += f" (book {book_id})"
        if cause is not None:
            msg += f": {cause}"
        super().__init__(msg)


class FetchExhausted(Eduka2PdfError):
    """A page could not be retrieved within the configured retry ceiling."""

    def __init__(self, url: str, target: Path, attempts: int, cause: BaseException | None = None):
        self.url = url
        self.target = target
        self.attempts = attempts
        self.cause = cause
        msg = f"Failed to fetch {url} -> {target.name} after {attempts} attempts"
        if cause is not None:
            msg += f": {cause}"
        super().__init__(msg)


class AssemblyError(Eduka2PdfError):
    """The external image-to-PDF step did not produce a document."""

    def __init__(
        self,
        book_dir: Path,
        reason: str,
        *,
        returncode: int | None = None,
    ) -> None:
        self.book_dir = book_dir
        self.reason = reason
        self.returncode = returncode
        msg = f"Failed to assemble {book_dir}"
        if returncode is not None:
            msg += f" (exit {returncode})"
        msg += f": {reason}"
        super().__init__(msg)


class OutlineResolutionError(Eduka2PdfError):
    """A table-of-contents node could not be anchored to a document page."""

    def __init__(self, title: str, message: str) -> None:
        self.title = title
        super().__init__(message)


class MissingAnchorPage(OutlineResolutionError):
    def __init__(self, title: str) -> None:
        super().__init__(title, f"Outline node {title!r} has no page and no child to fall back on")


class PageOffsetMismatch(OutlineResolutionError):
    """The shifted page number of a node is not a page of the document."""

    def __init__(self, title: str, logical_page: int, physical_page: int, page_count: int):
        self.logical_page = logical_page
        self.physical_page = physical_page
        self.page_count = page_count
        super().__init__(
            title,
            f"Outline node {title!r}: logical page {logical_page} maps to physical page "
            f"{physical_page}, but the document has {page_count} pages",
        )


__all__ = [
    "AssemblyError",
    "AuthenticationError",
    "Eduka2PdfError",
    "FetchExhausted",
    "MissingAnchorPage",
    "OutlineResolutionError",
    "PageOffsetMismatch",
    "UnexpectedResponse",
]
