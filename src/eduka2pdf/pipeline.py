"""Per-book orchestration: metadata -> pages -> PDF -> bookmarks.

Failures are isolated per book: any error raised while handling one book is
recorded in its ``BookResult`` and the run moves on to the next book. Within
a book the stages are strictly ordered, so a failed assembly never reaches
the outline stage.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from contextlib import suppress
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

import httpx

from eduka2pdf.assemble import assemble_document
from eduka2pdf.errors import Eduka2PdfError, UnexpectedResponse
from eduka2pdf.fetch.coordinator import (
    SKIP_COMPLETE,
    SKIP_FOREIGN,
    DownloadReport,
    download_book_pages,
)
from eduka2pdf.io_utils import write_json
from eduka2pdf.model.book import Book
from eduka2pdf.model.options import DownloadOptions
from eduka2pdf.outline.builder import OutlineArena, apply_outline_to_pdf
from eduka2pdf.reporting import log_book_decision, log_error_policy
from eduka2pdf.source.eduka import EdukaClient

logger = logging.getLogger(__name__)

BOOK_METADATA_NAME = "book.json"

ProgressCallback = Callable[[str, dict[str, int | str]], None] | None
Answer = Literal["y", "n", "cancel"]

# Errors that abort one book but not the run
BOOK_ERRORS = (Eduka2PdfError, httpx.HTTPError, OSError)


def _safe_emit(on_progress: ProgressCallback, event: str, payload: dict[str, int | str]) -> None:
    if on_progress is None:
        return
    with suppress(Exception):
        on_progress(event, payload)


@dataclass
class BookResult:
    book_id: int
    title: str = ""
    status: Literal["done", "skipped", "failed"] = "done"
    error: str | None = None
    bookmarks: int = 0
    skipped_bookmarks: int = 0


def book_dir_for(book: Book, options: DownloadOptions) -> Path:
    return options.out_dir / book.directory_name()


async def download_book(
    http: httpx.AsyncClient,
    book: Book,
    options: DownloadOptions,
    on_progress: ProgressCallback = None,
) -> DownloadReport:
    """Download the pages of ``book`` and store its metadata beside them."""
    book_dir = book_dir_for(book, options)
    report = await download_book_pages(http, book.locators(), book_dir, options, on_progress)
    metadata = book_dir / BOOK_METADATA_NAME
    if not report.skipped and not metadata.exists():
        write_json(metadata, book.to_dict())
    return report


def prepare_book(
    book: Book,
    options: DownloadOptions,
    *,
    reassemble: bool = False,
    on_progress: ProgressCallback = None,
) -> OutlineArena:
    """Assemble the PDF of a downloaded book and attach its bookmarks.

    An existing PDF is reused unless ``reassemble`` is set.
    """
    book_dir = book_dir_for(book, options)
    pdf_path = book_dir / book.pdf_name
    if reassemble or not pdf_path.exists():
        _safe_emit(on_progress, "assemble:start", {"book_id": book.id})
        assemble_document(book_dir, book.pdf_name, ocr_language=options.ocr_language)
        _safe_emit(on_progress, "assemble:done", {"book_id": book.id})
    else:
        log_book_decision(book.id, book.title, "reuse PDF", str(pdf_path.name))

    return apply_outline_to_pdf(
        pdf_path,
        book.outline,
        book.page_shift,
        strict=options.strict_outline,
        on_progress=on_progress,
    )


async def run_book(
    http: httpx.AsyncClient,
    book: Book,
    options: DownloadOptions,
    on_progress: ProgressCallback = None,
) -> BookResult:
    """Download and prepare one book whose metadata is already known."""
    result = BookResult(book_id=book.id, title=book.title)
    pdf_path = book_dir_for(book, options) / book.pdf_name
    try:
        report = await download_book(http, book, options, on_progress)
        if report.skip_reason == SKIP_FOREIGN:
            log_book_decision(book.id, book.title, "skip", "directory exists without a page manifest")
            result.status = "skipped"
            return result
        if report.skip_reason == SKIP_COMPLETE and pdf_path.exists():
            log_book_decision(book.id, book.title, "skip", "already downloaded and assembled")
            result.status = "skipped"
            return result
        log_book_decision(book.id, book.title, "downloaded", f"{len(report.fetched)} new pages")
        arena = prepare_book(
            book, options, reassemble=bool(report.fetched), on_progress=on_progress
        )
    except BOOK_ERRORS as exc:
        log_error_policy("book", exc, "abort book")
        result.status = "failed"
        result.error = str(exc)
        return result

    result.bookmarks = len(arena.entries)
    result.skipped_bookmarks = len(arena.failures)
    return result


async def process_book(
    eduka: EdukaClient,
    book_id: int,
    options: DownloadOptions,
    on_progress: ProgressCallback = None,
) -> BookResult:
    """Fetch metadata for ``book_id`` and run it; never raises for book-level errors."""
    _safe_emit(on_progress, "book:start", {"book_id": book_id})
    try:
        try:
            book = await eduka.fetch_book(book_id)
        except BOOK_ERRORS as exc:
            log_error_policy("metadata", exc, "abort book")
            return BookResult(book_id=book_id, status="failed", error=str(exc))
        return await run_book(eduka.http, book, options, on_progress)
    finally:
        _safe_emit(on_progress, "book:done", {"book_id": book_id})


async def process_books(
    eduka: EdukaClient,
    book_ids: Sequence[int],
    options: DownloadOptions,
    on_progress: ProgressCallback = None,
) -> list[BookResult]:
    """Process books one after another; a failed book never stops the others."""
    return [await process_book(eduka, book_id, options, on_progress) for book_id in book_ids]


async def process_packages(
    eduka: EdukaClient,
    package_ids: Sequence[int],
    options: DownloadOptions,
    on_progress: ProgressCallback = None,
) -> list[BookResult]:
    """Process every teaching tool of every package, one book at a time."""
    results: list[BookResult] = []
    for package_id in package_ids:
        try:
            package = await eduka.fetch_package(package_id)
        except BOOK_ERRORS as exc:
            log_error_policy("package", exc, "skip package")
            results.append(
                BookResult(book_id=package_id, title="(package)", status="failed", error=str(exc))
            )
            continue
        logger.info(
            "Package %d by %s (%s): %d books",
            package.id,
            package.authors or "unknown authors",
            package.publishing_house or "unknown publisher",
            len(package.teaching_tool_ids),
        )
        results.extend(
            await process_books(eduka, package.teaching_tool_ids, options, on_progress)
        )
    return results


async def explore(
    eduka: EdukaClient,
    start: int,
    ask: Callable[[Book], Answer],
    *,
    max_consecutive_misses: int | None = 500,
) -> list[Book]:
    """Walk teaching tool ids upward from ``start`` and collect the books picked by ``ask``.

    Ids whose metadata cannot be fetched are skipped silently. The walk ends
    when ``ask`` answers "cancel" or after ``max_consecutive_misses`` ids in a
    row had no usable metadata.
    """
    selected: list[Book] = []
    misses = 0
    tool_id = start
    while max_consecutive_misses is None or misses < max_consecutive_misses:
        logger.debug("Trying teaching tool %d", tool_id)
        try:
            book = await eduka.fetch_book(tool_id)
        except (UnexpectedResponse, httpx.HTTPError) as exc:
            logger.debug("Teaching tool %d unavailable: %s", tool_id, exc)
            misses += 1
            tool_id += 1
            continue
        misses = 0
        answer = ask(book)
        if answer == "y":
            selected.append(book)
        elif answer == "cancel":
            break
        tool_id += 1
    return selected


__all__ = [
    "BOOK_METADATA_NAME",
    "BookResult",
    "book_dir_for",
    "download_book",
    "explore",
    "prepare_book",
    "process_book",
    "process_books",
    "process_packages",
    "run_book",
]
