"""Bounded-concurrency download of all pages of a book.

Two scheduling modes share one contract: every locator is fetched exactly
once into ``<index>.png`` and never more than ``batch_size`` fetches are in
flight.

- ``LOCKSTEP`` splits the locators into consecutive groups of ``batch_size``
  (by position, not completion) and waits for a group to fully drain before
  launching the next one.
- ``WINDOW`` keeps up to ``batch_size`` fetches running at all times using a
  semaphore, so a slow page does not idle the other slots.

Arrival order is irrelevant: the locator index alone fixes the page order of
the assembled document.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from contextlib import suppress
from dataclasses import dataclass, field
from pathlib import Path

import httpx

from eduka2pdf.fetch.manifest import PageManifest
from eduka2pdf.fetch.page_fetcher import fetch_page
from eduka2pdf.model.options import ConcurrencyMode, DownloadOptions, RetryPolicy
from eduka2pdf.types import PageLocator

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, dict[str, int | str]], None] | None


def _safe_emit(on_progress: ProgressCallback, event: str, payload: dict[str, int | str]) -> None:
    if on_progress is None:
        return
    with suppress(Exception):
        on_progress(event, payload)


SKIP_COMPLETE = "complete"
SKIP_FOREIGN = "foreign"


@dataclass
class DownloadReport:
    fetched: list[int] = field(default_factory=list)
    bytes_written: int = 0
    skip_reason: str | None = None

    @property
    def skipped(self) -> bool:
        return self.skip_reason is not None


async def _settle(tasks: list[Awaitable[None]]) -> None:
    """Wait for every task, then re-raise the first failure."""
    results = await asyncio.gather(*tasks, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result


async def download_pages(
    client: httpx.AsyncClient,
    locators: list[PageLocator],
    dest_dir: Path,
    *,
    batch_size: int = 10,
    mode: ConcurrencyMode = ConcurrencyMode.WINDOW,
    retry: RetryPolicy | None = None,
    manifest: PageManifest | None = None,
    on_progress: ProgressCallback = None,
) -> DownloadReport:
    """Fetch every locator into ``dest_dir`` with at most ``batch_size`` in flight.

    When a page exhausts its retries the error is raised once the fetches
    already running have settled; in window mode no further pages are started
    after the first failure. Pages that did complete are recorded in
    ``manifest`` so a later run can resume.
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")

    report = DownloadReport()
    _safe_emit(on_progress, "download:start", {"total": len(locators), "dir": str(dest_dir)})

    async def _one(loc: PageLocator) -> None:
        written = await fetch_page(client, loc.url, dest_dir / loc.filename, retry)
        if manifest is not None:
            await asyncio.to_thread(manifest.mark_done, loc.index)
        report.fetched.append(loc.index)
        report.bytes_written += written
        _safe_emit(on_progress, "page:saved", {"index": loc.index})

    if mode is ConcurrencyMode.LOCKSTEP:
        for start in range(0, len(locators), batch_size):
            group = locators[start : start + batch_size]
            logger.debug("Launching pages %d-%d", group[0].index, group[-1].index)
            await _settle([_one(loc) for loc in group])
    else:
        slots = asyncio.Semaphore(batch_size)
        failed = asyncio.Event()

        async def _bounded(loc: PageLocator) -> None:
            async with slots:
                if failed.is_set():
                    return
                try:
                    await _one(loc)
                except BaseException:
                    failed.set()
                    raise

        await _settle([_bounded(loc) for loc in locators])

    _safe_emit(
        on_progress,
        "download:finalized",
        {"pages": len(report.fetched), "bytes": report.bytes_written},
    )
    return report


async def download_book_pages(
    client: httpx.AsyncClient,
    locators: list[PageLocator],
    book_dir: Path,
    options: DownloadOptions,
    on_progress: ProgressCallback = None,
) -> DownloadReport:
    """Download a book into ``book_dir`` unless it is already there.

    - missing directory: create it with a fresh manifest, fetch everything
    - directory with a complete manifest: skip, nothing is written
    - directory with a partial manifest: fetch only the missing pages
    - directory without a manifest: another run owns it, skip
    """
    if book_dir.exists():
        manifest = PageManifest.load(book_dir)
        if manifest is None:
            logger.info("Skipping %s: directory exists without a page manifest", book_dir.name)
            return DownloadReport(skip_reason=SKIP_FOREIGN)
        pending = manifest.pending(locators)
        if manifest.total == len(locators) and manifest.complete:
            logger.info("Skipping %s: all %d pages already downloaded", book_dir.name, manifest.total)
            return DownloadReport(skip_reason=SKIP_COMPLETE)
        logger.info(
            "Resuming %s: %d of %d pages missing", book_dir.name, len(pending), len(locators)
        )
        if manifest.total != len(locators):
            manifest.total = len(locators)
            manifest.save()
    else:
        book_dir.mkdir(parents=True)
        manifest = PageManifest.create(book_dir, len(locators))
        pending = locators

    return await download_pages(
        client,
        pending,
        book_dir,
        batch_size=options.batch_size,
        mode=options.concurrency_mode,
        retry=options.retry,
        manifest=manifest,
        on_progress=on_progress,
    )


__all__ = [
    "SKIP_COMPLETE",
    "SKIP_FOREIGN",
    "DownloadReport",
    "download_book_pages",
    "download_pages",
]
