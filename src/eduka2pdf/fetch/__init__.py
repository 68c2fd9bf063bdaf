from __future__ import annotations

__all__ = [
    "DownloadReport",
    "PageManifest",
    "download_book_pages",
    "download_pages",
    "fetch_page",
]

from .coordinator import DownloadReport as DownloadReport
from .coordinator import download_book_pages as download_book_pages
from .coordinator import download_pages as download_pages
from .manifest import PageManifest as PageManifest
from .page_fetcher import fetch_page as fetch_page
