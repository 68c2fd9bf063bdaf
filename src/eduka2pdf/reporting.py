"""Centralized decision logging for the eduka2pdf pipeline.

This module logs configuration and per-book decisions for debugging and
troubleshooting. It does not overlap with ProgressReporter, which only
renders user-facing progress.
"""

from __future__ import annotations

import logging

from eduka2pdf.model.options import DownloadOptions

logger = logging.getLogger(__name__)


def log_download_configuration(options: DownloadOptions) -> None:
    """Log the run configuration.

    Args:
        options: Options of the current run
    """
    logger.info("Download configuration:")
    logger.info("  Output directory: %s", options.out_dir)
    logger.info("  Concurrency: %s, %d in flight", options.concurrency_mode.value, options.batch_size)
    if options.retry.max_attempts is None:
        logger.info("  Retry: unlimited, no backoff")
    else:
        logger.info(
            "  Retry: %d attempts, backoff %.1fs..%.1fs",
            options.retry.max_attempts,
            options.retry.initial_backoff,
            options.retry.max_backoff,
        )
    logger.info("  OCR: %s", options.ocr_language or "disabled")
    logger.info("  Outline errors: %s", "fail book" if options.strict_outline else "skip bookmark")


def log_book_decision(book_id: int, title: str, decision: str, reason: str | None = None) -> None:
    """Log what happens to one book (e.g. "download", "skip", "resume").

    Args:
        book_id: Teaching tool id
        title: Book title
        decision: The decision made
        reason: Optional explanation
    """
    if reason:
        logger.info("Book %d (%s): %s - %s", book_id, title, decision, reason)
    else:
        logger.info("Book %d (%s): %s", book_id, title, decision)


def log_error_policy(stage: str, error: Exception, action: str) -> None:
    """Log how an error is handled.

    Args:
        stage: Pipeline stage where the error occurred (e.g. "metadata", "assembly")
        error: The error
        action: Action taken (e.g. "abort book", "skip bookmark", "continue")
    """
    logger.warning("%s error policy: %s -> %s (%s)", stage, type(error).__name__, action, error)


__all__ = [
    "log_book_decision",
    "log_download_configuration",
    "log_error_policy",
]
