"""Run options for eduka2pdf.

This module defines the configuration shared by the download, assembly and
outline stages. CLI values are mapped onto these dataclasses by
``DownloadOptions.from_cli`` so that the rest of the pipeline never sees raw
strings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any


class ConcurrencyMode(Enum):
    """How page fetches are scheduled."""

    WINDOW = "window"  # Semaphore: at most batch_size in flight, no idle slots
    LOCKSTEP = "lockstep"  # Fixed groups, each fully drained before the next


@dataclass(frozen=True)
class RetryPolicy:
    """Retry settings for a single page fetch.

    max_attempts=None retries forever; initial_backoff=0 retries immediately.
    """

    max_attempts: int | None = 8
    initial_backoff: float = 0.5
    max_backoff: float = 30.0

    def __post_init__(self) -> None:
        if self.max_attempts is not None and self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1 or None, got {self.max_attempts}")
        if self.initial_backoff < 0 or self.max_backoff < 0:
            raise ValueError("backoff values must be non-negative")

    @classmethod
    def unbounded(cls) -> RetryPolicy:
        return cls(max_attempts=None, initial_backoff=0.0, max_backoff=0.0)


@dataclass
class DownloadOptions:
    """Options for one eduka2pdf run.

    Defaults favor completing a book: bounded retry with backoff, a sliding
    window of 10 concurrent page fetches, and Lithuanian OCR.
    """

    out_dir: Path = Path(".")
    batch_size: int = 10
    concurrency_mode: ConcurrencyMode = ConcurrencyMode.WINDOW
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ocr_language: str | None = "lit"
    strict_outline: bool = False
    request_timeout: float = 60.0

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {self.batch_size}")

    @classmethod
    def from_cli(
        cls,
        *,
        out_dir: Path = Path("."),
        batch_size: int = 10,
        concurrency: str = "window",
        max_attempts: int = 8,
        ocr: str = "lit",
        strict_outline: bool = False,
        request_timeout: float = 60.0,
    ) -> DownloadOptions:
        """Build DownloadOptions from CLI argument values.

        Args:
            out_dir: Directory under which book directories are created
            batch_size: Maximum number of page fetches in flight
            concurrency: Scheduling mode ("window", "lockstep")
            max_attempts: Attempts per page; 0 means retry forever without backoff
            ocr: Tesseract language for ocrmypdf, or "off" to skip OCR
            strict_outline: Fail the book on the first unresolvable bookmark
            request_timeout: Per-request timeout in seconds

        Raises:
            ValueError: If any argument has an invalid value
        """
        try:
            mode = ConcurrencyMode(concurrency)
        except ValueError as exc:
            valid_values = [m.value for m in ConcurrencyMode]
            raise ValueError(
                f"Invalid concurrency mode '{concurrency}'. Valid values: {valid_values}"
            ) from exc

        if max_attempts < 0:
            raise ValueError(f"max_attempts must be >= 0, got {max_attempts}")
        retry = RetryPolicy.unbounded() if max_attempts == 0 else RetryPolicy(max_attempts)

        ocr_language = None if ocr.strip().lower() in ("", "off", "none") else ocr.strip()

        return cls(
            out_dir=out_dir,
            batch_size=batch_size,
            concurrency_mode=mode,
            retry=retry,
            ocr_language=ocr_language,
            strict_outline=strict_outline,
            request_timeout=request_timeout,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "out_dir": str(self.out_dir),
            "batch_size": self.batch_size,
            "concurrency_mode": self.concurrency_mode.value,
            "max_attempts": self.retry.max_attempts,
            "initial_backoff": self.retry.initial_backoff,
            "max_backoff": self.retry.max_backoff,
            "ocr_language": self.ocr_language,
            "strict_outline": self.strict_outline,
            "request_timeout": self.request_timeout,
        }


__all__ = [
    "ConcurrencyMode",
    "DownloadOptions",
    "RetryPolicy",
]
