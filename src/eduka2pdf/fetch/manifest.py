"""Per-page completion manifest stored beside the page images.

The manifest distinguishes a finished book directory from one that was
interrupted, which the directory's existence alone cannot tell.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path

from eduka2pdf.io_utils import read_json, write_json
from eduka2pdf.types import PageLocator

logger = logging.getLogger(__name__)

MANIFEST_NAME = ".pages.json"


@dataclass
class PageManifest:
    path: Path
    total: int
    done: set[int] = field(default_factory=set)
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    @classmethod
    def create(cls, book_dir: Path, total: int) -> PageManifest:
        manifest = cls(path=book_dir / MANIFEST_NAME, total=total)
        manifest.save()
        return manifest

    @classmethod
    def load(cls, book_dir: Path) -> PageManifest | None:
        """Return the manifest of ``book_dir``, or None when absent or unreadable."""
        path = book_dir / MANIFEST_NAME
        if not path.is_file():
            return None
        try:
            data = read_json(path)
            return cls(
                path=path,
                total=int(data["total"]),
                done={int(i) for i in data.get("done", [])},
            )
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Ignoring unreadable page manifest %s: %s", path, exc)
            return None

    @property
    def complete(self) -> bool:
        return all(i in self.done for i in range(self.total))

    def pending(self, locators: list[PageLocator]) -> list[PageLocator]:
        return [loc for loc in locators if loc.index not in self.done]

    def mark_done(self, index: int) -> None:
        """Record a finished page and persist; safe to call from worker threads."""
        with self._lock:
            self.done.add(index)
            self._write()

    def save(self) -> None:
        with self._lock:
            self._write()

    def _write(self) -> None:
        write_json(self.path, {"total": self.total, "done": sorted(self.done)})


__all__ = ["MANIFEST_NAME", "PageManifest"]
