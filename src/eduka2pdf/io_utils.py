"""Atomic file writes.

Page images, the page manifest and the book metadata sidecar are all written
through these helpers so that an interrupted run never leaves a truncated file
under its final name.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """Atomically write bytes by writing to a temp file then replacing.

    The temp file lives in the target directory so the final rename never
    crosses filesystems. On failure the temp file is removed.
    """
    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            "wb", dir=str(path.parent), prefix=f".{path.name}.", delete=False
        ) as tmp:
            tmp_path = Path(tmp.name)
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)
        raise


def atomic_write_text(path: Path, data: str, *, encoding: str = "utf-8") -> None:
    atomic_write_bytes(path, data.encode(encoding))


def write_json(path: Path, obj: Any) -> None:
    """Write deterministic, pretty JSON atomically."""
    atomic_write_text(path, json.dumps(obj, ensure_ascii=False, sort_keys=True, indent=2) + "\n")


def read_json(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


__all__ = ["atomic_write_bytes", "atomic_write_text", "read_json", "write_json"]
