"""Environment probe for the external tools used to assemble books.

Used by ``eduka2pdf doctor``. Nothing here touches the network or a book
directory; each check only looks for an executable or imports a module.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass


@dataclass(frozen=True)
class ToolStatus:
    name: str
    available: bool
    detail: str
    required: bool = True


def _probe_executable(name: str, *, required: bool) -> ToolStatus:
    path = shutil.which(name)
    if path is None:
        return ToolStatus(name, False, "not found on PATH", required)
    return ToolStatus(name, True, path, required)


def _probe_pymupdf() -> ToolStatus:
    try:
        import fitz
    except ImportError as exc:
        return ToolStatus("pymupdf", False, f"import failed: {exc}")
    version = getattr(fitz, "VersionBind", None) or getattr(fitz, "__version__", "unknown")
    return ToolStatus("pymupdf", True, str(version))


def probe_tools(*, need_ocr: bool = True) -> list[ToolStatus]:
    return [
        _probe_executable("img2pdf", required=True),
        _probe_executable("ocrmypdf", required=need_ocr),
        _probe_pymupdf(),
    ]


def format_report_lines(report: list[ToolStatus]) -> list[str]:
    lines: list[str] = []
    for status in report:
        mark = "OK " if status.available else ("ERR" if status.required else "-- ")
        suffix = "" if status.required else " (optional)"
        lines.append(f"[{mark}] {status.name}{suffix}: {status.detail}")
    return lines


def report_is_ok(report: list[ToolStatus]) -> bool:
    return all(s.available for s in report if s.required)


__all__ = ["ToolStatus", "format_report_lines", "probe_tools", "report_is_ok"]
