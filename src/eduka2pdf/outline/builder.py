"""Map the source table of contents onto the PDF outline.

The tree is flattened in pre-order into an arena: each DocumentOutlineEntry
stores the arena index of its parent instead of a handle into the PDF. This
keeps the mapping independent from document I/O; ``attach_outline`` turns
the arena into PyMuPDF TOC rows in one call.

A node that cannot be anchored to an existing page is skipped together with
its whole subtree (its children were never validated against the document
either); its siblings are still processed. ``strict=True`` raises on the
first such node instead.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from contextlib import suppress
from dataclasses import dataclass, field
from pathlib import Path

from eduka2pdf.errors import OutlineResolutionError
from eduka2pdf.outline.pdf_io import open_pdf, save_pdf
from eduka2pdf.outline.resolver import resolve_physical_page
from eduka2pdf.outline.titles import portable_title
from eduka2pdf.types import DocumentOutlineEntry, OutlineNode, PdfDocumentLike

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, dict[str, int | str]], None] | None


def _safe_emit(on_progress: ProgressCallback, event: str, payload: dict[str, int | str]) -> None:
    if on_progress is None:
        return
    with suppress(Exception):
        on_progress(event, payload)


@dataclass
class OutlineArena:
    entries: list[DocumentOutlineEntry] = field(default_factory=list)
    failures: list[OutlineResolutionError] = field(default_factory=list)

    def add(self, title: str, page: int, parent: int | None) -> int:
        level = 1 if parent is None else self.entries[parent].level + 1
        self.entries.append(DocumentOutlineEntry(title=title, page=page, parent=parent, level=level))
        return len(self.entries) - 1

    def titles(self) -> list[str]:
        return [e.title for e in self.entries]

    def to_toc(self) -> list[list[object]]:
        """Return PyMuPDF ``set_toc`` rows: ``[level, title, 1-based page]``."""
        return [[e.level, e.title, e.page] for e in self.entries]


def build_outline(
    nodes: Sequence[OutlineNode],
    page_shift: int,
    page_count: int,
    *,
    strict: bool = False,
    on_progress: ProgressCallback = None,
) -> OutlineArena:
    """Resolve and flatten ``nodes`` in pre-order, source child order preserved."""
    arena = OutlineArena()
    total = sum(len(n.iter_preorder()) for n in nodes)
    _safe_emit(on_progress, "outline:start", {"nodes": total})

    def _walk(siblings: Sequence[OutlineNode], parent: int | None) -> None:
        for node in siblings:
            try:
                page = resolve_physical_page(node, page_shift, page_count)
            except OutlineResolutionError as exc:
                if strict:
                    raise
                skipped = len(node.iter_preorder()) - 1
                logger.warning("Skipping bookmark (and %d nested): %s", skipped, exc)
                arena.failures.append(exc)
                continue
            index = arena.add(portable_title(node.title), page, parent)
            _safe_emit(on_progress, "outline:entry", {"title": arena.entries[index].title})
            _walk(node.children, index)

    _walk(nodes, None)
    _safe_emit(
        on_progress,
        "outline:finalized",
        {"entries": len(arena.entries), "failures": len(arena.failures)},
    )
    return arena


def attach_outline(document: PdfDocumentLike, arena: OutlineArena) -> int:
    """Install ``arena`` as the document's only outline, replacing any existing one."""
    existing = document.get_toc()
    if existing:
        logger.debug("Replacing existing outline of %d entries", len(existing))
    document.set_toc(arena.to_toc())
    return len(arena.entries)


def apply_outline_to_pdf(
    pdf_path: Path,
    nodes: Sequence[OutlineNode],
    page_shift: int,
    *,
    strict: bool = False,
    on_progress: ProgressCallback = None,
) -> OutlineArena:
    """Open ``pdf_path``, attach the outline built from ``nodes`` and save in place."""
    document = open_pdf(pdf_path)
    try:
        arena = build_outline(
            nodes, page_shift, document.page_count, strict=strict, on_progress=on_progress
        )
        attach_outline(document, arena)
        save_pdf(document, pdf_path)
    finally:
        document.close()
    logger.info(
        "Attached %d bookmarks to %s (%d skipped)",
        len(arena.entries),
        pdf_path.name,
        len(arena.failures),
    )
    return arena


__all__ = ["OutlineArena", "apply_outline_to_pdf", "attach_outline", "build_outline"]
