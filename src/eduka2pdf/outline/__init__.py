from __future__ import annotations

__all__ = [
    "OutlineArena",
    "apply_outline_to_pdf",
    "attach_outline",
    "build_outline",
    "logical_anchor",
    "open_pdf",
    "portable_title",
    "resolve_physical_page",
]

from .builder import OutlineArena as OutlineArena
from .builder import apply_outline_to_pdf as apply_outline_to_pdf
from .builder import attach_outline as attach_outline
from .builder import build_outline as build_outline
from .pdf_io import open_pdf as open_pdf
from .resolver import logical_anchor as logical_anchor
from .resolver import resolve_physical_page as resolve_physical_page
from .titles import portable_title as portable_title
