from __future__ import annotations

import os
from pathlib import Path
from typing import cast

from ..types import PdfDocumentLike


def open_pdf(path: Path) -> PdfDocumentLike:
    """Open a PDF with PyMuPDF and return the document object.

    Importing fitz inside this function avoids import costs for callers that
    don't need PDF capabilities (and eases testing).
    """

    import fitz

    return cast(PdfDocumentLike, fitz.open(str(path)))


def save_pdf(document: PdfDocumentLike, path: Path) -> None:
    """Save ``document`` over ``path`` via a temp file and an atomic rename.

    PyMuPDF refuses a full save onto the file it was opened from.
    """
    tmp_path = path.with_name(f".{path.name}.tmp")
    try:
        document.save(str(tmp_path), garbage=3, deflate=True)
        os.replace(tmp_path, path)
    finally:
        tmp_path.unlink(missing_ok=True)
