from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from eduka2pdf.errors import AssemblyError

logger = logging.getLogger(__name__)

IMAGE_SUFFIX = ".png"


def list_page_images(book_dir: Path) -> list[Path]:
    """Return the page images of ``book_dir`` in page order.

    Only files named ``<index>.png`` count; they are sorted numerically so
    ``10.png`` follows ``9.png``.
    """
    images = [p for p in book_dir.glob(f"*{IMAGE_SUFFIX}") if p.stem.isdigit()]
    return sorted(images, key=lambda p: int(p.stem))


def _run(cmd: list[str], *, book_dir: Path, step: str) -> None:
    logger.debug("Running %s in %s", step, book_dir)
    try:
        subprocess.run(cmd, cwd=book_dir, capture_output=True, text=True, check=True)
    except FileNotFoundError as exc:
        raise AssemblyError(book_dir, f"{cmd[0]} not found on PATH") from exc
    except subprocess.CalledProcessError as exc:
        detail = (exc.stderr or exc.stdout or "").strip()
        raise AssemblyError(
            book_dir, f"{step} failed: {detail}", returncode=exc.returncode
        ) from exc


def assemble_document(
    book_dir: Path,
    output_name: str,
    *,
    ocr_language: str | None = "lit",
    img2pdf: str = "img2pdf",
    ocrmypdf: str = "ocrmypdf",
) -> Path:
    """Combine the numbered page images of ``book_dir`` into one PDF.

    - img2pdf lays out the images losslessly, one per page, in index order
    - when ``ocr_language`` is set, ocrmypdf adds a text layer in that language

    Returns the path of the produced document (inside ``book_dir``).

    Raises:
        AssemblyError: If there are no images, a tool is missing or exits non-zero
    """
    images = list_page_images(book_dir)
    if not images:
        raise AssemblyError(book_dir, "no page images found")

    output = book_dir / output_name
    raw = output if ocr_language is None else book_dir / f".{output.stem}.images.pdf"

    _run([img2pdf, *[p.name for p in images], "-o", raw.name], book_dir=book_dir, step="img2pdf")
    if ocr_language is not None:
        try:
            _run(
                [ocrmypdf, "-l", ocr_language, raw.name, output.name],
                book_dir=book_dir,
                step="ocrmypdf",
            )
        finally:
            raw.unlink(missing_ok=True)

    logger.info("Assembled %d pages into %s", len(images), output)
    return output


__all__ = ["IMAGE_SUFFIX", "assemble_document", "list_page_images"]
