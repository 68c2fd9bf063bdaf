from __future__ import annotations

from eduka2pdf.model.book import Book
from eduka2pdf.types import OutlineNode, PageLocator


def _book() -> Book:
    return Book(
        id=12,
        title="Biologija: 1 dalis",
        page_shift=2,
        native_downloadable=True,
        page_urls=["https://e.test/a.png", "https://e.test/b.png"],
        outline=[OutlineNode.of("Ląstelė", 0, [OutlineNode.of("Branduolys", 4)])],
    )


def test_locators_follow_listing_order() -> None:
    assert _book().locators() == [
        PageLocator(0, "https://e.test/a.png"),
        PageLocator(1, "https://e.test/b.png"),
    ]
    assert PageLocator(11, "u").filename == "11.png"


def test_layout_names() -> None:
    book = _book()
    assert book.directory_name() == "Biologija: 1 dalis ;;; 12"
    assert book.pdf_name == "12.pdf"
    assert Book(id=1, title=" / ").directory_name() == "- ;;; 1"
    assert Book(id=1, title="  ").directory_name() == "untitled ;;; 1"


def test_metadata_sidecar_survives_json() -> None:
    book = _book()
    assert Book.from_dict(book.to_dict()) == book
