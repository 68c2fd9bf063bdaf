from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol


class PdfDocumentLike(Protocol):
    """Minimal protocol for the PyMuPDF document object we rely on."""

    @property
    def page_count(self) -> int:  # pragma: no cover - typing
        ...

    def get_toc(self, simple: bool = ...) -> list[list[object]]:  # pragma: no cover - typing
        ...

    def set_toc(self, toc: list[list[object]]) -> int:  # pragma: no cover - typing
        ...

    def save(self, filename: str, **kwargs: object) -> None:  # pragma: no cover - typing
        ...

    def close(self) -> None:  # pragma: no cover - typing
        ...


@dataclass(frozen=True)
class PageLocator:
    """One remote page image and its position in the assembled document.

    - index: 0-based position; also the image base filename
    - url: address of the page image
    """

    index: int
    url: str

    @property
    def filename(self) -> str:
        return f"{self.index}.png"


@dataclass(frozen=True)
class OutlineNode:
    """A table-of-contents node as reported by the source.

    - title: display string, not yet sanitized
    - direct_page: logical page number; None or 0 means "no page assigned"
    - children: ordered nested nodes
    """

    title: str
    direct_page: int | None = None
    children: tuple[OutlineNode, ...] = field(default_factory=tuple)

    @classmethod
    def of(
        cls, title: str, direct_page: int | None = None, children: Sequence[OutlineNode] = ()
    ) -> OutlineNode:
        return cls(title=title, direct_page=direct_page, children=tuple(children))

    def iter_preorder(self) -> list[OutlineNode]:
        result: list[OutlineNode] = [self]
        for child in self.children:
            result.extend(child.iter_preorder())
        return result


@dataclass(frozen=True)
class DocumentOutlineEntry:
    """A bookmark of the assembled document.

    - title: sanitized display string
    - page: 1-based physical page number
    - parent: arena index of the parent entry, None at root
    - level: 1-based depth
    """

    title: str
    page: int
    parent: int | None
    level: int
