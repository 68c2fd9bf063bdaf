from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from eduka2pdf.types import OutlineNode, PageLocator

DIR_SEPARATOR = " ;;; "


@dataclass(slots=True)
class Package:
    id: int
    authors: str
    publishing_house: str
    teaching_tool_ids: list[int] = field(default_factory=list)


@dataclass(slots=True)
class Book:
    """One teaching tool with everything needed to build its PDF."""

    id: int
    title: str
    page_shift: int = 0
    native_downloadable: bool = False
    page_urls: list[str] = field(default_factory=list)
    outline: list[OutlineNode] = field(default_factory=list)

    def locators(self) -> list[PageLocator]:
        return [PageLocator(index=i, url=url) for i, url in enumerate(self.page_urls)]

    def directory_name(self) -> str:
        # Titles come from the platform and may contain path separators
        safe_title = re.sub(r"[/\\\x00]+", "-", self.title).strip() or "untitled"
        return f"{safe_title}{DIR_SEPARATOR}{self.id}"

    @property
    def pdf_name(self) -> str:
        return f"{self.id}.pdf"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "page_shift": self.page_shift,
            "native_downloadable": self.native_downloadable,
            "page_urls": list(self.page_urls),
            "outline": [_node_to_dict(n) for n in self.outline],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Book:
        return cls(
            id=int(data["id"]),
            title=str(data["title"]),
            page_shift=int(data.get("page_shift", 0)),
            native_downloadable=bool(data.get("native_downloadable", False)),
            page_urls=[str(u) for u in data.get("page_urls", [])],
            outline=[_node_from_dict(n) for n in data.get("outline", [])],
        )


def _node_to_dict(node: OutlineNode) -> dict[str, Any]:
    return {
        "title": node.title,
        "direct_page": node.direct_page,
        "children": [_node_to_dict(c) for c in node.children],
    }


def _node_from_dict(data: dict[str, Any]) -> OutlineNode:
    page = data.get("direct_page")
    return OutlineNode.of(
        str(data["title"]),
        int(page) if page is not None else None,
        [_node_from_dict(c) for c in data.get("children", [])],
    )
