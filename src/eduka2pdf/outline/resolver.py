from __future__ import annotations

from eduka2pdf.errors import MissingAnchorPage, PageOffsetMismatch
from eduka2pdf.types import OutlineNode


def logical_anchor(node: OutlineNode) -> int | None:
    """Return the source page a node anchors to, before shifting.

    A missing or zero page falls back to the first child's page. Only one
    level is consulted: a first child without a page of its own yields None.
    """
    if node.direct_page:
        return node.direct_page
    if node.children and node.children[0].direct_page:
        return node.children[0].direct_page
    return None


def resolve_physical_page(node: OutlineNode, page_shift: int, page_count: int) -> int:
    """Resolve ``node`` to a 1-based page of a document with ``page_count`` pages.

    Raises:
        MissingAnchorPage: If neither the node nor its first child has a page
        PageOffsetMismatch: If the shifted page is not a page of the document
    """
    logical = logical_anchor(node)
    if logical is None:
        raise MissingAnchorPage(node.title)

    physical = logical - page_shift
    if not 1 <= physical <= page_count:
        raise PageOffsetMismatch(node.title, logical, physical, page_count)
    return physical


__all__ = ["logical_anchor", "resolve_physical_page"]
