from __future__ import annotations

import pytest

from eduka2pdf.errors import MissingAnchorPage, PageOffsetMismatch
from eduka2pdf.outline.resolver import logical_anchor, resolve_physical_page
from eduka2pdf.types import OutlineNode


def test_direct_page_is_shifted() -> None:
    assert resolve_physical_page(OutlineNode.of("Skyrius", 10), 3, 20) == 7


def test_zero_page_falls_back_to_first_child() -> None:
    child = OutlineNode.of("Child", 5, [OutlineNode.of("Grandchild", 6)])
    root = OutlineNode.of("Root", 0, [child, OutlineNode.of("Other", 9)])
    assert logical_anchor(root) == 5
    assert resolve_physical_page(root, 2, 10) == 3
    assert resolve_physical_page(root.children[0], 2, 10) == 3


def test_missing_page_falls_back_to_first_child() -> None:
    root = OutlineNode.of("Root", None, [OutlineNode.of("Child", 4)])
    assert resolve_physical_page(root, 0, 10) == 4


def test_fallback_is_single_level() -> None:
    grandchild = OutlineNode.of("Deep", 8)
    root = OutlineNode.of("Root", 0, [OutlineNode.of("Child", 0, [grandchild])])
    assert logical_anchor(root) is None
    with pytest.raises(MissingAnchorPage) as excinfo:
        resolve_physical_page(root, 0, 10)
    assert excinfo.value.title == "Root"


def test_leaf_without_page_is_missing_anchor() -> None:
    with pytest.raises(MissingAnchorPage):
        resolve_physical_page(OutlineNode.of("Leaf"), 0, 10)


def test_shift_past_end_of_document_is_a_mismatch() -> None:
    assert resolve_physical_page(OutlineNode.of("Skyrius", 10), 3, 7) == 7
    with pytest.raises(PageOffsetMismatch) as excinfo:
        resolve_physical_page(OutlineNode.of("Skyrius", 10), 3, 6)
    err = excinfo.value
    assert (err.logical_page, err.physical_page, err.page_count) == (10, 7, 6)
    assert "Skyrius" in str(err) and "6 pages" in str(err)


def test_shift_before_first_page_is_a_mismatch() -> None:
    with pytest.raises(PageOffsetMismatch):
        resolve_physical_page(OutlineNode.of("Virselis", 2), 2, 10)


def test_bounds_are_inclusive() -> None:
    assert resolve_physical_page(OutlineNode.of("First", 1), 0, 5) == 1
    assert resolve_physical_page(OutlineNode.of("Last", 5), 0, 5) == 5
