from __future__ import annotations

from eduka2pdf.ui.progress import ProgressReporter


def test_progress_download_flow() -> None:
    with ProgressReporter() as pr:
        pr.emit("download:start", {"total": 3, "dir": "x"})
        assert "pages" in pr._tasks
        assert pr._totals.get("pages") == 3
        pr.emit("page:saved", {"index": 0})
        pr.emit("page:saved", {"index": 2})
        pr.emit("page:saved", {"index": 1})
        pr.emit("download:finalized", {"pages": 3, "bytes": 10})
        # pages task finalized and removed
        assert "pages" not in pr._tasks


def test_progress_book_assemble_outline() -> None:
    with ProgressReporter() as pr:
        pr.emit("book:start", {"book_id": 7})
        assert "book" in pr._tasks
        pr.emit("assemble:start", {"book_id": 7})
        assert "assemble" in pr._tasks
        pr.emit("assemble:done", {"book_id": 7})
        assert "assemble" not in pr._tasks
        pr.emit("outline:start", {"nodes": 2})
        assert pr._totals.get("outline") == 2
        pr.emit("outline:entry", {"title": "A"})
        pr.emit("outline:entry", {"title": "B"})
        pr.emit("outline:finalized", {"entries": 2, "failures": 0})
        assert "outline" not in pr._tasks
        pr.emit("book:done", {"book_id": 7})
        assert pr._tasks == {}


def test_progress_ignores_unknown_and_out_of_order_events() -> None:
    with ProgressReporter() as pr:
        pr.emit("page:saved", {"index": 0})
        pr.emit("something:else", {})
        pr.emit("download:finalized", {})
        assert pr._tasks == {}
