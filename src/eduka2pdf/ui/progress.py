"""Rich progress rendering driven by pipeline events.

The pipeline reports ``(event, payload)`` pairs through plain callbacks; this
reporter is the only place that knows how they are displayed.
"""

from __future__ import annotations

from types import TracebackType

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)


class ProgressReporter:
    def __init__(self, console: Console | None = None, *, transient: bool = False) -> None:
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=console,
            transient=transient,
        )
        self._tasks: dict[str, TaskID] = {}
        self._totals: dict[str, int] = {}

    def __enter__(self) -> ProgressReporter:
        self.progress.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.progress.stop()

    def add_step(self, description: str, total: int | None) -> TaskID:
        return self.progress.add_task(description, total=total)

    def finish_task(self, task_id: TaskID) -> None:
        task = self.progress.tasks[self.progress.task_ids.index(task_id)]
        if task.total is not None:
            self.progress.update(task_id, completed=task.total)
        self.progress.remove_task(task_id)

    def _start(self, key: str, description: str, total: int | None) -> None:
        self._finish(key)
        self._tasks[key] = self.add_step(description, total)
        if total is not None:
            self._totals[key] = total

    def _advance(self, key: str, description: str | None = None) -> None:
        task_id = self._tasks.get(key)
        if task_id is None:
            return
        if description is not None:
            self.progress.update(task_id, description=description)
        self.progress.advance(task_id)

    def _finish(self, key: str) -> None:
        task_id = self._tasks.pop(key, None)
        self._totals.pop(key, None)
        if task_id is not None and task_id in self.progress.task_ids:
            self.finish_task(task_id)

    def emit(self, event: str, payload: dict[str, int | str]) -> None:
        if event == "book:start":
            self._start("book", f"Book {payload.get('book_id', '?')}", None)
        elif event == "book:done":
            self._finish("book")
        elif event == "download:start":
            self._start("pages", "Downloading pages", int(payload.get("total", 0)))
        elif event == "page:saved":
            self._advance("pages")
        elif event == "download:finalized":
            self._finish("pages")
        elif event == "assemble:start":
            self._start("assemble", "Assembling PDF", None)
        elif event == "assemble:done":
            self._finish("assemble")
        elif event == "outline:start":
            self._start("outline", "Attaching bookmarks", int(payload.get("nodes", 0)))
        elif event == "outline:entry":
            self._advance("outline")
        elif event == "outline:finalized":
            self._finish("outline")


__all__ = ["ProgressReporter"]
