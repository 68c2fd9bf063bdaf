import json
import logging
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import httpx
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from eduka2pdf.source.parsing import BASE_URL  # noqa: E402


@pytest.fixture
def isolate_logging():
    """Isolate logging configuration between tests to prevent CI issues.

    The CLI installs its own root handler (``setup_logging``); tests invoking it
    through CliRunner would otherwise leave a handler bound to a closed stream.
    """
    # Store original logging state
    original_handlers = logging.root.handlers[:]
    original_level = logging.root.level

    # Clear all handlers to prevent stream access issues
    logging.root.handlers.clear()

    # Add a null handler that won't cause stream issues
    null_handler = logging.NullHandler()
    logging.root.addHandler(null_handler)

    yield

    # Restore original logging state
    logging.root.handlers.clear()
    logging.root.handlers.extend(original_handlers)
    logging.root.setLevel(original_level)


def make_pdf(path: Path, pages: int) -> Path:
    """Write a blank PDF with ``pages`` pages."""
    import fitz

    doc = fitz.open()
    for _ in range(pages):
        doc.new_page()
    doc.save(str(path))
    doc.close()
    return path


@dataclass
class FakeBook:
    title: str = "Matematika 5"
    part: str = "1 dalis"
    pages: int = 3
    page_shift: int = 0
    chapters: list[dict[str, Any]] = field(default_factory=list)
    downloadable: bool = False


@dataclass
class FakeEduka:
    """In-memory stand-in for the Eduka API, served through httpx.MockTransport."""

    books: dict[int, FakeBook] = field(default_factory=dict)
    packages: dict[int, list[int]] = field(default_factory=dict)
    username: str = "mokinys"
    password: str = "slaptas"
    failing_images: set[str] = field(default_factory=set)
    requests: list[str] = field(default_factory=list)

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.requests.append(path)

        if path == "/api/anonymously/login" and request.method == "POST":
            body = json.loads(request.content)
            if body == {"username": self.username, "password": self.password}:
                return httpx.Response(200, json={"ok": True})
            return httpx.Response(401, json={"error": "bad credentials"})

        if m := re.fullmatch(r"/api/authenticated/teaching-package/(\d+)", path):
            tools = self.packages.get(int(m.group(1)))
            if tools is None:
                return httpx.Response(404)
            return httpx.Response(
                200,
                json={
                    "id": int(m.group(1)),
                    "authors": "A. Autorius",
                    "publishing_house": "Šviesa",
                    "teaching_tools": [{"id": t} for t in tools],
                },
            )

        if m := re.fullmatch(r"/api/authenticated/teaching-tool/is-downloadable/(\d+)", path):
            book = self.books.get(int(m.group(1)))
            if book is None:
                return httpx.Response(404)
            return httpx.Response(200, json={"isDownloadable": book.downloadable})

        if m := re.fullmatch(r"/api/authenticated/part/show-by-teaching-tool/(\d+)", path):
            book = self.books.get(int(m.group(1)))
            if book is None:
                return httpx.Response(404)
            return httpx.Response(200, json={"title": book.title, "parts": [{"title": book.part}]})

        if m := re.fullmatch(r"/api/authenticated/teaching-tool/pages/(\d+)", path):
            tool_id = int(m.group(1))
            book = self.books.get(tool_id)
            if book is None:
                return httpx.Response(404)
            pages = [{"img": {"1140": f"/img/{tool_id}/{i}.png"}} for i in range(book.pages)]
            return httpx.Response(
                200,
                json={"pages": pages, "pageShift": book.page_shift, "chapters": book.chapters},
            )

        if path.startswith("/img/"):
            if path in self.failing_images:
                return httpx.Response(503)
            return httpx.Response(200, content=path.encode())

        return httpx.Response(404)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler), base_url=BASE_URL)


@pytest.fixture
def fake_eduka() -> FakeEduka:
    return FakeEduka()


@pytest.fixture
def fake_assembler(monkeypatch: pytest.MonkeyPatch) -> list[Path]:
    """Replace img2pdf/ocrmypdf with a PyMuPDF document of one page per image."""
    from eduka2pdf import pipeline
    from eduka2pdf.assemble import list_page_images

    calls: list[Path] = []

    def fake_assemble(book_dir: Path, output_name: str, **kwargs: Any) -> Path:
        calls.append(book_dir)
        return make_pdf(book_dir / output_name, len(list_page_images(book_dir)))

    monkeypatch.setattr(pipeline, "assemble_document", fake_assemble)
    return calls
