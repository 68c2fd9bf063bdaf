"""CLI interface for eduka2pdf."""

import asyncio
from pathlib import Path
from typing import Annotated

import httpx
import typer

from eduka2pdf import __version__
from eduka2pdf.errors import AuthenticationError, Eduka2PdfError
from eduka2pdf.io_utils import read_json
from eduka2pdf.log_setup import setup_logging
from eduka2pdf.model.book import Book
from eduka2pdf.model.options import DownloadOptions
from eduka2pdf.outline.builder import apply_outline_to_pdf
from eduka2pdf.pipeline import (
    BOOK_METADATA_NAME,
    Answer,
    BookResult,
    explore,
    process_packages,
    run_book,
)
from eduka2pdf.reporting import log_download_configuration
from eduka2pdf.source.eduka import EdukaClient, make_http_client
from eduka2pdf.source.parsing import parse_book_id
from eduka2pdf.ui.progress import ProgressReporter

app = typer.Typer(
    name="eduka2pdf",
    help="Download Eduka teaching tools as searchable PDFs with bookmarks.",
    no_args_is_help=True,
)

NATIVE_PREFIX = "[NATIVE DOWNLOADABLE] "
ANSWERS: tuple[Answer, ...] = ("y", "n", "cancel")


def ask_user(book: Book) -> Answer:
    """Ask whether an explored book should be downloaded."""
    prefix = NATIVE_PREFIX if book.native_downloadable else ""
    while True:
        text = f"{prefix}Should {book.title} be downloaded (y/n/cancel)"
        answer = typer.prompt(text).strip().lower()
        for choice in ANSWERS:
            if answer == choice:
                return choice
        typer.echo("Please answer y, n or cancel.")


async def _run_download(
    username: str,
    password: str,
    package_ids: list[int],
    explore_from: int,
    options: DownloadOptions,
    reporter: ProgressReporter | None,
) -> list[BookResult]:
    on_progress = reporter.emit if reporter is not None else None
    async with make_http_client(
        timeout=options.request_timeout, max_connections=max(20, options.batch_size)
    ) as http:
        eduka = EdukaClient(http)
        await eduka.login(username, password)

        if package_ids:
            return await process_packages(eduka, package_ids, options, on_progress)

        books = await explore(eduka, explore_from, ask_user)
        return [await run_book(http, book, options, on_progress) for book in books]


def _print_summary(results: list[BookResult]) -> None:
    icons = {"done": "✅", "skipped": "⏭️ ", "failed": "❌"}
    for result in results:
        line = f"{icons[result.status]} {result.book_id} {result.title}".rstrip()
        if result.status == "done":
            line += f" ({result.bookmarks} bookmarks"
            if result.skipped_bookmarks:
                line += f", {result.skipped_bookmarks} skipped"
            line += ")"
        elif result.error:
            line += f": {result.error}"
        typer.echo(line)


@app.command()
def download(
    username: Annotated[
        str,
        typer.Option("--username", "-u", envvar="EDUKA_USERNAME", prompt=True, help="Eduka username"),
    ],
    password: Annotated[
        str,
        typer.Option(
            "--password",
            "-p",
            envvar="EDUKA_PASSWORD",
            prompt=True,
            hide_input=True,
            help="Eduka password",
        ),
    ],
    urls: Annotated[
        list[str] | None,
        typer.Argument(help="Eduka teaching package URLs; explore interactively when omitted"),
    ] = None,
    explore_from: Annotated[
        int,
        typer.Option("--explore-from", help="First teaching tool id tried in explore mode"),
    ] = 0,
    out_dir: Annotated[
        Path,
        typer.Option("--out-dir", help="Directory under which book directories are created"),
    ] = Path("."),
    batch_size: Annotated[
        int,
        typer.Option("--batch-size", min=1, help="Maximum number of page downloads in flight"),
    ] = 10,
    concurrency: Annotated[
        str,
        typer.Option(
            "--concurrency",
            help="Scheduling of page downloads: 'window' (sliding) or 'lockstep' (batches)",
        ),
    ] = "window",
    max_attempts: Annotated[
        int,
        typer.Option(
            "--max-attempts",
            min=0,
            help="Attempts per page before giving up; 0 retries forever without backoff",
        ),
    ] = 8,
    ocr: Annotated[
        str,
        typer.Option("--ocr", help="OCR language passed to ocrmypdf, or 'off'"),
    ] = "lit",
    strict_outline: Annotated[
        bool,
        typer.Option(
            "--strict-outline/--lenient-outline",
            help="Fail a book on the first bookmark that cannot be placed",
        ),
    ] = False,
    timeout: Annotated[
        float,
        typer.Option("--timeout", help="Per-request timeout in seconds"),
    ] = 60.0,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging"),
    ] = False,
) -> None:
    """
    Log in to Eduka and turn teaching tools into PDFs.

    Examples:

        # All books of one package
        eduka2pdf download https://klase.eduka.lt/teaching-package/1234

        # Pick books one by one, starting from tool id 500
        eduka2pdf download --explore-from 500
    """
    setup_logging(verbose)

    try:
        options = DownloadOptions.from_cli(
            out_dir=out_dir,
            batch_size=batch_size,
            concurrency=concurrency,
            max_attempts=max_attempts,
            ocr=ocr,
            strict_outline=strict_outline,
            request_timeout=timeout,
        )
        package_ids = [parse_book_id(url) for url in urls or []]
    except ValueError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc

    log_download_configuration(options)

    try:
        if package_ids:
            with ProgressReporter() as reporter:
                results = asyncio.run(
                    _run_download(username, password, package_ids, explore_from, options, reporter)
                )
        else:
            # prompts and live progress bars don't mix
            results = asyncio.run(
                _run_download(username, password, package_ids, explore_from, options, None)
            )
    except (AuthenticationError, httpx.HTTPError) as exc:
        typer.echo(f"Error: login failed: {exc}", err=True)
        raise typer.Exit(1) from exc

    if not results:
        typer.echo("Nothing to download.")
        return

    typer.echo("")
    _print_summary(results)
    if any(r.status == "failed" for r in results):
        raise typer.Exit(1)


@app.command()
def outline(
    book_dir: Annotated[
        Path,
        typer.Argument(
            help="Book directory containing book.json and the assembled PDF",
            exists=True,
            file_okay=False,
            dir_okay=True,
        ),
    ],
    page_shift: Annotated[
        int | None,
        typer.Option("--page-shift", help="Override the page shift stored in book.json"),
    ] = None,
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Fail on the first bookmark that cannot be placed"),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging"),
    ] = False,
) -> None:
    """Re-apply the bookmarks stored in book.json to an assembled PDF."""
    setup_logging(verbose)

    metadata = book_dir / BOOK_METADATA_NAME
    try:
        book = Book.from_dict(read_json(metadata))
    except (OSError, ValueError, KeyError, TypeError) as exc:
        typer.echo(f"Error: cannot read {metadata}: {exc}", err=True)
        raise typer.Exit(1) from exc

    pdf_path = book_dir / book.pdf_name
    if not pdf_path.exists():
        typer.echo(f"Error: {pdf_path} does not exist; assemble the book first", err=True)
        raise typer.Exit(1)

    shift = book.page_shift if page_shift is None else page_shift
    try:
        arena = apply_outline_to_pdf(pdf_path, book.outline, shift, strict=strict)
    except Eduka2PdfError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc

    typer.echo(f"✅ {len(arena.entries)} bookmarks written to {pdf_path}")
    for failure in arena.failures:
        typer.echo(f"⚠️  {failure}")


@app.command()
def version() -> None:
    """Show version information."""
    typer.echo(f"eduka2pdf version {__version__}")


def version_callback(value: bool) -> None:
    """Version callback for --version flag."""
    if value:
        typer.echo(f"eduka2pdf version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = None,
) -> None:
    """
    eduka2pdf - Download Eduka teaching tools as searchable PDFs.

    Every book ends up in its own directory holding the page images, a
    book.json metadata file and the assembled PDF with its chapter outline.

    For detailed usage, run: eduka2pdf download --help
    """
    pass


@app.command()
def doctor(
    ocr: Annotated[
        bool,
        typer.Option("--ocr/--no-ocr", help="Whether ocrmypdf is required"),
    ] = True,
) -> None:
    """Check that the external tools used to assemble books are available.

    Nothing is downloaded; the command only looks for executables on PATH
    and imports PyMuPDF.
    """
    from eduka2pdf.tools_env import format_report_lines, probe_tools, report_is_ok

    report = probe_tools(need_ocr=ocr)
    for line in format_report_lines(report):
        typer.echo(line)

    if not report_is_ok(report):
        raise typer.Exit(1)


if __name__ == "__main__":  # pragma: no cover - executed only via `python -m`
    app()
