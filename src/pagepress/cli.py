"""PagePress CLI."""

import asyncio
import json
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.table import Table

from pagepress.errors import BatchPartialFailure, PagePressError
from pagepress.export import parse_batch, parse_request, render_one
from pagepress.logger import setup_logging
from pagepress.models import BatchResult, DatabaseRequest
from pagepress.pipeline import BatchExporter, PDFRenderer, compose_document
from pagepress.validation import validate_field_names, validate_letterhead

app = typer.Typer(
    name="pagepress",
    help="Render structured page and database content into branded PDFs",
    add_completion=False,
)
console = Console()


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, help="Log level (default from settings)"),
    log_file: Optional[str] = typer.Option(None, help="Also log to this file"),
) -> None:
    setup_logging(log_level, log_file)


def _load_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[bold red]Cannot read {path}:[/bold red] {e}")
        raise typer.Exit(code=2)


def _fail(error: PagePressError) -> None:
    details = ", ".join(f"{k}={v}" for k, v in error.to_dict().items() if v and k != "message")
    console.print(f"[bold red]Error:[/bold red] {error.message}")
    if details:
        console.print(f"[dim]{details}[/dim]")
    raise typer.Exit(code=1)


def _prepare(request_path: Path, letterhead_path: Path, hide: list[str]):
    try:
        request = parse_request(_load_json(request_path))
        letterhead = validate_letterhead(_load_json(letterhead_path))
        label = "hidden columns" if isinstance(request, DatabaseRequest) else "hidden properties"
        hidden = validate_field_names(hide, label)
    except PagePressError as e:
        _fail(e)
    return request, letterhead, hidden


@app.command()
def render(
    request_path: Path = typer.Argument(..., help="Document request JSON (page or database)"),
    letterhead: Path = typer.Option(..., "--letterhead", "-l", help="Letterhead JSON"),
    output: Path = typer.Option(Path("export.pdf"), "--output", "-o", help="Output PDF path"),
    hide: list[str] = typer.Option([], "--hide", help="Property or column name to hide"),
) -> None:
    """Render a single document to PDF."""
    request, letterhead_spec, hidden = _prepare(request_path, letterhead, hide)
    console.print(f"[bold blue]Rendering:[/bold blue] {request.title}")
    try:
        artifact = asyncio.run(render_one(request, letterhead_spec, hidden))
    except PagePressError as e:
        _fail(e)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(artifact.data)
    console.print(
        f"[green]Wrote {output}[/green] [dim]({artifact.page_count} page(s), "
        f"{artifact.size_bytes} bytes)[/dim]"
    )


@app.command()
def preview(
    request_path: Path = typer.Argument(..., help="Document request JSON (page or database)"),
    letterhead: Path = typer.Option(..., "--letterhead", "-l", help="Letterhead JSON"),
    output: Path = typer.Option(Path("export.html"), "--output", "-o", help="Output HTML path"),
    hide: list[str] = typer.Option([], "--hide", help="Property or column name to hide"),
) -> None:
    """Write the composed HTML without starting the render engine."""
    request, letterhead_spec, hidden = _prepare(request_path, letterhead, hide)
    document = compose_document(request, letterhead_spec, hidden)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(document.html, encoding="utf-8")
    console.print(f"[green]Wrote {output}[/green]")
    if document.unsupported_blocks or document.faulted_blocks:
        console.print(
            f"[yellow]{document.unsupported_blocks} unsupported and "
            f"{document.faulted_blocks} faulted block(s) left out[/yellow]"
        )


def _print_report(result: BatchResult) -> None:
    console.print(f"[bold]Exported {result.succeeded}/{result.total} document(s)[/bold]")
    if not result.failures:
        return
    table = Table(title="Failed documents")
    table.add_column("#", justify="right")
    table.add_column("Title")
    table.add_column("Fault")
    table.add_column("Phase")
    table.add_column("Message")
    for failure in result.failures:
        table.add_row(
            str(failure.index + 1),
            failure.title,
            failure.kind.value,
            failure.phase.value if failure.phase else "-",
            failure.message,
        )
    console.print(table)


@app.command()
def batch(
    job_path: Path = typer.Argument(..., help="Batch job JSON (documents + letterhead)"),
    output: Path = typer.Option(Path("exports.zip"), "--output", "-o", help="Output archive path"),
    concurrency: Optional[int] = typer.Option(None, help="Maximum parallel render engines"),
    fail_fast: bool = typer.Option(False, "--fail-fast", help="Stop at the first failed document"),
) -> None:
    """Render a batch of documents into one zip archive."""
    raw = _load_json(job_path)
    try:
        if isinstance(raw, dict):
            raw["letterhead"] = validate_letterhead(raw.get("letterhead"))
            raw["hidden_properties"] = validate_field_names(
                raw.pop("hiddenProperties", raw.get("hidden_properties")), "hidden properties"
            )
            raw["hidden_columns"] = validate_field_names(
                raw.pop("hiddenColumns", raw.get("hidden_columns")), "hidden columns"
            )
        job = parse_batch(raw)
    except PagePressError as e:
        _fail(e)

    console.print(f"[bold blue]Batch exporting:[/bold blue] {len(job.documents)} document(s)")
    exporter = BatchExporter(PDFRenderer(), max_concurrency=concurrency, fail_fast=fail_fast)
    try:
        result = asyncio.run(exporter.export(job))
    except BatchPartialFailure as e:
        result = e.result
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(result.archive)
    console.print(f"[green]Wrote {output}[/green]")
    _print_report(result)
    if result.is_partial:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
