"""CLI interface for docqa."""

import json
import os
from pathlib import Path

import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from ....common.exception_handler import format_exception_json
from ....config.logging import setup_logging
from ....config.settings import settings
from ....core.domain import Document, StructuredAnswer
from ....core.domain.exceptions import InvalidMetadataError

app = typer.Typer(
    name="docqa",
    help="docqa - Ask cited questions about your policy, legal and compliance documents",
    add_completion=False,
)

console = Console(force_terminal=True, legacy_windows=False)

# Determine if we're in debug mode (shows full stack traces)
DEBUG_MODE = os.getenv("DEBUG", "false").lower() == "true"


@app.callback()
def main() -> None:
    """Configure logging before any command runs."""
    setup_logging(settings.log_level, json_format=settings.log_json)


def handle_cli_error(exc: Exception) -> None:
    """Handle and display errors in CLI with structured format.

    In debug mode, shows full JSON error details.
    In normal mode, shows a user-friendly message with error code.

    Args:
        exc: The exception to handle.
    """
    error_data = format_exception_json(exc, include_trace=DEBUG_MODE)

    if DEBUG_MODE:
        # Full JSON output for debugging
        console.print(
            Panel(
                json.dumps(error_data, indent=2),
                title="[bold red]Error Details[/]",
                border_style="red",
            )
        )
    else:
        # User-friendly message
        error_type = error_data["error"]["type"]
        error_msg = error_data["error"]["message"]
        error_code = error_data["error"].get("code", "UNKNOWN")
        location = error_data.get("location", {})

        console.print(f"\n[red]Error [{error_code}]:[/] {error_msg}")
        console.print(f"[dim]Type: {error_type}[/]")

        if location:
            loc_str = f"{location.get('file', '?')}:{location.get('line', '?')} in {location.get('method', '?')}"
            console.print(f"[dim]Location: {loc_str}[/]")

        console.print("[dim]Set DEBUG=true for full details[/]")


def parse_metadata_option(raw: str | None) -> dict:
    """Parse a ``--metadata`` JSON object."""
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        raise InvalidMetadataError(f"--metadata must be a JSON object: {e}", cause=e) from e
    if not isinstance(value, dict):
        raise InvalidMetadataError("--metadata must be a JSON object")
    return value


def parse_filter_options(raw_filters: list[str] | None) -> dict:
    """Parse repeated ``--filter key=value`` options.

    Values are read as JSON when possible (``year=2024`` gives an int),
    otherwise kept as strings.
    """
    filters: dict = {}
    for item in raw_filters or []:
        key, separator, value = item.partition("=")
        if not separator or not key.strip():
            raise InvalidMetadataError(f"Filter must look like key=value, got: {item!r}")
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError:
            parsed = value
        filters[key.strip()] = parsed if not isinstance(parsed, (dict, list)) else value
    return filters


def _print_document(document: Document) -> None:
    color = "green" if document.status.value == "indexed" else "red"
    table = Table(show_header=False, box=None)
    table.add_row("ID", document.doc_id)
    table.add_row("File", document.filename)
    table.add_row("Type", document.content_type)
    table.add_row("Status", f"[{color}]{document.status.value}[/]")
    table.add_row("Chunks", str(document.chunk_count))
    if document.metadata:
        table.add_row("Metadata", json.dumps(document.metadata))
    console.print(table)


def _print_answer(result: StructuredAnswer) -> None:
    console.print(Panel(Markdown(result.answer), title="[bold cyan]Answer[/]", border_style="cyan"))
    console.print(f"[bold]Reasoning:[/] {result.reasoning}")

    if result.conditions:
        console.print("\n[bold]Conditions:[/]")
        for name, value in result.conditions.items():
            console.print(f"  • {name}: {value}")

    if result.citations:
        console.print("\n[dim]Citations:[/]")
        for citation in result.citations:
            page = f", page {citation.page_number}" if citation.page_number else ""
            console.print(f"  [dim]{citation.source_id}{page}[/]")

    console.print(f"\n[dim]Rules: {result.logic_evaluation}[/]")


@app.command()
def ingest(
    locator: str = typer.Argument(..., help="URL, data: URI or path of the document"),
    metadata: str = typer.Option(None, "--metadata", "-m", help="JSON object of domain tags"),
) -> None:
    """Fetch a document and index it."""
    from ....composition.container import get_ingestion_pipeline

    try:
        tags = parse_metadata_option(metadata)
        with console.status("[bold green]Ingesting document...[/]"):
            document = get_ingestion_pipeline(allow_local_files=True).ingest(locator, tags)
    except Exception as exc:
        handle_cli_error(exc)
        raise typer.Exit(1)

    _print_document(document)


@app.command()
def upload(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Local document file"),
    content_type: str = typer.Option(
        None, "--content-type", "-t", help="Override the content type guessed from the name"
    ),
    metadata: str = typer.Option(None, "--metadata", "-m", help="JSON object of domain tags"),
) -> None:
    """Index a local file through the upload path."""
    from ....adapters.outbound.fetch.http_fetcher import guess_content_type
    from ....composition.container import get_ingestion_pipeline

    try:
        tags = parse_metadata_option(metadata)
        with console.status("[bold green]Ingesting document...[/]"):
            document = get_ingestion_pipeline().ingest_upload(
                path.read_bytes(),
                content_type or guess_content_type(path.name),
                path.name,
                tags,
            )
    except Exception as exc:
        handle_cli_error(exc)
        raise typer.Exit(1)

    _print_document(document)


@app.command()
def status(doc_id: str = typer.Argument(..., help="Document id")) -> None:
    """Show the status of an ingested document."""
    from ....composition.container import get_store

    try:
        document = get_store().find_document(doc_id)
    except Exception as exc:
        handle_cli_error(exc)
        raise typer.Exit(1)

    if document is None:
        console.print(f"[red]Document not found:[/] {doc_id}")
        raise typer.Exit(1)
    _print_document(document)


@app.command()
def ask(
    question: str = typer.Argument(..., help="Question about your documents"),
    document_id: str = typer.Option(None, "--document-id", "-d", help="Restrict to one document"),
    filters: list[str] = typer.Option(
        None, "--filter", "-f", help="Metadata filter key=value (repeatable)"
    ),
) -> None:
    """Ask a single question and get a cited answer."""
    from ....composition.container import get_query_service

    try:
        metadata_filters = parse_filter_options(filters)
        with console.status("[bold green]Thinking...[/]"):
            result = get_query_service().handle_query(
                question, document_id=document_id, metadata_filters=metadata_filters
            )
    except Exception as exc:
        handle_cli_error(exc)
        raise typer.Exit(1)

    _print_answer(result)


@app.command()
def run(
    url: str = typer.Argument(..., help="Document to ingest"),
    questions: list[str] = typer.Option(..., "--question", "-q", help="Question (repeatable)"),
) -> None:
    """Ingest a document and answer several questions about it."""
    from ....composition.container import get_batch_service

    try:
        with console.status("[bold green]Running batch...[/]"):
            answers = get_batch_service(allow_local_files=True).run(url, questions)
    except Exception as exc:
        handle_cli_error(exc)
        raise typer.Exit(1)

    for number, (question, answer) in enumerate(zip(questions, answers), start=1):
        console.print(f"\n[bold cyan]{number}. {question}[/]")
        console.print(Markdown(answer))


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Bind address"),
    port: int = typer.Option(8000, help="Bind port"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
) -> None:
    """Start the HTTP API with uvicorn."""
    import uvicorn

    console.print(f"[green]Starting docqa API on http://{host}:{port}[/] (docs at /docs)")
    uvicorn.run("src.adapters.inbound.api.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
