"""CLI entry point: all commands defined here."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from contrastmate import __version__
from contrastmate.config import ContrastMateConfig
from contrastmate.models import IssueType, ScanOptions, ScanResult
from contrastmate.providers.base import DocumentProvider

app = typer.Typer(
    name="contrastmate",
    help="WCAG contrast auditing for design documents.",
    no_args_is_help=True,
)
console = Console()

_ISSUE_ICON = {
    IssueType.CONTRAST_FAIL: "[red]X[/red]",
    IssueType.MISSING_FONT: "[yellow]![/yellow]",
    IssueType.NO_BACKGROUND: "[yellow]![/yellow]",
}


def version_callback(value: bool) -> None:
    if value:
        console.print(f"contrastmate {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(  # noqa: UP007
        None, "--version", "-v", callback=version_callback, is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log debug output."),
) -> None:
    """ContrastMate: WCAG 2.1 text contrast audits."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s [%(name)s] %(message)s",
    )


def _scan_options(
    cfg: ContrastMateConfig, include_hidden: bool, timeout: Optional[float]  # noqa: UP007
) -> ScanOptions:
    options = cfg.scan.to_options()
    if include_hidden:
        options.include_hidden_layers = True
    if timeout is not None:
        options.timeout_ms = timeout
    return options


def _print_result(result: ScanResult, title: str) -> None:
    from contrastmate.utils.contrast import color_description
    from contrastmate.utils.wcag import format_ratio, suggested_contrast

    table = Table(title=f"Contrast Report: {title}")
    table.add_column("Metric", style="bold")
    table.add_column("Value")
    table.add_row("Text layers", str(result.total_scanned))
    table.add_row("Errors", f"[red]{result.error_count}[/red]" if result.error_count else "0")
    table.add_row("Warnings", str(result.warning_count))
    table.add_row("Passed", f"[green]{result.pass_count}[/green]")
    table.add_row("Duration", f"{result.scan_duration_ms:.0f} ms")
    if result.timed_out:
        table.add_row("Timed out", "[yellow]Yes, results are partial[/yellow]")
    console.print(table)

    issues = [t for t in result.text_layers if t.has_issue]
    if issues:
        console.print()
    for layer in issues:
        icon = _ISSUE_ICON.get(layer.issue_type, " ")
        bg = color_description(layer.background_color) if layer.background_color else "none"
        hint = ""
        if layer.issue_type == IssueType.CONTRAST_FAIL:
            hint = f" [dim](needs {suggested_contrast(layer.is_large_text)})[/dim]"
        console.print(
            f"  {icon} \\[{layer.issue_type.value}] {escape(layer.name)} "
            f"[dim]({escape(layer.parent_name)})[/dim] "
            f"{color_description(layer.text_color)} on {bg} = "
            f"{format_ratio(layer.contrast_ratio)} {layer.wcag_level.value}{hint}"
        )


def _write_report(result: ScanResult, output: Path, fmt: str, title: str) -> None:
    from contrastmate.reporter import write_json_report, write_markdown_report

    if fmt == "json":
        write_json_report(result, output)
    else:
        write_markdown_report(result, output, title=f"Contrast Report: {title}")
    console.print(f"[dim]Report written to {output}[/dim]")


def _run_scan(doc: DocumentProvider, options: ScanOptions) -> ScanResult:
    from rich.progress import Progress

    from contrastmate.scanner import scan_selection

    with Progress(console=console, transient=True) as progress:
        task = progress.add_task("Scanning...", total=None)
        options.on_progress = lambda n: progress.update(task, description=f"Scanning... {n} layer(s)")
        return asyncio.run(scan_selection(doc, options))


@app.command()
def check(
    document: Path = typer.Argument(..., help="Document file (.json or .yaml) to audit."),
    include_hidden: bool = typer.Option(False, "--include-hidden", help="Scan hidden layers too."),
    timeout: Optional[float] = typer.Option(  # noqa: UP007
        None, "--timeout", help="Scan timeout in milliseconds.",
    ),
    fmt: Optional[str] = typer.Option(  # noqa: UP007
        None, "--format", "-f", help="Report format: json or markdown.",
    ),
    output: Optional[Path] = typer.Option(  # noqa: UP007
        None, "--output", "-o", help="Write a report to this path.",
    ),
    config: Optional[Path] = typer.Option(  # noqa: UP007
        None, "--config", "-c", help="Config YAML (defaults to ./contrastmate.yaml).",
    ),
) -> None:
    """Audit text contrast in a local document file."""
    if not document.is_file():
        console.print(f"[red]File not found:[/red] {document}")
        raise typer.Exit(code=1)

    cfg = ContrastMateConfig.load(config)

    from contrastmate.providers.loader import load_document_file

    try:
        doc = load_document_file(document, available_fonts=cfg.fonts.available_or_none())
    except ValueError as exc:
        console.print(f"[red]Invalid document:[/red] {exc}")
        raise typer.Exit(code=1)

    result = _run_scan(doc, _scan_options(cfg, include_hidden, timeout))
    _print_result(result, document.name)

    if output is not None:
        _write_report(result, output, fmt or cfg.output.report_format, document.name)

    if result.error_count:
        raise typer.Exit(code=2)


@app.command()
def figma(
    file_key: str = typer.Argument(..., help="Figma file key (from the file URL)."),
    token: Optional[str] = typer.Option(  # noqa: UP007
        None, "--token", help="Personal access token (or set FIGMA_TOKEN).",
    ),
    page: Optional[str] = typer.Option(  # noqa: UP007
        None, "--page", help="Page name to scan. Defaults to the first page.",
    ),
    include_hidden: bool = typer.Option(False, "--include-hidden", help="Scan hidden layers too."),
    output: Optional[Path] = typer.Option(  # noqa: UP007
        None, "--output", "-o", help="Write a report to this path.",
    ),
    config: Optional[Path] = typer.Option(None, "--config", "-c"),  # noqa: UP007
) -> None:
    """Fetch a file from the Figma REST API and audit it."""
    from contrastmate.providers import get_provider
    from contrastmate.providers.figma import FigmaError

    cfg = ContrastMateConfig.load(config)
    source = get_provider(
        "figma",
        api_key=token or cfg.figma.resolved_token(),
        api_base=cfg.figma.api_base,
        timeout=cfg.figma.timeout_seconds,
        available_fonts=cfg.fonts.available_or_none(),
    )

    try:
        doc = asyncio.run(source.fetch(file_key))
    except FigmaError as exc:
        console.print(f"[red]Figma error:[/red] {exc}")
        raise typer.Exit(code=1)

    if page is not None:
        match = next((p for p in doc.pages if p.name == page), None)
        if match is None:
            names = ", ".join(p.name for p in doc.pages)
            console.print(f"[red]No page named {page!r}.[/red] Pages: {names}")
            raise typer.Exit(code=1)
        doc.set_current_page(match)

    console.print(f"[dim]Scanning page:[/dim] {doc.current_page.name}")
    result = _run_scan(doc, _scan_options(cfg, include_hidden, None))
    _print_result(result, doc.root.name or file_key)

    if output is not None:
        _write_report(result, output, cfg.output.report_format, doc.root.name or file_key)


@app.command()
def serve(
    document: Path = typer.Argument(..., help="Document file to serve."),
    port: int = typer.Option(8080, "--port", "-p", help="Port to serve on."),
    host: str = typer.Option("127.0.0.1", "--host", help="Host to bind to."),
    config: Optional[Path] = typer.Option(None, "--config", "-c"),  # noqa: UP007
) -> None:
    """Serve the scan channel over HTTP and WebSocket."""
    try:
        import uvicorn
    except ImportError:
        console.print(
            "[red]Serving requires extra dependencies.[/red]\n"
            "Install them with: [bold]pip install contrastmate\\[web\\][/bold]"
        )
        raise typer.Exit(code=1)

    if not document.is_file():
        console.print(f"[red]File not found:[/red] {document}")
        raise typer.Exit(code=1)

    from contrastmate.providers.loader import load_document_file
    from contrastmate.web.app import create_app

    cfg = ContrastMateConfig.load(config)
    doc = load_document_file(document, available_fonts=cfg.fonts.available_or_none())

    console.print(f"[dim]Serving {document.name} at http://{host}:{port} (WebSocket: /ws)[/dim]")
    uvicorn.run(create_app(doc, default_options=cfg.scan.to_options()), host=host, port=port,
                log_level="warning")


@app.command()
def providers() -> None:
    """Show available document sources and their status."""
    from contrastmate.providers import list_available

    notes_map = {
        "file": "Local .json / .yaml document files",
        "figma": "Needs FIGMA_TOKEN env var",
    }

    table = Table(title="Document Sources")
    table.add_column("Source", style="bold")
    table.add_column("Available")
    table.add_column("Notes")
    for name, available in list_available():
        status = "[green]Yes[/green]" if available else "[red]No[/red]"
        table.add_row(name, status, notes_map.get(name, ""))
    console.print(table)
