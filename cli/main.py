# cli/main.py
# ============================================================
# Page Orientation — Command Line Interface
# ============================================================
# Typer-based CLI for orientation detection and the multi-page
# TIFF chores around it.
#
# Usage:
#   page-orientation detect scans/batch.tif
#   page-orientation detect scans/batch.tif --output out/batch.json
#   page-orientation detect scans/batch.tif --correct out/batch_fixed.tif
#   page-orientation split scans/batch.tif out/pages/
#   page-orientation merge out/merged.tif a.tif b.tif
#   page-orientation health
#
#   python -m cli.main detect scans/batch.tif
# ============================================================

import json
import time
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from config.settings import settings
from orientation.classifier.verdicts import Verdict
from orientation.document.tiff import concatenate_tiff, split_tiff, write_corrected
from orientation.errors import OrientationError
from orientation.ocr.engine import TesseractRecognizer
from orientation.pipeline.orchestrator import DocumentResult, PipelineOrchestrator

# ============================================================
# CLI App Setup
# ============================================================

app = typer.Typer(
    name="page-orientation",
    help=(
        "Detect upside-down pages in scanned documents.\n\n"
        "Classifies every page of a TIFF, PDF, image or directory as "
        "correct, upside_down or undetectable using Tesseract confidence."
    ),
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()

_VERDICT_STYLES = {
    Verdict.CORRECT: "green",
    Verdict.UPSIDE_DOWN: "yellow",
    Verdict.ROTATED_LEFT: "yellow",
    Verdict.ROTATED_RIGHT: "yellow",
    Verdict.UNDETECTABLE: "red",
}


def _fail(message: str) -> None:
    console.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(code=1)


# ============================================================
# Commands
# ============================================================

@app.command()
def detect(
    input_path: str = typer.Argument(
        ...,
        help="Path to a TIFF, PDF, image file, or directory of images.",
    ),
    output: Optional[str] = typer.Option(
        None,
        "--output", "-o",
        help="Write verdicts as JSON to this file.",
    ),
    workers: Optional[int] = typer.Option(
        None,
        "--workers", "-w",
        min=1,
        help="Maximum number of parallel detection workers. Default: CPU count.",
    ),
    language: Optional[str] = typer.Option(
        None,
        "--lang", "-l",
        help=f"Tesseract language. Default: {settings.ocr_language}.",
    ),
    correct: Optional[str] = typer.Option(
        None,
        "--correct",
        help="Also write a multi-page TIFF with upside-down pages rotated upright.",
    ),
):
    """
    Detect the text orientation of every page in a document.

    Examples:
        detect scans/batch.tif
        detect scans/report.pdf --output out/report.json --workers 4
        detect scans/batch.tif --correct out/batch_fixed.tif
    """
    console.print(Panel(
        f"Input:    {input_path}\n"
        f"Language: {language or settings.ocr_language}\n"
        f"Workers:  {workers or settings.max_workers or 'auto'}",
        title="Page Orientation",
        border_style="blue",
    ))

    pipeline = PipelineOrchestrator(max_workers=workers, language=language)

    try:
        load_start = time.perf_counter()
        pages = pipeline.load(input_path)
        result = pipeline.detect_pages(
            pages,
            source_path=input_path,
            load_latency_ms=(time.perf_counter() - load_start) * 1000,
        )
        if correct:
            write_corrected(pages, result.verdicts, correct)
    except OrientationError as e:
        _fail(str(e))

    if output:
        result.save_json(output)

    if settings.output_format == "json" and not output:
        console.print_json(json.dumps(result.to_dict()))
    else:
        _print_results_table(result)

    if correct:
        console.print(f"Corrected document written to [bold]{correct}[/bold]")


@app.command()
def split(
    input_path: str = typer.Argument(..., help="Multi-page TIFF to split."),
    output_dir: str = typer.Argument(..., help="Directory to write one TIFF per page into."),
):
    """Split a multi-page TIFF into single-page files."""
    try:
        paths = split_tiff(input_path, output_dir)
    except OrientationError as e:
        _fail(str(e))

    for path in paths:
        console.print(str(path))
    console.print(f"[green]{len(paths)}[/green] pages written to [bold]{output_dir}[/bold]")


@app.command()
def merge(
    output_path: str = typer.Argument(..., help="Destination multi-page TIFF."),
    inputs: List[str] = typer.Argument(..., help="Image files to concatenate, in order."),
):
    """Concatenate image files into a single multi-page TIFF."""
    try:
        path = concatenate_tiff(inputs, output_path)
    except OrientationError as e:
        _fail(str(e))

    console.print(f"Merged {len(inputs)} file(s) into [bold]{path}[/bold]")


@app.command()
def health():
    """
    Check that Tesseract is installed and the configured language is available.
    """
    console.print("[bold]Running health check...[/bold]\n")

    status = TesseractRecognizer().health_check()

    table = Table(title="Recognizer Health", show_header=False)
    table.add_column("Property", style="bold")
    table.add_column("Value")

    status_color = "green" if status["status"] == "healthy" else "red"
    table.add_row("Status", f"[{status_color}]{status['status']}[/{status_color}]")
    table.add_row("Tesseract", status["tesseract_version"] or "-")
    table.add_row("Language", status["language"])
    table.add_row("Language Installed", "Yes" if status["language_installed"] else "No")
    table.add_row("Installed Languages", ", ".join(status["installed_languages"]) or "-")

    if status["error"]:
        table.add_row("Error", f"[red]{status['error']}[/red]")

    console.print(table)

    if status["status"] != "healthy":
        raise typer.Exit(code=1)


# ============================================================
# Helper Functions
# ============================================================

def _print_results_table(result: DocumentResult) -> None:
    """Print a per-page verdict table with a summary section."""
    table = Table(title="Page Orientation")
    table.add_column("Page", justify="center")
    table.add_column("Verdict")

    for page_num, verdict in result.pages:
        style = _VERDICT_STYLES[verdict]
        table.add_row(str(page_num), f"[{style}]{verdict.value}[/{style}]")

    table.add_section()
    summary = ", ".join(f"{name}: {count}" for name, count in result.counts().items() if count)
    table.add_row(
        f"[bold]{result.total_pages}[/bold]",
        f"[bold]{summary} | {result.total_latency_ms:.0f}ms[/bold]",
    )

    console.print(table)


# ============================================================
# Entry Point
# ============================================================

if __name__ == "__main__":
    app()
