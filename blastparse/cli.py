"""
CLI Interface
=============
Command-line interface for the BLAST report parser.

Usage:
    blastparse parse --file <report> [options]
    blastparse batch <directory> [options]
    blastparse validate <json_path>
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeRemainingColumn,
)
from rich.table import Table

from . import __version__
from .engine import ParserConfig, ParserEngine
from .errors import ReportParseError
from .header import QUERY_ANCHOR

console = Console()

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group()
@click.version_option(version=__version__, prog_name="blastparse")
def cli():
    """BLAST Report Parser: structured hits from text search reports."""
    pass


@cli.command()
@click.option(
    "--file", "-f", "report_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="BLAST text report to parse",
)
@click.option(
    "--output", "-o",
    default="output",
    help="Output directory for parsed data",
)
@click.option(
    "--save",
    is_flag=True,
    default=False,
    help="Write <report>_parsed.json into the output directory",
)
@click.option(
    "--query-anchor",
    default=QUERY_ANCHOR,
    show_default=True,
    help="Exact query line prefix preceding the query length",
)
@click.option(
    "--limit", "-n",
    default=20,
    type=int,
    help="Maximum alignments to display (0 = all)",
)
@click.option(
    "--log-level",
    default="INFO",
    type=click.Choice(LOG_LEVELS),
    help="Logging level",
)
@click.option(
    "--log-file",
    default=None,
    help="Path to log file",
)
@click.option(
    "--json-output",
    is_flag=True,
    default=False,
    help="Output only JSON result to stdout (for programmatic use)",
)
def parse(
    report_path: str,
    output: str,
    save: bool,
    query_anchor: str,
    limit: int,
    log_level: str,
    log_file: str,
    json_output: bool,
):
    """Parse a single BLAST report into structured alignments."""

    if json_output:
        # Suppress console output for JSON mode
        log_level = "ERROR"

    config = ParserConfig(
        query_anchor=query_anchor,
        output_dir=output,
        save_output=save,
        log_level=log_level,
        log_file=log_file,
    )

    if not json_output:
        console.print()
        console.print(
            Panel.fit(
                f"[bold cyan]BLAST Report Parser v{__version__}[/]\n"
                f"[dim]Parsing: {os.path.basename(report_path)}[/]",
                border_style="cyan",
            )
        )
        console.print()

    try:
        engine = ParserEngine(config)
        result = engine.parse(report_path)
    except (FileNotFoundError, UnicodeDecodeError, ReportParseError) as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        sys.exit(1)

    if json_output:
        # Output clean JSON to stdout
        click.echo(json.dumps(
            result.model_dump(),
            indent=2,
            ensure_ascii=False,
            default=str,
        ))
        return

    _display_results(result, limit)


@cli.command()
@click.argument("directory", type=click.Path(exists=True, file_okay=False))
@click.option(
    "--pattern",
    default="*.txt",
    help="Glob pattern selecting report files",
)
@click.option("--output", "-o", default="output", help="Output directory")
@click.option(
    "--save",
    is_flag=True,
    default=False,
    help="Write one JSON result per report",
)
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(LOG_LEVELS),
    help="Logging level",
)
def batch(
    directory: str,
    pattern: str,
    output: str,
    save: bool,
    log_level: str,
):
    """Batch parse all reports in a directory."""

    report_files = sorted(Path(directory).glob(pattern))

    if not report_files:
        console.print(f"[yellow]No reports matching {pattern} in: {directory}[/]")
        return

    console.print()
    console.print(
        Panel.fit(
            f"[bold cyan]Batch BLAST Report Parser[/]\n"
            f"[dim]Found {len(report_files)} reports in: {directory}[/]",
            border_style="cyan",
        )
    )
    console.print()

    engine = ParserEngine(ParserConfig(
        output_dir=output,
        save_output=save,
        log_level=log_level,
    ))
    results = []
    errors = []

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeRemainingColumn(),
        console=console,
    ) as progress:
        task = progress.add_task(
            "Processing reports...", total=len(report_files)
        )

        for report_file in report_files:
            progress.update(
                task,
                description=f"Parsing: {report_file.name}",
            )

            try:
                result = engine.parse(str(report_file))
                results.append((report_file.name, result))
            except (UnicodeDecodeError, ReportParseError) as e:
                errors.append((report_file.name, str(e)))

            progress.advance(task)

    _display_batch_summary(results, errors)


@cli.command()
@click.argument("json_path", type=click.Path(exists=True, dir_okay=False))
def validate(json_path: str):
    """Display the validation report of a saved parse result JSON."""

    with open(json_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    console.print()
    console.print(
        Panel.fit(
            f"[bold cyan]Validation Report[/]\n"
            f"[dim]File: {json_path}[/]",
            border_style="cyan",
        )
    )

    validation = data.get("validation", {})
    _display_validation_table(validation)


# ─── Display Helpers ──────────────────────────────────────────────────────────


def _format_optional(value) -> str:
    return "-" if value is None else str(value)


def _display_results(result, limit: int):
    """Display parse results in formatted tables."""
    console.print()

    header = result.document.header
    table = Table(title="Report Information", border_style="cyan")
    table.add_column("Property", style="bold")
    table.add_column("Value")
    table.add_row("Source", result.source.source_file)
    table.add_row("Program", header.program)
    table.add_row("Query Length", str(header.query_length))
    table.add_row("File Hash", result.source.file_hash[:16] + "...")
    console.print(table)
    console.print()

    alignments = result.document.alignments
    shown = alignments if limit <= 0 else alignments[:limit]
    if shown:
        hits = Table(title="Alignments", border_style="magenta")
        hits.add_column("#", justify="right")
        hits.add_column("Sequence ID", style="bold")
        hits.add_column("Target")
        hits.add_column("Length", justify="right")
        hits.add_column("Range", justify="right")
        hits.add_column("Bit Score", justify="right")
        hits.add_column("Expect", justify="right")

        for index, a in enumerate(shown, start=1):
            hit_range = f"{a.range[0]}-{a.range[1]}" if a.range else "-"
            hits.add_row(
                str(index),
                a.sequence_id,
                escape(a.target_name),
                str(a.target_length),
                hit_range,
                _format_optional(a.score),
                _format_optional(a.expect_value),
            )

        console.print(hits)
        if len(shown) < len(alignments):
            console.print(
                f"[dim]... {len(alignments) - len(shown)} more alignments[/]"
            )
        console.print()

    _display_validation_table(result.validation.model_dump())

    pv = result.parse_version
    console.print(
        f"[dim]Parser v{pv.parser_version} | "
        f"Markers: {pv.record_marker_count} | "
        f"Alignments: {pv.alignment_count} | "
        f"Timestamp: {pv.parse_timestamp}[/]"
    )
    console.print()


def _display_validation_table(validation: dict):
    """Display validation report as a rich table."""
    table = Table(title="Validation Report", border_style="green")
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_column("Status", justify="center")

    def status_icon(count, threshold=0):
        if count <= threshold:
            return "[green]✓[/]"
        return "[red]✗[/]"

    total = validation.get("total_alignments", 0)
    with_hits = validation.get("alignments_with_hits", 0)
    rate = validation.get("hit_rate", 0)

    table.add_row(
        "Total Alignments",
        str(total),
        "[green]✓[/]" if total > 0 else "[yellow]⚠[/]",
    )
    table.add_row(
        "Alignments With Hits",
        f"{with_hits} ({rate}%)",
        "",
    )
    table.add_row(
        "Alignments Without Hits",
        str(validation.get("alignments_without_hits", 0)),
        "",
    )

    matches = validation.get("marker_count_matches")
    if matches is not None:
        table.add_row(
            "Record Markers",
            str(validation.get("record_marker_count")),
            "[green]✓[/]" if matches else "[red]✗[/]",
        )

    dupes = validation.get("duplicate_sequence_ids", [])
    table.add_row(
        "Duplicate Sequence IDs",
        str(len(dupes)),
        status_icon(len(dupes)),
    )

    missing_score = validation.get("hits_missing_score", [])
    table.add_row(
        "Hits Missing Score",
        str(len(missing_score)),
        status_icon(len(missing_score)),
    )

    missing_expect = validation.get("hits_missing_expect", [])
    table.add_row(
        "Hits Missing Expect",
        str(len(missing_expect)),
        status_icon(len(missing_expect)),
    )

    table.add_row(
        "Best Bit Score",
        _format_optional(validation.get("best_score")),
        "",
    )
    table.add_row(
        "Best Expect Value",
        _format_optional(validation.get("best_expect_value")),
        "",
    )

    console.print(table)
    console.print()


def _display_batch_summary(results, errors):
    """Display batch processing summary."""
    console.print()

    table = Table(title="Batch Processing Summary", border_style="cyan")
    table.add_column("Report", style="bold")
    table.add_column("Program")
    table.add_column("Alignments", justify="right")
    table.add_column("Hit Rate", justify="right")
    table.add_column("Best Expect", justify="right")
    table.add_column("Status", justify="center")

    total_alignments = 0

    for name, result in results:
        count = result.document.alignment_count
        total_alignments += count

        status = (
            "[green]✓[/]"
            if result.validation.marker_count_matches is not False
            else "[yellow]⚠[/]"
        )
        table.add_row(
            name,
            result.document.header.program,
            str(count),
            f"{result.validation.hit_rate}%",
            _format_optional(result.validation.best_expect_value),
            status,
        )

    for name, error in errors:
        table.add_row(name, "-", "-", "-", "-", "[red]✗ FAILED[/]")

    console.print(table)
    console.print()
    for name, error in errors:
        console.print(f"[red]{name}:[/] {escape(error)}")
    console.print(
        f"[bold]Total:[/] {total_alignments} alignments from "
        f"{len(results)} reports, {len(errors)} failures"
    )
    console.print()


# ─── Entry point (for python -m blastparse.cli) ───────────────────────────────


if __name__ == "__main__":
    cli()
