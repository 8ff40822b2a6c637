"""
CLI interface for FrameCount.

Provides command-line access to pricing, name normalization and
estimate reports.
"""

import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from framecount.analysis import ShotImageAnalyzer
from framecount.config.loader import load_settings
from framecount.core.estimator import SORT_KEYS, Estimator
from framecount.core.exceptions import ImageAnalysisError
from framecount.core.naming import normalize_shot_name
from framecount.core.pricing import classify, find_tier
from framecount.ingest.shot_file import load_shot_file
from framecount.report.formatting import format_currency, format_frame_range, report_filename
from framecount.report.pdf import ReportConfig, build_report_pdf
from framecount.utils.logging_utils import configure_logging

app = typer.Typer()
console = Console()

EXIT_CODE_PASS = 0
EXIT_CODE_FAIL = 1

CONFIG_HELP = "Path to a YAML configuration file"


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also log to this file"),
):
    """FrameCount: shot cost estimator for 2D animation."""
    configure_logging(log_level, log_file)
    if ctx.invoked_subcommand is None:
        console.print("FrameCount - Use --help to see available commands")


@app.command("classify")
def classify_frames(
    frames: int = typer.Argument(..., help="Frame count of the shot"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
):
    """Show the tier and price for a frame count."""
    try:
        settings = load_settings(config)
    except Exception as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        sys.exit(EXIT_CODE_FAIL)

    tier = find_tier(frames, settings.tiers)
    price = classify(frames, settings.tiers)
    label = tier.label if tier is not None else "[yellow]no matching tier[/]"
    console.print(f"{frames} frames: {label} - {format_currency(price)}")
    sys.exit(EXIT_CODE_PASS)


@app.command()
def normalize(names: List[str] = typer.Argument(..., help="Shot names to normalize")):
    """Normalize shot names to the SQ##_SC##_SH## form."""
    for name in names:
        console.print(normalize_shot_name(name), markup=False, highlight=False)


@app.command()
def tiers(
    config: Optional[str] = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
):
    """Show the active pricing tiers."""
    try:
        settings = load_settings(config)
    except Exception as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        sys.exit(EXIT_CODE_FAIL)

    table = Table(title="Pricing Tiers")
    table.add_column("Tier")
    table.add_column("Frame range")
    table.add_column("Price", justify="right")
    for tier in settings.tiers:
        table.add_row(tier.label, format_frame_range(tier), format_currency(tier.price))
    console.print(table)


@app.command()
def estimate(
    shot_file: Optional[Path] = typer.Argument(
        None,
        help="YAML file or text listing of shots (NAME - FRAMES per line)"
    ),
    images: Optional[List[Path]] = typer.Option(
        None,
        "--image",
        "-i",
        help="Screenshot of a shot listing to analyze (repeatable)"
    ),
    config: Optional[str] = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
    pdf: Optional[Path] = typer.Option(
        None,
        "--pdf",
        help="Write a PDF report to this path (a directory uses the title as file name)"
    ),
    sort: str = typer.Option("added", "--sort", "-s", help=f"Sort by one of: {', '.join(SORT_KEYS)}"),
    title: Optional[str] = typer.Option(None, "--title", help="Report title"),
    author: Optional[str] = typer.Option(None, "--author", help="Artist name on the report"),
    notes: Optional[str] = typer.Option(None, "--notes", help="Notes printed on the report"),
):
    """
    Build a cost estimate from a shot list and/or screenshots.

    Shot names are normalized and duplicates are skipped, both against
    shots already added and within the same file or image.
    """
    if shot_file is None and not images:
        console.print("[red]Error:[/] Provide a shot file and/or at least one --image")
        sys.exit(EXIT_CODE_FAIL)
    if sort not in SORT_KEYS:
        console.print(f"[red]Error:[/] --sort must be one of: {', '.join(SORT_KEYS)}")
        sys.exit(EXIT_CODE_FAIL)

    try:
        settings = load_settings(config)
        estimator = Estimator(settings.tiers)

        if shot_file is not None:
            result = estimator.add_candidates(load_shot_file(shot_file))
            console.print(f"{escape(shot_file.name)}: {escape(result.summary())}")

        if images:
            if not settings.analysis.enabled:
                console.print("[yellow]Image analysis is disabled; skipping images[/]")
            else:
                try:
                    analyzer = ShotImageAnalyzer(model=settings.analysis.model)
                except ImageAnalysisError as e:
                    console.print(f"[red]Analysis failed:[/] {escape(str(e))}; skipping images")
                else:
                    for image in images:
                        result = estimator.import_image(image, analyzer)
                        style = "red" if result.error else "green"
                        console.print(f"[{style}]{escape(image.name)}: {escape(result.summary())}[/]")

        _display_estimate(estimator, sort)

        if pdf is not None:
            report_config = ReportConfig(
                title=title or settings.report.title,
                author=author if author is not None else settings.report.author,
                notes=notes if notes is not None else settings.report.notes,
            )
            target = pdf / report_filename(report_config.title) if pdf.is_dir() else pdf
            # Legend uses the same tiers the shots were priced with
            written = build_report_pdf(
                estimator.sorted_shots(sort),
                estimator.tiers,
                report_config,
                target,
            )
            console.print(f"[green]✓[/] Report written to {written}")

        sys.exit(EXIT_CODE_PASS)
    except Exception as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        sys.exit(EXIT_CODE_FAIL)


def _display_estimate(estimator: Estimator, sort: str) -> None:
    """Display the shot table, per-tier breakdown and totals."""
    shots = estimator.sorted_shots(sort)
    if not shots:
        console.print("\n[dim]No shots in the estimate.[/]")
        return

    table = Table(title=f"Shot Estimate ({len(shots)} item(s))")
    table.add_column("No", justify="right")
    table.add_column("Shot")
    table.add_column("Frames", justify="right")
    table.add_column("Tier")
    table.add_column("Price", justify="right")
    for index, shot in enumerate(shots, start=1):
        tier = find_tier(shot.frames, estimator.tiers)
        table.add_row(
            str(index),
            escape(shot.name),
            str(shot.frames),
            tier.label if tier is not None else "-",
            format_currency(shot.price),
        )
    console.print(table)

    for summary in estimator.tier_breakdown():
        if summary.shot_count:
            console.print(
                f"{summary.label}: {summary.shot_count} shot(s), "
                f"{summary.frames} frames, {format_currency(summary.subtotal)}"
            )

    console.print(f"\n[bold]Total frames:[/bold] {estimator.total_frames}")
    console.print(f"[bold]Total estimate:[/bold] {format_currency(estimator.total_price)}")


if __name__ == "__main__":
    app()
