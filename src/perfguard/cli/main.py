"""perfguard CLI implementation.

Provides the command-line interface for tracking audit results and
rendering performance reports.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from perfguard.analysis import (
    RegressionAnalysis,
    RegressionAnalyzer,
    Severity,
    comprehensive_check,
    quick_check,
)
from perfguard.audit import parse_lighthouse_report
from perfguard.config import ConfigLoader, FileConfig
from perfguard.exceptions import PerfGuardError, ThresholdViolationError
from perfguard.models.metrics import PerformanceDataPoint
from perfguard.persistence import FileBaselineStore, FileHistoryStore
from perfguard.reporting import (
    DirectoryReportSink,
    generate_comparison_report,
    generate_trend_report,
)
from perfguard.reporting.csv_generator import TrendCsvGenerator
from perfguard.tracker import PerformanceTracker

# Pattern for relative time strings like "1h", "30m", "1d"
RELATIVE_TIME_PATTERN = re.compile(r"^(\d+)([hmd])$", re.IGNORECASE)

SEVERITY_COLORS = {
    Severity.NONE: "green",
    Severity.LOW: "blue",
    Severity.MEDIUM: "yellow",
    Severity.HIGH: "red",
}


def _parse_since(since_str: str) -> datetime:
    """Parse a since string into a datetime.

    Args:
        since_str: Time specification - ISO format, date, or relative (1h, 30m, 1d).

    Returns:
        Parsed timezone-aware datetime. Values without an offset are
        read as local time, like the recorded run timestamps.

    Raises:
        typer.BadParameter: If the format is invalid.
    """
    match = RELATIVE_TIME_PATTERN.match(since_str.strip())
    if match:
        amount = int(match.group(1))
        unit = match.group(2).lower()
        now = datetime.now().astimezone()
        if unit == "h":
            return now - timedelta(hours=amount)
        elif unit == "m":
            return now - timedelta(minutes=amount)
        elif unit == "d":
            return now - timedelta(days=amount)

    try:
        dt = datetime.fromisoformat(since_str)
        if dt.tzinfo is None:
            dt = dt.astimezone()
        return dt
    except ValueError:
        pass

    try:
        dt = datetime.strptime(since_str, "%Y-%m-%d")
        return dt.astimezone()
    except ValueError:
        pass

    msg = (
        f"Invalid time format: '{since_str}'. "
        "Use ISO format (2026-01-18T13:00:00), date (2026-01-18), "
        "or relative (1h, 30m, 1d)."
    )
    raise typer.BadParameter(msg)


def _recorded_after(point: PerformanceDataPoint, since: datetime) -> bool:
    """Compare a point's local timestamp against an aware datetime."""
    try:
        recorded = datetime.fromisoformat(point.timestamp)
    except ValueError:
        return False
    if recorded.tzinfo is None:
        recorded = recorded.astimezone()
    return recorded >= since


app = typer.Typer(
    name="perfguard",
    help="Performance regression tracking for web page audits.",
    no_args_is_help=True,
)

console = Console()

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Path to perfguard.yaml configuration file.",
    ),
]
HistoryDirOption = Annotated[
    Path | None,
    typer.Option(
        "--history-dir",
        "-d",
        help="Directory holding performance history (default: from config or performance-history).",
    ),
]
TestNameOption = Annotated[
    str,
    typer.Option(
        "--test",
        "-t",
        help="Name the metrics are tracked under.",
    ),
]


@dataclass
class Workspace:
    """Stores and settings resolved for one CLI invocation."""

    file_config: FileConfig | None
    history: FileHistoryStore
    baselines: FileBaselineStore
    analyzer: RegressionAnalyzer


def _load_workspace(config_file: Path | None, history_dir: Path | None) -> Workspace:
    """Resolve configuration and build the file-backed stores.

    Raises:
        typer.Exit: If the configuration is invalid.
    """
    try:
        file_config = ConfigLoader.load_config(config_file)
    except PerfGuardError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1) from e

    storage = ConfigLoader.resolve_storage_config(
        file_config,
        cli_dir=str(history_dir) if history_dir else None,
    )
    history = FileHistoryStore(Path(storage.dir), max_entries=storage.max_entries)
    baselines = FileBaselineStore(Path(storage.dir))
    analyzer = RegressionAnalyzer(
        history,
        baselines,
        provenance=ConfigLoader.resolve_provenance(file_config),
        thresholds=ConfigLoader.resolve_thresholds(file_config),
    )
    return Workspace(file_config, history, baselines, analyzer)


def _configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


def _display_analysis(analysis: RegressionAnalysis, test_name: str) -> None:
    """Display a regression analysis as a table of changes."""
    color = SEVERITY_COLORS[analysis.severity]

    table = Table(title=f"Regression Analysis: {test_name}")
    table.add_column("Metric", style="cyan")
    table.add_column("Change", justify="right")

    for metric, change in analysis.performance_changes.items():
        formatted = "n/a" if change is None else f"{change:+.1f}%"
        table.add_row(metric, formatted)

    if analysis.performance_changes:
        console.print(table)

    if analysis.has_regression:
        console.print(
            f"\n[{color}]⚠ Performance regression detected "
            f"(severity: {analysis.severity.value})[/{color}]"
        )
    else:
        console.print("\n[green]✓ No performance regression detected[/green]")

    for detail in analysis.regression_details:
        console.print(f"  - {detail}")


@app.command()
def analyze(  # noqa: PLR0913 - Typer requires CLI args as function parameters
    report_file: Annotated[
        Path,
        typer.Argument(help="Path to a Lighthouse JSON report.", exists=True),
    ],
    test_name: TestNameOption,
    url: Annotated[
        str,
        typer.Option("--url", "-u", help="Audited URL."),
    ],
    config_file: ConfigOption = None,
    history_dir: HistoryDirOption = None,
    reports_dir: Annotated[
        Path | None,
        typer.Option(
            "--reports-dir",
            "-r",
            help="Directory for rendered reports (default: from config or performance-reports).",
        ),
    ] = None,
    fail_on_regression: Annotated[
        bool,
        typer.Option(
            "--fail-on-regression",
            help="Exit with error code if a regression is detected.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging."),
    ] = False,
) -> None:
    """Record an audit result and compare it against the baseline.

    The first result recorded for a test name becomes its baseline.

    Example:
        perfguard analyze home.report.json --test "Home Page" --url https://example.com
    """
    _configure_logging(verbose)
    workspace = _load_workspace(config_file, history_dir)
    reports = ConfigLoader.resolve_reports_config(
        workspace.file_config,
        cli_dir=str(reports_dir) if reports_dir else None,
    )

    tracker = PerformanceTracker(
        workspace.analyzer,
        workspace.history,
        DirectoryReportSink(Path(reports.dir)),
    )

    try:
        snapshot = parse_lighthouse_report(report_file)
        analysis = tracker.track(snapshot, test_name, url)
    except PerfGuardError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1) from e

    _display_analysis(analysis, test_name)
    console.print(f"\n[dim]Reports written to {reports.dir}[/dim]")

    if fail_on_regression and analysis.has_regression:
        raise typer.Exit(code=1)


@app.command()
def baseline(
    report_file: Annotated[
        Path,
        typer.Argument(help="Path to a Lighthouse JSON report.", exists=True),
    ],
    test_name: TestNameOption,
    url: Annotated[
        str,
        typer.Option("--url", "-u", help="Audited URL."),
    ],
    config_file: ConfigOption = None,
    history_dir: HistoryDirOption = None,
) -> None:
    """Replace the baseline for a test with an audit result.

    Example:
        perfguard baseline home.report.json --test "Home Page" --url https://example.com
    """
    workspace = _load_workspace(config_file, history_dir)

    try:
        snapshot = parse_lighthouse_report(report_file)
        stored = workspace.analyzer.set_baseline(snapshot, test_name, url)
    except PerfGuardError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1) from e

    console.print(
        f"[green]Baseline set for {test_name}[/green] "
        f"(performance {stored.performance_score * 100:.1f}%, {stored.timestamp})"
    )


@app.command()
def history(
    test_name: Annotated[
        str | None,
        typer.Option(
            "--test",
            "-t",
            help="Test name to show (lists tracked tests if not specified).",
        ),
    ] = None,
    limit: Annotated[
        int,
        typer.Option("--limit", "-n", help="Maximum number of runs to show."),
    ] = 20,
    since: Annotated[
        str | None,
        typer.Option(
            "--since",
            "-s",
            help=(
                "Include only runs after this time. "
                "Accepts ISO format (2026-01-18T13:00:00), date (2026-01-18), "
                "or relative (1h, 30m, 1d for hours/minutes/days ago)."
            ),
        ),
    ] = None,
    config_file: ConfigOption = None,
    history_dir: HistoryDirOption = None,
) -> None:
    """Show recorded runs for a test.

    Example:
        perfguard history --test "Home Page" --since 1d
    """
    workspace = _load_workspace(config_file, history_dir)

    if test_name is None:
        names = workspace.history.test_names()
        if not names:
            console.print("[yellow]No performance history found.[/yellow]")
            raise typer.Exit(code=0)

        baselines = workspace.baselines.all()
        table = Table(title="Tracked Tests")
        table.add_column("Test", style="cyan")
        table.add_column("Runs", justify="right")
        table.add_column("Baseline", justify="center")
        for name in names:
            has_baseline = "[green]✓[/green]" if name in baselines else "[dim]-[/dim]"
            table.add_row(name, str(len(workspace.history.all(name))), has_baseline)
        console.print(table)
        return

    since_dt = _parse_since(since) if since else None
    points = workspace.history.recent(test_name, limit)
    if since_dt:
        points = [p for p in points if _recorded_after(p, since_dt)]

    if not points:
        console.print(f"[yellow]No history found for {test_name}.[/yellow]")
        raise typer.Exit(code=0)

    table = Table(title=f"History: {test_name}")
    table.add_column("Timestamp", style="cyan")
    table.add_column("Commit")
    table.add_column("Perf", justify="right")
    table.add_column("A11y", justify="right")
    table.add_column("BP", justify="right")
    table.add_column("SEO", justify="right")
    table.add_column("FCP", justify="right")
    table.add_column("LCP", justify="right")
    table.add_column("CLS", justify="right")

    for p in points:
        table.add_row(
            p.timestamp,
            p.git_commit,
            f"{p.performance_score:.0%}",
            f"{p.accessibility_score:.0%}",
            f"{p.best_practices_score:.0%}",
            f"{p.seo_score:.0%}",
            f"{p.first_contentful_paint:.0f}ms",
            f"{p.largest_contentful_paint:.0f}ms",
            f"{p.cumulative_layout_shift:.3f}",
        )

    console.print(table)


@app.command()
def trends(
    test_name: TestNameOption,
    csv_output: Annotated[
        Path | None,
        typer.Option("--csv", help="Also write trend data as CSV to this path."),
    ] = None,
    config_file: ConfigOption = None,
    history_dir: HistoryDirOption = None,
) -> None:
    """Show the change between the two most recent runs of a test.

    Example:
        perfguard trends --test "Home Page" --csv trends.csv
    """
    workspace = _load_workspace(config_file, history_dir)
    points = workspace.history.all(test_name)

    if not points:
        console.print(f"[yellow]No history found for {test_name}.[/yellow]")
        raise typer.Exit(code=0)

    console.print(Markdown(generate_trend_report(points, test_name)))

    if csv_output:
        try:
            TrendCsvGenerator().generate(points, csv_output)
        except OSError as e:
            console.print(f"[red]Error:[/red] Failed to write {csv_output}: {e}")
            raise typer.Exit(code=1) from e
        console.print(f"[green]Trend data written: {csv_output}[/green]")


@app.command()
def compare(
    baseline_file: Annotated[
        Path,
        typer.Argument(help="Lighthouse JSON report used as the reference.", exists=True),
    ],
    current_file: Annotated[
        Path,
        typer.Argument(help="Lighthouse JSON report to compare.", exists=True),
    ],
    name: Annotated[
        str,
        typer.Option("--name", "-n", help="Label for the comparison."),
    ] = "Baseline vs Current",
) -> None:
    """Compare two audit reports metric by metric.

    Example:
        perfguard compare staging.report.json prod.report.json --name "staging vs prod"
    """
    try:
        baseline_snapshot = parse_lighthouse_report(baseline_file)
        current_snapshot = parse_lighthouse_report(current_file)
    except PerfGuardError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1) from e

    console.print(
        Markdown(generate_comparison_report(baseline_snapshot, current_snapshot, name))
    )


@app.command()
def validate(
    report_file: Annotated[
        Path,
        typer.Argument(help="Path to a Lighthouse JSON report.", exists=True),
    ],
    preset: Annotated[
        str,
        typer.Option(
            "--preset",
            "-p",
            help="Threshold preset: quick or comprehensive.",
        ),
    ] = "quick",
) -> None:
    """Check an audit report against minimum score thresholds.

    Example:
        perfguard validate home.report.json --preset comprehensive
    """
    checks = {"quick": quick_check, "comprehensive": comprehensive_check}
    if preset not in checks:
        console.print(f"[red]Error:[/red] Unknown preset: {preset}")
        console.print("Valid options: quick, comprehensive")
        raise typer.Exit(code=1)

    try:
        snapshot = parse_lighthouse_report(report_file)
        checks[preset](snapshot)
    except ThresholdViolationError as e:
        console.print(Panel(f"[bold]Validation failed ({preset})[/bold]"))
        for violation in e.violations:
            console.print(f"  [red]✗[/red] {violation}")
        raise typer.Exit(code=1) from e
    except PerfGuardError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1) from e

    console.print(f"[green]✓ All {preset} thresholds met[/green]")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
