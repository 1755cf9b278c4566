"""Rendering of an ActivityReport to the console (rich) and to text files."""

import logging
import os

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

log = logging.getLogger('active_users')

DEFAULT_K = 5
MAX_FAILED_SHOWN = 10


def detailed_lines(report):
    """``timestamp|username|YYYY-MM-DD HH:MM:SS|sources`` per record, sorted."""
    return [
        f"{r.last_activity}|{r.username}|{r.last_activity_text}|{r.sources_label}"
        for r in report.records
    ]


def failure_lines(report):
    """One ``username|reason`` line per failed user; first reason wins."""
    reasons = {}
    for failure in report.failures:
        reasons.setdefault(failure.username, failure.reason)
    return [f"{username}|{reasons[username]}" for username in sorted(reasons)]


def _write_lines(path, lines):
    with open(path, "w", encoding="utf-8") as fh:
        for line in lines:
            fh.write(line + "\n")


def write_report_files(report, output_dir, prefix="active_users"):
    """Write the detailed, usernames-only and failure lists. Returns the paths."""
    os.makedirs(output_dir, exist_ok=True)
    detailed_path = os.path.join(output_dir, f"{prefix}_active_users_detailed.txt")
    names_path = os.path.join(output_dir, f"{prefix}_active_users.txt")

    _write_lines(detailed_path, detailed_lines(report))
    _write_lines(names_path, [r.username for r in report.records])
    paths = {"detailed": detailed_path, "usernames": names_path}

    failures = failure_lines(report)
    if failures:
        failures_path = os.path.join(output_dir, f"{prefix}_scan_failures.txt")
        _write_lines(failures_path, failures)
        paths["failures"] = failures_path

    log.info(f"[Report] Wrote {len(report.records)} users to {output_dir}")
    return paths


def _records_table(title, records):
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("User", style="bold")
    table.add_column("Last activity")
    table.add_column("Via")
    for record in records:
        table.add_row(record.username, record.last_activity_text, record.sources_label)
    return table


def print_report(report, console=None, k=DEFAULT_K, host=""):
    """Pretty-print the run summary, first/last K users and failures."""
    console = console or Console()
    window = report.window
    start_ago, end_ago = window.days_ago()

    console.print(Panel(
        f"Window: [bold]{window.start}[/bold] .. [bold]{window.end}[/bold]\n"
        f"From {start_ago} days ago to {end_ago} days ago, spanning {window.span_days} days",
        title=f"{host + ': ' if host else ''}Active users",
        border_style="blue",
    ))

    stats_table = Table(title="Sources", show_header=True, header_style="bold cyan")
    stats_table.add_column("Source")
    stats_table.add_column("Checked", justify="right")
    stats_table.add_column("Ineligible", justify="right")
    stats_table.add_column("Skipped", justify="right")
    stats_table.add_column("Failed", justify="right")
    stats_table.add_column("Found", justify="right")
    for stats in report.stats:
        name = stats.label if stats.available else f"{stats.label} [dim](unavailable)[/dim]"
        stats_table.add_row(
            name, str(stats.checked), str(stats.ineligible), str(stats.skipped_known),
            str(stats.failed), str(stats.observations),
        )
    console.print(stats_table)

    console.print(f"\nTotal Active Users: [bold]{report.total_active}[/bold]\n")

    if report.records:
        console.print(_records_table(f"FIRST {k} USERS TO BECOME ACTIVE (earliest activity)", report.first(k)))
        console.print(_records_table(f"LAST {k} USERS TO BECOME ACTIVE (most recent activity)", report.last(k)))

    failed = report.failed_usernames()
    if failed:
        console.print(f"\n[yellow]Users with scan failures: {len(failed)}[/yellow]")
        for username in failed[:MAX_FAILED_SHOWN]:
            console.print(f"   {username}")
        if len(failed) > MAX_FAILED_SHOWN:
            console.print("   [dim]... run with --debug for details[/dim]")

    for notice in report.notices:
        console.print(f"[dim]notice: {notice}[/dim]")
