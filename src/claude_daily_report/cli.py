"""CLI entry point for claude daily report."""

import os
from datetime import date as date_cls
from datetime import datetime
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from .aggregator import aggregate
from .errors import ArtifactNotFound, CorruptSummary, SourceNotFound, SummaryMismatch, TemplateError
from .parser import DECODERS, is_lossy_decoding
from .reports import print_summary
from .store import (
    DEFAULT_KEEP_DAYS,
    cleanup_old_backups,
    human_size,
    load_summary,
    report_path,
    write_report,
    write_summary,
)
from .templates import list_templates, load_template

console = Console()

DEFAULT_PROJECTS_DIR = Path.home() / ".claude" / "projects"
DEFAULT_DATA_DIR = Path.home() / ".claude-daily-report"
DEFAULT_TEMPLATE = "simple"


def validate_date(ctx, param, value):
    if value is None:
        return date_cls.today().strftime("%Y-%m-%d")
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        raise click.BadParameter(f"{value!r} is not a YYYY-MM-DD date")
    return value


@click.group()
@click.option(
    "--projects-dir",
    type=click.Path(file_okay=False),
    default=str(DEFAULT_PROJECTS_DIR),
    envvar="CLAUDE_PROJECTS_DIR",
    show_default=True,
    help="Directory holding the assistant's per-project session logs",
)
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False),
    default=str(DEFAULT_DATA_DIR),
    envvar="CLAUDE_DAILY_REPORT_HOME",
    show_default=True,
    help="Where backups, reports and custom templates live",
)
@click.pass_context
def cli(ctx, projects_dir, data_dir):
    """Turn a day of assistant session logs into a daily report."""
    ctx.ensure_object(dict)
    data_dir = Path(data_dir)
    ctx.obj["projects_dir"] = Path(projects_dir).expanduser()
    ctx.obj["backup_dir"] = data_dir.expanduser() / "backup"
    ctx.obj["reports_dir"] = data_dir.expanduser() / "reports"
    ctx.obj["templates_dir"] = data_dir.expanduser() / "templates"


@cli.command()
@click.argument("date", required=False, callback=validate_date)
@click.option(
    "--decoder",
    type=click.Choice(sorted(DECODERS)),
    default="hyphen",
    show_default=True,
    help="How project directory names map back to paths",
)
@click.option("--keep-days", default=DEFAULT_KEEP_DAYS, show_default=True, help="Delete backups older than this")
@click.pass_context
def extract(ctx, date, decoder, keep_days):
    """Extract one day of activity into a dated backup file."""
    projects_dir = ctx.obj["projects_dir"]
    backup_dir = ctx.obj["backup_dir"]

    def progress(path, project_dir, project):
        console.print(f"[cyan]📁 Processing project: {escape(path)}[/cyan]")
        if project is None:
            console.print("  [dim]⏭️  No activity for this date[/dim]")
            return
        for session_id, session in project.sessions.items():
            console.print(f"    Session {escape(session_id)}: {session.entry_count} entries")
        console.print(
            f"  [green]✅ Found {project.session_count} sessions with {project.total_entries} entries[/green]"
        )
        if is_lossy_decoding(project_dir.name, path):
            console.print(f"  [dim]Path decoded from '{escape(project_dir.name)}' may be inaccurate (hyphens in path)[/dim]")

    console.print(f"[cyan]🔍 Extracting logs for {date} from {projects_dir}...[/cyan]")
    try:
        summary = aggregate(projects_dir, date, decoder=DECODERS[decoder], on_project=progress)
    except SourceNotFound as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        console.print("Run the assistant at least once to generate project logs.")
        ctx.exit(1)

    output = write_summary(summary, backup_dir)

    console.print()
    console.print("[green]✅ Backup completed successfully![/green]")
    print_summary(summary)
    console.print("📊 Statistics:")
    console.print(f"  - Date: {date}")
    console.print(f"  - Active projects: {summary.total_projects}")
    console.print(f"  - Total interactions: {summary.total_interactions}")
    console.print(f"  - Output file: {output}")
    console.print(f"  - File size: {human_size(output)}")

    console.print()
    console.print("[cyan]🧹 Cleaning up old backups...[/cyan]")
    removed = cleanup_old_backups(backup_dir, keep_days)
    console.print(f"[green]✅ Cleanup completed[/green] ({len(removed)} removed)")


def select_backend(choice: str, model: str, timeout: float):
    """Pick the summary backend for ``choice``; None means keyword mode."""
    from .summarizer import AnthropicBackend, ClaudeCommand, find_claude_command

    api_key = os.environ.get("ANTHROPIC_API_KEY")

    if choice in ("auto", "claude"):
        command = find_claude_command()
        if command:
            return ClaudeCommand(command, timeout=timeout)
        if choice == "claude":
            console.print("[yellow]Assistant command not found, using keyword search[/yellow]")
            return None

    if choice in ("auto", "api"):
        if api_key:
            return AnthropicBackend(api_key, model=model)
        if choice == "api":
            console.print("[yellow]ANTHROPIC_API_KEY environment variable not set, using keyword search[/yellow]")

    return None


@cli.command()
@click.argument("date", required=False, callback=validate_date)
@click.argument("template", required=False, default=DEFAULT_TEMPLATE)
@click.option(
    "--backend",
    type=click.Choice(["auto", "claude", "api", "none"]),
    default="auto",
    show_default=True,
    help="How work items are summarized",
)
@click.option("--model", default=None, help="Model for the API backend")
@click.option("--timeout", default=120.0, show_default=True, help="Seconds to wait for the assistant command")
@click.pass_context
def report(ctx, date, template, backend, model, timeout):
    """Render the daily report for DATE using TEMPLATE."""
    from .reports import generate_report
    from .summarizer import DEFAULT_MODEL, ActivitySummarizer

    backup_dir = ctx.obj["backup_dir"]
    reports_dir = ctx.obj["reports_dir"]
    templates_dir = ctx.obj["templates_dir"]

    try:
        summary = load_summary(backup_dir, date)
    except ArtifactNotFound as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        console.print("Please run extraction first:")
        console.print(f"  claude-daily-report extract {date}")
        ctx.exit(1)
    except CorruptSummary as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        console.print(f"The backup may be from an interrupted run; re-run extract for {date}:")
        console.print(f"  claude-daily-report extract {date}")
        ctx.exit(1)
    except SummaryMismatch as e:
        console.print(f"[yellow]Warning: backup totals look inconsistent ({escape(str(e))}); using recomputed counts[/yellow]")
        summary = load_summary(backup_dir, date, verify=False)

    try:
        template_text = load_template(template, templates_dir)
    except ArtifactNotFound as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        console.print("Available templates:")
        for name in e.available:
            console.print(f"  - {name}")
        ctx.exit(1)

    console.print(f"[cyan]📝 Generating daily report for {date}...[/cyan]")
    output = report_path(reports_dir, date)
    if output.exists():
        console.print(f"[yellow]⚠️  Existing report found: {output}[/yellow]")
        console.print("   It will be overwritten.")

    summarizer = ActivitySummarizer(select_backend(backend, model or DEFAULT_MODEL, timeout))

    console.print("[cyan]🔍 Analyzing daily activities...[/cyan]")
    try:
        rendered = generate_report(summary, template_text, summarizer)
    except TemplateError as e:
        console.print(f"[red]Template error in {template}: {escape(str(e))}[/red]")
        ctx.exit(1)

    output = write_report(date, rendered, reports_dir)

    console.print()
    console.print("[green]✅ Daily report generated successfully![/green]")
    console.print("📊 Statistics:")
    console.print(f"  - Total projects: {summary.total_projects}")
    console.print(f"  - Total interactions: {summary.total_interactions}")
    console.print(f"  - Output file: {output}")
    console.print(f"  - File size: {human_size(output)}")


@cli.command()
@click.pass_context
def templates(ctx):
    """List available report templates."""
    for name in list_templates(ctx.obj["templates_dir"]):
        console.print(f"  - {name}")


if __name__ == "__main__":
    cli()
