"""Daily report generation: template context and console output."""

from datetime import datetime

from rich.console import Console
from rich.table import Table

from .aggregator import top_projects
from .extractor import collect_messages, session_highlights
from .models import DailySummary
from .parser import display_name, format_time
from .summarizer import ActivitySummarizer
from .templates import render

console = Console()

NO_ACTIVITY_ITEMS = [
    "### No activity",
    "- No assistant activity was recorded on this day",
]
NO_WORK_ITEM = "- Could not determine work content"


def work_items(summary: DailySummary, summarizer: ActivitySummarizer) -> list[str]:
    """WORK_ITEMS rows: a heading and bullets per project."""
    if summary.total_projects == 0:
        return list(NO_ACTIVITY_ITEMS)

    rows = []
    for path, project in summary.projects.items():
        name = display_name(path)
        messages = collect_messages(project)
        bullets = []
        if not messages.is_empty():
            bullets = summarizer.summarize(name, messages.lines(), prompt_text=messages.as_prompt_text())

        rows.append(f"### {name}")
        if bullets:
            rows.extend(f"- {bullet}" for bullet in bullets)
        else:
            rows.append(NO_WORK_ITEM)
        rows.append("")
    return rows


def top_project_rows(summary: DailySummary, limit: int = 5) -> list[str]:
    return [f"- **{p.path}**: {p.total_entries} entries" for p in top_projects(summary, limit)]


def project_rows(summary: DailySummary) -> list[dict]:
    return [
        {
            "PROJECT_PATH": path,
            "PROJECT_NAME": display_name(path),
            "SESSION_COUNT": str(project.session_count),
            "TOTAL_ENTRIES": str(project.total_entries),
        }
        for path, project in summary.projects.items()
    ]


def session_rows(summary: DailySummary) -> list[dict]:
    rows = []
    for path, project in summary.projects.items():
        for session_id, session in project.sessions.items():
            highlights = session_highlights(session)
            rows.append({
                "PROJECT_PATH": path,
                "PROJECT_NAME": display_name(path),
                "SESSION_ID": session_id,
                "SESSION_ID_SHORT": session_id[:8],
                "ENTRY_COUNT": str(session.entry_count),
                "LAST_TIME": format_time(session.last_timestamp),
                "MAIN_CONTENTS": "\n".join(f"  - {h}" for h in highlights) or "  - (no user prompts)",
            })
    return rows


def build_context(
    summary: DailySummary,
    summarizer: ActivitySummarizer,
    now: datetime | None = None,
) -> tuple[dict[str, str], dict[str, list]]:
    """Scalar values and block rows for rendering a report template."""
    now = now or datetime.now()
    total_projects = summary.total_projects
    total_interactions = summary.total_interactions

    scalars = {
        "DATE": summary.date,
        "GENERATED_TIME": now.strftime("%Y-%m-%d %H:%M:%S"),
        "EXTRACTED_TIME": summary.generated_at,
        "TOTAL_PROJECTS": str(total_projects),
        "TOTAL_INTERACTIONS": str(total_interactions),
        "TOTAL_SESSIONS": str(summary.total_sessions),
        "AVG_INTERACTIONS": str(total_interactions // max(total_projects, 1)),
    }
    blocks = {
        "ANALYSIS_STATUS": summarizer.status_lines(),
        "WORK_ITEMS": work_items(summary, summarizer),
        "TOP_PROJECTS": top_project_rows(summary),
        "PROJECTS": project_rows(summary),
        "SESSIONS": session_rows(summary),
    }
    return scalars, blocks


def generate_report(
    summary: DailySummary,
    template: str,
    summarizer: ActivitySummarizer,
    now: datetime | None = None,
) -> str:
    """Render the daily report for ``summary`` with ``template``."""
    scalars, blocks = build_context(summary, summarizer, now)
    return render(template, scalars, blocks)


def print_summary(summary: DailySummary):
    """Print per-project counts for a day."""
    if summary.total_projects == 0:
        console.print(f"[yellow]No activity found for {summary.date}.[/yellow]")
        return

    table = Table(title=f"Activity on {summary.date}")
    table.add_column("Project", style="cyan")
    table.add_column("Sessions", justify="right")
    table.add_column("Entries", style="green", justify="right")

    for path, project in summary.projects.items():
        table.add_row(path, str(project.session_count), str(project.total_entries))

    console.print(table)
