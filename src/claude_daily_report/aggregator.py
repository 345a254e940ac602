"""Aggregate one day of session logs into a DailySummary."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from .errors import SourceNotFound
from .models import DailySummary, ProjectSummary, Session
from .parser import PathDecoder, hyphen_to_slash, read_session, session_files

ProjectCallback = Callable[[str, Path, ProjectSummary | None], None]


def utc_timestamp(now: datetime | None = None) -> str:
    """UTC timestamp with millisecond precision, e.g. 2024-01-15T10:00:00.000Z."""
    now = now or datetime.now(timezone.utc)
    now = now.astimezone(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def aggregate_project(project_dir: Path, path: str, date: str) -> ProjectSummary | None:
    """Collect the sessions of one project directory for ``date``."""
    sessions: dict[str, Session] = {}
    for log_file in session_files(project_dir):
        session = read_session(log_file, date)
        if session is not None:
            sessions[session.session_id] = session

    if not sessions:
        return None
    return ProjectSummary(path=path, sessions=sessions)


def aggregate(
    logs_root: Path,
    date: str,
    decoder: PathDecoder = hyphen_to_slash,
    on_project: ProjectCallback | None = None,
    now: datetime | None = None,
) -> DailySummary:
    """Build the DailySummary for ``date`` from a projects directory.

    Projects without any matching entry are left out. The result is ordered
    by project path so repeated runs produce identical documents.
    """
    logs_root = Path(logs_root)
    if not logs_root.is_dir():
        raise SourceNotFound(f"{logs_root} not found")

    projects: dict[str, ProjectSummary] = {}
    for project_dir in sorted(logs_root.iterdir()):
        if not project_dir.is_dir():
            continue

        path = decoder(project_dir.name)
        project = aggregate_project(project_dir, path, date)
        if on_project:
            on_project(path, project_dir, project)
        if project is None:
            continue
        if path in projects:
            # Two directories decoded to the same path
            merged = {**projects[path].sessions, **project.sessions}
            project = ProjectSummary(path=path, sessions=merged)
        projects[path] = project

    return DailySummary(
        date=date,
        generated_at=utc_timestamp(now),
        projects={path: projects[path] for path in sorted(projects)},
    )


def top_projects(summary: DailySummary, limit: int = 5) -> list[ProjectSummary]:
    """Most active projects by entry count."""
    ranked = sorted(summary.projects.values(), key=lambda p: (-p.total_entries, p.path))
    return ranked[:limit]
