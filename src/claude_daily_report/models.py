"""Data models for daily report generation."""

from dataclasses import dataclass, field
from typing import Any, Literal

from .errors import SummaryMismatch

EXTRACTION_METHOD = "timestamp_based"
UNKNOWN_TIMESTAMP = "unknown"

EntryType = Literal["user", "assistant", "other"]


@dataclass(frozen=True)
class LogEntry:
    """A single record from a session log."""

    type: EntryType
    timestamp: str
    content: str | list | None
    raw: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "LogEntry":
        entry_type = record.get("type")
        if entry_type not in ("user", "assistant"):
            entry_type = "other"

        # Real logs nest the payload under "message"; older records do not
        message = record.get("message")
        if isinstance(message, dict) and "content" in message:
            content = message["content"]
        else:
            content = record.get("content")

        timestamp = record.get("timestamp")
        return cls(
            type=entry_type,
            timestamp=timestamp if isinstance(timestamp, str) else "",
            content=content,
            raw=record,
        )


@dataclass(frozen=True)
class Session:
    """Entries of one session log restricted to a single day."""

    session_id: str
    entries: tuple[LogEntry, ...] = ()

    @property
    def entry_count(self) -> int:
        return len(self.entries)

    @property
    def last_timestamp(self) -> str:
        """Timestamp of the last entry in file order."""
        if not self.entries or not self.entries[-1].timestamp:
            return UNKNOWN_TIMESTAMP
        return self.entries[-1].timestamp

    def to_dict(self) -> dict:
        return {
            "entries": [entry.raw for entry in self.entries],
            "entry_count": self.entry_count,
            "last_timestamp": self.last_timestamp,
        }


@dataclass(frozen=True)
class ProjectSummary:
    """All sessions of one project that had activity on the day."""

    path: str
    sessions: dict[str, Session] = field(default_factory=dict)

    @property
    def session_count(self) -> int:
        return len(self.sessions)

    @property
    def total_entries(self) -> int:
        return sum(s.entry_count for s in self.sessions.values())

    def to_dict(self) -> dict:
        return {
            "sessions": {sid: s.to_dict() for sid, s in self.sessions.items()},
            "session_count": self.session_count,
            "total_entries": self.total_entries,
        }


@dataclass(frozen=True)
class DailySummary:
    """Root document: every active project for a date."""

    date: str
    generated_at: str
    projects: dict[str, ProjectSummary] = field(default_factory=dict)

    @property
    def total_projects(self) -> int:
        return len(self.projects)

    @property
    def total_interactions(self) -> int:
        return sum(p.total_entries for p in self.projects.values())

    @property
    def total_sessions(self) -> int:
        return sum(p.session_count for p in self.projects.values())

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "generated_at": self.generated_at,
            "extraction_method": EXTRACTION_METHOD,
            "projects": {path: p.to_dict() for path, p in self.projects.items()},
            "summary": {
                "total_projects": self.total_projects,
                "total_interactions": self.total_interactions,
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DailySummary":
        """Rebuild a summary from its persisted document.

        Counts are recomputed from the entries; use verify_totals to check
        them against the declared values.
        """
        projects = {}
        for path, project_data in (data.get("projects") or {}).items():
            sessions = {}
            for session_id, session_data in (project_data.get("sessions") or {}).items():
                entries = tuple(
                    LogEntry.from_record(record)
                    for record in session_data.get("entries", [])
                    if isinstance(record, dict)
                )
                sessions[session_id] = Session(session_id=session_id, entries=entries)
            projects[path] = ProjectSummary(path=path, sessions=sessions)

        return cls(
            date=data.get("date", ""),
            generated_at=data.get("generated_at", ""),
            projects=projects,
        )

    @staticmethod
    def verify_totals(data: dict):
        """Check a persisted document's declared counts against its contents."""
        problems = []
        total_projects = 0
        total_interactions = 0

        for path, project in (data.get("projects") or {}).items():
            sessions = project.get("sessions") or {}
            project_entries = 0
            for session_id, session in sessions.items():
                actual = len(session.get("entries", []))
                if session.get("entry_count") != actual:
                    problems.append(
                        f"{path}/{session_id}: entry_count {session.get('entry_count')} != {actual}"
                    )
                project_entries += actual

            if project.get("session_count") != len(sessions):
                problems.append(f"{path}: session_count {project.get('session_count')} != {len(sessions)}")
            if project.get("total_entries") != project_entries:
                problems.append(f"{path}: total_entries {project.get('total_entries')} != {project_entries}")

            total_projects += 1
            total_interactions += project_entries

        declared = data.get("summary") or {}
        if declared.get("total_projects") != total_projects:
            problems.append(f"total_projects {declared.get('total_projects')} != {total_projects}")
        if declared.get("total_interactions") != total_interactions:
            problems.append(f"total_interactions {declared.get('total_interactions')} != {total_interactions}")

        if problems:
            raise SummaryMismatch("; ".join(problems))
