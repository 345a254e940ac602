"""Parser for the assistant's per-project JSONL session logs."""

import json
from datetime import datetime
from pathlib import Path
from typing import Callable

from .errors import ParseError
from .models import UNKNOWN_TIMESTAMP, LogEntry, Session

SESSION_GLOB = "*.jsonl"
UNKNOWN_TIME = "unknown time"

PathDecoder = Callable[[str], str]


def hyphen_to_slash(name: str) -> str:
    """Decode a project directory name like ``-home-me-app`` to ``/home/me/app``.

    Lossy: a real path containing hyphens decodes to extra directories.
    """
    return name.replace("-", "/")


def keep_name(name: str) -> str:
    """Use the directory name itself as the project path."""
    return name


DECODERS: dict[str, PathDecoder] = {
    "hyphen": hyphen_to_slash,
    "raw": keep_name,
}


def is_lossy_decoding(name: str, decoded: str) -> bool:
    """Check whether a decoded project path may not be the real one."""
    if "-" not in name or decoded == name:
        return False
    return not Path(decoded).exists()


def display_name(project_path: str) -> str:
    """Short label for a project: its last two path components."""
    parts = [p for p in project_path.split("/") if p]
    if not parts:
        return project_path
    return "-".join(parts[-2:])


def matches_date(timestamp: str, date: str) -> bool:
    """Check whether a timestamp falls on ``date`` (YYYY-MM-DD substring)."""
    return bool(timestamp) and date in timestamp


def parse_log_line(line: str) -> LogEntry:
    """Decode one JSONL line into a LogEntry."""
    line = line.strip()
    if not line:
        raise ParseError("empty line")

    try:
        record = json.loads(line)
    except json.JSONDecodeError as e:
        raise ParseError(f"invalid JSON: {e}") from e

    if not isinstance(record, dict):
        raise ParseError(f"expected an object, got {type(record).__name__}")

    return LogEntry.from_record(record)


def read_session(path: Path, date: str) -> Session | None:
    """Read the entries of a session log that belong to ``date``.

    Lines that fail to parse are dropped. Returns None when no entry matches.
    """
    entries = []
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        for line in f:
            # Cheap pre-filter before decoding
            if date not in line:
                continue
            try:
                entry = parse_log_line(line)
            except ParseError:
                continue
            if matches_date(entry.timestamp, date):
                entries.append(entry)

    if not entries:
        return None
    return Session(session_id=path.stem, entries=tuple(entries))


def session_files(project_dir: Path) -> list[Path]:
    """Session logs of a project, in file name order."""
    return sorted(p for p in project_dir.glob(SESSION_GLOB) if p.is_file())


def format_time(timestamp: str) -> str:
    """Render an ISO timestamp as local HH:MM:SS."""
    if not timestamp or timestamp == UNKNOWN_TIMESTAMP:
        return UNKNOWN_TIME

    value = timestamp.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return UNKNOWN_TIME

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone()
    return parsed.strftime("%H:%M:%S")
