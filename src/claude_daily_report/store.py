"""Dated files on disk: summary documents, rendered reports, retention."""

import json
import time
from pathlib import Path

from .errors import ArtifactNotFound, CorruptSummary
from .models import DailySummary

SUMMARY_PREFIX = "claude-history"
REPORT_PREFIX = "daily-report"
REPORT_SUFFIX = ".md"
DEFAULT_KEEP_DAYS = 30


def summary_path(backup_dir: Path, date: str) -> Path:
    return Path(backup_dir) / f"{SUMMARY_PREFIX}-{date}.json"


def report_path(reports_dir: Path, date: str) -> Path:
    return Path(reports_dir) / f"{REPORT_PREFIX}-{date}{REPORT_SUFFIX}"


def write_summary(summary: DailySummary, backup_dir: Path) -> Path:
    """Write the summary document for its date, replacing any previous one."""
    path = summary_path(backup_dir, summary.date)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(path.name + ".tmp")
    with open(tmp_path, "w", encoding="utf-8") as f:
        json.dump(summary.to_dict(), f, ensure_ascii=False, indent=2)
        f.write("\n")
    tmp_path.replace(path)
    return path


def load_summary(backup_dir: Path, date: str, verify: bool = True) -> DailySummary:
    """Load the summary document for ``date``, checking its declared totals."""
    path = summary_path(backup_dir, date)
    if not path.is_file():
        raise ArtifactNotFound(f"Backup file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise CorruptSummary(f"Backup file is unreadable: {path} ({e})") from e
    if not isinstance(data, dict):
        raise CorruptSummary(f"Backup file is not a summary document: {path}")

    if verify:
        DailySummary.verify_totals(data)
    return DailySummary.from_dict(data)


def write_report(date: str, rendered: str, reports_dir: Path) -> Path:
    """Write a rendered report; an existing report for the date is overwritten."""
    path = report_path(reports_dir, date)
    path.parent.mkdir(parents=True, exist_ok=True)
    if not rendered.endswith("\n"):
        rendered += "\n"
    path.write_text(rendered, encoding="utf-8")
    return path


def cleanup_old_backups(backup_dir: Path, days: int = DEFAULT_KEEP_DAYS, now: float | None = None) -> list[Path]:
    """Delete summary documents not modified within ``days`` days."""
    backup_dir = Path(backup_dir)
    if not backup_dir.is_dir():
        return []

    cutoff = (now if now is not None else time.time()) - days * 86400
    removed = []
    for path in sorted(backup_dir.glob(f"{SUMMARY_PREFIX}-*.json")):
        if path.is_file() and path.stat().st_mtime < cutoff:
            path.unlink()
            removed.append(path)
    return removed


def human_size(path: Path) -> str:
    """File size in the style of ``du -h``."""
    size = float(path.stat().st_size)
    if size < 1024:
        return f"{size:.0f}B"
    for unit in ("K", "M"):
        size /= 1024
        if size < 1024:
            return f"{size:.1f}{unit}"
    return f"{size / 1024:.1f}G"
