import json
from pathlib import Path

import pytest


def write_session(project_dir: Path, session_id: str, records: list) -> Path:
    """Write records (dicts, or raw strings for broken lines) as a JSONL session."""
    project_dir.mkdir(parents=True, exist_ok=True)
    path = project_dir / f"{session_id}.jsonl"
    lines = [r if isinstance(r, str) else json.dumps(r, ensure_ascii=False) for r in records]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def user(text, timestamp):
    return {"type": "user", "timestamp": timestamp, "message": {"role": "user", "content": text}}


def assistant(text, timestamp):
    return {
        "type": "assistant",
        "timestamp": timestamp,
        "message": {"role": "assistant", "content": [{"type": "text", "text": text}]},
    }


def tool_result(text, timestamp):
    return {
        "type": "user",
        "timestamp": timestamp,
        "message": {
            "role": "user",
            "content": [{"type": "tool_result", "tool_use_id": "toolu_1", "content": text}],
        },
    }


@pytest.fixture
def projects_dir(tmp_path_factory):
    """Two projects: foo-bar active on both days, -home-me-app only on the 15th."""
    root = tmp_path_factory.mktemp("projects")
    write_session(
        root / "foo-bar",
        "aaaaaaaa-1111",
        [
            user("Please implement the CSV export feature", "2024-01-15T09:00:00.000Z"),
            assistant("I implemented the export and created export.py", "2024-01-15T09:05:00.000Z"),
            tool_result("File created successfully at: export.py", "2024-01-15T09:06:00.000Z"),
            user("Now add a test for the exporter please", "2024-01-16T10:00:00.000Z"),
            assistant("Added tests/test_export.py", "2024-01-16T10:02:00.000Z"),
        ],
    )
    write_session(
        root / "-home-me-app",
        "bbbbbbbb-2222",
        [
            user("Fix the login redirect bug in the app", "2024-01-15T13:00:00.000Z"),
            "{not json 2024-01-15",
            assistant("Fixed the redirect in auth.py", "2024-01-15T13:10:00.000Z"),
        ],
    )
    (root / "-home-me-idle").mkdir()
    (root / "stray-file.txt").write_text("2024-01-15")
    return root
