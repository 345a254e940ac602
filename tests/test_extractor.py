from claude_daily_report.extractor import collect_messages, entry_texts, session_highlights
from claude_daily_report.models import LogEntry, ProjectSummary, Session

from conftest import assistant, tool_result, user


def project(*records):
    entries = tuple(LogEntry.from_record(r) for r in records)
    return ProjectSummary(path="p", sessions={"s": Session("s", entries)})


TS = "2024-01-15T10:00:00Z"


def test_collect_messages_groups_by_source():
    messages = collect_messages(
        project(
            user("Please refactor the config loader\nok", TS),
            assistant("# Summary\nI updated config.py\nSome musing", TS),
            tool_result("The file config.py has been updated successfully.", TS),
            tool_result("exit code 1", TS),
        )
    )

    assert messages.user == ["Please refactor the config loader"]
    assert messages.assistant == ["I updated config.py"]
    assert messages.tool_results == ["The file config.py has been updated successfully."]
    assert messages.lines()[0] == "Please refactor the config loader"


def test_collect_messages_japanese_assistant_phrases():
    messages = collect_messages(project(assistant("テンプレートを作成しました", TS)))
    assert messages.assistant == ["テンプレートを作成しました"]


def test_user_lines_are_capped():
    records = [user(f"message number {i:04d}", TS) for i in range(250)]
    assert len(collect_messages(project(*records)).user) == 200


def test_prompt_text_sections():
    messages = collect_messages(project(user("implement the thing now", TS)))
    text = messages.as_prompt_text()
    assert text.startswith("[USER MESSAGES]\n")
    assert "[ASSISTANT WORK]" not in text


def test_empty_project_messages():
    assert collect_messages(project()).is_empty()


def test_entry_texts_handles_shapes():
    assert entry_texts(LogEntry("assistant", TS, "plain")) == ["plain"]
    assert entry_texts(LogEntry("assistant", TS, [{"type": "tool_use"}, {"type": "text", "text": "t"}])) == ["t"]
    assert entry_texts(LogEntry("assistant", TS, None)) == []


def test_session_highlights():
    entries = tuple(
        LogEntry.from_record(r)
        for r in [
            tool_result("File created successfully", TS),
            user("first prompt", TS),
            assistant("reply", TS),
            user("x" * 120, TS),
            user("third", TS),
            user("fourth", TS),
        ]
    )

    highlights = session_highlights(Session("s", entries))

    assert highlights == ["first prompt", "x" * 80 + "...", "third"]
