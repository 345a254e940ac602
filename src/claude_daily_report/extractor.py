"""Pull work-related messages out of a project's log entries."""

import re
from dataclasses import dataclass, field

from .models import LogEntry, ProjectSummary, Session

MIN_USER_LINE = 10
USER_LIMIT = 200
ASSISTANT_LIMIT = 200
TOOL_RESULT_LIMIT = 100

ASSISTANT_WORK_PATTERN = re.compile(
    r"(created|updated|deleted|added|changed|fixed|implemented|completed"
    r"|file|template|script|command"
    r"|作成しました|更新しました|削除しました|追加しました|変更しました"
    r"|修正しました|実装しました|完了しました|ファイル|テンプレート|スクリプト|コマンド)",
    re.IGNORECASE,
)

TOOL_SUCCESS_PATTERN = re.compile(
    r"(File created|file.*updated|Deleted|Renamed|has been (created|updated|deleted)|successfully)"
)


@dataclass
class ProjectMessages:
    """Messages from one project, grouped by where they came from."""

    user: list[str] = field(default_factory=list)
    assistant: list[str] = field(default_factory=list)
    tool_results: list[str] = field(default_factory=list)

    def lines(self) -> list[str]:
        return self.user + self.assistant + self.tool_results

    def is_empty(self) -> bool:
        return not (self.user or self.assistant or self.tool_results)

    def as_prompt_text(self) -> str:
        """Format the messages under section headers for a summary prompt."""
        sections = []
        if self.user:
            sections.append("[USER MESSAGES]\n" + "\n".join(self.user))
        if self.assistant:
            sections.append("[ASSISTANT WORK]\n" + "\n".join(self.assistant))
        if self.tool_results:
            sections.append("[TOOL RESULTS]\n" + "\n".join(self.tool_results))
        return "\n\n".join(sections)


def entry_texts(entry: LogEntry) -> list[str]:
    """Text of an entry: string content or the text blocks of array content."""
    if isinstance(entry.content, str):
        return [entry.content]
    if not isinstance(entry.content, list):
        return []

    texts = []
    for block in entry.content:
        if isinstance(block, str):
            texts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text" and isinstance(block.get("text"), str):
            texts.append(block["text"])
    return texts


def tool_result_texts(entry: LogEntry) -> list[str]:
    """String payloads of tool_result blocks in an entry."""
    if not isinstance(entry.content, list):
        return []
    return [
        block["content"]
        for block in entry.content
        if isinstance(block, dict)
        and block.get("type") == "tool_result"
        and isinstance(block.get("content"), str)
    ]


def _split(texts: list[str]) -> list[str]:
    lines = []
    for text in texts:
        lines.extend(text.splitlines())
    return lines


def iter_entries(project: ProjectSummary):
    for session in project.sessions.values():
        yield from session.entries


def collect_messages(project: ProjectSummary) -> ProjectMessages:
    """Gather user prompts, assistant work reports and tool results."""
    messages = ProjectMessages()

    for entry in iter_entries(project):
        if entry.type == "user":
            if isinstance(entry.content, str):
                for line in entry.content.splitlines():
                    if len(messages.user) < USER_LIMIT and len(line.strip()) >= MIN_USER_LINE:
                        messages.user.append(line)

            for line in _split(tool_result_texts(entry)):
                if len(messages.tool_results) < TOOL_RESULT_LIMIT and TOOL_SUCCESS_PATTERN.search(line):
                    messages.tool_results.append(line)

        elif entry.type == "assistant":
            for line in _split(entry_texts(entry)):
                if len(messages.assistant) >= ASSISTANT_LIMIT:
                    break
                if line.startswith("#"):
                    continue
                if ASSISTANT_WORK_PATTERN.search(line):
                    messages.assistant.append(line)

    return messages


def session_highlights(session: Session, limit: int = 3, width: int = 80) -> list[str]:
    """First user prompts of a session, shortened for display."""
    highlights = []
    for entry in session.entries:
        if len(highlights) >= limit:
            break
        if entry.type != "user" or entry.content is None:
            continue

        if isinstance(entry.content, str):
            text = entry.content
        else:
            texts = entry_texts(entry)
            if not texts:
                continue
            text = texts[0]

        text = " ".join(text.split())
        if not text:
            continue
        if len(text) > width:
            text = text[:width] + "..."
        highlights.append(text)

    return highlights
