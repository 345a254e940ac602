"""Per-project work summaries, via an assistant backend or keyword matching."""

import os
import shutil
import subprocess
from pathlib import Path
from typing import Protocol

from anthropic import Anthropic, APIError
from rich.console import Console
from rich.markup import escape

from .errors import ExternalToolError

console = Console()

DEFAULT_MODEL = "claude-sonnet-4-20250514"
DEFAULT_TIMEOUT = 120

COMMAND_NAME = "claude"
COMMON_INSTALL_DIRS = [
    Path("/usr/local/bin"),
    Path("/opt/homebrew/bin"),
    Path.home() / ".local" / "bin",
]

WORK_KEYWORDS = [
    "implement", "create", "add", "fix", "improve", "develop", "test",
    "review", "debug", "refactor",
    "実装", "作成", "追加", "修正", "改善", "対応", "開発", "テスト", "レビュー", "デバッグ",
]

SUMMARY_PROMPT = """The following is the work log of the "{project}" project. Summarize what was actually done as 3-5 bullet points.

Requirements:
- Each item starts with "- "
- Each item is at most 80 characters
- Describe concrete work that was carried out, not the user's instructions
- Use precise technical terms

Work log:
{messages}"""


class SummaryBackend(Protocol):
    """Anything that can turn a prompt into text."""

    label: str

    def summarize(self, prompt: str) -> str: ...


class ClaudeCommand:
    """Runs the assistant CLI in print mode with the prompt on stdin."""

    def __init__(self, path: str | Path, timeout: float = DEFAULT_TIMEOUT):
        self.path = str(path)
        self.timeout = timeout
        self.label = self.path

    def summarize(self, prompt: str) -> str:
        try:
            result = subprocess.run(
                [self.path, "-p"],
                input=prompt,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise ExternalToolError(f"{self.path} timed out after {self.timeout}s") from e
        except OSError as e:
            raise ExternalToolError(f"could not run {self.path}: {e}") from e

        if result.returncode != 0:
            raise ExternalToolError(f"{self.path} exited with {result.returncode}: {result.stderr.strip()}")
        if not result.stdout.strip():
            raise ExternalToolError(f"{self.path} returned no output")
        return result.stdout


class AnthropicBackend:
    """Summarizes through the Anthropic Messages API."""

    def __init__(self, api_key: str, model: str = DEFAULT_MODEL, client: Anthropic | None = None):
        self.client = client or Anthropic(api_key=api_key)
        self.model = model
        self.label = f"Anthropic API ({model})"

    def summarize(self, prompt: str) -> str:
        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=1024,
                messages=[{"role": "user", "content": prompt}],
            )
        except APIError as e:
            raise ExternalToolError(f"API error: {e}") from e

        text = "".join(getattr(block, "text", "") for block in response.content)
        if not text.strip():
            raise ExternalToolError("API returned no text")
        return text


def _is_executable(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)


def find_claude_command() -> Path | None:
    """Locate the assistant CLI: PATH, next to node, then common install dirs."""
    found = shutil.which(COMMAND_NAME)
    if found and _is_executable(Path(found)):
        return Path(found)

    node = shutil.which("node")
    if node:
        candidate = Path(node).parent / COMMAND_NAME
        if _is_executable(candidate):
            return candidate

    for directory in COMMON_INSTALL_DIRS:
        candidate = directory / COMMAND_NAME
        if _is_executable(candidate):
            return candidate

    return None


def shorten(text: str, width: int = 80) -> str:
    text = text.strip()
    if len(text) > width:
        return text[:width] + "..."
    return text


def keyword_lines(messages: list[str], limit: int = 3, width: int = 80) -> list[str]:
    """Pick lines that mention typical work activities."""
    picked = []
    for line in messages:
        if len(picked) >= limit:
            break
        lowered = line.lower()
        if any(keyword in lowered for keyword in WORK_KEYWORDS):
            text = shorten(line, width)
            if text:
                picked.append(text)
    return picked


def parse_bullets(text: str, limit: int = 5, width: int = 80) -> list[str]:
    """Bullet items ("- ...") from backend output."""
    bullets = []
    for line in text.splitlines():
        if not line.startswith("- "):
            continue
        item = shorten(line[2:], width)
        if item:
            bullets.append(item)
        if len(bullets) >= limit:
            break
    return bullets


class ActivitySummarizer:
    """Turns a project's messages into a few bullet points.

    With a backend configured, the backend is asked first; any failure or an
    answer without bullets falls back to keyword matching.
    """

    def __init__(
        self,
        backend: SummaryBackend | None = None,
        max_bullets: int = 5,
        fallback_bullets: int = 3,
        width: int = 80,
    ):
        self.backend = backend
        self.max_bullets = max_bullets
        self.fallback_bullets = fallback_bullets
        self.width = width

    def build_prompt(self, project_name: str, messages: list[str] | str) -> str:
        if not isinstance(messages, str):
            messages = "\n".join(messages)
        return SUMMARY_PROMPT.format(project=project_name, messages=messages)

    def summarize(self, project_name: str, messages: list[str], prompt_text: str | None = None) -> list[str]:
        """Summarize ``messages``; ``prompt_text`` overrides what the backend sees."""
        if self.backend is not None:
            prompt = self.build_prompt(project_name, prompt_text if prompt_text is not None else messages)
            try:
                bullets = parse_bullets(self.backend.summarize(prompt), self.max_bullets, self.width)
            except Exception as e:
                console.print(f"[yellow]Summary for {escape(project_name)} failed, using keywords: {escape(str(e))}[/yellow]")
                bullets = []
            if bullets:
                return bullets

        return keyword_lines(messages, self.fallback_bullets, self.width)

    def status_lines(self) -> list[str]:
        """Lines describing how work items were produced."""
        if self.backend is not None:
            return [
                "✅ **AI analysis** - work items were summarized automatically",
                f"  - Backend: {self.backend.label}",
            ]
        return [
            "⚠️ **Keyword search only** - AI analysis was not available",
            "  - No assistant command or API key was found",
        ]
