import subprocess

import pytest

from claude_daily_report import summarizer as summarizer_module
from claude_daily_report.errors import ExternalToolError
from claude_daily_report.summarizer import (
    ActivitySummarizer,
    ClaudeCommand,
    find_claude_command,
    keyword_lines,
    parse_bullets,
)


class FailingBackend:
    label = "failing"

    def __init__(self):
        self.calls = 0

    def summarize(self, prompt):
        self.calls += 1
        raise ExternalToolError("boom")


class FixedBackend:
    label = "fixed"

    def __init__(self, text):
        self.text = text
        self.prompts = []

    def summarize(self, prompt):
        self.prompts.append(prompt)
        return self.text


MESSAGES = [
    "Let's implement the parser",
    "unrelated chatter here",
    "Fix the flaky test in CI",
    "review the docs",
    "debug the crash on startup",
]


def test_keyword_fallback_without_backend():
    result = ActivitySummarizer().summarize("proj", MESSAGES)
    assert result == ["Let's implement the parser", "Fix the flaky test in CI", "review the docs"]


def test_keyword_lines_match_japanese_terms():
    assert keyword_lines(["ログイン画面を実装", "雑談"]) == ["ログイン画面を実装"]


def test_long_lines_are_truncated_with_ellipsis():
    line = "implement " + "x" * 100
    (result,) = keyword_lines([line])
    assert result == line[:80] + "..."


def test_failing_backend_falls_back_to_keywords():
    backend = FailingBackend()
    result = ActivitySummarizer(backend).summarize("proj", MESSAGES)

    assert backend.calls == 1
    assert result[0] == "Let's implement the parser"


def test_backend_output_without_bullets_falls_back():
    result = ActivitySummarizer(FixedBackend("Sorry, nothing to report.")).summarize("proj", MESSAGES)
    assert len(result) == 3


def test_backend_bullets_are_used_and_capped():
    text = "\n".join(["Here you go:"] + [f"- item {i}" for i in range(8)])
    backend = FixedBackend(text)

    result = ActivitySummarizer(backend).summarize("my-proj", MESSAGES)

    assert result == [f"item {i}" for i in range(5)]
    assert '"my-proj"' in backend.prompts[0]
    assert "Fix the flaky test in CI" in backend.prompts[0]


def test_prompt_text_overrides_messages_in_prompt():
    backend = FixedBackend("- done")
    ActivitySummarizer(backend).summarize("p", ["line"], prompt_text="[USER MESSAGES]\nline")
    assert "[USER MESSAGES]" in backend.prompts[0]


def test_parse_bullets_ignores_other_lines():
    assert parse_bullets("intro\n- one\n * two\n- \n- three") == ["one", "three"]


def test_status_lines():
    assert "Keyword search only" in ActivitySummarizer().status_lines()[0]
    assert "fixed" in ActivitySummarizer(FixedBackend("")).status_lines()[1]


def make_script(path, body):
    path.write_text("#!/bin/sh\n" + body + "\n")
    path.chmod(0o755)
    return path


def test_claude_command_returns_stdout(tmp_path):
    script = make_script(tmp_path / "claude", 'cat >/dev/null; echo "- did things"')
    assert ClaudeCommand(script).summarize("prompt").strip() == "- did things"


def test_claude_command_nonzero_exit(tmp_path):
    script = make_script(tmp_path / "claude", "echo oops >&2; exit 3")
    with pytest.raises(ExternalToolError, match="exited with 3"):
        ClaudeCommand(script).summarize("prompt")


def test_claude_command_empty_output(tmp_path):
    script = make_script(tmp_path / "claude", "cat >/dev/null")
    with pytest.raises(ExternalToolError, match="no output"):
        ClaudeCommand(script).summarize("prompt")


def test_claude_command_missing_binary(tmp_path):
    with pytest.raises(ExternalToolError):
        ClaudeCommand(tmp_path / "missing").summarize("prompt")


def test_claude_command_timeout(monkeypatch):
    def slow(*args, **kwargs):
        raise subprocess.TimeoutExpired(cmd="claude", timeout=kwargs["timeout"])

    monkeypatch.setattr(summarizer_module.subprocess, "run", slow)
    with pytest.raises(ExternalToolError, match="timed out"):
        ClaudeCommand("claude", timeout=1).summarize("prompt")


def test_find_claude_command_prefers_path(tmp_path, monkeypatch):
    script = make_script(tmp_path / "claude", "exit 0")
    monkeypatch.setenv("PATH", str(tmp_path))
    assert find_claude_command() == script


def test_find_claude_command_next_to_node(tmp_path, monkeypatch):
    node_dir = tmp_path / "node" / "bin"
    node_dir.mkdir(parents=True)
    make_script(node_dir / "node", "exit 0")
    claude = make_script(node_dir / "claude", "exit 0")

    monkeypatch.setattr(
        summarizer_module.shutil,
        "which",
        lambda name: str(node_dir / "node") if name == "node" else None,
    )
    assert find_claude_command() == claude


def test_find_claude_command_common_dirs(tmp_path, monkeypatch):
    claude = make_script(tmp_path / "claude", "exit 0")
    monkeypatch.setattr(summarizer_module.shutil, "which", lambda name: None)
    monkeypatch.setattr(summarizer_module, "COMMON_INSTALL_DIRS", [tmp_path / "empty", tmp_path])
    assert find_claude_command() == claude


def test_find_claude_command_absent(tmp_path, monkeypatch):
    monkeypatch.setattr(summarizer_module.shutil, "which", lambda name: None)
    monkeypatch.setattr(summarizer_module, "COMMON_INSTALL_DIRS", [tmp_path])
    assert find_claude_command() is None


def test_undecodable_command_output_falls_back_to_keywords(tmp_path):
    script = make_script(tmp_path / "claude", "cat >/dev/null; printf '\\377\\376- bad bytes\\n'")

    result = ActivitySummarizer(ClaudeCommand(script)).summarize("p", ["implement the parser"])

    assert result == ["implement the parser"]


def test_unexpected_backend_error_falls_back_to_keywords():
    class Crashes:
        label = "crashes"

        def summarize(self, prompt):
            raise RuntimeError("unexpected")

    assert ActivitySummarizer(Crashes()).summarize("p", ["fix the build"]) == ["fix the build"]
