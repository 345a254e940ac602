"""Minimal text templates: {{NAME}} placeholders and {{#NAME}}...{{/NAME}} blocks."""

import re
from pathlib import Path
from typing import Mapping, Sequence

from .errors import ArtifactNotFound, TemplateError

BUILTIN_TEMPLATES_DIR = Path(__file__).parent / "templates"
TEMPLATE_SUFFIX = ".md"

PLACEHOLDER_RE = re.compile(r"\{\{([A-Z0-9_]+)\}\}")
OPEN_RE = re.compile(r"\{\{#([A-Z0-9_]+)\}\}")
CLOSE_RE = re.compile(r"\{\{/([A-Z0-9_]+)\}\}")

Row = str | Mapping[str, str]


def substitute(text: str, values: Mapping[str, str]) -> str:
    """Replace known placeholders, leaving unknown ones untouched."""

    def replace(match: re.Match) -> str:
        name = match.group(1)
        if name in values:
            return str(values[name])
        return match.group(0)

    return PLACEHOLDER_RE.sub(replace, text)


def expand_block(body: list[str], rows: Sequence[Row], scalars: Mapping[str, str]) -> list[str]:
    """Render a block region once per row.

    String rows are already rendered; mapping rows fill in the block body.
    """
    output = []
    for row in rows:
        if isinstance(row, str):
            output.append(row)
            continue
        values = {**scalars, **{k: str(v) for k, v in row.items()}}
        output.extend(substitute(line, values) for line in body)
    return output


def render(
    template: str,
    scalars: Mapping[str, str],
    blocks: Mapping[str, Sequence[Row]] | None = None,
) -> str:
    """Render ``template`` with scalar values and block rows.

    Blocks do not nest. A block without rows, or with no entry in
    ``blocks``, renders as nothing.
    """
    blocks = blocks or {}
    output: list[str] = []
    current: str | None = None
    opened_at = 0
    body: list[str] = []

    for lineno, line in enumerate(template.split("\n"), start=1):
        opening = OPEN_RE.search(line)
        closing = CLOSE_RE.search(line)

        if current is None:
            if closing and not opening:
                raise TemplateError(f"line {lineno}: {{{{/{closing.group(1)}}}}} without matching open")
            if opening:
                current = opening.group(1)
                opened_at = lineno
                body = []
                # Open and close on a single line: the body is empty
                if closing and closing.group(1) == current and closing.start() > opening.start():
                    output.extend(expand_block(body, blocks.get(current, ()), scalars))
                    current = None
                continue
            output.append(substitute(line, scalars))
            continue

        if opening:
            raise TemplateError(
                f"line {lineno}: {{{{#{opening.group(1)}}}}} inside block {current} opened on line {opened_at}"
            )
        if closing:
            if closing.group(1) != current:
                raise TemplateError(
                    f"line {lineno}: {{{{/{closing.group(1)}}}}} closes block {current} opened on line {opened_at}"
                )
            output.extend(expand_block(body, blocks.get(current, ()), scalars))
            current = None
            continue
        body.append(line)

    if current is not None:
        raise TemplateError(f"block {current} opened on line {opened_at} is never closed")

    return "\n".join(output)


def list_templates(*dirs: Path) -> list[str]:
    """Template names available in ``dirs`` and the built-in directory."""
    names = set()
    for directory in (*dirs, BUILTIN_TEMPLATES_DIR):
        if directory and Path(directory).is_dir():
            names.update(p.stem for p in Path(directory).glob(f"*{TEMPLATE_SUFFIX}"))
    return sorted(names)


def load_template(name: str, *dirs: Path) -> str:
    """Read a template by name; earlier directories win over the built-ins."""
    for directory in (*dirs, BUILTIN_TEMPLATES_DIR):
        if not directory:
            continue
        path = Path(directory) / f"{name}{TEMPLATE_SUFFIX}"
        if path.is_file():
            return path.read_text(encoding="utf-8")

    raise ArtifactNotFound(f"Template not found: {name}", available=list_templates(*dirs))
