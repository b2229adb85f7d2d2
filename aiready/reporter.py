"""Render analysis results as a terminal table, JSON or Markdown."""

from __future__ import annotations

import json
from pathlib import Path
from typing import List

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .models import AnalysisResult, FileResult

_RESET = "\x1b[0m"
_RED = "\x1b[31m"
_YELLOW = "\x1b[33m"
_GREEN = "\x1b[32m"
_BOLD = "\x1b[1m"
_DIM = "\x1b[2m"

_TEMPLATES_DIR = Path(__file__).with_name("templates")

CLEAN_LABEL = "✓ AI-ready"
SEPARATOR = "─" * 40


class _Style:
    def __init__(self, color: bool) -> None:
        self.color = color

    def wrap(self, code: str, text: str) -> str:
        return f"{code}{text}{_RESET}" if self.color else text

    def bold(self, text: str) -> str:
        return self.wrap(_BOLD, text)

    def dim(self, text: str) -> str:
        return self.wrap(_DIM, text)

    def score(self, value: int) -> str:
        if value >= 70:
            return self.wrap(_GREEN, str(value))
        if value >= 40:
            return self.wrap(_YELLOW, str(value))
        return self.wrap(_RED, str(value))

    def risk(self, level: str) -> str:
        badge = f"[{level.upper()} RISK]"
        code = {"high": _RED, "medium": _YELLOW, "low": _GREEN}.get(level)
        return self.wrap(_BOLD + code, badge) if code else badge


def format_table(result: AnalysisResult, *, explain: bool = False, color: bool = False) -> str:
    """Score policy: one row per file, worst first."""
    style = _Style(color)
    lines: List[str] = [f"{style.bold('ai-ready')}: codebase scan complete", ""]
    lines.append(style.dim(f"{'FILE':<40} {'SCORE':<8} {'TOP ISSUE':<24} FIX"))

    for file_result in result.files:
        score = file_result.score
        issue = score.issues[0] if score.issues else CLEAN_LABEL
        fix = score.issues[1] if len(score.issues) > 1 else ""
        padding = " " * max(0, 8 - len(str(score.score)))
        lines.append(f"{score.path:<40} {style.score(score.score)}{padding} {issue:<24} {fix}".rstrip())
        if explain and score.signals is not None:
            s = score.signals
            lines.append(
                style.dim(
                    f"  ├─ function_length: {s.function_length}  coupling: {s.coupling}  "
                    f"tests: {s.test_coverage}  comments: {s.comment_density}  size: {s.file_size}"
                )
            )

    lines.append("")
    lines.append(style.bold(f"overall: {result.overall}/100") + f" {_verdict(result.overall)}")
    for recommendation in result.recommendations:
        lines.append(f"→ {recommendation}")
    return "\n".join(lines)


def format_briefing(result: AnalysisResult, *, color: bool = False) -> str:
    """Risk policy: pre-session briefing per file, riskiest first."""
    style = _Style(color)
    lines: List[str] = ["", style.bold("ai-ready: pre-session briefing"), SEPARATOR, ""]
    for file_result in result.files:
        lines.extend(_briefing_block(file_result, style))
        lines.append("")
    lines.append(SEPARATOR)
    lines.append(result.summary)
    for item in result.recommendations:
        lines.append(f"→ {item}")
    lines.append("")
    return "\n".join(lines)


def _briefing_block(file_result: FileResult, style: _Style) -> List[str]:
    risk = file_result.risk
    warn = style.wrap(_YELLOW, "  ⚠ ")
    ok = style.wrap(_GREEN, "  ✓ ")
    lines = [f"{risk.file}  {style.risk(risk.risk_level)}"]

    if risk.circular_deps:
        lines.append(f"{warn}circular dep   → {', '.join(risk.circular_deps)}")
    elif risk.in_cycle:
        lines.append(f"{warn}circular dep   → imports itself")
    else:
        lines.append(f"{ok}no circular deps")

    if risk.incoming_deps:
        lines.append(f"{warn}imported by    → {len(risk.incoming_deps)} files")

    if risk.global_mutations:
        mutations = ", ".join(f"{m.name} (line {m.line})" for m in risk.global_mutations)
        lines.append(f"{warn}global state   → {mutations}")

    if risk.missing_return_types:
        lines.append(
            f"{warn}missing types  → {risk.missing_return_types} exported functions without return type"
        )
    else:
        lines.append(f"{ok}types ok")

    if risk.test_coverage.has_test_file:
        lines.append(f"{ok}tests          → {risk.test_coverage.assertion_count} assertions")
    else:
        lines.append(f"{warn}no test file found")

    if risk.risk_level != "low":
        for sentence in _sentences(risk.briefing):
            lines.append(style.dim(f"  → {sentence}"))
    return lines


def _sentences(text: str) -> List[str]:
    parts = [part.strip() for part in text.split(". ") if part.strip()]
    return [part if part.endswith(".") else f"{part}." for part in parts]


def _verdict(overall: int) -> str:
    if overall >= 70:
        return "✓ AI-ready"
    if overall >= 40:
        return "⚠ some modules need work before AI sessions"
    return "✗ significant refactoring needed"


def format_json(result: AnalysisResult) -> str:
    return json.dumps(result.to_dict(), indent=2, ensure_ascii=False)


def format_markdown(result: AnalysisResult) -> str:
    env = Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    template = env.get_template("report.md.j2")
    return template.render(result=result, verdict=_verdict(result.overall))


def render(
    result: AnalysisResult,
    fmt: str = "table",
    *,
    explain: bool = False,
    color: bool = False,
) -> str:
    """Render ``result`` in ``fmt`` (``table``, ``json`` or ``markdown``)."""
    if fmt == "json":
        return format_json(result)
    if fmt == "markdown":
        return format_markdown(result)
    if fmt != "table":
        raise ValueError(f"Unknown format: {fmt}")
    if result.policy == "score":
        return format_table(result, explain=explain, color=color)
    return format_briefing(result, color=color)


__all__ = [
    "format_briefing",
    "format_json",
    "format_markdown",
    "format_table",
    "render",
]
