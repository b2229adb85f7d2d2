"""Bands raw file facts into 0-100 readiness scores per axis."""

from __future__ import annotations

from typing import Optional, Tuple

from .aggregator import weighted_score
from .models import FileFacts, FileScore, SignalScores, TestCoverage

UNREADABLE_ISSUE = "file unreadable"

# Precedence order for ties: function length, coupling, tests, comments, size.
_ISSUES: Tuple[Tuple[str, str, str], ...] = (
    ("function_length", "function too long", "split into smaller functions"),
    ("coupling", "high coupling", "extract shared utils"),
    ("test_coverage", "no tests", "add test file"),
    ("comment_density", "low comments", "add doc comments"),
    ("file_size", "file too large", "split into modules"),
)

CLEAN_THRESHOLD = 70


def function_length_score(avg_function_lines: float) -> int:
    if avg_function_lines > 50:
        return 0
    if avg_function_lines > 30:
        return 40
    if avg_function_lines > 20:
        return 70
    return 100


def coupling_score(import_count: int) -> int:
    if import_count > 8:
        return 0
    if import_count > 5:
        return 40
    if import_count > 3:
        return 70
    return 100


def coverage_score(coverage: TestCoverage) -> int:
    return 100 if coverage.has_test_file else 0


def comment_density_score(comment_lines: int, total_lines: int) -> int:
    if total_lines == 0:
        return 100
    ratio = comment_lines / total_lines
    if ratio > 0.10:
        return 100
    if ratio > 0.05:
        return 70
    if ratio > 0.01:
        return 40
    return 10


def file_size_score(total_lines: int) -> int:
    if total_lines > 500:
        return 0
    if total_lines > 300:
        return 40
    if total_lines > 150:
        return 70
    return 100


def average_function_lines(facts: FileFacts) -> float:
    functions = facts.functions
    if not functions:
        return 0.0
    return sum(span.line_count for span in functions) / len(functions)


def score_signals(facts: FileFacts) -> SignalScores:
    """Score every axis for a readable file."""
    if facts.blank:
        return SignalScores.perfect()
    if facts.functions:
        fl = function_length_score(average_function_lines(facts))
    else:
        fl = 100
    return SignalScores(
        function_length=fl,
        coupling=coupling_score(facts.import_count),
        test_coverage=coverage_score(facts.test_coverage),
        comment_density=comment_density_score(facts.comment_lines, facts.total_lines),
        file_size=file_size_score(facts.total_lines),
    )


def top_issue(signals: SignalScores) -> Optional[Tuple[str, str]]:
    """Return ``(issue, fix)`` for the weakest axis, or None when the file is clean."""
    worst_score = None
    worst: Optional[Tuple[str, str]] = None
    for attribute, issue, fix in _ISSUES:
        value = getattr(signals, attribute)
        if worst_score is None or value < worst_score:
            worst_score = value
            worst = (issue, fix)
    if worst_score is None or worst_score >= CLEAN_THRESHOLD:
        return None
    return worst


def score_file(facts: FileFacts) -> FileScore:
    """Compute the weighted score and headline issue for one file."""
    if not facts.readable:
        return FileScore(path=facts.path, score=0, issues=(UNREADABLE_ISSUE,), signals=None)
    signals = score_signals(facts)
    issue = top_issue(signals)
    return FileScore(
        path=facts.path,
        score=weighted_score(signals),
        issues=issue if issue is not None else (),
        signals=signals,
    )


__all__ = [
    "CLEAN_THRESHOLD",
    "UNREADABLE_ISSUE",
    "average_function_lines",
    "comment_density_score",
    "coverage_score",
    "coupling_score",
    "file_size_score",
    "function_length_score",
    "score_file",
    "score_signals",
    "top_issue",
]
