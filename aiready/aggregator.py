"""Weighted aggregation of signal scores and repo-wide roll-ups."""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence

from .models import RISK_LEVELS, FileResult, SignalScores

# Weights in percent: function length, coupling, tests, comments, size.
WEIGHTS = {
    "function_length": 30,
    "coupling": 25,
    "test_coverage": 25,
    "comment_density": 10,
    "file_size": 10,
}

EMPTY_REPO_SCORE = 100

_RISK_ORDER = {level: index for index, level in enumerate(RISK_LEVELS)}


def weighted_score(signals: SignalScores) -> int:
    """Return ``round(0.30 fl + 0.25 cp + 0.25 tc + 0.10 cd + 0.10 fs)``.

    Computed in integer percent so that halves round up exactly.
    """
    total = sum(getattr(signals, axis) * weight for axis, weight in WEIGHTS.items())
    return (total + 50) // 100


def repo_score(scores: Iterable[int]) -> int:
    """Rounded mean of per-file scores; 100 when nothing was scanned."""
    values = list(scores)
    if not values:
        return EMPTY_REPO_SCORE
    count = len(values)
    return (2 * sum(values) + count) // (2 * count)


def sort_by_score(results: Iterable[FileResult]) -> List[FileResult]:
    """Worst score first; ties broken by path so input order never matters."""
    return sorted(results, key=lambda result: (result.score.score, result.path))


def sort_by_risk(results: Iterable[FileResult]) -> List[FileResult]:
    """High risk first, then medium, then low; ties broken by path."""
    return sorted(
        results,
        key=lambda result: (_RISK_ORDER.get(result.risk.risk_level, len(RISK_LEVELS)), result.path),
    )


def risk_counts(results: Sequence[FileResult]) -> Dict[str, int]:
    counts = {level: 0 for level in RISK_LEVELS}
    for result in results:
        counts[result.risk.risk_level] = counts.get(result.risk.risk_level, 0) + 1
    return counts


__all__ = [
    "EMPTY_REPO_SCORE",
    "WEIGHTS",
    "repo_score",
    "risk_counts",
    "sort_by_risk",
    "sort_by_score",
    "weighted_score",
]
