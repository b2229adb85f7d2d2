"""Tests for aiready.aggregator."""

from __future__ import annotations

from aiready.aggregator import (
    EMPTY_REPO_SCORE,
    repo_score,
    risk_counts,
    sort_by_risk,
    sort_by_score,
    weighted_score,
)
from aiready.models import FileFacts, FileResult, FileScore, RiskProfile, SignalScores, SourceFacts, TestCoverage


def _result(path: str, score: int, level: str) -> FileResult:
    return FileResult(
        facts=FileFacts(path=path, source=SourceFacts(), test_coverage=TestCoverage(False)),
        score=FileScore(path=path, score=score),
        risk=RiskProfile(file=path, risk_level=level),
    )


def test_weighted_score_uses_fixed_weights() -> None:
    signals = SignalScores(
        function_length=100,
        coupling=100,
        test_coverage=0,
        comment_density=10,
        file_size=100,
    )

    assert weighted_score(signals) == 66


def test_weighted_score_rounds_halves_up() -> None:
    # 0.30*70 + 0.25*70 + 0.25*0 + 0.10*10 + 0.10*100 = 49.5
    signals = SignalScores(70, 70, 0, 10, 100)

    assert weighted_score(signals) == 50


def test_repo_score_is_rounded_mean() -> None:
    assert repo_score([100, 75]) == 88
    assert repo_score([40, 41, 41]) == 41
    assert repo_score([0]) == 0


def test_repo_score_for_empty_repo() -> None:
    assert repo_score([]) == EMPTY_REPO_SCORE == 100


def test_sort_by_score_breaks_ties_by_path() -> None:
    results = [_result("b.ts", 50, "low"), _result("c.ts", 10, "low"), _result("a.ts", 50, "low")]

    ordered = sort_by_score(results)

    assert [r.path for r in ordered] == ["c.ts", "a.ts", "b.ts"]


def test_sort_by_risk_is_independent_of_input_order() -> None:
    results = [
        _result("low.ts", 90, "low"),
        _result("b-high.ts", 90, "high"),
        _result("medium.ts", 90, "medium"),
        _result("a-high.ts", 90, "high"),
    ]

    forward = [r.path for r in sort_by_risk(results)]
    backward = [r.path for r in sort_by_risk(list(reversed(results)))]

    assert forward == ["a-high.ts", "b-high.ts", "medium.ts", "low.ts"]
    assert backward == forward


def test_risk_counts_include_every_level() -> None:
    results = [_result("a.ts", 0, "high"), _result("b.ts", 0, "high"), _result("c.ts", 0, "low")]

    assert risk_counts(results) == {"high": 2, "medium": 0, "low": 1}
