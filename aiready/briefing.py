"""Turns scores and risk profiles into ordered, human-readable guidance."""

from __future__ import annotations

from typing import Iterable, List, Mapping, Sequence

from .models import FileResult, RiskProfile

SAFE_TO_EDIT = "safe to edit."
MAX_ACTION_ITEMS = 5
NAMED_IMPORTERS = 3
HIGH_FAN_IN = 2
TEST_FIRST_FAN_IN = 5
TEST_FIRST_ASSERTIONS = 5

SPLIT_THRESHOLD = 40
NUDGE_THRESHOLD = 80
NUDGE = "add test files for untested modules"
SELF_IMPORT = "remove the self-import before touching this file"


def plural(count: int, word: str, suffix: str = "s") -> str:
    return f"{count} {word}{'' if count == 1 else suffix}"


def name_list(names: Sequence[str], limit: int = NAMED_IMPORTERS) -> str:
    """Join the first ``limit`` names, adding ``+K more`` when truncated."""
    shown = ", ".join(names[:limit])
    hidden = len(names) - limit
    if hidden > 0:
        return f"{shown} +{hidden} more"
    return shown


def file_briefing(profile: RiskProfile) -> str:
    """Assemble the per-file briefing in fixed fragment order."""
    parts: List[str] = []
    incoming = len(profile.incoming_deps)

    if incoming:
        parts.append(f"editing this affects {plural(incoming, 'file')}.")
    if profile.downstream_untested:
        parts.append(
            f"untested importers: {name_list(profile.downstream_untested)}. "
            "changes may break silently."
        )
    if profile.circular_deps:
        parts.append(f"read {profile.circular_deps[0]} before touching this file.")
    elif profile.in_cycle:
        parts.append(f"{SELF_IMPORT}.")
    if profile.global_mutations:
        names = ", ".join(mutation.name for mutation in profile.global_mutations)
        parts.append(f"avoid {names}: shared state.")
    if profile.missing_return_types:
        verb = "lacks" if profile.missing_return_types == 1 else "lack"
        parts.append(
            f"{plural(profile.missing_return_types, 'function')} {verb} return types: "
            "type errors may be unpredictable."
        )
    if incoming > TEST_FIRST_FAN_IN and profile.test_coverage.assertion_count < TEST_FIRST_ASSERTIONS:
        parts.append("write tests before editing.")

    if not parts:
        return SAFE_TO_EDIT
    return " ".join(parts)


def action_items(results: Iterable[FileResult], limit: int = MAX_ACTION_ITEMS) -> List[str]:
    """Repo-wide to-do list, highest priority first, deduplicated and capped."""
    profiles = [result.risk for result in results]
    candidates: List[str] = []

    for profile in profiles:
        if profile.downstream_untested and profile.incoming_deps:
            candidates.append(
                f"add tests for {name_list(profile.downstream_untested)} before editing "
                f"{profile.file} ({plural(len(profile.incoming_deps), 'importer')})"
            )
    for profile in profiles:
        if profile.circular_deps:
            candidates.append(
                f"read {profile.circular_deps[0]} before editing {profile.file} (circular dependency)"
            )
    for profile in profiles:
        if profile.global_mutations and len(profile.incoming_deps) > HIGH_FAN_IN:
            names = ", ".join(mutation.name for mutation in profile.global_mutations)
            candidates.append(
                f"isolate shared state ({names}) in {profile.file}: "
                f"imported by {plural(len(profile.incoming_deps), 'file')}"
            )

    items: List[str] = []
    for candidate in candidates:
        if candidate in items:
            continue
        items.append(candidate)
        if len(items) >= limit:
            break
    return items


def risk_summary(counts: Mapping[str, int], total: int) -> str:
    high = counts.get("high", 0)
    medium = counts.get("medium", 0)
    low = counts.get("low", 0)

    parts: List[str] = []
    if high:
        parts.append(f"{high} high risk")
    if medium:
        parts.append(f"{medium} medium")
    if low:
        parts.append(f"{low} low")

    attention = high + medium
    if attention:
        verb = "needs" if attention == 1 else "need"
        return (
            f"{'. '.join(parts)}. {plural(attention, 'file')} {verb} attention "
            "before starting your session."
        )
    return f"{plural(total, 'file')} analyzed. all clear, safe to start."


def score_recommendations(ordered: Sequence[FileResult], overall: int) -> List[str]:
    """Score-policy guidance; ``ordered`` must already be worst first."""
    recommendations: List[str] = []
    worst = [result for result in ordered if result.score.score < SPLIT_THRESHOLD]
    if worst:
        recommendations.append(f"split {worst[0].path} into smaller files first (biggest win)")
    for result in worst[1:3]:
        if result.score.issues:
            recommendations.append(f"{result.score.issues[0]} in {result.path}")
    if not recommendations and overall < NUDGE_THRESHOLD:
        recommendations.append(NUDGE)
    return recommendations


def score_summary(overall: int, total: int) -> str:
    if overall >= 70:
        verdict = "AI-ready"
    elif overall >= 40:
        verdict = "some modules need work before AI sessions"
    else:
        verdict = "significant refactoring needed"
    return f"{plural(total, 'file')} scored. overall {overall}/100: {verdict}."


__all__ = [
    "MAX_ACTION_ITEMS",
    "SAFE_TO_EDIT",
    "action_items",
    "file_briefing",
    "name_list",
    "plural",
    "risk_summary",
    "score_recommendations",
    "score_summary",
]
