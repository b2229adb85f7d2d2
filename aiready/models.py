"""Core data models shared across aiready components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

RISK_LEVELS = ("high", "medium", "low")


@dataclass(frozen=True)
class FunctionSpan:
    """A function-like node and the number of source lines it covers."""

    name: str
    line_count: int


@dataclass(frozen=True)
class GlobalMutation:
    """Module-scope reassignable binding (``let``/``var``)."""

    name: str
    line: int


@dataclass(frozen=True)
class TestCoverage:
    """Result of looking for a test file that exercises a source file."""

    __test__ = False  # not a pytest test class

    has_test_file: bool
    assertion_count: int = 0
    test_file: Optional[str] = None


@dataclass(frozen=True)
class SourceFacts:
    """Structural facts extracted from one file's text."""

    functions: Tuple[FunctionSpan, ...] = ()
    import_count: int = 0
    comment_lines: int = 0
    total_lines: int = 0
    global_mutations: Tuple[GlobalMutation, ...] = ()
    missing_return_types: int = 0

    @classmethod
    def empty(cls, *, total_lines: int = 0) -> "SourceFacts":
        return cls(total_lines=total_lines)


@dataclass(frozen=True)
class FileFacts:
    """Everything known about a scanned file, computed once per run."""

    path: str
    source: SourceFacts
    test_coverage: TestCoverage
    readable: bool = True
    blank: bool = False

    @property
    def total_lines(self) -> int:
        return self.source.total_lines

    @property
    def functions(self) -> Tuple[FunctionSpan, ...]:
        return self.source.functions

    @property
    def import_count(self) -> int:
        return self.source.import_count

    @property
    def comment_lines(self) -> int:
        return self.source.comment_lines

    @property
    def global_mutations(self) -> Tuple[GlobalMutation, ...]:
        return self.source.global_mutations

    @property
    def missing_return_types(self) -> int:
        return self.source.missing_return_types

    @property
    def has_test_file(self) -> bool:
        return self.test_coverage.has_test_file

    @property
    def test_assertion_count(self) -> int:
        return self.test_coverage.assertion_count


@dataclass(frozen=True)
class SignalScores:
    """Banded 0-100 score for each quality axis."""

    function_length: int
    coupling: int
    test_coverage: int
    comment_density: int
    file_size: int

    @classmethod
    def perfect(cls) -> "SignalScores":
        return cls(100, 100, 100, 100, 100)

    def to_dict(self) -> Dict[str, int]:
        return {
            "functionLength": self.function_length,
            "coupling": self.coupling,
            "testCoverage": self.test_coverage,
            "commentDensity": self.comment_density,
            "fileSize": self.file_size,
        }


@dataclass(frozen=True)
class FileScore:
    """Weighted readiness score for one file."""

    path: str
    score: int
    issues: Tuple[str, ...] = ()
    signals: Optional[SignalScores] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "path": self.path,
            "score": self.score,
            "issues": list(self.issues),
        }
        if self.signals is not None:
            data["signals"] = self.signals.to_dict()
        return data


@dataclass(frozen=True)
class DependencyGraph:
    """Project-wide import graph: cycles and an incoming-edge index.

    Ids are POSIX paths relative to the project root. A lookup for a known id
    matches that id exactly; an extensionless or unknown id falls back to every
    known id with the same stem.
    """

    cycles: Tuple[Tuple[str, ...], ...] = ()
    incoming: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    nodes: Tuple[str, ...] = ()
    _by_stem: Dict[str, Tuple[str, ...]] = field(init=False, repr=False, compare=False)
    _cycles_by_id: Dict[str, Tuple[Tuple[str, ...], ...]] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        known = set(self.nodes) | set(self.incoming)
        cycles_by_id: Dict[str, List[Tuple[str, ...]]] = {}
        for cycle in self.cycles:
            known.update(cycle)
            for member in cycle:
                cycles_by_id.setdefault(member, []).append(cycle)
        by_stem: Dict[str, List[str]] = {}
        for file_id in sorted(known):
            by_stem.setdefault(strip_extension(file_id), []).append(file_id)
        # Frozen dataclass: indexes are assigned once here.
        object.__setattr__(self, "_by_stem", {k: tuple(v) for k, v in by_stem.items()})
        object.__setattr__(
            self, "_cycles_by_id", {k: tuple(v) for k, v in cycles_by_id.items()}
        )

    @classmethod
    def empty(cls) -> "DependencyGraph":
        return cls()

    def resolve(self, file_id: str) -> Tuple[str, ...]:
        """Return the graph ids that ``file_id`` refers to."""
        stem = strip_extension(file_id)
        candidates = self._by_stem.get(stem, ())
        if file_id in candidates:
            return (file_id,)
        return candidates

    def in_cycle(self, file_id: str) -> bool:
        """True when ``file_id`` is part of any cycle, including a self-import."""
        return any(member in self._cycles_by_id for member in self.resolve(file_id))

    def cycle_members(self, file_id: str) -> Tuple[str, ...]:
        """Return other ids that share at least one cycle with ``file_id``."""
        targets = self.resolve(file_id)
        members: set[str] = set()
        for target in targets:
            for cycle in self._cycles_by_id.get(target, ()):
                members.update(cycle)
        members.difference_update(targets)
        return tuple(sorted(members))

    def importers(self, file_id: str) -> Tuple[str, ...]:
        """Return ids of files whose imports resolve to ``file_id``."""
        targets = self.resolve(file_id)
        found: set[str] = set()
        for target in targets:
            found.update(self.incoming.get(target, ()))
        found.difference_update(targets)
        return tuple(sorted(found))


@dataclass(frozen=True)
class RiskProfile:
    """Discrete risk classification plus the facts behind it."""

    file: str
    risk_level: str
    circular_deps: Tuple[str, ...] = ()
    in_cycle: bool = False
    incoming_deps: Tuple[str, ...] = ()
    downstream_untested: Tuple[str, ...] = ()
    global_mutations: Tuple[GlobalMutation, ...] = ()
    missing_return_types: int = 0
    test_coverage: TestCoverage = field(default_factory=lambda: TestCoverage(False))
    briefing: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file": self.file,
            "risk_level": self.risk_level,
            "circular_deps": list(self.circular_deps),
            "incoming_deps": {
                "count": len(self.incoming_deps),
                "files": list(self.incoming_deps),
            },
            "downstream_untested": list(self.downstream_untested),
            "global_mutations": [
                {"name": mutation.name, "line": mutation.line}
                for mutation in self.global_mutations
            ],
            "missing_return_types": self.missing_return_types,
            "test_coverage": {
                "has_test_file": self.test_coverage.has_test_file,
                "assertion_count": self.test_coverage.assertion_count,
            },
            "briefing": self.briefing,
        }


@dataclass(frozen=True)
class FileResult:
    """Score and risk views of a single scanned file."""

    facts: FileFacts
    score: FileScore
    risk: RiskProfile

    @property
    def path(self) -> str:
        return self.facts.path


@dataclass(frozen=True)
class AnalysisResult:
    """Outcome of a scan, ordered worst first for the selected policy."""

    policy: str
    project_root: str
    files: Tuple[FileResult, ...]
    overall: int
    counts: Mapping[str, int]
    summary: str
    recommendations: Tuple[str, ...] = ()

    def has_high_risk(self) -> bool:
        return any(result.risk.risk_level == "high" for result in self.files)

    def limited(self, top: Optional[int]) -> "AnalysisResult":
        """Return a copy showing only the first ``top`` files."""
        if top is None or top < 0 or top >= len(self.files):
            return self
        return AnalysisResult(
            policy=self.policy,
            project_root=self.project_root,
            files=self.files[:top],
            overall=self.overall,
            counts=self.counts,
            summary=self.summary,
            recommendations=self.recommendations,
        )

    def to_dict(self) -> Dict[str, Any]:
        if self.policy == "score":
            return {
                "files": [result.score.to_dict() for result in self.files],
                "overall": self.overall,
                "recommendations": list(self.recommendations),
            }
        return {
            "files": [result.risk.to_dict() for result in self.files],
            "summary": self.summary,
            "counts": dict(self.counts),
            "action_items": list(self.recommendations),
        }


def strip_extension(file_id: str) -> str:
    """Drop a JS/TS extension from a file id, if present."""
    for suffix in (".tsx", ".jsx", ".mts", ".cts", ".mjs", ".cjs", ".ts", ".js"):
        if file_id.endswith(suffix):
            return file_id[: -len(suffix)]
    return file_id


__all__ = [
    "AnalysisResult",
    "DependencyGraph",
    "FileFacts",
    "FileResult",
    "FileScore",
    "FunctionSpan",
    "GlobalMutation",
    "RISK_LEVELS",
    "RiskProfile",
    "SignalScores",
    "SourceFacts",
    "TestCoverage",
    "strip_extension",
]
