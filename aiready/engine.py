"""Pipeline orchestration for a single analysis run."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .aggregator import repo_score, risk_counts, sort_by_risk, sort_by_score
from .analyzers import SourceExtractor, TreeSitterExtractor, discover_test_file
from .briefing import action_items, risk_summary, score_recommendations, score_summary
from .config import POLICIES, AiReadyConfig
from .graph import ImportGraphBuilder
from .logging import get_logger
from .models import AnalysisResult, FileFacts, FileResult, RiskProfile, SourceFacts
from .repo_scanner import RepoScanner, ScanTarget
from .risk import DependencyRiskPropagator
from .scorer import score_file
from .stores import GraphCache


class AnalysisEngine:
    """Runs discovery, fact extraction, scoring, risk propagation and guidance."""

    def __init__(
        self,
        scanner: RepoScanner | None = None,
        extractor: SourceExtractor | None = None,
        graph_builder: ImportGraphBuilder | None = None,
        cache: GraphCache | None = None,
    ) -> None:
        self.scanner = scanner if scanner is not None else RepoScanner()
        self.extractor = extractor if extractor is not None else TreeSitterExtractor()
        self.graph_builder = graph_builder if graph_builder is not None else ImportGraphBuilder()
        self.cache = cache if cache is not None else GraphCache()
        self.logger = get_logger("engine")

    @classmethod
    def from_config(cls, config: AiReadyConfig) -> "AnalysisEngine":
        scan = config.scan
        return cls(
            scanner=RepoScanner(
                extensions=scan.extensions,
                exclude_paths=scan.exclude_paths,
                manifest_files=scan.manifest_files,
            ),
            graph_builder=ImportGraphBuilder(exclude_paths=scan.exclude_paths),
        )

    def run(self, target: str | Path, *, policy: str = "risk") -> AnalysisResult:
        """Analyze ``target`` (a file or a directory) under ``policy``."""
        if policy not in POLICIES:
            raise ValueError(f"Unknown policy: {policy}")
        scan = self.scanner.scan(target)
        self.logger.info(
            "Analyzing %d files under %s (project root %s)",
            len(scan.files),
            scan.scan_root,
            scan.project_root,
        )
        try:
            results = self._analyze(scan)
        finally:
            self.cache.clear()
        return self._aggregate(scan, results, policy)

    def _analyze(self, scan: ScanTarget) -> List[FileResult]:
        propagator = DependencyRiskPropagator(self.cache, self.graph_builder)
        graph = propagator.graph_for(scan.project_root)

        # Pass one: every file's own facts plus a provisional risk profile.
        snapshot: Dict[str, FileFacts] = {}
        provisional: Dict[str, RiskProfile] = {}
        for path in scan.files:
            facts = self.extract_facts(path, scan)
            snapshot[facts.path] = facts
            provisional[facts.path] = propagator.provisional(facts, graph)

        # Pass two: the snapshot is complete, so importer coverage is final.
        results: List[FileResult] = []
        for file_id, facts in snapshot.items():
            risk = propagator.finalize(provisional[file_id], facts, snapshot, scan.project_root)
            results.append(FileResult(facts=facts, score=score_file(facts), risk=risk))
        return results

    def extract_facts(self, path: Path, scan: ScanTarget) -> FileFacts:
        """Read and extract one file; never raises for unreadable or unparsable input."""
        file_id = scan.file_id(path)
        coverage = discover_test_file(path, scan.project_root)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            self.logger.warning("Cannot read %s: %s", file_id, exc)
            return FileFacts(
                path=file_id,
                source=SourceFacts.empty(),
                test_coverage=coverage,
                readable=False,
            )

        if not text.strip():
            return FileFacts(
                path=file_id,
                source=SourceFacts.empty(total_lines=len(text.split("\n"))),
                test_coverage=coverage,
                blank=True,
            )

        language = self.extractor.language_for(path.name)
        if language is None:
            source = SourceFacts.empty(total_lines=len(text.split("\n")))
        else:
            source = self.extractor.extract(text, language)
        self.logger.debug(
            "%s: %d functions, %d imports, test file %s",
            file_id,
            len(source.functions),
            source.import_count,
            coverage.test_file or "missing",
        )
        return FileFacts(path=file_id, source=source, test_coverage=coverage)

    def _aggregate(self, scan: ScanTarget, results: Sequence[FileResult], policy: str) -> AnalysisResult:
        overall = repo_score(result.score.score for result in results)
        counts = risk_counts(results)

        if policy == "score":
            ordered = sort_by_score(results)
            recommendations = score_recommendations(ordered, overall)
            summary = score_summary(overall, len(ordered))
        else:
            ordered = sort_by_risk(results)
            recommendations = action_items(ordered)
            summary = risk_summary(counts, len(ordered))

        self.logger.info("Scan complete: %s", summary)
        return AnalysisResult(
            policy=policy,
            project_root=str(scan.project_root),
            files=tuple(ordered),
            overall=overall,
            counts=counts,
            summary=summary,
            recommendations=tuple(recommendations),
        )


def exit_code(result: AnalysisResult, *, min_score: Optional[int] = None) -> int:
    """0 on success; 1 when a file is high risk or the score gate fails."""
    if result.policy == "risk":
        return 1 if result.has_high_risk() else 0
    if min_score is not None and result.overall < min_score:
        return 1
    return 0


__all__ = ["AnalysisEngine", "exit_code"]
