"""Dependency-aware risk classification for scanned files."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Mapping, Optional, Sequence, Tuple

import networkx as nx

from .analyzers.test_files import discover_test_file
from .briefing import file_briefing
from .graph import ImportGraphBuilder
from .logging import get_logger
from .models import DependencyGraph, FileFacts, RiskProfile
from .stores import GraphCache

logger = get_logger("risk")


def classify_risk(
    *,
    circular_deps: Sequence[str],
    incoming_deps: Sequence[str],
    downstream_untested: Sequence[str],
    has_test_file: bool,
    global_mutations: int,
    missing_return_types: int,
    in_cycle: bool = False,
) -> str:
    """Return ``high``, ``medium`` or ``low``; the first matching rule wins.

    ``in_cycle`` also flags a one-file cycle (a self-import), where
    ``circular_deps`` is empty.
    """
    incoming = len(incoming_deps)
    if (
        circular_deps
        or in_cycle
        or (incoming > 5 and not has_test_file)
        or (incoming > 3 and len(downstream_untested) > 2)
        or global_mutations > 2
        or missing_return_types > 5
    ):
        return "high"
    if (
        (incoming > 2 and not has_test_file)
        or global_mutations > 0
        or missing_return_types > 2
        or not has_test_file
    ):
        return "medium"
    return "low"


class DependencyRiskPropagator:
    """Derives fan-in, cycle membership and downstream-untested sets.

    Classification runs in two passes. ``provisional`` only needs the file's
    own facts and the import graph. ``finalize`` must be called after every
    scanned file went through pass one, because it reads the test coverage of
    importers from the finished snapshot.
    """

    def __init__(
        self,
        cache: GraphCache,
        builder: Optional[ImportGraphBuilder] = None,
    ) -> None:
        self.cache = cache
        self.builder = builder if builder is not None else ImportGraphBuilder()

    def graph_for(self, project_root: Path) -> DependencyGraph:
        """Return the import graph for ``project_root``, building it at most once."""
        return self.cache.get_or_build(project_root, self._safe_build)

    def _safe_build(self, project_root: Path) -> DependencyGraph:
        try:
            return self.builder.build(project_root)
        except (OSError, ValueError, RuntimeError, nx.NetworkXException) as exc:
            logger.warning(
                "Import graph unavailable for %s (%s); using local signals only",
                project_root,
                exc,
            )
            return DependencyGraph.empty()

    def provisional(self, facts: FileFacts, graph: DependencyGraph) -> RiskProfile:
        """Pass one: classify using the file's own facts and the graph."""
        return self._profile(
            facts,
            circular_deps=graph.cycle_members(facts.path),
            in_cycle=graph.in_cycle(facts.path),
            incoming_deps=graph.importers(facts.path),
            downstream_untested=(),
        )

    def finalize(
        self,
        profile: RiskProfile,
        facts: FileFacts,
        snapshot: Mapping[str, FileFacts],
        project_root: Path,
    ) -> RiskProfile:
        """Pass two: fill in untested importers and reclassify."""
        untested = downstream_untested(profile.incoming_deps, snapshot, project_root)
        return self._profile(
            facts,
            circular_deps=profile.circular_deps,
            in_cycle=profile.in_cycle,
            incoming_deps=profile.incoming_deps,
            downstream_untested=untested,
        )

    @staticmethod
    def _profile(
        facts: FileFacts,
        *,
        circular_deps: Tuple[str, ...],
        in_cycle: bool,
        incoming_deps: Tuple[str, ...],
        downstream_untested: Tuple[str, ...],
    ) -> RiskProfile:
        level = classify_risk(
            circular_deps=circular_deps,
            in_cycle=in_cycle,
            incoming_deps=incoming_deps,
            downstream_untested=downstream_untested,
            has_test_file=facts.has_test_file,
            global_mutations=len(facts.global_mutations),
            missing_return_types=facts.missing_return_types,
        )
        profile = RiskProfile(
            file=facts.path,
            risk_level=level,
            circular_deps=circular_deps,
            in_cycle=in_cycle,
            incoming_deps=incoming_deps,
            downstream_untested=downstream_untested,
            global_mutations=facts.global_mutations,
            missing_return_types=facts.missing_return_types,
            test_coverage=facts.test_coverage,
        )
        return replace(profile, briefing=file_briefing(profile))


def downstream_untested(
    importers: Sequence[str],
    snapshot: Mapping[str, FileFacts],
    project_root: Path,
) -> Tuple[str, ...]:
    """Importers without a discoverable test file.

    Scanned importers are read from ``snapshot``; importers outside the scanned
    subtree are checked on disk.
    """
    untested = []
    for importer in importers:
        facts = snapshot.get(importer)
        if facts is not None:
            has_test = facts.has_test_file
        else:
            has_test = discover_test_file(project_root / importer, project_root).has_test_file
        if not has_test:
            untested.append(importer)
    return tuple(sorted(untested))


__all__ = ["DependencyRiskPropagator", "classify_risk", "downstream_untested"]
