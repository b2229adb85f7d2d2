"""Project-wide import graph construction."""

from __future__ import annotations

import os
import re
from pathlib import Path, PurePosixPath
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

import networkx as nx

from .logging import get_logger
from .models import DependencyGraph
from .repo_scanner import iter_source_files, load_ignore_rules

GRAPH_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs", ".mts", ".cts")

_SPECIFIER_PATTERNS = (
    re.compile(r"""\bfrom\s*['"]([^'"\n]+)['"]"""),
    re.compile(r"""\bimport\s*['"]([^'"\n]+)['"]"""),
    re.compile(r"""\brequire\s*\(\s*['"]([^'"\n]+)['"]\s*\)"""),
    re.compile(r"""\bimport\s*\(\s*['"]([^'"\n]+)['"]\s*\)"""),
)

# ESM TypeScript projects import "./foo.js" for a source file named foo.ts.
_COMPILED_TO_SOURCE = {
    ".js": (".ts", ".tsx"),
    ".jsx": (".tsx",),
    ".mjs": (".mts",),
    ".cjs": (".cts",),
}

logger = get_logger("graph")


def import_specifiers(text: str) -> List[str]:
    """Return module specifiers referenced by import/export/require forms."""
    seen: Set[str] = set()
    ordered: List[str] = []
    for pattern in _SPECIFIER_PATTERNS:
        for match in pattern.finditer(text):
            spec = match.group(1).strip()
            if spec and spec not in seen:
                seen.add(spec)
                ordered.append(spec)
    return ordered


def resolve_specifier(
    spec: str,
    importer: str,
    files: Set[str],
    *,
    exts: Sequence[str] = GRAPH_EXTENSIONS,
) -> Optional[str]:
    """Resolve a relative specifier from ``importer`` to a known file id."""
    if not spec.startswith("."):
        return None
    base = PurePosixPath(importer).parent
    target = os.path.normpath((base / spec).as_posix()).replace("\\", "/")
    if target.startswith("../") or target == "..":
        return None

    suffix = PurePosixPath(target).suffix
    if suffix:
        if target in files:
            return target
        stem = target[: -len(suffix)]
        for alt in _COMPILED_TO_SOURCE.get(suffix, ()):
            if f"{stem}{alt}" in files:
                return f"{stem}{alt}"
    for ext in exts:
        candidate = f"{target}{ext}"
        if candidate in files:
            return candidate
    for ext in exts:
        candidate = f"{target}/index{ext}"
        if candidate in files:
            return candidate
    return None


def build_import_digraph(sources: Dict[str, str]) -> nx.DiGraph:
    """Build importer -> imported edges from ``{file_id: text}``."""
    graph = nx.DiGraph()
    files = set(sources)
    graph.add_nodes_from(sorted(files))
    for importer, text in sources.items():
        for spec in import_specifiers(text):
            resolved = resolve_specifier(spec, importer, files)
            if resolved is not None:
                graph.add_edge(importer, resolved)
    return graph


def summarize_graph(graph: nx.DiGraph) -> DependencyGraph:
    """Reduce a digraph to cycle groups and an incoming-edge index."""
    cycles: List[Tuple[str, ...]] = []
    for component in nx.strongly_connected_components(graph):
        if len(component) > 1:
            cycles.append(tuple(sorted(component)))
    for node, _ in nx.selfloop_edges(graph):
        cycles.append((node,))
    cycles.sort()

    incoming: Dict[str, Tuple[str, ...]] = {}
    for node in graph.nodes:
        importers = sorted(pred for pred in graph.predecessors(node) if pred != node)
        if importers:
            incoming[node] = tuple(importers)
    return DependencyGraph(
        cycles=tuple(cycles),
        incoming=incoming,
        nodes=tuple(sorted(graph.nodes)),
    )


class ImportGraphBuilder:
    """Builds the import graph for every JS/TS file under a project root."""

    def __init__(
        self,
        extensions: Sequence[str] = GRAPH_EXTENSIONS,
        exclude_paths: Sequence[str] = (),
    ) -> None:
        self.extensions = tuple(extensions)
        self.exclude_paths = tuple(exclude_paths)

    def build(self, root: Path) -> DependencyGraph:
        root = Path(root).resolve()
        sources = dict(self._read_sources(root))
        graph = build_import_digraph(sources)
        logger.debug(
            "Import graph for %s: %d files, %d edges",
            root,
            graph.number_of_nodes(),
            graph.number_of_edges(),
        )
        return summarize_graph(graph)

    def _read_sources(self, root: Path) -> Iterable[Tuple[str, str]]:
        rules = load_ignore_rules(root, self.exclude_paths)
        for path in iter_source_files(root, rules, self.extensions):
            try:
                text = path.read_text(encoding="utf-8", errors="ignore")
            except OSError as exc:
                logger.warning("Skipping %s in import graph: %s", path, exc)
                continue
            yield path.relative_to(root).as_posix(), text


__all__ = [
    "GRAPH_EXTENSIONS",
    "ImportGraphBuilder",
    "build_import_digraph",
    "import_specifiers",
    "resolve_specifier",
    "summarize_graph",
]
