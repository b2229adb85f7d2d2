"""Run-scoped cache for project import graphs."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, Optional

from ..models import DependencyGraph


class GraphCache:
    """Holds at most one import graph per project root for a single run.

    The engine owns one instance per run and clears it when the run ends, so
    graphs never leak between runs.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, DependencyGraph] = {}
        self.builds = 0

    def get(self, root: Path | str) -> Optional[DependencyGraph]:
        return self._entries.get(_key(root))

    def store(self, root: Path | str, graph: DependencyGraph) -> None:
        self._entries[_key(root)] = graph

    def get_or_build(
        self, root: Path | str, build: Callable[[Path], DependencyGraph]
    ) -> DependencyGraph:
        cached = self.get(root)
        if cached is not None:
            return cached
        graph = build(Path(_key(root)))
        self.builds += 1
        self.store(root, graph)
        return graph

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, root: object) -> bool:
        if not isinstance(root, (str, Path)):
            return False
        return _key(root) in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def _key(root: Path | str) -> str:
    return str(Path(root).expanduser().resolve())


__all__ = ["GraphCache"]
