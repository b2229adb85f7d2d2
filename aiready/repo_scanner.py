"""Source file discovery and project root resolution."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Sequence

from .analyzers.test_files import is_test_file
from .config import DEFAULT_EXTENSIONS, DEFAULT_MANIFEST_FILES
from .logging import get_logger

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    "node_modules",
    "dist",
    "build",
    "coverage",
    ".next",
    ".turbo",
    ".cache",
}

logger = get_logger("repo_scanner")


@dataclass
class IgnoreRule:
    """Represents an ignore rule parsed from .gitignore or .aiready.yml."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        if self.anchored or self.has_slash:
            if fnmatchcase(rel_path, self.pattern):
                return True
            if self.directory_only and rel_path.startswith(f"{self.pattern}/"):
                return True
            return False

        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


@dataclass
class ScanTarget:
    """Files selected for analysis and the project they belong to."""

    project_root: Path
    scan_root: Path
    files: List[Path] = field(default_factory=list)

    def file_id(self, path: Path) -> str:
        """Return the POSIX id of ``path`` relative to the project root."""
        try:
            return path.relative_to(self.project_root).as_posix()
        except ValueError:
            return path.as_posix()


def build_ignore_rule(pattern: str, negate: bool = False) -> IgnoreRule | None:
    pattern = pattern.strip()
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash="/" in pattern,
    )


def _parse_gitignore(path: Path) -> List[IgnoreRule]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError:
        return []

    rules: List[IgnoreRule] = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        negate = line.startswith("!")
        if negate:
            line = line[1:]
        rule = build_ignore_rule(line, negate=negate)
        if rule is not None:
            rules.append(rule)
    return rules


def load_ignore_rules(root: Path, exclude_paths: Sequence[str] = ()) -> List[IgnoreRule]:
    rules = _parse_gitignore(root / ".gitignore")
    for pattern in exclude_paths:
        rule = build_ignore_rule(pattern)
        if rule is not None:
            rules.append(rule)
    return rules


def _should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


def _log_walk_error(error: OSError) -> None:
    logger.warning("Skipping unreadable entry %s: %s", error.filename, error.strerror)


def iter_source_files(
    root: Path,
    rules: Sequence[IgnoreRule],
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    *,
    include_tests: bool = False,
    rel_base: Path | None = None,
) -> Iterator[Path]:
    """Yield JS/TS source files below ``root`` honoring ignore rules.

    Rules match paths relative to ``rel_base`` (default ``root``).
    """
    base = rel_base or root
    suffixes = tuple(ext.lower() for ext in extensions)
    for dirpath, dirnames, filenames in os.walk(root, onerror=_log_walk_error):
        current_dir = Path(dirpath)
        rel_dir = current_dir.relative_to(base).as_posix() if current_dir != base else ""

        kept = []
        for name in sorted(dirnames):
            if name in _EXCLUDED_DIRS:
                continue
            rel_path = f"{rel_dir}/{name}" if rel_dir else name
            if _should_ignore(rel_path, True, rules):
                continue
            kept.append(name)
        dirnames[:] = kept

        for filename in sorted(filenames):
            lower = filename.lower()
            if not lower.endswith(suffixes) or lower.endswith(".d.ts"):
                continue
            rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
            if _should_ignore(rel_path, False, rules):
                continue
            if not include_tests and is_test_file(rel_path):
                continue
            path = current_dir / filename
            try:
                if not path.is_file():
                    continue
            except OSError as exc:
                logger.warning("Skipping %s: %s", path, exc)
                continue
            yield path


def find_project_root(start: Path, manifest_files: Sequence[str] = DEFAULT_MANIFEST_FILES) -> Path:
    """Return the nearest ancestor of ``start`` holding a project manifest.

    Falls back to ``start`` itself (or its directory when it is a file).
    """
    start = start.expanduser().resolve()
    origin = start.parent if start.is_file() else start
    current = origin
    while True:
        if any((current / name).is_file() for name in manifest_files):
            return current
        if current.parent == current:
            return origin
        current = current.parent


class RepoScanner:
    """Walks a target path to select the files to analyze."""

    def __init__(
        self,
        extensions: Sequence[str] = DEFAULT_EXTENSIONS,
        exclude_paths: Sequence[str] = (),
        manifest_files: Sequence[str] = DEFAULT_MANIFEST_FILES,
    ) -> None:
        self.extensions = tuple(extensions)
        self.exclude_paths = tuple(exclude_paths)
        self.manifest_files = tuple(manifest_files)

    def scan(self, target: str | Path) -> ScanTarget:
        """Return the files to analyze under ``target`` (a file or a directory)."""
        target_path = Path(target).expanduser().resolve()
        if not target_path.exists():
            raise FileNotFoundError(f"path not found: {target}")

        project_root = find_project_root(target_path, self.manifest_files)
        if target_path.is_file():
            return ScanTarget(
                project_root=project_root,
                scan_root=target_path.parent,
                files=[target_path],
            )

        rules = load_ignore_rules(project_root, self.exclude_paths)
        files = sorted(
            iter_source_files(target_path, rules, self.extensions, rel_base=project_root)
        )
        logger.debug("Discovered %d files under %s", len(files), target_path)
        return ScanTarget(project_root=project_root, scan_root=target_path, files=files)


__all__ = [
    "IgnoreRule",
    "RepoScanner",
    "ScanTarget",
    "build_ignore_rule",
    "find_project_root",
    "iter_source_files",
    "load_ignore_rules",
]
