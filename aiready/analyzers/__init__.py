"""Source fact extraction for JavaScript and TypeScript files."""

from __future__ import annotations

from .base import SourceExtractor
from .test_files import count_assertions, discover_test_file, is_test_file
from .tree_sitter import TreeSitterExtractor

__all__ = [
    "SourceExtractor",
    "TreeSitterExtractor",
    "count_assertions",
    "discover_test_file",
    "is_test_file",
]
