"""Tests for test-file discovery and assertion counting."""

from __future__ import annotations

from pathlib import Path

from aiready.analyzers.test_files import (
    candidate_test_paths,
    count_assertions,
    discover_test_file,
    is_test_file,
)


def _write(path: Path, content: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def test_candidates_start_with_sibling_test_then_spec(tmp_path: Path) -> None:
    source = tmp_path / "src" / "auth.ts"

    candidates = candidate_test_paths(source, tmp_path)

    assert candidates[:5] == [
        tmp_path / "src" / "auth.test.ts",
        tmp_path / "src" / "auth.spec.ts",
        tmp_path / "src" / "__tests__" / "auth.ts",
        tmp_path / "src" / "__tests__" / "auth.test.ts",
        tmp_path / "src" / "__tests__" / "auth.spec.ts",
    ]
    assert tmp_path / "src" / "auth.test.js" in candidates
    assert source not in candidates
    assert len(candidates) == len(set(candidates))


def test_discover_prefers_sibling_test_file(tmp_path: Path) -> None:
    source = _write(tmp_path / "src" / "auth.ts", "export const x = 1;\n")
    _write(tmp_path / "src" / "auth.spec.ts", "expect(x).toBe(1);\n")
    _write(
        tmp_path / "src" / "auth.test.ts",
        "expect(a).toBe(1);\nexpect(b).toEqual(2);\nassert.ok(c);\n",
    )

    coverage = discover_test_file(source, tmp_path)

    assert coverage.has_test_file is True
    assert coverage.test_file == "src/auth.test.ts"
    assert coverage.assertion_count == 5


def test_discover_finds_dunder_tests_directory(tmp_path: Path) -> None:
    source = _write(tmp_path / "lib" / "parse.js")
    _write(tmp_path / "lib" / "__tests__" / "parse.js", "expect(parse('')).toBe(null);\n")

    coverage = discover_test_file(source, tmp_path)

    assert coverage.test_file == "lib/__tests__/parse.js"
    assert coverage.assertion_count == 2


def test_discover_finds_cross_extension_test(tmp_path: Path) -> None:
    source = _write(tmp_path / "src" / "legacy.js")
    _write(tmp_path / "src" / "legacy.test.ts", "expect(1).toBe(1);\n")

    coverage = discover_test_file(source, tmp_path)

    assert coverage.test_file == "src/legacy.test.ts"


def test_discover_finds_mirrored_tests_with_source_prefix_stripped(tmp_path: Path) -> None:
    source = _write(tmp_path / "src" / "utils" / "format.ts")
    _write(tmp_path / "tests" / "utils" / "format.test.ts", "expect(f()).toEqual('');\n")

    coverage = discover_test_file(source, tmp_path)

    assert coverage.has_test_file is True
    assert coverage.test_file == "tests/utils/format.test.ts"


def test_discover_reports_missing_test_file(tmp_path: Path) -> None:
    source = _write(tmp_path / "src" / "orphan.ts")

    coverage = discover_test_file(source, tmp_path)

    assert coverage.has_test_file is False
    assert coverage.assertion_count == 0
    assert coverage.test_file is None


def test_count_assertions_counts_every_pattern_occurrence() -> None:
    content = "expect(a).toBe(1)\nexpect(b).toEqual([])\nassert.equal(c, 1)\nit('x')\n"

    assert count_assertions(content) == 5


def test_is_test_file_detects_conventions() -> None:
    assert is_test_file("src/auth.test.ts")
    assert is_test_file("src/auth.spec.js")
    assert is_test_file("src/__tests__/auth.ts")
    assert is_test_file("tests/auth.ts")
    assert is_test_file("test/unit/auth.js")
    assert not is_test_file("src/auth.ts")
    assert not is_test_file("src/testing/helpers.ts")
    assert not is_test_file("src/tests/helpers.ts")
