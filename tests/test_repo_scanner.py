"""Tests for aiready.repo_scanner."""

from __future__ import annotations

from pathlib import Path

import pytest

from aiready.repo_scanner import RepoScanner, build_ignore_rule, find_project_root
from tests._fixtures.repo_builder import RepoBuilder


def _ids(repo_builder: RepoBuilder, relative: str = ".") -> list[str]:
    scan = repo_builder.scan(relative)
    return [scan.file_id(path) for path in scan.files]


def test_scan_selects_js_and_ts_sources(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "src/app.ts": "export const app = 1;\n",
            "src/view.tsx": "export const View = () => null;\n",
            "src/legacy.js": "module.exports = {};\n",
            "src/types.d.ts": "declare const x: number;\n",
            "src/app.test.ts": "expect(1).toBe(1);\n",
            "src/__tests__/view.tsx": "expect(1).toBe(1);\n",
            "tests/e2e.ts": "expect(1).toBe(1);\n",
            "node_modules/lib/index.js": "module.exports = 1;\n",
            "dist/bundle.js": "var x;\n",
            "README.md": "# readme\n",
        }
    )

    assert _ids(repo_builder) == ["src/app.ts", "src/legacy.js", "src/view.tsx"]


def test_scan_respects_gitignore_and_exclude_paths(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            ".gitignore": "generated/\n*.gen.ts\n",
            "src/main.ts": "export {};\n",
            "src/schema.gen.ts": "export {};\n",
            "generated/client.ts": "export {};\n",
            "scripts/seed.ts": "export {};\n",
        }
    )

    scan = RepoScanner(exclude_paths=["scripts/"]).scan(repo_builder.path())

    assert [scan.file_id(path) for path in scan.files] == ["src/main.ts"]


def test_scan_of_subdirectory_keeps_project_relative_ids(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "src/api/users.ts": "export {};\n",
            "src/core.ts": "export {};\n",
        }
    )

    scan = repo_builder.scan("src/api")

    assert scan.project_root == repo_builder.path()
    assert [scan.file_id(path) for path in scan.files] == ["src/api/users.ts"]


def test_scan_of_single_file(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"src/one.ts": "export {};\n", "src/two.ts": "export {};\n"})

    scan = repo_builder.scan("src/one.ts")

    assert [scan.file_id(path) for path in scan.files] == ["src/one.ts"]


def test_scan_rejects_missing_path(tmp_path: Path) -> None:
    missing = tmp_path / "missing"

    with pytest.raises(FileNotFoundError) as excinfo:
        RepoScanner().scan(missing)

    assert str(missing) in str(excinfo.value)


def test_find_project_root_walks_up_to_manifest(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"packages/web/src/index.ts": "export {};\n"})

    assert find_project_root(repo_builder.path("packages/web/src")) == repo_builder.path()

    repo_builder.write({"packages/web/package.json": "{}"})
    assert find_project_root(repo_builder.path("packages/web/src/index.ts")) == repo_builder.path(
        "packages/web"
    )


def test_find_project_root_falls_back_to_start(tmp_path: Path) -> None:
    start = tmp_path / "loose"
    start.mkdir()

    assert find_project_root(start, ("no-such-manifest.json",)) == start.resolve()


def test_ignore_rule_matching() -> None:
    anchored = build_ignore_rule("/build")
    nested = build_ignore_rule("fixtures/")

    assert anchored is not None and anchored.matches("build", True)
    assert not anchored.matches("src/build", True)
    assert nested is not None and nested.matches("src/fixtures", True)
    assert not nested.matches("src/fixtures", False)
    assert build_ignore_rule("   ") is None
