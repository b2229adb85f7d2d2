"""Tests for the project import graph."""

from __future__ import annotations

import time

import pytest

from aiready.graph import (
    ImportGraphBuilder,
    build_import_digraph,
    import_specifiers,
    resolve_specifier,
    summarize_graph,
)
from aiready.models import DependencyGraph
from tests._fixtures.repo_builder import RepoBuilder


def test_import_specifiers_cover_module_forms() -> None:
    text = """
import a from './a';
import './side-effect';
export { b } from "./b";
const c = require('./c');
const d = await import('./d');
import e from 'react';
"""

    assert import_specifiers(text) == ["./a", "./b", "react", "./side-effect", "./c", "./d"]


@pytest.mark.parametrize(
    ("spec", "importer", "expected"),
    [
        ("./util", "src/app.ts", "src/util.ts"),
        ("../lib/helpers", "src/app.ts", "lib/helpers.js"),
        ("./components", "src/app.ts", "src/components/index.tsx"),
        ("./util.js", "src/app.ts", "src/util.ts"),
        ("./missing", "src/app.ts", None),
        ("react", "src/app.ts", None),
        ("../../outside", "src/app.ts", None),
    ],
)
def test_resolve_specifier(spec: str, importer: str, expected) -> None:
    files = {"src/app.ts", "src/util.ts", "lib/helpers.js", "src/components/index.tsx"}

    assert resolve_specifier(spec, importer, files) == expected


def test_summarize_graph_reports_cycles_and_importers() -> None:
    graph = build_import_digraph(
        {
            "a.ts": "import { b } from './b';",
            "b.ts": "import { a } from './a';",
            "c.ts": "import { a } from './a';\nimport { d } from './d';",
            "d.ts": "export const d = 1;",
        }
    )

    summary = summarize_graph(graph)

    assert summary.cycles == (("a.ts", "b.ts"),)
    assert summary.importers("a.ts") == ("b.ts", "c.ts")
    assert summary.importers("d.ts") == ("c.ts",)
    assert summary.cycle_members("a.ts") == ("b.ts",)
    assert summary.cycle_members("c.ts") == ()


def test_self_import_is_a_cycle_of_one() -> None:
    graph = build_import_digraph({"a.ts": "import { x } from './a';"})

    summary = summarize_graph(graph)

    assert summary.cycles == (("a.ts",),)
    assert summary.in_cycle("a.ts") is True
    assert summary.cycle_members("a.ts") == ()
    assert summary.importers("a.ts") == ()


def test_builder_reads_project_and_skips_tests(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "src/core.ts": "export const core = 1;\n",
            "src/api.ts": "import { core } from './core';\n",
            "src/core.test.ts": "import { core } from './core';\n",
            "node_modules/pkg/index.js": "require('../../src/core');\n",
        }
    )

    graph = ImportGraphBuilder().build(repo_builder.path())

    assert graph.importers("src/core.ts") == ("src/api.ts",)
    assert graph.cycles == ()


def test_builder_honors_exclude_paths(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "src/core.ts": "export const core = 1;\n",
            "scripts/seed.ts": "import { core } from '../src/core';\n",
        }
    )

    graph = ImportGraphBuilder(exclude_paths=["scripts/"]).build(repo_builder.path())

    assert graph.importers("src/core.ts") == ()


def test_twin_files_differing_by_extension_keep_separate_importers() -> None:
    graph = build_import_digraph(
        {
            "src/a.ts": "export const a = 1;",
            "src/a.js": "module.exports = {};",
            "src/user.ts": "import { a } from './a';",
        }
    )

    summary = summarize_graph(graph)

    assert summary.importers("src/a.ts") == ("src/user.ts",)
    assert summary.importers("src/a.js") == ()


def test_extensionless_query_matches_stem() -> None:
    summary = summarize_graph(
        build_import_digraph(
            {
                "src/a.ts": "import { b } from './b';",
                "src/b.ts": "import { a } from './a';",
            }
        )
    )

    assert summary.importers("src/a") == ("src/b.ts",)
    assert summary.cycle_members("src/a") == ("src/b.ts",)
    assert summary.in_cycle("src/a") is True
    # An unknown extension falls back to the stem as well.
    assert summary.importers("src/a.mts") == ("src/b.ts",)


def test_cycle_members_do_not_merge_extension_twins() -> None:
    summary = DependencyGraph(
        cycles=(("src/a.ts", "src/b.ts"),),
        incoming={"src/a.ts": ("src/b.ts",), "src/b.ts": ("src/a.ts",)},
        nodes=("src/a.js", "src/a.ts", "src/b.ts"),
    )

    assert summary.cycle_members("src/a.js") == ()
    assert summary.in_cycle("src/a.js") is False
    assert summary.cycle_members("src/b.ts") == ("src/a.ts",)


def test_importer_lookups_scale_with_graph_size() -> None:
    count = 6000
    sources = {f"src/m{i}.ts": f"import {{ x }} from './m{i + 1}';" for i in range(count)}
    summary = summarize_graph(build_import_digraph(sources))

    started = time.perf_counter()
    results = [summary.importers(f"src/m{i}.ts") for i in range(count)]
    elapsed = time.perf_counter() - started

    assert results[1] == ("src/m0.ts",)
    assert results[0] == ()
    assert elapsed < 1.0
