"""Tests for the dependency graph builder."""

from __future__ import annotations

import os
from unittest.mock import AsyncMock, MagicMock

import pytest

from depscope.config import AnalyzerConfig, DepscopeConfig
from depscope.errors import ExitCode, ExtractionError
from depscope.extractor import FactExtractor
from depscope.graph import GraphBuilder, build_graph, should_exclude
from depscope.models import DependencyNode
from depscope.paths import canonicalize


def write(root, rel, content=""):
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return canonicalize(root, rel)


@pytest.fixture
def project(tmp_path):
    """a.ts -> b.ts -> c.ts, d.ts -> b.ts, c.ts -> react."""
    root = tmp_path / "project"
    write(root, "src/a.ts", "import { b } from './b';\nexport const a = b;\n")
    write(root, "src/b.ts", "import { c } from './c';\nexport const b = c;\n")
    write(root, "src/c.ts", "import React from 'react';\nexport const c = 1;\n")
    write(root, "src/d.ts", "import { b } from './b';\n")
    return root


def ids(root, *rels):
    return [canonicalize(root, rel) for rel in rels]


ALL_FILES = ["src/a.ts", "src/b.ts", "src/c.ts", "src/d.ts"]


class TestShouldExclude:
    """Test exclusion pattern semantics."""

    @pytest.mark.parametrize(
        "path,patterns,expected",
        [
            ("node_modules/react/index.js", ["node_modules"], True),
            ("src/app.ts", ["node_modules"], False),
            ("src/app.test.ts", ["*.test.*"], True),
            ("src/app.ts", ["*.test.*"], False),
            ("dist/bundle.min.js", ["*.min.js"], True),
            ("src/generated/api/code.ts", ["generated*code"], True),
            ("src/gen/other.ts", ["generated*code"], False),
            ("src/app.ts", [], False),
        ],
    )
    def test_patterns(self, path, patterns, expected):
        assert should_exclude(path, patterns) is expected

    def test_dotted_directory_not_excluded_by_filename_pattern(self):
        assert not should_exclude("/tmp/run.test.workspace/src/app.ts", ["*.test.*"])
        assert should_exclude("/tmp/run.test.workspace/src/app.test.ts", ["*.test.*"])


class TestGraphBuilder:
    """Test graph construction."""

    def test_empty_input(self, tmp_path):
        graph = GraphBuilder(tmp_path).build_sync([])
        assert graph.nodes == {}
        assert graph.dependents == {}
        assert graph.file_count == 0
        assert graph.dependency_count == 0

    def test_nodes_in_input_order(self, project):
        files = ids(project, "src/d.ts", "src/a.ts", "src/c.ts", "src/b.ts")
        graph = GraphBuilder(project).build_sync(files)
        assert list(graph.nodes) == files

    def test_repeat_runs_are_identical(self, project):
        builder = GraphBuilder(project)
        first = builder.build_sync(ALL_FILES)
        second = builder.build_sync(ALL_FILES)
        assert first is not second
        assert first.to_dict() == second.to_dict()

    def test_counts(self, project):
        graph = GraphBuilder(project).build_sync(ALL_FILES)
        assert graph.file_count == 4
        assert graph.dependency_count == 4

    def test_reverse_index_matches_forward_edges(self, project):
        graph = GraphBuilder(project).build_sync(ALL_FILES)
        for source, target in graph.edges():
            assert source in graph.dependents[target]
        for target, sources in graph.dependents.items():
            for source in sources:
                assert target in graph.nodes[source].file_deps

    def test_dependents_include_dangling_targets(self, project):
        graph = GraphBuilder(project).build_sync(ids(project, "src/c.ts"))
        react = canonicalize(project, "node_modules/react")
        assert graph.get_dependents(react) == [canonicalize(project, "src/c.ts")]
        assert graph.get_dependencies(react) is None

    def test_relative_and_absolute_inputs_are_one_node(self, project):
        graph = GraphBuilder(project).build_sync(
            ["src/a.ts", str(project / "src" / "a.ts"), "src/../src/a.ts"]
        )
        assert list(graph.nodes) == ids(project, "src/a.ts")
        assert graph.file_count == 1

    def test_lookups_canonicalize(self, project):
        graph = GraphBuilder(project).build_sync(["src/a.ts", "src/b.ts"])
        node = graph.get_dependencies("src/a.ts")
        assert node is graph.get_dependencies(project / "src" / "a.ts")
        assert graph.get_dependents("src/b.ts") == ids(project, "src/a.ts")

    def test_missing_file_skipped_silently(self, project):
        builder = GraphBuilder(project)
        graph = builder.build_sync(["src/a.ts", "src/gone.ts"])
        assert list(graph.nodes) == ids(project, "src/a.ts")
        assert builder.result.errors == []
        assert builder.result.skipped == [
            {"path": canonicalize(project, "src/gone.ts"), "reason": "not_found"}
        ]
        assert builder.result.exit_code == ExitCode.SUCCESS

    def test_excluded_files_skipped(self, project):
        write(project, "src/a.test.ts", "import { a } from './a';\n")
        builder = GraphBuilder(project)
        graph = builder.build_sync(["src/a.ts", "src/a.test.ts"])
        assert list(graph.nodes) == ids(project, "src/a.ts")
        assert builder.result.skipped[0]["reason"] == "excluded"

    def test_dotted_root_directory_not_excluded(self, tmp_path):
        root = tmp_path / "tmp.test.workspace"
        file_id = write(root, "src/app.ts", "export const x = 1;\n")
        graph = GraphBuilder(root).build_sync([file_id])
        assert graph.has_node(file_id)

    def test_patterns_match_full_path(self, project):
        vendored = write(project, "node_modules/pkg/index.js", "export const x = 1;\n")
        config = DepscopeConfig(analyzer=AnalyzerConfig(exclude_patterns=["/node_modules/"]))
        builder = GraphBuilder(project, config)
        graph = builder.build_sync(["src/a.ts", vendored])
        assert not graph.has_node(vendored)
        assert builder.result.skipped == [{"path": vendored, "reason": "excluded"}]

    def test_root_location_counts_for_substring_patterns(self, project):
        config = DepscopeConfig(analyzer=AnalyzerConfig(exclude_patterns=[project.name]))
        graph = GraphBuilder(project, config).build_sync(ALL_FILES)
        assert graph.file_count == 0

    def test_extraction_error_omits_file_only(self, project):
        builder = GraphBuilder(project)
        original = builder.local.extract
        broken = canonicalize(project, "src/b.ts")

        def extract(file_id, content):
            if file_id == broken:
                raise ValueError("cannot parse")
            return original(file_id, content)

        builder.local.extract = extract
        graph = builder.build_sync(["src/a.ts", "src/b.ts", "src/c.ts"])

        assert list(graph.nodes) == ids(project, "src/a.ts", "src/c.ts")
        assert len(builder.result.errors) == 1
        error = builder.result.errors[0]
        assert isinstance(error, ExtractionError)
        assert error.file_path == broken
        assert builder.result.exit_code == ExitCode.PARTIAL_SUCCESS
        # The edge to the omitted file is still indexed
        assert graph.get_dependents(broken) == ids(project, "src/a.ts")

    def test_unreadable_path_propagates(self, project):
        with pytest.raises(OSError):
            GraphBuilder(project).build_sync(["src"])

    def test_progress_callback(self, project):
        calls = []
        GraphBuilder(project).build_sync(
            ["src/a.ts", "src/b.ts", "src/c.ts"], lambda done, total: calls.append((done, total))
        )
        assert sorted(calls) == [(1, 3), (2, 3), (3, 3)]

    def test_second_run_starts_fresh(self, project):
        builder = GraphBuilder(project)
        builder.build_sync(["src/a.ts", "src/gone.ts"])
        graph = builder.build_sync(["src/c.ts"])
        assert list(graph.nodes) == ids(project, "src/c.ts")
        assert builder.result.skipped == []

    def test_concurrency_limit_of_one(self, project):
        config = DepscopeConfig()
        config.indexer.concurrency = 1
        graph = GraphBuilder(project, config).build_sync(["src/b.ts", "src/a.ts"])
        assert list(graph.nodes) == ids(project, "src/b.ts", "src/a.ts")

    def test_internal_deps_follow_config(self, project):
        write(project, "src/e.ts", "function f() { return g(); }\nfunction g() {}\n")
        config = DepscopeConfig(analyzer=AnalyzerConfig(analyze_internal=False))
        graph = GraphBuilder(project, config).build_sync(["src/e.ts"])
        assert graph.get_dependencies("src/e.ts").internal_deps == []

    def test_graph_helper(self, project):
        graph = build_graph(project, ["src/a.ts"])
        assert graph.root == str(project)
        assert graph.has_node("src/a.ts")

    def test_custom_extractor(self, project):
        class ExportsOnly:
            def extract(self, file_id, content):
                node = DependencyNode(file=file_id, language="custom")
                node.add_export(os.path.basename(file_id))
                return node

        extractor = ExportsOnly()
        assert isinstance(extractor, FactExtractor)
        graph = GraphBuilder(project, local=extractor).build_sync(["src/a.ts", "src/b.ts"])

        assert graph.get_dependencies("src/a.ts").exports == ["a.ts"]
        assert graph.dependency_count == 0
        assert graph.dependents == {}

    def test_rule_based_extractor_satisfies_protocol(self, project):
        assert isinstance(GraphBuilder(project).local, FactExtractor)


class TestGraphBuilderWithIndexer:
    """Test delegated extraction through the builder."""

    @pytest.mark.asyncio
    async def test_unavailable_indexer_matches_local_rules(self, project):
        indexer = MagicMock()
        indexer.is_available = AsyncMock(return_value=False)
        files = ["src/a.ts", "src/b.ts"]

        delegated = await GraphBuilder(project, indexer=indexer).build(files)
        local = await GraphBuilder(project).build(files)

        assert delegated.nodes == local.nodes
        assert delegated.dependents == local.dependents

    @pytest.mark.asyncio
    async def test_outcomes_record_fallbacks(self, project):
        indexer = MagicMock()
        indexer.is_available = AsyncMock(return_value=True)
        indexer.extract_symbols = AsyncMock(side_effect=RuntimeError("down"))
        indexer.extract_deps = AsyncMock(return_value=[])
        builder = GraphBuilder(project, indexer=indexer)

        graph = await builder.build(["src/a.ts"])

        assert graph.file_count == 1
        assert [o.fell_back for o in builder.outcomes] == [True]
        assert builder.result.errors == []
