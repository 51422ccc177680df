"""Tests for indexer-backed extraction and its local fallback."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from depscope.extractor import DelegatedExtractor, LocalExtractor
from depscope.extractor.indexer import DependencyExtraction, SymbolExtraction
from depscope.models import ImportKind
from depscope.paths import canonicalize

CONTENT = "import { helper } from './helper';\nexport function main() { return helper(); }\n"


def make_indexer(available=True, symbols=None, deps=None) -> MagicMock:
    indexer = MagicMock()
    indexer.is_available = AsyncMock(return_value=available)
    indexer.extract_symbols = AsyncMock(return_value=symbols or [])
    indexer.extract_deps = AsyncMock(return_value=deps or [])
    indexer.get_hash = AsyncMock(return_value=None)
    return indexer


def symbol(name: str, exported: bool = True) -> SymbolExtraction:
    return SymbolExtraction(
        name=name,
        kind="function",
        signature="()",
        start_line=1,
        end_line=2,
        is_exported=exported,
    )


@pytest.fixture
def file_id(tmp_path):
    return canonicalize(tmp_path, "src/main.ts")


class TestDelegatedExtractor:
    """Test delegation and per-file fallback."""

    @pytest.mark.asyncio
    async def test_uses_indexer_when_available(self, tmp_path, file_id):
        indexer = make_indexer(
            symbols=[symbol("main"), symbol("internal", exported=False), symbol("main")],
            deps=[
                DependencyExtraction(
                    source_file="src/main.ts", target_file="src/helper.ts", kind="import"
                )
            ],
        )
        extractor = DelegatedExtractor(tmp_path, indexer)

        result = await extractor.extract(file_id, CONTENT)

        assert result.success
        assert result.backend == "indexer"
        assert not result.fell_back
        node = result.node
        assert node.file == file_id
        assert node.exports == ["main"]
        assert node.file_deps == [canonicalize(tmp_path, "src/helper.ts")]
        assert node.imports[0].symbol == "src/helper.ts"
        assert node.imports[0].kind == ImportKind.NAMED

    @pytest.mark.asyncio
    async def test_indexer_receives_root_and_relative_path(self, tmp_path, file_id):
        indexer = make_indexer()
        await DelegatedExtractor(tmp_path, indexer).extract(file_id, CONTENT)
        indexer.extract_symbols.assert_awaited_once_with(str(tmp_path), "src/main.ts")
        indexer.extract_deps.assert_awaited_once_with(str(tmp_path), "src/main.ts")

    @pytest.mark.asyncio
    async def test_unavailable_falls_back(self, tmp_path, file_id):
        indexer = make_indexer(available=False)
        extractor = DelegatedExtractor(tmp_path, indexer)

        result = await extractor.extract(file_id, CONTENT)

        assert result.backend == "local"
        assert result.fallback_reason == "indexer unavailable"
        indexer.extract_symbols.assert_not_awaited()
        assert result.node.exports == ["main"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["extract_symbols", "extract_deps"])
    async def test_failure_gives_same_node_as_local(self, tmp_path, file_id, method):
        indexer = make_indexer()
        setattr(indexer, method, AsyncMock(side_effect=RuntimeError("indexer crashed")))
        extractor = DelegatedExtractor(tmp_path, indexer)

        result = await extractor.extract(file_id, CONTENT)
        expected = LocalExtractor(tmp_path).extract(file_id, CONTENT)

        assert result.success
        assert result.fell_back
        assert "indexer crashed" in result.fallback_reason
        assert result.node == expected

    @pytest.mark.asyncio
    async def test_availability_probe_that_raises_falls_back(self, tmp_path, file_id):
        indexer = make_indexer()
        indexer.is_available = AsyncMock(side_effect=ConnectionError("refused"))
        extractor = DelegatedExtractor(tmp_path, indexer)

        result = await extractor.extract(file_id, CONTENT)

        assert result.backend == "local"
        assert result.node.file_deps == [canonicalize(tmp_path, "src/helper")]

    @pytest.mark.asyncio
    async def test_fallback_is_per_file(self, tmp_path):
        good = canonicalize(tmp_path, "good.ts")
        bad = canonicalize(tmp_path, "bad.ts")

        async def symbols(root, rel):
            if rel == "bad.ts":
                raise RuntimeError("no")
            return [symbol("fromIndexer")]

        indexer = make_indexer()
        indexer.extract_symbols = AsyncMock(side_effect=symbols)
        extractor = DelegatedExtractor(tmp_path, indexer)

        good_result = await extractor.extract(good, "export const local = 1;\n")
        bad_result = await extractor.extract(bad, "export const local = 1;\n")

        assert good_result.backend == "indexer"
        assert good_result.node.exports == ["fromIndexer"]
        assert bad_result.backend == "local"
        assert bad_result.node.exports == ["local"]

    @pytest.mark.asyncio
    async def test_indexer_node_gets_local_call_edges(self, tmp_path):
        file_id = canonicalize(tmp_path, "src/calls.py")
        content = "def a():\n    return b()\n\ndef b():\n    return 1\n"
        extractor = DelegatedExtractor(tmp_path, make_indexer(symbols=[symbol("a")]))

        result = await extractor.extract(file_id, content)
        expected = LocalExtractor(tmp_path).extract(file_id, content)

        assert result.backend == "indexer"
        assert [(d.caller, d.callee) for d in result.node.internal_deps] == [("a", "b")]
        assert result.node.internal_deps == expected.internal_deps

    @pytest.mark.asyncio
    async def test_indexer_node_honors_disabled_call_edges(self, tmp_path):
        file_id = canonicalize(tmp_path, "src/calls.py")
        content = "def a():\n    return b()\n\ndef b():\n    return 1\n"
        local = LocalExtractor(tmp_path, analyze_internal=False)
        extractor = DelegatedExtractor(tmp_path, make_indexer(), local)

        result = await extractor.extract(file_id, content)

        assert result.backend == "indexer"
        assert result.node.internal_deps == []

    @pytest.mark.asyncio
    async def test_result_to_dict(self, tmp_path, file_id):
        result = await DelegatedExtractor(tmp_path, make_indexer(available=False)).extract(
            file_id, CONTENT
        )
        data = result.to_dict()
        assert data["backend"] == "local"
        assert data["fallback_reason"] == "indexer unavailable"
        assert data["node"]["file"] == file_id
