"""Tests for the indexer HTTP client."""

from __future__ import annotations

from urllib.parse import quote

import httpx
import pytest

from depscope.config import IndexerConfig
from depscope.errors import IndexerError
from depscope.extractor.indexer import (
    CodeIndexer,
    DependencyExtraction,
    IndexerClient,
    SymbolExtraction,
    create_indexer_client,
)

REPO = "/abs/repo"

SYMBOLS = [
    {
        "name": "func1",
        "type": "function",
        "signature": "() => void",
        "start_line": 1,
        "end_line": 10,
        "is_exported": True,
    }
]
DEPS = [{"source": "a.ts", "target": "b.ts", "type": "import"}]


def make_client(handler) -> IndexerClient:
    return IndexerClient("http://test-indexer:8080/", transport=httpx.MockTransport(handler))


class TestModels:
    """Test wire payload validation."""

    def test_symbol_uses_wire_names(self):
        symbol = SymbolExtraction.model_validate(SYMBOLS[0])
        assert symbol.kind == "function"
        assert symbol.is_exported is True

    def test_dependency_uses_wire_names(self):
        dep = DependencyExtraction.model_validate(DEPS[0])
        assert dep.source_file == "a.ts"
        assert dep.target_file == "b.ts"
        assert dep.kind == "import"

    def test_dependency_kind_is_checked(self):
        with pytest.raises(ValueError):
            DependencyExtraction.model_validate({"source": "a", "target": "b", "type": "call"})


class TestIndexerClient:
    """Test endpoint calls and failure handling."""

    def test_satisfies_protocol(self):
        client = IndexerClient()
        assert isinstance(client, CodeIndexer)

    def test_trailing_slash_trimmed(self):
        assert make_client(lambda r: httpx.Response(200)).base_url == "http://test-indexer:8080"

    @pytest.mark.asyncio
    async def test_is_available(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.path)
            return httpx.Response(200, json={"status": "ok"})

        client = make_client(handler)
        assert await client.is_available() is True
        assert seen == ["/health"]
        await client.aclose()

    @pytest.mark.asyncio
    async def test_is_available_false_on_connection_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Conn refused", request=request)

        client = make_client(handler)
        assert await client.is_available() is False
        await client.aclose()

    @pytest.mark.asyncio
    async def test_is_available_false_on_error_status(self):
        client = make_client(lambda r: httpx.Response(503))
        assert await client.is_available() is False
        await client.aclose()

    @pytest.mark.asyncio
    async def test_extract_symbols(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.raw_path.decode())
            return httpx.Response(200, json=SYMBOLS)

        client = make_client(handler)
        result = await client.extract_symbols(REPO, "src/test.ts")
        assert len(result) == 1
        assert result[0].name == "func1"
        assert seen == [f"/extract/{quote(REPO, safe='')}/src/test.ts"]
        await client.aclose()

    @pytest.mark.asyncio
    async def test_extract_deps(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.raw_path.decode())
            return httpx.Response(200, json=DEPS)

        client = make_client(handler)
        result = await client.extract_deps(REPO, "src/test.ts")
        assert result[0].target_file == "b.ts"
        assert seen == [f"/extract-deps/{quote(REPO, safe='')}/src/test.ts"]
        await client.aclose()

    @pytest.mark.asyncio
    async def test_extract_symbols_raises_on_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Fail", request=request)

        client = make_client(handler)
        with pytest.raises(IndexerError):
            await client.extract_symbols("repo", "file")
        await client.aclose()

    @pytest.mark.asyncio
    async def test_extract_deps_raises_on_error_status(self):
        client = make_client(lambda r: httpx.Response(500, text="boom"))
        with pytest.raises(IndexerError, match="500"):
            await client.extract_deps("repo", "file")
        await client.aclose()

    @pytest.mark.asyncio
    async def test_malformed_payload_raises(self):
        client = make_client(lambda r: httpx.Response(200, json=[{"name": "x"}]))
        with pytest.raises(IndexerError, match="Malformed"):
            await client.extract_symbols("repo", "file")
        await client.aclose()

    @pytest.mark.asyncio
    async def test_get_hash(self):
        client = make_client(lambda r: httpx.Response(200, json={"hash": "abc123"}))
        assert await client.get_hash("repo", "file") == "abc123"
        await client.aclose()

    @pytest.mark.asyncio
    async def test_get_hash_none_on_failure(self):
        client = make_client(lambda r: httpx.Response(404))
        assert await client.get_hash("repo", "file") is None
        await client.aclose()

    @pytest.mark.asyncio
    async def test_context_manager_closes(self):
        async with make_client(lambda r: httpx.Response(200)) as client:
            assert await client.is_available() is True
        assert client._client.is_closed


class TestFactory:
    """Test client construction from configuration."""

    def test_create_from_config(self):
        client = create_indexer_client(IndexerConfig(base_url="http://idx:1234", timeout_seconds=5))
        assert client.base_url == "http://idx:1234"
        assert client.timeout == 5

    def test_create_with_defaults(self):
        client = create_indexer_client()
        assert client.base_url == "http://localhost:8080"
