"""Client for an external code indexer service.

The indexer is an optional HTTP service that answers per-file symbol and
dependency queries. When it is reachable its answers replace the local text
rules; any failure is surfaced as :class:`IndexerError` so the caller can fall
back to local extraction for that file.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Literal, Protocol, runtime_checkable
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from depscope.config import IndexerConfig
from depscope.errors import IndexerError

# Suppress httpx INFO logs by default (HTTP request logs pollute CLI output)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

DEFAULT_INDEXER_URL = "http://localhost:8080"
DEFAULT_TIMEOUT = 30.0


class SymbolExtraction(BaseModel):
    """A symbol reported by the indexer."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    kind: str = Field(alias="type")
    signature: str
    start_line: int
    end_line: int
    is_exported: bool


class DependencyExtraction(BaseModel):
    """A file-level dependency reported by the indexer."""

    model_config = ConfigDict(populate_by_name=True)

    source_file: str = Field(alias="source")
    target_file: str = Field(alias="target")
    kind: Literal["import", "require", "export"] = Field(alias="type")


class _HashResponse(BaseModel):
    hash: str


_symbols_adapter = TypeAdapter(list[SymbolExtraction])
_deps_adapter = TypeAdapter(list[DependencyExtraction])


@runtime_checkable
class CodeIndexer(Protocol):
    """Capability any indexer backend provides."""

    async def is_available(self) -> bool: ...

    async def extract_symbols(self, repo_path: str, file_path: str) -> list[SymbolExtraction]: ...

    async def extract_deps(self, repo_path: str, file_path: str) -> list[DependencyExtraction]: ...

    async def get_hash(self, repo_path: str, file_path: str) -> str | None: ...


@dataclass
class IndexerClient:
    """Async HTTP client for the indexer service.

    Example:
        >>> client = IndexerClient("http://localhost:8080")
        >>> if await client.is_available():
        ...     symbols = await client.extract_symbols("/abs/repo", "src/a.ts")
    """

    base_url: str = DEFAULT_INDEXER_URL
    timeout: float = DEFAULT_TIMEOUT
    transport: httpx.AsyncBaseTransport | None = field(default=None, repr=False)
    _client: httpx.AsyncClient = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Initialize the HTTP client."""
        self.base_url = self.base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout),
            transport=self.transport,
        )

    @staticmethod
    def _file_url(endpoint: str, repo_path: str, file_path: str) -> str:
        return f"/{endpoint}/{quote(repo_path, safe='')}/{file_path}"

    async def _get_json(self, url: str) -> Any:
        try:
            response = await self._client.get(url)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise IndexerError(
                f"Indexer returned {e.response.status_code}", url=url
            ) from e
        except httpx.HTTPError as e:
            raise IndexerError(f"Indexer not available: {e}", url=url) from e
        except ValueError as e:
            raise IndexerError(f"Indexer returned invalid JSON: {e}", url=url) from e

    async def is_available(self) -> bool:
        """Check whether the indexer answers its health endpoint."""
        try:
            response = await self._client.get("/health")
            return response.status_code == 200
        except httpx.HTTPError:
            return False

    async def extract_symbols(self, repo_path: str, file_path: str) -> list[SymbolExtraction]:
        """Extract symbols from a file.

        Raises:
            IndexerError: If the request fails or the payload is malformed.
        """
        data = await self._get_json(self._file_url("extract", repo_path, file_path))
        try:
            return _symbols_adapter.validate_python(data)
        except ValidationError as e:
            raise IndexerError(
                "Malformed symbol payload", file_path=file_path, detail=str(e)
            ) from e

    async def extract_deps(self, repo_path: str, file_path: str) -> list[DependencyExtraction]:
        """Extract file-level dependencies from a file.

        Raises:
            IndexerError: If the request fails or the payload is malformed.
        """
        data = await self._get_json(self._file_url("extract-deps", repo_path, file_path))
        try:
            return _deps_adapter.validate_python(data)
        except ValidationError as e:
            raise IndexerError(
                "Malformed dependency payload", file_path=file_path, detail=str(e)
            ) from e

    async def get_hash(self, repo_path: str, file_path: str) -> str | None:
        """Get the indexer's content hash for a file, or None."""
        try:
            data = await self._get_json(self._file_url("hash", repo_path, file_path))
            return _HashResponse.model_validate(data).hash
        except (IndexerError, ValidationError) as e:
            logger.debug(f"No hash for {file_path}: {e}")
            return None

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> IndexerClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()


def create_indexer_client(
    config: IndexerConfig | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> IndexerClient:
    """Create an IndexerClient from configuration."""
    config = config or IndexerConfig()
    return IndexerClient(
        base_url=config.base_url,
        timeout=config.timeout_seconds,
        transport=transport,
    )


__all__ = [
    "CodeIndexer",
    "DependencyExtraction",
    "IndexerClient",
    "SymbolExtraction",
    "create_indexer_client",
]
