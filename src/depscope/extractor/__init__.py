"""Fact extraction: turn source text into dependency nodes."""

from depscope.extractor.base import (
    LANGUAGE_EXTENSIONS,
    ExtractionResult,
    FactExtractor,
    LocalExtractor,
    detect_language,
    get_rule_set,
)
from depscope.extractor.delegated import DelegatedExtractor
from depscope.extractor.indexer import (
    CodeIndexer,
    DependencyExtraction,
    IndexerClient,
    SymbolExtraction,
    create_indexer_client,
)

__all__ = [
    "CodeIndexer",
    "DelegatedExtractor",
    "DependencyExtraction",
    "ExtractionResult",
    "FactExtractor",
    "IndexerClient",
    "LANGUAGE_EXTENSIONS",
    "LocalExtractor",
    "SymbolExtraction",
    "create_indexer_client",
    "detect_language",
    "get_rule_set",
]
