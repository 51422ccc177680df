"""Configuration models for depscope."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from depscope.errors import ConfigError
from depscope.paths import CONFIG_FILE


class AnalyzerConfig(BaseModel):
    """Dependency analysis configuration."""

    include_patterns: list[str] = Field(
        default=[".ts", ".tsx", ".js", ".jsx", ".py", ".go", ".rs", ".java"],
        description="File extensions picked up when scanning a directory",
    )
    exclude_patterns: list[str] = Field(
        default=["node_modules", ".git", "dist", "build", "__tests__", "*.test.*"],
        description="Patterns for files left out of the graph",
    )
    max_depth: int = Field(
        default=5,
        description="Maximum traversal depth (accepted, not yet enforced by impact analysis)",
    )
    analyze_internal: bool = Field(
        default=True,
        description="Record same-file call edges",
    )


class IndexerConfig(BaseModel):
    """External indexer configuration."""

    enabled: bool = Field(
        default=False,
        description="Use the external indexer service when it is reachable",
    )
    base_url: str = Field(
        default="http://localhost:8080",
        description="Indexer service URL",
    )
    timeout_seconds: float = Field(
        default=30.0,
        description="Timeout for indexer requests",
    )
    concurrency: int = Field(
        default=8,
        ge=1,
        description="Maximum files extracted concurrently",
    )


class VisualizerConfig(BaseModel):
    """Diagram rendering configuration."""

    max_nodes: int = Field(
        default=20,
        ge=0,
        description="Nodes rendered when no explicit file subset is given",
    )
    direction: Literal["TD", "TB", "BT", "LR", "RL"] = Field(
        default="TD",
        description="Mermaid layout direction",
    )


class DepscopeConfig(BaseSettings):
    """Main depscope configuration."""

    model_config = SettingsConfigDict(
        env_prefix="DEPSCOPE_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    version: str = Field(default="1.0", description="Config version")
    analyzer: AnalyzerConfig = Field(default_factory=AnalyzerConfig)
    indexer: IndexerConfig = Field(default_factory=IndexerConfig)
    visualizer: VisualizerConfig = Field(default_factory=VisualizerConfig)

    @classmethod
    def load(cls, config_path: Path | None = None) -> DepscopeConfig:
        """Load configuration from file and environment.

        The first existing file wins:
        1. Provided config file path
        2. .depscope.toml in current directory
        3. .depscope.toml in home directory

        Sections absent from the file fall back to DEPSCOPE_* environment
        variables, then to built-in defaults.
        """
        config_data: dict[str, Any] = {}

        locations = []
        if config_path:
            locations.append(config_path)
        locations.extend(
            [
                Path.cwd() / CONFIG_FILE,
                Path.home() / CONFIG_FILE,
            ]
        )

        for loc in locations:
            if loc.exists():
                try:
                    with open(loc, "rb") as f:
                        config_data = tomllib.load(f)
                except tomllib.TOMLDecodeError as e:
                    raise ConfigError(f"Invalid TOML in {loc}: {e}", path=str(loc)) from e
                break

        # Top-level [depscope] table carries the version only
        section = config_data.pop("depscope", None)
        if isinstance(section, dict) and "version" in section:
            config_data.setdefault("version", section["version"])

        return cls(**config_data)


def get_default_config_toml() -> str:
    """Generate default .depscope.toml content."""
    return """# depscope configuration

[depscope]
version = "1.0"

[analyzer]
# Extensions picked up when a directory is scanned
include_patterns = [".ts", ".tsx", ".js", ".jsx", ".py", ".go", ".rs", ".java"]
# "*.x.*" style patterns match file names; other patterns match the full path
exclude_patterns = ["node_modules", ".git", "dist", "build", "__tests__", "*.test.*"]
max_depth = 5  # Accepted but not enforced yet
analyze_internal = true  # Record same-file call edges

[indexer]
enabled = false  # Use the external indexer when reachable
base_url = "http://localhost:8080"
timeout_seconds = 30
concurrency = 8

[visualizer]
max_nodes = 20
direction = "TD"  # TD | TB | BT | LR | RL
"""
