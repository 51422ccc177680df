"""Exceptions and per-build outcome tracking for depscope."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Literal

SkipReason = Literal["excluded", "not_found"]


class ExitCode(IntEnum):
    """depscope CLI exit codes."""

    SUCCESS = 0
    CONFIG_ERROR = 1  # Bad config or unknown file argument
    PARTIAL_SUCCESS = 2  # Graph built, some files left out
    FATAL_ERROR = 3


class DepscopeError(Exception):
    """Base exception. ``context`` is merged into the JSON form."""

    exit_code: ExitCode = ExitCode.FATAL_ERROR

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": type(self).__name__,
            "message": self.message,
            "exit_code": self.exit_code,
            **self.context,
        }


class ConfigError(DepscopeError):
    exit_code = ExitCode.CONFIG_ERROR


class ExtractionError(DepscopeError):
    """Facts could not be extracted from one file; the file is left out of the graph."""

    exit_code = ExitCode.PARTIAL_SUCCESS

    def __init__(self, message: str, file_path: str, **context: Any):
        super().__init__(message, file_path=file_path, **context)
        self.file_path = file_path


class UnsupportedLanguageError(DepscopeError):
    """No rule set exists for a language name."""

    exit_code = ExitCode.PARTIAL_SUCCESS

    def __init__(self, language: str, file_path: str):
        super().__init__(
            f"No rules for language: {language}", language=language, file_path=file_path
        )
        self.language = language
        self.file_path = file_path


class IndexerError(DepscopeError):
    """The external indexer failed to answer a request.

    Raised by the indexer client; the delegated extractor turns it into a
    local fallback, so it only reaches users who call the client directly.
    """

    exit_code = ExitCode.PARTIAL_SUCCESS


@dataclass
class BuildReport:
    """What happened to each input file of one graph build."""

    processed: list[str] = field(default_factory=list)
    skipped: list[dict[str, str]] = field(default_factory=list)
    errors: list[DepscopeError] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """True unless something fatal was recorded."""
        return all(e.exit_code != ExitCode.FATAL_ERROR for e in self.errors)

    @property
    def exit_code(self) -> ExitCode:
        """Worst exit code among recorded errors; skips never lower it."""
        if not self.errors:
            return ExitCode.SUCCESS
        codes = {e.exit_code for e in self.errors}
        for code in (ExitCode.CONFIG_ERROR, ExitCode.FATAL_ERROR):
            if code in codes:
                return code
        return ExitCode.PARTIAL_SUCCESS

    @property
    def failed_files(self) -> list[str]:
        return [e.file_path for e in self.errors if isinstance(e, ExtractionError)]

    def record_processed(self, file_path: str) -> None:
        self.processed.append(file_path)

    def record_skipped(self, file_path: str, reason: SkipReason) -> None:
        self.skipped.append({"path": file_path, "reason": reason})

    def record_error(self, error: DepscopeError) -> None:
        self.errors.append(error)

    def skip_counts(self) -> dict[str, int]:
        """Number of skipped files per reason."""
        return dict(Counter(entry["reason"] for entry in self.skipped))

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "exit_code": self.exit_code,
            "processed": len(self.processed),
            "skipped": len(self.skipped),
            "skip_reasons": self.skip_counts(),
            "errors": [e.to_dict() for e in self.errors],
            "skipped_files": self.skipped,
        }
