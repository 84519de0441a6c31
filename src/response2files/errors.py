"""Exceptions and diagnostic categories for response parsing."""

from enum import Enum


class ResponseParseError(Exception):
    """Base class for errors raised by response2files."""


class InputTooLargeError(ResponseParseError, ValueError):
    """Input exceeds the configured size ceiling; raised before any scanning."""

    def __init__(self, size: int, limit: int, what: str = "Response"):
        self.size = size
        self.limit = limit
        super().__init__(
            f"{what} too large ({round(size / 1000)}KB > {round(limit / 1000)}KB limit)"
        )


class DiagnosticKind(str, Enum):
    """Categories of content-level problems, reported as warnings or errors."""

    NO_STRUCTURE_FOUND = "NoStructureFound"
    JSON_PARSE_FAILED = "JsonParseFailed"
    MANIFEST_MISMATCH = "ManifestMismatch"
    UNCLOSED_FILE_BLOCK = "UnclosedFileBlock"


def diagnostic(kind: DiagnosticKind, message: str) -> str:
    """Format a diagnostic string so callers can classify it by prefix."""
    return f"[{kind.value}] {message}"
