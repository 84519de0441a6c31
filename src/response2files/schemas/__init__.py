"""Pydantic schemas for parse results."""

from .result import (
    BatchInfo,
    FileAction,
    FilePlan,
    FileStatus,
    GenerationMeta,
    ManifestEntry,
    ManifestValidation,
    ParseMeta,
    ParseResult,
    ParserOptions,
    ResponseFormat,
)
from .status import StreamingStatus, StreamPlan

__all__ = [
    "BatchInfo",
    "FileAction",
    "FilePlan",
    "FileStatus",
    "GenerationMeta",
    "ManifestEntry",
    "ManifestValidation",
    "ParseMeta",
    "ParseResult",
    "ParserOptions",
    "ResponseFormat",
    "StreamingStatus",
    "StreamPlan",
]
