"""ParseResult schema - the output of every extractor."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ResponseFormat(str, Enum):
    """Closed set of response shapes the parser understands."""

    JSON_V1 = "json-v1"
    JSON_V2 = "json-v2"
    MARKER_V1 = "marker-v1"
    MARKER_V2 = "marker-v2"
    FALLBACK = "fallback"
    UNKNOWN = "unknown"

    @property
    def is_json(self) -> bool:
        return self in (ResponseFormat.JSON_V1, ResponseFormat.JSON_V2)

    @property
    def is_marker(self) -> bool:
        return self in (ResponseFormat.MARKER_V1, ResponseFormat.MARKER_V2)


class FileAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class FileStatus(str, Enum):
    INCLUDED = "included"
    PENDING = "pending"
    MARKED = "marked"
    SKIPPED = "skipped"


class CamelModel(BaseModel):
    """Base model that serialises field names in camelCase (``by_alias=True``)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ParseMeta(CamelModel):
    """Format declaration carried by v2 responses."""

    format: str = Field(..., description="Declared format family, 'json' or 'marker'")
    version: str = Field(..., description="Declared format version, e.g. '2.0'")
    timestamp: Optional[str] = None


class FilePlan(CamelModel):
    """Declared change plan; independent of what was actually extracted."""

    create: list[str] = Field(default_factory=list)
    update: list[str] = Field(default_factory=list)
    delete: list[str] = Field(default_factory=list)
    sizes: dict[str, int] = Field(default_factory=dict, description="Expected line count per path")


class ManifestEntry(CamelModel):
    """One row of a declared file inventory."""

    path: str
    action: FileAction = FileAction.CREATE
    lines: int = 0
    tokens: int = 0
    status: FileStatus = FileStatus.INCLUDED


class BatchInfo(CamelModel):
    """One installment of a multi-part generation."""

    current: int = 1
    total: int = 1
    is_complete: bool = True
    completed: list[str] = Field(default_factory=list)
    remaining: list[str] = Field(default_factory=list)
    next_batch_hint: Optional[str] = None


class GenerationMeta(CamelModel):
    """Legacy GENERATION_META block describing multi-batch progress."""

    total_files_planned: int = 0
    files_in_this_batch: list[str] = Field(default_factory=list)
    completed_files: list[str] = Field(default_factory=list)
    remaining_files: list[str] = Field(default_factory=list)
    current_batch: int = 1
    total_batches: int = 1
    is_complete: bool = True

    def to_batch(self) -> BatchInfo:
        """Express the legacy block as BatchInfo."""
        return BatchInfo(
            current=self.current_batch,
            total=self.total_batches,
            is_complete=self.is_complete,
            completed=list(self.completed_files),
            remaining=list(self.remaining_files),
        )


class ManifestValidation(CamelModel):
    """Comparison of a declared manifest against the extracted files."""

    expected: list[str] = Field(default_factory=list)
    received: list[str] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)
    extra: list[str] = Field(default_factory=list)
    is_valid: bool = True


class ParserOptions(BaseModel):
    """Per-call overrides; unset values fall back to settings."""

    include_raw: bool = False
    max_size: Optional[int] = None
    aggressive_recovery: Optional[bool] = None


class ParseResult(CamelModel):
    """
    Structured result of parsing one model response.

    A fresh instance is built for every parse call. ``files`` only holds
    complete files; a path is never in both ``files`` and
    ``incomplete_files``. ``plan`` and ``manifest`` are advisory and only
    feed validation warnings.
    """

    format: ResponseFormat = Field(default=ResponseFormat.UNKNOWN, frozen=True)
    files: dict[str, str] = Field(default_factory=dict, description="Path -> cleaned content")
    explanation: Optional[str] = None
    plan: Optional[FilePlan] = None
    manifest: Optional[list[ManifestEntry]] = None
    batch: Optional[BatchInfo] = None
    meta: Optional[ParseMeta] = None
    generation_meta: Optional[GenerationMeta] = None
    validation: Optional[ManifestValidation] = None

    truncated: bool = False
    incomplete_files: list[str] = Field(default_factory=list)
    recovered_files: list[str] = Field(default_factory=list)
    partial_files: dict[str, str] = Field(
        default_factory=dict, description="Content so far of files still being streamed"
    )
    deleted_files: list[str] = Field(default_factory=list)

    warnings: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)

    raw_response: Optional[str] = None

    @property
    def file_count(self) -> int:
        return len(self.files)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)
