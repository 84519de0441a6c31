"""Shared accumulator that extractors write into."""

from dataclasses import dataclass, field
from typing import Optional

from ..schemas.result import (
    BatchInfo,
    FilePlan,
    GenerationMeta,
    ManifestEntry,
    ManifestValidation,
    ParseMeta,
    ParseResult,
    ResponseFormat,
)
from ..utils.file_paths import is_ignored_path


@dataclass
class ExtractionState:
    """
    Mutable working state for one parse call.

    Extractors only ever add to it: files, metadata they found, and
    diagnostics. Metadata fields are set only when the extractor actually
    found them, so a later extractor never erases an earlier one's finds.
    The immutable ParseResult is built once, at the end, by to_result().
    """

    files: dict[str, str] = field(default_factory=dict)
    explanation: Optional[str] = None
    plan: Optional[FilePlan] = None
    manifest: Optional[list[ManifestEntry]] = None
    batch: Optional[BatchInfo] = None
    meta: Optional[ParseMeta] = None
    generation_meta: Optional[GenerationMeta] = None
    validation: Optional[ManifestValidation] = None

    truncated: bool = False
    incomplete_files: list[str] = field(default_factory=list)
    recovered_files: list[str] = field(default_factory=list)
    partial_files: dict[str, str] = field(default_factory=dict)
    deleted_files: list[str] = field(default_factory=list)

    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def add_file(self, path: str, content: str) -> bool:
        """Store a complete file. Ignored paths and empty content are skipped."""
        if not content or is_ignored_path(path):
            return False
        self.files[path] = content
        return True

    def mark_incomplete(self, path: str, partial: str = "") -> None:
        if path not in self.incomplete_files:
            self.incomplete_files.append(path)
        if partial:
            self.partial_files[path] = partial
        self.truncated = True

    def mark_recovered(self, path: str) -> None:
        if path not in self.recovered_files:
            self.recovered_files.append(path)

    def add_deleted(self, paths: list[str]) -> None:
        for path in paths:
            if path and path not in self.deleted_files:
                self.deleted_files.append(path)

    def warn(self, message: str) -> None:
        self.warnings.append(message)

    def error(self, message: str) -> None:
        self.errors.append(message)

    def to_result(self, response_format: ResponseFormat, raw_response: str | None = None) -> ParseResult:
        """Build the final result; a path that completed is dropped from the incomplete list."""
        incomplete = [path for path in self.incomplete_files if path not in self.files]
        partial = {path: text for path, text in self.partial_files.items() if path in incomplete}

        deleted = list(self.deleted_files)
        if self.plan:
            deleted.extend(path for path in self.plan.delete if path not in deleted)

        return ParseResult(
            format=response_format,
            files=dict(self.files),
            explanation=self.explanation,
            plan=self.plan,
            manifest=self.manifest,
            batch=self.batch,
            meta=self.meta,
            generation_meta=self.generation_meta,
            validation=self.validation,
            truncated=self.truncated,
            incomplete_files=incomplete,
            recovered_files=list(self.recovered_files),
            partial_files=partial,
            deleted_files=deleted,
            warnings=list(self.warnings),
            errors=list(self.errors),
            raw_response=raw_response,
        )
