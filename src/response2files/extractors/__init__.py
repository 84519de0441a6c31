"""Format-specific extractors."""

from .base import ExtractionState
from .fallback_extractor import extract_fallback
from .json_extractor import extract_json_v1, extract_json_v2, prepare_json_string
from .marker_blocks import (
    parse_marker_batch,
    parse_marker_explanation,
    parse_marker_generation_meta,
    parse_marker_manifest,
    parse_marker_meta,
    parse_marker_plan,
)
from .marker_extractor import extract_marker, extract_marker_files

__all__ = [
    "ExtractionState",
    "extract_fallback",
    "extract_json_v1",
    "extract_json_v2",
    "extract_marker",
    "extract_marker_files",
    "parse_marker_batch",
    "parse_marker_explanation",
    "parse_marker_generation_meta",
    "parse_marker_manifest",
    "parse_marker_meta",
    "parse_marker_plan",
    "prepare_json_string",
]
