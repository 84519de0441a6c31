"""Classify a raw model response into one of the known formats."""

import json

import structlog

from . import patterns
from .repair.balance import find_balanced_end
from .schemas.result import ResponseFormat

logger = structlog.get_logger(__name__)


def strip_plan_comment(text: str) -> str:
    """
    Drop a leading ``// PLAN: {...}`` line.

    The JSON object is located by bracket matching, so braces inside the
    plan's strings do not cut it short. An unterminated plan is kept.
    """
    match = patterns.PLAN_COMMENT_START.match(text)
    if not match:
        return text
    end = find_balanced_end(text, match.end())
    if end == -1:
        return text
    return text[end:].lstrip()


def json_candidate(text: str) -> str:
    """Trimmed text with any leading plan comment and fenced block wrapper removed."""
    candidate = strip_plan_comment(patterns.strip_bom(text.strip()))
    block = patterns.LEADING_CODE_BLOCK.match(candidate)
    if block:
        candidate = block.group(1).strip()
    return candidate


def _classify_parsed(candidate: str) -> ResponseFormat | None:
    start = candidate.find("{")
    if start == -1:
        return None
    end = find_balanced_end(candidate, start)
    if end == -1:
        return None
    try:
        data = json.loads(candidate[start:end])
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None
    if not any(key in data for key in ("files", "fileChanges", "meta", "batch")):
        return None
    meta = data.get("meta")
    if isinstance(meta, dict) and meta.get("version") == "2.0":
        return ResponseFormat.JSON_V2
    return ResponseFormat.JSON_V1


def detect_format(text: str) -> ResponseFormat:
    """
    Detect the response format.

    Checks run on the trimmed, BOM-stripped text and the first match wins:
    marker v2, marker v1, JSON v2, JSON v1, fallback code blocks, unknown.
    The text is never modified.

    Args:
        text: Raw model response

    Returns:
        Detected ResponseFormat
    """
    if not text or not isinstance(text, str):
        return ResponseFormat.UNKNOWN

    trimmed = patterns.strip_bom(text.strip())

    has_file_marker = bool(patterns.FILE_MARKER.search(trimmed))
    if has_file_marker and patterns.META_MARKER.search(trimmed):
        return ResponseFormat.MARKER_V2
    if has_file_marker:
        return ResponseFormat.MARKER_V1
    if patterns.PLAN_MARKER.search(trimmed) and patterns.EXPLANATION_MARKER.search(trimmed):
        return ResponseFormat.MARKER_V1

    candidate = json_candidate(trimmed)

    if (
        patterns.JSON_FORMAT.search(candidate)
        or patterns.JSON_VERSION.search(candidate)
        or (patterns.BATCH_OBJECT.search(candidate) and patterns.MANIFEST_ARRAY.search(candidate))
    ):
        return ResponseFormat.JSON_V2

    if (
        patterns.FILES_OBJECT.search(candidate)
        or patterns.FILE_CHANGES.search(candidate)
        or patterns.EXPLANATION_KEY.search(candidate)
    ):
        return ResponseFormat.JSON_V1

    parsed = _classify_parsed(candidate)
    if parsed:
        logger.debug("Detected JSON by parsed shape", format=parsed.value)
        return parsed

    if patterns.SOURCE_CODE_BLOCK.search(trimmed):
        return ResponseFormat.FALLBACK

    return ResponseFormat.UNKNOWN
