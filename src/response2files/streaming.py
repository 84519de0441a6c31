"""
Helpers for progress displays while a response is still streaming.

All of these read either the raw text or an already computed ParseResult;
none of them keep state between calls.
"""

import json
import re
from typing import Iterable

import structlog

from . import patterns
from .detection import detect_format
from .extractors.marker_blocks import parse_marker_plan
from .repair.balance import find_balanced_end
from .schemas.result import FileAction, FileStatus, ParseResult, ResponseFormat
from .schemas.status import StreamingStatus, StreamPlan
from .utils.file_paths import is_ignored_path

logger = structlog.get_logger(__name__)

_JSON_FILE_KEY = re.compile(r'"([\w./@-]+\.(?:tsx?|jsx?|mjs|cjs|css|scss|json|md|html|sql))"\s*:')
_JSON_PLAN_OBJECT = re.compile(r'"plan"\s*:\s*\{([^}]*)\}')
_JSON_MANIFEST_ARRAY = re.compile(r'"manifest"\s*:\s*\[(.*?)\]', re.DOTALL)
_MANIFEST_SIZE = re.compile(r'\{\s*"path"\s*:\s*"([^"]+)"[^}]*?"lines"\s*:\s*(\d+)')
_JSON_BATCH_OBJECT = re.compile(r'"batch"\s*:\s*\{([^}]*)\}')
_PLAN_COMMENT = re.compile(r"//\s*PLAN:\s*(?=\{)")
_DANGLING_TOTAL = re.compile(r'"total"\s*:\s*(?=[}\]])')
_TRAILING_COMMA = re.compile(r",\s*(?=[}\]])")
_QUOTED = re.compile(r'"([^"]+)"')

METADATA_STRIP_BLOCKS = ("PLAN", "EXPLANATION", "GENERATION_META")


def _dedupe(paths: Iterable[str]) -> list[str]:
    seen: dict[str, None] = {}
    for path in paths:
        if path:
            seen.setdefault(path, None)
    return list(seen)


def _planned_paths(result: ParseResult) -> list[str]:
    if result.plan:
        return _dedupe([*result.plan.create, *result.plan.update])
    if result.manifest:
        return _dedupe(
            entry.path
            for entry in result.manifest
            if entry.action != FileAction.DELETE and entry.status == FileStatus.INCLUDED
        )
    return []


def get_streaming_status(result: ParseResult, rendered: Iterable[str] = ()) -> StreamingStatus:
    """
    Split known file paths into pending, streaming and complete.

    Args:
        result: Parse of the buffer so far
        rendered: Paths the caller has already seen content for

    Returns:
        StreamingStatus; complete files are the ones in ``result.files``,
        streaming ones are incomplete or rendered-but-unfinished, pending
        ones are planned and not started
    """
    complete = list(result.files)
    complete_set = set(complete)
    streaming = _dedupe(
        path for path in [*result.incomplete_files, *rendered] if path not in complete_set
    )
    streaming_set = set(streaming)
    pending = [
        path for path in _planned_paths(result) if path not in complete_set and path not in streaming_set
    ]
    return StreamingStatus(pending=pending, streaming=streaming, complete=complete)


def build_continuation_prompt(result: ParseResult) -> str | None:
    """
    Prompt asking the model for the next batch.

    Returns:
        Prompt text, or None when there is no batch, it is complete, or
        nothing remains
    """
    batch = result.batch
    if not batch or batch.is_complete or not batch.remaining:
        return None

    completed = "\n".join(f"- {path}" for path in batch.completed)
    remaining = "\n".join(f"- {path}" for path in batch.remaining)
    return (
        f"Continue generating the remaining {len(batch.remaining)} files.\n\n"
        f"ALREADY COMPLETED ({len(batch.completed)} files):\n{completed}\n\n"
        f"REMAINING FILES TO GENERATE:\n{remaining}\n\n"
        f"Use the same format and structure. This is batch {batch.current + 1} of {batch.total}."
    )


def has_files(text: str) -> bool:
    """Quick check for a file payload, according to the detected format."""
    response_format = detect_format(text)
    if response_format.is_json:
        return bool(patterns.FILES_OBJECT.search(text) or patterns.FILE_CHANGES.search(text))
    if response_format.is_marker:
        return bool(patterns.FILE_MARKER.search(text))
    if response_format == ResponseFormat.FALLBACK:
        return bool(patterns.SOURCE_CODE_BLOCK.search(text))
    return False


def extract_file_list(text: str) -> list[str]:
    """
    Sorted list of file paths a response mentions.

    Marker responses contribute PLAN create/update entries and FILE markers;
    everything else contributes quoted JSON keys that look like file paths.
    Ignored paths are dropped.
    """
    files: set[str] = set()
    if detect_format(text).is_marker:
        plan = parse_marker_plan(text)
        if plan:
            files.update(plan.create)
            files.update(plan.update)
        files.update(match.group(1).strip() for match in patterns.FILE_OPENING.finditer(text))
    else:
        files.update(match.group(1) for match in _JSON_FILE_KEY.finditer(text))
    return sorted(path for path in files if path and not is_ignored_path(path))


def _str_list(value: object) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str) and item]


def _quoted_array(body: str, key: str) -> list[str]:
    match = re.search(rf'"{key}"\s*:\s*\[([^\]]*)\]', body)
    return _QUOTED.findall(match.group(1)) if match else []


def _plan_from_json(text: str) -> StreamPlan | None:
    if not text.lstrip().startswith("{"):
        return None
    plan_match = _JSON_PLAN_OBJECT.search(text)
    if not plan_match:
        return None

    body = plan_match.group(1)
    create = [*_quoted_array(body, "create"), *_quoted_array(body, "update")]
    if not create:
        return None

    sizes = {}
    manifest = _JSON_MANIFEST_ARRAY.search(text)
    if manifest:
        sizes = {path: int(lines) for path, lines in _MANIFEST_SIZE.findall(manifest.group(1))}

    completed = []
    batch = _JSON_BATCH_OBJECT.search(text)
    if batch:
        completed = _quoted_array(batch.group(1), "completed")

    return StreamPlan(
        create=create,
        delete=_quoted_array(body, "delete"),
        total=len(create),
        completed=completed,
        sizes=sizes,
        source="json",
    )


def _plan_from_comment(text: str) -> StreamPlan | None:
    match = _PLAN_COMMENT.search(text)
    if not match:
        return None

    end = find_balanced_end(text, match.end())
    if end != -1:
        candidate = text[match.end() : end]
        candidate = _TRAILING_COMMA.sub("", _DANGLING_TOTAL.sub("", candidate))
        try:
            plan = json.loads(candidate)
        except json.JSONDecodeError:
            plan = None
        if isinstance(plan, dict):
            create = [*_str_list(plan.get("create")), *_str_list(plan.get("update"))]
            if create:
                sizes = plan.get("sizes") if isinstance(plan.get("sizes"), dict) else {}
                total = plan.get("total")
                return StreamPlan(
                    create=create,
                    delete=_str_list(plan.get("delete")),
                    total=total if isinstance(total, int) and total > 0 else len(create),
                    sizes={path: lines for path, lines in sizes.items() if isinstance(lines, int)},
                    source="comment",
                )

    # Plan still streaming: take whatever arrays are already closed
    create = [*_quoted_array(text, "create"), *_quoted_array(text, "update")]
    if not create:
        return None
    return StreamPlan(create=create, total=len(create), source="comment")


def _plan_from_markers(text: str) -> StreamPlan | None:
    plan = parse_marker_plan(text)
    if not plan:
        return None
    create = [*plan.create, *plan.update]
    if not create:
        return None
    return StreamPlan(
        create=create,
        delete=plan.delete,
        total=len(create),
        sizes=plan.sizes,
        source="marker",
    )


def parse_file_plan_from_stream(text: str) -> StreamPlan | None:
    """
    Read the declared file plan from a response that may still be streaming.

    Tries, in order: a JSON v2 ``"plan"`` object, a ``// PLAN: {...}``
    comment and a marker PLAN block. Created and updated paths are both
    reported under ``create``.

    Returns:
        StreamPlan, or None when no plan with at least one file is visible yet
    """
    if not text:
        return None
    for reader in (_plan_from_json, _plan_from_comment, _plan_from_markers):
        plan = reader(text)
        if plan:
            logger.debug("Found file plan", source=plan.source, total=plan.total)
            return plan
    return None


def strip_marker_metadata(text: str) -> str:
    """Remove PLAN, EXPLANATION and GENERATION_META blocks for display."""
    stripped = text
    for name in METADATA_STRIP_BLOCKS:
        stripped = patterns.marker_block(name).sub("", stripped)
    return stripped.strip()
