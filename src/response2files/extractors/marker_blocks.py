"""
Parsers for the singleton marker blocks.

Each parser takes the whole response and returns None when its block is
absent or unterminated.
"""

import re
from typing import Optional

from ..patterns import marker_block
from ..schemas.result import (
    BatchInfo,
    FileAction,
    FilePlan,
    FileStatus,
    GenerationMeta,
    ManifestEntry,
    ParseMeta,
)

META_BLOCK = marker_block("META")
PLAN_BLOCK = marker_block("PLAN")
MANIFEST_BLOCK = marker_block("MANIFEST")
BATCH_BLOCK = marker_block("BATCH")
EXPLANATION_BLOCK = marker_block("EXPLANATION")
GENERATION_META_BLOCK = marker_block("GENERATION_META")

_LEADING_INT = re.compile(r"^\s*(-?\d+)")


def _block_body(pattern: re.Pattern, text: str) -> Optional[str]:
    match = pattern.search(text)
    return match.group(1).strip() if match else None


def _key_values(body: str) -> list[tuple[str, str]]:
    """``key: value`` lines with lower-cased keys; other lines are skipped."""
    pairs = []
    for line in body.split("\n"):
        key, sep, value = line.partition(":")
        if sep:
            pairs.append((key.strip().lower(), value.strip()))
    return pairs


def _split_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _to_int(value: str, default: int) -> int:
    match = _LEADING_INT.match(value)
    if not match:
        return default
    return int(match.group(1)) or default


def _to_bool(value: str) -> bool:
    return value.strip().lower() == "true"


def parse_marker_meta(text: str) -> Optional[ParseMeta]:
    """Parse ``<!-- META -->`` (format, version, timestamp)."""
    body = _block_body(META_BLOCK, text)
    if body is None:
        return None

    meta = ParseMeta(format="marker", version="1.0")
    for key, value in _key_values(body):
        if key == "format":
            meta.format = value
        elif key == "version":
            meta.version = value
        elif key == "timestamp":
            meta.timestamp = value
    return meta


def parse_sizes(value: str) -> dict[str, int]:
    """Parse ``path:lines, path:lines``; the last colon separates the count."""
    sizes = {}
    for pair in _split_list(value):
        path, sep, count = pair.rpartition(":")
        if sep and path.strip() and count.strip().isdigit():
            sizes[path.strip()] = int(count)
    return sizes


def parse_marker_plan(text: str) -> Optional[FilePlan]:
    """
    Parse ``<!-- PLAN -->``.

    Example block body:
        create: src/App.tsx, src/components/Header.tsx
        update: src/index.css
        delete: src/old.ts
        sizes: src/App.tsx:25, src/components/Header.tsx:40
    """
    body = _block_body(PLAN_BLOCK, text)
    if body is None:
        return None

    plan = FilePlan()
    for line in body.split("\n"):
        key, sep, value = line.strip().partition(":")
        if not sep:
            continue
        key = key.strip().lower()
        if key in ("create", "update", "delete"):
            setattr(plan, key, _split_list(value))
        elif key == "sizes":
            plan.sizes = parse_sizes(value)
    return plan


def parse_marker_manifest(text: str) -> Optional[list[ManifestEntry]]:
    """
    Parse the ``<!-- MANIFEST -->`` pipe table.

    Header and separator rows are recognised by their ``| File`` / ``|--``
    prefix. Rows need at least path, action, lines and tokens cells.
    """
    body = _block_body(MANIFEST_BLOCK, text)
    if body is None:
        return None

    actions = {action.value for action in FileAction}
    statuses = {status.value for status in FileStatus}
    entries = []
    for line in body.split("\n"):
        line = line.strip()
        if not line.startswith("|") or line.startswith("| File") or line.startswith("|--"):
            continue
        cells = [cell.strip() for cell in line.split("|") if cell.strip()]
        if len(cells) < 4:
            continue
        action = cells[1].lower()
        status = cells[4].lower() if len(cells) > 4 else ""
        entries.append(
            ManifestEntry(
                path=cells[0],
                action=action if action in actions else FileAction.CREATE,
                lines=_to_int(cells[2], 0),
                tokens=_to_int(re.sub(r"[~,]", "", cells[3]), 0),
                status=status if status in statuses else FileStatus.INCLUDED,
            )
        )
    return entries or None


def parse_marker_batch(text: str) -> Optional[BatchInfo]:
    """Parse ``<!-- BATCH -->`` (current, total, isComplete, completed, remaining, nextBatchHint)."""
    body = _block_body(BATCH_BLOCK, text)
    if body is None:
        return None

    batch = BatchInfo()
    for key, value in _key_values(body):
        if key == "current":
            batch.current = _to_int(value, 1)
        elif key == "total":
            batch.total = _to_int(value, 1)
        elif key == "iscomplete":
            batch.is_complete = _to_bool(value)
        elif key == "completed":
            batch.completed = _split_list(value)
        elif key == "remaining":
            batch.remaining = _split_list(value)
        elif key == "nextbatchhint":
            batch.next_batch_hint = value or None
    return batch


def parse_marker_explanation(text: str) -> Optional[str]:
    return _block_body(EXPLANATION_BLOCK, text)


def parse_marker_generation_meta(text: str) -> Optional[GenerationMeta]:
    """Parse the legacy ``<!-- GENERATION_META -->`` block."""
    body = _block_body(GENERATION_META_BLOCK, text)
    if body is None:
        return None

    meta = GenerationMeta()
    for key, value in _key_values(body):
        if key == "totalfilesplanned":
            meta.total_files_planned = _to_int(value, 0)
        elif key == "filesinthisbatch":
            meta.files_in_this_batch = _split_list(value)
        elif key == "completedfiles":
            meta.completed_files = _split_list(value)
        elif key == "remainingfiles":
            meta.remaining_files = _split_list(value)
        elif key == "currentbatch":
            meta.current_batch = _to_int(value, 1)
        elif key == "totalbatches":
            meta.total_batches = _to_int(value, 1)
        elif key == "iscomplete":
            meta.is_complete = _to_bool(value)
    return meta
