"""Extract files and metadata from JSON-shaped responses (v1 and v2)."""

import json
import re
from typing import Any, Iterator

import structlog

from .. import patterns
from ..config import settings
from ..detection import strip_plan_comment
from ..errors import DiagnosticKind, InputTooLargeError, diagnostic
from ..repair.json_repair import repair_json
from ..schemas.result import BatchInfo, FileAction, FilePlan, FileStatus, ManifestEntry, ParseMeta
from ..utils.code_cleaner import clean_generated_code
from ..utils.file_paths import is_ignored_path, looks_like_file_path
from ..validation import manifest_warnings, validate_manifest
from .base import ExtractionState

logger = structlog.get_logger(__name__)

FILE_CONTAINER_KEYS = ("files", "fileChanges", "Changes", "changes")
CONTENT_KEYS = ("content", "code", "diff")
PATH_KEYS = ("path", "file", "name", "filename")

_FENCE_OPEN = re.compile(r"```[\w.+-]*[ \t]*\n?")
_FENCE_CLOSE = re.compile(r"^[ \t]*```[ \t]*$", re.MULTILINE)

_decoder = json.JSONDecoder()


def _unwrap_code_block(text: str) -> str:
    """Unwrap a leading fenced block; a missing closing fence keeps the rest."""
    fence = text.find("```")
    if fence == -1 or "{" in text[:fence]:
        return text
    opening = _FENCE_OPEN.match(text, fence)
    body_start = opening.end()
    closing = _FENCE_CLOSE.search(text, body_start)
    body = text[body_start : closing.start()] if closing else text[body_start:]
    return body.strip()


def prepare_json_string(text: str) -> str:
    """
    Clean a response before JSON decoding.

    Strips BOM and invisible characters, unwraps a single leading fenced
    code block and drops a leading ``// PLAN: {...}`` comment.
    """
    prepared = patterns.strip_bom(text.strip())
    prepared = strip_plan_comment(prepared)
    prepared = _unwrap_code_block(prepared)
    return strip_plan_comment(prepared)


def _decode(text: str, state: ExtractionState) -> dict[str, Any] | None:
    """Decode the JSON region, repairing it if needed; diagnostics go to state."""
    prepared = prepare_json_string(text)
    start = prepared.find("{")
    if start == -1:
        state.error(diagnostic(DiagnosticKind.JSON_PARSE_FAILED, "No JSON object found"))
        return None
    region = prepared[start:]

    try:
        data = json.loads(region)
    except json.JSONDecodeError:
        data = None

    if data is None:
        try:
            # Trailing prose after a complete object
            data, _ = _decoder.raw_decode(region)
        except json.JSONDecodeError:
            data = None

    if data is None:
        try:
            repaired = repair_json(region)
            data = json.loads(repaired.json)
        except (json.JSONDecodeError, InputTooLargeError) as e:
            state.error(diagnostic(DiagnosticKind.JSON_PARSE_FAILED, f"JSON parse error: {e}"))
            return None
        state.truncated = True
        state.warn("JSON was repaired from truncated response")
        logger.debug("Decoded repaired JSON", repairs=repaired.repairs)

    if not isinstance(data, dict):
        state.error(diagnostic(DiagnosticKind.JSON_PARSE_FAILED, "JSON root is not an object"))
        return None
    return data


def _file_container(data: dict[str, Any]) -> Any:
    for key in FILE_CONTAINER_KEYS:
        container = data.get(key)
        if container:
            return container
    if any(looks_like_file_path(key) for key in data):
        return data
    return {}


def _iter_file_entries(container: Any) -> Iterator[tuple[str, Any]]:
    """Yield (path, value) from a mapping or a list of ``{path, content}`` objects."""
    if isinstance(container, dict):
        yield from container.items()
    elif isinstance(container, list):
        for entry in container:
            if not isinstance(entry, dict):
                continue
            path = next((entry[key] for key in PATH_KEYS if isinstance(entry.get(key), str)), None)
            if path:
                yield path, entry


def _content_of(value: Any) -> str | None:
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        for key in CONTENT_KEYS:
            if isinstance(value.get(key), str) and value[key]:
                return value[key]
        return ""
    return None


def _extract_files(data: dict[str, Any], state: ExtractionState) -> None:
    for path, value in _iter_file_entries(_file_container(data)):
        if not isinstance(path, str) or ("." not in path and "/" not in path):
            continue
        if is_ignored_path(path):
            logger.debug("Skipping ignored path", path=path)
            continue
        content = _content_of(value)
        if content is None:
            continue
        cleaned = clean_generated_code(content, path)
        if len(cleaned) >= settings.min_file_length:
            state.add_file(path, cleaned)


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if isinstance(item, (str, int, float)) and str(item)]


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value) or default
    except (TypeError, ValueError):
        return default


def _extract_common(data: dict[str, Any], state: ExtractionState) -> None:
    _extract_files(data, state)
    if isinstance(data.get("explanation"), str):
        state.explanation = data["explanation"]
    state.add_deleted(_string_list(data.get("deletedFiles")))


def _parse_plan(plan: dict[str, Any]) -> FilePlan:
    sizes = {}
    if isinstance(plan.get("sizes"), dict):
        sizes = {str(path): _as_int(lines, 0) for path, lines in plan["sizes"].items()}
    return FilePlan(
        create=_string_list(plan.get("create")),
        update=_string_list(plan.get("update")),
        delete=_string_list(plan.get("delete")),
        sizes=sizes,
    )


def _parse_manifest(entries: list[Any]) -> list[ManifestEntry]:
    manifest = []
    for entry in entries:
        if not isinstance(entry, dict) or not entry.get("path"):
            continue
        action = entry.get("action")
        status = entry.get("status")
        manifest.append(
            ManifestEntry(
                path=str(entry["path"]),
                action=action if action in {a.value for a in FileAction} else FileAction.CREATE,
                lines=_as_int(entry.get("lines"), 0),
                tokens=_as_int(entry.get("tokens"), 0),
                status=status if status in {s.value for s in FileStatus} else FileStatus.INCLUDED,
            )
        )
    return manifest


def _parse_batch(batch: dict[str, Any]) -> BatchInfo:
    hint = batch.get("nextBatchHint")
    return BatchInfo(
        current=_as_int(batch.get("current"), 1),
        total=_as_int(batch.get("total"), 1),
        is_complete=batch.get("isComplete") is not False,
        completed=_string_list(batch.get("completed")),
        remaining=_string_list(batch.get("remaining")),
        next_batch_hint=str(hint) if hint else None,
    )


def extract_json_v1(text: str, state: ExtractionState) -> None:
    """
    Extract a v1 JSON response into state.

    Files come from ``files`` / ``fileChanges`` / ``changes`` or, failing
    those, root-level keys that look like file paths. Values may be strings
    or objects carrying ``content`` / ``code`` / ``diff``.
    """
    data = _decode(text, state)
    if data is None:
        return
    _extract_common(data, state)
    logger.debug("Extracted JSON v1", files=len(state.files), truncated=state.truncated)


def extract_json_v2(text: str, state: ExtractionState) -> None:
    """
    Extract a v2 JSON response into state.

    Reads everything v1 reads plus ``meta``, ``plan``, ``manifest`` and
    ``batch``. An incomplete batch marks the result truncated; a manifest
    is validated against the extracted files.
    """
    data = _decode(text, state)
    if data is None:
        return

    meta = data.get("meta")
    if isinstance(meta, dict):
        state.meta = ParseMeta(
            format=str(meta.get("format") or "json"),
            version=str(meta.get("version") or "2.0"),
            timestamp=str(meta["timestamp"]) if meta.get("timestamp") else None,
        )

    if isinstance(data.get("plan"), dict):
        state.plan = _parse_plan(data["plan"])
        state.add_deleted(state.plan.delete)

    if isinstance(data.get("manifest"), list):
        state.manifest = _parse_manifest(data["manifest"])

    if isinstance(data.get("batch"), dict):
        state.batch = _parse_batch(data["batch"])
        if not state.batch.is_complete:
            state.truncated = True

    _extract_common(data, state)

    if state.manifest:
        state.validation = validate_manifest(state.manifest, state.files)
        state.warnings.extend(manifest_warnings(state.validation))

    logger.debug(
        "Extracted JSON v2",
        files=len(state.files),
        truncated=state.truncated,
        batch=state.batch.current if state.batch else None,
    )
