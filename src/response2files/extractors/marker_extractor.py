"""Extract files and metadata from marker-delimited responses (v1 and v2)."""

import re
from dataclasses import dataclass

import structlog

from .. import patterns
from ..errors import DiagnosticKind, diagnostic
from ..utils.code_cleaner import clean_generated_code
from ..utils.file_paths import is_ignored_path
from ..validation import manifest_warnings, validate_manifest
from .base import ExtractionState
from .marker_blocks import (
    parse_marker_batch,
    parse_marker_explanation,
    parse_marker_generation_meta,
    parse_marker_manifest,
    parse_marker_meta,
    parse_marker_plan,
)

logger = structlog.get_logger(__name__)

_STRAY_CLOSER = re.compile(r"<!--\s*/FILE:[^\n]*?-->")
_BATCH_OPENING = re.compile(r"<!--\s*BATCH\s*-->")
# A delimiter cut off mid-stream: "<", "<!", "<!-", "<!-- /FI"
_PARTIAL_DELIMITER = re.compile(r"<(?:!(?:-(?:-(?:(?!-->).)*)?)?)?$", re.DOTALL)


@dataclass
class FileOpening:
    path: str
    start: int
    end: int


def _trim_newlines(content: str) -> str:
    return content.strip("\n")


def _extract_well_formed(text: str, state: ExtractionState) -> set[str]:
    processed = set()
    for match in patterns.FILE_WELL_FORMED.finditer(text):
        path = match.group("path").strip()
        processed.add(path)
        if is_ignored_path(path):
            continue
        cleaned = clean_generated_code(_trim_newlines(match.group("body")), path)
        if cleaned:
            state.add_file(path, cleaned)
    return processed


def extract_marker_files(text: str, state: ExtractionState) -> None:
    """
    Extract FILE blocks, recovering ones whose closing marker is missing.

    1. Well-formed ``<!-- FILE:p -->...<!-- /FILE:p -->`` blocks are taken first.
    2. An unclosed opening followed by another FILE opening is implicitly
       closed by it; its content is stored and reported as recovered.
    3. An unclosed opening with no FILE opening after it is the file still
       being streamed: it is listed in ``incomplete_files`` and its content
       so far goes to ``partial_files``, never to ``files``.
    """
    processed = _extract_well_formed(text, state)

    openings = [
        FileOpening(path=match.group(1).strip(), start=match.start(), end=match.end())
        for match in patterns.FILE_OPENING.finditer(text)
    ]

    for index, opening in enumerate(openings):
        if opening.path in processed:
            continue
        is_last = index == len(openings) - 1

        if is_last:
            delimiter = patterns.NON_FILE_DELIMITER.search(text, opening.end)
            content_end = delimiter.start() if delimiter else len(text)
        else:
            content_end = openings[index + 1].start

        content = _STRAY_CLOSER.sub("", _trim_newlines(text[opening.end : content_end])).strip()

        if is_ignored_path(opening.path):
            continue

        if is_last:
            partial = _PARTIAL_DELIMITER.sub("", content)
            state.mark_incomplete(opening.path, clean_generated_code(partial, opening.path, auto_repair=False))
            logger.debug("File still streaming", path=opening.path, chars=len(content))
            continue

        cleaned = clean_generated_code(content, opening.path)
        if cleaned and state.add_file(opening.path, cleaned):
            processed.add(opening.path)
            state.mark_recovered(opening.path)
            state.warn(
                diagnostic(
                    DiagnosticKind.UNCLOSED_FILE_BLOCK,
                    f'File "{opening.path}" had missing closing marker - recovered',
                )
            )


def extract_marker(text: str, state: ExtractionState) -> None:
    """
    Extract a marker-format response into state.

    Reads META, PLAN, MANIFEST, BATCH, EXPLANATION and GENERATION_META
    blocks, then the FILE blocks, then validates the manifest.
    """
    meta = parse_marker_meta(text)
    if meta:
        state.meta = meta

    plan = parse_marker_plan(text)
    if plan:
        state.plan = plan
        state.add_deleted(plan.delete)

    manifest = parse_marker_manifest(text)
    if manifest:
        state.manifest = manifest

    explanation = parse_marker_explanation(text)
    if explanation is not None:
        state.explanation = explanation

    batch = parse_marker_batch(text)
    if batch:
        state.batch = batch
    elif _BATCH_OPENING.search(text):
        # BATCH block opened but cut off
        state.truncated = True

    generation_meta = parse_marker_generation_meta(text)
    if generation_meta:
        state.generation_meta = generation_meta
        if state.batch is None:
            state.batch = generation_meta.to_batch()

    if state.batch and not state.batch.is_complete:
        state.truncated = True

    extract_marker_files(text, state)

    if state.manifest:
        state.validation = validate_manifest(state.manifest, state.files)
        state.warnings.extend(manifest_warnings(state.validation))

    logger.debug(
        "Extracted marker response",
        files=len(state.files),
        recovered=len(state.recovered_files),
        incomplete=state.incomplete_files,
    )
