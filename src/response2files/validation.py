"""Compare a declared manifest with the files actually extracted."""

from typing import Iterable

import structlog

from .errors import DiagnosticKind, diagnostic
from .schemas.result import FileAction, FileStatus, ManifestEntry, ManifestValidation

logger = structlog.get_logger(__name__)


def validate_manifest(
    manifest: list[ManifestEntry] | None,
    files: Iterable[str],
) -> ManifestValidation:
    """
    Validate extracted files against a manifest.

    Expected paths are manifest entries with status ``included`` and an
    action other than ``delete``. Diagnostic only; files are never added
    or removed.

    Args:
        manifest: Declared inventory, or None
        files: Extracted paths (a dict of files works too)

    Returns:
        ManifestValidation; vacuously valid when there is no manifest
    """
    received = list(files)
    if not manifest:
        return ManifestValidation(received=received)

    expected = [
        entry.path
        for entry in manifest
        if entry.status == FileStatus.INCLUDED and entry.action != FileAction.DELETE
    ]
    received_set = set(received)
    expected_set = set(expected)

    missing = [path for path in expected if path not in received_set]
    extra = [path for path in received if path not in expected_set]

    return ManifestValidation(
        expected=expected,
        received=received,
        missing=missing,
        extra=extra,
        is_valid=not missing,
    )


def manifest_warnings(validation: ManifestValidation) -> list[str]:
    """Warnings describing a failed validation."""
    if validation.is_valid:
        return []
    logger.debug("Manifest mismatch", missing=validation.missing, extra=validation.extra)
    return [
        diagnostic(
            DiagnosticKind.MANIFEST_MISMATCH,
            f"Manifest validation: missing files: {', '.join(validation.missing)}",
        )
    ]
