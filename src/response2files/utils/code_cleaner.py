"""Strip markdown and marker artifacts from extracted file bodies."""

import re

from ..config import settings
from ..repair.auto_repair import safe_apply
from .file_paths import is_js_path

_FENCE_LINE = re.compile(r"^[ \t]*```[\w.+#-]*[ \t]*$\n?", re.MULTILINE)
_LEADING_LANGUAGE = re.compile(
    r"\A\s*(?:javascript|typescript|tsx|jsx|ts|js|react)[ \t]*\n", re.IGNORECASE
)
_STRAY_FENCE = re.compile(r"```")
_FILE_MARKER = re.compile(r"<!--\s*/?FILE(?::[^>]*?)?\s*-->")

METADATA_BLOCKS = ("GENERATION_META", "PLAN", "EXPLANATION", "META", "MANIFEST", "BATCH")
_METADATA_BLOCK_PATTERNS = [
    (
        re.compile(rf"<!--\s*{name}\s*-->.*?<!--\s*/{name}\s*-->", re.DOTALL),
        re.compile(rf"<!--\s*/?{name}\s*-->"),
    )
    for name in METADATA_BLOCKS
]

_LOOKS_LIKE_MODULE = re.compile(r"import\s+.*from\s+['\"]|export\s+")


def remove_marker_artifacts(code: str) -> str:
    """Remove stray FILE markers and any metadata blocks left in a file body."""
    cleaned = _FILE_MARKER.sub("", code)
    for block, lone_tag in _METADATA_BLOCK_PATTERNS:
        cleaned = block.sub("", cleaned)
        cleaned = lone_tag.sub("", cleaned)
    return cleaned


def clean_generated_code(code: str, file_path: str | None = None, auto_repair: bool | None = None) -> str:
    """
    Clean a generated file body before it is stored.

    Removes markdown fences, a bare language line at the top and marker
    artifacts. JS/TS sources then go through safe_apply when
    ``settings.auto_repair_code`` is enabled.

    Args:
        code: Raw file body
        file_path: Path used to decide whether the body is JS/TS; without it
            the body is sniffed for import/export statements
        auto_repair: Override settings.auto_repair_code

    Returns:
        Cleaned, stripped content ("" for empty input)
    """
    if not code:
        return ""

    cleaned = _FENCE_LINE.sub("", code)
    cleaned = _LEADING_LANGUAGE.sub("", cleaned)
    cleaned = _STRAY_FENCE.sub("", cleaned)
    cleaned = remove_marker_artifacts(cleaned)

    is_js = is_js_path(file_path) if file_path else bool(_LOOKS_LIKE_MODULE.search(cleaned))
    if auto_repair is None:
        auto_repair = settings.auto_repair_code
    if is_js and auto_repair:
        cleaned = safe_apply(cleaned)

    return cleaned.strip()
