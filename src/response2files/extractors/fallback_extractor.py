"""Last-resort extraction from generic fenced code blocks."""

import re

import structlog

from ..config import settings
from ..utils.code_cleaner import clean_generated_code
from ..utils.file_paths import is_ignored_path
from .base import ExtractionState

logger = structlog.get_logger(__name__)

FALLBACK_WARNING = "Using fallback parser - response format not recognized"

# "src/App.tsx" (optionally as a heading, bold or code span) on the line before a fence
_PATH_THEN_BLOCK = re.compile(
    r"^[ \t]*(?:#+[ \t]*)?[*`]*(?P<path>[\w./@-]+\.(?:tsx?|jsx?|mjs|cjs|css|scss|json|md|html?))[*`]*:?[ \t]*\n"
    r"```[\w+-]*[ \t]*\n(?P<body>.*?)\n[ \t]*```",
    re.MULTILINE | re.DOTALL,
)
# "File: src/App.tsx" as the first line inside a fence
_PATH_IN_BLOCK = re.compile(
    r"```[\w+-]*[ \t]*\n[ \t]*(?://[ \t]*)?File:[ \t]*(?P<path>[^\n]+?)[ \t]*\n(?P<body>.*?)\n[ \t]*```",
    re.DOTALL,
)
_SOURCE_BLOCK = re.compile(
    r"```(?:tsx?|jsx?|typescript|javascript)[ \t]*\n(?P<body>.*?)\n[ \t]*```", re.DOTALL
)


def synthetic_name(content: str, number: int) -> str:
    """Name for an unlabeled block: component, module or plain script."""
    if "import React" in content or "export default" in content or (
        "function " in content and "return" in content
    ):
        return f"component{number}.tsx"
    if "export " in content:
        return f"module{number}.ts"
    return f"code{number}.js"


def _store(path: str, body: str, state: ExtractionState) -> bool:
    if is_ignored_path(path) or path in state.files:
        return False
    cleaned = clean_generated_code(body.strip(), path)
    if len(cleaned) < settings.min_file_length:
        return False
    state.add_file(path, cleaned)
    state.mark_recovered(path)
    return True


def _labeled_blocks(pattern: re.Pattern, text: str, state: ExtractionState) -> int:
    stored = 0
    for match in pattern.finditer(text):
        path = match.group("path").strip().strip("`*")
        if _store(path, match.group("body"), state):
            stored += 1
    return stored


def extract_fallback(text: str, state: ExtractionState) -> None:
    """
    Extract files from plain fenced code blocks.

    Heuristics, first one that yields files wins:
    1. A file path on its own line right before a fenced block.
    2. A ``File: path`` line as the first line inside a fenced block.
    3. Unlabeled JS/TS blocks of at least ``settings.fallback_min_block_length``
       characters, named component{N}.tsx, module{N}.ts or code{N}.js.
    """
    state.warn(FALLBACK_WARNING)

    stored = _labeled_blocks(_PATH_THEN_BLOCK, text, state)
    if not stored:
        stored = _labeled_blocks(_PATH_IN_BLOCK, text, state)

    if not stored:
        number = 1
        for match in _SOURCE_BLOCK.finditer(text):
            body = match.group("body").strip()
            if len(body) < settings.fallback_min_block_length:
                continue
            if _store(synthetic_name(body, number), body, state):
                stored += 1
                number += 1

    logger.debug("Fallback extraction finished", files=stored)
