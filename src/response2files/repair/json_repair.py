"""Close truncated JSON so it can be parsed."""

import json
import re
from dataclasses import dataclass, field
from typing import Any

import structlog

from ..config import settings
from ..errors import InputTooLargeError
from .balance import is_balanced

logger = structlog.get_logger(__name__)

# Mutually exclusive tails left behind by a mid-stream cut; first match wins
TRAILING_PATTERNS: list[tuple[re.Pattern, str]] = [
    (re.compile(r",\s*$"), "Removed trailing comma"),
    (re.compile(r',?\s*"[^"]*"\s*:\s*$'), "Removed incomplete key-value"),
    (re.compile(r',?\s*"[^"]*"\s*:\s*"[^"]*$'), "Removed partial string value"),
    (
        re.compile(r',?\s*"[^"]*"\s*:\s*(?:t|tr|tru|f|fa|fal|fals|n|nu|nul|-|\d+\.|\d+[eE][+-]?)$'),
        "Removed partial literal value",
    ),
]

# A key with no colon yet; only meaningful when the innermost container is an object
_DANGLING_KEY = re.compile(r'(?:,|(?<=\{))\s*"[^"]*"\s*$')
# A partial literal as an array element; only meaningful when the innermost container is an array
_PARTIAL_ELEMENT = re.compile(
    r"(?:,|(?<=\[))\s*(?:t|tr|tru|f|fa|fal|fals|n|nu|nul|-|\d+\.|\d+[eE][+-]?)$"
)


@dataclass
class JsonRepairResult:
    """Outcome of repair_json."""

    json: str
    was_repaired: bool
    repairs: list[str] = field(default_factory=list)


def repair_json(text: str, max_size: int | None = None) -> JsonRepairResult:
    """
    Repair truncated JSON by closing strings and open brackets.

    Steps stop as soon as the text balances:
    1. Already balanced input is returned unchanged.
    2. An unterminated string gets its closing quote.
    3. One trailing incomplete fragment (comma, key, partial value) is dropped.
    4. Still-open ``{`` / ``[`` are closed, last opened first.

    Args:
        text: JSON text, usually cut off mid-stream
        max_size: Size ceiling in characters (default: settings.max_json_repair_size)

    Returns:
        JsonRepairResult with the repaired text and a list of repairs made

    Raises:
        InputTooLargeError: If the input exceeds the ceiling
    """
    limit = max_size or settings.max_json_repair_size
    if len(text) > limit:
        raise InputTooLargeError(len(text), limit, what="JSON")

    report = is_balanced(text)
    if report.balanced:
        return JsonRepairResult(json=text, was_repaired=False)

    repairs: list[str] = []
    repaired = text.strip()
    report = is_balanced(repaired)

    if report.in_string:
        # A lone trailing backslash would escape the quote we add
        trailing = len(repaired) - len(repaired.rstrip("\\"))
        if trailing % 2 == 1:
            repaired = repaired[:-1]
        repaired += report.string_char or '"'
        repairs.append("Closed unclosed string")
        report = is_balanced(repaired)

    if not report.balanced:
        for pattern, description in TRAILING_PATTERNS:
            if pattern.search(repaired):
                repaired = pattern.sub("", repaired, count=1)
                repairs.append(description)
                break
        else:
            innermost = report.open_stack[-1] if report.open_stack else None
            if innermost == "{" and _DANGLING_KEY.search(repaired):
                repaired = _DANGLING_KEY.sub("", repaired, count=1)
                repairs.append("Removed dangling object key")
            elif innermost == "[" and _PARTIAL_ELEMENT.search(repaired):
                repaired = _PARTIAL_ELEMENT.sub("", repaired, count=1)
                repairs.append("Removed partial array element")
        report = is_balanced(repaired)

    if report.open_stack:
        repaired += report.closers
        repairs.append(f"Closed {len(report.open_stack)} unclosed bracket(s)")

    if repairs:
        logger.debug("Repaired JSON", repairs=repairs, original_length=len(text))

    return JsonRepairResult(json=repaired, was_repaired=bool(repairs), repairs=repairs)


def parse_json_with_repair(text: str, max_size: int | None = None) -> tuple[Any, bool, str | None]:
    """
    Parse JSON, repairing it first if the direct parse fails.

    Returns:
        (data, repaired, error); data is None and error is set when both attempts fail
    """
    try:
        return json.loads(text), False, None
    except json.JSONDecodeError:
        pass

    try:
        result = repair_json(text, max_size=max_size)
        return json.loads(result.json), result.was_repaired, None
    except (json.JSONDecodeError, InputTooLargeError) as e:
        return None, False, str(e)
