"""Pre-compiled patterns shared by detection and the extractors."""

import re

# Byte-order mark and invisible characters models sometimes emit first
BOM_CHARS = re.compile(r"^[\ufeff\u200b-\u200d\u00a0]+")

# Marker format
META_MARKER = re.compile(r"<!--\s*META\s*-->")
FILE_MARKER = re.compile(r"<!--\s*FILE:")
PLAN_MARKER = re.compile(r"<!--\s*PLAN\s*-->")
EXPLANATION_MARKER = re.compile(r"<!--\s*EXPLANATION\s*-->")

MARKER_PATH = r"[\w./@-]+\.[A-Za-z0-9]+"
FILE_OPENING = re.compile(rf"<!--\s*FILE:({MARKER_PATH})\s*-->")
# Body may not contain another FILE opening, so a block never swallows its successor
FILE_WELL_FORMED = re.compile(
    rf"<!--\s*FILE:(?P<path>{MARKER_PATH})\s*-->"
    r"(?P<body>(?:(?!<!--\s*FILE:).)*?)"
    r"<!--\s*/FILE:(?P=path)\s*-->",
    re.DOTALL,
)
# Any delimiter other than a FILE opening ends a still-streaming file
NON_FILE_DELIMITER = re.compile(
    r"<!--\s*(?:/FILE:[^>]*?|/?(?:BATCH|META|PLAN|EXPLANATION|MANIFEST|GENERATION_META))\s*-->"
)


def marker_block(name: str) -> re.Pattern:
    """Pattern for a complete ``<!-- NAME -->...<!-- /NAME -->`` block."""
    return re.compile(rf"<!--\s*{name}\s*-->(.*?)<!--\s*/{name}\s*-->", re.DOTALL)


# JSON format
PLAN_COMMENT_START = re.compile(r"^//\s*PLAN:\s*(?=\{)")
LEADING_CODE_BLOCK = re.compile(r"^```(?:json)?[ \t]*\n?(.*?)\n?```", re.DOTALL)
JSON_FORMAT = re.compile(r'"format"\s*:\s*"json"', re.IGNORECASE)
JSON_VERSION = re.compile(r'"version"\s*:\s*"2\.0"', re.IGNORECASE)
BATCH_OBJECT = re.compile(r'"batch"\s*:\s*\{')
MANIFEST_ARRAY = re.compile(r'"manifest"\s*:\s*\[')
FILES_OBJECT = re.compile(r'"files"\s*:\s*[{\[]')
FILE_CHANGES = re.compile(r'"fileChanges"\s*:\s*\{')
EXPLANATION_KEY = re.compile(r'"explanation"\s*:')

# Fallback format
SOURCE_CODE_BLOCK = re.compile(r"```(?:tsx?|jsx?|typescript|javascript)\b")


def strip_bom(text: str) -> str:
    return BOM_CHARS.sub("", text)
