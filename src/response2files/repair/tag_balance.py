"""Element tag scanning and closing-tag repair for JSX-like markup."""

import re
from dataclasses import dataclass

import structlog

from .balance import code_mask, find_balanced_end

logger = structlog.get_logger(__name__)

# Elements that never take a closing tag
VOID_ELEMENTS = frozenset(
    {"area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "track", "wbr"}
)

_TAG_NAME = re.compile(r"[A-Za-z][\w.:-]*")
_GENERIC_TAIL = re.compile(r"\s*(?:,|extends\b)")
_CLOSE_END = re.compile(r"\s*>")
_TRAILING_RUN = re.compile(r"[\s)\]};]*$")
_STATEMENT_HINT = re.compile(r";|\b(?:const|let|var|return|function|export|import|if|else|for|while)\b")


@dataclass
class Tag:
    """One element tag found in source text."""

    name: str  # "" for fragments
    kind: str  # "open", "close" or "self"
    start: int
    end: int


def _is_tag_position(text: str, index: int) -> bool:
    if index > 0:
        prev = text[index - 1]
        # Generics and comparisons: Array<T>, foo<Bar>(), i<n
        if prev.isalnum() or prev in "_.)]$":
            return False
    return True


def read_tag(text: str, index: int) -> Tag | None:
    """
    Read the tag starting at ``text[index] == "<"``.

    Attribute values in quotes or braces are skipped as a whole, so a ``>``
    inside ``onClick={() => a > b}`` does not end the tag.

    Returns:
        Tag, or None if this is not a complete tag
    """
    if index >= len(text) or text[index] != "<":
        return None

    pos = index + 1
    # Closing tags may follow text directly: Hello</div>
    if text.startswith("/", pos):
        match = _TAG_NAME.match(text, pos + 1)
        name = match.group(0) if match else ""
        rest = _CLOSE_END.match(text, match.end() if match else pos + 1)
        if not rest:
            return None
        return Tag(name=name, kind="close", start=index, end=rest.end())

    if not _is_tag_position(text, index):
        return None

    if text.startswith(">", pos):
        return Tag(name="", kind="open", start=index, end=pos + 1)

    match = _TAG_NAME.match(text, pos)
    if not match or _GENERIC_TAIL.match(text, match.end()):
        return None
    name = match.group(0)

    pos = match.end()
    while pos < len(text):
        ch = text[pos]
        if ch in "\"'":
            close = text.find(ch, pos + 1)
            if close == -1:
                return None
            pos = close + 1
            continue
        if ch == "{":
            end = find_balanced_end(text, pos, code=True)
            if end == -1:
                return None
            pos = end
            continue
        if text.startswith("/>", pos):
            return Tag(name=name, kind="self", start=index, end=pos + 2)
        if ch == ">":
            if text[pos - 1] == "=":
                return None
            kind = "self" if name.lower() in VOID_ELEMENTS else "open"
            return Tag(name=name, kind=kind, start=index, end=pos + 1)
        if ch in "<;()":
            return None
        pos += 1
    return None


def iter_tags(text: str) -> list[Tag]:
    """All tags outside strings and comments, in document order."""
    mask = code_mask(text)
    tags: list[Tag] = []
    index = text.find("<")
    while index != -1:
        tag = read_tag(text, index) if mask[index] else None
        if tag:
            tags.append(tag)
            index = text.find("<", tag.end)
        else:
            index = text.find("<", index + 1)
    return tags


def find_unclosed_tags(tags: list[Tag]) -> list[Tag]:
    """
    Match closing tags against opening tags.

    A closing tag pops everything above its matching opener; closing tags
    with no opener are ignored.
    """
    stack: list[Tag] = []
    for tag in tags:
        if tag.kind == "open":
            stack.append(tag)
        elif tag.kind == "close":
            for i in range(len(stack) - 1, -1, -1):
                if stack[i].name == tag.name:
                    del stack[i:]
                    break
    return stack


def element_end(text: str, start: int) -> int:
    """
    Index just past the element whose opening tag starts at ``start``.

    Returns -1 if the element is not complete.
    """
    first = read_tag(text, start)
    if first is None or first.kind == "close":
        return -1
    if first.kind == "self":
        return first.end

    depth = 0
    for tag in iter_tags(text[start:]):
        if tag.kind == "open" and tag.name == first.name:
            depth += 1
        elif tag.kind == "close" and tag.name == first.name:
            depth -= 1
            if depth == 0:
                return start + tag.end
    return -1


def fix_tag_balance(code: str) -> str:
    """
    Close unterminated elements.

    Missing closing tags are inserted, innermost first, just before the
    trailing run of closing brackets and semicolons. Nothing is inserted
    when statements follow the last tag, since the right spot is then
    ambiguous.
    """
    tags = iter_tags(code)
    unclosed = find_unclosed_tags(tags)
    if not unclosed:
        return code

    last_tag_end = tags[-1].end
    insert_at = _TRAILING_RUN.search(code, last_tag_end).start()
    if _STATEMENT_HINT.search(code, last_tag_end, insert_at):
        return code

    closers = "".join(f"</{tag.name}>" for tag in reversed(unclosed))
    logger.debug("Closing unterminated tags", tags=[t.name or "<>" for t in unclosed])
    return code[:insert_at] + closers + code[insert_at:]
