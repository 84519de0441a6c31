"""
String-aware bracket balance scanning.

Every component that needs to know "is this character inside a string" or
"which brackets are still open" goes through BalanceScanner, so string and
escape handling lives in exactly one place.
"""

from dataclasses import dataclass, field
from typing import Iterator

OPENERS = {"{": "}", "[": "]", "(": ")"}
CLOSERS = {"}": "{", "]": "[", ")": "("}

# Stack token for a ``${`` expression inside a template literal
TEMPLATE_EXPR = "${"

JSON_QUOTES = '"'
CODE_QUOTES = "\"'`"


@dataclass
class BalanceReport:
    """Scanner state at the end of a text."""

    balanced: bool
    in_string: bool
    open_stack: list[str] = field(default_factory=list)
    string_char: str | None = None
    in_comment: bool = False  # inside an unterminated block comment
    unmatched_closers: int = 0

    @property
    def closers(self) -> str:
        """Closing characters for the open stack, last opened first."""
        return closing_sequence(self.open_stack)


@dataclass
class ScanStep:
    """One character of a scan, with the state in effect before it is consumed."""

    index: int
    char: str
    code: bool
    depth: int


class BalanceScanner:
    """
    Incremental scanner tracking strings, escapes, comments and bracket nesting.

    JSON mode (the default) only knows double-quoted strings. Code mode adds
    single quotes, template literals with ``${}`` expressions, ``//`` and
    ``/* */`` comments, and treats a quote directly after a letter or digit
    as an apostrophe in prose (``Don't``) rather than a string opener.
    """

    def __init__(self, code: bool = False):
        self.code = code
        self.quotes = CODE_QUOTES if code else JSON_QUOTES
        self.stack: list[str] = []
        self.string_char: str | None = None
        self.comment: str | None = None
        self.escaped = False
        self.unmatched_closers = 0
        self._prev = ""

    @property
    def in_string(self) -> bool:
        return self.string_char is not None

    @property
    def in_comment(self) -> bool:
        return self.comment is not None

    @property
    def at_code(self) -> bool:
        """True when the next character would be structural."""
        return self.string_char is None and self.comment is None

    def step(self, ch: str) -> None:
        """Consume one character."""
        prev = self._prev
        self._prev = ch

        if self.comment == "line":
            if ch == "\n":
                self.comment = None
            return
        if self.comment == "block":
            if ch == "/" and prev == "*":
                self.comment = None
            return

        if self.string_char is not None:
            self._step_string(ch, prev)
            return

        if self.code and prev == "/" and ch in "/*":
            self.comment = "line" if ch == "/" else "block"
            # "/*/" must not close the comment it just opened
            self._prev = ""
            return

        if ch in self.quotes:
            if self.code and ch == "'" and (prev.isalnum() or prev == "_"):
                return
            self.string_char = ch
            return

        if ch in OPENERS:
            self.stack.append(ch)
        elif ch in CLOSERS:
            top = self.stack[-1] if self.stack else None
            if ch == "}" and top == TEMPLATE_EXPR:
                self.stack.pop()
                self.string_char = "`"
            elif top == CLOSERS[ch]:
                self.stack.pop()
            else:
                self.unmatched_closers += 1

    def _step_string(self, ch: str, prev: str) -> None:
        if self.escaped:
            self.escaped = False
            return
        if ch == "\\":
            self.escaped = True
            return
        if ch == self.string_char:
            self.string_char = None
            return
        if self.string_char == "`":
            if ch == "{" and prev == "$":
                self.stack.append(TEMPLATE_EXPR)
                self.string_char = None
            return
        # Plain JS strings cannot span lines
        if self.code and ch == "\n":
            self.string_char = None

    def feed(self, text: str) -> "BalanceScanner":
        for ch in text:
            self.step(ch)
        return self

    def report(self) -> BalanceReport:
        return BalanceReport(
            balanced=(
                not self.stack
                and self.string_char is None
                and self.comment != "block"
                and self.unmatched_closers == 0
            ),
            in_string=self.string_char is not None,
            open_stack=list(self.stack),
            string_char=self.string_char,
            in_comment=self.comment == "block",
            unmatched_closers=self.unmatched_closers,
        )


def closing_sequence(stack: list[str]) -> str:
    """Closers for an open stack, innermost first."""
    closers = []
    for token in reversed(stack):
        closers.append("}`" if token == TEMPLATE_EXPR else OPENERS[token])
    return "".join(closers)


def is_balanced(text: str, code: bool = False) -> BalanceReport:
    """
    Scan a whole text and report its balance state.

    Args:
        text: JSON or source text
        code: Use code rules (single quotes, template literals, comments)

    Returns:
        BalanceReport for the end of the text
    """
    return BalanceScanner(code=code).feed(text).report()


def iter_scan(text: str, start: int = 0, code: bool = False) -> Iterator[ScanStep]:
    """Yield each character from ``start`` with the scanner state before it."""
    scanner = BalanceScanner(code=code)
    for index in range(start, len(text)):
        ch = text[index]
        yield ScanStep(index=index, char=ch, code=scanner.at_code, depth=len(scanner.stack))
        scanner.step(ch)


def code_mask(text: str, code: bool = True) -> list[bool]:
    """Per-character flags: True where the character sits outside strings and comments."""
    return [step.code for step in iter_scan(text, code=code)]


def find_balanced_end(text: str, start: int, code: bool = False) -> int:
    """
    Find the end of the bracketed region opening at ``start``.

    Args:
        text: Text to scan
        start: Index of an opening ``{``, ``[`` or ``(``

    Returns:
        Index just past the matching closer, or -1 if the region never closes
    """
    if start < 0 or start >= len(text) or text[start] not in OPENERS:
        return -1

    scanner = BalanceScanner(code=code)
    for index in range(start, len(text)):
        scanner.step(text[index])
        if not scanner.stack and scanner.at_code:
            return index + 1
        if scanner.unmatched_closers:
            return -1
    return -1
