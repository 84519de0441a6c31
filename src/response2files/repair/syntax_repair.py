"""
Textual repair passes for common code-generation mistakes.

Each pass targets one class of mistake and leaves text it does not
recognise untouched. Matches inside strings and comments are ignored.
"""

import re
from typing import Callable

from .balance import BalanceScanner, code_mask
from .tag_balance import element_end

Replacement = str | Callable[[re.Match], str]


def sub_in_code(pattern: re.Pattern, repl: Replacement, text: str) -> str:
    """Like ``pattern.sub`` but skips matches that start inside a string or comment."""
    if not pattern.search(text):
        return text
    mask = code_mask(text)

    def replace(match: re.Match) -> str:
        if not mask[match.start()]:
            return match.group(0)
        return match.expand(repl) if isinstance(repl, str) else repl(match)

    return pattern.sub(replace, text)


def search_in_code(pattern: re.Pattern, text: str) -> bool:
    """True if the pattern matches somewhere outside strings and comments."""
    matches = list(pattern.finditer(text))
    if not matches:
        return False
    mask = code_mask(text)
    return any(mask[m.start()] for m in matches)


# =============================================================================
# Arrow functions
# =============================================================================

_SPACED_ARROW = re.compile(r"=\s+>")
_HYBRID_FUNCTION = re.compile(
    r"\bfunction(?P<name>\s+[\w$]+)?\s*(?P<params>\([^()]*\))(?P<ret>\s*:\s*[^(){}=;]+?)?\s*=>\s*\{"
)
_SPACED_EMPTY_PARAMS = re.compile(r"\(\s+\)\s*=>")

_PARAMS = r"(?P<params>\([^()]*\))"
_RETURN_TYPE = r"(?P<ret>\s*:\s*[\w<>\[\]|.]+)?"
_MISSING_ARROW = [
    # const handler = (e) {
    re.compile(r"(?P<lead>(?<![=!<>])=(?!=)\s*(?:async\s*)?)" + _PARAMS + _RETURN_TYPE + r"\s*\{"),
    # items.map((item) {
    re.compile(r"(?P<lead>[(,]\s*(?:async\s*)?)" + _PARAMS + r"\s*\{"),
    # onClick={(e) {
    re.compile(r"(?P<lead>=\{\s*(?:async\s*)?)" + _PARAMS + r"\s*\{"),
    # { onSave: (value) {
    re.compile(r"(?P<lead>\b[\w$]+\s*:\s*(?:async\s*)?)" + _PARAMS + r"\s*\{"),
    # return (value) {
    re.compile(r"(?P<lead>\breturn\s+(?:async\s*)?)" + _PARAMS + r"\s*\{"),
]


def _insert_arrow(match: re.Match) -> str:
    ret = match.groupdict().get("ret") or ""
    return f"{match.group('lead')}{match.group('params')}{ret} => {{"


def fix_arrow_functions(code: str) -> str:
    """
    Repair arrow function syntax.

    ``= >`` is normalised first because the hybrid pattern below looks for
    a literal ``=>``.

    Examples:
        "const f = () { run(); }"        -> "const f = () => { run(); }"
        "function App() => {"            -> "function App() {"
        "list.map(( ) => x)"             -> "list.map(() => x)"
    """
    result = sub_in_code(_SPACED_ARROW, "=>", code)
    result = sub_in_code(_HYBRID_FUNCTION, r"function\g<name>\g<params>\g<ret> {", result)
    result = sub_in_code(_SPACED_EMPTY_PARAMS, "() =>", result)
    for pattern in _MISSING_ARROW:
        result = sub_in_code(pattern, _insert_arrow, result)
    return result


# =============================================================================
# Attribute quoting
# =============================================================================

STRING_ATTRIBUTES = (
    "className", "key", "href", "src", "alt", "id", "name", "type",
    "value", "placeholder", "htmlFor", "role", "title",
)

_ATTR_NAMES = "|".join(STRING_ATTRIBUTES)
_MISSING_EQUALS = re.compile(r"(?<=\s)(" + _ATTR_NAMES + r")(\"[^\"\n]*\"|'[^'\n]*')")
_EVENT_HANDLER = re.compile(r"(?<=\s)(on[A-Z]\w*)=?[\"']([A-Za-z_$][\w$.]*)[\"']")
_STYLE_STRING = re.compile(r"(?<=\s)style=?\"([^\"\n]*:[^\"\n]*)\"")
_DOUBLE_EQUALS = re.compile(r"(?<=\s)(" + _ATTR_NAMES + r"|style|on[A-Z]\w*)==(?=[\"'{])")
_TAG_OPENING = re.compile(r"<[A-Za-z]")


def _camel_case(prop: str) -> str:
    return re.sub(r"-([a-z])", lambda m: m.group(1).upper(), prop.strip())


def _style_object(match: re.Match) -> str:
    declarations = []
    for declaration in match.group(1).split(";"):
        if ":" not in declaration:
            continue
        prop, value = declaration.split(":", 1)
        value = value.strip().replace("'", "\\'")
        declarations.append(f"{_camel_case(prop)}: '{value}'")
    if not declarations:
        return match.group(0)
    return "style={{ " + ", ".join(declarations) + " }}"


def _inside_tag(text: str, index: int) -> bool:
    """True when ``index`` sits between an opening ``<Tag`` and its ``>``."""
    start = text.rfind("<", 0, index)
    if start == -1 or not _TAG_OPENING.match(text, start):
        return False
    between = text[start:index].replace("=>", "")
    return ">" not in between and ";" not in between


def _in_tag(repl: Replacement) -> Callable[[re.Match], str]:
    def replace(match: re.Match) -> str:
        if not _inside_tag(match.string, match.start()):
            return match.group(0)
        return match.expand(repl) if isinstance(repl, str) else repl(match)

    return replace


def fix_attribute_quoting(code: str) -> str:
    """
    Repair element attributes written without ``=`` or as strings.

    Examples:
        'className"card"'            -> 'className="card"'
        'onClick="handleClick"'      -> 'onClick={handleClick}'
        'style="color: red"'         -> "style={{ color: 'red' }}"
        'id=="main"'                 -> 'id="main"'
    """
    result = sub_in_code(_DOUBLE_EQUALS, _in_tag(r"\1="), code)
    result = sub_in_code(_MISSING_EQUALS, _in_tag(r"\1=\2"), result)
    result = sub_in_code(_EVENT_HANDLER, _in_tag(r"\1={\2}"), result)
    result = sub_in_code(_STYLE_STRING, _in_tag(_style_object), result)
    return result


# =============================================================================
# Conditional expressions
# =============================================================================

_ELSE_AND_ELEMENT = re.compile(
    r"(?P<colon>:\s*)(?P<cond>!?[\w$.]+(?:\s*(?:===|!==|==|!=|>=|<=|>|<)\s*[\w$.'\"]+)?\s*&&\s*)(?=<[A-Za-z])"
)
_TERNARY_ELEMENT = re.compile(r"\?\s*(?=<[A-Za-z])")
_CLOSING_BRACE = re.compile(r"\s*\}")


def _wrap_else_branches(code: str) -> str:
    mask = code_mask(code)
    pieces = []
    last = 0
    for match in _ELSE_AND_ELEMENT.finditer(code):
        if not mask[match.start()]:
            continue
        before = code[: match.start()].rstrip()
        if not before.endswith((">", ")")) or before.endswith("=>"):
            continue
        end = element_end(code, match.end())
        if end == -1:
            continue
        cond_start = match.start("cond")
        pieces.append(code[last:cond_start])
        pieces.append("(" + code[cond_start:end] + ")")
        last = end
    if not pieces:
        return code
    pieces.append(code[last:])
    return "".join(pieces)


def _add_missing_else(code: str) -> str:
    mask = code_mask(code)
    inserts = []
    for match in _TERNARY_ELEMENT.finditer(code):
        if not mask[match.start()]:
            continue
        end = element_end(code, match.end())
        if end != -1 and _CLOSING_BRACE.match(code, end):
            inserts.append(end)
    for position in reversed(inserts):
        code = code[:position] + " : null" + code[position:]
    return code


def fix_conditional_expressions(code: str) -> str:
    """
    Repair ternaries that render elements.

    Examples:
        "a ? <X /> : b && <Y />"  -> "a ? <X /> : (b && <Y />)"
        "{open ? <Modal />}"      -> "{open ? <Modal /> : null}"
    """
    return _add_missing_else(_wrap_else_branches(code))


# =============================================================================
# Declarations
# =============================================================================

_DOUBLED_COLON = re.compile(r"([\w$]\??)[ \t]*:[ \t]*:(?!:)[ \t]*")
_TRAILING_COMMA = re.compile(r",(\s*)\}")


def fix_declarations(code: str) -> str:
    """Collapse ``name: : Type`` annotations and drop a comma right before ``}``."""
    result = sub_in_code(_DOUBLED_COLON, r"\1: ", code)
    return sub_in_code(_TRAILING_COMMA, r"\1}", result)


# =============================================================================
# Bracket balance
# =============================================================================


def fix_bracket_balance(code: str) -> str:
    """
    Append closers for brackets still open at the end of the text.

    Never inserts mid-document. Text ending inside a string or block
    comment, or carrying stray closers, is left alone.
    """
    body = code.rstrip()
    tail = code[len(body) :]

    scanner = BalanceScanner(code=True).feed(body)
    if not scanner.stack or scanner.in_string or scanner.comment == "block" or scanner.unmatched_closers:
        return code

    report = scanner.report()
    separator = "\n" if scanner.comment == "line" else ""
    return body + separator + report.closers + tail
