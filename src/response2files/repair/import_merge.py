"""Merge repeated ES module imports from the same source."""

import re
from dataclasses import dataclass, field

_IMPORT_LINE = re.compile(
    r"^\s*import\s+(?P<type>type\s+)?"
    r"(?:(?P<namespace>\*\s+as\s+\w+)|(?P<default>[A-Za-z_$][\w$]*))?\s*,?\s*"
    r"(?:\{(?P<named>[^}]*)\})?\s*"
    r"from\s+['\"](?P<source>[^'\"]+)['\"]\s*;?\s*$"
)


@dataclass
class ImportInfo:
    """A single-line import statement."""

    source: str
    line: int
    default: str | None = None
    namespace: str | None = None
    named: list[str] = field(default_factory=list)
    type_only: bool = False


def parse_imports(code: str) -> list[ImportInfo]:
    """Parse single-line ``import ... from '...'`` statements."""
    imports = []
    for number, line in enumerate(code.split("\n")):
        if "import" not in line:
            continue
        match = _IMPORT_LINE.match(line)
        if not match:
            continue
        default, namespace, named = match.group("default", "namespace", "named")
        if not (default or namespace or named is not None):
            continue
        imports.append(
            ImportInfo(
                source=match.group("source"),
                line=number,
                default=default,
                namespace=re.sub(r"^\*\s+as\s+", "", namespace) if namespace else None,
                named=[name.strip() for name in (named or "").split(",") if name.strip()],
                type_only=bool(match.group("type")),
            )
        )
    return imports


def _merge_group(source: str, group: list[ImportInfo]) -> str | None:
    namespaces = {imp.namespace for imp in group if imp.namespace}
    defaults = {imp.default for imp in group if imp.default}
    if len(namespaces) > 1 or len(defaults) > 1:
        return None

    type_only = all(imp.type_only for imp in group)
    named: list[str] = []
    for imp in group:
        for name in imp.named:
            specifier = f"type {name}" if imp.type_only and not type_only and not name.startswith("type ") else name
            if specifier not in named and name not in named:
                named.append(specifier)

    namespace = next(iter(namespaces), None)
    default = next(iter(defaults), None)
    prefix = "type " if type_only else ""

    if namespace:
        if named:
            return None
        head = f"{default}, * as {namespace}" if default else f"* as {namespace}"
    elif default and named:
        head = f"{default}, {{ {', '.join(named)} }}"
    elif default:
        head = default
    else:
        head = f"{{ {', '.join(named)} }}"
    return f"import {prefix}{head} from '{source}';"


def merge_duplicate_imports(code: str) -> str:
    """
    Merge imports that pull from the same module into one statement.

    The merged statement replaces the first import of that module; later
    duplicates are dropped. Sources imported once are left untouched.
    """
    by_source: dict[str, list[ImportInfo]] = {}
    for imp in parse_imports(code):
        by_source.setdefault(imp.source, []).append(imp)

    replacements: dict[int, str | None] = {}
    for source, group in by_source.items():
        if len(group) < 2:
            continue
        merged = _merge_group(source, group)
        if merged is None:
            continue
        replacements[group[0].line] = merged
        for imp in group[1:]:
            replacements[imp.line] = None

    if not replacements:
        return code

    lines = []
    for number, line in enumerate(code.split("\n")):
        if number not in replacements:
            lines.append(line)
        elif replacements[number] is not None:
            indent = line[: len(line) - len(line.lstrip())]
            lines.append(indent + replacements[number])
    return "\n".join(lines)
