"""Multi-round syntax auto-repair with a validate-or-revert safety net."""

import re
from dataclasses import dataclass, field
from typing import Callable

import structlog

from ..config import settings
from .balance import is_balanced
from .import_merge import merge_duplicate_imports
from .syntax_repair import (
    fix_arrow_functions,
    fix_attribute_quoting,
    fix_bracket_balance,
    fix_conditional_expressions,
    fix_declarations,
    search_in_code,
)
from .tag_balance import fix_tag_balance

logger = structlog.get_logger(__name__)

RepairPass = Callable[[str], str]

# Order matters: "= >" must be normalised before hybrid functions are detected,
# and closers are appended only after every other pass has run.
DEFAULT_PASSES: list[tuple[str, RepairPass]] = [
    ("Merged duplicate imports", merge_duplicate_imports),
    ("Fixed arrow function syntax", fix_arrow_functions),
    ("Fixed attribute quoting", fix_attribute_quoting),
    ("Fixed conditional expressions", fix_conditional_expressions),
    ("Fixed declarations", fix_declarations),
    ("Fixed bracket balance", fix_bracket_balance),
    ("Fixed unclosed tags", fix_tag_balance),
]

# Residue that means a repair left the code broken
BAD_PATTERNS = [
    re.compile(r"=\s+>"),
    re.compile(r"(?<=\s)className\"[^\"]"),
    re.compile(r"[\w$]\??[ \t]*:[ \t]*:(?!:)"),
]


@dataclass
class RepairOutcome:
    """
    Result of running the pipeline over an owned copy of the code.

    Callers decide what to keep: ``commit()`` returns the repaired code,
    ``discard()`` the untouched original.
    """

    original: str
    code: str
    fixes_applied: list[str] = field(default_factory=list)
    rounds: int = 0

    @property
    def changed(self) -> bool:
        return self.code != self.original

    def commit(self) -> str:
        return self.code

    def discard(self) -> str:
        return self.original


class RepairPipeline:
    """Runs every pass in order, repeating until a round changes nothing."""

    def __init__(self, passes: list[tuple[str, RepairPass]] | None = None, max_rounds: int | None = None):
        self.passes = passes if passes is not None else DEFAULT_PASSES
        self.max_rounds = max_rounds or settings.auto_repair_max_rounds

    def run(self, code: str) -> RepairOutcome:
        outcome = RepairOutcome(original=code, code=code)

        for round_number in range(1, self.max_rounds + 1):
            before = outcome.code
            for description, repair in self.passes:
                repaired = repair(outcome.code)
                if repaired != outcome.code:
                    outcome.fixes_applied.append(f"Pass {round_number}: {description}")
                    outcome.code = repaired
            outcome.rounds = round_number
            if outcome.code == before:
                break

        return outcome


def aggressive_fix(code: str, max_rounds: int | None = None) -> RepairOutcome:
    """Run the default pipeline without validation."""
    return RepairPipeline(max_rounds=max_rounds).run(code)


def quick_validate(code: str) -> bool:
    """
    Cheap sanity check for repaired code.

    Brackets must balance outside strings and comments, no string may be left
    open, and none of the known-bad residual patterns may remain.
    """
    if not is_balanced(code, code=True).balanced:
        return False
    return not any(search_in_code(pattern, code) for pattern in BAD_PATTERNS)


def safe_apply(code: str) -> str:
    """
    Repair code, keeping the result only if it validates.

    Returns:
        Repaired code, or the original when nothing changed or the repair
        fails quick_validate
    """
    outcome = aggressive_fix(code)
    if not outcome.changed:
        return code

    if quick_validate(outcome.code):
        logger.debug("Applied syntax repairs", fixes=outcome.fixes_applied)
        return outcome.commit()

    logger.debug("Syntax repair failed validation, reverting", fixes=outcome.fixes_applied)
    return outcome.discard()
