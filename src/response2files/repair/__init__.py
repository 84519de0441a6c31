"""Balance scanning, JSON repair and syntax auto-repair."""

from .auto_repair import RepairOutcome, RepairPipeline, aggressive_fix, quick_validate, safe_apply
from .balance import BalanceReport, BalanceScanner, find_balanced_end, is_balanced, iter_scan
from .import_merge import merge_duplicate_imports
from .json_repair import JsonRepairResult, parse_json_with_repair, repair_json
from .syntax_repair import (
    fix_arrow_functions,
    fix_attribute_quoting,
    fix_bracket_balance,
    fix_conditional_expressions,
    fix_declarations,
)
from .tag_balance import fix_tag_balance

__all__ = [
    "BalanceReport",
    "BalanceScanner",
    "JsonRepairResult",
    "RepairOutcome",
    "RepairPipeline",
    "aggressive_fix",
    "find_balanced_end",
    "fix_arrow_functions",
    "fix_attribute_quoting",
    "fix_bracket_balance",
    "fix_conditional_expressions",
    "fix_declarations",
    "fix_tag_balance",
    "is_balanced",
    "iter_scan",
    "merge_duplicate_imports",
    "parse_json_with_repair",
    "quick_validate",
    "repair_json",
    "safe_apply",
]
