"""Replacement-formula generation for diagnostics that support a fix."""

import re
from typing import Optional

from .models import Suggestion
from .references import WHOLE_COLUMN_PATTERN, mask_string_literals

# Common misspellings seen behind #NAME? errors
FUNCTION_TYPOS = {
    "VLOKUP": "VLOOKUP",
    "HLOKUP": "HLOOKUP",
    "COUNTIFF": "COUNTIF",
    "SUMIFF": "SUMIF",
    "AVERGE": "AVERAGE",
    "CONCATINATE": "CONCATENATE",
    "IFERORR": "IFERROR",
}

REF_PLACEHOLDER = "A1"

_XLOOKUP_CALL = re.compile(r"XLOOKUP\(([^,()]+),([^,()]+),([^,()]+)\)", re.IGNORECASE)
_TEXTJOIN_OPEN = re.compile(r"(?<![A-Za-z0-9_.])TEXTJOIN\(", re.IGNORECASE)
_IF_OPEN = re.compile(r"\bIF\(", re.IGNORECASE)


def replace_function(formula: str, name: str, replacement: str) -> str:
    """Replace every call-position occurrence of a function name."""
    pattern = re.compile(rf"(?<![A-Za-z0-9_.]){re.escape(name)}(?=\s*\()", re.IGNORECASE)
    return pattern.sub(replacement, formula)


def xlookup_rewrites(formula: str) -> list[Suggestion]:
    """Offer VLOOKUP and INDEX/MATCH forms of an XLOOKUP formula."""
    suggestions = [
        Suggestion(
            description="Replace with VLOOKUP",
            formula=replace_function(formula, "XLOOKUP", "VLOOKUP"),
        )
    ]
    index_match = _XLOOKUP_CALL.sub(
        lambda m: f"INDEX({m.group(3).strip()},MATCH({m.group(1).strip()},{m.group(2).strip()},0))",
        formula,
    )
    if index_match != formula:
        suggestions.append(
            Suggestion(description="Replace with INDEX/MATCH", formula=index_match)
        )
    return suggestions


def concatenatex_rewrites(formula: str) -> list[Suggestion]:
    return [
        Suggestion(
            description="Replace with CONCATENATE",
            formula=replace_function(formula, "CONCATENATEX", "CONCATENATE"),
        )
    ]


def textjoin_rewrites(formula: str) -> list[Suggestion]:
    """JOIN takes no ignore_empty flag, so drop it along with the rename."""
    rewritten = formula
    match = _TEXTJOIN_OPEN.search(rewritten)
    while match:
        close = _matching_paren(rewritten, match.end() - 1)
        if close is None:
            break
        args = split_arguments(rewritten[match.end():close])
        if len(args) >= 3:
            args = [args[0]] + args[2:]
        rewritten = f"{rewritten[:match.start()]}JOIN({', '.join(args)}){rewritten[close + 1:]}"
        match = _TEXTJOIN_OPEN.search(rewritten, match.start() + len("JOIN("))
    rewritten = replace_function(rewritten, "TEXTJOIN", "JOIN")
    return [Suggestion(description="Replace with JOIN", formula=rewritten)]


def broken_reference_rewrites(formula: str) -> list[Suggestion]:
    return [
        Suggestion(
            description="Check if referenced cells were deleted",
            formula=formula.replace("#REF!", REF_PLACEHOLDER),
        )
    ]


def value_error_rewrites(formula: str) -> list[Suggestion]:
    return [Suggestion(description="Check data types in referenced cells", formula=formula)]


def function_name_corrections(formula: str) -> list[Suggestion]:
    """Fuzzy-correct known function-name typos behind a #NAME? error."""
    suggestions = []
    for wrong, correct in FUNCTION_TYPOS.items():
        if wrong in formula.upper():
            suggestions.append(
                Suggestion(
                    description=f"Correct {wrong} to {correct}",
                    formula=re.sub(re.escape(wrong), correct, formula, flags=re.IGNORECASE),
                )
            )
    return suggestions


def remove_tokens(formula: str, spans: list[tuple[int, int]]) -> str:
    """Cut the given character spans out of a formula."""
    result = formula
    for start, end in sorted(spans, reverse=True):
        result = result[:start] + result[end:]
    return result


def bound_whole_columns(formula: str, max_row: int) -> str:
    """Turn every whole-column range (A:B) outside quoted text into A1:B<max_row>."""
    result = formula
    matches = list(WHOLE_COLUMN_PATTERN.finditer(mask_string_literals(formula)))
    for match in reversed(matches):
        bounded = f"{match.group(1)}1:{match.group(2)}{max_row}"
        result = result[: match.start()] + bounded + result[match.end() :]
    return result


def split_arguments(args: str) -> list[str]:
    """Split a function's argument text on top-level commas."""
    parts = []
    current = ""
    depth = 0
    in_string = False
    for char in args:
        if char == '"':
            in_string = not in_string
        elif char == "(" and not in_string:
            depth += 1
        elif char == ")" and not in_string:
            depth -= 1
        elif char == "," and not in_string and depth == 0:
            parts.append(current.strip())
            current = ""
            continue
        current += char
    parts.append(current.strip())
    return parts


def _matching_paren(text: str, open_index: int) -> Optional[int]:
    depth = 0
    in_string = False
    for i in range(open_index, len(text)):
        char = text[i]
        if char == '"':
            in_string = not in_string
        elif in_string:
            continue
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return i
    return None


def _flatten_if_chain(call: str) -> Optional[list[str]]:
    """Collect condition/value pairs down the else-branch of nested IFs."""
    match = _IF_OPEN.match(call)
    if not match:
        return None
    close = _matching_paren(call, match.end() - 1)
    if close != len(call) - 1:
        return None
    args = split_arguments(call[match.end():close])
    if len(args) < 2 or len(args) > 3:
        return None
    branches = [args[0], args[1]]
    if len(args) == 2:
        return branches
    nested = _flatten_if_chain(args[2])
    if nested is not None:
        return branches + nested
    return branches + ["TRUE", args[2]]


def convert_to_ifs(formula: str) -> Optional[str]:
    """Rewrite the first nested IF chain as a single IFS call.

    IF(a,x,IF(b,y,z)) becomes IFS(a,x,b,y,TRUE,z). Returns None when the
    chain cannot be split (unbalanced parentheses, unusual arity).
    """
    match = _IF_OPEN.search(formula)
    if not match:
        return None
    close = _matching_paren(formula, match.end() - 1)
    if close is None:
        return None
    branches = _flatten_if_chain(formula[match.start():close + 1])
    if branches is None:
        return None
    ifs = f"IFS({', '.join(branches)})"
    return formula[:match.start()] + ifs + formula[close + 1:]
