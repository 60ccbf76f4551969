"""Depth-bounded dependency walk used to find indirect circular references."""

import logging
from typing import Optional

from ..sheets.accessor import DocumentAccessor
from ..sheets.notation import split_sheet_prefix
from .models import Reference
from .references import extract_references

logger = logging.getLogger(__name__)


def normalize_address(cell_ref: str) -> str:
    """Drop any sheet prefix and $ anchors from a cell reference."""
    _, cells = split_sheet_prefix(cell_ref.strip())
    return cells.replace("$", "").upper()


def _fetch_formula(accessor: DocumentAccessor, ref: Reference) -> Optional[str]:
    """Read a precedent's formula; unresolvable cells are leaves."""
    try:
        return accessor.get_formula(ref.cells)
    except Exception as e:
        logger.debug(f"Treating {ref.raw} as a leaf: {e}")
        return None


def find_indirect_cycle(
    formula: str,
    cell_ref: str,
    accessor: DocumentAccessor,
    max_depth: int = 2,
    sheet_name: Optional[str] = None,
) -> Optional[list[str]]:
    """
    Search the precedents of a formula for a path leading back to its cell.

    The formula's own references sit at depth 0. A reference already on the
    current path closes a cycle; otherwise it is expanded through the accessor
    while its depth is below ``max_depth``. Anything deeper is not explored,
    so a cycle longer than ``max_depth + 1`` hops can go unreported.
    References into other sheets are not followed; ones qualified with
    ``sheet_name`` are followed as local references.

    Args:
        formula: Formula text of the starting cell
        cell_ref: A1 notation of the starting cell
        accessor: Document accessor used to read precedent formulas
        max_depth: Number of hops expanded beyond the formula's own references
        sheet_name: Name of the sheet holding the starting cell

    Returns:
        The cycle as a list of addresses starting and ending at ``cell_ref``,
        or None when no cycle was found within the bound
    """
    origin = normalize_address(cell_ref)
    path = [origin]
    visited = {origin}

    def walk(ref: Reference, depth: int) -> Optional[list[str]]:
        if not ref.on_sheet(sheet_name):
            return None
        node = ref.cells
        if node in visited:
            return path + [node]
        if depth >= max_depth:
            return None

        path.append(node)
        visited.add(node)
        try:
            target_formula = _fetch_formula(accessor, ref)
            if target_formula:
                for target_ref in extract_references(target_formula):
                    found = walk(target_ref, depth + 1)
                    if found:
                        return found
        finally:
            path.pop()
            visited.discard(node)
        return None

    for ref in extract_references(formula):
        found = walk(ref, 0)
        if found:
            return found
    return None
