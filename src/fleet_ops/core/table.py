#!/usr/bin/env python3
"""Flex table rendering for console output.

Pads every value to the width of the longest value in its column so the
columns line up, with a divider between the header and the rows.
"""

import sys
from enum import Enum
from typing import Any, List, Optional, Sequence, TextIO

from fleet_ops.utils.exceptions import ShapeMismatch

SEPARATOR = " | "


def cell_text(value: Any) -> str:
    """Display text for a renderable value: str, number, enum or None."""
    if value is None:
        return ""
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (str, int, float)):
        return str(value)
    raise TypeError(f"Cannot render value of type {type(value).__name__} in a table")


def _check_shape(headers: Sequence[str], rows: Sequence[Sequence[Any]]) -> None:
    for index, row in enumerate(rows):
        if len(row) != len(headers):
            raise ShapeMismatch(len(headers), len(row), index)


def column_widths(headers: Sequence[str], rows: Sequence[Sequence[Any]]) -> List[int]:
    widths = [len(cell_text(header)) for header in headers]
    for row in rows:
        for index, value in enumerate(row):
            widths[index] = max(widths[index], len(cell_text(value)))
    return widths


def _join(cells: Sequence[Any], widths: Sequence[int]) -> str:
    return SEPARATOR.join(
        cell_text(value).ljust(width) for value, width in zip(cells, widths)
    )


def format_table(headers: Sequence[str], rows: Sequence[Sequence[Any]]) -> List[str]:
    """
    Format a table as a list of lines.

    Args:
        headers: Column labels
        rows: Rows of values, each the same length as ``headers``

    Returns:
        Header line, divider line, then one line per row

    Raises:
        ShapeMismatch: If any row length differs from the header length
    """
    _check_shape(headers, rows)
    widths = column_widths(headers, rows)

    divider = "-" * (sum(widths) + len(SEPARATOR) * (len(headers) - 1))
    lines = [_join(headers, widths), divider]
    lines.extend(_join(row, widths) for row in rows)
    return lines


def render_table(
    headers: Sequence[str],
    rows: Sequence[Sequence[Any]],
    out: Optional[TextIO] = None,
) -> None:
    """Write a formatted table to ``out`` (stdout by default)."""
    # formatting validates everything before the first write
    lines = format_table(headers, rows)
    sink = out if out is not None else sys.stdout
    for line in lines:
        sink.write(line + "\n")
