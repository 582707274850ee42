"""
Column reconciler.

Width correction only: rows longer than the schema keep their first ``width``
tokens (later ones are stale copies appended by earlier export passes), rows
shorter than the schema are padded with empty values. Values are never
inspected here.
"""

from __future__ import annotations

from typing import List, Literal, Sequence

WidthOutcome = Literal["exact", "truncated", "padded"]


def classify_width(tokens: Sequence[str], width: int) -> WidthOutcome:
    if len(tokens) > width:
        return "truncated"
    if len(tokens) < width:
        return "padded"
    return "exact"


def reconcile(tokens: Sequence[str], width: int) -> List[str]:
    row = list(tokens[:width])
    if len(row) < width:
        row.extend([""] * (width - len(row)))
    return row
