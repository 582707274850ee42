"""
Deterministic field rules.

Every rule is a pure function ``(value, match, replace) -> value``. Applying a
rule to its own output is a no-op, and a rule that does not match returns the
value untouched.
"""

from __future__ import annotations

from typing import Callable, Dict, Optional

TARGET_ENCODING = "utf-8-sig"  # UTF-8 with BOM
PLAIN_ENCODING = "utf-8"
NORMALIZED_DELIMITER = ","
LINE_TERMINATOR = "\n"
UTF8_BOM = b"\xef\xbb\xbf"

MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

RuleFunc = Callable[[str, str, str], str]


def contains_collapse(value: str, match: str, replace: str) -> str:
    """Collapse a contaminated value, e.g. ``"passed,system-import"`` -> ``"passed"``."""
    if match in value:
        return replace
    return value


def exact_rewrite(value: str, match: str, replace: str) -> str:
    if value == match:
        return replace
    return value


def fill_empty(value: str, match: str, replace: str) -> str:
    if value == "":
        return replace
    return value


def _two_digits_to_year(year: str) -> str:
    if len(year) == 2:
        return "20" + year
    return year


def _parse_date_parts(value: str) -> Optional[tuple[str, int, str]]:
    if "-" in value:
        parts = value.split("-")
    elif "/" in value:
        parts = value.split("/")
    else:
        return None

    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        # dd-Mon-yyyy lands here too and is left as is
        return None

    if len(parts[0]) <= 2 and len(parts[1]) <= 2 and len(parts[2]) in (2, 4):
        day, month, year = parts
    elif len(parts[0]) == 4 and len(parts[1]) <= 2 and len(parts[2]) <= 2:
        year, month, day = parts
    else:
        return None

    month_index = int(month) - 1
    if not 0 <= month_index < 12 or not 1 <= int(day) <= 31:
        return None
    return day.zfill(2), month_index, _two_digits_to_year(year)


def reformat_date(value: str, match: str, replace: str) -> str:
    """Rewrite numeric dates to ``dd-Mon-yyyy``; anything unparseable is kept."""
    parsed = _parse_date_parts(value.strip())
    if parsed is None:
        return value
    day, month_index, year = parsed
    return f"{day}-{MONTHS[month_index]}-{year}"


RULE_KINDS: Dict[str, RuleFunc] = {
    "contains-collapse": contains_collapse,
    "exact-rewrite": exact_rewrite,
    "fill-empty": fill_empty,
    "date-format": reformat_date,
}

# Kinds whose ``match`` must be non-empty to mean anything.
MATCH_REQUIRED = frozenset({"contains-collapse", "exact-rewrite"})
# Kinds that need an explicit replacement value.
REPLACE_REQUIRED = frozenset({"exact-rewrite", "fill-empty"})
