"""
Record tokenizer.

Splits the decoded stream into lines and each line into raw field values.
There is no quoting: a separator inside a value is a field boundary.
"""

from __future__ import annotations

from typing import List

from .rules import NORMALIZED_DELIMITER


def normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def split_lines(text: str) -> List[str]:
    """Return the stream's lines; a final terminator does not add a blank line."""
    if not text:
        return []
    lines = normalize_newlines(text).split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def is_blank(line: str) -> bool:
    return not line.strip()


def tokenize(line: str, separator: str = NORMALIZED_DELIMITER) -> List[str]:
    return line.split(separator)


def header_width(header: str, separator: str = NORMALIZED_DELIMITER) -> int:
    return len(tokenize(header, separator))
