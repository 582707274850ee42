"""
Normalization pipeline.

Responsibilities:
- encoding detection (UTF-8 with or without BOM, charset-normalizer fallback)
- newline normalization
- per row: tokenize -> reconcile width -> apply field rules -> assemble
- header passthrough, optional BOM on output
- pass report
"""

from __future__ import annotations

import base64
import hashlib
import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from charset_normalizer import from_bytes

from .engine import RuleTable, build_rule_table, summarize_bindings
from .errors import ConfigurationError, InputReadError
from .models import NormalizationReport, NormalizerConfig
from .reconcile import classify_width, reconcile
from .report import PassCounters, build_report
from .rules import LINE_TERMINATOR, PLAIN_ENCODING, TARGET_ENCODING, UTF8_BOM
from .tokenizer import is_blank, split_lines, tokenize

logger = logging.getLogger(__name__)

NumberedLine = Tuple[int, str]


@dataclass
class NormalizationResult:
    content: bytes
    report: NormalizationReport
    table: RuleTable

    @property
    def encoding(self) -> str:
        return TARGET_ENCODING if self.content.startswith(UTF8_BOM) else PLAIN_ENCODING

    @property
    def sha256(self) -> str:
        return _sha256_hex(self.content)


def _sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def decode_input(raw: bytes) -> Tuple[str, Dict[str, Any]]:
    """
    Decode input bytes to text.

    Rules:
    - UTF-8 (with or without BOM) is the expected input and is decoded strictly.
    - Anything else goes through charset-normalizer's best guess.
    - If no guess decodes cleanly the pass fails; text is never replaced silently.
    """
    had_bom = raw.startswith(UTF8_BOM)
    detected = None

    try:
        text = raw.decode("utf-8-sig")
        decode_used = "utf-8-sig" if had_bom else "utf-8"
    except UnicodeDecodeError as exc:
        match = from_bytes(raw).best()
        if match is None:
            raise InputReadError("input is not valid UTF-8 and no encoding could be detected") from exc
        detected = match.encoding
        try:
            text = raw.decode(detected)
        except (UnicodeDecodeError, LookupError) as inner:
            raise InputReadError(f"input could not be decoded as detected encoding {detected!r}") from inner
        decode_used = detected
        logger.warning("input is not UTF-8; decoded as %s", detected)

    # A BOM can survive decoding with a non-UTF-8 codec guess.
    text = text.lstrip("\ufeff")

    return text, {
        "input_bom": had_bom,
        "detected": detected,
        "decode_used": decode_used,
        "decode_fallback": detected is not None,
    }


def _newline_counts(text: str) -> Dict[str, int]:
    return {
        "crlf": text.count("\r\n"),
        "cr": text.count("\r") - text.count("\r\n"),
        "lf": text.count("\n") - text.count("\r\n"),
    }


def _normalize_row(line: str, table: RuleTable, separator: str) -> Tuple[List[str], str, int, List[str]]:
    tokens = tokenize(line, separator)
    outcome = classify_width(tokens, table.width)
    row = reconcile(tokens, table.width)
    row, changed = table.apply(row)
    return row, outcome, len(tokens), changed


def _process_partition(
    lines: Sequence[NumberedLine],
    table: RuleTable,
    separator: str,
) -> Tuple[List[str], PassCounters]:
    out: List[str] = []
    counters = PassCounters()

    for line_no, line in lines:
        if is_blank(line):
            counters.record_blank(line_no)
            continue

        row, outcome, seen, changed = _normalize_row(line, table, separator)
        assembled = separator.join(row)
        if is_blank(assembled):
            # Reads back as a blank line on the next pass (W == 1 or a
            # whitespace separator).
            counters.record_blank(line_no, issue="blank_after_normalization", value=line)
            continue

        counters.record_width(line_no, outcome, seen, table.width)
        group_key = row[table.grouping_index] if table.grouping_index is not None else None
        counters.record_row(group_key, changed)
        if changed:
            logger.debug("line %d: rules changed %s", line_no, ", ".join(changed))

        out.append(assembled)

    return out, counters


def _partition(items: Sequence[NumberedLine], parts: int) -> List[Sequence[NumberedLine]]:
    if parts <= 1 or len(items) <= 1:
        return [items]
    size = math.ceil(len(items) / parts)
    return [items[start:start + size] for start in range(0, len(items), size)]


def normalize_text(text: str, config: NormalizerConfig) -> Tuple[str, PassCounters, RuleTable]:
    """Run the pipeline over decoded text and return the assembled output text."""
    lines = split_lines(text)
    if not lines:
        raise ConfigurationError("input has no header row; the schema cannot be resolved")

    header = lines[0]
    # Fail fast: a rule that cannot be located aborts before any row is processed.
    table = build_rule_table(header, config)

    numbered = list(enumerate(lines[1:], start=2))
    chunks = _partition(numbered, config.partitions)

    if len(chunks) == 1:
        results = [_process_partition(chunks[0], table, config.separator)]
    else:
        with ThreadPoolExecutor(max_workers=len(chunks)) as pool:
            # map() yields in submission order, so output keeps input order.
            results = list(pool.map(lambda chunk: _process_partition(chunk, table, config.separator), chunks))

    counters = PassCounters()
    body: List[str] = []
    for rows, partial in results:
        body.extend(rows)
        counters.merge(partial)

    out_lines = [header, *body]
    return "".join(line + LINE_TERMINATOR for line in out_lines), counters, table


def normalize_bytes(raw: bytes, config: Optional[NormalizerConfig] = None) -> NormalizationResult:
    config = config or NormalizerConfig()

    text, enc_report = decode_input(raw)
    nl_before = _newline_counts(text)

    out_text, counters, table = normalize_text(text, config)

    content = out_text.encode(TARGET_ENCODING if config.emit_bom else PLAIN_ENCODING)

    normalizations = {
        "encoding": {
            **enc_report,
            "output": "utf-8-bom" if config.emit_bom else "utf-8",
        },
        "newlines": {
            "policy": "lf",
            "before": nl_before,
            "changed": (nl_before["crlf"] > 0) or (nl_before["cr"] > 0),
        },
        "row_width": {
            "expected_columns": table.width,
            "header_columns": len(table.header),
            "policy": {
                "short_rows": "pad",
                "long_rows": "truncate",
                "output_columns": "expected_columns",
            },
        },
        "rules": summarize_bindings(table),
        "partitions": config.partitions,
    }

    report = build_report(
        counters,
        width=table.width,
        rule_names=table.rule_names,
        grouping=table.grouping_index is not None,
        normalizations=normalizations,
    )
    return NormalizationResult(content=content, report=report, table=table)


def normalize_csv_bytes(raw: bytes, config: Optional[NormalizerConfig] = None) -> Dict[str, Any]:
    """
    Run a pass in memory.
    Returns a dict matching the API's response envelope.
    """
    result = normalize_bytes(raw, config)

    b64 = base64.b64encode(result.content).decode("ascii")
    return {
        "normalized_csv": {
            "sha256": result.sha256,
            "encoding": result.encoding,
            "content_b64": b64,
        },
        "report": result.report.model_dump(),
    }
