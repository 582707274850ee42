"""
Report emitter.

Counters only observe rows; they never alter them. Each partition of a pass
owns its own ``PassCounters`` and the partitions are merged in input order.
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from .models import NormalizationReport, ReportItem, ReportSummary

logger = logging.getLogger(__name__)


@dataclass
class PassCounters:
    rows: int = 0
    blank_lines: int = 0
    rows_truncated: int = 0
    rows_padded: int = 0
    rows_changed: int = 0
    groups: Counter = field(default_factory=Counter)
    rule_changes: Counter = field(default_factory=Counter)
    warnings: List[Dict[str, Any]] = field(default_factory=list)

    def record_blank(self, line_no: int, issue: str = "blank_line", value: Optional[str] = None) -> None:
        self.blank_lines += 1
        self.warnings.append({
            "row": line_no,
            "column": None,
            "issue": issue,
            "value": value,
            "action": "skipped",
        })

    def record_width(self, line_no: int, outcome: str, seen: int, width: int) -> None:
        if outcome == "truncated":
            self.rows_truncated += 1
            self.warnings.append({
                "row": line_no,
                "column": None,
                "issue": "row_too_long",
                "value": str(seen),
                "action": f"truncated_to_{width}",
            })
        elif outcome == "padded":
            self.rows_padded += 1
            self.warnings.append({
                "row": line_no,
                "column": None,
                "issue": "row_too_short",
                "value": str(seen),
                "action": f"padded_to_{width}",
            })

    def record_row(self, group_key: Optional[str], changed_rules: Iterable[str]) -> None:
        self.rows += 1
        if group_key is not None:
            self.groups[group_key] += 1
        changed = list(changed_rules)
        if changed:
            self.rows_changed += 1
            self.rule_changes.update(changed)

    def merge(self, other: "PassCounters") -> "PassCounters":
        self.rows += other.rows
        self.blank_lines += other.blank_lines
        self.rows_truncated += other.rows_truncated
        self.rows_padded += other.rows_padded
        self.rows_changed += other.rows_changed
        self.groups.update(other.groups)
        self.rule_changes.update(other.rule_changes)
        self.warnings.extend(other.warnings)
        return self


def build_report(
    counters: PassCounters,
    *,
    width: int,
    rule_names: List[str],
    grouping: bool,
    normalizations: Optional[Dict[str, Any]] = None,
) -> NormalizationReport:
    warnings = [ReportItem(**item) for item in counters.warnings]
    return NormalizationReport(
        summary=ReportSummary(
            rows=counters.rows,
            columns=width,
            blank_lines=counters.blank_lines,
            rows_truncated=counters.rows_truncated,
            rows_padded=counters.rows_padded,
            rows_changed=counters.rows_changed,
            warnings=len(warnings),
        ),
        # Sorted by key; every configured rule shows up, including zero counts.
        groups={key: counters.groups[key] for key in sorted(counters.groups)} if grouping else {},
        rule_changes={name: counters.rule_changes.get(name, 0) for name in rule_names},
        normalizations=normalizations or {},
        warnings=warnings,
    )


def report_json_bytes(report: NormalizationReport) -> bytes:
    payload = json.dumps(report.model_dump(), indent=2, ensure_ascii=False, sort_keys=True)
    return (payload + "\n").encode("utf-8")


def emit_report(report: NormalizationReport, log: Optional[logging.Logger] = None) -> None:
    """Write the pass summary to the log channel."""
    log = log or logger
    summary = report.summary
    log.info("=== NORMALIZATION SUMMARY ===")
    log.info("Data rows: %d (schema width %s)", summary.rows, summary.columns)
    log.info("Blank lines skipped: %d", summary.blank_lines)
    log.info("Rows truncated: %d, rows padded: %d", summary.rows_truncated, summary.rows_padded)
    log.info("Rows changed by rules: %d", summary.rows_changed)
    for name, count in report.rule_changes.items():
        log.info("Rule %s: %d rows changed", name, count)
    if report.groups:
        log.info("Grouped counts:")
        for key, count in report.groups.items():
            log.info("  %s: %d", key, count)
