"""
Field rule engine.

Rules are bound to columns once per pass: integer references are checked
against the schema width, label references are looked up in the header row.
The resulting ``RuleTable`` is read-only for the rest of the pass.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from .errors import ConfigurationError
from .models import ColumnRef, NormalizerConfig, RuleConfig
from .rules import RULE_KINDS, RuleFunc
from .tokenizer import header_width, tokenize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoundRule:
    name: str
    index: int
    kind: str
    match: str
    replace: str
    func: RuleFunc

    def apply(self, value: str) -> str:
        return self.func(value, self.match, self.replace)


@dataclass(frozen=True)
class RuleTable:
    width: int
    header: Tuple[str, ...]
    rules: Tuple[BoundRule, ...]
    grouping_index: Optional[int] = None

    @property
    def rule_names(self) -> List[str]:
        return [rule.name for rule in self.rules]

    def apply(self, row: Sequence[str]) -> Tuple[List[str], List[str]]:
        """Apply every bound rule in declaration order.

        Returns the new row and the names of the rules that changed a value.
        """
        out = list(row)
        changed: List[str] = []
        for rule in self.rules:
            before = out[rule.index]
            after = rule.apply(before)
            if after != before:
                out[rule.index] = after
                changed.append(rule.name)
        return out, changed


def resolve_column(
    ref: ColumnRef,
    labels: Sequence[str],
    width: int,
    *,
    owner: str,
) -> int:
    """Turn an index or header label into a column index within ``[0, width)``."""
    if isinstance(ref, int):
        if not 0 <= ref < width:
            raise ConfigurationError(
                f"{owner}: column index {ref} is outside the schema width {width}",
                rule=owner,
                column=ref,
            )
        return ref

    wanted = ref.strip()
    hits = [i for i, label in enumerate(labels) if label.strip() == wanted]
    if not hits:
        raise ConfigurationError(
            f"{owner}: header has no column labelled {wanted!r}",
            rule=owner,
            column=ref,
        )
    if len(hits) > 1:
        raise ConfigurationError(
            f"{owner}: label {wanted!r} matches several header columns {hits}",
            rule=owner,
            column=ref,
        )
    index = hits[0]
    if index >= width:
        raise ConfigurationError(
            f"{owner}: column {wanted!r} sits at index {index}, beyond the schema width {width}",
            rule=owner,
            column=ref,
        )
    return index


def _bind(rule: RuleConfig, labels: Sequence[str], width: int) -> BoundRule:
    index = resolve_column(rule.column, labels, width, owner=f"rule {rule.label}")
    replace = rule.replace if rule.replace is not None else rule.match
    return BoundRule(
        name=rule.label,
        index=index,
        kind=rule.kind,
        match=rule.match,
        replace=replace,
        func=RULE_KINDS[rule.kind],
    )


def build_rule_table(header: str, config: NormalizerConfig) -> RuleTable:
    """Resolve the configuration against a header line.

    Raises ``ConfigurationError`` before any data row is touched when a rule
    or the grouping column cannot be located.
    """
    labels = tokenize(header, config.separator)
    width = config.schema_width or header_width(header, config.separator)

    bound = [_bind(rule, labels, width) for rule in config.rules]

    names = [rule.name for rule in bound]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ConfigurationError(f"rule names must be unique, repeated: {duplicates}")

    grouping_index = None
    if config.grouping_column is not None:
        grouping_index = resolve_column(config.grouping_column, labels, width, owner="grouping_column")

    for rule in bound:
        logger.debug("bound %s to column %d (%s)", rule.name, rule.index, labels[rule.index] if rule.index < len(labels) else "")

    return RuleTable(
        width=width,
        header=tuple(labels),
        rules=tuple(bound),
        grouping_index=grouping_index,
    )


def summarize_bindings(table: RuleTable) -> Dict[str, int]:
    return {rule.name: rule.index for rule in table.rules}
