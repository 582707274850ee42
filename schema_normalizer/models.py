from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from .rules import MATCH_REQUIRED, NORMALIZED_DELIMITER, REPLACE_REQUIRED

RuleKind = Literal["contains-collapse", "exact-rewrite", "fill-empty", "date-format"]
ColumnRef = Union[int, str]


class RuleConfig(BaseModel):
    column: ColumnRef
    kind: RuleKind
    match: str = ""
    replace: Optional[str] = None
    name: Optional[str] = None

    @model_validator(mode="after")
    def _check_kind_arguments(self) -> "RuleConfig":
        if self.kind in MATCH_REQUIRED and not self.match:
            raise ValueError(f"rule kind {self.kind!r} needs a non-empty 'match'")
        if self.kind in REPLACE_REQUIRED and self.replace is None:
            raise ValueError(f"rule kind {self.kind!r} needs a 'replace' value")
        return self

    @property
    def label(self) -> str:
        if self.name:
            return self.name
        target = self.replace if self.replace is not None else self.match
        return f"{self.kind}[{self.column}]->{target}"


class NormalizerConfig(BaseModel):
    schema_width: Optional[int] = Field(default=None, examples=[26])
    separator: str = NORMALIZED_DELIMITER
    rules: List[RuleConfig] = Field(default_factory=list)
    grouping_column: Optional[ColumnRef] = None
    emit_bom: bool = True
    partitions: int = 1

    @field_validator("schema_width")
    @classmethod
    def _positive_width(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value <= 0:
            raise ValueError("schema_width must be positive")
        return value

    @field_validator("separator")
    @classmethod
    def _single_char_separator(cls, value: str) -> str:
        if len(value) != 1 or value in "\r\n":
            raise ValueError("separator must be a single non-newline character")
        return value

    @field_validator("partitions")
    @classmethod
    def _positive_partitions(cls, value: int) -> int:
        if value < 1:
            raise ValueError("partitions must be at least 1")
        return value


class NormalizedCsv(BaseModel):
    sha256: str
    encoding: str = Field(default="utf-8-sig")
    content_b64: str


class ReportSummary(BaseModel):
    rows: int = 0
    columns: Optional[int] = Field(default=None, examples=[26])
    blank_lines: int = 0
    rows_truncated: int = 0
    rows_padded: int = 0
    rows_changed: int = 0
    warnings: int = 0
    deterministic: bool = True


class ReportItem(BaseModel):
    row: Optional[int] = None
    column: Optional[str] = None
    issue: str
    value: Optional[str] = None
    action: str


class NormalizationReport(BaseModel):
    summary: ReportSummary
    groups: Dict[str, int] = Field(default_factory=dict)
    rule_changes: Dict[str, int] = Field(default_factory=dict)
    normalizations: Dict[str, Any] = Field(default_factory=dict)
    warnings: List[ReportItem] = Field(default_factory=list)


class NormalizeResponse(BaseModel):
    normalized_csv: NormalizedCsv
    report: NormalizationReport

class HealthResponse(BaseModel):
    ok: bool = True
