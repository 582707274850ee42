"""
Configuration loading.

A pass is configured by a ``NormalizerConfig``. Documents can come from YAML
or JSON files or plain dicts; any validation failure surfaces as
``ConfigurationError`` so callers handle a single fatal type.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from .errors import ConfigurationError
from .models import NormalizerConfig

# Header label of the second visit status column (index 23 in the 26-column export).
VISIT_STATUS_LABEL = "حالة الزيارة"

VISIT_CONFIG: Dict[str, Any] = {
    "schema_width": 26,
    "separator": ",",
    "rules": [
        {"name": "overall-status", "column": 24, "kind": "contains-collapse", "match": "passed"},
        {"name": "data-source", "column": 25, "kind": "contains-collapse", "match": "system-import"},
        {
            "name": "visit-status",
            "column": VISIT_STATUS_LABEL,
            "kind": "exact-rewrite",
            "match": "passed",
            "replace": "completed",
        },
    ],
    "grouping_column": 2,
    "emit_bom": True,
}


def build_config(data: Optional[Dict[str, Any]]) -> NormalizerConfig:
    try:
        return NormalizerConfig.model_validate(data or {})
    except ValidationError as exc:
        raise ConfigurationError(f"invalid configuration: {exc}") from exc


def default_visit_config() -> NormalizerConfig:
    return build_config(VISIT_CONFIG)


def load_config(path: Path) -> NormalizerConfig:
    config_path = Path(path)
    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"cannot read configuration file {config_path}: {exc}") from exc

    try:
        if config_path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"cannot parse configuration file {config_path}: {exc}") from exc

    if data is not None and not isinstance(data, dict):
        raise ConfigurationError(f"configuration file {config_path} must hold a mapping")
    return build_config(data)


def with_overrides(config: NormalizerConfig, **overrides: Any) -> NormalizerConfig:
    """Return a copy with every non-None override applied and revalidated."""
    data = config.model_dump()
    data.update({key: value for key, value in overrides.items() if value is not None})
    return build_config(data)
