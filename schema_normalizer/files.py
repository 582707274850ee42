"""
File-backed passes.

The input is read in full, the pass runs in memory, and only a successful
pass is committed: every output (the CSV and, optionally, its JSON report) is
staged in a temporary file beside its target, and the targets are replaced
with ``os.replace`` only once all of them are staged. Any failure before the
commit leaves every target untouched.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .errors import InputReadError, OutputWriteError
from .models import NormalizerConfig
from .normalize import NormalizationResult, normalize_bytes
from .report import report_json_bytes

logger = logging.getLogger(__name__)


def read_input(path: Path) -> bytes:
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        raise InputReadError(f"cannot read input file {path}: {exc}", path=str(path)) from exc


def _stage(output_path: Path, content: bytes) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{output_path.stem}.",
        suffix=output_path.suffix,
        dir=str(output_path.parent),
    )
    with os.fdopen(fd, "wb") as handle:
        handle.write(content)
    return Path(tmp_name)


def write_atomic_many(outputs: Dict[Path, bytes]) -> None:
    """Stage every output first, then move them into place."""
    staged: List[Tuple[Path, Path]] = []
    current: Optional[Path] = None
    try:
        for path, content in outputs.items():
            current = Path(path)
            staged.append((_stage(current, content), current))
        for temp_path, output_path in staged:
            current = output_path
            os.replace(temp_path, output_path)
    except OSError as exc:
        raise OutputWriteError(f"cannot write output file {current}: {exc}", path=str(current)) from exc
    finally:
        for temp_path, _ in staged:
            if temp_path.exists():
                temp_path.unlink()


def write_atomic(path: Path, content: bytes) -> None:
    write_atomic_many({Path(path): content})


def normalize_file(
    input_path: Path,
    output_path: Path,
    config: Optional[NormalizerConfig] = None,
    report_path: Optional[Path] = None,
) -> NormalizationResult:
    """Normalize ``input_path`` into ``output_path``; nothing is written on failure."""
    raw = read_input(input_path)
    result = normalize_bytes(raw, config)

    outputs = {Path(output_path): result.content}
    if report_path is not None:
        outputs[Path(report_path)] = report_json_bytes(result.report)
    write_atomic_many(outputs)

    logger.info(
        "wrote %s (%d data rows, %d bytes)",
        output_path,
        result.report.summary.rows,
        len(result.content),
    )
    if report_path is not None:
        logger.info("report written: %s", report_path)
    return result
