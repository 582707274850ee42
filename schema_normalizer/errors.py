"""
Error taxonomy for a normalization pass.

Configuration and I/O errors are fatal: they abort the whole pass before any
output is committed. Blank rows are not errors; they are counted in the report.
"""

from __future__ import annotations


class NormalizerError(Exception):
    """Base class for every fatal condition raised by a pass."""


class ConfigurationError(NormalizerError):
    def __init__(self, message: str, *, rule: str | None = None, column: object = None) -> None:
        super().__init__(message)
        self.rule = rule
        self.column = column


class NormalizerIOError(NormalizerError):
    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class InputReadError(NormalizerIOError):
    pass


class OutputWriteError(NormalizerIOError):
    pass
