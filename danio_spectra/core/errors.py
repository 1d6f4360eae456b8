# danio_spectra/core/errors.py
from __future__ import annotations
import logging
from typing import Callable

_LOG = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Fatal: missing inputs, bad bounds, unusable paths."""


class AlignmentError(Exception):
    """Fatal: one or more tables do not line up with the trimmed wavelength axis."""

    def __init__(self, mismatches: dict[str, int], axis_length: int):
        self.mismatches = dict(mismatches)
        self.axis_length = int(axis_length)
        detail = ", ".join(f"{fid} ({n} rows)" for fid, n in sorted(self.mismatches.items()))
        super().__init__(
            f"row count differs from wavelength axis length {self.axis_length}: {detail}"
        )


class PipelineWarning(UserWarning):
    """Per-file, non-fatal condition. Collected on the run result."""

    def __init__(self, file_id: str | None, message: str):
        self.file_id = file_id
        self.message = message
        super().__init__(f"{file_id}: {message}" if file_id else message)


class FileReadWarning(PipelineWarning):
    pass


class ShortTableWarning(PipelineWarning):
    pass


class NoSignalColumnsWarning(PipelineWarning):
    pass


class ExportWriteWarning(PipelineWarning):
    pass


Sink = Callable[[PipelineWarning], None]


def log_sink(warning: PipelineWarning) -> None:
    _LOG.warning("[%s] %s", type(warning).__name__, warning)


class WarningCollector:
    """Accumulates warnings for one run and forwards each one to the caller's sink."""

    def __init__(self, sink: Sink | None = None):
        self.sink = sink or log_sink
        self.items: list[PipelineWarning] = []

    def emit(self, warning: PipelineWarning) -> None:
        self.items.append(warning)
        self.sink(warning)

    def extend(self, warnings) -> None:
        for w in warnings:
            self.emit(w)

    def __len__(self) -> int:
        return len(self.items)
