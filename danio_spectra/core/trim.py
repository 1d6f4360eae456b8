# danio_spectra/core/trim.py
from __future__ import annotations
import logging

from .errors import ConfigurationError, ShortTableWarning, WarningCollector
from .model import SignalTable, WavelengthAxis
from .settings import PipelineSettings

_LOG = logging.getLogger(__name__)


def trim_table(table: SignalTable, settings: PipelineSettings,
               collector: WarningCollector | None = None) -> SignalTable:
    """
    Keep rows (start, end] (1-based) of a table with at least
    ``required_min_rows`` rows. Shorter tables are left untouched and
    flagged; cutting them would shift them against the axis.
    """
    n = table.row_count
    if n < settings.required_min_rows:
        w = ShortTableWarning(
            table.id,
            f"{n} rows < required {settings.required_min_rows}, not trimmed",
        )
        if collector is not None:
            collector.emit(w)
        else:
            _LOG.warning("%s", w)
        return table

    table.data = table.data.iloc[settings.filter_start:settings.filter_end].reset_index(drop=True)
    _LOG.debug("[trim] %s: %d -> %d rows", table.id, n, table.row_count)
    return table


def trim_axis(axis: WavelengthAxis, settings: PipelineSettings) -> WavelengthAxis:
    start, end = settings.wavelength_filter_start, settings.wavelength_filter_end
    if len(axis) < end:
        raise ConfigurationError(
            f"Wavelength axis has {len(axis)} values, cannot trim to ({start}, {end}]"
        )
    trimmed = WavelengthAxis(values=axis.values[start:end].copy(), source_path=axis.source_path)
    _LOG.info("Wavelength range: %.2f to %.2f nm (%d values)",
              float(trimmed.values.min()), float(trimmed.values.max()), len(trimmed))
    return trimmed
