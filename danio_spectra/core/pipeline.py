# danio_spectra/core/pipeline.py
from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
import logging

from ..loaders import tsv_loader, wavelength_loader
from ..utils.detect import DetectedItem, discover_inputs
from .aggregate import calculate_averages, filter_wavelength_range
from .errors import PipelineWarning, Sink, WarningCollector
from .model import PipelineResult, SignalTable
from .plotting import save_all_plots
from .reconcile import measurement_counts, reconcile
from .reports import write_summary
from .settings import PipelineSettings
from .smoothing import smooth_table
from .trim import trim_axis, trim_table

_LOG = logging.getLogger(__name__)


def process_file(item: DetectedItem, settings: PipelineSettings
                 ) -> tuple[SignalTable | None, list[PipelineWarning]]:
    """
    Per-file chain: read → reconcile → trim → smooth.
    Owns its table until it is handed back; warnings are returned rather
    than emitted so the caller can report them in file order.
    """
    local = WarningCollector(sink=lambda w: None)
    raw = tsv_loader.load(item, settings, local)
    if raw is None:
        return None, local.items
    table = reconcile(raw, settings, local)
    table = trim_table(table, settings, local)
    table = smooth_table(table, settings.smoothing_window)
    return table, local.items


def process_files(items: list[DetectedItem], settings: PipelineSettings,
                  collector: WarningCollector) -> list[SignalTable]:
    if settings.workers > 1 and len(items) > 1:
        with ThreadPoolExecutor(max_workers=settings.workers) as pool:
            outcomes = list(pool.map(lambda it: process_file(it, settings), items))
    else:
        outcomes = [process_file(it, settings) for it in items]

    tables: list[SignalTable] = []
    for table, warnings in outcomes:
        collector.extend(warnings)
        if table is not None:
            tables.append(table)
    return tables


def run_pipeline(settings: PipelineSettings, sink: Sink | None = None) -> PipelineResult:
    """
    Run the analysis described by ``settings`` and return the tidy summary.

    Fatal: ConfigurationError (inputs/axis), AlignmentError (barrier).
    Everything else is collected on ``PipelineResult.warnings`` and passed
    to ``sink`` as it is reported.
    """
    collector = WarningCollector(sink)

    items = discover_inputs(settings.data_dir, settings.pattern)
    _LOG.info("[detector] found %d input file(s) in %s", len(items), settings.data_dir)

    axis = trim_axis(wavelength_loader.load(settings.wavelength_file), settings)

    _LOG.info("Reading and smoothing %d file(s) (window=%d, workers=%d)...",
              len(items), settings.smoothing_window, settings.workers)
    tables = process_files(items, settings, collector)
    if not tables:
        _LOG.warning("No readable input files left after loading; summary is empty.")

    measurements = measurement_counts(tables)
    _LOG.info("Measurement counts per file:\n%s", measurements.to_string(index=False))

    _LOG.info("Calculating averages...")
    averages = calculate_averages(tables, axis, settings.group_label)
    summary = filter_wavelength_range(averages, settings.min_wavelength, settings.max_wavelength)
    _LOG.info("Processing complete! Final dataset: %d rows, %d warning(s)", len(summary), len(collector))

    return PipelineResult(
        summary=summary,
        tables={t.id: t for t in tables},
        axis=axis,
        measurements=measurements,
        warnings=list(collector.items),
    )


def write_outputs(result: PipelineResult, settings: PipelineSettings) -> list[Path]:
    """Tidy artifact (csv/mat) plus the optional per-specimen plots."""
    written = write_summary(
        result.summary,
        settings.processed_file,
        fmt=settings.report_format,
        mat_variable=settings.mat_variable,
    )
    if settings.plots_dir is not None:
        written.extend(save_all_plots(result.summary, settings.plots_dir))
    return written
