# danio_spectra/core/export.py
from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
import logging
import re
import pandas as pd

from .aggregate import bin_wavelengths, filter_wavelength_range
from .errors import ExportWriteWarning, Sink, WarningCollector
from .model import EXPORT_COLUMNS, ExportResult
from .settings import PipelineSettings

_LOG = logging.getLogger(__name__)


def _safe_name(name: str) -> str:
    # composite ids come from file stems and header labels; only path separators are unsafe
    return re.sub(r"[\\/]+", "_", name)


def create_color_worker_format(summary: pd.DataFrame, min_wavelength: float,
                               max_wavelength: float) -> pd.DataFrame:
    """
    Map tidy rows onto the five-field Color Worker layout:
    Wavelength = NM_rounded, Type = Body, X = Y = 0, ID = file id + Body.
    """
    rows = filter_wavelength_range(summary, min_wavelength, max_wavelength)
    out = pd.DataFrame({
        "Wavelength": rows["NM_rounded"].astype("int64"),
        "Type": rows["Body"].astype(str),
        "X": 0,
        "Y": 0,
        "ID": rows["ID"].astype(str) + rows["Body"].astype(str),
    }, columns=EXPORT_COLUMNS)
    return out


def _write_partition(part: pd.DataFrame, out_path: Path) -> Path:
    # no header and no index: the downstream reader is positional
    part.to_csv(out_path, header=False, index=False, encoding="utf-8")
    return out_path


def generate_color_worker_files(records: pd.DataFrame, output_dir: Path,
                                extension: str = "csv", max_workers: int = 1,
                                collector: WarningCollector | None = None) -> ExportResult:
    """
    Write one ``<ID>.<extension>`` file per composite id.
    Existing files are overwritten. Creating ``output_dir`` may raise
    OSError; a failure on one partition is recorded and the others are
    still written.
    """
    collector = collector or WarningCollector()
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    ext = extension.lstrip(".")

    jobs = [
        (str(cid), part[EXPORT_COLUMNS], output_dir / f"{_safe_name(str(cid))}.{ext}")
        for cid, part in records.groupby("ID", sort=True)
    ]
    result = ExportResult()

    def _run(job):
        cid, part, out_path = job
        try:
            return cid, _write_partition(part, out_path), None
        except OSError as e:
            return cid, out_path, e

    if max_workers > 1 and len(jobs) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            outcomes = list(pool.map(_run, jobs))
    else:
        outcomes = [_run(job) for job in jobs]

    for cid, out_path, err in outcomes:
        if err is None:
            result.written.append(out_path)
            _LOG.info("Generated: %s", out_path)
        else:
            result.failed[cid] = str(err)
            collector.emit(ExportWriteWarning(cid, f"could not write {out_path}: {err}"))

    result.warnings = list(collector.items)
    _LOG.info("[export] %d file(s) written to %s, %d failed",
              len(result.written), output_dir, len(result.failed))
    return result


def export_color_worker(summary: pd.DataFrame, settings: PipelineSettings,
                        sink: Sink | None = None) -> ExportResult:
    """Bin, filter, map and write the Color Worker files described by ``settings``."""
    collector = WarningCollector(sink)
    binned = bin_wavelengths(summary, settings.export_step)
    records = create_color_worker_format(
        binned, settings.export_min_wavelength, settings.export_max_wavelength
    )
    _LOG.info("[export] %d rows, %d unique ids", len(records), records["ID"].nunique())
    return generate_color_worker_files(
        records,
        settings.export_dir,
        extension=settings.export_extension,
        max_workers=settings.export_workers,
        collector=collector,
    )


def read_export_file(path: Path) -> pd.DataFrame:
    """Read one headerless export file back with its column names."""
    return pd.read_csv(path, header=None, names=EXPORT_COLUMNS, dtype={"Type": str, "ID": str})
