# danio_spectra/core/reconcile.py
from __future__ import annotations
import logging
import pandas as pd

from .errors import NoSignalColumnsWarning, WarningCollector
from .model import RawFile, SignalTable
from .normalize import make_unique, to_float
from .settings import PipelineSettings

_LOG = logging.getLogger(__name__)


def reconcile(raw: RawFile, settings: PipelineSettings,
              collector: WarningCollector | None = None) -> SignalTable:
    """
    Label the body with its own header and keep the signal columns.
    With no signal column at all, every column is kept and a
    NoSignalColumnsWarning is emitted instead of returning an empty table.
    """
    if len(raw.header) != raw.body.shape[1]:
        # RawFile invariant, enforced by the loader
        raise ValueError(f"{raw.id}: header width {len(raw.header)} != body width {raw.body.shape[1]}")

    df = raw.body.copy()
    df.columns = make_unique(raw.header)

    keep = [c for c in df.columns if settings.is_signal_column(c)]
    if keep:
        df = df[keep]
    else:
        w = NoSignalColumnsWarning(raw.id, "no signal columns found, keeping all columns")
        if collector is not None:
            collector.emit(w)
        else:
            _LOG.warning("%s", w)

    data = pd.DataFrame({c: to_float(df[c]) for c in df.columns}, index=df.index)
    _LOG.debug("[reconcile] %s: %d of %d columns kept", raw.id, data.shape[1], len(raw.header))
    return SignalTable(id=raw.id, data=data.reset_index(drop=True), source_path=raw.source_path)


def measurement_counts(tables) -> pd.DataFrame:
    """Channels per file, in the order given."""
    tables = list(tables)
    return pd.DataFrame(
        {"ID": [t.id for t in tables], "Counts": [t.data.shape[1] for t in tables]},
        columns=["ID", "Counts"],
    )
