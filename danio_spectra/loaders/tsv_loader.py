# danio_spectra/loaders/tsv_loader.py
from __future__ import annotations
from pathlib import Path
import io, logging
import pandas as pd

from ..core.errors import FileReadWarning, WarningCollector
from ..core.model import RawFile
from ..core.settings import PipelineSettings
from ..utils.detect import DetectedItem, file_id_from_path

_LOG = logging.getLogger(__name__)


class FileFormatError(ValueError):
    """Header and body of one file do not agree."""


# ---------- parsing helpers ----------
def _read_header(buff: bytes) -> tuple[str, ...]:
    row = pd.read_csv(io.BytesIO(buff), sep="\t", header=None, nrows=1, dtype=str)
    labels = ["" if pd.isna(v) else str(v).strip() for v in row.iloc[0].tolist()]
    # exports end every line with a tab, which yields an empty trailing label
    while labels and labels[-1] == "":
        labels.pop()
    if not labels:
        raise FileFormatError("empty header row")
    return tuple(labels)


def _read_body(buff: bytes, skip_rows: int) -> pd.DataFrame:
    body = pd.read_csv(io.BytesIO(buff), sep="\t", header=None, skiprows=skip_rows)
    return body


def _drop_trailing_empty(body: pd.DataFrame, width: int) -> pd.DataFrame:
    while body.shape[1] > width and body.iloc[:, -1].isna().all():
        body = body.iloc[:, :-1]
    return body


def read_raw_file(path: Path, skip_rows: int) -> RawFile:
    """
    Header = first record, body = every record after ``skip_rows`` lines.
    Raises on anything that makes the file unusable.
    """
    buff = Path(path).read_bytes()
    buff.decode("utf-8")  # surface encoding problems here, not deep inside pandas
    header = _read_header(buff)
    body = _drop_trailing_empty(_read_body(buff, skip_rows), len(header))
    if body.shape[1] != len(header):
        raise FileFormatError(
            f"unexpected column count: header has {len(header)}, body has {body.shape[1]}"
        )
    body.columns = range(body.shape[1])
    return RawFile(
        id=file_id_from_path(Path(path)),
        header=header,
        body=body.reset_index(drop=True),
        source_path=Path(path),
    )


# ---------- public loader ----------
def load(item: DetectedItem, settings: PipelineSettings,
         collector: WarningCollector | None = None) -> RawFile | None:
    """
    Read one detected file. Read failures become a FileReadWarning and
    ``None`` is returned so the caller drops the file and carries on.
    """
    try:
        raw = read_raw_file(item.path, settings.skip_rows)
    except (OSError, ValueError) as e:
        w = FileReadWarning(item.file_id, f"dropped, could not read {item.path.name}: {e}")
        if collector is not None:
            collector.emit(w)
        else:
            _LOG.warning("%s", w)
        return None
    _LOG.info("[load] %s: %d rows x %d columns", raw.id, raw.row_count, len(raw.header))
    return raw


def load_all(items: list[DetectedItem], settings: PipelineSettings,
             collector: WarningCollector | None = None) -> list[RawFile]:
    records: list[RawFile] = []
    for item in items:
        raw = load(item, settings, collector)
        if raw is not None:
            records.append(raw)
    return records
