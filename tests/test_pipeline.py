from pathlib import Path
import tempfile
import unittest

import numpy as np
import pandas as pd
import yaml

from danio_spectra.core.errors import AlignmentError, ConfigurationError, ShortTableWarning
from danio_spectra.core.export import export_color_worker, read_export_file
from danio_spectra.core.pipeline import run_pipeline, write_outputs
from danio_spectra.core.reports import read_summary
from danio_spectra.core.settings import PipelineSettings
from danio_spectra.main import main

from helpers import channel_rows, linear_axis, write_tsv, write_wavelengths

HEADER = ["Time", "LD1", "LD2", "LU1"]


def _is_channel(label: str) -> bool:
    return label.startswith("L")


def _write_inputs(tmp: Path, n_rows=20, axis_len=24, files=("A", "B")):
    data_dir = tmp / "Experimental"
    data_dir.mkdir()
    for k, name in enumerate(files):
        rows = channel_rows(n_rows, {
            "LD1": lambda i, k=k: 10.0 + k,
            "LD2": lambda i, k=k: 20.0 + k,
            "LU1": lambda i: float(i),
        })
        write_tsv(data_dir / f"{name}.tsv", HEADER, rows, skip_rows=3)
    write_wavelengths(data_dir / "Wavelength.txt", linear_axis(axis_len, start=398.0, step=0.5))
    return data_dir


def _settings(tmp: Path, data_dir: Path, **kw) -> PipelineSettings:
    base = dict(
        data_dir=data_dir,
        wavelength_file=data_dir / "Wavelength.txt",
        skip_rows=3,
        required_min_rows=20,
        filter_start=2,
        filter_end=18,
        wavelength_filter_start=4,
        wavelength_filter_end=20,
        smoothing_window=3,
        min_wavelength=0,
        max_wavelength=1000,
        signal_column_policy=_is_channel,
        processed_file=tmp / "processed_spectral_data.csv",
        export_dir=tmp / "color_worker_output",
        export_min_wavelength=400,
        export_max_wavelength=700,
    )
    base.update(kw)
    return PipelineSettings(**base)


class PipelineEndToEndTests(unittest.TestCase):
    def test_two_files_are_smoothed_averaged_and_exported(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            settings = _settings(tmp, _write_inputs(tmp))
            seen = []

            result = run_pipeline(settings, sink=seen.append)

            self.assertEqual([], result.warnings)
            self.assertEqual([], seen)
            self.assertEqual({"A", "B"}, set(result.tables))
            self.assertTrue(all(t.row_count == len(result.axis) == 16 for t in result.tables.values()))
            self.assertEqual([3, 3], result.measurements["Counts"].tolist())

            summary = result.summary
            self.assertEqual(["ID", "Body", "NM_rounded", "Reflectance"], list(summary.columns))
            self.assertEqual({"LD", "LU"}, set(summary["Body"]))
            ld_a = summary[(summary["ID"] == "A") & (summary["Body"] == "LD")]
            ld_b = summary[(summary["ID"] == "B") & (summary["Body"] == "LD")]
            np.testing.assert_allclose(15.0, ld_a["Reflectance"].to_numpy())
            np.testing.assert_allclose(16.0, ld_b["Reflectance"].to_numpy())
            # no duplicate keys
            self.assertFalse(summary.duplicated(["ID", "Body", "NM_rounded"]).any())

            written = write_outputs(result, settings)
            self.assertEqual([settings.processed_file], written)
            back = read_summary(settings.processed_file)
            self.assertEqual(len(summary), len(back))

            exported = export_color_worker(result.summary, settings)
            self.assertEqual({"ALD.csv", "ALU.csv", "BLD.csv", "BLU.csv"},
                             {p.name for p in exported.written})
            ald = read_export_file(settings.export_dir / "ALD.csv")
            self.assertTrue((ald["Wavelength"] >= 400).all())
            self.assertEqual({"LD"}, set(ald["Type"]))

    def test_workers_do_not_change_the_result(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            data_dir = _write_inputs(tmp, files=("A", "B", "C"))
            serial = run_pipeline(_settings(tmp, data_dir))
            pooled = run_pipeline(_settings(tmp, data_dir, workers=3))
            pd.testing.assert_frame_equal(serial.summary, pooled.summary)

    def test_short_file_is_passed_through_and_then_breaks_alignment(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            data_dir = _write_inputs(tmp)
            rows = channel_rows(12, {"LD1": 1.0, "LD2": 2.0, "LU1": 3.0})
            write_tsv(data_dir / "C.tsv", HEADER, rows, skip_rows=3)
            seen = []
            with self.assertRaises(AlignmentError) as ctx:
                run_pipeline(_settings(tmp, data_dir), sink=seen.append)
            self.assertEqual({"C": 12}, ctx.exception.mismatches)
            self.assertEqual(1, len(seen))
            self.assertIsInstance(seen[0], ShortTableWarning)

    def test_axis_mismatch_names_both_files(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            data_dir = tmp / "Experimental"
            data_dir.mkdir()
            for name in ("A", "B"):
                rows = channel_rows(300, {"LD1": 1.0, "LD2": 2.0, "LU1": 3.0})
                write_tsv(data_dir / f"{name}.tsv", HEADER, rows, skip_rows=10)
            write_wavelengths(data_dir / "Wavelength.txt", linear_axis(320))
            settings = _settings(
                tmp, data_dir,
                skip_rows=10,
                required_min_rows=300,
                filter_start=10,
                filter_end=290,
                wavelength_filter_start=10,
                wavelength_filter_end=300,
            )
            with self.assertRaises(AlignmentError) as ctx:
                run_pipeline(settings)
            self.assertEqual({"A": 280, "B": 280}, ctx.exception.mismatches)
            self.assertEqual(290, ctx.exception.axis_length)

    def test_missing_wavelength_file_is_fatal(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            data_dir = _write_inputs(tmp)
            (data_dir / "Wavelength.txt").unlink()
            with self.assertRaises(ConfigurationError):
                run_pipeline(_settings(tmp, data_dir))

    def test_mat_copy_and_plots(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            settings = _settings(tmp, _write_inputs(tmp), report_format="both", plots_dir=tmp / "plots")
            written = write_outputs(run_pipeline(settings), settings)
            names = {p.name for p in written}
            self.assertIn("processed_spectral_data.csv", names)
            self.assertIn("processed_spectral_data.mat", names)
            self.assertIn("A_spectra.png", names)
            self.assertTrue(all(p.exists() for p in written))


class SettingsTests(unittest.TestCase):
    def test_from_config_maps_sections(self):
        cfg = {
            "input": {"path": "data", "skip_rows": 10, "wavelength_file": "/abs/Wavelength.txt"},
            "filter": {"required_min_rows": 300, "start": 10, "end": 290,
                       "wavelength_start": 5, "wavelength_end": 295},
            "smoothing": {"window": 7},
            "analysis": {"label_strip": 2, "workers": 4},
            "output": {"format": "MAT", "plots": True},
            "export": {"extension": ".txt", "step": 5},
        }
        s = PipelineSettings.from_config(cfg, base_dir=Path("/work"))
        self.assertEqual(Path("/work/data"), s.data_dir)
        self.assertEqual(Path("/abs/Wavelength.txt"), s.wavelength_file)
        self.assertEqual((10, 300, 10, 290, 5, 295),
                         (s.skip_rows, s.required_min_rows, s.filter_start, s.filter_end,
                          s.wavelength_filter_start, s.wavelength_filter_end))
        self.assertEqual(7, s.smoothing_window)
        self.assertEqual("mat", s.report_format)
        self.assertEqual(Path("/work/plots"), s.plots_dir)
        self.assertEqual("txt", s.export_extension)
        self.assertEqual(5, s.export_step)
        self.assertEqual("LD", s.group_label("LD12"))
        self.assertTrue(s.is_signal_column("Transmission 3"))

    def test_empty_config_uses_defaults(self):
        s = PipelineSettings.from_config({})
        self.assertEqual(PipelineSettings(), s)

    def test_bad_values_are_configuration_errors(self):
        with self.assertRaises(ConfigurationError):
            PipelineSettings.from_config({"smoothing": {"window": "wide"}})
        with self.assertRaises(ConfigurationError):
            PipelineSettings.from_config({"filter": {"start": 1500}})


class CliTests(unittest.TestCase):
    def test_main_runs_analysis_and_export(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            data_dir = _write_inputs(tmp)
            cfg = {
                "input": {"path": str(data_dir), "skip_rows": 3,
                          "wavelength_file": str(data_dir / "Wavelength.txt")},
                "filter": {"required_min_rows": 20, "start": 2, "end": 18,
                           "wavelength_start": 4, "wavelength_end": 20},
                "smoothing": {"window": 3},
                "analysis": {"signal_marker": "L", "min_wavelength": 0, "max_wavelength": 1000},
                "output": {"processed_file": str(tmp / "out.csv")},
                "export": {"output_dir": str(tmp / "cw"), "min_wavelength": 400, "max_wavelength": 700},
                "logging": {"verbose": False},
            }
            cfg_path = tmp / "config.yaml"
            cfg_path.write_text(yaml.safe_dump(cfg), encoding="utf-8")

            self.assertEqual(0, main(["--config", str(cfg_path), "--export"]))
            self.assertTrue((tmp / "out.csv").exists())
            self.assertEqual(4, len(list((tmp / "cw").glob("*.csv"))))

    def test_main_reports_configuration_errors(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            cfg_path = tmp / "config.yaml"
            cfg_path.write_text(yaml.safe_dump({"input": {"path": str(tmp / "missing")}}), encoding="utf-8")
            self.assertEqual(1, main(["--config", str(cfg_path)]))


if __name__ == "__main__":
    unittest.main()
