"""
Table Export

Writes each result set as a CSV table with a fixed, unit-annotated schema.

Technical details:
- Column names carry their unit (_hz, _s, _rad, _db) and are part of the
  compatibility surface for external spreadsheet tools
- Floats are written with 6 significant digits, so re-exports of the same
  analysis compare equal as text
- Writes are atomic: rows go to a temporary file next to the destination
  which replaces the destination only when complete. On failure the
  destination is left unchanged and ExportFailed is raised
- Exported files get the same permissions as a plain open() under the
  umask of the process
- Different result sets go to different files and are written in parallel
"""

from concurrent.futures import ThreadPoolExecutor
import csv
from dataclasses import dataclass, field
import logging
import os
from pathlib import Path
import tempfile
from typing import Any, Iterable, Iterator, Optional, Sequence
import numpy as np

from .audio_io import Waveform
from .bands import BandSlice
from .energy import EnergyBand
from .errors import AnalysisError, ExportFailed
from .peaks import Peak
from .pipeline import AnalysisResult
from .spectral import Spectrum
from .summary import AnalysisSummary

logger = logging.getLogger(__name__)

# Fixed numeric precision of every exported float
FLOAT_FORMAT = ".6g"


def _current_umask() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return umask


# Mode of a file created with a plain open(); mkstemp alone gives 0600.
# Read once at import: os.umask changes process-wide state.
FILE_MODE = 0o666 & ~_current_umask()

# Upper bound of the waveform excerpt table
WAVEFORM_EXCERPT_MAX_ROWS = 10000


@dataclass(frozen=True)
class TableSchema:
    """Name and ordered column names of one exported table."""
    name: str
    columns: tuple[str, ...]


SPECTRUM_SCHEMA = TableSchema(
    "spectrum", ("frequency_hz", "magnitude", "magnitude_db", "phase_rad"),
)
BAND_SCHEMA = TableSchema(
    "band", SPECTRUM_SCHEMA.columns,
)
WAVEFORM_SCHEMA = TableSchema(
    "waveform", ("index", "time_s", "amplitude"),
)
PEAK_SCHEMA = TableSchema(
    "peaks", ("rank", "frequency_hz", "magnitude", "prominence", "bin_index"),
)
ENERGY_SCHEMA = TableSchema(
    "energy_distribution", ("band", "low_hz", "high_hz", "energy", "percent_of_total"),
)
SUMMARY_SCHEMA = TableSchema(
    "summary",
    (
        "sample_rate_hz",
        "sample_count",
        "duration_s",
        "transform_size",
        "frequency_resolution_hz",
        "nyquist_hz",
        "truncated",
        "total_energy",
        "peak_count",
        "dominant_frequency_hz",
        "dominant_refined_frequency_hz",
        "dominant_magnitude",
        "energy_coverage_percent",
    ),
)

# Result set name -> file name in the output directory
OUTPUT_FILES = {
    "spectrum_full": "spectrum_full.csv",
    "spectrum_lowfreq": "spectrum_lowfreq.csv",
    "spectrum_midfreq": "spectrum_midfreq.csv",
    "waveform": "waveform.csv",
    "peaks": "peaks.csv",
    "energy_distribution": "energy_distribution.csv",
    "summary": "summary.csv",
}


def format_value(value: Any) -> str:
    """
    Format one cell.

    None -> "", bool -> "true"/"false", int -> digits,
    float -> 6 significant digits.
    """
    if value is None:
        return ""
    if isinstance(value, (bool, np.bool_)):
        return "true" if value else "false"
    if isinstance(value, (int, np.integer)):
        return str(int(value))
    if isinstance(value, (float, np.floating)):
        return format(float(value), FLOAT_FORMAT)
    return str(value)


def export_table(
    rows: Iterable[Sequence[Any]],
    schema: TableSchema,
    destination: str | Path,
) -> int:
    """
    Write `rows` as a CSV table with a header row.

    Args:
        rows: One sequence per row, in schema column order
        schema: Table schema
        destination: Target file (its directory must exist)

    Returns:
        Number of data rows written

    Raises:
        ExportFailed: Destination unwritable or a row does not match the
            schema. The destination is unchanged in that case.
    """
    destination = Path(destination)
    width = len(schema.columns)
    tmp_path: Optional[Path] = None

    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            newline="",
            encoding="utf-8",
            dir=destination.parent,
            prefix=f".{destination.name}.",
            suffix=".tmp",
            delete=False,
        ) as f:
            tmp_path = Path(f.name)
            writer = csv.writer(f)
            writer.writerow(schema.columns)

            count = 0
            for row in rows:
                if len(row) != width:
                    raise ValueError(
                        f"Row {count} has {len(row)} fields, schema has {width}"
                    )
                writer.writerow([format_value(value) for value in row])
                count += 1

            f.flush()
            os.fsync(f.fileno())

        os.chmod(tmp_path, FILE_MODE)
        os.replace(tmp_path, destination)
        tmp_path = None
    except (OSError, ValueError) as e:
        raise ExportFailed(
            f"Could not write {destination}: {e}",
            destination=destination,
            result_set=schema.name,
        ) from e
    finally:
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)

    logger.debug("Wrote %d rows to %s", count, destination)
    return count


def spectrum_rows(spectrum: Spectrum | BandSlice) -> Iterator[tuple]:
    """Rows for SPECTRUM_SCHEMA / BAND_SCHEMA."""
    if isinstance(spectrum, BandSlice):
        magnitude_db = spectrum.spectrum.magnitude_db()[spectrum.start:spectrum.stop]
    else:
        magnitude_db = spectrum.magnitude_db()

    return zip(spectrum.frequencies, spectrum.magnitude, magnitude_db, spectrum.phase)


def waveform_rows(waveform: Waveform, max_rows: int = WAVEFORM_EXCERPT_MAX_ROWS) -> Iterator[tuple]:
    """Rows for WAVEFORM_SCHEMA, at most `max_rows`."""
    count = min(waveform.num_samples, max_rows)
    for index in range(count):
        yield index, waveform.sample_to_time(index), waveform.samples[index]


def peak_rows(peaks: Sequence[Peak]) -> Iterator[tuple]:
    """Rows for PEAK_SCHEMA."""
    for peak in peaks:
        yield peak.rank, peak.frequency_hz, peak.magnitude, peak.prominence, peak.index


def energy_rows(bands: Sequence[EnergyBand]) -> Iterator[tuple]:
    """Rows for ENERGY_SCHEMA, bands numbered from 1."""
    for number, band in enumerate(bands, start=1):
        yield number, band.low_hz, band.high_hz, band.energy, band.percent_of_total


def summary_rows(summary: AnalysisSummary) -> list[tuple]:
    """The single row for SUMMARY_SCHEMA."""
    dominant = summary.dominant_peak
    coverage = summary.energy_coverage

    return [(
        summary.sample_rate,
        summary.sample_count,
        summary.duration_seconds,
        summary.transform_size,
        summary.frequency_resolution,
        summary.nyquist,
        summary.truncated,
        summary.total_energy,
        summary.peak_count,
        dominant.frequency_hz if dominant is not None else None,
        summary.dominant_refined_frequency_hz,
        dominant.magnitude if dominant is not None else None,
        coverage * 100 if coverage is not None else None,
    )]


@dataclass
class ExportReport:
    """
    Outcome of exporting one AnalysisResult.

    Attributes:
        output_dir: Directory the tables were written to
        written: Result set name -> number of rows written
        errors: Every error of the run, analysis and export, in order
    """
    output_dir: Path
    written: dict[str, int] = field(default_factory=dict)
    errors: list[AnalysisError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def path_for(self, result_set: str) -> Path:
        return self.output_dir / OUTPUT_FILES[result_set]


def export_result(
    result: AnalysisResult,
    output_dir: str | Path,
    max_workers: int = 4,
) -> ExportReport:
    """
    Export every available result set of `result` to `output_dir`.

    Result sets that failed during analysis are skipped and their errors
    carried into the report. Every export is attempted even if another one
    fails; all ExportFailed errors are collected.

    Args:
        result: Analysis result
        output_dir: Existing output directory
        max_workers: Parallel export threads

    Returns:
        ExportReport, `ok` is False if any error occurred
    """
    report = ExportReport(output_dir=Path(output_dir), errors=list(result.errors))

    jobs: dict[str, tuple[Iterable, TableSchema]] = {
        "spectrum_full": (spectrum_rows(result.spectrum), SPECTRUM_SCHEMA),
        "waveform": (waveform_rows(result.waveform_excerpt), WAVEFORM_SCHEMA),
        "summary": (summary_rows(result.summary), SUMMARY_SCHEMA),
    }
    if result.low_band is not None:
        jobs["spectrum_lowfreq"] = (spectrum_rows(result.low_band), BAND_SCHEMA)
    if result.mid_band is not None:
        jobs["spectrum_midfreq"] = (spectrum_rows(result.mid_band), BAND_SCHEMA)
    if result.peaks is not None:
        jobs["peaks"] = (peak_rows(result.peaks), PEAK_SCHEMA)
    if result.energy_bands is not None:
        jobs["energy_distribution"] = (energy_rows(result.energy_bands), ENERGY_SCHEMA)

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            name: executor.submit(export_table, rows, schema, report.path_for(name))
            for name, (rows, schema) in jobs.items()
        }
        for name, future in futures.items():
            try:
                report.written[name] = future.result()
            except ExportFailed as e:
                e.result_set = name
                logger.error("Export failed: %s", e)
                report.errors.append(e)

    return report
