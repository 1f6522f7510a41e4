"""
Formatting functions for the status report.

Converts numeric values and result objects into readable strings.
"""

from typing import Optional

from ..core.export import ExportReport
from ..core.summary import AnalysisSummary


def format_frequency(hz: float) -> str:
    """
    Format frequency for display.

    Args:
        hz: Frequency in Hz

    Returns:
        Formatted string (e.g. "1.5 kHz" or "250 Hz")
    """
    if hz >= 1000:
        return f"{hz/1000:.1f} kHz"
    else:
        return f"{hz:.0f} Hz"


def format_sample_rate(sr: float) -> str:
    """
    Format sample rate.

    Returns:
        Formatted string (e.g. "44.1 kHz" or "48 kHz")
    """
    if sr % 1000 == 0:
        return f"{int(sr) // 1000} kHz"
    else:
        return f"{sr / 1000:.1f} kHz"


def format_duration(seconds: float) -> str:
    """
    Format duration for display.

    Returns:
        Formatted string (e.g. "3:45.20" or "0:01.50")
    """
    minutes = int(seconds // 60)
    secs = seconds % 60
    return f"{minutes}:{secs:05.2f}"


def format_percent(fraction: Optional[float]) -> str:
    """Format a fraction as percent, "n/a" for None."""
    if fraction is None:
        return "n/a"
    return f"{fraction * 100:.2f} %"


def format_summary(summary: AnalysisSummary) -> list[str]:
    """
    Human-readable lines for an analysis summary.

    Returns:
        One line per fact, without trailing newlines
    """
    lines = [
        f"Sample rate:     {format_sample_rate(summary.sample_rate)}",
        f"Samples:         {summary.sample_count:,} ({format_duration(summary.duration_seconds)})",
        f"Transform size:  {summary.transform_size:,}"
        + (" (truncated)" if summary.truncated else ""),
        f"Resolution:      {summary.frequency_resolution:.4f} Hz",
        f"Total energy:    {summary.total_energy:.6g}",
        f"Peaks:           {summary.peak_count}",
    ]

    dominant = summary.dominant_peak
    if dominant is None:
        lines.append("Dominant peak:   none")
    else:
        lines.append(
            f"Dominant peak:   {format_frequency(dominant.frequency_hz)} "
            f"(refined {summary.dominant_refined_frequency_hz:.2f} Hz, "
            f"magnitude {dominant.magnitude:.6g})"
        )

    lines.append(f"Band coverage:   {format_percent(summary.energy_coverage)}")
    return lines


def format_export_report(report: ExportReport) -> list[str]:
    """
    Human-readable lines for an export report.

    Written tables first, then every collected error.
    """
    lines = [
        f"  {report.path_for(name)}: {rows:,} rows"
        for name, rows in sorted(report.written.items())
    ]
    lines.extend(f"  ERROR {error}" for error in report.errors)
    return lines
