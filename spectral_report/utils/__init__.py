"""
Utility module for Spectral Report.

Contains helper functions used by the driver.
"""

from .formatting import (
    format_frequency,
    format_sample_rate,
    format_duration,
    format_percent,
    format_summary,
    format_export_report,
)

__all__ = [
    "format_frequency",
    "format_sample_rate",
    "format_duration",
    "format_percent",
    "format_summary",
    "format_export_report",
]
