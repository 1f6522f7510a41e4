"""
Core analysis module - fully testable without any driver.

This module contains all analysis logic:
- Waveform loading (WAV)
- One-sided spectrum of the complete waveform
- Band slicing, peak detection, energy distribution
- Summary and CSV table export
"""

from .errors import AnalysisError, InvalidInput, InvalidRange, ExportFailed
from .audio_io import Waveform, load_waveform
from .spectral import Spectrum, compute_spectrum, next_power_of_two
from .bands import BandSlice, slice_band
from .peaks import Peak, detect_peaks, refine_peak_frequency
from .energy import EnergyBand, analyze_energy, default_band_boundaries
from .summary import AnalysisSummary, summarize
from .pipeline import AnalysisConfig, AnalysisResult, run_analysis
from .export import ExportReport, TableSchema, export_result, export_table

__all__ = [
    "AnalysisError",
    "InvalidInput",
    "InvalidRange",
    "ExportFailed",
    "Waveform",
    "load_waveform",
    "Spectrum",
    "compute_spectrum",
    "next_power_of_two",
    "BandSlice",
    "slice_band",
    "Peak",
    "detect_peaks",
    "refine_peak_frequency",
    "EnergyBand",
    "analyze_energy",
    "default_band_boundaries",
    "AnalysisSummary",
    "summarize",
    "AnalysisConfig",
    "AnalysisResult",
    "run_analysis",
    "ExportReport",
    "TableSchema",
    "export_result",
    "export_table",
]
