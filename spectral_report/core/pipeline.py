"""
Analysis Pipeline

Runs one waveform through transform, band slicing, peak detection,
energy analysis and summary, and returns every result set at once.

Execution model:
- The transform runs first; InvalidInput aborts the whole run
- Low band, mid band, peaks and energy only read the immutable Spectrum
  and run in parallel on a thread pool
- InvalidRange in one of them is recorded in AnalysisResult.errors and
  leaves that result set as None, the others are unaffected
- The summary is built after all of them have finished
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
import logging
from typing import Callable, Optional, Sequence, TypeVar

from .audio_io import Waveform
from .bands import BandSlice, slice_band
from .energy import EnergyBand, analyze_energy, default_band_boundaries
from .errors import AnalysisError, InvalidRange
from .peaks import Peak, detect_peaks
from .signal_processing import WINDOW_TYPES, WindowType
from .spectral import ScalingType, Spectrum, compute_spectrum
from .summary import AnalysisSummary, summarize

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Telephone-band style "0-4 kHz" view
LOW_FREQ_BAND_HZ = (0.0, 4000.0)

# Wider "0-10 kHz" view; covers the full spectrum at sample rates <= 20 kHz
MID_FREQ_BAND_HZ = (0.0, 10000.0)

# Every strict local maximum qualifies unless configured otherwise
PEAK_MIN_PROMINENCE = 0.0

# Peak table length
PEAK_MAX_COUNT = 10

# Keeps window leakage side lobes of a strong peak out of the peak table
PEAK_MIN_DISTANCE_BINS = 20

# Rows in the waveform excerpt table
WAVEFORM_EXCERPT_LENGTH = 10000

# Band slices, peaks and energy share the pool
MAX_WORKERS = 3


@dataclass
class AnalysisConfig:
    """
    Configuration for one analysis run.

    Defaults reproduce the standard report layout. Band edges are
    configuration, not law: waveforms with other sample rates may need
    other edges.

    Attributes:
        transform_size: Samples per transform (None = next power of two)
        low_freq_band_hz: (low, high) edges of the low band slice
        mid_freq_band_hz: (low, high) edges of the mid band slice
        energy_band_boundaries: Energy band edges (None = defaults up to Nyquist)
        peak_min_prominence: Prominence a peak must exceed
        peak_max_count: Number of peaks kept (None = all)
        peak_min_distance_bins: Minimum bin distance between peaks (0 = off)
        waveform_excerpt_length: Samples kept in the waveform excerpt
        window: Window function before the transform
        scaling: Magnitude scaling ("none" or "fft_size")
        max_workers: Threads for the parallel result sets
    """
    transform_size: Optional[int] = None
    low_freq_band_hz: tuple[float, float] = LOW_FREQ_BAND_HZ
    mid_freq_band_hz: tuple[float, float] = MID_FREQ_BAND_HZ
    energy_band_boundaries: Optional[Sequence[float]] = None
    peak_min_prominence: float = PEAK_MIN_PROMINENCE
    peak_max_count: Optional[int] = PEAK_MAX_COUNT
    peak_min_distance_bins: int = PEAK_MIN_DISTANCE_BINS
    waveform_excerpt_length: int = WAVEFORM_EXCERPT_LENGTH
    window: WindowType = "rectangular"
    scaling: ScalingType = "none"
    max_workers: int = MAX_WORKERS

    def __post_init__(self):
        """Validate settings that are independent of the waveform."""
        if self.transform_size is not None and self.transform_size < 2:
            raise ValueError("Transform size must be at least 2")
        if self.waveform_excerpt_length < 1:
            raise ValueError("Waveform excerpt length must be at least 1")
        if self.window not in WINDOW_TYPES:
            raise ValueError(f"Unknown window function: {self.window}")
        if self.scaling not in ("none", "fft_size"):
            raise ValueError(f"Unknown magnitude scaling: {self.scaling}")
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")

        # Band edges are checked per result set at run time, so that a bad
        # edge only costs that result set
        self.low_freq_band_hz = tuple(self.low_freq_band_hz)
        self.mid_freq_band_hz = tuple(self.mid_freq_band_hz)


@dataclass
class AnalysisResult:
    """
    All result sets of one run.

    A result set is None when it failed with InvalidRange; the matching
    error is in `errors`.
    """
    spectrum: Spectrum
    low_band: Optional[BandSlice]
    mid_band: Optional[BandSlice]
    peaks: Optional[list[Peak]]
    energy_bands: Optional[list[EnergyBand]]
    summary: AnalysisSummary
    waveform_excerpt: Waveform
    errors: list[AnalysisError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def run_analysis(
    waveform: Waveform,
    config: Optional[AnalysisConfig] = None,
) -> AnalysisResult:
    """
    Analyse one waveform.

    Args:
        waveform: Source waveform
        config: Analysis configuration (defaults if None)

    Returns:
        AnalysisResult with every result set that could be computed

    Raises:
        InvalidInput: Waveform unusable, nothing is computed
    """
    if config is None:
        config = AnalysisConfig()

    spectrum = compute_spectrum(
        waveform,
        transform_size=config.transform_size,
        window=config.window,
        scaling=config.scaling,
    )

    boundaries = config.energy_band_boundaries
    if boundaries is None:
        boundaries = default_band_boundaries(spectrum.nyquist)

    tasks: dict[str, Callable[[], object]] = {
        "spectrum_lowfreq": lambda: slice_band(spectrum, *config.low_freq_band_hz),
        "spectrum_midfreq": lambda: slice_band(spectrum, *config.mid_freq_band_hz),
        "peaks": lambda: detect_peaks(
            spectrum,
            min_prominence=config.peak_min_prominence,
            max_count=config.peak_max_count,
            min_distance_bins=config.peak_min_distance_bins,
        ),
        "energy_distribution": lambda: analyze_energy(spectrum, boundaries),
    }

    errors: list[AnalysisError] = []
    results: dict[str, object] = {}

    with ThreadPoolExecutor(max_workers=config.max_workers) as executor:
        futures = {name: executor.submit(task) for name, task in tasks.items()}
        for name, future in futures.items():
            results[name] = _collect(name, future.result, errors)

    summary = summarize(waveform, spectrum, results["peaks"], results["energy_distribution"])

    logger.info(
        "Analysis finished: %d bins, %d peaks, %d error(s)",
        len(spectrum), summary.peak_count, len(errors),
    )

    return AnalysisResult(
        spectrum=spectrum,
        low_band=results["spectrum_lowfreq"],
        mid_band=results["spectrum_midfreq"],
        peaks=results["peaks"],
        energy_bands=results["energy_distribution"],
        summary=summary,
        waveform_excerpt=waveform.excerpt(config.waveform_excerpt_length),
        errors=errors,
    )


def _collect(
    name: str,
    get_result: Callable[[], T],
    errors: list[AnalysisError],
) -> Optional[T]:
    """Return a task's result, or record its InvalidRange and return None."""
    try:
        return get_result()
    except InvalidRange as e:
        e.result_set = name
        logger.error("Result set not computed: %s", e)
        errors.append(e)
        return None
