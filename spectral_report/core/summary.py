"""
Analysis summary: scalar facts extracted from the other result sets.

Nothing here is computed from the raw samples; every field is copied or
derived from an already computed entity.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from .audio_io import Waveform
from .energy import EnergyBand, energy_coverage
from .peaks import Peak, refine_peak_frequency
from .spectral import Spectrum


@dataclass(frozen=True)
class AnalysisSummary:
    """
    Compact summary of one analysis run.

    `dominant_peak` is None when no peak was detected, or when peak
    detection failed. `energy_coverage` is None when the spectrum has no
    energy or the energy bands could not be computed.
    """
    sample_rate: float
    sample_count: int
    duration_seconds: float
    transform_size: int
    frequency_resolution: float
    nyquist: float
    truncated: bool
    total_energy: float
    peak_count: int
    dominant_peak: Optional[Peak]
    dominant_refined_frequency_hz: Optional[float]
    energy_coverage: Optional[float]

    @property
    def has_dominant_peak(self) -> bool:
        return self.dominant_peak is not None


def summarize(
    waveform: Waveform,
    spectrum: Spectrum,
    peaks: Optional[Sequence[Peak]],
    energy_bands: Optional[Sequence[EnergyBand]],
) -> AnalysisSummary:
    """
    Combine the result sets of one run into an AnalysisSummary.

    Args:
        waveform: Analysed waveform (metadata only)
        spectrum: Its spectrum
        peaks: Ranked peaks, None if peak detection failed
        energy_bands: Energy bands, None if the energy analysis failed
    """
    peaks = list(peaks) if peaks is not None else []
    dominant = next((peak for peak in peaks if peak.rank == 1), None)

    total_energy = spectrum.total_energy
    coverage = (
        energy_coverage(energy_bands, total_energy)
        if energy_bands is not None else None
    )

    return AnalysisSummary(
        sample_rate=waveform.sample_rate,
        sample_count=waveform.num_samples,
        duration_seconds=waveform.duration_seconds,
        transform_size=spectrum.transform_size,
        frequency_resolution=spectrum.frequency_resolution,
        nyquist=spectrum.nyquist,
        truncated=spectrum.truncated,
        total_energy=total_energy,
        peak_count=len(peaks),
        dominant_peak=dominant,
        dominant_refined_frequency_hz=(
            refine_peak_frequency(spectrum, dominant) if dominant is not None else None
        ),
        energy_coverage=coverage,
    )
