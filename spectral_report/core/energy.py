"""
Energy Distribution

Partitions a spectrum into fixed bands and accounts for the energy in each.

Technical details:
- Energy of a bin = magnitude²
- N+1 strictly increasing edges define N bands
- Attribution uses low <= f < high, like band slicing, except that the
  LAST band includes its upper edge (so the Nyquist bin is not dropped)
- percent_of_total is relative to the energy of the ENTIRE spectrum, not
  to the sum of the bands: edges that leave gaps show up as a total
  below 100 %
- A spectrum with zero energy yields 0 % for every band
"""

from dataclasses import dataclass
import logging
import math
from typing import Optional, Sequence
import numpy as np

from .errors import InvalidRange
from .spectral import Spectrum

logger = logging.getLogger(__name__)

# Default energy band layout (Hz), closed by Nyquist
DEFAULT_BAND_EDGES_HZ = (0.0, 500.0, 1000.0, 2000.0, 3000.0, 4000.0, 6000.0, 8000.0, 10000.0)

# Relative tolerance for band energies vs. total spectrum energy
RECONCILE_REL_TOL = 1e-6


@dataclass(frozen=True)
class EnergyBand:
    """
    Energy accounted to one frequency band.

    Attributes:
        low_hz: Lower edge (inclusive)
        high_hz: Upper edge (exclusive, inclusive for the last band)
        energy: Sum of magnitude² over the band
        percent_of_total: energy / total spectrum energy × 100
    """
    low_hz: float
    high_hz: float
    energy: float
    percent_of_total: float


def default_band_boundaries(nyquist: float) -> list[float]:
    """
    Default energy band edges for a given Nyquist frequency.

    Edges at or above Nyquist are dropped and Nyquist closes the last
    band, so the boundaries always cover [0, Nyquist] without gaps.
    """
    edges = [edge for edge in DEFAULT_BAND_EDGES_HZ if edge < nyquist]
    edges.append(float(nyquist))
    return edges


def validate_boundaries(band_boundaries: Sequence[float]) -> np.ndarray:
    """
    Check band edges and return them as a float array.

    Raises:
        InvalidRange: Fewer than 2 edges, non-finite or not strictly increasing
    """
    edges = np.asarray(band_boundaries, dtype=np.float64)

    if edges.ndim != 1 or len(edges) < 2:
        raise InvalidRange(
            f"Need at least 2 band edges, got {len(np.atleast_1d(edges))}"
        )
    if not np.all(np.isfinite(edges)):
        raise InvalidRange("Band edges must be finite")
    if np.any(np.diff(edges) <= 0):
        raise InvalidRange(f"Band edges must be strictly increasing: {edges.tolist()}")

    return edges


def analyze_energy(
    spectrum: Spectrum,
    band_boundaries: Sequence[float],
) -> list[EnergyBand]:
    """
    Compute per-band energy and share of the total spectrum energy.

    Args:
        spectrum: Source spectrum
        band_boundaries: N+1 strictly increasing edges in Hz

    Returns:
        N EnergyBand records in edge order

    Raises:
        InvalidRange: Malformed boundaries
    """
    edges = validate_boundaries(band_boundaries)

    frequencies = spectrum.frequencies
    power = spectrum.power
    total_energy = spectrum.total_energy

    last = len(edges) - 2
    bands = []
    for i, (low, high) in enumerate(zip(edges[:-1], edges[1:])):
        start = np.searchsorted(frequencies, low, side="left")
        stop = np.searchsorted(frequencies, high, side="right" if i == last else "left")
        energy = float(np.sum(power[start:stop]))

        percent = energy / total_energy * 100 if total_energy != 0 else 0.0

        bands.append(EnergyBand(
            low_hz=float(low),
            high_hz=float(high),
            energy=energy,
            percent_of_total=percent,
        ))

    coverage = energy_coverage(bands, total_energy)
    if coverage is not None and not math.isclose(coverage, 1.0, rel_tol=RECONCILE_REL_TOL):
        logger.warning(
            "Energy bands cover %.6f%% of the total spectrum energy", coverage * 100
        )

    return bands


def energy_coverage(bands: Sequence[EnergyBand], total_energy: float) -> Optional[float]:
    """
    Fraction of `total_energy` attributed to `bands`.

    Returns:
        sum(band energies) / total_energy, or None if total_energy is 0
    """
    if total_energy == 0:
        return None
    return sum(band.energy for band in bands) / total_energy
