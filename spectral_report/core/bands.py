"""
Band Slicing

Extracts contiguous frequency ranges from a Spectrum without copying it.

Membership rule (shared with the energy analysis):
    low_hz <= f < high_hz

A frequency exactly on a shared edge therefore belongs to the band that
starts there, never to both. Edges are clamped to [0, Nyquist]. When the
requested upper edge lies beyond Nyquist the Nyquist bin itself is part of
the request, so the clamped upper edge becomes inclusive.
"""

from dataclasses import dataclass
import logging
import math
import numpy as np

from .errors import InvalidRange
from .spectral import Spectrum

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class BandSlice:
    """
    View of the bins [start, stop) of a Spectrum.

    Attributes:
        spectrum: Underlying spectrum (not owned, not copied)
        low_hz: Clamped lower edge (inclusive)
        high_hz: Clamped upper edge (exclusive unless high_inclusive)
        start: First bin index
        stop: One past the last bin index
        high_inclusive: True if the request extended beyond Nyquist
    """
    spectrum: Spectrum
    low_hz: float
    high_hz: float
    start: int
    stop: int
    high_inclusive: bool = False

    def __len__(self) -> int:
        return self.stop - self.start

    @property
    def is_empty(self) -> bool:
        return self.stop <= self.start

    @property
    def frequencies(self) -> np.ndarray:
        return self.spectrum.frequencies[self.start:self.stop]

    @property
    def magnitude(self) -> np.ndarray:
        return self.spectrum.magnitude[self.start:self.stop]

    @property
    def phase(self) -> np.ndarray:
        return self.spectrum.phase[self.start:self.stop]

    @property
    def energy(self) -> float:
        """Sum of magnitude² over the slice (0.0 when empty)."""
        return float(np.sum(self.magnitude ** 2))


def slice_band(spectrum: Spectrum, low_hz: float, high_hz: float) -> BandSlice:
    """
    Select the bins of `spectrum` inside [low_hz, high_hz).

    A band narrower than the frequency resolution may contain no bin at
    all. That is a valid, empty slice, not an error.

    Args:
        spectrum: Source spectrum
        low_hz: Lower edge in Hz, clamped to >= 0
        high_hz: Upper edge in Hz, clamped to <= Nyquist

    Returns:
        BandSlice referencing a range of `spectrum`

    Raises:
        InvalidRange: Non-finite edge, or low_hz >= high_hz after clamping
    """
    if not (math.isfinite(low_hz) and math.isfinite(high_hz)):
        raise InvalidRange(f"Band edges must be finite, got [{low_hz}, {high_hz})")

    nyquist = spectrum.nyquist
    low = max(float(low_hz), 0.0)
    high = min(float(high_hz), nyquist)

    if low >= high:
        raise InvalidRange(
            f"Empty band: low {low:g} Hz >= high {high:g} Hz "
            f"(requested [{low_hz:g}, {high_hz:g}), Nyquist {nyquist:g} Hz)"
        )

    high_inclusive = high_hz > nyquist

    frequencies = spectrum.frequencies
    start = int(np.searchsorted(frequencies, low, side="left"))
    stop = int(np.searchsorted(frequencies, high, side="right" if high_inclusive else "left"))

    band = BandSlice(
        spectrum=spectrum,
        low_hz=low,
        high_hz=high,
        start=start,
        stop=max(stop, start),
        high_inclusive=high_inclusive,
    )

    if band.is_empty:
        logger.debug("Band [%g, %g) Hz contains no bins", low, high)

    return band
