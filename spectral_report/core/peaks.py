"""
Spectral Peak Detection

Finds local maxima in a magnitude spectrum and ranks them.

Detection rules:
- Only interior bins are eligible (never bin 0 or the last bin)
- A candidate is STRICTLY greater than both immediate neighbours
  (plateaus of equal magnitude produce no peak)
- Prominence = magnitude - min(left neighbour, right neighbour)
- A candidate survives if prominence > min_prominence
  (min_prominence = 0 keeps every local maximum)
- Ranking: descending magnitude, ties broken by ascending frequency,
  dense ranks starting at 1

The result is fully determined by the spectrum and the parameters.
"""

from dataclasses import dataclass
import logging
from typing import Optional
import numpy as np

from .errors import InvalidRange
from .spectral import Spectrum

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Peak:
    """
    A ranked spectral peak.

    Attributes:
        frequency_hz: Frequency of the peak bin
        magnitude: Magnitude of the peak bin
        rank: 1 for the strongest peak, dense
        index: Bin index in the source spectrum
        prominence: Height above the lower neighbour
    """
    frequency_hz: float
    magnitude: float
    rank: int
    index: int
    prominence: float


def find_local_maxima(magnitude: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """
    Strict interior local maxima.

    Args:
        magnitude: Magnitude per bin

    Returns:
        Tuple of (indices, prominences), indices ascending
    """
    if len(magnitude) < 3:
        return np.array([], dtype=np.intp), np.array([], dtype=np.float64)

    center = magnitude[1:-1]
    left = magnitude[:-2]
    right = magnitude[2:]

    is_max = (center > left) & (center > right)
    indices = np.flatnonzero(is_max) + 1
    prominences = magnitude[indices] - np.minimum(magnitude[indices - 1], magnitude[indices + 1])

    return indices, prominences


def detect_peaks(
    spectrum: Spectrum,
    *,
    min_prominence: float,
    max_count: Optional[int] = None,
    min_distance_bins: int = 0,
) -> list[Peak]:
    """
    Detect and rank peaks in a spectrum.

    `min_prominence` has no default on purpose: the caller (usually the
    analysis configuration) states the threshold explicitly.

    Args:
        spectrum: Source spectrum
        min_prominence: Prominence a candidate must exceed (>= 0)
        max_count: Keep only the strongest `max_count` peaks (None = all)
        min_distance_bins: Discard a candidate closer than this many bins
            to a stronger, already accepted peak (0 = off)

    Returns:
        Peaks ordered by rank (empty if no interior maximum qualifies)

    Raises:
        InvalidRange: Negative threshold, count or distance
    """
    if not np.isfinite(min_prominence) or min_prominence < 0:
        raise InvalidRange(f"min_prominence must be >= 0, got {min_prominence}")
    if max_count is not None and max_count < 0:
        raise InvalidRange(f"max_count must be >= 0, got {max_count}")
    if min_distance_bins < 0:
        raise InvalidRange(f"min_distance_bins must be >= 0, got {min_distance_bins}")

    magnitude = spectrum.magnitude
    frequencies = spectrum.frequencies

    indices, prominences = find_local_maxima(magnitude)

    keep = prominences > min_prominence
    indices = indices[keep]
    prominences = prominences[keep]

    # lexsort sorts by the LAST key first: magnitude descending, then frequency
    order = np.lexsort((frequencies[indices], -magnitude[indices]))
    indices = indices[order]
    prominences = prominences[order]

    accepted: list[tuple[int, float]] = []
    for index, prominence in zip(indices, prominences):
        if max_count is not None and len(accepted) >= max_count:
            break
        if min_distance_bins and any(
            abs(int(index) - other) < min_distance_bins for other, _ in accepted
        ):
            continue
        accepted.append((int(index), float(prominence)))

    peaks = [
        Peak(
            frequency_hz=float(frequencies[index]),
            magnitude=float(magnitude[index]),
            rank=rank,
            index=index,
            prominence=prominence,
        )
        for rank, (index, prominence) in enumerate(accepted, start=1)
    ]

    logger.debug(
        "Peak detection: %d candidates above threshold, %d reported", len(prominences), len(peaks)
    )

    return peaks


def refine_peak_frequency(spectrum: Spectrum, peak: Peak) -> float:
    """
    Sub-bin frequency estimate by three-point parabolic interpolation.

    Fits a parabola through the peak bin and its two neighbours and
    returns the frequency of its vertex. The offset is bounded to half a
    bin because the peak bin is a strict local maximum.

    Returns:
        Refined frequency in Hz (the bin frequency if no fit is possible)
    """
    index = peak.index
    magnitude = spectrum.magnitude

    if index <= 0 or index >= len(magnitude) - 1:
        return peak.frequency_hz

    y1, y2, y3 = magnitude[index - 1], magnitude[index], magnitude[index + 1]
    denominator = y1 - 2 * y2 + y3
    if denominator == 0:
        return peak.frequency_hz

    delta = 0.5 * (y1 - y3) / denominator
    return float(spectrum.frequencies[index] + delta * spectrum.frequency_resolution)
