"""
Spectral Analysis Module

Computes the one-sided spectrum of a complete waveform in a single transform.
Optimized for analysis and export, not for display.

Technical assumptions:
- Single real FFT (scipy.fft.rfft) over the whole waveform, no STFT
- Padding and truncation policy is explicit, never a library default:
  shorter waveforms are zero-padded, longer ones are cut and flagged
- Window and magnitude scaling are explicit parameters
- The result is read-only and shared between all consumers
"""

from dataclasses import dataclass
import logging
from typing import Literal, Optional
import numpy as np
from scipy import fft

from .audio_io import Waveform
from .errors import InvalidInput
from .signal_processing import WINDOW_TYPES, WindowType, apply_window

logger = logging.getLogger(__name__)

ScalingType = Literal["none", "fft_size"]

# Smallest transform that still has an interior bin
MIN_TRANSFORM_SIZE = 2


def next_power_of_two(n: int) -> int:
    """Smallest power of two that is >= n (1 for n <= 1)."""
    if n <= 1:
        return 1
    return 1 << (int(n) - 1).bit_length()


@dataclass(frozen=True, eq=False)
class Spectrum:
    """
    One-sided frequency-domain representation of a waveform.

    Index k holds bin k of a `transform_size`-point transform, k runs
    from 0 (DC) to transform_size // 2 (Nyquist for even sizes).

    Attributes:
        frequencies: Frequency axis in Hz, strictly increasing from 0
        magnitude: sqrt(real² + imag²) per bin (optionally scaled)
        phase: atan2(imag, real) per bin in radians
        sample_rate: Sample rate of the source waveform
        transform_size: Number of samples consumed by the transform
        truncated: True if the waveform was longer than transform_size
        window: Window applied before the transform
        scaling: Magnitude scaling ("none" or "fft_size")
    """
    frequencies: np.ndarray
    magnitude: np.ndarray
    phase: np.ndarray
    sample_rate: float
    transform_size: int
    truncated: bool = False
    window: WindowType = "rectangular"
    scaling: ScalingType = "none"

    def __post_init__(self):
        expected = self.transform_size // 2 + 1
        for name in ("frequencies", "magnitude", "phase"):
            values = np.asarray(getattr(self, name), dtype=np.float64)
            if values.shape != (expected,):
                raise ValueError(
                    f"{name} must have {expected} entries, got {values.shape}"
                )
            values.setflags(write=False)
            object.__setattr__(self, name, values)

    def __len__(self) -> int:
        return len(self.frequencies)

    @property
    def frequency_resolution(self) -> float:
        """Bin spacing in Hz."""
        return self.sample_rate / self.transform_size

    @property
    def nyquist(self) -> float:
        return self.sample_rate / 2

    @property
    def power(self) -> np.ndarray:
        """Energy per bin (magnitude²)."""
        return self.magnitude ** 2

    @property
    def total_energy(self) -> float:
        """Sum of magnitude² over the entire spectrum."""
        return float(np.sum(self.power))

    def magnitude_db(self, ref: float = 1.0, min_db: float = -200.0) -> np.ndarray:
        """
        Magnitude in dB.

        Args:
            ref: Reference value (1.0 for dBFS with "fft_size" scaling)
            min_db: Floor for zero magnitudes (to avoid log(0))

        Returns:
            Magnitude in dB, one value per bin
        """
        mag = np.maximum(self.magnitude, 10 ** (min_db / 20) * ref)
        return 20 * np.log10(mag / ref)

    def index_of(self, frequency_hz: float) -> int:
        """Index of the bin nearest to `frequency_hz` (clamped to the axis)."""
        index = int(round(frequency_hz / self.frequency_resolution))
        return max(0, min(index, len(self) - 1))


def compute_spectrum(
    waveform: Waveform,
    transform_size: Optional[int] = None,
    window: WindowType = "rectangular",
    scaling: ScalingType = "none",
) -> Spectrum:
    """
    Compute the one-sided spectrum of a waveform.

    Padding/truncation contract:
    - transform_size None: next power of two >= number of samples
    - waveform shorter than transform_size: zero-padded to exactly
      transform_size samples (padding is appended AFTER windowing)
    - waveform longer than transform_size: only the first transform_size
      samples are used and `Spectrum.truncated` is set

    Only bins 0 .. transform_size // 2 are returned, the conjugate-
    symmetric upper half carries no extra information for real input.

    Args:
        waveform: Source waveform
        transform_size: Number of samples per transform
        window: Window function applied to the consumed samples
        scaling: "none" for raw |X|, "fft_size" for |X| / transform_size

    Returns:
        Spectrum with frequency, magnitude and phase per bin

    Raises:
        InvalidInput: Empty waveform, non-positive sample rate or
            transform size below MIN_TRANSFORM_SIZE
    """
    if waveform is None or waveform.num_samples == 0:
        raise InvalidInput("Cannot transform an empty waveform")
    if waveform.sample_rate <= 0:
        raise InvalidInput(
            f"Sample rate must be positive, got {waveform.sample_rate}"
        )
    if window not in WINDOW_TYPES:
        raise InvalidInput(f"Unknown window function: {window}")
    if scaling not in ("none", "fft_size"):
        raise InvalidInput(f"Unknown magnitude scaling: {scaling}")

    if transform_size is None:
        transform_size = max(next_power_of_two(waveform.num_samples), MIN_TRANSFORM_SIZE)
    transform_size = int(transform_size)
    if transform_size < MIN_TRANSFORM_SIZE:
        raise InvalidInput(
            f"Transform size must be at least {MIN_TRANSFORM_SIZE}, got {transform_size}"
        )

    truncated = waveform.num_samples > transform_size
    if truncated:
        logger.warning(
            "Waveform has %d samples, transform uses only the first %d",
            waveform.num_samples, transform_size,
        )

    # Window the consumed samples, then zero-pad to the transform size
    consumed = apply_window(waveform.samples[:transform_size], window)
    buffer = np.zeros(transform_size, dtype=np.float64)
    buffer[:len(consumed)] = consumed

    bins = fft.rfft(buffer)

    magnitude = np.abs(bins)
    if scaling == "fft_size":
        magnitude = magnitude / transform_size
    phase = np.angle(bins)

    # (k * fs) / N rather than rfftfreq so the last bin is exactly fs / 2
    frequencies = np.arange(transform_size // 2 + 1) * waveform.sample_rate / transform_size

    logger.debug(
        "Transform: %d points, %.4f Hz resolution, %d bins",
        transform_size, waveform.sample_rate / transform_size, len(frequencies),
    )

    return Spectrum(
        frequencies=frequencies,
        magnitude=magnitude,
        phase=phase,
        sample_rate=waveform.sample_rate,
        transform_size=transform_size,
        truncated=truncated,
        window=window,
        scaling=scaling,
    )
