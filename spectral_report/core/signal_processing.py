"""
General Signal Processing

Contains the sample-level helpers used before the transform.
All functions are EXPLICIT - no automatic conversions.

Technical assumptions:
- Downmix is performed as arithmetic mean (no energy compensation)
- Windows come from scipy.signal.windows, "rectangular" means no window
- All operations work on copies, original data remains unchanged
"""

import numpy as np
from scipy import signal
from typing import Literal

WindowType = Literal["rectangular", "hann", "hamming", "blackman"]

WINDOW_TYPES = ("rectangular", "hann", "hamming", "blackman")


def downmix_to_mono(
    data: np.ndarray,
    method: Literal["average", "left", "right", "side", "mid"] = "average"
) -> np.ndarray:
    """
    Convert stereo to mono.

    NO automatic downmix - this function must be called explicitly.

    Methods:
    - average: (L + R) / 2 - Standard, no energy compensation
    - left: Left channel only
    - right: Right channel only
    - mid: (L + R) / 2 - Identical to average, semantically "mid"
    - side: (L - R) / 2 - Side signal (stereo difference)

    Args:
        data: Stereo audio data, Shape: (samples, 2)
        method: Downmix method

    Returns:
        Mono audio data, Shape: (samples,)
    """
    if data.ndim == 1:
        return data.copy()  # Already mono

    if data.shape[1] == 1:
        return data[:, 0].copy()

    if data.shape[1] != 2:
        raise ValueError(f"Expected stereo (2 channels), got: {data.shape[1]}")

    left = data[:, 0]
    right = data[:, 1]

    if method == "average" or method == "mid":
        return (left + right) / 2
    elif method == "left":
        return left.copy()
    elif method == "right":
        return right.copy()
    elif method == "side":
        return (left - right) / 2
    else:
        raise ValueError(f"Unknown method: {method}")


def create_window(window_type: WindowType, size: int) -> np.ndarray:
    """
    Create a window function of `size` points.

    Window properties:
    - rectangular: No window, exact magnitudes for bin-centred tones
    - hann: Good compromise, -31.5 dB side lobes
    - hamming: Better side lobe suppression (-43 dB), wider main lobe
    - blackman: Very good suppression (-58 dB), widest main lobe

    Symmetric windows are used, matching the classic
    0.5 * (1 - cos(2*pi*n / (N-1))) definitions.
    """
    if window_type == "rectangular":
        return np.ones(size)
    elif window_type == "hann":
        return signal.windows.hann(size, sym=True)
    elif window_type == "hamming":
        return signal.windows.hamming(size, sym=True)
    elif window_type == "blackman":
        return signal.windows.blackman(size, sym=True)
    else:
        raise ValueError(f"Unknown window function: {window_type}")


def apply_window(data: np.ndarray, window_type: WindowType = "hann") -> np.ndarray:
    """
    Apply window function to a 1D signal.

    Window functions reduce spectral leakage in FFT.

    Args:
        data: Input signal
        window_type: Type of window function

    Returns:
        Windowed signal (copy)
    """
    if window_type == "rectangular":
        return data.copy()
    return data * create_window(window_type, len(data))
