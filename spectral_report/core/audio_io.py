"""
Waveform Source Module

Loads a single waveform without implicit signal manipulation.

Technical assumptions:
- WAV files are loaded with soundfile (high precision, no conversion)
- All samples are held as float64 numpy arrays (range -1.0 to 1.0 for PCM)
- Multi-channel files are downmixed explicitly, the method is recorded
- A Waveform is immutable once created: its sample array is read-only
"""

from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Literal, Optional
import numpy as np
import soundfile as sf

from .errors import InvalidInput
from .signal_processing import downmix_to_mono

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Waveform:
    """
    Time-domain sample sequence paired with its sample rate.

    Attributes:
        samples: Mono samples, Shape: (num_samples,), read-only float64
        sample_rate: Samples per second (positive)
        file_path: Source file, None for in-memory waveforms
        format_info: Format information (Subtype, channels, downmix method)
        bit_depth: Bit depth of original (if known)
    """
    samples: np.ndarray
    sample_rate: float
    file_path: Optional[Path] = None
    format_info: dict = field(default_factory=dict)
    bit_depth: Optional[int] = None

    def __post_init__(self):
        """Validate and freeze the sample array."""
        samples = np.array(self.samples, dtype=np.float64)

        if samples.ndim != 1:
            raise InvalidInput(
                f"Waveform must be 1D (mono), got shape {samples.shape}"
            )
        if samples.size == 0:
            raise InvalidInput("Waveform contains no samples")
        if not np.all(np.isfinite(samples)):
            raise InvalidInput("Waveform contains NaN or infinite samples")
        if not np.isfinite(self.sample_rate) or self.sample_rate <= 0:
            raise InvalidInput(
                f"Sample rate must be positive, got {self.sample_rate}"
            )

        samples.setflags(write=False)
        object.__setattr__(self, "samples", samples)

    @classmethod
    def from_samples(cls, samples, sample_rate: float) -> "Waveform":
        """Build a waveform from an in-memory sequence."""
        return cls(samples=samples, sample_rate=sample_rate)

    @property
    def num_samples(self) -> int:
        return len(self.samples)

    @property
    def duration_seconds(self) -> float:
        return self.num_samples / self.sample_rate

    def sample_to_time(self, sample: int) -> float:
        """Convert sample index to time in seconds."""
        return sample / self.sample_rate

    def excerpt(self, length: int) -> "Waveform":
        """
        First `length` samples as a new waveform.

        The original is not modified. A length beyond the waveform
        returns all samples.
        """
        if length < 1:
            raise InvalidInput(f"Excerpt length must be at least 1, got {length}")

        return Waveform(
            samples=self.samples[:length],
            sample_rate=self.sample_rate,
            file_path=self.file_path,
            format_info=dict(self.format_info),
            bit_depth=self.bit_depth,
        )


def load_waveform(
    file_path: str | Path,
    channel_mode: Literal["average", "left", "right", "mid", "side"] = "average",
) -> Waveform:
    """
    Load a WAV file as a mono waveform.

    Stereo files are reduced with `downmix_to_mono` using `channel_mode`.
    NO resampling or normalization is applied.

    Args:
        file_path: Path to audio file
        channel_mode: Downmix method for stereo files

    Returns:
        Waveform with all metadata

    Raises:
        InvalidInput: File missing, unsupported, unreadable or empty
    """
    path = Path(file_path)

    if not path.exists():
        raise InvalidInput(f"Audio file not found: {path}")

    if path.suffix.lower() != ".wav":
        raise InvalidInput(f"Unsupported format: {path.suffix}")

    try:
        data, sample_rate = sf.read(path, dtype="float64", always_2d=False)
        info = sf.info(path)
    except RuntimeError as e:
        raise InvalidInput(f"Audio file could not be read: {path} ({e})") from e

    channels = 1 if data.ndim == 1 else data.shape[1]
    if channels > 2:
        raise InvalidInput(f"Expected mono or stereo, got {channels} channels")

    samples = downmix_to_mono(data, method=channel_mode)

    format_info = {
        "format": info.format,
        "subtype": info.subtype,
        "channels": channels,
        "downmix": channel_mode if channels > 1 else None,
    }

    logger.debug(
        "Loaded %s: %d samples at %d Hz, %d channel(s)",
        path, len(samples), sample_rate, channels,
    )

    return Waveform(
        samples=samples,
        sample_rate=sample_rate,
        file_path=path,
        format_info=format_info,
        bit_depth=_extract_bit_depth(info.subtype),
    )


def _extract_bit_depth(subtype: str) -> Optional[int]:
    """Extract bit depth from soundfile subtype string."""
    bit_depth_map = {
        "PCM_16": 16,
        "PCM_24": 24,
        "PCM_32": 32,
        "FLOAT": 32,
        "DOUBLE": 64,
        "PCM_S8": 8,
        "PCM_U8": 8,
    }
    return bit_depth_map.get(subtype)
