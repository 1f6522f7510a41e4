"""
Tests for the spectral transform.
"""

import pytest
import numpy as np

from spectral_report.core.audio_io import Waveform
from spectral_report.core.errors import InvalidInput
from spectral_report.core.spectral import (
    Spectrum,
    compute_spectrum,
    next_power_of_two,
)


def sine_waveform(freq: float, sample_rate: float, num_samples: int, amplitude: float = 1.0) -> Waveform:
    t = np.arange(num_samples) / sample_rate
    return Waveform.from_samples(amplitude * np.sin(2 * np.pi * freq * t), sample_rate)


class TestNextPowerOfTwo:
    """Tests for the default transform size."""

    @pytest.mark.parametrize("n, expected", [
        (1, 1), (2, 2), (3, 4), (1000, 1024), (1024, 1024), (1025, 2048),
    ])
    def test_values(self, n, expected):
        """Smallest power of two >= n."""
        assert next_power_of_two(n) == expected


class TestSpectrumShape:
    """Tests for length and frequency axis."""

    @pytest.mark.parametrize("transform_size", [8, 64, 1000, 1024])
    def test_length(self, transform_size):
        """Spectrum has transform_size // 2 + 1 bins."""
        waveform = Waveform.from_samples(np.random.randn(500), 8000)

        spectrum = compute_spectrum(waveform, transform_size)

        assert len(spectrum) == transform_size // 2 + 1
        assert spectrum.transform_size == transform_size

    def test_frequency_axis(self):
        """Axis starts at 0, ends at Nyquist, constant spacing."""
        waveform = Waveform.from_samples(np.random.randn(1000), 44100)

        spectrum = compute_spectrum(waveform, 2048)

        assert spectrum.frequencies[0] == 0
        assert spectrum.frequencies[-1] == 22050
        assert np.all(np.diff(spectrum.frequencies) > 0)
        np.testing.assert_allclose(
            np.diff(spectrum.frequencies), 44100 / 2048, rtol=1e-12
        )
        assert spectrum.frequency_resolution == pytest.approx(44100 / 2048)
        assert spectrum.nyquist == 22050

    def test_default_transform_size(self):
        """Default transform size is the next power of two."""
        waveform = Waveform.from_samples(np.ones(1000), 8000)

        spectrum = compute_spectrum(waveform)

        assert spectrum.transform_size == 1024
        assert not spectrum.truncated

    def test_arrays_are_read_only(self):
        """Spectrum arrays cannot be modified."""
        spectrum = compute_spectrum(Waveform.from_samples(np.ones(16), 100))

        with pytest.raises(ValueError):
            spectrum.magnitude[0] = 0.0


class TestPaddingAndTruncation:
    """Tests for the explicit padding/truncation contract."""

    def test_zero_padding_matches_numpy(self):
        """Short waveform is zero-padded to the transform size."""
        data = np.random.randn(100)
        waveform = Waveform.from_samples(data, 1000)

        spectrum = compute_spectrum(waveform, 256)
        expected = np.fft.rfft(data, n=256)

        np.testing.assert_allclose(spectrum.magnitude, np.abs(expected), atol=1e-9)
        assert not spectrum.truncated

    def test_truncation_is_flagged(self):
        """Long waveform uses only the first samples and sets the flag."""
        data = np.random.randn(300)
        waveform = Waveform.from_samples(data, 1000)

        spectrum = compute_spectrum(waveform, 128)
        expected = np.fft.rfft(data[:128])

        assert spectrum.truncated
        np.testing.assert_allclose(spectrum.magnitude, np.abs(expected), atol=1e-9)

    def test_exact_length_not_truncated(self):
        """Waveform of exactly transform_size samples is not truncated."""
        waveform = Waveform.from_samples(np.random.randn(64), 1000)

        assert not compute_spectrum(waveform, 64).truncated


class TestMagnitudeAndPhase:
    """Tests for magnitude and phase values."""

    def test_magnitude_and_phase_definition(self):
        """magnitude = |X|, phase = atan2(imag, real)."""
        data = np.random.randn(64)
        bins = np.fft.rfft(data)

        spectrum = compute_spectrum(Waveform.from_samples(data, 64), 64)

        np.testing.assert_allclose(
            spectrum.magnitude, np.sqrt(bins.real ** 2 + bins.imag ** 2), atol=1e-9
        )
        np.testing.assert_allclose(
            spectrum.phase, np.arctan2(bins.imag, bins.real), atol=1e-9
        )

    def test_phase_range(self):
        """Phase lies in [-pi, pi]."""
        spectrum = compute_spectrum(Waveform.from_samples(np.random.randn(512), 8000))

        assert np.all(spectrum.phase >= -np.pi)
        assert np.all(spectrum.phase <= np.pi)

    def test_sine_peak_location(self):
        """Pure 1 kHz tone peaks at the 1 kHz bin."""
        waveform = sine_waveform(1000, 8000, 1000)

        spectrum = compute_spectrum(waveform)

        peak_freq = spectrum.frequencies[np.argmax(spectrum.magnitude)]
        assert peak_freq == pytest.approx(1000)

    def test_fft_size_scaling(self):
        """'fft_size' scaling divides magnitudes by N."""
        waveform = sine_waveform(1000, 8000, 1024)

        raw = compute_spectrum(waveform, 1024)
        scaled = compute_spectrum(waveform, 1024, scaling="fft_size")

        np.testing.assert_allclose(scaled.magnitude, raw.magnitude / 1024)
        # Bin-centred unit sine: |X| / N = 0.5
        assert np.max(scaled.magnitude) == pytest.approx(0.5, rel=1e-6)

    def test_window_reduces_leakage(self):
        """Hann window lowers far-off leakage of an off-bin tone."""
        waveform = sine_waveform(1010, 8000, 1024)

        rect = compute_spectrum(waveform, 1024)
        hann = compute_spectrum(waveform, 1024, window="hann")

        far = rect.index_of(3000)
        assert hann.magnitude[far] < rect.magnitude[far]
        assert hann.window == "hann"

    def test_deterministic(self):
        """Identical input gives identical output."""
        waveform = Waveform.from_samples(np.random.randn(777), 22050)

        first = compute_spectrum(waveform)
        second = compute_spectrum(waveform)

        np.testing.assert_array_equal(first.magnitude, second.magnitude)
        np.testing.assert_array_equal(first.phase, second.phase)

    def test_magnitude_db(self):
        """dB conversion with floor for zero magnitudes."""
        spectrum = compute_spectrum(Waveform.from_samples(np.zeros(16), 100))

        np.testing.assert_allclose(spectrum.magnitude_db(), np.full(9, -200.0))

    def test_total_energy(self):
        """Total energy is the sum of magnitude²."""
        spectrum = compute_spectrum(Waveform.from_samples(np.random.randn(128), 1000))

        assert spectrum.total_energy == pytest.approx(np.sum(spectrum.magnitude ** 2))


class TestTransformErrors:
    """Tests for invalid transform requests."""

    @pytest.mark.parametrize("transform_size", [0, 1, -8])
    def test_invalid_transform_size(self, transform_size):
        """Transform size below 2 is rejected."""
        waveform = Waveform.from_samples(np.ones(10), 100)

        with pytest.raises(InvalidInput, match="Transform size"):
            compute_spectrum(waveform, transform_size)

    def test_missing_waveform(self):
        """None is not a waveform."""
        with pytest.raises(InvalidInput):
            compute_spectrum(None)

    def test_unknown_window(self):
        """Unknown window is rejected as invalid input."""
        with pytest.raises(InvalidInput, match="window"):
            compute_spectrum(Waveform.from_samples(np.ones(10), 100), window="kaiser")

    def test_single_sample_waveform(self):
        """A single sample still gives a 2-point transform."""
        spectrum = compute_spectrum(Waveform.from_samples([1.0], 100))

        assert spectrum.transform_size == 2
        assert len(spectrum) == 2

    def test_spectrum_shape_is_validated(self):
        """Spectrum rejects arrays that do not match transform_size."""
        with pytest.raises(ValueError, match="entries"):
            Spectrum(
                frequencies=np.zeros(3),
                magnitude=np.zeros(3),
                phase=np.zeros(3),
                sample_rate=100,
                transform_size=8,
            )
