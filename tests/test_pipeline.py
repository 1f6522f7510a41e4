"""
Tests for the analysis pipeline entry point.
"""

import pytest
import numpy as np

from spectral_report.core.audio_io import Waveform
from spectral_report.core.errors import InvalidInput, InvalidRange
from spectral_report.core.pipeline import AnalysisConfig, run_analysis


def sine_waveform(freq=1000.0, sample_rate=8000, num_samples=1000):
    t = np.arange(num_samples) / sample_rate
    return Waveform.from_samples(np.sin(2 * np.pi * freq * t), sample_rate)


class TestAnalysisConfig:
    """Tests for configuration defaults and validation."""

    def test_defaults(self):
        """Defaults reproduce the report layout."""
        config = AnalysisConfig()

        assert config.transform_size is None
        assert config.low_freq_band_hz == (0.0, 4000.0)
        assert config.mid_freq_band_hz == (0.0, 10000.0)
        assert config.energy_band_boundaries is None
        assert config.peak_min_prominence == 0.0
        assert config.peak_max_count == 10
        assert config.peak_min_distance_bins == 20
        assert config.waveform_excerpt_length == 10000
        assert config.window == "rectangular"

    def test_band_lists_become_tuples(self):
        """Band edges given as lists are stored as tuples."""
        config = AnalysisConfig(low_freq_band_hz=[0, 1000])

        assert config.low_freq_band_hz == (0, 1000)

    @pytest.mark.parametrize("kwargs", [
        {"transform_size": 1},
        {"waveform_excerpt_length": 0},
        {"window": "kaiser"},
        {"scaling": "db"},
        {"max_workers": 0},
    ])
    def test_invalid(self, kwargs):
        """Invalid settings are rejected at construction."""
        with pytest.raises(ValueError):
            AnalysisConfig(**kwargs)


class TestSineScenario:
    """1000 samples of a 1 kHz unit sine at 8 kHz."""

    @pytest.fixture
    def result(self):
        return run_analysis(sine_waveform())

    def test_ok(self, result):
        """No errors for a valid configuration."""
        assert result.ok
        assert result.errors == []

    def test_spectrum(self, result):
        """Default transform size and spectrum length."""
        assert result.spectrum.transform_size == 1024
        assert len(result.spectrum) == 513

    def test_dominant_peak(self, result):
        """Single dominant peak at the bin nearest 1000 Hz."""
        dominant = result.summary.dominant_peak

        assert dominant.rank == 1
        assert dominant.frequency_hz == pytest.approx(1000)
        assert result.peaks[0] == dominant
        assert len(result.peaks) <= 10

    def test_no_side_lobes_next_to_dominant_peak(self, result):
        """Default peak spacing keeps leakage side lobes out of the table."""
        indices = [peak.index for peak in result.peaks]

        assert 984.375 not in [peak.frequency_hz for peak in result.peaks]
        for i, index in enumerate(indices):
            for other in indices[i + 1:]:
                assert abs(index - other) >= 20

    def test_side_lobes_without_spacing(self):
        """With spacing disabled every local maximum is reported."""
        result = run_analysis(
            sine_waveform(),
            AnalysisConfig(peak_min_distance_bins=0, peak_max_count=None),
        )

        assert len(result.peaks) > len(run_analysis(sine_waveform()).peaks)

    def test_low_band_energy(self, result):
        """[0, 4000) holds nearly all energy (1 kHz < 4 kHz)."""
        total = result.spectrum.total_energy

        assert result.low_band.energy == pytest.approx(total, rel=1e-3)
        assert result.low_band.energy <= total

    def test_mid_band_energy(self, result):
        """[0, 10000) covers the full spectrum at 8 kHz."""
        assert result.mid_band.energy == pytest.approx(result.spectrum.total_energy, rel=1e-12)
        assert len(result.mid_band) == len(result.spectrum)

    def test_energy_reconciles(self, result):
        """Default energy bands cover the whole spectrum."""
        total = sum(band.energy for band in result.energy_bands)

        assert total == pytest.approx(result.spectrum.total_energy, rel=1e-6)
        assert result.summary.energy_coverage == pytest.approx(1.0, rel=1e-6)

    def test_waveform_excerpt(self, result):
        """Excerpt holds all 1000 samples (below the 10000 limit)."""
        assert result.waveform_excerpt.num_samples == 1000


class TestPipelineErrors:
    """Tests for error propagation and isolation."""

    def test_invalid_low_band_is_isolated(self):
        """[5000, 3000) fails only its own result set."""
        config = AnalysisConfig(low_freq_band_hz=(5000, 3000))

        result = run_analysis(sine_waveform(), config)

        assert result.low_band is None
        assert not result.ok
        assert len(result.errors) == 1
        assert isinstance(result.errors[0], InvalidRange)
        assert result.errors[0].result_set == "spectrum_lowfreq"

        assert result.mid_band is not None
        assert result.peaks is not None
        assert result.energy_bands is not None
        assert result.summary.dominant_peak is not None

    def test_all_errors_collected(self):
        """Several failing result sets are all reported."""
        config = AnalysisConfig(
            low_freq_band_hz=(5000, 3000),
            energy_band_boundaries=[0, 0],
            peak_min_prominence=-1.0,
        )

        result = run_analysis(sine_waveform(), config)

        assert {e.result_set for e in result.errors} == {
            "spectrum_lowfreq", "energy_distribution", "peaks",
        }
        assert result.summary.peak_count == 0
        assert result.summary.energy_coverage is None

    def test_transform_size_too_small_for_peaks(self):
        """A 2-point transform has no interior bins: no peaks, no error."""
        result = run_analysis(sine_waveform(), AnalysisConfig(transform_size=2))

        assert result.peaks == []
        assert result.summary.truncated
        assert result.summary.dominant_peak is None

    def test_zero_waveform(self):
        """All-zero waveform: 0 % everywhere and no dominant peak."""
        waveform = Waveform.from_samples(np.zeros(1000), 8000)

        result = run_analysis(waveform)

        assert result.ok
        assert all(band.percent_of_total == 0 for band in result.energy_bands)
        assert result.summary.dominant_peak is None

    def test_invalid_input_aborts(self):
        """InvalidInput propagates out of run_analysis."""
        with pytest.raises(InvalidInput):
            run_analysis(None)

    def test_custom_configuration(self):
        """Configured transform size, excerpt length and bands are used."""
        config = AnalysisConfig(
            transform_size=512,
            waveform_excerpt_length=100,
            energy_band_boundaries=[0, 1000, 4000],
            peak_max_count=1,
        )

        result = run_analysis(sine_waveform(), config)

        assert result.spectrum.transform_size == 512
        assert result.spectrum.truncated
        assert result.waveform_excerpt.num_samples == 100
        assert len(result.energy_bands) == 2
        assert len(result.peaks) == 1
