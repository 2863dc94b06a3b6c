"""Unit tests for source waveform validation."""

import numpy as np
import pytest

from wtmip.format.validation import (
    MAX_SOURCE_FRAMES,
    MIN_SOURCE_FRAMES,
    ValidationError,
    ValidationResult,
    ensure_valid_source_waveform,
    validate_source_waveform,
)


def cycle(frames: int) -> np.ndarray:
    return np.sin(2 * np.pi * np.arange(frames) / frames).astype(np.float32)


class TestValidateSourceWaveform:
    """Test the checks applied to a decoded source cycle."""

    def test_valid_power_of_two(self) -> None:
        """Test that a clean power-of-two cycle passes without warnings."""
        result = validate_source_waveform(cycle(2048))
        assert result.valid
        assert result.errors == []
        assert result.warnings == []

    def test_rejects_multichannel(self) -> None:
        """Test that a stereo source is rejected."""
        result = validate_source_waveform(cycle(256), channels=2)
        assert not result.valid
        assert "exactly 1 channel" in result.errors[0]

    def test_rejects_2d_data(self) -> None:
        """Test that frames must be one-dimensional."""
        data = np.stack([cycle(64), cycle(64)], axis=1)
        result = validate_source_waveform(data)
        assert not result.valid
        assert "one-dimensional" in result.errors[0]

    @pytest.mark.parametrize("frames", [0, 2, MIN_SOURCE_FRAMES - 1])
    def test_rejects_too_small(self, frames: int) -> None:
        """Test the lower frame bound."""
        result = validate_source_waveform(np.zeros(frames, dtype=np.float32))
        assert not result.valid
        assert "too small" in result.errors[0]

    def test_rejects_too_large(self) -> None:
        """Test the upper frame bound."""
        result = validate_source_waveform(np.zeros(MAX_SOURCE_FRAMES + 2, dtype=np.float32))
        assert not result.valid
        assert "too large" in result.errors[0]

    def test_bounds_inclusive(self) -> None:
        """Test that both frame bounds themselves are accepted."""
        assert validate_source_waveform(cycle(MIN_SOURCE_FRAMES)).valid
        assert validate_source_waveform(cycle(MAX_SOURCE_FRAMES)).valid

    @pytest.mark.parametrize("frames", [5, 255, 2047])
    def test_rejects_odd_size(self, frames: int) -> None:
        """Test that odd frame counts are rejected."""
        result = validate_source_waveform(cycle(frames))
        assert not result.valid
        assert "even size" in result.errors[0]

    @pytest.mark.parametrize("bad", [np.nan, np.inf, -np.inf])
    def test_rejects_non_finite(self, bad: float) -> None:
        """Test that NaN and infinite samples are rejected."""
        data = cycle(64)
        data[10] = bad
        result = validate_source_waveform(data)
        assert not result.valid
        assert "non-finite" in result.errors[0]

    def test_warns_on_non_power_of_two(self) -> None:
        """Test that even but non power-of-two cycles only warn."""
        result = validate_source_waveform(cycle(600))
        assert result.valid
        assert any("power of 2" in w for w in result.warnings)

    def test_warns_on_clipping_range(self) -> None:
        """Test that samples above full scale only warn."""
        result = validate_source_waveform(cycle(64) * 2.0)
        assert result.valid
        assert any("exceed" in w for w in result.warnings)


class TestValidationResult:
    """Test the result constructors."""

    def test_success(self) -> None:
        result = ValidationResult.success()
        assert result.valid
        assert result.warnings == []

    def test_failure(self) -> None:
        result = ValidationResult.failure(["bad"], ["meh"])
        assert not result.valid
        assert result.errors == ["bad"]
        assert result.warnings == ["meh"]


class TestEnsureValidSourceWaveform:
    """Test the raising wrapper."""

    def test_raises_first_error(self) -> None:
        """Test that the first problem is raised as ValidationError."""
        with pytest.raises(ValidationError, match="exactly 1 channel") as exc_info:
            ensure_valid_source_waveform(cycle(63), channels=2)
        assert exc_info.value.field == "samples"

    def test_returns_warnings(self) -> None:
        """Test that warnings are handed back on success."""
        warnings = ensure_valid_source_waveform(cycle(600))
        assert len(warnings) == 1
