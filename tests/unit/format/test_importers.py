"""Unit tests for single-cycle WAV import."""

import logging
from pathlib import Path

import numpy as np
import pytest
import soundfile as sf

from wtmip.format.importers import import_single_cycle_wav
from wtmip.format.importers.wav import _get_bit_depth_from_subtype
from wtmip.format.validation import ValidationError


def write_cycle(path: Path, frames: int, channels: int = 1, subtype: str = "FLOAT") -> np.ndarray:
    data = 0.5 * np.sin(2 * np.pi * np.arange(frames) / frames)
    if channels > 1:
        data = np.stack([data] * channels, axis=1)
    sf.write(path, data, 44100, subtype=subtype)
    return data


class TestImportSingleCycleWav:
    """Tests for decoding source cycles."""

    def test_import_float_wav(self, tmp_path: Path) -> None:
        """Test importing a 32-bit float mono cycle."""
        path = tmp_path / "cycle.wav"
        expected = write_cycle(path, 512)

        samples, metadata = import_single_cycle_wav(path)

        assert samples.dtype == np.float32
        assert samples.shape == (512,)
        np.testing.assert_allclose(samples, expected, atol=1e-7)
        assert metadata["sample_rate"] == 44100
        assert metadata["channels"] == 1
        assert metadata["frames"] == 512
        assert metadata["source_bit_depth"] == 32

    def test_import_16bit_wav(self, tmp_path: Path) -> None:
        """Test importing a 16-bit PCM cycle."""
        path = tmp_path / "cycle16.wav"
        expected = write_cycle(path, 256, subtype="PCM_16")

        samples, metadata = import_single_cycle_wav(str(path))

        assert metadata["source_bit_depth"] == 16
        np.testing.assert_allclose(samples, expected, atol=1.0 / 32768)

    def test_rejects_stereo(self, tmp_path: Path) -> None:
        """Test that multi-channel files are rejected."""
        path = tmp_path / "stereo.wav"
        write_cycle(path, 256, channels=2)

        with pytest.raises(ValidationError, match="exactly 1 channel"):
            import_single_cycle_wav(path)

    def test_rejects_odd_length(self, tmp_path: Path) -> None:
        """Test that odd frame counts are rejected."""
        path = tmp_path / "odd.wav"
        write_cycle(path, 255)

        with pytest.raises(ValidationError, match="even size"):
            import_single_cycle_wav(path)

    def test_rejects_too_short(self, tmp_path: Path) -> None:
        """Test that tiny files are rejected."""
        path = tmp_path / "short.wav"
        write_cycle(path, 2)

        with pytest.raises(ValidationError, match="too small"):
            import_single_cycle_wav(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test that a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            import_single_cycle_wav(tmp_path / "missing.wav")

    def test_undecodable_file(self, tmp_path: Path) -> None:
        """Test that garbage data is reported by the decoder."""
        path = tmp_path / "garbage.wav"
        path.write_bytes(b"not a sound file at all")

        with pytest.raises(RuntimeError):
            import_single_cycle_wav(path)

    def test_logs_warnings(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        """Test that non-fatal problems are logged."""
        path = tmp_path / "odd_length.wav"
        write_cycle(path, 600)

        with caplog.at_level(logging.WARNING, logger="wtmip"):
            samples, _ = import_single_cycle_wav(path)

        assert len(samples) == 600
        assert "power of 2" in caplog.text


class TestBitDepthFromSubtype:
    """Tests for subtype parsing."""

    @pytest.mark.parametrize(
        "subtype, expected",
        [
            ("PCM_U8", 8),
            ("PCM_S8", 8),
            ("PCM_16", 16),
            ("PCM_24", 24),
            ("PCM_32", 32),
            ("FLOAT", 32),
            ("DOUBLE", 64),
            ("ULAW", 16),
        ],
    )
    def test_subtypes(self, subtype: str, expected: int) -> None:
        assert _get_bit_depth_from_subtype(subtype) == expected
