"""Single-cycle WAV import.

The file must hold exactly one period of the waveform, on a single channel.
"""

import logging
from pathlib import Path
from typing import Any

import numpy as np
import soundfile as sf
from numpy.typing import NDArray

from wtmip.format.validation import ensure_valid_source_waveform

logger = logging.getLogger(__name__)


def import_single_cycle_wav(path: Path | str) -> tuple[NDArray[np.float32], dict[str, Any]]:
    """Import a WAV file holding one waveform cycle.

    Args:
        path: Path to the WAV file.

    Returns:
        Tuple of (samples, metadata) where:
        - samples: float32 array of the cycle
        - metadata: Dictionary with sample rate, channels, frames and bit depth

    Raises:
        ValidationError: If the audio is not a usable single cycle.
        FileNotFoundError: If file doesn't exist.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Sound file not found: {path}")

    info = sf.info(path)
    data, sample_rate = sf.read(path, dtype="float32", always_2d=True)

    # channel count is checked before flattening so stereo is rejected
    samples = data[:, 0] if info.channels == 1 else data
    warnings = ensure_valid_source_waveform(samples, channels=info.channels)
    for warning in warnings:
        logger.warning("%s: %s", path.name, warning)

    metadata: dict[str, Any] = {
        "sample_rate": sample_rate,
        "channels": info.channels,
        "frames": len(samples),
        "source_bit_depth": _get_bit_depth_from_subtype(info.subtype),
    }

    return np.ascontiguousarray(samples, dtype=np.float32), metadata


def _get_bit_depth_from_subtype(subtype: str) -> int:
    """Get bit depth from soundfile subtype string."""
    subtype = subtype.upper()
    if "8" in subtype:
        return 8
    elif "16" in subtype:
        return 16
    elif "24" in subtype:
        return 24
    elif "32" in subtype or "FLOAT" in subtype:
        return 32
    elif "64" in subtype or "DOUBLE" in subtype:
        return 64
    return 16  # Default assumption
