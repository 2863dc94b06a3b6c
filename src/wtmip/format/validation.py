"""Validation of single-cycle source waveforms.

The mipmap builder assumes well-formed input. These checks belong to the
ingestion side and mirror what the builder's forward transform needs:
one channel, an even number of frames, and a bounded length.
"""

from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike

from wtmip.utils import is_power_of_two

MIN_SOURCE_FRAMES = 4
MAX_SOURCE_FRAMES = 65536


class ValidationError(Exception):
    """Error during source waveform validation."""

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


@dataclass
class ValidationResult:
    """Result of validation with optional warnings."""

    valid: bool
    errors: list[str]
    warnings: list[str]

    @classmethod
    def success(cls, warnings: list[str] | None = None) -> "ValidationResult":
        """Create a successful validation result."""
        return cls(valid=True, errors=[], warnings=warnings or [])

    @classmethod
    def failure(cls, errors: list[str], warnings: list[str] | None = None) -> "ValidationResult":
        """Create a failed validation result."""
        return cls(valid=False, errors=errors, warnings=warnings or [])


def validate_source_waveform(samples: ArrayLike, channels: int = 1) -> ValidationResult:
    """Validate one waveform cycle before building a multisample from it.

    This validates:
    - exactly one channel
    - between MIN_SOURCE_FRAMES and MAX_SOURCE_FRAMES frames
    - an even number of frames
    - finite samples

    Args:
        samples: The decoded frames of the source.
        channels: Channel count reported by the decoder.

    Returns:
        ValidationResult with errors and warnings.
    """
    errors: list[str] = []
    warnings: list[str] = []

    data = np.asarray(samples)

    if channels != 1:
        errors.append(f"Sound data does not contain exactly 1 channel (got {channels})")
    if data.ndim != 1:
        errors.append(f"Sound data must be one-dimensional, got shape {data.shape}")
        return ValidationResult.failure(errors, warnings)

    frames = len(data)
    if frames > MAX_SOURCE_FRAMES:
        errors.append(f"Sound data is too large ({frames} > {MAX_SOURCE_FRAMES} frames)")
    elif frames < MIN_SOURCE_FRAMES:
        errors.append(f"Sound data is too small ({frames} < {MIN_SOURCE_FRAMES} frames)")
    elif frames % 2 != 0:
        errors.append(f"Sound data must have an even size, got {frames} frames")

    if frames > 0:
        if not np.all(np.isfinite(data)):
            errors.append("Sound data contains non-finite values")
        elif np.max(np.abs(data)) > 1.0:
            peak = float(np.max(np.abs(data)))
            warnings.append(f"Samples exceed [-1, 1] range, max |sample| = {peak:.4f}")

        if not errors and not is_power_of_two(frames):
            warnings.append(f"Cycle length should be a power of 2, got {frames}")

    if errors:
        return ValidationResult.failure(errors, warnings)
    return ValidationResult.success(warnings)


def ensure_valid_source_waveform(samples: ArrayLike, channels: int = 1) -> list[str]:
    """Raise ValidationError on the first problem, otherwise return the warnings."""
    result = validate_source_waveform(samples, channels)
    if not result.valid:
        raise ValidationError(result.errors[0], field="samples")
    return result.warnings
