"""Harmonic profiles: descriptions of the harmonics of a periodic waveform.

A profile gives the complex Fourier coefficient of each harmonic. The modulus
and argument of a coefficient are the amplitude and phase of that harmonic,
in the convention produced by MeasuredHarmonicProfile.from_audio_data: a sine
partial of amplitude b at harmonic k has coefficient -b, a cosine partial of
amplitude a has coefficient -1j * a.
"""

import cmath
import math
from abc import ABC, abstractmethod

import numpy as np
from numba import njit
from numpy.typing import ArrayLike, NDArray

from wtmip.types import HarmonicPartialList, HarmonicSpectrum, WaveformType
from wtmip.utils import assert_exhaustiveness


@njit
def _band_limited_spectrum_core(
    harmonics: np.ndarray, scale: complex, cutoff: float, size: int
) -> np.ndarray:
    """Numba-optimized spectrum gating and scaling."""
    spec = np.zeros(size // 2 + 1, dtype=np.complex128)
    step = 1.0 / size

    # bin 0 is DC and stays empty, bin 1 is the fundamental
    for index in range(1, size // 2 + 1):
        if index * step > cutoff:
            break
        spec[index] = scale * harmonics[index]

    return spec


class HarmonicProfile(ABC):
    @abstractmethod
    def get_harmonic(self, index: int) -> complex:
        """Coefficient of the harmonic at `index` (1 is the fundamental, 0 is DC)."""

    def harmonic_spectrum(self, size: int) -> NDArray[np.complex128]:
        """The first `size` coefficients of the profile, DC included."""
        return np.array([self.get_harmonic(i) for i in range(size)], dtype=np.complex128)

    def generate(self, table: NDArray[np.floating], amplitude: float, cutoff: float) -> None:
        """
        Generate one period of the waveform into `table`.

        Harmonics whose normalized frequency (index / len(table)) is above
        `cutoff` are left out of the synthesis.

        Args:
            table: Writable buffer of even length, filled in place
            amplitude: Peak amplitude the synthesized cycle should approach
            cutoff: Highest normalized frequency allowed, expressed as Fc/Fs
        """
        size = len(table)
        harmonics = self.harmonic_spectrum(size // 2 + 1)

        # the inverse transform is a sum of cosines: halve the magnitude
        # and rotate by +90 degrees to recover the source phase
        scale = cmath.rect(amplitude * 0.5, math.pi / 2)
        spec = _band_limited_spectrum_core(harmonics, scale, float(cutoff), size)

        table[:] = np.fft.irfft(spec, n=size, norm="forward")


class MeasuredHarmonicProfile(HarmonicProfile):
    """Harmonic profile which takes its values from a measured spectrum."""

    def __init__(self, spectrum: ArrayLike):
        self._spectrum: HarmonicSpectrum = np.asarray(spectrum, dtype=np.complex64)
        self._spectrum.flags.writeable = False

    @classmethod
    def from_audio_data(cls, audio_data: ArrayLike) -> "MeasuredHarmonicProfile":
        """
        Measure the harmonics of a single waveform cycle.

        Args:
            audio_data: One period of the waveform, even length of at least 4 samples

        Returns:
            Profile holding len(audio_data) // 2 + 1 harmonics
        """
        samples = np.asarray(audio_data, dtype=np.float32)
        fft_size = len(samples)

        spec = np.fft.rfft(samples)

        # scale the transform, and normalize amplitude and phase
        spec *= cmath.rect(2.0 / fft_size, -math.pi / 2)

        return cls(spec)

    @property
    def spectrum(self) -> HarmonicSpectrum:
        return self._spectrum

    def get_harmonic(self, index: int) -> complex:
        if index < 0 or index >= len(self._spectrum):
            return 0j
        return complex(self._spectrum[index])

    def harmonic_spectrum(self, size: int) -> NDArray[np.complex128]:
        harmonics = np.zeros(size, dtype=np.complex128)
        count = min(size, len(self._spectrum))
        harmonics[:count] = self._spectrum[:count]
        return harmonics


class SineHarmonicProfile(HarmonicProfile):
    def get_harmonic(self, index: int) -> complex:
        return -1.0 + 0j if index == 1 else 0j


class SawtoothHarmonicProfile(HarmonicProfile):
    """Rising sawtooth from -1 to 1 over the period."""

    def get_harmonic(self, index: int) -> complex:
        if index < 1:
            return 0j
        return complex(2.0 / (math.pi * index))


class SquareHarmonicProfile(HarmonicProfile):
    """Square wave, high for the first half of the period."""

    def get_harmonic(self, index: int) -> complex:
        if index < 1 or index % 2 == 0:
            return 0j
        return complex(-4.0 / (math.pi * index))


class TriangleHarmonicProfile(HarmonicProfile):
    """Triangle wave starting at -1, peaking at half period."""

    def get_harmonic(self, index: int) -> complex:
        if index < 1 or index % 2 == 0:
            return 0j
        return 1j * 8.0 / (math.pi**2 * index**2)


class PartialsHarmonicProfile(HarmonicProfile):
    """
    Profile built from explicit partials.

    A partial (h, a, p) stands for a * sin(h * theta + p), so a phase of zero
    starts the partial at a zero crossing.
    """

    def __init__(self, partials: HarmonicPartialList):
        self._coefficients: dict[int, complex] = {}
        for partial in partials:
            if partial.harmonic < 1:
                raise ValueError(f"Harmonic index must be >= 1, got {partial.harmonic}")
            coefficient = -cmath.rect(partial.amplitude, partial.phase)
            # repeated harmonics add up
            self._coefficients[partial.harmonic] = (
                self._coefficients.get(partial.harmonic, 0j) + coefficient
            )

    def get_harmonic(self, index: int) -> complex:
        return self._coefficients.get(index, 0j)


def profile_for_waveform(waveform: WaveformType) -> HarmonicProfile:
    match waveform:
        case WaveformType.sine:
            return SineHarmonicProfile()
        case WaveformType.sawtooth:
            return SawtoothHarmonicProfile()
        case WaveformType.square:
            return SquareHarmonicProfile()
        case WaveformType.triangle:
            return TriangleHarmonicProfile()
        case _:
            assert_exhaustiveness(waveform)
