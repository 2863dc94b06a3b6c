from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal, TypeAlias

import numpy as np
from numpy.typing import NDArray

WavetableData: TypeAlias = NDArray[np.float32]
HarmonicSpectrum: TypeAlias = NDArray[np.complex64]
WavetableMetadata: TypeAlias = dict[str, Any]

BitDepth = Literal[16, 24, 32]
OutputFormat = Literal["faust", "npz", "wav"]


class WaveformType(str, Enum):
    sine = "sine"
    sawtooth = "sawtooth"
    square = "square"
    triangle = "triangle"


@dataclass(frozen=True)
class MipRange:
    """Playback frequency interval served by one table of the multisample."""

    min_frequency: float
    max_frequency: float

    def __contains__(self, frequency: float) -> bool:
        return self.min_frequency <= frequency <= self.max_frequency


@dataclass
class BuildParams:
    amplitude: float = 1.0
    table_size: int = 2048
    ref_sample_rate: float = 44100.0
    workers: int = 1


@dataclass
class ExportParams:
    sample_rate: int = 44100
    bit_depth: int = 16


@dataclass
class HarmonicPartial:
    harmonic: int
    amplitude: float
    phase: float


HarmonicPartialList: TypeAlias = list[HarmonicPartial]
