"""Logarithmic mapping between playback frequencies and mipmap table indices.

The tables of a multisample are not octaves in the musical sense, but
logarithmic divisions of the range [F1, FN]. The mapping is defined by

    T(f) = log(k * f) / log(b)

where T is the table number (converted to an index by rounding down),
k = 1 / F1 and b = exp(log(FN / F1) / (N - 1)).

The lookup tables below are computed once at import time and are read-only.
"""

import math

import numpy as np
from numpy.typing import ArrayLike, NDArray

from wtmip.types import MipRange

# number of tables in the mipmap
NUM_TABLES = 24
# start frequency of the first table
F1 = 20.0
# start frequency of the last table
FN = 12000.0
# end frequency of the last table (Nyquist at 44.1 kHz)
LAST_END_FREQUENCY = 22050.0

FREQUENCY_TABLE_POINTS = 1024

K = 1.0 / F1
LOG_B = math.log(FN / F1) / (NUM_TABLES - 1)


def _clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def _exact_index(f: float) -> float:
    t = 0.0 if f < F1 else math.log(K * f) / LOG_B
    return _clamp(t, 0.0, NUM_TABLES - 1)


def _build_frequency_to_index() -> NDArray[np.float32]:
    table = np.empty(FREQUENCY_TABLE_POINTS, dtype=np.float32)
    last = FREQUENCY_TABLE_POINTS - 1
    for i in range(last):
        r = i / last
        table[i] = _exact_index(F1 + r * (FN - F1))
    # the last point must be exact
    table[last] = NUM_TABLES - 1
    table.flags.writeable = False
    return table


def _build_index_to_start_frequency() -> NDArray[np.float32]:
    table = np.empty(NUM_TABLES + 1, dtype=np.float32)
    for t in range(NUM_TABLES):
        table[t] = math.exp(t * LOG_B) / K
    table[NUM_TABLES] = LAST_END_FREQUENCY
    table.flags.writeable = False
    return table


FREQUENCY_TO_INDEX = _build_frequency_to_index()
INDEX_TO_START_FREQUENCY = _build_index_to_start_frequency()


class MipmapRange:
    """Select ranges of a mip-mapped wave according to an oscillator frequency."""

    @staticmethod
    def get_index_for_frequency(f: float) -> float:
        """Continuous table index for a playback frequency, from the lookup table.

        The fractional part is meant for cross-fading adjacent tables. Inputs
        outside [F1, FN] saturate to the first or last index.
        """
        # linear interpolation under the log curve reads low, up to one band below
        # get_exact_index_for_frequency between 20 and 31 Hz
        last = FREQUENCY_TABLE_POINTS - 1
        # multiply before dividing so that FN lands exactly on the last point
        pos = _clamp((f - F1) * last / (FN - F1), 0.0, float(last))

        index1 = int(pos)
        index2 = min(index1 + 1, last)
        frac = pos - index1

        return float(
            (1.0 - frac) * FREQUENCY_TO_INDEX[index1] + frac * FREQUENCY_TO_INDEX[index2]
        )

    @staticmethod
    def get_exact_index_for_frequency(f: float) -> float:
        """Continuous table index evaluated from the closed-form law."""
        return _exact_index(f)

    @staticmethod
    def get_indices_for_frequencies(frequencies: ArrayLike) -> NDArray[np.float64]:
        """Vectorised form of get_index_for_frequency."""
        f = np.asarray(frequencies, dtype=np.float64)
        last = FREQUENCY_TABLE_POINTS - 1
        pos = np.clip((f - F1) * last / (FN - F1), 0.0, float(last))
        return np.interp(pos, np.arange(FREQUENCY_TABLE_POINTS), FREQUENCY_TO_INDEX)

    @staticmethod
    def get_range_for_index(o: int) -> MipRange:
        o = int(_clamp(o, 0, NUM_TABLES - 1))
        return MipRange(
            min_frequency=float(INDEX_TO_START_FREQUENCY[o]),
            max_frequency=float(INDEX_TO_START_FREQUENCY[o + 1]),
        )

    @staticmethod
    def get_range_for_frequency(f: float) -> MipRange:
        index = int(MipmapRange.get_index_for_frequency(f))
        return MipmapRange.get_range_for_index(index)
