"""Multisample of a wavetable: FFT-filtered mipmaps for every playback range."""

import logging
from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor

import numpy as np
from numba import njit
from numpy.typing import ArrayLike, NDArray

from wtmip.dsp.harmonics import HarmonicProfile, MeasuredHarmonicProfile
from wtmip.dsp.ranges import NUM_TABLES, MipmapRange
from wtmip.types import WavetableData

logger = logging.getLogger(__name__)

DEFAULT_TABLE_SIZE = 2048
# the minimum sample rate accepted by the DSP system, most defavorable wrt. aliasing
DEFAULT_REF_SAMPLE_RATE = 44100.0

# number of extra elements at each end, for safe interpolations up to 4th order
TABLE_EXTRA = 4


@njit
def _fill_extra_core(storage: np.ndarray, table_size: int, table_extra: int) -> None:
    """Numba-optimized cyclic copy of each row's ends into its guard columns."""
    for m in range(storage.shape[0]):
        row = storage[m]
        beg = table_extra
        end = table_extra + table_size
        for i in range(table_extra):
            # right guard repeats the first samples
            row[end + i] = row[beg + i % table_size]
            # left guard repeats the last samples, walking backwards
            row[beg - 1 - i] = row[end - 1 - i % table_size]


def band_cutoff(index: int, table_size: int, ref_sample_rate: float) -> float:
    """
    Normalized cutoff (Fc/Fs) for the table at `index`.

    A spectrum S of fundamental F has S[1] = F and S[N/2] = Fs'/2, which lets
    it generate frequencies up to Fs'/2 = F*N/2. Harmonics are therefore cut
    at C = 0.5*Fs/Fs' = 0.5*Fs/(F*N), with F the highest frequency the table
    is played at.
    """
    freq = MipmapRange.get_range_for_index(index).max_frequency
    return (0.5 * ref_sample_rate / table_size) / freq


class WavetableMulti:
    """
    Collection of band-limited tables, one per frequency range of MipmapRange.

    All tables share one contiguous buffer of NUM_TABLES rows. Each row holds
    `table_size` playable samples surrounded by TABLE_EXTRA wrapped samples on
    both sides. Instances are read-only once built; use the create_* methods.
    """

    def __init__(self, storage: NDArray[np.float32], table_size: int, cutoffs: list[float]):
        self._storage = storage
        self._table_size = table_size
        self._cutoffs = cutoffs

    @property
    def table_size(self) -> int:
        return self._table_size

    @property
    def num_tables(self) -> int:
        return NUM_TABLES

    @property
    def storage(self) -> NDArray[np.float32]:
        """The padded buffer, shape (num_tables, table_size + 2 * TABLE_EXTRA)."""
        return self._storage

    def get_table(self, index: int) -> WavetableData:
        """Playable samples of the N-th table, without guard samples."""
        if not 0 <= index < NUM_TABLES:
            raise IndexError(f"Table index {index} out of range [0, {NUM_TABLES})")
        return self._storage[index, TABLE_EXTRA : TABLE_EXTRA + self._table_size]

    def get_padded_table(self, index: int) -> WavetableData:
        if not 0 <= index < NUM_TABLES:
            raise IndexError(f"Table index {index} out of range [0, {NUM_TABLES})")
        return self._storage[index]

    def get_table_for_frequency(self, freq: float) -> WavetableData:
        """Table adequate for a given playback frequency."""
        return self.get_table(int(MipmapRange.get_index_for_frequency(freq)))

    def tables(self) -> WavetableData:
        """All playable regions as a (num_tables, table_size) view."""
        return self._storage[:, TABLE_EXTRA : TABLE_EXTRA + self._table_size]

    def cutoff_for_index(self, index: int) -> float:
        return self._cutoffs[index]

    def __iter__(self) -> Iterator[WavetableData]:
        for index in range(NUM_TABLES):
            yield self.get_table(index)

    def __len__(self) -> int:
        return NUM_TABLES

    @staticmethod
    def allocate_storage(table_size: int) -> NDArray[np.float32]:
        return np.zeros((NUM_TABLES, table_size + 2 * TABLE_EXTRA), dtype=np.float32)

    @staticmethod
    def fill_extra(storage: NDArray[np.float32], table_size: int) -> None:
        """Fill guard samples at the table ends with cyclic repetitions."""
        _fill_extra_core(storage, table_size, TABLE_EXTRA)

    @classmethod
    def create_for_harmonic_profile(
        cls,
        profile: HarmonicProfile,
        amplitude: float,
        table_size: int = DEFAULT_TABLE_SIZE,
        ref_sample_rate: float = DEFAULT_REF_SAMPLE_RATE,
        workers: int = 1,
    ) -> "WavetableMulti":
        """
        Create a multisample according to a given harmonic profile.

        Args:
            profile: Harmonic description of the waveform
            amplitude: Peak amplitude of the synthesized tables
            table_size: Number of playable samples per table (even)
            ref_sample_rate: Lowest sample rate the tables will be played at
            workers: Number of threads synthesizing tables concurrently

        Returns:
            A read-only WavetableMulti with NUM_TABLES tables
        """
        if table_size <= 0 or table_size % 2 != 0:
            raise ValueError(f"Table size must be a positive even number, got {table_size}")

        storage = cls.allocate_storage(table_size)
        cutoffs = [band_cutoff(m, table_size, ref_sample_rate) for m in range(NUM_TABLES)]

        def synthesize(m: int) -> None:
            # each band writes its own row only
            row = storage[m, TABLE_EXTRA : TABLE_EXTRA + table_size]
            profile.generate(row, amplitude, cutoffs[m])

        logger.debug(
            "Synthesizing %d tables of %d samples (ref rate %.1f Hz, %d workers)",
            NUM_TABLES,
            table_size,
            ref_sample_rate,
            workers,
        )

        if workers > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                # consume results so exceptions from any band propagate
                list(executor.map(synthesize, range(NUM_TABLES)))
        else:
            for m in range(NUM_TABLES):
                synthesize(m)

        cls.fill_extra(storage, table_size)
        storage.flags.writeable = False

        return cls(storage, table_size, cutoffs)

    @classmethod
    def create_from_audio_data(
        cls,
        audio_data: ArrayLike,
        amplitude: float,
        table_size: int = DEFAULT_TABLE_SIZE,
        ref_sample_rate: float = DEFAULT_REF_SAMPLE_RATE,
        workers: int = 1,
    ) -> "WavetableMulti":
        """Create a multisample from one measured cycle of audio."""
        profile = MeasuredHarmonicProfile.from_audio_data(audio_data)
        logger.debug("Measured %d harmonics from source cycle", len(profile.spectrum))
        return cls.create_for_harmonic_profile(
            profile,
            amplitude,
            table_size=table_size,
            ref_sample_rate=ref_sample_rate,
            workers=workers,
        )
