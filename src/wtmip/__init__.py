"""wtmip - band-limited mipmapped wavetables from single-cycle waveforms.

A source cycle is measured with a real FFT, then resynthesized once per
playback range with only the harmonics that stay below Nyquist at the top of
that range. The result is a WavetableMulti holding NUM_TABLES tables, each
padded with wrapped guard samples for branch-free interpolation.

Example Usage
-------------
>>> import numpy as np
>>> from wtmip import MipmapRange, WavetableMulti
>>>
>>> cycle = np.sin(2 * np.pi * np.arange(512) / 512).astype(np.float32)
>>> multi = WavetableMulti.create_from_audio_data(cycle, amplitude=1.0)
>>>
>>> # Pick the table for a 440 Hz note
>>> table = multi.get_table_for_frequency(440.0)
>>> index = MipmapRange.get_index_for_frequency(440.0)
"""

from wtmip.dsp.harmonics import (
    HarmonicProfile,
    MeasuredHarmonicProfile,
    PartialsHarmonicProfile,
    SawtoothHarmonicProfile,
    SineHarmonicProfile,
    SquareHarmonicProfile,
    TriangleHarmonicProfile,
    profile_for_waveform,
)
from wtmip.dsp.multi import TABLE_EXTRA, WavetableMulti
from wtmip.dsp.ranges import F1, FN, NUM_TABLES, MipmapRange
from wtmip.format import ValidationError, import_single_cycle_wav, write_faust_waveform
from wtmip.types import MipRange, WaveformType

__all__ = [
    # Frequency mapping
    "MipmapRange",
    "MipRange",
    "NUM_TABLES",
    "F1",
    "FN",
    # Profiles
    "HarmonicProfile",
    "MeasuredHarmonicProfile",
    "PartialsHarmonicProfile",
    "SineHarmonicProfile",
    "SawtoothHarmonicProfile",
    "SquareHarmonicProfile",
    "TriangleHarmonicProfile",
    "WaveformType",
    "profile_for_waveform",
    # Multisample
    "WavetableMulti",
    "TABLE_EXTRA",
    # Formats
    "import_single_cycle_wav",
    "write_faust_waveform",
    "ValidationError",
]
