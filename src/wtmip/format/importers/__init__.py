"""Source waveform importers.

Example usage:
    >>> from wtmip.format.importers import import_single_cycle_wav
    >>> from wtmip.dsp.multi import WavetableMulti
    >>>
    >>> samples, metadata = import_single_cycle_wav("cycle.wav")
    >>> multi = WavetableMulti.create_from_audio_data(samples, 1.0)
"""

from wtmip.format.importers.wav import import_single_cycle_wav

__all__ = [
    "import_single_cycle_wav",
]
