"""Faust source output for a wavetable multisample.

The multisample is written as a Faust `waveform` primitive, one line per
table, preceded by the constants needed to select a table at run time:

    tableSize = 2048;
    numTables = 24;
    firstStartFrequency = 20.000000;
    lastStartFrequency = 12000.000000;
    waveData = waveform{
      ...
    } : (!, _);
"""

import io
from typing import TextIO

from wtmip.dsp.multi import WavetableMulti
from wtmip.dsp.ranges import F1, FN, NUM_TABLES


def _format_float(value: float) -> str:
    # matches printf("%e")
    return f"{value:e}"


def write_faust_waveform(stream: TextIO, multi: WavetableMulti) -> None:
    """Write the multisample as Faust source to `stream`."""
    stream.write(f"tableSize = {multi.table_size};\n")
    stream.write(f"numTables = {NUM_TABLES};\n")
    stream.write(f"firstStartFrequency = {F1:f};\n")
    stream.write(f"lastStartFrequency = {FN:f};\n")
    stream.write("waveData = waveform{\n")

    for table_no, table in enumerate(multi):
        stream.write("  " + ", ".join(_format_float(float(x)) for x in table))
        if table_no + 1 < NUM_TABLES:
            stream.write(",")
        stream.write("\n")

    stream.write("} : (!, _);\n")


def format_faust_waveform(multi: WavetableMulti) -> str:
    buf = io.StringIO()
    write_faust_waveform(buf, multi)
    return buf.getvalue()
