import logging
import sys
import zipfile
from pathlib import Path
from typing import Annotated

import numpy as np
from cyclopts import App, Parameter
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from wtmip.cli.validators import (
    validate_even_table_size,
    validate_partials_string,
    validate_positive_float,
    validate_positive_integer,
)
from wtmip.dsp.harmonics import HarmonicProfile, PartialsHarmonicProfile, profile_for_waveform
from wtmip.dsp.multi import WavetableMulti, band_cutoff
from wtmip.dsp.ranges import F1, FN, NUM_TABLES, MipmapRange
from wtmip.export import (
    create_multi_metadata,
    load_multi_npz,
    save_multi_npz,
    save_tables_as_wav,
)
from wtmip.format import ValidationError, import_single_cycle_wav, write_faust_waveform
from wtmip.types import (
    BitDepth,
    BuildParams,
    ExportParams,
    HarmonicPartial,
    OutputFormat,
    WavetableMetadata,
    WaveformType,
)

app = App(name="wtmip", help="Build band-limited mipmapped wavetables from single-cycle waveforms")
console = Console()
# status goes to stderr so that Faust source can be piped from stdout
err_console = Console(stderr=True)


def print_error(message: str) -> None:
    """Print an error message in red."""
    err_console.print(message, style="bold red")


def print_success(message: str) -> None:
    """Print a success message in green."""
    err_console.print(message, style="bold green")


def configure_logging(verbose: bool) -> None:
    """Route the package logger through rich when running verbosely."""
    logger = logging.getLogger("wtmip")
    if not verbose:
        logger.setLevel(logging.WARNING)
        return
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(RichHandler(console=err_console, show_path=False))
    logger.setLevel(logging.DEBUG)


def parse_partials_string(partials: str) -> list[HarmonicPartial]:
    """Parse partials string into HarmonicPartial objects."""
    partial_list = []
    for partial_str in partials.split(","):
        parts = partial_str.strip().split(":")
        if len(parts) != 3:
            raise ValueError(f"Invalid partial format: {partial_str}")
        harmonic = int(parts[0])
        amplitude = float(parts[1])
        phase = float(parts[2])
        partial_list.append(HarmonicPartial(harmonic, amplitude, phase))
    return partial_list


def _build(profile: HarmonicProfile, params: BuildParams) -> WavetableMulti:
    err_console.print(
        f"Building {NUM_TABLES} tables of [cyan bold]{params.table_size}[/] samples "
        f"for {params.ref_sample_rate:g} Hz playback..."
    )
    return WavetableMulti.create_for_harmonic_profile(
        profile,
        params.amplitude,
        table_size=params.table_size,
        ref_sample_rate=params.ref_sample_rate,
        workers=params.workers,
    )


def _write_output(
    multi: WavetableMulti,
    output: Path | None,
    output_format: OutputFormat,
    meta: WavetableMetadata,
    export_params: ExportParams,
) -> int:
    if output_format == "faust":
        if output is None:
            write_faust_waveform(sys.stdout, multi)
            sys.stdout.flush()
            return 0
        try:
            with output.open("w", encoding="utf-8") as stream:
                write_faust_waveform(stream, multi)
        except OSError as e:
            print_error(f"Cannot write output file: {e}")
            return 1
        print_success(f"Wrote Faust waveform to {output}")
        return 0

    if output is None:
        print_error(f"Error: --output is required for {output_format} format")
        return 1

    try:
        if output_format == "npz":
            save_multi_npz(output, multi, meta, compress=True)
            print_success(f"Exported {multi.num_tables} tables to {output}")
        else:
            written = save_tables_as_wav(
                output,
                multi,
                sample_rate=export_params.sample_rate,
                bit_depth=export_params.bit_depth,
            )
            print_success(f"Exported {len(written)} WAV tables to {output}")
    except OSError as e:
        print_error(f"Cannot write output: {e}")
        return 1

    return 0


@app.command
def build(
    source: Path,
    output: Path | None = None,
    output_format: Annotated[OutputFormat, Parameter(name="--format")] = "faust",
    amplitude: Annotated[float, Parameter(validator=validate_positive_float)] = 1.0,
    size: Annotated[int, Parameter(validator=validate_even_table_size)] = 2048,
    ref_sample_rate: Annotated[float, Parameter(validator=validate_positive_float)] = 44100.0,
    workers: Annotated[int, Parameter(validator=validate_positive_integer)] = 1,
    wav_sample_rate: int = 44100,
    wav_bit_depth: BitDepth = 16,
    verbose: bool = False,
) -> int:
    """
    Build a mipmapped wavetable from a single-cycle mono WAV file.

    Parameters
    ----------
    source: Path
        WAV file holding exactly one period of the waveform, on one channel
    output: Path | None
        Output file (faust, npz) or directory (wav). Faust source goes to stdout if omitted
    output_format: OutputFormat
        Output format: faust, npz or wav
    amplitude: float
        Peak amplitude of the generated tables
    size: int
        Length of each table in samples. Must be even
    ref_sample_rate: float
        Lowest sample rate the tables will be played at, in Hz
    workers: int
        Number of threads synthesizing tables
    wav_sample_rate: int
        Sample rate written in .wav tables, in Hz
    wav_bit_depth: BitDepth
        Bit depth of .wav tables
    verbose: bool
        Log build progress
    """
    configure_logging(verbose)

    try:
        samples, source_meta = import_single_cycle_wav(source)
    except FileNotFoundError:
        print_error(f"Error: Cannot open sound file: {source}")
        return 1
    except ValidationError as e:
        print_error(f"Error: {e}")
        return 1
    except RuntimeError as e:
        # soundfile reports undecodable files as LibsndfileError, a RuntimeError
        print_error(f"Error: Cannot read sound data: {e}")
        return 1

    params = BuildParams(
        amplitude=amplitude, table_size=size, ref_sample_rate=ref_sample_rate, workers=workers
    )
    profile_source = f"{source.name} ({source_meta['frames']} frames)"
    err_console.print(f"Measuring harmonics of {profile_source}...")

    multi = WavetableMulti.create_from_audio_data(
        samples,
        params.amplitude,
        table_size=params.table_size,
        ref_sample_rate=params.ref_sample_rate,
        workers=params.workers,
    )

    meta = create_multi_metadata(
        name=source.stem,
        source=source.name,
        amplitude=amplitude,
        table_size=size,
        ref_sample_rate=ref_sample_rate,
    )
    return _write_output(
        multi,
        output,
        output_format,
        meta,
        ExportParams(sample_rate=wav_sample_rate, bit_depth=wav_bit_depth),
    )


@app.command
def generate(
    waveform: WaveformType = WaveformType.sawtooth,
    output: Path | None = None,
    output_format: Annotated[OutputFormat, Parameter(name="--format")] = "faust",
    amplitude: Annotated[float, Parameter(validator=validate_positive_float)] = 1.0,
    size: Annotated[int, Parameter(validator=validate_even_table_size)] = 2048,
    ref_sample_rate: Annotated[float, Parameter(validator=validate_positive_float)] = 44100.0,
    workers: Annotated[int, Parameter(validator=validate_positive_integer)] = 1,
    wav_sample_rate: int = 44100,
    wav_bit_depth: BitDepth = 16,
    verbose: bool = False,
) -> int:
    """
    Build a mipmapped wavetable from a classic analytic waveform.

    Parameters
    ----------
    waveform: WaveformType
        The base wave shape for the wavetable
    output: Path | None
        Output file (faust, npz) or directory (wav). Faust source goes to stdout if omitted
    output_format: OutputFormat
        Output format: faust, npz or wav
    amplitude: float
        Peak amplitude of the generated tables
    size: int
        Length of each table in samples. Must be even
    ref_sample_rate: float
        Lowest sample rate the tables will be played at, in Hz
    workers: int
        Number of threads synthesizing tables
    wav_sample_rate: int
        Sample rate written in .wav tables, in Hz
    wav_bit_depth: BitDepth
        Bit depth of .wav tables
    verbose: bool
        Log build progress
    """
    configure_logging(verbose)

    params = BuildParams(
        amplitude=amplitude, table_size=size, ref_sample_rate=ref_sample_rate, workers=workers
    )
    multi = _build(profile_for_waveform(waveform), params)

    meta = create_multi_metadata(
        name=f"{waveform.value}_wavetable",
        source=waveform.value,
        amplitude=amplitude,
        table_size=size,
        ref_sample_rate=ref_sample_rate,
    )
    return _write_output(
        multi,
        output,
        output_format,
        meta,
        ExportParams(sample_rate=wav_sample_rate, bit_depth=wav_bit_depth),
    )


@app.command
def harmonic(
    partials: Annotated[str, Parameter(validator=validate_partials_string)] = "1:1.0:0.0",
    output: Path | None = None,
    output_format: Annotated[OutputFormat, Parameter(name="--format")] = "faust",
    amplitude: Annotated[float, Parameter(validator=validate_positive_float)] = 1.0,
    size: Annotated[int, Parameter(validator=validate_even_table_size)] = 2048,
    ref_sample_rate: Annotated[float, Parameter(validator=validate_positive_float)] = 44100.0,
    workers: Annotated[int, Parameter(validator=validate_positive_integer)] = 1,
    wav_sample_rate: int = 44100,
    wav_bit_depth: BitDepth = 16,
    verbose: bool = False,
) -> int:
    """
    Build a mipmapped wavetable from explicit harmonic partials.

    Parameters
    ----------
    partials: str
        Harmonic partials as 'h1:a1:p1,h2:a2:p2...'
        where h is harmonic index, a is amplitude and p is sine phase in radians
    output: Path | None
        Output file (faust, npz) or directory (wav). Faust source goes to stdout if omitted
    output_format: OutputFormat
        Output format: faust, npz or wav
    amplitude: float
        Scale applied to all partials
    size: int
        Length of each table in samples. Must be even
    ref_sample_rate: float
        Lowest sample rate the tables will be played at, in Hz
    workers: int
        Number of threads synthesizing tables
    wav_sample_rate: int
        Sample rate written in .wav tables, in Hz
    wav_bit_depth: BitDepth
        Bit depth of .wav tables
    verbose: bool
        Log build progress
    """
    configure_logging(verbose)

    partial_list = parse_partials_string(partials)
    err_console.print(f"Using {len(partial_list)} partials...")

    params = BuildParams(
        amplitude=amplitude, table_size=size, ref_sample_rate=ref_sample_rate, workers=workers
    )
    multi = _build(PartialsHarmonicProfile(partial_list), params)

    meta = create_multi_metadata(
        name="harmonic_wavetable",
        source="harmonic",
        amplitude=amplitude,
        table_size=size,
        ref_sample_rate=ref_sample_rate,
    )
    meta["generation"]["partials"] = [(p.harmonic, p.amplitude, p.phase) for p in partial_list]
    return _write_output(
        multi,
        output,
        output_format,
        meta,
        ExportParams(sample_rate=wav_sample_rate, bit_depth=wav_bit_depth),
    )


@app.command
def ranges(
    size: Annotated[int, Parameter(validator=validate_even_table_size)] = 2048,
    ref_sample_rate: Annotated[float, Parameter(validator=validate_positive_float)] = 44100.0,
) -> int:
    """
    Display the playback frequency range and harmonic cutoff of every table.

    Parameters
    ----------
    size: int
        Table length used to compute the cutoffs
    ref_sample_rate: float
        Reference sample rate used to compute the cutoffs, in Hz
    """
    table = Table(title=f"{NUM_TABLES} tables, {F1:g} Hz to {FN:g} Hz")
    table.add_column("Index", justify="right")
    table.add_column("Min Hz", justify="right")
    table.add_column("Max Hz", justify="right")
    table.add_column("Cutoff", justify="right")
    table.add_column("Max harmonic", justify="right")

    for index in range(NUM_TABLES):
        mip_range = MipmapRange.get_range_for_index(index)
        cutoff = band_cutoff(index, size, ref_sample_rate)
        max_harmonic = min(int(cutoff * size), size // 2)
        table.add_row(
            str(index),
            f"{mip_range.min_frequency:.2f}",
            f"{mip_range.max_frequency:.2f}",
            f"{cutoff:.5f}",
            str(max_harmonic),
        )

    console.print(table)
    return 0


@app.command
def info(file: Path) -> int:
    """
    Display information about a saved .npz multisample.

    Parameters
    ----------
    file: Path
        Input .npz file written with --format npz
    """
    if not file.exists():
        print_error(f"Error: File {file} does not exist")
        return 1

    try:
        data = load_multi_npz(file)
    except (OSError, KeyError, ValueError, zipfile.BadZipFile) as e:
        print_error(f"Error reading file: {e}")
        return 1

    manifest = data["manifest"]
    tables = data["tables"]

    console.print(f"Wavetable: {file}")
    console.print(f"  Name: {manifest.get('name', 'unknown')}")
    console.print(f"  Version: {manifest.get('version', 'unknown')}")
    console.print(f"  Author: {manifest.get('author', 'unknown')}")
    console.print(f"  Tables: {manifest.get('num_tables', len(tables))}")
    console.print(f"  Table size: {manifest.get('table_size', 'unknown')}")

    if "generation" in manifest:
        gen = manifest["generation"]
        console.print(f"  Source: {gen.get('source', 'unknown')}")
        console.print(f"  Reference sample rate: {gen.get('ref_sample_rate', 'unknown')} Hz")

    for table_info, row in zip(manifest.get("tables", []), tables, strict=False):
        rms = np.sqrt(np.mean(row.astype(np.float64) ** 2))
        console.print(
            f"    Table {table_info['index']:2d}: "
            f"{table_info['min_frequency']:8.2f}-{table_info['max_frequency']:8.2f} Hz, "
            f"RMS={rms:.3f}"
        )

    if "stats" in manifest:
        stats = manifest["stats"]
        console.print(f"  DC offset: {stats.get('dc_offset_mean', 0.0):.6f}")
        console.print(f"  Peak: {stats.get('peak', 0.0):.6f}")

    return 0


def main() -> None:
    sys.exit(app())


if __name__ == "__main__":
    main()
