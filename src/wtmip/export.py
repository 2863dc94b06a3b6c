import io
import json
import zipfile
from pathlib import Path
from typing import Any

import numpy as np
import soundfile as sf

from wtmip.dsp.multi import TABLE_EXTRA, WavetableMulti
from wtmip.dsp.ranges import F1, FN, NUM_TABLES, MipmapRange
from wtmip.types import WavetableMetadata


def create_multi_metadata(
    name: str,
    source: str,
    amplitude: float,
    table_size: int,
    ref_sample_rate: float,
) -> WavetableMetadata:
    """Create standardized multisample metadata."""
    return {
        "version": 1,
        "name": name,
        "author": "wtmip",
        "generation": {
            "source": source,
            "amplitude": amplitude,
            "table_size": table_size,
            "ref_sample_rate": ref_sample_rate,
        },
    }


def save_multi_npz(
    out_path: Path | str,
    multi: WavetableMulti,
    meta: WavetableMetadata,
    compress: bool = True,
) -> None:
    """
    Save a multisample to NPZ format with a manifest.json schema.

    Args:
        out_path: Output file path
        multi: The multisample to save
        meta: Metadata dict (the "tables" field is auto-generated)
        compress: Whether to compress the ZIP file
    """
    compression = zipfile.ZIP_DEFLATED if compress else zipfile.ZIP_STORED

    with zipfile.ZipFile(out_path, "w", compression=compression) as z:
        manifest = dict(meta)
        manifest["num_tables"] = NUM_TABLES
        manifest["table_size"] = multi.table_size
        manifest["table_extra"] = TABLE_EXTRA
        manifest["first_start_frequency"] = F1
        manifest["last_start_frequency"] = FN
        manifest["tables"] = []

        for index, table in enumerate(multi):
            arr_data = np.asarray(table, dtype="<f4", order="C")
            name = f"tables/table_{index:02d}_len{arr_data.shape[0]}.npy"

            # Serialize NPY into memory so we can write into the zip
            buf = io.BytesIO()
            np.save(buf, arr_data, allow_pickle=False)
            z.writestr(name, buf.getvalue())

            mip_range = MipmapRange.get_range_for_index(index)
            manifest["tables"].append(
                {
                    "npz_path": name,
                    "index": index,
                    "length": int(arr_data.shape[0]),
                    "min_frequency": mip_range.min_frequency,
                    "max_frequency": mip_range.max_frequency,
                    "cutoff": multi.cutoff_for_index(index),
                }
            )

        all_samples = multi.tables()
        manifest["stats"] = {
            "dc_offset_mean": float(np.mean(all_samples)),
            "peak": float(np.max(np.abs(all_samples))),
        }

        z.writestr("manifest.json", json.dumps(manifest, indent=2))


def load_multi_npz(file_path: Path | str) -> dict[str, Any]:
    """
    Load a multisample saved by save_multi_npz.

    Returns:
        Dict containing "manifest" and "tables" keys, "tables" being a
        (num_tables, table_size) float32 array
    """
    with zipfile.ZipFile(file_path, "r") as z:
        manifest = json.loads(z.read("manifest.json"))

        rows = []
        for table_info in manifest["tables"]:
            buf = io.BytesIO(z.read(table_info["npz_path"]))
            rows.append(np.load(buf, allow_pickle=False))

    return {"manifest": manifest, "tables": np.stack(rows) if rows else np.empty((0, 0))}


# soundfile subtypes for the supported PCM bit depths
WAV_SUBTYPES = {16: "PCM_16", 24: "PCM_24", 32: "PCM_32"}


def save_tables_as_wav(
    output_dir: Path | str,
    multi: WavetableMulti,
    sample_rate: int = 44100,
    bit_depth: int = 16,
) -> list[Path]:
    """
    Save each table as an individual single-cycle .wav file.

    Args:
        output_dir: Directory to save .wav files
        multi: The multisample to save
        sample_rate: Sample rate for .wav files (default 44100 Hz)
        bit_depth: PCM bit depth for .wav files (16 or 24 or 32)

    Returns:
        Paths of the written files, in table order
    """
    if bit_depth not in WAV_SUBTYPES:
        raise ValueError(f"Unsupported bit depth: {bit_depth}. Use 16, 24, or 32.")
    subtype = WAV_SUBTYPES[bit_depth]

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    written = []
    for index, table in enumerate(multi):
        # Handle NaN/inf values by replacing with 0
        clean = np.where(np.isfinite(table), table, 0.0)
        # soundfile scales floats in [-1, 1] to the full PCM range
        samples = np.clip(clean, -1.0, 1.0).astype(np.float64)

        filepath = output_dir / f"table_{index:02d}_len{len(table)}.wav"
        sf.write(filepath, samples, sample_rate, subtype=subtype)
        written.append(filepath)

    return written
