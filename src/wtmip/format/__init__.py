"""Input and output formats around the mipmap builder.

- importers: decoding single-cycle source waveforms
- validation: checks applied to source waveforms before building
- faust: Faust `waveform` source for a built multisample
"""

from wtmip.format.faust import format_faust_waveform, write_faust_waveform
from wtmip.format.importers import import_single_cycle_wav
from wtmip.format.validation import (
    ValidationError,
    ValidationResult,
    ensure_valid_source_waveform,
    validate_source_waveform,
)

__all__ = [
    # Importers
    "import_single_cycle_wav",
    # Output
    "write_faust_waveform",
    "format_faust_waveform",
    # Validation
    "validate_source_waveform",
    "ensure_valid_source_waveform",
    "ValidationError",
    "ValidationResult",
]
