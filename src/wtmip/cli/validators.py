def validate_even_table_size(type_: object, size: int) -> None:
    """Validate that a table size is a positive even number."""
    if size <= 0 or size % 2 != 0:
        raise ValueError("Size must be a positive even number")


def validate_positive_integer(type_: object, value: int) -> None:
    if value <= 0:
        raise ValueError("Value must be a positive integer")


def validate_positive_float(type_: object, value: float) -> None:
    if not value > 0.0:
        raise ValueError("Value must be greater than 0")


def validate_partials_string(type_: object, partials: str | None) -> None:
    if not partials:
        return

    for partial_str in partials.split(","):
        parts = partial_str.strip().split(":")
        if len(parts) != 3:
            raise ValueError(f"Invalid partial format: {partial_str}")

        try:
            harmonic = int(parts[0])
            float(parts[1])
            float(parts[2])
        except ValueError:
            raise ValueError(f"Invalid partial values: {partial_str}") from None

        if harmonic < 1:
            raise ValueError(f"Harmonic index must be >= 1: {partial_str}")
