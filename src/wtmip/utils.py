from typing import NoReturn


def assert_exhaustiveness(x: NoReturn) -> NoReturn:
    """Provide an assertion at type-check time that this function is never called."""
    raise AssertionError(f"Invalid value: {x!r}")


def is_power_of_two(value: int) -> bool:
    return value > 0 and (value & (value - 1)) == 0
