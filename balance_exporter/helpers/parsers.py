"""Parsing utilities for common data transformations."""

from typing import Any

from balance_exporter.helpers.constants import GWEI_PER_ETH


def prefix_0x(value: str) -> str:
    """Return a hex string with a ``0x`` prefix.

    Example:
        >>> prefix_0x("a1b2")
        '0xa1b2'
        >>> prefix_0x("0xa1b2")
        '0xa1b2'
    """
    if value.lower().startswith("0x"):
        return value
    return f"0x{value}"


def parse_uint(value: Any) -> int:
    """Parse a non-negative integer from a JSON value.

    Beacon APIs encode uint64 values as decimal strings; explorers usually send
    plain numbers.

    Args:
        value: Decimal string or integer

    Returns:
        int: Parsed value

    Raises:
        ValueError: If the value is missing, not integral, or negative

    Example:
        >>> parse_uint("32000000000")
        32000000000
    """
    msg = f"Expected an unsigned integer, got {value!r}"
    if not isinstance(value, int | str) or isinstance(value, bool):
        raise ValueError(msg)
    try:
        parsed = int(value)
    except ValueError as e:
        raise ValueError(msg) from e
    if parsed < 0:
        raise ValueError(msg)
    return parsed


def gwei_to_eth(gwei: int) -> float:
    """Convert Gwei to the display unit (divide by 1e9).

    Example:
        >>> gwei_to_eth(32_000_000_000)
        32.0
        >>> gwei_to_eth(1_000_000)
        0.001
    """
    return gwei / GWEI_PER_ETH


__all__ = [
    "gwei_to_eth",
    "parse_uint",
    "prefix_0x",
]
