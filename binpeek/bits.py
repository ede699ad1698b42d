"""Bit-level formatting helpers."""

_WIDTH = 32


def format_binary(num: int) -> str:
    """Render ``num`` as 32 bits, most significant first, grouped in fours.

    Every group of four bits is followed by a single space, including the
    last one. Negative numbers are shown in two's complement.
    """
    value = num & ((1 << _WIDTH) - 1)
    bits = format(value, f"0{_WIDTH}b")
    return "".join(bits[start:start + 4] + " " for start in range(0, _WIDTH, 4))