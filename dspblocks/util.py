"""Small numeric helpers."""


def float2int(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    if value >= 0:
        return int(value + 0.5)
    return int(value - 0.5)


def is_pow_of_2(n: int) -> bool:
    """Return True if ``n`` has at most one bit set (0 counts as a power of two)."""
    return not (n & (n - 1))


def next_pow_of_2(n: int) -> int:
    """Return the smallest power of two not below ``n``, or 0 for ``n <= 0``."""
    if n <= 0:
        return 0
    return 1 << (n - 1).bit_length()