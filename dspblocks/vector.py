"""Operations on one-dimensional sample buffers."""

from __future__ import annotations

from typing import Iterable

import numpy as np

from .errors import InvalidArgumentError

_FLOAT_MAX = float(np.finfo(np.float32).max)


def _as_array(values: Iterable[float]) -> np.ndarray:
    if isinstance(values, np.ndarray):
        return values.astype(np.float64, copy=False).ravel()
    return np.asarray(list(values), dtype=np.float64).ravel()


def set_zero_below_thresh(values: Iterable[float], thresh: float) -> np.ndarray:
    """Return a copy of ``values`` with every element below ``thresh`` set to zero."""
    data = _as_array(values).copy()
    data[data < thresh] = 0.0
    return data


def flip(values: Iterable[float]) -> np.ndarray:
    """Return the values in reverse order."""
    return _as_array(values)[::-1].copy()


def move_in_mem(
    values: Iterable[float], dest_idx: int, src_idx: int, length: int
) -> np.ndarray:
    """Return a copy of ``values`` in which ``length`` elements starting at ``src_idx``
    have been moved to ``dest_idx``; overlapping ranges are handled correctly."""
    data = _as_array(values).copy()
    if length < 0:
        raise InvalidArgumentError(f"length must not be negative, got {length}")
    if length == 0:
        return data
    if dest_idx < 0 or src_idx < 0 or max(dest_idx, src_idx) + length > data.size:
        raise InvalidArgumentError("move range lies outside the buffer")
    data[dest_idx:dest_idx + length] = data[src_idx:src_idx + length].copy()
    return data


def get_sum(values: Iterable[float], absolute: bool = False) -> float:
    """Return the sum of the values, or of their magnitudes if ``absolute`` is set."""
    data = _as_array(values)
    return float(np.sum(np.abs(data) if absolute else data))


def get_mean(values: Iterable[float]) -> float:
    """Return the arithmetic mean, or 0 for an empty buffer."""
    data = _as_array(values)
    if data.size == 0:
        return 0.0
    return get_sum(data) / data.size


def get_std(values: Iterable[float], mean: float | None = None) -> float:
    """Return the biased standard deviation; ``mean`` is computed when not given."""
    data = _as_array(values)
    if mean is None:
        mean = get_mean(data)
    total = float(np.sum((data - mean) ** 2))
    if data.size > 1:
        total /= data.size
    return float(np.sqrt(total))


def get_rms(values: Iterable[float]) -> float:
    """Return the root mean square, or 0 for an empty buffer."""
    data = _as_array(values)
    if data.size == 0:
        return 0.0
    return float(np.sqrt(np.sum(data * data) / data.size))


def find_max(values: Iterable[float], absolute: bool = False) -> tuple[float, int]:
    """Return the largest value and its first index; ``(-FLT_MAX, -1)`` if none is found."""
    data = _as_array(values)
    if absolute:
        data = np.abs(data)
    if data.size == 0:
        return -_FLOAT_MAX, -1
    idx = int(np.argmax(data))
    best = float(data[idx])
    if not best > -_FLOAT_MAX:
        return -_FLOAT_MAX, -1
    return best, idx


def find_min(values: Iterable[float], absolute: bool = False) -> tuple[float, int]:
    """Return the smallest value and its first index; ``(FLT_MAX, -1)`` if none is found."""
    data = _as_array(values)
    if absolute:
        data = np.abs(data)
    if data.size == 0:
        return _FLOAT_MAX, -1
    idx = int(np.argmin(data))
    best = float(data[idx])
    if not best < _FLOAT_MAX:
        return _FLOAT_MAX, -1
    return best, idx


def get_max(values: Iterable[float], absolute: bool = False) -> float:
    """Return the largest (absolute) value."""
    return find_max(values, absolute)[0]


def get_min(values: Iterable[float], absolute: bool = False) -> float:
    """Return the smallest (absolute) value."""
    return find_min(values, absolute)[0]


def is_equal(first: Iterable[float], second: Iterable[float]) -> bool:
    """Return True if both buffers hold exactly the same values."""
    a = _as_array(first)
    b = _as_array(second)
    return a.shape == b.shape and bool(np.array_equal(a, b))