"""Circular buffer of floating point samples with separate read and write indices."""

from __future__ import annotations

import math
from typing import Iterable

import numpy as np

from .errors import InvalidArgumentError


class RingBuffer:
    """Fixed-length circular buffer of float samples."""

    def __init__(self, length: int) -> None:
        if length <= 0:
            raise InvalidArgumentError(f"ring buffer length must be positive, got {length}")
        self._buffer = np.zeros(int(length), dtype=np.float64)
        self._read = 0
        self._write = 0

    def __len__(self) -> int:
        return self._buffer.size

    def __repr__(self) -> str:
        return f"RingBuffer(length={len(self)}, read_idx={self._read}, write_idx={self._write})"

    def _indices(self, start: int, count: int) -> np.ndarray:
        return (start + np.arange(count)) % len(self)

    def _check_count(self, count: int) -> None:
        if not 0 <= count <= len(self):
            raise InvalidArgumentError(
                f"number of values must be between 0 and {len(self)}, got {count}"
            )

    def put(self, value: float) -> None:
        """Store a value at the write index without moving it."""
        self._buffer[self._write] = value

    def put_post_inc(self, value: float) -> None:
        """Store a value at the write index and advance the write index by one."""
        self.put(value)
        self._write = (self._write + 1) % len(self)

    def put_many(self, values: Iterable[float]) -> None:
        """Store values starting at the write index, wrapping around, without moving it."""
        data = np.asarray(list(values) if not isinstance(values, np.ndarray) else values,
                          dtype=np.float64).ravel()
        self._check_count(data.size)
        self._buffer[self._indices(self._write, data.size)] = data

    def put_many_post_inc(self, values: Iterable[float]) -> None:
        """Store values starting at the write index and advance it past them."""
        data = np.asarray(list(values) if not isinstance(values, np.ndarray) else values,
                          dtype=np.float64).ravel()
        self.put_many(data)
        self._write = (self._write + data.size) % len(self)

    def get(self, offset: float = 0.0) -> float:
        """Return the value at the read index, linearly interpolated at a fractional offset."""
        if offset == 0:
            return float(self._buffer[self._read])
        whole = math.floor(offset)
        frac = offset - whole
        idx = (self._read + whole) % len(self)
        nxt = (idx + 1) % len(self)
        return float((1 - frac) * self._buffer[idx] + frac * self._buffer[nxt])

    def get_post_inc(self) -> float:
        """Return the value at the read index and advance the read index by one."""
        value = self.get()
        self._read = (self._read + 1) % len(self)
        return value

    def get_many(self, length: int) -> np.ndarray:
        """Return ``length`` values starting at the read index, without moving it."""
        self._check_count(length)
        return self._buffer[self._indices(self._read, length)]

    def get_many_post_inc(self, length: int) -> np.ndarray:
        """Return ``length`` values starting at the read index and advance it past them."""
        values = self.get_many(length)
        self._read = (self._read + length) % len(self)
        return values

    def reset(self) -> None:
        """Clear the content and set both indices to zero."""
        self._buffer.fill(0.0)
        self._read = 0
        self._write = 0

    @property
    def write_idx(self) -> int:
        """Current write position; assigning wraps the value into the buffer."""
        return self._write

    @write_idx.setter
    def write_idx(self, value: int) -> None:
        self._write = int(value) % len(self)

    @property
    def read_idx(self) -> int:
        """Current read position; assigning wraps the value into the buffer."""
        return self._read

    @read_idx.setter
    def read_idx(self, value: int) -> None:
        self._read = int(value) % len(self)

    @property
    def num_values_in_buffer(self) -> int:
        """Distance from read to write index (0 may also mean the buffer is full)."""
        return (self._write - self._read) % len(self)