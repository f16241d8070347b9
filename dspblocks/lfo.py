"""Wavetable low-frequency oscillator."""

from __future__ import annotations

from enum import Enum

from .errors import InvalidArgumentError
from .ringbuffer import RingBuffer
from .synthesis import generate_rect, generate_saw, generate_sine


class LfoType(Enum):
    """Waveform of the oscillator."""

    SINE = "sine"
    SAW = "saw"
    RECT = "rect"


_GENERATORS = {
    LfoType.SINE: generate_sine,
    LfoType.SAW: generate_saw,
    LfoType.RECT: generate_rect,
}


class Lfo:
    """Oscillator reading one period of a waveform from a table with interpolation.

    ``amplitude`` scales the output and ``frequency`` (in Hz) sets the speed.
    """

    TABLE_LENGTH = 4096

    def __init__(self, sample_rate: float) -> None:
        if sample_rate <= 0:
            raise InvalidArgumentError(f"sample rate must be positive, got {sample_rate}")
        self.sample_rate = float(sample_rate)
        self.amplitude = 0.0
        self.frequency = 0.0
        self._read_index = 0.0
        self._table = RingBuffer(self.TABLE_LENGTH)
        self._type = LfoType.SINE
        self._compute_table()

    def _compute_table(self) -> None:
        generator = _GENERATORS[self._type]
        self._table.put_many(
            generator(1.0, float(self.TABLE_LENGTH), self.TABLE_LENGTH)
        )

    @property
    def lfo_type(self) -> LfoType:
        """Current waveform; assigning a new one rebuilds the table."""
        return self._type

    @lfo_type.setter
    def lfo_type(self, value: LfoType) -> None:
        self._type = LfoType(value)
        self._compute_table()

    def next_value(self) -> float:
        """Return the current output sample and advance the phase."""
        value = self.amplitude * self._table.get(self._read_index)
        self._read_index += self.frequency / self.sample_rate * self.TABLE_LENGTH
        if self._read_index >= self.TABLE_LENGTH:
            self._read_index -= self.TABLE_LENGTH
        return value