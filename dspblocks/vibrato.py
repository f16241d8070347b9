"""Vibrato effect: a delay line whose length is modulated by a sine oscillator."""

from __future__ import annotations

from enum import Enum

import numpy as np

from .errors import InvalidArgumentError, NotInitializedError
from .lfo import Lfo
from .ringbuffer import RingBuffer
from .util import float2int


class VibratoParam(Enum):
    """Adjustable vibrato parameters."""

    MOD_WIDTH_S = "mod_width_s"
    MOD_FREQ_HZ = "mod_freq_hz"


class Vibrato:
    """Multi-channel vibrato with modulation width in seconds and frequency in Hz."""

    def __init__(self) -> None:
        self._lfo: Lfo | None = None
        self._rings: list[RingBuffer] = []
        self._sample_rate = 44100.0
        self._ranges: dict[VibratoParam, tuple[float, float]] = {}

    def init(self, max_mod_width_s: float, sample_rate_hz: float, num_channels: int) -> None:
        """Set up delay lines and oscillator; any previous state is discarded."""
        self.reset()
        if max_mod_width_s < 0:
            raise InvalidArgumentError(
                f"maximum modulation width must not be negative, got {max_mod_width_s}"
            )
        if sample_rate_hz <= 0 or num_channels <= 0:
            raise InvalidArgumentError("sample rate and number of channels must be positive")

        self._sample_rate = float(sample_rate_hz)
        self._ranges = {
            VibratoParam.MOD_FREQ_HZ: (0.0, sample_rate_hz * 0.5),
            VibratoParam.MOD_WIDTH_S: (0.0, float(max_mod_width_s)),
        }
        length = float2int(max_mod_width_s * sample_rate_hz * 2 + 1)
        delay = float2int(max_mod_width_s * sample_rate_hz + 1)
        self._rings = [RingBuffer(length) for _ in range(int(num_channels))]
        for ring in self._rings:
            ring.write_idx = delay
        self._lfo = Lfo(sample_rate_hz)

    def reset(self) -> None:
        """Discard delay lines and oscillator; ``init`` has to be called again."""
        self._lfo = None
        self._rings = []
        self._ranges = {}

    @property
    def is_initialized(self) -> bool:
        """True once ``init`` has succeeded and until ``reset``."""
        return self._lfo is not None

    def _require_lfo(self) -> Lfo:
        if self._lfo is None:
            raise NotInitializedError("vibrato has not been initialised")
        return self._lfo

    @staticmethod
    def _param(param) -> VibratoParam:
        try:
            return VibratoParam(param)
        except ValueError as exc:
            raise InvalidArgumentError(f"unknown vibrato parameter {param!r}") from exc

    def set_param(self, param: VibratoParam, value: float) -> None:
        """Set the modulation width (seconds) or the modulation frequency (Hz)."""
        lfo = self._require_lfo()
        param = self._param(param)
        low, high = self._ranges[param]
        if not low <= value <= high:
            raise InvalidArgumentError(
                f"{param.value} must lie in [{low}, {high}], got {value}"
            )
        if param is VibratoParam.MOD_FREQ_HZ:
            lfo.frequency = float(value)
        else:
            lfo.amplitude = float(value) * self._sample_rate

    def get_param(self, param: VibratoParam) -> float:
        """Return the modulation width (seconds) or the modulation frequency (Hz)."""
        lfo = self._require_lfo()
        param = self._param(param)
        if param is VibratoParam.MOD_FREQ_HZ:
            return lfo.frequency
        return lfo.amplitude / self._sample_rate

    def process(self, input_buffer, output_buffer: np.ndarray | None = None) -> np.ndarray:
        """Process a block of shape ``(channels, frames)``.

        The result is written into ``output_buffer`` when one is given (it may be the
        input array itself) and returned.
        """
        lfo = self._require_lfo()
        data = np.asarray(input_buffer, dtype=np.float64)
        if data.ndim != 2 or data.shape[0] != len(self._rings):
            raise InvalidArgumentError(
                f"expected a buffer of shape ({len(self._rings)}, frames), got {data.shape}"
            )
        if output_buffer is None:
            out = np.empty_like(data)
        elif isinstance(output_buffer, np.ndarray) and output_buffer.shape == data.shape:
            out = output_buffer
        else:
            raise InvalidArgumentError(f"output buffer must be an array of shape {data.shape}")

        offsets = [lfo.next_value() for _ in range(data.shape[1])]
        results = []
        for ring, samples in zip(self._rings, data.tolist()):
            row = []
            for sample, offset in zip(samples, offsets):
                ring.put_post_inc(sample)
                row.append(ring.get(offset))
                ring.get_post_inc()  # keep read and write index in step
            results.append(row)
        out[...] = np.asarray(results, dtype=np.float64).reshape(data.shape)
        return out