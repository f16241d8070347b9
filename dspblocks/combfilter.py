"""Feed-forward (FIR) and recursive (IIR) comb filters for multi-channel audio."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum

import numpy as np

from .errors import InvalidArgumentError, NotInitializedError
from .ringbuffer import RingBuffer
from .util import float2int

_FLOAT_MAX = float(np.finfo(np.float32).max)


class CombFilterType(Enum):
    """Feed-forward or recursive comb filter."""

    FIR = "fir"
    IIR = "iir"


class FilterParam(Enum):
    """Adjustable comb filter parameters."""

    GAIN = "gain"
    DELAY = "delay"


def _as_channels(buffer, num_channels: int) -> np.ndarray:
    data = np.asarray(buffer, dtype=np.float64)
    if data.ndim != 2 or data.shape[0] != num_channels:
        raise InvalidArgumentError(
            f"expected a buffer of shape ({num_channels}, frames), got {data.shape}"
        )
    return data


def _output_for(data: np.ndarray, output_buffer) -> np.ndarray:
    if output_buffer is None:
        return np.empty_like(data)
    if not isinstance(output_buffer, np.ndarray) or output_buffer.shape != data.shape:
        raise InvalidArgumentError(
            f"output buffer must be an array of shape {data.shape}"
        )
    return output_buffer


class _CombCore(ABC):
    """Delay lines and parameters shared by both filter structures; delay is in frames."""

    gain_range: tuple[float, float] = (-_FLOAT_MAX, _FLOAT_MAX)

    def __init__(self, max_delay_frames: int, num_channels: int) -> None:
        if max_delay_frames <= 0:
            raise InvalidArgumentError(
                f"maximum delay must be at least one frame, got {max_delay_frames}"
            )
        self._params = {FilterParam.GAIN: 0.0, FilterParam.DELAY: 0.0}
        self._ranges = {
            FilterParam.GAIN: self.gain_range,
            FilterParam.DELAY: (0.0, float(max_delay_frames)),
        }
        self._rings = [RingBuffer(max_delay_frames) for _ in range(num_channels)]

    def set_param(self, param: FilterParam, value: float) -> None:
        low, high = self._ranges[param]
        if not low <= value <= high:
            raise InvalidArgumentError(
                f"{param.value} must lie in [{low}, {high}], got {value}"
            )
        if param is FilterParam.DELAY:
            shift = float2int(value)
            for ring in self._rings:
                ring.read_idx = ring.write_idx - shift
        self._params[param] = float(value)

    def get_param(self, param: FilterParam) -> float:
        return self._params[param]

    def process(self, data: np.ndarray, out: np.ndarray) -> None:
        gain = self._params[FilterParam.GAIN]
        for channel, ring in enumerate(self._rings):
            samples = data[channel]
            start = 0
            while start < samples.size:
                stop = min(samples.size, start + self._chunk_length(ring))
                out[channel, start:stop] = self._filter_chunk(ring, samples[start:stop], gain)
                start = stop

    @staticmethod
    @abstractmethod
    def _chunk_length(ring: RingBuffer) -> int:
        """Largest block that can be filtered at once with the same result as per sample."""

    @staticmethod
    @abstractmethod
    def _filter_chunk(ring: RingBuffer, samples: np.ndarray, gain: float) -> np.ndarray:
        """Filter one block, updating the delay line."""


class _FirCore(_CombCore):
    @staticmethod
    def _chunk_length(ring: RingBuffer) -> int:
        delay = ring.num_values_in_buffer
        return len(ring) - delay if delay else len(ring)

    @staticmethod
    def _filter_chunk(ring: RingBuffer, samples: np.ndarray, gain: float) -> np.ndarray:
        ring.put_many_post_inc(samples)
        return samples + gain * ring.get_many_post_inc(samples.size)


class _IirCore(_CombCore):
    gain_range = (-1.0, 1.0)

    @staticmethod
    def _chunk_length(ring: RingBuffer) -> int:
        delay = ring.num_values_in_buffer
        return delay if delay else len(ring)

    @staticmethod
    def _filter_chunk(ring: RingBuffer, samples: np.ndarray, gain: float) -> np.ndarray:
        result = samples + gain * ring.get_many_post_inc(samples.size)
        ring.put_many_post_inc(result)
        return result


_CORES = {CombFilterType.FIR: _FirCore, CombFilterType.IIR: _IirCore}


class CombFilter:
    """Multi-channel comb filter; the delay parameter is given in seconds."""

    def __init__(self) -> None:
        self._core: _CombCore | None = None
        self._num_channels = 0
        self._sample_rate = 0.0

    def init(
        self,
        filter_type: CombFilterType,
        max_delay_s: float,
        sample_rate_hz: float,
        num_channels: int,
    ) -> None:
        """Set up the filter; any previous state is discarded."""
        self.reset()
        if max_delay_s <= 0 or sample_rate_hz <= 0 or num_channels <= 0:
            raise InvalidArgumentError(
                "maximum delay, sample rate and number of channels must be positive"
            )
        try:
            kind = CombFilterType(filter_type)
        except ValueError as exc:
            raise InvalidArgumentError(f"unknown filter type {filter_type!r}") from exc
        self._core = _CORES[kind](float2int(max_delay_s * sample_rate_hz), int(num_channels))
        self._num_channels = int(num_channels)
        self._sample_rate = float(sample_rate_hz)

    def reset(self) -> None:
        """Discard the filter; ``init`` has to be called again before use."""
        self._core = None
        self._num_channels = 0
        self._sample_rate = 0.0

    @property
    def is_initialized(self) -> bool:
        """True once ``init`` has succeeded and until ``reset``."""
        return self._core is not None

    def _require_core(self) -> _CombCore:
        if self._core is None:
            raise NotInitializedError("comb filter has not been initialised")
        return self._core

    @staticmethod
    def _param(param) -> FilterParam:
        try:
            return FilterParam(param)
        except ValueError as exc:
            raise InvalidArgumentError(f"unknown filter parameter {param!r}") from exc

    def set_param(self, param: FilterParam, value: float) -> None:
        """Set the gain (as factor) or the delay (in seconds)."""
        core = self._require_core()
        param = self._param(param)
        if param is FilterParam.DELAY:
            value = value * self._sample_rate
        core.set_param(param, value)

    def get_param(self, param: FilterParam) -> float:
        """Return the gain (as factor) or the delay (in seconds)."""
        core = self._require_core()
        param = self._param(param)
        value = core.get_param(param)
        if param is FilterParam.DELAY:
            return value / self._sample_rate
        return value

    def process(self, input_buffer, output_buffer: np.ndarray | None = None) -> np.ndarray:
        """Filter a block of shape ``(channels, frames)``.

        The result is written into ``output_buffer`` when one is given (it may be the
        input array itself) and returned.
        """
        core = self._require_core()
        data = _as_channels(input_buffer, self._num_channels)
        out = _output_for(data, output_buffer)
        core.process(data, out)
        return out