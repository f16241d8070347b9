"""Generators for simple test signals."""

from __future__ import annotations

import math
from itertools import accumulate

import numpy as np

from .errors import InvalidArgumentError
from .util import float2int


def _check_length(length: int) -> None:
    if length < 0:
        raise InvalidArgumentError(f"signal length must not be negative, got {length}")


def generate_sine(
    freq_hz: float,
    sample_rate_hz: float,
    length: int,
    amplitude: float = 1.0,
    start_phase: float = 0.0,
) -> np.ndarray:
    """Return ``length`` samples of a sinusoid."""
    _check_length(length)
    n = np.arange(length, dtype=np.float64)
    return amplitude * np.sin(2 * math.pi * freq_hz * n / sample_rate_hz + start_phase)


def generate_rect(
    freq_hz: float, sample_rate_hz: float, length: int, amplitude: float = 1.0
) -> np.ndarray:
    """Return ``length`` samples of a square wave starting at ``+amplitude``."""
    _check_length(length)
    period = sample_rate_hz / freq_hz
    period_samples = float2int(period)
    if period_samples <= 0:
        raise InvalidArgumentError("period of the rectangle wave is shorter than one sample")
    n = np.arange(length)
    return np.where(n % period_samples <= 0.5 * period, amplitude, -amplitude).astype(np.float64)


def generate_saw(
    freq_hz: float, sample_rate_hz: float, length: int, amplitude: float = 1.0
) -> np.ndarray:
    """Return ``length`` samples of a rising sawtooth starting at zero."""
    _check_length(length)
    if length == 0:
        return np.zeros(0)
    if amplitude == 0:
        return np.zeros(length)
    incr = 2 * amplitude / sample_rate_hz * freq_hz
    span = 2 * amplitude
    values = accumulate(
        range(length - 1),
        lambda prev, _: math.fmod(prev + incr + amplitude, span) - amplitude,
        initial=0.0,
    )
    return np.fromiter(values, dtype=np.float64, count=length)


def generate_dc(length: int, amplitude: float = 1.0) -> np.ndarray:
    """Return ``length`` samples of a constant value."""
    _check_length(length)
    return np.full(length, amplitude, dtype=np.float64)


def generate_noise(
    length: int, amplitude: float = 1.0, rng: np.random.Generator | None = None
) -> np.ndarray:
    """Return ``length`` samples of uniform noise in ``[0, amplitude]``."""
    _check_length(length)
    generator = rng if rng is not None else np.random.default_rng()
    return generator.random(length) * amplitude