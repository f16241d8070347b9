"""Real-valued FFT with optional windowing and zero padding.

Spectra are stored in the packed real layout
``re(0), re(1), ..., re(N/2), im(N/2-1), ..., im(1)`` and scaled by ``1/N``.
"""

from __future__ import annotations

import math
from enum import Enum, Flag
from typing import Iterable

import numpy as np

from .errors import InvalidArgumentError
from .util import is_pow_of_2


class WindowFunction(Enum):
    """Window applied to the data block (periodic, not symmetric)."""

    SINE = "sine"
    HANN = "hann"
    HAMMING = "hamming"


class Windowing(Flag):
    """Where the window is applied."""

    NONE = 0
    PRE = 1
    POST = 2


class LengthKind(Enum):
    """Lengths an FFT instance can report."""

    FFT = "fft"
    DATA = "data"
    MAGNITUDE = "magnitude"
    PHASE = "phase"


def _as_array(values: Iterable[float]) -> np.ndarray:
    if isinstance(values, np.ndarray):
        return values.astype(np.float64, copy=False).ravel()
    return np.asarray(list(values), dtype=np.float64).ravel()


def _compute_window(kind: WindowFunction, length: int) -> np.ndarray:
    n = np.arange(length, dtype=np.float64)
    if kind is WindowFunction.SINE:
        return np.sin(n * math.pi / (length + 1))
    if kind is WindowFunction.HANN:
        return 0.5 * (1.0 - np.cos(n * 2.0 * math.pi / (length + 1)))
    return 0.54 - 0.46 * np.cos(n * 2.0 * math.pi / (length + 1))


class Fft:
    """Forward and inverse FFT of blocks of ``block_length`` samples."""

    def __init__(
        self,
        block_length: int,
        zero_pad_factor: int = 1,
        window: WindowFunction = WindowFunction.HANN,
        windowing: Windowing = Windowing.PRE,
    ) -> None:
        if (
            block_length <= 0
            or not is_pow_of_2(block_length)
            or zero_pad_factor <= 0
            or not is_pow_of_2(block_length * zero_pad_factor)
        ):
            raise InvalidArgumentError(
                "block length and block length times zero pad factor must be powers of two"
            )
        try:
            window = WindowFunction(window)
            windowing = Windowing(windowing)
        except ValueError as exc:
            raise InvalidArgumentError(str(exc)) from exc
        self._data_length = int(block_length)
        self._fft_length = int(block_length * zero_pad_factor)
        self._windowing = windowing
        self._window = _compute_window(window, self._data_length)

    def __repr__(self) -> str:
        return (
            f"Fft(block_length={self._data_length}, fft_length={self._fft_length}, "
            f"windowing={self._windowing})"
        )

    @property
    def _nyquist(self) -> int:
        return self._fft_length >> 1

    @property
    def window(self) -> np.ndarray:
        """A copy of the current window of ``block_length`` values."""
        return self._window.copy()

    def override_window(self, window: Iterable[float]) -> None:
        """Replace the window by custom values of length ``block_length``."""
        data = _as_array(window)
        if data.size != self._data_length:
            raise InvalidArgumentError(
                f"window must have {self._data_length} values, got {data.size}"
            )
        self._window = data.copy()

    def _check_spectrum(self, spectrum: Iterable[float]) -> np.ndarray:
        data = _as_array(spectrum)
        if data.size != self._fft_length:
            raise InvalidArgumentError(
                f"spectrum must have {self._fft_length} values, got {data.size}"
            )
        return data

    def _to_complex(self, packed: np.ndarray) -> np.ndarray:
        nyq = self._nyquist
        imag = np.zeros(nyq + 1)
        imag[1:nyq] = packed[nyq + 1:][::-1]
        return packed[: nyq + 1] + 1j * imag

    def _to_packed(self, spectrum: np.ndarray) -> np.ndarray:
        nyq = self._nyquist
        packed = np.zeros(self._fft_length)
        packed[: nyq + 1] = spectrum.real[: nyq + 1]
        packed[nyq + 1:] = spectrum.imag[1:nyq][::-1]
        return packed

    def forward(self, values: Iterable[float]) -> np.ndarray:
        """Return the packed spectrum of a block of ``block_length`` samples."""
        data = _as_array(values)
        if data.size != self._data_length:
            raise InvalidArgumentError(
                f"input must have {self._data_length} values, got {data.size}"
            )
        block = np.zeros(self._fft_length)
        block[: self._data_length] = data
        if self._windowing & Windowing.PRE:
            block[: self._data_length] *= self._window
        return self._to_packed(np.fft.rfft(block) / self._fft_length)

    def inverse(self, spectrum: Iterable[float]) -> np.ndarray:
        """Return the ``fft_length`` time samples of a packed spectrum."""
        packed = self._check_spectrum(spectrum)
        result = np.fft.irfft(self._to_complex(packed) * self._fft_length, n=self._fft_length)
        if self._windowing & Windowing.POST:
            result[: self._data_length] *= self._window
        return result

    def magnitude(self, spectrum: Iterable[float]) -> np.ndarray:
        """Return the ``fft_length/2 + 1`` magnitude values of a packed spectrum."""
        packed = self._check_spectrum(spectrum)
        return np.abs(self._to_complex(packed))

    def phase(self, spectrum: Iterable[float]) -> np.ndarray:
        """Return the ``fft_length/2 + 1`` phase values of a packed spectrum.

        The DC and Nyquist bins are reported as pi.
        """
        packed = self._check_spectrum(spectrum)
        nyq = self._nyquist
        complex_spec = self._to_complex(packed)
        real = complex_spec.real
        imag = complex_spec.imag
        result = np.arctan2(imag, real)
        result[(real == 0.0) & (imag != 0.0)] = math.pi / 2
        result[0] = math.pi
        result[nyq] = math.pi
        return result

    def split_real_imag(self, spectrum: Iterable[float]) -> tuple[np.ndarray, np.ndarray]:
        """Return real and imaginary parts, each of ``fft_length/2 + 1`` values."""
        packed = self._check_spectrum(spectrum)
        complex_spec = self._to_complex(packed)
        return complex_spec.real.copy(), complex_spec.imag.copy()

    def merge_real_imag(self, real: Iterable[float], imag: Iterable[float]) -> np.ndarray:
        """Pack real and imaginary parts (``fft_length/2 + 1`` values each) into a spectrum."""
        re = _as_array(real)
        im = _as_array(imag)
        size = self._nyquist + 1
        if re.size < size or im.size < self._nyquist:
            raise InvalidArgumentError(
                f"real part needs {size} values and imaginary part {self._nyquist}"
            )
        imag_full = np.zeros(size)
        imag_full[: min(size, im.size)] = im[:size]
        return self._to_packed(re[:size] + 1j * imag_full)

    def length(self, kind: LengthKind) -> int:
        """Return the FFT, data, magnitude or phase length."""
        kind = LengthKind(kind)
        if kind is LengthKind.FFT:
            return self._fft_length
        if kind is LengthKind.DATA:
            return self._data_length
        return self._fft_length // 2 + 1

    def freq2bin(self, freq_hz: float, sample_rate_hz: float) -> float:
        """Convert a frequency to a (fractional) bin index."""
        return freq_hz / sample_rate_hz * self._fft_length

    def bin2freq(self, bin_idx: int, sample_rate_hz: float) -> float:
        """Convert a bin index to a frequency in Hz."""
        return bin_idx * sample_rate_hz / self._fft_length