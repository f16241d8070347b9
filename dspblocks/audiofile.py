"""Common interface for reading and writing multi-channel audio files."""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from enum import Enum, Flag

import numpy as np

from .errors import (
    DspError,
    FileAccessError,
    FileOpenError,
    IllegalCallError,
    InvalidArgumentError,
    NotInitializedError,
)
from .util import float2int


class FileIoType(Flag):
    """Whether a file is opened for reading or for writing."""

    READ = 1
    WRITE = 2


class FileFormat(Enum):
    """Container format of an audio file."""

    RAW = "raw"
    WAV = "wav"
    AIFF = "aiff"
    UNKNOWN = "unknown"


class BitStream(Enum):
    """Sample word length and type."""

    INT16 = "int16"
    FLOAT32 = "float32"
    UNKNOWN = "unknown"


@dataclass
class FileSpec:
    """Format, sample type, channel count and sample rate of an audio file."""

    format: FileFormat = FileFormat.RAW
    bit_stream: BitStream = BitStream.INT16
    num_channels: int = 2
    sample_rate_hz: float = 48000.0

    def __post_init__(self) -> None:
        if self.num_channels <= 0:
            raise InvalidArgumentError(
                f"number of channels must be positive, got {self.num_channels}"
            )
        if self.sample_rate_hz <= 0:
            raise InvalidArgumentError(
                f"sample rate must be positive, got {self.sample_rate_hz}"
            )


class AudioFile(ABC):
    """Base class for audio files read and written in blocks of shape ``(channels, frames)``.

    Subclasses implement the storage specific hooks; this class checks arguments and
    state and keeps the file specification.
    """

    BLOCK_LENGTH = 1024

    def __init__(self) -> None:
        self.clipping_enabled = True
        self._bytes_per_sample = 2
        self._init_defaults()

    def _init_defaults(self) -> None:
        self._spec = FileSpec()
        self._io_type = FileIoType.READ
        self._initialized = False
        self.clipping_enabled = True

    def __enter__(self) -> AudioFile:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # -- hooks for concrete formats -------------------------------------------------

    @abstractmethod
    def _open(self, path: str, spec: FileSpec | None) -> None:
        """Open ``path`` for the current I/O type; mark the file initialised when ready."""

    @abstractmethod
    def _close(self) -> None:
        """Close the underlying file."""

    @abstractmethod
    def _read_frames(self, num_frames: int) -> np.ndarray:
        """Read up to ``num_frames`` frames and return them as ``(channels, frames)``."""

    @abstractmethod
    def _write_frames(self, data: np.ndarray) -> int:
        """Write a ``(channels, frames)`` block and return the number of frames written."""

    @abstractmethod
    def _length_frames(self) -> int:
        """Return the file length in frames."""

    @abstractmethod
    def _position_frames(self) -> int:
        """Return the current position in frames."""

    @abstractmethod
    def _seek_frames(self, frame: int) -> None:
        """Move to ``frame``."""

    @abstractmethod
    def is_eof(self) -> bool:
        """Return True when the end of the file has been reached."""

    @abstractmethod
    def is_open(self) -> bool:
        """Return True while a file is open."""

    # -- helpers for concrete formats -----------------------------------------------

    def _set_spec(self, spec: FileSpec) -> None:
        self._spec = replace(spec)

    def _set_initialized(self, initialized: bool = True) -> None:
        self._initialized = initialized

    @property
    def _num_channels(self) -> int:
        return self._spec.num_channels

    @property
    def _bits_per_sample(self) -> int:
        return self._bytes_per_sample << 3

    def _frames_to_bytes(self, num_frames: int) -> int:
        return self._bytes_per_sample * num_frames * self._num_channels

    def _bytes_to_frames(self, num_bytes: int) -> int:
        return num_bytes // (self._bytes_per_sample * self._num_channels)

    @staticmethod
    def _clip(values: np.ndarray, low: float, high: float) -> np.ndarray:
        return np.clip(values, low, high)

    def _require_ready(self) -> None:
        if not self.is_open():
            raise IllegalCallError("no file is open")
        if not self._initialized:
            raise NotInitializedError("file specification is not initialised")

    # -- public interface -----------------------------------------------------------

    def open(
        self,
        path: str | os.PathLike,
        io_type: FileIoType = FileIoType.READ,
        spec: FileSpec | None = None,
    ) -> None:
        """Open a file for reading or writing; ``spec`` describes raw or new files."""
        name = os.fspath(path)
        if not name:
            raise FileOpenError("no file name given")
        try:
            io = FileIoType(io_type)
        except ValueError as exc:
            raise InvalidArgumentError(f"unknown I/O type {io_type!r}") from exc

        self.reset()
        self._io_type = io
        if spec is not None:
            self._set_spec(spec)
        try:
            self._open(name, spec)
        except DspError:
            self.reset()
            raise
        except OSError as exc:
            self.reset()
            raise FileOpenError(f"cannot open {name}: {exc}") from exc
        if not self.is_open():
            self.reset()
            raise FileOpenError(f"cannot open {name}")

    def close(self) -> None:
        """Close the current file; does nothing when no file is open."""
        if self.is_open():
            self._close()

    def reset(self) -> None:
        """Close any open file and return to the default state."""
        self.close()
        self._init_defaults()

    @property
    def io_type(self) -> FileIoType:
        """Whether the current file is read or written."""
        return self._io_type

    def read(self, num_frames: int) -> np.ndarray:
        """Read up to ``num_frames`` frames; fewer are returned at the end of the file."""
        if num_frames < 0:
            raise InvalidArgumentError(f"number of frames must not be negative, got {num_frames}")
        self._require_ready()
        try:
            data = self._read_frames(int(num_frames))
        except DspError:
            raise
        except OSError as exc:
            raise FileAccessError(f"reading failed: {exc}") from exc
        return np.asarray(data, dtype=np.float64).reshape(self._num_channels, -1)

    def write(self, data) -> int:
        """Write a block of shape ``(channels, frames)`` and return the frames written."""
        block = np.asarray(data, dtype=np.float64)
        if block.ndim != 2:
            raise InvalidArgumentError(f"expected a 2-D block, got shape {block.shape}")
        self._require_ready()
        if block.shape[0] != self._num_channels:
            raise InvalidArgumentError(
                f"expected {self._num_channels} channels, got {block.shape[0]}"
            )
        try:
            return int(self._write_frames(block))
        except DspError:
            raise
        except OSError as exc:
            raise FileAccessError(f"writing failed: {exc}") from exc

    @property
    def spec(self) -> FileSpec:
        """A copy of the current file specification."""
        return replace(self._spec)

    def set_position(self, frame: int = 0) -> None:
        """Jump to ``frame``, which must lie inside the file."""
        self._require_ready()
        if frame < 0 or frame >= self._length_frames():
            raise InvalidArgumentError(f"frame {frame} lies outside the file")
        self._seek_frames(int(frame))

    def set_position_seconds(self, seconds: float = 0.0) -> None:
        """Jump to the frame nearest to ``seconds``."""
        self.set_position(float2int(seconds * self._spec.sample_rate_hz))

    @property
    def position(self) -> int:
        """Current position in frames."""
        self._require_ready()
        return int(self._position_frames())

    @property
    def position_seconds(self) -> float:
        """Current position in seconds."""
        return self.position * (1.0 / self._spec.sample_rate_hz)

    @property
    def length(self) -> int:
        """File length in frames."""
        self._require_ready()
        return int(self._length_frames())

    @property
    def length_seconds(self) -> float:
        """File length in seconds."""
        return self.length * (1.0 / self._spec.sample_rate_hz)

    def is_initialized(self) -> bool:
        """Return True when the file specification is known."""
        return self._initialized