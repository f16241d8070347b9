"""Concrete audio file formats: headerless 16 bit PCM and RIFF/WAVE."""

from __future__ import annotations

import os
import struct
from dataclasses import replace
from typing import BinaryIO

import numpy as np

from .audiofile import AudioFile, BitStream, FileFormat, FileIoType, FileSpec
from .errors import FileOpenError, InvalidArgumentError
from .util import float2int

_INT16_SCALE = 32768.0
_WAV_HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")
_WAVE_FORMAT_PCM = 1
_WAVE_FORMAT_FLOAT = 3
_WAVE_FORMAT_EXTENSIBLE = 0xFFFE


def _round_half_away(values: np.ndarray) -> np.ndarray:
    return np.where(values >= 0, np.floor(values + 0.5), np.ceil(values - 0.5))


def _saturate_int16(values: np.ndarray) -> np.ndarray:
    return np.clip(_round_half_away(values * _INT16_SCALE), -32768, 32767).astype("<i2")


class RawAudioFile(AudioFile):
    """Headerless 16 bit little-endian PCM with interleaved channels.

    The file specification has to be given when opening; without it the file is
    opened but not initialised, and reading or writing is refused.
    """

    def __init__(self) -> None:
        self._file: BinaryIO | None = None
        self._eof = False
        super().__init__()

    def _open(self, path: str, spec: FileSpec | None) -> None:
        if spec is not None:
            if spec.bit_stream is not BitStream.INT16:
                raise InvalidArgumentError("raw files support 16 bit integer samples only")
            self._set_initialized(True)
        self._eof = False
        mode = "rb" if self.io_type & FileIoType.READ else "wb"
        self._file = open(path, mode)

    def _close(self) -> None:
        try:
            self._file.close()
        finally:
            self._file = None
            self._eof = False

    def is_eof(self) -> bool:
        """True once a read has hit the end of the file."""
        return self._eof

    def is_open(self) -> bool:
        """True while a file is open."""
        return self._file is not None

    def _scale_up(self, values: np.ndarray) -> np.ndarray:
        scale = float(1 << (self._bits_per_sample - 1))
        scaled = values * scale
        if self.clipping_enabled:
            scaled = self._clip(scaled, -scale, scale - 1)
        rounded = _round_half_away(scaled).astype(np.int64)
        return (((rounded + 32768) % 65536) - 32768).astype("<i2")

    def _scale_down(self, values: np.ndarray) -> np.ndarray:
        return values.astype(np.float64) / float(1 << (self._bits_per_sample - 1))

    def _read_frames(self, num_frames: int) -> np.ndarray:
        num_bytes = self._frames_to_bytes(num_frames)
        raw = self._file.read(num_bytes)
        if len(raw) < num_bytes:
            self._eof = True
        frames = self._bytes_to_frames(len(raw))
        samples = np.frombuffer(raw[: self._frames_to_bytes(frames)], dtype="<i2")
        return self._scale_down(samples.reshape(frames, self._num_channels).T)

    def _write_frames(self, data: np.ndarray) -> int:
        samples = self._scale_up(data)
        self._file.write(np.ascontiguousarray(samples.T).tobytes())
        return data.shape[1]

    def _length_frames(self) -> int:
        current = self._file.tell()
        self._file.seek(0, os.SEEK_END)
        end = self._file.tell()
        self._file.seek(current)
        return self._bytes_to_frames(end)

    def _position_frames(self) -> int:
        return self._bytes_to_frames(self._file.tell())

    def _seek_frames(self, frame: int) -> None:
        self._file.seek(self._frames_to_bytes(frame))
        self._eof = False


class WavAudioFile(AudioFile):
    """RIFF/WAVE files with 16 bit integer or 32 bit float samples.

    When reading, the specification is taken from the file header.
    """

    _HEADER_LENGTH = _WAV_HEADER.size

    def __init__(self) -> None:
        self._file: BinaryIO | None = None
        self._frame_cnt = 0
        self._file_length = 0
        self._frames_total = 0
        self._data_offset = self._HEADER_LENGTH
        super().__init__()

    def _open(self, path: str, spec: FileSpec | None) -> None:
        if spec is not None and spec.format not in (
            FileFormat.WAV,
            FileFormat.RAW,
            FileFormat.AIFF,
        ):
            raise InvalidArgumentError(f"unsupported file format {spec.format}")
        self._frame_cnt = 0
        self._file_length = 0
        self._frames_total = 0
        if self.io_type & FileIoType.READ:
            self._open_read(path)
        else:
            self._open_write(path, spec if spec is not None else FileSpec())
        self._set_initialized(True)

    def _open_read(self, path: str) -> None:
        handle = open(path, "rb")
        try:
            self._parse_header(handle)
        except BaseException:
            handle.close()
            raise
        self._file = handle

    def _parse_header(self, handle: BinaryIO) -> None:
        riff = handle.read(12)
        if len(riff) < 12 or riff[:4] != b"RIFF" or riff[8:12] != b"WAVE":
            raise FileOpenError("not a RIFF/WAVE file")
        fmt = None
        data_size = None
        while True:
            chunk = handle.read(8)
            if len(chunk) < 8:
                break
            chunk_id, size = struct.unpack("<4sI", chunk)
            if chunk_id == b"fmt ":
                fmt = handle.read(size)
                if size & 1:
                    handle.seek(1, os.SEEK_CUR)
            elif chunk_id == b"data":
                self._data_offset = handle.tell()
                data_size = size
                break
            else:
                handle.seek(size + (size & 1), os.SEEK_CUR)
        if fmt is None or len(fmt) < 16 or data_size is None:
            raise FileOpenError("WAVE file lacks a format or data chunk")

        tag, channels, rate, _byte_rate, _align, bits = struct.unpack("<HHIIHH", fmt[:16])
        if tag == _WAVE_FORMAT_EXTENSIBLE and len(fmt) >= 26:
            tag = struct.unpack("<H", fmt[24:26])[0]
        if tag == _WAVE_FORMAT_PCM and bits == 16:
            bit_stream, num_bytes = BitStream.INT16, 2
        elif tag == _WAVE_FORMAT_FLOAT and bits == 32:
            bit_stream, num_bytes = BitStream.FLOAT32, 4
        else:
            raise FileOpenError(f"unsupported sample format {tag} with {bits} bits")

        self._set_spec(FileSpec(FileFormat.WAV, bit_stream, channels, float(rate)))
        self._bytes_per_sample = num_bytes
        available = max(0, os.fstat(handle.fileno()).st_size - self._data_offset)
        self._file_length = self._bytes_to_frames(min(data_size, available))

    def _open_write(self, path: str, spec: FileSpec) -> None:
        if spec.bit_stream is BitStream.INT16:
            self._bytes_per_sample = 2
        elif spec.bit_stream is BitStream.FLOAT32:
            self._bytes_per_sample = 4
        else:
            raise InvalidArgumentError("unknown sample type for writing")
        self._set_spec(replace(spec, format=FileFormat.WAV))
        self._data_offset = self._HEADER_LENGTH
        handle = open(path, "wb")
        try:
            handle.write(self._header(0))
        except BaseException:
            handle.close()
            raise
        self._file = handle

    def _header(self, num_data_bytes: int) -> bytes:
        tag = _WAVE_FORMAT_PCM if self._spec.bit_stream is BitStream.INT16 else _WAVE_FORMAT_FLOAT
        rate = float2int(self._spec.sample_rate_hz)
        align = self._bytes_per_sample * self._num_channels
        return _WAV_HEADER.pack(
            b"RIFF",
            36 + num_data_bytes,
            b"WAVE",
            b"fmt ",
            16,
            tag,
            self._num_channels,
            rate,
            rate * align,
            align,
            self._bits_per_sample,
            b"data",
            num_data_bytes,
        )

    def _close(self) -> None:
        try:
            if not self.io_type & FileIoType.READ:
                self._file.seek(0)
                self._file.write(self._header(self._frames_to_bytes(self._frames_total)))
        finally:
            self._file.close()
            self._file = None
            self._frame_cnt = 0
            self._file_length = 0
            self._frames_total = 0

    def is_eof(self) -> bool:
        """True once every frame of the file has been read."""
        return self._frame_cnt >= self._file_length

    def is_open(self) -> bool:
        """True while a file is open."""
        return self._file is not None

    def _read_frames(self, num_frames: int) -> np.ndarray:
        wanted = min(num_frames, max(0, self._file_length - self._frame_cnt))
        raw = self._file.read(self._frames_to_bytes(wanted))
        frames = self._bytes_to_frames(len(raw))
        if frames < wanted:
            self._file_length = self._frame_cnt + frames
        dtype = "<i2" if self._spec.bit_stream is BitStream.INT16 else "<f4"
        values = np.frombuffer(raw[: self._frames_to_bytes(frames)], dtype=dtype).astype(
            np.float64
        )
        if self._spec.bit_stream is BitStream.INT16:
            values /= _INT16_SCALE
        self._frame_cnt += frames
        return values.reshape(frames, self._num_channels).T

    def _write_frames(self, data: np.ndarray) -> int:
        if self.clipping_enabled:
            data = self._clip(data, -1.0, 1.0 - 1.0 / float(1 << self._bits_per_sample))
        if self._spec.bit_stream is BitStream.INT16:
            samples = _saturate_int16(data)
        else:
            samples = data.astype("<f4")
        self._file.write(np.ascontiguousarray(samples.T).tobytes())
        frames = data.shape[1]
        self._frame_cnt += frames
        self._frames_total = max(self._frames_total, self._frame_cnt)
        return frames

    def _length_frames(self) -> int:
        if self.io_type & FileIoType.READ:
            return self._file_length
        return self._frames_total

    def _position_frames(self) -> int:
        return self._frame_cnt

    def _seek_frames(self, frame: int) -> None:
        self._file.seek(self._data_offset + self._frames_to_bytes(frame))
        self._frame_cnt = frame


def _is_riff_wave(path: str) -> bool:
    try:
        with open(path, "rb") as handle:
            head = handle.read(12)
    except OSError:
        return False
    return head[:4] == b"RIFF" and head[8:12] == b"WAVE"


def _format_for(path: str, io_type: FileIoType, spec: FileSpec | None) -> FileFormat:
    if io_type & FileIoType.READ and _is_riff_wave(path):
        return FileFormat.WAV
    if spec is not None:
        return spec.format
    ext = os.path.splitext(path)[1].lower()
    if ext in (".wav", ".wave"):
        return FileFormat.WAV
    if ext in (".aif", ".aiff"):
        return FileFormat.AIFF
    return FileFormat.RAW


def create_audio_file(
    path: str | os.PathLike,
    io_type: FileIoType = FileIoType.READ,
    spec: FileSpec | None = None,
) -> AudioFile:
    """Open ``path`` with the class suited to its format and return the open file.

    WAVE files are recognised by their header when reading; otherwise the format of
    ``spec`` or the file extension decides. Raw files without ``spec`` use the
    default specification.
    """
    name = os.fspath(path)
    try:
        io = FileIoType(io_type)
    except ValueError as exc:
        raise InvalidArgumentError(f"unknown I/O type {io_type!r}") from exc
    file_format = _format_for(name, io, spec)
    if file_format is FileFormat.WAV:
        audio: AudioFile = WavAudioFile()
        audio.open(name, io, spec)
    elif file_format is FileFormat.RAW:
        audio = RawAudioFile()
        audio.open(name, io, spec if spec is not None else FileSpec())
    else:
        raise InvalidArgumentError(f"unsupported file format {file_format}")
    return audio