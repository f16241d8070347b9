import numpy as np
import pytest

from dspblocks.audiofile import AudioFile, BitStream, FileFormat, FileIoType, FileSpec
from dspblocks.errors import (
    FileOpenError,
    IllegalCallError,
    InvalidArgumentError,
    NotInitializedError,
)
from dspblocks.synthesis import generate_sine


class MemoryAudioFile(AudioFile):
    """Stores audio in a dictionary; initialised only when a spec is given."""

    def __init__(self, store):
        self._store = store
        self._data = None
        self._path = None
        self._pos = 0
        super().__init__()

    def _open(self, path, spec):
        if self.io_type is FileIoType.READ:
            if path not in self._store:
                raise FileNotFoundError(path)
            self._data = self._store[path].copy()
        else:
            self._data = np.zeros((self.spec.num_channels, 0))
        self._path = path
        self._pos = 0
        if spec is not None:
            self._set_initialized(True)

    def _close(self):
        if self.io_type is FileIoType.WRITE:
            self._store[self._path] = self._data
        self._data = None
        self._pos = 0

    def _read_frames(self, num_frames):
        chunk = self._data[:, self._pos:self._pos + num_frames]
        self._pos += chunk.shape[1]
        return chunk.copy()

    def _write_frames(self, data):
        if self.clipping_enabled:
            data = self._clip(data, -1.0, 1.0)
        self._data = np.concatenate([self._data, data], axis=1)
        self._pos += data.shape[1]
        return data.shape[1]

    def _length_frames(self):
        return self._data.shape[1]

    def _position_frames(self):
        return self._pos

    def _seek_frames(self, frame):
        self._pos = frame

    def is_eof(self):
        return self._pos >= self._data.shape[1]

    def is_open(self):
        return self._data is not None


SPEC = FileSpec(FileFormat.RAW, BitStream.INT16, 2, 44100.0)
BUFF_LENGTH = 1027
BLOCK_LENGTH = 17


@pytest.fixture
def signal():
    return np.stack(
        [
            generate_sine(441.0, SPEC.sample_rate_hz, BUFF_LENGTH, 0.6, 0.0),
            generate_sine(441.0, SPEC.sample_rate_hz, BUFF_LENGTH, 0.6, np.pi / 2),
        ]
    )


@pytest.fixture
def store(signal):
    return {"ref.pcm": signal.copy()}


def _write_blocks(audio, data):
    for start in range(0, data.shape[1], BLOCK_LENGTH):
        audio.write(data[:, start:start + BLOCK_LENGTH])


def _read_blocks(audio):
    blocks = []
    while not audio.is_eof():
        blocks.append(audio.read(BLOCK_LENGTH))
    return np.concatenate(blocks, axis=1)


def test_defaults_match_source():
    audio = MemoryAudioFile({})
    assert audio.spec == FileSpec(FileFormat.RAW, BitStream.INT16, 2, 48000.0)
    assert audio.io_type is FileIoType.READ
    assert audio.clipping_enabled is True
    assert audio.is_open() is False
    assert audio.is_initialized() is False


def test_file_spec_rejects_invalid_values():
    with pytest.raises(InvalidArgumentError):
        FileSpec(num_channels=0)
    with pytest.raises(InvalidArgumentError):
        FileSpec(sample_rate_hz=0.0)


def test_open_empty_path_fails():
    with pytest.raises(FileOpenError):
        MemoryAudioFile({}).open("", FileIoType.READ, SPEC)


def test_open_missing_file_raises_file_open_error():
    audio = MemoryAudioFile({})
    with pytest.raises(FileOpenError):
        audio.open("missing.pcm", FileIoType.READ, SPEC)
    assert audio.is_open() is False
    assert audio.spec == FileSpec()


def test_read_in_blocks(store, signal):
    audio = MemoryAudioFile(store)
    audio.open("ref.pcm", FileIoType.READ, SPEC)
    result = _read_blocks(audio)
    np.testing.assert_allclose(result, signal, atol=1e-3)


def test_read_with_offset(store, signal):
    offset = 327
    audio = MemoryAudioFile(store)
    audio.open("ref.pcm", FileIoType.READ, SPEC)
    audio.set_position(offset)
    result = _read_blocks(audio)
    np.testing.assert_allclose(result, signal[:, offset:], atol=1e-3)


def test_read_all_at_once(store, signal):
    audio = MemoryAudioFile(store)
    audio.open("ref.pcm", FileIoType.READ, SPEC)
    length = audio.length
    result = audio.read(length)
    assert result.shape[1] == length
    np.testing.assert_allclose(result, signal, atol=1e-3)


def test_write_then_read_round_trip(signal):
    store = {}
    audio = MemoryAudioFile(store)
    audio.open("test.pcm", FileIoType.WRITE, SPEC)
    _write_blocks(audio, signal)
    audio.close()
    audio.reset()

    audio.open("test.pcm", FileIoType.READ, SPEC)
    np.testing.assert_allclose(_read_blocks(audio), signal, atol=1e-3)


def test_write_returns_frames_written(signal):
    audio = MemoryAudioFile({})
    audio.open("out.pcm", FileIoType.WRITE, SPEC)
    assert audio.write(signal[:, :BLOCK_LENGTH]) == BLOCK_LENGTH
    assert audio.position == BLOCK_LENGTH


def test_context_manager_closes(signal):
    store = {}
    with MemoryAudioFile(store) as audio:
        audio.open("ctx.pcm", FileIoType.WRITE, SPEC)
        audio.write(signal)
    assert audio.is_open() is False
    np.testing.assert_array_equal(store["ctx.pcm"], signal)


def test_length_and_seconds(store):
    audio = MemoryAudioFile(store)
    audio.open("ref.pcm", FileIoType.READ, SPEC)
    assert audio.length == BUFF_LENGTH
    assert audio.length_seconds == pytest.approx(BUFF_LENGTH / SPEC.sample_rate_hz)


def test_position_seconds_round_trip(store):
    audio = MemoryAudioFile(store)
    audio.open("ref.pcm", FileIoType.READ, SPEC)
    audio.set_position(500)
    seconds = audio.position_seconds
    audio.set_position(0)
    audio.set_position_seconds(seconds)
    assert audio.position == 500


def test_set_position_out_of_range(store):
    audio = MemoryAudioFile(store)
    audio.open("ref.pcm", FileIoType.READ, SPEC)
    with pytest.raises(InvalidArgumentError):
        audio.set_position(-1)
    with pytest.raises(InvalidArgumentError):
        audio.set_position(BUFF_LENGTH)


def test_read_at_end_returns_empty_block(store):
    audio = MemoryAudioFile(store)
    audio.open("ref.pcm", FileIoType.READ, SPEC)
    audio.read(BUFF_LENGTH)
    assert audio.is_eof() is True
    assert audio.read(BLOCK_LENGTH).shape == (2, 0)


def test_calls_without_open_file():
    audio = MemoryAudioFile({})
    with pytest.raises(IllegalCallError):
        audio.read(10)
    with pytest.raises(IllegalCallError):
        audio.write(np.zeros((2, 4)))
    with pytest.raises(IllegalCallError):
        _ = audio.length
    assert audio.is_initialized() is False
    assert audio.spec == FileSpec()


def test_not_initialized_without_spec(store):
    audio = MemoryAudioFile(store)
    audio.open("ref.pcm", FileIoType.READ)
    assert audio.is_open() is True
    with pytest.raises(NotInitializedError):
        audio.read(10)
    with pytest.raises(NotInitializedError):
        audio.set_position(0)


def test_invalid_read_and_write_arguments(store):
    audio = MemoryAudioFile(store)
    audio.open("ref.pcm", FileIoType.READ, SPEC)
    with pytest.raises(InvalidArgumentError):
        audio.read(-1)
    with pytest.raises(InvalidArgumentError):
        audio.write(np.zeros((3, 4)))
    with pytest.raises(InvalidArgumentError):
        audio.write(np.zeros(4))


def test_reset_restores_defaults(store):
    audio = MemoryAudioFile(store)
    audio.open("ref.pcm", FileIoType.READ, SPEC)
    audio.clipping_enabled = False
    audio.reset()
    assert audio.is_open() is False
    assert audio.is_initialized() is False
    assert audio.spec == FileSpec()
    assert audio.clipping_enabled is True


def test_spec_is_a_copy(store):
    audio = MemoryAudioFile(store)
    audio.open("ref.pcm", FileIoType.READ, SPEC)
    copy = audio.spec
    copy.num_channels = 5
    assert audio.spec.num_channels == SPEC.num_channels


def test_close_without_open_is_harmless():
    audio = MemoryAudioFile({})
    audio.close()
    assert audio.is_open() is False
    assert audio.is_initialized() is False
    assert audio.spec == FileSpec()
    assert audio.io_type is FileIoType.READ