import numpy as np
import pytest

from dspblocks.errors import InvalidArgumentError, NotInitializedError
from dspblocks.synthesis import generate_dc, generate_sine
from dspblocks.vibrato import Vibrato, VibratoParam

DATA_LENGTH = 35131
MAX_MOD_WIDTH = 0.5
BLOCK_LENGTH = 171
NUM_CHANNELS = 3
SAMPLE_RATE = 31271.0
# round(MAX_MOD_WIDTH * SAMPLE_RATE + 1)
DELAY = 15637


def _make():
    vib = Vibrato()
    vib.init(MAX_MOD_WIDTH, SAMPLE_RATE, NUM_CHANNELS)
    return vib


def _input():
    return np.stack(
        [generate_sine(800, SAMPLE_RATE, DATA_LENGTH, 0.6, 0) for _ in range(NUM_CHANNELS)]
    )


def _process_blocks(vib, data):
    out = np.zeros_like(data)
    for start in range(0, data.shape[1], BLOCK_LENGTH):
        stop = min(data.shape[1], start + BLOCK_LENGTH)
        vib.process(data[:, start:stop], out[:, start:stop])
    return out


def test_mod_width_zero_is_pure_delay():
    vib = _make()
    vib.set_param(VibratoParam.MOD_FREQ_HZ, 20)
    vib.set_param(VibratoParam.MOD_WIDTH_S, 0)
    data = _input()
    out = _process_blocks(vib, data)
    np.testing.assert_allclose(out[:, DELAY:], data[:, : DATA_LENGTH - DELAY], atol=1e-3)


def test_dc_input_stays_constant():
    vib = _make()
    vib.set_param(VibratoParam.MOD_FREQ_HZ, 2)
    vib.set_param(VibratoParam.MOD_WIDTH_S, 0.1)
    data = np.stack([generate_dc(DATA_LENGTH, (c + 1) * 0.1) for c in range(NUM_CHANNELS)])
    out = _process_blocks(vib, data)
    np.testing.assert_allclose(out[:, DELAY:], data[:, : DATA_LENGTH - DELAY], atol=1e-3)


def test_varying_blocksize_inplace():
    vib = _make()
    vib.set_param(VibratoParam.MOD_FREQ_HZ, 2)
    vib.set_param(VibratoParam.MOD_WIDTH_S, 0.1)
    reference = _process_blocks(vib, _input())

    vib.reset()
    vib.init(MAX_MOD_WIDTH, SAMPLE_RATE, NUM_CHANNELS)
    vib.set_param(VibratoParam.MOD_FREQ_HZ, 2)
    vib.set_param(VibratoParam.MOD_WIDTH_S, 0.1)

    data = _input()
    rng = np.random.default_rng(7)
    start = 0
    while start < DATA_LENGTH:
        stop = min(DATA_LENGTH, start + int(rng.integers(0, 17001)))
        block = data[:, start:stop]
        vib.process(block, block)
        start = stop

    np.testing.assert_allclose(data, reference, atol=1e-3)


@pytest.mark.parametrize(
    "param, value",
    [
        (VibratoParam.MOD_FREQ_HZ, -1),
        (VibratoParam.MOD_WIDTH_S, -0.001),
        (VibratoParam.MOD_FREQ_HZ, SAMPLE_RATE),
        (VibratoParam.MOD_WIDTH_S, MAX_MOD_WIDTH + 0.1),
    ],
)
def test_param_range(param, value):
    vib = _make()
    with pytest.raises(InvalidArgumentError):
        vib.set_param(param, value)


def test_zero_input():
    vib = _make()
    vib.set_param(VibratoParam.MOD_FREQ_HZ, 20)
    vib.set_param(VibratoParam.MOD_WIDTH_S, 0)
    data = np.zeros((NUM_CHANNELS, DATA_LENGTH))
    out = _process_blocks(vib, data)
    np.testing.assert_allclose(out, 0.0, atol=1e-3)


def test_set_get_param():
    vib = _make()
    vib.set_param(VibratoParam.MOD_FREQ_HZ, 5.5)
    vib.set_param(VibratoParam.MOD_WIDTH_S, 0.25)
    assert vib.get_param(VibratoParam.MOD_FREQ_HZ) == pytest.approx(5.5)
    assert vib.get_param(VibratoParam.MOD_WIDTH_S) == pytest.approx(0.25)


def test_uninitialized_use_raises():
    vib = Vibrato()
    assert not vib.is_initialized
    with pytest.raises(NotInitializedError):
        vib.set_param(VibratoParam.MOD_FREQ_HZ, 1)
    with pytest.raises(NotInitializedError):
        vib.get_param(VibratoParam.MOD_FREQ_HZ)
    with pytest.raises(NotInitializedError):
        vib.process(np.zeros((1, 4)))


def test_reset_clears_initialisation():
    vib = _make()
    assert vib.is_initialized
    vib.reset()
    assert not vib.is_initialized
    with pytest.raises(NotInitializedError):
        vib.set_param(VibratoParam.MOD_WIDTH_S, 0.1)


def test_init_rejects_invalid_arguments():
    vib = Vibrato()
    with pytest.raises(InvalidArgumentError):
        vib.init(0.1, 0.0, 2)
    with pytest.raises(InvalidArgumentError):
        vib.init(0.1, 44100.0, 0)
    with pytest.raises(InvalidArgumentError):
        vib.init(-0.1, 44100.0, 2)


def test_process_rejects_wrong_channel_count():
    vib = _make()
    with pytest.raises(InvalidArgumentError):
        vib.process(np.zeros((NUM_CHANNELS - 1, 10)))


def test_process_returns_delayed_impulse():
    vib = Vibrato()
    vib.init(0.001, 1000.0, 1)
    vib.set_param(VibratoParam.MOD_WIDTH_S, 0)
    data = np.zeros((1, 8))
    data[0, 0] = 1.0
    out = vib.process(data)
    # delay = round(0.001 * 1000 + 1) = 2 frames
    assert out.tolist() == [[0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 0.0, 0.0]]