# dspblocks

Building blocks for block-based audio processing on NumPy arrays. Multi-channel
blocks have the shape `(channels, frames)`.

- `dspblocks.ringbuffer.RingBuffer`: a circular buffer with separate read and
  write indices (`read_idx`, `write_idx`), single and multi-value `put`/`get`
  variants, and fractional reads with linear interpolation via `get(offset)`.
- `dspblocks.synthesis`: `generate_sine`, `generate_rect`, `generate_saw`,
  `generate_dc` and `generate_noise` (uniform noise in `[0, amplitude]`, with an
  optional `numpy.random.Generator`).
- `dspblocks.vector`: `get_sum`, `get_mean`, `get_std` (biased), `get_rms`,
  `find_max`/`find_min` (value and index), `get_max`/`get_min`, `flip`,
  `move_in_mem`, `set_zero_below_thresh` and `is_equal`.
- `dspblocks.lfo.Lfo`: a wavetable low-frequency oscillator with `amplitude`
  and `frequency` attributes, a waveform chosen by `lfo_type` (`LfoType.SINE`,
  `SAW`, `RECT`) and `next_value()`.
- `dspblocks.combfilter.CombFilter`: multi-channel FIR and IIR comb filters
  (`CombFilterType.FIR`, `CombFilterType.IIR`); `FilterParam.GAIN` is a factor,
  `FilterParam.DELAY` is in seconds. The IIR gain is limited to `[-1, 1]`.
- `dspblocks.vibrato.Vibrato`: a multi-channel delay line modulated by a sine
  LFO; `VibratoParam.MOD_WIDTH_S` in seconds, `VibratoParam.MOD_FREQ_HZ` in Hz.
  The output is delayed by the maximum modulation width plus one sample.
- `dspblocks.fft.Fft`: real FFT with zero padding and optional windowing
  (`WindowFunction.SINE`, `HANN`, `HAMMING`; `Windowing.NONE`, `PRE`, `POST`).
  Spectra use the packed layout `re(0) ... re(N/2), im(N/2-1) ... im(1)`,
  scaled by `1/N`. Helpers: `magnitude`, `phase`, `split_real_imag`,
  `merge_real_imag`, `length`, `freq2bin`, `bin2freq`.
- `dspblocks.audiofile`: the `AudioFile` base class, `FileSpec`, `FileIoType`,
  `FileFormat` and `BitStream`.
- `dspblocks.audioformats`: `RawAudioFile` (headerless 16-bit little-endian
  PCM), `WavAudioFile` (16-bit integer or 32-bit float WAVE) and
  `create_audio_file`, which picks the class from the WAVE header, the given
  spec or the file extension and returns the opened file.

Errors are raised as subclasses of `dspblocks.errors.DspError`:
`InvalidArgumentError`, `NotInitializedError`, `IllegalCallError`,
`FileOpenError` and `FileAccessError`.

## Installation

```
pip install .
```

## Example: comb filter

```python
import numpy as np
from dspblocks.combfilter import CombFilter, CombFilterType, FilterParam

comb = CombFilter()
comb.init(CombFilterType.FIR, max_delay_s=1.0, sample_rate_hz=8000, num_channels=2)
comb.set_param(FilterParam.GAIN, 0.5)
comb.set_param(FilterParam.DELAY, 0.1)

block = np.zeros((2, 512))
block[:, 0] = 1.0
out = comb.process(block)          # or comb.process(block, block) in place
```

## Example: vibrato on a file

```python
from dspblocks.audiofile import FileIoType
from dspblocks.audioformats import create_audio_file
from dspblocks.vibrato import Vibrato, VibratoParam

with create_audio_file("in.wav", FileIoType.READ) as src:
    spec = src.spec
    vib = Vibrato()
    vib.init(0.1, spec.sample_rate_hz, spec.num_channels)
    vib.set_param(VibratoParam.MOD_FREQ_HZ, 5.0)
    vib.set_param(VibratoParam.MOD_WIDTH_S, 0.005)
    with create_audio_file("out.wav", FileIoType.WRITE, spec) as dst:
        while not src.is_eof():
            dst.write(vib.process(src.read(1024)))
```

Files can be positioned with `set_position` (frames) or `set_position_seconds`,
and report `position`, `position_seconds`, `length` and `length_seconds`.
Raw files need a `FileSpec` describing channels and sample rate; when reading a
WAVE file the spec is taken from its header.

## Command line

The package installs one command that applies a vibrato to an audio file:

```
dspblocks-vibrato INPUT OUTPUT MOD_FREQ_HZ MOD_WIDTH_S
```

For example, a 5 Hz vibrato with a 5 ms modulation width:

```
dspblocks-vibrato in.wav out.wav 5 0.005
```

The modulation width also sets the maximum width of the vibrato. The command
prints the processing time and `DONE`, and exits with status 1 when arguments
are missing or invalid or a file cannot be opened.

## What it does not do

- AIFF files are not supported; asking for `FileFormat.AIFF` raises
  `InvalidArgumentError`.
- Raw files are 16-bit little-endian integer only; WAVE files are 16-bit
  integer or 32-bit float only. No resampling or format conversion is offered.
- The vibrato always uses a sine LFO.

## Running the tests

```
pip install .[test]
pytest
```