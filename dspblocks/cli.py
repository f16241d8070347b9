"""Command that applies a vibrato to an audio file."""

from __future__ import annotations

import sys
import time
from typing import Sequence

from .audiofile import AudioFile, FileIoType
from .audioformats import create_audio_file
from .errors import DspError, InvalidArgumentError
from .vibrato import Vibrato, VibratoParam

BLOCK_SIZE = 1024


def _show_info() -> None:
    print("Vibrato processor")
    print()


def _process(source: AudioFile, target: AudioFile, vibrato: Vibrato) -> None:
    while not source.is_eof():
        block = source.read(BLOCK_SIZE)
        target.write(vibrato.process(block))


def main(argv: Sequence[str] | None = None) -> int:
    """Run ``<input> <output> <mod frequency in Hz> <mod width in s>``."""
    args = list(sys.argv[1:] if argv is None else argv)
    _show_info()

    if len(args) < 4:
        print("Incorrect number of arguments!")
        return 1
    input_path, output_path = args[0], args[1]
    try:
        mod_freq_hz = float(args[2])
        mod_width_s = float(args[3])
    except ValueError:
        print("Modulation frequency and width must be numbers!")
        return 1

    start = time.perf_counter()
    try:
        source = create_audio_file(input_path, FileIoType.READ)
    except DspError:
        print("Input file open error!")
        return 1

    with source:
        spec = source.spec
        try:
            target = create_audio_file(output_path, FileIoType.WRITE, spec)
        except DspError:
            print("Output file cannot be initialized!")
            return 1

        with target:
            vibrato = Vibrato()
            try:
                vibrato.init(mod_width_s, spec.sample_rate_hz, spec.num_channels)
                vibrato.set_param(VibratoParam.MOD_FREQ_HZ, mod_freq_hz)
                vibrato.set_param(VibratoParam.MOD_WIDTH_S, mod_width_s)
            except InvalidArgumentError as exc:
                print(f"Invalid vibrato parameter: {exc}")
                return 1
            _process(source, target, vibrato)

    elapsed = time.perf_counter() - start
    print(f"\nreading/writing done in: \t{elapsed} seconds.")
    print("DONE")
    return 0


if __name__ == "__main__":
    sys.exit(main())