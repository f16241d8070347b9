"""Block-based audio processing: ring buffers, oscillators, comb filter, vibrato, FFT and raw/WAV file IO."""

__version__ = "0.1.0"