[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dspblocks"
version = "0.1.0"
description = "Audio building blocks: ring buffer, LFO, comb filter, vibrato, FFT and raw/WAV file IO"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["audio", "dsp", "comb filter", "vibrato", "fft", "ring buffer", "wav"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Sound/Audio",
    "Topic :: Multimedia :: Sound/Audio :: Analysis",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
dspblocks-vibrato = "dspblocks.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["dspblocks"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
