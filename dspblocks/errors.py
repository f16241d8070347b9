"""Exceptions raised by the signal processing blocks and audio file classes."""


class DspError(Exception):
    """Base class for every error raised by this package."""


class FileOpenError(DspError, OSError):
    """A file could not be opened for reading or writing."""


class FileAccessError(DspError, OSError):
    """Reading from or writing to an open file failed."""


class InvalidArgumentError(DspError, ValueError):
    """A function was called with an argument outside its valid range."""


class NotInitializedError(DspError, RuntimeError):
    """An object was used before it was initialised."""


class IllegalCallError(DspError, RuntimeError):
    """A function was called in a state where the call is not allowed."""