"""
Engine Error Types

InvalidParameter is raised at construction or by explicit setters, never
from inside a tick. UnsupportedGridSize is an InvalidParameter raised when
the FFT backend cannot transform the requested grid.
"""


class LeniaError(Exception):
    """Base class for all engine errors."""


class InvalidParameter(LeniaError, ValueError):
    """A dimension, radius or growth parameter is out of range."""


class UnsupportedGridSize(InvalidParameter):
    """The transform backend rejected the grid dimensions."""
