"""
Abstract Base Class for Double-Buffered Field Engines

Owns the two preallocated (height, width) field buffers and the index of
the "current" one. A tick writes every cell of the other buffer and then
flips the index, so readers only ever see a completed generation and the
buffers are never reallocated.
"""

import threading
from abc import ABC, abstractmethod

import numpy as np

from .errors import InvalidParameter


class CAEngine(ABC):
    """Base class for continuous cellular automaton engines."""

    engine_name = ""   # e.g. "lenia"
    engine_label = ""  # e.g. "Lenia"

    def __init__(self, width, height):
        self.width = width
        self.height = height
        self._buffers = (
            np.zeros((height, width), dtype=np.float64),
            np.zeros((height, width), dtype=np.float64),
        )
        self._current = 0
        self._step_lock = threading.Lock()
        self.generation = 0

    @property
    def world(self):
        """The current buffer (internal, mutable). Readers use read_field()."""
        return self._buffers[self._current]

    @property
    def _next(self):
        return self._buffers[1 - self._current]

    def step(self):
        """Advance one generation. Returns a read-only view of the new state.

        The view is valid until the next step() call, which overwrites the
        buffer behind it; callers that keep it longer must copy it.
        Raises RuntimeError if called re-entrantly or from two threads at once.
        """
        if not self._step_lock.acquire(blocking=False):
            raise RuntimeError(f"{type(self).__name__}.step() is already running on this engine")
        try:
            self._update(self.world, self._next)
            self._current = 1 - self._current
            self.generation += 1
        finally:
            self._step_lock.release()
        return self.read_field(copy=False)

    @abstractmethod
    def _update(self, current, out):
        """Compute the next generation from current, writing every cell of out."""

    def step_n(self, n):
        """Advance n steps. Returns a read-only view of the final state (see step)."""
        for _ in range(n):
            self.step()
        return self.read_field(copy=False)

    def read_field(self, copy=True):
        """Read-only snapshot of the current generation.

        copy=False returns a read-only view that is only valid until the
        next step() call. Past that it no longer tracks the current
        generation and the step after overwrites it, so copy it (or use the
        default) to keep a snapshot.
        """
        view = self.world.copy() if copy else self.world.view()
        view.flags.writeable = False
        return view

    def load(self, field):
        """Replace the current state with a (height, width) field (clipped to [0, 1])."""
        field = np.asarray(field, dtype=np.float64)
        if field.shape != (self.height, self.width):
            raise InvalidParameter(
                f"field shape {field.shape} does not match engine grid {(self.height, self.width)}"
            )
        if not np.all(np.isfinite(field)):
            raise InvalidParameter("field contains non-finite values")
        np.clip(field, 0.0, 1.0, out=self.world)
        self.generation = 0

    def clear(self):
        """Clear the world."""
        self.world[:] = 0
        self.generation = 0

    @abstractmethod
    def set_params(self, **params):
        """Update engine parameters."""

    @abstractmethod
    def get_params(self):
        """Return dict of current parameter values."""

    @abstractmethod
    def seed(self, seed_type="blob", **kwargs):
        """Seed the world based on type string."""

    @property
    def stats(self):
        """Return current world statistics."""
        world = self.world
        return {
            "generation": self.generation,
            "mass": float(world.sum()),
            "mean": float(world.mean()),
            "max": float(world.max()),
            "alive_pct": float((world > 0.01).sum()) / world.size * 100,
        }
