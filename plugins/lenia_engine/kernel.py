"""
Kernel Builder

Builds the normalized radial interaction kernel as a sparse list of integer
offsets (dx, dy) within Euclidean distance R and their weights.

Two kernel shapes:
- "ring": sum of Gaussian shells over the normalized distance d/R.
  The default single shell peaks at half the radius:
      w(d) = exp(-0.5 * ((d/R - 0.5) / shell_sigma)^2)
- "gaussian": a plain disc Gaussian exp(-d^2 / (2 * kernel_sigma^2)),
  truncated at R.

Weights are divided by their sum so total mass is exactly 1.
"""

import logging

import numpy as np

from .errors import InvalidParameter
from .growth import bell

logger = logging.getLogger(__name__)

KERNEL_SHAPES = ("ring", "gaussian")


class Kernel:
    """Sparse kernel: parallel arrays of offsets and normalized weights."""

    def __init__(self, dx, dy, weights, radius):
        self.dx = np.asarray(dx, dtype=np.int64)
        self.dy = np.asarray(dy, dtype=np.int64)
        self.weights = np.asarray(weights, dtype=np.float64)
        self.radius = radius

    def __len__(self):
        return len(self.weights)

    def __iter__(self):
        return zip(self.dx.tolist(), self.dy.tolist(), self.weights.tolist())

    @property
    def mass(self):
        return float(self.weights.sum())

    def to_dense(self, width, height):
        """Embed the kernel in a full (height, width) grid for cyclic convolution.

        Each weight lands at the wrapped negated offset so that the cyclic
        convolution of a field with this array equals the toroidal
        neighborhood sum sum(w * F[y + dy, x + dx]). Offsets that alias onto
        the same cell on small grids accumulate, matching the direct sum.
        """
        dense = np.zeros((height, width), dtype=np.float64)
        np.add.at(dense, ((-self.dy) % height, (-self.dx) % width), self.weights)
        return dense


def build_kernel(radius, shell_sigma=0.15, peaks=None, widths=None,
                 shape="ring", kernel_sigma=None):
    """Build a normalized kernel.

    Args:
        radius: Kernel radius R in cells (> 0)
        shell_sigma: Width of the default single ring (> 0)
        peaks: Ring peak positions in [0, 1] of the normalized distance
        widths: Width of each ring, same length as peaks
        shape: "ring" or "gaussian"
        kernel_sigma: Spread in cells for the gaussian shape (default R / 2)

    Returns:
        Kernel whose weights sum to 1 (or are all zero if every weight
        underflowed, in which case the kernel produces zero activity).
    """
    if not radius > 0:
        raise InvalidParameter(f"kernel radius must be positive, got {radius!r}")
    if shape not in KERNEL_SHAPES:
        raise InvalidParameter(f"unknown kernel shape {shape!r}; expected one of {KERNEL_SHAPES}")

    r = int(np.floor(radius))
    y, x = np.mgrid[-r:r + 1, -r:r + 1]
    dist = np.sqrt(x * x + y * y)
    inside = dist <= radius
    dx, dy, dist = x[inside], y[inside], dist[inside]

    if shape == "ring":
        if peaks is None and widths is None:
            if not shell_sigma > 0:
                raise InvalidParameter(f"shell width must be positive, got {shell_sigma!r}")
            peaks, widths = [0.5], [shell_sigma]
        elif peaks is None or widths is None or len(peaks) != len(widths):
            raise InvalidParameter("kernel peaks and widths must be given together with equal lengths")
        if any(not w > 0 for w in widths):
            raise InvalidParameter(f"ring widths must be positive, got {widths!r}")
        D = dist / radius
        weights = np.zeros_like(D)
        for peak, width in zip(peaks, widths):
            weights += bell(D, peak, width)
    else:
        if kernel_sigma is None:
            kernel_sigma = radius / 2.0
        if not kernel_sigma > 0:
            raise InvalidParameter(f"kernel sigma must be positive, got {kernel_sigma!r}")
        weights = bell(dist, 0.0, kernel_sigma)

    total = weights.sum()
    if total > 0:
        weights = weights / total
    else:
        logger.warning("Kernel mass underflowed to zero (R=%s); activity will be zero", radius)

    logger.debug("Built %s kernel: R=%s, %d entries", shape, radius, len(weights))
    return Kernel(dx, dy, weights, radius)
