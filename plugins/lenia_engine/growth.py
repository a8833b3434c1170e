"""
Growth Function

Maps neighborhood activity U to a growth rate in [-1, 1]:

    growth(u) = 2 * exp(-(u - mu)^2 / (2 * sigma^2)) - 1

Maximum growth (+1) sits exactly at u == mu and decays toward -1 away from
it. sigma <= 0 is the degenerate case: growth is identically zero.
"""

import numpy as np


def bell(x, center, width):
    """Gaussian bell curve, evaluated in float64.

    Huge normalized distances (tiny widths) overflow to inf and evaluate to
    the limit 0 without raising or warning.
    """
    z = (np.asarray(x, dtype=np.float64) - center) / width
    with np.errstate(over="ignore", under="ignore"):
        return np.exp(-0.5 * z * z)


def growth(u, mu, sigma):
    """Growth mapping for a scalar or an array of activities."""
    if sigma <= 0:
        return np.zeros_like(np.asarray(u, dtype=np.float64))[()]
    return (2.0 * bell(u, mu, sigma) - 1.0)[()]
