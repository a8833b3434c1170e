"""
Field Initializers

Every seeding function takes an explicit numpy Generator and returns a fresh
(height, width) float64 field clipped to [0, 1]. Nothing here touches global
random state, so the same seed always reproduces the same field bit for bit.
"""

import inspect

import numpy as np

from .errors import InvalidParameter


def _distance_grid(width, height, cx, cy):
    Y, X = np.ogrid[:height, :width]
    return np.sqrt((X - cx) ** 2 + (Y - cy) ** 2).astype(np.float64)


def seed_blob(width, height, rng, amplitude=0.9, spread=6.0, cutoff=None,
              center=None, noise_fraction=0.002, noise_low=0.0, noise_high=1.0):
    """Centered Gaussian blob plus sparse random perturbations.

    Args:
        width, height: Field dimensions
        rng: numpy.random.Generator
        amplitude: Blob peak value
        spread: Gaussian spread (standard deviation) in cells
        cutoff: Blob is zero at distances >= cutoff (default 2 * spread)
        center: (cx, cy); defaults to (width // 2, height // 2)
        noise_fraction: Probability that a cell is replaced by a random value
        noise_low, noise_high: Range of the random replacement values
    """
    if spread <= 0:
        raise InvalidParameter(f"blob spread must be positive, got {spread!r}")
    if not 0.0 <= noise_fraction <= 1.0:
        raise InvalidParameter(f"noise fraction must be in [0, 1], got {noise_fraction!r}")
    if cutoff is None:
        cutoff = 2.0 * spread
    cx, cy = center if center is not None else (width // 2, height // 2)

    dist = _distance_grid(width, height, cx, cy)
    field = amplitude * np.exp(-dist ** 2 / (2.0 * spread ** 2))
    field[dist >= cutoff] = 0.0

    # Draw both arrays unconditionally so the stream position never depends on the fraction
    hits = rng.random((height, width)) < noise_fraction
    values = rng.uniform(noise_low, noise_high, (height, width))
    field[hits] = values[hits]
    return np.clip(field, 0.0, 1.0)


def seed_random(width, height, rng, density=0.5, radius=None):
    """Noise under a smooth Gaussian envelope around the center."""
    if radius is None:
        radius = min(width, height) // 4
    dist = _distance_grid(width, height, width // 2, height // 2)
    envelope = np.exp(-0.5 * (dist / (radius * 0.6)) ** 2)
    noise = rng.random((height, width)) * density
    return np.clip(noise * envelope, 0.0, 1.0)


def seed_blobs(width, height, rng, n_blobs=8, blob_radius=None, density=0.6):
    """Overlapping noisy Gaussian blobs clustered near the center."""
    if blob_radius is None:
        blob_radius = max(1, min(width, height) // 10)
    field = np.zeros((height, width), dtype=np.float64)
    scatter_x, scatter_y = width * 0.2, height * 0.2
    Y, X = np.ogrid[:height, :width]
    for _ in range(n_blobs):
        cx = int(width // 2 + rng.standard_normal() * scatter_x)
        cy = int(height // 2 + rng.standard_normal() * scatter_y)
        cx = max(0, min(width - 1, cx))
        cy = max(0, min(height - 1, cy))
        dist = np.sqrt((X - cx) ** 2 + (Y - cy) ** 2).astype(np.float64)
        blob = np.exp(-0.5 * (dist / (blob_radius * 0.5)) ** 2) * density
        noise = rng.random((height, width)) * 0.4 + 0.6
        field += blob * noise
    return np.clip(field, 0.0, 1.0)


def seed_ring(width, height, rng, radius=None, thickness=None, value=0.8):
    """Noisy annulus around the center."""
    if radius is None:
        radius = min(width, height) // 5
    if thickness is None:
        thickness = max(2, min(width, height) // 50)
    dist = _distance_grid(width, height, width // 2, height // 2)
    ring = np.exp(-0.5 * ((dist - radius) / thickness) ** 2) * value
    noise = rng.random((height, width)) * 0.2 + 0.8
    return np.clip(ring * noise, 0.0, 1.0)


SEEDERS = {
    "blob": seed_blob,
    "random": seed_random,
    "blobs": seed_blobs,
    "ring": seed_ring,
}


def seed_field(kind, width, height, rng, **kwargs):
    """Dispatch to a seeder by name.

    Options the seeder does not accept raise InvalidParameter; a TypeError
    from inside the seeder itself propagates unchanged.
    """
    try:
        seeder = SEEDERS[kind]
    except KeyError:
        raise InvalidParameter(f"unknown seed kind {kind!r}; expected one of {sorted(SEEDERS)}") from None
    try:
        inspect.signature(seeder).bind(width, height, rng, **kwargs)
    except TypeError as e:
        raise InvalidParameter(f"bad options for seed {kind!r}: {e}") from None
    return seeder(width, height, rng, **kwargs)
