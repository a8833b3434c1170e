"""
Lenia Parameter Presets

Each preset is a set of EngineConfig overrides (plus a display name and
description) known to produce interesting behavior. Radii are in cells for
the preset's own grid size.
"""

PRESETS = {
    "lorenz": {
        "name": "Lorenz Drift",
        "description": "Ring kernel with Lorenz-driven mu/sigma drift",
        "width": 128, "height": 128,
        "kernel_radius": 6, "shell_sigma": 0.15,
        "growth": {"mu": 0.3, "sigma": 0.06, "dt": 0.08},
        "modulate": True,
        "strategy": "fft",
        "seed_kind": "blob",
        "seed_options": {"amplitude": 0.9, "spread": 6.0, "cutoff": 12.0,
                         "noise_fraction": 0.002},
    },
    "glider": {
        "name": "Lenia Glider",
        "description": "Gliding organism - a classic Lenia 'creature'",
        "width": 256, "height": 256,
        "kernel_radius": 13, "shell_sigma": 0.15,
        "growth": {"mu": 0.15, "sigma": 0.017, "dt": 0.1},
        "seed_kind": "random",
    },
    "coral": {
        "name": "Lenia Branch",
        "description": "Branching growth patterns",
        "width": 256, "height": 256,
        "kernel_radius": 20, "shell_sigma": 0.18,
        "growth": {"mu": 0.12, "sigma": 0.010, "dt": 1 / 15},
        "seed_kind": "blobs",
    },
    "heartbeat": {
        "name": "Lenia Spiral",
        "description": "Spiral wave excitation patterns",
        "width": 256, "height": 256,
        "kernel_radius": 10, "shell_sigma": 0.20,
        "growth": {"mu": 0.22, "sigma": 0.035, "dt": 0.125},
        "seed_kind": "ring",
    },
    "lava_lamp": {
        "name": "Lenia Blob",
        "description": "Slow, globular, merging/splitting blobs",
        "width": 256, "height": 256,
        "kernel_radius": 25,
        "kernel_peaks": [0.4, 0.8], "kernel_widths": [0.18, 0.12],
        "growth": {"mu": 0.18, "sigma": 0.024, "dt": 1 / 18},
        "seed_kind": "blobs", "seed_options": {"density": 0.6},
    },
    "nebula": {
        "name": "Lenia Cloud",
        "description": "Multi-scale cloud-like interference",
        "width": 256, "height": 256,
        "kernel_radius": 20,
        "kernel_peaks": [0.3, 0.6, 0.9], "kernel_widths": [0.15, 0.12, 0.10],
        "growth": {"mu": 0.16, "sigma": 0.020, "dt": 1 / 12},
        "seed_kind": "random", "seed_options": {"density": 0.4},
    },
    "disc": {
        "name": "Disc Mover",
        "description": "Plain Gaussian disc kernel, small radius (direct convolution)",
        "width": 128, "height": 128,
        "kernel_radius": 3, "kernel_shape": "gaussian", "kernel_sigma": 1.5,
        "growth": {"mu": 0.3, "sigma": 0.08, "dt": 0.1},
        "seed_kind": "blob",
        "seed_options": {"amplitude": 1.0, "spread": 4.0, "noise_fraction": 0.0},
    },
}

PRESET_ORDER = ["lorenz", "glider", "coral", "heartbeat", "lava_lamp", "nebula", "disc"]


def get_preset(name):
    """Get a preset by name. Returns None if not found."""
    return PRESETS.get(name)


def list_presets():
    """Return list of (key, name, description) for presets."""
    return [(k, PRESETS[k]["name"], PRESETS[k]["description"])
            for k in PRESET_ORDER if k in PRESETS]
