"""
Lenia Engine - continuous cellular automaton core

Usage:
    from lenia_engine import create
    engine = create(128, 128, kernel_radius=6, shell_sigma=0.15, seed=1)
    engine.set_parameter_modulator_enabled(True, driver_seed=7)
    for _ in range(100):
        engine.step()
    field = engine.read_field()  # read-only (H, W) float64 in [0, 1]
"""

from .config import EngineConfig, GrowthParams, ModulatorConfig
from .convolution import DirectConvolver, FFTConvolver, make_convolver
from .errors import InvalidParameter, LeniaError, UnsupportedGridSize
from .growth import growth
from .kernel import Kernel, build_kernel
from .lenia import Lenia, create
from .modulator import LorenzAttractor, ParameterModulator
from .presets import PRESETS, get_preset, list_presets

__all__ = [
    "DirectConvolver", "EngineConfig", "FFTConvolver", "GrowthParams",
    "InvalidParameter", "Kernel", "Lenia", "LeniaError", "LorenzAttractor",
    "ModulatorConfig", "PRESETS", "ParameterModulator", "UnsupportedGridSize",
    "build_kernel", "create", "get_preset", "growth", "list_presets",
    "make_convolver",
]
