"""
Lenia - Continuous Cellular Automaton Engine

A continuous generalization of Conway's Game of Life where:
- States are continuous [0, 1] instead of binary
- Neighborhoods use a smooth ring kernel instead of discrete counts
- Growth/decay is governed by a Gaussian growth function in [-1, 1]
- Time steps are fractional for smooth evolution

One tick:
    1. the Lorenz modulator (if enabled) advances and republishes mu/sigma/dt
    2. U = kernel (*) world on the torus (direct or FFT strategy)
    3. next = clip(world + dt * growth(U), 0, 1), then the buffers swap

Reference: Bert Chan, "Lenia - Biology of Artificial Life" (2020)
"""

import logging

import numpy as np

from .config import EngineConfig, GrowthParams, validated
from .convolution import make_convolver
from .engine_base import CAEngine
from .errors import InvalidParameter
from .growth import growth
from .initializer import seed_field
from .kernel import build_kernel
from .modulator import ParameterModulator
from .presets import get_preset

logger = logging.getLogger(__name__)


class Lenia(CAEngine):

    engine_name = "lenia"
    engine_label = "Lenia"

    def __init__(self, config=None, rng=None, **overrides):
        """
        Args:
            config: EngineConfig; keyword overrides are applied on top of it
            rng: numpy Generator used for seeding (default: fresh OS-seeded one)
            **overrides: Any EngineConfig field, e.g. width=64, kernel_radius=9
        """
        if config is None:
            config = validated(EngineConfig, **overrides)
        elif overrides:
            config = validated(EngineConfig, **{**config.model_dump(), **overrides})
        super().__init__(config.width, config.height)
        self.config = config
        self.rng = rng if rng is not None else np.random.default_rng()

        self.R = config.kernel_radius
        self.shell_sigma = config.shell_sigma
        self.kernel_shape = config.kernel_shape
        self.kernel_peaks = config.kernel_peaks
        self.kernel_widths = config.kernel_widths
        self.kernel_sigma = config.kernel_sigma
        self.strategy = config.strategy

        self._external_params = config.growth
        self._params = config.growth
        self.modulator = None

        self.convolver = None
        self._build_kernel()

        if config.modulate:
            self.set_parameter_modulator_enabled(True, config.driver_seed)

        self.seed(config.seed_kind, **config.seed_options)

    def _build_kernel(self, **changes):
        """Build kernel and convolver from current settings plus changes.

        Nothing is committed until both have been built, so a rejected
        change leaves the engine untouched.
        """
        settings = {
            "kernel_radius": self.R, "shell_sigma": self.shell_sigma,
            "kernel_shape": self.kernel_shape, "kernel_peaks": self.kernel_peaks,
            "kernel_widths": self.kernel_widths, "kernel_sigma": self.kernel_sigma,
        }
        strategy = changes.pop("strategy", None) or self.strategy
        settings.update(changes)
        kernel = build_kernel(
            settings["kernel_radius"], settings["shell_sigma"],
            peaks=settings["kernel_peaks"], widths=settings["kernel_widths"],
            shape=settings["kernel_shape"], kernel_sigma=settings["kernel_sigma"],
        )
        convolver = make_convolver(
            strategy, kernel, self.width, self.height,
            direct_max_radius=self.config.direct_max_radius,
            workers=self.config.workers,
        )

        if self.convolver is not None:
            self.convolver.close()
        self.kernel = kernel
        self.convolver = convolver
        self.strategy = strategy
        self.R = settings["kernel_radius"]
        self.shell_sigma = settings["shell_sigma"]
        self.kernel_shape = settings["kernel_shape"]
        self.kernel_peaks = settings["kernel_peaks"]
        self.kernel_widths = settings["kernel_widths"]
        self.kernel_sigma = settings["kernel_sigma"]
        logger.info("Lenia %dx%d: %s kernel R=%s (%d entries), %s convolution",
                    self.width, self.height, self.kernel_shape, self.R,
                    len(kernel), convolver.strategy_name)

    def _update(self, current, out):
        if self.modulator is not None:
            self._params = self.modulator.advance()
        U = self.convolver.convolve(current)
        p = self._params
        np.clip(current + p.dt * growth(U, p.mu, p.sigma), 0.0, 1.0, out=out)

    # -- growth parameters -------------------------------------------------

    @property
    def growth_params(self):
        """GrowthParams in effect for the next tick."""
        return self._params

    @property
    def modulating(self):
        return self.modulator is not None

    @property
    def color_bias(self):
        """Renderer hint derived from the driver's z; 0 when not modulating."""
        return self.modulator.color_bias if self.modulator is not None else 0.0

    def set_growth_params(self, mu, sigma, dt):
        """Set mu/sigma/dt. Ignored while the parameter modulator owns them."""
        params = validated(GrowthParams, mu=mu, sigma=sigma, dt=dt)
        if self.modulator is not None:
            logger.info("Growth params %s ignored: parameter modulator is active", params)
            return
        self._external_params = params
        self._params = params

    def set_parameter_modulator_enabled(self, enabled, driver_seed=None):
        """Start (from the current external params) or stop the Lorenz modulator."""
        if enabled:
            self.modulator = ParameterModulator(
                self._external_params, self.config.modulator, driver_seed=driver_seed)
            logger.info("Parameter modulator enabled (driver seed %s)", driver_seed)
        else:
            if self.modulator is not None:
                logger.info("Parameter modulator disabled")
            self.modulator = None
            self._params = self._external_params

    # -- parameters --------------------------------------------------------

    def set_params(self, mu=None, sigma=None, dt=None, R=None, shell_sigma=None,
                   kernel_shape=None, kernel_peaks=None, kernel_widths=None,
                   kernel_sigma=None, strategy=None, **_kw):
        """Update parameters. Rebuilds kernel if R, kernel shape or strategy changes."""
        params = None
        if mu is not None or sigma is not None or dt is not None:
            p = self._external_params
            params = validated(
                GrowthParams,
                mu=p.mu if mu is None else mu,
                sigma=p.sigma if sigma is None else sigma,
                dt=p.dt if dt is None else dt,
            )

        changes = {}
        if R is not None and R != self.R:
            changes["kernel_radius"] = R
        for key, value in (("shell_sigma", shell_sigma), ("kernel_shape", kernel_shape),
                           ("kernel_peaks", kernel_peaks), ("kernel_widths", kernel_widths),
                           ("kernel_sigma", kernel_sigma)):
            if value is not None:
                changes[key] = value
        if strategy is not None and strategy != self.strategy:
            changes["strategy"] = strategy

        if changes:
            self._build_kernel(**changes)
        if params is not None:
            self.set_growth_params(params.mu, params.sigma, params.dt)

    def get_params(self):
        p = self._params
        return {
            "mu": p.mu,
            "sigma": p.sigma,
            "dt": p.dt,
            "R": self.R,
            "shell_sigma": self.shell_sigma,
            "kernel_shape": self.kernel_shape,
            "kernel_peaks": self.kernel_peaks,
            "kernel_widths": self.kernel_widths,
            "kernel_sigma": self.kernel_sigma,
            "strategy": self.convolver.strategy_name,
            "modulating": self.modulating,
        }

    # -- seeding -----------------------------------------------------------

    def seed(self, seed_type="blob", **kwargs):
        """Seed the world with one of the initializer shapes (see initializer.SEEDERS)."""
        self.load(seed_field(seed_type, self.width, self.height, self.rng, **kwargs))

    # -- lifecycle ---------------------------------------------------------

    def close(self):
        """Shut down the convolver's worker pool."""
        self.convolver.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False

    @classmethod
    def from_preset(cls, key, width=None, height=None, seed=None, **overrides):
        """Build an engine from a named preset (see presets.PRESETS)."""
        preset = get_preset(key)
        if preset is None:
            raise InvalidParameter(f"unknown preset {key!r}")
        values = {k: v for k, v in preset.items() if k not in ("name", "description")}
        if width is not None:
            values["width"] = width
        if height is not None:
            values["height"] = height
        values.update(overrides)
        return cls(rng=np.random.default_rng(seed), **values)


def create(width, height, kernel_radius, shell_sigma=0.15, seed=None, **config):
    """Create a Lenia engine seeded from an explicit random seed.

    Raises InvalidParameter for non-positive width, height or kernel_radius.
    """
    return Lenia(
        rng=np.random.default_rng(seed),
        width=width, height=height,
        kernel_radius=kernel_radius, shell_sigma=shell_sigma,
        **config,
    )
