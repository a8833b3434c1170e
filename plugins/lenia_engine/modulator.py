"""
Lorenz Parameter Modulator

A Lorenz attractor, integrated with explicit Euler at its own fixed step,
drives slow aperiodic drift of the growth parameters:

    mu    <- clamp(mu + mu_gain * tanh(x / 20), mu_min, mu_max)
    sigma <- clamp(sigma * (1 + sigma_gain * y), sigma_min, sigma_max)
    color_bias = tanh(z / 30)            (renderer hint only)
    dt    <- clamp(base_dt * (1 + dt_gain * color_bias), dt_min, dt_max)

mu and sigma accumulate tick over tick; dt is recomputed from its base value
each tick (dt_gain = 0 keeps it at exactly base_dt). If the driver state
ever becomes non-finite the previous parameters and color bias are held.
The driver's evolution depends only on its initial condition, so a fixed
seed reproduces the exact parameter sequence.
"""

import logging
import math

import numpy as np

from .config import GrowthParams, ModulatorConfig

logger = logging.getLogger(__name__)


def _clamp(v, lo, hi):
    return max(lo, min(hi, v))


class LorenzAttractor:
    """Lorenz system state (x, y, z) with coefficients sigma, rho, b."""

    def __init__(self, x=0.1, y=0.0, z=0.0, sigma=10.0, rho=28.0, b=8.0 / 3.0, dt=0.01):
        self.x = x
        self.y = y
        self.z = z
        self.sigma = sigma
        self.rho = rho
        self.b = b
        self.dt = dt

    @classmethod
    def from_seed(cls, config, driver_seed=None):
        """Driver at the configured initial condition, jittered by a seeded offset.

        driver_seed=None gives the unperturbed initial condition; an integer
        seed adds a uniform offset in [-1, 1) to each coordinate.
        """
        x, y, z = config.initial
        if driver_seed is not None:
            ox, oy, oz = np.random.default_rng(driver_seed).uniform(-1.0, 1.0, 3)
            x, y, z = x + float(ox), y + float(oy), z + float(oz)
        return cls(x, y, z, sigma=config.lorenz_sigma, rho=config.rho, b=config.b, dt=config.step)

    @property
    def state(self):
        return (self.x, self.y, self.z)

    def step(self):
        dx = self.sigma * (self.y - self.x)
        dy = self.x * (self.rho - self.z) - self.y
        dz = self.x * self.y - self.b * self.z
        self.x += dx * self.dt
        self.y += dy * self.dt
        self.z += dz * self.dt


class ParameterModulator:
    """Derives GrowthParams from a Lorenz driver, one driver step per tick."""

    def __init__(self, base_params, config=None, driver_seed=None):
        """
        Args:
            base_params: GrowthParams the drift starts from
            config: ModulatorConfig (defaults reproduce the classic mapping)
            driver_seed: Optional integer seed for the driver's initial condition
        """
        self.config = config or ModulatorConfig()
        self.driver = LorenzAttractor.from_seed(self.config, driver_seed)
        self.base_dt = base_params.dt
        self.params = base_params
        self.color_bias = 0.0
        self._diverged = False

    def advance(self):
        """Step the driver once and return the new GrowthParams."""
        c = self.config
        self.driver.step()
        x, y, z = self.driver.state
        if not all(math.isfinite(v) for v in (x, y, z)):
            if not self._diverged:
                logger.warning("Lorenz driver diverged to %s; holding growth params %s",
                               self.driver.state, self.params)
                self._diverged = True
            return self.params

        mu = _clamp(self.params.mu + c.mu_gain * math.tanh(x / 20.0), c.mu_min, c.mu_max)
        sigma = _clamp(self.params.sigma * (1.0 + c.sigma_gain * y), c.sigma_min, c.sigma_max)
        self.color_bias = math.tanh(z / 30.0)
        if c.dt_gain == 0:
            dt = self.base_dt
        else:
            dt = _clamp(self.base_dt * (1.0 + c.dt_gain * self.color_bias), c.dt_min, c.dt_max)

        self.params = GrowthParams(mu=mu, sigma=sigma, dt=dt)
        return self.params
