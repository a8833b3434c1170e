"""
Engine Configuration Models

Pydantic models for everything the engine accepts from outside: grid and
kernel geometry, growth parameters, the Lorenz modulator's coefficients and
the initial seeding. Validation happens here, once, at construction or at an
explicit setter call, so that a tick can never fail for configuration
reasons.
"""

from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .errors import InvalidParameter


class GrowthParams(BaseModel):
    """Growth function center, width and integration step."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    mu: float = Field(default=0.3, description="Activity level of maximum growth")
    # sigma <= 0 is allowed: growth is identically zero
    sigma: float = Field(default=0.06, description="Response width")
    dt: float = Field(default=0.08, description="Integration step")


class ModulatorConfig(BaseModel):
    """Lorenz driver coefficients and the driver-to-growth mapping."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    lorenz_sigma: float = 10.0
    rho: float = 28.0
    b: float = 8.0 / 3.0
    # Explicit Euler leaves the attractor and diverges for large steps
    step: float = Field(default=0.01, gt=0, lt=0.05, description="Driver Euler step")
    initial: Tuple[float, float, float] = (0.1, 0.0, 0.0)

    mu_gain: float = 0.002
    mu_min: float = 0.01
    mu_max: float = 1.0
    sigma_gain: float = 0.001
    sigma_min: float = 0.001
    sigma_max: float = 1.0
    dt_gain: float = 0.0
    dt_min: float = 0.0
    dt_max: float = 1.0

    @model_validator(mode="after")
    def _check_ranges(self):
        for name in ("mu", "sigma", "dt"):
            lo = getattr(self, f"{name}_min")
            hi = getattr(self, f"{name}_max")
            if lo > hi:
                raise ValueError(f"{name}_min ({lo}) exceeds {name}_max ({hi})")
        return self


class EngineConfig(BaseModel):
    """Full construction-time configuration of a Lenia engine."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    width: int = Field(default=128, gt=0, description="Grid width in cells")
    height: int = Field(default=128, gt=0, description="Grid height in cells")

    # Kernel
    kernel_radius: float = Field(default=6.0, gt=0, description="Kernel radius R in cells")
    shell_sigma: float = Field(default=0.15, gt=0, description="Ring shell width")
    kernel_shape: Literal["ring", "gaussian"] = "ring"
    kernel_peaks: Optional[List[float]] = None
    kernel_widths: Optional[List[float]] = None
    kernel_sigma: Optional[float] = Field(default=None, gt=0)

    # Convolution
    strategy: Literal["auto", "direct", "fft"] = "auto"
    direct_max_radius: float = Field(default=3.0, ge=0)
    workers: int = Field(default=1, ge=1, description="Direct strategy row-band threads")

    growth: GrowthParams = Field(default_factory=GrowthParams)

    # Parameter modulation
    modulate: bool = False
    driver_seed: Optional[int] = None
    modulator: ModulatorConfig = Field(default_factory=ModulatorConfig)

    # Initial field
    seed_kind: str = "blob"
    seed_options: Dict[str, Any] = Field(default_factory=dict)


def validated(model_cls, **values):
    """Build a config model, translating validation failures to InvalidParameter."""
    try:
        return model_cls(**values)
    except ValidationError as e:
        raise InvalidParameter(str(e)) from e
