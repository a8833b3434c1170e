#!/usr/bin/env python3
"""
Tests for the Lenia engine.

Verifies:
1. Construction validation and the create() entry point
2. The 16x16 center-cell scenario against the closed-form formulas
3. Clamp invariant, determinism and translation invariance of whole ticks
4. Double buffering: no reallocation, read-only snapshots, no re-entrant step
5. Growth parameter ownership when the Lorenz modulator is on
6. Kernel rebuilds, presets and seeding
"""

import math

import numpy as np
import pytest

from lenia_engine import InvalidParameter, Lenia, create
from lenia_engine.presets import PRESET_ORDER

SCENARIO_GROWTH = {"mu": 0.3, "sigma": 0.06, "dt": 0.08}


def _scenario_field():
    """16x16 field: Gaussian blob, amplitude 0.8, spread 6, centered at (8, 8)."""
    field = [[0.0] * 16 for _ in range(16)]
    for y in range(16):
        for x in range(16):
            d2 = (x - 8) ** 2 + (y - 8) ** 2
            field[y][x] = 0.8 * math.exp(-d2 / (2 * 6 ** 2))
    return field


def _scenario_expected(field):
    """Closed-form U and next value of the center cell."""
    R, shell = 6, 0.15
    raw = []
    for dy in range(-R, R + 1):
        for dx in range(-R, R + 1):
            d = math.hypot(dx, dy)
            if d <= R:
                raw.append((dx, dy, math.exp(-0.5 * ((d / R - 0.5) / shell) ** 2)))
    total = sum(w for _, _, w in raw)
    u = sum(w / total * field[(8 + dy) % 16][(8 + dx) % 16] for dx, dy, w in raw)
    g = 2 * math.exp(-(u - 0.3) ** 2 / (2 * 0.06 ** 2)) - 1
    nxt = min(1.0, max(0.0, field[8][8] + 0.08 * g))
    return u, nxt


# -- construction --------------------------------------------------------

@pytest.mark.parametrize("width,height,radius", [(0, 16, 6), (16, -1, 6), (16, 16, 0), (16, 16, -2)])
def test_create_rejects_non_positive_geometry(width, height, radius):
    with pytest.raises(InvalidParameter):
        create(width, height, radius, 0.15, seed=0)


def test_create_rejects_bad_config():
    with pytest.raises(InvalidParameter):
        create(16, 16, 6, 0.0, seed=0)
    with pytest.raises(InvalidParameter):
        create(16, 16, 6, 0.15, seed=0, strategy="winograd")
    with pytest.raises(InvalidParameter):
        create(16, 16, 6, 0.15, seed=0, growth={"mu": float("nan")})


def test_create_seeds_from_explicit_seed():
    a = create(32, 24, 4, 0.15, seed=17)
    b = create(32, 24, 4, 0.15, seed=17)
    assert a.read_field().shape == (24, 32)
    np.testing.assert_array_equal(a.read_field(), b.read_field())
    assert a.generation == 0


# -- concrete scenario ---------------------------------------------------

@pytest.mark.parametrize("strategy", ["direct", "fft"])
def test_center_cell_matches_closed_form(strategy):
    field = _scenario_field()
    u_expected, next_expected = _scenario_expected(field)

    engine = create(16, 16, 6, 0.15, seed=0, strategy=strategy, growth=SCENARIO_GROWTH)
    engine.load(np.array(field))
    U = engine.convolver.convolve(engine.world)
    assert abs(U[8, 8] - u_expected) < 1e-6, f"U {U[8, 8]} vs {u_expected}"

    engine.step()
    assert abs(engine.read_field()[8, 8] - next_expected) < 1e-6


def test_initializer_reproduces_scenario_field():
    engine = create(16, 16, 6, 0.15, seed=0,
                    seed_options={"amplitude": 0.8, "spread": 6.0, "noise_fraction": 0.0})
    np.testing.assert_allclose(engine.read_field(), np.array(_scenario_field()), rtol=0, atol=1e-12)


# -- whole-tick properties -----------------------------------------------

@pytest.mark.parametrize("dt", [1.0, -1.0, 0.5])
def test_field_stays_in_unit_interval(dt):
    engine = create(40, 40, 5, 0.15, seed=1, growth={"mu": 0.2, "sigma": 0.05, "dt": dt},
                    seed_kind="random", seed_options={"density": 1.0, "radius": 20})
    for _ in range(150):
        field = engine.step()
        assert field.min() >= 0.0 and field.max() <= 1.0


def test_modulated_run_stays_in_unit_interval():
    engine = create(32, 32, 6, 0.15, seed=4, modulate=True, driver_seed=8)
    for _ in range(300):
        field = engine.step()
        assert field.min() >= 0.0 and field.max() <= 1.0


@pytest.mark.parametrize("strategy", ["auto", "direct", "fft"])
def test_two_engines_with_fixed_params_stay_identical(strategy):
    a = create(32, 32, 6, 0.15, seed=21, strategy=strategy)
    b = create(32, 32, 6, 0.15, seed=21, strategy=strategy)
    for _ in range(60):
        np.testing.assert_array_equal(a.step(), b.step())


def test_direct_and_fft_engines_track_each_other():
    direct = create(32, 32, 6, 0.15, seed=2, strategy="direct")
    fft = create(32, 32, 6, 0.15, seed=2, strategy="fft")
    for _ in range(10):
        np.testing.assert_allclose(fft.step(), direct.step(), rtol=1e-6, atol=1e-8)


@pytest.mark.parametrize("strategy", ["direct", "fft"])
def test_tick_is_translation_invariant(strategy):
    field = np.random.default_rng(6).random((20, 28))
    shift = (-3, 11)

    plain = create(28, 20, 5, 0.15, seed=0, strategy=strategy)
    plain.load(field)
    moved = create(28, 20, 5, 0.15, seed=0, strategy=strategy)
    moved.load(np.roll(field, shift, axis=(0, 1)))

    np.testing.assert_allclose(moved.step(), np.roll(plain.step(), shift, axis=(0, 1)),
                               rtol=0, atol=1e-12)


def test_degenerate_sigma_freezes_field():
    engine = create(24, 24, 4, 0.15, seed=3)
    engine.set_growth_params(0.3, 0.0, 0.08)
    before = engine.read_field()
    engine.step_n(5)
    np.testing.assert_array_equal(engine.read_field(), before)
    assert engine.generation == 5


# -- double buffering ----------------------------------------------------

def test_buffers_are_reused_and_alternate():
    engine = create(16, 16, 3, 0.15, seed=0)
    first, second = engine._buffers
    assert engine.world is first
    engine.step()
    assert engine.world is second
    engine.step()
    assert engine.world is first
    assert engine._buffers[0] is first and engine._buffers[1] is second


def test_read_field_is_a_read_only_snapshot():
    engine = create(16, 16, 3, 0.15, seed=0)
    snapshot = engine.read_field()
    kept = snapshot.copy()
    with pytest.raises(ValueError):
        snapshot[0, 0] = 1.0

    engine.step_n(4)
    np.testing.assert_array_equal(snapshot, kept)

    view = engine.read_field(copy=False)
    assert not view.flags.writeable
    assert np.shares_memory(view, engine.world)
    assert engine.world.flags.writeable, "Engine's own buffer stays writable"


def test_step_view_is_only_valid_until_next_step():
    engine = create(16, 16, 3, 0.15, seed=0)
    view = engine.step()
    kept = view.copy()
    assert np.shares_memory(view, engine.world)

    engine.step()
    assert not np.shares_memory(view, engine.world), "Old view now points at the back buffer"
    np.testing.assert_array_equal(view, kept)

    engine.step()
    assert np.shares_memory(view, engine.world)
    assert not np.array_equal(view, kept), "Buffer behind the held view was overwritten"
    np.testing.assert_array_equal(view, engine.read_field())


def test_reentrant_step_is_rejected():
    engine = create(16, 16, 3, 0.15, seed=0)
    before = engine.read_field()

    class Reentrant:
        strategy_name = "reentrant"

        def convolve(self, field):
            return engine.step()

        def close(self):
            pass

    engine.convolver = Reentrant()
    with pytest.raises(RuntimeError):
        engine.step()
    assert engine.generation == 0
    np.testing.assert_array_equal(engine.read_field(), before)


def test_threaded_engine_closes_pool():
    with create(32, 32, 3, 0.15, seed=0, strategy="direct", workers=3) as engine:
        engine.step_n(3)
        assert engine.convolver._pool is not None
    assert engine.convolver._pool is None


# -- growth parameter ownership -------------------------------------------

def test_setter_is_ignored_while_modulating():
    engine = create(16, 16, 6, 0.15, seed=0, growth=SCENARIO_GROWTH)
    engine.set_parameter_modulator_enabled(True, driver_seed=11)
    assert engine.modulating

    engine.set_growth_params(0.5, 0.1, 0.2)
    engine.step()
    p = engine.growth_params
    assert abs(p.mu - 0.3) < 0.01, "Modulator drifts from the external params, not the ignored ones"
    assert p.dt == 0.08

    engine.set_parameter_modulator_enabled(False)
    assert not engine.modulating
    assert engine.growth_params.model_dump() == SCENARIO_GROWTH
    assert engine.color_bias == 0.0

    engine.set_growth_params(0.5, 0.1, 0.2)
    assert engine.growth_params.mu == 0.5


def test_modulated_engines_reproduce_each_other():
    a = create(24, 24, 6, 0.15, seed=5, modulate=True, driver_seed=42)
    b = create(24, 24, 6, 0.15, seed=5, modulate=True, driver_seed=42)
    for _ in range(40):
        np.testing.assert_array_equal(a.step(), b.step())
        assert a.growth_params == b.growth_params
        assert a.color_bias == b.color_bias


def test_invalid_growth_params_rejected():
    engine = create(16, 16, 3, 0.15, seed=0)
    with pytest.raises(InvalidParameter):
        engine.set_growth_params(float("nan"), 0.06, 0.08)
    with pytest.raises(InvalidParameter):
        engine.set_growth_params(0.3, 0.06, float("inf"))
    assert engine.growth_params.mu == 0.3


# -- parameters, seeding, presets -----------------------------------------

def test_set_params_rebuilds_kernel():
    engine = create(32, 32, 6, 0.15, seed=0)
    assert engine.get_params()["strategy"] == "fft"

    engine.set_params(R=2, mu=0.25)
    assert engine.kernel.radius == 2
    assert engine.get_params()["strategy"] == "direct"
    assert engine.growth_params.mu == 0.25

    engine.set_params(strategy="fft")
    assert engine.get_params()["strategy"] == "fft"


def test_rejected_kernel_change_leaves_engine_untouched():
    engine = create(32, 32, 6, 0.15, seed=0)
    kernel, convolver = engine.kernel, engine.convolver
    with pytest.raises(InvalidParameter):
        engine.set_params(R=-1, mu=0.9)
    assert engine.kernel is kernel and engine.convolver is convolver
    assert engine.R == 6
    assert engine.growth_params.mu == 0.3


def test_load_and_seed_validation():
    engine = create(16, 12, 3, 0.15, seed=0)
    with pytest.raises(InvalidParameter):
        engine.load(np.zeros((16, 12)))
    with pytest.raises(InvalidParameter):
        engine.load(np.full((12, 16), np.nan))
    with pytest.raises(InvalidParameter):
        engine.seed("checkerboard")
    with pytest.raises(InvalidParameter):
        engine.seed("blob", wobble=3)

    engine.load(np.full((12, 16), 2.0))
    assert engine.read_field().max() == 1.0


def test_stats():
    engine = create(16, 16, 3, 0.15, seed=0)
    engine.clear()
    stats = engine.stats
    assert stats == {"generation": 0, "mass": 0.0, "mean": 0.0, "max": 0.0, "alive_pct": 0.0}


@pytest.mark.parametrize("key", PRESET_ORDER)
def test_presets_build_and_run(key):
    with Lenia.from_preset(key, width=48, height=40, seed=1) as engine:
        assert engine.read_field().shape == (40, 48)
        for _ in range(3):
            field = engine.step()
        assert field.min() >= 0.0 and field.max() <= 1.0


def test_unknown_preset():
    with pytest.raises(InvalidParameter):
        Lenia.from_preset("gray_goo")
