from __future__ import annotations

import itertools
import math

import pytest

from pydeepzoom.config import EngineConfig
from pydeepzoom.physics import (
    FrameClock,
    PhysicsIntegrator,
    adaptive_iterations,
    clamp_elapsed,
    lerp_factor,
    soft_limit,
)
from pydeepzoom.state import FractalType, ViewportState

from .conftest import FRAME


def _coasting_state(vx: float = -0.15, vy: float = -0.05) -> ViewportState:
    state = ViewportState()
    state.velocity.vx = vx
    state.velocity.vy = vy
    return state


# =============================================================================
# Momentum
# =============================================================================

def test_momentum_moves_target_then_stops_exactly() -> None:
    integrator = PhysicsIntegrator()
    state = _coasting_state()

    for _ in range(200):
        integrator.step(state, FRAME)
        if state.velocity.is_zero():
            break
    assert state.velocity.vx == 0.0
    assert state.velocity.vy == 0.0
    assert state.target.center_x < -0.5

    frozen = state.target.copy()
    for _ in range(10):
        integrator.step(state, FRAME)
    assert state.target.center_x == frozen.center_x
    assert state.target.center_y == frozen.center_y


def test_first_momentum_tick_moves_by_one_frame_of_velocity() -> None:
    integrator = PhysicsIntegrator()
    state = _coasting_state()
    integrator.step(state, FRAME)

    assert state.target.center_x == pytest.approx(-0.5 - 0.15)
    assert state.target.center_y == pytest.approx(-0.05)
    assert state.velocity.vx == pytest.approx(-0.15 * 0.92)


def test_no_momentum_while_dragging() -> None:
    integrator = PhysicsIntegrator()
    state = _coasting_state()
    integrator.step(state, FRAME, dragging=True)

    assert state.target.center_x == -0.5
    assert state.velocity.vx == -0.15


@pytest.mark.parametrize("tick", [1.0 / 30.0, 1.0 / 144.0, 0.05])
def test_velocity_decay_is_frame_rate_independent(tick: float) -> None:
    reference = _coasting_state()
    reference_integrator = PhysicsIntegrator()
    for _ in range(60):
        reference_integrator.step(reference, FRAME)

    state = _coasting_state()
    integrator = PhysicsIntegrator()
    for _ in range(round(1.0 / tick)):
        integrator.step(state, tick)

    assert state.velocity.vx == pytest.approx(reference.velocity.vx, rel=1e-6)
    assert state.velocity.vy == pytest.approx(reference.velocity.vy, rel=1e-6)


def test_non_finite_velocity_is_discarded() -> None:
    integrator = PhysicsIntegrator()
    state = _coasting_state(vx=math.nan, vy=0.1)
    integrator.step(state, FRAME)

    assert state.velocity.is_zero()
    assert state.target.center_x == -0.5
    assert state.target.center_y == 0.0


# =============================================================================
# Smoothing
# =============================================================================

def test_current_converges_monotonically_and_snaps() -> None:
    integrator = PhysicsIntegrator()
    state = ViewportState()
    state.target.center_x = 0.25
    state.target.size = 1.0

    previous = state.current.copy()
    for _ in range(1000):
        integrator.step(state, FRAME)
        current = state.current
        for name, goal in (("size", 1.0), ("center_x", 0.25)):
            before, after = getattr(previous, name), getattr(current, name)
            if before == goal:
                assert after == goal
            else:
                # Strictly closer, never past the goal
                assert abs(goal - after) < abs(goal - before)
                assert (goal - after) * (goal - before) >= 0.0
        previous = current.copy()

    assert state.current.size == 1.0
    assert state.current.center_x == 0.25


def test_converges_with_irregular_frame_times() -> None:
    integrator = PhysicsIntegrator()
    state = ViewportState()
    state.target.size = 1e-6

    frame_times = itertools.cycle([1.0 / 144.0, 1.0 / 30.0, FRAME, 0.0, 0.25])
    for _ in range(1000):
        before = state.current.size
        integrator.step(state, next(frame_times))
        assert state.target.size <= state.current.size <= before

    assert state.current.size == 1e-6


def test_double_step_matches_two_single_steps() -> None:
    one = ViewportState()
    two = ViewportState()
    for state in (one, two):
        state.target.center_x = 1.0
        state.target.size = 0.5

    PhysicsIntegrator().step(one, 2 * FRAME)
    integrator = PhysicsIntegrator()
    integrator.step(two, FRAME)
    integrator.step(two, FRAME)

    assert one.current.center_x == pytest.approx(two.current.center_x, rel=1e-12)
    assert one.current.size == pytest.approx(two.current.size, rel=1e-12)


def test_single_frame_covers_lerp_fraction() -> None:
    integrator = PhysicsIntegrator()
    state = ViewportState()
    state.target.size = 1.0
    integrator.step(state, FRAME)
    assert state.current.size == pytest.approx(3.0 - 2.0 * 0.08)


def test_long_stall_counts_as_one_frame() -> None:
    stalled = ViewportState()
    normal = ViewportState()
    for state in (stalled, normal):
        state.target.size = 1.0

    PhysicsIntegrator().step(stalled, 5.0)
    PhysicsIntegrator().step(normal, FRAME)
    assert stalled.current.size == normal.current.size


def test_zero_elapsed_moves_nothing() -> None:
    integrator = PhysicsIntegrator()
    state = _coasting_state()
    state.target.size = 1.0
    assert integrator.step(state, 0.0) == 0.0
    assert state.current.size == 3.0


def test_display_fields_pass_through_immediately() -> None:
    integrator = PhysicsIntegrator()
    state = ViewportState()
    state.set_target(palette_id=2, fractal_type=FractalType.JULIA,
                     julia_c=(0.285, 0.01), max_iterations=1200)
    integrator.step(state, FRAME)

    assert state.current.palette_id == 2
    assert state.current.fractal_type == FractalType.JULIA
    assert state.current.julia_c == (0.285, 0.01)
    assert state.current.max_iterations == 1200


# =============================================================================
# Zoom-out Limit
# =============================================================================

def test_soft_limit_below_max_is_identity() -> None:
    assert soft_limit(2.5, 4.0, 1.0) == 2.5
    assert soft_limit(4.0, 4.0, 1.0) == 4.0


@pytest.mark.parametrize("size", [4.5, 10.0, 1e6, 1e17, 1e300, math.inf])
def test_soft_limit_stays_below_ceiling(size: float) -> None:
    limited = soft_limit(size, 4.0, 1.0)
    assert 4.0 < limited < 5.0


def test_soft_limit_follows_resistance_curve() -> None:
    assert soft_limit(5.0, 4.0, 1.0) == pytest.approx(4.5)
    assert soft_limit(6.0, 4.0, 2.0) == pytest.approx(4.0 + 2.0 / 5.0)
    assert soft_limit(1e300, 4.0, 4.0) < 4.25


def test_integrator_relaxes_oversized_target() -> None:
    config = EngineConfig()
    integrator = PhysicsIntegrator(config)
    state = ViewportState()
    state.target.size = 4.9

    for _ in range(200):
        integrator.step(state, FRAME)
        assert state.target.size < config.size_ceiling
    assert state.target.size - config.max_size < 0.01


# =============================================================================
# Timing Helpers
# =============================================================================

@pytest.mark.parametrize(
    ("elapsed", "expected"),
    [
        (-1.0, 0.0),
        (math.nan, 0.0),
        (math.inf, 0.0),
        (0.0, 0.0),
        (0.05, 0.05),
        (0.1, 0.1),
        (0.5, 1.0 / 60.0),
    ],
)
def test_clamp_elapsed(elapsed: float, expected: float) -> None:
    assert clamp_elapsed(elapsed, EngineConfig()) == expected


def test_lerp_factor() -> None:
    assert lerp_factor(0.0, 0.92, 60.0) == 0.0
    assert lerp_factor(FRAME, 0.92, 60.0) == pytest.approx(0.08)
    assert 0.0 < lerp_factor(1.0, 0.92, 60.0) < 1.0


def test_frame_clock_reports_deltas() -> None:
    ticks = iter([10.0, 10.5, 10.75, 20.0])
    clock = FrameClock(now_fn=lambda: next(ticks))

    assert clock.elapsed() == 0.0
    assert clock.elapsed() == pytest.approx(0.5)
    assert clock.elapsed() == pytest.approx(0.25)
    clock.restart()
    assert clock.elapsed() == 0.0


# =============================================================================
# Adaptive Iterations
# =============================================================================

def test_adaptive_iterations_grow_per_decade() -> None:
    config = EngineConfig(adaptive_iterations=True)
    assert adaptive_iterations(500, 3.0, config) == 500
    assert adaptive_iterations(500, 10.0, config) == 500
    assert adaptive_iterations(500, 3e-3, config) == pytest.approx(1250, abs=1)
    assert adaptive_iterations(500, 3e-6, config) == pytest.approx(2000, abs=1)


def test_adaptive_iterations_respect_cap() -> None:
    config = EngineConfig(adaptive_iterations=True, iteration_cap=1000)
    assert adaptive_iterations(500, 1e-20, config) == 1000
    assert adaptive_iterations(5000, 3.0, config) == 1000


def test_integrator_applies_adaptive_budget_to_current() -> None:
    config = EngineConfig(adaptive_iterations=True)
    integrator = PhysicsIntegrator(config)
    state = ViewportState()
    state.jump_to(-0.75, 0.1, 3e-3)
    integrator.step(state, FRAME)

    assert state.target.max_iterations == 500
    assert state.current.max_iterations == pytest.approx(1250, abs=1)
