from __future__ import annotations

import math

import pytest

from pydeepzoom.config import MIN_SIZE
from pydeepzoom.state import CameraParams, Velocity, ViewportState, sanitize_camera


def test_defaults_match_home_view(state: ViewportState) -> None:
    for camera in (state.current, state.target):
        assert camera.center_x == -0.5
        assert camera.center_y == 0.0
        assert camera.size == 3.0
        assert camera.max_iterations == 500
    assert state.velocity.is_zero()


def test_cameras_are_independent(state: ViewportState) -> None:
    state.target.center_x = 1.0
    assert state.current.center_x == -0.5


def test_snapshot_current_is_a_copy(state: ViewportState) -> None:
    snap = state.snapshot_current()
    snap.size = 0.1
    assert state.current.size == 3.0


def test_pixel_scale() -> None:
    assert CameraParams(size=3.0).pixel_scale(600) == pytest.approx(0.005)


def test_velocity_speed() -> None:
    velocity = Velocity(3.0, 4.0)
    assert velocity.speed == 5.0
    velocity.reset()
    assert velocity.is_zero()


def test_set_target_updates_fields(state: ViewportState) -> None:
    state.set_target(center_x=0.3, size=0.01, palette_id=3)
    assert state.target.center_x == 0.3
    assert state.target.size == 0.01
    assert state.target.palette_id == 3
    assert state.current.size == 3.0


def test_set_target_rejects_unknown_fields(state: ViewportState) -> None:
    with pytest.raises(TypeError):
        state.set_target(zoom=2.0)
    assert state.target.size == 3.0


@pytest.mark.parametrize("size", [math.nan, math.inf, -1.0, 0.0, 1e-40])
def test_set_target_clamps_bad_sizes(state: ViewportState, size: float) -> None:
    state.set_target(size=size)
    assert state.target.size == MIN_SIZE


def test_set_target_reverts_non_finite_center(state: ViewportState) -> None:
    state.current.center_x = 0.125
    state.set_target(center_x=math.inf, center_y=math.nan)
    assert state.target.center_x == 0.125
    assert state.target.center_y == 0.0


def test_sanitize_uses_default_when_fallback_is_bad() -> None:
    camera = CameraParams(center_x=math.nan)
    fallback = CameraParams(center_x=math.inf)
    assert sanitize_camera(camera, fallback) is True
    assert camera.center_x == -0.5


def test_sanitize_leaves_valid_camera_alone() -> None:
    camera = CameraParams(center_x=0.2, center_y=-0.1, size=1e-12)
    assert sanitize_camera(camera, CameraParams()) is False
    assert camera == CameraParams(center_x=0.2, center_y=-0.1, size=1e-12)


def test_sanitize_raises_iteration_floor() -> None:
    camera = CameraParams(max_iterations=0)
    sanitize_camera(camera, CameraParams())
    assert camera.max_iterations == 1


def test_sync_target_to_current(state: ViewportState) -> None:
    state.target.center_x = 2.0
    state.target.size = 0.5
    state.sync_target_to_current()
    assert state.target.center_x == -0.5
    assert state.target.size == 0.5

    state.sync_target_to_current(include_size=True)
    assert state.target.size == 3.0


def test_jump_to_moves_both_cameras_and_stops(state: ViewportState) -> None:
    state.velocity.vx = 1.0
    state.jump_to(-0.75, 0.1, 1e-8)
    for camera in (state.current, state.target):
        assert (camera.center_x, camera.center_y, camera.size) == (-0.75, 0.1, 1e-8)
    assert state.velocity.is_zero()


def test_reset_restores_given_defaults(state: ViewportState) -> None:
    state.jump_to(1.0, 1.0, 1.0)
    state.reset(CameraParams(max_iterations=900))
    assert state.current.center_x == -0.5
    assert state.target.max_iterations == 900
    assert state.current is not state.target
