"""Per-tick integration of the viewport state.

Each tick the integrator lets drag momentum carry the target, keeps the target
under the soft zoom-out ceiling, and eases the current camera toward the
target. All rates are expressed per nominal frame (1/60 s) and scaled by the
measured elapsed time, so the motion looks the same at 30, 60 or 144 Hz.
"""

from typing import Callable, Optional
import logging
import math
import time

from pydeepzoom.config import EngineConfig
from pydeepzoom.state import CameraParams, ViewportState, sanitize_camera


logger = logging.getLogger(__name__)


# =============================================================================
# Zoom-out Limit
# =============================================================================

def soft_limit(size: float, max_size: float, resistance: float) -> float:
    """Resist sizes above max_size instead of clamping them.

    The excess is mapped through ``e / (1 + e * k)``, so the result approaches
    but never reaches ``max_size + 1 / k``. Where that curve rounds up to the
    ceiling (huge or infinite excess) the float just below it is returned.
    Applying it again shrinks the excess further, which is what pulls an
    over-zoomed view back to max_size over a few ticks.
    """
    excess = size - max_size
    if excess <= 0.0:
        return size
    ceiling = max_size + 1.0 / resistance
    below_ceiling = math.nextafter(ceiling, -math.inf)
    if math.isinf(excess):
        return below_ceiling
    # Same curve as max_size + e / (1 + e * k), written so e * k -> inf is safe
    limited = ceiling - 1.0 / (resistance * (1.0 + excess * resistance))
    return min(limited, below_ceiling)


def pull_toward_home(camera: CameraParams, config: EngineConfig) -> bool:
    """Ease the center toward the home center while beyond the ceiling.

    Only active with ``config.recenter_at_limit``. Returns True if it moved
    the camera.
    """
    if not config.recenter_at_limit or camera.size <= config.max_size:
        return False
    home_x, home_y = config.home_center
    t = config.recenter_strength
    camera.center_x += (home_x - camera.center_x) * t
    camera.center_y += (home_y - camera.center_y) * t
    return True


def enforce_zoom_limit(camera: CameraParams, config: EngineConfig):
    """Apply the soft ceiling and the recentre policy to a camera."""
    camera.size = soft_limit(camera.size, config.max_size, config.limit_resistance)
    pull_toward_home(camera, config)


# =============================================================================
# Timing Helpers
# =============================================================================

def clamp_elapsed(elapsed: float, config: EngineConfig) -> float:
    """Turn a measured frame time into a safe integration step.

    Negative or non-finite values become 0 (nothing moves). Gaps longer than
    ``config.max_elapsed`` count as a single nominal frame so a stalled host
    does not produce a jump when it resumes.
    """
    if not math.isfinite(elapsed) or elapsed < 0.0:
        return 0.0
    if elapsed > config.max_elapsed:
        return config.nominal_frame
    return elapsed


def lerp_factor(dt: float, base: float, rate: float) -> float:
    """Fraction of the remaining distance covered in dt seconds."""
    return 1.0 - base ** (dt * rate)


def adaptive_iterations(base: int, size: float, config: EngineConfig) -> int:
    """Iteration budget that grows as the view zooms in.

    ``base + per_decade * log10(reference_size / size)``, never below base
    and never above ``config.iteration_cap``.
    """
    if size >= config.reference_size:
        return min(base, config.iteration_cap)
    decades = math.log10(config.reference_size / size)
    budget = base + int(config.iterations_per_decade * decades)
    return max(1, min(budget, config.iteration_cap))


class FrameClock:
    """Measures elapsed time between ticks with a monotonic clock."""

    def __init__(self, now_fn: Callable[[], float] = time.perf_counter):
        self._now = now_fn
        self._last: Optional[float] = None

    def elapsed(self) -> float:
        """Seconds since the previous call (0.0 on the first call)."""
        now = self._now()
        last, self._last = self._last, now
        if last is None:
            return 0.0
        return now - last

    def restart(self):
        self._last = None


# =============================================================================
# Integrator
# =============================================================================

class PhysicsIntegrator:
    """Advances ViewportState.current toward ViewportState.target."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config if config is not None else EngineConfig()
        self.ticks = 0

    def step(self, state: ViewportState, elapsed: float, dragging: bool = False) -> float:
        """Run one tick and return the clamped step actually integrated."""
        dt = clamp_elapsed(elapsed, self.config)
        self.ticks += 1

        if not dragging:
            self._apply_momentum(state, dt)
        enforce_zoom_limit(state.target, self.config)
        sanitize_camera(state.target, state.current, self.config.min_size)

        self._smooth(state, dt)
        self._pass_through(state)
        sanitize_camera(state.current, state.target, self.config.min_size)
        return dt

    def _apply_momentum(self, state: ViewportState, dt: float):
        velocity = state.velocity
        if velocity.is_zero():
            return
        if not velocity.is_finite():
            logger.debug("dropping non-finite velocity (%r, %r)", velocity.vx, velocity.vy)
            velocity.reset()
            return

        frames = dt / self.config.nominal_frame
        state.target.center_x += velocity.vx * frames
        state.target.center_y += velocity.vy * frames

        decay = self.config.friction ** frames
        velocity.vx *= decay
        velocity.vy *= decay
        if velocity.speed < self.config.velocity_epsilon * state.target.size:
            velocity.reset()

    def _smooth(self, state: ViewportState, dt: float):
        factor = lerp_factor(dt, self.config.lerp_base, self.config.lerp_rate)
        current, target = state.current, state.target
        snap = self.config.snap_epsilon * min(current.size, target.size)

        for name in ("center_x", "center_y", "size"):
            now = getattr(current, name)
            goal = getattr(target, name)
            diff = goal - now
            if abs(diff) <= snap:
                setattr(current, name, goal)
            else:
                setattr(current, name, now + diff * factor)

    def _pass_through(self, state: ViewportState):
        current, target = state.current, state.target
        current.palette_id = target.palette_id
        current.fractal_type = target.fractal_type
        current.julia_c = target.julia_c
        if self.config.adaptive_iterations:
            current.max_iterations = adaptive_iterations(
                target.max_iterations, current.size, self.config
            )
        else:
            current.max_iterations = target.max_iterations
