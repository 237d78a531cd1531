"""Viewport state: the rendered camera, the camera the user is steering toward,
and the pan momentum left over from a drag.
"""

from dataclasses import dataclass, field, fields, replace
from enum import IntEnum
import logging
import math

from pydeepzoom.config import (
    DEFAULT_CENTER_X,
    DEFAULT_CENTER_Y,
    DEFAULT_JULIA_C,
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_SIZE,
    MIN_SIZE,
)


logger = logging.getLogger(__name__)


class FractalType(IntEnum):
    """Fractal families the renderer knows how to evaluate."""
    MANDELBROT = 0
    JULIA = 1
    BURNING_SHIP = 2
    TRICORN = 3


# =============================================================================
# State Dataclasses
# =============================================================================

@dataclass
class CameraParams:
    """Camera parameters in fractal space.

    ``size`` is named as a half-extent, but every conversion in the engine
    uses ``size / height`` fractal units per pixel, so in practice it is the
    full extent covered by the viewport height. The per-pixel rule is the one
    the drag and zoom math depend on, and it is kept deliberately. Smaller
    size means deeper zoom.
    """
    center_x: float = DEFAULT_CENTER_X
    center_y: float = DEFAULT_CENTER_Y
    size: float = DEFAULT_SIZE
    max_iterations: int = DEFAULT_MAX_ITERATIONS

    # Stored for the renderer, never interpreted here
    palette_id: int = 0
    fractal_type: FractalType = FractalType.MANDELBROT
    julia_c: tuple = DEFAULT_JULIA_C

    def copy(self) -> "CameraParams":
        return replace(self)

    def pixel_scale(self, height: float) -> float:
        """Fractal units per pixel for a viewport of the given height."""
        return self.size / height


@dataclass
class Velocity:
    """Pan momentum in fractal units per nominal frame."""
    vx: float = 0.0
    vy: float = 0.0

    @property
    def speed(self) -> float:
        return math.hypot(self.vx, self.vy)

    def is_zero(self) -> bool:
        return self.vx == 0.0 and self.vy == 0.0

    def is_finite(self) -> bool:
        return math.isfinite(self.vx) and math.isfinite(self.vy)

    def reset(self):
        self.vx = 0.0
        self.vy = 0.0


def sanitize_camera(camera: CameraParams, fallback: CameraParams,
                    min_size: float = MIN_SIZE) -> bool:
    """Repair invalid magnitudes in place. Returns True if anything changed.

    Non-finite or too-small sizes are clamped to ``min_size``. Non-finite
    centers fall back to the matching coordinate of ``fallback`` (or the
    default center when that is not finite either).
    """
    changed = False
    if not math.isfinite(camera.size) or camera.size < min_size:
        logger.debug("clamping size %r to %g", camera.size, min_size)
        camera.size = min_size
        changed = True

    for name, default in (("center_x", DEFAULT_CENTER_X), ("center_y", DEFAULT_CENTER_Y)):
        value = getattr(camera, name)
        if math.isfinite(value):
            continue
        replacement = getattr(fallback, name)
        if not math.isfinite(replacement):
            replacement = default
        logger.debug("replacing non-finite %s=%r with %r", name, value, replacement)
        setattr(camera, name, replacement)
        changed = True

    if camera.max_iterations < 1:
        camera.max_iterations = 1
        changed = True
    return changed


@dataclass
class ViewportState:
    """Current (rendered) and target (user intent) cameras plus momentum.

    Only the input controller, the physics integrator and the engine that
    owns them write to this object.
    """
    current: CameraParams = field(default_factory=CameraParams)
    target: CameraParams = field(default_factory=CameraParams)
    velocity: Velocity = field(default_factory=Velocity)
    min_size: float = MIN_SIZE

    def set_target(self, **changes):
        """Replace the named target fields, then repair invalid values.

        Unknown field names raise TypeError.
        """
        known = {f.name for f in fields(CameraParams)}
        unknown = set(changes) - known
        if unknown:
            raise TypeError(f"unknown camera fields: {sorted(unknown)}")
        for name, value in changes.items():
            setattr(self.target, name, value)
        sanitize_camera(self.target, self.current, self.min_size)

    def snapshot_current(self) -> CameraParams:
        """Independent copy of the rendered camera."""
        return self.current.copy()

    def sync_target_to_current(self, include_size: bool = False):
        """Pull the target center (and optionally size) onto the current one."""
        self.target.center_x = self.current.center_x
        self.target.center_y = self.current.center_y
        if include_size:
            self.target.size = self.current.size

    def jump_to(self, center_x: float, center_y: float, size: float):
        """Move both cameras to a view at once, without smoothing or momentum."""
        for camera in (self.current, self.target):
            camera.center_x = center_x
            camera.center_y = center_y
            camera.size = size
            sanitize_camera(camera, CameraParams(), self.min_size)
        self.velocity.reset()

    def reset(self, defaults: CameraParams = None):
        """Restore both cameras to ``defaults`` (or the built-in defaults)."""
        defaults = defaults if defaults is not None else CameraParams()
        self.current = defaults.copy()
        self.target = defaults.copy()
        self.velocity.reset()
