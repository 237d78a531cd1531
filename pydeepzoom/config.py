"""Tunable constants and the engine configuration.

Module-level constants hold the defaults. ``EngineConfig`` gathers every
tunable the controller, integrator and snapshot read, so a host can adjust the
feel of the viewport without touching the physics code.
"""

from dataclasses import dataclass, fields, replace
import math


# =============================================================================
# Constants
# =============================================================================

# Default view (also the "home" view used by reset and the recentre policy)
DEFAULT_CENTER_X = -0.5
DEFAULT_CENTER_Y = 0.0
DEFAULT_SIZE = 3.0
DEFAULT_MAX_ITERATIONS = 500
DEFAULT_JULIA_C = (-0.7269, 0.1889)

# Timing
NOMINAL_FPS = 60.0
NOMINAL_FRAME = 1.0 / NOMINAL_FPS
MAX_ELAPSED = 0.1  # Longer gaps count as a single nominal frame

# Zoom steps per scroll notch (closer to 1.0 = slower, smoother zoom)
ZOOM_IN_FACTOR = 0.92
ZOOM_OUT_FACTOR = 1.08
MAX_SCROLL_NOTCHES = 100.0  # Larger wheel deltas are treated as this many notches

# Soft zoom-out ceiling
MAX_SIZE = 4.0
LIMIT_RESISTANCE = 1.0
RECENTER_STRENGTH = 0.1

# Momentum and smoothing, both per nominal frame
FRICTION = 0.92
VELOCITY_EPSILON = 1e-4  # Relative to target.size
LERP_BASE = 0.92
LERP_RATE = NOMINAL_FPS
SNAP_EPSILON = 1e-12  # Relative to current.size

# Smallest size ever stored (keeps both float32 halves in the normal range)
MIN_SIZE = 1e-30

# Adaptive iteration budget
ITERATIONS_PER_DECADE = 250
ITERATION_CAP = 20000

# Renderer precision rule
HIGH_PRECISION_THRESHOLD = 1e-4


class ConfigError(ValueError):
    """Raised when an EngineConfig holds values the physics cannot use."""


@dataclass(frozen=True)
class EngineConfig:
    """Every tunable of the viewport engine."""
    # Scroll zoom
    zoom_in_factor: float = ZOOM_IN_FACTOR
    zoom_out_factor: float = ZOOM_OUT_FACTOR
    max_scroll_notches: float = MAX_SCROLL_NOTCHES

    # Soft zoom-out limit
    max_size: float = MAX_SIZE
    limit_resistance: float = LIMIT_RESISTANCE
    recenter_at_limit: bool = False
    recenter_strength: float = RECENTER_STRENGTH
    home_center: tuple = (DEFAULT_CENTER_X, DEFAULT_CENTER_Y)

    # Drag momentum
    momentum_scale: float = 1.0
    friction: float = FRICTION
    velocity_epsilon: float = VELOCITY_EPSILON

    # Smoothing: lerp = 1 - lerp_base ** (dt * lerp_rate)
    lerp_base: float = LERP_BASE
    lerp_rate: float = LERP_RATE
    snap_epsilon: float = SNAP_EPSILON

    # Elapsed-time handling
    nominal_frame: float = NOMINAL_FRAME
    max_elapsed: float = MAX_ELAPSED

    # Magnitude floor
    min_size: float = MIN_SIZE

    # Adaptive iterations: base + per_decade * log10(reference_size / size)
    adaptive_iterations: bool = False
    iterations_per_decade: int = ITERATIONS_PER_DECADE
    iteration_cap: int = ITERATION_CAP
    reference_size: float = DEFAULT_SIZE

    # high_precision = always_high_precision or size < high_precision_threshold
    always_high_precision: bool = True
    high_precision_threshold: float = HIGH_PRECISION_THRESHOLD

    def __post_init__(self):
        self.validate()

    def validate(self):
        """Raise ConfigError if any value is out of its usable range."""
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, float) and not math.isfinite(value):
                raise ConfigError(f"{f.name} must be finite, got {value!r}")

        if not 0.0 < self.zoom_in_factor < 1.0:
            raise ConfigError("zoom_in_factor must be in (0, 1)")
        if self.zoom_out_factor <= 1.0:
            raise ConfigError("zoom_out_factor must be > 1")
        if self.max_scroll_notches <= 0.0:
            raise ConfigError("max_scroll_notches must be > 0")
        # One saturated scroll must stay a finite, non-zero factor
        for factor in (self.zoom_in_factor, self.zoom_out_factor):
            if abs(math.log(factor)) * self.max_scroll_notches > 700.0:
                raise ConfigError("zoom factor ** max_scroll_notches leaves the float range")
        if not 0.0 < self.friction < 1.0:
            raise ConfigError("friction must be in (0, 1)")
        if not 0.0 < self.lerp_base < 1.0:
            raise ConfigError("lerp_base must be in (0, 1)")
        if self.lerp_rate <= 0.0:
            raise ConfigError("lerp_rate must be > 0")
        if self.limit_resistance <= 0.0:
            raise ConfigError("limit_resistance must be > 0")
        if not 0.0 <= self.recenter_strength <= 1.0:
            raise ConfigError("recenter_strength must be in [0, 1]")
        if self.min_size <= 0.0 or self.max_size <= self.min_size:
            raise ConfigError("need 0 < min_size < max_size")
        if self.nominal_frame <= 0.0 or self.max_elapsed < self.nominal_frame:
            raise ConfigError("need 0 < nominal_frame <= max_elapsed")
        if self.momentum_scale < 0.0 or self.velocity_epsilon < 0.0:
            raise ConfigError("momentum_scale and velocity_epsilon must be >= 0")
        if self.iteration_cap < 1 or self.reference_size <= 0.0:
            raise ConfigError("iteration_cap and reference_size must be positive")
        if len(self.home_center) != 2:
            raise ConfigError("home_center must be an (x, y) pair")

    @property
    def size_ceiling(self) -> float:
        """Upper bound the soft limit stays strictly below: max_size + 1 / k."""
        return self.max_size + 1.0 / self.limit_resistance

    def replace(self, **changes) -> "EngineConfig":
        """Return a validated copy with the given fields changed."""
        return replace(self, **changes)
