"""Read-only renderer input and the coordinate export format."""

from dataclasses import dataclass
import math
import re

from pydeepzoom.config import EngineConfig
from pydeepzoom.precision import Split, split_double
from pydeepzoom.state import CameraParams, FractalType


# =============================================================================
# Renderer Snapshot
# =============================================================================

def wants_high_precision(size: float, config: EngineConfig) -> bool:
    """The single rule deciding whether the renderer uses the hi/lo pairs."""
    return config.always_high_precision or size < config.high_precision_threshold


@dataclass(frozen=True)
class UniformSnapshot:
    """Everything the renderer needs for one paint."""
    resolution: tuple
    center_x: Split
    center_y: Split
    size: Split
    max_iterations: int
    palette_id: int
    fractal_type: FractalType
    julia_c: tuple
    high_precision: bool

    def as_uniforms(self) -> dict:
        """Flat uniform-name -> value mapping for a GLSL host."""
        return {
            "u_resolution": tuple(float(v) for v in self.resolution),
            "u_zoomCenter_x_hi": self.center_x.hi,
            "u_zoomCenter_x_lo": self.center_x.lo,
            "u_zoomCenter_y_hi": self.center_y.hi,
            "u_zoomCenter_y_lo": self.center_y.lo,
            "u_zoomSize_hi": self.size.hi,
            "u_zoomSize_lo": self.size.lo,
            "u_maxIterations": int(self.max_iterations),
            "u_paletteId": int(self.palette_id),
            "u_fractalType": int(self.fractal_type),
            "u_juliaC": (float(self.julia_c[0]), float(self.julia_c[1])),
            "u_highPrecision": bool(self.high_precision),
        }


def build_snapshot(camera: CameraParams, resolution: tuple,
                   config: EngineConfig) -> UniformSnapshot:
    """Project a camera into renderer input, splitting the coordinates."""
    return UniformSnapshot(
        resolution=tuple(resolution),
        center_x=split_double(camera.center_x),
        center_y=split_double(camera.center_y),
        size=split_double(camera.size),
        max_iterations=camera.max_iterations,
        palette_id=camera.palette_id,
        fractal_type=FractalType(camera.fractal_type),
        julia_c=tuple(camera.julia_c),
        high_precision=wants_high_precision(camera.size, config),
    )


# =============================================================================
# Coordinate Export
# =============================================================================

COORDINATE_LABELS = ("X", "Y", "Zoom")

_CANONICAL_LABEL = {label.lower(): label for label in COORDINATE_LABELS}
_NUMBER = r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?"
_LABELLED = re.compile(r"^\s*(X|Y|Zoom)\s*:\s*(\S+)\s*$", re.IGNORECASE)


class CoordinateFormatError(ValueError):
    """Raised when text cannot be read as exported coordinates."""


def format_coordinates(center_x: float, center_y: float, size: float) -> str:
    """Three labelled lines at round-trip precision (17 significant digits)."""
    values = (center_x, center_y, size)
    return "\n".join(f"{label}: {value:.17g}" for label, value in zip(COORDINATE_LABELS, values))


def parse_coordinates(text: str) -> tuple:
    """Read (center_x, center_y, size) back from exported text.

    Accepts the labelled form written by format_coordinates, or three bare
    numbers separated by newlines, commas or whitespace.
    """
    lines = [line for line in text.strip().splitlines() if line.strip()]
    labelled = [_LABELLED.match(line) for line in lines]
    if lines and all(labelled):
        found = {}
        for match in labelled:
            found[_CANONICAL_LABEL[match.group(1).lower()]] = match.group(2)
        if set(found) != set(COORDINATE_LABELS):
            raise CoordinateFormatError(f"expected X, Y and Zoom lines, got {sorted(found)}")
        tokens = [found[label] for label in COORDINATE_LABELS]
    else:
        tokens = [t for t in re.split(r"[\s,;]+", text.strip()) if t]

    if len(tokens) != 3 or not all(re.fullmatch(_NUMBER, t) for t in tokens):
        raise CoordinateFormatError(f"expected three numbers, got {text!r}")

    center_x, center_y, size = (float(t) for t in tokens)
    if not all(math.isfinite(v) for v in (center_x, center_y, size)):
        raise CoordinateFormatError(f"coordinates must be finite, got {text!r}")
    if size <= 0.0:
        raise CoordinateFormatError(f"zoom size must be positive, got {size!r}")
    return center_x, center_y, size
