"""CPU preview renderer used by the pygame viewer.

Evaluates the escape-time iteration with numpy from a UniformSnapshot, the
same data a GPU renderer would bind as uniforms. Meant for interactive
previews at reduced resolution, not for final images.
"""

from functools import lru_cache

import numpy as np

from pydeepzoom.snapshot import UniformSnapshot
from pydeepzoom.state import FractalType


ESCAPE_RADIUS_SQ = 256.0
LUT_SIZE = 2048
COLOR_DENSITY = 0.02  # Palette cycles per smooth iteration

# "Extreme" gradient: (position, r, g, b), blended with smoothstep
EXTREME_STOPS = [
    (0.00, 0, 0, 0), (0.05, 25, 7, 26), (0.10, 9, 1, 47),
    (0.15, 4, 4, 73), (0.20, 0, 7, 100), (0.25, 12, 44, 138),
    (0.30, 24, 82, 177), (0.35, 57, 125, 209), (0.40, 134, 181, 229),
    (0.45, 211, 236, 248), (0.50, 241, 233, 191), (0.55, 248, 201, 95),
    (0.60, 255, 170, 0), (0.65, 240, 126, 13), (0.70, 204, 71, 10),
    (0.75, 158, 1, 66), (0.80, 110, 0, 95), (0.85, 106, 0, 168),
    (0.90, 77, 16, 140), (0.95, 45, 20, 80), (1.00, 0, 0, 0),
]

# Cosine gradients: color(t) = a + b * cos(2 * pi * (c * t + d))
COSINE_PALETTES = [
    ((0.5, 0.5, 0.5), (0.5, 0.5, 0.5), (1.0, 1.0, 1.0), (0.00, 0.33, 0.67)),
    ((0.5, 0.5, 0.5), (0.5, 0.5, 0.5), (1.0, 1.0, 1.0), (0.00, 0.10, 0.20)),
    ((0.8, 0.5, 0.4), (0.2, 0.4, 0.2), (2.0, 1.0, 1.0), (0.00, 0.25, 0.25)),
]

PALETTE_NAMES = ["Extreme", "Rainbow", "Ember", "Pastel"]


# =============================================================================
# Palettes
# =============================================================================

def _extreme_lut(size: int) -> np.ndarray:
    stops = np.array(EXTREME_STOPS, dtype=np.float64)
    t = np.linspace(0.0, 1.0, size)
    upper = np.clip(np.searchsorted(stops[:, 0], t, side="right"), 1, len(stops) - 1)
    lower = upper - 1
    span = stops[upper, 0] - stops[lower, 0]
    local = (t - stops[lower, 0]) / span
    smooth = local * local * (3.0 - 2.0 * local)
    rgb = stops[lower, 1:] + (stops[upper, 1:] - stops[lower, 1:]) * smooth[:, None]
    return np.round(rgb).astype(np.uint8)


def _cosine_lut(params, size: int) -> np.ndarray:
    a, b, c, d = (np.array(p) for p in params)
    t = np.linspace(0.0, 1.0, size)[:, None]
    rgb = a + b * np.cos(2.0 * np.pi * (c * t + d))
    return np.round(np.clip(rgb, 0.0, 1.0) * 255.0).astype(np.uint8)


@lru_cache(maxsize=None)
def palette_lut(palette_id: int, size: int = LUT_SIZE) -> np.ndarray:
    """RGB lookup table of shape (size, 3); palette ids wrap around."""
    palette_id %= len(PALETTE_NAMES)
    if palette_id == 0:
        lut = _extreme_lut(size)
    else:
        lut = _cosine_lut(COSINE_PALETTES[palette_id - 1], size)
    lut.setflags(write=False)
    return lut


# =============================================================================
# Escape-Time Evaluation
# =============================================================================

def _coordinate(split, high_precision: bool) -> float:
    return split.value if high_precision else split.hi


def complex_grid(snapshot: UniformSnapshot, width: int, height: int) -> np.ndarray:
    """Fractal-space coordinate of each pixel center, shape (height, width)."""
    hp = snapshot.high_precision
    cx = _coordinate(snapshot.center_x, hp)
    cy = _coordinate(snapshot.center_y, hp)
    scale = _coordinate(snapshot.size, hp) / height
    xs = cx + (np.arange(width) + 0.5 - width / 2.0) * scale
    ys = cy - (np.arange(height) + 0.5 - height / 2.0) * scale
    return xs[None, :] + 1j * ys[:, None]


def smooth_iterations(snapshot: UniformSnapshot, width: int, height: int) -> np.ndarray:
    """Smooth escape counts, with -1.0 marking points that never escaped."""
    grid = complex_grid(snapshot, width, height)
    fractal = FractalType(snapshot.fractal_type)
    if fractal == FractalType.JULIA:
        z = grid.copy()
        c = np.full_like(grid, complex(*snapshot.julia_c))
    else:
        z = np.zeros_like(grid)
        c = grid

    result = np.full(grid.shape, -1.0)
    active = np.ones(grid.shape, dtype=bool)
    with np.errstate(over="ignore", invalid="ignore"):
        for n in range(snapshot.max_iterations):
            za = z[active]
            if fractal == FractalType.BURNING_SHIP:
                za = np.abs(za.real) + 1j * np.abs(za.imag)
            elif fractal == FractalType.TRICORN:
                za = np.conj(za)
            za = za * za + c[active]
            z[active] = za

            mag_sq = za.real * za.real + za.imag * za.imag
            escaped = mag_sq > ESCAPE_RADIUS_SQ
            if escaped.any():
                idx = np.flatnonzero(active)[escaped]
                log_zn = 0.5 * np.log(mag_sq[escaped])
                result.flat[idx] = n + 1 - np.log2(log_zn / np.log(2.0))
                active.flat[idx] = False
            if not active.any():
                break
    return result


def render_preview(snapshot: UniformSnapshot, width: int, height: int) -> np.ndarray:
    """Render to an RGB array of shape (height, width, 3)."""
    counts = smooth_iterations(snapshot, width, height)
    lut = palette_lut(snapshot.palette_id)
    index = (np.maximum(counts, 0.0) * COLOR_DENSITY * len(lut)).astype(np.int64) % len(lut)
    rgb = lut[index]
    rgb[counts < 0] = 0
    return rgb
