"""Viewport engine for exploring escape-time fractals at deep zoom."""

from pydeepzoom.config import ConfigError, EngineConfig
from pydeepzoom.engine import ViewportEngine
from pydeepzoom.events import FocusLost, PointerDown, PointerMove, PointerUp, Scroll
from pydeepzoom.precision import Split, split_double
from pydeepzoom.snapshot import CoordinateFormatError, UniformSnapshot
from pydeepzoom.state import CameraParams, FractalType, Velocity, ViewportState

__all__ = [
    "CameraParams",
    "ConfigError",
    "CoordinateFormatError",
    "EngineConfig",
    "FocusLost",
    "FractalType",
    "PointerDown",
    "PointerMove",
    "PointerUp",
    "Scroll",
    "Split",
    "UniformSnapshot",
    "Velocity",
    "ViewportEngine",
    "ViewportState",
    "split_double",
]
