"""Input events delivered by the host window.

Positions are in pixels with the origin at the top-left corner; every
positional event carries the viewport size it was measured against.
"""

from dataclasses import dataclass
import math


LEFT_BUTTON = 1


@dataclass(frozen=True)
class PointerDown:
    x: float
    y: float
    width: float
    height: float
    button: int = LEFT_BUTTON


@dataclass(frozen=True)
class PointerMove:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class PointerUp:
    button: int = LEFT_BUTTON


@dataclass(frozen=True)
class Scroll:
    """Wheel scroll; positive delta zooms in, one unit per notch."""
    delta: float
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class FocusLost:
    """The window lost focus; any drag in progress ends."""


def is_usable(event) -> bool:
    """True if every number on a positional event is finite and the viewport
    has a non-zero area."""
    numbers = [getattr(event, name) for name in ("x", "y", "width", "height", "delta")
               if hasattr(event, name)]
    if not all(math.isfinite(n) for n in numbers):
        return False
    if hasattr(event, "height"):
        return event.width > 0 and event.height > 0
    return True
