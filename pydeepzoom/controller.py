"""Translate pointer and wheel input into target camera changes."""

from dataclasses import dataclass
from typing import Optional
import logging

from pydeepzoom.config import EngineConfig
from pydeepzoom.events import FocusLost, LEFT_BUTTON, PointerDown, PointerMove, PointerUp, Scroll, is_usable
from pydeepzoom.physics import pull_toward_home, soft_limit
from pydeepzoom.state import CameraParams, ViewportState, sanitize_camera


logger = logging.getLogger(__name__)


@dataclass
class InteractionState:
    """Mouse drag state for panning."""
    dragging: bool = False
    last_pos: Optional[tuple] = None

    def release(self):
        self.dragging = False
        self.last_pos = None


# =============================================================================
# Pixel / Fractal Conversion
# =============================================================================

def pixel_to_fractal(camera: CameraParams, x: float, y: float,
                     width: float, height: float) -> tuple:
    """Fractal-space point under pixel (x, y). Screen y grows down, fractal y up."""
    scale = camera.size / height
    rel_x = x - width / 2.0
    rel_y = y - height / 2.0
    return camera.center_x + rel_x * scale, camera.center_y - rel_y * scale


def fractal_to_pixel(camera: CameraParams, fx: float, fy: float,
                     width: float, height: float) -> tuple:
    """Inverse of pixel_to_fractal."""
    scale = camera.size / height
    x = (fx - camera.center_x) / scale + width / 2.0
    y = (camera.center_y - fy) / scale + height / 2.0
    return x, y


def scroll_zoom_factor(delta: float, config: EngineConfig) -> float:
    """Multiplicative size change for a scroll of ``delta`` notches.

    Each notch multiplies the size by zoom_in_factor (delta > 0) or
    zoom_out_factor (delta < 0); fractional deltas give fractional powers.
    At most ``config.max_scroll_notches`` notches count per event.
    """
    notches = min(abs(delta), config.max_scroll_notches)
    if delta > 0:
        return config.zoom_in_factor ** notches
    if delta < 0:
        return config.zoom_out_factor ** notches
    return 1.0


# =============================================================================
# Controller
# =============================================================================

class InputController:
    """Idle/Dragging state machine that writes only to ``state.target``.

    Events with non-finite numbers or an empty viewport are dropped without
    touching the state.
    """

    def __init__(self, state: ViewportState, config: Optional[EngineConfig] = None):
        self.state = state
        self.config = config if config is not None else EngineConfig()
        self.interaction = InteractionState()
        self.dropped_events = 0

    @property
    def dragging(self) -> bool:
        return self.interaction.dragging

    def handle(self, event) -> bool:
        """Apply one event. Returns True if the target camera may have changed."""
        if isinstance(event, PointerDown):
            return self.on_pointer_down(event)
        if isinstance(event, PointerMove):
            return self.on_pointer_move(event)
        if isinstance(event, PointerUp):
            return self.on_pointer_up(event)
        if isinstance(event, Scroll):
            return self.on_scroll(event)
        if isinstance(event, FocusLost):
            return self.on_focus_lost(event)
        raise TypeError(f"Unknown input event: {event!r}")

    def _drop(self, event) -> bool:
        self.dropped_events += 1
        logger.debug("dropping unusable event %r", event)
        return False

    def on_pointer_down(self, event: PointerDown) -> bool:
        if event.button != LEFT_BUTTON:
            return False
        if not is_usable(event):
            return self._drop(event)

        self.interaction.dragging = True
        self.interaction.last_pos = (event.x, event.y)
        self.state.velocity.reset()
        # Momentum may have carried the target away from what is on screen
        self.state.sync_target_to_current()
        return True

    def on_pointer_move(self, event: PointerMove) -> bool:
        if not self.interaction.dragging or self.interaction.last_pos is None:
            return False
        if not is_usable(event):
            return self._drop(event)

        last_x, last_y = self.interaction.last_pos
        dx = event.x - last_x
        dy = event.y - last_y
        target = self.state.target
        scale = target.size / event.height

        # Y is inverted in fractal space
        move_x = -dx * scale
        move_y = dy * scale
        target.center_x += move_x
        target.center_y += move_y

        velocity = self.state.velocity
        velocity.vx = move_x * self.config.momentum_scale
        velocity.vy = move_y * self.config.momentum_scale

        self.interaction.last_pos = (event.x, event.y)
        sanitize_camera(target, self.state.current, self.config.min_size)
        return True

    def on_pointer_up(self, event: PointerUp) -> bool:
        if event.button == LEFT_BUTTON:
            self.interaction.release()
        return False

    def on_focus_lost(self, event: FocusLost) -> bool:
        self.interaction.release()
        return False

    def on_scroll(self, event: Scroll) -> bool:
        """Zoom about the cursor so the point under it stays put."""
        if not is_usable(event):
            return self._drop(event)
        factor = scroll_zoom_factor(event.delta, self.config)
        if factor == 1.0:
            return False

        target = self.state.target
        focus_x, focus_y = pixel_to_fractal(target, event.x, event.y, event.width, event.height)

        new_size = soft_limit(target.size * factor, self.config.max_size,
                              self.config.limit_resistance)
        target.size = max(new_size, self.config.min_size)

        # Recompute the center so the focal point maps back to the cursor
        scale = target.size / event.height
        rel_x = event.x - event.width / 2.0
        rel_y = event.y - event.height / 2.0
        target.center_x = focus_x - rel_x * scale
        target.center_y = focus_y + rel_y * scale

        pull_toward_home(target, self.config)
        sanitize_camera(target, self.state.current, self.config.min_size)
        return True
