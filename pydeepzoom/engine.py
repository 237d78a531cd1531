"""The viewport engine a host drives: events in, ticks, snapshots out."""

from typing import Optional
import logging

from pydeepzoom.config import EngineConfig
from pydeepzoom.controller import InputController
from pydeepzoom.events import is_usable
from pydeepzoom.physics import PhysicsIntegrator
from pydeepzoom.snapshot import UniformSnapshot, build_snapshot, format_coordinates, parse_coordinates
from pydeepzoom.state import CameraParams, FractalType, ViewportState


logger = logging.getLogger(__name__)


class ViewportEngine:
    """Owns one ViewportState and the two components allowed to mutate it.

    Single-threaded: the host calls dispatch() for input between ticks,
    tick() once per frame, then snapshot() for the renderer. An event's effect
    on the target is integrated by the very next tick.
    """

    def __init__(self, config: Optional[EngineConfig] = None,
                 width: int = 800, height: int = 600,
                 device_pixel_ratio: float = 1.0,
                 defaults: Optional[CameraParams] = None):
        self.config = config if config is not None else EngineConfig()
        self.defaults = defaults.copy() if defaults is not None else CameraParams()
        self.state = ViewportState(min_size=self.config.min_size)
        self.state.reset(self.defaults)
        self.controller = InputController(self.state, self.config)
        self.integrator = PhysicsIntegrator(self.config)

        self.width = width
        self.height = height
        self.device_pixel_ratio = device_pixel_ratio

    # =========================================================================
    # Host Surface
    # =========================================================================

    @property
    def dragging(self) -> bool:
        return self.controller.dragging

    def configure(self, **changes):
        """Swap in a validated copy of the config with the given fields changed."""
        self.config = self.config.replace(**changes)
        self.controller.config = self.config
        self.integrator.config = self.config
        self.state.min_size = self.config.min_size

    def dispatch(self, event) -> bool:
        """Feed one input event to the controller."""
        if hasattr(event, "height") and is_usable(event):
            self.width, self.height = event.width, event.height
        return self.controller.handle(event)

    def tick(self, elapsed: float) -> float:
        """Advance the current camera by ``elapsed`` seconds (clamped)."""
        return self.integrator.step(self.state, elapsed, dragging=self.controller.dragging)

    def resize(self, width: int, height: int, device_pixel_ratio: Optional[float] = None):
        """Record the logical viewport size (and optionally the pixel ratio)."""
        if width <= 0 or height <= 0:
            logger.debug("ignoring degenerate resize %dx%d", width, height)
            return
        self.width, self.height = width, height
        if device_pixel_ratio is not None and device_pixel_ratio > 0:
            self.device_pixel_ratio = device_pixel_ratio

    @property
    def resolution(self) -> tuple:
        """Physical pixel size of the viewport."""
        dpr = self.device_pixel_ratio
        return self.width * dpr, self.height * dpr

    def snapshot(self) -> UniformSnapshot:
        return build_snapshot(self.state.current, self.resolution, self.config)

    # =========================================================================
    # Coordinates and View Commands
    # =========================================================================

    def export_coordinates(self) -> str:
        current = self.state.current
        return format_coordinates(current.center_x, current.center_y, current.size)

    def import_coordinates(self, text: str):
        """Jump to an exported view. Raises CoordinateFormatError on bad text."""
        center_x, center_y, size = parse_coordinates(text)
        self.controller.interaction.release()
        self.state.jump_to(center_x, center_y, size)
        logger.debug("jumped to %r, %r size %r", center_x, center_y, size)

    def reset(self):
        """Return to the default view and drop any drag in progress."""
        self.controller.interaction.release()
        self.state.reset(self.defaults)

    def set_max_iterations(self, max_iterations: int):
        self.state.set_target(max_iterations=max(1, int(max_iterations)))

    def set_palette(self, palette_id: int):
        self.state.set_target(palette_id=int(palette_id))

    def set_fractal(self, fractal_type: FractalType, julia_c: Optional[tuple] = None):
        changes = {"fractal_type": FractalType(fractal_type)}
        if julia_c is not None:
            changes["julia_c"] = (float(julia_c[0]), float(julia_c[1]))
        self.state.set_target(**changes)
