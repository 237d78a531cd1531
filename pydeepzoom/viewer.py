"""Interactive deep zoom viewer - pygame frontend for the viewport engine.

Controls:
    Left drag       Pan (release with motion to fling)
    Scroll          Zoom in/out at cursor
    +/-             Adjust max iterations
    [ / ]           Cycle palette
    J               Toggle Julia / Mandelbrot
    A               Toggle adaptive iterations
    C               Print (and copy) coordinates
    P               Print precision split diagnostics
    S               Save screenshot
    D               Reset to default view
    F               Toggle info display
    H/?             Toggle help
    Q/ESC           Quit
"""

from typing import Optional
import os
import time

# Force X11 backend for proper window decorations on Wayland
os.environ.setdefault("SDL_VIDEODRIVER", "x11")

import numpy as np
import pygame
from PIL import Image

from pydeepzoom.config import DEFAULT_SIZE, NOMINAL_FPS
from pydeepzoom.engine import ViewportEngine
from pydeepzoom.events import FocusLost, PointerDown, PointerMove, PointerUp, Scroll
from pydeepzoom.physics import FrameClock
from pydeepzoom.precision import split_double
from pydeepzoom.preview import PALETTE_NAMES, render_preview
from pydeepzoom.snapshot import CoordinateFormatError
from pydeepzoom.state import FractalType


# =============================================================================
# Constants
# =============================================================================

FONT_SIZE = 20
PADDING = 10
HELP_OVERLAY_ALPHA = 200
TEXT_COLOR = (255, 255, 255)
PREVIEW_SCALE = 4  # Render at 1/N of the window resolution
ITERATION_STEP = 100

HELP_LINES = [
    "Deep Zoom Viewer",
    "",
    "Navigation:",
    "  Left drag      Pan (fling for momentum)",
    "  Scroll         Zoom at cursor",
    "",
    "Parameters:",
    "  +/-            Max iterations (+/- 100)",
    "  [ / ]          Cycle palette",
    "  J              Toggle Julia / Mandelbrot",
    "  A              Toggle adaptive iterations",
    "",
    "Coordinates:",
    "  C              Print / copy coordinates",
    "  P              Print hi/lo split",
    "  S              Save screenshot",
    "  D              Reset view",
    "",
    "Display:",
    "  F              Toggle info display",
    "  H/?            Toggle help",
    "  Q/ESC          Quit",
]


# =============================================================================
# Event Translation
# =============================================================================

def translate_event(event, window_size: tuple, mouse_pos: tuple):
    """Map a pygame event to a viewport engine event, or None.

    Wheel events carry no position, so the current mouse position is used.
    """
    width, height = window_size
    if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
        return PointerDown(event.pos[0], event.pos[1], width, height, event.button)
    if event.type == pygame.MOUSEBUTTONUP and event.button == 1:
        return PointerUp(event.button)
    if event.type == pygame.MOUSEMOTION:
        return PointerMove(event.pos[0], event.pos[1], width, height)
    if event.type == pygame.MOUSEWHEEL:
        delta = getattr(event, "precise_y", event.y)
        return Scroll(delta, mouse_pos[0], mouse_pos[1], width, height)
    if event.type == pygame.WINDOWFOCUSLOST:
        return FocusLost()
    return None


# =============================================================================
# Main Viewer Class
# =============================================================================

class ZoomViewer:
    """Pygame host: feeds input to the engine, ticks it, draws its snapshot."""

    def __init__(self, width: int = 1200, height: int = 900,
                 engine: Optional[ViewportEngine] = None,
                 preview_scale: int = PREVIEW_SCALE):
        self.width = width
        self.height = height
        self.engine = engine if engine is not None else ViewportEngine(width=width, height=height)
        self.engine.resize(width, height)
        self.preview_scale = max(1, preview_scale)
        self.clock_source = FrameClock()

        self.show_info = True
        self.show_help = False
        self.running = True

        # Preview is only re-rendered when the snapshot changes
        self.last_snapshot = None
        self.frame_surface: Optional[pygame.Surface] = None
        self.preview_ms: list[float] = []
        self.last_render_ms = 0.0

        # Created by _init_pygame()
        self.screen: Optional[pygame.Surface] = None
        self.clock: Optional[pygame.time.Clock] = None
        self.font: Optional[pygame.font.Font] = None

    def run(self):
        """Open the window and run until the user quits."""
        self._init_pygame()

        while self.running:
            self._handle_events()
            self.engine.tick(self.clock_source.elapsed())
            self._render_if_needed()
            self._draw()
            self.clock.tick(NOMINAL_FPS)

        self._print_stats()
        pygame.quit()

    def _init_pygame(self):
        pygame.init()
        pygame.key.set_repeat(150, 25)
        self.screen = pygame.display.set_mode(
            (self.width, self.height), pygame.RESIZABLE
        )
        pygame.display.set_caption("Deep Zoom")
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("monospace", FONT_SIZE)
        self.clock_source.restart()

    def _print_stats(self):
        """Print rendering statistics on exit."""
        if self.preview_ms:
            avg_ms = sum(self.preview_ms) / len(self.preview_ms)
            print(f"\nRendered {len(self.preview_ms)} previews")
            print(f"Average preview time: {avg_ms:.1f}ms")

    # =========================================================================
    # Event Handling
    # =========================================================================

    def _handle_events(self):
        """Process pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.KEYDOWN:
                self._on_keydown(event)
            elif event.type in (pygame.VIDEORESIZE, pygame.WINDOWRESIZED):
                self.screen = pygame.display.get_surface()
                self.width, self.height = self.screen.get_size()
                self.engine.resize(self.width, self.height)
                self.last_snapshot = None
            else:
                translated = translate_event(
                    event, (self.width, self.height), pygame.mouse.get_pos()
                )
                if translated is not None:
                    self.engine.dispatch(translated)

    def _on_keydown(self, event):
        """Handle key press."""
        key = event.key
        target = self.engine.state.target

        if key in (pygame.K_ESCAPE, pygame.K_q):
            self.running = False
        elif key == pygame.K_f:
            self.show_info = not self.show_info
        elif key in (pygame.K_h, pygame.K_QUESTION, pygame.K_SLASH):
            self.show_help = not self.show_help
        elif key == pygame.K_d:
            self.engine.reset()
            print("Reset to default view")
        elif key in (pygame.K_EQUALS, pygame.K_KP_PLUS):
            self.engine.set_max_iterations(target.max_iterations + ITERATION_STEP)
        elif key in (pygame.K_MINUS, pygame.K_KP_MINUS):
            self.engine.set_max_iterations(max(ITERATION_STEP, target.max_iterations - ITERATION_STEP))
        elif key == pygame.K_RIGHTBRACKET:
            self.engine.set_palette((target.palette_id + 1) % len(PALETTE_NAMES))
        elif key == pygame.K_LEFTBRACKET:
            self.engine.set_palette((target.palette_id - 1) % len(PALETTE_NAMES))
        elif key == pygame.K_j:
            if target.fractal_type == FractalType.JULIA:
                self.engine.set_fractal(FractalType.MANDELBROT)
            else:
                self.engine.set_fractal(FractalType.JULIA)
            print(f"Fractal: {self.engine.state.target.fractal_type.name.lower()}")
        elif key == pygame.K_a:
            adaptive = not self.engine.config.adaptive_iterations
            self.engine.configure(adaptive_iterations=adaptive)
            print(f"Adaptive iterations: {'on' if adaptive else 'off'}")
        elif key == pygame.K_c:
            self._copy_coordinates()
        elif key == pygame.K_p:
            self._print_split()
        elif key == pygame.K_s:
            self._save_screenshot()

    # =========================================================================
    # Coordinate Commands
    # =========================================================================

    def _copy_coordinates(self):
        """Print the exported coordinates and put them on the clipboard."""
        text = self.engine.export_coordinates()
        print("--- Coordinates ---")
        print(text)
        try:
            pygame.scrap.put_text(text)
            print("Coordinates copied to clipboard!")
        except pygame.error as exc:
            print(f"Clipboard unavailable: {exc}")

    def import_coordinates(self, text: str) -> bool:
        try:
            self.engine.import_coordinates(text)
        except CoordinateFormatError as exc:
            print(f"Could not read coordinates: {exc}")
            return False
        return True

    def _print_split(self):
        """Print how the current center splits into float32 halves."""
        current = self.engine.state.current
        print("--- Split Verification ---")
        for label, value in (("X", current.center_x), ("Y", current.center_y), ("Zoom", current.size)):
            split = split_double(value)
            print(f"{label}: {value:.17g}")
            print(f"  hi={split.hi:.9g} lo={split.lo:.9g} error={value - split.value:.3g}")
        print(f"High precision: {self.engine.snapshot().high_precision}")

    def _save_screenshot(self):
        """Render the current view at full window resolution and save a PNG."""
        filename = time.strftime("deepzoom_%Y%m%d_%H%M%S.png")
        t0 = time.perf_counter()
        rgb = render_preview(self.engine.snapshot(), self.width, self.height)
        Image.fromarray(rgb).save(filename)
        print(f"Saved {filename} ({(time.perf_counter() - t0) * 1000:.0f}ms)")

    # =========================================================================
    # Rendering
    # =========================================================================

    def _render_if_needed(self):
        """Re-render the preview when the snapshot changed."""
        snapshot = self.engine.snapshot()
        if snapshot == self.last_snapshot and self.frame_surface is not None:
            return

        t0 = time.perf_counter()
        preview_w = max(1, self.width // self.preview_scale)
        preview_h = max(1, self.height // self.preview_scale)
        rgb = render_preview(snapshot, preview_w, preview_h)
        surface = pygame.surfarray.make_surface(np.ascontiguousarray(rgb.swapaxes(0, 1)))
        self.frame_surface = pygame.transform.scale(surface, (self.width, self.height))

        self.last_render_ms = (time.perf_counter() - t0) * 1000
        self.preview_ms.append(self.last_render_ms)
        self.last_snapshot = snapshot

    def _draw(self):
        self.screen.blit(self.frame_surface, (0, 0))
        if self.show_info:
            self._draw_info_overlay()
        if self.show_help:
            self._draw_help_overlay()
        pygame.display.flip()

    def _info_lines(self) -> list:
        current = self.engine.state.current
        mode = "hi/lo" if self.engine.snapshot().high_precision else "float32"
        palette = PALETTE_NAMES[current.palette_id % len(PALETTE_NAMES)]
        return [
            f"Zoom: {DEFAULT_SIZE / current.size:.3e}x | imax: {current.max_iterations} | Mode: {mode}",
            f"Preview: {self.last_render_ms:.0f}ms | {self.clock.get_fps():.0f} FPS | Palette: {palette}",
            f"Center: {current.center_x:.17g} {current.center_y:+.17g}i",
        ]

    def _draw_info_overlay(self):
        """Zoom, precision mode, timing and center in the top-left corner."""
        y = PADDING // 2
        for line in self._info_lines():
            self.screen.blit(self.font.render(line, True, TEXT_COLOR, (0, 0, 0)), (PADDING, y))
            y += self.font.get_linesize()

    def _draw_help_overlay(self):
        """Key reference on a translucent panel below the info lines."""
        rendered = [self.font.render(line, True, TEXT_COLOR) for line in HELP_LINES]
        line_height = self.font.get_linesize()
        panel = pygame.Surface((
            max(surf.get_width() for surf in rendered) + PADDING * 2,
            len(rendered) * line_height + PADDING * 2,
        ))
        panel.set_alpha(HELP_OVERLAY_ALPHA)
        panel.fill((0, 0, 0))

        top = line_height * 3 + PADDING
        self.screen.blit(panel, (PADDING, top))
        for i, surf in enumerate(rendered):
            self.screen.blit(surf, (PADDING * 2, top + PADDING + i * line_height))
