"""
Main application module for the Mandelbrot sketch.

Contains the SketchApp class which handles:
- Window setup and main loop
- Publishing rendered pixel buffers to the screen
- Interaction between the settings panel and the renderer

The image is only recomputed on Generate; the per-frame step just redraws
the last published surface and the panel.
"""

import logging

import pygame

from .compute import warmup_jit
from .config import DEFAULT_PRESET, get_preset
from .menu import Menu
from .renderer import DEFAULT_HEIGHT, DEFAULT_WIDTH, MandelbrotRenderer


logger = logging.getLogger(__name__)


class SketchApp:
    """
    Main application class for the Mandelbrot sketch.

    Handles the pygame window, event loop, and coordinates
    between the renderer, the settings panel, and the display.
    """

    CAPTION = "Mandelbrot Set"
    MENU_WIDTH = 220

    def __init__(self, width=None, height=None, settings=None):
        """
        Initialize the application.

        Args:
            width: Window width in pixels (default 720)
            height: Window height in pixels (default 400)
            settings: Initial RenderSettings (default: the ultra_fractal preset)
        """
        self.width = width or DEFAULT_WIDTH
        self.height = height or DEFAULT_HEIGHT
        self.settings = settings or get_preset(DEFAULT_PRESET)

        # Pygame state (initialized in run())
        self.screen = None
        self.clock = None

        self.renderer = MandelbrotRenderer(self.width, self.height)
        self.menu = None
        self.current_surface = None

        self.running = False

    def run(self):
        """Run the application main loop."""
        self._init_pygame()
        self._init_components()

        pygame.display.set_caption("Compiling (first run only)...")
        warmup_jit()
        self.generate(self.settings)

        self.running = True
        while self.running:
            self._handle_events()
            self._draw()
            self.clock.tick(60)

        pygame.quit()

    def _init_pygame(self):
        """Initialize pygame and create window."""
        pygame.init()
        self.screen = pygame.display.set_mode((self.width, self.height))
        pygame.display.set_caption(self.CAPTION)
        self.clock = pygame.time.Clock()

    def _init_components(self):
        """Create the settings panel, showing the initial settings."""
        self.menu = Menu(self.width - self.MENU_WIDTH - 10, 10, width=self.MENU_WIDTH)
        self.menu.load_from(self.settings)

    def generate(self, settings):
        """
        Render the whole image for settings and publish it.

        Blocks until every pixel has been computed.
        """
        pygame.display.set_caption("Computing...")
        context = self.renderer.render(settings)
        self.settings = settings
        self.current_surface = self.publish(context)
        pygame.display.set_caption(
            f"{self.CAPTION} - {settings.max_iterations} iterations, "
            f"{context.elapsed:.2f}s"
        )
        return context

    def publish(self, context):
        """Turn a context's RGBA buffer into a surface and show it."""
        surface = pygame.image.frombuffer(
            context.pixels.tobytes(), (context.width, context.height), "RGBA"
        )
        if self.screen is not None:
            self.screen.blit(surface, (0, 0))
            pygame.display.flip()
        return surface

    def _handle_events(self):
        """Process all pending pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
                continue

            # Menu gets first crack at events
            menu_handled, need_generate = self.menu.handle_event(event)
            if need_generate:
                self._apply_menu_settings()
            if menu_handled:
                continue

            if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                self.running = False

    def _apply_menu_settings(self):
        """Build new settings from the panel and regenerate."""
        try:
            settings = self.menu.build_settings(self.settings)
        except ValueError as e:
            logger.warning("Ignoring invalid panel settings: %s", e)
            return
        self.generate(settings)

    def _draw(self):
        """Draw the current frame."""
        self.screen.fill((0, 0, 0))
        if self.current_surface is not None:
            self.screen.blit(self.current_surface, (0, 0))
        self.menu.draw(self.screen)
        pygame.display.flip()


def run(width=None, height=None, settings=None):
    """
    Run the Mandelbrot sketch.

    Args:
        width: Window width (default 720)
        height: Window height (default 400)
        settings: Initial RenderSettings (default: ultra_fractal preset)
    """
    app = SketchApp(width, height, settings)
    try:
        app.run()
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
        pygame.quit()
