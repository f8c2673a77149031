"""
Synchronous Mandelbrot render driver.

The MandelbrotRenderer class handles:
- Evaluating the escape time of every pixel (JIT-compiled, parallel kernel)
- Coloring every pixel with the selected strategy
- Writing RGBA into a flat pixel buffer at offset 4 * (i + j * width)

One call to render() is one full, non-interruptible pass. There is no
incremental update: a settings change means a new render of every pixel.
"""

import logging
import time

import numpy as np

from .colormaps import PALETTE, PaletteCache, effective_colormap, get_colormap, map_color
from .compute import compute_for_settings, evaluate_pixel


logger = logging.getLogger(__name__)

DEFAULT_WIDTH = 720
DEFAULT_HEIGHT = 400


class RenderContext:
    """
    State owned by the driver for the duration of one render pass.

    Attributes:
        settings: The RenderSettings the pass was run with
        width, height: Raster dimensions
        pixels: Flat RGBA uint8 buffer of width * height * 4 bytes
        palette: PaletteCache for the palette strategy, else None
        counts: (height, width) iteration grid of the last pass
    """

    def __init__(self, settings, width, height, palette=None):
        self.settings = settings
        self.width = width
        self.height = height
        self.pixels = np.zeros(width * height * 4, dtype=np.uint8)
        self.palette = palette
        self.counts = None
        self.elapsed = 0.0

    def offset(self, i, j):
        """Byte offset of pixel (i, j) in the buffer."""
        return 4 * (i + j * self.width)

    def pixel(self, i, j):
        """(r, g, b, a) of pixel (i, j)."""
        o = self.offset(i, j)
        return tuple(int(v) for v in self.pixels[o:o + 4])

    def as_image(self):
        """(height, width, 4) view of the buffer, row-major."""
        return self.pixels.reshape(self.height, self.width, 4)


class MandelbrotRenderer:
    """
    Renders whole images for a given RenderSettings.

    Usage:
        renderer = MandelbrotRenderer(720, 400)
        context = renderer.render(RenderSettings(max_iterations=100))
        publish(context.pixels)

    Attributes:
        width, height: Canvas dimensions
        context: RenderContext of the most recent pass (None before the first)
    """

    def __init__(self, width=DEFAULT_WIDTH, height=DEFAULT_HEIGHT):
        if width < 1 or height < 1:
            raise ValueError(f"canvas size must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.context = None

    def _palette_for(self, settings, reset_palette):
        """Fresh palette for this pass, or the previous one when reuse is asked for."""
        if effective_colormap(settings) != PALETTE:
            return None
        previous = self.context.palette if self.context is not None else None
        if (not reset_palette and previous is not None
                and previous.max_iter == settings.max_iterations
                and previous.grayscale == settings.grayscale):
            return previous
        return PaletteCache(settings.max_iterations, settings.grayscale, settings.seed)

    def render(self, settings, reset_palette=True):
        """
        Render every pixel for the given settings.

        Args:
            settings: RenderSettings for this pass
            reset_palette: Start the palette strategy from an empty cache
                (default). With False, colors assigned by the previous pass
                are kept as long as max_iterations and grayscale match.

        Returns:
            The RenderContext holding the filled pixel buffer
        """
        start = time.perf_counter()
        context = RenderContext(settings, self.width, self.height,
                                self._palette_for(settings, reset_palette))
        logger.info("Rendering %dx%d: %s", self.width, self.height, settings)

        counts = compute_for_settings(settings, self.width, self.height)
        context.counts = counts

        if context.palette is not None:
            # Columns first, matching the order pixels are visited in
            colors = context.palette.lookup(counts.T)
            rgb = colors.reshape(self.width, self.height, 3).transpose(1, 0, 2)
        else:
            colormap = get_colormap(effective_colormap(settings), settings.max_iterations)
            rgb = colormap[counts]

        image = context.as_image()
        image[:, :, :3] = rgb
        image[:, :, 3] = 255

        context.elapsed = time.perf_counter() - start
        self.context = context
        logger.info(
            "Rendered in %.3fs (%d distinct iteration counts)",
            context.elapsed, len(np.unique(counts))
        )
        return context

    def render_sequential(self, settings, reset_palette=True):
        """
        Reference render: one pixel at a time, columns outermost.

        Much slower than render() but follows the per-pixel contract
        literally; both produce the same buffer for the same settings.
        """
        start = time.perf_counter()
        context = RenderContext(settings, self.width, self.height,
                                self._palette_for(settings, reset_palette))
        counts = np.zeros((self.height, self.width), dtype=np.int64)

        for i in range(self.width):
            for j in range(self.height):
                n = evaluate_pixel(i, j, settings, self.width, self.height)
                counts[j, i] = n
                r, g, b = map_color(n, settings, context.palette)
                o = context.offset(i, j)
                context.pixels[o] = r
                context.pixels[o + 1] = g
                context.pixels[o + 2] = b
                context.pixels[o + 3] = 255

        context.counts = counts
        context.elapsed = time.perf_counter() - start
        self.context = context
        logger.info("Rendered sequentially in %.3fs", context.elapsed)
        return context

    def pixels_as_image(self):
        """(height, width, 4) view of the last buffer, or None before any render."""
        if self.context is None:
            return None
        return self.context.as_image()


def render(settings, width=DEFAULT_WIDTH, height=DEFAULT_HEIGHT):
    """Render one image and return its RenderContext."""
    return MandelbrotRenderer(width, height).render(settings)
