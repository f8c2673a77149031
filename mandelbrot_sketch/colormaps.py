"""
Color strategies for the Mandelbrot sketch.

Each count-only strategy has a factory create_colormap_xxx(max_iter) that
returns a numpy array of shape (max_iter + 1, 3) with RGB values (uint8):
entry n is the color of every pixel whose escape count is n. The renderer
colors a whole raster with a single fancy-indexing lookup.

The discrete palette is different: its colors are random and assigned the
first time a count is seen, so it is served by PaletteCache instead of a
precomputed table.

To add a new colormap:
1. Define a scalar xxx_color(n, max_iter) and a create_colormap_xxx() factory
2. Add it to the COLORMAPS dictionary at the bottom of this file
"""

import bisect
import logging
import math
import threading

import numpy as np


logger = logging.getLogger(__name__)

BLACK = (0, 0, 0)
WHITE = (255, 255, 255)

# Ultra Fractal style anchors: dark blue, medium blue, near-white, orange, near-black
ULTRA_FRACTAL_ANCHORS = (
    (0, 7, 100),
    (32, 107, 203),
    (237, 255, 255),
    (255, 170, 0),
    (0, 2, 0),
)

# Ordered (lo, hi, start_color, end_color) table; segments are contiguous
# and cover [0, 1]. The last one holds the final anchor.
GRADIENT_SEGMENTS = (
    (0.0, 0.16, ULTRA_FRACTAL_ANCHORS[0], ULTRA_FRACTAL_ANCHORS[1]),
    (0.16, 0.42, ULTRA_FRACTAL_ANCHORS[1], ULTRA_FRACTAL_ANCHORS[2]),
    (0.42, 0.6425, ULTRA_FRACTAL_ANCHORS[2], ULTRA_FRACTAL_ANCHORS[3]),
    (0.6425, 0.8575, ULTRA_FRACTAL_ANCHORS[3], ULTRA_FRACTAL_ANCHORS[4]),
    (0.8575, 1.0, ULTRA_FRACTAL_ANCHORS[4], ULTRA_FRACTAL_ANCHORS[4]),
)

# Two-tone gradient endpoints
TWO_TONE_START = (0, 7, 100)
TWO_TONE_END = (255, 170, 0)


def lerp_color(c1, c2, t):
    """
    Linearly interpolate between two RGB colors.

    t = 0 gives c1 and t = 1 gives c2. Channels are rounded to the
    nearest integer and clipped to [0, 255].
    """
    return tuple(
        int(min(255, max(0, round(a + (b - a) * t))))
        for a, b in zip(c1, c2)
    )


def grayscale_color(n, max_iter):
    """
    Grayscale: brightness = sqrt(n / max_iter) scaled to [0, 255].

    The square root lifts the low-iteration regions. In-set points come
    out at full brightness.
    """
    v = int(round(math.sqrt(n / max_iter) * 255))
    return (v, v, v)


def gradient_color(factor, segments=GRADIENT_SEGMENTS):
    """
    Interpolate a factor in [0, 1] through a segment table.

    The containing segment is found by bisection on the segment starts.
    Inside it the factor is renormalized to [0, 1] and cubed before
    interpolating, which pushes the color change towards the end of
    each segment.
    """
    starts = [lo for lo, _, _, _ in segments]
    idx = bisect.bisect_right(starts, factor) - 1
    idx = min(max(idx, 0), len(segments) - 1)
    lo, hi, start, end = segments[idx]

    t = (factor - lo) / (hi - lo)
    t = min(max(t, 0.0), 1.0)
    return lerp_color(start, end, t ** 3)


def ultra_fractal_color(n, max_iter):
    """Five-anchor smooth gradient; in-set points are black."""
    if n >= max_iter:
        return BLACK
    return gradient_color(n / max_iter)


def two_tone_color(n, max_iter):
    """
    Two-color gradient with weight 1 / 8**factor on the first color.

    factor = 0 gives TWO_TONE_START exactly; in-set points are black.
    """
    if n >= max_iter:
        return BLACK
    weight = 1.0 / 8 ** (n / max_iter)
    return lerp_color(TWO_TONE_END, TWO_TONE_START, weight)


def binary_color(n, max_iter):
    """The first sketch's look: white in-set points on black."""
    return WHITE if n >= max_iter else BLACK


def _build_table(color_fn, max_iter):
    colors = np.zeros((max_iter + 1, 3), dtype=np.uint8)
    for n in range(max_iter + 1):
        colors[n] = color_fn(n, max_iter)
    return colors


def create_colormap_ultra_fractal(max_iter):
    """
    Ultra fractal colormap: dark blue -> blue -> white -> orange -> black.

    Banded look reminiscent of published Mandelbrot renders.
    """
    return _build_table(ultra_fractal_color, max_iter)


def create_colormap_two_tone(max_iter):
    """Two tone colormap: deep blue fading into orange."""
    return _build_table(two_tone_color, max_iter)


def create_colormap_grayscale(max_iter):
    """Grayscale colormap: black -> white, square-root contrast."""
    return _build_table(grayscale_color, max_iter)


def create_colormap_binary(max_iter):
    return _build_table(binary_color, max_iter)


class PaletteCache:
    """
    Discrete palette: one random color per distinct iteration count.

    A color is drawn the first time a count is seen and then reused for
    every later pixel with that count, until reset(). Unless grayscale is
    on, the in-set count is pre-seeded black so it never gets a random
    color.

    Usage:
        palette = PaletteCache(max_iter=100, seed=7)
        palette.color_for(12)    # random, but stable from now on
        palette.color_for(100)   # (0, 0, 0)
    """

    def __init__(self, max_iter, grayscale=False, seed=None):
        self.max_iter = max_iter
        self.grayscale = grayscale
        self._colors = {}
        self._rng = None
        self.lock = threading.Lock()
        self.reset(seed)

    def reset(self, seed=None):
        """Clear all assigned colors and reseed the generator."""
        with self.lock:
            self._colors.clear()
            self._rng = np.random.default_rng(seed)
            if not self.grayscale:
                self._colors[self.max_iter] = BLACK
        logger.debug("Palette cache reset (seed=%s)", seed)

    def color_for(self, n):
        """Get the color of count n, drawing a new one on first sight."""
        with self.lock:
            return self._color_locked(n)

    def _color_locked(self, n):
        # Caller holds self.lock
        color = self._colors.get(n)
        if color is None:
            color = tuple(int(v) for v in self._rng.integers(0, 256, size=3))
            self._colors[n] = color
        return color

    def lookup(self, counts):
        """
        Color a stream of counts.

        New counts are assigned in order of first appearance in the
        stream, so feeding the counts in raster order gives the same
        colors as calling color_for pixel by pixel.

        Args:
            counts: Array-like of iteration counts (flattened in C order)

        Returns:
            (N, 3) uint8 array of colors, aligned with the flattened input
        """
        flat = np.asarray(counts).ravel()
        if flat.size == 0:
            return np.zeros((0, 3), dtype=np.uint8)

        uniques, first_seen = np.unique(flat, return_index=True)
        with self.lock:
            for n in uniques[np.argsort(first_seen)]:
                self._color_locked(int(n))
            table = np.array([self._colors[int(n)] for n in uniques], dtype=np.uint8)

        return table[np.searchsorted(uniques, flat)]

    def __len__(self):
        return len(self._colors)

    def __contains__(self, n):
        return n in self._colors


PALETTE = 'palette'

# Registry of table-based colormaps.
# Keys are setting names, values are factory functions taking max_iter.
COLORMAPS = {
    'ultra_fractal': create_colormap_ultra_fractal,
    'two_tone': create_colormap_two_tone,
    'grayscale': create_colormap_grayscale,
    'binary': create_colormap_binary,
}

_COLOR_FUNCTIONS = {
    'ultra_fractal': ultra_fractal_color,
    'two_tone': two_tone_color,
    'grayscale': grayscale_color,
    'binary': binary_color,
}

# Display labels for the settings panel
COLORMAP_LABELS = {
    'ultra_fractal': 'Ultra Fractal',
    'two_tone': 'Two Tone',
    PALETTE: 'Random Palette',
    'grayscale': 'Grayscale',
    'binary': 'Black & White',
}


def get_colormap(name, max_iter):
    """
    Get a colormap table by name.

    Args:
        name: Key from COLORMAPS dictionary
        max_iter: Iteration cap; the table has max_iter + 1 entries

    Returns:
        Colormap array (max_iter + 1, 3) of uint8 RGB values

    Raises:
        KeyError if name not found
    """
    return COLORMAPS[name](max_iter)


def list_colormap_names():
    """Get list of available colormap names, palette included."""
    return ['ultra_fractal', 'two_tone', PALETTE, 'grayscale', 'binary']


def effective_colormap(settings):
    """The strategy actually used: the grayscale flag overrides the choice."""
    return 'grayscale' if settings.grayscale else settings.colormap


def map_color(n, settings, palette=None):
    """
    Color of a single iteration count under the given settings.

    Args:
        n: Iteration count in [0, settings.max_iterations]
        settings: RenderSettings
        palette: PaletteCache, required for the palette strategy

    Returns:
        (r, g, b) tuple of ints
    """
    name = effective_colormap(settings)
    if name == PALETTE:
        if palette is None:
            raise ValueError("the palette colormap needs a PaletteCache")
        return palette.color_for(n)
    return _COLOR_FUNCTIONS[name](n, settings.max_iterations)
