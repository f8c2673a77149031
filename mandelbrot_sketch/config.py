"""
Render configuration for the Mandelbrot sketch.

A RenderSettings value is immutable: the settings panel builds a fresh one
on every Generate and hands it to the renderer. The five historical variants
of the sketch are available as named presets.

Panel ranges and defaults are read from settings.json next to this file.
"""

import json
import logging
import os
from dataclasses import dataclass, replace

from .colormaps import list_colormap_names
from .compute import DIVERGENCE_TESTS


logger = logging.getLogger(__name__)

# Classic framing that centers the main cardioid on a 720x400 canvas
DEFAULT_BOUNDS = (-2.5, 1.5, -1.5, 1.5)  # x_min, x_max, y_min, y_max
# Square framing of the first sketch
SQUARE_BOUNDS = (-2.0, 2.0, -2.0, 2.0)

COLORMAP_NAMES = tuple(list_colormap_names())


@dataclass(frozen=True)
class RenderSettings:
    """Everything one render pass needs to know."""
    max_iterations: int = 100
    escape_radius: float = 2.0
    grayscale: bool = False
    colormap: str = 'ultra_fractal'
    divergence: str = 'modulus'
    bounds: tuple = DEFAULT_BOUNDS
    double_step: bool = False
    seed: int | None = None

    def __post_init__(self):
        if int(self.max_iterations) != self.max_iterations or self.max_iterations < 1:
            raise ValueError(f"max_iterations must be a positive integer, got {self.max_iterations!r}")
        if not self.escape_radius > 0:
            raise ValueError(f"escape_radius must be positive, got {self.escape_radius!r}")
        if self.colormap not in COLORMAP_NAMES:
            raise ValueError(
                f"unknown colormap {self.colormap!r}, expected one of {', '.join(COLORMAP_NAMES)}"
            )
        if self.divergence not in DIVERGENCE_TESTS:
            raise ValueError(
                f"unknown divergence test {self.divergence!r}, "
                f"expected one of {', '.join(DIVERGENCE_TESTS)}"
            )
        if len(self.bounds) != 4:
            raise ValueError(f"bounds must be (x_min, x_max, y_min, y_max), got {self.bounds!r}")
        x_min, x_max, y_min, y_max = self.bounds
        if not (x_min < x_max and y_min < y_max):
            raise ValueError(f"bounds must be non-empty and ordered, got {self.bounds!r}")
        # Normalize so equal settings compare and hash equal
        object.__setattr__(self, 'max_iterations', int(self.max_iterations))
        object.__setattr__(self, 'bounds', tuple(float(v) for v in self.bounds))

    def replace(self, **changes):
        """Return a copy with the given fields changed (validated again)."""
        return replace(self, **changes)


# The five variants of the sketch, oldest first.
PRESETS = {
    # Bit-exact original: square window, |a+b| > 16, doubled update,
    # white in-set pixels on black.
    'first_light': RenderSettings(
        max_iterations=100,
        escape_radius=16.0,
        colormap='binary',
        divergence='sum',
        bounds=SQUARE_BOUNDS,
        double_step=True,
    ),
    'grayscale': RenderSettings(
        max_iterations=100,
        escape_radius=16.0,
        grayscale=True,
        divergence='distance',
    ),
    'two_tone': RenderSettings(
        max_iterations=100,
        escape_radius=16.0,
        colormap='two_tone',
        divergence='distance',
    ),
    'palette': RenderSettings(
        max_iterations=100,
        escape_radius=16.0,
        colormap='palette',
        divergence='manhattan',
    ),
    'ultra_fractal': RenderSettings(),
}

DEFAULT_PRESET = 'ultra_fractal'


def get_preset(name):
    """
    Get a preset by name.

    Raises:
        KeyError if name not found
    """
    try:
        return PRESETS[name]
    except KeyError:
        raise KeyError(
            f"unknown preset {name!r}, expected one of {', '.join(PRESETS)}"
        ) from None


def list_preset_names():
    """Get list of available preset names."""
    return list(PRESETS.keys())


# Used when settings.json is missing or unreadable
_FALLBACK_SETTINGS = {
    'max_iterations': {'min': 10, 'max': 1000, 'step': 1, 'default': 100},
    'escape_radius': {'min': 1, 'max': 100, 'step': 1, 'default': 2},
    'gray_scale': False,
    'colormap': 'ultra_fractal',
}


def load_settings(path=None):
    """
    Load panel settings from settings.json.

    Args:
        path: Alternative file to read (default: settings.json beside this module)

    Returns:
        Dict with slider ranges and defaults. Missing keys are filled in
        from the built-in fallback.
    """
    settings_path = path or os.path.join(os.path.dirname(__file__), 'settings.json')
    try:
        with open(settings_path, 'r') as f:
            loaded = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError) as e:
        logger.warning("Could not load %s: %s", settings_path, e)
        loaded = {}

    settings = dict(_FALLBACK_SETTINGS)
    for key, value in loaded.items():
        fallback = settings.get(key)
        if isinstance(fallback, dict) and isinstance(value, dict):
            value = {**fallback, **value}
        settings[key] = value
    return settings
