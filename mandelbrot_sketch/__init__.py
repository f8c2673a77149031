"""
Mandelbrot Set Sketch Package

Renders the Mandelbrot set by escape time on a fixed 720x400 canvas, with
Numba for the per-pixel computation and Pygame for display.

Quick Start:
    from mandelbrot_sketch import render, RenderSettings
    context = render(RenderSettings(max_iterations=100))
    context.pixels  # flat RGBA buffer

Or from command line:
    python -m mandelbrot_sketch --preset palette

Package Structure:
    - compute.py: JIT-compiled escape-time evaluator
    - colormaps.py: Color strategies (gradients, grayscale, random palette)
    - renderer.py: Render driver writing the RGBA pixel buffer
    - config.py: RenderSettings, presets and settings.json loading
    - menu.py: Settings panel (sliders, toggle, Generate button)
    - app.py: Main application and event loop

Controls:
    - Panel: edit settings, then click Generate
    - ESC: Quit
"""

from .app import run, SketchApp
from .colormaps import COLORMAPS, PaletteCache, get_colormap, list_colormap_names, map_color
from .compute import compute_iterations, escape_time, evaluate_pixel, pixel_to_complex
from .config import PRESETS, RenderSettings, get_preset, list_preset_names
from .menu import Menu
from .renderer import MandelbrotRenderer, RenderContext, render

__version__ = "1.0.0"
__all__ = [
    "run",
    "SketchApp",
    "COLORMAPS",
    "PaletteCache",
    "get_colormap",
    "list_colormap_names",
    "map_color",
    "compute_iterations",
    "escape_time",
    "evaluate_pixel",
    "pixel_to_complex",
    "PRESETS",
    "RenderSettings",
    "get_preset",
    "list_preset_names",
    "Menu",
    "MandelbrotRenderer",
    "RenderContext",
    "render",
]
