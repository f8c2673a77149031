"""
Escape-time computation using Numba JIT compilation.

This module holds the performance-critical part of the renderer:
- Mapping a pixel coordinate to a sample point of the complex plane
- Iterating Z(n+1) = Z(n)^2 + c until divergence or the iteration cap
- Filling a whole iteration grid in one (parallel) pass

Supported divergence tests:
- 0: a^2 + b^2 > R^2     (modulus, the standard escape radius test)
- 1: |a + b| > R          (sum, used by the first sketch)
- 2: sqrt(a^2 + b^2) > R  (distance)
- 3: |a| + |b| > R        (manhattan)

Whatever the test, a trajectory that overflows to inf/NaN counts as escaped.
"""

import math

import numpy as np
from numba import jit, prange


# Divergence test IDs
DIVERGE_MODULUS = 0     # a² + b² > R²
DIVERGE_SUM = 1         # |a + b| > R
DIVERGE_DISTANCE = 2    # √(a² + b²) > R
DIVERGE_MANHATTAN = 3   # |a| + |b| > R

DIVERGENCE_TESTS = {
    'modulus': DIVERGE_MODULUS,
    'sum': DIVERGE_SUM,
    'distance': DIVERGE_DISTANCE,
    'manhattan': DIVERGE_MANHATTAN,
}


def divergence_id(name):
    """
    Get the numeric ID of a divergence test by name.

    Raises:
        KeyError if name not found
    """
    return DIVERGENCE_TESTS[name]


def list_divergence_names():
    """Get list of available divergence test names."""
    return list(DIVERGENCE_TESTS.keys())


@jit(nopython=True, cache=True)
def pixel_to_complex(i, j, width, height, x_min, x_max, y_min, y_max):
    """
    Map pixel (i, j) to the sample point (a, b).

    Column i in [0, width) maps linearly onto [x_min, x_max) and row j
    in [0, height) onto [y_min, y_max).
    """
    a = x_min + (i / width) * (x_max - x_min)
    b = y_min + (j / height) * (y_max - y_min)
    return a, b


@jit(nopython=True, cache=True)
def has_diverged(a, b, escape_radius, divergence):
    """
    Apply the selected divergence test to the current Z = a + bi.

    Args:
        a, b: Real and imaginary parts of Z
        escape_radius: Threshold R of the test
        divergence: Which test to use (see DIVERGE_* constants)

    Returns:
        True if the point is considered escaped
    """
    if not (math.isfinite(a) and math.isfinite(b)):
        return True

    if divergence == DIVERGE_SUM:
        return abs(a + b) > escape_radius
    elif divergence == DIVERGE_DISTANCE:
        return math.sqrt(a * a + b * b) > escape_radius
    elif divergence == DIVERGE_MANHATTAN:
        return abs(a) + abs(b) > escape_radius

    # Default: squared modulus against squared radius
    return a * a + b * b > escape_radius * escape_radius


@jit(nopython=True, cache=True)
def escape_time(ca, cb, max_iter, escape_radius=2.0, divergence=DIVERGE_MODULUS,
                double_step=False):
    """
    Count iterations of Z(n+1) = Z(n)^2 + c before Z escapes.

    Z starts at c itself. Each pass squares Z and adds c, then applies
    the divergence test; n is only incremented when the point survives.

    Args:
        ca, cb: Real and imaginary parts of c
        max_iter: Iteration cap
        escape_radius: Threshold R of the divergence test
        divergence: Which divergence test to use
        double_step: Apply the update twice per pass before testing.
            Reproduces the first sketch exactly; off by default.

    Returns:
        Iteration count in [0, max_iter]. max_iter means "did not escape".
    """
    a = float(ca)
    b = float(cb)
    n = 0
    while n < max_iter:
        a, b = a * a - b * b + ca, 2.0 * a * b + cb
        if double_step:
            a, b = a * a - b * b + ca, 2.0 * a * b + cb

        if has_diverged(a, b, escape_radius, divergence):
            break
        n += 1
    return n


@jit(nopython=True, parallel=True, cache=True)
def compute_iterations(x_min, x_max, y_min, y_max, width, height, max_iter,
                       escape_radius=2.0, divergence=DIVERGE_MODULUS,
                       double_step=False):
    """
    Compute the escape-time grid for a whole raster.

    Columns are distributed across threads; every pixel is independent
    so the order of evaluation does not affect the result.

    Args:
        x_min, x_max: Real axis bounds in the complex plane
        y_min, y_max: Imaginary axis bounds in the complex plane
        width, height: Raster dimensions in pixels
        max_iter: Iteration cap
        escape_radius: Threshold R of the divergence test
        divergence: Which divergence test to use
        double_step: See escape_time

    Returns:
        2D int64 array of shape (height, width); result[j, i] is the
        count for pixel (i, j).
    """
    result = np.zeros((height, width), dtype=np.int64)

    for i in prange(width):
        for j in range(height):
            a, b = pixel_to_complex(i, j, width, height, x_min, x_max, y_min, y_max)
            result[j, i] = escape_time(a, b, max_iter, escape_radius,
                                       divergence, double_step)

    return result


def compute_for_settings(settings, width, height):
    """Run compute_iterations with the parameters held by a RenderSettings."""
    x_min, x_max, y_min, y_max = settings.bounds
    return compute_iterations(
        float(x_min), float(x_max), float(y_min), float(y_max),
        width, height, settings.max_iterations,
        float(settings.escape_radius),
        divergence_id(settings.divergence),
        settings.double_step
    )


def evaluate_pixel(i, j, settings, width, height):
    """
    Escape-time count for a single pixel under the given settings.

    This is the scalar counterpart of compute_for_settings and is used by
    the sequential reference renderer.
    """
    x_min, x_max, y_min, y_max = settings.bounds
    a, b = pixel_to_complex(i, j, width, height,
                            float(x_min), float(x_max), float(y_min), float(y_max))
    return escape_time(a, b, settings.max_iterations, float(settings.escape_radius),
                       divergence_id(settings.divergence), settings.double_step)


def warmup_jit():
    """
    Warm up JIT compilation with a tiny raster.

    Call this once at startup to pre-compile the Numba functions,
    avoiding a delay on the first Generate.
    """
    _ = compute_iterations(-2.0, 2.0, -2.0, 2.0, 4, 4, 4)
    _ = escape_time(0.0, 0.0, 4)
