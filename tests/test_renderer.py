import numpy as np
import pytest

from mandelbrot_sketch.colormaps import BLACK, ULTRA_FRACTAL_ANCHORS, get_colormap
from mandelbrot_sketch.config import RenderSettings, get_preset
from mandelbrot_sketch.renderer import MandelbrotRenderer, render


def test_full_canvas_scenario():
    context = render(RenderSettings(max_iterations=100))

    assert context.pixels.shape == (720 * 400 * 4,)
    assert context.pixels.dtype == np.uint8
    # c = (-2.5, -1.5) escapes at once: first anchor
    assert context.counts[0, 0] in (0, 1)
    assert context.pixel(0, 0)[:3] == ULTRA_FRACTAL_ANCHORS[0]
    # c = (-0.5, 0) is in the main cardioid
    assert context.counts[200, 360] == 100
    assert context.pixel(360, 200) == BLACK + (255,)


def test_alpha_is_always_opaque():
    context = MandelbrotRenderer(40, 30).render(RenderSettings(max_iterations=30))
    assert np.all(context.as_image()[:, :, 3] == 255)


def test_buffer_layout_is_row_major(settings):
    width, height = 50, 20
    context = MandelbrotRenderer(width, height).render(settings)
    table = get_colormap('ultra_fractal', settings.max_iterations)
    for i, j in [(0, 0), (49, 0), (0, 19), (17, 11), (49, 19)]:
        o = 4 * (i + j * width)
        expected = tuple(table[context.counts[j, i]])
        assert tuple(context.pixels[o:o + 3]) == expected


@pytest.mark.parametrize("settings", [
    RenderSettings(max_iterations=40),
    RenderSettings(max_iterations=40, grayscale=True),
    RenderSettings(max_iterations=40, colormap='two_tone', divergence='distance', escape_radius=16.0),
    RenderSettings(max_iterations=40, colormap='palette', divergence='manhattan', seed=5),
    get_preset('first_light'),
], ids=["ultra_fractal", "grayscale", "two_tone", "palette", "first_light"])
def test_vectorized_matches_sequential(settings):
    renderer = MandelbrotRenderer(32, 18)
    fast = renderer.render(settings).pixels.copy()
    slow = renderer.render_sequential(settings).pixels
    np.testing.assert_array_equal(fast, slow)


def test_palette_reused_without_reset():
    renderer = MandelbrotRenderer(40, 24)
    first = renderer.render(RenderSettings(max_iterations=60, colormap='palette', seed=1))
    second = renderer.render(
        RenderSettings(max_iterations=60, colormap='palette', seed=2),
        reset_palette=False,
    )
    assert second.palette is first.palette
    np.testing.assert_array_equal(first.pixels, second.pixels)


def test_palette_reset_keeps_in_set_black():
    renderer = MandelbrotRenderer(40, 24)
    settings = RenderSettings(max_iterations=60, colormap='palette', seed=1)
    first = renderer.render(settings)
    second = renderer.render(settings.replace(seed=2))

    assert second.palette is not first.palette
    in_set = second.counts == 60
    assert in_set.any()
    assert np.all(second.as_image()[in_set][:, :3] == 0)


def test_palette_not_reused_when_max_iterations_changes():
    renderer = MandelbrotRenderer(20, 10)
    first = renderer.render(RenderSettings(max_iterations=60, colormap='palette'))
    second = renderer.render(RenderSettings(max_iterations=80, colormap='palette'),
                             reset_palette=False)
    assert second.palette is not first.palette
    assert second.palette.color_for(80) == BLACK


def test_non_palette_render_has_no_cache(settings):
    context = MandelbrotRenderer(10, 10).render(settings)
    assert context.palette is None


def test_first_light_is_black_and_white():
    context = MandelbrotRenderer(60, 40).render(get_preset('first_light'))
    rgb = context.as_image()[:, :, :3]
    assert set(np.unique(rgb)) <= {0, 255}
    assert np.all((rgb[context.counts == 100] == 255))


def test_renderer_keeps_last_context(settings):
    renderer = MandelbrotRenderer(10, 8)
    assert renderer.pixels_as_image() is None
    context = renderer.render(settings)
    assert renderer.context is context
    assert renderer.pixels_as_image().shape == (8, 10, 4)


@pytest.mark.parametrize("size", [(0, 10), (10, 0), (-5, 5)])
def test_invalid_canvas_size(size):
    with pytest.raises(ValueError):
        MandelbrotRenderer(*size)
