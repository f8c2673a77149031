import threading
from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from mandelbrot_sketch.colormaps import (
    BLACK,
    GRADIENT_SEGMENTS,
    TWO_TONE_START,
    ULTRA_FRACTAL_ANCHORS,
    WHITE,
    PaletteCache,
    binary_color,
    get_colormap,
    gradient_color,
    grayscale_color,
    lerp_color,
    list_colormap_names,
    map_color,
    two_tone_color,
    ultra_fractal_color,
)
from mandelbrot_sketch.config import RenderSettings


def test_lerp_color_endpoints_and_midpoint():
    assert lerp_color((0, 0, 0), (255, 100, 10), 0.0) == (0, 0, 0)
    assert lerp_color((0, 0, 0), (255, 100, 10), 1.0) == (255, 100, 10)
    assert lerp_color((0, 0, 0), (200, 100, 10), 0.5) == (100, 50, 5)


def test_lerp_color_clips():
    assert lerp_color((0, 0, 0), (255, 255, 255), 1.5) == (255, 255, 255)


def test_grayscale_is_monotonic():
    max_iter = 200
    levels = [grayscale_color(n, max_iter)[0] for n in range(max_iter + 1)]
    assert levels == sorted(levels)
    assert grayscale_color(0, max_iter) == (0, 0, 0)
    assert grayscale_color(max_iter, max_iter) == (255, 255, 255)


def test_grayscale_square_root_contrast():
    # A quarter of the way up is already half bright
    assert grayscale_color(25, 100) == (128, 128, 128)


def test_gradient_endpoints():
    assert gradient_color(0.0) == ULTRA_FRACTAL_ANCHORS[0]
    assert gradient_color(1.0) == ULTRA_FRACTAL_ANCHORS[-1]


def test_gradient_hits_anchor_at_segment_starts():
    assert gradient_color(0.16) == ULTRA_FRACTAL_ANCHORS[1]
    assert gradient_color(0.42) == ULTRA_FRACTAL_ANCHORS[2]
    assert gradient_color(0.6425) == ULTRA_FRACTAL_ANCHORS[3]


def test_gradient_uses_cubed_weight():
    # Halfway through the first segment the weight is 0.5 ** 3
    expected = lerp_color(ULTRA_FRACTAL_ANCHORS[0], ULTRA_FRACTAL_ANCHORS[1], 0.125)
    assert gradient_color(0.08) == expected


def test_segment_table_covers_unit_interval():
    assert GRADIENT_SEGMENTS[0][0] == 0.0
    assert GRADIENT_SEGMENTS[-1][1] == 1.0
    for (_, hi, _, end), (lo, _, start, _) in zip(GRADIENT_SEGMENTS, GRADIENT_SEGMENTS[1:]):
        assert hi == lo
        assert end == start


def test_in_set_colors():
    assert ultra_fractal_color(100, 100) == BLACK
    assert two_tone_color(100, 100) == BLACK
    assert binary_color(100, 100) == WHITE
    assert binary_color(99, 100) == BLACK


def test_two_tone_starts_at_first_color():
    assert two_tone_color(0, 100) == TWO_TONE_START


def test_tables_match_scalar_functions():
    table = get_colormap('ultra_fractal', 50)
    assert table.shape == (51, 3)
    assert table.dtype == np.uint8
    for n in (0, 7, 25, 49, 50):
        assert tuple(table[n]) == ultra_fractal_color(n, 50)


def test_unknown_colormap():
    with pytest.raises(KeyError):
        get_colormap('sepia', 10)
    assert 'palette' in list_colormap_names()


def test_palette_preseeds_in_set_black():
    palette = PaletteCache(100, seed=3)
    assert 100 in palette
    assert palette.color_for(100) == BLACK


def test_palette_grayscale_has_no_preseed():
    palette = PaletteCache(100, grayscale=True, seed=3)
    assert len(palette) == 0


def test_palette_colors_are_stable():
    palette = PaletteCache(100, seed=11)
    first = palette.color_for(42)
    assert all(0 <= v <= 255 for v in first)
    palette.color_for(7)
    assert palette.color_for(42) == first


def test_palette_reset_clears_and_reseeds():
    palette = PaletteCache(100, seed=1)
    palette.color_for(5)
    palette.color_for(6)
    palette.reset(seed=1)
    assert len(palette) == 1
    assert palette.color_for(100) == BLACK

    again = PaletteCache(100, seed=1)
    assert palette.color_for(5) == again.color_for(5)


def test_palette_lookup_assigns_in_first_seen_order():
    stream = [5, 3, 5, 100, 7, 3]
    looked_up = PaletteCache(100, seed=9).lookup(stream)

    sequential = PaletteCache(100, seed=9)
    expected = [sequential.color_for(n) for n in stream]

    assert [tuple(c) for c in looked_up] == expected
    assert tuple(looked_up[3]) == BLACK


def test_palette_concurrent_first_sight_gets_one_color():
    palette = PaletteCache(100, seed=0)
    with ThreadPoolExecutor(max_workers=8) as pool:
        colors = list(pool.map(palette.color_for, [17] * 64))
    assert len(set(colors)) == 1


def test_map_color_grayscale_overrides_colormap():
    settings = RenderSettings(max_iterations=100, grayscale=True, colormap='ultra_fractal')
    assert map_color(100, settings) == (255, 255, 255)
    assert map_color(25, settings) == grayscale_color(25, 100)


def test_map_color_palette_needs_cache():
    settings = RenderSettings(colormap='palette')
    with pytest.raises(ValueError):
        map_color(3, settings)
    assert map_color(100, settings, PaletteCache(100)) == BLACK


def test_palette_lookup_waits_for_lock():
    palette = PaletteCache(100, seed=2)
    results = []

    with palette.lock:
        worker = threading.Thread(target=lambda: results.append(palette.lookup([4, 9, 4])))
        worker.start()
        worker.join(timeout=0.2)
        assert worker.is_alive()
        assert 4 not in palette

    worker.join()
    assert [tuple(c) for c in results[0]] == [palette.color_for(4), palette.color_for(9), palette.color_for(4)]


def test_palette_concurrent_lookups_agree():
    palette = PaletteCache(100, seed=0)
    stream = np.arange(60) % 13
    with ThreadPoolExecutor(max_workers=8) as pool:
        tables = list(pool.map(palette.lookup, [stream] * 16))
    for table in tables[1:]:
        np.testing.assert_array_equal(table, tables[0])
