import os

# Headless pygame for the panel and app tests
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pygame
import pytest

from mandelbrot_sketch.config import RenderSettings


@pytest.fixture
def settings():
    return RenderSettings(max_iterations=100)


@pytest.fixture
def display():
    pygame.display.init()
    yield
    pygame.display.quit()
