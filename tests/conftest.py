"""Shared pytest fixtures for candle vision tests."""

from __future__ import annotations

import numpy as np
import pytest

BACKGROUND = (20, 20, 20)
GREEN = (30, 200, 30)
RED = (200, 30, 30)

# (x, y, width, height, color) of the candles drawn on the synthetic chart
CHART_CANDLES = [
    (40, 120, 6, 40, GREEN),
    (80, 100, 6, 30, RED),
    (120, 90, 6, 36, GREEN),
    (160, 70, 6, 24, RED),
    (200, 60, 6, 30, GREEN),
    (240, 50, 6, 20, RED),
]


def blank_bitmap(
    width: int, height: int, color: tuple[int, int, int] = BACKGROUND
) -> np.ndarray:
    """Create an opaque RGBA bitmap filled with one color."""
    image = np.zeros((height, width, 4), dtype=np.uint8)
    image[..., :3] = color
    image[..., 3] = 255
    return image


def fill_rect(
    image: np.ndarray, x: int, y: int, width: int, height: int, color: tuple[int, int, int]
) -> None:
    """Paint a solid rectangle in place."""
    image[y : y + height, x : x + width, :3] = color


@pytest.fixture
def chart_bitmap() -> np.ndarray:
    """400x300 dark chart with three green and three red candles."""
    image = blank_bitmap(400, 300)
    for x, y, width, height, color in CHART_CANDLES:
        fill_rect(image, x, y, width, height, color)
    return image


@pytest.fixture
def uniform_dark_bitmap() -> np.ndarray:
    """400x300 bitmap with nothing but dark background."""
    return blank_bitmap(400, 300)
