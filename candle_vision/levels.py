"""Support and resistance level detection.

Finds horizontal lines in a chart bitmap from a smoothed per-row histogram
of dark pixels, and provides proximity helpers over externally supplied
price levels.
"""

import logging
import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from .geometry import round_half_up
from .models import ConfluenceLevel, SupportResistanceLine

logger = logging.getLogger(__name__)


@dataclass
class LineDetectorConfig:
    """Configuration for support/resistance line detection."""

    # r + g + b below this counts as a dark (line) pixel
    dark_sum_threshold: int = 450

    # Moving-average half width (window = 2 * half + 1 rows)
    smoothing_half_window: int = 2

    # Smoothed density must exceed this fraction of the image width
    min_density_ratio: float = 0.2

    # Peaks closer than this fraction of the height to an accepted peak are dropped
    min_spacing_ratio: float = 0.03

    # Strict local maximum over +/- this many rows
    peak_window: int = 2


class SupportResistanceDetector:
    """Detector for horizontal support/resistance lines in a bitmap."""

    def __init__(self, config: LineDetectorConfig | None = None) -> None:
        """Initialize line detector.

        Args:
            config: Detection configuration. Uses defaults if None.
        """
        self.config = config or LineDetectorConfig()

    def detect(self, image: NDArray[np.uint8]) -> list[SupportResistanceLine]:
        """Detect horizontal lines.

        Args:
            image: RGBA bitmap.

        Returns:
            Full-width lines in top-to-bottom scan order.
        """
        height, width = image.shape[:2]
        if width == 0 or height < 2 * self.config.smoothing_half_window + 1:
            return []

        density = self._smoothed_density(image)
        peaks = self._find_peaks(density, width, height)

        lines = [
            SupportResistanceLine(
                start_x=0,
                start_y=y,
                end_x=width - 1,
                end_y=y,
                confidence=min(100, round_half_up(density[y] / width * 100)),
            )
            for y in peaks
        ]
        logger.debug("Detected %d support/resistance lines", len(lines))
        return lines

    def row_density(self, image: NDArray[np.uint8]) -> NDArray[np.int64]:
        """Count dark pixels in each row."""
        channel_sum = image[..., :3].astype(np.int64).sum(axis=2)
        return (channel_sum < self.config.dark_sum_threshold).sum(axis=1)

    def _smoothed_density(self, image: NDArray[np.uint8]) -> NDArray[np.float64]:
        """Moving average of the row histogram, window clipped at the edges."""
        density = self.row_density(image).astype(np.float64)
        kernel = np.ones(2 * self.config.smoothing_half_window + 1)
        sums = np.convolve(density, kernel, mode="same")
        counts = np.convolve(np.ones_like(density), kernel, mode="same")
        return sums / counts

    def _find_peaks(self, density: NDArray[np.float64], width: int, height: int) -> list[int]:
        """Strict local maxima above threshold, spaced by first-found order."""
        window = self.config.peak_window
        threshold = width * self.config.min_density_ratio
        min_distance = math.ceil(height * self.config.min_spacing_ratio)

        peaks: list[int] = []
        for y in range(window, height - window):
            value = density[y]
            if value <= threshold:
                continue

            neighbors = np.concatenate((density[y - window : y], density[y + 1 : y + window + 1]))
            if not np.all(value > neighbors):
                continue

            if all(abs(existing - y) >= min_distance for existing in peaks):
                peaks.append(y)

        return peaks


def find_nearest_level(
    price: float, levels: list[ConfluenceLevel], tolerance_pct: float | None = None
) -> ConfluenceLevel | None:
    """Find the nearest price level to a given price.

    Args:
        price: Current price to check.
        levels: List of price levels.
        tolerance_pct: Maximum distance as percentage of price (0.1 = 0.1%).
            No limit if None.

    Returns:
        Nearest level within tolerance, or None. The first of equally
        distant levels wins.
    """
    nearest: ConfluenceLevel | None = None
    min_distance = float("inf")

    for level in levels:
        distance = abs(level.price - price)
        if tolerance_pct is not None and distance_pct(level.price, price) > tolerance_pct:
            continue
        if distance < min_distance:
            min_distance = distance
            nearest = level

    return nearest


def distance_pct(level_price: float, price: float) -> float:
    """Absolute distance between a level and a price, as percent of price."""
    if price <= 0:
        return float("inf")
    return abs((level_price - price) / price) * 100
