"""Chart region detection.

Finds the plot area of a screenshot by accumulating the bounding box of
chart-like pixels (grid, candle-colored, line-like, or mid-luminance).
When the box is implausible the centered default crop is assumed instead,
so detection never fails outright.
"""

import logging
import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from .models import BoundingBox, RegionDetection

logger = logging.getLogger(__name__)


@dataclass
class RegionDetectorConfig:
    """Configuration for chart region detection."""

    # Margin added on each side, as a fraction of the dimension
    margin_ratio: float = 0.02
    min_margin: int = 5

    # Acceptance criteria for the detected box
    min_size: int = 100
    min_coverage: float = 0.3

    # Fallback: centered rectangle covering this fraction of each dimension
    default_coverage: float = 0.85


class RegionDetector:
    """Detector for the chart plot area."""

    def __init__(self, config: RegionDetectorConfig | None = None) -> None:
        """Initialize region detector.

        Args:
            config: Detection configuration. Uses defaults if None.
        """
        self.config = config or RegionDetectorConfig()

    def detect(self, image: NDArray[np.uint8]) -> RegionDetection:
        """Detect the chart region.

        Args:
            image: RGBA bitmap.

        Returns:
            Detected region, or the centered default with `detected=False`.
        """
        height, width = image.shape[:2]
        mask = self.chart_pixel_mask(image)

        # A perfectly uniform bitmap has no chart structure to find
        uniform = image.size == 0 or bool(np.all(image[..., :3] == image[0, 0, :3]))
        if uniform or not mask.any():
            logger.info("Automatic region detection found no chart pixels, using default region")
            return self.default_region(width, height)

        rows = np.flatnonzero(mask.any(axis=1))
        cols = np.flatnonzero(mask.any(axis=0))
        top, bottom = int(rows[0]), int(rows[-1])
        left, right = int(cols[0]), int(cols[-1])

        margin_x = max(self.config.min_margin, math.floor(width * self.config.margin_ratio))
        margin_y = max(self.config.min_margin, math.floor(height * self.config.margin_ratio))
        left = max(0, left - margin_x)
        top = max(0, top - margin_y)
        right = min(width, right + margin_x)
        bottom = min(height, bottom + margin_y)

        box_width = right - left
        box_height = bottom - top

        if (
            box_width > self.config.min_size
            and box_height > self.config.min_size
            and box_width / width > self.config.min_coverage
            and box_height / height > self.config.min_coverage
        ):
            return RegionDetection(
                region=BoundingBox(x=left, y=top, width=box_width, height=box_height),
                detected=True,
                message="Chart region detected",
            )

        logger.info(
            "Detected region %dx%d rejected, using default region", box_width, box_height
        )
        return self.default_region(width, height)

    def chart_pixel_mask(self, image: NDArray[np.uint8]) -> NDArray[np.bool_]:
        """Mark pixels that look like part of a chart.

        Args:
            image: RGBA bitmap.

        Returns:
            Boolean mask of shape (H, W).
        """
        rgb = image[..., :3].astype(np.float64)
        r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]
        avg = (r + g + b) / 3
        rg = np.abs(r - g)
        rb = np.abs(r - b)

        is_grid = (rg < 10) & (rb < 10) & (avg > 180) & (avg < 230)
        is_candle = ((r > g * 1.5) & (r > b * 1.5)) | ((g > r * 1.5) & (g > b * 1.5))
        is_line = (rg < 20) & (rb < 20) & (avg < 160)
        is_mid = (avg < 220) & (avg > 30)
        return is_grid | is_candle | is_line | is_mid

    def default_region(self, width: int, height: int) -> RegionDetection:
        """Centered default rectangle used when detection is not trusted."""
        coverage = self.config.default_coverage
        region_width = int(round(width * coverage))
        region_height = int(round(height * coverage))
        return RegionDetection(
            region=BoundingBox(
                x=(width - region_width) // 2,
                y=(height - region_height) // 2,
                width=region_width,
                height=region_height,
            ),
            detected=False,
            message="Region estimated automatically",
        )


def detect_chart_region(image: NDArray[np.uint8]) -> RegionDetection:
    """Convenience function to detect the chart region with default config."""
    return RegionDetector().detect(image)
