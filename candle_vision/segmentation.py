"""Connected-component segmentation of classified pixels.

Groups 8-connected pixels sharing a `PixelClass` into candidate candle
segments. Labeling is delegated to OpenCV, which touches every pixel once per
class mask; segments are reported in raster discovery order (by the first
pixel of each component, rows top to bottom, columns left to right).
"""

import logging
from dataclasses import dataclass

import cv2  # type: ignore[import-not-found,unused-ignore]
import numpy as np
from numpy.typing import NDArray

from .models import PixelClass, Segment

logger = logging.getLogger(__name__)

SEGMENTABLE_CLASSES = (
    PixelClass.BULLISH,
    PixelClass.BEARISH,
    PixelClass.DARK,
    PixelClass.LIGHT,
)


@dataclass
class SegmenterConfig:
    """Configuration for candle segmentation."""

    # Components outside this pixel-area band are noise or not candles
    min_area: int = 5
    max_area: int = 2000


class CandleSegmenter:
    """Segmenter producing candidate candle shapes from a label map."""

    def __init__(self, config: SegmenterConfig | None = None) -> None:
        """Initialize segmenter.

        Args:
            config: Segmentation configuration. Uses defaults if None.
        """
        self.config = config or SegmenterConfig()

    def segment(self, labels: NDArray[np.uint8]) -> list[Segment]:
        """Find candidate segments.

        Args:
            labels: (H, W) label map from `ColorClassifier.classify`.

        Returns:
            Segments in raster discovery order.
        """
        found: list[tuple[int, Segment]] = []

        for pixel_class in SEGMENTABLE_CLASSES:
            mask = (labels == pixel_class).astype(np.uint8)
            if not mask.any():
                continue

            count, components, stats, _ = cv2.connectedComponentsWithStats(mask, connectivity=8)
            # First raster index of every component label (0 is "not this class")
            _, first_index = np.unique(components.ravel(), return_index=True)

            for label in range(1, count):
                area = int(stats[label, cv2.CC_STAT_AREA])
                x1 = int(stats[label, cv2.CC_STAT_LEFT])
                y1 = int(stats[label, cv2.CC_STAT_TOP])
                x2 = x1 + int(stats[label, cv2.CC_STAT_WIDTH]) - 1
                y2 = y1 + int(stats[label, cv2.CC_STAT_HEIGHT]) - 1

                if not self._keep(area, x1, y1, x2, y2):
                    continue

                found.append(
                    (
                        int(first_index[label]),
                        Segment(x1=x1, y1=y1, x2=x2, y2=y2, area=area, pixel_class=pixel_class),
                    )
                )

        found.sort(key=lambda item: item[0])
        segments = [segment for _, segment in found]
        logger.debug("Segmentation produced %d candidate segments", len(segments))
        return segments

    def _keep(self, area: int, x1: int, y1: int, x2: int, y2: int) -> bool:
        """Area band check; single-row or single-column components are noise."""
        return (
            self.config.min_area <= area <= self.config.max_area
            and (x2 - x1) > 0
            and (y2 - y1) > 0
        )
