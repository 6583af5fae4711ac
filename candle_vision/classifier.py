"""Per-pixel color classification.

Labels every pixel as bullish (green), bearish (red), dark, light, or
unclassified. These thresholds are looser than the display highlighting in
`preprocessor` on purpose; the two sets are kept separate.
"""

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from .models import PixelClass, Segment


@dataclass
class ColorThresholds:
    """Thresholds for segmentation-grade color classification."""

    # Dominant channel must exceed both others by this factor
    dominance_ratio: float = 1.2

    # ...and be brighter than this
    min_channel: int = 70

    # Mean of r, g, b below/above these is dark/light
    dark_max: float = 30.0
    light_min: float = 220.0


class ColorClassifier:
    """Classifier mapping RGBA pixels to `PixelClass` labels."""

    def __init__(self, thresholds: ColorThresholds | None = None) -> None:
        """Initialize classifier.

        Args:
            thresholds: Classification thresholds. Uses defaults if None.
        """
        self.thresholds = thresholds or ColorThresholds()

    def classify(self, image: NDArray[np.uint8]) -> NDArray[np.uint8]:
        """Label every pixel.

        Args:
            image: RGBA bitmap.

        Returns:
            (H, W) uint8 label map of `PixelClass` values.
        """
        t = self.thresholds
        rgb = image[..., :3].astype(np.float64)
        r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]

        labels = np.zeros(image.shape[:2], dtype=np.uint8)

        bullish = (g > t.dominance_ratio * r) & (g > t.dominance_ratio * b) & (g > t.min_channel)
        bearish = (r > t.dominance_ratio * g) & (r > t.dominance_ratio * b) & (r > t.min_channel)
        bearish &= ~bullish

        mean = (r + g + b) / 3
        unlabeled = ~(bullish | bearish)
        dark = unlabeled & (mean < t.dark_max)
        light = unlabeled & (mean > t.light_min)

        labels[bullish] = PixelClass.BULLISH
        labels[bearish] = PixelClass.BEARISH
        labels[dark] = PixelClass.DARK
        labels[light] = PixelClass.LIGHT
        return labels

    def classify_pixel(self, r: int, g: int, b: int) -> PixelClass:
        """Label a single pixel."""
        t = self.thresholds
        if g > t.dominance_ratio * r and g > t.dominance_ratio * b and g > t.min_channel:
            return PixelClass.BULLISH
        if r > t.dominance_ratio * g and r > t.dominance_ratio * b and r > t.min_channel:
            return PixelClass.BEARISH
        mean = (r + g + b) / 3
        if mean < t.dark_max:
            return PixelClass.DARK
        if mean > t.light_min:
            return PixelClass.LIGHT
        return PixelClass.NONE


def count_classes(labels: NDArray[np.uint8], segment: Segment) -> dict[PixelClass, int]:
    """Tally pixel classes inside a segment's inclusive bounding box.

    Args:
        labels: Label map from `ColorClassifier.classify`.
        segment: Segment whose box to count.

    Returns:
        Count per class, every class present as a key.
    """
    window = labels[segment.y1 : segment.y2 + 1, segment.x1 : segment.x2 + 1]
    counts = np.bincount(window.ravel(), minlength=len(PixelClass))
    return {cls: int(counts[cls]) for cls in PixelClass}
