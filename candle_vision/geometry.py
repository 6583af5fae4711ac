"""Candle geometry validation.

Filters segments by aspect ratio, then by color purity inside the bounding
box, and scores the survivors. This two-stage filter is what keeps text,
gridlines and UI chrome out of the candle list.
"""

import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from .classifier import count_classes
from .models import CandleColor, CandleShape, PixelClass, Point, Segment


@dataclass
class GeometryConfig:
    """Configuration for candle geometry validation."""

    # height / width below this is too squat for a body plus wick
    min_height_to_width: float = 0.8

    # Minimum classified pixels inside the box
    min_colored_pixels: int = 5

    # Minimum confidence (0-100) to accept a candle
    min_confidence: int = 20


def round_half_up(value: float) -> int:
    """Round to nearest integer with .5 going up."""
    return int(math.floor(value + 0.5))


class CandleGeometryAnalyzer:
    """Validator turning segments into scored candle shapes."""

    def __init__(self, config: GeometryConfig | None = None) -> None:
        """Initialize geometry analyzer.

        Args:
            config: Validation configuration. Uses defaults if None.
        """
        self.config = config or GeometryConfig()

    def analyze(self, segment: Segment, labels: NDArray[np.uint8]) -> CandleShape | None:
        """Validate a single segment.

        Args:
            segment: Candidate segment.
            labels: Label map of the buffer the segment was found in.

        Returns:
            Scored candle shape, or None if the segment is rejected.
        """
        seg_width = segment.width
        seg_height = segment.height

        if seg_height / seg_width < self.config.min_height_to_width:
            return None

        counts = count_classes(labels, segment)
        bullish = counts[PixelClass.BULLISH]
        bearish = counts[PixelClass.BEARISH]
        dark = counts[PixelClass.DARK]
        light = counts[PixelClass.LIGHT]

        total_colored = bullish + bearish + dark + light
        if total_colored < self.config.min_colored_pixels:
            return None

        # Dark bodies read as bearish, light bodies as bullish
        if dark > bearish:
            bearish += dark
        if light > bullish:
            bullish += light

        color = CandleColor.BULLISH if bullish > bearish else CandleColor.BEARISH
        dominant = bullish if color == CandleColor.BULLISH else bearish

        color_ratio = dominant / total_colored
        density_ratio = total_colored / (seg_width * seg_height)
        confidence = round_half_up(min(100.0, color_ratio * density_ratio * 100))

        if confidence < self.config.min_confidence:
            return None

        return CandleShape(
            position=Point(
                x=segment.x1 + seg_width / 2,
                y=segment.y1 + seg_height / 2,
            ),
            width=seg_width,
            height=seg_height,
            color=color,
            confidence=confidence,
        )

    def analyze_all(self, segments: list[Segment], labels: NDArray[np.uint8]) -> list[CandleShape]:
        """Validate every segment, keeping the accepted ones in input order."""
        shapes: list[CandleShape] = []
        for segment in segments:
            shape = self.analyze(segment, labels)
            if shape is not None:
                shapes.append(shape)
        return shapes
