"""Overlay primitives for display.

Turns detected lines, the candle trend, and single-candle shapes (hammer,
doji) into lines, labels and circles. Output only; nothing in the pipeline
reads these back.
"""

from dataclasses import dataclass

import numpy as np

from .models import (
    CandleData,
    CircleElement,
    LabelElement,
    LineElement,
    Point,
    SupportResistanceLine,
    TechnicalElement,
)

BULLISH_COLOR = "#22c55e"
BEARISH_COLOR = "#ef4444"
HAMMER_COLOR = "#3b82f6"
DOJI_COLOR = "#f59e0b"
LABEL_BACKGROUND = "#1e293b"


@dataclass
class ComposerConfig:
    """Configuration for overlay composition."""

    # Lines above this confidence are solid and thicker
    solid_line_confidence: int = 70

    # Lines above this confidence get a text label
    label_confidence: int = 75

    # Minimum candles (exclusive) before trend and shapes are annotated
    min_candles_for_trend: int = 5

    # |slope| of closes per candle needed to draw a trend line
    min_trend_slope: float = 0.1

    # Hammer: lower shadow > ratio * body, upper shadow < ratio * body
    hammer_lower_ratio: float = 2.0
    hammer_upper_ratio: float = 0.5

    # Doji: body < ratio * (upper + lower shadow)
    doji_body_ratio: float = 0.1

    marker_radius: float = 15.0


class TechnicalElementComposer:
    """Composer for display overlay primitives."""

    def __init__(self, config: ComposerConfig | None = None) -> None:
        """Initialize composer.

        Args:
            config: Composition configuration. Uses defaults if None.
        """
        self.config = config or ComposerConfig()

    def compose(
        self, candles: list[CandleData], lines: list[SupportResistanceLine]
    ) -> list[TechnicalElement]:
        """Build overlay elements.

        Args:
            candles: Extracted candles.
            lines: Detected support/resistance lines.

        Returns:
            Elements in drawing order: lines first, then trend, then markers.
        """
        elements: list[TechnicalElement] = []
        elements.extend(self._line_elements(lines))

        if len(candles) > self.config.min_candles_for_trend:
            ordered = sorted(candles, key=lambda c: c.position.x)
            elements.extend(self._trend_elements(ordered))
            elements.extend(self._shape_markers(ordered))

        return elements

    def _line_elements(self, lines: list[SupportResistanceLine]) -> list[TechnicalElement]:
        # Lines alternate between support and resistance for display only
        elements: list[TechnicalElement] = []
        for index, line in enumerate(lines):
            is_support = index % 2 == 0
            color = BULLISH_COLOR if is_support else BEARISH_COLOR
            solid = line.confidence > self.config.solid_line_confidence

            elements.append(
                LineElement(
                    points=[Point(line.start_x, line.start_y), Point(line.end_x, line.end_y)],
                    color=color,
                    thickness=2 if solid else 1,
                    dash_pattern=None if solid else (5, 5),
                )
            )

            if line.confidence > self.config.label_confidence:
                elements.append(
                    LabelElement(
                        position=Point(10, line.start_y - 5),
                        text="Support" if is_support else "Resistance",
                        color=color,
                        background_color=LABEL_BACKGROUND,
                    )
                )
        return elements

    def _trend_elements(self, candles: list[CandleData]) -> list[TechnicalElement]:
        slope = close_slope(candles)
        if abs(slope) <= self.config.min_trend_slope:
            return []

        is_bullish = slope > 0
        color = BULLISH_COLOR if is_bullish else BEARISH_COLOR
        start, end = candles[0], candles[-1]
        start_y = start.position.y
        end_y = end.position.y - slope * (end.position.x - start.position.x)

        return [
            LineElement(
                points=[Point(start.position.x, start_y), Point(end.position.x, end_y)],
                color=color,
                thickness=2,
                dash_pattern=(5, 3),
            ),
            LabelElement(
                position=Point(end.position.x - 100, end_y - 20),
                text="Uptrend" if is_bullish else "Downtrend",
                color=color,
                background_color=LABEL_BACKGROUND,
            ),
        ]

    def _shape_markers(self, candles: list[CandleData]) -> list[TechnicalElement]:
        cfg = self.config
        elements: list[TechnicalElement] = []

        for candle in candles[1:-1]:
            body = candle.body
            upper = candle.upper_shadow
            lower = candle.lower_shadow
            center = candle.position

            if lower > cfg.hammer_lower_ratio * body and upper < cfg.hammer_upper_ratio * body:
                elements.append(
                    CircleElement(
                        center=center,
                        radius=cfg.marker_radius,
                        color=HAMMER_COLOR,
                        thickness=2,
                    )
                )
                elements.append(
                    LabelElement(
                        position=Point(center.x - 30, center.y - 30),
                        text="Hammer",
                        color=HAMMER_COLOR,
                        background_color=LABEL_BACKGROUND,
                    )
                )

            shadows = upper + lower
            if body < cfg.doji_body_ratio * shadows and shadows > 0:
                elements.append(
                    CircleElement(
                        center=center,
                        radius=cfg.marker_radius,
                        color=DOJI_COLOR,
                        thickness=2,
                    )
                )
                elements.append(
                    LabelElement(
                        position=Point(center.x - 20, center.y - 30),
                        text="Doji",
                        color=DOJI_COLOR,
                        background_color=LABEL_BACKGROUND,
                    )
                )

        return elements


def close_slope(candles: list[CandleData]) -> float:
    """Least-squares slope of closing prices against candle index."""
    n = len(candles)
    if n < 2:
        return 0.0
    x = np.arange(n, dtype=np.float64)
    y = np.array([c.close for c in candles], dtype=np.float64)
    denominator = n * float(np.sum(x * x)) - float(np.sum(x)) ** 2
    return (n * float(np.sum(x * y)) - float(np.sum(x)) * float(np.sum(y))) / denominator
