"""Synthetic OHLC estimation.

Maps validated candle shapes to prices inside a fixed synthetic band. The
absolute values are placeholders, not calibrated to any price feed; only the
relative ordering and shape of the series is meaningful.
"""

import logging
from dataclasses import dataclass

from .models import CandleColor, CandleData, CandleShape

logger = logging.getLogger(__name__)


@dataclass
class OHLCConfig:
    """Configuration for synthetic price mapping."""

    base_price: float = 100.0
    price_range: float = 20.0


class OHLCEstimator:
    """Estimator converting pixel extents into synthetic OHLC candles."""

    def __init__(self, config: OHLCConfig | None = None) -> None:
        """Initialize estimator.

        Args:
            config: Price mapping configuration. Uses defaults if None.
        """
        self.config = config or OHLCConfig()

    def estimate(self, shapes: list[CandleShape]) -> list[CandleData]:
        """Estimate OHLC values for a set of candle shapes.

        Pixel y grows downward while price grows upward, so positions are
        inverted against the global vertical span of all candles.

        Args:
            shapes: Validated candle shapes in any order.

        Returns:
            Candles ordered by ascending x position.
        """
        if not shapes:
            return []

        ordered = sorted(shapes, key=lambda s: s.position.x)
        min_y = min(s.top for s in ordered)
        max_y = max(s.bottom for s in ordered)
        span = max_y - min_y

        base = self.config.base_price
        price_range = self.config.price_range

        candles: list[CandleData] = []
        for shape in ordered:
            if span > 0:
                normalized_top = 1 - (shape.top - min_y) / span
                normalized_bottom = 1 - (shape.bottom - min_y) / span
            else:
                normalized_top = normalized_bottom = 0.5

            high_price = base + normalized_top * price_range
            low_price = base + normalized_bottom * price_range

            if shape.color == CandleColor.BULLISH:
                open_, close = low_price, high_price
            else:
                open_, close = high_price, low_price

            candles.append(
                CandleData(
                    position=shape.position,
                    width=shape.width,
                    height=shape.height,
                    color=shape.color,
                    open=open_,
                    high=max(open_, close),
                    low=min(open_, close),
                    close=close,
                    confidence=shape.confidence,
                )
            )

        return candles


def validate_candles(candles: list[CandleData]) -> tuple[list[CandleData], int]:
    """Drop candles that break the OHLC invariant.

    Args:
        candles: Candles to check.

    Returns:
        Tuple of (valid candles in input order, number discarded).
    """
    valid = [c for c in candles if c.is_valid]
    discarded = len(candles) - len(valid)
    if discarded:
        logger.warning("%d candles discarded for invalid OHLC data", discarded)
    return valid, discarded
