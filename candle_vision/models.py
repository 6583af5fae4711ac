"""Data models for candle vision.

Defines dataclasses for extracted candles, pixel segments, detected lines,
overlay elements, and the M1 entry-context validation record.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any


class PixelClass(IntEnum):
    """Label assigned to a single pixel by the color classifier."""

    NONE = 0
    BULLISH = 1
    BEARISH = 2
    DARK = 3
    LIGHT = 4


class CandleColor(str, Enum):
    """Direction of a candle body as read from its color."""

    BULLISH = "bullish"
    BEARISH = "bearish"


class Signal(str, Enum):
    """Directional signal produced by an upstream analyzer."""

    BUY = "buy"
    SELL = "sell"
    NEUTRAL = "neutral"


class TrendDirection(str, Enum):
    """Short-term trend over the most recent candles."""

    UP = "up"
    DOWN = "down"
    FLAT = "flat"


class Recommendation(str, Enum):
    """Final gate decision for a signal."""

    ENTER = "enter"
    WAIT = "wait"
    SKIP = "skip"


class LevelType(str, Enum):
    """Type of price level."""

    SUPPORT = "support"
    RESISTANCE = "resistance"


class LevelStrength(str, Enum):
    """Strength classification of a price level."""

    STRONG = "strong"
    WEAK = "weak"


class VolumeTrend(str, Enum):
    """Direction of recent volume."""

    INCREASING = "increasing"
    DECREASING = "decreasing"
    NEUTRAL = "neutral"


class ElementKind(str, Enum):
    """Kind of overlay primitive."""

    LINE = "line"
    LABEL = "label"
    CIRCLE = "circle"


@dataclass(frozen=True)
class Point:
    """A point in image coordinates."""

    x: float
    y: float


@dataclass
class BoundingBox:
    """Rectangle in image coordinates."""

    x: int
    y: int
    width: int
    height: int

    @property
    def x2(self) -> int:
        """Right edge x coordinate."""
        return self.x + self.width

    @property
    def y2(self) -> int:
        """Bottom edge y coordinate."""
        return self.y + self.height

    @property
    def center(self) -> tuple[int, int]:
        """Center point of bounding box."""
        return (self.x + self.width // 2, self.y + self.height // 2)

    def to_dict(self) -> dict[str, int]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class CircleRegion:
    """Circular user selection, cropped to its bounding square."""

    center_x: int
    center_y: int
    radius: int


@dataclass
class RegionDetection:
    """Chart plot area found by the region detector."""

    region: BoundingBox
    detected: bool  # False when the centered default was assumed
    message: str = ""


@dataclass
class QualityReport:
    """Verdict on whether a bitmap is analyzable."""

    is_good_quality: bool
    has_good_resolution: bool
    has_good_contrast: bool
    has_low_noise: bool
    contrast: float
    noise: float
    message: str
    details: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_good_quality": self.is_good_quality,
            "has_good_resolution": self.has_good_resolution,
            "has_good_contrast": self.has_good_contrast,
            "has_low_noise": self.has_low_noise,
            "contrast": self.contrast,
            "noise": self.noise,
            "message": self.message,
            "details": dict(self.details),
        }


@dataclass(frozen=True)
class Segment:
    """Connected group of same-class pixels; inclusive bounding box."""

    x1: int
    y1: int
    x2: int
    y2: int
    area: int
    pixel_class: PixelClass

    @property
    def width(self) -> int:
        return self.x2 - self.x1 + 1

    @property
    def height(self) -> int:
        return self.y2 - self.y1 + 1


@dataclass(frozen=True)
class CandleShape:
    """A segment that passed geometry validation, before price mapping.

    `position` is the center of the segment bounding box, not the mean of its
    pixels. `top` and `bottom` are derived from it, so the price mapping sees
    the full vertical extent even for hollow or irregular segments.
    """

    position: Point  # center of the bounding box
    width: int
    height: int
    color: CandleColor
    confidence: int

    @property
    def top(self) -> float:
        return self.position.y - self.height / 2

    @property
    def bottom(self) -> float:
        return self.position.y + self.height / 2


@dataclass(frozen=True)
class CandleData:
    """Candlestick with synthetic OHLC prices and its pixel geometry."""

    position: Point  # bounding-box center, relative to the analyzed crop
    width: int
    height: int
    color: CandleColor
    open: float
    high: float
    low: float
    close: float
    confidence: int = 0

    @property
    def is_bullish(self) -> bool:
        """True if close > open."""
        return self.close > self.open

    @property
    def is_bearish(self) -> bool:
        """True if close < open."""
        return self.close < self.open

    @property
    def body(self) -> float:
        """Size of the candle body (absolute)."""
        return abs(self.close - self.open)

    @property
    def upper_shadow(self) -> float:
        """Size of upper shadow."""
        return self.high - max(self.open, self.close)

    @property
    def lower_shadow(self) -> float:
        """Size of lower shadow."""
        return min(self.open, self.close) - self.low

    @property
    def range(self) -> float:
        """Total range from high to low."""
        return self.high - self.low

    @property
    def is_valid(self) -> bool:
        """OHLC invariant plus positive prices and non-negative position."""
        prices_positive = min(self.open, self.high, self.low, self.close) > 0
        return (
            prices_positive
            and self.high >= max(self.open, self.close)
            and self.low <= min(self.open, self.close)
            and self.position.x >= 0
            and self.position.y >= 0
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "position": {"x": self.position.x, "y": self.position.y},
            "width": self.width,
            "height": self.height,
            "color": self.color.value,
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class SupportResistanceLine:
    """Horizontal line found in the row-density histogram."""

    start_x: int
    start_y: int
    end_x: int
    end_y: int
    confidence: int

    def to_dict(self) -> dict[str, int]:
        return {
            "start_x": self.start_x,
            "start_y": self.start_y,
            "end_x": self.end_x,
            "end_y": self.end_y,
            "confidence": self.confidence,
        }


@dataclass
class LineElement:
    """Overlay line between two or more points."""

    points: list[Point]
    color: str
    thickness: int = 1
    dash_pattern: tuple[int, ...] | None = None

    @property
    def kind(self) -> ElementKind:
        return ElementKind.LINE

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind.value,
            "points": [{"x": p.x, "y": p.y} for p in self.points],
            "color": self.color,
            "thickness": self.thickness,
            "dash_pattern": list(self.dash_pattern) if self.dash_pattern else None,
        }


@dataclass
class LabelElement:
    """Overlay text label."""

    position: Point
    text: str
    color: str
    background_color: str | None = None

    @property
    def kind(self) -> ElementKind:
        return ElementKind.LABEL

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind.value,
            "position": {"x": self.position.x, "y": self.position.y},
            "text": self.text,
            "color": self.color,
            "background_color": self.background_color,
        }


@dataclass
class CircleElement:
    """Overlay circle marking a single candle."""

    center: Point
    radius: float
    color: str
    thickness: int = 1
    dash_pattern: tuple[int, ...] | None = None

    @property
    def kind(self) -> ElementKind:
        return ElementKind.CIRCLE

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind.value,
            "center": {"x": self.center.x, "y": self.center.y},
            "radius": self.radius,
            "color": self.color,
            "thickness": self.thickness,
            "dash_pattern": list(self.dash_pattern) if self.dash_pattern else None,
        }


TechnicalElement = LineElement | LabelElement | CircleElement


@dataclass(frozen=True)
class ConfluenceLevel:
    """Support/resistance level supplied by the confluence analyzer."""

    price: float
    level_type: LevelType
    strength: LevelStrength
    confidence: float = 0.0


@dataclass
class ConfluenceContext:
    """Aggregated confluence output consumed by the M1 validator."""

    support_resistance: list[ConfluenceLevel] = field(default_factory=list)


@dataclass(frozen=True)
class VolumeContext:
    """Aggregated volume output consumed by the M1 validator."""

    trend: VolumeTrend = VolumeTrend.NEUTRAL
    abnormal: bool = False


@dataclass
class M1ContextValidation:
    """Result of gating a signal against the one-minute market context."""

    is_valid_for_entry: bool
    rejection_reasons: list[str]
    context_score: int  # 0 to 100
    trend_direction: TrendDirection
    pullback_detected: bool
    strong_candle_confirmation: bool
    support_resistance_level: bool
    volume_confirmation: bool
    space_to_run: bool
    indecision_candles: bool
    recommendation: Recommendation

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_valid_for_entry": self.is_valid_for_entry,
            "rejection_reasons": list(self.rejection_reasons),
            "context_score": self.context_score,
            "trend_direction": self.trend_direction.value,
            "pullback_detected": self.pullback_detected,
            "strong_candle_confirmation": self.strong_candle_confirmation,
            "support_resistance_level": self.support_resistance_level,
            "volume_confirmation": self.volume_confirmation,
            "space_to_run": self.space_to_run,
            "indecision_candles": self.indecision_candles,
            "recommendation": self.recommendation.value,
        }


@dataclass
class ExtractionResult:
    """Complete result of one vision pass over a bitmap."""

    success: bool
    candles: list[CandleData] = field(default_factory=list)
    lines: list[SupportResistanceLine] = field(default_factory=list)
    elements: list[TechnicalElement] = field(default_factory=list)
    region: RegionDetection | None = None
    quality: QualityReport | None = None
    warnings: list[str] = field(default_factory=list)
    error: str | None = None
    discarded_count: int = 0

    @property
    def bullish_candles(self) -> list[CandleData]:
        """Get all bullish candles."""
        return [c for c in self.candles if c.color == CandleColor.BULLISH]

    @property
    def bearish_candles(self) -> list[CandleData]:
        """Get all bearish candles."""
        return [c for c in self.candles if c.color == CandleColor.BEARISH]

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "candles": [c.to_dict() for c in self.candles],
            "lines": [line.to_dict() for line in self.lines],
            "elements": [e.to_dict() for e in self.elements],
            "region": (
                {
                    **self.region.region.to_dict(),
                    "detected": self.region.detected,
                }
                if self.region
                else None
            ),
            "quality": self.quality.to_dict() if self.quality else None,
            "warnings": list(self.warnings),
            "error": self.error,
            "discarded_count": self.discarded_count,
        }
