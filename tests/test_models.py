"""Tests for candle vision data models."""

from candle_vision.models import (
    BoundingBox,
    CandleColor,
    CandleData,
    CandleShape,
    CircleElement,
    ExtractionResult,
    LabelElement,
    LineElement,
    PixelClass,
    Point,
    RegionDetection,
    Segment,
)


def make_candle(
    o: float, h: float, low: float, c: float, color: CandleColor = CandleColor.BULLISH
) -> CandleData:
    """Helper to create candles quickly."""
    return CandleData(
        position=Point(10, 10), width=5, height=10, color=color, open=o, high=h, low=low, close=c
    )


class TestBoundingBox:
    """Tests for BoundingBox dataclass."""

    def test_bounding_box_properties(self) -> None:
        """Test bounding box coordinate properties."""
        box = BoundingBox(x=10, y=20, width=100, height=50)
        assert box.x2 == 110
        assert box.y2 == 70
        assert box.center == (60, 45)

    def test_bounding_box_to_dict(self) -> None:
        """Test serialization."""
        box = BoundingBox(x=1, y=2, width=3, height=4)
        assert box.to_dict() == {"x": 1, "y": 2, "width": 3, "height": 4}


class TestSegment:
    """Tests for Segment dataclass."""

    def test_inclusive_dimensions(self) -> None:
        """Width and height count both edge pixels."""
        segment = Segment(x1=5, y1=10, x2=9, y2=29, area=100, pixel_class=PixelClass.BULLISH)
        assert segment.width == 5
        assert segment.height == 20


class TestCandleShape:
    """Tests for CandleShape dataclass."""

    def test_top_and_bottom(self) -> None:
        """Top and bottom are half the height from the center."""
        shape = CandleShape(
            position=Point(20, 50), width=4, height=30, color=CandleColor.BEARISH, confidence=90
        )
        assert shape.top == 35.0
        assert shape.bottom == 65.0


class TestCandleData:
    """Tests for CandleData dataclass."""

    def test_bullish_candle(self) -> None:
        """Test bullish candle properties."""
        candle = make_candle(100.0, 110.0, 95.0, 108.0)
        assert candle.is_bullish is True
        assert candle.is_bearish is False
        assert candle.body == 8.0
        assert candle.range == 15.0
        assert candle.upper_shadow == 2.0
        assert candle.lower_shadow == 5.0

    def test_bearish_candle(self) -> None:
        """Test bearish candle properties."""
        candle = make_candle(108.0, 110.0, 95.0, 100.0, CandleColor.BEARISH)
        assert candle.is_bearish is True
        assert candle.body == 8.0
        assert candle.upper_shadow == 2.0
        assert candle.lower_shadow == 5.0

    def test_valid_candle(self) -> None:
        """A candle respecting the OHLC ordering is valid."""
        assert make_candle(100.0, 110.0, 95.0, 108.0).is_valid is True

    def test_high_below_body_is_invalid(self) -> None:
        """High under the close breaks the invariant."""
        assert make_candle(100.0, 105.0, 95.0, 108.0).is_valid is False

    def test_low_above_body_is_invalid(self) -> None:
        """Low over the open breaks the invariant."""
        assert make_candle(100.0, 110.0, 101.0, 108.0).is_valid is False

    def test_non_positive_price_is_invalid(self) -> None:
        """Prices must be positive."""
        assert make_candle(0.0, 10.0, 0.0, 5.0).is_valid is False

    def test_negative_position_is_invalid(self) -> None:
        """Position must be non-negative."""
        candle = CandleData(
            position=Point(-1, 10),
            width=5,
            height=10,
            color=CandleColor.BULLISH,
            open=100.0,
            high=110.0,
            low=95.0,
            close=108.0,
        )
        assert candle.is_valid is False

    def test_to_dict(self) -> None:
        """Test serialization."""
        data = make_candle(100.0, 110.0, 95.0, 108.0).to_dict()
        assert data["color"] == "bullish"
        assert data["position"] == {"x": 10, "y": 10}
        assert data["close"] == 108.0


class TestElements:
    """Tests for overlay element dataclasses."""

    def test_line_element_to_dict(self) -> None:
        """Line elements carry their kind and dash pattern."""
        line = LineElement(
            points=[Point(0, 5), Point(99, 5)], color="#22c55e", dash_pattern=(5, 5)
        )
        data = line.to_dict()
        assert data["type"] == "line"
        assert data["dash_pattern"] == [5, 5]
        assert data["points"][1] == {"x": 99, "y": 5}

    def test_solid_line_has_no_dash_pattern(self) -> None:
        """Solid lines serialize the dash pattern as None."""
        line = LineElement(points=[Point(0, 0), Point(1, 0)], color="#ef4444", thickness=2)
        assert line.to_dict()["dash_pattern"] is None

    def test_label_and_circle_kinds(self) -> None:
        """Each element reports its own kind."""
        label = LabelElement(position=Point(1, 2), text="Doji", color="#f59e0b")
        circle = CircleElement(center=Point(3, 4), radius=15.0, color="#3b82f6")
        assert label.to_dict()["type"] == "label"
        assert circle.to_dict()["type"] == "circle"
        assert circle.to_dict()["radius"] == 15.0


class TestExtractionResult:
    """Tests for ExtractionResult dataclass."""

    def test_color_filters(self) -> None:
        """Test bullish and bearish candle filters."""
        result = ExtractionResult(
            success=True,
            candles=[
                make_candle(100.0, 110.0, 100.0, 110.0),
                make_candle(110.0, 110.0, 100.0, 100.0, CandleColor.BEARISH),
                make_candle(100.0, 105.0, 100.0, 105.0),
            ],
        )
        assert len(result.bullish_candles) == 2
        assert len(result.bearish_candles) == 1

    def test_failed_result_to_dict(self) -> None:
        """A failed result serializes its error and empty collections."""
        data = ExtractionResult(success=False, error="boom").to_dict()
        assert data["success"] is False
        assert data["error"] == "boom"
        assert data["candles"] == []
        assert data["region"] is None
        assert data["quality"] is None

    def test_region_to_dict(self) -> None:
        """Region serialization flattens the box and keeps the detected flag."""
        result = ExtractionResult(
            success=True,
            region=RegionDetection(
                region=BoundingBox(x=5, y=6, width=200, height=100), detected=False
            ),
        )
        assert result.to_dict()["region"] == {
            "x": 5,
            "y": 6,
            "width": 200,
            "height": 100,
            "detected": False,
        }
