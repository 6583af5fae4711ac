"""Tests for the candle extraction pipeline."""

import numpy as np
import pytest

from candle_vision.extractor import (
    CandleExtractor,
    ExtractorConfig,
    crop_selection,
    extract_candles,
)
from candle_vision.models import BoundingBox, CandleColor, CircleRegion, Point

from .conftest import CHART_CANDLES, GREEN, blank_bitmap


@pytest.fixture
def exact_extractor() -> CandleExtractor:
    """Extractor without edge enhancement, so candle counts are exact."""
    return CandleExtractor(ExtractorConfig(enhance_edges=False))


class TestCandleExtractor:
    """Tests for CandleExtractor class."""

    def test_extracts_every_candle(
        self, exact_extractor: CandleExtractor, chart_bitmap: np.ndarray
    ) -> None:
        """Test each drawn rectangle becomes one candle, ordered by x."""
        result = exact_extractor.extract(chart_bitmap)

        assert result.success is True
        assert result.error is None
        assert len(result.candles) == len(CHART_CANDLES)
        assert result.discarded_count == 0

        for candle, (x, y, width, height, color) in zip(result.candles, CHART_CANDLES):
            expected = CandleColor.BULLISH if color == GREEN else CandleColor.BEARISH
            assert candle.color == expected
            assert candle.position == Point(x + width / 2, y + height / 2)
            assert candle.confidence == 100

    def test_candles_respect_ohlc_invariant(
        self, exact_extractor: CandleExtractor, chart_bitmap: np.ndarray
    ) -> None:
        """Test every emitted candle is valid and inside the synthetic band."""
        result = exact_extractor.extract(chart_bitmap)

        for candle in result.candles:
            assert candle.is_valid
            assert candle.high >= max(candle.open, candle.close)
            assert candle.low <= min(candle.open, candle.close)
            assert 100.0 <= candle.low <= candle.high <= 120.0

    def test_higher_candles_get_higher_prices(
        self, exact_extractor: CandleExtractor, chart_bitmap: np.ndarray
    ) -> None:
        """Test the chart drawn rising reads as rising prices."""
        candles = exact_extractor.extract(chart_bitmap).candles
        assert candles[-1].high > candles[0].high

    def test_detected_region_and_quality(
        self, exact_extractor: CandleExtractor, chart_bitmap: np.ndarray
    ) -> None:
        """Test a clean chart has no warnings."""
        result = exact_extractor.extract(chart_bitmap)

        assert result.region is not None
        assert result.region.detected is True
        assert result.quality is not None
        assert result.quality.is_good_quality is True
        assert result.warnings == []

    def test_default_pipeline_finds_candles(self, chart_bitmap: np.ndarray) -> None:
        """Test the default pipeline with edge enhancement still finds the candles."""
        result = CandleExtractor().extract(chart_bitmap)

        assert result.success is True
        assert len(result.bullish_candles) >= 3
        assert len(result.bearish_candles) >= 3
        assert all(c.is_valid for c in result.candles)

    def test_too_small_image_fails(self) -> None:
        """Test undersized input gives a failed result instead of raising."""
        result = CandleExtractor().extract(blank_bitmap(100, 100))

        assert result.success is False
        assert result.error is not None
        assert result.error.startswith("Image too small for accurate processing")
        assert result.candles == []

    @pytest.mark.parametrize("shape", [(0, 0, 3), (0, 0), (0, 0, 4)])
    def test_empty_array_fails(self, shape: tuple[int, ...]) -> None:
        """Test an empty bitmap gives a failed result instead of raising."""
        result = CandleExtractor().extract(np.zeros(shape, dtype=np.uint8))

        assert result.success is False
        assert result.error == "Image is empty"
        assert result.candles == []

    def test_empty_chart_warns(self, uniform_dark_bitmap: np.ndarray) -> None:
        """Test an image without candles succeeds with warnings."""
        result = CandleExtractor().extract(uniform_dark_bitmap)

        assert result.success is True
        assert result.candles == []
        assert result.lines == []
        assert result.elements == []
        assert "No candles detected in the image" in result.warnings
        assert "Region estimated automatically" in result.warnings
        assert result.region is not None
        assert result.region.detected is False

    def test_manual_rectangle_selection(
        self, exact_extractor: CandleExtractor, chart_bitmap: np.ndarray
    ) -> None:
        """Test a rectangle selection skips detection and limits the candles."""
        selection = BoundingBox(x=0, y=0, width=220, height=250)
        result = exact_extractor.extract(chart_bitmap, selection)

        assert result.region is None
        # Only the candles starting left of x=220 fall inside
        assert len(result.candles) == 5

    def test_selection_outside_image_fails(
        self, exact_extractor: CandleExtractor, chart_bitmap: np.ndarray
    ) -> None:
        """Test an invalid selection gives a failed result."""
        result = exact_extractor.extract(
            chart_bitmap, BoundingBox(x=1000, y=1000, width=10, height=10)
        )
        assert result.success is False

    def test_circle_selection(
        self, exact_extractor: CandleExtractor, chart_bitmap: np.ndarray
    ) -> None:
        """Test a circle selection crops around its center."""
        selection = CircleRegion(center_x=150, center_y=110, radius=110)
        result = exact_extractor.extract(chart_bitmap, selection)

        assert result.success is True
        assert result.region is None
        assert len(result.candles) >= 1

    def test_rgb_input_is_accepted(
        self, exact_extractor: CandleExtractor, chart_bitmap: np.ndarray
    ) -> None:
        """Test three-channel input is normalized."""
        result = exact_extractor.extract(chart_bitmap[..., :3].copy())
        assert len(result.candles) == len(CHART_CANDLES)

    def test_input_is_not_mutated(self, chart_bitmap: np.ndarray) -> None:
        """Test the caller's bitmap is left untouched."""
        original = chart_bitmap.copy()
        CandleExtractor().extract(chart_bitmap)
        assert np.array_equal(chart_bitmap, original)

    def test_result_serializes(
        self, exact_extractor: CandleExtractor, chart_bitmap: np.ndarray
    ) -> None:
        """Test to_dict output is plain data."""
        data = exact_extractor.extract(chart_bitmap).to_dict()
        assert data["success"] is True
        assert len(data["candles"]) == len(CHART_CANDLES)
        assert data["region"]["detected"] is True

    def test_convenience_function(self, chart_bitmap: np.ndarray) -> None:
        """Test extract_candles uses defaults."""
        assert extract_candles(chart_bitmap).success is True


class TestProcessRegion:
    """Tests for display processing of a selection."""

    def test_returns_enhanced_bitmap(self, chart_bitmap: np.ndarray) -> None:
        """Test the display bitmap keeps the shape and saturates green."""
        processed = CandleExtractor().process_region_for_analysis(chart_bitmap)

        assert processed.shape == chart_bitmap.shape
        x, y, width, height, _ = CHART_CANDLES[0]
        assert tuple(processed[y + height // 2, x + width // 2, :3]) == (0, 255, 0)

    def test_crops_selection_first(self, chart_bitmap: np.ndarray) -> None:
        """Test a selection is cropped before processing."""
        processed = CandleExtractor().process_region_for_analysis(
            chart_bitmap, BoundingBox(x=0, y=0, width=250, height=220)
        )
        assert processed.shape == (220, 250, 4)


def test_crop_selection_dispatch(chart_bitmap: np.ndarray) -> None:
    """Test rectangles and circles crop to their own shapes."""
    rectangle = crop_selection(chart_bitmap, BoundingBox(x=0, y=0, width=50, height=40))
    circle = crop_selection(chart_bitmap, CircleRegion(center_x=100, center_y=100, radius=30))

    assert rectangle.shape == (40, 50, 4)
    assert circle.shape == (60, 60, 4)
