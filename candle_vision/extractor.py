"""Main candle extractor.

Combines quality assessment, region detection, edge enhancement, color
classification, segmentation, geometry validation and OHLC estimation into a
single pass over a bitmap, plus line detection and overlay composition over
the same crop.
"""

import logging
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from .classifier import ColorClassifier, ColorThresholds
from .elements import ComposerConfig, TechnicalElementComposer
from .errors import VisionError
from .geometry import CandleGeometryAnalyzer, GeometryConfig
from .levels import LineDetectorConfig, SupportResistanceDetector
from .models import BoundingBox, CircleRegion, ExtractionResult, RegionDetection
from .ohlc import OHLCConfig, OHLCEstimator, validate_candles
from .preprocessor import (
    ChartPreprocessor,
    PreprocessorConfig,
    as_rgba,
    crop_to_circle,
    crop_to_region,
)
from .quality import QualityAssessor, QualityConfig
from .region import RegionDetector, RegionDetectorConfig
from .segmentation import CandleSegmenter, SegmenterConfig

logger = logging.getLogger(__name__)

Selection = BoundingBox | CircleRegion


@dataclass
class ExtractorConfig:
    """Configuration for the candle extractor."""

    preprocessor_config: PreprocessorConfig | None = None
    quality_config: QualityConfig | None = None
    region_config: RegionDetectorConfig | None = None
    color_thresholds: ColorThresholds | None = None
    segmenter_config: SegmenterConfig | None = None
    geometry_config: GeometryConfig | None = None
    ohlc_config: OHLCConfig | None = None
    line_config: LineDetectorConfig | None = None
    composer_config: ComposerConfig | None = None

    # Pipeline switches
    assess_quality: bool = True
    detect_region: bool = True
    enhance_edges: bool = True


class CandleExtractor:
    """Vision pipeline turning a chart bitmap into candles and overlays."""

    def __init__(self, config: ExtractorConfig | None = None) -> None:
        """Initialize extractor.

        Args:
            config: Extractor configuration. Uses defaults if None.
        """
        self.config = config or ExtractorConfig()
        self.preprocessor = ChartPreprocessor(self.config.preprocessor_config)
        self.quality_assessor = QualityAssessor(self.config.quality_config)
        self.region_detector = RegionDetector(self.config.region_config)
        self.classifier = ColorClassifier(self.config.color_thresholds)
        self.segmenter = CandleSegmenter(self.config.segmenter_config)
        self.geometry = CandleGeometryAnalyzer(self.config.geometry_config)
        self.estimator = OHLCEstimator(self.config.ohlc_config)
        self.line_detector = SupportResistanceDetector(self.config.line_config)
        self.composer = TechnicalElementComposer(self.config.composer_config)

    def extract(
        self, image: NDArray[np.uint8], selection: Selection | None = None
    ) -> ExtractionResult:
        """Run the full vision pass.

        Args:
            image: Decoded bitmap (grayscale, RGB or RGBA).
            selection: Manual chart selection. Skips region detection if given.

        Returns:
            Extraction result. Input problems give `success=False` with an
            error message; an empty candle list is still a success.
        """
        try:
            return self._extract(as_rgba(image), selection)
        except VisionError as e:
            logger.warning("Candle extraction failed: %s", e.message)
            return ExtractionResult(success=False, error=e.message)

    def _extract(self, image: NDArray[np.uint8], selection: Selection | None) -> ExtractionResult:
        self.preprocessor.check_dimensions(image)
        warnings: list[str] = []

        quality = None
        if self.config.assess_quality:
            quality = self.quality_assessor.assess(image)
            if not quality.is_good_quality:
                warnings.append(quality.message)

        region, working = self._select_region(image, selection)
        if region is not None and not region.detected:
            warnings.append(region.message)

        buffer = self.preprocessor.enhance_edges(working) if self.config.enhance_edges else working
        labels = self.classifier.classify(buffer)
        segments = self.segmenter.segment(labels)
        shapes = self.geometry.analyze_all(segments, labels)
        candles, discarded = validate_candles(self.estimator.estimate(shapes))

        lines = self.line_detector.detect(working)
        elements = self.composer.compose(candles, lines)

        if not candles:
            logger.warning("No candles detected - check that the image contains a valid chart")
            warnings.append("No candles detected in the image")
        else:
            logger.info(
                "Extracted %d candles from %d segments (%d discarded)",
                len(candles),
                len(segments),
                discarded,
            )

        return ExtractionResult(
            success=True,
            candles=candles,
            lines=lines,
            elements=elements,
            region=region,
            quality=quality,
            warnings=warnings,
            discarded_count=discarded,
        )

    def _select_region(
        self, image: NDArray[np.uint8], selection: Selection | None
    ) -> tuple[RegionDetection | None, NDArray[np.uint8]]:
        if selection is not None:
            return None, crop_selection(image, selection)

        if not self.config.detect_region:
            return None, image

        detection = self.region_detector.detect(image)
        return detection, crop_to_region(image, detection.region)

    def process_region_for_analysis(
        self, image: NDArray[np.uint8], selection: Selection | None = None
    ) -> NDArray[np.uint8]:
        """Crop to a selection and apply display enhancement.

        Args:
            image: Decoded bitmap.
            selection: Optional rectangle or circle to crop to first.

        Returns:
            Edge-enhanced, color-highlighted bitmap.

        Raises:
            VisionError: If the bitmap is too small or the selection is invalid.
        """
        rgba = as_rgba(image)
        if selection is not None:
            rgba = crop_selection(rgba, selection)
        return self.preprocessor.process(rgba)


def crop_selection(image: NDArray[np.uint8], selection: Selection) -> NDArray[np.uint8]:
    """Crop to a rectangular or circular selection."""
    if isinstance(selection, CircleRegion):
        return crop_to_circle(image, selection)
    return crop_to_region(image, selection)


def extract_candles(
    image: NDArray[np.uint8], selection: Selection | None = None
) -> ExtractionResult:
    """Convenience function to extract candles with default config.

    Args:
        image: Decoded bitmap.
        selection: Optional manual chart selection.

    Returns:
        Extraction result.
    """
    extractor = CandleExtractor()
    return extractor.extract(image, selection)
