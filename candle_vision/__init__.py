"""Candle Vision - Chart Digitization & Entry Gating.

This package handles:
- Chart screenshot quality assessment and region detection
- Candle extraction from pixels into synthetic OHLC data
- Support and resistance line detection from images
- Overlay primitives for display
- M1 context validation of trading signals
"""

__version__ = "0.1.0"

from .classifier import ColorClassifier, ColorThresholds, count_classes
from .elements import ComposerConfig, TechnicalElementComposer
from .errors import ImageDecodeError, ImageTooSmallError, InvalidRegionError, VisionError
from .extractor import CandleExtractor, ExtractorConfig, crop_selection, extract_candles
from .geometry import CandleGeometryAnalyzer, GeometryConfig
from .levels import (
    LineDetectorConfig,
    SupportResistanceDetector,
    find_nearest_level,
)
from .live import GateStats, LiveAnalysisGate, LiveAnalysisLoop, should_alert
from .m1_context import (
    M1ContextConfig,
    M1ContextValidator,
    format_validation,
    log_validation,
    validate_m1_context,
)
from .models import (
    BoundingBox,
    CandleColor,
    CandleData,
    CandleShape,
    CircleElement,
    CircleRegion,
    ConfluenceContext,
    ConfluenceLevel,
    ElementKind,
    ExtractionResult,
    LabelElement,
    LevelStrength,
    LevelType,
    LineElement,
    M1ContextValidation,
    PixelClass,
    Point,
    QualityReport,
    Recommendation,
    RegionDetection,
    Segment,
    Signal,
    SupportResistanceLine,
    TechnicalElement,
    TrendDirection,
    VolumeContext,
    VolumeTrend,
)
from .ohlc import OHLCConfig, OHLCEstimator, validate_candles
from .preprocessor import (
    ChartPreprocessor,
    PreprocessorConfig,
    as_rgba,
    crop_to_circle,
    crop_to_region,
    load_image,
    load_image_from_bytes,
)
from .quality import QualityAssessor, QualityConfig, check_image_quality
from .region import RegionDetector, RegionDetectorConfig, detect_chart_region
from .segmentation import CandleSegmenter, SegmenterConfig

__all__ = [
    # Classifier
    "ColorClassifier",
    "ColorThresholds",
    "count_classes",
    # Elements
    "ComposerConfig",
    "TechnicalElementComposer",
    # Errors
    "ImageDecodeError",
    "ImageTooSmallError",
    "InvalidRegionError",
    "VisionError",
    # Extractor
    "CandleExtractor",
    "ExtractorConfig",
    "crop_selection",
    "extract_candles",
    # Geometry
    "CandleGeometryAnalyzer",
    "GeometryConfig",
    # Levels
    "LineDetectorConfig",
    "SupportResistanceDetector",
    "find_nearest_level",
    # Live
    "GateStats",
    "LiveAnalysisGate",
    "LiveAnalysisLoop",
    "should_alert",
    # M1 context
    "M1ContextConfig",
    "M1ContextValidator",
    "format_validation",
    "log_validation",
    "validate_m1_context",
    # Models
    "BoundingBox",
    "CandleColor",
    "CandleData",
    "CandleShape",
    "CircleElement",
    "CircleRegion",
    "ConfluenceContext",
    "ConfluenceLevel",
    "ElementKind",
    "ExtractionResult",
    "LabelElement",
    "LevelStrength",
    "LevelType",
    "LineElement",
    "M1ContextValidation",
    "PixelClass",
    "Point",
    "QualityReport",
    "Recommendation",
    "RegionDetection",
    "Segment",
    "Signal",
    "SupportResistanceLine",
    "TechnicalElement",
    "TrendDirection",
    "VolumeContext",
    "VolumeTrend",
    # OHLC
    "OHLCConfig",
    "OHLCEstimator",
    "validate_candles",
    # Preprocessor
    "ChartPreprocessor",
    "PreprocessorConfig",
    "as_rgba",
    "crop_to_circle",
    "crop_to_region",
    "load_image",
    "load_image_from_bytes",
    # Quality
    "QualityAssessor",
    "QualityConfig",
    "check_image_quality",
    # Region
    "RegionDetector",
    "RegionDetectorConfig",
    "detect_chart_region",
    # Segmentation
    "CandleSegmenter",
    "SegmenterConfig",
]
