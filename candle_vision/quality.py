"""Image quality assessment.

Judges whether a bitmap is worth analyzing from its resolution, luminance
contrast, and a neighbor-difference noise estimate. The verdict is advisory;
callers may proceed with a degraded-quality warning.
"""

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from .models import QualityReport
from .preprocessor import luminance


@dataclass
class QualityConfig:
    """Configuration for quality assessment."""

    min_width: int = 400
    min_height: int = 300

    # max - min luminance must exceed this
    min_contrast: float = 50.0

    # Mean summed four-neighbor luminance difference must stay below this
    max_noise: float = 30.0


class QualityAssessor:
    """Assessor for bitmap analyzability."""

    def __init__(self, config: QualityConfig | None = None) -> None:
        """Initialize quality assessor.

        Args:
            config: Assessment configuration. Uses defaults if None.
        """
        self.config = config or QualityConfig()

    def assess(self, image: NDArray[np.uint8]) -> QualityReport:
        """Assess a bitmap.

        Args:
            image: RGBA bitmap.

        Returns:
            Quality report with per-factor classification.
        """
        cfg = self.config
        height, width = image.shape[:2]
        has_good_resolution = width >= cfg.min_width and height >= cfg.min_height

        lum = luminance(image)
        contrast = float(lum.max() - lum.min()) if lum.size else 0.0
        has_good_contrast = contrast > cfg.min_contrast

        noise = self._estimate_noise(lum)
        has_low_noise = noise < cfg.max_noise

        is_good_quality = has_good_resolution and has_good_contrast and has_low_noise

        message = (
            "Image quality is good for analysis."
            if is_good_quality
            else "Image quality may affect analysis accuracy."
        )
        if not has_good_resolution:
            message += " Low resolution."
        if not has_good_contrast:
            message += " Insufficient contrast."
        if not has_low_noise:
            message += " Noise detected."

        return QualityReport(
            is_good_quality=is_good_quality,
            has_good_resolution=has_good_resolution,
            has_good_contrast=has_good_contrast,
            has_low_noise=has_low_noise,
            contrast=contrast,
            noise=noise,
            message=message,
            details={
                "resolution": "good" if has_good_resolution else "low",
                "contrast": "adequate" if has_good_contrast else "insufficient",
                "noise": "low" if has_low_noise else "high",
            },
        )

    def _estimate_noise(self, lum: NDArray[np.float64]) -> float:
        """Mean over interior pixels of the summed absolute differences to
        the four direct neighbors."""
        if lum.shape[0] < 3 or lum.shape[1] < 3:
            return 0.0

        center = lum[1:-1, 1:-1]
        diff = (
            np.abs(center - lum[:-2, 1:-1])
            + np.abs(center - lum[2:, 1:-1])
            + np.abs(center - lum[1:-1, :-2])
            + np.abs(center - lum[1:-1, 2:])
        )
        return float(diff.mean())


def check_image_quality(image: NDArray[np.uint8]) -> QualityReport:
    """Convenience function to assess a bitmap with default config."""
    return QualityAssessor().assess(image)
