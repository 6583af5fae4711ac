"""Exception classes for candle vision.

Components raise these; `CandleExtractor` turns them into structured
failure results so callers never see an uncaught exception from the pipeline.
"""

from __future__ import annotations

from typing import Any


class VisionError(Exception):
    """Base exception for all candle vision errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize vision error.

        Args:
            message: Human-readable error message.
            details: Additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ImageDecodeError(VisionError):
    """Raised when image bytes or a file cannot be decoded into a bitmap."""

    def __init__(
        self,
        message: str,
        source: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if source:
            details["source"] = source
        super().__init__(message, details)


class ImageTooSmallError(VisionError):
    """Raised when a bitmap is below the minimum analyzable dimensions."""

    def __init__(
        self,
        width: int,
        height: int,
        min_width: int,
        min_height: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details.update(
            {
                "width": width,
                "height": height,
                "min_width": min_width,
                "min_height": min_height,
            }
        )
        super().__init__(
            f"Image too small for accurate processing ({width}x{height}); "
            f"at least {min_width}x{min_height} is required",
            details,
        )


class InvalidRegionError(VisionError):
    """Raised when a crop region does not intersect the bitmap."""

    pass
