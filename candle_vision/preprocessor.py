"""Chart image preprocessing.

Provides bitmap normalization, cropping, Sobel edge enhancement, and the
display-oriented candle color highlighting. Uses OpenCV for decoding and
color conversion and numpy for the per-pixel work.
"""

import logging
from dataclasses import dataclass
from typing import cast

import cv2  # type: ignore[import-not-found,unused-ignore]
import numpy as np
from numpy.typing import NDArray

from .errors import ImageDecodeError, ImageTooSmallError, InvalidRegionError, VisionError
from .models import BoundingBox, CircleRegion

logger = logging.getLogger(__name__)


@dataclass
class PreprocessorConfig:
    """Configuration for image preprocessing."""

    # Minimum input dimensions
    min_width: int = 200
    min_height: int = 200

    # Edge enhancement
    edge_threshold: float = 25.0
    use_luminance: bool = False  # red channel proxy by default

    # Display highlighting (deliberately stricter than classification)
    highlight_ratio: float = 1.5
    highlight_min_channel: int = 50
    highlight_boost: float = 1.5


def as_rgba(image: NDArray[np.uint8]) -> NDArray[np.uint8]:
    """Normalize a grayscale, RGB or RGBA array to an (H, W, 4) RGBA bitmap.

    Args:
        image: Input image as numpy array (H, W), (H, W, 3) or (H, W, 4).

    Returns:
        RGBA bitmap. RGBA input is returned as-is.

    Raises:
        VisionError: If the array is empty or its shape is not an image.
    """
    if image.size == 0:
        raise VisionError("Image is empty", {"shape": list(image.shape)})
    if image.ndim == 2:
        return cast(NDArray[np.uint8], cv2.cvtColor(image.astype(np.uint8), cv2.COLOR_GRAY2RGBA))
    if image.ndim == 3 and image.shape[2] == 4:
        return image.astype(np.uint8, copy=False)
    if image.ndim == 3 and image.shape[2] == 3:
        return cast(NDArray[np.uint8], cv2.cvtColor(image.astype(np.uint8), cv2.COLOR_RGB2RGBA))
    raise VisionError("Unsupported image shape", {"shape": list(image.shape)})


def luminance(image: NDArray[np.uint8]) -> NDArray[np.float64]:
    """Per-pixel luminance 0.299r + 0.587g + 0.114b."""
    rgb = image[..., :3].astype(np.float64)
    return 0.299 * rgb[..., 0] + 0.587 * rgb[..., 1] + 0.114 * rgb[..., 2]


class ChartPreprocessor:
    """Preprocessor for chart bitmaps."""

    def __init__(self, config: PreprocessorConfig | None = None) -> None:
        """Initialize preprocessor with config.

        Args:
            config: Preprocessing configuration. Uses defaults if None.
        """
        self.config = config or PreprocessorConfig()

    def check_dimensions(self, image: NDArray[np.uint8]) -> None:
        """Reject bitmaps below the minimum analyzable size.

        Raises:
            ImageTooSmallError: If either dimension is below the minimum.
        """
        height, width = image.shape[:2]
        if width < self.config.min_width or height < self.config.min_height:
            raise ImageTooSmallError(width, height, self.config.min_width, self.config.min_height)

    def process(self, image: NDArray[np.uint8]) -> NDArray[np.uint8]:
        """Enhance edges and highlight candle colors for display output.

        Args:
            image: RGBA bitmap.

        Returns:
            New processed bitmap; the input is left untouched.
        """
        self.check_dimensions(image)
        enhanced = self.enhance_edges(image)
        return self.highlight_candle_colors(enhanced)

    def enhance_edges(self, image: NDArray[np.uint8]) -> NDArray[np.uint8]:
        """Force strong-gradient interior pixels to opaque white.

        Uses a 3x3 Sobel pair on the red channel (or luminance), both
        gradients divided by 4. Border rows and columns keep their values.

        Args:
            image: RGBA bitmap.

        Returns:
            Edge-enhanced copy of the bitmap.
        """
        output = image.copy()
        height, width = image.shape[:2]
        if height < 3 or width < 3:
            return output

        if self.config.use_luminance:
            channel = luminance(image)
        else:
            channel = image[..., 0].astype(np.float64)

        top_left = channel[:-2, :-2]
        top = channel[:-2, 1:-1]
        top_right = channel[:-2, 2:]
        left = channel[1:-1, :-2]
        right = channel[1:-1, 2:]
        bottom_left = channel[2:, :-2]
        bottom = channel[2:, 1:-1]
        bottom_right = channel[2:, 2:]

        gx = (top_right - top_left + 2 * right - 2 * left + bottom_right - bottom_left) / 4
        gy = (bottom_left - top_left + 2 * bottom - 2 * top + bottom_right - top_right) / 4
        magnitude = np.sqrt(gx * gx + gy * gy)

        interior = output[1:-1, 1:-1]
        interior[magnitude > self.config.edge_threshold] = 255
        return output

    def highlight_candle_colors(self, image: NDArray[np.uint8]) -> NDArray[np.uint8]:
        """Saturate clearly green and clearly red pixels.

        Args:
            image: RGBA bitmap.

        Returns:
            Highlighted copy of the bitmap.
        """
        cfg = self.config
        output = image.copy()
        rgb = image[..., :3].astype(np.float64)
        r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]

        green = (g > cfg.highlight_ratio * r) & (g > cfg.highlight_ratio * b)
        green &= g > cfg.highlight_min_channel
        red = (r > cfg.highlight_ratio * g) & (r > cfg.highlight_ratio * b)
        red &= (r > cfg.highlight_min_channel) & ~green

        boosted_g = np.minimum(255, np.rint(g * cfg.highlight_boost)).astype(np.uint8)
        boosted_r = np.minimum(255, np.rint(r * cfg.highlight_boost)).astype(np.uint8)

        output[green, 0] = 0
        output[green, 1] = boosted_g[green]
        output[green, 2] = 0

        output[red, 0] = boosted_r[red]
        output[red, 1] = 0
        output[red, 2] = 0
        return output


def crop_to_region(image: NDArray[np.uint8], region: BoundingBox) -> NDArray[np.uint8]:
    """Crop a bitmap to a rectangle, clamped to the image bounds.

    Args:
        image: Input bitmap.
        region: Region to crop to.

    Returns:
        Cropped copy.

    Raises:
        InvalidRegionError: If the region does not overlap the image.
    """
    height, width = image.shape[:2]
    x1 = max(0, region.x)
    y1 = max(0, region.y)
    x2 = min(width, region.x2)
    y2 = min(height, region.y2)
    if x2 <= x1 or y2 <= y1:
        raise InvalidRegionError("Region does not overlap the image", region.to_dict())
    return image[y1:y2, x1:x2].copy()


def crop_to_circle(image: NDArray[np.uint8], region: CircleRegion) -> NDArray[np.uint8]:
    """Crop a circular selection into a square RGBA canvas.

    Pixels outside the circle, or outside the source image, are fully
    transparent black.

    Args:
        image: RGBA bitmap.
        region: Circle center and radius in image coordinates.

    Returns:
        Bitmap of shape (2r, 2r, 4).

    Raises:
        InvalidRegionError: If the radius is not positive.
    """
    radius = region.radius
    if radius <= 0:
        raise InvalidRegionError("Circle radius must be positive", {"radius": radius})

    diameter = radius * 2
    canvas = np.zeros((diameter, diameter, 4), dtype=np.uint8)
    height, width = image.shape[:2]

    src_x1 = region.center_x - radius
    src_y1 = region.center_y - radius
    x1, y1 = max(0, src_x1), max(0, src_y1)
    x2, y2 = min(width, src_x1 + diameter), min(height, src_y1 + diameter)
    if x2 > x1 and y2 > y1:
        canvas[y1 - src_y1 : y2 - src_y1, x1 - src_x1 : x2 - src_x1] = image[y1:y2, x1:x2]

    mask = np.zeros((diameter, diameter), dtype=np.uint8)
    cv2.circle(mask, (radius, radius), radius, 255, thickness=-1)
    canvas[mask == 0] = 0
    return canvas


def load_image(path: str) -> NDArray[np.uint8]:
    """Load an image file as an RGBA bitmap.

    Args:
        path: Path to image file.

    Returns:
        RGBA bitmap.

    Raises:
        ImageDecodeError: If image cannot be loaded.
    """
    image = cv2.imread(path, cv2.IMREAD_COLOR)
    if image is None:
        raise ImageDecodeError(f"Could not load image from: {path}", source=path)
    return cast(NDArray[np.uint8], cv2.cvtColor(image, cv2.COLOR_BGR2RGBA))


def load_image_from_bytes(data: bytes) -> NDArray[np.uint8]:
    """Decode encoded image bytes as an RGBA bitmap.

    Args:
        data: Image data as bytes.

    Returns:
        RGBA bitmap.

    Raises:
        ImageDecodeError: If image cannot be decoded.
    """
    nparr = np.frombuffer(data, np.uint8)
    image = cv2.imdecode(nparr, cv2.IMREAD_COLOR) if nparr.size else None
    if image is None:
        raise ImageDecodeError("Could not decode image from bytes")
    return cast(NDArray[np.uint8], cv2.cvtColor(image, cv2.COLOR_BGR2RGBA))
