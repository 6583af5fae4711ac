#!/usr/bin/env python3
"""CLI runner for subprocess invocation.

This module provides a JSON-based IPC interface for candle vision, allowing
a capture front end to invoke the pipeline via subprocess.

Protocol:
- Input: JSON lines on stdin
- Output: NDJSON (newline-delimited JSON) on stdout
- Each response includes a "type" field for message routing

Example:
    echo '{"command":"extract","params":{"path":"chart.png"}}' | python -m candle_vision.runner
"""

import json
import logging
import sys
from typing import Any

from . import __version__
from .errors import VisionError
from .extractor import CandleExtractor, ExtractorConfig
from .m1_context import M1ContextValidator, format_validation
from .models import (
    BoundingBox,
    CandleColor,
    CandleData,
    CircleRegion,
    ConfluenceContext,
    ConfluenceLevel,
    LevelStrength,
    LevelType,
    Point,
    Signal,
    VolumeContext,
    VolumeTrend,
)
from .ohlc import validate_candles
from .preprocessor import load_image
from .quality import QualityAssessor

logger = logging.getLogger(__name__)


def emit(data: dict[str, Any]) -> None:
    """Emit a JSON message to stdout."""
    print(json.dumps(data), flush=True)


def emit_error(message: str, code: str = "ERROR", details: dict[str, Any] | None = None) -> None:
    """Emit an error message."""
    payload: dict[str, Any] = {"type": "error", "code": code, "message": message}
    if details:
        payload["details"] = details
    emit(payload)


def parse_selection(raw: dict[str, Any] | None) -> BoundingBox | CircleRegion | None:
    """Parse a manual selection: rectangle (x, y, width, height) or circle."""
    if not raw:
        return None
    if raw.get("type") == "circle":
        return CircleRegion(
            center_x=int(raw["center_x"]),
            center_y=int(raw["center_y"]),
            radius=int(raw["radius"]),
        )
    return BoundingBox(
        x=int(raw["x"]),
        y=int(raw["y"]),
        width=int(raw["width"]),
        height=int(raw["height"]),
    )


def parse_candle(raw: dict[str, Any]) -> CandleData:
    """Build a CandleData from a plain dict; geometry fields are optional."""
    open_ = float(raw["open"])
    close = float(raw["close"])
    position = raw.get("position") or {}
    default_color = CandleColor.BULLISH if close >= open_ else CandleColor.BEARISH
    return CandleData(
        position=Point(float(position.get("x", 0.0)), float(position.get("y", 0.0))),
        width=int(raw.get("width", 0)),
        height=int(raw.get("height", 0)),
        color=CandleColor(raw["color"]) if "color" in raw else default_color,
        open=open_,
        high=float(raw["high"]),
        low=float(raw["low"]),
        close=close,
        confidence=int(raw.get("confidence", 0)),
    )


def parse_volume(raw: dict[str, Any] | None) -> VolumeContext | None:
    """Parse the optional volume aggregate."""
    if raw is None:
        return None
    return VolumeContext(
        trend=VolumeTrend(raw.get("trend", VolumeTrend.NEUTRAL.value)),
        abnormal=bool(raw.get("abnormal", False)),
    )


def parse_confluence(raw: dict[str, Any] | None) -> ConfluenceContext | None:
    """Parse the optional confluence aggregate."""
    if raw is None:
        return None
    levels = [
        ConfluenceLevel(
            price=float(level["price"]),
            level_type=LevelType(level["type"]),
            strength=LevelStrength(level.get("strength", LevelStrength.WEAK.value)),
            confidence=float(level.get("confidence", 0.0)),
        )
        for level in raw.get("support_resistance", [])
    ]
    return ConfluenceContext(support_resistance=levels)


def extract(params: dict[str, Any]) -> None:
    """Extract candles from an image file.

    Params:
        path: Image file path
        selection: Optional rectangle or circle selection
        enhance_edges: Whether to run edge enhancement (default: True)
    """
    path = params.get("path")
    if not path:
        emit_error("No path provided", "INVALID_PARAMS")
        return

    image = load_image(path)
    config = ExtractorConfig(enhance_edges=bool(params.get("enhance_edges", True)))
    result = CandleExtractor(config).extract(image, parse_selection(params.get("selection")))
    emit({"type": "extraction", "path": path, "data": result.to_dict()})


def quality(params: dict[str, Any]) -> None:
    """Assess the quality of an image file.

    Params:
        path: Image file path
    """
    path = params.get("path")
    if not path:
        emit_error("No path provided", "INVALID_PARAMS")
        return

    report = QualityAssessor().assess(load_image(path))
    emit({"type": "quality", "path": path, "data": report.to_dict()})


def validate(params: dict[str, Any]) -> None:
    """Gate a signal against a candle sequence.

    Params:
        candles: List of candle dicts (open, high, low, close, ...)
        signal: "buy", "sell" or "neutral"
        volume: Optional {"trend": ..., "abnormal": ...}
        confluence: Optional {"support_resistance": [{"price", "type", "strength"}]}
    """
    candles, discarded = validate_candles([parse_candle(c) for c in params.get("candles", [])])
    signal = Signal(params.get("signal", Signal.NEUTRAL.value))

    validation = M1ContextValidator().validate(
        candles,
        signal,
        volume=parse_volume(params.get("volume")),
        confluence=parse_confluence(params.get("confluence")),
    )
    emit(
        {
            "type": "validation",
            "data": validation.to_dict(),
            "discarded": discarded,
            "log": format_validation(validation, signal),
        }
    )


def process_request(request: dict[str, Any]) -> None:
    """Process a single request."""
    command = request.get("command")
    params = request.get("params", {})

    if command == "extract":
        extract(params)
    elif command == "quality":
        quality(params)
    elif command == "validate":
        validate(params)
    elif command == "ping":
        emit({"type": "pong", "version": __version__})
    else:
        emit_error(f"Unknown command: {command}", "UNKNOWN_COMMAND")


def main() -> None:
    """Main entry point for the runner."""
    logging.basicConfig(level=logging.INFO, stream=sys.stderr)

    # Read JSON lines from stdin
    for line in sys.stdin:
        line = line.strip()
        if not line:
            continue

        try:
            request = json.loads(line)
            process_request(request)
        except json.JSONDecodeError as e:
            emit_error(f"Invalid JSON: {e}", "PARSE_ERROR")
        except VisionError as e:
            emit_error(e.message, "VISION_ERROR", e.details)
        except (KeyError, ValueError) as e:
            emit_error(f"Invalid parameters: {e}", "INVALID_PARAMS")
        except KeyboardInterrupt:
            emit_error("Interrupted", "INTERRUPTED")
            break
        except Exception as e:
            logger.exception("Unexpected error processing request")
            emit_error(f"Unexpected error: {e}", "INTERNAL_ERROR")


if __name__ == "__main__":
    main()
