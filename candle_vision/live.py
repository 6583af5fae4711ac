"""Live capture backpressure.

In continuous capture a frame arrives at a fixed interval. At most one
analysis runs at a time; a frame offered while one is in flight is dropped,
never queued. The pipeline itself holds no shared state, which is what makes
this policy sound.
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

import numpy as np
from numpy.typing import NDArray

from .models import M1ContextValidation, Recommendation

logger = logging.getLogger(__name__)

T = TypeVar("T")

Frame = NDArray[np.uint8]


@dataclass
class GateStats:
    """Counters for a live analysis gate."""

    analyzed: int = 0
    dropped: int = 0


class LiveAnalysisGate(Generic[T]):
    """Runs at most one analysis at a time, dropping frames while busy.

    Example:
        extractor = CandleExtractor()
        gate = LiveAnalysisGate(extractor.extract)

        result = gate.submit(frame)
        if result is None:
            ...  # previous frame still being analyzed
    """

    def __init__(self, analyze: Callable[[Frame], T]) -> None:
        """Initialize gate.

        Args:
            analyze: Analysis to run on each accepted frame.
        """
        self._analyze = analyze
        self._lock = threading.Lock()
        self._stats_lock = threading.Lock()
        self._stats = GateStats()

    @property
    def busy(self) -> bool:
        """True while an analysis is in flight."""
        return self._lock.locked()

    @property
    def stats(self) -> GateStats:
        """Snapshot of the gate counters."""
        with self._stats_lock:
            return GateStats(analyzed=self._stats.analyzed, dropped=self._stats.dropped)

    def submit(self, frame: Frame) -> T | None:
        """Analyze a frame unless another analysis is running.

        Args:
            frame: Captured bitmap.

        Returns:
            Analysis result, or None if the frame was dropped.
        """
        if not self._lock.acquire(blocking=False):
            self.record_drop()
            return None

        try:
            result = self._analyze(frame)
        finally:
            self._lock.release()

        with self._stats_lock:
            self._stats.analyzed += 1
        return result

    def record_drop(self) -> None:
        """Count a frame dropped while an analysis is in flight."""
        with self._stats_lock:
            self._stats.dropped += 1
        logger.debug("Analysis in progress, frame dropped")


class LiveAnalysisLoop(Generic[T]):
    """Captures a frame every interval and analyzes it in the background.

    Each capture is handed to a worker thread through a `LiveAnalysisGate`,
    so a slow analysis causes later frames to be dropped.
    """

    def __init__(
        self,
        capture: Callable[[], Frame | None],
        analyze: Callable[[Frame], T],
        on_result: Callable[[T], None],
        interval_seconds: float = 1.0,
    ) -> None:
        """Initialize loop.

        Args:
            capture: Returns the next frame, or None when no frame is available.
            analyze: Analysis to run on each accepted frame.
            on_result: Called with every completed analysis result.
            interval_seconds: Time between captures.
        """
        self.gate: LiveAnalysisGate[T] = LiveAnalysisGate(analyze)
        self._capture = capture
        self._on_result = on_result
        self._interval = interval_seconds
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._worker: threading.Thread | None = None

    def start(self) -> None:
        """Start capturing in a background thread."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="live-capture", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        """Stop capturing and wait for the analysis in flight to report.

        Args:
            timeout: Seconds to wait for each of the capture and worker threads.
        """
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        if self._worker is not None:
            self._worker.join(timeout)
            self._worker = None

    def tick(self) -> bool:
        """Capture one frame and dispatch it.

        Returns:
            True if the frame was dispatched, False if none was captured or
            the gate was busy.
        """
        frame = self._capture()
        if frame is None:
            return False
        if self.gate.busy or (self._worker is not None and self._worker.is_alive()):
            self.gate.record_drop()
            return False

        self._worker = threading.Thread(
            target=self._analyze, args=(frame,), name="live-analysis", daemon=True
        )
        self._worker.start()
        return True

    def _analyze(self, frame: Frame) -> None:
        try:
            result = self.gate.submit(frame)
        except Exception:
            logger.exception("Live analysis failed")
            return
        if result is not None:
            self._on_result(result)

    def _run(self) -> None:
        while not self._stop.is_set():
            self.tick()
            self._stop.wait(self._interval)


def should_alert(validation: M1ContextValidation) -> bool:
    """True when a validated signal is worth surfacing to the user."""
    return validation.is_valid_for_entry and validation.recommendation == Recommendation.ENTER
