"""Tests for live capture backpressure."""

import threading

import numpy as np
import pytest

from candle_vision.live import LiveAnalysisGate, LiveAnalysisLoop, should_alert
from candle_vision.models import M1ContextValidation, Recommendation, TrendDirection

FRAME = np.zeros((4, 4, 4), dtype=np.uint8)


class BlockingAnalysis:
    """Analysis callable that blocks until released."""

    def __init__(self) -> None:
        self.started = threading.Event()
        self.release = threading.Event()
        self.calls = 0

    def __call__(self, frame: np.ndarray) -> str:
        self.calls += 1
        self.started.set()
        self.release.wait(timeout=5)
        return "done"


def make_validation(recommendation: Recommendation) -> M1ContextValidation:
    """Helper to create validations quickly."""
    return M1ContextValidation(
        is_valid_for_entry=recommendation == Recommendation.ENTER,
        rejection_reasons=[],
        context_score=80,
        trend_direction=TrendDirection.UP,
        pullback_detected=True,
        strong_candle_confirmation=True,
        support_resistance_level=False,
        volume_confirmation=False,
        space_to_run=True,
        indecision_candles=False,
        recommendation=recommendation,
    )


class TestLiveAnalysisGate:
    """Tests for LiveAnalysisGate class."""

    def test_runs_analysis(self) -> None:
        """Test an idle gate analyzes the frame."""
        gate = LiveAnalysisGate(lambda frame: frame.shape)
        assert gate.submit(FRAME) == (4, 4, 4)
        assert gate.stats.analyzed == 1
        assert gate.stats.dropped == 0
        assert gate.busy is False

    def test_drops_frames_while_busy(self) -> None:
        """Test frames offered during an analysis are dropped, not queued."""
        analysis = BlockingAnalysis()
        gate = LiveAnalysisGate(analysis)
        results: list[str | None] = []

        worker = threading.Thread(target=lambda: results.append(gate.submit(FRAME)))
        worker.start()
        assert analysis.started.wait(timeout=5)

        assert gate.busy is True
        assert gate.submit(FRAME) is None
        assert gate.submit(FRAME) is None

        analysis.release.set()
        worker.join(timeout=5)

        assert results == ["done"]
        assert analysis.calls == 1
        assert gate.stats.analyzed == 1
        assert gate.stats.dropped == 2
        assert gate.busy is False

    def test_gate_reopens_after_error(self) -> None:
        """Test a failing analysis releases the gate."""

        def failing(frame: np.ndarray) -> None:
            raise RuntimeError("boom")

        gate = LiveAnalysisGate(failing)
        with pytest.raises(RuntimeError):
            gate.submit(FRAME)
        assert gate.busy is False


class TestLiveAnalysisLoop:
    """Tests for LiveAnalysisLoop class."""

    def test_tick_without_frame(self) -> None:
        """Test nothing is dispatched when capture has no frame."""
        loop = LiveAnalysisLoop(lambda: None, lambda frame: 1, lambda result: None)
        assert loop.tick() is False

    def test_tick_dispatches_to_worker(self) -> None:
        """Test a captured frame is analyzed and reported."""
        delivered = threading.Event()
        results: list[int] = []

        def on_result(result: int) -> None:
            results.append(result)
            delivered.set()

        loop = LiveAnalysisLoop(lambda: FRAME, lambda frame: int(frame.size), on_result)
        assert loop.tick() is True
        assert delivered.wait(timeout=5)
        assert results == [64]

    def test_tick_while_busy_drops(self) -> None:
        """Test a tick during an analysis counts a dropped frame."""
        analysis = BlockingAnalysis()
        loop = LiveAnalysisLoop(lambda: FRAME, analysis, lambda result: None)

        assert loop.tick() is True
        assert analysis.started.wait(timeout=5)
        assert loop.tick() is False

        analysis.release.set()
        assert loop.gate.stats.dropped == 1

    def test_start_and_stop(self) -> None:
        """Test the background loop captures until stopped."""
        captured = threading.Event()

        def capture() -> None:
            captured.set()
            return None

        loop = LiveAnalysisLoop(capture, lambda frame: 1, lambda result: None, 0.01)
        loop.start()
        assert captured.wait(timeout=5)
        loop.stop(timeout=5)

    def test_stop_waits_for_analysis_in_flight(self) -> None:
        """Test stop returns only after the running analysis has reported."""
        analysis = BlockingAnalysis()
        results: list[str] = []
        loop = LiveAnalysisLoop(lambda: FRAME, analysis, results.append)

        assert loop.tick() is True
        assert analysis.started.wait(timeout=5)
        releaser = threading.Timer(0.05, analysis.release.set)
        releaser.start()

        loop.stop(timeout=5)

        assert results == ["done"]
        releaser.join()

    def test_tick_before_worker_takes_gate_drops(self) -> None:
        """Test a second tick never starts a second worker for the same slot."""
        analysis = BlockingAnalysis()
        loop = LiveAnalysisLoop(lambda: FRAME, analysis, lambda result: None)

        assert loop.tick() is True
        assert loop.tick() is False
        analysis.release.set()
        loop.stop(timeout=5)

        assert analysis.calls == 1
        assert loop.gate.stats.dropped == 1

    def test_failed_analysis_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test an analysis error is logged by the worker and not delivered."""
        results: list[int] = []

        def failing(frame: np.ndarray) -> int:
            raise RuntimeError("boom")

        loop = LiveAnalysisLoop(lambda: FRAME, failing, results.append)
        with caplog.at_level("ERROR", logger="candle_vision.live"):
            assert loop.tick() is True
            loop.stop(timeout=5)

        assert results == []
        assert "Live analysis failed" in caplog.text
        assert loop.gate.busy is False


class TestShouldAlert:
    """Tests for should_alert."""

    def test_enter_alerts(self) -> None:
        """Test only ENTER recommendations alert."""
        assert should_alert(make_validation(Recommendation.ENTER)) is True
        assert should_alert(make_validation(Recommendation.WAIT)) is False
        assert should_alert(make_validation(Recommendation.SKIP)) is False
