"""One-minute entry context validation.

Gates a directional signal against the recent candle context: trend,
pullback, confirmation candle, indecision, nearby levels, volume, room to
run, and trend alignment. Stateless; every call builds a fresh result.
"""

import logging
from dataclasses import dataclass

from .levels import distance_pct, find_nearest_level
from .models import (
    CandleData,
    ConfluenceContext,
    ConfluenceLevel,
    LevelStrength,
    LevelType,
    M1ContextValidation,
    Recommendation,
    Signal,
    TrendDirection,
    VolumeContext,
    VolumeTrend,
)
from .ohlc import validate_candles

logger = logging.getLogger(__name__)

REASON_INSUFFICIENT = "Insufficient data or neutral signal"
REASON_FLAT = "Price is ranging - market has no direction"
REASON_WEAK_CONFIRMATION = "Weak or missing confirmation candle"
REASON_INDECISION = "Indecision candles detected (wicks on both sides)"
REASON_NO_SPACE = "Not enough room for price to run"
REASON_AGAINST_TREND = "Signal against the main trend"


@dataclass
class M1ContextConfig:
    """Configuration for M1 context validation."""

    min_candles: int = 20
    trend_lookback: int = 10

    # Percent thresholds below which the trend is flat
    flat_range_pct: float = 0.1
    flat_change_pct: float = 0.05

    # Body must be at least this fraction of the range for a strong candle
    strong_body_ratio: float = 0.6

    # Indecision: both wicks > ratio * body and body < ratio * range
    indecision_wick_ratio: float = 0.8
    indecision_body_ratio: float = 0.4
    indecision_min_count: int = 2

    # Percent distances for level proximity and room to run
    level_proximity_pct: float = 0.1
    min_space_pct: float = 0.15

    # Score contributions
    trend_points: int = 25
    pullback_points: int = 20
    confirmation_points: int = 25
    indecision_penalty: int = 30
    level_points: int = 20
    volume_points: int = 15
    no_space_penalty: int = 25
    alignment_points: int = 10
    misalignment_penalty: int = 20

    # Recommendation thresholds
    enter_score: int = 70
    wait_score: int = 50
    wait_max_reasons: int = 1


class M1ContextValidator:
    """Validator deciding whether a signal is actionable on the M1 chart."""

    def __init__(self, config: M1ContextConfig | None = None) -> None:
        """Initialize validator.

        Args:
            config: Validation configuration. Uses defaults if None.
        """
        self.config = config or M1ContextConfig()

    def validate(
        self,
        candles: list[CandleData],
        signal: Signal,
        volume: VolumeContext | None = None,
        confluence: ConfluenceContext | None = None,
    ) -> M1ContextValidation:
        """Validate a signal against the candle context.

        Args:
            candles: Candles ordered oldest to newest.
            signal: Signal to gate.
            volume: Optional volume aggregate.
            confluence: Optional confluence aggregate with price levels.

        Returns:
            Validation record with score, reasons and recommendation.
        """
        cfg = self.config
        candles, _ = validate_candles(candles)

        if len(candles) < cfg.min_candles or signal == Signal.NEUTRAL:
            return self._rejected(TrendDirection.FLAT, REASON_INSUFFICIENT)

        trend = self.detect_trend(candles[-cfg.trend_lookback :])
        if trend == TrendDirection.FLAT:
            return self._rejected(trend, REASON_FLAT)

        reasons: list[str] = []
        score = cfg.trend_points

        pullback = self.detect_pullback(candles[-3:], trend)
        if pullback:
            score += cfg.pullback_points

        strong_candle = self.check_strong_confirmation(candles[-1], signal)
        if strong_candle:
            score += cfg.confirmation_points
        else:
            reasons.append(REASON_WEAK_CONFIRMATION)

        indecision = self.check_indecision(candles[-3:])
        if indecision:
            reasons.append(REASON_INDECISION)
            score -= cfg.indecision_penalty

        current_price = candles[-1].close
        levels = confluence.support_resistance if confluence else None

        at_level = self.check_level(current_price, signal, levels)
        if at_level:
            score += cfg.level_points

        volume_ok = self.check_volume(volume)
        if volume_ok:
            score += cfg.volume_points

        space = self.check_space_to_run(current_price, signal, levels)
        if not space:
            reasons.append(REASON_NO_SPACE)
            score -= cfg.no_space_penalty

        if self.is_aligned(trend, signal):
            score += cfg.alignment_points
        else:
            reasons.append(REASON_AGAINST_TREND)
            score -= cfg.misalignment_penalty

        score = max(0, min(100, score))
        recommendation = self._recommend(score, reasons)

        return M1ContextValidation(
            is_valid_for_entry=recommendation == Recommendation.ENTER,
            rejection_reasons=reasons,
            context_score=score,
            trend_direction=trend,
            pullback_detected=pullback,
            strong_candle_confirmation=strong_candle,
            support_resistance_level=at_level,
            volume_confirmation=volume_ok,
            space_to_run=space,
            indecision_candles=indecision,
            recommendation=recommendation,
        )

    def detect_trend(self, candles: list[CandleData]) -> TrendDirection:
        """Classify the trend of a candle window.

        Flat when the high/low range or the first-to-last close change is
        too small relative to the last close.
        """
        if not candles:
            return TrendDirection.FLAT

        first_close = candles[0].close
        last_close = candles[-1].close
        if first_close <= 0 or last_close <= 0:
            return TrendDirection.FLAT
        change_pct = (last_close - first_close) / first_close * 100

        max_high = max(c.high for c in candles)
        min_low = min(c.low for c in candles)
        range_pct = (max_high - min_low) / last_close * 100

        if range_pct < self.config.flat_range_pct or abs(change_pct) < self.config.flat_change_pct:
            return TrendDirection.FLAT

        return TrendDirection.UP if change_pct > 0 else TrendDirection.DOWN

    def detect_pullback(self, candles: list[CandleData], trend: TrendDirection) -> bool:
        """Correction then resumption over the last three closes."""
        if len(candles) < 3 or trend == TrendDirection.FLAT:
            return False

        first, middle, last = (c.close for c in candles[-3:])
        if trend == TrendDirection.UP:
            return first > middle and last > middle
        return first < middle and last < middle

    def check_strong_confirmation(self, candle: CandleData, signal: Signal) -> bool:
        """Large body pointing the same way as the signal."""
        if candle.range <= 0:
            return False

        is_strong = candle.body / candle.range >= self.config.strong_body_ratio
        direction = Signal.BUY if candle.close > candle.open else Signal.SELL
        return is_strong and direction == signal

    def check_indecision(self, candles: list[CandleData]) -> bool:
        """At least two candles with long wicks on both sides and a small body."""
        cfg = self.config
        count = 0
        for candle in candles:
            body = candle.body
            if (
                candle.upper_shadow > body * cfg.indecision_wick_ratio
                and candle.lower_shadow > body * cfg.indecision_wick_ratio
                and body < candle.range * cfg.indecision_body_ratio
            ):
                count += 1
        return count >= cfg.indecision_min_count

    def check_level(
        self, price: float, signal: Signal, levels: list[ConfluenceLevel] | None
    ) -> bool:
        """Strong support (buy) or resistance (sell) within proximity of price."""
        if not levels:
            return False

        wanted = LevelType.SUPPORT if signal == Signal.BUY else LevelType.RESISTANCE
        return any(
            level.level_type == wanted
            and level.strength == LevelStrength.STRONG
            and distance_pct(level.price, price) <= self.config.level_proximity_pct
            for level in levels
        )

    def check_volume(self, volume: VolumeContext | None) -> bool:
        """Abnormal and increasing volume."""
        if volume is None:
            return False
        return volume.abnormal and volume.trend == VolumeTrend.INCREASING

    def check_space_to_run(
        self, price: float, signal: Signal, levels: list[ConfluenceLevel] | None
    ) -> bool:
        """Nearest opposing level is far enough away, or there is none."""
        if not levels:
            return True

        if signal == Signal.BUY:
            opposing = [
                lvl
                for lvl in levels
                if lvl.level_type == LevelType.RESISTANCE and lvl.price > price
            ]
        else:
            opposing = [
                lvl for lvl in levels if lvl.level_type == LevelType.SUPPORT and lvl.price < price
            ]

        nearest = find_nearest_level(price, opposing)
        if nearest is None:
            return True

        return distance_pct(nearest.price, price) >= self.config.min_space_pct

    def is_aligned(self, trend: TrendDirection, signal: Signal) -> bool:
        """Trend and signal point the same way."""
        return (trend == TrendDirection.UP and signal == Signal.BUY) or (
            trend == TrendDirection.DOWN and signal == Signal.SELL
        )

    def _recommend(self, score: int, reasons: list[str]) -> Recommendation:
        cfg = self.config
        if score >= cfg.enter_score and not reasons:
            return Recommendation.ENTER
        if score >= cfg.wait_score and len(reasons) <= cfg.wait_max_reasons:
            return Recommendation.WAIT
        return Recommendation.SKIP

    def _rejected(self, trend: TrendDirection, reason: str) -> M1ContextValidation:
        return M1ContextValidation(
            is_valid_for_entry=False,
            rejection_reasons=[reason],
            context_score=0,
            trend_direction=trend,
            pullback_detected=False,
            strong_candle_confirmation=False,
            support_resistance_level=False,
            volume_confirmation=False,
            space_to_run=False,
            indecision_candles=True,
            recommendation=Recommendation.SKIP,
        )


def validate_m1_context(
    candles: list[CandleData],
    signal: Signal,
    volume: VolumeContext | None = None,
    confluence: ConfluenceContext | None = None,
) -> M1ContextValidation:
    """Convenience function to validate with default config."""
    return M1ContextValidator().validate(candles, signal, volume, confluence)


def format_validation(validation: M1ContextValidation, signal: Signal) -> list[str]:
    """Render the diagnostic summary of a validation, one line per entry."""

    def yes_no(flag: bool) -> str:
        return "YES" if flag else "NO"

    lines = [
        "M1 context validation:",
        f"  Signal: {signal.value} | Valid: {yes_no(validation.is_valid_for_entry)}",
        f"  Score: {validation.context_score}% | "
        f"Recommendation: {validation.recommendation.value.upper()}",
        f"  Trend: {validation.trend_direction.value} | "
        f"Pullback: {yes_no(validation.pullback_detected)}",
        f"  Strong candle: {yes_no(validation.strong_candle_confirmation)} | "
        f"Indecision: {yes_no(validation.indecision_candles)}",
        f"  S/R level: {yes_no(validation.support_resistance_level)} | "
        f"Volume: {yes_no(validation.volume_confirmation)}",
        f"  Space to run: {yes_no(validation.space_to_run)}",
    ]
    if validation.rejection_reasons:
        lines.append("M1 rejection reasons:")
        lines.extend(f"  - {reason}" for reason in validation.rejection_reasons)
    return lines


def log_validation(validation: M1ContextValidation, signal: Signal) -> None:
    """Write the diagnostic summary through the module logger."""
    for line in format_validation(validation, signal):
        logger.info(line)
