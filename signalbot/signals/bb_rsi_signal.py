# -*- coding: utf-8 -*-
"""
Bollinger/RSI multi-timeframe signal module.

Pure signal classification over two timeframes: a fast frame that carries the
setup and a slow frame that confirms it. The RSI on both frames must agree on
being outside a neutral band, then a trend (continuation) rule and a reversal
(mean-reversion) rule are tried in that order.

This module contains ALL classification logic and exports the BBRSISignal
class for use by the live monitor.
"""

from dataclasses import dataclass
from typing import Any, Optional, Tuple

import pandas as pd

from signalbot.signals import indicators
from signalbot.signals.base import (
    BaseSignal, Candle, IndicatorSet, TradeSignal, PRICE_COLUMNS,
    DIRECTION_BUY, DIRECTION_SELL, DIRECTION_WAIT,
    STRATEGY_TREND, STRATEGY_REVERSAL,
    REASON_NO_DATA, REASON_WARM_UP, REASON_WEAK_RSI,
    REASON_ALREADY_TRIGGERED, REASON_MACD_NOT_CONFIRMED
)


# ============================================================================
# Configuration Constants
# ============================================================================

# RSI gate: both timeframes below RSI_LOW or both above RSI_HIGH
RSI_LOW = 45.0
RSI_HIGH = 55.0

# Already-triggered guard scopes
GUARD_ALL = "all"
GUARD_TREND = "trend"
GUARD_OFF = "off"
GUARD_SCOPES = (GUARD_ALL, GUARD_TREND, GUARD_OFF)

# Reversal stop-loss sources
STOP_CANDLE_EXTREME = "candle_extreme"
STOP_SLOW_OPEN = "slow_open"
REVERSAL_STOPS = (STOP_CANDLE_EXTREME, STOP_SLOW_OPEN)


@dataclass
class ClassifierThresholds:
    """Tunable inputs of the classifier. Nothing in the rules is hardcoded."""

    rsi_low: float = RSI_LOW
    rsi_high: float = RSI_HIGH
    rsi_period: int = indicators.RSI_PERIOD
    bb_window: int = indicators.BB_WINDOW
    bb_width: float = indicators.BB_WIDTH
    band_buffer: float = 0.0  # Pulled inward from each outer band before comparing
    use_macd_confirmation: bool = False
    macd_fast: int = indicators.MACD_FAST
    macd_slow: int = indicators.MACD_SLOW
    macd_signal: int = indicators.MACD_SIGNAL
    triggered_guard: str = GUARD_TREND
    reversal_stop: str = STOP_CANDLE_EXTREME

    @property
    def warm_up_candles(self) -> int:
        """Candles per timeframe needed before the last candle has every indicator."""
        needed = max(self.rsi_period + 1, self.bb_window)
        if self.use_macd_confirmation:
            needed = max(needed, self.macd_slow + self.macd_signal - 1)
        return needed

    def validate(self):
        """Raise ValueError for inconsistent thresholds."""
        if self.rsi_low >= self.rsi_high:
            raise ValueError(f"rsi_low ({self.rsi_low}) must be below rsi_high ({self.rsi_high})")
        for name in ('rsi_period', 'bb_window', 'macd_fast', 'macd_slow', 'macd_signal'):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1, got {getattr(self, name)}")
        if self.macd_fast >= self.macd_slow:
            raise ValueError(f"macd_fast ({self.macd_fast}) must be below macd_slow ({self.macd_slow})")
        if self.bb_width <= 0:
            raise ValueError(f"bb_width must be > 0, got {self.bb_width}")
        if self.band_buffer < 0:
            raise ValueError(f"band_buffer must be >= 0, got {self.band_buffer}")
        if self.triggered_guard not in GUARD_SCOPES:
            raise ValueError(f"triggered_guard must be one of {GUARD_SCOPES}, got {self.triggered_guard}")
        if self.reversal_stop not in REVERSAL_STOPS:
            raise ValueError(f"reversal_stop must be one of {REVERSAL_STOPS}, got {self.reversal_stop}")


# ============================================================================
# Indicator Computation
# ============================================================================

def compute_indicators(df: pd.DataFrame, thresholds: ClassifierThresholds,
                       include_macd: bool = False) -> IndicatorSet:
    """
    Compute the indicator set the classifier reads for one price frame.

    Parameters
    ----------
    df : pd.DataFrame
        Candles ascending by time with a 'close' column.
    thresholds : ClassifierThresholds
        Supplies the indicator periods.
    include_macd : bool, default False
        Whether to compute MACD and its signal line.

    Returns
    -------
    IndicatorSet
        Series index-aligned with df.
    """
    closes = df['close']
    bands = indicators.bollinger(closes, window=thresholds.bb_window, width=thresholds.bb_width)
    ind = IndicatorSet(
        rsi=indicators.rsi(closes, period=thresholds.rsi_period),
        bb_mid=bands.mid,
        bb_upper=bands.upper,
        bb_lower=bands.lower
    )
    if include_macd:
        result = indicators.macd(closes, fast=thresholds.macd_fast,
                                 slow=thresholds.macd_slow, signal=thresholds.macd_signal)
        ind.macd = result.macd
        ind.macd_signal = result.signal
    return ind


# ============================================================================
# Rules
# ============================================================================

def _last_candle(df: pd.DataFrame) -> Candle:
    return Candle.from_row(df.index[-1], df.iloc[-1])


def _slow_contained(slow: Candle, ind: IndicatorSet, buffer: float) -> bool:
    return slow.high < ind.last_upper - buffer and slow.low > ind.last_lower + buffer


def _trend_setup(fast: Candle, slow: Candle, fast_ind: IndicatorSet,
                 slow_ind: IndicatorSet, buffer: float) -> Optional[Tuple[str, float, float]]:
    """Return (direction, take_profit, stop_loss) for a continuation setup."""
    if not _slow_contained(slow, slow_ind, buffer):
        return None

    if (fast.close > fast_ind.last_mid and fast.high < fast_ind.last_upper - buffer
            and slow.is_bullish):
        return DIRECTION_BUY, fast_ind.last_upper, slow.open

    if (fast.close < fast_ind.last_mid and fast.low > fast_ind.last_lower + buffer
            and slow.is_bearish):
        return DIRECTION_SELL, fast_ind.last_lower, slow.open

    return None


def _reversal_setup(fast: Candle, slow: Candle, fast_ind: IndicatorSet,
                    buffer: float, stop_source: str) -> Optional[Tuple[str, float, float]]:
    """Return (direction, take_profit, stop_loss) for a mean-reversion setup."""
    mid = fast_ind.last_mid

    if (slow.is_bullish and fast.is_bullish and fast.close < mid
            and fast.low < fast_ind.last_lower + buffer and fast.high < mid):
        stop = fast.low if stop_source == STOP_CANDLE_EXTREME else slow.open
        return DIRECTION_BUY, mid, stop

    if (slow.is_bearish and fast.is_bearish and fast.close > mid
            and fast.high > fast_ind.last_upper - buffer and fast.low > mid):
        stop = fast.high if stop_source == STOP_CANDLE_EXTREME else slow.open
        return DIRECTION_SELL, mid, stop

    return None


def _already_triggered(direction: str, fast: Candle, take_profit: float, stop_loss: float) -> bool:
    if direction == DIRECTION_BUY:
        return fast.high >= take_profit or fast.low <= stop_loss
    return fast.low <= take_profit or fast.high >= stop_loss


def _rsi_agrees(fast_rsi: float, slow_rsi: float, thresholds: ClassifierThresholds) -> bool:
    both_low = fast_rsi < thresholds.rsi_low and slow_rsi < thresholds.rsi_low
    both_high = fast_rsi > thresholds.rsi_high and slow_rsi > thresholds.rsi_high
    return both_low or both_high


def _wait(symbol: str, timestamp: Any, reason: Optional[str]) -> TradeSignal:
    return TradeSignal(symbol=symbol, timestamp=timestamp, direction=DIRECTION_WAIT, reason=reason)


def classify(symbol: str, fast_df: Optional[pd.DataFrame], slow_df: Optional[pd.DataFrame],
             fast_ind: Optional[IndicatorSet], slow_ind: Optional[IndicatorSet],
             thresholds: ClassifierThresholds) -> TradeSignal:
    """
    Classify the latest fast candle into buy / sell / wait.

    Parameters
    ----------
    symbol : str
        Instrument symbol, copied onto the signal.
    fast_df, slow_df : pd.DataFrame or None
        Fast and slow timeframe candles, ascending by time.
    fast_ind, slow_ind : IndicatorSet or None
        Indicators index-aligned with fast_df / slow_df.
    thresholds : ClassifierThresholds
        Rule configuration.

    Returns
    -------
    TradeSignal
        Timestamped with the last fast candle. Pure: identical inputs give an
        identical signal.

    Notes
    -----
    Evaluation order (first match wins): data/warm-up preconditions, RSI
    gate, trend rule, reversal rule, already-triggered guard, optional MACD
    confirmation. All comparisons are strict so ties never fire a rule.
    """
    if fast_df is None or slow_df is None or fast_df.empty or slow_df.empty:
        return _wait(symbol, None, REASON_NO_DATA)

    timestamp = fast_df.index[-1]

    if fast_ind is None or slow_ind is None:
        return _wait(symbol, timestamp, REASON_WARM_UP)

    fast_rsi = fast_ind.last_rsi
    slow_rsi = slow_ind.last_rsi
    if fast_rsi is None or slow_rsi is None:
        return _wait(symbol, timestamp, REASON_WARM_UP)
    if not (fast_ind.bands_ready() and slow_ind.bands_ready()):
        return _wait(symbol, timestamp, REASON_WARM_UP)
    if thresholds.use_macd_confirmation and (fast_ind.last_macd is None or fast_ind.last_macd_signal is None):
        return _wait(symbol, timestamp, REASON_WARM_UP)

    if not _rsi_agrees(fast_rsi, slow_rsi, thresholds):
        return _wait(symbol, timestamp, REASON_WEAK_RSI)

    fast = _last_candle(fast_df)
    slow = _last_candle(slow_df)
    buffer = thresholds.band_buffer

    strategy = STRATEGY_TREND
    setup = _trend_setup(fast, slow, fast_ind, slow_ind, buffer)
    if setup is None:
        strategy = STRATEGY_REVERSAL
        setup = _reversal_setup(fast, slow, fast_ind, buffer, thresholds.reversal_stop)
    if setup is None:
        return _wait(symbol, timestamp, None)

    direction, take_profit, stop_loss = setup

    guarded = (thresholds.triggered_guard == GUARD_ALL
               or (thresholds.triggered_guard == GUARD_TREND and strategy == STRATEGY_TREND))
    if guarded and _already_triggered(direction, fast, take_profit, stop_loss):
        return _wait(symbol, timestamp, REASON_ALREADY_TRIGGERED)

    if thresholds.use_macd_confirmation:
        histogram = fast_ind.last_macd - fast_ind.last_macd_signal
        if (direction == DIRECTION_BUY and histogram <= 0) or (direction == DIRECTION_SELL and histogram >= 0):
            return _wait(symbol, timestamp, REASON_MACD_NOT_CONFIRMED)

    return TradeSignal(
        symbol=symbol,
        timestamp=timestamp,
        direction=direction,
        strategy=strategy,
        entry=fast.close,
        take_profit=float(take_profit),
        stop_loss=float(stop_loss)
    )


# ============================================================================
# Signal Module
# ============================================================================

class BBRSISignal(BaseSignal):
    """Bollinger/RSI two-timeframe signal module."""

    def __init__(self, thresholds: Optional[ClassifierThresholds] = None):
        super().__init__(name="bb_rsi")
        self.thresholds = thresholds or ClassifierThresholds()
        self.thresholds.validate()

    def compute_indicators(self, df: pd.DataFrame) -> IndicatorSet:
        return compute_indicators(df, self.thresholds,
                                  include_macd=self.thresholds.use_macd_confirmation)

    def generate_signal(self, symbol: str, fast_df: Optional[pd.DataFrame],
                        slow_df: Optional[pd.DataFrame]) -> TradeSignal:
        if fast_df is None or slow_df is None or fast_df.empty or slow_df.empty:
            return self.create_wait_signal(symbol, None, REASON_NO_DATA)

        missing = [col for col in PRICE_COLUMNS if col not in fast_df.columns or col not in slow_df.columns]
        if missing:
            raise ValueError(f"Missing required columns: {missing}")

        fast_ind = self.compute_indicators(fast_df)
        slow_ind = self.compute_indicators(slow_df)
        signal = classify(symbol, fast_df, slow_df, fast_ind, slow_ind, self.thresholds)
        self.validate_signal(signal)
        return signal
