# -*- coding: utf-8 -*-
"""
Technical indicator library.

Pure functions computing RSI, Bollinger Bands, EMA and MACD over a sequence of
closes. Every function returns plain lists index-aligned with its input, with
None marking positions where the indicator is not yet defined (warm-up).
"""

import math
from typing import List, NamedTuple, Optional, Sequence, Union

import numpy as np
import pandas as pd


# ============================================================================
# Configuration Constants
# ============================================================================

RSI_PERIOD = 14
BB_WINDOW = 20
BB_WIDTH = 2.0
MACD_FAST = 12
MACD_SLOW = 26
MACD_SIGNAL = 9

# Floor applied to the averages when avg_loss is zero, so that RSI is total:
# rising series -> ~100, flat series -> exactly 50, never inf/NaN.
RSI_EPSILON = 1e-10


PriceInput = Union[Sequence[float], np.ndarray, pd.Series]
IndicatorSeries = List[Optional[float]]


class BollingerBands(NamedTuple):
    mid: IndicatorSeries
    upper: IndicatorSeries
    lower: IndicatorSeries


class MACDResult(NamedTuple):
    macd: IndicatorSeries
    signal: IndicatorSeries


def _to_array(values: PriceInput) -> np.ndarray:
    """Convert closes to a float numpy array."""
    if isinstance(values, pd.Series):
        return values.to_numpy(dtype=float)
    return np.asarray(values, dtype=float)


def _to_optional_list(values: Union[np.ndarray, pd.Series]) -> IndicatorSeries:
    """Replace NaN with None so missing values never leak into arithmetic."""
    return [None if math.isnan(v) else float(v) for v in values]


def _require_positive(name: str, value: int):
    if value < 1:
        raise ValueError(f"{name} must be >= 1, got {value}")


# ============================================================================
# RSI
# ============================================================================

def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        rs = max(avg_gain, RSI_EPSILON) / RSI_EPSILON
    else:
        rs = avg_gain / avg_loss
    return 100.0 - 100.0 / (1.0 + rs)


def rsi(closes: PriceInput, period: int = RSI_PERIOD) -> IndicatorSeries:
    """
    Wilder's smoothed Relative Strength Index.

    Parameters
    ----------
    closes : sequence of float
        Closing prices, ascending by time.
    period : int, default 14
        Smoothing period.

    Returns
    -------
    list of float or None
        RSI values, None for indices < period.

    Notes
    -----
    The seed averages are the simple means of the first `period` deltas and
    the seed value sits at index `period`. Later values use Wilder smoothing:
    avg = (avg * (period - 1) + current) / period.
    """
    _require_positive("period", period)
    prices = _to_array(closes)
    n = len(prices)
    result: IndicatorSeries = [None] * n

    if n < period + 1:
        return result

    deltas = np.diff(prices)
    gains = np.where(deltas > 0, deltas, 0.0)
    losses = np.where(deltas < 0, -deltas, 0.0)

    avg_gain = float(gains[:period].mean())
    avg_loss = float(losses[:period].mean())
    result[period] = _rsi_value(avg_gain, avg_loss)

    # deltas[i - 1] is the move into index i
    for i in range(period + 1, n):
        avg_gain = (avg_gain * (period - 1) + gains[i - 1]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i - 1]) / period
        result[i] = _rsi_value(avg_gain, avg_loss)

    return result


# ============================================================================
# Bollinger Bands
# ============================================================================

def bollinger(closes: PriceInput, window: int = BB_WINDOW,
              width: float = BB_WIDTH) -> BollingerBands:
    """
    Bollinger Bands over the inclusive trailing window [i - window + 1, i].

    Uses the population standard deviation. Values are None for
    indices < window - 1.
    """
    _require_positive("window", window)
    prices = pd.Series(_to_array(closes))

    rolling = prices.rolling(window=window, min_periods=window)
    mid = rolling.mean()
    std = rolling.std(ddof=0)

    upper = mid + width * std
    lower = mid - width * std

    return BollingerBands(
        mid=_to_optional_list(mid),
        upper=_to_optional_list(upper),
        lower=_to_optional_list(lower)
    )


# ============================================================================
# EMA / MACD
# ============================================================================

def ema(values: PriceInput, length: int) -> IndicatorSeries:
    """
    Exponential moving average seeded with the simple mean of the first
    `length` values (placed at index length - 1).
    """
    _require_positive("length", length)
    data = _to_array(values)
    n = len(data)
    result: IndicatorSeries = [None] * n

    if n < length:
        return result

    alpha = 2.0 / (length + 1)
    current = float(data[:length].mean())
    result[length - 1] = current

    for i in range(length, n):
        current = alpha * float(data[i]) + (1 - alpha) * current
        result[i] = current

    return result


def macd(closes: PriceInput, fast: int = MACD_FAST, slow: int = MACD_SLOW,
         signal: int = MACD_SIGNAL) -> MACDResult:
    """
    MACD line (EMA(fast) - EMA(slow)) and its signal line.

    The signal line is an EMA over the compacted MACD line (None values
    stripped) expanded back onto the original indices, so the first
    `signal - 1` defined MACD points have no signal value.
    """
    _require_positive("fast", fast)
    _require_positive("slow", slow)
    _require_positive("signal", signal)

    fast_ema = ema(closes, fast)
    slow_ema = ema(closes, slow)

    macd_line: IndicatorSeries = [
        f - s if f is not None and s is not None else None
        for f, s in zip(fast_ema, slow_ema)
    ]

    defined_idx = [i for i, v in enumerate(macd_line) if v is not None]
    compact_signal = ema([macd_line[i] for i in defined_idx], signal)

    signal_line: IndicatorSeries = [None] * len(macd_line)
    for i, value in zip(defined_idx, compact_signal):
        signal_line[i] = value

    return MACDResult(macd=macd_line, signal=signal_line)
