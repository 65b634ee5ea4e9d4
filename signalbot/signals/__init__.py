# -*- coding: utf-8 -*-
"""
Signal modules for the signal monitor.

This package contains the indicator library and pure signal classification
modules. Each signal module consumes market data and outputs a TradeSignal;
it knows nothing about notifications or previously emitted signals.
"""

from signalbot.signals.base import (
    BaseSignal,
    Candle,
    IndicatorSet,
    TradeSignal,
    DIRECTION_BUY,
    DIRECTION_SELL,
    DIRECTION_WAIT,
    STRATEGY_TREND,
    STRATEGY_REVERSAL
)
from signalbot.signals.indicators import rsi, bollinger, ema, macd
from signalbot.signals.bb_rsi_signal import (
    BBRSISignal,
    ClassifierThresholds,
    classify,
    compute_indicators
)

__all__ = [
    'BaseSignal',
    'Candle',
    'IndicatorSet',
    'TradeSignal',
    'DIRECTION_BUY',
    'DIRECTION_SELL',
    'DIRECTION_WAIT',
    'STRATEGY_TREND',
    'STRATEGY_REVERSAL',
    'rsi',
    'bollinger',
    'ema',
    'macd',
    'BBRSISignal',
    'ClassifierThresholds',
    'classify',
    'compute_indicators'
]
