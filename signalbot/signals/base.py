# -*- coding: utf-8 -*-
"""
Base signal interface and standardized signal format.

Defines the contract that all signal modules must follow, ensuring consistency
across different signal types. A signal module consumes two price frames
(fast and slow timeframe) and returns a single classified TradeSignal.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, asdict
from typing import Dict, Any, Optional, List
import pandas as pd


# Directions
DIRECTION_BUY = "buy"
DIRECTION_SELL = "sell"
DIRECTION_WAIT = "wait"
DIRECTIONS = (DIRECTION_BUY, DIRECTION_SELL, DIRECTION_WAIT)

# Strategies
STRATEGY_TREND = "trend"
STRATEGY_REVERSAL = "reversal"
STRATEGIES = (STRATEGY_TREND, STRATEGY_REVERSAL, None)

# Wait reasons
REASON_NO_DATA = "no data"
REASON_WARM_UP = "insufficient warm-up"
REASON_WEAK_RSI = "weak rsi"
REASON_ALREADY_TRIGGERED = "already triggered"
REASON_MACD_NOT_CONFIRMED = "macd not confirmed"

# Columns every price frame must carry
PRICE_COLUMNS = ['open', 'high', 'low', 'close']


@dataclass(frozen=True)
class Candle:
    """One unit of price action for a fixed interval."""

    timestamp: Any
    open: float
    high: float
    low: float
    close: float

    @classmethod
    def from_row(cls, timestamp: Any, row: pd.Series) -> 'Candle':
        return cls(
            timestamp=timestamp,
            open=float(row['open']),
            high=float(row['high']),
            low=float(row['low']),
            close=float(row['close'])
        )

    @property
    def is_bullish(self) -> bool:
        return self.close > self.open

    @property
    def is_bearish(self) -> bool:
        return self.close < self.open


@dataclass
class IndicatorSet:
    """
    Indicator series computed for one price frame.

    Every list is index-aligned with the frame it was computed from. Values
    are None until the indicator's warm-up window is satisfied.
    """

    rsi: List[Optional[float]]
    bb_mid: List[Optional[float]]
    bb_upper: List[Optional[float]]
    bb_lower: List[Optional[float]]
    macd: List[Optional[float]] = field(default_factory=list)
    macd_signal: List[Optional[float]] = field(default_factory=list)

    @staticmethod
    def _last(values: List[Optional[float]]) -> Optional[float]:
        return values[-1] if values else None

    @property
    def last_rsi(self) -> Optional[float]:
        return self._last(self.rsi)

    @property
    def last_mid(self) -> Optional[float]:
        return self._last(self.bb_mid)

    @property
    def last_upper(self) -> Optional[float]:
        return self._last(self.bb_upper)

    @property
    def last_lower(self) -> Optional[float]:
        return self._last(self.bb_lower)

    @property
    def last_macd(self) -> Optional[float]:
        return self._last(self.macd)

    @property
    def last_macd_signal(self) -> Optional[float]:
        return self._last(self.macd_signal)

    def bands_ready(self) -> bool:
        return None not in (self.last_mid, self.last_upper, self.last_lower)


@dataclass(frozen=True)
class TradeSignal:
    """
    Classified market state for one symbol.

    entry, take_profit and stop_loss are None when direction is "wait".
    reason is only ever set on "wait" signals, and may be None there when no
    setup matched.
    """

    symbol: str
    timestamp: Any
    direction: str
    strategy: Optional[str] = None
    entry: Optional[float] = None
    take_profit: Optional[float] = None
    stop_loss: Optional[float] = None
    reason: Optional[str] = None

    @property
    def is_actionable(self) -> bool:
        return self.direction != DIRECTION_WAIT

    def to_dict(self) -> Dict[str, Any]:
        """Convert signal to a JSON-friendly dictionary."""
        data = asdict(self)
        if self.timestamp is not None and hasattr(self.timestamp, 'isoformat'):
            data['timestamp'] = self.timestamp.isoformat()
        return data


class BaseSignal(ABC):
    """
    Abstract base class for all signal modules.

    Signal modules are pure: they consume market data and return a
    TradeSignal. They have no knowledge of notifications, previous signals or
    the polling schedule.
    """

    def __init__(self, name: str):
        """
        Initialize signal module.

        Parameters
        ----------
        name : str
            Name of the signal module (e.g., 'bb_rsi').
        """
        self.name = name

    @abstractmethod
    def generate_signal(self, symbol: str, fast_df: Optional[pd.DataFrame],
                        slow_df: Optional[pd.DataFrame]) -> TradeSignal:
        """
        Generate a classified signal from two timeframes of market data.

        Parameters
        ----------
        symbol : str
            Instrument symbol the frames belong to.
        fast_df : pd.DataFrame or None
            Fast timeframe candles, ascending by time, with open/high/low/close
            columns. None when the data could not be fetched.
        slow_df : pd.DataFrame or None
            Slow (confirmation) timeframe candles, same layout.

        Returns
        -------
        TradeSignal
            The classification of the latest fast candle.
        """
        pass

    def create_wait_signal(self, symbol: str, timestamp: Any,
                           reason: Optional[str] = None) -> TradeSignal:
        """
        Create a standardized wait (no trade) signal.

        Parameters
        ----------
        symbol : str
            Instrument symbol.
        timestamp : Any
            Timestamp of the candle being classified, or None.
        reason : str or None, optional
            Why the signal is a wait. None means no setup matched.

        Returns
        -------
        TradeSignal
            Wait signal without prices.
        """
        return TradeSignal(symbol=symbol, timestamp=timestamp,
                           direction=DIRECTION_WAIT, reason=reason)

    def validate_signal(self, signal: TradeSignal) -> bool:
        """
        Validate that signal conforms to the standard format.

        Raises
        ------
        ValueError
            If direction/strategy are unknown or prices do not match the
            direction.
        """
        if signal.direction not in DIRECTIONS:
            raise ValueError(f"Invalid direction: {signal.direction}. Must be one of {DIRECTIONS}.")
        if signal.strategy not in STRATEGIES:
            raise ValueError(f"Invalid strategy: {signal.strategy}. Must be one of {STRATEGIES}.")

        prices = (signal.entry, signal.take_profit, signal.stop_loss)
        if signal.direction == DIRECTION_WAIT:
            if any(p is not None for p in prices):
                raise ValueError("Wait signal must not carry entry/take_profit/stop_loss")
            if signal.strategy is not None:
                raise ValueError("Wait signal must not carry a strategy")
        else:
            if any(p is None for p in prices):
                raise ValueError(f"{signal.direction} signal requires entry, take_profit and stop_loss")
            if signal.strategy is None:
                raise ValueError(f"{signal.direction} signal requires a strategy")
            if signal.reason is not None:
                raise ValueError("Only wait signals carry a reason")

        return True
