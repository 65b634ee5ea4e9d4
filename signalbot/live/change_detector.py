# -*- coding: utf-8 -*-
"""
Change detection for emitted signals.

Keeps the last emitted (direction, timestamp) per symbol and decides whether
a freshly classified signal is worth a notification.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from signalbot.signals.base import TradeSignal, DIRECTION_WAIT


POLICY_DIRECTION = "direction"
POLICY_DIRECTION_TIMESTAMP = "direction_timestamp"
NOTIFY_POLICIES = (POLICY_DIRECTION, POLICY_DIRECTION_TIMESTAMP)


logger = logging.getLogger(__name__)


class LastSignalState:
    """Last emitted (direction, timestamp) per symbol. In memory only."""

    def __init__(self):
        self._last: Dict[str, Tuple[str, Any]] = {}

    def get(self, symbol: str) -> Optional[Tuple[str, Any]]:
        return self._last.get(symbol)

    def record(self, symbol: str, signal: TradeSignal):
        self._last[symbol] = (signal.direction, signal.timestamp)

    def snapshot(self) -> Dict[str, Tuple[str, Any]]:
        return dict(self._last)

    def __contains__(self, symbol: str) -> bool:
        return symbol in self._last

    def __len__(self) -> int:
        return len(self._last)


def should_notify(symbol: str, signal: TradeSignal, state: LastSignalState,
                  policy: str = POLICY_DIRECTION) -> bool:
    """
    Decide whether signal should be announced, recording it if so.

    Parameters
    ----------
    symbol : str
        Symbol the signal belongs to.
    signal : TradeSignal
        Newly classified signal.
    state : LastSignalState
        Last emitted signal per symbol. Updated in place when this returns True.
    policy : str, default "direction"
        "direction" fires only on a direction change. "direction_timestamp"
        also fires when a buy/sell repeats on a new candle.

    Returns
    -------
    bool
        True if a notification should be sent.
    """
    if policy not in NOTIFY_POLICIES:
        raise ValueError(f"Unknown notify policy: {policy}. Must be one of {NOTIFY_POLICIES}.")

    previous = state.get(symbol)

    if previous is None:
        # Nothing announced yet; a wait has nothing to clear
        fire = signal.direction != DIRECTION_WAIT
    else:
        prev_direction, prev_timestamp = previous
        if signal.direction != prev_direction:
            fire = True
        elif policy == POLICY_DIRECTION_TIMESTAMP and signal.direction != DIRECTION_WAIT:
            fire = signal.timestamp != prev_timestamp
        else:
            fire = False

    if fire:
        state.record(symbol, signal)
        logger.debug(f"{symbol}: signal changed to {signal.direction} @ {signal.timestamp}")

    return fire
