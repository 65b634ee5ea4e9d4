import pandas as pd
import pytest

from signalbot.signals.base import TradeSignal
from signalbot.live.change_detector import LastSignalState, should_notify


T1 = pd.Timestamp("2025-01-01 10:00", tz="UTC")
T2 = pd.Timestamp("2025-01-01 10:05", tz="UTC")


def sig(direction, ts=T1):
    if direction == "wait":
        return TradeSignal("EUR/USD", ts, "wait")
    return TradeSignal("EUR/USD", ts, direction, strategy="trend", entry=1.0, take_profit=1.1, stop_loss=0.9)


@pytest.mark.parametrize("policy", ["direction", "direction_timestamp"])
def test_first_wait_is_silent_and_not_recorded(policy):
    state = LastSignalState()
    assert should_notify("EUR/USD", sig("wait"), state, policy) is False
    assert "EUR/USD" not in state
    assert len(state) == 0


@pytest.mark.parametrize("policy", ["direction", "direction_timestamp"])
def test_identical_signal_fires_once(policy):
    state = LastSignalState()
    assert should_notify("EUR/USD", sig("buy"), state, policy) is True
    assert should_notify("EUR/USD", sig("buy"), state, policy) is False
    assert state.get("EUR/USD") == ("buy", T1)


@pytest.mark.parametrize("policy", ["direction", "direction_timestamp"])
def test_direction_flip_fires_exactly_once(policy):
    state = LastSignalState()
    should_notify("EUR/USD", sig("buy"), state, policy)
    assert should_notify("EUR/USD", sig("sell", T2), state, policy) is True
    assert should_notify("EUR/USD", sig("sell", T2), state, policy) is False
    assert state.get("EUR/USD") == ("sell", T2)


def test_direction_policy_ignores_new_timestamp():
    state = LastSignalState()
    should_notify("EUR/USD", sig("buy", T1), state)
    assert should_notify("EUR/USD", sig("buy", T2), state) is False
    assert state.get("EUR/USD") == ("buy", T1)


def test_timestamp_policy_fires_on_new_candle():
    state = LastSignalState()
    should_notify("EUR/USD", sig("buy", T1), state, "direction_timestamp")
    assert should_notify("EUR/USD", sig("buy", T2), state, "direction_timestamp") is True
    assert state.get("EUR/USD") == ("buy", T2)


@pytest.mark.parametrize("policy", ["direction", "direction_timestamp"])
def test_signal_clearing_fires_then_repeated_waits_stay_silent(policy):
    state = LastSignalState()
    should_notify("EUR/USD", sig("buy", T1), state, policy)
    assert should_notify("EUR/USD", sig("wait", T1), state, policy) is True
    assert should_notify("EUR/USD", sig("wait", T2), state, policy) is False


def test_symbols_are_tracked_independently():
    state = LastSignalState()
    assert should_notify("EUR/USD", sig("buy"), state) is True
    assert should_notify("XAU/USD", sig("buy"), state) is True
    assert state.snapshot() == {"EUR/USD": ("buy", T1), "XAU/USD": ("buy", T1)}


def test_unknown_policy():
    with pytest.raises(ValueError):
        should_notify("EUR/USD", sig("buy"), LastSignalState(), "always")
