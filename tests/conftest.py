# tests/conftest.py
import pytest
import pandas as pd

from signalbot.signals.base import IndicatorSet


CONFIG_ENV_VARS = [
    "SIGNAL_SYMBOLS", "MARKET_DATA_PROVIDER", "TWELVEDATA_API_KEYS",
    "BINANCE_API_KEY", "BINANCE_API_SECRET", "FAST_INTERVAL", "SLOW_INTERVAL",
    "CANDLE_COUNT", "POLL_INTERVAL_SECONDS", "RSI_LOW", "RSI_HIGH", "RSI_PERIOD",
    "BB_WINDOW", "BB_WIDTH", "BAND_BUFFER", "BAND_BUFFERS", "USE_MACD_CONFIRMATION",
    "TRIGGERED_GUARD", "REVERSAL_STOP", "NOTIFY_POLICY", "TELEGRAM_BOT_TOKEN",
    "TELEGRAM_CHAT_ID", "HEALTH_PORT", "LOG_LEVEL", "LOG_FILE",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep developer environment variables out of Config()."""
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def make_candles(rows, start="2025-01-01", freq="5min"):
    """Build an OHLC frame from (open, high, low, close) tuples."""
    idx = pd.date_range(start=start, periods=len(rows), freq=freq, tz="UTC")
    return pd.DataFrame(rows, columns=["open", "high", "low", "close"], index=idx, dtype=float)


def make_flat(close, periods=60, start="2025-01-01", freq="5min"):
    """Constant-price frame."""
    return make_candles([(close, close, close, close)] * periods, start=start, freq=freq)


def make_ind(rsi, mid, upper, lower, macd=None, macd_signal=None):
    """Indicator set for a single-candle frame."""
    ind = IndicatorSet(rsi=[rsi], bb_mid=[mid], bb_upper=[upper], bb_lower=[lower])
    if macd is not None or macd_signal is not None:
        ind.macd = [macd]
        ind.macd_signal = [macd_signal]
    return ind


@pytest.fixture
def candles():
    return make_candles


@pytest.fixture
def flat_candles():
    return make_flat


@pytest.fixture
def indicator_set():
    return make_ind
