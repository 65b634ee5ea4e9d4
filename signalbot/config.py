# -*- coding: utf-8 -*-
"""
Signal monitor configuration.

Defaults live on the dataclass; a .env file at the project root and the
process environment override them. Everything is read once at startup.
"""

import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from dotenv import load_dotenv

from signalbot.signals.bb_rsi_signal import (
    ClassifierThresholds, RSI_LOW, RSI_HIGH, GUARD_TREND, STOP_CANDLE_EXTREME
)
from signalbot.signals import indicators
from signalbot.live.change_detector import POLICY_DIRECTION, NOTIFY_POLICIES
from signalbot.live.market_data import PROVIDER_TWELVEDATA, PROVIDERS


# Load .env file from project root if it exists
project_root = Path(__file__).parent.parent
env_file = project_root / ".env"
if env_file.exists():
    load_dotenv(env_file)
    print(f"Loaded environment variables from {env_file}")


def _split_list(raw: str) -> List[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


def _parse_buffers(raw: str) -> Dict[str, float]:
    """Parse 'XAU/USD:1.5,BTC/USD:40' into a symbol -> buffer map."""
    buffers = {}
    for item in _split_list(raw):
        symbol, sep, value = item.rpartition(":")
        if not sep or not symbol:
            raise ValueError(f"Invalid BAND_BUFFERS entry '{item}', expected SYMBOL:value")
        buffers[symbol.strip()] = float(value)
    return buffers


def _env_bool(name: str, default: bool) -> bool:
    return os.getenv(name, str(default)).lower() in ("true", "1", "yes")


@dataclass
class Config:
    # Instruments
    symbols: List[str] = field(default_factory=lambda: ["XAU/USD", "EUR/USD"])

    # Market data
    provider: str = PROVIDER_TWELVEDATA
    twelvedata_api_keys: List[str] = field(default_factory=list)  # Tried in order until one succeeds
    binance_api_key: str = ""
    binance_api_secret: str = ""
    fast_interval: str = "5min"   # Twelve Data names; use 5m / 1h with Binance
    slow_interval: str = "1h"
    candle_count: int = 100  # Candles fetched per timeframe

    # Polling
    poll_interval_seconds: float = 60.0

    # Classifier thresholds
    rsi_low: float = RSI_LOW
    rsi_high: float = RSI_HIGH
    rsi_period: int = indicators.RSI_PERIOD
    bb_window: int = indicators.BB_WINDOW
    bb_width: float = indicators.BB_WIDTH
    band_buffer: float = 0.0  # Default outer band offset
    band_buffers: Dict[str, float] = field(default_factory=dict)  # Per-symbol overrides
    use_macd_confirmation: bool = False
    triggered_guard: str = GUARD_TREND
    reversal_stop: str = STOP_CANDLE_EXTREME

    # Change detection
    notify_policy: str = POLICY_DIRECTION

    # Telegram notifications
    telegram_bot_token: str = ""  # Telegram bot token (get from @BotFather)
    telegram_chat_id: str = ""  # Telegram chat ID to send messages to

    # Liveness endpoint (None = disabled)
    health_port: Optional[int] = None

    # Logging
    log_level: str = "INFO"
    log_file: str = "signal_monitor.log"

    def __post_init__(self):
        """Override defaults with environment variables if present."""
        if os.getenv("SIGNAL_SYMBOLS"):
            self.symbols = _split_list(os.getenv("SIGNAL_SYMBOLS"))

        # Market data
        self.provider = os.getenv("MARKET_DATA_PROVIDER", self.provider).lower()
        if os.getenv("TWELVEDATA_API_KEYS"):
            self.twelvedata_api_keys = _split_list(os.getenv("TWELVEDATA_API_KEYS"))
        self.binance_api_key = os.getenv("BINANCE_API_KEY", self.binance_api_key)
        self.binance_api_secret = os.getenv("BINANCE_API_SECRET", self.binance_api_secret)
        self.fast_interval = os.getenv("FAST_INTERVAL", self.fast_interval)
        self.slow_interval = os.getenv("SLOW_INTERVAL", self.slow_interval)
        if os.getenv("CANDLE_COUNT"):
            self.candle_count = int(os.getenv("CANDLE_COUNT"))

        # Polling
        if os.getenv("POLL_INTERVAL_SECONDS"):
            self.poll_interval_seconds = float(os.getenv("POLL_INTERVAL_SECONDS"))

        # Classifier
        if os.getenv("RSI_LOW"):
            self.rsi_low = float(os.getenv("RSI_LOW"))
        if os.getenv("RSI_HIGH"):
            self.rsi_high = float(os.getenv("RSI_HIGH"))
        if os.getenv("RSI_PERIOD"):
            self.rsi_period = int(os.getenv("RSI_PERIOD"))
        if os.getenv("BB_WINDOW"):
            self.bb_window = int(os.getenv("BB_WINDOW"))
        if os.getenv("BB_WIDTH"):
            self.bb_width = float(os.getenv("BB_WIDTH"))
        if os.getenv("BAND_BUFFER"):
            self.band_buffer = float(os.getenv("BAND_BUFFER"))
        if os.getenv("BAND_BUFFERS"):
            self.band_buffers = _parse_buffers(os.getenv("BAND_BUFFERS"))
        self.use_macd_confirmation = _env_bool("USE_MACD_CONFIRMATION", self.use_macd_confirmation)
        self.triggered_guard = os.getenv("TRIGGERED_GUARD", self.triggered_guard).lower()
        self.reversal_stop = os.getenv("REVERSAL_STOP", self.reversal_stop).lower()

        # Change detection
        self.notify_policy = os.getenv("NOTIFY_POLICY", self.notify_policy).lower()

        # Telegram notifications
        self.telegram_bot_token = os.getenv("TELEGRAM_BOT_TOKEN", self.telegram_bot_token)
        self.telegram_chat_id = os.getenv("TELEGRAM_CHAT_ID", self.telegram_chat_id)

        if os.getenv("HEALTH_PORT"):
            self.health_port = int(os.getenv("HEALTH_PORT"))

        # Logging
        self.log_level = os.getenv("LOG_LEVEL", self.log_level)
        self.log_file = os.getenv("LOG_FILE", self.log_file)

    def thresholds_for(self, symbol: str) -> ClassifierThresholds:
        """Build the classifier thresholds for one symbol."""
        return ClassifierThresholds(
            rsi_low=self.rsi_low,
            rsi_high=self.rsi_high,
            rsi_period=self.rsi_period,
            bb_window=self.bb_window,
            bb_width=self.bb_width,
            band_buffer=self.band_buffers.get(symbol, self.band_buffer),
            use_macd_confirmation=self.use_macd_confirmation,
            triggered_guard=self.triggered_guard,
            reversal_stop=self.reversal_stop
        )

    def validate(self):
        """
        Fail fast on configuration that cannot work.

        Raises
        ------
        ValueError
            If symbols, credentials or thresholds are unusable.
        """
        if not self.symbols:
            raise ValueError("At least one symbol must be configured (SIGNAL_SYMBOLS)")
        if self.provider not in PROVIDERS:
            raise ValueError(f"Unknown market data provider: {self.provider}. Must be one of {PROVIDERS}.")
        if self.provider == PROVIDER_TWELVEDATA and not self.twelvedata_api_keys:
            raise ValueError("At least one Twelve Data API key is required (TWELVEDATA_API_KEYS)")
        if self.poll_interval_seconds <= 0:
            raise ValueError(f"poll_interval_seconds must be > 0, got {self.poll_interval_seconds}")
        if self.candle_count < 1:
            raise ValueError(f"candle_count must be >= 1, got {self.candle_count}")
        if self.notify_policy not in NOTIFY_POLICIES:
            raise ValueError(f"Unknown notify policy: {self.notify_policy}. Must be one of {NOTIFY_POLICIES}.")
        for symbol in self.symbols:
            thresholds = self.thresholds_for(symbol)
            thresholds.validate()
            if self.candle_count < thresholds.warm_up_candles:
                raise ValueError(f"candle_count ({self.candle_count}) is below the "
                                 f"{thresholds.warm_up_candles} candles the indicators need to warm up")

    def to_dict(self) -> dict:
        """Convert config to dictionary with secrets masked."""
        def mask(secret: str) -> str:
            return f"{secret[:4]}..." if secret else ""

        return {
            'symbols': list(self.symbols),
            'provider': self.provider,
            'twelvedata_api_keys': [mask(k) for k in self.twelvedata_api_keys],
            'binance_api_key': mask(self.binance_api_key),
            'fast_interval': self.fast_interval,
            'slow_interval': self.slow_interval,
            'candle_count': self.candle_count,
            'poll_interval_seconds': self.poll_interval_seconds,
            'rsi_low': self.rsi_low,
            'rsi_high': self.rsi_high,
            'rsi_period': self.rsi_period,
            'bb_window': self.bb_window,
            'bb_width': self.bb_width,
            'band_buffer': self.band_buffer,
            'band_buffers': dict(self.band_buffers),
            'use_macd_confirmation': self.use_macd_confirmation,
            'triggered_guard': self.triggered_guard,
            'reversal_stop': self.reversal_stop,
            'notify_policy': self.notify_policy,
            'telegram_configured': bool(self.telegram_bot_token and self.telegram_chat_id),
            'health_port': self.health_port,
            'log_level': self.log_level,
            'log_file': self.log_file
        }
