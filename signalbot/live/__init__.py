# -*- coding: utf-8 -*-
"""
Live monitoring module.

Provides the polling loop and its collaborators: market data providers,
change detection, Telegram delivery and the liveness endpoint.
"""

from signalbot.live.change_detector import LastSignalState, should_notify
from signalbot.live.market_data import (
    MarketData,
    TwelveDataMarketData,
    BinanceMarketData,
    create_market_data
)
from signalbot.live.telegram_notifier import TelegramNotifier, format_signal_message
from signalbot.live.signal_monitor import SignalMonitor
from signalbot.live.health import create_health_app, start_health_server

__all__ = [
    'LastSignalState',
    'should_notify',
    'MarketData',
    'TwelveDataMarketData',
    'BinanceMarketData',
    'create_market_data',
    'TelegramNotifier',
    'format_signal_message',
    'SignalMonitor',
    'create_health_app',
    'start_health_server'
]
