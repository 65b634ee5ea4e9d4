# -*- coding: utf-8 -*-
"""
Signal monitor orchestrator.

Main polling loop: for every configured symbol, fetch both timeframes,
classify, compare with the last emitted signal and notify on change. Symbols
are processed one after another; a failure on one symbol is logged and never
stops the loop.
"""

import time
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, TYPE_CHECKING

from signalbot.signals.base import TradeSignal
from signalbot.signals.bb_rsi_signal import BBRSISignal
from signalbot.live.change_detector import LastSignalState, should_notify
from signalbot.live.market_data import MarketData, create_market_data
from signalbot.live.telegram_notifier import TelegramNotifier, format_signal_message

if TYPE_CHECKING:
    from signalbot.config import Config


logger = logging.getLogger(__name__)


class SignalMonitor:
    """Main orchestrator for signal monitoring."""

    def __init__(self, config: 'Config', market_data: Optional[MarketData] = None,
                 notifier: Optional[TelegramNotifier] = None,
                 state: Optional[LastSignalState] = None,
                 setup_logging: bool = True,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Initialize signal monitor.

        Parameters
        ----------
        config : Config
            Validated configuration
        market_data : MarketData, optional
            Candle source. Built from config.provider when omitted.
        notifier : TelegramNotifier, optional
            Notification sink. Built from the Telegram settings when omitted.
        state : LastSignalState, optional
            Last emitted signal per symbol. A fresh, empty state when omitted.
        setup_logging : bool, default True
            Whether to install the file and console log handlers
        sleep : callable, default time.sleep
            Used between passes
        """
        self.config = config

        if setup_logging:
            self._setup_logging()

        self.market_data = market_data or create_market_data(
            config.provider,
            twelvedata_api_keys=config.twelvedata_api_keys,
            binance_key_pairs=[(config.binance_api_key, config.binance_api_secret)]
        )
        self.notifier = notifier or TelegramNotifier(
            bot_token=config.telegram_bot_token,
            chat_id=config.telegram_chat_id
        )
        self.state = state if state is not None else LastSignalState()
        self._sleep = sleep

        # One signal module per symbol so band buffers can differ per instrument
        self.signal_modules: Dict[str, BBRSISignal] = {
            symbol: BBRSISignal(config.thresholds_for(symbol)) for symbol in config.symbols
        }

        # Heartbeat, read by the health endpoint thread
        self._heartbeat_lock = threading.Lock()
        self.passes = 0
        self.last_pass: Optional[datetime] = None
        self.last_signals: Dict[str, TradeSignal] = {}

    def _setup_logging(self):
        """Setup logging configuration."""
        log_level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        # Configure the package logger so every module's records are handled
        package_logger = logging.getLogger("signalbot")
        package_logger.setLevel(log_level)

        # Handlers are installed once per process
        if package_logger.handlers:
            return

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

        handlers = [logging.StreamHandler()]
        if self.config.log_file:
            handlers.append(logging.FileHandler(self.config.log_file))

        for handler in handlers:
            handler.setLevel(log_level)
            handler.setFormatter(formatter)
            package_logger.addHandler(handler)

    def process_symbol(self, symbol: str) -> TradeSignal:
        """
        Fetch, classify and, on change, notify for one symbol.

        Parameters
        ----------
        symbol : str
            Symbol to process

        Returns
        -------
        TradeSignal
            The freshly classified signal
        """
        count = self.config.candle_count
        fast_df = self.market_data.fetch(symbol, self.config.fast_interval, count)
        slow_df = self.market_data.fetch(symbol, self.config.slow_interval, count)

        signal = self.signal_modules[symbol].generate_signal(symbol, fast_df, slow_df)
        logger.info(f"{symbol}: {signal.direction}"
                    + (f" ({signal.strategy}) entry={signal.entry} tp={signal.take_profit} sl={signal.stop_loss}"
                       if signal.is_actionable else f" [{signal.reason or 'no setup'}]"))

        if should_notify(symbol, signal, self.state, policy=self.config.notify_policy):
            message = format_signal_message(signal, self.config.fast_interval, self.config.slow_interval)
            if not self.notifier.notify(message):
                logger.warning(f"{symbol}: notification for {signal.direction} was not delivered")

        with self._heartbeat_lock:
            self.last_signals[symbol] = signal

        return signal

    def run_once(self) -> Dict[str, TradeSignal]:
        """
        Run one pass over all symbols.

        Returns
        -------
        dict
            Signal per symbol that was processed without error
        """
        results: Dict[str, TradeSignal] = {}
        for symbol in self.config.symbols:
            try:
                results[symbol] = self.process_symbol(symbol)
            except Exception as e:
                logger.error(f"{symbol}: error processing symbol: {e}", exc_info=True)
                continue

        with self._heartbeat_lock:
            self.passes += 1
            self.last_pass = datetime.now(timezone.utc)

        return results

    def heartbeat(self) -> Dict[str, Any]:
        """Snapshot of loop progress for the liveness endpoint."""
        with self._heartbeat_lock:
            return {
                'symbols': list(self.config.symbols),
                'passes': self.passes,
                'last_pass': self.last_pass.isoformat() if self.last_pass else None,
                'last_signals': {sym: sig.to_dict() for sym, sig in self.last_signals.items()}
            }

    def start(self, max_passes: Optional[int] = None):
        """
        Start the polling loop.

        Parameters
        ----------
        max_passes : int, optional
            Stop after this many passes. Runs until interrupted when None.
        """
        logger.info(f"Starting signal monitor for {', '.join(self.config.symbols)} "
                    f"({self.config.fast_interval}/{self.config.slow_interval}, "
                    f"every {self.config.poll_interval_seconds:.0f}s)")

        try:
            while True:
                self.run_once()

                if max_passes is not None and self.passes >= max_passes:
                    break

                self._sleep(self.config.poll_interval_seconds)
        except KeyboardInterrupt:
            logger.info("Received interrupt signal, stopping...")

        logger.info(f"Signal monitor stopped after {self.passes} pass(es)")
