# -*- coding: utf-8 -*-
"""
Main entry point for the signal monitor.

Supports environment variable configuration (see signalbot/config.py) with
command line overrides, and runs the polling loop until interrupted.
"""

import sys
import argparse
from typing import List, Optional

from signalbot.config import Config
from signalbot.live.signal_monitor import SignalMonitor
from signalbot.live.health import start_health_server


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Bollinger/RSI multi-timeframe signal monitor')

    parser.add_argument('--symbols', type=str, default=None,
                        help='Comma separated symbols (default: from SIGNAL_SYMBOLS env var)')
    parser.add_argument('--provider', type=str, default=None, choices=['twelvedata', 'binance'],
                        help='Market data provider (default: from MARKET_DATA_PROVIDER env var)')
    parser.add_argument('--fast-interval', type=str, default=None,
                        help='Setup timeframe (default: from FAST_INTERVAL env var or 5min)')
    parser.add_argument('--slow-interval', type=str, default=None,
                        help='Confirmation timeframe (default: from SLOW_INTERVAL env var or 1h)')
    parser.add_argument('--poll-interval', type=float, default=None,
                        help='Seconds between passes (default: from POLL_INTERVAL_SECONDS env var or 60)')
    parser.add_argument('--health-port', type=int, default=None,
                        help='Serve GET /health on this port (default: from HEALTH_PORT env var, disabled)')
    parser.add_argument('--log-level', type=str, default=None,
                        help='Logging level (default: from LOG_LEVEL env var or INFO)')
    parser.add_argument('--once', action='store_true',
                        help='Run a single pass over all symbols and exit')

    return parser


def apply_args(config: Config, args: argparse.Namespace) -> Config:
    """Override configuration with command line arguments (highest priority)."""
    if args.symbols:
        config.symbols = [s.strip() for s in args.symbols.split(',') if s.strip()]
    if args.provider:
        config.provider = args.provider
    if args.fast_interval:
        config.fast_interval = args.fast_interval
    if args.slow_interval:
        config.slow_interval = args.slow_interval
    if args.poll_interval is not None:
        config.poll_interval_seconds = args.poll_interval
    if args.health_port is not None:
        config.health_port = args.health_port
    if args.log_level:
        config.log_level = args.log_level
    return config


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    args = build_parser().parse_args(argv)

    # Load and validate configuration before anything touches the network
    try:
        config = apply_args(Config(), args)
        config.validate()
    except ValueError as e:
        print(f"Error: {e}")
        print("\nConfigure the monitor via .env / environment variables, for example:")
        print("  SIGNAL_SYMBOLS       - Comma separated symbols (e.g. XAU/USD,EUR/USD)")
        print("  TWELVEDATA_API_KEYS  - Comma separated Twelve Data keys, tried in order")
        print("  TELEGRAM_BOT_TOKEN   - Telegram bot token")
        print("  TELEGRAM_CHAT_ID     - Telegram chat ID")
        sys.exit(1)

    print("=" * 80)
    print("SIGNAL MONITOR")
    print("=" * 80)
    print(f"Provider: {config.provider}")
    print(f"Symbols: {', '.join(config.symbols)}")
    print(f"Timeframes: {config.fast_interval} / {config.slow_interval}")
    print(f"RSI gate: < {config.rsi_low} or > {config.rsi_high}")
    print(f"Notify policy: {config.notify_policy}")
    print("=" * 80)

    monitor = SignalMonitor(config)

    if not monitor.notifier.is_configured:
        print("[TELEGRAM] Telegram not configured. Signals will only be logged.")
    elif not monitor.notifier.test_connection():
        print("[TELEGRAM] Connection test failed. Notifications may fail.")

    if config.health_port:
        start_health_server(monitor, config.health_port)

    monitor.start(max_passes=1 if args.once else None)


if __name__ == "__main__":
    main()
