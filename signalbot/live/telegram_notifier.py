# -*- coding: utf-8 -*-
"""
Telegram delivery for signal notifications.

Delivery is fire-and-forget: failures are logged and reported through the
return value, never retried and never raised.
"""

import logging
from typing import Optional

import requests

from signalbot.signals.base import TradeSignal, DIRECTION_BUY, DIRECTION_SELL


TELEGRAM_API_URL = "https://api.telegram.org"


logger = logging.getLogger(__name__)


def _fmt_price(value: Optional[float]) -> str:
    return "-" if value is None else f"{value:.5f}".rstrip("0").rstrip(".")


def format_signal_message(signal: TradeSignal, fast_interval: str = "", slow_interval: str = "") -> str:
    """
    Format a signal change message for Telegram.

    Parameters
    ----------
    signal : TradeSignal
        Signal to announce
    fast_interval : str, optional
        Setup timeframe, shown when given
    slow_interval : str, optional
        Confirmation timeframe, shown when given

    Returns
    -------
    str
        HTML formatted message
    """
    if signal.direction == DIRECTION_BUY:
        emoji = "🟢"
    elif signal.direction == DIRECTION_SELL:
        emoji = "🔴"
    else:
        emoji = "⚪"

    message = f"<b>{emoji} {signal.symbol}: {signal.direction.upper()}</b>\n\n"
    if fast_interval and slow_interval:
        message += f"<b>Timeframes:</b> {fast_interval} / {slow_interval}\n"

    if signal.is_actionable:
        message += f"<b>Strategy:</b> {signal.strategy}\n"
        message += f"<b>Entry:</b> {_fmt_price(signal.entry)}\n"
        message += f"<b>Take Profit:</b> {_fmt_price(signal.take_profit)}\n"
        message += f"<b>Stop Loss:</b> {_fmt_price(signal.stop_loss)}\n"
    elif signal.reason:
        message += f"<b>Reason:</b> {signal.reason}\n"

    if signal.timestamp is not None:
        timestamp = signal.timestamp
        if hasattr(timestamp, 'strftime'):
            timestamp = timestamp.strftime('%Y-%m-%d %H:%M UTC')
        message += f"<b>Candle:</b> {timestamp}"

    return message.rstrip("\n")


class TelegramNotifier:
    """Sends messages to one Telegram chat through the Bot API."""

    def __init__(self, bot_token: str, chat_id: str, timeout: float = 10.0):
        """
        Initialize notifier.

        Parameters
        ----------
        bot_token : str
            Telegram bot token ("number:alphanumeric")
        chat_id : str
            Chat to deliver to
        timeout : float, default 10.0
            HTTP timeout in seconds
        """
        self.bot_token = (bot_token or "").strip()
        self.chat_id = (chat_id or "").strip()
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.bot_token and self.chat_id)

    def test_connection(self) -> bool:
        """Check the bot token by calling getMe."""
        if not self.bot_token:
            logger.warning("Telegram bot token not configured")
            return False

        if ':' not in self.bot_token:
            logger.error("Invalid bot token format. Token should be in format 'number:alphanumeric'")
            return False

        try:
            response = requests.get(f"{TELEGRAM_API_URL}/bot{self.bot_token}/getMe", timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"Telegram connection test failed: {e}")
            return False

        if response.status_code == 401:
            logger.error("Telegram 401 Unauthorized: Invalid bot token")
            return False
        if response.status_code != 200:
            logger.error(f"Telegram HTTP {response.status_code}: {response.text}")
            return False

        try:
            data = response.json()
        except ValueError:
            logger.error("Telegram getMe returned a non-JSON body")
            return False
        if not data.get('ok'):
            logger.error(f"Telegram API returned error: {data.get('description', 'Unknown')}")
            return False

        bot_info = data.get('result', {})
        logger.info(f"Telegram bot connection successful: @{bot_info.get('username', 'N/A')}")
        return True

    def notify(self, message: str) -> bool:
        """
        Send a message to Telegram.

        Parameters
        ----------
        message : str
            HTML formatted text

        Returns
        -------
        bool
            True if message was sent successfully, False otherwise
        """
        if not self.is_configured:
            logger.warning("Telegram bot token or chat ID not configured. Skipping notification.")
            return False

        if ':' not in self.bot_token:
            logger.error("Invalid bot token format. Token should be in format 'number:alphanumeric'")
            return False

        try:
            response = requests.post(
                f"{TELEGRAM_API_URL}/bot{self.bot_token}/sendMessage",
                json={
                    "chat_id": self.chat_id,
                    "text": message,
                    "parse_mode": "HTML",
                    "disable_web_page_preview": True
                },
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Telegram network error: {e}")
            return False

        if response.status_code in (400, 404):
            try:
                error_data = response.json() if response.content else {}
            except ValueError:
                error_data = {}
            logger.error(f"Telegram {response.status_code}: {error_data.get('description', 'Unknown error')} "
                         f"(check TELEGRAM_BOT_TOKEN / TELEGRAM_CHAT_ID)")
            return False
        if response.status_code == 401:
            logger.error("Telegram 401 Unauthorized: Invalid bot token")
            return False

        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            logger.error(f"Telegram delivery failed: {e}")
            return False

        logger.info("Telegram message sent successfully")
        return True
