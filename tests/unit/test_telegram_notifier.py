import pandas as pd
import requests

from signalbot.signals.base import TradeSignal
from signalbot.live import telegram_notifier
from signalbot.live.telegram_notifier import TelegramNotifier, format_signal_message


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self.payload = payload or {"ok": True}
        self.content = b"{}"
        self.text = "{}"

    def json(self):
        return self.payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code}")


def recorder(response=None, error=None):
    calls = []

    def fake(url, json=None, timeout=None, **kwargs):
        calls.append({"url": url, "json": json, "timeout": timeout})
        if error:
            raise error
        return response or FakeResponse()

    return fake, calls


def test_notify_posts_html_message(monkeypatch):
    fake, calls = recorder()
    monkeypatch.setattr(telegram_notifier.requests, "post", fake)

    assert TelegramNotifier("123:abc", "42").notify("<b>hi</b>") is True
    assert calls[0]["url"].endswith("/bot123:abc/sendMessage")
    assert calls[0]["json"]["chat_id"] == "42"
    assert calls[0]["json"]["parse_mode"] == "HTML"


def test_notify_skips_when_not_configured(monkeypatch):
    fake, calls = recorder()
    monkeypatch.setattr(telegram_notifier.requests, "post", fake)

    assert TelegramNotifier("", "42").notify("hi") is False
    assert TelegramNotifier("123:abc", "").notify("hi") is False
    assert TelegramNotifier("badtoken", "42").notify("hi") is False
    assert calls == []


def test_notify_swallows_network_errors(monkeypatch):
    fake, _ = recorder(error=requests.exceptions.ConnectionError("offline"))
    monkeypatch.setattr(telegram_notifier.requests, "post", fake)
    assert TelegramNotifier("123:abc", "42").notify("hi") is False


def test_notify_reports_api_errors(monkeypatch):
    for status in (400, 401, 404, 500):
        fake, _ = recorder(response=FakeResponse(status, {"ok": False, "description": "chat not found"}))
        monkeypatch.setattr(telegram_notifier.requests, "post", fake)
        assert TelegramNotifier("123:abc", "42").notify("hi") is False


def test_connection_check(monkeypatch):
    def fake_get(url, timeout=None):
        return FakeResponse(200, {"ok": True, "result": {"username": "signal_bot"}})

    monkeypatch.setattr(telegram_notifier.requests, "get", fake_get)
    assert TelegramNotifier("123:abc", "42").test_connection() is True
    assert TelegramNotifier("", "42").test_connection() is False


def test_format_buy_message():
    signal = TradeSignal("XAU/USD", pd.Timestamp("2025-01-01 10:05", tz="UTC"), "buy",
                         strategy="trend", entry=2650.5, take_profit=2660.25, stop_loss=2640.0)
    text = format_signal_message(signal, "5min", "1h")

    assert "XAU/USD: BUY" in text
    assert "<b>Strategy:</b> trend" in text
    assert "<b>Entry:</b> 2650.5" in text
    assert "<b>Take Profit:</b> 2660.25" in text
    assert "<b>Stop Loss:</b> 2640" in text
    assert "5min / 1h" in text
    assert "2025-01-01 10:05 UTC" in text


def test_format_wait_message_shows_reason():
    text = format_signal_message(TradeSignal("EUR/USD", None, "wait", reason="weak rsi"))
    assert "EUR/USD: WAIT" in text
    assert "<b>Reason:</b> weak rsi" in text
    assert "Entry" not in text
