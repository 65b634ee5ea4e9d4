# -*- coding: utf-8 -*-
"""
Market data providers for the signal monitor.

Each provider fetches the most recent candles for a (symbol, interval) pair
over REST and returns them as a DataFrame indexed by open time (UTC,
ascending) with float open/high/low/close columns. Credentials are tried in
priority order; when every credential fails the provider returns None rather
than raising.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pandas as pd
import requests
from binance.client import Client
from binance.exceptions import BinanceAPIException

from signalbot.signals.base import PRICE_COLUMNS


PROVIDER_TWELVEDATA = "twelvedata"
PROVIDER_BINANCE = "binance"
PROVIDERS = (PROVIDER_TWELVEDATA, PROVIDER_BINANCE)

TWELVEDATA_URL = "https://api.twelvedata.com/time_series"

# Minimum rows a fetch must return to count as usable data
MIN_CANDLES = 2


logger = logging.getLogger(__name__)


class MarketDataError(Exception):
    """Raised by a single credential attempt when the response is unusable."""


class MarketData(ABC):
    """Fetches candles with credential fallback."""

    def __init__(self, min_candles: int = MIN_CANDLES):
        self.min_candles = min_candles

    @property
    @abstractmethod
    def credentials(self) -> Sequence[Any]:
        """Credentials in priority order."""

    @abstractmethod
    def _fetch_with(self, credential: Any, symbol: str, interval: str, count: int) -> pd.DataFrame:
        """Fetch candles using one credential. Raise on any failure."""

    def fetch(self, symbol: str, interval: str, count: int) -> Optional[pd.DataFrame]:
        """
        Fetch the latest candles for symbol.

        Parameters
        ----------
        symbol : str
            Instrument symbol in the provider's notation.
        interval : str
            Candle interval in the provider's notation (e.g. "5min", "1h").
        count : int
            Number of candles to request.

        Returns
        -------
        pd.DataFrame or None
            Candles ascending by time, or None when every credential failed or
            too few candles came back.
        """
        for attempt, credential in enumerate(self.credentials, start=1):
            try:
                df = self._fetch_with(credential, symbol, interval, count)
            except (requests.exceptions.RequestException, BinanceAPIException,
                    MarketDataError, KeyError, ValueError, TypeError) as e:
                logger.warning(f"{symbol} {interval}: credential #{attempt} failed: {e}")
                continue

            if len(df) < self.min_candles:
                logger.warning(f"{symbol} {interval}: only {len(df)} candles returned "
                               f"(need {self.min_candles})")
                return None

            logger.debug(f"{symbol} {interval}: fetched {len(df)} candles with credential #{attempt}")
            return df

        logger.warning(f"{symbol} {interval}: no data, all credentials exhausted")
        return None


def _finalize_frame(df: pd.DataFrame) -> pd.DataFrame:
    """Sort ascending, drop duplicate timestamps, coerce OHLC to float."""
    for col in PRICE_COLUMNS:
        df[col] = df[col].astype(float)
    df = df[PRICE_COLUMNS]
    if not df.index.is_monotonic_increasing:
        df = df.sort_index()
    if df.index.duplicated().any():
        df = df[~df.index.duplicated(keep='first')]
    return df


class TwelveDataMarketData(MarketData):
    """Twelve Data time_series endpoint with API key rotation."""

    def __init__(self, api_keys: List[str], timeout: float = 10.0,
                 min_candles: int = MIN_CANDLES, session: Optional[requests.Session] = None):
        """
        Initialize Twelve Data provider.

        Parameters
        ----------
        api_keys : list of str
            API keys in priority order.
        timeout : float, default 10.0
            HTTP timeout in seconds.
        min_candles : int, default 2
            Fewer candles than this is treated as no data.
        session : requests.Session, optional
            Session to reuse for HTTP calls.
        """
        super().__init__(min_candles=min_candles)
        self.api_keys = [key.strip() for key in api_keys if key and key.strip()]
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def credentials(self) -> Sequence[str]:
        return self.api_keys

    def _fetch_with(self, credential: str, symbol: str, interval: str, count: int) -> pd.DataFrame:
        response = self.session.get(
            TWELVEDATA_URL,
            params={
                "symbol": symbol,
                "interval": interval,
                "outputsize": count,
                "apikey": credential,
                "timezone": "UTC"
            },
            timeout=self.timeout
        )
        response.raise_for_status()
        payload = response.json()
        return self.parse_time_series(payload)

    @staticmethod
    def parse_time_series(payload: Dict[str, Any]) -> pd.DataFrame:
        """Convert a time_series payload (newest first) into an ascending frame."""
        if not isinstance(payload, dict):
            raise MarketDataError(f"Unexpected response shape: {type(payload).__name__}")
        if payload.get("status") == "error":
            raise MarketDataError(f"API error {payload.get('code')}: {payload.get('message', 'Unknown')}")

        values = payload.get("values")
        if not isinstance(values, list):
            raise MarketDataError("Response has no 'values' list")

        df = pd.DataFrame(values)
        if df.empty:
            return pd.DataFrame(columns=PRICE_COLUMNS, dtype=float)

        df['datetime'] = pd.to_datetime(df['datetime'], utc=True)
        df = df.set_index('datetime')
        return _finalize_frame(df)


class BinanceMarketData(MarketData):
    """Binance klines through python-binance, one Client per key pair."""

    KLINE_COLUMNS = [
        'open_time', 'open', 'high', 'low', 'close', 'volume',
        'close_time', 'quote_volume', 'trades', 'taker_buy_base',
        'taker_buy_quote', 'ignore'
    ]

    def __init__(self, key_pairs: Optional[List[Tuple[str, str]]] = None,
                 use_testnet: bool = False, min_candles: int = MIN_CANDLES):
        """
        Initialize Binance provider.

        Parameters
        ----------
        key_pairs : list of (api_key, api_secret), optional
            Credentials in priority order. Klines are public, so an empty list
            falls back to a single anonymous client.
        use_testnet : bool, default False
            Whether to use Binance Testnet.
        min_candles : int, default 2
            Fewer candles than this is treated as no data.
        """
        super().__init__(min_candles=min_candles)
        self.key_pairs = [pair for pair in (key_pairs or []) if pair[0] and pair[1]] or [("", "")]
        self.use_testnet = use_testnet
        self._clients: Dict[int, Client] = {}

    @property
    def credentials(self) -> Sequence[int]:
        return list(range(len(self.key_pairs)))

    def _client(self, index: int) -> Client:
        if index not in self._clients:
            api_key, api_secret = self.key_pairs[index]
            self._clients[index] = Client(
                api_key=api_key.strip() or None,
                api_secret=api_secret.strip() or None,
                testnet=self.use_testnet
            )
        return self._clients[index]

    def _fetch_with(self, credential: int, symbol: str, interval: str, count: int) -> pd.DataFrame:
        klines = self._client(credential).get_klines(
            symbol=symbol.replace("/", ""),
            interval=interval,
            limit=count
        )
        return self.parse_klines(klines)

    @classmethod
    def parse_klines(cls, klines: List[List[Any]]) -> pd.DataFrame:
        """Convert raw klines into an ascending frame indexed by open time."""
        if not klines:
            return pd.DataFrame(columns=PRICE_COLUMNS, dtype=float)

        df = pd.DataFrame(klines, columns=cls.KLINE_COLUMNS)
        df['open_time'] = pd.to_datetime(df['open_time'], unit='ms', utc=True)
        df = df.set_index('open_time')
        return _finalize_frame(df)


def create_market_data(provider: str, twelvedata_api_keys: Optional[List[str]] = None,
                       binance_key_pairs: Optional[List[Tuple[str, str]]] = None) -> MarketData:
    """Build the market data provider named by provider."""
    if provider == PROVIDER_TWELVEDATA:
        return TwelveDataMarketData(api_keys=twelvedata_api_keys or [])
    if provider == PROVIDER_BINANCE:
        return BinanceMarketData(key_pairs=binance_key_pairs)
    raise ValueError(f"Unknown market data provider: {provider}. Must be one of {PROVIDERS}.")
