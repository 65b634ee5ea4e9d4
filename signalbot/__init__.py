# -*- coding: utf-8 -*-
"""Multi-timeframe Bollinger/RSI signal monitor."""

__version__ = "0.1.0"
