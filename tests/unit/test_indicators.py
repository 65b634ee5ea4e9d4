import math

import pytest
import pandas as pd

from signalbot.signals.indicators import rsi, bollinger, ema, macd


WILDER_CLOSES = [44, 44.25, 44.5, 43.75, 44.65, 45.1, 45.4, 46, 46.6, 46.5,
                 46.25, 46.1, 45.9, 46.6, 46.5]


def test_rsi_worked_example_defined_only_at_period():
    vals = rsi(WILDER_CLOSES, period=14)
    assert len(vals) == 15
    assert all(v is None for v in vals[:14])
    # seed averages: gains 4.05 / 14, losses 1.55 / 14
    assert vals[14] == pytest.approx(72.32, abs=0.01)


def test_rsi_wilder_smoothing_small_period():
    # deltas 1, -1, 2 -> seed 50 at index 2, then avg_gain 1.25 / avg_loss 0.25
    vals = rsi([1, 2, 1, 3], period=2)
    assert vals[:2] == [None, None]
    assert vals[2] == pytest.approx(50.0)
    assert vals[3] == pytest.approx(100 - 100 / 6)


def test_rsi_rising_series_approaches_100():
    vals = rsi(list(range(1, 61)))
    defined = [v for v in vals if v is not None]
    assert len(defined) == 60 - 14
    assert all(math.isfinite(v) for v in defined)
    assert defined[-1] > 99.99
    assert defined[-1] <= 100.0


def test_rsi_falling_series_approaches_0():
    vals = rsi(list(range(60, 0, -1)))
    assert vals[-1] == pytest.approx(0.0, abs=1e-6)


def test_rsi_constant_series_is_50_never_nan():
    vals = rsi([5.0] * 30)
    defined = vals[14:]
    assert all(v == 50.0 for v in defined)


def test_rsi_too_short_is_all_absent():
    assert rsi([1.0] * 14, period=14) == [None] * 14
    assert rsi([]) == []


def test_rsi_accepts_pandas_series():
    assert rsi(pd.Series(WILDER_CLOSES)) == rsi(WILDER_CLOSES)


def test_rsi_invalid_period():
    with pytest.raises(ValueError):
        rsi([1, 2, 3], period=0)


def test_bollinger_constant_series_collapses_bands():
    bands = bollinger([10.0] * 20, window=20, width=2)
    assert bands.mid[18] is None
    assert bands.upper[18] is None
    assert bands.mid[19] == pytest.approx(10.0)
    assert bands.upper[19] == pytest.approx(10.0)
    assert bands.lower[19] == pytest.approx(10.0)


def test_bollinger_uses_population_stddev_on_inclusive_window():
    bands = bollinger([1.0, 2.0, 3.0, 4.0], window=3, width=2)
    std = math.sqrt(2.0 / 3.0)
    assert bands.mid[:2] == [None, None]
    assert bands.mid[2] == pytest.approx(2.0)
    assert bands.upper[2] == pytest.approx(2.0 + 2 * std)
    assert bands.lower[2] == pytest.approx(2.0 - 2 * std)
    assert bands.mid[3] == pytest.approx(3.0)


def test_bollinger_length_matches_input():
    closes = [float(i % 7) for i in range(50)]
    bands = bollinger(closes)
    assert len(bands.mid) == len(bands.upper) == len(bands.lower) == 50
    assert all(v is None for v in bands.mid[:19])
    assert all(v is not None for v in bands.mid[19:])


def test_ema_seeded_with_simple_mean():
    vals = ema([1.0, 2.0, 3.0, 4.0, 5.0], 3)
    assert vals[:2] == [None, None]
    assert vals[2] == pytest.approx(2.0)
    assert vals[3] == pytest.approx(3.0)
    assert vals[4] == pytest.approx(4.0)


def test_macd_constant_series_is_zero_after_warm_up():
    result = macd([100.0] * 60)
    assert len(result.macd) == len(result.signal) == 60
    assert all(v is None for v in result.macd[:25])
    assert all(v == pytest.approx(0.0) for v in result.macd[25:])
    # first 8 defined MACD points carry no signal value
    assert all(v is None for v in result.signal[:33])
    assert result.signal[33] == pytest.approx(0.0)


def test_macd_rising_series_macd_above_zero():
    result = macd([float(i) for i in range(1, 80)])
    assert result.macd[-1] > 0
    assert result.signal[-1] is not None


def test_macd_short_series_has_no_values():
    result = macd([1.0] * 20)
    assert result.macd == [None] * 20
    assert result.signal == [None] * 20
