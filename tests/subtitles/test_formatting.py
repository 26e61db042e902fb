"""Tests for number rendering."""

import math

import numpy as np
import pytest

from plotstats.subtitles.formatting import (
    format_conf_level,
    format_df,
    format_n,
    format_p,
    format_percent,
    format_value,
    round_half_up,
)


class TestFormatValue:
    """Tests for format_value."""

    def test_ties_round_away_from_zero(self):
        """Printed ties round up, unlike Python's round()."""
        assert format_value(0.125, 2) == "0.13"
        assert format_value(2.675, 2) == "2.68"
        assert format_value(-0.125, 2) == "-0.13"

    def test_exact_number_of_decimals(self):
        assert format_value(3, 2) == "3.00"
        assert format_value(0.1, 4) == "0.1000"
        assert format_value(12.3456, 0) == "12"

    def test_no_negative_zero(self):
        assert format_value(-0.001, 2) == "0.00"

    def test_missing_values(self):
        """NaN, inf and None render as NA."""
        assert format_value(np.nan) == "NA"
        assert format_value(float("inf")) == "NA"
        assert format_value(None) == "NA"

    def test_rounding_error_bound(self):
        """Rendered value is within half a unit of the last decimal."""
        rng = np.random.default_rng(0)
        for x in rng.normal(0, 100, 500):
            for k in (0, 2, 4):
                assert abs(float(format_value(x, k)) - x) <= 0.5 * 10 ** -k + 1e-9


def test_round_half_up():
    assert round_half_up(0.125, 2) == 0.13
    assert round_half_up(1.5, 0) == 2.0
    assert math.isnan(round_half_up(np.nan))


class TestFormatP:
    """Tests for format_p."""

    def test_floor(self):
        assert format_p(0.0004) == "< 0.001"
        assert format_p(1e-20, 4) == "< 0.001"

    def test_regular(self):
        assert format_p(0.0423, 2) == "0.04"
        assert format_p(0.001, 3) == "0.001"
        assert format_p(0.0105, 4) == "0.0105"

    def test_missing(self):
        assert format_p(np.nan) == "NA"


class TestFormatDf:
    """Tests for format_df."""

    def test_integer_df(self):
        assert format_df(52.0) == "52"
        assert format_df(1) == "1"

    def test_fractional_df(self):
        assert format_df(47.83127, 2) == "47.83"

    def test_none_and_nan(self):
        assert format_df(None) is None
        assert format_df(np.nan) == "NA"


def test_format_n():
    assert format_n(56) == "56"
    assert format_n(np.nan) == "NA"


def test_format_conf_level():
    assert format_conf_level(0.95) == "95"
    assert format_conf_level(0.9) == "90"
    assert format_conf_level(0.999) == "99.9"


def test_format_percent():
    assert format_percent(33.3333, 0) == "33%"
    assert format_percent(12.345, 1) == "12.3%"
    assert format_percent(np.nan) == "NA%"
