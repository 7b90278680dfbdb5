"""
Tests for the ADF Stationarity Classifier

Validates thresholding, the number of underlying test calls, and the
level / first-difference report.
"""

import numpy as np
import pandas as pd
import pytest

from urtools.statistics import stationarity
from urtools.statistics.stationarity import (
    DIFFERENCE_TABLE,
    LEVEL_TABLE,
    AdfReport,
    adf_test,
    classify,
    format_adf_table,
    run_adf,
)

CRITICAL_VALUES = {"1%": -3.46, "5%": -2.87, "10%": -2.57}


class FakeAdfuller:
    """Stands in for statsmodels' adfuller, returning queued statistics."""

    def __init__(self, statistics):
        self.statistics = list(statistics)
        self.calls = []

    def __call__(self, x, maxlag=None, regression="c", autolag="AIC"):
        self.calls.append({"x": np.asarray(x), "maxlag": maxlag, "regression": regression, "autolag": autolag})
        stat = self.statistics.pop(0)
        return stat, 0.5, maxlag, len(x) - maxlag - 1, CRITICAL_VALUES


@pytest.fixture
def fake_adfuller(monkeypatch):
    def install(statistics):
        fake = FakeAdfuller(statistics)
        monkeypatch.setattr(stationarity, "adfuller", fake)
        return fake
    return install


class TestClassify:
    """Tests for the tau / critical value threshold."""

    def test_above_critical_is_non_stationary(self):
        assert classify(-1.5, -2.87) == "non-stationary"

    def test_below_critical_is_stationary(self):
        assert classify(-4.2, -2.87) == "stationary"

    def test_equal_is_stationary(self):
        assert classify(-2.87, -2.87) == "stationary"


class TestRunAdf:
    """Tests for a single ADF call."""

    def test_fixed_lag_and_regression(self, fake_adfuller):
        fake = fake_adfuller([-3.0])

        tau, crit = run_adf(np.arange(50.0), type="trend", lags=2)

        assert tau == -3.0
        assert crit == CRITICAL_VALUES["5%"]
        assert fake.calls[0]["maxlag"] == 2
        assert fake.calls[0]["regression"] == "ct"
        assert fake.calls[0]["autolag"] is None

    def test_type_mapping(self, fake_adfuller):
        fake = fake_adfuller([-3.0, -3.0])

        run_adf(np.arange(50.0), type="none")
        run_adf(np.arange(50.0), type="drift")

        assert [c["regression"] for c in fake.calls] == ["n", "c"]

    def test_significance_level(self, fake_adfuller):
        fake_adfuller([-3.0])

        _, crit = run_adf(np.arange(50.0), significance="1%")

        assert crit == CRITICAL_VALUES["1%"]

    def test_unknown_type(self):
        with pytest.raises(ValueError, match="Unknown ADF type"):
            run_adf(np.arange(50.0), type="quadratic")

    def test_unknown_significance(self, fake_adfuller):
        fake_adfuller([-3.0])

        with pytest.raises(ValueError, match="Unknown significance"):
            run_adf(np.arange(50.0), significance="2.5%")


class TestAdfTest:
    """Tests for the table-level classifier."""

    def test_stationary_series_single_call(self, fake_adfuller):
        """A stationary column is tested exactly once."""
        fake = fake_adfuller([-5.0])
        data = pd.DataFrame({"x": np.arange(30.0)})

        report = adf_test(data)

        assert len(fake.calls) == 1
        assert report.all_stationary
        assert report.first_difference is None
        assert list(report.tables()) == [LEVEL_TABLE]

    def test_non_stationary_series_one_extra_call(self, fake_adfuller):
        """A non-stationary column is re-tested once on its first difference."""
        fake = fake_adfuller([-1.0, -6.0])
        values = np.cumsum(np.arange(30.0))
        data = pd.DataFrame({"x": values})

        report = adf_test(data)

        assert len(fake.calls) == 2
        np.testing.assert_allclose(fake.calls[1]["x"], np.diff(values))
        assert report.non_stationary == ["x"]
        assert report.first_difference["variable"].tolist() == ["x"]
        assert report.first_difference["result"].tolist() == ["stationary"]
        assert list(report.tables()) == [LEVEL_TABLE, DIFFERENCE_TABLE]

    def test_mixed_columns(self, fake_adfuller):
        """Only failing columns reach the second stage."""
        fake = fake_adfuller([-5.0, -1.0, -4.0, 0.2, -1.5])
        data = pd.DataFrame({
            "a": np.arange(30.0),
            "b": np.arange(30.0),
            "c": np.arange(30.0),
            "d": np.arange(30.0),
        })

        report = adf_test(data)

        assert len(fake.calls) == 5
        assert report.level["result"].tolist() == [
            "stationary", "non-stationary", "stationary", "non-stationary",
        ]
        assert report.first_difference["variable"].tolist() == ["b", "d"]
        assert report.first_difference["result"].tolist() == ["non-stationary", "stationary"]

    def test_non_numeric_columns_ignored(self, fake_adfuller):
        fake = fake_adfuller([-5.0])
        data = pd.DataFrame({
            "label": ["q"] * 30,
            "x": np.arange(30.0),
        })

        report = adf_test(data)

        assert len(fake.calls) == 1
        assert report.level["variable"].tolist() == ["x"]

    def test_values_rounded(self, fake_adfuller):
        fake_adfuller([-3.14159])
        data = pd.DataFrame({"x": np.arange(30.0)})

        report = adf_test(data)

        row = report.level.iloc[0]
        assert row["tau"] == -3.142
        assert row["critical_value"] == -2.87
        assert list(report.level.columns) == ["variable", "tau", "critical_value", "result"]

    def test_unknown_type(self):
        with pytest.raises(ValueError, match="Unknown ADF type"):
            adf_test(pd.DataFrame({"x": np.arange(30.0)}), type="quadratic")

    def test_real_series(self):
        """White noise passes at level; a random walk passes after one difference."""
        np.random.seed(42)
        data = pd.DataFrame({
            "white_noise": np.random.randn(500),
            "random_walk": np.cumsum(np.random.randn(500)) + 0.5 * np.arange(500),
        })

        report = adf_test(data)

        level = report.level.set_index("variable")["result"]
        assert level["white_noise"] == "stationary"
        assert level["random_walk"] == "non-stationary"
        assert report.first_difference["variable"].tolist() == ["random_walk"]
        assert report.first_difference["result"].tolist() == ["stationary"]

    def test_insufficient_data_propagates(self):
        with pytest.raises(ValueError):
            adf_test(pd.DataFrame({"x": [1.0, 2.0, 4.0]}))


class TestFormatTable:
    """Tests for LaTeX output."""

    def test_both_panels(self):
        report = AdfReport(
            level=pd.DataFrame({
                "variable": ["gdp", "rate"],
                "tau": [-1.2, -4.5],
                "critical_value": [-2.87, -2.87],
                "result": ["non-stationary", "stationary"],
            }),
            first_difference=pd.DataFrame({
                "variable": ["gdp"],
                "tau": [-6.1],
                "critical_value": [-2.87],
                "result": ["stationary"],
            }),
        )

        latex = format_adf_table(report)

        assert latex.startswith(r"\begin{table}")
        assert LEVEL_TABLE in latex
        assert DIFFERENCE_TABLE in latex
        assert r"gdp & -1.200 & -2.870 & non-stationary \\" in latex
        assert r"gdp & -6.100 & -2.870 & stationary \\" in latex
