"""
Stationarity Classification with the Augmented Dickey-Fuller Test

Runs a fixed-lag ADF regression on every numeric column of a table and
classifies each column by comparing the tau statistic with its critical value.
Columns that fail at level are re-tested once on their first difference, which
is the usual first step before deciding how many differences a variable needs.

Test specifications:
- none:  no deterministic terms (tau1)
- drift: constant (tau2)
- trend: constant and linear trend (tau3)

H0: series has a unit root. A tau at or below the critical value rejects H0.
"""

import warnings
from dataclasses import dataclass
from typing import Literal

import numpy as np
import pandas as pd
import structlog
from statsmodels.tsa.stattools import adfuller

from urtools.config import settings

logger = structlog.get_logger()

AdfType = Literal["none", "drift", "trend"]

STATIONARY = "stationary"
NON_STATIONARY = "non-stationary"

LEVEL_TABLE = "Test at level"
DIFFERENCE_TABLE = "Test with one difference"

RESULT_COLUMNS = ["variable", "tau", "critical_value", "result"]

# ADF specification -> statsmodels deterministic terms
_REGRESSIONS = {
    "none": "n",
    "drift": "c",
    "trend": "ct",
}


@dataclass
class AdfReport:
    """ADF results at level and, for failing variables, at first difference."""
    level: pd.DataFrame
    first_difference: pd.DataFrame | None = None

    @property
    def non_stationary(self) -> list[str]:
        mask = self.level["result"] == NON_STATIONARY
        return self.level.loc[mask, "variable"].tolist()

    @property
    def all_stationary(self) -> bool:
        return not self.non_stationary

    def tables(self) -> dict[str, pd.DataFrame]:
        """Return the result tables keyed by their report titles."""
        tables = {LEVEL_TABLE: self.level}
        if self.first_difference is not None:
            tables[DIFFERENCE_TABLE] = self.first_difference
        return tables


def classify(tau: float, critical_value: float) -> str:
    """Non-stationary when tau lies above the critical value."""
    return NON_STATIONARY if tau > critical_value else STATIONARY


def run_adf(
    series: pd.Series | np.ndarray,
    type: AdfType = "drift",
    lags: int | None = None,
    significance: str | None = None,
) -> tuple[float, float]:
    """
    Single ADF regression with a fixed number of lagged differences.

    Args:
        series: Observations in time order, without missing values
        type: Deterministic specification ('none', 'drift' or 'trend')
        lags: Number of lagged differences (default from settings)
        significance: Critical value level, one of '1%', '5%', '10%'

    Returns:
        (tau statistic, critical value at the requested level)
    """
    if type not in _REGRESSIONS:
        raise ValueError(f"Unknown ADF type: {type}")
    if lags is None:
        lags = settings.adf_lags
    if significance is None:
        significance = settings.significance

    # autolag=None -> (stat, pvalue, usedlag, nobs, critical values)
    with warnings.catch_warnings():
        # Tuple return shape deprecation in statsmodels 0.15
        warnings.simplefilter("ignore", FutureWarning)
        result = adfuller(
            np.asarray(series, dtype=float),
            maxlag=lags,
            regression=_REGRESSIONS[type],
            autolag=None,
        )
    tau = float(result[0])
    critical_values = result[4]
    if significance not in critical_values:
        raise ValueError(
            f"Unknown significance level: {significance}; "
            f"expected one of {sorted(critical_values)}"
        )
    critical_value = float(critical_values[significance])

    logger.debug(
        "ADF test",
        type=type,
        lags=lags,
        n_obs=len(series),
        tau=tau,
        critical_value=critical_value,
    )
    return tau, critical_value


def _result_table(
    columns: dict[str, pd.Series],
    type: AdfType,
    lags: int | None,
) -> pd.DataFrame:
    rows = []
    for name, series in columns.items():
        tau, crit = run_adf(series, type=type, lags=lags)
        tau = round(tau, 3)
        crit = round(crit, 3)
        rows.append({
            "variable": name,
            "tau": tau,
            "critical_value": crit,
            "result": classify(tau, crit),
        })
    return pd.DataFrame(rows, columns=RESULT_COLUMNS)


def adf_test(
    data: pd.DataFrame,
    type: AdfType | None = None,
    lags: int | None = None,
) -> AdfReport:
    """
    ADF test on every numeric column, repeated on first differences for failures.

    Each numeric column is tested once at level. Columns classified as
    non-stationary are differenced once and tested a second time; stationary
    columns are never re-tested.

    Args:
        data: Table of time series in columns
        type: Deterministic specification (default from settings)
        lags: Number of lagged differences (default from settings)

    Returns:
        AdfReport with the level table and, when needed, the differenced table
    """
    if type is None:
        type = settings.adf_type
    if type not in _REGRESSIONS:
        raise ValueError(f"Unknown ADF type: {type}")

    numeric = data.select_dtypes(include="number")
    level = _result_table(
        {col: numeric[col] for col in numeric.columns},
        type=type,
        lags=lags,
    )
    report = AdfReport(level=level)

    failing = report.non_stationary
    if failing:
        logger.info("Re-testing at first difference", variables=failing)
        report.first_difference = _result_table(
            {col: numeric[col].diff().iloc[1:] for col in failing},
            type=type,
            lags=lags,
        )

    return report


def format_adf_table(report: AdfReport) -> str:
    """
    Format ADF results as a LaTeX table.

    Returns LaTeX code with one row per variable at level and, when present,
    a second panel for first differences.
    """
    lines = [
        r"\begin{table}[htbp]",
        r"\centering",
        r"\caption{Augmented Dickey-Fuller Unit Root Tests}",
        r"\label{tab:adf}",
        r"\small",
        r"\begin{tabular}{lccc}",
        r"\toprule",
        r"Variable & $\tau$ & Critical Value & Result \\",
        r"\midrule",
    ]

    for title, table in report.tables().items():
        lines.append(rf"\multicolumn{{4}}{{l}}{{\textit{{{title}}}}} \\")
        for row in table.itertuples(index=False):
            lines.append(
                f"{row.variable} & {row.tau:.3f} & {row.critical_value:.3f} & "
                f"{row.result} \\\\"
            )

    lines.extend([
        r"\bottomrule",
        r"\end{tabular}",
        r"\end{table}",
    ])

    return "\n".join(lines)
