"""
Panel Unit Root Tests

Three first-generation panel unit root tests built on per-unit ADF regressions:

- Maddala and Wu (1999): Fisher combination of the individual ADF p-values,
  P = -2 * sum(ln p_i) ~ chi2(2N). Allows heterogeneous autoregressive roots.
- Choi (2001): modified inverse chi-square Pm = -sum(ln p_i + 1) / sqrt(N),
  asymptotically N(0, 1) as N grows. Also heterogeneous.
- Levin, Lin and Chu (2002): pooled t-statistic on orthogonalised, normalised
  residuals, adjusted for mean and variance. Assumes a common root.

All tests share H0: every unit has a unit root. Wide input matrices hold time
periods in rows and units in columns.
"""

import warnings
from dataclasses import dataclass, field
from typing import Literal

import numpy as np
import pandas as pd
import structlog
from scipy import stats
from statsmodels.tsa.stattools import adfuller

from urtools.config import settings

logger = structlog.get_logger()

Exogenous = Literal["none", "intercept", "trend"]

_REGRESSIONS = {
    "none": "n",
    "intercept": "c",
    "trend": "ct",
}

_EXO_LABELS = {
    "none": "None",
    "intercept": "Individual Intercepts",
    "trend": "Individual Intercepts and Trend",
}

_AUTOLAG = {
    "SIC": "BIC",
    "AIC": "AIC",
}

# Levin-Lin-Chu (2002) Table 2: mean and standard deviation adjustments of the
# pooled t-statistic, by average effective sample length T~. Values between
# rows are interpolated linearly; values outside the table are clamped.
# Columns: T~, (mu, sigma) none, (mu, sigma) intercept, (mu, sigma) trend
_LLC_ADJUSTMENTS = np.array([
    [25, 0.004, 1.049, -0.554, 0.919, -0.703, 1.003],
    [30, 0.003, 1.035, -0.546, 0.889, -0.674, 0.949],
    [35, 0.002, 1.027, -0.541, 0.867, -0.653, 0.906],
    [40, 0.002, 1.021, -0.537, 0.850, -0.637, 0.871],
    [45, 0.001, 1.017, -0.533, 0.837, -0.624, 0.842],
    [50, 0.001, 1.014, -0.531, 0.826, -0.614, 0.818],
    [60, 0.001, 1.011, -0.527, 0.810, -0.598, 0.780],
    [70, 0.000, 1.008, -0.524, 0.798, -0.587, 0.751],
    [80, 0.000, 1.007, -0.521, 0.789, -0.578, 0.728],
    [90, 0.000, 1.006, -0.520, 0.782, -0.571, 0.710],
    [100, 0.000, 1.005, -0.518, 0.776, -0.566, 0.695],
    [250, 0.000, 1.001, -0.509, 0.742, -0.533, 0.603],
])

_LLC_COLUMNS = {
    "none": 1,
    "intercept": 3,
    "trend": 5,
}


@dataclass
class PanelTestResult:
    """Result of a single panel unit root test."""
    method: str
    statistic_name: str
    statistic: float
    p_value: float
    parameter: float | None = None  # degrees of freedom, chi-square tests only
    alternative: str = "stationarity"
    data_name: str = "y"
    exo: str = "intercept"

    # Per-unit detail
    n_units: int = 0
    lags: list[int] = field(default_factory=list)
    unit_pvalues: list[float] = field(default_factory=list)

    def __str__(self) -> str:
        line = f"{self.statistic_name} = {self.statistic:.4f}"
        if self.parameter is not None:
            line += f", df = {self.parameter:g}"
        line += f", p-value = {self.p_value:.4g}"
        return "\n".join([
            "",
            f"\t{self.method} (ex. var.: {_EXO_LABELS[self.exo]})",
            "",
            f"data:  {self.data_name}",
            line,
            f"alternative hypothesis: {self.alternative}",
            "",
        ])


@dataclass
class PanelUnitRootResults:
    """Maddala-Wu, Choi and Levin-Lin-Chu results for one panel."""
    mw: PanelTestResult
    choi: PanelTestResult
    llc: PanelTestResult

    def summary(self) -> None:
        """Print all three tests."""
        print("\nPanel Unit Root Tests:")
        print("================================")

        print("\n1. Maddala and Wu Test:")
        print(self.mw)

        print("\n2. Choi Test:")
        print(self.choi)

        print("\n3. Levin-Lin-Chu Test:")
        print(self.llc)


@dataclass
class _UnitADF:
    """Individual ADF regression for one cross-section unit."""
    unit: object
    series: np.ndarray
    lag: int
    p_value: float


def to_long_panel(data: pd.DataFrame | np.ndarray) -> pd.DataFrame:
    """
    Stack a wide T x N matrix into long (id, time, y) form.

    Units are numbered 1..N by column and periods 1..T by row; unit j carries
    column j in time order.
    """
    values = np.asarray(data, dtype=float)
    if values.ndim != 2:
        raise ValueError(f"Expected a 2-dimensional matrix, got {values.ndim} dimensions")

    n_time, n_units = values.shape
    return pd.DataFrame({
        "id": np.repeat(np.arange(1, n_units + 1), n_time),
        "time": np.tile(np.arange(1, n_time + 1), n_units),
        "y": values.ravel(order="F"),
    })


def _unit_adf_tests(
    panel: pd.DataFrame,
    exo: Exogenous,
    lags: str | int,
    pmax: int,
) -> list[_UnitADF]:
    """Run the ADF regression for every unit of a long panel."""
    if exo not in _REGRESSIONS:
        raise ValueError(f"Unknown exogenous specification: {exo}")
    if isinstance(lags, str) and lags not in _AUTOLAG:
        raise ValueError(f"Unknown lag selection: {lags}; expected 'SIC', 'AIC' or an integer")

    regression = _REGRESSIONS[exo]
    ntrend = len(regression) if regression != "n" else 0

    units = []
    for unit, group in panel.sort_values(["id", "time"]).groupby("id", sort=True):
        series = group["y"].dropna().to_numpy()
        nobs = len(series)

        if isinstance(lags, str):
            # adfuller rejects maxlag above nobs // 2 - ntrend - 1
            max_lag = min(pmax, nobs // 2 - ntrend - 1)
            if max_lag < 0:
                raise ValueError(
                    f"Unit {unit} has only {len(series)} observations; too few for an ADF regression"
                )
            kwargs = dict(maxlag=max_lag, autolag=_AUTOLAG[lags])
        else:
            kwargs = dict(maxlag=lags, autolag=None)

        with warnings.catch_warnings():
            # Tuple return shape deprecation in statsmodels 0.15
            warnings.simplefilter("ignore", FutureWarning)
            result = adfuller(series, regression=regression, **kwargs)

        units.append(_UnitADF(unit=unit, series=series, lag=int(result[2]), p_value=float(result[1])))

    if len(units) < 2:
        raise ValueError(f"Panel must have at least 2 units, got {len(units)}")

    logger.debug(
        "Individual ADF regressions",
        n_units=len(units),
        lags=[u.lag for u in units],
    )
    return units


def _log_pvalues(units: list[_UnitADF]) -> np.ndarray:
    p_values = np.array([u.p_value for u in units])
    # Avoid log(0)
    p_values[p_values == 0] = 1e-10
    return np.log(p_values)


def _resolve(exo, lags, pmax):
    if exo is None:
        exo = settings.panel_exo
    if lags is None:
        lags = settings.panel_lags
    if isinstance(lags, str) and lags.isdigit():
        lags = int(lags)
    if pmax is None:
        pmax = settings.panel_pmax
    return exo, lags, pmax


def _maddala_wu(units: list[_UnitADF], exo: Exogenous) -> PanelTestResult:
    n = len(units)
    statistic = float(-2 * np.sum(_log_pvalues(units)))
    df = 2 * n
    p_value = float(stats.chi2.sf(statistic, df))

    logger.info("Maddala-Wu test", statistic=statistic, df=df, p_value=p_value)
    return PanelTestResult(
        method="Maddala-Wu Unit-Root Test",
        statistic_name="chisq",
        statistic=statistic,
        p_value=p_value,
        parameter=df,
        exo=exo,
        n_units=n,
        lags=[u.lag for u in units],
        unit_pvalues=[u.p_value for u in units],
    )


def _choi(units: list[_UnitADF], exo: Exogenous) -> PanelTestResult:
    n = len(units)
    statistic = float(-np.sum(_log_pvalues(units) + 1) / np.sqrt(n))
    p_value = float(stats.norm.sf(statistic))

    logger.info("Choi test", statistic=statistic, p_value=p_value)
    return PanelTestResult(
        method="Choi's modified P Unit-Root Test",
        statistic_name="Pm",
        statistic=statistic,
        p_value=p_value,
        exo=exo,
        n_units=n,
        lags=[u.lag for u in units],
        unit_pvalues=[u.p_value for u in units],
    )


def maddala_wu_test(
    panel: pd.DataFrame,
    exo: Exogenous | None = None,
    lags: str | int | None = None,
    pmax: int | None = None,
) -> PanelTestResult:
    """
    Maddala-Wu Fisher-type test.

    P = -2 * sum(ln p_i) follows chi2 with 2N degrees of freedom under H0.
    Large values reject the unit root null.
    """
    exo, lags, pmax = _resolve(exo, lags, pmax)
    return _maddala_wu(_unit_adf_tests(panel, exo, lags, pmax), exo)


def choi_test(
    panel: pd.DataFrame,
    exo: Exogenous | None = None,
    lags: str | int | None = None,
    pmax: int | None = None,
) -> PanelTestResult:
    """
    Choi's modified inverse chi-square test.

    Pm = -sum(ln p_i + 1) / sqrt(N) is standard normal under H0 for large N.
    Large values reject the unit root null.
    """
    exo, lags, pmax = _resolve(exo, lags, pmax)
    return _choi(_unit_adf_tests(panel, exo, lags, pmax), exo)


def _deterministics(n: int, exo: Exogenous) -> np.ndarray:
    if exo == "none":
        return np.empty((n, 0))
    if exo == "intercept":
        return np.ones((n, 1))
    return np.column_stack([np.ones(n), np.arange(1, n + 1)])


def _residuals(y: np.ndarray, X: np.ndarray) -> np.ndarray:
    if X.shape[1] == 0:
        return y
    beta = np.linalg.lstsq(X, y, rcond=None)[0]
    return y - X @ beta


def _llc_unit(series: np.ndarray, lag: int, exo: Exogenous, kernel_lag: int) -> tuple[np.ndarray, np.ndarray, float]:
    """
    Orthogonalised residuals and the long-run/short-run standard deviation ratio.

    Returns (e~, v~, s_i): the residuals of dy_t and y_{t-1} on the lagged
    differences and deterministics, both scaled by the regression standard
    error, and the ratio of the long-run standard deviation of dy to it.
    """
    dy = np.diff(series)
    y_lag = series[:-1]
    n = len(dy) - lag

    lagged = [dy[lag - k:len(dy) - k] for k in range(1, lag + 1)]
    X = np.column_stack(lagged + [_deterministics(n, exo)]) if lagged else _deterministics(n, exo)

    e = _residuals(dy[lag:], X)
    v = _residuals(y_lag[lag:], X)

    # Regression of e on v gives the innovation standard error
    delta = np.dot(v, e) / np.dot(v, v)
    sigma_e = np.sqrt(np.sum((e - delta * v) ** 2) / n)

    # Long-run variance of dy with Bartlett weights
    ddy = _residuals(dy, _deterministics(len(dy), exo))
    t = len(ddy)
    long_run = np.dot(ddy, ddy) / t
    for L in range(1, kernel_lag + 1):
        weight = 1 - L / (kernel_lag + 1)
        long_run += 2 * weight * np.dot(ddy[L:], ddy[:-L]) / t
    sigma_y = np.sqrt(long_run)

    return e / sigma_e, v / sigma_e, sigma_y / sigma_e


def _llc_adjustment(t_tilde: float, exo: Exogenous) -> tuple[float, float]:
    """Mean and standard deviation adjustments, interpolated in T~."""
    lengths = _LLC_ADJUSTMENTS[:, 0]
    if t_tilde < lengths[0]:
        logger.warning(
            "Effective sample length below Levin-Lin-Chu table",
            t_tilde=float(t_tilde),
            minimum=float(lengths[0]),
        )
    col = _LLC_COLUMNS[exo]
    mu_star = np.interp(t_tilde, lengths, _LLC_ADJUSTMENTS[:, col])
    sigma_star = np.interp(t_tilde, lengths, _LLC_ADJUSTMENTS[:, col + 1])
    return float(mu_star), float(sigma_star)


def _levin_lin_chu(units: list[_UnitADF], exo: Exogenous) -> PanelTestResult:
    n = len(units)

    t_bar = np.mean([len(u.series) for u in units])
    # LLC Table 2 kernel lags are 3.21 * T^(1/3) rounded to nearest
    kernel_lag = int(round(3.21 * t_bar ** (1 / 3)))

    e_all, v_all, ratios = [], [], []
    for u in units:
        e, v, s = _llc_unit(u.series, u.lag, exo, kernel_lag)
        e_all.append(e)
        v_all.append(v)
        ratios.append(s)

    e = np.concatenate(e_all)
    v = np.concatenate(v_all)
    s_n = float(np.mean(ratios))

    p_bar = np.mean([u.lag for u in units])
    t_tilde = t_bar - p_bar - 1

    vv = np.dot(v, v)
    delta = np.dot(v, e) / vv
    sigma2 = np.sum((e - delta * v) ** 2) / (n * t_tilde)
    se_delta = np.sqrt(sigma2 / vv)
    t_delta = delta / se_delta

    mu_star, sigma_star = _llc_adjustment(t_tilde, exo)
    statistic = float((t_delta - n * t_tilde * s_n * se_delta * mu_star / sigma2) / sigma_star)
    p_value = float(stats.norm.cdf(statistic))

    logger.info(
        "Levin-Lin-Chu test",
        statistic=statistic,
        p_value=p_value,
        delta=float(delta),
        t_tilde=float(t_tilde),
    )
    return PanelTestResult(
        method="Levin-Lin-Chu Unit-Root Test",
        statistic_name="z",
        statistic=statistic,
        p_value=p_value,
        exo=exo,
        n_units=n,
        lags=[u.lag for u in units],
        unit_pvalues=[u.p_value for u in units],
    )


def levin_lin_chu_test(
    panel: pd.DataFrame,
    exo: Exogenous | None = None,
    lags: str | int | None = None,
    pmax: int | None = None,
) -> PanelTestResult:
    """
    Levin-Lin-Chu pooled test with a common autoregressive root.

    Steps:
    1. Per-unit ADF lag orders p_i from the individual regressions.
    2. Residuals of dy_t and y_{t-1} on lagged differences and deterministics,
       normalised by each unit's regression standard error.
    3. Pooled regression of the normalised residuals gives t_delta.
    4. Adjusted t* = (t_delta - N T~ S_N sigma~^-2 se(delta) mu*) / sigma*,
       standard normal under H0. Small values reject the unit root null.

    The statistic over-rejects in small samples, notably with a trend.
    """
    exo, lags, pmax = _resolve(exo, lags, pmax)
    return _levin_lin_chu(_unit_adf_tests(panel, exo, lags, pmax), exo)


def panel_unit_root_tests(
    data: pd.DataFrame | np.ndarray,
    exo: Exogenous | None = None,
    lags: str | int | None = None,
    pmax: int | None = None,
) -> PanelUnitRootResults:
    """
    Run the Maddala-Wu, Choi and Levin-Lin-Chu tests on a wide panel.

    The individual ADF regressions are run once and shared by all three tests.

    Args:
        data: Matrix with time periods in rows and units in columns
        exo: Deterministic terms in the individual regressions (default 'intercept')
        lags: 'SIC', 'AIC' or a fixed lag order
        pmax: Maximum lag order for automatic selection

    Returns:
        PanelUnitRootResults; call .summary() to print them
    """
    exo, lags, pmax = _resolve(exo, lags, pmax)
    panel = to_long_panel(data)
    logger.info(
        "Panel unit root tests",
        n_units=int(panel["id"].nunique()),
        n_periods=int(panel["time"].nunique()),
    )

    units = _unit_adf_tests(panel, exo, lags, pmax)
    return PanelUnitRootResults(
        mw=_maddala_wu(units, exo),
        choi=_choi(units, exo),
        llc=_levin_lin_chu(units, exo),
    )
