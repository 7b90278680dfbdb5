"""
Sequential Differencing to Remove Unit Roots

Differences non-stationary variables one round at a time until every variable
passes the ADF test or the maximum number of differences is reached.
"""

from dataclasses import dataclass

import pandas as pd
import structlog

from urtools.config import settings
from urtools.statistics.stationarity import AdfType, adf_test

logger = structlog.get_logger()


@dataclass
class DifferencingResult:
    """Transformed data plus a log of which variables were differenced."""
    data: pd.DataFrame
    control: pd.DataFrame  # columns: variable, times_diff (one row per round)

    @property
    def orders(self) -> dict[str, int]:
        """Number of differences applied to each differenced variable."""
        if self.control.empty:
            return {}
        return self.control.groupby("variable", sort=False).size().to_dict()


def remove_unit_root(
    data: pd.DataFrame,
    max_diff: int | None = None,
    type: AdfType | None = None,
) -> DifferencingResult:
    """
    Apply first differences to non-stationary variables until stationarity.

    Each round drops incomplete rows, runs the ADF test and differences the
    variables still classified as non-stationary. Differenced columns keep
    their length; the lost observations become leading NaNs.

    Args:
        data: Table of time series in columns
        max_diff: Maximum number of differencing rounds (default from settings)
        type: ADF deterministic specification (default from settings)

    Returns:
        DifferencingResult with the transformed table and the control log
    """
    if max_diff is None:
        max_diff = settings.max_diff
    if max_diff < 1:
        raise ValueError(f"max_diff must be at least 1, got {max_diff}")

    df_temp = data.copy()
    controls = []
    unit_root = []

    for i in range(1, max_diff + 1):
        report = adf_test(df_temp.dropna(), type=type)
        unit_root = report.non_stationary
        if not unit_root:
            break

        for col in unit_root:
            df_temp[col] = df_temp[col].diff()
        controls.extend({"variable": col, "times_diff": i} for col in unit_root)

        logger.info("Differenced variables", round=i, variables=unit_root)
    else:
        # Variables differenced in the final round were never re-tested
        logger.warning(
            "Maximum differences reached",
            max_diff=max_diff,
            last_differenced=unit_root,
        )

    control = pd.DataFrame(controls, columns=["variable", "times_diff"])
    control["times_diff"] = control["times_diff"].astype(int)
    return DifferencingResult(data=df_temp, control=control)
