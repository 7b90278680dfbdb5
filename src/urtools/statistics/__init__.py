"""
urtools Statistical Testing Module

Stationarity classification with the ADF test, sequential differencing
of non-stationary series, and panel unit root tests.
"""

from .stationarity import (
    adf_test,
    run_adf,
    classify,
    format_adf_table,
    AdfReport,
)
from .differencing import (
    remove_unit_root,
    DifferencingResult,
)
from .panel import (
    to_long_panel,
    maddala_wu_test,
    choi_test,
    levin_lin_chu_test,
    panel_unit_root_tests,
    PanelTestResult,
    PanelUnitRootResults,
)

__all__ = [
    # Stationarity
    "adf_test",
    "run_adf",
    "classify",
    "format_adf_table",
    "AdfReport",
    # Differencing
    "remove_unit_root",
    "DifferencingResult",
    # Panel
    "to_long_panel",
    "maddala_wu_test",
    "choi_test",
    "levin_lin_chu_test",
    "panel_unit_root_tests",
    "PanelTestResult",
    "PanelUnitRootResults",
]
