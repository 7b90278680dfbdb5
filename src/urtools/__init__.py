"""Unit root utilities for time series and panel data."""

__version__ = "0.1.0"
