"""Configuration management for urtools."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Library defaults, overridable through URTOOLS_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="URTOOLS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Single-series ADF
    adf_type: str = "drift"
    adf_lags: int = 1
    significance: str = "5%"

    # Sequential differencing
    max_diff: int = 3

    # Panel tests
    panel_exo: str = "intercept"
    panel_lags: str = "SIC"
    panel_pmax: int = 10

    # Application
    log_level: str = "INFO"


settings = Settings()
