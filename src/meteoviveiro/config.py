"""
Configuration for the MeteoGalicia client and the aggregation engine.
"""

import os
from dataclasses import dataclass, field, replace
from typing import Any, Optional, Tuple

OBSERVATION_BASE_URL = "https://servizos.meteogalicia.gal/mgrss/observacion"
FORECAST_BASE_URL = "https://servizos.meteogalicia.gal/apiv5"
RSS_BASE_URL = "https://servizos.meteogalicia.gal/rss/predicion"

# MeteoGalicia keeps about 72 hours of hourly station history
DEFAULT_SUPPORTED_PERIODS: Tuple[int, ...] = (24, 48, 72)


@dataclass(frozen=True)
class ClientConfig:
    """Settings shared by the HTTP client and the multi-station fetchers."""

    observation_base_url: str = OBSERVATION_BASE_URL
    forecast_base_url: str = FORECAST_BASE_URL
    rss_base_url: str = RSS_BASE_URL
    api_key: str = ""
    timeout: float = 30.0
    station_timeout: Optional[float] = 20.0
    max_retries: int = 0
    retry_delay: float = 1.0
    supported_periods: Tuple[int, ...] = field(
        default_factory=lambda: DEFAULT_SUPPORTED_PERIODS
    )
    timezone: str = "Europe/Madrid"
    user_agent: str = "meteoviveiro-client/0.1.0"

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if self.station_timeout is not None and self.station_timeout <= 0:
            raise ValueError(
                f"station_timeout must be positive, got {self.station_timeout}"
            )
        if self.max_retries < 0:
            raise ValueError(f"max_retries cannot be negative, got {self.max_retries}")
        if not self.supported_periods:
            raise ValueError("At least one supported period is required")

    @classmethod
    def from_env(cls, **overrides: Any) -> "ClientConfig":
        """
        Build a configuration from environment variables.

        Recognized variables:
            METEOGALICIA_API_KEY: API key for the numeric forecast service
            METEOVIVEIRO_TIMEOUT: HTTP timeout in seconds
            METEOVIVEIRO_STATION_TIMEOUT: per-station budget in multi-station fetches
            METEOVIVEIRO_MAX_RETRIES: retries for connection errors

        Keyword overrides take precedence over the environment.
        """
        values = {}
        api_key = os.environ.get("METEOGALICIA_API_KEY")
        if api_key:
            values["api_key"] = api_key

        try:
            if "METEOVIVEIRO_TIMEOUT" in os.environ:
                values["timeout"] = float(os.environ["METEOVIVEIRO_TIMEOUT"])
            if "METEOVIVEIRO_STATION_TIMEOUT" in os.environ:
                values["station_timeout"] = float(
                    os.environ["METEOVIVEIRO_STATION_TIMEOUT"]
                )
            if "METEOVIVEIRO_MAX_RETRIES" in os.environ:
                values["max_retries"] = int(os.environ["METEOVIVEIRO_MAX_RETRIES"])
        except ValueError as e:
            raise ValueError(f"Invalid meteoviveiro environment setting: {e}") from e

        values.update(overrides)
        return cls(**values)

    def with_overrides(self, **changes: Any) -> "ClientConfig":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)
