"""
Async HTTP client for the MeteoGalicia observation and forecast services.
"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional

import httpx

from .config import ClientConfig
from .exceptions import MeteoConnectionError, MeteoError, MeteoQueryError

logger = logging.getLogger(__name__)

DEFAULT_FORECAST_VARIABLES = (
    "temperature,precipitation_amount,wind,sky_state,relative_humidity"
)


class MeteoGaliciaClient:
    """
    Client for the MeteoGalicia web services.

    Methods return the decoded JSON body untouched; turning it into model
    objects is done by the normalizers (observations, historical, forecast).
    """

    def __init__(
        self, config: Optional[ClientConfig] = None, timeout: Optional[float] = None
    ):
        if config is None:
            config = ClientConfig()
        if timeout is not None:
            config = config.with_overrides(timeout=timeout)
        self.config = config
        self.timeout = config.timeout
        self._client = httpx.AsyncClient(
            timeout=config.timeout,
            headers={
                "User-Agent": config.user_agent,
                "Accept": "application/json",
            },
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "MeteoGaliciaClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def _make_request(
        self, url: str, params: Optional[Dict[str, str]] = None
    ) -> Any:
        """Make a GET request, retrying connection errors up to max_retries times."""
        attempts = self.config.max_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                return await self._request_once(url, params)
            except MeteoConnectionError as e:
                if attempt >= attempts:
                    raise
                logger.warning(
                    f"Request to {url} failed (attempt {attempt}/{attempts}): {e}"
                )
                await asyncio.sleep(self.config.retry_delay)

    async def _request_once(
        self, url: str, params: Optional[Dict[str, str]] = None
    ) -> Any:
        logger.debug(f"GET {url} params={self._masked(params)}")

        try:
            response = await self._client.get(url, params=params)
            response.raise_for_status()
            return response.json()

        except httpx.TimeoutException as e:
            raise MeteoConnectionError(f"Request timeout after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                raise MeteoQueryError("Station or data not found") from e
            elif e.response.status_code == 429:
                raise MeteoConnectionError("Rate limit exceeded") from e
            elif e.response.status_code >= 500:
                raise MeteoConnectionError(
                    "MeteoGalicia service temporarily unavailable"
                ) from e
            else:
                raise MeteoQueryError(
                    f"HTTP error {e.response.status_code}: {e}"
                ) from e
        except httpx.RequestError as e:
            raise MeteoConnectionError(f"Network error: {e}") from e
        except json.JSONDecodeError as e:
            raise MeteoQueryError(f"Invalid JSON response: {e}") from e

    @staticmethod
    def _masked(params: Optional[Dict[str, str]]) -> Optional[Dict[str, str]]:
        if not params or "API_KEY" not in params:
            return params
        return {**params, "API_KEY": "XXXXX"}

    async def get_latest_readings(self, station_id: int) -> Dict[str, Any]:
        """
        Get the latest 10-minute reading batch of a station.

        Args:
            station_id: MeteoGalicia station id (e.g., 10104)

        Returns:
            Raw response with a 'listUltimos10min' list
        """
        url = f"{self.config.observation_base_url}/ultimos10minEstacionsMeteo.action"
        return await self._get_object(url, {"idEst": str(station_id)})

    async def get_historical_readings(
        self, station_id: int, hours: int
    ) -> Dict[str, Any]:
        """
        Get the hourly readings of a station over the last hours.

        Args:
            station_id: MeteoGalicia station id
            hours: Window length in hours

        Returns:
            Raw response with a 'listHorarios' list
        """
        url = f"{self.config.observation_base_url}/ultimosHorariosEstacions.action"
        return await self._get_object(
            url, {"idEst": str(station_id), "numHoras": str(hours)}
        )

    async def get_hourly_readings(
        self, station_id: int, start: str, hours: int
    ) -> Dict[str, Any]:
        """
        Get the hourly readings of a station from a given start date.

        Args:
            station_id: MeteoGalicia station id
            start: Local start date and time as 'DD/MM/YYYY HH:MM'
            hours: Number of hours from the start

        Returns:
            Raw response with a 'parametros' list of per-code 'valores'
        """
        url = f"{self.config.observation_base_url}/datosHorariosEstacions.action"
        return await self._get_object(
            url,
            {"dataIni": start, "numHoras": str(hours), "idEst": str(station_id)},
        )

    async def get_numeric_forecast(
        self,
        longitude: float,
        latitude: float,
        variables: str = DEFAULT_FORECAST_VARIABLES,
    ) -> Dict[str, Any]:
        """
        Get the hourly numeric forecast (API v5, GeoJSON) for a point.

        Args:
            longitude: Point longitude
            latitude: Point latitude
            variables: Comma-separated forecast variables
        """
        if not self.config.api_key:
            logger.warning("METEOGALICIA_API_KEY is not configured")

        url = f"{self.config.forecast_base_url}/getNumericForecastInfo"
        params = {
            "coords": f"{longitude},{latitude}",
            "variables": variables,
            "API_KEY": self.config.api_key,
        }
        return await self._get_object(url, params)

    async def get_municipality_forecast(self, municipality_id: int) -> Dict[str, Any]:
        """
        Get the daily forecast of a municipality (UV, max/min, warning level).

        Args:
            municipality_id: Municipality (concello) id, e.g. 27066 for Viveiro
        """
        url = f"{self.config.rss_base_url}/jsonPredConcellos.action"
        return await self._get_object(url, {"idConc": str(municipality_id)})

    async def _get_object(self, url: str, params: Dict[str, str]) -> Dict[str, Any]:
        try:
            data = await self._make_request(url, params)
        except MeteoError:
            raise
        except Exception as e:
            raise MeteoQueryError(f"Failed to retrieve {url}: {e}") from e

        if not isinstance(data, dict):
            raise MeteoQueryError(
                f"Unexpected response from {url}: expected an object, "
                f"got {type(data).__name__}"
            )
        return data
