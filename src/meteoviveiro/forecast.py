"""
Forecast data for the Viveiro municipality.

Two MeteoGalicia products are used:

- getNumericForecastInfo (API v5): hourly forecast for a point, the input of
  the daily aggregation and of the current conditions card.
- jsonPredConcellos (RSS/JSON): daily municipality forecast with UV index,
  max/min temperatures and warning level.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from .client import MeteoGaliciaClient
from .daily import group_by_day
from .exceptions import NoDataError
from .models import (
    CurrentConditions,
    DailyAggregate,
    ForecastPoint,
    MunicipalityDay,
    PeriodOutlook,
)
from .units import apparent_temperature, ms_to_kmh
from .utils import add_sync_version, parse_timestamp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ForecastLocation:
    id: int  # municipality (concello) id
    name: str
    province: str
    latitude: float
    longitude: float


VIVEIRO_LOCATION = ForecastLocation(
    id=27066,
    name="Viveiro",
    province="Lugo",
    latitude=43.6626,
    longitude=-7.5947,
)

SKY_STATES = {
    "SUNNY": "Despejado",
    "PARTLY_CLOUDY": "Parcialmente nublado",
    "HIGH_CLOUDS": "Nubes altas",
    "CLOUDY": "Nublado",
    "OVERCAST": "Cubierto",
    "DRIZZLE": "Llovizna",
    "WEAK_RAIN": "Lluvia débil",
    "RAIN": "Lluvia",
    "SHOWERS": "Chubascos",
    "WEAK_SHOWERS": "Chubascos débiles",
    "OVERCAST_AND_SHOWERS": "Cubierto con chubascos",
    "STORM": "Tormenta",
    "SNOW": "Nieve",
    "FOG": "Niebla",
    "MIST": "Neblina",
    "WEAK_SNOW": "Nieve débil",
    "SNOW_SHOWERS": "Chubascos de nieve",
    "SLEET": "Aguanieve",
    "HAIL": "Granizo",
    "THUNDERSTORM": "Tormenta eléctrica",
    "FREEZING_RAIN": "Lluvia engelante",
    "SANDSTORM": "Tormenta de arena",
    "DUST": "Polvo en suspensión",
    # legacy numeric codes
    "1": "Despejado",
    "2": "Poco nublado",
    "3": "Parcialmente nublado",
    "4": "Nublado",
    "5": "Muy nublado",
    "6": "Cubierto",
    "7": "Niebla",
    "8": "Chubascos",
    "9": "Lluvia",
    "10": "Tormenta",
    "11": "Nieve",
    "12": "Aguanieve",
    "13": "Granizo",
    "14": "Tormenta eléctrica",
    "15": "Lluvia engelante",
}


def sky_state_name(code: str) -> str:
    """Spanish name of a sky state code; unknown codes are returned as is."""
    return SKY_STATES.get(str(code), str(code))


def _to_float(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def parse_numeric_forecast(payload: Any) -> List[ForecastPoint]:
    """
    Turn a getNumericForecastInfo (GeoJSON) response into forecast points.

    Variables of the same instant are merged into one point. Wind speed is
    converted from m/s to km/h.

    Returns:
        Forecast points sorted by timestamp

    Raises:
        NoDataError: If the response contains no usable instant
    """
    merged: Dict[datetime, Dict[str, Any]] = {}

    features = payload.get("features") if isinstance(payload, dict) else None
    for feature in features or []:
        days = (feature.get("properties") or {}).get("days") or []
        for day in days:
            for variable in day.get("variables") or []:
                name = str(variable.get("name", "")).lower()
                for entry in variable.get("values") or []:
                    instant = entry.get("timeInstant")
                    if not instant:
                        continue
                    try:
                        timestamp = parse_timestamp(instant)
                    except ValueError:
                        logger.warning(f"Skipping forecast value with bad timestamp {instant!r}")
                        continue
                    fields = merged.setdefault(timestamp, {})
                    _apply_variable(fields, name, entry)

    if not merged:
        raise NoDataError("The numeric forecast returned no data")

    points = [ForecastPoint(timestamp=ts, **fields) for ts, fields in merged.items()]
    points.sort(key=lambda p: p.timestamp)

    logger.debug(
        f"Parsed {len(points)} forecast points from "
        f"{points[0].timestamp.isoformat()} to {points[-1].timestamp.isoformat()}"
    )
    return points


def _apply_variable(fields: Dict[str, Any], name: str, entry: Dict[str, Any]) -> None:
    if name == "temperature":
        fields["temperature"] = _to_float(entry.get("value")) or 0.0
    elif name in ("precipitation_amount", "precipitation"):
        fields["precipitation"] = _to_float(entry.get("value")) or 0.0
    elif name == "wind":
        if "moduleValue" in entry:
            fields["wind_speed"] = ms_to_kmh(_to_float(entry["moduleValue"]) or 0.0)
        if "directionValue" in entry:
            fields["wind_direction"] = _to_float(entry["directionValue"]) or 0.0
    elif name == "sky_state":
        fields["sky_state"] = sky_state_name(entry.get("value"))
        if entry.get("iconURL"):
            fields["sky_state_icon"] = entry["iconURL"]
    elif name == "relative_humidity":
        fields["humidity"] = _to_float(entry.get("value")) or None


def current_conditions(points: List[ForecastPoint]) -> CurrentConditions:
    """
    Current conditions from the first forecast point.

    Raises:
        NoDataError: If there are no points
    """
    if not points:
        raise NoDataError("No forecast data available")

    current = points[0]
    return CurrentConditions(
        temperature=current.temperature,
        feels_like=apparent_temperature(
            current.temperature, current.wind_speed, current.humidity
        ),
        wind_speed=current.wind_speed,
        wind_direction=current.wind_direction,
        precipitation=current.precipitation,
        sky_state=current.sky_state,
        timestamp=current.timestamp,
        sky_state_icon=current.sky_state_icon,
        humidity=current.humidity,
    )


def _outlook(day: Dict[str, Any], period: str) -> PeriodOutlook:
    return PeriodOutlook(
        sky_state=(day.get("ceo") or {}).get(period),
        rain_probability=(day.get("pchoiva") or {}).get(period),
        wind_direction=(day.get("vento") or {}).get(period),
    )


def parse_municipality_forecast(payload: Any) -> List[MunicipalityDay]:
    """
    Turn a jsonPredConcellos response into daily municipality forecasts.

    Raises:
        NoDataError: If the response holds no forecast days
    """
    prediction = payload.get("predConcello") if isinstance(payload, dict) else None
    days = (prediction or {}).get("listaPredDiaConcello") or []
    if not days:
        raise NoDataError("The municipality forecast returned no days")

    return [
        MunicipalityDay(
            date=day.get("dataPredicion", ""),
            temp_max=day.get("tMax"),
            temp_min=day.get("tMin"),
            uv_max=day.get("uvMax"),
            warning_level=day.get("nivelAviso"),
            morning=_outlook(day, "manha"),
            afternoon=_outlook(day, "tarde"),
            night=_outlook(day, "noite"),
        )
        for day in days
    ]


@add_sync_version
async def get_forecast(
    location: ForecastLocation = VIVEIRO_LOCATION,
    client: Optional[MeteoGaliciaClient] = None,
) -> List[ForecastPoint]:
    """Fetch and parse the hourly numeric forecast of a location."""
    if client is None:
        async with MeteoGaliciaClient() as temp_client:
            return await get_forecast(location, client=temp_client)

    payload = await client.get_numeric_forecast(location.longitude, location.latitude)
    points = parse_numeric_forecast(payload)
    logger.info(f"Forecast for {location.name}: {len(points)} points")
    return points


@add_sync_version
async def get_current_conditions(
    location: ForecastLocation = VIVEIRO_LOCATION,
    client: Optional[MeteoGaliciaClient] = None,
) -> CurrentConditions:
    """Current conditions, with apparent temperature, for a location."""
    return current_conditions(await get_forecast(location, client=client))


@add_sync_version
async def get_daily_forecast(
    location: ForecastLocation = VIVEIRO_LOCATION,
    client: Optional[MeteoGaliciaClient] = None,
    today: Optional[date] = None,
) -> List[DailyAggregate]:
    """Hourly forecast of a location grouped into (up to four) days."""
    points = await get_forecast(location, client=client)
    tz = client.config.timezone if client is not None else "Europe/Madrid"
    return group_by_day(points, tz=tz, today=today)


@add_sync_version
async def get_municipality_forecast(
    location: ForecastLocation = VIVEIRO_LOCATION,
    client: Optional[MeteoGaliciaClient] = None,
) -> List[MunicipalityDay]:
    """Daily municipality forecast with UV index and warning level."""
    if client is None:
        async with MeteoGaliciaClient() as temp_client:
            return await get_municipality_forecast(location, client=temp_client)

    payload = await client.get_municipality_forecast(location.id)
    days = parse_municipality_forecast(payload)
    logger.info(f"Municipality forecast for {location.name}: {len(days)} days")
    return days
