"""
Date-anchored hourly station data from MeteoGalicia.

Uses the datosHorariosEstacions.action endpoint, which returns the readings
of a station for a number of hours (at most one week) after a given local
start date. Unlike the rolling history in historical.py, the response is
grouped by parameter: each entry of 'parametros' carries its own list of
(fecha, valor) pairs.
"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence, Union
from zoneinfo import ZoneInfo

from .catalog import ParameterCatalog, default_catalog
from .client import MeteoGaliciaClient
from .exceptions import MeteoQueryError, NoDataError
from .historical import VALUE_DECIMALS
from .models import (
    HistoricalDataPoint,
    HistoricalPeriod,
    HistoricalTimeSeries,
    SortOrder,
    StationHistoricalData,
)
from .stations import StationRegistry, default_registry
from .units import convert_wind_speed
from .utils import add_sync_version, parse_timestamp

logger = logging.getLogger(__name__)

MIN_HOURS = 1
MAX_HOURS = 168
START_FORMAT = "%d/%m/%Y %H:%M"


def validate_num_hours(hours: Any) -> int:
    """
    Check an hour count for the date-anchored endpoint.

    Raises:
        MeteoQueryError: If hours is not an integer between 1 and 168
    """
    if isinstance(hours, bool) or not isinstance(hours, int):
        raise MeteoQueryError(f"Invalid number of hours: {hours!r}")
    if not MIN_HOURS <= hours <= MAX_HOURS:
        raise MeteoQueryError(
            f"Number of hours must be between {MIN_HOURS} and {MAX_HOURS}, got {hours}"
        )
    return hours


def format_start_datetime(
    value: Union[datetime, str], tz: str = "Europe/Madrid"
) -> str:
    """
    Format a start date as 'DD/MM/YYYY HH:MM' local time.

    Aware datetimes are converted to tz first; naive ones are taken as local
    wall time. Strings must already be in the expected format.

    Example:
        >>> format_start_datetime(datetime(2025, 1, 15, 9, tzinfo=timezone.utc))
        '15/01/2025 10:00'
    """
    if isinstance(value, str):
        text = value.strip()
        try:
            datetime.strptime(text, START_FORMAT)
        except ValueError:
            raise MeteoQueryError(
                f"Invalid start date {value!r}, expected DD/MM/YYYY HH:MM"
            ) from None
        return text

    if not isinstance(value, datetime):
        raise MeteoQueryError(f"Invalid start date: {value!r}")
    if value.tzinfo is not None:
        value = value.astimezone(ZoneInfo(tz))
    return value.strftime(START_FORMAT)


def build_hourly_station_data(
    payload: Any,
    hours: int,
    catalog: Optional[ParameterCatalog] = None,
    order: SortOrder = SortOrder.ASCENDING,
    station_id: Optional[int] = None,
) -> StationHistoricalData:
    """
    Turn a 'datosHorariosEstacions' response into per-parameter time series.

    Every catalog code is kept, including the 10-minute wind averages the
    rolling history does not report; unknown codes are skipped. Values may
    come as numbers or numeric strings. Wind speeds in m/s are converted to
    km/h and all values are rounded to two decimals. Series are oldest first
    by default.

    Args:
        payload: Decoded response
        hours: Requested number of hours
        catalog: Parameter catalog (default catalog if None)
        order: Timestamp order of the resulting series
        station_id: Id to use when the response does not carry one

    Raises:
        NoDataError: If the response holds no parameter with usable values
    """
    if catalog is None:
        catalog = default_catalog()

    if not isinstance(payload, dict):
        raise NoDataError("No data returned for the station", station_id=station_id)

    station_id = payload.get("idEstacion", station_id)
    parametros = payload.get("parametros")
    if not isinstance(parametros, list) or not parametros:
        raise NoDataError(
            f"No hourly data for station {station_id}", station_id=station_id
        )

    variables = []
    timestamps: List[datetime] = []

    for parametro in parametros:
        if not isinstance(parametro, dict):
            continue
        code = parametro.get("codigo")
        if not code or code not in catalog:
            continue

        unit = parametro.get("unidade", "")
        points = []
        for entry in parametro.get("valores") or []:
            point = _build_point(entry, code, unit)
            if point is not None:
                points.append(point)
        if not points:
            continue

        info = catalog.get(code)
        series = HistoricalTimeSeries(
            parameter_code=code,
            parameter_name=info.name,
            unit=info.unit,
            data=tuple(points),
        )
        variables.append(series.sorted(order))
        timestamps.extend(point.timestamp for point in points)

    if not timestamps:
        raise NoDataError(
            f"No hourly data for station {station_id}", station_id=station_id
        )

    return StationHistoricalData(
        station_id=station_id,
        station_name=str(payload.get("nombreEstacion", "")).strip(),
        period=HistoricalPeriod(hours),
        start_date=min(timestamps),
        end_date=max(timestamps),
        variables=tuple(variables),
    )


def _build_point(entry: Any, code: str, unit: str) -> Optional[HistoricalDataPoint]:
    if not isinstance(entry, dict):
        return None
    try:
        timestamp = parse_timestamp(entry.get("fecha", ""))
    except ValueError:
        return None

    raw_value = entry.get("valor")
    if raw_value is None or isinstance(raw_value, bool):
        return None
    try:
        value = float(raw_value)
    except (TypeError, ValueError):
        return None

    value, _ = convert_wind_speed(code, value, unit)
    return HistoricalDataPoint(timestamp=timestamp, value=round(value, VALUE_DECIMALS))


@add_sync_version
async def get_hourly_station_data(
    station_id: int,
    start: Union[datetime, str],
    hours: int = 24,
    client: Optional[MeteoGaliciaClient] = None,
    catalog: Optional[ParameterCatalog] = None,
    order: SortOrder = SortOrder.ASCENDING,
) -> StationHistoricalData:
    """
    Fetch the hourly readings of one station from a start date.

    Args:
        station_id: MeteoGalicia station id
        start: Local start, a datetime or a 'DD/MM/YYYY HH:MM' string
        hours: Number of hours from the start (1 to 168)
        client: MeteoGalicia client (creates a temporary one if None)
        catalog: Parameter catalog
        order: Timestamp order of the resulting series

    Raises:
        MeteoConnectionError: If the service cannot be reached
        MeteoQueryError: If the start or hours are invalid
        NoDataError: If the station returned no readings
    """
    if client is None:
        async with MeteoGaliciaClient() as temp_client:
            return await get_hourly_station_data(
                station_id, start, hours, client=temp_client, catalog=catalog, order=order
            )

    hours = validate_num_hours(hours)
    start_text = format_start_datetime(start, client.config.timezone)
    logger.debug(f"Fetching hourly data: station {station_id}, {hours}h from {start_text}")

    try:
        payload = await client.get_hourly_readings(station_id, start_text, hours)
        data = build_hourly_station_data(
            payload, hours, catalog, order, station_id=station_id
        )
    except Exception as e:
        logger.error(f"Error fetching hourly data for station {station_id}: {e}")
        raise

    logger.info(
        f"Hourly data for station {station_id}: {len(data.variables)} variables "
        f"from {start_text}"
    )
    return data


async def _fetch_station_hourly(
    client: MeteoGaliciaClient,
    station_id: int,
    start: str,
    hours: int,
    catalog: ParameterCatalog,
) -> Optional[StationHistoricalData]:
    """Fetch one station; any failure means the station is left out."""
    try:
        payload = await asyncio.wait_for(
            client.get_hourly_readings(station_id, start, hours),
            timeout=client.config.station_timeout,
        )
        return build_hourly_station_data(payload, hours, catalog, station_id=station_id)
    except asyncio.TimeoutError:
        logger.warning(f"Hourly data for station {station_id} timed out")
    except Exception as e:
        logger.warning(f"Error fetching hourly data for station {station_id}: {e}")
    return None


@add_sync_version
async def fetch_hourly_data(
    start: Union[datetime, str],
    hours: int = 24,
    station_ids: Optional[Sequence[int]] = None,
    client: Optional[MeteoGaliciaClient] = None,
    registry: Optional[StationRegistry] = None,
    catalog: Optional[ParameterCatalog] = None,
) -> Dict[int, StationHistoricalData]:
    """
    Fetch the hourly readings of several stations from the same start date.

    Stations are fetched concurrently; one whose request fails, times out or
    returns nothing is missing from the result.

    Args:
        start: Local start, a datetime or a 'DD/MM/YYYY HH:MM' string
        hours: Number of hours from the start (1 to 168)
        station_ids: Stations to fetch (all registered stations if None)
        client: MeteoGalicia client (creates a temporary one if None)
        registry: Station registry
        catalog: Parameter catalog

    Returns:
        Dict of station id to StationHistoricalData, in request order
    """
    if registry is None:
        registry = default_registry()
    if catalog is None:
        catalog = default_catalog()

    if client is None:
        async with MeteoGaliciaClient() as temp_client:
            return await fetch_hourly_data(
                start,
                hours,
                station_ids,
                client=temp_client,
                registry=registry,
                catalog=catalog,
            )

    hours = validate_num_hours(hours)
    start_text = format_start_datetime(start, client.config.timezone)
    ids = registry.ids if station_ids is None else list(dict.fromkeys(station_ids))

    results = await asyncio.gather(
        *[
            _fetch_station_hourly(client, station_id, start_text, hours, catalog)
            for station_id in ids
        ]
    )

    data = {
        station_id: result
        for station_id, result in zip(ids, results)
        if result is not None
    }
    logger.info(
        f"Hourly data from {start_text} received for {len(data)}/{len(ids)} stations"
    )
    return data


@add_sync_version
async def get_last_hours_data(
    hours: int = 24,
    station_ids: Optional[Sequence[int]] = None,
    client: Optional[MeteoGaliciaClient] = None,
    registry: Optional[StationRegistry] = None,
    catalog: Optional[ParameterCatalog] = None,
    now: Optional[datetime] = None,
) -> Dict[int, StationHistoricalData]:
    """
    Hourly readings of several stations over the hours leading up to now.

    Example:
        >>> data = get_last_hours_data.sync(48)
        >>> data[10104].get_variable("TA_AVG_1.5m").values
    """
    if client is None:
        async with MeteoGaliciaClient() as temp_client:
            return await get_last_hours_data(
                hours,
                station_ids,
                client=temp_client,
                registry=registry,
                catalog=catalog,
                now=now,
            )

    hours = validate_num_hours(hours)
    if now is None:
        now = datetime.now(ZoneInfo(client.config.timezone))
    start = now - timedelta(hours=hours)

    return await fetch_hourly_data(
        start,
        hours,
        station_ids,
        client=client,
        registry=registry,
        catalog=catalog,
    )
