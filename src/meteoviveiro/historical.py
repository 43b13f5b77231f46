"""
Historical (hourly) station data from MeteoGalicia.

Uses the ultimosHorariosEstacions.action endpoint, which returns up to about
72 hours of hourly readings per station.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from .catalog import ParameterCatalog, default_catalog
from .client import MeteoGaliciaClient
from .config import DEFAULT_SUPPORTED_PERIODS
from .exceptions import MeteoQueryError, NoDataError
from .models import (
    HistoricalDataPoint,
    HistoricalPeriod,
    HistoricalTimeSeries,
    SortOrder,
    StationHistoricalData,
)
from .units import convert_wind_speed
from .utils import add_sync_version, parse_timestamp

logger = logging.getLogger(__name__)

VALUE_DECIMALS = 2

_PERIOD_NAMES = {
    24: "Últimas 24 horas",
    48: "Últimos 2 días",
    72: "Últimos 3 días",
}


def resolve_period(
    period: Union[HistoricalPeriod, str, int],
    supported: Iterable[int] = DEFAULT_SUPPORTED_PERIODS,
) -> HistoricalPeriod:
    """
    Validate a requested window against the supported durations.

    Accepts a HistoricalPeriod, an hour count, or a label such as '48h'.

    Raises:
        MeteoQueryError: If the window is malformed or not supported
    """
    supported = tuple(supported)

    if isinstance(period, HistoricalPeriod):
        hours = period.hours
    elif isinstance(period, bool):
        raise MeteoQueryError(f"Invalid period: {period!r}")
    elif isinstance(period, int):
        hours = period
    elif isinstance(period, str):
        text = period.strip().lower()
        if text.endswith("h"):
            text = text[:-1]
        try:
            hours = int(text)
        except ValueError:
            raise MeteoQueryError(f"Invalid period: {period!r}") from None
    else:
        raise MeteoQueryError(f"Invalid period: {period!r}")

    if hours not in supported:
        labels = ", ".join(f"{h}h" for h in supported)
        raise MeteoQueryError(
            f"Unsupported period '{hours}h'. Use one of: {labels}"
        )
    return HistoricalPeriod(hours)


def format_period_name(period: HistoricalPeriod) -> str:
    """Human readable name of a period, e.g. 'Últimos 2 días'."""
    name = _PERIOD_NAMES.get(period.hours)
    if name is not None:
        return name
    if period.hours % 24 == 0:
        return f"Últimos {period.hours // 24} días"
    return f"Últimas {period.hours} horas"


def build_station_historical_data(
    payload: Any,
    period: HistoricalPeriod,
    catalog: Optional[ParameterCatalog] = None,
    order: SortOrder = SortOrder.DESCENDING,
    station_id: Optional[int] = None,
) -> StationHistoricalData:
    """
    Turn an hourly history response into per-parameter time series.

    Codes missing from the historical catalog are skipped, wind speeds in m/s
    are converted to km/h, and values are rounded to two decimals. Each series
    is sorted by timestamp in the given order (most recent first by default).
    start_date/end_date cover the instants actually returned, which may be
    fewer than requested.

    Args:
        payload: Decoded 'ultimosHorariosEstacions' response
        period: Requested window
        catalog: Parameter catalog (default catalog if None)
        order: Timestamp order of the resulting series
        station_id: Id to use when the response does not carry one

    Raises:
        NoDataError: If the response holds no station block or no instants
    """
    if catalog is None:
        catalog = default_catalog()

    blocks = payload.get("listHorarios") if isinstance(payload, dict) else None
    if not isinstance(blocks, list) or not blocks or not isinstance(blocks[0], dict):
        raise NoDataError("No data returned for the station", station_id=station_id)

    block = blocks[0]
    station_id = block.get("idEstacion", station_id)
    instants = block.get("listaInstantes")
    if not isinstance(instants, list) or not instants:
        raise NoDataError(
            f"No readings for station {station_id} in the last {period.label}",
            station_id=station_id,
        )

    points_by_code: Dict[str, List[HistoricalDataPoint]] = {}
    timestamps: List[datetime] = []

    for instante in instants:
        if not isinstance(instante, dict):
            continue
        try:
            timestamp = parse_timestamp(instante.get("instanteLecturaUTC", ""))
        except ValueError:
            logger.debug(f"Skipping instant without timestamp in station {station_id}")
            continue
        timestamps.append(timestamp)

        for medida in instante.get("listaMedidas") or []:
            point = _build_point(medida, timestamp, catalog)
            if point is None:
                continue
            code, data_point = point
            points_by_code.setdefault(code, []).append(data_point)

    if not timestamps:
        raise NoDataError(
            f"No readings for station {station_id} in the last {period.label}",
            station_id=station_id,
        )

    variables = []
    for code, points in points_by_code.items():
        info = catalog.get(code)
        series = HistoricalTimeSeries(
            parameter_code=code,
            parameter_name=info.name if info else code,
            unit=info.unit if info else "",
            data=tuple(points),
        )
        variables.append(series.sorted(order))

    return StationHistoricalData(
        station_id=station_id,
        station_name=str(block.get("estacion", "")).strip(),
        period=period,
        start_date=min(timestamps),
        end_date=max(timestamps),
        variables=tuple(variables),
    )


def _build_point(
    medida: Any, timestamp: datetime, catalog: ParameterCatalog
) -> Optional[tuple]:
    if not isinstance(medida, dict):
        return None

    code = medida.get("codigoParametro")
    if not code or not catalog.is_historical(code):
        return None

    raw_value = medida.get("valor")
    if raw_value is None:
        return None
    try:
        value = float(raw_value)
    except (TypeError, ValueError):
        return None

    value, _ = convert_wind_speed(code, value, medida.get("unidade", ""))
    return code, HistoricalDataPoint(
        timestamp=timestamp,
        value=round(value, VALUE_DECIMALS),
        validation_code=medida.get("lnCodigoValidacion"),
    )


@add_sync_version
async def get_station_historical_data(
    station_id: int,
    period: Union[HistoricalPeriod, str, int] = "24h",
    client: Optional[MeteoGaliciaClient] = None,
    catalog: Optional[ParameterCatalog] = None,
    order: SortOrder = SortOrder.DESCENDING,
) -> StationHistoricalData:
    """
    Fetch the hourly history of one station.

    Args:
        station_id: MeteoGalicia station id
        period: Window length ('24h', '48h', '72h' by default)
        client: MeteoGalicia client (creates a temporary one if None)
        catalog: Parameter catalog
        order: Timestamp order of the resulting series

    Returns:
        StationHistoricalData with one series per known parameter

    Raises:
        MeteoConnectionError: If the service cannot be reached
        MeteoQueryError: If the period is unsupported or the response is invalid
        NoDataError: If the station returned no readings for the window
    """
    if client is None:
        async with MeteoGaliciaClient() as temp_client:
            return await get_station_historical_data(
                station_id, period, client=temp_client, catalog=catalog, order=order
            )

    resolved = resolve_period(period, client.config.supported_periods)
    logger.debug(f"Fetching history: station {station_id}, period {resolved.label}")

    try:
        payload = await client.get_historical_readings(station_id, resolved.hours)
        data = build_station_historical_data(
            payload, resolved, catalog, order, station_id=station_id
        )
    except Exception as e:
        logger.error(f"Error fetching history for station {station_id}: {e}")
        raise

    logger.info(
        f"History for station {station_id}: {len(data.variables)} variables, "
        f"{data.start_date.isoformat()} to {data.end_date.isoformat()}"
    )
    return data


@add_sync_version
async def get_historical_data_for_variables(
    station_id: int,
    parameter_codes: Sequence[str],
    period: Union[HistoricalPeriod, str, int] = "24h",
    client: Optional[MeteoGaliciaClient] = None,
    catalog: Optional[ParameterCatalog] = None,
) -> List[HistoricalTimeSeries]:
    """
    Fetch a station's history and keep only the requested parameters.

    Raises:
        MeteoQueryError: If a code is not available in the hourly history
    """
    if catalog is None:
        catalog = default_catalog()

    invalid = [code for code in parameter_codes if not catalog.is_historical(code)]
    if invalid:
        raise MeteoQueryError(
            f"Invalid variables: {', '.join(invalid)}. "
            f"Valid variables: {', '.join(catalog.historical_codes())}"
        )

    data = await get_station_historical_data(
        station_id, period, client=client, catalog=catalog
    )
    wanted = set(parameter_codes)
    return [series for series in data.variables if series.parameter_code in wanted]
