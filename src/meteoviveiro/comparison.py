"""
Multi-station comparison of historical series.

Stations are fetched concurrently and independently: a station whose request
fails is left out of the comparison instead of failing it. Parameters that are
the same quantity measured at different sensor heights (wind gusts at 10m and
2m, for instance) are merged into one logical series using the catalog's
height-variant table.
"""

import asyncio
import logging
from typing import Dict, List, Mapping, Optional, Sequence, Union

from .catalog import ParameterCatalog, default_catalog
from .client import MeteoGaliciaClient
from .historical import build_station_historical_data, resolve_period
from .models import (
    ComparisonChart,
    ComparisonSeries,
    DirectionReading,
    DirectionSnapshot,
    HistoricalPeriod,
    HistoricalTimeSeries,
    SortOrder,
    StationComparison,
    StationHistoricalData,
)
from .stations import StationRegistry, default_registry
from .units import wind_direction_name
from .utils import add_sync_version

logger = logging.getLogger(__name__)

DIRECTION_UNIT = "°"
DIRECTION_PREFIX = "DV_"


async def _fetch_station_history(
    client: MeteoGaliciaClient,
    station_id: int,
    period: HistoricalPeriod,
    catalog: ParameterCatalog,
) -> Optional[StationHistoricalData]:
    """Fetch one station; any failure means the station is left out."""
    try:
        payload = await asyncio.wait_for(
            client.get_historical_readings(station_id, period.hours),
            timeout=client.config.station_timeout,
        )
        return build_station_historical_data(
            payload, period, catalog, station_id=station_id
        )
    except asyncio.TimeoutError:
        logger.warning(f"History for station {station_id} timed out")
    except Exception as e:
        logger.warning(f"Error fetching history for station {station_id}: {e}")
    return None


@add_sync_version
async def fetch_comparison_data(
    station_ids: Sequence[int],
    period: Union[HistoricalPeriod, str, int] = "24h",
    client: Optional[MeteoGaliciaClient] = None,
    catalog: Optional[ParameterCatalog] = None,
) -> Dict[int, StationHistoricalData]:
    """
    Fetch the history of several stations in parallel.

    Args:
        station_ids: Stations to fetch
        period: Window length shared by all stations
        client: MeteoGalicia client (creates a temporary one if None)
        catalog: Parameter catalog

    Returns:
        Dict of station id to StationHistoricalData, containing only the
        stations that returned data, in request order
    """
    if catalog is None:
        catalog = default_catalog()

    if client is None:
        async with MeteoGaliciaClient() as temp_client:
            return await fetch_comparison_data(
                station_ids, period, client=temp_client, catalog=catalog
            )

    resolved = resolve_period(period, client.config.supported_periods)
    ids = list(dict.fromkeys(station_ids))

    results = await asyncio.gather(
        *[
            _fetch_station_history(client, station_id, resolved, catalog)
            for station_id in ids
        ]
    )

    return {
        station_id: data
        for station_id, data in zip(ids, results)
        if data is not None
    }


def build_comparison_series(
    station_data: Mapping[int, StationHistoricalData],
    catalog: Optional[ParameterCatalog] = None,
    registry: Optional[StationRegistry] = None,
) -> List[ComparisonSeries]:
    """
    Merge per-station histories into one series per logical parameter.

    Height-variant codes become a single series keyed by the group code. Each
    station contributes the variant it reports; if it reports several, the one
    matching its registered wind height wins, otherwise the first of the group.
    Member series are sorted ascending.
    """
    if catalog is None:
        catalog = default_catalog()
    if registry is None:
        registry = default_registry()

    codes: List[str] = []
    for data in station_data.values():
        for code in data.parameter_codes:
            if code not in codes:
                codes.append(code)

    comparison: List[ComparisonSeries] = []
    emitted_groups = set()

    for code in codes:
        group = catalog.height_group(code)

        if group is None:
            stations: Dict[int, HistoricalTimeSeries] = {}
            for station_id, data in station_data.items():
                series = data.get_variable(code)
                if series is not None:
                    stations[station_id] = series.sorted(SortOrder.ASCENDING)
            if not stations:
                continue
            first = next(iter(stations.values()))
            comparison.append(
                ComparisonSeries(
                    parameter_code=code,
                    parameter_name=first.parameter_name,
                    unit=first.unit,
                    stations=stations,
                )
            )
            continue

        if group.code in emitted_groups:
            continue
        emitted_groups.add(group.code)

        stations = {}
        heights: Dict[int, str] = {}
        for station_id, data in station_data.items():
            available = [c for c in group.codes if data.get_variable(c) is not None]
            if not available:
                continue
            preferred = None
            wind_height = registry.wind_height(station_id)
            if wind_height is not None:
                preferred = group.code_for_height(wind_height)
            chosen = preferred if preferred in available else available[0]

            series = data.get_variable(chosen)
            stations[station_id] = series.sorted(SortOrder.ASCENDING)  # type: ignore[union-attr]
            heights[station_id] = group.height_of(chosen) or ""

        if stations:
            comparison.append(
                ComparisonSeries(
                    parameter_code=group.code,
                    parameter_name=group.name,
                    unit=group.unit,
                    stations=stations,
                    heights=heights,
                )
            )

    return comparison


def is_direction_parameter(series: ComparisonSeries) -> bool:
    """Compass bearings (degrees) are not charted as time series."""
    return series.unit == DIRECTION_UNIT or series.parameter_code.startswith(
        DIRECTION_PREFIX
    )


def build_direction_snapshot(series: ComparisonSeries) -> DirectionSnapshot:
    """Latest reading per station of a direction parameter."""
    readings: Dict[int, DirectionReading] = {}
    for station_id, station_series in series.stations.items():
        if not station_series.data:
            continue
        latest = max(station_series.data, key=lambda p: p.timestamp)
        readings[station_id] = DirectionReading(
            value=latest.value,
            timestamp=latest.timestamp,
            cardinal=wind_direction_name(latest.value, full=True),
            height=series.heights.get(station_id),
        )

    return DirectionSnapshot(
        parameter_code=series.parameter_code,
        parameter_name=series.parameter_name,
        unit=series.unit,
        readings=readings,
    )


def build_direction_snapshots(
    series_list: Sequence[ComparisonSeries],
) -> List[DirectionSnapshot]:
    """Snapshots for the direction parameters among series_list."""
    return [
        build_direction_snapshot(series)
        for series in series_list
        if is_direction_parameter(series)
    ]


def align_comparison_series(
    series: ComparisonSeries, connect_gaps: bool = False
) -> ComparisonChart:
    """
    Align the station series of a comparison on one ascending timeline.

    The timeline is the union of all station timestamps. A station without a
    value at a timestamp gets None there, never zero or an interpolated value.
    """
    timeline = sorted(
        {point.timestamp for s in series.stations.values() for point in s.data}
    )

    values = {}
    for station_id, station_series in series.stations.items():
        by_time = {point.timestamp: point.value for point in station_series.data}
        values[station_id] = tuple(by_time.get(ts) for ts in timeline)

    return ComparisonChart(
        parameter_code=series.parameter_code,
        parameter_name=series.parameter_name,
        unit=series.unit,
        timestamps=tuple(timeline),
        values=values,
        heights=dict(series.heights),
        connect_gaps=connect_gaps,
    )


@add_sync_version
async def compare_stations(
    station_ids: Sequence[int],
    period: Union[HistoricalPeriod, str, int] = "24h",
    client: Optional[MeteoGaliciaClient] = None,
    catalog: Optional[ParameterCatalog] = None,
    registry: Optional[StationRegistry] = None,
    connect_gaps: bool = False,
) -> StationComparison:
    """
    Compare the history of several stations over one window.

    Args:
        station_ids: Stations to compare
        period: Window length ('24h', '48h', '72h' by default)
        client: MeteoGalicia client (creates a temporary one if None)
        catalog: Parameter catalog
        registry: Station registry (for sensor heights)
        connect_gaps: Display hint copied onto every chart

    Returns:
        StationComparison with charts for regular parameters, snapshots for
        wind directions, and the stations that returned nothing

    Examples:
        >>> result = await compare_stations([10104, 10162], "48h")
        >>> for chart in result.charts:
        ...     df = chart.to_pandas()
    """
    if client is None:
        async with MeteoGaliciaClient() as temp_client:
            return await compare_stations(
                station_ids,
                period,
                client=temp_client,
                catalog=catalog,
                registry=registry,
                connect_gaps=connect_gaps,
            )

    resolved = resolve_period(period, client.config.supported_periods)
    requested = tuple(dict.fromkeys(station_ids))

    station_data = await fetch_comparison_data(
        requested, resolved, client=client, catalog=catalog
    )
    missing = tuple(sid for sid in requested if sid not in station_data)
    if missing:
        logger.warning(f"No history for stations {list(missing)} ({resolved.label})")

    series_list = build_comparison_series(station_data, catalog, registry)
    directions = build_direction_snapshots(series_list)
    charts = [
        align_comparison_series(series, connect_gaps)
        for series in series_list
        if not is_direction_parameter(series)
    ]

    logger.info(
        f"Comparison of {len(station_data)}/{len(requested)} stations "
        f"({resolved.label}): {len(charts)} charts, {len(directions)} direction snapshots"
    )

    return StationComparison(
        period=resolved,
        requested_stations=requested,
        charts=tuple(charts),
        directions=tuple(directions),
        missing_stations=missing,
    )
