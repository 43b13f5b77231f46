"""
Normalization of latest station readings into Observation objects.
"""

import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .catalog import MAIN_PARAMETERS, ParameterCatalog, default_catalog
from .client import MeteoGaliciaClient
from .models import Measurement, Observation, SnapshotComparison, SnapshotValue, Station
from .stations import StationRegistry, default_registry
from .units import apparent_temperature, convert_wind_speed
from .utils import add_sync_version, parse_timestamp

logger = logging.getLogger(__name__)


def normalize_observation(
    payload: Any,
    station: Station,
    catalog: Optional[ParameterCatalog] = None,
) -> Optional[Observation]:
    """
    Turn a latest-reading response into an Observation.

    Unknown parameter codes are dropped. Wind speeds reported in m/s are
    converted to km/h.

    Args:
        payload: Decoded 'ultimos10minEstacionsMeteo' response
        station: Station the payload belongs to
        catalog: Parameter catalog (default catalog if None)

    Returns:
        The Observation, or None if the payload holds no usable reading batch
    """
    if catalog is None:
        catalog = default_catalog()

    if not isinstance(payload, dict):
        return None
    readings = payload.get("listUltimos10min")
    if not isinstance(readings, list) or not readings:
        return None

    latest = readings[0]
    if not isinstance(latest, dict):
        return None
    raw_measurements = latest.get("listaMedidas")
    if not isinstance(raw_measurements, list):
        return None

    try:
        timestamp = parse_timestamp(latest.get("instanteLecturaUTC", ""))
    except ValueError:
        logger.warning(f"Station {station.id}: reading without a valid timestamp")
        return None

    measurements = []
    for medida in raw_measurements:
        measurement = _normalize_measurement(medida, catalog)
        if measurement is not None:
            measurements.append(measurement)

    return Observation(
        station_id=station.id,
        station_name=station.name,
        timestamp=timestamp,
        measurements=tuple(measurements),
    )


def _normalize_measurement(
    medida: Any, catalog: ParameterCatalog
) -> Optional[Measurement]:
    if not isinstance(medida, dict):
        return None

    code = medida.get("codigoParametro")
    if not code or not catalog.is_live(code):
        return None

    raw_value = medida.get("valor")
    try:
        value = float(raw_value) if raw_value is not None else None
    except (TypeError, ValueError):
        value = None

    value, unit = convert_wind_speed(code, value, medida.get("unidade", ""))

    return Measurement(
        parameter_code=code,
        parameter_name=catalog.display_name(code, medida.get("nomeParametro")),
        unit=unit,
        value=value,
        validation_code=medida.get("lnCodigoValidacion"),
    )


def get_measurement_value(
    observation: Optional[Observation],
    parameter_code: str,
    fallback: Optional[str] = None,
) -> Optional[float]:
    """
    Value of a parameter in an observation, with an optional fallback code.

    Example:
        >>> get_measurement_value(obs, "VV_AVG_10m", fallback="VV_AVG_2m")
    """
    if observation is None:
        return None
    return observation.value(parameter_code, fallback)


def get_measurement_unit(
    observation: Optional[Observation],
    parameter_code: str,
    fallback: Optional[str] = None,
) -> str:
    """Unit of the code whose value get_measurement_value would return."""
    if observation is None:
        return ""
    for code in (parameter_code, fallback):
        if code is None:
            continue
        measurement = observation.find(code)
        if measurement is not None and measurement.value is not None:
            return measurement.unit
    return ""


def observation_feels_like(observation: Observation) -> Optional[float]:
    """Apparent temperature of an observation, None without a temperature."""
    temperature = observation.value("TA_AVG_1.5m")
    if temperature is None:
        return None
    wind = observation.value("VV_AVG_10m", fallback="VV_AVG_2m")
    humidity = observation.value("HR_AVG_1.5m")
    return apparent_temperature(temperature, wind or 0.0, humidity)


async def _fetch_station_observation(
    client: MeteoGaliciaClient, station: Station, catalog: ParameterCatalog
) -> Optional[Observation]:
    """Fetch one station; any failure means the station is left out."""
    try:
        payload = await asyncio.wait_for(
            client.get_latest_readings(station.id),
            timeout=client.config.station_timeout,
        )
    except asyncio.TimeoutError:
        logger.warning(f"Latest readings for station {station.id} timed out")
        return None
    except Exception as e:
        logger.warning(f"Latest readings for station {station.id} failed: {e}")
        return None

    observation = normalize_observation(payload, station, catalog)
    if observation is None:
        logger.info(f"Station {station.id} returned no latest readings")
    return observation


@add_sync_version
async def fetch_latest_observations(
    station_ids: Optional[Sequence[int]] = None,
    client: Optional[MeteoGaliciaClient] = None,
    registry: Optional[StationRegistry] = None,
    catalog: Optional[ParameterCatalog] = None,
) -> List[Observation]:
    """
    Fetch the latest observation of several stations concurrently.

    Stations whose request fails, times out or returns nothing are simply
    missing from the result, as are ids the registry does not know.

    Args:
        station_ids: Stations to fetch (all registered stations if None)
        client: MeteoGalicia client (creates a temporary one if None)
        registry: Station registry
        catalog: Parameter catalog

    Returns:
        Observations in request order
    """
    if registry is None:
        registry = default_registry()
    if catalog is None:
        catalog = default_catalog()

    if client is None:
        async with MeteoGaliciaClient() as temp_client:
            return await fetch_latest_observations(
                station_ids, client=temp_client, registry=registry, catalog=catalog
            )

    ids = registry.ids if station_ids is None else list(dict.fromkeys(station_ids))
    stations = []
    for station_id in ids:
        station = registry.get(station_id)
        if station is None:
            logger.warning(f"Skipping unknown station {station_id}")
            continue
        stations.append(station)

    results = await asyncio.gather(
        *[_fetch_station_observation(client, station, catalog) for station in stations]
    )
    observations = [obs for obs in results if obs is not None]

    logger.info(
        f"Latest readings received for {len(observations)}/{len(stations)} stations: "
        f"{[f'{obs.station_name} ({obs.station_id})' for obs in observations]}"
    )
    return observations


@add_sync_version
async def get_station_observation(
    station_id: int,
    client: Optional[MeteoGaliciaClient] = None,
    registry: Optional[StationRegistry] = None,
    catalog: Optional[ParameterCatalog] = None,
) -> Optional[Observation]:
    """Latest observation of a single station, None if it has no data."""
    observations = await fetch_latest_observations(
        [station_id], client=client, registry=registry, catalog=catalog
    )
    return observations[0] if observations else None


def prepare_snapshot_comparison(
    observations: Iterable[Observation],
    parameters: Sequence[str] = MAIN_PARAMETERS,
) -> List[SnapshotComparison]:
    """
    Compare the latest value of each main parameter across stations.

    Parameters are listed in first-seen order; a station without the
    parameter is absent from its entry.
    """
    observations = list(observations)
    wanted = set(parameters)

    codes: List[str] = []
    for obs in observations:
        for m in obs.measurements:
            if m.parameter_code in wanted and m.parameter_code not in codes:
                codes.append(m.parameter_code)

    comparison = []
    for code in codes:
        stations: Dict[int, SnapshotValue] = {}
        reference: Optional[Measurement] = None
        for obs in observations:
            measurement = obs.find(code)
            if measurement is None:
                continue
            if reference is None:
                reference = measurement
            stations[obs.station_id] = SnapshotValue(
                name=obs.station_name,
                value=measurement.value,
                timestamp=obs.timestamp,
            )

        if reference is not None and stations:
            comparison.append(
                SnapshotComparison(
                    parameter_code=code,
                    parameter_name=reference.parameter_name,
                    unit=reference.unit,
                    stations=stations,
                )
            )

    return comparison
