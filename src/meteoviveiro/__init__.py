"""
Python client for the MeteoGalicia weather stations around Viveiro.

Fetch latest readings and hourly history, compare stations, and summarize
forecasts into DataFrames.
"""

try:
    from importlib import metadata

    __version__ = metadata.version(__name__)
except Exception:
    __version__ = "unknown"

from .catalog import (
    MAIN_PARAMETERS,
    HeightVariantGroup,
    ParameterCatalog,
    ParameterInfo,
    default_catalog,
)
from .client import MeteoGaliciaClient
from .comparison import (
    align_comparison_series,
    build_comparison_series,
    build_direction_snapshot,
    build_direction_snapshots,
    compare_stations,
    fetch_comparison_data,
    is_direction_parameter,
)
from .config import ClientConfig
from .daily import day_label, group_by_day
from .exceptions import MeteoConnectionError, MeteoError, MeteoQueryError, NoDataError
from .forecast import (
    VIVEIRO_LOCATION,
    ForecastLocation,
    current_conditions,
    get_current_conditions,
    get_daily_forecast,
    get_forecast,
    get_municipality_forecast,
    parse_municipality_forecast,
    parse_numeric_forecast,
    sky_state_name,
)
from .historical import (
    build_station_historical_data,
    format_period_name,
    get_historical_data_for_variables,
    get_station_historical_data,
    resolve_period,
)
from .hourly import (
    build_hourly_station_data,
    fetch_hourly_data,
    format_start_datetime,
    get_hourly_station_data,
    get_last_hours_data,
    validate_num_hours,
)
from .models import (
    ComparisonChart,
    ComparisonSeries,
    CurrentConditions,
    DailyAggregate,
    DirectionReading,
    DirectionSnapshot,
    ForecastPoint,
    HistoricalDataPoint,
    HistoricalPeriod,
    HistoricalTimeSeries,
    Measurement,
    MunicipalityDay,
    Observation,
    PeriodOutlook,
    SeriesStats,
    SnapshotComparison,
    SnapshotValue,
    SortOrder,
    Station,
    StationComparison,
    StationHistoricalData,
)
from .observations import (
    fetch_latest_observations,
    get_measurement_unit,
    get_measurement_value,
    get_station_observation,
    normalize_observation,
    observation_feels_like,
    prepare_snapshot_comparison,
)
from .stations import VIVEIRO_STATIONS, StationRegistry, default_registry
from .stats import series_stats
from .units import (
    apparent_temperature,
    convert_wind_speed,
    format_wind_speed,
    kmh_to_ms,
    ms_to_kmh,
    wind_direction_name,
    wind_direction_with_degrees,
)

__all__ = [
    # Client and configuration
    "MeteoGaliciaClient",
    "ClientConfig",
    # Exceptions
    "MeteoError",
    "MeteoConnectionError",
    "MeteoQueryError",
    "NoDataError",
    # Catalog and stations
    "ParameterCatalog",
    "ParameterInfo",
    "HeightVariantGroup",
    "MAIN_PARAMETERS",
    "default_catalog",
    "StationRegistry",
    "VIVEIRO_STATIONS",
    "default_registry",
    # Models
    "SortOrder",
    "Station",
    "Measurement",
    "Observation",
    "HistoricalPeriod",
    "HistoricalDataPoint",
    "HistoricalTimeSeries",
    "StationHistoricalData",
    "ComparisonSeries",
    "ComparisonChart",
    "DirectionReading",
    "DirectionSnapshot",
    "StationComparison",
    "SnapshotValue",
    "SnapshotComparison",
    "ForecastPoint",
    "CurrentConditions",
    "PeriodOutlook",
    "MunicipalityDay",
    "DailyAggregate",
    "SeriesStats",
    # Observations
    "normalize_observation",
    "fetch_latest_observations",
    "get_station_observation",
    "get_measurement_value",
    "get_measurement_unit",
    "observation_feels_like",
    "prepare_snapshot_comparison",
    # Historical
    "resolve_period",
    "format_period_name",
    "build_station_historical_data",
    "get_station_historical_data",
    "get_historical_data_for_variables",
    # Date-anchored hourly data
    "validate_num_hours",
    "format_start_datetime",
    "build_hourly_station_data",
    "get_hourly_station_data",
    "fetch_hourly_data",
    "get_last_hours_data",
    # Comparison
    "fetch_comparison_data",
    "build_comparison_series",
    "align_comparison_series",
    "build_direction_snapshot",
    "build_direction_snapshots",
    "is_direction_parameter",
    "compare_stations",
    # Forecast
    "ForecastLocation",
    "VIVEIRO_LOCATION",
    "sky_state_name",
    "parse_numeric_forecast",
    "parse_municipality_forecast",
    "current_conditions",
    "get_forecast",
    "get_current_conditions",
    "get_daily_forecast",
    "get_municipality_forecast",
    "group_by_day",
    "day_label",
    "series_stats",
    # Units
    "ms_to_kmh",
    "kmh_to_ms",
    "convert_wind_speed",
    "apparent_temperature",
    "wind_direction_name",
    "wind_direction_with_degrees",
    "format_wind_speed",
]
