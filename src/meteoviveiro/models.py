"""
Data models for MeteoGalicia station, historical and forecast data.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple


class SortOrder(str, Enum):
    """Timestamp ordering of a time series."""

    ASCENDING = "ascending"
    DESCENDING = "descending"


@dataclass(frozen=True)
class Station:
    """A monitored weather station."""

    id: int
    name: str
    latitude: float
    longitude: float
    altitude: float  # meters
    wind_height: str  # anemometer mounting height, e.g. '10m'


@dataclass(frozen=True)
class Measurement:
    """A single measured parameter within a reading batch."""

    parameter_code: str
    parameter_name: str
    unit: str
    value: Optional[float]
    validation_code: Optional[int] = None


@dataclass(frozen=True)
class Observation:
    """The most recent reading batch of a station."""

    station_id: int
    station_name: str
    timestamp: datetime
    measurements: Tuple[Measurement, ...]

    def find(self, parameter_code: str) -> Optional[Measurement]:
        for measurement in self.measurements:
            if measurement.parameter_code == parameter_code:
                return measurement
        return None

    def value(
        self, parameter_code: str, fallback: Optional[str] = None
    ) -> Optional[float]:
        """
        Value of a parameter, optionally falling back to a second code.

        The first code with a non-null value wins.
        """
        for code in (parameter_code, fallback):
            if code is None:
                continue
            measurement = self.find(code)
            if measurement is not None and measurement.value is not None:
                return measurement.value
        return None


@dataclass(frozen=True)
class HistoricalPeriod:
    """A supported historical window length."""

    hours: int

    @property
    def label(self) -> str:
        return f"{self.hours}h"

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True)
class HistoricalDataPoint:
    """A single value of a historical series."""

    timestamp: datetime
    value: float
    validation_code: Optional[int] = None


@dataclass(frozen=True)
class HistoricalTimeSeries:
    """Time series of one parameter at one station."""

    parameter_code: str
    parameter_name: str
    unit: str
    data: Tuple[HistoricalDataPoint, ...]
    order: SortOrder = SortOrder.DESCENDING

    def sorted(self, order: SortOrder) -> "HistoricalTimeSeries":
        """Return a copy of the series sorted in the given order."""
        data = tuple(
            sorted(
                self.data,
                key=lambda p: p.timestamp,
                reverse=order is SortOrder.DESCENDING,
            )
        )
        return HistoricalTimeSeries(
            parameter_code=self.parameter_code,
            parameter_name=self.parameter_name,
            unit=self.unit,
            data=data,
            order=order,
        )

    @property
    def values(self) -> List[float]:
        return [point.value for point in self.data]

    @property
    def timestamps(self) -> List[datetime]:
        return [point.timestamp for point in self.data]

    def __len__(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class StationHistoricalData:
    """All historical series of a station over one window."""

    station_id: int
    station_name: str
    period: HistoricalPeriod
    start_date: datetime
    end_date: datetime
    variables: Tuple[HistoricalTimeSeries, ...]

    def get_variable(self, parameter_code: str) -> Optional[HistoricalTimeSeries]:
        for series in self.variables:
            if series.parameter_code == parameter_code:
                return series
        return None

    @property
    def parameter_codes(self) -> List[str]:
        return [series.parameter_code for series in self.variables]

    def to_pandas(self) -> Any:
        """Return the window as a long-format pandas DataFrame."""
        import pandas as pd

        rows = [
            {
                "station_id": self.station_id,
                "timestamp": point.timestamp,
                "parameter_code": series.parameter_code,
                "unit": series.unit,
                "value": point.value,
                "validation_code": point.validation_code,
            }
            for series in self.variables
            for point in series.data
        ]
        columns = [
            "station_id",
            "timestamp",
            "parameter_code",
            "unit",
            "value",
            "validation_code",
        ]
        return pd.DataFrame(rows, columns=columns)


@dataclass(frozen=True)
class ComparisonSeries:
    """One logical parameter compared across stations."""

    parameter_code: str
    parameter_name: str
    unit: str
    stations: Mapping[int, HistoricalTimeSeries]
    # sensor height per station, only set for height-variant parameters
    heights: Mapping[int, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ComparisonChart:
    """
    Chart-ready comparison aligned on a shared ascending timeline.

    A station with no value at a timestamp holds None there. connect_gaps
    only tells the renderer whether to draw lines across those gaps.
    """

    parameter_code: str
    parameter_name: str
    unit: str
    timestamps: Tuple[datetime, ...]
    values: Mapping[int, Tuple[Optional[float], ...]]
    heights: Mapping[int, str] = field(default_factory=dict)
    connect_gaps: bool = False

    def rows(self) -> List[Dict[str, Any]]:
        """One dict per timestamp, keyed by station id."""
        result = []
        for i, timestamp in enumerate(self.timestamps):
            row: Dict[str, Any] = {"timestamp": timestamp}
            for station_id, station_values in self.values.items():
                row[str(station_id)] = station_values[i]
            result.append(row)
        return result

    def to_pandas(self) -> Any:
        """Return a wide DataFrame indexed by timestamp, NaN where a station has no value."""
        import pandas as pd

        frame = pd.DataFrame(
            {
                station_id: pd.Series(station_values, dtype="float64")
                for station_id, station_values in self.values.items()
            }
        )
        frame.index = pd.Index(list(self.timestamps), name="timestamp")
        return frame


@dataclass(frozen=True)
class DirectionReading:
    value: float
    timestamp: datetime
    cardinal: str
    height: Optional[str] = None


@dataclass(frozen=True)
class DirectionSnapshot:
    """Latest wind direction per station, shown instead of a chart."""

    parameter_code: str
    parameter_name: str
    unit: str
    readings: Mapping[int, DirectionReading]


@dataclass(frozen=True)
class StationComparison:
    """Result of a multi-station comparison request."""

    period: HistoricalPeriod
    requested_stations: Tuple[int, ...]
    charts: Tuple[ComparisonChart, ...]
    directions: Tuple[DirectionSnapshot, ...]
    missing_stations: Tuple[int, ...] = ()

    @property
    def has_data(self) -> bool:
        return len(self.missing_stations) < len(self.requested_stations)

    @property
    def is_partial(self) -> bool:
        return self.has_data and len(self.missing_stations) > 0


@dataclass(frozen=True)
class SnapshotValue:
    name: str
    value: Optional[float]
    timestamp: datetime


@dataclass(frozen=True)
class SnapshotComparison:
    """Single-instant comparison built from latest observations."""

    parameter_code: str
    parameter_name: str
    unit: str
    stations: Mapping[int, SnapshotValue]


@dataclass(frozen=True)
class ForecastPoint:
    """One hourly forecast instant for a location."""

    timestamp: datetime
    temperature: float = 0.0
    precipitation: float = 0.0
    wind_speed: float = 0.0  # km/h
    wind_direction: float = 0.0
    sky_state: str = "Desconocido"
    sky_state_icon: Optional[str] = None
    humidity: Optional[float] = None


@dataclass(frozen=True)
class CurrentConditions:
    temperature: float
    feels_like: float
    wind_speed: float
    wind_direction: float
    precipitation: float
    sky_state: str
    timestamp: datetime
    sky_state_icon: Optional[str] = None
    humidity: Optional[float] = None


@dataclass(frozen=True)
class PeriodOutlook:
    sky_state: Optional[int]
    rain_probability: Optional[int]
    wind_direction: Optional[int]


@dataclass(frozen=True)
class MunicipalityDay:
    """Daily municipality forecast with UV and warning level."""

    date: str
    temp_max: Optional[float]
    temp_min: Optional[float]
    uv_max: Optional[float]
    warning_level: Optional[int]
    morning: PeriodOutlook
    afternoon: PeriodOutlook
    night: PeriodOutlook


@dataclass(frozen=True)
class DailyAggregate:
    """Forecast summary for one calendar day."""

    label: str
    date: date
    morning: Optional[ForecastPoint]
    afternoon: Optional[ForecastPoint]
    night: Optional[ForecastPoint]
    temp_max: float
    temp_min: float


@dataclass(frozen=True)
class SeriesStats:
    min: Optional[float]
    max: Optional[float]
    avg: Optional[float]
    latest: Optional[float]
