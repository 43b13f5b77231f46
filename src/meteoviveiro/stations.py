"""
Registry of the monitored weather stations.
"""

from typing import Iterable, Iterator, List, Optional, Tuple

from .exceptions import MeteoQueryError
from .models import Station

# Anemometers are mounted at different heights: Penedo do Galo reports
# *_10m wind codes and Borreiros *_2m codes.
VIVEIRO_STATIONS: Tuple[Station, ...] = (
    Station(
        id=10104,
        name="Penedo do Galo",
        latitude=43.660763,
        longitude=-7.562965,
        altitude=545,
        wind_height="10m",
    ),
    Station(
        id=10162,
        name="Borreiros",
        latitude=43.630886,
        longitude=-7.630877,
        altitude=59,
        wind_height="2m",
    ),
)


class StationRegistry:
    """Immutable, ordered collection of stations."""

    def __init__(self, stations: Iterable[Station]):
        self._stations: Tuple[Station, ...] = tuple(stations)
        ids = [station.id for station in self._stations]
        if len(set(ids)) != len(ids):
            raise ValueError(f"Duplicate station ids in registry: {ids}")

    def __iter__(self) -> Iterator[Station]:
        return iter(self._stations)

    def __len__(self) -> int:
        return len(self._stations)

    def __contains__(self, station_id: object) -> bool:
        return any(station.id == station_id for station in self._stations)

    @property
    def ids(self) -> List[int]:
        return [station.id for station in self._stations]

    def get(self, station_id: int) -> Optional[Station]:
        for station in self._stations:
            if station.id == station_id:
                return station
        return None

    def require(self, station_id: int) -> Station:
        """Look up a station, raising MeteoQueryError if it is not registered."""
        station = self.get(station_id)
        if station is None:
            raise MeteoQueryError(
                f"Unknown station {station_id}. Registered stations: {self.ids}"
            )
        return station

    def wind_height(self, station_id: int) -> Optional[str]:
        station = self.get(station_id)
        return station.wind_height if station is not None else None


def default_registry() -> StationRegistry:
    """Registry of the Viveiro stations."""
    return StationRegistry(VIVEIRO_STATIONS)
