"""
Exceptions for MeteoGalicia data access and processing.
"""

from typing import Optional


class MeteoError(Exception):
    """Base exception for meteoviveiro errors."""

    pass


class MeteoConnectionError(MeteoError):
    """Error connecting to the MeteoGalicia services."""

    pass


class MeteoQueryError(MeteoError):
    """Error in a request or in parsing the upstream response."""

    pass


class NoDataError(MeteoError):
    """The upstream service answered but returned no readings."""

    def __init__(self, message: str, station_id: Optional[int] = None):
        super().__init__(message)
        self.station_id = station_id
