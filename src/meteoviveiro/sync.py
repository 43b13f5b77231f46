"""
Synchronous wrappers for the async meteoviveiro API.

Usage:
    # Instead of this async code:
    async with MeteoGaliciaClient() as client:
        data = await get_station_historical_data(10104, "24h", client=client)

    # Use this sync code:
    from meteoviveiro.sync import get_station_historical_data_sync
    data = get_station_historical_data_sync(10104, "24h")
"""

import asyncio
import inspect
from typing import (
    TYPE_CHECKING,
    Any,
    Awaitable,
    Callable,
    Dict,
    List,
    Optional,
    Sequence,
    TypeVar,
    Union,
    get_args,
    get_origin,
)

if TYPE_CHECKING:
    from .models import Observation, StationComparison, StationHistoricalData

R = TypeVar("R")


class AsyncSyncBridge:
    """Runs async functions from blocking code, managing a temporary client."""

    @staticmethod
    def run_async(
        async_fn: Callable[..., Awaitable[R]],
        args: tuple = (),
        kwargs: Optional[dict] = None,
        client_class: Optional[type] = None,
    ) -> R:
        """Run an async function synchronously.

        Args:
            async_fn: Async function to run
            args: Positional arguments for the function
            kwargs: Keyword arguments for the function
            client_class: Client class to instantiate if no client was passed

        Returns:
            Result of running the async function

        Raises:
            RuntimeError: If called from within a running event loop
        """
        kwargs = dict(kwargs or {})

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            raise RuntimeError(
                "Cannot use sync version from within an existing asyncio event loop. "
                "Use the async version instead."
            )

        async def _call_and_cleanup() -> R:
            temp_client = None
            if client_class is not None:
                sig = inspect.signature(async_fn)
                if "client" in sig.parameters and kwargs.get("client") is None:
                    # created inside the loop so httpx binds to it
                    temp_client = client_class()
                    kwargs["client"] = temp_client
            try:
                return await async_fn(*args, **kwargs)
            finally:
                if temp_client is not None:
                    await temp_client.close()

        return asyncio.run(_call_and_cleanup())

    @staticmethod
    def extract_client_class(annotation: Any) -> Optional[type]:
        """Extract the client class from an Optional/Union or plain annotation."""
        if annotation is None or annotation is inspect.Parameter.empty:
            return None

        if isinstance(annotation, str):
            # postponed annotations; only the default client is supported
            from .client import MeteoGaliciaClient

            if "MeteoGaliciaClient" in annotation:
                return MeteoGaliciaClient
            return None

        if get_origin(annotation) is Union:
            non_none_args = [arg for arg in get_args(annotation) if arg is not type(None)]
            if non_none_args and isinstance(non_none_args[0], type):
                return non_none_args[0]
            return None

        if isinstance(annotation, type):
            return annotation

        return None


def get_station_historical_data_sync(
    station_id: int, period: Union[str, int] = "24h", client: Optional[Any] = None
) -> "StationHistoricalData":
    """Synchronous version of get_station_historical_data."""
    from .historical import get_station_historical_data

    return get_station_historical_data.sync(station_id, period, client=client)  # type: ignore[attr-defined]


def fetch_latest_observations_sync(
    station_ids: Optional[Sequence[int]] = None, client: Optional[Any] = None
) -> List["Observation"]:
    """Synchronous version of fetch_latest_observations."""
    from .observations import fetch_latest_observations

    return fetch_latest_observations.sync(station_ids, client=client)  # type: ignore[attr-defined]


def compare_stations_sync(
    station_ids: Sequence[int],
    period: Union[str, int] = "24h",
    client: Optional[Any] = None,
) -> "StationComparison":
    """Synchronous version of compare_stations."""
    from .comparison import compare_stations

    return compare_stations.sync(station_ids, period, client=client)  # type: ignore[attr-defined]


def get_last_hours_data_sync(
    hours: int = 24,
    station_ids: Optional[Sequence[int]] = None,
    client: Optional[Any] = None,
) -> Dict[int, "StationHistoricalData"]:
    """Synchronous version of get_last_hours_data."""
    from .hourly import get_last_hours_data

    return get_last_hours_data.sync(hours, station_ids, client=client)  # type: ignore[attr-defined]
