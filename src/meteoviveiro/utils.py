"""
Internal utility functions for meteoviveiro.
"""

import inspect
import re
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, TypeVar

R = TypeVar("R")

_SHORT_OFFSET = re.compile(r"[+-]\d{2}$")


def add_sync_version(
    async_fn: Callable[..., Awaitable[R]],
) -> Callable[..., Awaitable[R]]:
    """
    A decorator that adds a .sync attribute to an async function, allowing it
    to be called synchronously.

    When the function takes a 'client' argument and none is given, the sync
    version opens a temporary MeteoGaliciaClient and closes it afterwards.

    Example:
        >>> @add_sync_version
        ... async def get_station_historical_data(station_id, period, client=None):
        ...     ...

        >>> data = get_station_historical_data.sync(10104, "24h")
    """
    # Import here to avoid circular imports
    from .sync import AsyncSyncBridge

    def sync_wrapper(*args: Any, **kwargs: Any) -> R:
        """Synchronous wrapper for the async function."""
        sig = inspect.signature(async_fn)
        client_param = sig.parameters.get("client")
        client_class = None

        if client_param and kwargs.get("client") is None:
            client_class = AsyncSyncBridge.extract_client_class(client_param.annotation)

        return AsyncSyncBridge.run_async(
            async_fn, args=args, kwargs=kwargs, client_class=client_class
        )

    async_fn.sync = sync_wrapper  # type: ignore
    return async_fn


def parse_timestamp(value: str) -> datetime:
    """
    Parse an upstream ISO timestamp.

    Handles a trailing 'Z', short offsets such as '+01', and naive values,
    which MeteoGalicia reports in UTC ('instanteLecturaUTC').
    """
    if not isinstance(value, str) or not value:
        raise ValueError(f"Invalid timestamp: {value!r}")

    text = value.strip().replace("Z", "+00:00")
    if _SHORT_OFFSET.search(text) and "T" in text:
        text = text + ":00"

    timestamp = datetime.fromisoformat(text)
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    return timestamp
