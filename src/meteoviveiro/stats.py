"""
Summary statistics for a historical time series.
"""

from typing import Optional

from .models import HistoricalTimeSeries, SeriesStats, SortOrder


def series_stats(
    series: HistoricalTimeSeries, order: Optional[SortOrder] = None
) -> SeriesStats:
    """
    Min, max, average and latest value of a series.

    The latest value is taken from the end of the series that holds the most
    recent timestamp according to its sort order: the last point of an
    ascending series, the first point of a descending one. Pass order to
    override the order declared by the series.

    An empty series yields None for every field.
    """
    values = series.values
    if not values:
        return SeriesStats(min=None, max=None, avg=None, latest=None)

    if order is None:
        order = series.order
    latest = values[-1] if order is SortOrder.ASCENDING else values[0]

    return SeriesStats(
        min=min(values),
        max=max(values),
        avg=sum(values) / len(values),
        latest=latest,
    )
