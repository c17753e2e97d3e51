"""
Raw Response Normalizers

Providers return chart-like data in several shapes: flat point lists with
optional count/volume fields, analytics sub-objects each holding their own
point list, and per-coin rank objects with one value per window. The helpers
below reduce them to ``ChartPoint`` records or plain ``{uid: value}`` maps.

Policy:
    A record missing its primary value is dropped. Absence of data never
    turns into a zero data point, so ``len(output) <= len(input)`` always.

All functions are pure: they only read the raw records, so deriving volume
points and count points from the same list in any order is safe.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Mapping, Optional

from core.enums import TimePeriod
from core.schemas import ChartPoint, MarketTicker


def to_decimal(value: Any) -> Optional[Decimal]:
    """
    Convert a provider number (Decimal, int, numeric string) to Decimal.

    Returns None for missing or unparseable values. Floats are converted via
    their string form so no binary noise leaks into the Decimal.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None

    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    return result if result.is_finite() else None


# ============================================
# Flat Point Lists
# ============================================

def volume_points(raw_points: Iterable[Any]) -> List[ChartPoint]:
    """
    Volume-style series: primary value is the amount, no secondary value.

    Args:
        raw_points: Records with ``timestamp``, ``count`` and ``volume`` attributes

    Example:
        >>> volume_points([ProChartPointDataRaw(timestamp=1, count=3, volume=Decimal("10"))])
        [ChartPoint(value=Decimal('10'), timestamp=1, volume=None)]
    """
    return [
        ChartPoint(value=raw.volume, timestamp=raw.timestamp)
        for raw in raw_points
        if raw.volume is not None
    ]


def count_points(raw_points: Iterable[Any]) -> List[ChartPoint]:
    """
    Count-style series: primary value is the integer count promoted to
    Decimal, secondary value is the auxiliary volume when the provider sent one.
    """
    return [
        ChartPoint(value=Decimal(raw.count), timestamp=raw.timestamp, volume=raw.volume)
        for raw in raw_points
        if raw.count is not None
    ]


def value_points(raw_points: Iterable[Any], field: str) -> List[ChartPoint]:
    """
    Generic series: read the primary value from ``field`` on each record.

    Used for analytics sub-series whose points carry a single named value
    (``volume``, ``count``, ``tvl``). Counts arrive as strings and are parsed;
    unparseable values are dropped like missing ones.
    """
    points = []
    for raw in raw_points:
        value = to_decimal(getattr(raw, field, None))
        if value is None:
            continue
        points.append(ChartPoint(value=value, timestamp=raw.timestamp))
    return points


# ============================================
# Rank Objects
# ============================================

_RANK_FIELDS = {
    TimePeriod.DAY_1: "value_1d",
    TimePeriod.WEEK_1: "value_7d",
    TimePeriod.MONTH_1: "value_30d",
}

RANK_PERIODS = tuple(_RANK_FIELDS)


def rank_values(raw_ranks: Iterable[Any], period: TimePeriod) -> Dict[str, Decimal]:
    """
    Pick one window out of multi-value rank records.

    Args:
        raw_ranks: Records with ``uid`` and ``value_1d``/``value_7d``/``value_30d``
        period: One of DAY_1, WEEK_1, MONTH_1

    Returns:
        Mapping uid -> value; uids whose value for the window is absent are left out

    Raises:
        ValueError: If the period has no rank window
    """
    field = _RANK_FIELDS.get(period)
    if field is None:
        raise ValueError(
            f"No rank values for period '{period.value}'. "
            f"Supported: {', '.join(p.value for p in RANK_PERIODS)}"
        )

    values: Dict[str, Decimal] = {}
    for raw in raw_ranks:
        value = getattr(raw, field)
        if value is not None:
            values[raw.uid] = value
    return values


# ============================================
# Tickers
# ============================================

def market_tickers(raw_tickers: Iterable[Any], image_urls: Mapping[str, str]) -> List[MarketTicker]:
    """
    Build tickers, attaching each market's image when one is known.

    Tickers without a rate or volume are dropped.
    """
    tickers = []
    for raw in raw_tickers:
        if raw.last is None or raw.volume is None:
            continue
        tickers.append(
            MarketTicker(
                base=raw.base,
                target=raw.target,
                market_name=raw.market.name,
                market_image_url=image_urls.get(raw.market.identifier),
                rate=raw.last,
                volume=raw.volume,
            )
        )
    return tickers
