"""
Freshness scoring and best-rate aggregation.

Collapses dated snapshots into one record per (vessel, origin, destination),
most recent wins, and scores each by age:

    Tier 1 (0-3 days):   confidence 95
    Tier 2 (4-14 days):  confidence 75
    Tier 3 (15-45 days): confidence 50
    Tier 4 (older):      confidence 30
"""

from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .models import AggregatedRate, BunkerPrice, RateKey, RateRecord


TIER1_DAYS = 3
TIER2_DAYS = 14
TIER3_DAYS = 45

_TIERS = (
    (TIER1_DAYS, 1, 95),
    (TIER2_DAYS, 2, 75),
    (TIER3_DAYS, 3, 50),
)
STALE_TIER = (4, 30)


def tier_for_age(days_old: int) -> Tuple[int, int]:
    """
    Map a record age to (tier, confidence).

    Future-dated rows are clamped to age 0 by days_between(), so they land
    in tier 1.
    """
    for max_days, tier, confidence in _TIERS:
        if days_old <= max_days:
            return tier, confidence
    return STALE_TIER


def days_between(as_of: date, scraped: date) -> int:
    """Whole days from scraped to as_of, rounded and floored at zero."""
    if isinstance(as_of, datetime):
        as_of = as_of.date()
    if isinstance(scraped, datetime):
        scraped = scraped.date()
    return max(0, round((as_of - scraped).total_seconds() / 86400))


def aggregate(records: Iterable[RateRecord], as_of: date) -> List[AggregatedRate]:
    """
    Pick the most recent record per key and score it.

    Input order does not matter: records are stably sorted by scraped_date
    descending first, so among same-day duplicates the earlier one in the
    input wins. Output is sorted by vessel type then origin region.

    Args:
        records: Dated rate records; records without a scraped_date are skipped
        as_of: Reference date for computing age

    Returns:
        List of AggregatedRate
    """
    dated = [r for r in records if r.scraped_date is not None]
    dated.sort(key=lambda r: r.scraped_date, reverse=True)

    best: Dict[RateKey, RateRecord] = {}
    for record in dated:
        if record.key not in best:
            best[record.key] = record

    result = []
    for record in best.values():
        days_old = days_between(as_of, record.scraped_date)
        tier, confidence = tier_for_age(days_old)
        result.append(AggregatedRate(
            record=record,
            days_old=days_old,
            tier=tier,
            confidence=confidence,
        ))

    result.sort(key=lambda a: (a.record.vessel_type.value, a.record.origin_region))
    return result


def _price(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


def latest_bunker_by_hub(rows: Iterable[Dict[str, Any]], as_of: date) -> Dict[str, BunkerPrice]:
    """
    Keep the first (most recent) bunker row per hub.

    Args:
        rows: Bunker rows ordered most-recent-first, with hub, vlsfo, mgo
            and scraped_date keys
        as_of: Reference date for computing age

    Returns:
        Dict mapping hub name to BunkerPrice
    """
    by_hub: Dict[str, BunkerPrice] = {}
    for row in rows:
        hub = row.get("hub")
        if not hub or hub in by_hub:
            continue
        scraped = date.fromisoformat(str(row["scraped_date"])[:10])
        by_hub[hub] = BunkerPrice(
            hub=hub,
            vlsfo=_price(row.get("vlsfo")),
            mgo=_price(row.get("mgo")),
            scraped_date=scraped,
            days_old=days_between(as_of, scraped),
        )
    return by_hub
