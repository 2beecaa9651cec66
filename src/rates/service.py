"""
Best-available rates view.

Reads the last lookback_days of snapshots plus recent bunker prices and
returns the payload served by GET /api/rates:

    {success, count, fetchedAt, rates: [AggregatedRate], bunker: {hub: BunkerPrice}}

The two reads run concurrently. Rate failures propagate; bunker failures
are logged and leave the bunker map empty.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from .freshness import aggregate, latest_bunker_by_hub
from .models import AggregatedRate, BunkerPrice, RateRecord
from .storage import RateStore

logger = logging.getLogger(__name__)


def records_from_rows(rows: List[Dict[str, Any]]) -> List[RateRecord]:
    """Convert storage rows, skipping (and logging) malformed ones."""
    records = []
    for row in rows:
        try:
            records.append(RateRecord.from_row(row))
        except (KeyError, ValueError, TypeError) as e:
            logger.warning(f"Skipping malformed rate row {row!r}: {e}")
    return records


def load_bunker(store: RateStore, limit: int, as_of: date) -> Dict[str, BunkerPrice]:
    """Latest bunker price per hub, or {} if bunker data is unavailable."""
    try:
        rows = store.query_bunker(limit)
        return latest_bunker_by_hub(rows, as_of)
    except Exception as e:
        logger.warning(f"Bunker prices unavailable, continuing without: {e}")
        return {}


def best_rates(store: RateStore, settings, as_of: date) -> List[AggregatedRate]:
    """Aggregate rate rows from the last lookback_days."""
    since = as_of - timedelta(days=settings.lookback_days)
    rows = store.query_rates(since, settings.rate_query_limit)
    return aggregate(records_from_rows(rows), as_of)


def build_rates_view(
    store: RateStore,
    settings,
    as_of: Optional[date] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Build the rates API payload.

    Args:
        store: Source of rate and bunker rows
        settings: Settings with lookback_days and query limits
        as_of: Reference date for ages (defaults to today, UTC)
        now: Timestamp reported as fetchedAt (defaults to now, UTC)

    Returns:
        Response dict

    Raises:
        StorageError: If the rate query fails
    """
    now = now or datetime.now(timezone.utc)
    as_of = as_of or now.date()

    with ThreadPoolExecutor(max_workers=2) as pool:
        rates_future = pool.submit(best_rates, store, settings, as_of)
        bunker_future = pool.submit(load_bunker, store, settings.bunker_query_limit, as_of)
        bunker = bunker_future.result()
        rates = rates_future.result()

    return {
        "success": True,
        "count": len(rates),
        "fetchedAt": now.isoformat(),
        "rates": [r.to_dict() for r in rates],
        "bunker": {hub: price.to_dict() for hub, price in bunker.items()},
    }
