"""
Daily scrape: fetch the bulletin, extract rates, store today's snapshot.

Meant to be triggered once a day by an external scheduler. Nothing here
retries; a failed run raises and the scheduler decides what to do.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from .extractor import extract_rates, page_text
from .fetcher import fetch_bulletin
from .models import RateRecord
from .storage import RateStore

logger = logging.getLogger(__name__)


@dataclass
class ScrapeResult:
    """Outcome of one scrape run."""
    date: date
    rates: List[RateRecord] = field(default_factory=list)

    @property
    def inserted(self) -> int:
        return len(self.rates)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "inserted": self.inserted,
            "rates": [r.to_row() for r in self.rates],
        }


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def run_scrape(
    store: RateStore,
    settings,
    today: Optional[date] = None,
    fetch: Optional[Callable[..., str]] = None,
) -> ScrapeResult:
    """
    Run one scrape and append the results to the store.

    Args:
        store: Destination store
        settings: Settings with source_url, user_agent, timeout_seconds, rate_bounds
        today: Snapshot date (defaults to the current UTC date)
        fetch: Page fetcher (defaults to fetch_bulletin)

    Returns:
        ScrapeResult with the stored records

    Raises:
        FetchError: If the bulletin page cannot be fetched
        NoRatesFoundError: If the page yields no rates
        StorageError: If the append fails
    """
    today = today or utc_today()
    fetch = fetch or fetch_bulletin

    html = fetch(settings.source_url, settings.user_agent, timeout=settings.timeout_seconds)
    parsed = extract_rates(page_text(html), settings.rate_bounds)

    records = [r.on(today) for r in parsed]
    store.append_rates(records)

    logger.info(f"[scrape] {today.isoformat()}: inserted {len(records)} rates")
    return ScrapeResult(date=today, rates=records)
