"""
Dry-bulk time-charter rate pipeline.

Scrapes the daily rate bulletin, normalizes place and vessel names, stores
dated snapshots and serves a freshness-scored best-rate view.

Modules:
    models - RateRecord, AggregatedRate, BunkerPrice, VesselType
    vocabulary - Region alias and vessel keyword tables
    parser - Single bulletin line parser
    extractor - Page scanning and per-page deduplication
    freshness - Most-recent-wins aggregation and tier/confidence scoring
    fetcher - Bulletin page HTTP fetch
    storage - Append-only rate store (Supabase or local JSONL)
    scrape - Daily scrape pipeline
    service - Rates view for the API
    cli - Command-line interface entrypoints
"""

from . import models
from . import vocabulary
from . import parser
from . import extractor
from . import freshness
from . import fetcher
from . import storage
from . import scrape
from . import service
