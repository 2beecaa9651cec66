"""
Page-level rate extraction.

Scans a bulletin page for bullet lines that quote a fixed rate, parses each
one, and keeps the first record per (vessel, origin, destination). An empty
result is treated as a broken page rather than a quiet day.
"""

import logging
from typing import Dict, List

from bs4 import BeautifulSoup

from .models import RateKey, RateRecord
from .parser import DEFAULT_BOUNDS, RateBounds, parse_line

logger = logging.getLogger(__name__)


PAGE_BULLETS = ("•", "·")
RATE_PHRASE = "fixed around"

# Elements that start a new line when a page is flattened. Inline tags
# (strong, a, span) stay on the line they sit in.
BLOCK_TAGS = [
    "p", "div", "li", "ul", "ol", "tr", "td", "th", "table",
    "h1", "h2", "h3", "h4", "h5", "h6", "section", "article", "blockquote", "pre",
]


class NoRatesFoundError(Exception):
    """Raised when a fetched page yields no parseable rate lines."""
    def __init__(self, candidate_lines: int = 0):
        self.candidate_lines = candidate_lines
        super().__init__(
            f"No rates found ({candidate_lines} candidate lines); "
            "page structure may have changed"
        )


def page_text(html: str) -> str:
    """
    Flatten an HTML page to newline-separated text.

    Lines break at ``<br>`` and at block elements only, so a bullet sentence
    with inline markup (a bold port name, a link) stays on one line. Bullets
    written as ``&bull;`` entities end up at the start of their line, which
    is what extract_rates() looks for.
    """
    soup = BeautifulSoup(html, "lxml")
    for br in soup.find_all("br"):
        br.replace_with("\n")
    for block in soup.find_all(BLOCK_TAGS):
        block.insert_before("\n")
        block.insert_after("\n")
    return soup.get_text()


def is_rate_line(line: str) -> bool:
    """True for a trimmed line that starts with a bullet and quotes a fixed rate."""
    trimmed = line.strip()
    return trimmed.startswith(PAGE_BULLETS) and RATE_PHRASE in trimmed.lower()


def extract_rates(page_body: str, bounds: RateBounds = DEFAULT_BOUNDS) -> List[RateRecord]:
    """
    Extract deduplicated rate records from a page body.

    Records come back in page order. When two lines produce the same key,
    the first one on the page wins.

    Args:
        page_body: Page text, one bulletin sentence per line
        bounds: Sanity bound passed through to the line parser

    Returns:
        Non-empty list of RateRecord (without scraped_date)

    Raises:
        NoRatesFoundError: If no line produced a record
    """
    rates: List[RateRecord] = []
    seen: Dict[RateKey, RateRecord] = {}
    candidates = 0

    for line in page_body.splitlines():
        if not is_rate_line(line):
            continue
        candidates += 1

        record = parse_line(line.strip(), bounds)
        if record is None:
            continue

        if record.key in seen:
            logger.debug(f"Duplicate key {record.key}, keeping first: {record.raw_line!r}")
            continue
        seen[record.key] = record
        rates.append(record)

    if not rates:
        raise NoRatesFoundError(candidates)

    logger.info(f"Extracted {len(rates)} rates from {candidates} candidate lines")
    return rates
