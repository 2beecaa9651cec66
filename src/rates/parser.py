"""
Bulletin line parser.

Turns one free-text bulletin sentence such as

    "• Ultramax open Continent to China fixed around $17,500"
    "• Supramax open West Africa (WAFR) via ECSA to China fixed around $20,500"

into a RateRecord. Anything that does not fit the shape, or names a place or
vessel class outside the vocabulary, yields None. Unrecognized lines are
normal on the bulletin page, so the parser never raises.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional, Tuple

from .models import RateRecord
from .vocabulary import resolve_region, resolve_vessel

logger = logging.getLogger(__name__)


_BULLET_RE = re.compile(r"^(?:[•·\-*]\s*)+")
_RATE_RE = re.compile(r"fixed\s+around\s+\$([0-9,]+)", re.IGNORECASE)
_OPEN_PREFIX_RE = re.compile(r"^\S+\s+open\s+", re.IGNORECASE)

ROUTE_SEPARATOR = " to "
VIA_SEPARATOR = " via "


@dataclass(frozen=True)
class RateBounds:
    """
    Sanity bound on parsed USD/day figures.

    This filters formatting and OCR noise (a dropped comma, a stray digit).
    It is not a market rule, so it is configurable via config/rates.yaml.
    """
    min_rate: int = 1000
    max_rate: int = 200000

    def contains(self, rate: int) -> bool:
        return self.min_rate <= rate <= self.max_rate


DEFAULT_BOUNDS = RateBounds()


def strip_bullet(line: str) -> str:
    """Remove leading bullet glyphs or dashes (however many) and surrounding whitespace."""
    return _BULLET_RE.sub("", line.strip(), count=1).strip()


def parse_rate(text: str, bounds: RateBounds = DEFAULT_BOUNDS) -> Optional[int]:
    """
    Parse a "1,234"-style figure and apply the sanity bound.

    Returns:
        The integer rate, or None if empty, non-positive or out of bounds
    """
    digits = text.replace(",", "")
    if not digits:
        return None
    rate = int(digits)
    if rate <= 0 or not bounds.contains(rate):
        return None
    return rate


def split_route(route: str) -> Optional[Tuple[str, str]]:
    """
    Split "<origin> [via <waypoint>] to <destination>" into (origin, destination).

    The last " to " introduces the destination; the last " via " before it
    starts a waypoint that is discarded.

    Returns:
        (origin_text, destination_text) or None if there is no " to "
    """
    to_idx = route.rfind(ROUTE_SEPARATOR)
    if to_idx == -1:
        return None

    origin_via = route[:to_idx].strip()
    destination_text = route[to_idx + len(ROUTE_SEPARATOR):].strip()

    via_idx = origin_via.rfind(VIA_SEPARATOR)
    origin_text = origin_via[:via_idx].strip() if via_idx != -1 else origin_via

    return origin_text, destination_text


def parse_line(raw_line: str, bounds: RateBounds = DEFAULT_BOUNDS) -> Optional[RateRecord]:
    """
    Parse one bulletin line into a RateRecord.

    The returned record carries no scraped_date; the caller stamps it.

    Args:
        raw_line: Line as it appears on the page, bullet included or not
        bounds: Sanity bound for the rate figure

    Returns:
        RateRecord, or None for any line that does not parse
    """
    if not raw_line:
        return None

    clean = strip_bullet(raw_line)

    rate_match = _RATE_RE.search(clean)
    if not rate_match:
        return None

    rate = parse_rate(rate_match.group(1), bounds)
    if rate is None:
        logger.debug(f"Rate out of bounds, dropping: {clean!r}")
        return None

    descriptor = clean[:rate_match.start()].strip()
    if not descriptor:
        return None

    vessel_token = descriptor.split()[0]
    vessel_type = resolve_vessel(vessel_token)
    if vessel_type is None:
        logger.debug(f"Unknown vessel class {vessel_token!r}: {clean!r}")
        return None

    route = _OPEN_PREFIX_RE.sub("", descriptor, count=1).strip()
    parts = split_route(route)
    if parts is None:
        return None
    origin_text, destination_text = parts

    origin_region = resolve_region(origin_text)
    destination_region = resolve_region(destination_text)
    if not origin_region or not destination_region:
        logger.debug(
            f"Unmapped region ({origin_text!r} -> {destination_text!r}): {clean!r}"
        )
        return None

    return RateRecord(
        vessel_type=vessel_type,
        origin_region=origin_region,
        destination_region=destination_region,
        origin_text=origin_text,
        destination_text=destination_text,
        rate=rate,
        raw_line=clean,
    )
