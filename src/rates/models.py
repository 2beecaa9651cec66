"""
Record types for scraped charter rates and bunker prices.

RateRecord is the stored snapshot row. AggregatedRate and BunkerPrice are
derived on every read and never persisted.
"""

from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class VesselType(Enum):
    """Dry-bulk carrier size classes."""
    CAPESIZE = "CAPESIZE"
    PANAMAX = "PANAMAX"
    ULTRAMAX = "ULTRAMAX"
    SUPRAMAX = "SUPRAMAX"
    HANDY = "HANDY"


RateKey = Tuple[VesselType, str, str]


@dataclass(frozen=True)
class RateRecord:
    """One time-charter rate parsed from a bulletin line."""
    vessel_type: VesselType
    origin_region: str
    destination_region: str
    origin_text: str
    destination_text: str
    rate: int
    raw_line: str
    scraped_date: Optional[date] = None

    @property
    def key(self) -> RateKey:
        return (self.vessel_type, self.origin_region, self.destination_region)

    def on(self, scraped_date: date) -> "RateRecord":
        """Return a copy stamped with the snapshot date."""
        return replace(self, scraped_date=scraped_date)

    def to_row(self) -> Dict[str, Any]:
        """Serialize to the storage row shape (snake_case, ISO date)."""
        return {
            "scraped_date": self.scraped_date.isoformat() if self.scraped_date else None,
            "vessel_type": self.vessel_type.value,
            "origin_text": self.origin_text,
            "destination_text": self.destination_text,
            "origin_region": self.origin_region,
            "destination_region": self.destination_region,
            "rate": self.rate,
            "raw_line": self.raw_line,
        }

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "RateRecord":
        """
        Build a record from a storage row.

        Raises:
            KeyError: If a required column is missing
            ValueError: If vessel_type or scraped_date cannot be parsed
        """
        scraped = row.get("scraped_date")
        return cls(
            vessel_type=VesselType(row["vessel_type"]),
            origin_region=row["origin_region"],
            destination_region=row["destination_region"],
            origin_text=row.get("origin_text") or "",
            destination_text=row.get("destination_text") or "",
            rate=int(row["rate"]),
            raw_line=row.get("raw_line") or "",
            scraped_date=date.fromisoformat(scraped) if scraped else None,
        )


@dataclass(frozen=True)
class AggregatedRate:
    """Best known rate for one key, scored by age."""
    record: RateRecord
    days_old: int
    tier: int
    confidence: int

    def to_dict(self) -> Dict[str, Any]:
        r = self.record
        return {
            "vesselType": r.vessel_type.value,
            "originRegion": r.origin_region,
            "destinationRegion": r.destination_region,
            "originText": r.origin_text,
            "destinationText": r.destination_text,
            "rate": r.rate,
            "scrapedDate": r.scraped_date.isoformat() if r.scraped_date else None,
            "daysOld": self.days_old,
            "tier": self.tier,
            "confidence": self.confidence,
            "rawLine": r.raw_line,
        }


@dataclass(frozen=True)
class BunkerPrice:
    """Most recent fuel prices for a bunkering hub."""
    hub: str
    vlsfo: Optional[float]
    mgo: Optional[float]
    scraped_date: date
    days_old: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hub": self.hub,
            "vlsfo": self.vlsfo,
            "mgo": self.mgo,
            "scrapedDate": self.scraped_date.isoformat(),
            "daysOld": self.days_old,
        }
