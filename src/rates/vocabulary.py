"""
Region and vessel-class vocabulary for bulletin text.

Maps the free-text place and ship names used on the rate bulletin to the
canonical region codes and vessel types used by the freight calculator.

Both tables are ordered. Region resolution tries an exact alias match
first and then falls back to the first alias (in table order) contained in
the input, so the order below is the tie-break for ambiguous text such as
"uk continent" or "south china sea". Do not reorder entries casually.
"""

import re
from typing import Dict, FrozenSet, Optional, Tuple

from .models import VesselType


REGION_ALIASES: Tuple[Tuple[str, str], ...] = (
    # Europe
    ("continent", "N.EUROPE"),
    ("n.europe", "N.EUROPE"),
    ("north europe", "N.EUROPE"),
    ("northern europe", "N.EUROPE"),
    ("arag", "N.EUROPE"),  # Amsterdam-Rotterdam-Antwerp-Ghent
    ("uk continent", "N.EUROPE"),
    ("germany", "N.EUROPE"),
    ("uk", "N.EUROPE"),
    ("netherlands", "N.EUROPE"),
    ("belgium", "N.EUROPE"),
    ("france", "N.EUROPE"),
    # Mediterranean
    ("spain", "W.MED"),
    ("portugal", "W.MED"),
    ("morocco", "W.MED"),
    ("algeria", "W.MED"),
    ("w.med", "W.MED"),
    ("west med", "W.MED"),
    ("west mediterranean", "W.MED"),
    ("east mediterranean", "E.MED"),
    ("e.med", "E.MED"),
    ("emed", "E.MED"),
    ("east med", "E.MED"),
    ("egypt med", "E.MED"),
    ("egypt", "E.MED"),
    ("turkey", "E.MED"),
    ("turkiye", "E.MED"),
    ("turkiye med", "E.MED"),
    ("greece", "E.MED"),
    ("italy", "W.MED"),
    # Black Sea
    ("black sea", "BLACK SEA"),
    ("ukraine", "BLACK SEA"),
    ("romania", "BLACK SEA"),
    # Americas
    ("us gulf", "US GULF"),
    ("usg", "US GULF"),
    ("us east coast", "US EAST COAST"),
    ("usec", "US EAST COAST"),
    ("east coast south america", "E.S.AMERICA"),
    ("ecsa", "E.S.AMERICA"),
    ("brazil", "E.S.AMERICA"),
    ("argentina", "E.S.AMERICA"),
    ("uruguay", "E.S.AMERICA"),
    ("sw passage", "E.S.AMERICA"),
    ("north coast south america", "N.S.AMERICA"),
    ("ncsa", "N.S.AMERICA"),
    ("colombia", "N.S.AMERICA"),
    ("venezuela", "N.S.AMERICA"),
    ("dominican republic", "CARIBBEAN"),
    ("caribbean", "CARIBBEAN"),
    ("mexico east coast", "MEXICO"),
    ("mexico", "MEXICO"),
    ("peru", "W.S.AMERICA"),
    ("ecuador", "W.S.AMERICA"),
    ("west coast south america", "W.S.AMERICA"),
    ("wcsa", "W.S.AMERICA"),
    # Africa
    ("west africa", "W.AFRICA"),
    ("wafr", "W.AFRICA"),
    ("waf", "W.AFRICA"),
    ("w.africa", "W.AFRICA"),
    ("nigeria", "W.AFRICA"),
    ("gabon", "W.AFRICA"),
    ("ghana", "W.AFRICA"),
    ("south africa", "S.AFRICA"),
    ("saf", "S.AFRICA"),
    ("s.africa", "S.AFRICA"),
    ("east africa", "E.AFRICA"),
    ("kenya", "E.AFRICA"),
    ("mozambique", "E.AFRICA"),
    # Middle East / Red Sea
    ("middle east", "MIDDLE EAST"),
    ("uae", "MIDDLE EAST"),
    ("qatar", "MIDDLE EAST"),
    ("oman", "MIDDLE EAST"),
    ("saudi arabia", "MIDDLE EAST"),
    ("iraq", "MIDDLE EAST"),
    ("iran", "MIDDLE EAST"),
    ("red sea", "RED SEA"),
    # Indian subcontinent
    ("west coast india", "W.INDIA"),
    ("wci", "W.INDIA"),
    ("w.india", "W.INDIA"),
    ("india", "W.INDIA"),
    ("pakistan", "W.INDIA"),
    ("east coast india", "E.INDIA"),
    ("eci", "E.INDIA"),
    ("e.india", "E.INDIA"),
    ("bangladesh", "E.INDIA"),
    ("south india", "S.INDIA"),
    ("s.india", "S.INDIA"),
    ("sri lanka", "S.INDIA"),
    # Asia Pacific
    ("china", "CHINA"),
    ("south china", "CHINA"),
    ("north china", "CHINA"),
    ("hong kong", "CHINA"),
    ("taiwan", "N.ASIA"),
    ("japan", "N.ASIA"),
    ("japan-korea", "N.ASIA"),
    ("south korea", "N.ASIA"),
    ("korea", "N.ASIA"),
    ("north pacific", "N.ASIA"),
    ("nopac", "N.ASIA"),
    ("n.asia", "N.ASIA"),
    ("far east", "CHINA"),  # generic Far East goes to China
    ("indonesia", "SE.ASIA"),
    ("malaysia", "SE.ASIA"),
    ("thailand", "SE.ASIA"),
    ("vietnam", "SE.ASIA"),
    ("cambodia", "SE.ASIA"),
    ("philippines", "SE.ASIA"),
    ("south east asia", "SE.ASIA"),
    ("southeast asia", "SE.ASIA"),
    ("se asia", "SE.ASIA"),
    ("sea", "SE.ASIA"),
    ("australia", "AUSTRALIA"),
)

# Checked top to bottom; "cape" must stay ahead of the generic "handy".
VESSEL_KEYWORDS: Tuple[Tuple[str, VesselType], ...] = (
    ("capesize", VesselType.CAPESIZE),
    ("cape", VesselType.CAPESIZE),
    ("panamax", VesselType.PANAMAX),
    ("ultramax", VesselType.ULTRAMAX),
    ("supramax", VesselType.SUPRAMAX),
    ("handy", VesselType.HANDY),
)

REGION_CODES: FrozenSet[str] = frozenset(code for _, code in REGION_ALIASES)

_EXACT_ALIASES: Dict[str, str] = {}
for _alias, _code in REGION_ALIASES:
    _EXACT_ALIASES.setdefault(_alias, _code)

_PARENTHETICAL_RE = re.compile(r"\s*\(.*?\)")


def normalize_location(text: str) -> str:
    """Lowercase, drop parenthetical codes like "(USG)", and trim."""
    return _PARENTHETICAL_RE.sub("", text.lower()).strip()


def resolve_region(text: Optional[str]) -> Optional[str]:
    """
    Resolve a free-text location to a canonical region code.

    Args:
        text: Location as written on the bulletin, e.g. "US Gulf (USG)"

    Returns:
        Region code such as "US GULF", or None if nothing matches.
        None means the record must be dropped; there is no default region.
    """
    if not text:
        return None
    t = normalize_location(text)
    if not t:
        return None

    if t in _EXACT_ALIASES:
        return _EXACT_ALIASES[t]

    for alias, code in REGION_ALIASES:
        if alias in t:
            return code

    return None


def resolve_vessel(text: Optional[str]) -> Optional[VesselType]:
    """Resolve a vessel-class word ("Ultramax", "Capesize", ...) to a VesselType."""
    if not text:
        return None
    t = text.lower()
    for keyword, vessel_type in VESSEL_KEYWORDS:
        if keyword in t:
            return vessel_type
    return None
