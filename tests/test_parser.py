"""Tests for the bulletin line parser."""

import pytest

from src.rates.models import VesselType
from src.rates.parser import (
    RateBounds,
    parse_line,
    parse_rate,
    split_route,
    strip_bullet,
)


ULTRAMAX_LINE = "• Ultramax open Continent to China fixed around $17,500"
VIA_LINE = "Supramax open West Africa (WAFR) via ECSA to China fixed around $20,500"


class TestStripBullet:

    @pytest.mark.parametrize("line", [
        "• Ultramax open",
        "· Ultramax open",
        "- Ultramax open",
        "* Ultramax open",
        "  •Ultramax open  ",
        "Ultramax open",
    ])
    def test_strips_one_bullet(self, line):
        assert strip_bullet(line) == "Ultramax open"

    def test_stacked_bullets_removed(self):
        assert strip_bullet("• • Ultramax") == "Ultramax"
        assert strip_bullet("• -Capesize open") == "Capesize open"


class TestParseRate:

    def test_thousands_separators(self):
        assert parse_rate("17,500") == 17500

    def test_bounds_inclusive(self):
        assert parse_rate("1,000") == 1000
        assert parse_rate("200,000") == 200000

    @pytest.mark.parametrize("text", ["500", "999", "250,000", "200,001", "0", ","])
    def test_rejected(self, text):
        assert parse_rate(text) is None

    def test_custom_bounds(self):
        bounds = RateBounds(min_rate=100, max_rate=1000)
        assert parse_rate("500", bounds) == 500
        assert parse_rate("17,500", bounds) is None


class TestSplitRoute:

    def test_simple(self):
        assert split_route("Continent to China") == ("Continent", "China")

    def test_via_discarded(self):
        assert split_route("West Africa (WAFR) via ECSA to China") == ("West Africa (WAFR)", "China")

    def test_last_to_is_destination(self):
        assert split_route("Brazil trip to Qingdao to Japan") == ("Brazil trip to Qingdao", "Japan")

    def test_last_via_before_destination(self):
        assert split_route("Indonesia via Singapore via Malacca to India") == ("Indonesia via Singapore", "India")

    def test_no_separator(self):
        assert split_route("Continent") is None


class TestParseLine:

    def test_basic_line(self):
        record = parse_line(ULTRAMAX_LINE)

        assert record is not None
        assert record.vessel_type is VesselType.ULTRAMAX
        assert record.origin_region == "N.EUROPE"
        assert record.destination_region == "CHINA"
        assert record.origin_text == "Continent"
        assert record.destination_text == "China"
        assert record.rate == 17500
        assert record.raw_line == "Ultramax open Continent to China fixed around $17,500"
        assert record.scraped_date is None

    def test_via_clause_excluded_from_origin(self):
        record = parse_line(VIA_LINE)

        assert record is not None
        assert record.vessel_type is VesselType.SUPRAMAX
        assert record.origin_text == "West Africa (WAFR)"
        assert record.origin_region == "W.AFRICA"
        assert record.destination_region == "CHINA"
        assert record.rate == 20500

    def test_last_to_used_for_destination(self):
        record = parse_line("• Capesize open Brazil trip to Qingdao to Japan fixed around $30,000")

        assert record is not None
        assert record.origin_region == "E.S.AMERICA"
        assert record.destination_region == "N.ASIA"
        assert record.destination_text == "Japan"

    def test_dash_bullet(self):
        record = parse_line("- Panamax open US Gulf (USG) to China fixed around $25,000")

        assert record.vessel_type is VesselType.PANAMAX
        assert record.origin_region == "US GULF"

    def test_rate_phrase_case_insensitive(self):
        record = parse_line("• Handysize open Black Sea to Egypt Fixed  Around $12,250")

        assert record is not None
        assert record.vessel_type is VesselType.HANDY
        assert record.origin_region == "BLACK SEA"
        assert record.destination_region == "E.MED"
        assert record.rate == 12250

    def test_trailing_text_after_rate(self):
        record = parse_line("• Ultramax open Continent to China fixed around $17,500 for a trip.")
        assert record.rate == 17500

    def test_without_open_keyword(self):
        """Without 'open' the vessel word stays in the origin text; containment still maps it."""
        record = parse_line("• Ultramax Continent to China fixed around $17,500")

        assert record is not None
        assert record.origin_text == "Ultramax Continent"
        assert record.origin_region == "N.EUROPE"

    @pytest.mark.parametrize("line", [
        "• Ultramax open Continent to China fixed around $500",
        "• Ultramax open Continent to China fixed around $250,000",
    ])
    def test_out_of_bounds_rate_rejected(self, line):
        assert parse_line(line) is None

    def test_custom_bounds_accept_low_rate(self):
        record = parse_line(
            "• Ultramax open Continent to China fixed around $500",
            RateBounds(min_rate=100, max_rate=1000),
        )
        assert record.rate == 500

    @pytest.mark.parametrize("line", [
        "",
        "Rates were firmer this week across the Atlantic.",
        "• Ultramax open Continent to China at $17,500",
        "• fixed around $17,500",
        "• Tanker open Continent to China fixed around $17,500",
        "• Ultramax open Continent fixed around $17,500",
        "• Ultramax open Atlantis to China fixed around $17,500",
        "• Ultramax open Continent to Atlantis fixed around $17,500",
        "• Ultramax open Continent to China fixed around $TBA",
    ])
    def test_malformed_lines_return_none(self, line):
        assert parse_line(line) is None

    @pytest.mark.parametrize("line", [
        ULTRAMAX_LINE,
        VIA_LINE,
        "· Capesize open Australia to China fixed around $22,000",
        "- Panamax open US Gulf (USG) to China fixed around $25,000",
        "• -Capesize open Australia to China fixed around $22,000",
    ])
    def test_reparsing_raw_line_is_idempotent(self, line):
        record = parse_line(line)
        assert parse_line(record.raw_line) == record
