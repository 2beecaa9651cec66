"""Tests for the best-available rates view."""

import tempfile
from datetime import date, datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from src.config.settings import Settings
from src.rates.storage import JsonlStore, StorageError, append_rows
from src.rates.service import build_rates_view, records_from_rows


AS_OF = date(2025, 3, 20)
NOW = datetime(2025, 3, 20, 9, 30, tzinfo=timezone.utc)


def rate_row(scraped_date, vessel="ULTRAMAX", origin="N.EUROPE", destination="CHINA", rate=17500):
    return {
        "scraped_date": scraped_date,
        "vessel_type": vessel,
        "origin_text": "Continent",
        "destination_text": "China",
        "origin_region": origin,
        "destination_region": destination,
        "rate": rate,
        "raw_line": f"{vessel.title()} open Continent to China fixed around ${rate:,}",
    }


@pytest.fixture
def store():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield JsonlStore(Path(tmpdir))


@pytest.fixture
def settings():
    return Settings()


class TestRecordsFromRows:

    def test_malformed_rows_skipped(self):
        rows = [
            rate_row("2025-03-20"),
            {"vessel_type": "TANKER", "origin_region": "X", "destination_region": "Y", "rate": 1},
            {"vessel_type": "ULTRAMAX"},
        ]
        records = records_from_rows(rows)

        assert len(records) == 1
        assert records[0].scraped_date == AS_OF


class TestBuildRatesView:

    def test_view_shape(self, store, settings):
        append_rows(store.rates_path, [rate_row("2025-03-19")])
        append_rows(store.bunker_path, [
            {"hub": "Singapore", "vlsfo": 610.5, "mgo": 780, "scraped_date": "2025-03-18"},
        ])

        view = build_rates_view(store, settings, as_of=AS_OF, now=NOW)

        assert view["success"] is True
        assert view["count"] == 1
        assert view["fetchedAt"] == "2025-03-20T09:30:00+00:00"
        assert view["rates"][0]["vesselType"] == "ULTRAMAX"
        assert view["rates"][0]["daysOld"] == 1
        assert view["rates"][0]["tier"] == 1
        assert view["bunker"]["Singapore"]["daysOld"] == 2

    def test_most_recent_per_key(self, store, settings):
        append_rows(store.rates_path, [
            rate_row("2025-03-10", rate=16000),
            rate_row("2025-03-18", rate=18000),
            rate_row("2025-03-18", vessel="CAPESIZE", origin="AUSTRALIA", rate=22000),
        ])

        view = build_rates_view(store, settings, as_of=AS_OF, now=NOW)

        assert view["count"] == 2
        assert [(r["vesselType"], r["rate"]) for r in view["rates"]] == [
            ("CAPESIZE", 22000),
            ("ULTRAMAX", 18000),
        ]

    def test_rows_beyond_lookback_excluded(self, store, settings):
        append_rows(store.rates_path, [
            rate_row("2025-02-03"),  # 45 days old
            rate_row("2025-02-02", vessel="PANAMAX"),  # 46 days old
        ])

        view = build_rates_view(store, settings, as_of=AS_OF, now=NOW)

        assert [r["vesselType"] for r in view["rates"]] == ["ULTRAMAX"]
        assert view["rates"][0]["tier"] == 3

    def test_bunker_failure_is_not_fatal(self, settings):
        failing = MagicMock()
        failing.query_rates.return_value = [rate_row("2025-03-20")]
        failing.query_bunker.side_effect = StorageError(503, "bunker_prices: unavailable")

        view = build_rates_view(failing, settings, as_of=AS_OF, now=NOW)

        assert view["success"] is True
        assert view["count"] == 1
        assert view["bunker"] == {}

    def test_rate_failure_propagates(self, settings):
        failing = MagicMock()
        failing.query_rates.side_effect = StorageError(500, "scraped_rates: boom")
        failing.query_bunker.return_value = []

        with pytest.raises(StorageError):
            build_rates_view(failing, settings, as_of=AS_OF, now=NOW)

    def test_query_uses_lookback_and_limits(self, settings):
        mock_store = MagicMock()
        mock_store.query_rates.return_value = []
        mock_store.query_bunker.return_value = []

        build_rates_view(mock_store, Settings(lookback_days=10, rate_query_limit=7, bunker_query_limit=3),
                         as_of=AS_OF, now=NOW)

        mock_store.query_rates.assert_called_once_with(date(2025, 3, 10), 7)
        mock_store.query_bunker.assert_called_once_with(3)

    def test_empty_store(self, store, settings):
        view = build_rates_view(store, settings, as_of=AS_OF, now=NOW)

        assert view["count"] == 0
        assert view["rates"] == []
        assert view["bunker"] == {}
