"""
Persistence gateway for scraped rate snapshots.

The store is append-only: every scrape appends one dated batch, and reads
are plain date-range scans. Deduplication across days happens in memory at
read time (see freshness.aggregate).

Two backends:
    SupabaseStore - PostgREST tables scraped_rates / bunker_prices
    JsonlStore    - local append-only JSONL files with file locking
"""

import fcntl
import json
import logging
import os
from abc import ABC, abstractmethod
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import requests

from .models import RateRecord

logger = logging.getLogger(__name__)


RATES_TABLE = "scraped_rates"
BUNKER_TABLE = "bunker_prices"
RATE_COLUMNS = (
    "vessel_type,origin_region,destination_region,origin_text,"
    "destination_text,rate,scraped_date,raw_line"
)
BUNKER_COLUMNS = "hub,vlsfo,mgo,scraped_date"

DEFAULT_RATE_LIMIT = 5000
DEFAULT_BUNKER_LIMIT = 50
REQUEST_TIMEOUT = 30


class StorageError(Exception):
    """Raised when the storage backend rejects or cannot serve a request."""
    def __init__(self, status: Optional[int], message: str):
        self.status = status
        self.message = message
        prefix = f"{status} " if status is not None else ""
        super().__init__(f"Storage request failed: {prefix}{message}")


def _check_dated(records: Sequence[RateRecord]) -> List[Dict[str, Any]]:
    rows = []
    for record in records:
        if record.scraped_date is None:
            raise ValueError(f"Record has no scraped_date: {record.raw_line!r}")
        rows.append(record.to_row())
    return rows


class RateStore(ABC):
    """Abstract append-only store for rate and bunker rows."""

    @abstractmethod
    def append_rates(self, records: Sequence[RateRecord]) -> None:
        """
        Append one batch of dated records as a single logical write.

        Raises:
            StorageError: If the backend rejects the batch
        """

    @abstractmethod
    def query_rates(self, since: date, limit: int = DEFAULT_RATE_LIMIT) -> List[Dict[str, Any]]:
        """
        Rate rows with scraped_date >= since, most recent first, at most limit rows.

        Raises:
            StorageError: If the backend cannot serve the query
        """

    @abstractmethod
    def query_bunker(self, limit: int = DEFAULT_BUNKER_LIMIT) -> List[Dict[str, Any]]:
        """
        Bunker rows, most recent first, at most limit rows.

        Raises:
            StorageError: If the backend cannot serve the query
        """


class SupabaseStore(RateStore):
    """Store backed by Supabase's PostgREST API."""

    def __init__(self, base_url: str, api_key: str, timeout: float = REQUEST_TIMEOUT,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        # None: each call opens its own session, so concurrent queries share nothing
        self.session = session

    def _headers(self) -> Dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
        }

    def _table_url(self, table: str) -> str:
        return f"{self.base_url}/rest/v1/{table}"

    def _request(self, method: str, table: str, **kwargs) -> requests.Response:
        headers = self._headers()
        headers.update(kwargs.pop("headers", {}))
        try:
            send = self.session.request if self.session is not None else requests.request
            resp = send(
                method, self._table_url(table), headers=headers, timeout=self.timeout, **kwargs
            )
        except requests.RequestException as e:
            raise StorageError(None, f"{table}: {e}") from e
        if not resp.ok:
            raise StorageError(resp.status_code, f"{table}: {resp.text}")
        return resp

    def append_rates(self, records: Sequence[RateRecord]) -> None:
        rows = _check_dated(records)
        if not rows:
            return
        self._request(
            "POST",
            RATES_TABLE,
            json=rows,
            headers={"Content-Type": "application/json", "Prefer": "return=minimal"},
        )
        logger.info(f"Inserted {len(rows)} rows into {RATES_TABLE}")

    def query_rates(self, since: date, limit: int = DEFAULT_RATE_LIMIT) -> List[Dict[str, Any]]:
        resp = self._request("GET", RATES_TABLE, params={
            "select": RATE_COLUMNS,
            "scraped_date": f"gte.{since.isoformat()}",
            "order": "scraped_date.desc",
            "limit": str(limit),
        })
        return resp.json()

    def query_bunker(self, limit: int = DEFAULT_BUNKER_LIMIT) -> List[Dict[str, Any]]:
        resp = self._request("GET", BUNKER_TABLE, params={
            "select": BUNKER_COLUMNS,
            "order": "scraped_date.desc",
            "limit": str(limit),
        })
        return resp.json()


def append_rows(file_path: Path, rows: Sequence[Dict[str, Any]]) -> None:
    """
    Atomically append rows to a JSONL file under an exclusive lock.

    Raises:
        StorageError: If serialization or the write fails
    """
    try:
        # Serialize first to catch JSON errors before touching the file
        payload = "".join(json.dumps(row, ensure_ascii=False, sort_keys=True) + "\n" for row in rows)
    except (TypeError, ValueError) as e:
        raise StorageError(None, f"Failed to serialize rows: {e}") from e

    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        with open(file_path, "a") as f:
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            try:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            finally:
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
    except OSError as e:
        raise StorageError(None, f"Failed to append to {file_path}: {e}") from e


def read_rows(file_path: Path) -> List[Dict[str, Any]]:
    """
    Read every row from a JSONL file; a missing file reads as empty.

    Raises:
        StorageError: On unreadable files or invalid JSON lines
    """
    if not file_path.exists():
        return []

    rows = []
    try:
        with open(file_path, "r") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    rows.append(json.loads(line))
                except json.JSONDecodeError as e:
                    raise StorageError(None, f"Invalid JSON in {file_path} line {line_num}: {e}")
    except OSError as e:
        raise StorageError(None, f"Failed to read {file_path}: {e}") from e
    return rows


def _most_recent_first(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    # Stable: rows appended later on the same day stay behind earlier ones
    return sorted(rows, key=lambda r: str(r.get("scraped_date", "")), reverse=True)


class JsonlStore(RateStore):
    """Local store: rates.jsonl and bunker.jsonl under one directory."""

    RATES_FILE = "rates.jsonl"
    BUNKER_FILE = "bunker.jsonl"

    def __init__(self, store_dir: Path):
        self.store_dir = Path(store_dir)

    @property
    def rates_path(self) -> Path:
        return self.store_dir / self.RATES_FILE

    @property
    def bunker_path(self) -> Path:
        return self.store_dir / self.BUNKER_FILE

    def append_rates(self, records: Sequence[RateRecord]) -> None:
        rows = _check_dated(records)
        if not rows:
            return
        append_rows(self.rates_path, rows)
        logger.info(f"Appended {len(rows)} rows to {self.rates_path}")

    def query_rates(self, since: date, limit: int = DEFAULT_RATE_LIMIT) -> List[Dict[str, Any]]:
        cutoff = since.isoformat()
        rows = [r for r in read_rows(self.rates_path) if str(r.get("scraped_date", "")) >= cutoff]
        return _most_recent_first(rows)[:limit]

    def query_bunker(self, limit: int = DEFAULT_BUNKER_LIMIT) -> List[Dict[str, Any]]:
        return _most_recent_first(read_rows(self.bunker_path))[:limit]


def open_store(settings, write: bool = False) -> RateStore:
    """
    Pick a backend from settings.

    With SUPABASE_URL set, use Supabase: the service key for writes, the
    anon key (falling back to the service key) for reads. Otherwise use a
    JsonlStore under settings.store_dir.

    Raises:
        MissingSettingError: If Supabase is configured without a usable key
    """
    if settings.supabase_url:
        if write:
            key = settings.require("supabase_service_key")
        else:
            key = settings.supabase_anon_key or settings.require("supabase_service_key")
        return SupabaseStore(settings.supabase_url, key, timeout=settings.timeout_seconds)

    logger.debug(f"SUPABASE_URL not set, using JSONL store at {settings.store_dir}")
    return JsonlStore(Path(settings.store_dir))
