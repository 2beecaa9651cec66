"""
FastAPI server for the charter rate pipeline.

Endpoints:
- GET  /api/rates   best available rate per vessel/origin/destination + bunker prices
- GET|POST /api/scrape  run today's scrape (scheduler or shared-secret only)
- GET  /api/health  liveness

Usage:
    uvicorn src.api.server:app --reload --port 8000
"""

import hmac
import logging
from datetime import datetime, timezone
from functools import lru_cache
from typing import Callable, Optional

from fastapi import Depends, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.config.settings import Settings, load_settings
from src.logging_config import configure_logging
from src.rates.scrape import run_scrape
from src.rates.service import build_rates_view
from src.rates.storage import RateStore, open_store

logger = logging.getLogger(__name__)

# Header the hosting platform's cron sets on scheduled invocations
SCHEDULER_HEADER = "x-vercel-cron"
RATES_CACHE_CONTROL = "s-maxage=3600, stale-while-revalidate"

configure_logging()

app = FastAPI(
    title="Dry Freight Rates API",
    description="Freshness-scored dry-bulk time-charter rates",
    version="1.0.0",
)

# The calculator calls this from any origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()


def get_read_store_factory(settings: Settings = Depends(get_settings)) -> Callable[[], RateStore]:
    # Opened inside the handler so configuration errors get the JSON error payload
    return lambda: open_store(settings)


def get_write_store_factory(settings: Settings = Depends(get_settings)) -> Callable[[], RateStore]:
    # Opened after the auth check so unauthorized calls never touch write keys
    return lambda: open_store(settings, write=True)


def _secret_matches(candidate: Optional[str], secret: Optional[str]) -> bool:
    if not secret or not candidate:
        return False
    return hmac.compare_digest(candidate, secret)


def is_authorized(request: Request, cron_secret: Optional[str]) -> bool:
    """
    Scheduler header, bearer token, or ?secret= query parameter.

    The secret-based checks only apply when a secret is configured.
    """
    if request.headers.get(SCHEDULER_HEADER) == "1":
        return True

    auth = request.headers.get("authorization", "")
    if auth.startswith("Bearer ") and _secret_matches(auth[len("Bearer "):], cron_secret):
        return True

    return _secret_matches(request.query_params.get("secret"), cron_secret)


@app.get("/api/rates")
def get_rates(
    response: Response,
    settings: Settings = Depends(get_settings),
    store_factory: Callable[[], RateStore] = Depends(get_read_store_factory),
):
    """Best available rate per vessel/origin/destination, with bunker prices."""
    response.headers["Cache-Control"] = RATES_CACHE_CONTROL
    try:
        return build_rates_view(store_factory(), settings)
    except Exception as e:
        logger.error(f"[rates] error: {e}")
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": str(e), "rates": [], "bunker": {}},
        )


@app.api_route("/api/scrape", methods=["GET", "POST"])
def trigger_scrape(
    request: Request,
    settings: Settings = Depends(get_settings),
    store_factory: Callable[[], RateStore] = Depends(get_write_store_factory),
):
    """Run today's scrape and store the results."""
    if not is_authorized(request, settings.cron_secret):
        return JSONResponse(status_code=401, content={"error": "Unauthorized"})

    try:
        store = store_factory()
        result = run_scrape(store, settings)
    except Exception as e:
        logger.error(f"[scrape] error: {e}")
        return JSONResponse(status_code=500, content={"success": False, "error": str(e)})

    return {"success": True, **result.to_dict()}


@app.get("/api/health")
def health_check():
    """Simple health check endpoint."""
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
