"""
Runtime settings for the rate pipeline.

Tunables live in config/rates.yaml; secrets come from the environment, with a
.env file at the repo root loaded on import.

Usage:
    from src.config.settings import load_settings

    settings = load_settings()
    key = settings.require("supabase_service_key")

CLI check:
    python -m src.config.settings --check
"""

import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from src.rates.parser import RateBounds

logger = logging.getLogger(__name__)

_REPO_ROOT = Path(__file__).resolve().parent.parent.parent  # src/config/settings.py -> repo root
_ENV_PATH = _REPO_ROOT / ".env"

if _ENV_PATH.exists():
    load_dotenv(_ENV_PATH)
else:
    load_dotenv()


DEFAULT_CONFIG_PATHS = (
    Path("config/rates.yaml"),
    _REPO_ROOT / "config" / "rates.yaml",
)

DEFAULT_SOURCE_URL = "https://www.handybulk.com/ship-charter-rates/"
DEFAULT_USER_AGENT = "DryFreight-Bot/1.0 (data@dryfreight.com)"
DEFAULT_TIMEOUT_SECONDS = 30
DEFAULT_LOOKBACK_DAYS = 45
DEFAULT_RATE_QUERY_LIMIT = 5000
DEFAULT_BUNKER_QUERY_LIMIT = 50
DEFAULT_STORE_DIR = "data/rates"

SECRET_ENV_VARS = {
    "supabase_url": "SUPABASE_URL",
    "supabase_service_key": "SUPABASE_SERVICE_KEY",
    "supabase_anon_key": "SUPABASE_ANON_KEY",
    "cron_secret": "CRON_SECRET",
}


class MissingSettingError(Exception):
    """Raised when a required secret is not configured."""
    def __init__(self, name: str):
        self.name = name
        env_var = SECRET_ENV_VARS.get(name, name.upper())
        super().__init__(f"{env_var} not found. Copy .env.example to .env and set it.")


@dataclass(frozen=True)
class Settings:
    """Resolved configuration for one process."""
    source_url: str = DEFAULT_SOURCE_URL
    user_agent: str = DEFAULT_USER_AGENT
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    rate_bounds: RateBounds = field(default_factory=RateBounds)
    lookback_days: int = DEFAULT_LOOKBACK_DAYS
    rate_query_limit: int = DEFAULT_RATE_QUERY_LIMIT
    bunker_query_limit: int = DEFAULT_BUNKER_QUERY_LIMIT
    store_dir: str = DEFAULT_STORE_DIR
    supabase_url: Optional[str] = None
    supabase_service_key: Optional[str] = None
    supabase_anon_key: Optional[str] = None
    cron_secret: Optional[str] = None

    def require(self, name: str) -> str:
        """
        Get a secret that must be set.

        Raises:
            MissingSettingError: If the value is empty
        """
        value = getattr(self, name)
        if not value:
            raise MissingSettingError(name)
        return value


def load_config_file(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load config/rates.yaml.

    Args:
        config_path: Explicit path; when None the default locations are tried

    Returns:
        Config dict, or empty dict if no file is found
    """
    paths = [config_path] if config_path else list(DEFAULT_CONFIG_PATHS)
    for path in paths:
        if path.exists():
            with open(path, "r") as f:
                return yaml.safe_load(f) or {}
    if config_path:
        logger.warning(f"Config file not found: {config_path}")
    return {}


def _env(name: str) -> Optional[str]:
    value = os.environ.get(name, "").strip()
    return value or None


def load_settings(config_path: Optional[Path] = None) -> Settings:
    """Build Settings from config/rates.yaml and the environment."""
    raw = load_config_file(config_path)
    source = raw.get("source", {}) or {}
    bounds = raw.get("rate_bounds", {}) or {}
    freshness = raw.get("freshness", {}) or {}
    storage = raw.get("storage", {}) or {}

    return Settings(
        source_url=str(source.get("url", DEFAULT_SOURCE_URL)),
        user_agent=str(source.get("user_agent", DEFAULT_USER_AGENT)),
        timeout_seconds=float(source.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)),
        rate_bounds=RateBounds(
            min_rate=int(bounds.get("min", RateBounds.min_rate)),
            max_rate=int(bounds.get("max", RateBounds.max_rate)),
        ),
        lookback_days=int(freshness.get("lookback_days", DEFAULT_LOOKBACK_DAYS)),
        rate_query_limit=int(storage.get("rate_query_limit", DEFAULT_RATE_QUERY_LIMIT)),
        bunker_query_limit=int(storage.get("bunker_query_limit", DEFAULT_BUNKER_QUERY_LIMIT)),
        store_dir=_env("RATES_STORE_DIR") or str(storage.get("store_dir", DEFAULT_STORE_DIR)),
        supabase_url=_env("SUPABASE_URL"),
        supabase_service_key=_env("SUPABASE_SERVICE_KEY"),
        supabase_anon_key=_env("SUPABASE_ANON_KEY"),
        cron_secret=_env("CRON_SECRET"),
    )


def check_settings(settings: Settings) -> Dict[str, str]:
    """Report which secrets are configured ("OK" or "MISSING")."""
    return {
        env_var: "OK" if getattr(settings, name) else "MISSING"
        for name, env_var in SECRET_ENV_VARS.items()
    }


def _cli_check():
    """CLI entry point for --check flag."""
    status = check_settings(load_settings())
    for env_var, state in status.items():
        print(f"{env_var}: {state}")

    if status["SUPABASE_URL"] == "MISSING":
        print("\nNo SUPABASE_URL: rates will be stored as JSONL files locally.")
    sys.exit(0)


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Check rate pipeline configuration")
    parser.add_argument("--check", action="store_true", help="Report which secrets are configured")

    args = parser.parse_args()

    if args.check:
        _cli_check()
    else:
        parser.print_help()
