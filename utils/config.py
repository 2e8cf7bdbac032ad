"""
Configuration module for environment variable handling.

Every required value is resolved once, up front, so a misconfigured
deployment fails before the monitor touches the chain, Telegram or Pendle.
"""

import json
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests
from dotenv import load_dotenv

from utils.formatting import parse_units
from utils.logging import get_logger
from utils.watchlist import WatchedAsset, fetch_watch_list, parse_watch_list

# Load environment variables from .env file
load_dotenv()

logger = get_logger("utils.config")

TOKEN_DECIMALS = 18
RESERVE_QUERY_MODES = ("supply_cap", "reserve_data")


class ConfigurationError(Exception):
    """A required configuration value is missing or malformed."""


@dataclass(frozen=True)
class BotDestination:
    """Telegram bot credentials and target chat."""

    token: str
    chat_id: str


@dataclass(frozen=True)
class MonitorSettings:
    rpc_url: str
    data_provider_address: str
    bots: Dict[bool, BotDestination]
    watch_list: List[WatchedAsset]
    alert_threshold: int
    reserve_query: str = "supply_cap"
    pendle_enabled: bool = True


class Config:
    """Optional tunables with defaults."""

    DEFAULT_TIMEOUT = 10  # seconds

    @staticmethod
    def get_env_int(key: str, default: int) -> int:
        """Get environment variable as integer with fallback to default."""
        value = os.getenv(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            logger.warning("Invalid integer value for %s: %s. Using default %s", key, value, default)
            return default

    @staticmethod
    def get_env_bool(key: str, default: bool) -> bool:
        """Get environment variable as boolean with fallback to default."""
        value = os.getenv(key)
        if value is None or value == "":
            return default
        return value.lower() in ("true", "yes", "1")

    @classmethod
    def get_request_timeout(cls) -> int:
        """Get HTTP request timeout in seconds."""
        return cls.get_env_int("REQUEST_TIMEOUT", cls.DEFAULT_TIMEOUT)


def require_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise ConfigurationError(f"Environment variable {name} is required but not set")
    return value


def require_json_env(name: str) -> Any:
    raw = require_env(name)
    try:
        return json.loads(raw)
    except ValueError as e:
        raise ConfigurationError(f"Environment variable {name} is not valid JSON: {e}") from e


def _resolve_watch_list() -> List[WatchedAsset]:
    url = os.getenv("WATCH_LIST_URL")
    try:
        if url:
            return fetch_watch_list(url, timeout=Config.get_request_timeout())
        return parse_watch_list(require_json_env("WATCH_LIST"))
    except (ValueError, requests.RequestException) as e:
        raise ConfigurationError(f"Invalid watch list: {e}") from e


def _resolve_threshold() -> int:
    raw = require_env("ALERT_THRESHOLD_TOKENS")
    try:
        threshold = parse_units(raw, TOKEN_DECIMALS)
    except ValueError as e:
        raise ConfigurationError(f"ALERT_THRESHOLD_TOKENS is not a valid amount: {raw!r}") from e
    if threshold < 0:
        raise ConfigurationError(f"ALERT_THRESHOLD_TOKENS must not be negative: {raw!r}")
    return threshold


def load_settings() -> MonitorSettings:
    """Resolve all settings from the environment, raising ConfigurationError on the first problem."""
    rpc_url = require_env("RPC_URL")
    data_provider_address = require_env("DATA_PROVIDER_ADDRESS")
    bots = {
        True: BotDestination(require_env("ALERT_BOT_TOKEN"), require_env("ALERT_BOT_CHAT_ID")),
        False: BotDestination(require_env("NO_ALERT_BOT_TOKEN"), require_env("NO_ALERT_BOT_CHAT_ID")),
    }
    alert_threshold = _resolve_threshold()

    reserve_query = os.getenv("RESERVE_QUERY") or "supply_cap"
    if reserve_query not in RESERVE_QUERY_MODES:
        raise ConfigurationError(
            f"RESERVE_QUERY must be one of {', '.join(RESERVE_QUERY_MODES)}, got {reserve_query!r}"
        )

    # last: may hit the watch-list API
    watch_list = _resolve_watch_list()

    return MonitorSettings(
        rpc_url=rpc_url,
        data_provider_address=data_provider_address,
        bots=bots,
        watch_list=watch_list,
        alert_threshold=alert_threshold,
        reserve_query=reserve_query,
        pendle_enabled=Config.get_env_bool("PENDLE_CHECK_ENABLED", True),
    )


_settings: Optional[MonitorSettings] = None


def get_settings() -> MonitorSettings:
    """Return the process-wide settings, resolving them on first use."""
    global _settings
    if _settings is None:
        _settings = load_settings()
        logger.info(
            "Loaded config: %s watched assets, query=%s, pendle=%s",
            len(_settings.watch_list),
            _settings.reserve_query,
            _settings.pendle_enabled,
        )
    return _settings


def reset_settings() -> None:
    global _settings
    _settings = None
