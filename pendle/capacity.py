"""Pendle market capacity check against the Pendle backend API."""

import math
from typing import Dict

from utils.config import BotDestination
from utils.formatting import escape_markdown, format_compact
from utils.http import HttpRequestError, get_json
from utils.logging import get_logger
from utils.retry import with_retries
from utils.telegram import send_telegram_message

PROTOCOL = "pendle"
logger = get_logger(PROTOCOL)

PENDLE_MARKETS_URL = "https://api-v2.pendle.finance/bff/v2/markets/all?isActive=true"
PENDLE_MARKET_ADDRESS = "0xcDd26Eb5EB2Ce0f203a84553853667aE69Ca29Ce"
PENDLE_TOTAL_CAP = 2_500_000_000
PENDLE_ALERT_THRESHOLD = 500_000

FETCH_ATTEMPTS = 3
BACKOFF_BASE_SECONDS = 0.2
REQUEST_TIMEOUT = 10  # seconds, per attempt

# the API rejects requests without a browser-like header set
BROWSER_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    "Accept": "application/json, text/plain, */*",
    "Accept-Language": "en-US,en;q=0.9",
    "Origin": "https://app.pendle.finance",
    "Referer": "https://app.pendle.finance/",
    "Cache-Control": "no-cache",
}


class AggregatorFetchError(Exception):
    """The Pendle API could not be read or did not contain what we need."""


class MarketNotFoundError(AggregatorFetchError):
    pass


class InvalidResponseError(AggregatorFetchError):
    pass


def find_market(data, market_address: str) -> dict:
    results = data.get("results") if isinstance(data, dict) else None
    if not isinstance(results, list):
        raise InvalidResponseError("Pendle response has no 'results' list")
    wanted = market_address.lower()
    for market in results:
        if isinstance(market, dict) and str(market.get("address", "")).lower() == wanted:
            return market
    raise MarketNotFoundError(f"Market {market_address} not found in Pendle response")


def read_current_supply(market: dict) -> float:
    extended_info = market.get("extendedInfo")
    raw = extended_info.get("syCurrentSupply") if isinstance(extended_info, dict) else None
    try:
        supply = float(raw)
    except (TypeError, ValueError):
        raise InvalidResponseError(f"Invalid syCurrentSupply: {raw!r}") from None
    if not math.isfinite(supply):
        raise InvalidResponseError(f"Invalid syCurrentSupply: {raw!r}")
    return supply


@with_retries(attempts=FETCH_ATTEMPTS, base_delay=BACKOFF_BASE_SECONDS)
async def fetch_available_capacity(
    market_address: str = PENDLE_MARKET_ADDRESS,
    total_cap: float = PENDLE_TOTAL_CAP,
) -> float:
    """Remaining capacity of the pinned market, ``total_cap - syCurrentSupply``, floored at zero."""
    try:
        data = await get_json(PENDLE_MARKETS_URL, headers=BROWSER_HEADERS, timeout=REQUEST_TIMEOUT)
    except HttpRequestError as e:
        raise AggregatorFetchError(str(e)) from e
    current_supply = read_current_supply(find_market(data, market_address))
    return max(0.0, total_cap - current_supply)


async def check_and_notify(bots: Dict[bool, BotDestination]) -> dict:
    """
    Alert when the market has more than the threshold left.

    Only the "over threshold" case is announced. A fetch that still fails
    after retries is reported to the no-alert bot and returned as an error
    marker; this check never fails the run.
    """
    try:
        available = await fetch_available_capacity()
    except Exception as e:
        logger.error("Pendle capacity check failed: %s", e)
        message = (
            "❌ *Pendle check failed*\n"
            f"Market: `{PENDLE_MARKET_ADDRESS}`\n"
            f"Error: {escape_markdown(f'{type(e).__name__}: {e}')}"
        )
        await send_telegram_message(bots[False], message)
        return {"error": True}

    alerted = available > PENDLE_ALERT_THRESHOLD
    logger.info("Pendle available capacity: %s (alert=%s)", format_compact(available), alerted)
    if alerted:
        message = (
            "⚠️ *Pendle capacity*\n"
            f"• Market: `{PENDLE_MARKET_ADDRESS}`\n"
            f"• Cap: *{format_compact(PENDLE_TOTAL_CAP)}*\n"
            f"• Available: *{format_compact(available)}*\n"
            f"More than {format_compact(PENDLE_ALERT_THRESHOLD)} available!"
        )
        await send_telegram_message(bots[True], message)
    return {"availableCapacity": available, "alerted": alerted}
