import asyncio
from dataclasses import dataclass
from typing import Dict, List

from web3 import AsyncWeb3

from aave.reserve_query import ReserveAvailability, ReserveQuery
from utils.abi import load_abi
from utils.config import BotDestination
from utils.formatting import format_magnitude
from utils.logging import get_logger
from utils.telegram import send_telegram_message
from utils.watchlist import WatchedAsset

PROTOCOL = "aave"
logger = get_logger(PROTOCOL)

ABI_DATA_PROVIDER = load_abi("abi/PoolDataProvider.json", relative_to=__file__)


class OnChainReadError(Exception):
    """A data provider call for a watched asset failed."""


@dataclass(frozen=True)
class ReserveSnapshot:
    name: str
    current: int
    cap: int
    available: int
    alert: bool

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "current": str(self.current),
            "supplyCap": str(self.cap),
            "available": str(self.available),
            "alert": self.alert,
        }


def build_message(
    name: str,
    query: ReserveQuery,
    availability: ReserveAvailability,
    threshold: int,
    alert: bool,
) -> str:
    threshold_fmt = format_magnitude(threshold)
    if alert:
        verdict = f"⚠️ *Alert* – ≥ {threshold_fmt} tokens available!"
    else:
        verdict = f"✅ No alert – less than {threshold_fmt} available."
    return "\n".join([f"*{name}*", *query.describe(availability), verdict])


async def check_asset(
    asset: WatchedAsset,
    data_provider,
    query: ReserveQuery,
    threshold: int,
    bots: Dict[bool, BotDestination],
) -> ReserveSnapshot:
    """
    Read one reserve, evaluate it against the threshold and notify.

    The message goes to the alert bot when at least ``threshold`` is available
    and to the no-alert bot otherwise.

    Raises:
        OnChainReadError: If the address is unusable or any contract call fails
    """
    try:
        address = AsyncWeb3.to_checksum_address(asset.address)
        raw = await query.fetch(data_provider, address)
    except Exception as e:
        raise OnChainReadError(f"Failed to read reserve {asset.name} ({asset.address}): {e}") from e

    availability = query.compute_availability(raw)
    alert = availability.available >= threshold
    logger.info(
        "%s: current=%s limit=%s available=%s alert=%s",
        asset.name,
        availability.current,
        "uncapped" if availability.uncapped else availability.limit,
        availability.available,
        alert,
    )

    message = build_message(asset.name, query, availability, threshold, alert)
    await send_telegram_message(bots[alert], message)

    return ReserveSnapshot(
        name=asset.name,
        current=availability.current,
        cap=availability.limit,
        available=availability.available,
        alert=alert,
    )


async def check_watch_list(
    watch_list: List[WatchedAsset],
    data_provider,
    query: ReserveQuery,
    threshold: int,
    bots: Dict[bool, BotDestination],
) -> List[ReserveSnapshot]:
    """Check every watched asset concurrently; the first read failure fails the batch."""
    return list(
        await asyncio.gather(
            *(check_asset(asset, data_provider, query, threshold, bots) for asset in watch_list)
        )
    )
