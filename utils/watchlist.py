"""Watch list sourcing: inline JSON from the environment or the watch-list API."""

import re
from dataclasses import dataclass
from typing import Any, List

import requests

from utils.logging import get_logger

logger = get_logger("utils.watchlist")

ADDRESS_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")


@dataclass(frozen=True)
class WatchedAsset:
    name: str
    address: str


def is_valid_address(address: str) -> bool:
    return isinstance(address, str) and ADDRESS_PATTERN.match(address) is not None


def parse_watch_list(raw: Any) -> List[WatchedAsset]:
    """
    Build the watch list from decoded ``WATCH_LIST`` JSON.

    Only the shape is checked here. Addresses are passed through as-is, a bad
    one surfaces as an on-chain read failure for that asset.

    Raises:
        ValueError: If the value is not a list of ``{"name", "address"}`` objects
    """
    if not isinstance(raw, list):
        raise ValueError("watch list must be a JSON array")
    assets = []
    for i, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ValueError(f"watch list entry {i} is not an object")
        name, address = item.get("name"), item.get("address")
        if not isinstance(name, str) or not isinstance(address, str):
            raise ValueError(f"watch list entry {i} needs string 'name' and 'address'")
        assets.append(WatchedAsset(name=name, address=address))
    return assets


def parse_stored_items(items: Any) -> List[WatchedAsset]:
    """
    Build the watch list from the API's ``"name:address"`` strings.

    Names may contain ``:``, so the split happens on the last one. Rows whose
    address fails the write API's validation rule are skipped.
    """
    if not isinstance(items, list):
        raise ValueError("watch list items must be a list")
    assets = []
    for item in items:
        if not isinstance(item, str) or ":" not in item:
            raise ValueError(f"malformed watch list item: {item!r}")
        name, address = item.rsplit(":", 1)
        if not is_valid_address(address):
            logger.warning("Skipping watch list item %s with invalid address %s", name, address)
            continue
        assets.append(WatchedAsset(name=name, address=address))
    return assets


def fetch_watch_list(base_url: str, timeout: int = 10) -> List[WatchedAsset]:
    """Read the watch list from ``GET {base_url}/watchlist``."""
    url = f"{base_url.rstrip('/')}/watchlist"
    response = requests.get(url, timeout=timeout)
    response.raise_for_status()
    data = response.json()
    if not isinstance(data, dict):
        raise ValueError(f"unexpected watch list response from {url}")
    assets = parse_stored_items(data.get("items", []))
    logger.info("Fetched %s watch list items from %s", len(assets), url)
    return assets
