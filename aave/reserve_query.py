"""
Data provider read strategies.

Deployments expose one of two shapes: a direct supply/cap pair
(``getATokenTotalSupply`` + ``getReserveCaps``) or the full
``getReserveData`` struct. Each strategy reduces its raw reads to the same
``ReserveAvailability`` so the threshold logic does not care which one ran.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from utils.formatting import format_magnitude, format_percent

UNIT = 10**18

# getReserveData output positions
RESERVE_DATA_TOTAL_ATOKEN = 2
RESERVE_DATA_TOTAL_STABLE_DEBT = 3
RESERVE_DATA_TOTAL_VARIABLE_DEBT = 4


@dataclass(frozen=True)
class ReserveAvailability:
    current: int
    limit: int
    available: int
    uncapped: bool = False


class ReserveQuery:
    name = ""
    current_label = ""
    limit_label = ""

    async def fetch(self, data_provider, asset_address: str) -> Tuple[Any, ...]:
        raise NotImplementedError

    def compute_availability(self, raw: Tuple[Any, ...]) -> ReserveAvailability:
        raise NotImplementedError

    def describe(self, availability: ReserveAvailability) -> List[str]:
        """Message lines for the current usage, the limit and what is left."""
        if availability.uncapped:
            limit_line = f"• {self.limit_label}: ∞"
        else:
            limit_line = f"• {self.limit_label}: *{format_magnitude(availability.limit)}*"
        return [
            f"• {self.current_label}: *{format_magnitude(availability.current)}*",
            limit_line,
            f"• Available: *{format_magnitude(availability.available)}* "
            f"({format_percent(availability.available, availability.limit)} free)",
        ]


class DirectSupplyCap(ReserveQuery):
    """Headroom to supply: ``supplyCap`` (whole tokens) against aToken total supply."""

    name = "supply_cap"
    current_label = "Total supply"
    limit_label = "Cap"

    async def fetch(self, data_provider, asset_address):
        functions = data_provider.functions
        return tuple(
            await asyncio.gather(
                functions.getATokenTotalSupply(asset_address).call(),
                functions.getReserveCaps(asset_address).call(),
            )
        )

    def compute_availability(self, raw):
        current, caps = raw
        raw_supply_cap = int(caps[1])
        current = int(current)
        cap = raw_supply_cap * UNIT
        if raw_supply_cap == 0:
            # a zero cap means the reserve is uncapped
            return ReserveAvailability(current=current, limit=0, available=0, uncapped=True)
        return ReserveAvailability(current=current, limit=cap, available=max(0, cap - current))


class FullReserveData(ReserveQuery):
    """Headroom to borrow: total supplied against stable plus variable debt."""

    name = "reserve_data"
    current_label = "Total borrowed"
    limit_label = "Total supplied"

    async def fetch(self, data_provider, asset_address):
        return tuple(await data_provider.functions.getReserveData(asset_address).call())

    def compute_availability(self, raw):
        supplied = int(raw[RESERVE_DATA_TOTAL_ATOKEN])
        borrowed = int(raw[RESERVE_DATA_TOTAL_STABLE_DEBT]) + int(raw[RESERVE_DATA_TOTAL_VARIABLE_DEBT])
        return ReserveAvailability(current=borrowed, limit=supplied, available=max(0, supplied - borrowed))


RESERVE_QUERIES: Dict[str, ReserveQuery] = {
    DirectSupplyCap.name: DirectSupplyCap(),
    FullReserveData.name: FullReserveData(),
}


def get_reserve_query(name: str) -> ReserveQuery:
    try:
        return RESERVE_QUERIES[name]
    except KeyError:
        raise ValueError(f"Unknown reserve query: {name}") from None
