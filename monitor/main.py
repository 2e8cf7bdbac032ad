"""
Scheduled entry point: one run checks every watched reserve and the Pendle
market, then returns a Lambda-style ``{"statusCode", "body"}`` response.
"""

import asyncio
import json
import sys

from aave.reserve_query import get_reserve_query
from aave.supply_caps import ABI_DATA_PROVIDER, check_watch_list
from pendle.capacity import check_and_notify
from utils.config import ConfigurationError, MonitorSettings, get_settings
from utils.logging import get_logger
from utils.web3_wrapper import ChainManager

logger = get_logger("monitor")


def _response(status_code: int, body) -> dict:
    return {"statusCode": status_code, "body": json.dumps(body, indent=2)}


async def run_checks(settings: MonitorSettings):
    """Run the reserve checks and the Pendle check concurrently and collect the results."""
    client = ChainManager.get_client(settings.rpc_url)
    data_provider = client.get_contract(settings.data_provider_address, ABI_DATA_PROVIDER)
    query = get_reserve_query(settings.reserve_query)

    assets_task = check_watch_list(
        settings.watch_list, data_provider, query, settings.alert_threshold, settings.bots
    )
    if not settings.pendle_enabled:
        snapshots = await assets_task
        return [snapshot.to_dict() for snapshot in snapshots]

    snapshots, pendle = await asyncio.gather(assets_task, check_and_notify(settings.bots))
    return {"assets": [snapshot.to_dict() for snapshot in snapshots], "pendle": pendle}


def handler(event=None, context=None) -> dict:
    """Lambda handler. Errors are reported in the response, never retried here."""
    try:
        settings = get_settings()
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        return _response(500, {"error": str(e)})

    try:
        body = asyncio.run(run_checks(settings))
    except Exception as e:
        logger.exception("Handler error")
        return _response(500, {"error": str(e) or type(e).__name__})
    return _response(200, body)


def main():
    response = handler()
    logger.info("Run finished with status %s:\n%s", response["statusCode"], response["body"])
    if response["statusCode"] != 200:
        sys.exit(1)


if __name__ == "__main__":
    main()
