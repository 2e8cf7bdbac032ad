"""Tests for pendle/capacity.py."""

import unittest
from unittest.mock import AsyncMock, patch

from pendle.capacity import (
    PENDLE_MARKET_ADDRESS,
    InvalidResponseError,
    MarketNotFoundError,
    check_and_notify,
    fetch_available_capacity,
    find_market,
    read_current_supply,
)
from utils.config import BotDestination
from utils.http import HttpRequestError

ALERT_BOT = BotDestination("alert-token", "alert-chat")
QUIET_BOT = BotDestination("quiet-token", "quiet-chat")
BOTS = {True: ALERT_BOT, False: QUIET_BOT}


def markets_response(supply, address=PENDLE_MARKET_ADDRESS):
    return {
        "results": [
            {"address": "0x" + "00" * 20, "extendedInfo": {"syCurrentSupply": "1"}},
            {"address": address.lower(), "extendedInfo": {"syCurrentSupply": supply}},
        ]
    }


class TestParsing(unittest.TestCase):
    def test_find_market_is_case_insensitive(self):
        market = find_market(markets_response("5"), PENDLE_MARKET_ADDRESS.upper().replace("0X", "0x"))
        self.assertEqual(market["extendedInfo"]["syCurrentSupply"], "5")

    def test_missing_market(self):
        with self.assertRaises(MarketNotFoundError):
            find_market({"results": []}, PENDLE_MARKET_ADDRESS)

    def test_missing_results(self):
        for data in ({}, {"results": None}, [], None):
            with self.subTest(data=data):
                with self.assertRaises(InvalidResponseError):
                    find_market(data, PENDLE_MARKET_ADDRESS)

    def test_invalid_supply(self):
        for market in ({}, {"extendedInfo": {}}, {"extendedInfo": {"syCurrentSupply": "abc"}},
                       {"extendedInfo": {"syCurrentSupply": "NaN"}}, {"extendedInfo": {"syCurrentSupply": "inf"}}):
            with self.subTest(market=market):
                with self.assertRaises(InvalidResponseError):
                    read_current_supply(market)

    def test_numeric_string_supply(self):
        self.assertEqual(read_current_supply({"extendedInfo": {"syCurrentSupply": "2000000000.5"}}), 2_000_000_000.5)


@patch("utils.retry.asyncio.sleep", new_callable=AsyncMock)
@patch("pendle.capacity.get_json", new_callable=AsyncMock)
class TestFetchAvailableCapacity(unittest.IsolatedAsyncioTestCase):
    async def test_available_capacity(self, mock_get, mock_sleep):
        mock_get.return_value = markets_response("2000000000")
        self.assertEqual(await fetch_available_capacity(), 500_000_000)
        mock_sleep.assert_not_awaited()
        self.assertIn("User-Agent", mock_get.call_args.kwargs["headers"])

    async def test_over_cap_floors_at_zero(self, mock_get, mock_sleep):
        mock_get.return_value = markets_response("3000000000")
        self.assertEqual(await fetch_available_capacity(), 0)

    async def test_fails_twice_then_succeeds(self, mock_get, mock_sleep):
        mock_get.side_effect = [
            HttpRequestError("HTTP 502"),
            {"results": []},
            markets_response("2400000000"),
        ]
        self.assertEqual(await fetch_available_capacity(), 100_000_000)
        self.assertEqual(mock_get.await_count, 3)
        self.assertEqual([c.args[0] for c in mock_sleep.await_args_list], [0.2, 0.4])

    async def test_exhausted_reraises_last_error(self, mock_get, mock_sleep):
        mock_get.side_effect = [HttpRequestError("HTTP 502"), HttpRequestError("HTTP 502"), {"results": []}]
        with self.assertRaises(MarketNotFoundError):
            await fetch_available_capacity()
        self.assertEqual(mock_get.await_count, 3)
        self.assertEqual(mock_sleep.await_count, 2)


@patch("utils.retry.asyncio.sleep", new_callable=AsyncMock)
@patch("pendle.capacity.send_telegram_message", new_callable=AsyncMock)
@patch("pendle.capacity.get_json", new_callable=AsyncMock)
class TestCheckAndNotify(unittest.IsolatedAsyncioTestCase):
    async def test_over_threshold_alerts_once(self, mock_get, mock_send, mock_sleep):
        mock_get.return_value = markets_response("2000000000")

        result = await check_and_notify(BOTS)

        self.assertEqual(result, {"availableCapacity": 500_000_000, "alerted": True})
        mock_send.assert_awaited_once()
        destination, message = mock_send.call_args.args
        self.assertIs(destination, ALERT_BOT)
        self.assertIn("*500 M*", message)

    async def test_under_threshold_is_silent(self, mock_get, mock_send, mock_sleep):
        mock_get.return_value = markets_response("2499600000")

        result = await check_and_notify(BOTS)

        self.assertEqual(result, {"availableCapacity": 400_000, "alerted": False})
        mock_send.assert_not_awaited()

    async def test_exactly_at_threshold_is_silent(self, mock_get, mock_send, mock_sleep):
        mock_get.return_value = markets_response("2499500000")
        result = await check_and_notify(BOTS)
        self.assertFalse(result["alerted"])
        mock_send.assert_not_awaited()

    async def test_persistent_failure_reports_to_no_alert_bot(self, mock_get, mock_send, mock_sleep):
        mock_get.side_effect = HttpRequestError("Timed out after 10s for pendle_api")

        with self.assertLogs("pendle", level="ERROR"):
            result = await check_and_notify(BOTS)

        self.assertEqual(result, {"error": True})
        self.assertEqual(mock_get.await_count, 3)
        mock_send.assert_awaited_once()
        destination, message = mock_send.call_args.args
        self.assertIs(destination, QUIET_BOT)
        self.assertIn("AggregatorFetchError", message)
        self.assertIn("pendle\\_api", message)

    async def test_notification_failure_is_contained(self, mock_get, mock_send, mock_sleep):
        mock_get.return_value = markets_response("1")
        mock_send.return_value = False
        result = await check_and_notify(BOTS)
        self.assertTrue(result["alerted"])


if __name__ == "__main__":
    unittest.main()
