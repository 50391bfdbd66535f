import unittest
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from quotehub.services.market_hours import iso_instant, trading_day_close


class TestMarketCloseAnchor(unittest.TestCase):
    def test_summer_trading_day_closes_at_2000_utc(self):
        closed_at = trading_day_close("2024-05-17")
        self.assertEqual(closed_at, datetime(2024, 5, 17, 16, 0, tzinfo=ZoneInfo("America/New_York")))
        self.assertEqual(iso_instant(closed_at), "2024-05-17T20:00:00.000Z")

    def test_winter_trading_day_closes_at_2100_utc(self):
        self.assertEqual(iso_instant(trading_day_close("2024-01-05")), "2024-01-05T21:00:00.000Z")

    def test_invalid_or_missing_trading_day_returns_none(self):
        self.assertIsNone(trading_day_close(None))
        self.assertIsNone(trading_day_close(""))
        self.assertIsNone(trading_day_close("yesterday"))
        self.assertIsNone(trading_day_close("2024-13-40"))

    def test_iso_instant_treats_naive_datetime_as_utc(self):
        self.assertEqual(iso_instant(datetime(2026, 1, 2, 3, 4, 5, 678000)), "2026-01-02T03:04:05.678Z")

    def test_iso_instant_defaults_to_now(self):
        before = datetime.now(timezone.utc).replace(microsecond=0)
        value = iso_instant()
        self.assertTrue(value.endswith("Z"))
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        self.assertGreaterEqual(parsed, before)


if __name__ == "__main__":
    unittest.main()
