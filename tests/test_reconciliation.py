import random
import unittest

from windrelay.data_sources.base import HistoricalTextShape, LiveTextShape
from windrelay.errors import FetchError, TransportError
from windrelay.parsers.navis import parse_live_sample
from windrelay.reconciliation import filtered_temperature, reconcile, summarize_window


def frame_hex(temp_c: float, speed_raw: int, direction: int) -> str:
    """Encode a frame the way the Navis device packs it."""
    msb = int(round(temp_c * 10 + 400))
    lsb = (speed_raw << 16) | (direction << 7)
    return f"{msb:x}{lsb:08x}"


def history(*frames, start=1755540000):
    return HistoricalTextShape(raw=",".join(f"{start + i * 2}:{h}" for i, h in enumerate(frames)))


class TestSummarizeWindow(unittest.TestCase):
    def test_wind_statistics(self):
        pairs = [(1, frame_hex(15.0, 30, 180)), (2, frame_hex(15.2, 40, 190)), (3, frame_hex(40.0, 50, 200))]
        summary = summarize_window(pairs)
        self.assertAlmostEqual(summary.avg_knots, 4.0 * 1.94384449)
        self.assertAlmostEqual(summary.gust_knots, 5.0 * 1.94384449)
        self.assertEqual(summary.direction, 190)
        # 40.0 is more than 8 degrees from the median and is dropped
        self.assertEqual(summary.temperature, 15.1)
        self.assertEqual(summary.sample_count, 3)

    def test_keeps_only_newest_samples_after_sorting(self):
        old = [(i, frame_hex(15.0, 500, 90)) for i in range(5)]
        recent = [(100 + i, frame_hex(15.0, 10, 90)) for i in range(30)]
        pairs = old + recent
        random.Random(7).shuffle(pairs)
        summary = summarize_window(pairs, max_samples=30)
        self.assertEqual(summary.sample_count, 30)
        self.assertAlmostEqual(summary.gust_knots, 1.0 * 1.94384449)
        self.assertEqual(summary.newest.timestamp(), 129)

    def test_gust_never_below_average(self):
        rng = random.Random(42)
        for _ in range(50):
            pairs = [(i, frame_hex(12.0, rng.randint(0, 400), rng.randint(0, 359))) for i in range(rng.randint(1, 40))]
            summary = summarize_window(pairs)
            self.assertGreaterEqual(summary.gust_knots, summary.avg_knots)

    def test_direction_is_arithmetic_mean(self):
        summary = summarize_window([(1, frame_hex(10.0, 10, 350)), (2, frame_hex(10.0, 10, 10))])
        self.assertEqual(summary.direction, 180)

    def test_nothing_decodable(self):
        self.assertIsNone(summarize_window([]))

    def test_filtered_temperature_falls_back_to_median(self):
        self.assertEqual(filtered_temperature([0.0, 20.0]), 10.0)
        self.assertEqual(filtered_temperature([14.0, 16.0, 15.0]), 15.0)


class TestReconcile(unittest.TestCase):
    def test_live_temperature_always_overrides(self):
        hist = history(frame_hex(15.0, 30, 180), frame_hex(15.2, 40, 190), frame_hex(15.4, 50, 200))
        live = LiveTextShape(raw=f"1755540100:1:{frame_hex(14.3, 35, 185)}")
        reading = reconcile("seaview", hist, live)
        self.assertTrue(reading.is_valid)
        self.assertEqual(reading.temperature, 14.3)
        self.assertAlmostEqual(reading.wind_speed, 4.0 * 1.94384449 * 0.514444)
        self.assertAlmostEqual(reading.wind_gust, 5.0 * 1.94384449 * 0.514444)
        self.assertGreaterEqual(reading.wind_gust, reading.wind_speed)
        self.assertEqual(reading.wind_direction, 190)
        self.assertEqual(int(reading.timestamp.timestamp()), 1755540004)

    def test_implausible_live_temperature_keeps_historical_value(self):
        hist = history(frame_hex(15.0, 30, 180), frame_hex(15.0, 40, 190))
        # temp_raw 0x7FF decodes to 164.7 degrees
        live = LiveTextShape(raw=f"1755540100:1:7ff{(35 << 16) | (185 << 7):08x}")
        reading = reconcile("seaview", hist, live)
        self.assertEqual(reading.temperature, 15.0)
        self.assertTrue(reading.is_valid)

    def test_millisecond_history_timestamps(self):
        hist = HistoricalTextShape(raw=f"1755540000000:{frame_hex(15.0, 30, 180)},"
                                       f"1755540002000:{frame_hex(15.0, 40, 190)}")
        reading = reconcile("seaview", hist, TransportError("navis_binary", "timeout"))
        self.assertEqual(int(reading.timestamp.timestamp()), 1755540002)

    def test_live_fallback_matches_live_parser(self):
        live = LiveTextShape(raw="1755540780:1:22600255e5f")
        reading = reconcile("seaview", TransportError("navis_binary", "HTTP 500"), live)
        expected = parse_live_sample(live, "seaview")
        self.assertEqual(reading.wind_speed, expected.wind_speed)
        self.assertEqual(reading.wind_direction, expected.wind_direction)
        self.assertEqual(reading.timestamp, expected.timestamp)

    def test_live_failure_keeps_historical_temperature(self):
        hist = history(frame_hex(15.0, 30, 180), frame_hex(15.2, 40, 190))
        reading = reconcile("seaview", hist, TransportError("navis_binary", "timeout"))
        self.assertEqual(reading.temperature, 15.1)

    def test_historical_failure_falls_back_to_live_with_null_gust(self):
        live = LiveTextShape(raw="1755540780:1:22600255e5f")
        reading = reconcile("seaview", TransportError("navis_binary", "HTTP 500"), live)
        self.assertTrue(reading.is_valid)
        self.assertIsNone(reading.wind_gust)
        self.assertIsNotNone(reading.wind_speed)
        self.assertEqual(reading.temperature, 15.0)

    def test_undecodable_history_falls_back_to_live(self):
        live = LiveTextShape(raw="1755540780:1:22600255e5f")
        reading = reconcile("seaview", HistoricalTextShape(raw="garbage,more garbage"), live)
        self.assertIsNone(reading.wind_gust)

    def test_both_failing_fails_the_station(self):
        result = reconcile(
            "seaview",
            TransportError("navis_binary", "HTTP 500"),
            TransportError("navis_binary", "timeout"),
        )
        self.assertIsInstance(result, FetchError)


if __name__ == "__main__":
    unittest.main()
