import datetime as dt
import unittest

from windrelay.data_sources.base import HistoricalTextShape, LiveTextShape
from windrelay.errors import ParseError
from windrelay.parsers import navis


class TestNavisDecoder(unittest.TestCase):
    def test_reference_frame(self):
        frame = navis.decode_navis_hex("22600255e5f")
        self.assertEqual(frame.msb, 0x226)
        self.assertEqual(frame.lsb, 0x00255E5F)
        self.assertEqual(frame.temp_raw, 550)
        self.assertEqual(frame.speed_raw, 37)
        self.assertEqual(frame.direction_raw, 188)
        self.assertAlmostEqual(frame.temperature, 15.0)
        self.assertAlmostEqual(frame.speed_ms, 3.7)
        self.assertAlmostEqual(frame.speed_knots, 3.7 * 1.94384449)
        self.assertEqual(frame.direction, 188)

    def test_temperature_mask_uses_low_11_bits(self):
        # high MSB bits are ignored
        frame = navis.decode_navis_hex("fa2600255e5f")
        self.assertEqual(frame.temp_raw, 550)

    def test_eight_digit_frame_has_zero_msb(self):
        frame = navis.decode_navis_hex("00255e5f")
        self.assertEqual(frame.msb, 0)
        self.assertEqual(frame.temp_raw, 0)
        self.assertAlmostEqual(frame.temperature, -40.0)

    def test_trailing_percent_is_stripped(self):
        frame = navis.decode_navis_hex("22600255e5f%")
        self.assertEqual(frame.speed_raw, 37)

    def test_short_or_invalid_hex_raises(self):
        with self.assertRaises(ValueError):
            navis.decode_navis_hex("1234")
        with self.assertRaises(ValueError):
            navis.decode_navis_hex("zz600255e5f")

    def test_live_record_has_no_gust(self):
        reading = navis.parse_live_sample(LiveTextShape(raw="1755540780:1:22600255e5f%"), "seaview")
        self.assertTrue(reading.is_valid)
        self.assertIsNone(reading.wind_gust)
        self.assertAlmostEqual(reading.wind_speed, 3.7 * 1.94384449 * 0.514444, places=6)
        self.assertEqual(reading.wind_direction, 188)
        self.assertEqual(reading.temperature, 15.0)
        self.assertEqual(reading.timestamp, dt.datetime.fromtimestamp(1755540780, tz=dt.timezone.utc))

    def test_live_record_with_too_few_parts(self):
        result = navis.parse_live_sample(LiveTextShape(raw="1755540780:22600255e5f"), "seaview")
        self.assertIsInstance(result, ParseError)
        self.assertIn("1755540780", result.raw_excerpt)

    def test_historical_pairs_skip_malformed_entries(self):
        raw = "100:22600255e5f, garbage ,abc:22600255e5f,200:12,300:22600255e5f%,:22600255e5f"
        pairs = navis.parse_historical_pairs(HistoricalTextShape(raw=raw))
        self.assertEqual(pairs, [(100, "22600255e5f"), (300, "22600255e5f")])


if __name__ == "__main__":
    unittest.main()
