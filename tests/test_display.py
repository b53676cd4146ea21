import datetime as dt
import unittest

from windrelay.aggregator import RegionResponse, StationSlot, placeholder_reading
from windrelay.display import format_reading, format_region
from windrelay.readings import build_reading
from windrelay.stations import get_region
from windrelay.units import DISPLAY_UNIT_KMH, DISPLAY_UNIT_KNOTS, knots_to_mps

T0 = dt.datetime(2025, 8, 18, 18, 13, tzinfo=dt.timezone.utc)


def _brambles(**overrides):
    values = dict(
        timestamp=T0,
        wind_speed=knots_to_mps(15.7),
        wind_gust=knots_to_mps(19.2),
        wind_direction=144,
        temperature=19.9,
        pressure=1017.6,
    )
    values.update(overrides)
    return build_reading("brambles", **values)


class TestDisplay(unittest.TestCase):
    def test_full_reading_in_knots(self):
        lines = format_reading(_brambles(), DISPLAY_UNIT_KNOTS, "Brambles Bank")
        self.assertEqual(lines, [
            "=== BRAMBLES BANK ===",
            "",
            "Wind: 15.7kts @ 144°",
            "Gust: 19.2kts",
            "",
            "Temp: 19.9°C",
            "Pressure: 1018 hPa",
            "",
            "Updated: 2025-08-18 18:13:00 UTC",
        ])

    def test_absent_fields_are_omitted(self):
        reading = _brambles(wind_gust=None, temperature=None, pressure=None)
        lines = format_reading(reading, DISPLAY_UNIT_KNOTS)
        self.assertEqual(lines[0], "=== BRAMBLES ===")
        self.assertFalse(any(line.startswith(("Gust", "Temp", "Pressure")) for line in lines))
        self.assertEqual(lines[-1], "Updated: 2025-08-18 18:13:00 UTC")

    def test_gust_hidden_when_equal_after_rounding(self):
        reading = _brambles(wind_gust=knots_to_mps(15.72))
        lines = format_reading(reading, DISPLAY_UNIT_KNOTS)
        self.assertNotIn("Gust: 15.7kts", lines)

    def test_zero_temperature_is_shown(self):
        lines = format_reading(_brambles(temperature=0.0), DISPLAY_UNIT_KNOTS)
        self.assertIn("Temp: 0.0°C", lines)

    def test_kmh_region(self):
        reading = build_reading("prarion", timestamp=T0, wind_speed=10.0, wind_gust=15.0, wind_direction=248)
        lines = format_reading(reading, DISPLAY_UNIT_KMH, "Prarion")
        self.assertIn("Wind: 36.0km/h @ 248°", lines)
        self.assertIn("Gust: 54.0km/h", lines)

    def test_region_blocks(self):
        region = get_region("solent")
        slots = [
            StationSlot("brambles", "Brambles Bank", _brambles()),
            StationSlot("lymington", "Lymington", placeholder_reading("lymington", T0), error="upstream down"),
            StationSlot("seaview", "Seaview", _brambles(), error="timeout", stale=True),
        ]
        lines = format_region(RegionResponse(region=region, generated_at=T0, ttl=300, stations=slots))
        self.assertEqual(lines[0], "=== BRAMBLES BANK ===")
        self.assertIn("=== LYMINGTON ===", lines)
        self.assertIn("No data: upstream down", lines)
        self.assertIn("=== SEAVIEW ===", lines)
        self.assertEqual(lines[-1], "(stale)")


if __name__ == "__main__":
    unittest.main()
