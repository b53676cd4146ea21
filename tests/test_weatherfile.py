import datetime as dt
import unittest

import httpx

from windrelay.data_sources.base import FallbackJsonShape, PrimaryJsonShape
from windrelay.data_sources.weatherfile import WeatherfileAdapter
from windrelay.errors import FetchError
from windrelay.parsers.weatherfile import parse_weatherfile_sample
from windrelay.retry import RetryPolicy

PRIMARY = {"status": "ok", "data": {"wsa": 10.0, "wsh": 15.0, "wda": 225, "ts": "2025-08-18 18:10:00"}}
FALLBACK = {"status": "ok", "data": {"wsc": 8.0, "wdc": 200, "ts": "2025-08-18T18:12:00Z"}}


async def _no_sleep(_delay):
    return None


def _adapter(handler, attempts=3):
    return WeatherfileAdapter(
        base_url="https://wf.example/V03/loc/",
        location="GBR00001",
        token="PUBLIC",
        retry=RetryPolicy(max_attempts=attempts, sleep=_no_sleep),
        transport=httpx.MockTransport(handler),
    )


class TestWeatherfileAdapter(unittest.IsolatedAsyncioTestCase):
    async def test_primary_endpoint(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=PRIMARY)

        sample = await _adapter(handler).fetch()
        self.assertIsInstance(sample, PrimaryJsonShape)
        request = seen[0]
        self.assertEqual(request.method, "POST")
        self.assertEqual(request.headers["wf-tkn"], "PUBLIC")
        self.assertEqual(request.content, b"")
        self.assertEqual(str(request.url), "https://wf.example/V03/loc/GBR00001/infowindow.ajax")

    async def test_http_error_falls_back(self):
        def handler(request):
            if request.url.path.endswith("infowindow.ajax"):
                return httpx.Response(500, text="oops")
            return httpx.Response(200, json=FALLBACK)

        sample = await _adapter(handler).fetch()
        self.assertIsInstance(sample, FallbackJsonShape)

    async def test_schema_mismatch_falls_back(self):
        def handler(request):
            if request.url.path.endswith("infowindow.ajax"):
                return httpx.Response(200, json={"status": "ok", "data": {"unexpected": 1}})
            return httpx.Response(200, json=FALLBACK)

        sample = await _adapter(handler).fetch()
        self.assertIsInstance(sample, FallbackJsonShape)

    async def test_both_endpoints_failing_is_an_error(self):
        calls = []

        def handler(request):
            calls.append(request.url.path)
            return httpx.Response(200, text="not json")

        result = await _adapter(handler, attempts=2).fetch()
        self.assertIsInstance(result, FetchError)
        self.assertEqual(result.attempts, 2)
        self.assertEqual(len(calls), 4)


class TestWeatherfileParser(unittest.TestCase):
    def test_primary_has_gust(self):
        reading = parse_weatherfile_sample(PrimaryJsonShape.model_validate(PRIMARY), "lymington")
        self.assertTrue(reading.is_valid)
        self.assertAlmostEqual(reading.wind_speed, 10.0 * 0.514444)
        self.assertAlmostEqual(reading.wind_gust, 15.0 * 0.514444)
        self.assertEqual(reading.wind_direction, 225)
        self.assertEqual(reading.timestamp, dt.datetime(2025, 8, 18, 18, 10, tzinfo=dt.timezone.utc))
        self.assertIsNone(reading.temperature)

    def test_fallback_has_no_gust(self):
        reading = parse_weatherfile_sample(FallbackJsonShape.model_validate(FALLBACK), "lymington")
        self.assertTrue(reading.is_valid)
        self.assertAlmostEqual(reading.wind_speed, 8.0 * 0.514444)
        self.assertIsNone(reading.wind_gust)
        self.assertEqual(reading.wind_direction, 200)


if __name__ == "__main__":
    unittest.main()
