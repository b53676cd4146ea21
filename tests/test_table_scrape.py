import datetime as dt
import unittest

import httpx

from windrelay.config import Settings
from windrelay.data_sources.base import HtmlTableSample
from windrelay.data_sources.table_scrape import TableScrapeAdapter
from windrelay.errors import ParseError, TransportError
from windrelay.parsers.html_table import parse_table_sample
from windrelay.retry import RetryPolicy

ROWS = {
    "Wind Speed": "15.7 Knots",
    "Max Gust": "19.2 Knots",
    "Wind Direction": "144 Degree",
    "Air Temp": "19.9 C",
    "Pressure": "1017.6 mBar",
    "Updated": "<div>18/08/2025 18:13:00</div>",
}


def _html(rows=None):
    rows = ROWS if rows is None else rows
    body = "".join(f"<tr><td>{label}</td><td>{value}</td></tr>" for label, value in rows.items())
    return f"<html><body><table>{body}</table></body></html>"


async def _no_sleep(_delay):
    return None


class TestTableParser(unittest.TestCase):
    def test_full_snapshot(self):
        reading = parse_table_sample(HtmlTableSample(html=_html()), "brambles")
        self.assertTrue(reading.is_valid)
        self.assertAlmostEqual(reading.wind_speed, 15.7 * 0.514444)
        self.assertAlmostEqual(reading.wind_speed, 8.08, places=2)
        self.assertAlmostEqual(reading.wind_gust, 19.2 * 0.514444)
        self.assertEqual(reading.wind_direction, 144)
        self.assertEqual(reading.temperature, 19.9)
        self.assertEqual(reading.pressure, 1017.6)
        self.assertEqual(reading.timestamp, dt.datetime(2025, 8, 18, 18, 13, tzinfo=dt.timezone.utc))

    def test_missing_labels_are_none(self):
        rows = {k: v for k, v in ROWS.items() if k not in ("Max Gust", "Air Temp", "Updated")}
        reading = parse_table_sample(HtmlTableSample(html=_html(rows)), "brambles")
        self.assertIsNone(reading.wind_gust)
        self.assertIsNone(reading.temperature)
        self.assertTrue(reading.is_valid)
        self.assertIsNotNone(reading.timestamp.tzinfo)

    def test_calm_is_zero_not_none(self):
        rows = {**ROWS, "Wind Speed": "0.0 Knots"}
        reading = parse_table_sample(HtmlTableSample(html=_html(rows)), "brambles")
        self.assertEqual(reading.wind_speed, 0.0)
        self.assertTrue(reading.is_valid)

    def test_out_of_range_values_become_none(self):
        rows = {**ROWS, "Pressure": "1500.0 mBar", "Air Temp": "99.0 C", "Wind Direction": "370 Degree"}
        reading = parse_table_sample(HtmlTableSample(html=_html(rows)), "brambles")
        self.assertIsNone(reading.pressure)
        self.assertIsNone(reading.temperature)
        self.assertEqual(reading.wind_direction, 10)

    def test_no_table_is_parse_error(self):
        html = "<html>" + "x" * 1000 + "</html>"
        result = parse_table_sample(HtmlTableSample(html=html), "brambles")
        self.assertIsInstance(result, ParseError)
        self.assertLessEqual(len(result.raw_excerpt.encode("utf-8")), 200)


class TestTableScrapeAdapter(unittest.IsolatedAsyncioTestCase):
    async def test_fetch_returns_html_sample(self):
        def handler(request):
            self.assertEqual(request.method, "GET")
            self.assertEqual(request.headers.get("referer"), "https://ref.example/")
            return httpx.Response(200, text=_html())

        adapter = TableScrapeAdapter(
            "https://vts.example/snapshot",
            referer="https://ref.example/",
            settings=Settings(),
            retry=RetryPolicy(sleep=_no_sleep),
            transport=httpx.MockTransport(handler),
        )
        sample = await adapter.fetch()
        self.assertIsInstance(sample, HtmlTableSample)
        self.assertIn("Wind Speed", sample.html)

    async def test_retries_after_server_error(self):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) < 3:
                return httpx.Response(503, text="busy")
            return httpx.Response(200, text=_html())

        delays = []

        async def record_sleep(delay):
            delays.append(delay)

        adapter = TableScrapeAdapter(
            "https://vts.example/snapshot",
            retry=RetryPolicy(max_attempts=3, initial_delay=2.0, backoff=1.5, sleep=record_sleep),
            transport=httpx.MockTransport(handler),
        )
        sample = await adapter.fetch()
        self.assertIsInstance(sample, HtmlTableSample)
        self.assertEqual(len(calls), 3)
        self.assertEqual(delays, [2.0, 3.0])

    async def test_short_body_exhausts_retries(self):
        adapter = TableScrapeAdapter(
            "https://vts.example/snapshot",
            retry=RetryPolicy(max_attempts=3, sleep=_no_sleep),
            transport=httpx.MockTransport(lambda request: httpx.Response(200, text="<p/>")),
        )
        result = await adapter.fetch()
        self.assertIsInstance(result, TransportError)
        self.assertEqual(result.attempts, 3)


if __name__ == "__main__":
    unittest.main()
