import datetime as dt
import unittest

from windrelay.cache_store.redis import RedisReadingCache
from windrelay.readings import build_reading


class FakeAsyncRedis:
    def __init__(self):
        self.store = {}
        self.expires = {}

    async def setex(self, key, ttl, value):
        self.store[key] = value
        self.expires[key] = ttl

    async def get(self, key):
        return self.store.get(key)

    async def delete(self, key):
        self.store.pop(key, None)
        self.expires.pop(key, None)

    async def scan_iter(self, pattern):
        prefix = pattern.rstrip("*")
        for k in list(self.store.keys()):
            if k.startswith(prefix):
                yield k


class TestRedisReadingCache(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.client = FakeAsyncRedis()
        self.cache = RedisReadingCache(self.client, prefix="wr:")
        self.reading = build_reading(
            "seaview",
            timestamp=dt.datetime(2025, 8, 18, 18, 10, tzinfo=dt.timezone.utc),
            wind_speed=3.7,
            wind_gust=None,
            wind_direction=188,
            temperature=15.0,
            source="navis_binary",
        )

    async def test_setex_with_ttl_and_prefix(self):
        await self.cache.put("seaview:1755540600000", self.reading, 300)
        self.assertIn("wr:seaview:1755540600000", self.client.store)
        self.assertEqual(self.client.expires["wr:seaview:1755540600000"], 300)

    async def test_reading_survives_serialization(self):
        await self.cache.put("seaview:1", self.reading, 300)
        loaded = await self.cache.get("seaview:1")
        self.assertEqual(loaded, self.reading)
        self.assertIsNone(loaded.wind_gust)
        self.assertIsNone(loaded.pressure)
        self.assertEqual(loaded.timestamp.tzinfo, dt.timezone.utc)

    async def test_missing_key(self):
        self.assertIsNone(await self.cache.get("nope"))

    async def test_corrupt_payload_is_a_miss(self):
        self.client.store["wr:seaview:1"] = b"{not json"
        self.assertIsNone(await self.cache.get("seaview:1"))

    async def test_clear_only_touches_prefix(self):
        await self.cache.put("seaview:1", self.reading, 300)
        self.client.store["other:key"] = b"x"
        await self.cache.clear()
        self.assertEqual(list(self.client.store), ["other:key"])


if __name__ == "__main__":
    unittest.main()
