"""
Tests for geolocation resolution and aggregation.
"""
import asyncio
import json
import time
from datetime import timedelta

import httpx
import pytest
from freezegun import freeze_time

from shortlink_app.cache.strategies import CacheStrategy, InMemoryCache
from shortlink_app.geolocation.aggregation import aggregate, percentage
from shortlink_app.geolocation.resolver import GeolocationResolver, is_private_ip
from shortlink_app.schemas.geolocation import GeolocationRecord


def record(country_code, lat, lon, country=None, city=""):
    return GeolocationRecord(
        country=country or country_code,
        country_code=country_code,
        city=city,
        lat=lat,
        lon=lon,
    )


class BrokenCache(CacheStrategy):
    """Cache whose backend raises on every call"""

    async def get(self, key):
        raise ConnectionError("cache down")

    async def set(self, key, value, ttl=3600):
        raise ConnectionError("cache down")

    async def delete(self, key):
        raise ConnectionError("cache down")

    async def exists(self, key):
        raise ConnectionError("cache down")

    async def clear(self):
        raise ConnectionError("cache down")


class TestPrivateIP:

    @pytest.mark.parametrize("ip", [
        "127.0.0.1", "::1", "localhost", "0.0.0.0",
        "192.168.1.20", "10.1.2.3", "172.16.0.9", "",
    ])
    def test_private_addresses(self, ip):
        assert is_private_ip(ip)

    @pytest.mark.parametrize("ip", ["8.8.8.8", "1.1.1.1", "2001:4860:4860::8888", "172.32.0.1"])
    def test_public_addresses(self, ip):
        assert not is_private_ip(ip)


class TestGeolocationResolver:

    def test_loopback_skips_provider_and_cache(self, resolver, geo_provider, cache):
        geo = asyncio.run(resolver.resolve("127.0.0.1"))

        assert geo.country == "Unknown"
        assert geo.country_code == "UN"
        assert geo.lat == 0 and geo.lon == 0
        assert geo.query == "127.0.0.1"
        assert geo_provider.call_count == 0
        assert asyncio.run(cache.exists("ip_geo:127.0.0.1")) is False

    def test_resolves_public_ip(self, resolver, geo_provider):
        geo = asyncio.run(resolver.resolve("8.8.8.8"))

        assert geo.country == "United States"
        assert geo.country_code == "US"
        assert geo.city == "New York"
        assert geo.region_name == "New York"
        assert (geo.lat, geo.lon) == (40.0, -74.0)
        assert geo_provider.call_count == 1

        request = geo_provider.requests[0]
        assert request.url.path == "/json/8.8.8.8"
        assert "countryCode" in request.url.params["fields"]

    def test_second_lookup_is_served_from_cache(self, resolver, geo_provider, cache):
        asyncio.run(resolver.resolve("8.8.8.8"))
        geo = asyncio.run(resolver.resolve("8.8.8.8"))

        assert geo.country_code == "US"
        assert geo_provider.call_count == 1

        cached = json.loads(asyncio.run(cache.get("ip_geo:8.8.8.8")))
        assert cached["countryCode"] == "US"

    def test_provider_fail_status_degrades_to_unknown(self, resolver, geo_provider, cache):
        geo = asyncio.run(resolver.resolve("203.0.113.7"))

        assert geo.country == "Unknown"
        assert geo_provider.call_count == 1
        # failures are not cached
        assert asyncio.run(cache.get("ip_geo:203.0.113.7")) is None

    @pytest.mark.parametrize("handler", [
        lambda request: httpx.Response(500, text="boom"),
        lambda request: httpx.Response(200, text="<html>not json</html>"),
        lambda request: httpx.Response(200, json={"status": "success", "city": "Nowhere"}),
        lambda request: httpx.Response(200, json=["unexpected"]),
    ])
    def test_bad_responses_degrade_to_unknown(self, cache, handler):
        resolver = GeolocationResolver(cache=cache, transport=httpx.MockTransport(handler))

        geo = asyncio.run(resolver.resolve("8.8.8.8"))

        assert geo.country == "Unknown"
        assert geo.query == "8.8.8.8"

    def test_network_errors_degrade_to_unknown(self, cache):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        resolver = GeolocationResolver(cache=cache, transport=httpx.MockTransport(handler))

        geo = asyncio.run(resolver.resolve("8.8.8.8"))

        assert geo.country == "Unknown"

    def test_cache_outage_fails_open(self, geo_provider):
        resolver = GeolocationResolver(cache=BrokenCache(), transport=httpx.MockTransport(geo_provider))

        geo = asyncio.run(resolver.resolve("8.8.8.8"))

        # get() failing is treated like any other failure: fail open
        assert geo.country == "Unknown"

    def test_cached_entry_expires(self, geo_provider):
        resolver = GeolocationResolver(
            cache=InMemoryCache(), cache_ttl=60, transport=httpx.MockTransport(geo_provider)
        )

        with freeze_time("2026-01-01 12:00:00", real_asyncio=True) as frozen:
            asyncio.run(resolver.resolve("8.8.8.8"))
            frozen.tick(timedelta(seconds=59))
            asyncio.run(resolver.resolve("8.8.8.8"))
            assert geo_provider.call_count == 1

            frozen.tick(timedelta(seconds=2))
            asyncio.run(resolver.resolve("8.8.8.8"))
            assert geo_provider.call_count == 2

    def test_slow_provider_is_cut_off_at_timeout(self, cache):
        async def trickling_handler(request):
            await asyncio.sleep(5)
            return httpx.Response(200, json={"status": "success", "country": "United States",
                                             "countryCode": "US", "lat": 40.0, "lon": -74.0})

        resolver = GeolocationResolver(
            cache=cache, timeout=0.2, transport=httpx.MockTransport(trickling_handler)
        )

        started = time.monotonic()
        geo = asyncio.run(resolver.resolve("8.8.8.8"))
        elapsed = time.monotonic() - started

        assert geo.country == "Unknown"
        assert elapsed < 1.0
        # a timed-out lookup is not cached
        assert asyncio.run(cache.get("ip_geo:8.8.8.8")) is None


class TestAggregate:

    def test_example_rollup(self):
        result = aggregate([
            record("US", 40, -74),
            record("US", 40, -74),
            record("CA", 45, -75),
        ])

        points = [(p.lat, p.lon, p.weight) for p in result.map_points]
        assert points == [(40, -74, 2), (45, -75, 1)]

        countries = [(c.country_code, c.count, c.percentage) for c in result.countries_stats]
        assert countries == [("US", 2, 67), ("CA", 1, 33)]

    def test_unknown_and_origin_records_are_dropped(self):
        result = aggregate([
            GeolocationRecord.unknown("127.0.0.1"),
            record("FR", 0, 0, city="Null Island"),
            record("DE", 52.5, 13.4, city="Berlin"),
        ])

        assert len(result.map_points) == 1
        assert [(c.country_code, c.percentage) for c in result.countries_stats] == [("DE", 100)]
        assert [c.city for c in result.cities_stats] == ["Berlin"]

    def test_zero_on_one_axis_is_still_locatable(self):
        result = aggregate([record("GH", 5.6, 0, city="Accra")])

        assert len(result.map_points) == 1

    def test_city_stats(self):
        records = (
            [record("US", 40, -74, city="New York")] * 3
            + [record("CA", 45, -75, city="Ottawa")]
            + [record("US", 34, -118, city="")]  # no city name
        )

        cities = aggregate(records).cities_stats

        assert [(c.city, c.country_code, c.count) for c in cities] == [
            ("New York", "US", 3),
            ("Ottawa", "CA", 1),
        ]
        assert (cities[0].lat, cities[0].lon) == (40, -74)

    def test_same_city_name_in_different_countries(self):
        cities = aggregate([
            record("US", 33.7, -84.4, city="Paris"),
            record("FR", 48.8, 2.3, city="Paris"),
        ]).cities_stats

        assert sorted(c.country_code for c in cities) == ["FR", "US"]

    def test_city_stats_are_top_ten(self):
        records = []
        for i in range(12):
            records += [record("US", 30 + i, -90, city=f"City{i}")] * (i + 1)

        cities = aggregate(records).cities_stats

        assert len(cities) == 10
        assert cities[0].city == "City11"
        assert cities[-1].city == "City2"

    def test_empty_input(self):
        result = aggregate([])

        assert result.map_points == []
        assert result.countries_stats == []
        assert result.cities_stats == []

    @pytest.mark.parametrize("count,total,expected", [
        (2, 3, 67), (1, 3, 33), (1, 8, 13), (1, 2, 50), (3, 3, 100), (0, 5, 0), (1, 0, 0),
    ])
    def test_percentage_rounds_half_up(self, count, total, expected):
        assert percentage(count, total) == expected
