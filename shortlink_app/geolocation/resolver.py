import asyncio
import re
import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from shortlink_app.cache.strategies import CacheStrategy
from shortlink_app.schemas.geolocation import GeolocationRecord


logger = logging.getLogger(__name__)

# Private / loopback / unspecified addresses are never sent to the provider
PRIVATE_IP_PATTERNS = [
    re.compile(r'^127\.0\.0\.1$'),  # Loopback
    re.compile(r'^::1$'),  # IPv6 loopback
    re.compile(r'^localhost$', re.IGNORECASE),
    re.compile(r'^0\.0\.0\.0$'),  # Unspecified
    re.compile(r'^192\.168\.'),  # Class C private
    re.compile(r'^10\.'),  # Class A private
    re.compile(r'^172\.16\.'),
]

PROVIDER_FIELDS = (
    "status,message,country,countryCode,region,regionName,city,zip,"
    "lat,lon,timezone,isp,org,as,query"
)

CACHE_KEY_PREFIX = "ip_geo:"


def is_private_ip(ip: str) -> bool:
    """Check if IP address is private/local"""
    if not ip:
        return True
    return any(pattern.match(ip) for pattern in PRIVATE_IP_PATTERNS)


class GeolocationLookupError(Exception):
    """Provider answered, but not with a usable record"""


class GeolocationResolver:
    """
    Maps an IP to a coarse location via ip-api.com.

    Flow:
    1. Private IP -> Unknown sentinel (no cache, no HTTP)
    2. Cache hit -> cached record
    3. Cache miss -> provider GET (total deadline of `timeout`), cache for 24h
    4. Any failure -> Unknown sentinel; errors never reach the caller
    """

    def __init__(
        self,
        cache: CacheStrategy,
        api_url: str = "http://ip-api.com/json",
        timeout: float = 3.0,
        cache_ttl: int = 24 * 60 * 60,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            cache: Shared key-value cache for resolved records
            api_url: Provider endpoint; the IP is appended as a path segment
            timeout: Deadline in seconds for one provider lookup
            cache_ttl: Seconds a resolved record stays cached
            transport: Optional httpx transport (tests plug in MockTransport)
        """
        self.cache = cache
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.cache_ttl = cache_ttl
        self.transport = transport

    async def resolve(self, ip: str) -> GeolocationRecord:
        if is_private_ip(ip):
            return GeolocationRecord.unknown(ip)

        cache_key = f"{CACHE_KEY_PREFIX}{ip}"
        try:
            cached = await self.cache.get(cache_key)
            if cached:
                logger.debug("Cache hit for IP: %s", ip)
                return GeolocationRecord.model_validate_json(cached)

            logger.debug("Fetching geolocation for IP: %s", ip)
            # httpx timeouts bound each phase; this bounds the whole lookup
            record = await asyncio.wait_for(self._fetch(ip), self.timeout)

            await self.cache.set(
                cache_key,
                record.model_dump_json(by_alias=True),
                ttl=self.cache_ttl,
            )
            return record

        except Exception as e:
            logger.error("Error fetching geolocation for IP %s: %s", ip, e)
            return GeolocationRecord.unknown(ip)

    async def _fetch(self, ip: str) -> GeolocationRecord:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.get(
                f"{self.api_url}/{ip}",
                params={"fields": PROVIDER_FIELDS},
            )
            response.raise_for_status()
            data = response.json()

        if not isinstance(data, dict):
            raise GeolocationLookupError(f"unexpected payload type {type(data).__name__}")
        if data.get("status") == "fail":
            raise GeolocationLookupError(data.get("message") or "provider returned status=fail")

        try:
            return GeolocationRecord.model_validate(data)
        except ValidationError as e:
            raise GeolocationLookupError(f"malformed response: {e}") from e
