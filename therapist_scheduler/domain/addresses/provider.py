"""
Google Geocoding API client.

Returns the provider payload as-is ({"status", "results", "error_message"});
classification of non-OK statuses happens in the resolver.
"""

import logging
from typing import Optional

import httpx

from ...cache import Cache

logger = logging.getLogger(__name__)

# Statuses the client synthesizes when no provider payload is available
TRANSPORT_ERROR = "TRANSPORT_ERROR"
HTTP_ERROR = "HTTP_ERROR"


class GoogleGeocodingProvider:
    def __init__(
        self,
        api_key: str,
        base_url: str = "https://maps.googleapis.com/maps/api/geocode/json",
        timeout: float = 10.0,
        cache: Optional[Cache] = None,
        cache_seconds: int = 86400,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self.cache = cache
        self.cache_seconds = cache_seconds
        self.transport = transport

    async def geocode(self, address: str) -> dict:
        cache_key = self.cache.key(f"geocode:{address}") if self.cache else None
        if cache_key:
            cached = self.cache.get(cache_key)
            if cached:
                return cached

        params = {"address": address, "key": self.api_key}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                resp = await client.get(self.base_url, params=params)
        except httpx.HTTPError as e:
            logger.error(f"Geocoding request failed: {e}")
            return {"status": TRANSPORT_ERROR, "results": [], "error_message": str(e)}

        if resp.status_code >= 400:
            logger.warning(f"Geocoding provider error {resp.status_code}: {resp.text[:200]}")
            return {
                "status": HTTP_ERROR,
                "results": [],
                "error_message": f"Provider responded with HTTP {resp.status_code}",
            }

        try:
            payload = resp.json()
        except ValueError:
            return {"status": HTTP_ERROR, "results": [], "error_message": "Malformed provider response"}

        if cache_key and payload.get("status") == "OK":
            self.cache.set(cache_key, payload, ttl=self.cache_seconds)

        return payload
