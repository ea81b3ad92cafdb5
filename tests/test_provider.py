import httpx

from therapist_scheduler.domain.addresses.provider import (
    HTTP_ERROR,
    TRANSPORT_ERROR,
    GoogleGeocodingProvider,
)
from tests.conftest import ok_payload


class MemoryCache:
    def __init__(self):
        self.store = {}

    def key(self, raw):
        return f"geocode:{raw.lower()}"

    def get(self, key):
        return self.store.get(key)

    def set(self, key, value, ttl=3600):
        self.store[key] = value
        return True


def provider_for(handler, cache=None):
    return GoogleGeocodingProvider(
        api_key="secret", transport=httpx.MockTransport(handler), cache=cache
    )


async def test_sends_address_and_key():
    seen = {}

    def handler(request):
        seen.update(request.url.params)
        return httpx.Response(200, json=ok_payload("123 Main St, Atlanta, GA 30303, USA"))

    payload = await provider_for(handler).geocode("123 Main St")

    assert payload["status"] == "OK"
    assert seen == {"address": "123 Main St", "key": "secret"}


async def test_provider_status_is_passed_through():
    def handler(request):
        return httpx.Response(200, json={"status": "REQUEST_DENIED", "error_message": "bad key"})

    payload = await provider_for(handler).geocode("123 Main St")

    assert payload["status"] == "REQUEST_DENIED"


async def test_http_error_status():
    def handler(request):
        return httpx.Response(500, text="boom")

    payload = await provider_for(handler).geocode("123 Main St")

    assert payload["status"] == HTTP_ERROR
    assert "500" in payload["error_message"]


async def test_transport_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    payload = await provider_for(handler).geocode("123 Main St")

    assert payload["status"] == TRANSPORT_ERROR


async def test_successful_responses_are_cached():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=ok_payload("123 Main St, Atlanta, GA 30303, USA"))

    provider = provider_for(handler, cache=MemoryCache())
    first = await provider.geocode("123 Main St")
    second = await provider.geocode("123 Main St")

    assert first == second
    assert len(calls) == 1


async def test_failures_are_not_cached():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={"status": "ZERO_RESULTS", "results": []})

    provider = provider_for(handler, cache=MemoryCache())
    await provider.geocode("1 Nowhere Ln")
    await provider.geocode("1 Nowhere Ln")

    assert len(calls) == 2
