"""
Address resolution: normalize, validate, geocode, score.

The resolver is constructed with an explicit SchedulerSettings object and an
optional geocoding provider; when no provider is given a Google provider is
built from the settings on first use.
"""

import asyncio
import logging
import re
from typing import AsyncIterator, Iterable, Optional

from ...config import SchedulerSettings
from ...shared.errors import (
    DomainError,
    GeocodeError,
    GeocodeReason,
    InvalidAddressFormat,
    ProviderUnavailable,
)
from ...shared.validators import extract_postal_code
from .normalizer import AddressNormalizer
from .provider import GoogleGeocodingProvider
from .region_validator import GeoRegionValidator
from .schemas import AddressResolutionResult

logger = logging.getLogger(__name__)

# Provider status -> (reason, user-facing message)
STATUS_REASONS = {
    "ZERO_RESULTS": (
        GeocodeReason.NO_RESULTS,
        "Address not found. Try adding the city, state, or ZIP code.",
    ),
    "OVER_QUERY_LIMIT": (
        GeocodeReason.QUOTA_EXCEEDED,
        "Geocoding quota exceeded. Please try again later.",
    ),
    "OVER_DAILY_LIMIT": (
        GeocodeReason.QUOTA_EXCEEDED,
        "Geocoding daily quota exceeded. Please try again tomorrow.",
    ),
    "REQUEST_DENIED": (
        GeocodeReason.REQUEST_DENIED,
        "Geocoding request denied. Check the API key configuration.",
    ),
    "INVALID_REQUEST": (
        GeocodeReason.INVALID_REQUEST,
        "Geocoding request was malformed. Check the address text.",
    ),
}

_TOKEN_SPLIT = re.compile(r"[\s,]+")


def classify_status(status: Optional[str], error_message: Optional[str] = None) -> GeocodeError:
    """Map a non-OK provider status to a GeocodeError."""
    reason, message = STATUS_REASONS.get(
        status or "", (GeocodeReason.UNKNOWN_ERROR, "Geocoding failed")
    )
    if reason is GeocodeReason.UNKNOWN_ERROR:
        detail = error_message or status or "no status"
        message = f"{message}: {detail}"
    return GeocodeError(reason, message, provider_status=status)


def _tokens(text: str) -> list[str]:
    return [t for t in _TOKEN_SPLIT.split(text.lower()) if t]


def confidence_score(
    original: str, formatted: str, normalizer: Optional[AddressNormalizer] = None
) -> float:
    """
    Estimate how closely the provider's formatted address matches the input.

    1.0 for an exact (case-insensitive) match, 0.8 when the normalized input is
    contained in the formatted address, otherwise the share of input tokens
    matching some formatted token, bucketed to 0.7 / 0.5 / 0.3.
    """
    if not original or not formatted:
        return 0.0

    original_clean = original.strip().lower()
    formatted_clean = formatted.strip().lower()
    if original_clean == formatted_clean:
        return 1.0

    normalizer = normalizer or AddressNormalizer()
    normalized = normalizer.normalize(original).lower()
    if normalized and normalized in formatted_clean:
        return 0.8

    original_tokens = _tokens(normalized)
    formatted_tokens = _tokens(formatted_clean)
    if not original_tokens:
        return 0.3

    matched = sum(
        1
        for token in original_tokens
        if any(token in candidate or candidate in token for candidate in formatted_tokens)
    )
    ratio = matched / len(original_tokens)

    if ratio >= 0.8:
        return 0.7
    if ratio >= 0.5:
        return 0.5
    return 0.3


async def paced(items: Iterable, delay_seconds: float, sleep=asyncio.sleep) -> AsyncIterator:
    """Yield items one at a time, sleeping between consecutive items."""
    for index, item in enumerate(items):
        if index and delay_seconds > 0:
            await sleep(delay_seconds)
        yield item


class AddressResolver:
    def __init__(
        self,
        settings: SchedulerSettings,
        provider=None,
        normalizer: Optional[AddressNormalizer] = None,
        region_validator: Optional[GeoRegionValidator] = None,
        cache=None,
        sleep=asyncio.sleep,
    ):
        self.settings = settings
        self.sleep = sleep
        self.normalizer = normalizer or AddressNormalizer()
        self.region_validator = region_validator or GeoRegionValidator()
        self.cache = cache
        self._provider = provider

    @property
    def provider(self):
        if self._provider is None:
            self._provider = GoogleGeocodingProvider(
                api_key=self.settings.geocoding_api_key,
                base_url=self.settings.geocoding_base_url,
                timeout=self.settings.geocoding_timeout_seconds,
                cache=self.cache,
                cache_seconds=self.settings.geocode_cache_seconds,
            )
        return self._provider

    def confidence(self, original: str, formatted: str) -> float:
        return confidence_score(original, formatted, self.normalizer)

    def _query_for(self, address: str, postal_code: Optional[str]) -> str:
        query = self.normalizer.normalize(address)
        if postal_code and postal_code not in query:
            query = f"{query} {postal_code}"
        return query

    async def resolve(self, address: str, postal_code: Optional[str] = None) -> AddressResolutionResult:
        is_valid, reason = self.normalizer.validate_format(address)
        if not is_valid:
            raise InvalidAddressFormat(reason)

        if not self.settings.geocoding_api_key:
            logger.error("Geocoding API key not configured")
            raise ProviderUnavailable()

        payload = await self.provider.geocode(self._query_for(address, postal_code))
        status = payload.get("status")
        if status != "OK":
            error = classify_status(status, payload.get("error_message"))
            logger.warning(f"Geocoding failed for '{address}': {status} ({error.reason.value})")
            raise error

        results = payload.get("results") or []
        if not results:
            raise classify_status("ZERO_RESULTS")

        best = results[0]
        location = best.get("geometry", {}).get("location", {})
        lat, lng = location.get("lat"), location.get("lng")
        if lat is None or lng is None:
            raise GeocodeError(
                GeocodeReason.UNKNOWN_ERROR, "Geocoding result has no coordinates", status
            )
        formatted = best.get("formatted_address") or address

        region_warning = None
        zipcode = postal_code or extract_postal_code(formatted) or extract_postal_code(address)
        if not self.region_validator.is_plausible((lat, lng), zipcode):
            region_warning = f"Coordinates ({lat:.4f}, {lng:.4f}) look outside the region for ZIP {zipcode}"
            logger.warning(f"⚠️ {region_warning} - address: {address}")

        result = AddressResolutionResult(
            latitude=lat,
            longitude=lng,
            formatted_address=formatted,
            confidence=self.confidence(address, formatted),
            region_warning=region_warning,
        )
        logger.info(f"📍 Resolved '{address}' -> {formatted} (confidence {result.confidence})")
        return result

    async def batch_resolve(self, entries: list) -> list[dict]:
        """
        Resolve addresses sequentially with a pause between provider calls.

        Each entry is an address string or a dict with "address" and optional
        "postalCode". One entry failing never stops the batch.
        """
        outcomes = []
        async for entry in paced(entries, self.settings.batch_delay_seconds, self.sleep):
            if isinstance(entry, dict):
                address, postal_code = entry.get("address"), entry.get("postalCode")
            else:
                address, postal_code = entry, None

            try:
                result = await self.resolve(address, postal_code)
                outcomes.append({"address": address, "success": True, **result.to_dict()})
            except DomainError as e:
                logger.warning(f"Batch geocode failed for '{address}': {e}")
                outcomes.append({"address": address, **e.to_dict()})
            except Exception as e:
                logger.exception(f"Unexpected batch geocode failure for '{address}'")
                outcomes.append(
                    {
                        "address": address,
                        **GeocodeError(GeocodeReason.UNKNOWN_ERROR, str(e)).to_dict(),
                    }
                )

        succeeded = sum(1 for o in outcomes if o["success"])
        logger.info(f"Batch geocode finished: {succeeded}/{len(outcomes)} resolved")
        return outcomes
