import pytest

from therapist_scheduler.config import SchedulerSettings
from therapist_scheduler.domain.addresses.resolver import (
    AddressResolver,
    classify_status,
    confidence_score,
)
from therapist_scheduler.shared.errors import (
    GeocodeError,
    GeocodeReason,
    InvalidAddressFormat,
    ProviderUnavailable,
)
from tests.conftest import FakeGeocoder, ok_payload


class TestConfidence:
    def test_identical_strings(self):
        assert confidence_score("123 Main St", "123 main st") == 1.0

    def test_formatted_contains_normalized_original(self):
        assert confidence_score("123 Main Street", "123 Main St, Atlanta, GA 30303, USA") == 0.8

    def test_most_tokens_matched(self):
        # 4 of 5 tokens found
        score = confidence_score("123 Main St Atlanta Georgia", "123 Main St NW, Atlanta, GA 30303")
        assert score == 0.7

    def test_half_tokens_matched(self):
        score = confidence_score("123 Main St Decatur", "123 Main Rd, Marietta, GA")
        assert score == 0.5

    def test_few_tokens_matched(self):
        score = confidence_score("9 Elm Court Smyrna", "400 Oak Rd, Marietta, GA")
        assert score == 0.3

    def test_empty_inputs(self):
        assert confidence_score("", "123 Main St") == 0.0
        assert confidence_score("123 Main St", "") == 0.0


class TestClassifyStatus:
    @pytest.mark.parametrize(
        "status,reason",
        [
            ("ZERO_RESULTS", GeocodeReason.NO_RESULTS),
            ("OVER_QUERY_LIMIT", GeocodeReason.QUOTA_EXCEEDED),
            ("OVER_DAILY_LIMIT", GeocodeReason.QUOTA_EXCEEDED),
            ("REQUEST_DENIED", GeocodeReason.REQUEST_DENIED),
            ("INVALID_REQUEST", GeocodeReason.INVALID_REQUEST),
            ("UNKNOWN_ERROR", GeocodeReason.UNKNOWN_ERROR),
            (None, GeocodeReason.UNKNOWN_ERROR),
        ],
    )
    def test_reasons(self, status, reason):
        assert classify_status(status).reason is reason

    def test_no_results_suggests_more_detail(self):
        assert "city, state, or ZIP" in str(classify_status("ZERO_RESULTS"))


class TestResolve:
    async def test_success(self, resolver, geocoder):
        result = await resolver.resolve("123 Main Street")

        assert geocoder.calls == ["123 Main St"]
        assert result.latitude == pytest.approx(33.749)
        assert result.longitude == pytest.approx(-84.388)
        assert result.formatted_address == "123 Main St, Atlanta, GA 30303, USA"
        assert result.confidence == 0.8
        assert result.region_warning is None

    async def test_postal_code_is_appended_to_query(self, resolver, geocoder):
        await resolver.resolve("123 Main Street", "30303")
        assert geocoder.calls == ["123 Main St 30303"]

    async def test_invalid_format_never_reaches_provider(self, resolver, geocoder):
        with pytest.raises(InvalidAddressFormat):
            await resolver.resolve("Main Street")
        assert geocoder.calls == []

    async def test_missing_credential(self, geocoder):
        resolver = AddressResolver(SchedulerSettings(geocoding_api_key=None), provider=geocoder)
        with pytest.raises(ProviderUnavailable):
            await resolver.resolve("123 Main Street")
        assert geocoder.calls == []

    async def test_provider_status_is_classified(self, settings):
        resolver = AddressResolver(
            settings, provider=FakeGeocoder(default={"status": "OVER_QUERY_LIMIT", "results": []})
        )
        with pytest.raises(GeocodeError) as exc_info:
            await resolver.resolve("123 Main Street")
        assert exc_info.value.reason is GeocodeReason.QUOTA_EXCEEDED

    async def test_ok_without_results_is_no_results(self, settings):
        resolver = AddressResolver(settings, provider=FakeGeocoder(default={"status": "OK", "results": []}))
        with pytest.raises(GeocodeError) as exc_info:
            await resolver.resolve("123 Main Street")
        assert exc_info.value.reason is GeocodeReason.NO_RESULTS

    async def test_region_mismatch_only_warns(self, settings):
        # Seattle coordinates for an Atlanta ZIP
        payload = ok_payload("123 Main St, Atlanta, GA 30303, USA", lat=47.6, lng=-122.3)
        resolver = AddressResolver(settings, provider=FakeGeocoder(default=payload))

        result = await resolver.resolve("123 Main Street")

        assert result.latitude == pytest.approx(47.6)
        assert "30303" in result.region_warning


class TestBatchResolve:
    async def test_failures_are_isolated(self, settings):
        geocoder = FakeGeocoder(
            responses={
                "1 Peachtree St": ok_payload("1 Peachtree St, Atlanta, GA 30303, USA"),
                "2 Nowhere Ln": {"status": "ZERO_RESULTS", "results": []},
            }
        )
        resolver = AddressResolver(settings, provider=geocoder)

        results = await resolver.batch_resolve(
            ["1 Peachtree Street", "Nowhere", {"address": "2 Nowhere Lane"}]
        )

        assert [r["success"] for r in results] == [True, False, False]
        assert results[0]["formattedAddress"] == "1 Peachtree St, Atlanta, GA 30303, USA"
        assert results[1]["errorType"] == "validation"
        assert results[2]["reason"] == "no_results"
        # The malformed address never hit the provider
        assert geocoder.calls == ["1 Peachtree St", "2 Nowhere Ln"]

    async def test_delay_between_calls(self, geocoder):
        sleeps = []

        async def fake_sleep(seconds):
            sleeps.append(seconds)

        resolver = AddressResolver(
            SchedulerSettings(geocoding_api_key="k", batch_delay_seconds=0.1),
            provider=geocoder,
            sleep=fake_sleep,
        )

        await resolver.batch_resolve(["1 A St", "2 B St", "3 C St"])

        assert sleeps == [0.1, 0.1]
