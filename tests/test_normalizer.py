import pytest

from therapist_scheduler.domain.addresses.normalizer import AddressNormalizer


@pytest.fixture
def normalizer():
    return AddressNormalizer()


def test_normalize_abbreviates_street_type(normalizer):
    assert normalizer.normalize("123 Main Street") == "123 Main St"


def test_normalize_is_case_insensitive(normalizer):
    assert normalizer.normalize("55 peachtree AVENUE NE") == "55 peachtree Ave NE"


def test_normalize_matches_whole_words_only(normalizer):
    # "Streeter" and "Driveway" are not street types
    assert normalizer.normalize("9 Streeter Driveway") == "9 Streeter Driveway"


def test_normalize_replaces_first_occurrence_only(normalizer):
    assert normalizer.normalize("4 Court Street Court") == "4 Ct St Court"


def test_normalize_handles_several_types(normalizer):
    assert normalizer.normalize("700 Parkway Place Boulevard") == "700 Pkwy Pl Blvd"


def test_valid_format(normalizer):
    assert normalizer.validate_format("123 Main Street") == (True, None)


def test_missing_street_number_is_invalid(normalizer):
    is_valid, reason = normalizer.validate_format("Main Street")
    assert not is_valid
    assert "street number" in reason


@pytest.mark.parametrize("address", ["", "   ", None])
def test_empty_address_is_invalid(normalizer, address):
    is_valid, reason = normalizer.validate_format(address)
    assert not is_valid
    assert reason == "Address is required"


def test_number_without_street_name_is_invalid(normalizer):
    assert normalizer.validate_format("123")[0] is False
