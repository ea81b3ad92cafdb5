from therapist_scheduler.domain.addresses.region_validator import GeoRegionValidator


def test_coordinates_inside_region_are_plausible():
    validator = GeoRegionValidator()
    # Chicago, ZIP 60601
    assert validator.is_plausible((41.88, -87.62), "60601")


def test_coordinates_outside_region_are_flagged():
    validator = GeoRegionValidator()
    # Seattle coordinates with a Chicago ZIP
    assert not validator.is_plausible((47.6, -122.3), "60601")


def test_metro_prefix_uses_tighter_box():
    validator = GeoRegionValidator()
    assert validator.is_plausible((33.75, -84.39), "30303")
    # Savannah is inside the "3" region but outside the Atlanta box
    assert not validator.is_plausible((32.08, -81.09), "30303")
    assert validator.is_plausible((32.08, -81.09), "31401")


def test_missing_inputs_cannot_refute():
    validator = GeoRegionValidator()
    assert validator.is_plausible(None, "60601")
    assert validator.is_plausible((41.88, -87.62), None)
    assert validator.is_plausible((None, None), "60601")


def test_unparseable_or_unmapped_zip_cannot_refute():
    validator = GeoRegionValidator(regions={})
    assert validator.is_plausible((0.0, 0.0), "60601")
    assert GeoRegionValidator().is_plausible((0.0, 0.0), "abc")


def test_zip_plus_four_is_accepted():
    validator = GeoRegionValidator()
    assert not validator.is_plausible((47.6, -122.3), "60601-1234")
