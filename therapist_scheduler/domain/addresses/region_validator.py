"""
Coarse ZIP-prefix plausibility check for geocoded coordinates.

Advisory only: a False result is logged by callers and never blocks an address.
"""

import logging
from typing import NamedTuple, Optional, Tuple

from ...shared.validators import normalize_postal_code

logger = logging.getLogger(__name__)


class BoundingBox(NamedTuple):
    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    def contains(self, lat: float, lng: float) -> bool:
        return self.min_lat <= lat <= self.max_lat and self.min_lng <= lng <= self.max_lng


# First ZIP digit -> rough bounding box of that national area
ZIP_REGIONS = {
    "0": BoundingBox(17.5, 47.5, -75.6, -64.5),  # New England, NJ, PR, VI
    "1": BoundingBox(38.4, 45.1, -80.6, -71.8),  # NY, PA, DE
    "2": BoundingBox(32.0, 39.8, -83.7, -75.2),  # DC, MD, NC, SC, VA, WV
    "3": BoundingBox(24.4, 35.7, -91.7, -79.9),  # AL, FL, GA, MS, TN
    "4": BoundingBox(36.5, 48.3, -89.6, -80.5),  # IN, KY, MI, OH
    "5": BoundingBox(40.3, 49.4, -116.1, -86.8),  # IA, MN, MT, ND, SD, WI
    "6": BoundingBox(35.9, 43.0, -104.1, -87.0),  # IL, KS, MO, NE
    "7": BoundingBox(25.8, 37.0, -106.7, -88.8),  # AR, LA, OK, TX
    "8": BoundingBox(31.3, 49.0, -120.0, -102.0),  # AZ, CO, ID, NM, NV, UT, WY
    "9": BoundingBox(18.9, 71.4, -179.2, -114.1),  # AK, CA, HI, OR, WA
}

# 3-digit prefixes checked against a tighter metro box
METRO_REGIONS = {
    "303": BoundingBox(33.4, 34.2, -84.8, -84.0),  # Atlanta
}


class GeoRegionValidator:
    def __init__(self, regions: Optional[dict] = None, metro_regions: Optional[dict] = None):
        self.regions = ZIP_REGIONS if regions is None else regions
        self.metro_regions = METRO_REGIONS if metro_regions is None else metro_regions

    def region_for(self, postal_code: Optional[str]) -> Optional[BoundingBox]:
        zipcode = normalize_postal_code(postal_code)
        if not zipcode:
            return None
        return self.metro_regions.get(zipcode[:3]) or self.regions.get(zipcode[0])

    def is_plausible(
        self, coordinates: Optional[Tuple[float, float]], postal_code: Optional[str]
    ) -> bool:
        """Return False only when the coordinates clearly fall outside the ZIP's region."""
        if not coordinates or not postal_code:
            return True

        lat, lng = coordinates
        if lat is None or lng is None:
            return True

        box = self.region_for(postal_code)
        if box is None:
            return True

        plausible = box.contains(lat, lng)
        if not plausible:
            logger.debug(f"Coordinates ({lat}, {lng}) outside region for ZIP {postal_code}")
        return plausible
