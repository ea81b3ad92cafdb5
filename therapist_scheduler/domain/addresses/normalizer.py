"""
Address normalization and structural validation.

Runs before any provider call so obviously malformed input never costs a
geocoding request.
"""

import re
from typing import Optional, Tuple

# Street-type words and their USPS abbreviations
STREET_ABBREVIATIONS = {
    "street": "St",
    "avenue": "Ave",
    "boulevard": "Blvd",
    "drive": "Dr",
    "road": "Rd",
    "place": "Pl",
    "lane": "Ln",
    "court": "Ct",
    "circle": "Cir",
    "highway": "Hwy",
    "parkway": "Pkwy",
}

_STREET_PATTERNS = [
    (re.compile(rf"\b{word}\b", re.IGNORECASE), abbreviation)
    for word, abbreviation in STREET_ABBREVIATIONS.items()
]

# Street number followed by a street name
ADDRESS_FORMAT_PATTERN = re.compile(r"^\d+\s+[A-Za-z]+")


class AddressNormalizer:
    """Canonicalizes street types and gates addresses on basic structure."""

    def normalize(self, address: str) -> str:
        """Replace the first whole-word occurrence of each street type with its abbreviation."""
        if not address:
            return address

        normalized = address.strip()
        for pattern, abbreviation in _STREET_PATTERNS:
            normalized = pattern.sub(abbreviation, normalized, count=1)
        return normalized

    def validate_format(self, address: Optional[str]) -> Tuple[bool, Optional[str]]:
        """
        Check that the address starts with a street number and a street name.

        Returns:
            Tuple of (is_valid, reason)
        """
        if not address or not address.strip():
            return False, "Address is required"

        if not ADDRESS_FORMAT_PATTERN.match(address.strip()):
            return False, "Address must start with a street number followed by a street name"

        return True, None
