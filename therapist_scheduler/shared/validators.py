"""Shared validation utilities"""

import re
from typing import Optional


def normalize_postal_code(postal_code: Optional[str]) -> Optional[str]:
    """
    Normalize a US ZIP code to its 5-digit form.

    Returns None when the input is not a 5-digit ZIP or ZIP+4.
    """
    if not postal_code:
        return None

    digits = re.sub(r"\D", "", str(postal_code))

    if len(digits) == 5:
        return digits
    elif len(digits) == 9:
        return digits[:5]
    return None


def extract_postal_code(address: Optional[str]) -> Optional[str]:
    """Pull the ZIP that follows a state abbreviation ("GA 30303") out of an address."""
    if not address:
        return None
    matches = re.findall(r"\b[A-Z]{2}\s+(\d{5})(?:-\d{4})?\b", address)
    return matches[-1] if matches else None


def dedupe_ids(ids) -> list[int]:
    """Drop duplicates while keeping first-seen order."""
    seen = set()
    result = []
    for value in ids:
        if value in seen:
            continue
        seen.add(value)
        result.append(value)
    return result
