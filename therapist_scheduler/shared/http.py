"""Translate operation results into HTTP responses"""

from fastapi import HTTPException

STATUS_BY_KIND = {
    "validation": 400,
    "not_found": 404,
    "conflict": 409,
    "store": 500,
    "provider": 502,
}


def unwrap(result: dict) -> dict:
    """Return a successful result as-is, raise HTTPException for a failed one."""
    if result.get("success"):
        return result

    status_code = STATUS_BY_KIND.get(result.get("errorType"), 400)
    if result.get("errorType") == "provider" and "reason" not in result:
        # Provider not configured
        status_code = 503
    raise HTTPException(status_code=status_code, detail=result)
