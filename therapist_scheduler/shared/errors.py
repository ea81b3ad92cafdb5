"""Domain error taxonomy shared by the scheduling and address domains"""

from enum import Enum
from typing import Optional


class DomainError(Exception):
    """Base class; `kind` tells callers which family the failure belongs to."""

    kind = "error"

    def to_dict(self) -> dict:
        return {"success": False, "error": str(self), "errorType": self.kind}


class InvalidParameter(DomainError):
    kind = "validation"

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Invalid parameter '{field}': {message}")


class InvalidAddressFormat(InvalidParameter):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__("address", reason)


class TherapistDoubleBooked(DomainError):
    kind = "conflict"

    def __init__(self, therapist_id: int, conflicting_client_id: int, conflicting_client: str):
        self.therapist_id = therapist_id
        self.conflicting_client_id = conflicting_client_id
        self.conflicting_client = conflicting_client
        super().__init__(
            f"Therapist {therapist_id} is already assigned to {conflicting_client} in this slot"
        )

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update(
            {
                "therapistId": self.therapist_id,
                "conflictingClientId": self.conflicting_client_id,
                "conflictingClient": self.conflicting_client,
            }
        )
        return data


class RecordNotFound(DomainError):
    kind = "not_found"


class NoUnavailabilityFound(RecordNotFound):
    def __init__(self, therapist_id: int, slot: str, schedule: str):
        super().__init__(
            f"No N/A marking found for therapist {therapist_id} at {slot} in {schedule} schedule"
        )


class ProviderError(DomainError):
    kind = "provider"


class ProviderUnavailable(ProviderError):
    def __init__(self, message: str = "Geocoding provider is not configured"):
        super().__init__(message)


class GeocodeReason(str, Enum):
    NO_RESULTS = "no_results"
    QUOTA_EXCEEDED = "quota_exceeded"
    REQUEST_DENIED = "request_denied"
    INVALID_REQUEST = "invalid_request"
    UNKNOWN_ERROR = "unknown_error"


class GeocodeError(ProviderError):
    def __init__(self, reason: GeocodeReason, message: str, provider_status: Optional[str] = None):
        self.reason = reason
        self.provider_status = provider_status
        super().__init__(message)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["reason"] = self.reason.value
        return data


class StoreError(DomainError):
    kind = "store"
