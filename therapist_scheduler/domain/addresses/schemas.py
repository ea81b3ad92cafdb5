"""Address domain schemas"""

from typing import Optional, Union

from pydantic import BaseModel, Field


class AddressResolutionResult(BaseModel):
    latitude: float
    longitude: float
    formatted_address: str
    confidence: float = Field(ge=0.0, le=1.0)
    region_warning: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "lat": self.latitude,
            "lng": self.longitude,
            "formattedAddress": self.formatted_address,
            "confidence": self.confidence,
            "regionWarning": self.region_warning,
        }


class ValidateAddressRequest(BaseModel):
    address: str


class ResolveAddressRequest(BaseModel):
    address: str
    postalCode: Optional[str] = None


class BatchAddressEntry(BaseModel):
    address: str
    postalCode: Optional[str] = None


class BatchResolveRequest(BaseModel):
    addresses: list[Union[str, BatchAddressEntry]]
