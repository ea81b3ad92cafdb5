"""Client domain schemas"""

from typing import Optional

from pydantic import BaseModel, field_validator


class ClientCreate(BaseModel):
    """Schema for creating a new client"""

    name: str
    address: str
    postalCode: Optional[str] = None
    supervisor: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v
