"""Therapist domain schemas"""

from typing import Optional

from pydantic import BaseModel, field_validator


class TherapistCreate(BaseModel):
    name: str
    address: str
    postalCode: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v


class LeadUpdate(BaseModel):
    lead: str

