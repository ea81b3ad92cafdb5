"""Therapist service - record creation gated by address resolution"""

import logging

from sqlalchemy.orm import Session

from ...models import Therapist
from ...shared.errors import InvalidParameter, RecordNotFound
from ...shared.params import operation, parse_params
from ..addresses.resolver import AddressResolver
from .leads import LeadDirectory
from .repository import TherapistRepository
from .schemas import LeadUpdate, TherapistCreate

logger = logging.getLogger(__name__)


def serialize_therapist(therapist: Therapist) -> dict:
    return {
        "id": therapist.id,
        "name": therapist.name,
        "address": therapist.address,
        "lat": therapist.latitude,
        "lng": therapist.longitude,
        "lead": therapist.lead,
    }


class TherapistService:
    def __init__(self, db: Session, resolver: AddressResolver, leads: LeadDirectory):
        self.db = db
        self.resolver = resolver
        self.leads = leads
        self.repo = TherapistRepository()

    def _get(self, therapist_id: int) -> Therapist:
        therapist = self.repo.get_therapist_by_id(self.db, therapist_id)
        if not therapist:
            raise RecordNotFound(f"Therapist {therapist_id} not found")
        return therapist

    @operation
    def list_therapists(self) -> dict:
        return {
            "success": True,
            "therapists": [serialize_therapist(t) for t in self.repo.get_therapists(self.db)],
        }

    @operation
    async def create_therapist(self, params: dict) -> dict:
        """Resolve the home address, then store the therapist with its coordinates"""
        data = parse_params(TherapistCreate, params)
        resolved = await self.resolver.resolve(data.address, data.postalCode)

        therapist = self.repo.create_therapist(
            self.db,
            name=data.name,
            address=resolved.formatted_address,
            latitude=resolved.latitude,
            longitude=resolved.longitude,
        )
        lead = self.leads.lead_for(therapist.id)
        if lead != therapist.lead:
            therapist = self.repo.update_therapist(self.db, therapist, lead=lead)

        logger.info(f"✅ Created therapist {therapist.id} ({therapist.name}), lead {therapist.lead}")
        return {
            "success": True,
            "therapist": serialize_therapist(therapist),
            "confidence": resolved.confidence,
            "regionWarning": resolved.region_warning,
        }

    @operation
    def reassign_lead(self, therapist_id: int, params: dict) -> dict:
        data = parse_params(LeadUpdate, params)
        if not self.leads.is_valid(data.lead):
            raise InvalidParameter("lead", f"unknown lead {data.lead!r}")

        therapist = self.repo.update_therapist(self.db, self._get(therapist_id), lead=data.lead)
        logger.info(f"Therapist {therapist_id} reassigned to lead {data.lead}")
        return {"success": True, "therapist": serialize_therapist(therapist)}

    @operation
    def delete_therapist(self, therapist_id: int) -> dict:
        removed = self.repo.delete_therapist(self.db, self._get(therapist_id))
        logger.info(f"🗑️ Deleted therapist {therapist_id} and {removed} assignment(s)")
        return {"success": True, "deletedAssignments": removed}
