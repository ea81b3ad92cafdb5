"""Therapist router - FastAPI endpoints for therapist records"""

import logging
from functools import lru_cache

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_identity
from ...config import SchedulerSettings, get_settings
from ...database import get_db
from ...shared.http import unwrap
from ..addresses.resolver import AddressResolver
from ..addresses.router import get_address_resolver, rate_limit_geocoding
from .leads import LeadDirectory
from .schemas import LeadUpdate, TherapistCreate
from .service import TherapistService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/therapists", tags=["Therapists"], dependencies=[Depends(get_current_identity)]
)


@lru_cache
def _load_leads(path: str) -> LeadDirectory:
    return LeadDirectory.load(path)


def get_lead_directory(settings: SchedulerSettings = Depends(get_settings)) -> LeadDirectory:
    return _load_leads(settings.lead_assignments_file)


def get_therapist_service(
    db: Session = Depends(get_db),
    resolver: AddressResolver = Depends(get_address_resolver),
    leads: LeadDirectory = Depends(get_lead_directory),
) -> TherapistService:
    """Dependency injection for TherapistService"""
    return TherapistService(db, resolver, leads)


@router.get("")
async def list_therapists(service: TherapistService = Depends(get_therapist_service)):
    return unwrap(service.list_therapists())


@router.post("")
async def create_therapist(
    data: TherapistCreate,
    service: TherapistService = Depends(get_therapist_service),
    _: None = Depends(rate_limit_geocoding),
):
    """Create a therapist; the home address is geocoded first"""
    return unwrap(await service.create_therapist(data.model_dump()))


@router.patch("/{therapist_id}/lead")
async def reassign_lead(
    therapist_id: int,
    data: LeadUpdate,
    service: TherapistService = Depends(get_therapist_service),
):
    return unwrap(service.reassign_lead(therapist_id, data.model_dump()))


@router.delete("/{therapist_id}")
async def delete_therapist(
    therapist_id: int, service: TherapistService = Depends(get_therapist_service)
):
    """Delete a therapist along with all of their assignments"""
    return unwrap(service.delete_therapist(therapist_id))
