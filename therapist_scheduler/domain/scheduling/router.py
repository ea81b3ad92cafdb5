"""Scheduling router - FastAPI endpoints for the assignment engine"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_identity
from ...database import get_db
from ...shared.errors import InvalidParameter
from ...shared.http import unwrap
from ...shared.slots import Timeline
from .repository import AssignmentRepository
from .service import SchedulingEngine

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/schedule", tags=["Scheduling"], dependencies=[Depends(get_current_identity)]
)


def get_scheduling_engine(db: Session = Depends(get_db)) -> SchedulingEngine:
    """Dependency injection for SchedulingEngine"""
    return SchedulingEngine(AssignmentRepository(db))


@router.get("/{schedule}")
async def get_schedule(schedule: str, engine: SchedulingEngine = Depends(get_scheduling_engine)):
    """Get every assignment and N/A marking in a schedule"""
    try:
        timeline = Timeline.parse(schedule)
    except InvalidParameter as e:
        return unwrap(e.to_dict())
    return unwrap(engine.get_schedule({"schedule": timeline.value}))


@router.post("/assignments")
async def create_assignment(params: dict, engine: SchedulingEngine = Depends(get_scheduling_engine)):
    """Assign one or more therapists to a client in a slot"""
    return unwrap(engine.create_assignment(params))


@router.patch("/assignments")
async def update_assignment_details(
    params: dict, engine: SchedulingEngine = Depends(get_scheduling_engine)
):
    """Update status, type, start date or notes of an assignment"""
    return unwrap(engine.update_assignment_details(params))


@router.post("/assignments/clear")
async def clear_assignment(params: dict, engine: SchedulingEngine = Depends(get_scheduling_engine)):
    """Remove a client's assignment from a slot"""
    return unwrap(engine.clear_assignment(params))


@router.post("/therapist-slot/clear")
async def clear_therapist_assignments(
    params: dict, engine: SchedulingEngine = Depends(get_scheduling_engine)
):
    """Remove whatever a therapist holds in a slot"""
    return unwrap(engine.clear_therapist_assignments(params))


@router.post("/na")
async def set_na_status(params: dict, engine: SchedulingEngine = Depends(get_scheduling_engine)):
    """Mark a therapist unavailable in a slot"""
    return unwrap(engine.set_na_status(params))


@router.post("/na/remove")
async def remove_na_status(params: dict, engine: SchedulingEngine = Depends(get_scheduling_engine)):
    """Clear a therapist's N/A marking"""
    return unwrap(engine.remove_na_status(params))


@router.post("/na/toggle")
async def toggle_na_status(params: dict, engine: SchedulingEngine = Depends(get_scheduling_engine)):
    """Flip a therapist's N/A marking"""
    return unwrap(engine.toggle_na_status(params))


@router.post("/copy")
async def copy_entire_schedule(
    params: dict, engine: SchedulingEngine = Depends(get_scheduling_engine)
):
    """Overwrite one schedule with a copy of the other"""
    return unwrap(engine.copy_entire_schedule(params))


@router.post("/copy-therapists")
async def copy_selected_therapists(
    params: dict, engine: SchedulingEngine = Depends(get_scheduling_engine)
):
    """Copy selected therapists' rows between schedules"""
    return unwrap(engine.copy_selected_therapists(params))
