"""Scheduling domain schemas - parameter bags for the engine operations"""

from datetime import date
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from ...shared.slots import Timeline, TimeSlot

NA_CLIENT = "N/A"

AssignmentType = Literal["regular", "playPals"]
AssignmentStatus = Literal["red", "orange", "green"]


class SlotParams(BaseModel):
    """Slot given either as a joined key ("Monday-1:00pm") or as day + time"""

    slot: Optional[str] = None
    day: Optional[str] = None
    time: Optional[str] = None
    schedule: Timeline

    @model_validator(mode="after")
    def require_slot(self):
        if not self.slot and not (self.day and self.time):
            raise ValueError("either slot or day and time are required")
        return self

    def time_slot(self) -> TimeSlot:
        if self.slot:
            return TimeSlot.parse(self.slot)
        return TimeSlot.build(self.day, self.time)


class CreateAssignmentRequest(SlotParams):
    clientId: int
    therapistIds: list[int] = Field(min_length=1)
    assignmentType: AssignmentType = "regular"
    status: AssignmentStatus = "red"
    startDate: Optional[date] = None
    notes: Optional[str] = None
    groupId: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def collect_therapists(cls, data):
        if isinstance(data, dict) and "therapistIds" not in data and "therapistId" in data:
            data = dict(data)
            data["therapistIds"] = [data.pop("therapistId")]
        return data


class UpdateAssignmentRequest(SlotParams):
    clientId: int
    therapistId: Optional[int] = None
    assignmentType: Optional[AssignmentType] = None
    status: Optional[AssignmentStatus] = None
    startDate: Optional[date] = None
    notes: Optional[str] = None

    @field_validator("assignmentType", "status")
    @classmethod
    def reject_null(cls, v):
        # Omit the field to leave it unchanged
        if v is None:
            raise ValueError("may be omitted but not null")
        return v


class ClearAssignmentRequest(SlotParams):
    clientId: Union[int, Literal["N/A"]]


class TherapistSlotRequest(SlotParams):
    therapistId: int


class CopyScheduleRequest(BaseModel):
    fromSchedule: Timeline
    toSchedule: Timeline


class CopySelectedTherapistsRequest(CopyScheduleRequest):
    therapistIds: list[int] = Field(min_length=1)


class GetScheduleRequest(BaseModel):
    schedule: Timeline
