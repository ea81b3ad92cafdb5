"""
Scheduling engine - slot assignment state machine.

Per (slot, schedule, therapist) a therapist is Free, assigned to one client
(optionally as part of a multi-therapist group), or Unavailable (an N/A row).
All state lives in the assignment store; the engine is stateless between calls.
"""

import logging
import uuid
from typing import Optional

from ...models import Assignment
from ...shared.errors import (
    InvalidParameter,
    NoUnavailabilityFound,
    RecordNotFound,
    StoreError,
)
from ...shared.params import operation, parse_params
from ...shared.slots import TimeSlot
from ...shared.validators import dedupe_ids
from .conflicts import ConflictChecker
from .repository import AssignmentRepository
from .schemas import (
    NA_CLIENT,
    ClearAssignmentRequest,
    CopyScheduleRequest,
    CopySelectedTherapistsRequest,
    CreateAssignmentRequest,
    GetScheduleRequest,
    TherapistSlotRequest,
    UpdateAssignmentRequest,
)

logger = logging.getLogger(__name__)

# Request field -> column, for detail updates
DETAIL_FIELDS = {
    "assignmentType": "assignment_type",
    "status": "status",
    "startDate": "start_date",
    "notes": "notes",
}


def serialize_assignment(assignment: Assignment) -> dict:
    return {
        "id": assignment.id,
        "slot": assignment.slot,
        "day": assignment.day,
        "time": assignment.time_block,
        "schedule": assignment.schedule,
        "clientId": NA_CLIENT if assignment.is_na else assignment.client_id,
        "clientName": NA_CLIENT if assignment.is_na else (
            assignment.client.name if assignment.client else None
        ),
        "therapistId": assignment.therapist_id,
        "therapistName": assignment.therapist.name if assignment.therapist else None,
        "assignmentType": assignment.assignment_type,
        "status": assignment.status,
        "startDate": assignment.start_date.isoformat() if assignment.start_date else None,
        "notes": assignment.notes,
        "groupId": assignment.group_id,
    }


class SchedulingEngine:
    """Service layer for schedule assignment operations"""

    def __init__(self, repo: AssignmentRepository, conflicts: Optional[ConflictChecker] = None):
        self.repo = repo
        self.conflicts = conflicts or ConflictChecker(repo)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require_client(self, client_id: int):
        client = self.repo.get_client(client_id)
        if not client:
            raise RecordNotFound(f"Client {client_id} not found")
        return client

    def _require_therapist(self, therapist_id: int):
        therapist = self.repo.get_therapist(therapist_id)
        if not therapist:
            raise RecordNotFound(f"Therapist {therapist_id} not found")
        return therapist

    @staticmethod
    def _slot_fields(slot: TimeSlot, schedule: str) -> dict:
        return {"slot": slot.key, "day": slot.day, "time_block": slot.time_block, "schedule": schedule}

    @staticmethod
    def _copy_fields(assignment: Assignment, schedule: str) -> dict:
        return {
            "slot": assignment.slot,
            "day": assignment.day,
            "time_block": assignment.time_block,
            "schedule": schedule,
            "client_id": assignment.client_id,
            "therapist_id": assignment.therapist_id,
            "assignment_type": assignment.assignment_type,
            "status": assignment.status,
            "start_date": assignment.start_date,
            "notes": assignment.notes,
            "group_id": assignment.group_id,
        }

    @staticmethod
    def _check_distinct(data: CopyScheduleRequest) -> tuple[str, str]:
        if data.fromSchedule == data.toSchedule:
            raise InvalidParameter("toSchedule", "must be different from fromSchedule")
        return data.fromSchedule.value, data.toSchedule.value

    # ------------------------------------------------------------------
    # Assignment creation / update
    # ------------------------------------------------------------------

    @operation
    def create_assignment(self, params: dict) -> dict:
        """
        Assign one or more therapists to a client in a slot.

        Fails before any write when a therapist already holds a different
        client in the slot. Re-submitting a therapist already holding this
        client merges into the existing row.
        """
        data = parse_params(CreateAssignmentRequest, params)
        slot = data.time_slot()
        schedule = data.schedule.value
        therapist_ids = dedupe_ids(data.therapistIds)

        self._require_client(data.clientId)
        for therapist_id in therapist_ids:
            self._require_therapist(therapist_id)

        self.conflicts.ensure_bookable(therapist_ids, data.clientId, slot.key, schedule)

        existing = {
            a.therapist_id: a
            for a in self.repo.find_client_assignments(slot.key, data.clientId, schedule)
        }
        group_id = data.groupId or next((a.group_id for a in existing.values() if a.group_id), None)
        if group_id is None and len(set(existing) | set(therapist_ids)) > 1:
            group_id = uuid.uuid4().hex

        provided = {
            DETAIL_FIELDS[name]: getattr(data, name)
            for name in DETAIL_FIELDS
            if name in data.model_fields_set
        }

        results = []
        for therapist_id in therapist_ids:
            try:
                row = existing.get(therapist_id)
                if row is not None:
                    self.repo.update_assignment(row, group_id=group_id, **provided)
                    results.append(
                        {"therapistId": therapist_id, "success": True, "action": "updated", "assignmentId": row.id}
                    )
                    continue

                assignment_id, cleared_na = self.repo.replace_na_with_assignment(
                    **self._slot_fields(slot, schedule),
                    client_id=data.clientId,
                    therapist_id=therapist_id,
                    assignment_type=data.assignmentType,
                    status=data.status,
                    start_date=data.startDate,
                    notes=data.notes,
                    group_id=group_id,
                )
                if cleared_na:
                    logger.info(f"Cleared N/A for therapist {therapist_id} at {slot} ({schedule})")
                results.append(
                    {
                        "therapistId": therapist_id,
                        "success": True,
                        "action": "created",
                        "assignmentId": assignment_id,
                        "clearedNA": bool(cleared_na),
                    }
                )
            except StoreError as e:
                logger.warning(f"Assignment write failed for therapist {therapist_id} at {slot}: {e}")
                results.append({"therapistId": therapist_id, "success": False, "error": str(e)})

        # Members of the group that were not part of this request pick up the group id
        if group_id:
            for therapist_id, row in existing.items():
                if therapist_id not in therapist_ids and row.group_id != group_id:
                    self.repo.update_assignment(row, group_id=group_id)

        succeeded = sum(1 for r in results if r["success"])
        logger.info(
            f"✅ Assignment for client {data.clientId} at {slot} ({schedule}): "
            f"{succeeded}/{len(results)} therapists written"
        )

        response = {
            "success": succeeded > 0,
            "clientId": data.clientId,
            "slot": slot.key,
            "schedule": schedule,
            "groupId": group_id,
            "results": results,
        }
        if not succeeded:
            response["error"] = "No therapist could be assigned"
            response["errorType"] = StoreError.kind
        return response

    @operation
    def update_assignment_details(self, params: dict) -> dict:
        data = parse_params(UpdateAssignmentRequest, params)
        slot = data.time_slot()
        schedule = data.schedule.value

        rows = self.repo.find_client_assignments(slot.key, data.clientId, schedule)
        if data.therapistId is not None:
            rows = [r for r in rows if r.therapist_id == data.therapistId]
        if not rows:
            raise RecordNotFound(
                f"No assignment for client {data.clientId} at {slot.key} in {schedule} schedule"
            )

        updates = {
            DETAIL_FIELDS[name]: getattr(data, name)
            for name in DETAIL_FIELDS
            if name in data.model_fields_set
        }
        for row in rows:
            self.repo.update_assignment(row, **updates)

        return {"success": True, "updated": len(rows)}

    # ------------------------------------------------------------------
    # Clearing
    # ------------------------------------------------------------------

    @operation
    def clear_assignment(self, params: dict) -> dict:
        """Remove every row for (slot, schedule, client), however many therapists it has."""
        data = parse_params(ClearAssignmentRequest, params)
        slot = data.time_slot()
        client_id = None if data.clientId == NA_CLIENT else data.clientId

        deleted = self.repo.delete_assignment(slot.key, client_id, data.schedule.value)
        logger.info(f"🗑️ Cleared {deleted} row(s) for client {data.clientId} at {slot} ({data.schedule.value})")
        return {"success": True, "deleted": deleted}

    @operation
    def clear_therapist_assignments(self, params: dict) -> dict:
        """
        Remove the therapist's row in the slot, client or N/A alike. Other
        members of a multi-therapist group keep their rows and group id.
        """
        data = parse_params(TherapistSlotRequest, params)
        slot = data.time_slot()

        deleted = self.repo.delete_therapist_assignments(data.therapistId, slot.key, data.schedule.value)
        return {"success": True, "deleted": deleted}

    # ------------------------------------------------------------------
    # N/A marking
    # ------------------------------------------------------------------

    def _set_na(self, therapist_id: int, slot: TimeSlot, schedule: str) -> dict:
        self._require_therapist(therapist_id)

        if self.conflicts.find_unavailability(therapist_id, slot.key, schedule):
            return {"success": True, "action": "already_na"}

        cleared_client_id = None
        existing = self.conflicts.find_conflict(therapist_id, slot.key, schedule)
        if existing is not None:
            cleared_client_id = existing.client_id
            self.repo.delete_therapist_assignments(therapist_id, slot.key, schedule)
            logger.info(
                f"Cleared client {cleared_client_id} from therapist {therapist_id} at {slot} before N/A"
            )

        assignment_id = self.repo.insert_assignment(
            **self._slot_fields(slot, schedule), client_id=None, therapist_id=therapist_id
        )
        logger.info(f"⛔ Therapist {therapist_id} marked N/A at {slot} ({schedule})")
        return {
            "success": True,
            "action": "set_na",
            "assignmentId": assignment_id,
            "clearedClientId": cleared_client_id,
        }

    def _remove_na(self, therapist_id: int, slot: TimeSlot, schedule: str) -> dict:
        if not self.conflicts.find_unavailability(therapist_id, slot.key, schedule):
            raise NoUnavailabilityFound(therapist_id, slot.key, schedule)

        deleted = self.repo.delete_assignment(slot.key, None, schedule, therapist_id=therapist_id)
        logger.info(f"Therapist {therapist_id} available again at {slot} ({schedule})")
        return {"success": True, "action": "removed_na", "deleted": deleted}

    @operation
    def set_na_status(self, params: dict) -> dict:
        data = parse_params(TherapistSlotRequest, params)
        return self._set_na(data.therapistId, data.time_slot(), data.schedule.value)

    @operation
    def remove_na_status(self, params: dict) -> dict:
        data = parse_params(TherapistSlotRequest, params)
        return self._remove_na(data.therapistId, data.time_slot(), data.schedule.value)

    @operation
    def toggle_na_status(self, params: dict) -> dict:
        data = parse_params(TherapistSlotRequest, params)
        slot = data.time_slot()
        schedule = data.schedule.value

        if self.conflicts.find_unavailability(data.therapistId, slot.key, schedule):
            return self._remove_na(data.therapistId, slot, schedule)
        return self._set_na(data.therapistId, slot, schedule)

    # ------------------------------------------------------------------
    # Cross-schedule copies
    # ------------------------------------------------------------------

    def _duplicate(self, rows: list[Assignment], to_schedule: str) -> dict:
        # Snapshot first: each insert commits and expires the loaded rows
        snapshots = [self._copy_fields(row, to_schedule) for row in rows]

        copied, errors = 0, []
        for fields in snapshots:
            try:
                self.repo.insert_assignment(**fields)
                copied += 1
            except StoreError as e:
                logger.warning(
                    f"Copy failed for therapist {fields['therapist_id']} at {fields['slot']}: {e}"
                )
                errors.append(
                    {"slot": fields["slot"], "therapistId": fields["therapist_id"], "error": str(e)}
                )

        return {"copied": copied, "failed": len(errors), "errors": errors}

    @staticmethod
    def _copy_response(outcome: dict, deleted: int, from_schedule: str, to_schedule: str) -> dict:
        response = {
            "success": outcome["copied"] > 0,
            "fromSchedule": from_schedule,
            "toSchedule": to_schedule,
            "deleted": deleted,
            **outcome,
        }
        if not outcome["copied"]:
            response["error"] = (
                "No assignments were copied"
                if outcome["failed"]
                else f"No assignments found in {from_schedule} schedule"
            )
        return response

    @operation
    def copy_entire_schedule(self, params: dict) -> dict:
        """Overwrite the destination schedule with a copy of the source schedule."""
        data = parse_params(CopyScheduleRequest, params)
        from_schedule, to_schedule = self._check_distinct(data)

        deleted = self.repo.clear_timeline(to_schedule)
        rows = self.repo.list_assignments_by_timeline(from_schedule)
        outcome = self._duplicate(rows, to_schedule)

        logger.info(
            f"📋 Copied {from_schedule} -> {to_schedule}: {outcome['copied']} copied, "
            f"{outcome['failed']} failed, {deleted} replaced"
        )
        return self._copy_response(outcome, deleted, from_schedule, to_schedule)

    @operation
    def copy_selected_therapists(self, params: dict) -> dict:
        """Overwrite only the listed therapists' rows in the destination schedule."""
        data = parse_params(CopySelectedTherapistsRequest, params)
        from_schedule, to_schedule = self._check_distinct(data)
        therapist_ids = dedupe_ids(data.therapistIds)

        deleted = sum(
            self.repo.clear_therapist_from_timeline(therapist_id, to_schedule)
            for therapist_id in therapist_ids
        )
        selected = set(therapist_ids)
        rows = [
            row
            for row in self.repo.list_assignments_by_timeline(from_schedule)
            if row.therapist_id in selected
        ]
        outcome = self._duplicate(rows, to_schedule)

        logger.info(
            f"📋 Copied {len(therapist_ids)} therapist(s) {from_schedule} -> {to_schedule}: "
            f"{outcome['copied']} copied, {outcome['failed']} failed"
        )
        response = self._copy_response(outcome, deleted, from_schedule, to_schedule)
        response["therapistIds"] = therapist_ids
        return response

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @operation
    def get_schedule(self, params: dict) -> dict:
        data = parse_params(GetScheduleRequest, params)
        rows = self.repo.list_assignments_by_timeline(data.schedule.value)
        return {
            "success": True,
            "schedule": data.schedule.value,
            "assignments": [serialize_assignment(row) for row in rows],
        }
