"""Double-booking detection for therapists within a slot and timeline"""

from typing import Iterable, Optional

from ...models import Assignment
from ...shared.errors import TherapistDoubleBooked
from .repository import AssignmentRepository


class ConflictChecker:
    def __init__(self, repo: AssignmentRepository):
        self.repo = repo

    def find_conflict(self, therapist_id: int, slot: str, schedule: str) -> Optional[Assignment]:
        """Return the therapist's client (non-N/A) assignment in this slot, if any."""
        return self.repo.find_therapist_assignment(therapist_id, slot, schedule, include_na=False)

    def find_unavailability(self, therapist_id: int, slot: str, schedule: str) -> Optional[Assignment]:
        return self.repo.find_assignment(slot, None, schedule, therapist_id=therapist_id)

    def ensure_bookable(
        self, therapist_ids: Iterable[int], client_id: int, slot: str, schedule: str
    ) -> None:
        """
        Raise TherapistDoubleBooked for the first therapist already holding a
        different client in this slot. Same-client holdings are not conflicts.
        """
        for therapist_id in therapist_ids:
            existing = self.find_conflict(therapist_id, slot, schedule)
            if existing is None or existing.client_id == client_id:
                continue
            client = self.repo.get_client(existing.client_id)
            client_name = client.name if client else f"client {existing.client_id}"
            raise TherapistDoubleBooked(therapist_id, existing.client_id, client_name)
