"""Assignment repository - row-store operations for schedule assignments"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...models import Assignment, Client, Therapist
from ...shared.errors import StoreError

logger = logging.getLogger(__name__)


class AssignmentRepository:
    """
    Database operations for assignment rows.

    A client_id of None addresses N/A rows. Every mutation commits on its own
    so batch callers can count per-row failures.
    """

    def __init__(self, db: Session):
        self.db = db

    def _commit(self, action: str):
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Store write failed during {action}: {e}")
            raise StoreError(str(e)) from e

    def _client_filter(self, query, client_id: Optional[int]):
        if client_id is None:
            return query.filter(Assignment.client_id.is_(None))
        return query.filter(Assignment.client_id == client_id)

    # Lookups
    def get_client(self, client_id: int) -> Optional[Client]:
        return self.db.query(Client).filter(Client.id == client_id).first()

    def get_therapist(self, therapist_id: int) -> Optional[Therapist]:
        return self.db.query(Therapist).filter(Therapist.id == therapist_id).first()

    def find_assignment(
        self, slot: str, client_id: Optional[int], schedule: str, therapist_id: Optional[int] = None
    ) -> Optional[Assignment]:
        query = self.db.query(Assignment).filter(
            Assignment.slot == slot, Assignment.schedule == schedule
        )
        query = self._client_filter(query, client_id)
        if therapist_id is not None:
            query = query.filter(Assignment.therapist_id == therapist_id)
        return query.order_by(Assignment.id).first()

    def find_client_assignments(
        self, slot: str, client_id: int, schedule: str
    ) -> list[Assignment]:
        return (
            self.db.query(Assignment)
            .filter(
                Assignment.slot == slot,
                Assignment.schedule == schedule,
                Assignment.client_id == client_id,
            )
            .order_by(Assignment.id)
            .all()
        )

    def find_therapist_assignment(
        self, therapist_id: int, slot: str, schedule: str, include_na: bool = True
    ) -> Optional[Assignment]:
        query = self.db.query(Assignment).filter(
            Assignment.therapist_id == therapist_id,
            Assignment.slot == slot,
            Assignment.schedule == schedule,
        )
        if not include_na:
            query = query.filter(Assignment.client_id.isnot(None))
        return query.first()

    def list_assignments_by_timeline(self, schedule: str) -> list[Assignment]:
        return (
            self.db.query(Assignment)
            .filter(Assignment.schedule == schedule)
            .order_by(Assignment.slot, Assignment.therapist_id)
            .all()
        )

    # Mutations
    def insert_assignment(self, **fields) -> int:
        assignment_id, _ = self._insert(fields, replace_na=False)
        return assignment_id

    def replace_na_with_assignment(self, **fields) -> tuple[int, int]:
        """
        Insert a client row, dropping the therapist's N/A row in the same
        transaction. Returns (assignment id, N/A rows removed).
        """
        return self._insert(fields, replace_na=True)

    def _insert(self, fields: dict, replace_na: bool) -> tuple[int, int]:
        assignment = Assignment(**fields)
        cleared = 0
        try:
            if replace_na:
                cleared = (
                    self.db.query(Assignment)
                    .filter(
                        Assignment.therapist_id == fields["therapist_id"],
                        Assignment.slot == fields["slot"],
                        Assignment.schedule == fields["schedule"],
                        Assignment.client_id.is_(None),
                    )
                    .delete()
                )
            self.db.add(assignment)
            self.db.flush()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Assignment insert rejected: {e}")
            raise StoreError(str(e)) from e
        self._commit("insert")
        return assignment.id, cleared

    def update_assignment(self, assignment: Assignment, **updates) -> Assignment:
        for key, value in updates.items():
            if hasattr(assignment, key):
                setattr(assignment, key, value)
        self._commit("update")
        self.db.refresh(assignment)
        return assignment

    def delete_assignment(
        self, slot: str, client_id: Optional[int], schedule: str, therapist_id: Optional[int] = None
    ) -> int:
        query = self.db.query(Assignment).filter(
            Assignment.slot == slot, Assignment.schedule == schedule
        )
        query = self._client_filter(query, client_id)
        if therapist_id is not None:
            query = query.filter(Assignment.therapist_id == therapist_id)
        count = query.delete()
        self._commit("delete")
        return count

    def delete_therapist_assignments(
        self, therapist_id: int, slot: Optional[str] = None, schedule: Optional[str] = None
    ) -> int:
        query = self.db.query(Assignment).filter(Assignment.therapist_id == therapist_id)
        if slot is not None:
            query = query.filter(Assignment.slot == slot)
        if schedule is not None:
            query = query.filter(Assignment.schedule == schedule)
        count = query.delete()
        self._commit("delete therapist assignments")
        return count

    def clear_timeline(self, schedule: str) -> int:
        count = (
            self.db.query(Assignment)
            .filter(Assignment.schedule == schedule)
            .delete()
        )
        self._commit("clear timeline")
        return count

    def clear_therapist_from_timeline(self, therapist_id: int, schedule: str) -> int:
        return self.delete_therapist_assignments(therapist_id, schedule=schedule)
