"""Therapist repository - Database operations for therapists"""

from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...models import Therapist
from ...shared.errors import StoreError


class TherapistRepository:
    """Repository for therapist database operations"""

    @staticmethod
    def get_therapists(db: Session) -> list[Therapist]:
        return db.query(Therapist).order_by(Therapist.name).all()

    @staticmethod
    def get_therapist_by_id(db: Session, therapist_id: int) -> Optional[Therapist]:
        return db.query(Therapist).filter(Therapist.id == therapist_id).first()

    @staticmethod
    def create_therapist(db: Session, **therapist_data) -> Therapist:
        therapist = Therapist(**therapist_data)
        try:
            db.add(therapist)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise StoreError(str(e)) from e
        db.refresh(therapist)
        return therapist

    @staticmethod
    def update_therapist(db: Session, therapist: Therapist, **updates) -> Therapist:
        for key, value in updates.items():
            if value is not None and hasattr(therapist, key):
                setattr(therapist, key, value)
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise StoreError(str(e)) from e
        db.refresh(therapist)
        return therapist

    @staticmethod
    def delete_therapist(db: Session, therapist: Therapist) -> int:
        """Delete a therapist and their assignments; returns the assignment count removed"""
        assignment_count = len(therapist.assignments)
        try:
            db.delete(therapist)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise StoreError(str(e)) from e
        return assignment_count
