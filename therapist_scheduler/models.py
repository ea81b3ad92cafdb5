from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base

UNASSIGNED_LEAD = "Unassigned"


class Therapist(Base):
    __tablename__ = "therapists"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    address = Column(String(500), nullable=True)  # Canonical address from the geocoder
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    lead = Column(String(100), default=UNASSIGNED_LEAD, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    assignments = relationship("Assignment", back_populates="therapist", cascade="all")


class Client(Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    address = Column(String(500), nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    supervisor = Column(String(255), nullable=True)  # Supervising clinician
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    assignments = relationship("Assignment", back_populates="client", cascade="all")


class Assignment(Base):
    """One therapist's occupancy of a weekly slot in one schedule timeline.

    A row with no client is an N/A marking (therapist unavailable). Several rows
    sharing a group_id form a single multi-therapist session.
    """

    __tablename__ = "assignments"
    __table_args__ = (
        UniqueConstraint("therapist_id", "slot", "schedule", name="uq_assignment_therapist_slot"),
    )

    id = Column(Integer, primary_key=True, index=True)
    slot = Column(String(50), nullable=False, index=True)  # e.g. "Monday-1:00pm"
    day = Column(String(20), nullable=False)
    time_block = Column(String(20), nullable=False)
    schedule = Column(String(20), nullable=False, index=True)  # current, future
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=True, index=True)
    therapist_id = Column(Integer, ForeignKey("therapists.id"), nullable=False, index=True)
    assignment_type = Column(String(20), default="regular", nullable=False)  # regular, playPals
    status = Column(String(20), default="red", nullable=False)  # red, orange, green
    start_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)
    group_id = Column(String(64), nullable=True, index=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    therapist = relationship("Therapist", back_populates="assignments")
    client = relationship("Client", back_populates="assignments")

    @property
    def is_na(self) -> bool:
        return self.client_id is None
