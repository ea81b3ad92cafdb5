import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from therapist_scheduler.config import SchedulerSettings
from therapist_scheduler.database import Base
from therapist_scheduler.domain.addresses.resolver import AddressResolver
from therapist_scheduler.domain.scheduling.repository import AssignmentRepository
from therapist_scheduler.domain.scheduling.service import SchedulingEngine
from therapist_scheduler.models import Assignment, Client, Therapist


class FakeGeocoder:
    """Stands in for the Google provider; records every query it receives."""

    def __init__(self, responses=None, default=None):
        self.responses = responses or {}
        self.default = default
        self.calls = []

    async def geocode(self, address):
        self.calls.append(address)
        if address in self.responses:
            return self.responses[address]
        if self.default is not None:
            return self.default
        return {"status": "ZERO_RESULTS", "results": []}


def ok_payload(formatted, lat=33.749, lng=-84.388):
    return {
        "status": "OK",
        "results": [
            {"formatted_address": formatted, "geometry": {"location": {"lat": lat, "lng": lng}}}
        ],
    }


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def settings():
    return SchedulerSettings(geocoding_api_key="test-key", batch_delay_seconds=0)


@pytest.fixture
def geocoder():
    return FakeGeocoder(default=ok_payload("123 Main St, Atlanta, GA 30303, USA"))


@pytest.fixture
def resolver(settings, geocoder):
    return AddressResolver(settings, provider=geocoder)


@pytest.fixture
def people(db):
    therapists = [
        Therapist(name="Avery", address="1 Oak St", latitude=33.7, longitude=-84.3),
        Therapist(name="Blake", address="2 Elm St", latitude=33.8, longitude=-84.4),
        Therapist(name="Casey", address="3 Pine St", latitude=33.9, longitude=-84.5),
    ]
    clients = [
        Client(name="Jordan P.", address="10 Maple Ave"),
        Client(name="Riley K.", address="20 Birch Rd"),
    ]
    db.add_all(therapists + clients)
    db.commit()
    return {
        "therapists": [t.id for t in therapists],
        "clients": [c.id for c in clients],
    }


@pytest.fixture
def repo(db):
    return AssignmentRepository(db)


@pytest.fixture
def scheduler(repo):
    return SchedulingEngine(repo)


def rows(db, schedule=None):
    query = db.query(Assignment)
    if schedule:
        query = query.filter(Assignment.schedule == schedule)
    return query.order_by(Assignment.slot, Assignment.therapist_id).all()
