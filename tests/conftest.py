"""
Shared fixtures: an in-memory SQLite database per test and small
factories for the rows the import engine reads.
"""

import uuid
from datetime import date, datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from booking_import.database import Base
from booking_import import models
from booking_import.schemas.parsed_event import ParsedBookingEvent


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def property_factory(db):
    def make(name="Sea View Homestay", address="Calangute, Goa", **kwargs):
        prop = models.Property(name=name, address=address, is_active=True, **kwargs)
        db.add(prop)
        db.commit()
        return prop
    return make


@pytest.fixture
def message_factory(db):
    def make(thread_id=None, **kwargs):
        message = models.EmailMessage(
            external_message_id=kwargs.pop("external_message_id", f"<{uuid.uuid4()}@mail>"),
            thread_id=thread_id,
            sender=kwargs.pop("sender", "noreply@ota.example"),
            subject=kwargs.pop("subject", "Reservation"),
            received_at=kwargs.pop("received_at", datetime.utcnow()),
            processed=False,
            **kwargs
        )
        db.add(message)
        db.commit()
        return message
    return make


@pytest.fixture
def booking_factory(db):
    def make(**kwargs):
        values = {
            "guest_name": "Priya Sharma",
            "room_no": "101",
            "check_in": date(2025, 3, 10),
            "check_out": date(2025, 3, 12),
            "status": models.BookingStatus.CONFIRMED.value,
            "cancelled": False,
            "source": models.BookingSource.OTA.value,
        }
        values.update(kwargs)
        booking = models.Booking(**values)
        db.add(booking)
        db.commit()
        return booking
    return make


def make_event(**overrides) -> ParsedBookingEvent:
    """A confident new-booking event, overridable per test"""
    data = {
        "event_type": "new",
        "ota_platform": "gommt",
        "booking_reference": "MMT123",
        "guest_name": "Priya Sharma",
        "contact_email": "priya@example.com",
        "contact_phone": "+919800000001",
        "room_type": "Deluxe",
        "check_in": "2025-03-10",
        "check_out": "2025-03-12",
        "no_of_pax": 2,
        "total_amount": 5400.0,
        "confidence": 0.95,
    }
    data.update(overrides)
    return ParsedBookingEvent(**data)


@pytest.fixture
def event_factory():
    return make_event
