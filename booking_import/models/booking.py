import uuid
from datetime import datetime
from sqlalchemy import Column, String, Date, Numeric, Text, ForeignKey, DateTime, Index, Boolean, Integer, JSON
from sqlalchemy.orm import relationship
from ..database import Base
import enum


class BookingStatus(str, enum.Enum):
    CONFIRMED = "confirmed"
    PENDING = "pending"
    CANCELLED = "cancelled"
    CHECKED_IN = "checked-in"
    CHECKED_OUT = "checked-out"


class BookingSource(str, enum.Enum):
    """How the booking arrived"""
    DIRECT = "direct"            # Created by staff
    OTA = "ota"                  # Imported from an OTA email
    ICAL_IMPORT = "ical_import"  # Imported from a calendar feed


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    property_id = Column(String(36), ForeignKey("properties.id", ondelete="SET NULL"), nullable=True)
    guest_profile_id = Column(String(36), ForeignKey("guest_profiles.id", ondelete="SET NULL"), nullable=True)
    guest_name = Column(String(200), nullable=False)
    room_no = Column(String(50), nullable=True)
    number_of_rooms = Column(Integer, default=1)
    check_in = Column(Date, nullable=False)
    check_out = Column(Date, nullable=False)
    no_of_pax = Column(Integer, nullable=True)
    adult_child = Column(String(50), nullable=True)
    status = Column(String(30), default=BookingStatus.CONFIRMED.value)
    cancelled = Column(Boolean, default=False, index=True)
    total_amount = Column(Numeric(12, 2), default=0)
    payment_status = Column(String(20), nullable=True)
    contact_phone = Column(String(50), nullable=True)
    contact_email = Column(String(255), nullable=True)
    special_requests = Column(Text, nullable=True)

    # Provenance - source_details holds {"provider": ..., "ota_ref": ...}
    source = Column(String(30), default=BookingSource.DIRECT.value)
    source_details = Column(JSON, nullable=True)

    booking_date = Column(Date, nullable=True)
    folio_number = Column(String(50), nullable=True, index=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    guest_profile = relationship("GuestProfile", back_populates="bookings")

    __table_args__ = (
        Index("ix_booking_property_dates", "property_id", "check_in", "check_out"),
        Index("ix_booking_guest_name", "guest_name"),
        Index("ix_booking_source", "source"),
    )

    def __repr__(self):
        return f"<Booking {self.guest_name} - {self.check_in}>"
