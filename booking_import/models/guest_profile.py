import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, Text, Index
from sqlalchemy.orm import relationship
from ..database import Base


class GuestProfile(Base):
    """Guest identities shared across bookings"""
    __tablename__ = "guest_profiles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    name = Column(String(200), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)

    address = Column(Text, nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)
    country = Column(String(100), nullable=True)

    # Privacy preferences
    email_marketing_consent = Column(Boolean, default=True)
    sms_marketing_consent = Column(Boolean, default=True)
    data_retention_consent = Column(Boolean, default=True)

    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    bookings = relationship("Booking", back_populates="guest_profile")

    __table_args__ = (
        Index("ix_guest_profiles_email", "email"),
        Index("ix_guest_profiles_phone", "phone"),
    )

    def __repr__(self):
        return f"<GuestProfile {self.name} - {self.email or self.phone}>"
