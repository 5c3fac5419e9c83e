import uuid
from datetime import datetime
from sqlalchemy import Column, String, Text, Boolean, DateTime
from ..database import Base


class Property(Base):
    """Properties that OTA bookings can be imported into"""
    __tablename__ = "properties"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(200), nullable=False)
    address = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, index=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Property {self.name}>"
