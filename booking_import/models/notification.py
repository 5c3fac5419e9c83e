"""
Notification Model
"""
import uuid
from sqlalchemy import Column, String, Boolean, DateTime, Text, JSON
from sqlalchemy.sql import func
import enum

from ..database import Base


class NotificationType(str, enum.Enum):
    UPDATE = "update"
    ALERT = "alert"


class NotificationPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Target property (staff of that property see it)
    property_id = Column(String(36), nullable=False, index=True)

    type = Column(String(50), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=True)
    priority = Column(String(20), default=NotificationPriority.MEDIUM.value)
    platform = Column(String(50), nullable=True)
    data = Column(JSON, nullable=True)

    is_read = Column(Boolean, default=False, index=True)
    created_at = Column(DateTime, server_default=func.now(), index=True)

    def __repr__(self):
        return f"<Notification {self.type} - {self.title}>"
