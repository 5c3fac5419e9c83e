import logging
from typing import Optional, Dict, Any

from sqlalchemy.orm import Session

from ..models.notification import Notification, NotificationType, NotificationPriority

logger = logging.getLogger(__name__)


class NotificationService:
    """Stores property notifications for staff dashboards"""

    def __init__(self, db: Session):
        self.db = db

    def send(
        self,
        property_id: str,
        title: str,
        message: Optional[str] = None,
        type: str = NotificationType.UPDATE.value,
        priority: str = NotificationPriority.MEDIUM.value,
        platform: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None
    ) -> Notification:
        notification = Notification(
            property_id=property_id,
            type=type,
            title=title,
            message=message,
            priority=priority,
            platform=platform,
            data=data,
            is_read=False
        )
        self.db.add(notification)
        self.db.commit()
        logger.debug(f"Notification '{title}' sent to property {property_id}")
        return notification
