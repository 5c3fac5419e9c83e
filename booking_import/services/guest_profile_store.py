import logging
from typing import Dict, Optional, Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models.guest_profile import GuestProfile

logger = logging.getLogger(__name__)


class SqlGuestProfileStore:
    """Guest profile lookups and writes backed by the guest_profiles table"""

    def __init__(self, db: Session):
        self.db = db

    def find_by_contact(
        self,
        email: Optional[str] = None,
        phone: Optional[str] = None
    ) -> Optional[GuestProfile]:
        """Exact email match first, then exact phone match"""
        if email:
            guest = self.db.query(GuestProfile).filter(
                GuestProfile.email == email
            ).first()
            if guest:
                return guest

        if phone:
            guest = self.db.query(GuestProfile).filter(
                GuestProfile.phone == phone
            ).first()
            if guest:
                return guest

        return None

    def create(self, data: Dict[str, Any]) -> GuestProfile:
        guest = GuestProfile(**data)
        try:
            self.db.add(guest)
            self.db.flush()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return guest

    def update(self, guest_id: str, data: Dict[str, Any]) -> GuestProfile:
        guest = self.db.query(GuestProfile).filter(GuestProfile.id == guest_id).first()
        if not guest:
            raise LookupError(f"Guest profile {guest_id} not found")

        for key, value in data.items():
            setattr(guest, key, value)
        try:
            self.db.flush()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return guest
