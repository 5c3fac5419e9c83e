"""
Booking Store

SQL-backed implementation of the booking store the import engine writes
through. Writes are flushed, not committed: the importer commits them before
it writes the ledger row.
"""

import logging
from datetime import date
from typing import Dict, List, Optional, Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models.booking import Booking, BookingStatus

logger = logging.getLogger(__name__)


class BookingStoreError(Exception):
    """A booking store mutation failed"""


class SqlBookingStore:
    # Columns an update payload may touch
    UPDATABLE_FIELDS = (
        "property_id", "guest_name", "room_no", "number_of_rooms",
        "check_in", "check_out", "no_of_pax", "adult_child",
        "status", "cancelled", "total_amount", "payment_status",
        "contact_phone", "contact_email", "special_requests",
        "source", "source_details", "guest_profile_id",
        "booking_date", "folio_number",
    )

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, booking_id: str) -> Optional[Booking]:
        if not booking_id:
            return None
        return self.db.query(Booking).filter(Booking.id == booking_id).first()

    def list(
        self,
        property_id: Optional[str] = None,
        check_in: Optional[date] = None,
        check_out: Optional[date] = None
    ) -> List[Booking]:
        """List bookings, newest stay first"""
        query = self.db.query(Booking)
        if property_id:
            query = query.filter(Booking.property_id == property_id)
        if check_in:
            query = query.filter(Booking.check_in == check_in)
        if check_out:
            query = query.filter(Booking.check_out == check_out)
        return query.order_by(Booking.check_in.desc(), Booking.created_at.desc()).all()

    def create(self, payload: Dict[str, Any]) -> Booking:
        booking = Booking(**self._clean(payload))
        try:
            self.db.add(booking)
            self.db.flush()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise BookingStoreError(f"Failed to create booking: {e}") from e
        logger.info(f"Created booking {booking.id} for {booking.guest_name}")
        return booking

    def update(self, booking_id: str, partial: Dict[str, Any]) -> Booking:
        booking = self.get_by_id(booking_id)
        if not booking:
            raise BookingStoreError(f"Booking {booking_id} not found")

        for key, value in self._clean(partial).items():
            setattr(booking, key, value)

        try:
            self.db.flush()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise BookingStoreError(f"Failed to update booking {booking_id}: {e}") from e
        return booking

    def cancel(self, booking_id: str) -> bool:
        booking = self.get_by_id(booking_id)
        if not booking:
            logger.warning(f"Cannot cancel unknown booking {booking_id}")
            return False

        booking.cancelled = True
        booking.status = BookingStatus.CANCELLED.value
        try:
            self.db.flush()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error cancelling booking {booking_id}: {e}")
            return False
        return True

    def _clean(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        unknown = set(payload) - set(self.UPDATABLE_FIELDS)
        if unknown:
            raise BookingStoreError(f"Unknown booking fields: {sorted(unknown)}")
        return dict(payload)
