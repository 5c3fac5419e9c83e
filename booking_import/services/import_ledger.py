"""
Import Ledger

Records the outcome of every processed email in email_booking_imports,
keyed uniquely by email_message_id:
- reprocessing a message overwrites its row (upsert)
- booking writes are committed by the importer before the ledger row
- marking the email processed is best-effort and never undoes the row
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional, Any

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..config import settings
from ..models.email_import import EmailBookingImport
from ..models.email_message import EmailMessage
from ..utils.db_helpers import acquire_row_lock

logger = logging.getLogger(__name__)


class ImportLedger:
    LEDGER_FIELDS = (
        "extraction_id", "property_id", "event_type", "decision",
        "requires_approval", "booking_id", "import_errors",
        "processed_at", "processed_by",
    )

    def __init__(self, db: Session):
        self.db = db

    def get(self, message_id: str) -> Optional[EmailBookingImport]:
        return self.db.query(EmailBookingImport).filter(
            EmailBookingImport.email_message_id == message_id
        ).first()

    def commit(self, message_id: str, entry: Dict[str, Any]) -> EmailBookingImport:
        """
        Upsert the ledger row for a message and commit the transaction.

        A concurrent insert for the same message surfaces as an
        IntegrityError on the unique index; the row is then updated.
        """
        values = {key: entry.get(key) for key in self.LEDGER_FIELDS}
        values["processed_at"] = values["processed_at"] or datetime.utcnow()
        values["processed_by"] = values["processed_by"] or settings.processed_by

        try:
            row = self._upsert(message_id, values)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning(f"Ledger insert race for message {message_id}, retrying as update")
            row = self._upsert(message_id, values)
            self.db.commit()

        self.db.refresh(row)
        return row

    def _upsert(self, message_id: str, values: Dict[str, Any]) -> EmailBookingImport:
        row = acquire_row_lock(
            self.db,
            EmailBookingImport,
            EmailBookingImport.email_message_id == message_id
        )
        if row:
            for key, value in values.items():
                setattr(row, key, value)
        else:
            row = EmailBookingImport(email_message_id=message_id, **values)
            self.db.add(row)
        self.db.flush()
        return row

    def mark_processed(self, message_id: str) -> bool:
        """Flip the email's processed flag. Failures are logged only."""
        try:
            updated = self.db.query(EmailMessage).filter(
                EmailMessage.id == message_id
            ).update({EmailMessage.processed: True}, synchronize_session=False)
            self.db.commit()
            if not updated:
                logger.warning(f"Email message {message_id} not found when marking processed")
            return bool(updated)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to mark email {message_id} processed: {e}")
            return False

    def thread_message_ids(self, message_id: str) -> List[str]:
        """Ids of every email in the same thread, including this one"""
        message = self.db.query(EmailMessage).filter(
            EmailMessage.id == message_id
        ).first()
        if not message or not message.thread_id:
            return []

        rows = self.db.query(EmailMessage.id).filter(
            EmailMessage.thread_id == message.thread_id
        ).all()
        return [row[0] for row in rows]

    def latest_booking_for_messages(self, message_ids: List[str]) -> Optional[str]:
        """Booking id of the most recently processed import among these emails"""
        if not message_ids:
            return None

        entry = self.db.query(EmailBookingImport).filter(
            EmailBookingImport.email_message_id.in_(message_ids),
            EmailBookingImport.booking_id.isnot(None)
        ).order_by(
            EmailBookingImport.processed_at.desc()
        ).first()
        return entry.booking_id if entry else None

    def pending_messages(self, limit: int = 100) -> List[EmailMessage]:
        """Emails not yet processed or whose last import recorded an error, newest first"""
        return self.db.query(EmailMessage).outerjoin(
            EmailBookingImport,
            EmailBookingImport.email_message_id == EmailMessage.id
        ).filter(
            or_(
                EmailMessage.processed == False,
                EmailBookingImport.import_errors.isnot(None)
            )
        ).order_by(
            EmailMessage.received_at.desc()
        ).limit(limit).all()
