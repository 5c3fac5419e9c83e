"""
Email Booking Import Model

The import ledger: one row per source email message, recording what the
engine decided and did. Reprocessing a message overwrites its row, the
unique index on email_message_id guarantees there is never a second one.
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey, Index, JSON
from ..database import Base
import enum


class ImportDecision(str, enum.Enum):
    """Provenance tag derived from extraction confidence"""
    AUTO = "auto"
    MANUAL_APPROVED = "manual-approved"


class ImportErrorReason(str, enum.Enum):
    """Reason stored in import_errors when nothing was written"""
    MISSING_REQUIRED_FIELDS = "missing_required_fields"
    BOOKING_NOT_FOUND_FOR_MODIFY = "booking_not_found_for_modify"
    BOOKING_NOT_FOUND_FOR_CANCEL = "booking_not_found_for_cancel"
    NOTIFICATION_ONLY = "notification_only"
    AWAITING_APPROVAL = "awaiting_approval"
    CANCEL_REJECTED = "cancel_rejected"  # Store reported the cancel failed


class ImportErrorKind(str, enum.Enum):
    """Error taxonomy, one kind per family of reasons"""
    RESOLUTION_FAILURE = "resolution_failure"
    MISSING_REQUIRED_FIELDS = "missing_required_fields"
    CANDIDATE_NOT_FOUND = "candidate_not_found"
    NOTIFICATION_ONLY = "notification_only"
    AWAITING_APPROVAL = "awaiting_approval"
    STORE_FAILURE = "store_failure"
    NOTIFICATION_FAILURE = "notification_failure"


REASON_KINDS = {
    ImportErrorReason.MISSING_REQUIRED_FIELDS: ImportErrorKind.MISSING_REQUIRED_FIELDS,
    ImportErrorReason.BOOKING_NOT_FOUND_FOR_MODIFY: ImportErrorKind.CANDIDATE_NOT_FOUND,
    ImportErrorReason.BOOKING_NOT_FOUND_FOR_CANCEL: ImportErrorKind.CANDIDATE_NOT_FOUND,
    ImportErrorReason.NOTIFICATION_ONLY: ImportErrorKind.NOTIFICATION_ONLY,
    ImportErrorReason.AWAITING_APPROVAL: ImportErrorKind.AWAITING_APPROVAL,
    ImportErrorReason.CANCEL_REJECTED: ImportErrorKind.STORE_FAILURE,
}


def build_import_errors(reason: ImportErrorReason, **details) -> dict:
    """Build the import_errors JSON payload for a reason"""
    payload = {"reason": reason.value, "kind": REASON_KINDS[reason].value}
    payload.update(details)
    return payload


class EmailBookingImport(Base):
    __tablename__ = "email_booking_imports"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Ledger key
    email_message_id = Column(
        String(36),
        ForeignKey("email_messages.id", ondelete="CASCADE"),
        nullable=False
    )
    extraction_id = Column(String(36), nullable=True)
    property_id = Column(String(36), ForeignKey("properties.id", ondelete="SET NULL"), nullable=True)

    event_type = Column(String(50), nullable=False)  # new, modified, cancelled, not_booking
    decision = Column(String(20), nullable=False, default=ImportDecision.AUTO.value)
    requires_approval = Column(Boolean, default=False, nullable=False)

    # Outcome
    booking_id = Column(String(36), ForeignKey("bookings.id", ondelete="SET NULL"), nullable=True)
    import_errors = Column(JSON(none_as_null=True), nullable=True)  # {"reason": ..., "kind": ..., ...}

    processed_at = Column(DateTime, nullable=True)
    processed_by = Column(String(100), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index("uq_email_import_per_message", "email_message_id", unique=True),
        Index("ix_email_booking_imports_property", "property_id"),
        Index("ix_email_booking_imports_booking", "booking_id"),
    )

    @property
    def error_reason(self):
        return (self.import_errors or {}).get("reason")

    def __repr__(self):
        return f"<EmailBookingImport {self.email_message_id} booking={self.booking_id}>"
