"""
Email Booking Importer

Reconciles one parsed OTA booking email against the booking store:
1. Resolve the property and classify the event (action + decision tier)
2. Stop early for notification-only emails and, when enforced, for
   imports still awaiting manual approval
3. Resolve the guest profile, find the candidate booking, apply the change
4. Commit the booking write, then upsert the ledger row for the message
5. Mark the email processed and notify the property (both best-effort)

A booking store failure aborts the reconciliation before the ledger is
touched, so the email stays pending and can be reprocessed.
"""

import logging
from datetime import date
from dataclasses import dataclass
from typing import Any, Dict, Optional
import enum

from sqlalchemy.orm import Session

from ..config import settings
from ..models.booking import Booking, BookingSource, BookingStatus
from ..models.email_import import (
    EmailBookingImport,
    ImportErrorKind,
    ImportErrorReason,
    build_import_errors
)
from ..models.notification import NotificationPriority, NotificationType
from ..schemas.parsed_event import ParsedBookingEvent
from ..utils.logging_config import get_logger
from .booking_diff import diff_booking, room_number_from
from .booking_store import SqlBookingStore
from .candidate_matcher import CandidateBookingMatcher
from .decision_policy import Classification, ImportAction, classify, is_notification_only, missing_stay_dates
from .guest_profile_store import SqlGuestProfileStore
from .guest_resolver import GuestIdentityResolver
from .import_ledger import ImportLedger
from .notification_service import NotificationService
from .property_directory import SqlPropertyDirectory
from .property_resolver import PropertyResolver

logger = logging.getLogger(__name__)
import_logger = get_logger(__name__)


class ImportOutcome(str, enum.Enum):
    CREATED = "created"
    UPDATED = "updated"
    CANCELLED = "cancelled"
    IGNORED = "ignored"
    ERRORED = "errored"
    PENDING_APPROVAL = "pending_approval"


NOTIFICATION_TITLES = {
    ImportAction.CREATE: "New OTA booking",
    ImportAction.UPDATE: "Booking modified",
    ImportAction.CANCEL: "Booking cancelled",
}


@dataclass
class ImportResult:
    """Result of reconciling one email"""
    outcome: ImportOutcome
    ledger_entry: Optional[EmailBookingImport] = None
    booking_id: Optional[str] = None
    error: Optional[Dict[str, Any]] = None

    @property
    def reason(self) -> Optional[str]:
        return (self.error or {}).get("reason")


class EmailBookingImporter:
    """
    Applies parsed booking emails to the booking store.

    Collaborators default to the SQL-backed implementations sharing the
    given session; tests and other callers may pass their own.
    """

    def __init__(
        self,
        db: Session,
        booking_store=None,
        guest_store=None,
        property_directory=None,
        notifier=None,
        ledger: Optional[ImportLedger] = None,
        request_id: Optional[str] = None,
        enforce_approval: Optional[bool] = None
    ):
        self.db = db
        self.request_id = request_id or "no-request-id"
        self.booking_store = booking_store or SqlBookingStore(db)
        self.ledger = ledger or ImportLedger(db)
        self.notifier = notifier or NotificationService(db)
        self.property_resolver = PropertyResolver(property_directory or SqlPropertyDirectory(db))
        self.guest_resolver = GuestIdentityResolver(guest_store or SqlGuestProfileStore(db))
        self.matcher = CandidateBookingMatcher(self.ledger, self.booking_store)
        if enforce_approval is None:
            enforce_approval = settings.enforce_manual_approval
        self.enforce_approval = enforce_approval

    def import_from_parsed(
        self,
        message_id: str,
        event: ParsedBookingEvent,
        property_id: Optional[str] = None,
        approved: bool = False,
        extraction_id: Optional[str] = None
    ) -> ImportResult:
        """
        Reconcile one parsed email and record the outcome in the ledger.

        Raises:
            BookingStoreError, SQLAlchemyError: the booking write failed.
                Nothing is recorded and the email is left unprocessed.
        """
        resolved_property_id = property_id or self.property_resolver.resolve(event)
        classification = classify(event)

        entry = {
            "extraction_id": extraction_id,
            "property_id": resolved_property_id,
            "event_type": event.event_type,
            "decision": classification.decision.value,
            "requires_approval": classification.requires_approval,
        }

        if is_notification_only(event):
            errors = build_import_errors(ImportErrorReason.NOTIFICATION_ONLY)
            return self._record(message_id, entry, ImportOutcome.IGNORED, errors=errors)

        if self.enforce_approval and classification.requires_approval and not approved:
            errors = build_import_errors(ImportErrorReason.AWAITING_APPROVAL)
            return self._record(
                message_id, entry, ImportOutcome.PENDING_APPROVAL,
                errors=errors, mark_processed=False
            )

        if classification.action == ImportAction.IGNORE:
            return self._record(message_id, entry, ImportOutcome.IGNORED)

        try:
            outcome, booking_id, errors = self._apply(
                message_id, event, classification, resolved_property_id
            )
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"[{self.request_id}] Booking write failed for message {message_id}: {e}")
            raise

        result = self._record(message_id, entry, outcome, booking_id=booking_id, errors=errors)
        if resolved_property_id:
            self._notify(resolved_property_id, message_id, event, classification.action, booking_id)
        return result

    def _apply(
        self,
        message_id: str,
        event: ParsedBookingEvent,
        classification: Classification,
        property_id: Optional[str]
    ):
        """Run the per-action contract. Returns (outcome, booking_id, errors)."""
        action = classification.action

        if action == ImportAction.CREATE:
            if missing_stay_dates(event):
                errors = build_import_errors(
                    ImportErrorReason.MISSING_REQUIRED_FIELDS,
                    fields={"check_in": bool(event.check_in), "check_out": bool(event.check_out)}
                )
                return ImportOutcome.ERRORED, None, errors

            guest_id = self._resolve_guest(event)
            booking = self._booking_from_earlier_import(message_id)
            if booking:
                # Same email imported before: bring that booking up to date
                logger.info(f"[{self.request_id}] Message {message_id} already created booking {booking.id}")
                booking = self.booking_store.update(
                    booking.id, self._update_payload(booking, event, guest_id)
                )
            else:
                booking = self.booking_store.create(self._create_payload(event, property_id, guest_id))
            return ImportOutcome.CREATED, booking.id, None

        if action == ImportAction.UPDATE:
            guest_id = self._resolve_guest(event)
            candidate = self.matcher.match_candidate(message_id, event, property_id)
            if not candidate:
                errors = build_import_errors(ImportErrorReason.BOOKING_NOT_FOUND_FOR_MODIFY)
                return ImportOutcome.ERRORED, None, errors
            booking = self.booking_store.update(
                candidate.id, self._update_payload(candidate, event, guest_id)
            )
            return ImportOutcome.UPDATED, booking.id, None

        candidate = self.matcher.match_candidate(message_id, event, property_id)
        if not candidate:
            errors = build_import_errors(ImportErrorReason.BOOKING_NOT_FOUND_FOR_CANCEL)
            return ImportOutcome.ERRORED, None, errors
        if not self.booking_store.cancel(candidate.id):
            errors = build_import_errors(ImportErrorReason.CANCEL_REJECTED, booking_id=candidate.id)
            return ImportOutcome.ERRORED, None, errors
        return ImportOutcome.CANCELLED, candidate.id, None

    def _resolve_guest(self, event: ParsedBookingEvent) -> Optional[str]:
        return self.guest_resolver.resolve_or_create(
            event.guest_name, event.contact_email, event.contact_phone
        )

    def _booking_from_earlier_import(self, message_id: str) -> Optional[Booking]:
        previous = self.ledger.get(message_id)
        if not previous or not previous.booking_id:
            return None
        return self.booking_store.get_by_id(previous.booking_id)

    def _source_details(self, event: ParsedBookingEvent, existing: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        details = dict(existing or {})
        details["provider"] = event.ota_platform.value
        if event.booking_reference:
            details["ota_ref"] = event.booking_reference
        return details

    def _create_payload(
        self,
        event: ParsedBookingEvent,
        property_id: Optional[str],
        guest_id: Optional[str]
    ) -> Dict[str, Any]:
        payload = diff_booking(None, event).proposed
        payload.update({
            "property_id": property_id,
            "guest_name": event.guest_name or "Guest",
            "room_no": room_number_from(event),
            "number_of_rooms": 1,
            "status": BookingStatus.CONFIRMED.value,
            "cancelled": False,
            "total_amount": event.total_amount if event.total_amount is not None else 0,
            "source": BookingSource.OTA.value,
            "source_details": self._source_details(event),
            "booking_date": date.today(),
        })
        if guest_id:
            payload["guest_profile_id"] = guest_id
        return payload

    def _update_payload(
        self,
        candidate: Booking,
        event: ParsedBookingEvent,
        guest_id: Optional[str]
    ) -> Dict[str, Any]:
        payload = diff_booking(candidate, event).proposed
        payload["source"] = BookingSource.OTA.value
        payload["source_details"] = self._source_details(event, candidate.source_details)
        if guest_id:
            payload["guest_profile_id"] = guest_id
        return payload

    def _record(
        self,
        message_id: str,
        entry: Dict[str, Any],
        outcome: ImportOutcome,
        booking_id: Optional[str] = None,
        errors: Optional[Dict[str, Any]] = None,
        mark_processed: bool = True
    ) -> ImportResult:
        ledger_entry = self.ledger.commit(message_id, dict(
            entry,
            booking_id=booking_id,
            import_errors=errors,
            processed_by=settings.processed_by
        ))
        if mark_processed:
            self.ledger.mark_processed(message_id)

        import_logger.import_recorded(
            message_id,
            outcome.value,
            booking_id=booking_id,
            reason=(errors or {}).get("reason"),
            decision=entry["decision"]
        )
        return ImportResult(
            outcome=outcome,
            ledger_entry=ledger_entry,
            booking_id=booking_id,
            error=errors
        )

    def _notify(
        self,
        property_id: str,
        message_id: str,
        event: ParsedBookingEvent,
        action: ImportAction,
        booking_id: Optional[str]
    ):
        """Tell the property about the import. Never fails the import."""
        message = f"{event.guest_name or 'Guest'} | {event.check_in or ''} -> {event.check_out or ''}"
        if event.booking_reference:
            message += f" | Ref {event.booking_reference}"

        if action == ImportAction.CANCEL:
            priority = NotificationPriority.HIGH.value
        else:
            priority = NotificationPriority.MEDIUM.value

        try:
            self.notifier.send(
                property_id=property_id,
                type=NotificationType.UPDATE.value,
                title=NOTIFICATION_TITLES[action],
                message=message,
                priority=priority,
                platform=event.ota_platform.value,
                data={
                    "booking_id": booking_id,
                    "message_id": message_id,
                    "event_type": event.event_type,
                }
            )
        except Exception as e:
            self.db.rollback()
            logger.warning(
                f"[{self.request_id}] Notification for message {message_id} failed: {e}",
                extra={"extra_data": {"kind": ImportErrorKind.NOTIFICATION_FAILURE.value}}
            )
