"""
Email Imports Router

Review and apply parsed OTA booking emails:
- GET  /pending                  unprocessed or errored emails with their last import
- POST /{message_id}/preview     dry run, nothing is written
- POST /{message_id}/import      reconcile and record in the ledger
- GET  /{message_id}             ledger entry for an email
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.email_message import EmailMessage
from ..schemas.email_import import (
    BookingSummary,
    EmailBookingImportResponse,
    FieldChangeResponse,
    ImportPreviewResponse,
    ImportResultResponse,
    PendingEmailResponse,
    PlatformMetadata
)
from ..schemas.parsed_event import ParsedBookingEvent
from ..services.booking_store import BookingStoreError, SqlBookingStore
from ..services.candidate_matcher import CandidateBookingMatcher
from ..services.email_import_processor import EmailBookingImporter
from ..services.import_ledger import ImportLedger
from ..services.import_preview import ImportPreviewService
from ..services.property_directory import SqlPropertyDirectory
from ..services.property_resolver import PropertyResolver
from ..utils.logging_config import set_request_context

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/email-imports", tags=["Email Imports"])


def _get_message_or_404(db: Session, message_id: str) -> EmailMessage:
    message = db.query(EmailMessage).filter(EmailMessage.id == message_id).first()
    if not message:
        raise HTTPException(status_code=404, detail="Email message not found")
    return message


def _request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None)


@router.get("/pending", response_model=List[PendingEmailResponse])
def list_pending_emails(
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db)
):
    """Emails still waiting to be imported or needing review, newest first"""
    ledger = ImportLedger(db)
    results = []
    for message in ledger.pending_messages(limit=limit):
        last_import = ledger.get(message.id)
        results.append(PendingEmailResponse(
            id=message.id,
            external_message_id=message.external_message_id,
            thread_id=message.thread_id,
            sender=message.sender,
            subject=message.subject,
            received_at=message.received_at,
            last_import=EmailBookingImportResponse.model_validate(last_import) if last_import else None
        ))
    return results


@router.post("/{message_id}/preview", response_model=ImportPreviewResponse)
def preview_import(
    message_id: str,
    event: ParsedBookingEvent,
    property_id: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """Show what importing this email would do without writing anything"""
    _get_message_or_404(db, message_id)

    ledger = ImportLedger(db)
    service = ImportPreviewService(
        PropertyResolver(SqlPropertyDirectory(db)),
        CandidateBookingMatcher(ledger, SqlBookingStore(db))
    )
    preview = service.preview(event, property_id=property_id, message_id=message_id)

    candidate = None
    if preview.candidate_booking is not None:
        candidate = BookingSummary.model_validate(preview.candidate_booking)

    return ImportPreviewResponse(
        action=preview.action.value,
        decision=preview.decision,
        requires_approval=preview.requires_approval,
        candidate_booking=candidate,
        match_tier=preview.match_tier,
        proposed=preview.proposed,
        changes=[
            FieldChangeResponse(field=c.field, from_value=c.from_value, to_value=c.to_value)
            for c in preview.changes
        ],
        missing_fields=preview.missing_fields,
        reason=preview.reason,
        platform_metadata=PlatformMetadata(**preview.platform_metadata)
    )


@router.post("/{message_id}/import", response_model=ImportResultResponse)
def import_email(
    message_id: str,
    event: ParsedBookingEvent,
    request: Request,
    property_id: Optional[str] = None,
    approved: bool = False,
    db: Session = Depends(get_db)
):
    """Apply the parsed email to the booking store and record the outcome"""
    _get_message_or_404(db, message_id)
    request_id = _request_id(request)
    set_request_context(request_id or "", message_id=message_id)

    importer = EmailBookingImporter(db, request_id=request_id)
    try:
        result = importer.import_from_parsed(
            message_id, event, property_id=property_id, approved=approved
        )
    except (BookingStoreError, SQLAlchemyError) as e:
        logger.error(f"[{request_id}] Import of message {message_id} failed: {e}")
        raise HTTPException(status_code=502, detail=f"Booking store failure: {e}")

    ledger_entry = None
    if result.ledger_entry is not None:
        ledger_entry = EmailBookingImportResponse.model_validate(result.ledger_entry)

    return ImportResultResponse(
        outcome=result.outcome.value,
        booking_id=result.booking_id,
        error=result.reason,
        ledger_entry=ledger_entry
    )


@router.get("/{message_id}", response_model=EmailBookingImportResponse)
def get_import(message_id: str, db: Session = Depends(get_db)):
    """Ledger entry recorded for an email"""
    entry = ImportLedger(db).get(message_id)
    if not entry:
        raise HTTPException(status_code=404, detail="No import recorded for this email")
    return entry
