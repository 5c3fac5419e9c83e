"""
Email Import Schemas

Pydantic models for the email import API responses.
"""

from datetime import date, datetime
from typing import Optional, List, Dict, Any
from pydantic import BaseModel


class BookingSummary(BaseModel):
    """Booking as shown next to a proposed change"""
    id: str
    property_id: Optional[str] = None
    guest_name: str
    room_no: Optional[str] = None
    check_in: date
    check_out: date
    no_of_pax: Optional[int] = None
    status: Optional[str] = None
    cancelled: bool = False
    total_amount: Optional[float] = None
    payment_status: Optional[str] = None
    source: Optional[str] = None
    source_details: Optional[Dict[str, Any]] = None

    class Config:
        from_attributes = True


class FieldChangeResponse(BaseModel):
    field: str
    from_value: Optional[Any] = None
    to_value: Optional[Any] = None


class PlatformMetadata(BaseModel):
    ota_platform: str
    room_type: Optional[str] = None
    property_hint: Optional[str] = None
    resolved_property_id: Optional[str] = None


class ImportPreviewResponse(BaseModel):
    action: str  # create, update, cancel, ignore
    decision: str
    requires_approval: bool
    candidate_booking: Optional[BookingSummary] = None
    match_tier: Optional[str] = None
    proposed: Dict[str, Any] = {}
    changes: List[FieldChangeResponse] = []
    missing_fields: Optional[List[str]] = None
    reason: Optional[str] = None
    platform_metadata: PlatformMetadata


class EmailBookingImportResponse(BaseModel):
    """Ledger row"""
    id: str
    email_message_id: str
    extraction_id: Optional[str] = None
    property_id: Optional[str] = None
    event_type: str
    decision: str
    requires_approval: bool
    booking_id: Optional[str] = None
    import_errors: Optional[Dict[str, Any]] = None
    processed_at: Optional[datetime] = None
    processed_by: Optional[str] = None

    class Config:
        from_attributes = True


class ImportResultResponse(BaseModel):
    outcome: str
    booking_id: Optional[str] = None
    error: Optional[str] = None
    ledger_entry: Optional[EmailBookingImportResponse] = None


class PendingEmailResponse(BaseModel):
    id: str
    external_message_id: str
    thread_id: Optional[str] = None
    sender: Optional[str] = None
    subject: Optional[str] = None
    received_at: Optional[datetime] = None
    last_import: Optional[EmailBookingImportResponse] = None
