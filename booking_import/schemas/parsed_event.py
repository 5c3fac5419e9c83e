from pydantic import BaseModel, Field, field_validator
from typing import Optional, Dict, Any
from datetime import date, datetime
from enum import Enum


class EventType(str, Enum):
    NEW = "new"
    MODIFIED = "modified"
    CANCELLED = "cancelled"
    NOT_BOOKING = "not_booking"


class OtaPlatform(str, Enum):
    BOOKING_COM = "booking_com"
    GOMMT = "gommt"
    OTHER = "other"


class ParsedBookingEvent(BaseModel):
    """One OTA booking email after extraction"""
    event_type: str = Field(..., description="new, modified, cancelled or anything else")
    ota_platform: OtaPlatform = OtaPlatform.OTHER
    booking_reference: Optional[str] = None

    guest_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None

    room_type: Optional[str] = None
    room_no: Optional[str] = None
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    no_of_pax: Optional[int] = None
    adult_child: Optional[str] = None

    total_amount: Optional[float] = None
    currency: Optional[str] = None
    payment_status: Optional[str] = None
    special_requests: Optional[str] = None

    property_hint: Optional[str] = None
    confidence: float = Field(..., ge=0, le=1)
    reasoning: Optional[str] = None
    raw_fields: Optional[Dict[str, Any]] = None

    @field_validator('event_type', mode='before')
    @classmethod
    def normalize_event_type(cls, v):
        if v is None:
            return EventType.NOT_BOOKING.value
        return str(v).strip().lower()

    @field_validator('ota_platform', mode='before')
    @classmethod
    def normalize_platform(cls, v):
        """Unknown platforms are reported as other"""
        if isinstance(v, OtaPlatform):
            return v
        value = (v or "").strip().lower() if isinstance(v, str) else ""
        try:
            return OtaPlatform(value)
        except ValueError:
            return OtaPlatform.OTHER

    @field_validator('check_in', 'check_out', mode='before')
    @classmethod
    def parse_dates(cls, v):
        """Accept YYYY-MM-DD (optionally with a time part) or DD/MM/YYYY"""
        if v is None or isinstance(v, date):
            return v
        if not isinstance(v, str) or not v.strip():
            return None
        value = v.strip().split("T")[0]
        for fmt in ("%Y-%m-%d", "%d/%m/%Y"):
            try:
                return datetime.strptime(value, fmt).date()
            except ValueError:
                continue
        raise ValueError(f"Unrecognised date: {v}")

    @field_validator('room_no', mode='before')
    @classmethod
    def coerce_room_no(cls, v):
        if v is None:
            return v
        return str(v)

    @property
    def has_stay_dates(self) -> bool:
        return self.check_in is not None and self.check_out is not None
