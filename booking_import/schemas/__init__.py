from .parsed_event import ParsedBookingEvent, EventType, OtaPlatform
from .email_import import (
    BookingSummary,
    FieldChangeResponse,
    PlatformMetadata,
    ImportPreviewResponse,
    EmailBookingImportResponse,
    ImportResultResponse,
    PendingEmailResponse
)

__all__ = [
    "ParsedBookingEvent", "EventType", "OtaPlatform",
    "BookingSummary", "FieldChangeResponse", "PlatformMetadata",
    "ImportPreviewResponse", "EmailBookingImportResponse",
    "ImportResultResponse", "PendingEmailResponse"
]
