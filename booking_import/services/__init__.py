# Services package
from .booking_store import SqlBookingStore, BookingStoreError
from .guest_profile_store import SqlGuestProfileStore
from .property_directory import SqlPropertyDirectory
from .notification_service import NotificationService
from .property_resolver import PropertyResolver
from .guest_resolver import GuestIdentityResolver
from .candidate_matcher import CandidateBookingMatcher, CandidateMatch, MatchTier
from .booking_diff import diff_booking, BookingDiff, FieldChange
from .decision_policy import classify, Classification, ImportAction
from .import_ledger import ImportLedger
from .import_preview import ImportPreviewService, ImportPreview
from .email_import_processor import EmailBookingImporter, ImportResult, ImportOutcome

__all__ = [
    "SqlBookingStore", "BookingStoreError",
    "SqlGuestProfileStore", "SqlPropertyDirectory", "NotificationService",
    "PropertyResolver", "GuestIdentityResolver",
    "CandidateBookingMatcher", "CandidateMatch", "MatchTier",
    "diff_booking", "BookingDiff", "FieldChange",
    "classify", "Classification", "ImportAction",
    "ImportLedger",
    "ImportPreviewService", "ImportPreview",
    "EmailBookingImporter", "ImportResult", "ImportOutcome"
]
