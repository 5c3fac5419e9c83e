# Models package
from .property import Property
from .guest_profile import GuestProfile
from .booking import Booking, BookingStatus, BookingSource
from .email_message import EmailMessage
from .email_import import (
    EmailBookingImport,
    ImportDecision,
    ImportErrorReason,
    ImportErrorKind,
    build_import_errors
)
from .notification import Notification, NotificationType, NotificationPriority

__all__ = [
    "Property", "GuestProfile",
    "Booking", "BookingStatus", "BookingSource",
    "EmailMessage",
    "EmailBookingImport", "ImportDecision", "ImportErrorReason", "ImportErrorKind",
    "build_import_errors",
    "Notification", "NotificationType", "NotificationPriority"
]
