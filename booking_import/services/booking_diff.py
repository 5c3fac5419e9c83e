from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

from ..models.booking import Booking
from ..schemas.parsed_event import ParsedBookingEvent

# Booking field -> event field, in display order
MUTABLE_FIELDS = (
    ("guest_name", "guest_name"),
    ("room_no", "room_no"),
    ("check_in", "check_in"),
    ("check_out", "check_out"),
    ("no_of_pax", "no_of_pax"),
    ("adult_child", "adult_child"),
    ("total_amount", "total_amount"),
    ("payment_status", "payment_status"),
    ("contact_phone", "contact_phone"),
    ("contact_email", "contact_email"),
    ("special_requests", "special_requests"),
)


@dataclass
class FieldChange:
    field: str
    from_value: Any
    to_value: Any


@dataclass
class BookingDiff:
    proposed: Dict[str, Any] = field(default_factory=dict)
    changes: List[FieldChange] = field(default_factory=list)


def room_number_from(event: ParsedBookingEvent) -> Optional[str]:
    """Trimmed room number, or None when the email names no concrete room"""
    room = (event.room_no or "").strip()
    return room or None


def _comparable(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    return value


def diff_booking(candidate: Optional[Booking], event: ParsedBookingEvent) -> BookingDiff:
    """
    Propose booking values from an event and list what would change.

    Only fields the event defines are proposed. A blank room number is
    left out entirely so an existing room assignment is never cleared.
    """
    diff = BookingDiff()

    for booking_field, event_field in MUTABLE_FIELDS:
        if booking_field == "room_no":
            to_value = room_number_from(event)
        else:
            to_value = getattr(event, event_field)
        if to_value is None:
            continue

        diff.proposed[booking_field] = to_value

        if candidate is not None:
            from_value = getattr(candidate, booking_field, None)
            if _comparable(from_value) != _comparable(to_value):
                diff.changes.append(FieldChange(
                    field=booking_field,
                    from_value=from_value,
                    to_value=to_value
                ))

    return diff
