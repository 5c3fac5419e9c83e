"""
Candidate Booking Matcher

Finds the existing booking an OTA email refers to. Strategies run in a
fixed order and the first hit wins:

1. thread linkage  - a booking already imported from the same email thread
2. reference+dates - OTA reference and exact stay dates in the property
3. guest name      - exact (case-insensitive) name, property first, then anywhere

Adding a tier means adding one function to STRATEGIES. Booking store
errors raised by a strategy propagate to the caller.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple
import enum

from ..models.booking import Booking
from ..schemas.parsed_event import ParsedBookingEvent

logger = logging.getLogger(__name__)


class MatchTier(str, enum.Enum):
    THREAD = "thread"
    REFERENCE_DATES = "reference_dates"
    GUEST_NAME = "guest_name"


@dataclass
class MatchContext:
    message_id: Optional[str]
    event: ParsedBookingEvent
    property_id: Optional[str]


@dataclass
class CandidateMatch:
    booking: Booking
    tier: MatchTier


def match_by_thread(matcher: "CandidateBookingMatcher", ctx: MatchContext) -> Optional[Booking]:
    """Thread linkage is a hint only: lookup failures fall through to the next tier."""
    if not ctx.message_id:
        return None
    try:
        sibling_ids = matcher.ledger.thread_message_ids(ctx.message_id)
        booking_id = matcher.ledger.latest_booking_for_messages(sibling_ids)
        if not booking_id:
            return None
        return matcher.booking_store.get_by_id(booking_id)
    except Exception as e:
        logger.warning(f"Thread lookup for message {ctx.message_id} failed: {e}")
        return None


def match_by_reference_and_dates(matcher: "CandidateBookingMatcher", ctx: MatchContext) -> Optional[Booking]:
    event = ctx.event
    if not (event.booking_reference and event.check_in and event.check_out):
        return None

    bookings = matcher.booking_store.list(
        property_id=ctx.property_id,
        check_in=event.check_in,
        check_out=event.check_out
    )
    for booking in bookings:
        details = booking.source_details or {}
        if (
            details.get("ota_ref") == event.booking_reference
            and booking.check_in == event.check_in
            and booking.check_out == event.check_out
        ):
            return booking
    return None


def match_by_guest_name(matcher: "CandidateBookingMatcher", ctx: MatchContext) -> Optional[Booking]:
    name = (ctx.event.guest_name or "").strip().lower()
    if not name:
        return None

    scopes = [ctx.property_id, None] if ctx.property_id else [None]
    for scope in scopes:
        for booking in matcher.booking_store.list(property_id=scope):
            if (booking.guest_name or "").strip().lower() == name:
                return booking
    return None


STRATEGIES: Tuple[Tuple[MatchTier, Callable], ...] = (
    (MatchTier.THREAD, match_by_thread),
    (MatchTier.REFERENCE_DATES, match_by_reference_and_dates),
    (MatchTier.GUEST_NAME, match_by_guest_name),
)


class CandidateBookingMatcher:
    def __init__(self, ledger, booking_store, strategies=STRATEGIES):
        self.ledger = ledger
        self.booking_store = booking_store
        self.strategies = strategies

    def match(
        self,
        message_id: Optional[str],
        event: ParsedBookingEvent,
        property_id: Optional[str]
    ) -> Optional[CandidateMatch]:
        ctx = MatchContext(message_id=message_id, event=event, property_id=property_id)

        for tier, strategy in self.strategies:
            booking = strategy(self, ctx)
            if booking is not None:
                logger.info(f"Matched booking {booking.id} by {tier.value} for message {message_id}")
                return CandidateMatch(booking=booking, tier=tier)

        return None

    def match_candidate(
        self,
        message_id: Optional[str],
        event: ParsedBookingEvent,
        property_id: Optional[str]
    ) -> Optional[Booking]:
        found = self.match(message_id, event, property_id)
        return found.booking if found else None
