"""
Import Preview

Dry run of an email import for the review screen: resolves the property,
looks for a candidate booking and diffs it against the email, but writes
nothing (no guest profile, no ledger row, no processed flag).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..models.booking import Booking
from ..models.email_import import ImportErrorReason
from ..schemas.parsed_event import ParsedBookingEvent
from .booking_diff import FieldChange, diff_booking
from .candidate_matcher import CandidateBookingMatcher
from .decision_policy import ImportAction, classify, is_notification_only, missing_stay_dates
from .property_resolver import PropertyResolver

NO_MATCH_REASON = "No matching booking found"
NOT_BOOKING_REASON = "Not booking-related"


@dataclass
class ImportPreview:
    action: ImportAction
    decision: str
    requires_approval: bool
    platform_metadata: Dict[str, Any]
    candidate_booking: Optional[Booking] = None
    match_tier: Optional[str] = None
    proposed: Dict[str, Any] = field(default_factory=dict)
    changes: List[FieldChange] = field(default_factory=list)
    missing_fields: Optional[List[str]] = None
    reason: Optional[str] = None


class ImportPreviewService:
    def __init__(self, property_resolver: PropertyResolver, matcher: CandidateBookingMatcher):
        self.property_resolver = property_resolver
        self.matcher = matcher

    def preview(
        self,
        event: ParsedBookingEvent,
        property_id: Optional[str] = None,
        message_id: Optional[str] = None
    ) -> ImportPreview:
        resolved_property_id = property_id or self.property_resolver.resolve(event)
        classification = classify(event)

        result = ImportPreview(
            action=classification.action,
            decision=classification.decision.value,
            requires_approval=classification.requires_approval,
            platform_metadata={
                "ota_platform": event.ota_platform.value,
                "room_type": event.room_type,
                "property_hint": event.property_hint,
                "resolved_property_id": resolved_property_id,
            }
        )

        # Same order as the importer: notification-only wins over ignore
        if is_notification_only(event):
            result.reason = ImportErrorReason.NOTIFICATION_ONLY.value
            result.missing_fields = missing_stay_dates(event)
            return result

        if classification.action == ImportAction.IGNORE:
            result.reason = NOT_BOOKING_REASON
            return result

        if classification.action == ImportAction.CREATE:
            result.proposed = diff_booking(None, event).proposed
            result.proposed["property_id"] = resolved_property_id
            result.missing_fields = missing_stay_dates(event) or None
            return result

        found = self.matcher.match(message_id, event, resolved_property_id)
        if not found:
            result.reason = NO_MATCH_REASON
            return result

        result.candidate_booking = found.booking
        result.match_tier = found.tier.value
        if classification.action == ImportAction.UPDATE:
            diff = diff_booking(found.booking, event)
            result.proposed = diff.proposed
            result.changes = diff.changes
        return result
