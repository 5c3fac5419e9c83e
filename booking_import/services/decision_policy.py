from dataclasses import dataclass
from typing import List, Optional
import enum

from ..config import settings
from ..models.email_import import ImportDecision
from ..schemas.parsed_event import ParsedBookingEvent, EventType


class ImportAction(str, enum.Enum):
    CREATE = "create"
    UPDATE = "update"
    CANCEL = "cancel"
    IGNORE = "ignore"


EVENT_ACTIONS = {
    EventType.NEW.value: ImportAction.CREATE,
    EventType.MODIFIED.value: ImportAction.UPDATE,
    EventType.CANCELLED.value: ImportAction.CANCEL,
}


@dataclass
class Classification:
    action: ImportAction
    decision: ImportDecision
    # Separate from decision: decision records provenance,
    # requires_approval is what an approval gate checks
    requires_approval: bool


def classify(event: ParsedBookingEvent, threshold: Optional[float] = None) -> Classification:
    """Map an event to an action and tag it auto or manual-approved"""
    if threshold is None:
        threshold = settings.auto_import_confidence

    action = EVENT_ACTIONS.get(event.event_type, ImportAction.IGNORE)
    if event.confidence >= threshold:
        decision = ImportDecision.AUTO
    else:
        decision = ImportDecision.MANUAL_APPROVED

    return Classification(
        action=action,
        decision=decision,
        requires_approval=decision == ImportDecision.MANUAL_APPROVED
    )


def missing_stay_dates(event: ParsedBookingEvent) -> List[str]:
    missing = []
    if not event.check_in:
        missing.append("check_in")
    if not event.check_out:
        missing.append("check_out")
    return missing


def is_notification_only(event: ParsedBookingEvent, platforms: Optional[List[str]] = None) -> bool:
    """
    Some platforms send notification emails that never carry stay
    dates. Those are recorded and skipped, never matched or applied.
    """
    if platforms is None:
        platforms = settings.notification_only_platform_list
    return event.ota_platform.value in platforms and not event.has_stay_dates
