import logging
from typing import Optional

from ..models.email_import import ImportErrorKind
from ..schemas.parsed_event import ParsedBookingEvent

logger = logging.getLogger(__name__)


class PropertyResolver:
    """
    Maps an email's property hint to a property id.

    Hint matching is a case-insensitive substring test against the
    active properties' names and addresses. Without a hint, or when
    nothing matches, the first active property is used.
    """

    def __init__(self, directory):
        self.directory = directory

    def resolve(self, event: ParsedBookingEvent) -> Optional[str]:
        try:
            properties = self.directory.list_active()
        except Exception as e:
            logger.warning(
                f"Property resolution failed: {e}",
                extra={"extra_data": {"kind": ImportErrorKind.RESOLUTION_FAILURE.value}}
            )
            return None

        if not properties:
            logger.warning("No active properties to import bookings into")
            return None

        hint = (event.property_hint or "").strip().lower()
        if hint:
            for prop in properties:
                if hint in (prop.name or "").lower() or hint in (prop.address or "").lower():
                    return prop.id
            logger.info(f"Property hint '{event.property_hint}' matched nothing, using default property")

        return properties[0].id
