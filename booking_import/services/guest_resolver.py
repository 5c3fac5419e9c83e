import logging
from typing import Optional

from ..config import settings
from ..models.email_import import ImportErrorKind

logger = logging.getLogger(__name__)


class GuestIdentityResolver:
    """Find or create the guest profile behind an imported booking"""

    def __init__(self, store, default_country: Optional[str] = None):
        self.store = store
        self.default_country = default_country or settings.default_guest_country

    def resolve_or_create(
        self,
        name: Optional[str],
        email: Optional[str],
        phone: Optional[str]
    ) -> Optional[str]:
        """
        Return the guest profile id for these contact details.

        An existing profile (matched by email, then phone) receives the
        non-empty incoming fields. A new profile is created only when an
        email or phone is known. Failures are logged and yield None so
        the import can carry on without a guest link.
        """
        name = (name or "").strip() or None
        email = (email or "").strip() or None
        phone = (phone or "").strip() or None

        if not email and not phone:
            return None

        try:
            existing = self.store.find_by_contact(email=email, phone=phone)

            if existing:
                incoming = {"name": name, "email": email, "phone": phone}
                updates = {
                    field: value
                    for field, value in incoming.items()
                    if value and getattr(existing, field, None) != value
                }
                if updates:
                    self.store.update(existing.id, updates)
                logger.info(f"Linked OTA booking to existing guest profile {existing.id}")
                return existing.id

            guest = self.store.create({
                "name": name or "Guest",
                "email": email,
                "phone": phone,
                "country": self.default_country,
                "email_marketing_consent": True,
                "sms_marketing_consent": True,
                "data_retention_consent": True,
            })
            logger.info(f"Created guest profile {guest.id} for OTA booking")
            return guest.id

        except Exception as e:
            logger.error(
                f"Failed to create/link guest profile: {e}",
                extra={"extra_data": {"kind": ImportErrorKind.RESOLUTION_FAILURE.value}}
            )
            return None
