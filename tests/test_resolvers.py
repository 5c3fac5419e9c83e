"""
Tests for the Property Resolver and Guest Identity Resolver

Tests cover:
- Hint matching on property name and address
- Default property fallback and empty directory
- Directory failures degrade to no property
- Guest lookup by email then phone, with field updates
- Guest creation defaults
- No profile without contact details
- Store failures degrade to no guest link
"""

import logging
from unittest.mock import MagicMock

from booking_import.models.guest_profile import GuestProfile
from booking_import.services.guest_profile_store import SqlGuestProfileStore
from booking_import.services.guest_resolver import GuestIdentityResolver
from booking_import.services.property_directory import SqlPropertyDirectory
from booking_import.services.property_resolver import PropertyResolver
from tests.conftest import make_event


def _prop(prop_id, name, address=None):
    prop = MagicMock()
    prop.id = prop_id
    prop.name = name
    prop.address = address
    return prop


class TestPropertyResolver:
    def _resolver(self, *properties):
        directory = MagicMock()
        directory.list_active.return_value = list(properties)
        return PropertyResolver(directory)

    def test_hint_matches_name(self):
        resolver = self._resolver(_prop("p1", "Hill Cottage"), _prop("p2", "Sea View Homestay"))
        assert resolver.resolve(make_event(property_hint="sea view")) == "p2"

    def test_hint_matches_address(self):
        resolver = self._resolver(_prop("p1", "Hill Cottage", "Manali"), _prop("p2", "Villa", "Calangute, Goa"))
        assert resolver.resolve(make_event(property_hint="Goa")) == "p2"

    def test_unmatched_hint_falls_back_to_first_property(self):
        resolver = self._resolver(_prop("p1", "Hill Cottage"), _prop("p2", "Sea View"))
        assert resolver.resolve(make_event(property_hint="Lake House")) == "p1"

    def test_no_hint_uses_first_property(self):
        resolver = self._resolver(_prop("p1", "Hill Cottage"))
        assert resolver.resolve(make_event(property_hint=None)) == "p1"

    def test_no_properties(self):
        assert self._resolver().resolve(make_event(property_hint="anything")) is None

    def test_directory_failure_yields_none(self, caplog):
        directory = MagicMock()
        directory.list_active.side_effect = RuntimeError("database unavailable")

        with caplog.at_level(logging.WARNING, logger="booking_import.services.property_resolver"):
            assert PropertyResolver(directory).resolve(make_event()) is None

        assert caplog.records[-1].extra_data == {"kind": "resolution_failure"}

    def test_sql_directory_skips_inactive(self, db, property_factory):
        active = property_factory(name="Sea View Homestay")
        closed = property_factory(name="Closed Villa")
        closed.is_active = False
        db.commit()

        resolver = PropertyResolver(SqlPropertyDirectory(db))
        assert resolver.resolve(make_event(property_hint="closed")) == active.id


class TestGuestIdentityResolver:
    def test_no_contact_details_creates_nothing(self):
        store = MagicMock()
        resolver = GuestIdentityResolver(store)

        assert resolver.resolve_or_create("Priya", None, "  ") is None
        store.find_by_contact.assert_not_called()
        store.create.assert_not_called()

    def test_existing_profile_is_updated_with_new_fields(self):
        existing = MagicMock()
        existing.id = "g1"
        existing.name = "Priya"
        existing.email = "priya@example.com"
        existing.phone = None
        store = MagicMock()
        store.find_by_contact.return_value = existing

        guest_id = GuestIdentityResolver(store).resolve_or_create(
            "Priya Sharma", "priya@example.com", "+919800000001"
        )

        assert guest_id == "g1"
        store.update.assert_called_once_with("g1", {
            "name": "Priya Sharma",
            "phone": "+919800000001",
        })
        store.create.assert_not_called()

    def test_existing_profile_unchanged_is_not_written(self):
        existing = MagicMock()
        existing.id = "g1"
        existing.name = "Priya"
        existing.email = "priya@example.com"
        existing.phone = None
        store = MagicMock()
        store.find_by_contact.return_value = existing

        GuestIdentityResolver(store).resolve_or_create(None, "priya@example.com", None)

        store.update.assert_not_called()

    def test_new_profile_defaults(self):
        store = MagicMock()
        store.find_by_contact.return_value = None
        store.create.return_value = MagicMock(id="g2")

        guest_id = GuestIdentityResolver(store, default_country="India").resolve_or_create(
            None, None, "+919800000002"
        )

        assert guest_id == "g2"
        data = store.create.call_args[0][0]
        assert data["name"] == "Guest"
        assert data["country"] == "India"
        assert data["email_marketing_consent"] is True
        assert data["sms_marketing_consent"] is True
        assert data["data_retention_consent"] is True

    def test_store_failure_yields_none(self):
        store = MagicMock()
        store.find_by_contact.side_effect = RuntimeError("connection reset")

        assert GuestIdentityResolver(store).resolve_or_create("Priya", "priya@example.com", None) is None

    def test_sql_store_matches_phone_when_email_unknown(self, db):
        db.add(GuestProfile(name="Priya", phone="+919800000001"))
        db.commit()
        resolver = GuestIdentityResolver(SqlGuestProfileStore(db))

        guest_id = resolver.resolve_or_create("Priya Sharma", "new@example.com", "+919800000001")
        db.commit()

        assert db.query(GuestProfile).count() == 1
        guest = db.query(GuestProfile).filter(GuestProfile.id == guest_id).one()
        assert guest.email == "new@example.com"
        assert guest.name == "Priya Sharma"
