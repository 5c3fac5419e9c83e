"""
Tests for the Diff Computer
"""

from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

from booking_import.services.booking_diff import diff_booking, room_number_from
from tests.conftest import make_event


def _candidate(**kwargs):
    booking = MagicMock()
    booking.guest_name = "Priya Sharma"
    booking.room_no = "101"
    booking.check_in = date(2025, 3, 10)
    booking.check_out = date(2025, 3, 12)
    booking.no_of_pax = 2
    booking.adult_child = None
    booking.total_amount = Decimal("5400.00")
    booking.payment_status = None
    booking.contact_phone = "+919800000001"
    booking.contact_email = "priya@example.com"
    booking.special_requests = None
    for key, value in kwargs.items():
        setattr(booking, key, value)
    return booking


class TestDiffBooking:
    def test_without_candidate_only_proposes(self):
        diff = diff_booking(None, make_event())
        assert diff.changes == []
        assert diff.proposed["check_in"] == date(2025, 3, 10)
        assert diff.proposed["total_amount"] == 5400.0

    def test_undefined_fields_are_not_proposed(self):
        diff = diff_booking(None, make_event(total_amount=None, special_requests=None))
        assert "total_amount" not in diff.proposed
        assert "special_requests" not in diff.proposed

    def test_blank_room_is_never_proposed(self):
        """An email without a concrete room must not clear the assigned room"""
        for room in ("", "   ", None):
            diff = diff_booking(_candidate(), make_event(event_type="modified", room_no=room))
            assert "room_no" not in diff.proposed
            assert all(c.field != "room_no" for c in diff.changes)

    def test_room_number_is_trimmed(self):
        diff = diff_booking(_candidate(), make_event(room_no=" 204 "))
        assert diff.proposed["room_no"] == "204"
        assert [c.field for c in diff.changes] == ["room_no"]

    def test_changes_list_from_and_to(self):
        diff = diff_booking(_candidate(), make_event(check_out="2025-03-14", no_of_pax=3))
        changes = {c.field: (c.from_value, c.to_value) for c in diff.changes}
        assert changes == {
            "check_out": (date(2025, 3, 12), date(2025, 3, 14)),
            "no_of_pax": (2, 3),
        }

    def test_decimal_amount_equal_to_float_is_unchanged(self):
        diff = diff_booking(_candidate(), make_event())
        assert all(c.field != "total_amount" for c in diff.changes)

    def test_room_number_from(self):
        assert room_number_from(make_event(room_no="  ")) is None
        assert room_number_from(make_event(room_no="12A")) == "12A"
