"""
Tests for the SQL-backed collaborators and database helpers

Tests cover:
- Booking store create, update, cancel and listing filters
- Store errors surface as BookingStoreError
- Row locking only on PostgreSQL
- Notification persistence
"""

import json
import logging
from datetime import date
from unittest.mock import MagicMock

import pytest

from booking_import.models.booking import Booking
from booking_import.models.email_import import EmailBookingImport
from booking_import.models.notification import Notification
from booking_import.services.booking_store import BookingStoreError, SqlBookingStore
from booking_import.services.notification_service import NotificationService
from booking_import.utils.db_helpers import acquire_row_lock, is_postgres
from booking_import.utils.logging_config import JSONFormatter, get_logger, set_request_context, clear_request_context


class TestSqlBookingStore:
    def test_create_and_list_by_dates(self, db, property_factory):
        prop = property_factory()
        store = SqlBookingStore(db)
        store.create({
            "property_id": prop.id, "guest_name": "Priya Sharma",
            "check_in": date(2025, 3, 10), "check_out": date(2025, 3, 12),
        })
        store.create({
            "property_id": prop.id, "guest_name": "Arjun Rao",
            "check_in": date(2025, 4, 1), "check_out": date(2025, 4, 3),
        })
        db.commit()

        assert len(store.list(property_id=prop.id)) == 2
        matches = store.list(check_in=date(2025, 4, 1), check_out=date(2025, 4, 3))
        assert [b.guest_name for b in matches] == ["Arjun Rao"]

    def test_list_newest_stay_first(self, db, booking_factory):
        booking_factory(check_in=date(2025, 1, 1), check_out=date(2025, 1, 2))
        later = booking_factory(check_in=date(2025, 6, 1), check_out=date(2025, 6, 2))

        assert SqlBookingStore(db).list()[0].id == later.id

    def test_unknown_field_rejected(self, db):
        with pytest.raises(BookingStoreError):
            SqlBookingStore(db).create({"guest_name": "X", "unit_id": "u1"})

    def test_update_missing_booking(self, db):
        with pytest.raises(BookingStoreError):
            SqlBookingStore(db).update("missing", {"room_no": "1"})

    def test_create_violating_constraints(self, db):
        with pytest.raises(BookingStoreError):
            SqlBookingStore(db).create({"guest_name": "No Dates"})

    def test_cancel(self, db, booking_factory):
        booking = booking_factory()
        store = SqlBookingStore(db)

        assert store.cancel(booking.id) is True
        db.commit()
        assert db.get(Booking, booking.id).status == "cancelled"
        assert store.cancel("missing") is False


class TestDbHelpers:
    def test_row_lock_on_postgres(self):
        db = MagicMock()
        db.bind.dialect.name = "postgresql"

        acquire_row_lock(db, EmailBookingImport, EmailBookingImport.email_message_id == "m1")

        db.query.return_value.filter.return_value.with_for_update.assert_called_once_with()

    def test_row_lock_nowait(self):
        db = MagicMock()
        db.bind.dialect.name = "postgresql"

        acquire_row_lock(db, EmailBookingImport, EmailBookingImport.email_message_id == "m1", nowait=True)

        db.query.return_value.filter.return_value.with_for_update.assert_called_once_with(nowait=True)

    def test_no_row_lock_on_sqlite(self, db):
        assert is_postgres(db) is False
        mock_db = MagicMock()
        mock_db.bind.dialect.name = "sqlite"

        acquire_row_lock(mock_db, EmailBookingImport, EmailBookingImport.email_message_id == "m1")

        mock_db.query.return_value.filter.return_value.with_for_update.assert_not_called()


class TestNotificationService:
    def test_send_persists(self, db):
        NotificationService(db).send(
            property_id="p1", title="Booking cancelled", priority="high",
            platform="gommt", data={"booking_id": "b1"}
        )

        notification = db.query(Notification).one()
        assert notification.type == "update"
        assert notification.is_read is False
        assert notification.data == {"booking_id": "b1"}


class TestStructuredLogging:
    def test_import_recorded_is_json(self):
        records = []

        class Capture(logging.Handler):
            def emit(self, record):
                records.append(record)

        base = logging.getLogger("tests.import_log")
        base.addHandler(Capture())
        base.setLevel(logging.INFO)
        set_request_context("req-1", message_id="m1")
        try:
            get_logger("tests.import_log").import_recorded("m1", "errored", reason="booking_not_found_for_cancel")
            record = records[-1]
            payload = json.loads(JSONFormatter().format(record))
        finally:
            clear_request_context()

        assert record.levelno == logging.WARNING
        assert payload["data"]["outcome"] == "errored"
        assert payload["entity_id"] == "m1"
        assert payload["request_id"] == "req-1"
