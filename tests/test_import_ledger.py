"""
Tests for the Import Ledger

Tests cover:
- Upsert keeps exactly one row per message
- Insert race on the unique index is retried as an update
- Marking processed is best-effort
- Thread lookups and pending messages
"""

from datetime import datetime, timedelta
from unittest.mock import MagicMock, patch

from sqlalchemy.exc import OperationalError

from booking_import.models.email_import import EmailBookingImport
from booking_import.models.email_message import EmailMessage
from booking_import.services import import_ledger
from booking_import.services.import_ledger import ImportLedger


def _entry(**kwargs):
    entry = {"event_type": "new", "decision": "auto", "requires_approval": False}
    entry.update(kwargs)
    return entry


class TestLedgerCommit:
    def test_reprocessing_overwrites_single_row(self, db, message_factory):
        message = message_factory()
        ledger = ImportLedger(db)

        ledger.commit(message.id, _entry(import_errors={"reason": "missing_required_fields"}))
        row = ledger.commit(message.id, _entry(event_type="modified", booking_id=None))

        rows = db.query(EmailBookingImport).filter(EmailBookingImport.email_message_id == message.id).all()
        assert len(rows) == 1
        assert row.event_type == "modified"
        assert row.import_errors is None

    def test_defaults_processed_fields(self, db, message_factory):
        message = message_factory()
        row = ImportLedger(db).commit(message.id, _entry())

        assert row.processed_at is not None
        assert row.processed_by == "system"

    def test_insert_race_retried_as_update(self, db, message_factory):
        message = message_factory()
        db.add(EmailBookingImport(email_message_id=message.id, event_type="new", decision="auto"))
        db.commit()
        real_lock = import_ledger.acquire_row_lock
        reads = []

        def lock_missing_row_once(*args, **kwargs):
            # First read happens before the other writer's row is visible
            reads.append(args)
            if len(reads) == 1:
                return None
            return real_lock(*args, **kwargs)

        with patch.object(import_ledger, "acquire_row_lock", side_effect=lock_missing_row_once):
            row = ImportLedger(db).commit(message.id, _entry(event_type="modified"))

        assert len(reads) == 2
        assert row.event_type == "modified"
        rows = db.query(EmailBookingImport).filter(EmailBookingImport.email_message_id == message.id).all()
        assert len(rows) == 1


class TestMarkProcessed:
    def test_flips_flag(self, db, message_factory):
        message = message_factory()

        assert ImportLedger(db).mark_processed(message.id) is True
        db.expire_all()
        assert db.get(EmailMessage, message.id).processed is True

    def test_unknown_message(self, db):
        assert ImportLedger(db).mark_processed("missing") is False

    def test_failure_is_swallowed(self):
        db = MagicMock()
        db.query.return_value.filter.return_value.update.side_effect = OperationalError("UPDATE", {}, Exception("locked"))

        assert ImportLedger(db).mark_processed("m1") is False
        db.rollback.assert_called_once()


class TestLedgerQueries:
    def test_latest_booking_for_thread(self, db, message_factory, booking_factory):
        older, newer = booking_factory(), booking_factory(guest_name="Second Guest")
        first = message_factory(thread_id="t1")
        second = message_factory(thread_id="t1")
        message_factory(thread_id="t2")
        ledger = ImportLedger(db)
        ledger.commit(first.id, _entry(booking_id=older.id, processed_at=datetime.utcnow() - timedelta(hours=1)))
        ledger.commit(second.id, _entry(booking_id=newer.id))

        ids = ledger.thread_message_ids(first.id)

        assert sorted(ids) == sorted([first.id, second.id])
        assert ledger.latest_booking_for_messages(ids) == newer.id

    def test_message_without_thread(self, db, message_factory):
        message = message_factory()
        assert ImportLedger(db).thread_message_ids(message.id) == []
        assert ImportLedger(db).latest_booking_for_messages([]) is None

    def test_pending_messages_newest_first(self, db, message_factory):
        old = message_factory(received_at=datetime(2025, 1, 1))
        new = message_factory(received_at=datetime(2025, 2, 1))
        done = message_factory()
        done.processed = True
        db.commit()

        assert [m.id for m in ImportLedger(db).pending_messages()] == [new.id, old.id]

    def test_pending_keeps_errored_imports(self, db, message_factory):
        errored = message_factory(received_at=datetime(2025, 1, 1))
        imported = message_factory(received_at=datetime(2025, 2, 1))
        ledger = ImportLedger(db)
        ledger.commit(errored.id, _entry(import_errors={"reason": "booking_not_found_for_cancel"}))
        ledger.commit(imported.id, _entry(import_errors=None))
        ledger.mark_processed(errored.id)
        ledger.mark_processed(imported.id)

        assert [m.id for m in ledger.pending_messages()] == [errored.id]
