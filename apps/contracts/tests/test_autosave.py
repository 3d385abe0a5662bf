import threading
import uuid
from datetime import date
from decimal import Decimal

from apps.contracts.autosave import AutoSaver, AutoSaveStatus, fingerprint


class TestFingerprint:

    def test_key_order_does_not_matter(self):
        assert fingerprint({'a': 1, 'b': [1, 2]}) == fingerprint({'b': [1, 2], 'a': 1})

    def test_detects_changes(self):
        assert fingerprint({'a': 1}) != fingerprint({'a': 2})

    def test_handles_decimal_uuid_and_dates(self):
        data = {'fee': Decimal('1.50'), 'id': uuid.uuid4(), 'day': date(2024, 5, 1)}
        assert fingerprint(data) == fingerprint(dict(data))


class TestAutoSaver:

    def test_force_save_saves_immediately(self):
        saved = []
        saver = AutoSaver(saved.append, delay=60)

        saver.update({'step': 1})
        assert saver.has_pending_changes
        assert saver.force_save() is True

        assert saved == [{'step': 1}]
        assert saver.status == AutoSaveStatus.SAVED
        assert saver.last_saved_at is not None
        assert not saver.has_pending_changes

    def test_debounce_saves_only_latest(self):
        saved = []
        done = threading.Event()
        saver = AutoSaver(saved.append, delay=0.05, on_success=lambda data: done.set())

        saver.update({'step': 1})
        saver.update({'step': 2})
        saver.update({'step': 3})

        assert done.wait(timeout=2)
        assert saved == [{'step': 3}]

    def test_unchanged_data_is_not_saved_again(self):
        saved = []
        saver = AutoSaver(saved.append, delay=60)

        saver.update({'step': 1})
        saver.force_save()

        assert saver.update({'step': 1}) is False
        assert saver.force_save() is False
        assert len(saved) == 1

    def test_failure_keeps_data_for_manual_retry(self):
        calls = []
        errors = []
        outcomes = [RuntimeError('database unavailable'), None]

        def flaky_save(data):
            calls.append(data)
            outcome = outcomes.pop(0)
            if outcome is not None:
                raise outcome

        saver = AutoSaver(flaky_save, delay=60, on_error=errors.append)
        saver.update({'step': 1})

        assert saver.force_save() is False
        assert saver.status == AutoSaveStatus.ERROR
        assert str(saver.last_error) == 'database unavailable'
        assert len(errors) == 1
        assert saver.has_pending_changes
        # No timer is scheduled after a failure
        assert saver._timer is None
        assert len(calls) == 1

        assert saver.force_save() is True
        assert saver.status == AutoSaveStatus.SAVED
        assert saver.last_error is None
        assert not saver.has_pending_changes
        assert calls == [{'step': 1}, {'step': 1}]

    def test_cancel_drops_pending_data(self):
        saved = []
        saver = AutoSaver(saved.append, delay=60)

        saver.update({'step': 1})
        saver.cancel()

        assert saver.force_save() is False
        assert saved == []
        assert saver.status == AutoSaveStatus.IDLE

    def test_default_delay_from_settings(self, settings):
        settings.AUTOSAVE_DEBOUNCE_SECONDS = 5
        assert AutoSaver(lambda data: None).delay == 5
