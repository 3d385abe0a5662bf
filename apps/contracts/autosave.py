"""
Debounced autosave for onboarding wizard data.

``AutoSaver`` waits ``delay`` seconds after the latest change before it
calls the save callback, and skips payloads that serialize identically to
the last one saved. Failures are reported through ``on_error`` and are not
retried; the next change or ``force_save()`` tries again.
"""

import hashlib
import json
import logging
import threading

from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.utils import timezone

logger = logging.getLogger(__name__)


class AutoSaveStatus(models.TextChoices):
    IDLE = 'idle', 'Idle'
    SAVING = 'saving', 'Saving'
    SAVED = 'saved', 'Saved'
    ERROR = 'error', 'Error'


def canonical_json(data) -> str:
    return json.dumps(data, cls=DjangoJSONEncoder, sort_keys=True, separators=(',', ':'))


def fingerprint(data) -> str:
    """SHA-256 of the canonical JSON form; equal data gives equal fingerprints."""
    return hashlib.sha256(canonical_json(data).encode('utf-8')).hexdigest()


class AutoSaver:
    """
    Debounce a save callback.

    Args:
        save: Callable taking the data to persist.
        delay: Seconds to wait after the latest update. Defaults to
            ``AUTOSAVE_DEBOUNCE_SECONDS``.
        on_success: Optional callable(data) after a successful save.
        on_error: Optional callable(exception) after a failed save.
    """

    def __init__(self, save, delay=None, on_success=None, on_error=None):
        self.save = save
        self.delay = settings.AUTOSAVE_DEBOUNCE_SECONDS if delay is None else delay
        self.on_success = on_success
        self.on_error = on_error

        self.status = AutoSaveStatus.IDLE
        self.last_saved_at = None
        self.last_error = None

        self._lock = threading.RLock()
        self._timer = None
        self._pending = None
        self._has_pending = False
        self._saved_fingerprint = None

    @property
    def has_pending_changes(self):
        return self._has_pending

    def update(self, data):
        """Register new data and restart the debounce timer."""
        with self._lock:
            if fingerprint(data) == self._saved_fingerprint:
                self._cancel_timer()
                self._pending = None
                self._has_pending = False
                return False

            self._pending = data
            self._has_pending = True
            self._cancel_timer()
            self._timer = threading.Timer(self.delay, self._flush)
            self._timer.daemon = True
            self._timer.start()
            return True

    def force_save(self):
        """Cancel the timer and save pending data now."""
        with self._lock:
            self._cancel_timer()
        return self._flush()

    def cancel(self):
        with self._lock:
            self._cancel_timer()
            self._pending = None
            self._has_pending = False

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _flush(self):
        with self._lock:
            if not self._has_pending:
                return False
            data = self._pending
            self._pending = None
            self._has_pending = False
            self._timer = None
            self.status = AutoSaveStatus.SAVING

            try:
                self.save(data)
            except Exception as e:
                self.status = AutoSaveStatus.ERROR
                self.last_error = e
                # Keep the data so the next update or force_save() retries it
                self._pending = data
                self._has_pending = True
                logger.warning("Autosave failed: %s", e)
                if self.on_error:
                    self.on_error(e)
                return False

            self.status = AutoSaveStatus.SAVED
            self.last_error = None
            self.last_saved_at = timezone.now()
            self._saved_fingerprint = fingerprint(data)

        if self.on_success:
            self.on_success(data)
        return True
