"""SubscriberService: newsletter subscribers kept in a record store.

Subscribers are addressed by email from the outside (forms, admin bulk
actions) and by record id inside the store. Emails are normalised to
lower case before any comparison.
"""
from __future__ import annotations

import csv
import io
import logging
import re
from typing import Any, Iterable, List, Mapping, Optional

from records_lib.services.bulk import BulkResult
from records_lib.storage import Record
from records_lib.storage.interfaces import RecordStoreProtocol
from records_lib.util import new_record_id

logger = logging.getLogger(__name__)

BULK_OPERATIONS = ('activate', 'deactivate', 'delete', 'update_preferences', 'change_source')
FREQUENCIES = ('daily', 'weekly', 'monthly')

_EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')

SOURCE_LABELS = {
    'web': 'Website',
    'manual': 'Manual',
    'import': 'Import',
}

CSV_HEADER = ['Email', 'First name', 'Last name', 'Subscribed', 'Active', 'Source']


def normalize_email(email: str) -> str:
    """Strip and lower-case `email`; raise ValueError if it is not an address."""
    value = (email or '').strip().lower()
    if not _EMAIL_RE.match(value):
        raise ValueError(f'Invalid email address: {email!r}')
    return value


def validate_preferences(preferences: Mapping[str, Any]) -> dict:
    frequency = preferences.get('frequency', 'weekly')
    if frequency not in FREQUENCIES:
        raise ValueError(f'Invalid frequency {frequency!r}; expected one of {", ".join(FREQUENCIES)}')
    categories = preferences.get('categories') or []
    if not isinstance(categories, list) or not all(isinstance(c, str) for c in categories):
        raise ValueError('Preference categories must be a list of strings')
    return {'frequency': frequency, 'categories': list(categories)}


class SubscriberService:
    def __init__(self, store: RecordStoreProtocol):
        self._store = store

    @property
    def store(self) -> RecordStoreProtocol:
        return self._store

    def list_subscribers(self, active_only: bool = False) -> List[Record]:
        subscribers = self._store.read()
        if active_only:
            subscribers = [s for s in subscribers if s.get('isActive')]
        return subscribers

    def find_by_email(self, email: str) -> Optional[Record]:
        address = normalize_email(email)
        for subscriber in self._store.read():
            if subscriber.get('email') == address:
                return subscriber
        return None

    def subscribe(
        self,
        email: str,
        source: str = 'web',
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        preferences: Optional[Mapping[str, Any]] = None,
    ) -> Record:
        """Add a subscriber, or re-activate the existing one for this email."""
        address = normalize_email(email)
        prefs = validate_preferences(preferences) if preferences is not None else None
        existing = self.find_by_email(address)
        if existing is not None:
            if existing.get('isActive'):
                logger.debug("Subscriber %s already active", address)
                return existing
            changes: dict = {'isActive': True}
            if prefs is not None:
                changes['preferences'] = prefs
            logger.info("Re-activating subscriber %s", address)
            return self._store.update(existing['id'], changes) or existing

        record: dict = {
            'id': new_record_id(),
            'email': address,
            'subscribedAt': self._store.timestamp(),
            'isActive': True,
            'source': source,
        }
        if first_name:
            record['firstName'] = first_name
        if last_name:
            record['lastName'] = last_name
        if prefs is not None:
            record['preferences'] = prefs
        logger.info("New subscriber %s (source=%s)", address, source)
        return self._store.create(record)

    def unsubscribe(self, email: str) -> bool:
        existing = self.find_by_email(email)
        if existing is None or not existing.get('isActive'):
            return False
        self._store.update(existing['id'], {'isActive': False})
        logger.info("Unsubscribed %s", existing['email'])
        return True

    def bulk(
        self,
        operation: str,
        emails: Iterable[str],
        preferences: Optional[Mapping[str, Any]] = None,
        source: Optional[str] = None,
    ) -> BulkResult:
        """Apply `operation` to the subscribers with the given emails.

        Raises ValueError when no emails are given and LookupError when none
        of them match. Everything else is reported in the result.
        """
        wanted = {(e or '').strip().lower() for e in (emails or [])} - {''}
        if not wanted:
            raise ValueError('No items selected')
        targets = [s for s in self._store.read() if s.get('email') in wanted]
        if not targets:
            raise LookupError('No matching subscribers found')

        result = BulkResult(noun='subscribers')
        addresses = [s['email'] for s in targets]
        target_ids = [s['id'] for s in targets]
        logger.info("Bulk %s on %d subscriber(s)", operation, len(targets))

        if operation not in BULK_OPERATIONS:
            result.fail_all(addresses, f'Unknown operation {operation!r}')
            return result

        if operation == 'update_preferences':
            if preferences is None:
                result.fail_all(addresses, 'Preferences not specified for')
                return result
            try:
                fields: dict = {'preferences': validate_preferences(preferences)}
            except ValueError as e:
                result.fail_all(addresses, str(e))
                return result
        elif operation == 'change_source':
            if not source:
                result.fail_all(addresses, 'Source not specified for')
                return result
            fields = {'source': source}
        elif operation in ('activate', 'deactivate'):
            fields = {'isActive': operation == 'activate'}
        else:
            fields = {}

        try:
            if operation == 'delete':
                result.success = self._store.bulk_delete(target_ids)
            else:
                result.success = len(self._store.bulk_update(target_ids, fields))
        except OSError as e:
            logger.exception("Bulk %s on subscribers failed", operation)
            result.fail_all(addresses, f'Could not save subscriber ({e})')
        return result

    def export_csv(self, active_only: bool = False) -> str:
        """Render subscribers as CSV with every field quoted."""
        buf = io.StringIO()
        writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator='\n')
        writer.writerow(CSV_HEADER)
        for s in self.list_subscribers(active_only=active_only):
            source = s.get('source') or ''
            writer.writerow([
                s.get('email', ''),
                s.get('firstName', ''),
                s.get('lastName', ''),
                (s.get('subscribedAt') or '')[:10],
                'yes' if s.get('isActive') else 'no',
                SOURCE_LABELS.get(source, source),
            ])
        return buf.getvalue()
