"""File-backed record store.

A `RecordStore` keeps one collection of records as a JSON array in
`<data_dir>/<store_name>.json`. Every mutating call reads the whole file,
applies the change in memory and writes the whole collection back.

Writes go to a temporary file in the same directory and are renamed over
the live file, so readers only ever see the complete old or complete new
content. Before each write the current file is copied into the backup
directory (see `records_lib.storage.backups`).

There is no locking: two callers doing read-modify-write on the same store
at the same time can lose one of the changes. Use `SerializedRecordStore`
when a single process shares one store between threads.
"""
from __future__ import annotations
import logging
import os
import threading
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Iterable, List, Mapping, Optional

from .backups import BackupManager, DEFAULT_KEEP_BACKUPS
from .base import (
    CREATED_FIELD,
    ID_FIELD,
    UPDATED_FIELD,
    DuplicateRecordError,
    InvalidRecordError,
    Record,
)
from .serializer import JSONSerializer, Serializer

logger = logging.getLogger(__name__)

# Keys a partial update may not overwrite.
_PROTECTED_FIELDS = (ID_FIELD, CREATED_FIELD)


def format_timestamp(when: datetime) -> str:
    """ISO-8601 UTC with microseconds, e.g. `2024-05-01T09:30:00.000123Z`."""
    if when.tzinfo is not None:
        when = when.astimezone(timezone.utc)
    return when.strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _check_record(record: Any) -> str:
    if not isinstance(record, Mapping):
        raise InvalidRecordError(f"Record must be a mapping, got {type(record).__name__}")
    record_id = record.get(ID_FIELD)
    if not isinstance(record_id, str) or not record_id:
        raise InvalidRecordError("Record must have a non-empty string 'id'")
    return record_id


class RecordStore:
    """Generic collection of records persisted to a single JSON file.

    Parameters
    - store_name: base name of the store file, e.g. ``articles``.
    - data_dir: directory holding ``<store_name>.json``.
    - backup_dir: backup directory, defaults to ``<data_dir>/backups``.
    - keep_backups: number of backups retained per store.
    - clock: callable returning the current ``datetime``; injectable for tests.
    """

    def __init__(
        self,
        store_name: str,
        data_dir: str | Path = "./data",
        backup_dir: str | Path | None = None,
        keep_backups: int = DEFAULT_KEEP_BACKUPS,
        serializer: Optional[Serializer] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        if not store_name or "/" in store_name or "\\" in store_name or store_name.startswith("."):
            raise ValueError(f"Invalid store name: {store_name!r}")
        self.store_name = store_name
        self.data_dir = Path(data_dir)
        self.file_path = self.data_dir / f"{store_name}.json"
        self.serializer: Serializer = serializer or JSONSerializer()
        self._clock = clock or _utcnow
        self._last_now: Optional[datetime] = None
        self._clock_lock = threading.Lock()
        self.backups = BackupManager(
            store_name,
            backup_dir if backup_dir is not None else self.data_dir / "backups",
            keep=keep_backups,
            clock=self._now,
        )

    def __repr__(self) -> str:
        return f"RecordStore({self.store_name!r}, data_dir={str(self.data_dir)!r})"

    def _now(self) -> datetime:
        # Strictly increasing so consecutive stamps and backup names never tie.
        with self._clock_lock:
            now = self._clock()
            if self._last_now is not None and now <= self._last_now:
                now = self._last_now + timedelta(microseconds=1)
            self._last_now = now
            return now

    def timestamp(self) -> str:
        """Current time in the format used for `createdAt`/`updatedAt`."""
        return format_timestamp(self._now())

    # -- raw file access -------------------------------------------------

    def read(self) -> List[Record]:
        """Load all records. A missing store file reads as an empty list."""
        try:
            with open(self.file_path, "rb") as f:
                data = f.read()
        except FileNotFoundError:
            logger.debug("Store %s has no file yet; returning empty list", self.store_name)
            return []
        records = self.serializer.load(data)
        if not isinstance(records, list):
            raise InvalidRecordError(f"{self.file_path} does not contain a JSON array")
        logger.debug("Read %d record(s) from %s", len(records), self.file_path)
        return records

    def ensure_directories(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def create_backup(self) -> Optional[Path]:
        return self.backups.create_backup(self.file_path)

    def cleanup_backups(self, keep_count: Optional[int] = None) -> List[Path]:
        return self.backups.cleanup_backups(keep_count)

    def write(self, records: Iterable[Record]) -> None:
        """Replace the store contents with `records`.

        The previous contents are backed up first (best-effort). The new
        contents are written to ``<file>.tmp``, fsynced and renamed over the
        store file.
        """
        records = list(records)
        seen = set()
        for record in records:
            record_id = _check_record(record)
            if record_id in seen:
                raise DuplicateRecordError(record_id)
            seen.add(record_id)

        payload = self.serializer.dump(records)
        self.ensure_directories()
        self.create_backup()

        tmp = self.file_path.with_suffix(self.file_path.suffix + ".tmp")
        try:
            with open(tmp, "wb") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            tmp.replace(self.file_path)
        except OSError:
            if tmp.exists():
                tmp.unlink()
            raise
        logger.debug("Wrote %d record(s) to %s", len(records), self.file_path)

    def restore_backup(self, backup: str | Path | None = None) -> List[Record]:
        """Replace the store contents with a backup (the newest by default).

        The restore itself goes through `write`, so the contents being
        replaced are backed up as well. Raises FileNotFoundError when there
        is no backup to restore.
        """
        path = Path(backup) if backup is not None else self.backups.latest()
        if path is None:
            raise FileNotFoundError(f"No backups found for store {self.store_name!r}")
        with open(path, "rb") as f:
            records = self.serializer.load(f.read())
        if not isinstance(records, list):
            raise InvalidRecordError(f"{path} does not contain a JSON array")
        self.write(records)
        logger.warning("Restored %s from %s (%d records)", self.store_name, path, len(records))
        return records

    # -- record operations -----------------------------------------------

    def find_by_id(self, record_id: str) -> Optional[Record]:
        for record in self.read():
            if record.get(ID_FIELD) == record_id:
                return record
        return None

    def create(self, record: Mapping[str, Any]) -> Record:
        """Append `record`, stamping `createdAt` and `updatedAt` with now."""
        record_id = _check_record(record)
        records = self.read()
        if any(r.get(ID_FIELD) == record_id for r in records):
            raise DuplicateRecordError(record_id)
        now = self.timestamp()
        new = dict(record)
        new[CREATED_FIELD] = now
        new[UPDATED_FIELD] = now
        records.append(new)
        self.write(records)
        logger.info("Created %s/%s", self.store_name, record_id)
        return new

    def update(self, record_id: str, fields: Mapping[str, Any]) -> Optional[Record]:
        """Merge `fields` into the record with `record_id`.

        Returns the updated record, or None (without writing) if no record
        has that id. `id` and `createdAt` in `fields` are ignored.
        """
        records = self.read()
        for index, record in enumerate(records):
            if record.get(ID_FIELD) == record_id:
                break
        else:
            logger.debug("Update of unknown %s/%s ignored", self.store_name, record_id)
            return None

        updated = self._merge(record, fields, self.timestamp())
        records[index] = updated
        self.write(records)
        logger.info("Updated %s/%s", self.store_name, record_id)
        return updated

    def delete(self, record_id: str) -> bool:
        records = self.read()
        remaining = [r for r in records if r.get(ID_FIELD) != record_id]
        if len(remaining) == len(records):
            return False
        self.write(remaining)
        logger.info("Deleted %s/%s", self.store_name, record_id)
        return True

    def bulk_update(self, ids: Iterable[str], fields: Mapping[str, Any]) -> List[Record]:
        """Merge `fields` into every record whose id is in `ids`.

        All changes are persisted with a single write. Returns the updated
        records in store order.
        """
        wanted = set(ids)
        records = self.read()
        now = self.timestamp()
        updated: List[Record] = []
        for index, record in enumerate(records):
            if record.get(ID_FIELD) in wanted:
                records[index] = self._merge(record, fields, now)
                updated.append(records[index])
        self.write(records)
        logger.info("Bulk-updated %d record(s) in %s", len(updated), self.store_name)
        return updated

    def bulk_delete(self, ids: Iterable[str]) -> int:
        """Remove every record whose id is in `ids`. Returns the number removed."""
        wanted = set(ids)
        records = self.read()
        remaining = [r for r in records if r.get(ID_FIELD) not in wanted]
        removed = len(records) - len(remaining)
        self.write(remaining)
        logger.info("Bulk-deleted %d record(s) from %s", removed, self.store_name)
        return removed

    @staticmethod
    def _merge(record: Record, fields: Mapping[str, Any], now: str) -> Record:
        merged = dict(record)
        merged.update({k: v for k, v in fields.items() if k not in _PROTECTED_FIELDS})
        merged[UPDATED_FIELD] = now
        return merged


class SerializedRecordStore(RecordStore):
    """RecordStore that serializes mutating calls through a per-instance lock.

    Only protects callers sharing this instance inside one process; other
    processes writing the same file can still interleave.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._lock = threading.RLock()

    def write(self, records: Iterable[Record]) -> None:
        with self._lock:
            super().write(records)

    def create(self, record: Mapping[str, Any]) -> Record:
        with self._lock:
            return super().create(record)

    def update(self, record_id: str, fields: Mapping[str, Any]) -> Optional[Record]:
        with self._lock:
            return super().update(record_id, fields)

    def delete(self, record_id: str) -> bool:
        with self._lock:
            return super().delete(record_id)

    def bulk_update(self, ids: Iterable[str], fields: Mapping[str, Any]) -> List[Record]:
        with self._lock:
            return super().bulk_update(ids, fields)

    def bulk_delete(self, ids: Iterable[str]) -> int:
        with self._lock:
            return super().bulk_delete(ids)
