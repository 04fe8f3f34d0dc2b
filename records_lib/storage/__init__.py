"""Record storage package for site-records."""

from pathlib import Path
from typing import Any

from .backups import BackupManager, DEFAULT_KEEP_BACKUPS
from .base import DuplicateRecordError, InvalidRecordError, Record, RecordStoreError
from .record_store import RecordStore, SerializedRecordStore


def create_record_store(
    store_name: str,
    data_dir: str | Path = "./data",
    serialized: bool = True,
    **options: Any,
) -> RecordStore:
    """Factory returning a configured record store.

    `serialized` selects `SerializedRecordStore`, the variant to share
    between request handlers of one process.
    """
    cls = SerializedRecordStore if serialized else RecordStore
    return cls(store_name, data_dir=data_dir, **options)


__all__ = [
    "BackupManager",
    "DEFAULT_KEEP_BACKUPS",
    "DuplicateRecordError",
    "InvalidRecordError",
    "Record",
    "RecordStore",
    "RecordStoreError",
    "SerializedRecordStore",
    "create_record_store",
]
