"""Shared types and errors for record stores.

A record is any JSON object carrying a unique string `id`. Stores do not
validate schema beyond that.
"""
from __future__ import annotations
from typing import Any, Dict

Record = Dict[str, Any]

ID_FIELD = "id"
CREATED_FIELD = "createdAt"
UPDATED_FIELD = "updatedAt"


class RecordStoreError(Exception):
    """Base class for record store errors raised by this package."""


class InvalidRecordError(RecordStoreError, ValueError):
    """Raised when a value is not a mapping with a string `id`."""


class DuplicateRecordError(RecordStoreError):
    """Raised when a record id is already present in the store."""

    def __init__(self, record_id: str) -> None:
        super().__init__(f"Record {record_id!r} already exists")
        self.record_id = record_id
