from typing import Protocol, Any, Iterable, List, Mapping, Optional, runtime_checkable

from .base import Record


@runtime_checkable
class RecordStoreProtocol(Protocol):
    """Record store protocol mirroring `records_lib.storage.RecordStore`.

    Implementations should follow the semantics documented on the concrete
    class (missing file reads as empty, unknown ids are no-ops signalled via
    the return value, one write per mutating call).
    """

    store_name: str

    def read(self) -> List[Record]: ...

    def write(self, records: Iterable[Record]) -> None: ...

    def find_by_id(self, record_id: str) -> Optional[Record]: ...

    def create(self, record: Mapping[str, Any]) -> Record: ...

    def update(self, record_id: str, fields: Mapping[str, Any]) -> Optional[Record]: ...

    def delete(self, record_id: str) -> bool: ...

    def bulk_update(self, ids: Iterable[str], fields: Mapping[str, Any]) -> List[Record]: ...

    def bulk_delete(self, ids: Iterable[str]) -> int: ...

    def timestamp(self) -> str: ...
