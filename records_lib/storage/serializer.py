from typing import Any, Protocol
import json


class Serializer(Protocol):
    """Serialize/deserialize Python values for stores that keep bytes on disk.

    Implementations should be symmetric: `dump` -> bytes, `load` <- bytes.
    """

    def dump(self, value: Any) -> bytes: ...

    def load(self, data: bytes) -> Any: ...


class JSONSerializer:
    """Pretty-printed UTF-8 JSON. Caller must ensure values are JSON-serializable."""

    def __init__(self, indent: int = 2) -> None:
        self.indent = indent

    def dump(self, value: Any) -> bytes:
        return json.dumps(value, ensure_ascii=False, indent=self.indent).encode("utf-8")

    def load(self, data: bytes) -> Any:
        return json.loads(data.decode("utf-8"))
