from dataclasses import dataclass, field
from typing import Iterable, List


@dataclass
class BulkResult:
    """Outcome of an admin bulk operation, counted per targeted item."""

    noun: str = "items"
    success: int = 0
    failed: int = 0
    errors: List[str] = field(default_factory=list)

    def fail(self, message: str) -> None:
        self.failed += 1
        self.errors.append(message)

    def fail_all(self, labels: Iterable[str], reason: str) -> None:
        for label in labels:
            self.fail(f"{reason}: {label}")

    @property
    def message(self) -> str:
        return f"Processed {self.success} {self.noun}, {self.failed} errors"

    def to_dict(self) -> dict:
        return {
            'success': self.success,
            'failed': self.failed,
            'errors': list(self.errors),
            'message': self.message,
        }
