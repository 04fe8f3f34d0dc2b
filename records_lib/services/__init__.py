"""Services package: DI container and request-time resolver."""
from .bulk import BulkResult
from .container import ServiceContainer
from .resolver import resolve_service

__all__ = [
    "BulkResult",
    "ServiceContainer",
    "resolve_service",
]
