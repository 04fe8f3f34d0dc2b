from .service import SubscriberService, BULK_OPERATIONS, normalize_email

__all__ = ["SubscriberService", "BULK_OPERATIONS", "normalize_email"]
