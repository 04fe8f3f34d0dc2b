from .service import ArticleService, BULK_OPERATIONS

__all__ = ["ArticleService", "BULK_OPERATIONS"]
