"""ArticleService: article CRUD and admin bulk operations over a record store."""
from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional

from records_lib.services.bulk import BulkResult
from records_lib.storage import Record
from records_lib.storage.interfaces import RecordStoreProtocol
from records_lib.util import new_record_id

logger = logging.getLogger(__name__)

BULK_OPERATIONS = ('delete', 'publish', 'unpublish', 'category', 'tags', 'duplicate')

ARTICLE_DEFAULTS = {
    'title': '',
    'content': '',
    'excerpt': '',
    'category': '',
    'tags': [],
    'published': False,
}


class ArticleService:
    """Service responsible for articles.

    Articles are plain records in the injected store; `published` drives
    `publishedAt`, which is stamped when an article goes live and cleared
    when it is withdrawn.
    """

    def __init__(self, store: RecordStoreProtocol):
        self._store = store

    @property
    def store(self) -> RecordStoreProtocol:
        return self._store

    def list_articles(self, published: Optional[bool] = None) -> List[Record]:
        articles = self._store.read()
        if published is not None:
            articles = [a for a in articles if bool(a.get('published')) is published]
        # newest first; ISO stamps sort chronologically
        articles.sort(key=lambda a: a.get('createdAt') or '', reverse=True)
        return articles

    def get(self, article_id: str) -> Optional[Record]:
        return self._store.find_by_id(article_id)

    def create(self, payload: Mapping[str, Any]) -> Record:
        article = {**ARTICLE_DEFAULTS, **payload}
        article['tags'] = list(article.get('tags') or [])
        if not article.get('id'):
            article['id'] = new_record_id(article.get('title', ''))
        article['publishedAt'] = self._store.timestamp() if article.get('published') else None
        return self._store.create(article)

    def update(self, article_id: str, fields: Mapping[str, Any]) -> Optional[Record]:
        changes = dict(fields)
        if 'published' in changes:
            current = self._store.find_by_id(article_id)
            if current is None:
                return None
            if changes['published'] and not current.get('published'):
                changes['publishedAt'] = self._store.timestamp()
            elif not changes['published']:
                changes['publishedAt'] = None
        return self._store.update(article_id, changes)

    def delete(self, article_id: str) -> bool:
        return self._store.delete(article_id)

    def bulk(
        self,
        operation: str,
        ids: Iterable[str],
        category: Optional[str] = None,
        tags: Optional[List[str]] = None,
    ) -> BulkResult:
        """Apply `operation` to the articles with the given ids.

        Raises ValueError when no ids are given and LookupError when none of
        them exist. Everything else is reported per article in the result.
        """
        wanted = list(ids or [])
        if not wanted:
            raise ValueError('No items selected')
        wanted_set = set(wanted)
        targets = [a for a in self._store.read() if a.get('id') in wanted_set]
        if not targets:
            raise LookupError('No matching articles found')

        result = BulkResult(noun='articles')
        titles = [a.get('title') or a['id'] for a in targets]
        target_ids = [a['id'] for a in targets]
        logger.info("Bulk %s on %d article(s)", operation, len(targets))

        if operation not in BULK_OPERATIONS:
            result.fail_all(titles, f'Unknown operation {operation!r}')
            return result

        if operation == 'category' and not category:
            result.fail_all(titles, 'Category not specified for article')
            return result
        if operation == 'tags' and tags is None:
            result.fail_all(titles, 'Tags not specified for article')
            return result

        if operation == 'duplicate':
            for article in targets:
                self._duplicate(article, result)
            return result

        try:
            if operation == 'delete':
                result.success = self._store.bulk_delete(target_ids)
            elif operation == 'publish':
                result.success = self._publish(targets)
            else:
                updated = self._store.bulk_update(target_ids, self._bulk_fields(operation, category, tags))
                result.success = len(updated)
        except OSError as e:
            logger.exception("Bulk %s on articles failed", operation)
            result.fail_all(titles, f'Could not save article ({e})')
        return result

    def _publish(self, targets: List[Record]) -> int:
        # already-live articles keep their original publishedAt
        pending = [a['id'] for a in targets if not a.get('published')]
        if pending:
            self._store.bulk_update(pending, {'published': True, 'publishedAt': self._store.timestamp()})
        return len(targets)

    def _bulk_fields(self, operation: str, category: Optional[str], tags: Optional[List[str]]) -> dict:
        if operation == 'unpublish':
            return {'published': False, 'publishedAt': None}
        if operation == 'category':
            return {'category': category}
        return {'tags': list(tags or [])}

    def _duplicate(self, article: Record, result: BulkResult) -> None:
        copy = {k: v for k, v in article.items() if k not in ('createdAt', 'updatedAt')}
        title = article.get('title') or article['id']
        copy.update(
            id=new_record_id(title),
            title=f"{title} (copy)",
            published=False,
            publishedAt=None,
        )
        try:
            self._store.create(copy)
            result.success += 1
        except OSError as e:
            logger.exception("Duplicating article %s failed", article['id'])
            result.fail(f'Could not duplicate article {title}: {e}')
