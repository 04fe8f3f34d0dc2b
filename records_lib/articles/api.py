import json
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from records_lib.middleware import require_admin_token
from records_lib.services.resolver import resolve_service
from records_lib.storage import DuplicateRecordError, RecordStoreError

import logging
router = APIRouter()
logger = logging.getLogger(__name__)


class ArticleCreate(BaseModel):
    id: Optional[str] = None
    title: str
    content: str = ''
    excerpt: str = ''
    category: str = ''
    tags: List[str] = []
    published: bool = False
    imageUrl: Optional[str] = None


class ArticleUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    excerpt: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    published: Optional[bool] = None
    imageUrl: Optional[str] = None


class ArticleBulkRequest(BaseModel):
    operation: str
    items: List[str] = []
    category: Optional[str] = None
    tags: Optional[List[str]] = None


@router.get('/articles')
async def api_public_articles(request: Request):
    svc = resolve_service(request, 'article_service')
    return svc.list_articles(published=True)


@router.get('/articles/{article_id}')
async def api_public_article(request: Request, article_id: str):
    svc = resolve_service(request, 'article_service')
    article = svc.get(article_id)
    if not article or not article.get('published'):
        raise HTTPException(status_code=404, detail='Article not found')
    return article


@router.get('/admin/articles')
@require_admin_token
async def api_admin_articles(request: Request, published: Optional[bool] = None):
    svc = resolve_service(request, 'article_service')
    return svc.list_articles(published=published)


@router.post('/admin/articles', status_code=201)
@require_admin_token
async def api_admin_article_create(request: Request, payload: ArticleCreate):
    svc = resolve_service(request, 'article_service')
    data = payload.model_dump(exclude_none=True)
    if not data.get('title', '').strip():
        raise HTTPException(status_code=400, detail='Title is required')
    try:
        return svc.create(data)
    except DuplicateRecordError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post('/admin/articles/bulk')
@require_admin_token
async def api_admin_articles_bulk(request: Request, payload: ArticleBulkRequest):
    svc = resolve_service(request, 'article_service')
    try:
        result = svc.bulk(payload.operation, payload.items, category=payload.category, tags=payload.tags)
    except (RecordStoreError, json.JSONDecodeError):
        # corrupt store, handled as storage_error by the app
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return result.to_dict()


@router.get('/admin/articles/{article_id}')
@require_admin_token
async def api_admin_article_get(request: Request, article_id: str):
    svc = resolve_service(request, 'article_service')
    article = svc.get(article_id)
    if article is None:
        raise HTTPException(status_code=404, detail='Article not found')
    return article


@router.put('/admin/articles/{article_id}')
@require_admin_token
async def api_admin_article_update(request: Request, article_id: str, payload: ArticleUpdate):
    svc = resolve_service(request, 'article_service')
    fields = payload.model_dump(exclude_unset=True, exclude_none=True)
    if 'title' in fields and not (fields['title'] or '').strip():
        raise HTTPException(status_code=400, detail='Title is required')
    article = svc.update(article_id, fields)
    if article is None:
        raise HTTPException(status_code=404, detail='Article not found')
    return article


@router.delete('/admin/articles/{article_id}')
@require_admin_token
async def api_admin_article_delete(request: Request, article_id: str):
    svc = resolve_service(request, 'article_service')
    if not svc.delete(article_id):
        raise HTTPException(status_code=404, detail='Article not found')
    return {'ok': True, 'id': article_id}
