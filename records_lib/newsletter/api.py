import json
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import Response
from pydantic import BaseModel

from records_lib.middleware import require_admin_token
from records_lib.services.resolver import resolve_service
from records_lib.storage import RecordStoreError

import logging
router = APIRouter()
logger = logging.getLogger(__name__)


class Preferences(BaseModel):
    frequency: str = 'weekly'
    categories: List[str] = []


class SubscribeRequest(BaseModel):
    email: str
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    preferences: Optional[Preferences] = None


class UnsubscribeRequest(BaseModel):
    email: str


class SubscriberBulkRequest(BaseModel):
    operation: str
    items: List[str] = []
    preferences: Optional[Preferences] = None
    source: Optional[str] = None


@router.post('/newsletter/subscribe', status_code=201)
async def api_newsletter_subscribe(request: Request, payload: SubscribeRequest):
    svc = resolve_service(request, 'subscriber_service')
    try:
        subscriber = svc.subscribe(
            payload.email,
            source='web',
            first_name=payload.firstName,
            last_name=payload.lastName,
            preferences=payload.preferences.model_dump() if payload.preferences else None,
        )
    except (RecordStoreError, json.JSONDecodeError):
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {'ok': True, 'email': subscriber['email']}


@router.post('/newsletter/unsubscribe')
async def api_newsletter_unsubscribe(request: Request, payload: UnsubscribeRequest):
    svc = resolve_service(request, 'subscriber_service')
    try:
        removed = svc.unsubscribe(payload.email)
    except (RecordStoreError, json.JSONDecodeError):
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {'ok': removed}


@router.get('/admin/newsletter/subscribers')
@require_admin_token
async def api_admin_subscribers(request: Request, activeOnly: bool = False):
    svc = resolve_service(request, 'subscriber_service')
    return svc.list_subscribers(active_only=activeOnly)


@router.post('/admin/newsletter/bulk-actions')
@require_admin_token
async def api_admin_subscribers_bulk(request: Request, payload: SubscriberBulkRequest):
    svc = resolve_service(request, 'subscriber_service')
    try:
        result = svc.bulk(
            payload.operation,
            payload.items,
            preferences=payload.preferences.model_dump() if payload.preferences else None,
            source=payload.source,
        )
    except (RecordStoreError, json.JSONDecodeError):
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return result.to_dict()


@router.get('/admin/newsletter/export')
@require_admin_token
async def api_admin_subscribers_export(request: Request, activeOnly: bool = False):
    svc = resolve_service(request, 'subscriber_service')
    filename = f"newsletter-subscribers-{date.today().isoformat()}.csv"
    return Response(
        content=svc.export_csv(active_only=activeOnly),
        media_type='text/csv; charset=utf-8',
        headers={'Content-Disposition': f'attachment; filename="{filename}"'},
    )
