from fastapi import APIRouter, Request
from records_lib.services.resolver import resolve_service
from .health import get_health

router = APIRouter()


@router.get('/health')
async def api_health(request: Request):
    stores = [
        resolve_service(request, 'article_service').store,
        resolve_service(request, 'subscriber_service').store,
    ]
    return get_health(stores)
