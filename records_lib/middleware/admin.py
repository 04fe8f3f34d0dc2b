from typing import Callable, Optional
import functools
import hmac
import inspect
from fastapi import HTTPException
from starlette.requests import Request

from records_lib.services.resolver import resolve_service
import logging

logger = logging.getLogger(__name__)

BEARER_PREFIX = 'Bearer '


def access_denied(message: str = 'Admin access required.') -> HTTPException:
    return HTTPException(status_code=401, detail={'error': 'access_denied', 'message': message})


def get_bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get('Authorization') or ''
    if not header.startswith(BEARER_PREFIX):
        return None
    return header[len(BEARER_PREFIX):].strip() or None


def check_admin_token(request: Request) -> None:
    """Raise HTTP 401 unless the request carries the configured admin token."""
    config = resolve_service(request, 'config')
    expected = getattr(config, 'admin_token', None)
    if not expected:
        logger.warning('Admin access denied: no admin_token configured path=%s', request.url.path)
        raise access_denied('Admin access is not configured.')

    token = get_bearer_token(request)
    if token is None:
        logger.warning('Admin access denied (missing token) path=%s', request.url.path)
        raise access_denied()
    if not hmac.compare_digest(token.encode('utf-8'), expected.encode('utf-8')):
        logger.warning('Admin access denied (bad token) path=%s', request.url.path)
        raise access_denied()


def require_admin_token(func: Callable) -> Callable:
    """Decorator that rejects requests without the admin bearer token.

    The wrapped endpoint must take the `Request` either positionally or as
    the `request` keyword.
    """

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        request: Optional[Request] = kwargs.get('request')
        if request is None:
            request = next((a for a in args if isinstance(a, Request)), None)
        if request is None:
            logger.warning('Admin access denied: missing request')
            raise access_denied('Missing request.')
        check_admin_token(request)
        return await func(*args, **kwargs)

    # preserve signature for FastAPI
    wrapper.__signature__ = inspect.signature(func)  # type: ignore[attr-defined]
    return wrapper
