from types import SimpleNamespace

import pytest
from fastapi import HTTPException

from records_lib.services import ServiceContainer, resolve_service


def test_singletons_and_factories():
    c = ServiceContainer()
    c.register_singleton('config', {'a': 1})
    calls = []
    c.register_factory('store', lambda: calls.append(1) or object())

    assert c.get('config') == {'a': 1}
    first = c.get('store')
    assert c.get('store') is first
    assert calls == [1]
    assert c.has('store') and not c.has('missing')
    with pytest.raises(KeyError):
        c.get('missing')


def test_get_typed_checks_type():
    c = ServiceContainer()
    c.register_singleton('name', 'site')
    assert c.get_typed('name', str) == 'site'
    with pytest.raises(TypeError):
        c.get_typed('name', int)


def test_resolve_service_errors():
    c = ServiceContainer()
    c.register_singleton('x', 1)
    request = SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace(container=c)))
    assert resolve_service(request, 'x') == 1
    with pytest.raises(HTTPException) as exc:
        resolve_service(request, 'y')
    assert exc.value.status_code == 500

    bare = SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace()))
    with pytest.raises(HTTPException):
        resolve_service(bare, 'x')
