from records_lib.server.health import get_health
from records_lib.storage import RecordStore
from tests.helpers import admin_headers, make_client


def test_get_health_counts_records(tmp_path):
    store = RecordStore('articles', data_dir=tmp_path)
    store.write([{'id': '1'}, {'id': '2'}])
    health = get_health([store, RecordStore('empty', data_dir=tmp_path)])
    assert health['status'] == 'ok'
    assert health['stores'] == {'articles': 2, 'empty': 0}
    assert health['uptime_seconds'] >= 0


def test_get_health_degraded_on_corrupt_store(tmp_path):
    store = RecordStore('articles', data_dir=tmp_path)
    store.file_path.write_text('garbage', encoding='utf-8')
    health = get_health([store])
    assert health['status'] == 'degraded'
    assert health['stores'] == {'articles': None}


def test_health_endpoint(tmp_path):
    client = make_client(tmp_path)
    client.post('/api/admin/articles', json={'title': 'Hello'}, headers=admin_headers())
    r = client.get('/api/health')
    assert r.status_code == 200
    body = r.json()
    assert body['status'] == 'ok'
    assert body['stores'] == {'articles': 1, 'newsletter-subscribers': 0}
