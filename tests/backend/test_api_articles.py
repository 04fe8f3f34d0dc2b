from tests.helpers import admin_headers, make_client


def test_admin_routes_require_token(tmp_path):
    client = make_client(tmp_path)
    r = client.get('/api/admin/articles')
    assert r.status_code == 401
    assert r.json()['detail']['error'] == 'access_denied'

    r = client.get('/api/admin/articles', headers=admin_headers('wrong'))
    assert r.status_code == 401

    r = client.get('/api/admin/articles', headers={'Authorization': 'Basic abc'})
    assert r.status_code == 401


def test_admin_routes_closed_without_configured_token(tmp_path):
    client = make_client(tmp_path, admin_token=None)
    r = client.get('/api/admin/articles', headers=admin_headers(''))
    assert r.status_code == 401


def test_article_crud(tmp_path):
    client = make_client(tmp_path)
    h = admin_headers()

    r = client.post('/api/admin/articles', json={'title': 'Spring clean-up', 'tags': ['events']}, headers=h)
    assert r.status_code == 201
    article = r.json()
    aid = article['id']
    assert article['createdAt'] == article['updatedAt']
    assert article['published'] is False

    r = client.get(f'/api/admin/articles/{aid}', headers=h)
    assert r.status_code == 200 and r.json()['title'] == 'Spring clean-up'

    r = client.put(f'/api/admin/articles/{aid}', json={'published': True, 'excerpt': 'Join us'}, headers=h)
    assert r.status_code == 200
    body = r.json()
    assert body['published'] is True and body['publishedAt']
    assert body['excerpt'] == 'Join us'
    assert body['updatedAt'] > body['createdAt']

    r = client.get('/api/articles')
    assert [a['id'] for a in r.json()] == [aid]
    assert client.get(f'/api/articles/{aid}').status_code == 200

    r = client.delete(f'/api/admin/articles/{aid}', headers=h)
    assert r.json() == {'ok': True, 'id': aid}
    assert client.get(f'/api/admin/articles/{aid}', headers=h).status_code == 404
    assert client.delete(f'/api/admin/articles/{aid}', headers=h).status_code == 404

    # persisted as a JSON array in the data dir
    assert (tmp_path / 'data' / 'articles.json').read_text(encoding='utf-8').strip() == '[]'


def test_article_validation_and_conflicts(tmp_path):
    client = make_client(tmp_path)
    h = admin_headers()
    assert client.post('/api/admin/articles', json={'title': '  '}, headers=h).status_code == 400
    assert client.post('/api/admin/articles', json={}, headers=h).status_code == 422

    assert client.post('/api/admin/articles', json={'id': 'x', 'title': 'A'}, headers=h).status_code == 201
    assert client.post('/api/admin/articles', json={'id': 'x', 'title': 'B'}, headers=h).status_code == 409
    assert client.put('/api/admin/articles/missing', json={'title': 'B'}, headers=h).status_code == 404


def test_unpublished_articles_are_hidden_publicly(tmp_path):
    client = make_client(tmp_path)
    client.post('/api/admin/articles', json={'id': 'draft', 'title': 'Draft'}, headers=admin_headers())
    assert client.get('/api/articles').json() == []
    assert client.get('/api/articles/draft').status_code == 404


def test_bulk_endpoint(tmp_path):
    client = make_client(tmp_path)
    h = admin_headers()
    for aid in ('a', 'b', 'c'):
        client.post('/api/admin/articles', json={'id': aid, 'title': aid.upper()}, headers=h)

    r = client.post('/api/admin/articles/bulk', json={'operation': 'publish', 'items': ['a', 'c']}, headers=h)
    assert r.status_code == 200
    assert r.json()['success'] == 2
    published = client.get('/api/admin/articles', params={'published': 'true'}, headers=h).json()
    assert sorted(a['id'] for a in published) == ['a', 'c']

    r = client.post('/api/admin/articles/bulk', json={'operation': 'tags', 'items': ['b']}, headers=h)
    assert r.json()['failed'] == 1

    r = client.post('/api/admin/articles/bulk', json={'operation': 'delete', 'items': []}, headers=h)
    assert r.status_code == 400
    r = client.post('/api/admin/articles/bulk', json={'operation': 'delete', 'items': ['zzz']}, headers=h)
    assert r.status_code == 404


def test_corrupt_store_returns_storage_error(tmp_path):
    client = make_client(tmp_path)
    data_dir = tmp_path / 'data'
    data_dir.mkdir()
    (data_dir / 'articles.json').write_text('[{"id": ', encoding='utf-8')
    r = client.get('/api/articles')
    assert r.status_code == 500
    assert r.json()['error'] == 'storage_error'


def test_bulk_on_corrupt_store_returns_storage_error(tmp_path):
    client = make_client(tmp_path)
    data_dir = tmp_path / 'data'
    data_dir.mkdir()
    store_file = data_dir / 'articles.json'
    for content in ('{not json', '{"id": "a"}'):
        store_file.write_text(content, encoding='utf-8')
        r = client.post('/api/admin/articles/bulk', json={'operation': 'publish', 'items': ['a']}, headers=admin_headers())
        assert r.status_code == 500
        assert r.json()['error'] == 'storage_error'
