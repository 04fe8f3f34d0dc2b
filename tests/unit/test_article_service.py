import pytest

from records_lib.articles import ArticleService
from records_lib.storage import RecordStore
from tests.helpers import StepClock


@pytest.fixture
def svc(tmp_path):
    return ArticleService(RecordStore('articles', data_dir=tmp_path, clock=StepClock()))


def seed(svc):
    a = svc.create({'id': 'a', 'title': 'Budget 2024', 'category': 'town'})
    b = svc.create({'id': 'b', 'title': 'New playground', 'published': True})
    c = svc.create({'id': 'c', 'title': 'Road works'})
    return a, b, c


def test_create_fills_defaults_and_generates_id(svc):
    article = svc.create({'title': 'Town hall meeting'})
    assert article['id'].startswith('town-hall-meeting-')
    assert article['tags'] == []
    assert article['published'] is False
    assert article['publishedAt'] is None
    assert article['content'] == '' and article['excerpt'] == ''
    assert svc.get(article['id']) == article


def test_create_published_sets_published_at(svc):
    article = svc.create({'title': 'Live', 'published': True})
    assert article['publishedAt'] is not None


def test_list_articles_newest_first_and_filtered(svc):
    seed(svc)
    assert [a['id'] for a in svc.list_articles()] == ['c', 'b', 'a']
    assert [a['id'] for a in svc.list_articles(published=True)] == ['b']
    assert [a['id'] for a in svc.list_articles(published=False)] == ['c', 'a']


def test_update_publish_toggles_published_at(svc):
    seed(svc)
    live = svc.update('a', {'published': True})
    assert live['published'] is True and live['publishedAt']
    again = svc.update('a', {'published': True, 'title': 'Budget 2024 (final)'})
    assert again['publishedAt'] == live['publishedAt']
    hidden = svc.update('a', {'published': False})
    assert hidden['publishedAt'] is None


def test_update_and_delete_unknown(svc):
    assert svc.update('nope', {'published': True}) is None
    assert svc.update('nope', {'title': 'x'}) is None
    assert svc.delete('nope') is False


def test_bulk_requires_items_and_matches(svc):
    seed(svc)
    with pytest.raises(ValueError):
        svc.bulk('publish', [])
    with pytest.raises(LookupError):
        svc.bulk('publish', ['x', 'y'])


def test_bulk_publish_and_unpublish(svc):
    seed(svc)
    result = svc.bulk('publish', ['a', 'c', 'missing'])
    assert result.success == 2 and result.failed == 0
    assert all(svc.get(i)['published'] for i in ('a', 'c'))
    assert svc.get('a')['publishedAt']

    result = svc.bulk('unpublish', ['a', 'b'])
    assert result.success == 2
    assert svc.get('b')['published'] is False
    assert svc.get('b')['publishedAt'] is None
    assert svc.get('c')['published'] is True


def test_bulk_category_and_tags(svc):
    seed(svc)
    result = svc.bulk('category', ['a', 'b'], category='news')
    assert result.success == 2
    assert svc.get('b')['category'] == 'news'

    result = svc.bulk('tags', ['c'], tags=['roads', 'summer'])
    assert result.success == 1
    assert svc.get('c')['tags'] == ['roads', 'summer']


def test_bulk_category_without_value_fails_every_target(svc):
    seed(svc)
    before = svc.store.read()
    result = svc.bulk('category', ['a', 'b'])
    assert result.success == 0
    assert result.failed == 2
    assert 'Budget 2024' in result.errors[0]
    assert svc.store.read() == before


def test_bulk_duplicate_creates_unpublished_copies(svc):
    seed(svc)
    result = svc.bulk('duplicate', ['b'])
    assert result.success == 1
    copies = [a for a in svc.list_articles() if a['title'] == 'New playground (copy)']
    assert len(copies) == 1
    copy = copies[0]
    assert copy['id'] != 'b'
    assert copy['published'] is False and copy['publishedAt'] is None
    assert copy['createdAt'] > svc.get('b')['createdAt']


def test_bulk_delete(svc):
    seed(svc)
    result = svc.bulk('delete', ['a', 'b'])
    assert result.to_dict() == {
        'success': 2,
        'failed': 0,
        'errors': [],
        'message': 'Processed 2 articles, 0 errors',
    }
    assert [a['id'] for a in svc.list_articles()] == ['c']


def test_bulk_unknown_operation(svc):
    seed(svc)
    result = svc.bulk('archive', ['a'])
    assert result.failed == 1
    assert "Unknown operation 'archive'" in result.errors[0]


def test_bulk_write_failure_is_reported(svc, monkeypatch):
    seed(svc)

    def fail(ids, fields):
        raise OSError('disk full')

    monkeypatch.setattr(svc.store, 'bulk_update', fail)
    result = svc.bulk('publish', ['a', 'c'])
    assert result.success == 0
    assert result.failed == 2
    assert 'disk full' in result.errors[0]


def test_bulk_publish_keeps_published_at_of_live_articles(svc):
    seed(svc)
    original = svc.get('b')['publishedAt']
    assert original

    result = svc.bulk('publish', ['a', 'b'])
    assert result.success == 2 and result.failed == 0
    assert svc.get('b')['publishedAt'] == original
    assert svc.get('a')['publishedAt'] > original


def test_bulk_publish_of_only_live_articles_does_not_write(svc, monkeypatch):
    seed(svc)

    def fail(ids, fields):
        raise AssertionError('nothing to publish')

    monkeypatch.setattr(svc.store, 'bulk_update', fail)
    assert svc.bulk('publish', ['b']).success == 1
