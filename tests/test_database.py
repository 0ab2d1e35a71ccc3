# tests/test_database.py
import pytest

from storefront.database import InMemoryProductRepository, SqlProductRepository
from storefront.models import ProductData


@pytest.fixture(params=["memory", "sqlite"])
def repo(request):
    if request.param == "memory":
        return InMemoryProductRepository()
    r = SqlProductRepository("sqlite://")
    r.create_tables()
    return r


def _data(name, category=None, price_cents=500):
    return ProductData(name=name, price_cents=price_cents, category=category)


def test_insert_assigns_ids_and_keeps_cents(repo):
    a = repo.insert(_data("A", "nails", 1999), "https://img/a.png")
    b = repo.insert(_data("B"), None)
    assert a.id != b.id
    assert repo.get(a.id).price_cents == 1999
    assert repo.get(a.id).image_url == "https://img/a.png"
    assert repo.get(b.id).category is None


def test_list_orders_newest_first_and_filters(repo):
    a = repo.insert(_data("A", "nails"), None)
    b = repo.insert(_data("B", "makeup"), None)
    c = repo.insert(_data("C", "nails"), None)

    assert [p.id for p in repo.list()] == [c.id, b.id, a.id]
    assert [p.id for p in repo.list("nails")] == [c.id, a.id]
    assert repo.list("hair") == []


def test_categories_distinct_without_nulls(repo):
    repo.insert(_data("A", "nails"), None)
    repo.insert(_data("B", "makeup"), None)
    repo.insert(_data("C", "nails"), None)
    repo.insert(_data("D"), None)
    assert repo.categories() == ["makeup", "nails"]


def test_update_overwrites_fields(repo):
    a = repo.insert(_data("A", "nails", 100), "https://img/a.png")
    updated = repo.update(a.id, _data("A2", None, 250), "https://img/a.png")
    assert updated.name == "A2"
    assert updated.category is None
    assert updated.price_cents == 250
    assert repo.update(999, _data("X"), None) is None


def test_delete(repo):
    a = repo.insert(_data("A"), None)
    assert repo.delete(a.id) is True
    assert repo.get(a.id) is None
    assert repo.delete(a.id) is False


def test_created_at_is_timezone_aware(repo):
    a = repo.insert(_data("A"), None)
    assert repo.get(a.id).created_at.utcoffset() is not None
    assert repo.list()[0].created_at.utcoffset().total_seconds() == 0
