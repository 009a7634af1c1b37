"""
Tests for the record store interface and implementations.
"""

import pytest

from inventory.database import ItemStore
from inventory.in_memory_store import InMemoryItemStore
from inventory.models import InventoryItemCreate, InventoryItemUpdate
from inventory.sql_store import SqlItemStore, normalize_database_url


def _create(**overrides) -> InventoryItemCreate:
    fields = {
        "nombre": "Widget",
        "descripcion": "A widget",
        "cantidad": 5,
        "marca": "Acme",
        "precio": 9.99,
    }
    fields.update(overrides)
    return InventoryItemCreate(**fields)


class TestItemStoreInterface:
    """Test the ItemStore abstract interface."""

    def test_item_store_interface_methods(self):
        for name in (
            "list_items",
            "get_item",
            "list_image_keys",
            "create_item",
            "update_item",
            "delete_item",
            "delete_all_items",
            "close",
        ):
            assert hasattr(ItemStore, name)

    def test_item_store_is_abstract(self):
        with pytest.raises(TypeError):
            ItemStore()


@pytest.fixture(params=["memory", "sqlite"])
def store(request):
    """Each ItemStore implementation, empty."""
    if request.param == "memory":
        yield InMemoryItemStore()
    else:
        sql = SqlItemStore("sqlite://")
        yield sql
        sql.close()


class TestItemStores:
    """Behaviour shared by every ItemStore."""

    def test_create_assigns_increasing_ids(self, store):
        first = store.create_item(_create(nombre="A"))
        second = store.create_item(_create(nombre="B"))

        assert first.id < second.id
        assert [item.nombre for item in store.list_items()] == ["A", "B"]

    def test_create_keeps_fields(self, store):
        created = store.create_item(_create(imagen="170000-sample.png"))

        fetched = store.get_item(created.id)
        assert fetched.nombre == "Widget"
        assert fetched.descripcion == "A widget"
        assert fetched.cantidad == 5
        assert fetched.marca == "Acme"
        assert fetched.precio == pytest.approx(9.99)
        assert fetched.imagen == "170000-sample.png"

    def test_create_without_image(self, store):
        created = store.create_item(_create())
        assert store.get_item(created.id).imagen is None

    def test_get_missing_returns_none(self, store):
        assert store.get_item(12345) is None

    def test_list_image_keys(self, store):
        store.create_item(_create(imagen="1-a.png"))
        store.create_item(_create())

        assert sorted(store.list_image_keys(), key=str) == sorted(["1-a.png", None], key=str)

    def test_update_overwrites_every_column(self, store):
        created = store.create_item(_create(imagen="1-a.png"))

        found = store.update_item(
            created.id,
            InventoryItemUpdate(
                nombre="Gadget",
                descripcion="Changed",
                cantidad=2,
                marca="Other",
                precio=1.5,
                imagen="2-b.png",
            ),
        )

        assert found is True
        updated = store.get_item(created.id)
        assert updated.nombre == "Gadget"
        assert updated.cantidad == 2
        assert updated.precio == pytest.approx(1.5)
        assert updated.imagen == "2-b.png"

    def test_update_missing_returns_false(self, store):
        assert store.update_item(999, InventoryItemUpdate(**_create().model_dump())) is False

    def test_delete_item(self, store):
        keep = store.create_item(_create(nombre="keep"))
        drop = store.create_item(_create(nombre="drop"))

        store.delete_item(drop.id)

        assert [item.id for item in store.list_items()] == [keep.id]

    def test_delete_all_items(self, store):
        store.create_item(_create())
        store.create_item(_create())

        assert store.delete_all_items() == 2
        assert store.list_items() == []


class TestSqlItemStore:
    """SQL-specific behaviour."""

    def test_requires_database_url(self):
        with pytest.raises(ValueError, match="Database URL is required"):
            SqlItemStore("")

    def test_query_error_is_wrapped(self):
        store = SqlItemStore("sqlite://", create_schema=False)
        try:
            with pytest.raises(RuntimeError, match="Failed to list items"):
                store.list_items()
        finally:
            store.close()

    def test_mysql_url_gets_pymysql_driver(self):
        assert normalize_database_url("mysql://user:pw@db.example.com/inventory") == (
            "mysql+pymysql://user:pw@db.example.com/inventory"
        )

    def test_explicit_driver_is_kept(self):
        url = "postgresql+psycopg://user:pw@localhost/inventory"
        assert normalize_database_url(url) == url
