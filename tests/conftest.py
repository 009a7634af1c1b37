"""
Pytest configuration and fixtures for the inventory app tests.
"""

import os
from unittest.mock import MagicMock

import pytest

# Set test environment variables
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BUCKET_NAME", "test-bucket")
os.environ.setdefault("LOG_LEVEL", "INFO")

from inventory.database import ImageStore, ItemStore  # noqa: E402
from inventory.gcs_store import MockImageStore  # noqa: E402
from inventory.in_memory_store import InMemoryItemStore  # noqa: E402
from inventory.models import InventoryItem, InventoryItemCreate  # noqa: E402


@pytest.fixture
def item_store():
    """Empty in-memory record store."""
    return InMemoryItemStore()


@pytest.fixture
def image_store():
    """Empty in-memory image store."""
    return MockImageStore("test-bucket")


@pytest.fixture
def test_client(item_store, image_store):
    """Create a test client for an app wired to the in-memory stores."""
    from fastapi.testclient import TestClient
    from inventory.api import create_app

    with TestClient(create_app(item_store, image_store)) as client:
        yield client


@pytest.fixture
def recorder():
    """
    Mocked stores attached to one parent mock so call order across both
    stores can be asserted through `recorder.mock_calls`.
    """
    parent = MagicMock()
    parent.attach_mock(MagicMock(spec=ItemStore), "items")
    parent.attach_mock(MagicMock(spec=ImageStore), "images")
    return parent


@pytest.fixture
def mock_client(recorder):
    """Test client for an app wired to the mocked stores in `recorder`."""
    from fastapi.testclient import TestClient
    from inventory.api import create_app

    with TestClient(create_app(recorder.items, recorder.images)) as client:
        yield client


@pytest.fixture
def sample_form():
    """Form fields for a new record."""
    return {
        "nombre": "Widget",
        "descripcion": "A widget",
        "cantidad": "5",
        "marca": "Acme",
        "precio": "9.99",
    }


@pytest.fixture
def make_item():
    """Factory for InventoryItem values."""

    def _make(item_id=1, imagen=None, **overrides):
        fields = {
            "nombre": "Widget",
            "descripcion": "A widget",
            "cantidad": 5,
            "marca": "Acme",
            "precio": 9.99,
        }
        fields.update(overrides)
        return InventoryItem(id=item_id, imagen=imagen, **fields)

    return _make


@pytest.fixture
def seed(item_store, image_store):
    """Insert a record (and its image bytes, if keyed) into the in-memory stores."""

    def _seed(imagen=None, **overrides):
        fields = {
            "nombre": "Widget",
            "descripcion": "A widget",
            "cantidad": 5,
            "marca": "Acme",
            "precio": 9.99,
        }
        fields.update(overrides)
        if imagen:
            image_store.put_object(imagen, b"old-bytes")
        return item_store.create_item(InventoryItemCreate(imagen=imagen, **fields))

    return _seed
