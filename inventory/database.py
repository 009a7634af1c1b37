"""
Store interfaces for inventory records and their images.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from inventory.models import InventoryItem, InventoryItemCreate, InventoryItemUpdate


class ItemStore(ABC):
    """Abstract interface for the relational datastore holding records."""

    @abstractmethod
    def list_items(self) -> List[InventoryItem]:
        """List all records."""
        pass

    @abstractmethod
    def get_item(self, item_id: int) -> Optional[InventoryItem]:
        """Get a specific record by ID."""
        pass

    @abstractmethod
    def list_image_keys(self) -> List[Optional[str]]:
        """Return the image key of every record (None where absent)."""
        pass

    @abstractmethod
    def create_item(self, item: InventoryItemCreate) -> InventoryItem:
        """Insert a new record."""
        pass

    @abstractmethod
    def update_item(self, item_id: int, item: InventoryItemUpdate) -> bool:
        """Overwrite a record; returns False if no record has that ID."""
        pass

    @abstractmethod
    def delete_item(self, item_id: int) -> None:
        """Delete a record."""
        pass

    @abstractmethod
    def delete_all_items(self) -> int:
        """Delete every record, returning how many were removed."""
        pass

    def close(self) -> None:
        """Release the underlying connection."""


class ImageStore(ABC):
    """Abstract interface for the object store holding image bytes."""

    bucket_name: str

    @abstractmethod
    def put_object(self, object_name: str, data: bytes) -> None:
        """Upload (or overwrite) an object."""
        pass

    @abstractmethod
    def get_object(self, object_name: str) -> bytes:
        """Download an object."""
        pass

    @abstractmethod
    def delete_object(self, object_name: str) -> None:
        """Delete an object; deleting a missing object is not an error."""
        pass

    def close(self) -> None:
        """Release the underlying client."""
