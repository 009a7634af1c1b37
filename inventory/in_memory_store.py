from __future__ import annotations

"""
In-memory implementation of the `ItemStore` interface.

Used for local development and tests where a relational database is not
available. Identifiers are assigned from a counter the way an auto-increment
primary key would be.
"""

import itertools
from typing import Dict, List, Optional

from inventory.database import ItemStore
from inventory.models import InventoryItem, InventoryItemCreate, InventoryItemUpdate


class InMemoryItemStore(ItemStore):
    """Dictionary-backed store for `InventoryItem` records."""

    def __init__(self):
        # item_id → InventoryItem
        self._items: Dict[int, InventoryItem] = {}
        self._ids = itertools.count(1)

    # ────────────────────────────────
    # Record helpers
    # ────────────────────────────────
    def list_items(self) -> List[InventoryItem]:
        return list(self._items.values())

    def get_item(self, item_id: int) -> Optional[InventoryItem]:
        return self._items.get(item_id)

    def list_image_keys(self) -> List[Optional[str]]:
        return [item.imagen for item in self._items.values()]

    def create_item(self, item: InventoryItemCreate) -> InventoryItem:
        item_id = next(self._ids)
        new_item = InventoryItem(id=item_id, **item.model_dump())
        self._items[item_id] = new_item
        return new_item

    def update_item(self, item_id: int, item_update: InventoryItemUpdate) -> bool:
        if item_id not in self._items:
            return False
        self._items[item_id] = InventoryItem(id=item_id, **item_update.model_dump())
        return True

    def delete_item(self, item_id: int) -> None:
        self._items.pop(item_id, None)

    def delete_all_items(self) -> int:
        removed = len(self._items)
        self._items.clear()
        return removed
