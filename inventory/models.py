"""
Pydantic models for inventory records.
"""

from typing import Optional

from pydantic import BaseModel, Field


class InventoryItemBase(BaseModel):
    """Columns shared by every inventory record shape."""
    nombre: str = Field(..., description="Item name")
    descripcion: Optional[str] = Field(None, description="Item description")
    cantidad: int = Field(..., description="Units in stock")
    marca: Optional[str] = Field(None, description="Brand")
    precio: float = Field(..., description="Unit price")
    imagen: Optional[str] = Field(None, description="Object-store key of the item image")


class InventoryItemCreate(InventoryItemBase):
    """Model for creating a new record."""
    pass


class InventoryItemUpdate(InventoryItemBase):
    """Model for overwriting every column of an existing record."""
    pass


class InventoryItem(InventoryItemBase):
    """Model for records read back from the datastore."""
    id: int = Field(..., description="Datastore-assigned identifier")

    model_config = {"from_attributes": True}


class HealthResponse(BaseModel):
    """Response model for health check."""
    status: str = Field(..., description="Health status")
    timestamp: str = Field(..., description="ISO 8601 timestamp")
    version: str = Field(..., description="Application version")
