"""Item schema definitions."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Item(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    category: str
    price: float
    quantity: int
    image_url: Optional[str] = None


class CreateItemRequest(BaseModel):
    name: str
    category: str
    price: float
    quantity: int
    image_url: Optional[str] = None


class UpdateQuantityRequest(BaseModel):
    quantity: int = Field(description="New stock level; must not be negative.")


class PurchaseRequest(BaseModel):
    quantity: int = Field(description="Number of units to buy; must be positive.")
