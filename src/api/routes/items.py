"""Item routes.

This module handles HTTP endpoints for browsing the catalogue, dealer stock
management, and buying items.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from api.routes.auth import require_roles
from config import PURCHASE_ALLOWED_ROLES, ROLE_DEALER
from core.dependencies import InventoryManagerDep
from core.exceptions import (
    InsufficientStockError,
    ItemNotFoundError,
    ValidationError,
)
from schemas.item import (
    CreateItemRequest,
    Item,
    PurchaseRequest,
    UpdateQuantityRequest,
)
from schemas.user import Identity

router = APIRouter(prefix="/api", tags=["Items"])

require_dealer = require_roles(ROLE_DEALER)
require_buyer = require_roles(*PURCHASE_ALLOWED_ROLES)


@router.get("/categories", response_model=List[str], summary="List categories")
def list_categories(inventory_manager: InventoryManagerDep) -> List[str]:
    return inventory_manager.list_categories()


@router.get("/items", response_model=List[Item], summary="Search items")
def list_items(
    inventory_manager: InventoryManagerDep,
    search: Optional[str] = None,
) -> List[Item]:
    """List items whose name or category contains ``search``.

    Args:
        inventory_manager: Injected InventoryManager instance.
        search: Optional search text; omitted or empty returns everything.

    Returns:
        List of Item objects.
    """
    return inventory_manager.search_items(search)


@router.post("/items", summary="Add an item (dealer only)")
def add_item(
    req: CreateItemRequest,
    inventory_manager: InventoryManagerDep,
    dealer: Identity = Depends(require_dealer),
) -> dict:
    """Add a new item to the catalogue.

    Raises:
        HTTPException: 400 if a field is missing or out of range.
    """
    try:
        item = inventory_manager.add_item(
            name=req.name,
            category=req.category,
            price=req.price,
            quantity=req.quantity,
            image_url=req.image_url,
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message,
        )
    return {
        "success": True,
        "message": "Item added successfully!",
        "item": item.model_dump(),
    }


@router.put("/update-quantity/{item_id}", summary="Set item stock (dealer only)")
def update_quantity(
    item_id: int,
    req: UpdateQuantityRequest,
    inventory_manager: InventoryManagerDep,
    dealer: Identity = Depends(require_dealer),
) -> dict:
    """Overwrite the stock level of an item.

    Raises:
        HTTPException: 400 if the quantity is negative, 404 if the item is
            not found.
    """
    try:
        inventory_manager.update_quantity(item_id, req.quantity)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except ItemNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    return {"success": True, "message": "Item quantity updated successfully!"}


@router.delete("/items/{item_id}", summary="Delete an item (dealer only)")
def delete_item(
    item_id: int,
    inventory_manager: InventoryManagerDep,
    dealer: Identity = Depends(require_dealer),
) -> dict:
    try:
        inventory_manager.delete_item(item_id)
    except ItemNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    return {"success": True, "message": "Item deleted successfully!"}


@router.get("/dealer/items", response_model=List[Item], summary="Dealer inventory view")
def list_dealer_items(
    inventory_manager: InventoryManagerDep,
    dealer: Identity = Depends(require_dealer),
) -> List[Item]:
    return inventory_manager.list_items()


@router.post("/buy/{item_id}", summary="Buy an item")
def buy_item(
    item_id: int,
    req: PurchaseRequest,
    inventory_manager: InventoryManagerDep,
    buyer: Identity = Depends(require_buyer),
) -> dict:
    """Buy units of an item, taking them out of stock.

    Running out of stock is not an HTTP error: the response carries
    ``success: false`` and the quantity still available.

    Raises:
        HTTPException: 400 if the quantity is not positive, 404 if the item
            is not found.
    """
    try:
        remaining = inventory_manager.purchase(item_id, req.quantity)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except ItemNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except InsufficientStockError as e:
        return {"success": False, "message": e.message, "remaining": e.available}

    return {
        "success": True,
        "message": f"Stock updated successfully! Remaining stock: {remaining}",
        "remaining": remaining,
    }
