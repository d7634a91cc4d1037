"""
Stock movements shared by work-order parts and invoice lines.

Callers commit; these helpers only mutate the loaded rows.
"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models_business import InventoryItem

logger = logging.getLogger(__name__)


def _load(db: Session, item_id: Optional[int], organization_id: int) -> Optional[InventoryItem]:
    if not item_id:
        return None
    return (
        db.query(InventoryItem)
        .filter(InventoryItem.id == item_id, InventoryItem.organization_id == organization_id)
        .first()
    )


def require_inventory_item(db: Session, item_id: Optional[int], organization_id: int) -> None:
    """Reject line links to stock the organization does not hold"""
    if item_id and not _load(db, item_id, organization_id):
        raise HTTPException(status_code=404, detail="Inventory item not found")


def deduct_stock(db: Session, item_id: Optional[int], organization_id: int, amount: float) -> None:
    """Take stock out, never going below zero"""
    item = _load(db, item_id, organization_id)
    if not item or not amount:
        return
    item.quantity = max(0, (item.quantity or 0) - amount)
    logger.info(f"📦 Deducted {amount} from inventory item {item.id} (now {item.quantity})")


def return_stock(db: Session, item_id: Optional[int], organization_id: int, amount: float) -> None:
    item = _load(db, item_id, organization_id)
    if not item or not amount:
        return
    item.quantity = (item.quantity or 0) + amount
    logger.info(f"📦 Returned {amount} to inventory item {item.id} (now {item.quantity})")


def adjust_stock(
    db: Session,
    organization_id: int,
    old_item_id: Optional[int],
    old_quantity: float,
    new_item_id: Optional[int],
    new_quantity: float,
) -> None:
    """Reconcile stock after a line's linked item or quantity changed"""
    if old_item_id and old_item_id == new_item_id:
        delta = new_quantity - old_quantity
        if delta > 0:
            deduct_stock(db, new_item_id, organization_id, delta)
        elif delta < 0:
            return_stock(db, new_item_id, organization_id, -delta)
        return

    return_stock(db, old_item_id, organization_id, old_quantity)
    deduct_stock(db, new_item_id, organization_id, new_quantity)
