"""
Retail Ledger Inventory Engine - Event Types and Payloads
==========================================================
Typed payloads for stock and catalog side effects.
Each payload names its event type and the notification it produces.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Optional

from engines.inventory.catalog import ProductSnapshot


# ══════════════════════════════════════════════════════════════
# EVENT TYPE CONSTANTS
# ══════════════════════════════════════════════════════════════

INVENTORY_STOCK_LOW_V1 = "inventory.stock.low.v1"
INVENTORY_PRODUCT_CREATED_V1 = "inventory.product.created.v1"
INVENTORY_PRODUCT_UPDATED_V1 = "inventory.product.updated.v1"
INVENTORY_PRODUCT_DELETED_V1 = "inventory.product.deleted.v1"

INVENTORY_EVENT_TYPES = (
    INVENTORY_STOCK_LOW_V1,
    INVENTORY_PRODUCT_CREATED_V1,
    INVENTORY_PRODUCT_UPDATED_V1,
    INVENTORY_PRODUCT_DELETED_V1,
)

PRODUCT_CHANGE_CREATED = "created"
PRODUCT_CHANGE_UPDATED = "updated"
PRODUCT_CHANGE_DELETED = "deleted"

_PRODUCT_CHANGE_TYPES = {
    PRODUCT_CHANGE_CREATED: (INVENTORY_PRODUCT_CREATED_V1, "PRODUCT_CREATED"),
    PRODUCT_CHANGE_UPDATED: (INVENTORY_PRODUCT_UPDATED_V1, "PRODUCT_UPDATED"),
    PRODUCT_CHANGE_DELETED: (INVENTORY_PRODUCT_DELETED_V1, "PRODUCT_DELETED"),
}


# ══════════════════════════════════════════════════════════════
# PAYLOADS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LowStockPayload:
    EVENT_TYPE = INVENTORY_STOCK_LOW_V1
    NOTIFICATION_TYPE = "LOW_STOCK"

    product_id: uuid.UUID
    product_name: str
    stock: int
    brand_id: Optional[uuid.UUID]
    brand_name: str
    threshold: int

    def to_dict(self) -> dict:
        return {
            "productId": str(self.product_id),
            "productName": self.product_name,
            "stock": self.stock,
            "brandId": str(self.brand_id) if self.brand_id else None,
            "brandName": self.brand_name or "Unknown Brand",
            "threshold": self.threshold,
        }


@dataclass(frozen=True)
class ProductChangedPayload:
    change: str
    product_id: uuid.UUID
    product_name: str
    brand_id: Optional[uuid.UUID]
    brand_name: str

    def __post_init__(self):
        if self.change not in _PRODUCT_CHANGE_TYPES:
            raise ValueError(f"change '{self.change}' is not valid.")

    @property
    def EVENT_TYPE(self) -> str:
        return _PRODUCT_CHANGE_TYPES[self.change][0]

    @property
    def NOTIFICATION_TYPE(self) -> str:
        return _PRODUCT_CHANGE_TYPES[self.change][1]

    def to_dict(self) -> dict:
        return {
            "productId": str(self.product_id),
            "productName": self.product_name,
            "brandId": str(self.brand_id) if self.brand_id else None,
            "brandName": self.brand_name,
        }


# ══════════════════════════════════════════════════════════════
# PAYLOAD BUILDERS
# ══════════════════════════════════════════════════════════════

def build_low_stock_payload(product: ProductSnapshot, stock: int, threshold: int) -> LowStockPayload:
    return LowStockPayload(
        product_id=product.product_id,
        product_name=product.name,
        stock=stock,
        brand_id=product.brand_id,
        brand_name=product.brand_name,
        threshold=threshold,
    )


def build_product_changed_payload(change: str, product: ProductSnapshot) -> ProductChangedPayload:
    return ProductChangedPayload(
        change=change,
        product_id=product.product_id,
        product_name=product.name,
        brand_id=product.brand_id,
        brand_name=product.brand_name,
    )
