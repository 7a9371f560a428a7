"""
Retail Ledger Inventory Engine - Catalog Protocols
===================================================
The ledger reads products through CatalogReader and mutates stock
through StockLedger. Both are tenant scoped: a product id that
belongs to another tenant is treated as missing.

apply_stock_deltas() is all-or-nothing: if any product in the batch is
missing, no stock changes. It returns the stock after each delta, in
the order the deltas were given.
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Iterable, Optional, Protocol, Sequence, Tuple

from engines.billing.errors import NotFoundError, ValidationError


@dataclass(frozen=True)
class ProductSnapshot:
    """Point-in-time view of one product, as the ledger sees it."""

    product_id: uuid.UUID
    tenant_id: uuid.UUID
    name: str
    price: Decimal
    stock: int
    brand_id: Optional[uuid.UUID] = None
    brand_name: str = ""
    description: str = ""

    def to_dict(self) -> dict:
        return {
            "id": str(self.product_id),
            "name": self.name,
            "price": str(self.price),
            "stock": self.stock,
            "brandId": str(self.brand_id) if self.brand_id else None,
            "brandName": self.brand_name,
            "description": self.description,
        }


StockDelta = Tuple[uuid.UUID, int]


class CatalogReader(Protocol):
    def get_products(
        self, *, tenant_id: uuid.UUID, product_ids: Iterable[uuid.UUID],
    ) -> dict[uuid.UUID, ProductSnapshot]:
        """Products found for this tenant, keyed by id. Missing ids are absent."""
        ...

    def get_product(self, *, tenant_id: uuid.UUID, product_id: uuid.UUID) -> Optional[ProductSnapshot]:
        ...


class StockLedger(Protocol):
    def apply_stock_deltas(
        self, *, tenant_id: uuid.UUID, deltas: Sequence[StockDelta],
    ) -> list[int]:
        ...


class CatalogWriter(Protocol):
    def add_product(self, snapshot: ProductSnapshot) -> ProductSnapshot:
        ...

    def replace_product(self, snapshot: ProductSnapshot) -> ProductSnapshot:
        ...

    def remove_product(self, *, tenant_id: uuid.UUID, product_id: uuid.UUID) -> ProductSnapshot:
        ...


class InMemoryCatalog:
    """Thread-safe in-memory catalog implementing reader, writer and stock ledger."""

    def __init__(self):
        self._lock = threading.Lock()
        self._products: dict[uuid.UUID, ProductSnapshot] = {}

    def register_product(
        self,
        *,
        tenant_id: uuid.UUID,
        name: str,
        price: Decimal,
        stock: int,
        brand_name: str = "",
        brand_id: Optional[uuid.UUID] = None,
        description: str = "",
        product_id: Optional[uuid.UUID] = None,
    ) -> ProductSnapshot:
        return self.add_product(ProductSnapshot(
            product_id=product_id or uuid.uuid4(),
            tenant_id=tenant_id,
            name=name,
            price=Decimal(price),
            stock=stock,
            brand_id=brand_id,
            brand_name=brand_name,
            description=description,
        ))

    def add_product(self, snapshot: ProductSnapshot) -> ProductSnapshot:
        with self._lock:
            if snapshot.product_id in self._products:
                raise ValidationError(f"Product {snapshot.product_id} already exists.")
            self._products[snapshot.product_id] = snapshot
        return snapshot

    def replace_product(self, snapshot: ProductSnapshot) -> ProductSnapshot:
        with self._lock:
            current = self._products.get(snapshot.product_id)
            if current is None or current.tenant_id != snapshot.tenant_id:
                raise NotFoundError("Product", snapshot.product_id)
            self._products[snapshot.product_id] = snapshot
        return snapshot

    def remove_product(self, *, tenant_id: uuid.UUID, product_id: uuid.UUID) -> ProductSnapshot:
        with self._lock:
            current = self._products.get(product_id)
            if current is None or current.tenant_id != tenant_id:
                raise NotFoundError("Product", product_id)
            del self._products[product_id]
        return current

    def get_product(self, *, tenant_id: uuid.UUID, product_id: uuid.UUID) -> Optional[ProductSnapshot]:
        with self._lock:
            product = self._products.get(product_id)
        if product is None or product.tenant_id != tenant_id:
            return None
        return product

    def get_products(
        self, *, tenant_id: uuid.UUID, product_ids: Iterable[uuid.UUID],
    ) -> dict[uuid.UUID, ProductSnapshot]:
        wanted = set(product_ids)
        with self._lock:
            return {
                pid: product
                for pid, product in self._products.items()
                if pid in wanted and product.tenant_id == tenant_id
            }

    def apply_stock_deltas(
        self, *, tenant_id: uuid.UUID, deltas: Sequence[StockDelta],
    ) -> list[int]:
        with self._lock:
            for product_id, _ in deltas:
                product = self._products.get(product_id)
                if product is None or product.tenant_id != tenant_id:
                    raise NotFoundError("Product", product_id)

            stock_after: list[int] = []
            for product_id, delta in deltas:
                product = self._products[product_id]
                product = replace(product, stock=product.stock + delta)
                self._products[product_id] = product
                stock_after.append(product.stock)
            return stock_after
