"""
Retail Ledger Inventory Engine - Application Services
======================================================
InventoryReconciler   applies the stock side of bill creation/deletion
ProductCatalogService catalog edits that produce PRODUCT_* side effects
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from typing import Callable, Iterable, Optional

from core.events.envelope import LedgerEvent
from core.time.clock import Clock
from engines.billing.errors import NotFoundError, ValidationError
from engines.billing.models import LineItem
from engines.billing.policies import parse_money
from engines.inventory.catalog import CatalogReader, ProductSnapshot, StockLedger
from engines.inventory.events import (
    PRODUCT_CHANGE_CREATED,
    PRODUCT_CHANGE_DELETED,
    PRODUCT_CHANGE_UPDATED,
    LowStockPayload,
    build_low_stock_payload,
    build_product_changed_payload,
)
from engines.inventory.policies import (
    LOW_STOCK_THRESHOLD,
    crossed_into_low_stock,
    is_low_stock,
)

logger = logging.getLogger("ledger.inventory")


# ══════════════════════════════════════════════════════════════
# INVENTORY RECONCILER
# ══════════════════════════════════════════════════════════════

class InventoryReconciler:
    """
    Sale:    one -quantity delta per line item, applied as one batch.
             Every line whose stock-after lands at or below the threshold
             yields a LowStockPayload, even if it was already low.
    Restore: one +quantity delta per line item. No low-stock check.
    """

    def __init__(
        self,
        stock_ledger: StockLedger,
        catalog: CatalogReader,
        low_stock_threshold: int = LOW_STOCK_THRESHOLD,
    ):
        self._stock_ledger = stock_ledger
        self._catalog = catalog
        self._threshold = low_stock_threshold

    @property
    def low_stock_threshold(self) -> int:
        return self._threshold

    def apply_sale(
        self,
        *,
        tenant_id: uuid.UUID,
        items: Iterable[LineItem],
        products: dict[uuid.UUID, ProductSnapshot],
    ) -> list[LowStockPayload]:
        items = tuple(items)
        deltas = [(item.product_id, -item.quantity) for item in items]
        stock_after = self._stock_ledger.apply_stock_deltas(tenant_id=tenant_id, deltas=deltas)

        alerts: list[LowStockPayload] = []
        for item, stock in zip(items, stock_after):
            if is_low_stock(stock, self._threshold):
                logger.info(
                    f"Low stock: product={item.product_id} stock={stock} "
                    f"(threshold {self._threshold})"
                )
                alerts.append(build_low_stock_payload(products[item.product_id], stock, self._threshold))
        return alerts

    def restore_sale(self, *, tenant_id: uuid.UUID, items: Iterable[LineItem]) -> list[int]:
        """
        Return each line's quantity to stock. Products removed from the
        catalog since the sale are skipped.
        """
        items = tuple(items)
        existing = self._catalog.get_products(
            tenant_id=tenant_id, product_ids={item.product_id for item in items},
        )
        deltas = []
        for item in items:
            if item.product_id not in existing:
                logger.warning(f"Stock not restored for removed product {item.product_id}")
                continue
            deltas.append((item.product_id, item.quantity))
        if not deltas:
            return []
        return self._stock_ledger.apply_stock_deltas(tenant_id=tenant_id, deltas=deltas)


# ══════════════════════════════════════════════════════════════
# PRODUCT CATALOG SERVICE
# ══════════════════════════════════════════════════════════════

_UPDATABLE_PRODUCT_FIELDS = frozenset({"name", "price", "stock", "description", "brand_id", "brand_name"})


def _validate_stock(stock) -> int:
    if isinstance(stock, bool) or not isinstance(stock, int) or stock < 0:
        raise ValidationError("stock must be integer >= 0.", field="stock")
    return stock


def _validate_name(name) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Product name is required.", field="name")
    return name.strip()


class ProductCatalogService:
    """Catalog edits. Every change publishes a PRODUCT_* event."""

    def __init__(
        self,
        catalog,
        outbox,
        clock: Clock,
        low_stock_threshold: int = LOW_STOCK_THRESHOLD,
        id_factory: Callable[[], uuid.UUID] = uuid.uuid4,
    ):
        self._catalog = catalog
        self._outbox = outbox
        self._clock = clock
        self._threshold = low_stock_threshold
        self._id_factory = id_factory

    def _publish(self, tenant_id: uuid.UUID, payloads) -> None:
        occurred_at = self._clock.now_utc()
        try:
            for payload in payloads:
                self._outbox.publish(
                    LedgerEvent.for_payload(payload, tenant_id=tenant_id, occurred_at=occurred_at)
                )
        except Exception as exc:
            logger.error(f"Could not publish catalog side effects: {exc}", exc_info=True)
        self._outbox.drain()

    def create_product(
        self,
        *,
        tenant_id: uuid.UUID,
        name: str,
        price,
        stock: int,
        brand_id: Optional[uuid.UUID] = None,
        brand_name: str = "",
        description: str = "",
    ) -> ProductSnapshot:
        product = self._catalog.add_product(ProductSnapshot(
            product_id=self._id_factory(),
            tenant_id=tenant_id,
            name=_validate_name(name),
            price=parse_money(price, field="price"),
            stock=_validate_stock(stock),
            brand_id=brand_id,
            brand_name=brand_name or "",
            description=description or "",
        ))
        logger.info(f"Product created: {product.product_id} ({product.name})")
        self._publish(tenant_id, [build_product_changed_payload(PRODUCT_CHANGE_CREATED, product)])
        return product

    def update_product(self, *, tenant_id: uuid.UUID, product_id: uuid.UUID, **changes) -> ProductSnapshot:
        unknown = set(changes) - _UPDATABLE_PRODUCT_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update product fields: {sorted(unknown)}.")

        current = self._catalog.get_product(tenant_id=tenant_id, product_id=product_id)
        if current is None:
            raise NotFoundError("Product", product_id)

        if "name" in changes:
            changes["name"] = _validate_name(changes["name"])
        if "price" in changes:
            changes["price"] = parse_money(changes["price"], field="price")
        if "stock" in changes:
            changes["stock"] = _validate_stock(changes["stock"])

        updated = self._catalog.replace_product(replace(current, **changes))
        logger.info(f"Product updated: {updated.product_id} ({updated.name})")

        payloads = [build_product_changed_payload(PRODUCT_CHANGE_UPDATED, updated)]
        if "stock" in changes and crossed_into_low_stock(current.stock, updated.stock, self._threshold):
            payloads.append(build_low_stock_payload(updated, updated.stock, self._threshold))
        self._publish(tenant_id, payloads)
        return updated

    def delete_product(self, *, tenant_id: uuid.UUID, product_id: uuid.UUID) -> ProductSnapshot:
        removed = self._catalog.remove_product(tenant_id=tenant_id, product_id=product_id)
        logger.info(f"Product deleted: {removed.product_id} ({removed.name})")
        self._publish(tenant_id, [build_product_changed_payload(PRODUCT_CHANGE_DELETED, removed)])
        return removed
