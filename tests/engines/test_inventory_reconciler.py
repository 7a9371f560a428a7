"""Inventory Reconciler and catalog edits: stock deltas and low-stock alerts."""

import uuid
from decimal import Decimal

import pytest

from conftest import OTHER_TENANT_ID, TENANT_ID
from engines.billing.errors import NotFoundError, ValidationError
from engines.billing.models import LineItem
from engines.inventory.catalog import InMemoryCatalog
from engines.inventory.policies import crossed_into_low_stock, is_low_stock
from engines.inventory.services import InventoryReconciler


def _line(product, quantity):
    return LineItem(product_id=product.product_id, quantity=quantity, price=product.price, product_name=product.name)


def _low_stock_notifications(ledger):
    return ledger.deps.notification_service.list_by_type(
        tenant_id=TENANT_ID, notification_type="LOW_STOCK",
    )["items"]


class TestStockPolicies:
    @pytest.mark.parametrize("stock, low", [(6, False), (5, True), (0, True), (-2, True)])
    def test_threshold_is_inclusive(self, stock, low):
        assert is_low_stock(stock) is low

    def test_crossing_requires_transition(self):
        assert crossed_into_low_stock(6, 5)
        assert not crossed_into_low_stock(5, 4)
        assert not crossed_into_low_stock(20, 6)


class TestInMemoryCatalogStock:
    def test_batch_is_all_or_nothing(self):
        catalog = InMemoryCatalog()
        widget = catalog.register_product(tenant_id=TENANT_ID, name="Widget", price=Decimal("1"), stock=5)
        with pytest.raises(NotFoundError):
            catalog.apply_stock_deltas(
                tenant_id=TENANT_ID, deltas=[(widget.product_id, -2), (uuid.uuid4(), -1)],
            )
        assert catalog.get_product(tenant_id=TENANT_ID, product_id=widget.product_id).stock == 5

    def test_returns_stock_after_each_delta(self):
        catalog = InMemoryCatalog()
        widget = catalog.register_product(tenant_id=TENANT_ID, name="Widget", price=Decimal("1"), stock=5)
        after = catalog.apply_stock_deltas(
            tenant_id=TENANT_ID, deltas=[(widget.product_id, -2), (widget.product_id, -1)],
        )
        assert after == [3, 2]

    def test_other_tenant_product_is_missing(self):
        catalog = InMemoryCatalog()
        widget = catalog.register_product(tenant_id=OTHER_TENANT_ID, name="Widget", price=Decimal("1"), stock=5)
        with pytest.raises(NotFoundError):
            catalog.apply_stock_deltas(tenant_id=TENANT_ID, deltas=[(widget.product_id, -1)])


class TestInventoryReconciler:
    def test_sale_into_low_stock_alerts(self):
        catalog = InMemoryCatalog()
        widget = catalog.register_product(tenant_id=TENANT_ID, name="Widget", price=Decimal("1"), stock=7)
        reconciler = InventoryReconciler(catalog, catalog)

        alerts = reconciler.apply_sale(
            tenant_id=TENANT_ID, items=[_line(widget, 3)], products={widget.product_id: widget},
        )
        assert [(a.product_id, a.stock, a.threshold) for a in alerts] == [(widget.product_id, 4, 5)]

    def test_sale_staying_above_threshold_is_quiet(self):
        catalog = InMemoryCatalog()
        widget = catalog.register_product(tenant_id=TENANT_ID, name="Widget", price=Decimal("1"), stock=20)
        reconciler = InventoryReconciler(catalog, catalog)
        assert reconciler.apply_sale(
            tenant_id=TENANT_ID, items=[_line(widget, 5)], products={widget.product_id: widget},
        ) == []

    def test_custom_threshold(self):
        catalog = InMemoryCatalog()
        widget = catalog.register_product(tenant_id=TENANT_ID, name="Widget", price=Decimal("1"), stock=20)
        reconciler = InventoryReconciler(catalog, catalog, low_stock_threshold=15)
        alerts = reconciler.apply_sale(
            tenant_id=TENANT_ID, items=[_line(widget, 5)], products={widget.product_id: widget},
        )
        assert reconciler.low_stock_threshold == 15
        assert alerts[0].stock == 15

    def test_restore_skips_removed_products(self):
        catalog = InMemoryCatalog()
        widget = catalog.register_product(tenant_id=TENANT_ID, name="Widget", price=Decimal("1"), stock=2)
        gone = catalog.register_product(tenant_id=TENANT_ID, name="Gone", price=Decimal("1"), stock=2)
        catalog.remove_product(tenant_id=TENANT_ID, product_id=gone.product_id)

        reconciler = InventoryReconciler(catalog, catalog)
        assert reconciler.restore_sale(tenant_id=TENANT_ID, items=[_line(widget, 3), _line(gone, 1)]) == [5]

    def test_restore_with_nothing_left_is_noop(self):
        catalog = InMemoryCatalog()
        gone = catalog.register_product(tenant_id=TENANT_ID, name="Gone", price=Decimal("1"), stock=2)
        catalog.remove_product(tenant_id=TENANT_ID, product_id=gone.product_id)
        assert InventoryReconciler(catalog, catalog).restore_sale(
            tenant_id=TENANT_ID, items=[_line(gone, 1)],
        ) == []


class TestLowStockThroughBilling:
    def test_bill_dropping_to_four_notifies(self, ledger):
        widget = ledger.add_product(stock=7)
        ledger.create_bill([(widget, 3)])

        alerts = _low_stock_notifications(ledger)
        assert len(alerts) == 1
        assert alerts[0]["message"] == 'Only 4 units remaining for "Widget"'
        assert alerts[0]["data"]["stock"] == 4

    def test_bill_leaving_fifteen_does_not_notify(self, ledger):
        widget = ledger.add_product(stock=20)
        ledger.create_bill([(widget, 5)])
        assert _low_stock_notifications(ledger) == []

    def test_already_low_product_alerts_on_every_sale(self, ledger):
        widget = ledger.add_product(stock=5)
        ledger.create_bill([(widget, 1)])
        ledger.create_bill([(widget, 1)])
        assert [n["data"]["stock"] for n in _low_stock_notifications(ledger)] == [3, 4]

    def test_deleting_a_bill_never_alerts(self, ledger):
        widget = ledger.add_product(stock=20)
        bill = ledger.create_bill([(widget, 1)])
        ledger.billing.delete_bill(tenant_id=TENANT_ID, bill_id=bill.bill_id)
        assert _low_stock_notifications(ledger) == []


class TestProductCatalogService:
    def test_create_publishes_product_created(self, ledger):
        product = ledger.deps.catalog_service.create_product(
            tenant_id=TENANT_ID, name=" Gadget ", price="19.99", stock=12, brand_name="Globex",
        )
        assert product.name == "Gadget"
        assert product.price == Decimal("19.99")

        created = ledger.deps.notification_service.list_by_type(
            tenant_id=TENANT_ID, notification_type="PRODUCT_CREATED",
        )["items"]
        assert created[0]["message"] == 'Product "Gadget" has been created under brand "Globex"'

    def test_stock_edit_alerts_only_when_crossing(self, ledger):
        service = ledger.deps.catalog_service
        product = service.create_product(tenant_id=TENANT_ID, name="Gadget", price="5", stock=12)

        service.update_product(tenant_id=TENANT_ID, product_id=product.product_id, stock=5)
        service.update_product(tenant_id=TENANT_ID, product_id=product.product_id, stock=3)

        assert [n["data"]["stock"] for n in _low_stock_notifications(ledger)] == [5]
        updates = ledger.deps.notification_service.list_by_type(
            tenant_id=TENANT_ID, notification_type="PRODUCT_UPDATED",
        )
        assert updates["total"] == 2

    def test_update_rejects_unknown_fields(self, ledger):
        product = ledger.add_product()
        with pytest.raises(ValidationError):
            ledger.deps.catalog_service.update_product(
                tenant_id=TENANT_ID, product_id=product.product_id, sku="W-1",
            )

    def test_update_validates_values(self, ledger):
        product = ledger.add_product()
        with pytest.raises(ValidationError):
            ledger.deps.catalog_service.update_product(
                tenant_id=TENANT_ID, product_id=product.product_id, stock=-1,
            )
        with pytest.raises(ValidationError):
            ledger.deps.catalog_service.update_product(
                tenant_id=TENANT_ID, product_id=product.product_id, price="free",
            )

    def test_update_missing_product(self, ledger):
        with pytest.raises(NotFoundError):
            ledger.deps.catalog_service.update_product(
                tenant_id=TENANT_ID, product_id=uuid.uuid4(), name="Ghost",
            )

    def test_delete_publishes_product_deleted(self, ledger):
        product = ledger.add_product(name="Old Stock")
        ledger.deps.catalog_service.delete_product(tenant_id=TENANT_ID, product_id=product.product_id)

        assert ledger.catalog.get_product(tenant_id=TENANT_ID, product_id=product.product_id) is None
        deleted = ledger.deps.notification_service.list_by_type(
            tenant_id=TENANT_ID, notification_type="PRODUCT_DELETED",
        )["items"]
        assert deleted[0]["message"] == 'Product "Old Stock" has been deleted'
