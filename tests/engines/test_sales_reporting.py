"""Reporting Aggregator: windows, daily buckets, top products, dashboard totals."""

from datetime import datetime, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from conftest import NOW, OTHER_TENANT_ID, TENANT_ID, build_harness
from engines.billing.errors import ValidationError
from engines.reporting.policies import resolve_window_start

UTC = timezone.utc


def _at(ledger, moment):
    ledger.clock.set(moment)


def _seed_month(ledger):
    """Four bills spread across February and the current week, then back to NOW."""
    widget = ledger.add_product(name="Widget", price="10.00", stock=500)
    gadget = ledger.add_product(name="Gadget", price="25.00", stock=500)

    _at(ledger, datetime(2025, 2, 20, 12, 0, tzinfo=UTC))
    ledger.create_bill([(widget, 1)], customer_name="February Buyer")
    _at(ledger, datetime(2025, 3, 3, 12, 0, tzinfo=UTC))
    ledger.create_bill([(gadget, 2)], customer_name="Early March")
    _at(ledger, datetime(2025, 3, 10, 9, 0, tzinfo=UTC))
    ledger.create_bill([(widget, 3), (gadget, 1)], customer_name="Monday Buyer")
    _at(ledger, datetime(2025, 3, 12, 8, 0, tzinfo=UTC))
    ledger.create_bill([(widget, 2)], customer_name="Today Buyer", discount="5")
    _at(ledger, NOW)
    return widget, gadget


def _report(ledger, window, tenant_id=TENANT_ID):
    return ledger.deps.reporting.report(tenant_id=tenant_id, window=window)


class TestWindowStart:
    def test_all_is_unbounded(self):
        assert resolve_window_start("all", NOW, UTC) is None

    def test_day_is_local_midnight(self):
        assert resolve_window_start("day", NOW, UTC) == datetime(2025, 3, 12, tzinfo=UTC)

    def test_week_starts_monday(self):
        assert resolve_window_start("week", NOW, UTC) == datetime(2025, 3, 10, tzinfo=UTC)

    def test_sunday_belongs_to_previous_monday(self):
        sunday = datetime(2025, 3, 16, 23, 0, tzinfo=UTC)
        assert resolve_window_start("week", sunday, UTC) == datetime(2025, 3, 10, tzinfo=UTC)

    def test_month_starts_on_the_first(self):
        assert resolve_window_start("month", NOW, UTC) == datetime(2025, 3, 1, tzinfo=UTC)

    def test_day_follows_tenant_zone(self):
        kolkata = ZoneInfo("Asia/Kolkata")
        late_utc = datetime(2025, 3, 11, 20, 0, tzinfo=UTC)
        start = resolve_window_start("day", late_utc, kolkata)
        assert start == datetime(2025, 3, 12, tzinfo=kolkata)

    def test_unknown_window_rejected(self):
        with pytest.raises(ValidationError):
            resolve_window_start("year", NOW, UTC)


class TestSalesReport:
    @pytest.mark.parametrize("window, orders, sales", [
        ("all", 4, Decimal("130.00")),
        ("month", 3, Decimal("120.00")),
        ("week", 2, Decimal("70.00")),
        ("day", 1, Decimal("15.00")),
    ])
    def test_window_totals(self, ledger, window, orders, sales):
        _seed_month(ledger)
        report = _report(ledger, window)
        assert report.total_orders == orders
        assert report.total_sales == sales
        assert report.to_dict()["timeFilter"] == window

    def test_daily_stats_sum_to_total(self, ledger):
        _seed_month(ledger)
        report = _report(ledger, "all")
        assert [d.date for d in report.daily_stats] == [
            "2025-02-20", "2025-03-03", "2025-03-10", "2025-03-12",
        ]
        assert sum(d.sales for d in report.daily_stats) == report.total_sales
        assert sum(d.orders for d in report.daily_stats) == report.total_orders

    def test_average_customers_and_units(self, ledger):
        _seed_month(ledger)
        report = _report(ledger, "week")
        assert report.average_order_value == Decimal("35.00")
        assert report.total_customers == 2
        assert report.total_products_sold == 6

    def test_top_products_ranked_by_quantity(self, ledger):
        widget, gadget = _seed_month(ledger)
        top = _report(ledger, "all").top_products
        assert [(p.product_id, p.quantity, p.revenue) for p in top] == [
            (widget.product_id, 6, Decimal("60.00")),
            (gadget.product_id, 3, Decimal("75.00")),
        ]

    def test_top_product_names_follow_catalog_with_snapshot_fallback(self, ledger):
        widget, gadget = _seed_month(ledger)
        ledger.deps.catalog_service.update_product(
            tenant_id=TENANT_ID, product_id=widget.product_id, name="Widget Mk II",
        )
        ledger.deps.catalog_service.delete_product(tenant_id=TENANT_ID, product_id=gadget.product_id)

        names = [p.name for p in _report(ledger, "all").top_products]
        assert names == ["Widget Mk II", "Gadget"]

    def test_empty_window(self, ledger):
        report = _report(ledger, "day")
        data = report.to_dict()
        assert data["totalSales"] == "0.00"
        assert data["averageOrderValue"] == "0.00"
        assert data["dailyStats"] == []
        assert data["topProducts"] == []

    def test_tenant_isolation(self, ledger):
        _seed_month(ledger)
        assert _report(ledger, "all", tenant_id=OTHER_TENANT_ID).total_orders == 0

    def test_invalid_window(self, ledger):
        with pytest.raises(ValidationError):
            _report(ledger, "quarter")

    def test_daily_buckets_use_local_date(self):
        ledger = build_harness(timezone_name="Asia/Kolkata")
        widget = ledger.add_product(price="10.00")
        _at(ledger, datetime(2025, 3, 11, 20, 0, tzinfo=UTC))
        bill = ledger.create_bill([(widget, 1)])
        _at(ledger, datetime(2025, 3, 12, 4, 0, tzinfo=UTC))

        report = _report(ledger, "day")
        assert report.total_orders == 1
        assert [d.date for d in report.daily_stats] == ["2025-03-12"]
        assert bill.invoice_number == "acme-store-2025-0001"


class TestDashboard:
    def test_all_time_totals_and_pending(self, ledger):
        widget = ledger.add_product(price="50.00", stock=50)
        ledger.create_bill([(widget, 2)], discount="10", amount_paid="90")
        ledger.create_bill([(widget, 2)], discount="10", amount_paid="50")
        ledger.create_bill([(widget, 1)], amount_paid="0")

        totals = ledger.deps.reporting.dashboard_totals(tenant_id=TENANT_ID)
        assert totals == {
            "totalSalesAllTime": "230.00",
            "totalPendingAmountAllTime": "90.00",
        }

    def test_bill_count(self, ledger):
        widget = ledger.add_product()
        ledger.create_bill([(widget, 1)])
        ledger.create_bill([(widget, 1)])
        assert ledger.deps.reporting.bill_count(tenant_id=TENANT_ID) == 2
        assert ledger.deps.reporting.bill_count(tenant_id=OTHER_TENANT_ID) == 0

    def test_deleted_bills_leave_the_totals(self, ledger):
        widget = ledger.add_product(price="50.00")
        bill = ledger.create_bill([(widget, 1)])
        ledger.billing.delete_bill(tenant_id=TENANT_ID, bill_id=bill.bill_id)
        assert ledger.deps.reporting.dashboard_totals(tenant_id=TENANT_ID)["totalSalesAllTime"] == "0.00"
