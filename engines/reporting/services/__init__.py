"""
Retail Ledger Reporting Engine - Application Service
=====================================================
Read-side aggregation over committed bills.

This engine is READ ONLY:
- It never writes bills, stock or side effects
- Every query is tenant scoped
- Sums are Decimal, rounded to cents only at the edges
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, tzinfo
from decimal import Decimal
from typing import Optional, Tuple

from core.time.clock import Clock, resolve_timezone, to_local
from engines.billing.models import BILL_STATUS_PENDING, ZERO
from engines.billing.policies import to_money
from engines.inventory.catalog import CatalogReader
from engines.reporting.policies import (
    TOP_PRODUCTS_LIMIT,
    resolve_window_start,
    validate_window,
)


# ══════════════════════════════════════════════════════════════
# REPORT RECORDS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DailyStat:
    date: str
    sales: Decimal
    orders: int

    def to_dict(self) -> dict:
        return {"date": self.date, "sales": str(self.sales), "orders": self.orders}


@dataclass(frozen=True)
class TopProduct:
    product_id: uuid.UUID
    name: str
    quantity: int
    revenue: Decimal

    def to_dict(self) -> dict:
        return {
            "productId": str(self.product_id),
            "name": self.name,
            "quantity": self.quantity,
            "revenue": str(self.revenue),
        }


@dataclass(frozen=True)
class SalesReport:
    window: str
    start: Optional[datetime]
    end: datetime
    total_sales: Decimal
    total_orders: int
    average_order_value: Decimal
    total_customers: int
    total_products_sold: int
    daily_stats: Tuple[DailyStat, ...]
    top_products: Tuple[TopProduct, ...]

    def to_dict(self) -> dict:
        return {
            "totalSales": str(self.total_sales),
            "totalOrders": self.total_orders,
            "averageOrderValue": str(self.average_order_value),
            "totalCustomers": self.total_customers,
            "totalProductsSold": self.total_products_sold,
            "dailyStats": [d.to_dict() for d in self.daily_stats],
            "topProducts": [p.to_dict() for p in self.top_products],
            "timeFilter": self.window,
        }


# ══════════════════════════════════════════════════════════════
# REPORTING AGGREGATOR
# ══════════════════════════════════════════════════════════════

class ReportingAggregator:
    def __init__(
        self,
        ledger_store,
        catalog: CatalogReader,
        clock: Clock,
        timezone: str | tzinfo | None = None,
    ):
        self._ledger = ledger_store
        self._catalog = catalog
        self._clock = clock
        self._tz = resolve_timezone(timezone)

    def report(self, *, tenant_id: uuid.UUID, window: str) -> SalesReport:
        validate_window(window)
        now = self._clock.now_utc()
        start = resolve_window_start(window, now, self._tz)
        bills = self._ledger.bills_in_window(
            tenant_id=tenant_id, start=start, end=None if start is None else now,
        )

        total_sales = sum((b.total for b in bills), ZERO)
        total_orders = len(bills)
        average = to_money(total_sales / total_orders) if total_orders else ZERO
        customers = {b.customer_id for b in bills}

        product_qty: dict[uuid.UUID, int] = {}
        product_revenue: dict[uuid.UUID, Decimal] = {}
        snapshot_names: dict[uuid.UUID, str] = {}
        total_products_sold = 0
        for bill in bills:
            for item in bill.items:
                total_products_sold += item.quantity
                product_qty[item.product_id] = product_qty.get(item.product_id, 0) + item.quantity
                product_revenue[item.product_id] = (
                    product_revenue.get(item.product_id, ZERO) + item.price * item.quantity
                )
                snapshot_names.setdefault(item.product_id, item.product_name)

        ranked = sorted(product_qty, key=lambda pid: product_qty[pid], reverse=True)[:TOP_PRODUCTS_LIMIT]
        current = self._catalog.get_products(tenant_id=tenant_id, product_ids=ranked)
        top_products = tuple(
            TopProduct(
                product_id=pid,
                name=current[pid].name if pid in current else snapshot_names.get(pid, ""),
                quantity=product_qty[pid],
                revenue=to_money(product_revenue[pid]),
            )
            for pid in ranked
        )

        buckets: dict[str, list] = {}
        for bill in bills:
            key = to_local(bill.created_at, self._tz).date().isoformat()
            bucket = buckets.setdefault(key, [ZERO, 0])
            bucket[0] += bill.total
            bucket[1] += 1
        daily_stats = tuple(
            DailyStat(date=key, sales=to_money(sales), orders=orders)
            for key, (sales, orders) in sorted(buckets.items())
        )

        return SalesReport(
            window=window,
            start=start,
            end=now,
            total_sales=to_money(total_sales),
            total_orders=total_orders,
            average_order_value=average,
            total_customers=len(customers),
            total_products_sold=total_products_sold,
            daily_stats=daily_stats,
            top_products=top_products,
        )

    def dashboard_totals(self, *, tenant_id: uuid.UUID) -> dict:
        bills = self._ledger.bills_in_window(tenant_id=tenant_id)
        total_sales = sum((b.total for b in bills), ZERO)
        pending = sum(
            (b.remaining_amount for b in bills if b.status == BILL_STATUS_PENDING), ZERO,
        )
        return {
            "totalSalesAllTime": str(to_money(total_sales)),
            "totalPendingAmountAllTime": str(to_money(pending)),
        }

    def bill_count(self, *, tenant_id: uuid.UUID) -> int:
        return self._ledger.count(tenant_id=tenant_id)
