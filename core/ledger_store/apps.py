"""
Retail Ledger Store - App Configuration
=======================================
Relational storage for tenants, catalog, customers, bills, invoice
counters, notifications and audit transactions.
"""

from django.apps import AppConfig


class CoreLedgerStoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core.ledger_store"
    label = "core_ledger_store"
    verbose_name = "Retail Ledger Store"
