"""
Retail Ledger Sequence - Public API
====================================
"""

from core.sequence.engine import (
    DEFAULT_SERIAL_PADDING,
    InvoiceNumberGenerator,
    format_invoice_number,
    tenant_slug,
)
from core.sequence.provider import (
    InMemorySequenceProvider,
    SequenceProvider,
)

__all__ = [
    "DEFAULT_SERIAL_PADDING",
    "InvoiceNumberGenerator",
    "format_invoice_number",
    "tenant_slug",
    "SequenceProvider",
    "InMemorySequenceProvider",
]
