"""
Retail Ledger Sequence - Invoice Number Engine
===============================================
Turns a (tenant, local calendar year) serial into the human readable
invoice number persisted on every bill:

    {tenant_slug}-{year}-{serial zero-padded to 4}     e.g. acme-2025-0007

The counter itself lives behind SequenceProvider. This module only
derives the year, the slug and the final string.
"""

from __future__ import annotations

import logging
import re
import uuid
from datetime import datetime, tzinfo

from core.sequence.provider import SequenceProvider
from core.time.clock import resolve_timezone, to_local
from engines.billing.errors import ValidationError

logger = logging.getLogger("ledger.billing")

DEFAULT_SERIAL_PADDING = 4

_WHITESPACE = re.compile(r"\s+")
_NON_SLUG = re.compile(r"[^a-z0-9\-]")


def tenant_slug(display_name: str) -> str:
    """
    Lowercase, trim, collapse whitespace runs to '-', then strip
    anything that is not [a-z0-9-].
    """
    if not isinstance(display_name, str):
        raise ValidationError("tenant display name must be a string.", field="name")
    slug = _WHITESPACE.sub("-", display_name.lower().strip())
    slug = _NON_SLUG.sub("", slug)
    if not slug:
        raise ValidationError(
            f"tenant name '{display_name}' produces an empty invoice prefix.",
            field="name",
        )
    return slug


def format_invoice_number(
    *,
    slug: str,
    year: int,
    serial: int,
    padding: int = DEFAULT_SERIAL_PADDING,
) -> str:
    if serial < 1:
        raise ValueError("serial must be >= 1.")
    return f"{slug}-{year}-{str(serial).zfill(padding)}"


class InvoiceNumberGenerator:
    """
    Sequence Generator.

    next() issues the serial, next_invoice_number() formats it.
    The year is the calendar year of `now` in the configured local zone.
    """

    def __init__(
        self,
        provider: SequenceProvider,
        timezone: str | tzinfo | None = None,
        padding: int = DEFAULT_SERIAL_PADDING,
    ):
        self._provider = provider
        self._tz = resolve_timezone(timezone)
        self._padding = padding

    def year_of(self, now: datetime) -> int:
        return to_local(now, self._tz).year

    def next(self, tenant_id: uuid.UUID, now: datetime) -> int:
        year = self.year_of(now)
        serial = self._provider.next_serial(tenant_id=tenant_id, year=year)
        logger.debug(f"Issued serial {serial} for tenant={tenant_id} year={year}")
        return serial

    def next_invoice_number(
        self,
        *,
        tenant_id: uuid.UUID,
        tenant_name: str,
        now: datetime,
    ) -> str:
        slug = tenant_slug(tenant_name)
        serial = self.next(tenant_id, now)
        return format_invoice_number(
            slug=slug, year=self.year_of(now), serial=serial, padding=self._padding
        )
