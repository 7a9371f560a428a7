"""Invoice number generation: slug rules, format, per-(tenant, year) serials."""

import threading
import uuid
from datetime import datetime, timezone

import pytest

from core.sequence import InMemorySequenceProvider, InvoiceNumberGenerator
from core.sequence.engine import format_invoice_number, tenant_slug
from engines.billing.errors import ValidationError

TENANT = uuid.uuid4()
OTHER_TENANT = uuid.uuid4()
NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


class TestTenantSlug:
    def test_lowercases_and_hyphenates(self):
        assert tenant_slug("Acme Store") == "acme-store"

    def test_collapses_whitespace_runs_and_trims(self):
        assert tenant_slug("  Big   Box  Retail ") == "big-box-retail"

    def test_strips_non_alphanumeric(self):
        assert tenant_slug("Joe's Café & Bar!") == "joes-caf--bar"

    def test_keeps_existing_hyphens_and_digits(self):
        assert tenant_slug("Shop-24 7") == "shop-24-7"

    def test_empty_slug_rejected(self):
        with pytest.raises(ValidationError):
            tenant_slug("!!!")

    def test_non_string_rejected(self):
        with pytest.raises(ValidationError):
            tenant_slug(None)


class TestInvoiceFormat:
    def test_zero_pads_serial_to_four(self):
        assert format_invoice_number(slug="acme", year=2025, serial=7) == "acme-2025-0007"

    def test_serial_wider_than_padding_kept(self):
        assert format_invoice_number(slug="acme", year=2025, serial=12345) == "acme-2025-12345"

    def test_serial_below_one_rejected(self):
        with pytest.raises(ValueError):
            format_invoice_number(slug="acme", year=2025, serial=0)


class TestInMemorySequenceProvider:
    def test_first_serial_of_year_is_one(self):
        provider = InMemorySequenceProvider()
        assert provider.next_serial(tenant_id=TENANT, year=2025) == 1
        assert provider.next_serial(tenant_id=TENANT, year=2025) == 2
        assert provider.current_serial(tenant_id=TENANT, year=2025) == 2

    def test_new_year_restarts_at_one(self):
        provider = InMemorySequenceProvider()
        provider.next_serial(tenant_id=TENANT, year=2024)
        provider.next_serial(tenant_id=TENANT, year=2024)
        assert provider.next_serial(tenant_id=TENANT, year=2025) == 1

    def test_tenants_have_independent_counters(self):
        provider = InMemorySequenceProvider()
        provider.next_serial(tenant_id=TENANT, year=2025)
        assert provider.next_serial(tenant_id=OTHER_TENANT, year=2025) == 1
        assert provider.current_serial(tenant_id=OTHER_TENANT, year=2024) == 0

    def test_concurrent_callers_never_share_a_serial(self):
        provider = InMemorySequenceProvider()
        issued = []
        issued_lock = threading.Lock()
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            for _ in range(50):
                serial = provider.next_serial(tenant_id=TENANT, year=2025)
                with issued_lock:
                    issued.append(serial)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(issued) == 400
        assert sorted(issued) == list(range(1, 401))


class TestInvoiceNumberGenerator:
    def test_next_invoice_number(self):
        generator = InvoiceNumberGenerator(InMemorySequenceProvider())
        first = generator.next_invoice_number(tenant_id=TENANT, tenant_name="Acme Store", now=NOW)
        second = generator.next_invoice_number(tenant_id=TENANT, tenant_name="Acme Store", now=NOW)
        assert first == "acme-store-2025-0001"
        assert second == "acme-store-2025-0002"

    def test_year_follows_local_zone(self):
        # 23:30 UTC on Dec 31 is already Jan 1 in Asia/Kolkata.
        new_years_eve = datetime(2024, 12, 31, 23, 30, tzinfo=timezone.utc)
        utc_generator = InvoiceNumberGenerator(InMemorySequenceProvider())
        local_generator = InvoiceNumberGenerator(InMemorySequenceProvider(), timezone="Asia/Kolkata")
        assert utc_generator.year_of(new_years_eve) == 2024
        assert local_generator.year_of(new_years_eve) == 2025

    def test_next_returns_raw_serial(self):
        provider = InMemorySequenceProvider()
        generator = InvoiceNumberGenerator(provider)
        assert generator.next(TENANT, NOW) == 1
        assert provider.current_serial(tenant_id=TENANT, year=2025) == 1

    def test_invoice_number_is_built_on_next(self, monkeypatch):
        generator = InvoiceNumberGenerator(InMemorySequenceProvider())
        calls = []

        def fake_next(tenant_id, now):
            calls.append((tenant_id, now))
            return 42

        monkeypatch.setattr(generator, "next", fake_next)
        number = generator.next_invoice_number(tenant_id=TENANT, tenant_name="Acme", now=NOW)
        assert number == "acme-2025-0042"
        assert calls == [(TENANT, NOW)]

    def test_concurrent_invoice_numbers_strictly_increasing_per_thread(self):
        generator = InvoiceNumberGenerator(InMemorySequenceProvider())
        per_thread: dict[int, list[int]] = {}

        def worker(index):
            serials = []
            for _ in range(25):
                number = generator.next_invoice_number(
                    tenant_id=TENANT, tenant_name="Acme", now=NOW,
                )
                serials.append(int(number.rsplit("-", 1)[1]))
            per_thread[index] = serials

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(6)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        everything = [s for serials in per_thread.values() for s in serials]
        assert len(set(everything)) == 150
        for serials in per_thread.values():
            assert serials == sorted(serials)
