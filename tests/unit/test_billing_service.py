"""Unit tests for BillingService."""

from datetime import UTC, datetime, timedelta

import pytest

from tenancy.core.exceptions import (
    AlreadyExistsError,
    FieldInvalidError,
    FieldRequiredError,
    NotFoundError,
    PaymentNotAllowedError,
    UnsupportedBillingPeriodError,
)
from tenancy.db.models.tenant import BillingPeriod, BillingStatus
from tenancy.db.schemas.billing import BillingCreate, BillingUpdate
from tenancy.services.billing import BillingService, invoice_number_for, shift_months


@pytest.fixture
def service(db_session, fake_redis, service_kwargs):
    return BillingService(db_session, fake_redis, **service_kwargs)


def test_shift_months_clamps_day():
    """Test month arithmetic clamps to the last day of short months."""
    assert shift_months(datetime(2024, 3, 31, tzinfo=UTC), -1) == datetime(2024, 2, 29, tzinfo=UTC)
    assert shift_months(datetime(2024, 1, 15, tzinfo=UTC), -12) == datetime(2023, 1, 15, tzinfo=UTC)
    assert shift_months(datetime(2023, 12, 31, tzinfo=UTC), 2) == datetime(2024, 2, 29, tzinfo=UTC)


def test_invoice_number_format():
    now = datetime(2024, 5, 6, 7, 8, 9, tzinfo=UTC)
    number = invoice_number_for(now)

    prefix, stamp, suffix = number.split("-")
    assert prefix == "INV"
    assert stamp == "20240506070809"
    assert len(suffix) == 32
    assert len(number) <= 64
    assert invoice_number_for(now) != number


class TestBillingRecords:
    """Tests for billing CRUD."""

    @pytest.mark.asyncio
    async def test_create_generates_invoice_number(self, service):
        billing = await service.create(BillingCreate(tenant_id="tenant-abcdef", amount=99.5))

        assert billing.invoice_number.startswith("INV-")
        assert billing.status == BillingStatus.PENDING
        assert billing.is_overdue is False
        assert billing.days_overdue == 0

    @pytest.mark.asyncio
    async def test_create_requires_tenant(self, service):
        with pytest.raises(FieldRequiredError):
            await service.create(BillingCreate(amount=1))

    @pytest.mark.asyncio
    async def test_invoice_numbers_are_unique(self, service):
        await service.create(BillingCreate(tenant_id="t-1", invoice_number="INV-1"))

        with pytest.raises(AlreadyExistsError):
            await service.create(BillingCreate(tenant_id="t-2", invoice_number="INV-1"))

    @pytest.mark.asyncio
    async def test_get_by_invoice_number(self, service):
        created = await service.create(BillingCreate(tenant_id="t-1", invoice_number="INV-42"))

        assert (await service.get_by_invoice_number("INV-42")).id == created.id
        with pytest.raises(NotFoundError):
            await service.get_by_invoice_number("INV-404")

    @pytest.mark.asyncio
    async def test_update_can_cancel(self, service, runner):
        created = await service.create(BillingCreate(tenant_id="t-1"))

        updated = await service.update(created.id, BillingUpdate(status=BillingStatus.CANCELLED))
        await runner.drain()

        assert updated.status == BillingStatus.CANCELLED
        assert (await service.get(created.id)).status == BillingStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_delete(self, service, runner):
        created = await service.create(BillingCreate(tenant_id="t-1"))

        await service.delete(created.id)
        await runner.drain()

        with pytest.raises(NotFoundError):
            await service.get(created.id)

    @pytest.mark.asyncio
    async def test_list_filters(self, service):
        await service.create(BillingCreate(tenant_id="t-1", invoice_number="A"))
        await service.create(
            BillingCreate(tenant_id="t-1", invoice_number="B", billing_period=BillingPeriod.YEARLY)
        )
        await service.create(BillingCreate(tenant_id="t-2", invoice_number="C"))

        assert (await service.list_billing(tenant_id="t-1")).total == 2
        yearly = await service.list_billing(billing_period=BillingPeriod.YEARLY)
        assert [b.invoice_number for b in yearly.items] == ["B"]
        assert (await service.list_billing(status=BillingStatus.PAID)).total == 0


class TestPayments:
    """Tests for the payment transition."""

    @pytest.mark.asyncio
    async def test_pay_pending(self, service):
        created = await service.create(BillingCreate(tenant_id="t-1", amount=10))

        paid = await service.process_payment(created.id, "card")

        assert paid.status == BillingStatus.PAID
        assert paid.payment_method == "card"
        assert paid.paid_at is not None

    @pytest.mark.asyncio
    async def test_pay_twice_rejected(self, service):
        created = await service.create(BillingCreate(tenant_id="t-1"))
        await service.process_payment(created.id, "card")

        with pytest.raises(PaymentNotAllowedError) as exc_info:
            await service.process_payment(created.id, "card")

        assert exc_info.value.status == "paid"

    @pytest.mark.asyncio
    async def test_pay_cancelled_rejected(self, service):
        created = await service.create(
            BillingCreate(tenant_id="t-1", status=BillingStatus.CANCELLED)
        )

        with pytest.raises(PaymentNotAllowedError):
            await service.process_payment(created.id, "card")

    @pytest.mark.asyncio
    async def test_pay_requires_method(self, service):
        created = await service.create(BillingCreate(tenant_id="t-1"))

        with pytest.raises(FieldRequiredError):
            await service.process_payment(created.id, "")

    @pytest.mark.asyncio
    async def test_pay_missing(self, service):
        with pytest.raises(NotFoundError):
            await service.process_payment("missing", "card")


class TestOverdue:
    """Tests for the overdue sweep."""

    @pytest.mark.asyncio
    async def test_sweep_flags_past_due_pending(self, service, runner):
        now = datetime.now(UTC)
        late = await service.create(
            BillingCreate(tenant_id="t-1", invoice_number="LATE", due_date=now - timedelta(days=3))
        )
        await service.create(
            BillingCreate(tenant_id="t-1", invoice_number="SOON", due_date=now + timedelta(days=3))
        )
        await service.create(BillingCreate(tenant_id="t-1", invoice_number="NODUE"))
        await service.create(
            BillingCreate(
                tenant_id="t-1",
                invoice_number="PAID",
                status=BillingStatus.PAID,
                due_date=now - timedelta(days=3),
            )
        )
        await service.get(late.id)
        await runner.drain()

        updated = await service.mark_overdue(now)
        await runner.drain()

        assert updated == 1
        overdue = await service.get_overdue_billing("t-1")
        assert [b.invoice_number for b in overdue] == ["LATE"]
        fetched = await service.get(late.id)
        assert fetched.is_overdue is True
        assert fetched.days_overdue >= 2

    @pytest.mark.asyncio
    async def test_sweep_is_idempotent(self, service):
        now = datetime.now(UTC)
        await service.create(
            BillingCreate(tenant_id="t-1", invoice_number="LATE", due_date=now - timedelta(days=1))
        )

        assert await service.mark_overdue(now) == 1
        assert await service.mark_overdue(now) == 0

    @pytest.mark.asyncio
    async def test_overdue_can_be_paid(self, service):
        now = datetime.now(UTC)
        created = await service.create(
            BillingCreate(tenant_id="t-1", due_date=now - timedelta(days=1))
        )
        await service.mark_overdue(now)

        paid = await service.process_payment(created.id, "wire")

        assert paid.status == BillingStatus.PAID


class TestInvoices:
    """Tests for invoice generation and summaries."""

    @pytest.mark.asyncio
    async def test_monthly_invoice(self, service):
        invoice = await service.generate_invoice("tenant-1", BillingPeriod.MONTHLY)

        assert invoice.status == BillingStatus.PENDING
        assert invoice.amount == 0.0
        assert invoice.currency == "USD"
        assert invoice.invoice_number.startswith("INV-")
        assert invoice.period_start == shift_months(invoice.period_end, -1)
        assert invoice.due_date - invoice.period_end == timedelta(days=30)

    @pytest.mark.asyncio
    async def test_invoices_for_tenants_created_together(self, service):
        """Test tenants whose ids share a time prefix each get their own invoice."""
        first = await service.generate_invoice("01a152d7-fbcb-7000-8000-000000000001", "monthly")
        second = await service.generate_invoice("01a152d7-fbd4-7000-8000-000000000002", "monthly")
        again = await service.generate_invoice("01a152d7-fbcb-7000-8000-000000000001", "yearly")

        numbers = {first.invoice_number, second.invoice_number, again.invoice_number}
        assert len(numbers) == 3
        assert second.tenant_id == "01a152d7-fbd4-7000-8000-000000000002"

    @pytest.mark.asyncio
    async def test_yearly_invoice_accepts_string(self, service):
        invoice = await service.generate_invoice("tenant-1", "yearly")

        assert invoice.billing_period == BillingPeriod.YEARLY
        assert invoice.period_start == shift_months(invoice.period_end, -12)

    @pytest.mark.asyncio
    async def test_unsupported_period(self, service):
        with pytest.raises(UnsupportedBillingPeriodError) as exc_info:
            await service.generate_invoice("tenant-1", BillingPeriod.ONE_TIME)

        assert isinstance(exc_info.value, FieldInvalidError)

    @pytest.mark.asyncio
    async def test_invoice_requires_tenant(self, service):
        with pytest.raises(FieldRequiredError):
            await service.generate_invoice("", BillingPeriod.MONTHLY)

    @pytest.mark.asyncio
    async def test_summary(self, service):
        paid = await service.create(BillingCreate(tenant_id="t-1", invoice_number="A", amount=100))
        await service.process_payment(paid.id, "card")
        await service.create(BillingCreate(tenant_id="t-1", invoice_number="B", amount=40))

        summary = await service.get_billing_summary("t-1")

        assert summary.total_invoices == 2
        assert summary.total_amount == 140
        assert summary.paid_invoices == 1
        assert summary.paid_amount == 100
        assert summary.pending_amount == 40
        assert summary.overdue_invoices == 0

    @pytest.mark.asyncio
    async def test_summary_without_rows(self, service):
        summary = await service.get_billing_summary("nobody")

        assert summary.total_invoices == 0
        assert summary.currency == "USD"
