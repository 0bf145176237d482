"""Billing lifecycle: invoices, payments and the overdue sweep."""

import calendar
from datetime import UTC, datetime, timedelta

from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_utils import uuid7

from tenancy.config.settings import Settings
from tenancy.core.cache import CacheTaskRunner
from tenancy.core.exceptions import (
    AlreadyExistsError,
    FieldRequiredError,
    NotFoundError,
    PaymentNotAllowedError,
    UnsupportedBillingPeriodError,
)
from tenancy.core.logging import get_logger
from tenancy.core.paging import Page, PageParams
from tenancy.db.models.tenant import BillingPeriod, BillingStatus, TenantBilling
from tenancy.db.repositories import BillingRepository
from tenancy.db.schemas.billing import BillingCreate, BillingRead, BillingSummary, BillingUpdate

from .base import BaseService

logger = get_logger(__name__)

PAYMENT_DUE_DAYS = 30
DEFAULT_CURRENCY = "USD"

# Statuses a payment may be recorded against
PAYABLE_STATUSES = frozenset({BillingStatus.PENDING.value, BillingStatus.OVERDUE.value})


def shift_months(value: datetime, months: int) -> datetime:
    """Move value by whole calendar months, clamping the day to the month length."""
    index = value.year * 12 + value.month - 1 + months
    year, month = divmod(index, 12)
    day = min(value.day, calendar.monthrange(year, month + 1)[1])
    return value.replace(year=year, month=month + 1, day=day)


def invoice_number_for(now: datetime) -> str:
    """Invoice number ``INV-{YYYYMMDDHHMMSS}-{uuid7 hex}``, unique per call."""
    return f"INV-{now.strftime('%Y%m%d%H%M%S')}-{uuid7().hex}"


class BillingService(BaseService):
    """Service for tenant billing records.

    Status transitions:
        pending -> paid      process_payment()
        pending -> overdue   mark_overdue() sweep
        overdue -> paid      process_payment()
    Cancelled and refunded are reached only through update().
    """

    entity_name = "TenantBilling"

    def __init__(
        self,
        db: AsyncSession,
        redis: Redis | None = None,
        *,
        settings: Settings | None = None,
        runner: CacheTaskRunner | None = None,
    ):
        super().__init__(db, redis, settings=settings, runner=runner)
        ttl = self.settings.cache_ttl.billing
        self.repo = BillingRepository(db, self.namespace("billing", ttl), ttl=ttl, runner=runner)

    async def create(self, body: BillingCreate) -> BillingRead:
        """Create a billing record.

        Raises:
            FieldRequiredError: If tenant_id is missing
            AlreadyExistsError: If the invoice number is taken
        """
        if not body.tenant_id:
            raise FieldRequiredError("tenant_id")
        values = body.model_dump(mode="python")
        values["billing_period"] = body.billing_period.value
        values["status"] = body.status.value
        values["invoice_number"] = body.invoice_number or invoice_number_for(datetime.now(UTC))
        if await self.repo.count(TenantBilling.invoice_number == values["invoice_number"]):
            raise AlreadyExistsError(self.entity_name, values["invoice_number"])

        async with self.store_errors("create", values["invoice_number"]):
            billing = await self.repo.create(TenantBilling(**values))
        return self.serialize(billing)

    async def get(self, billing_id: str) -> BillingRead:
        billing = await self.repo.get_cached(billing_id)
        if billing is None:
            raise NotFoundError(self.entity_name, billing_id)
        return self.serialize(billing)

    async def get_by_invoice_number(self, invoice_number: str) -> BillingRead:
        billing = await self.repo.get_by_invoice_number(invoice_number)
        if billing is None:
            raise NotFoundError(self.entity_name, invoice_number)
        return self.serialize(billing)

    async def update(self, billing_id: str, body: BillingUpdate) -> BillingRead:
        billing = await self.repo.get(billing_id)
        if billing is None:
            raise NotFoundError(self.entity_name, billing_id)
        updates = body.model_dump(mode="python", exclude_unset=True)
        for field in ("billing_period", "status"):
            if updates.get(field) is not None:
                updates[field] = updates[field].value
        async with self.store_errors("update", billing_id):
            billing = await self.repo.update(billing, updates)
        return self.serialize(billing)

    async def delete(self, billing_id: str) -> None:
        billing = await self.repo.get(billing_id)
        if billing is None:
            raise NotFoundError(self.entity_name, billing_id)
        async with self.store_errors("delete", billing_id):
            await self.repo.delete(billing)

    async def list_billing(
        self,
        params: PageParams | None = None,
        *,
        tenant_id: str | None = None,
        status: BillingStatus | None = None,
        billing_period: BillingPeriod | None = None,
    ) -> Page[BillingRead]:
        page = await self.repo.list_page(
            self.page_params(params),
            tenant_id=tenant_id,
            status=status.value if status else None,
            billing_period=billing_period.value if billing_period else None,
        )
        return page.map(self.serialize)

    async def process_payment(self, billing_id: str, payment_method: str) -> BillingRead:
        """Record a payment against a pending or overdue billing row.

        Args:
            billing_id: Billing record id
            payment_method: How the invoice was paid

        Returns:
            The billing row with status paid

        Raises:
            FieldRequiredError: If payment_method is empty
            NotFoundError: If the billing row does not exist
            PaymentNotAllowedError: If the row is paid, cancelled or refunded
        """
        if not payment_method:
            raise FieldRequiredError("payment_method")
        billing = await self.repo.get(billing_id)
        if billing is None:
            raise NotFoundError(self.entity_name, billing_id)
        if billing.status not in PAYABLE_STATUSES:
            raise PaymentNotAllowedError(billing_id, billing.status)

        async with self.store_errors("process_payment", billing_id):
            billing = await self.repo.update(
                billing,
                {
                    "status": BillingStatus.PAID.value,
                    "payment_method": payment_method,
                    "paid_at": datetime.now(UTC),
                },
            )
        logger.info("billing_paid", billing_id=billing_id, payment_method=payment_method)
        return self.serialize(billing)

    async def mark_overdue(self, now: datetime | None = None) -> int:
        """Sweep pending rows past their due date into overdue.

        Returns:
            Number of rows transitioned
        """
        now = now or datetime.now(UTC)
        async with self.store_errors("mark_overdue", now.isoformat()):
            updated = await self.repo.mark_overdue(now)
        logger.info("billing_overdue_sweep", updated=updated, swept_at=now.isoformat())
        return updated

    async def generate_invoice(
        self, tenant_id: str, billing_period: BillingPeriod | str
    ) -> BillingRead:
        """Create a pending invoice covering the period ending now.

        The amount starts at 0; usage pricing is applied by a later update.

        Raises:
            FieldRequiredError: If tenant_id is missing
            UnsupportedBillingPeriodError: For periods other than monthly and yearly
        """
        if not tenant_id:
            raise FieldRequiredError("tenant_id")
        period = billing_period.value if isinstance(billing_period, BillingPeriod) else billing_period
        now = datetime.now(UTC)
        if period == BillingPeriod.MONTHLY.value:
            period_start = shift_months(now, -1)
        elif period == BillingPeriod.YEARLY.value:
            period_start = shift_months(now, -12)
        else:
            raise UnsupportedBillingPeriodError(period)

        return await self.create(
            BillingCreate(
                tenant_id=tenant_id,
                billing_period=BillingPeriod(period),
                period_start=period_start,
                period_end=now,
                amount=0.0,
                currency=DEFAULT_CURRENCY,
                status=BillingStatus.PENDING,
                description=f"{period} invoice",
                invoice_number=invoice_number_for(now),
                due_date=now + timedelta(days=PAYMENT_DUE_DAYS),
            )
        )

    async def get_billing_summary(self, tenant_id: str) -> BillingSummary:
        rows = await self.repo.list_by_tenant(tenant_id)
        summary = BillingSummary(tenant_id=tenant_id, total_invoices=len(rows))
        for row in rows:
            summary.total_amount += row.amount
            if row.status == BillingStatus.PAID.value:
                summary.paid_invoices += 1
                summary.paid_amount += row.amount
            elif row.status == BillingStatus.PENDING.value:
                summary.pending_invoices += 1
                summary.pending_amount += row.amount
            elif row.status == BillingStatus.OVERDUE.value:
                summary.overdue_invoices += 1
                summary.overdue_amount += row.amount
        if rows:
            summary.currency = rows[0].currency or DEFAULT_CURRENCY
        return summary

    async def get_overdue_billing(self, tenant_id: str) -> list[BillingRead]:
        return [self.serialize(b) for b in await self.repo.list_overdue(tenant_id)]

    def serialize(self, billing: TenantBilling) -> BillingRead:
        return BillingRead.model_validate(billing)
