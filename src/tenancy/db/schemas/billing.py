"""Pydantic schemas for tenant billing."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from tenancy.db.models.tenant import BillingPeriod, BillingStatus


class BillingCreate(BaseModel):
    """Schema for creating a billing record.

    An invoice number is generated when omitted.
    """

    tenant_id: str | None = None
    billing_period: BillingPeriod = BillingPeriod.MONTHLY
    period_start: datetime | None = None
    period_end: datetime | None = None
    amount: float = Field(default=0.0, ge=0)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    status: BillingStatus = BillingStatus.PENDING
    description: str | None = None
    invoice_number: str | None = Field(None, max_length=64)
    payment_method: str | None = Field(None, max_length=50)
    due_date: datetime | None = None
    usage_details: dict[str, Any] = Field(default_factory=dict)
    extras: dict[str, Any] = Field(default_factory=dict)


class BillingUpdate(BaseModel):
    """Direct update of a billing record; the only way to cancel or refund."""

    billing_period: BillingPeriod | None = None
    period_start: datetime | None = None
    period_end: datetime | None = None
    amount: float | None = Field(None, ge=0)
    currency: str | None = Field(None, min_length=3, max_length=3)
    status: BillingStatus | None = None
    description: str | None = None
    payment_method: str | None = None
    paid_at: datetime | None = None
    due_date: datetime | None = None
    usage_details: dict[str, Any] | None = None
    extras: dict[str, Any] | None = None


class BillingRead(BaseModel):
    """Billing record with overdue display fields.

    is_overdue mirrors the stored status, which only the overdue sweep
    sets; days_overdue counts whole days past due for such rows.
    """

    id: str
    tenant_id: str
    billing_period: BillingPeriod
    period_start: datetime | None = None
    period_end: datetime | None = None
    amount: float
    currency: str
    status: BillingStatus
    description: str | None = None
    invoice_number: str
    payment_method: str | None = None
    paid_at: datetime | None = None
    due_date: datetime | None = None
    usage_details: dict[str, Any] = Field(default_factory=dict)
    extras: dict[str, Any] = Field(default_factory=dict)
    created_by: str | None = None
    updated_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("usage_details", "extras", mode="before")
    @classmethod
    def default_dict(cls, v: Any) -> Any:
        return v or {}

    @computed_field
    @property
    def is_overdue(self) -> bool:
        return self.status == BillingStatus.OVERDUE

    @computed_field
    @property
    def days_overdue(self) -> int:
        if not self.is_overdue or self.due_date is None:
            return 0
        return max((datetime.now(UTC) - self.due_date).days, 0)


class PaymentRequest(BaseModel):
    payment_method: str = Field(..., min_length=1, max_length=50)


class InvoiceRequest(BaseModel):
    billing_period: BillingPeriod


class BillingSummary(BaseModel):
    """Aggregate billing figures for one tenant."""

    tenant_id: str
    total_invoices: int = 0
    total_amount: float = 0.0
    paid_invoices: int = 0
    paid_amount: float = 0.0
    pending_invoices: int = 0
    pending_amount: float = 0.0
    overdue_invoices: int = 0
    overdue_amount: float = 0.0
    currency: str = "USD"


class MarkOverdueResult(BaseModel):
    updated: int
    swept_at: datetime
