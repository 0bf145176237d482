"""Domain exceptions for tenant administration and system initialization."""

from typing import Any

from tenancy.utils.exceptions import TenancyError


class ContextNotSetError(TenancyError):
    """Raised when attempting to access request context that is not set."""

    def __init__(self, message: str = "Request context is not set"):
        super().__init__(message)


class AuthenticationError(TenancyError):
    """Raised when a request carries missing or invalid credentials."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class NotFoundError(TenancyError):
    """Raised when a record does not exist in the store.

    Attributes:
        entity: Entity name (e.g. "Tenant", "TenantQuota")
        key: Identifier that was looked up
    """

    def __init__(self, entity: str, key: Any):
        super().__init__(f"{entity} not found: {key}")
        self.entity = entity
        self.key = key

    def __str__(self) -> str:
        return f"{self.entity} {self.key} does not exist"


class AlreadyExistsError(TenancyError):
    """Raised when a write violates a uniqueness rule.

    Attributes:
        entity: Entity name
        key: Conflicting identifier or tuple
    """

    def __init__(self, entity: str, key: Any):
        super().__init__(f"{entity} already exists: {key}")
        self.entity = entity
        self.key = key

    def __str__(self) -> str:
        return f"{self.entity} {self.key} already exists"


class NotSingularError(TenancyError):
    """Raised when a lookup expected to match one row matched several."""

    def __init__(self, entity: str, key: Any):
        super().__init__(f"{entity} is not singular: {key}")
        self.entity = entity
        self.key = key

    def __str__(self) -> str:
        return f"{self.entity} {self.key} is not singular"


class FieldRequiredError(TenancyError):
    """Raised when a required input field is missing or empty.

    Attributes:
        field: Name of the missing field
    """

    def __init__(self, field: str):
        super().__init__(f"{field} is required")
        self.field = field


class FieldInvalidError(TenancyError):
    """Raised when an input field has an unacceptable value.

    Attributes:
        field: Name of the invalid field
        value: Rejected value
        reason: Why the value was rejected
    """

    def __init__(self, field: str, value: Any, reason: str | None = None):
        message = f"{field} is invalid: {value!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.field = field
        self.value = value
        self.reason = reason


class UnsupportedBillingPeriodError(FieldInvalidError):
    """Raised when an invoice is requested for a period without a date rule."""

    def __init__(self, period: str):
        super().__init__("billing_period", period, "unsupported billing period")
        self.period = period

    def __str__(self) -> str:
        return f"unsupported billing period: {self.period}"


class PaymentNotAllowedError(TenancyError):
    """Raised when a payment is recorded against a billing row that cannot be paid.

    Attributes:
        billing_id: Billing record identifier
        status: Current status of the billing record
    """

    def __init__(self, billing_id: str, status: str):
        super().__init__(f"Billing {billing_id} cannot be paid in status {status}")
        self.billing_id = billing_id
        self.status = status


class SettingReadOnlyError(TenancyError):
    """Raised when writing a tenant setting flagged as read-only."""

    def __init__(self, tenant_id: str, key: str):
        super().__init__(f"Setting {key} is read-only for tenant {tenant_id}")
        self.tenant_id = tenant_id
        self.key = key


class AlreadyInitializedError(TenancyError):
    """Raised when the seed sequence runs on an initialized system."""

    def __init__(self) -> None:
        super().__init__("system is already initialized")


class ReinitializationNotAllowedError(TenancyError):
    """Raised when a reset is requested but configuration forbids it."""

    def __init__(self) -> None:
        super().__init__("reinitialization is not allowed by configuration")


class InitializationStepError(TenancyError):
    """Raised when one seed step fails; earlier steps stay committed.

    Attributes:
        step: Name of the failed step
        cause: Underlying exception
    """

    def __init__(self, step: str, cause: BaseException):
        super().__init__(f"initialization step {step} failed: {cause}")
        self.step = step
        self.cause = cause
