"""Custom exceptions for tenancy."""


class TenancyError(Exception):
    """Base exception for all tenancy errors."""

    pass


class ConfigurationError(TenancyError):
    """Error in configuration or settings."""

    pass
