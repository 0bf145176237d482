"""Configuration validation for startup checks.

Validates that required configuration is present and coherent before the
application starts accepting requests.

Usage:
    from tenancy.config.validation import validate_or_raise

    # During startup
    validate_or_raise(settings)
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from tenancy.config.settings import HOUR, Settings, get_settings
from tenancy.utils.exceptions import ConfigurationError

logger = logging.getLogger("tenancy.config")

MIN_CACHE_TTL = 2 * HOUR
MAX_CACHE_TTL = 4 * HOUR


class ValidationSeverity(str, Enum):
    """Severity of configuration validation issues."""

    ERROR = "error"  # Must be fixed, app cannot start
    WARNING = "warning"  # Should be fixed, app can start but may misbehave


@dataclass
class ValidationResult:
    """Result of a configuration validation check."""

    field: str
    severity: ValidationSeverity
    message: str
    suggestion: str | None = None

    def __str__(self) -> str:
        prefix = "ERROR" if self.severity == ValidationSeverity.ERROR else "WARNING"
        result = f"[{prefix}] {self.field}: {self.message}"
        if self.suggestion:
            result += f"\n  Suggestion: {self.suggestion}"
        return result


def validate_configuration(settings: Settings | None = None) -> list[ValidationResult]:
    """Validate application configuration.

    Args:
        settings: Settings to validate (default: global settings)

    Returns:
        List of validation results (empty if all checks pass)
    """
    if settings is None:
        settings = get_settings()

    results: list[ValidationResult] = []
    results.extend(_validate_database(settings))
    results.extend(_validate_security(settings))
    results.extend(_validate_api(settings))
    results.extend(_validate_cache(settings))
    results.extend(_validate_environment(settings))
    return results


def validate_or_raise(settings: Settings | None = None) -> None:
    """Validate configuration and raise if errors found.

    Args:
        settings: Settings to validate

    Raises:
        ConfigurationError: If any validation errors are found
    """
    results = validate_configuration(settings)
    errors = [r for r in results if r.severity == ValidationSeverity.ERROR]

    if errors:
        error_messages = "\n".join(str(e) for e in errors)
        raise ConfigurationError(f"Configuration validation failed:\n{error_messages}")

    for warning in (r for r in results if r.severity == ValidationSeverity.WARNING):
        logger.warning(str(warning))


# =============================================================================
# Validators
# =============================================================================


def _validate_database(settings: Settings) -> list[ValidationResult]:
    """Validate database configuration."""
    results: list[ValidationResult] = []

    if not settings.DATABASE_URL:
        results.append(
            ValidationResult(
                field="DATABASE_URL",
                severity=ValidationSeverity.ERROR,
                message="Database URL is not configured",
                suggestion="Set DATABASE_URL environment variable",
            )
        )
    elif not settings.DATABASE_URL.startswith(("postgresql", "sqlite")):
        results.append(
            ValidationResult(
                field="DATABASE_URL",
                severity=ValidationSeverity.WARNING,
                message=f"Unexpected database type in URL: {settings.DATABASE_URL[:20]}...",
                suggestion="Use PostgreSQL (asyncpg) or SQLite (aiosqlite)",
            )
        )

    if not (1 <= settings.DATABASE_POOL_SIZE <= 100):
        results.append(
            ValidationResult(
                field="DATABASE_POOL_SIZE",
                severity=ValidationSeverity.WARNING,
                message=f"Pool size {settings.DATABASE_POOL_SIZE} is outside the 1-100 range",
            )
        )

    return results


def _validate_security(settings: Settings) -> list[ValidationResult]:
    """Validate security configuration."""
    results: list[ValidationResult] = []

    if settings.API_SECRET_KEY is None:
        results.append(
            ValidationResult(
                field="API_SECRET_KEY",
                severity=(
                    ValidationSeverity.ERROR
                    if settings.ENVIRONMENT == "production"
                    else ValidationSeverity.WARNING
                ),
                message="API secret key is not configured",
                suggestion="Generate a secure random string for Bearer authentication",
            )
        )
    elif len(settings.API_SECRET_KEY.get_secret_value()) < 32:
        results.append(
            ValidationResult(
                field="API_SECRET_KEY",
                severity=ValidationSeverity.WARNING,
                message="API secret key is short and may be weak",
                suggestion="Use at least 32 characters for secure API keys",
            )
        )

    return results


def _validate_api(settings: Settings) -> list[ValidationResult]:
    """Validate API configuration."""
    results: list[ValidationResult] = []

    if settings.DEFAULT_PAGE_LIMIT < 1 or settings.DEFAULT_PAGE_LIMIT > settings.MAX_PAGE_LIMIT:
        results.append(
            ValidationResult(
                field="DEFAULT_PAGE_LIMIT",
                severity=ValidationSeverity.ERROR,
                message=(
                    f"Default page limit {settings.DEFAULT_PAGE_LIMIT} must be between 1 "
                    f"and MAX_PAGE_LIMIT ({settings.MAX_PAGE_LIMIT})"
                ),
            )
        )

    if not settings.API_PREFIX.startswith("/"):
        results.append(
            ValidationResult(
                field="API_PREFIX",
                severity=ValidationSeverity.ERROR,
                message=f"API prefix must start with '/': {settings.API_PREFIX}",
            )
        )

    if settings.ENVIRONMENT == "production" and "*" in settings.CORS_ORIGINS:
        results.append(
            ValidationResult(
                field="CORS_ORIGINS",
                severity=ValidationSeverity.ERROR,
                message="Wildcard CORS origin not allowed in production",
                suggestion="Specify exact allowed origins",
            )
        )

    return results


def _validate_cache(settings: Settings) -> list[ValidationResult]:
    """Validate Redis and cache TTL configuration."""
    results: list[ValidationResult] = []

    if settings.REDIS_URL and not settings.REDIS_URL.startswith(("redis://", "rediss://")):
        results.append(
            ValidationResult(
                field="REDIS_URL",
                severity=ValidationSeverity.WARNING,
                message="Redis URL has unexpected format",
                suggestion="Expected format: redis://host:port/db",
            )
        )

    for name, ttl in settings.cache_ttl.model_dump().items():
        if not (MIN_CACHE_TTL <= ttl <= MAX_CACHE_TTL):
            results.append(
                ValidationResult(
                    field=f"cache_ttl.{name}",
                    severity=ValidationSeverity.WARNING,
                    message=f"Cache TTL {ttl}s is outside the 2h-4h staleness window",
                    suggestion="Keep cache TTLs between 7200 and 14400 seconds",
                )
            )

    return results


def _validate_environment(settings: Settings) -> list[ValidationResult]:
    """Validate environment-specific settings."""
    results: list[ValidationResult] = []

    if settings.ENVIRONMENT == "production" and settings.DEBUG:
        results.append(
            ValidationResult(
                field="DEBUG",
                severity=ValidationSeverity.ERROR,
                message="Debug mode must be disabled in production",
                suggestion="Set DEBUG=false for production",
            )
        )

    if settings.ENVIRONMENT == "production" and settings.initialization.allow_reinitialization:
        results.append(
            ValidationResult(
                field="initialization.allow_reinitialization",
                severity=ValidationSeverity.WARNING,
                message="Reinitialization is enabled in production",
                suggestion="Disable it once the system has been seeded",
            )
        )

    return results


def get_configuration_summary(settings: Settings | None = None) -> dict[str, Any]:
    """Get a summary of current configuration (safe for logging).

    Excludes sensitive values like API keys and connection strings.
    """
    if settings is None:
        settings = get_settings()

    return {
        "environment": settings.ENVIRONMENT,
        "debug": settings.DEBUG,
        "log_level": settings.log_level,
        "api_prefix": settings.API_PREFIX,
        "cors_origins_count": len(settings.CORS_ORIGINS),
        "database_pool_size": settings.DATABASE_POOL_SIZE,
        "api_key_configured": settings.API_SECRET_KEY is not None,
        "redis_configured": bool(settings.REDIS_URL),
        "allow_reinitialization": settings.initialization.allow_reinitialization,
    }
