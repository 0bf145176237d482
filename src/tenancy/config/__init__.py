"""Configuration package for tenancy."""

from tenancy.config.settings import InitializationConfig, Settings, get_settings

__all__ = ["InitializationConfig", "Settings", "get_settings"]
