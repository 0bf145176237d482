"""System initialization: ordered, idempotent seed steps."""

from .sequencer import STATE_OPTION_KEY, SystemInitializer

__all__ = ["STATE_OPTION_KEY", "SystemInitializer"]
