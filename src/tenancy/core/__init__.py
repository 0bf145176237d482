"""Core infrastructure: context, logging, cache and exceptions."""
