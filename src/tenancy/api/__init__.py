"""HTTP API for tenant administration."""
