"""Database layer: models, repositories, schemas and session management."""
