"""Persistence layer: database session, models and repositories."""
