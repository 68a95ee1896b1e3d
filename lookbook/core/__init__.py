"""Core utilities: auth, passwords and request context."""
