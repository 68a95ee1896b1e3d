"""Infrastructure adapters: Redis, rate limiting and result caching."""
