"""Infrastructure layer: rate limiting, provider HTTP clients, observability."""
