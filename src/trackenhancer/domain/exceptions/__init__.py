"""Domain exceptions."""

from typing import Any


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    # We keep message as an attribute so handlers can log it without parsing str(exc).
    # Don't raise this directly, use a subclass so callers can catch precisely.
    def __init__(self, message: str, *args: Any) -> None:
        super().__init__(message, *args)
        self.message = message


class ValidationError(DomainException):
    """Input validation failed.

    HTTP Status: 422

    Example:
        raise ValidationError("Unknown provider: spotify")
    """

    pass


class ConfigurationError(DomainException):
    """Application misconfiguration.

    Raised when an optional integration is used without its credentials. Provider
    clients catch this at their public boundary and return an empty result, so it
    only escapes when code talks to the low-level request helpers directly.

    HTTP Status: 503 (Service Unavailable)

    Example:
        raise ConfigurationError("DISCOGS_API_TOKEN not configured")
    """

    pass


class ExternalServiceError(DomainException):
    """External service (YouTube, Discogs) returned an error.

    Hey future me - provider, status_code and reason are parsed from the provider's
    error envelope where possible so logs say WHICH service failed and WHY,
    not just "HTTP 403".

    HTTP Status: 502 (Bad Gateway)
    """

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        status_code: int | None = None,
        reason: str | None = None,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
        self.reason = reason


class RateLimitExceededError(ExternalServiceError):
    """External service rate limit or quota was exceeded.

    Raised when a provider answers 429, or YouTube reports quotaExceeded. Our own
    rate limiters never raise this - they block instead.

    HTTP Status: 429
    """

    pass


__all__ = [
    "DomainException",
    "ValidationError",
    "ConfigurationError",
    "ExternalServiceError",
    "RateLimitExceededError",
]
