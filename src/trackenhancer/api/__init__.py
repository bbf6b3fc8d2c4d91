"""HTTP API for trackenhancer.

Structure:
- routers/: endpoints (tracks, quota, discography)
- schemas/: Pydantic models for request/response
- dependencies.py: dependency injection (clients, services)
- exception_handlers.py: global error handlers
"""

from trackenhancer.api.routers import api_router

__all__ = ["api_router"]
