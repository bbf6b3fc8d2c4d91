"""Shared logging helpers.

USAGE:
    logger = logging.getLogger(__name__)

    async with log_operation(logger, "enhance_batch", tracks=12) as ctx:
        result = await run()
        ctx["youtube_found"] = result.summary.youtube_found
"""

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any


# Yo, this logs {operation}.started / .completed / .failed with duration_ms attached.
# The yielded dict is merged into the completion log, so callers can add result counters
# they only know at the end. On exception it logs with exc_info and RE-RAISES.
@asynccontextmanager
async def log_operation(
    logger: logging.Logger,
    operation: str,
    **context: Any,
) -> AsyncIterator[dict[str, Any]]:
    """Context manager for logging operation start/end with automatic timing.

    Args:
        logger: Module logger
        operation: Operation name (e.g., "enhance_batch")
        **context: Additional fields to include in all three log lines

    Yields:
        Mutable dict whose entries are added to the completion log
    """
    start = time.monotonic()
    result_fields: dict[str, Any] = {}
    logger.info(f"{operation}.started", extra=context)

    try:
        yield result_fields
    except Exception as e:
        duration_ms = int((time.monotonic() - start) * 1000)
        logger.error(
            f"{operation}.failed",
            extra={
                **context,
                "duration_ms": duration_ms,
                "error": str(e),
                "error_type": type(e).__name__,
            },
            exc_info=True,
        )
        raise

    duration_ms = int((time.monotonic() - start) * 1000)
    logger.info(
        f"{operation}.completed",
        extra={**context, **result_fields, "duration_ms": duration_ms},
    )
