"""Errors raised by the reporting engine.

Every error carries the name of the aggregate that failed and the parameters
it was called with, so callers can log them and build a user-facing message.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict

from tortoise.exceptions import DBConnectionError, OperationalError

logger = logging.getLogger(__name__)


class ReportError(Exception):
    def __init__(self, report: str, params: Dict[str, Any], message: str):
        super().__init__(message)
        self.report = report
        self.params = params
        self.message = message

    def __str__(self):
        return f"{self.report}: {self.message} (params={self.params})"


class InvalidRange(ReportError):
    """Caller supplied a date range, year or limit the engine refuses to query."""


class StoreUnavailable(ReportError):
    """The transaction store could not be read. Not retried by the engine."""


@asynccontextmanager
async def store_access(report: str, **params: Any) -> AsyncIterator[None]:
    """Translates store failures raised inside the block into StoreUnavailable."""
    try:
        yield
    except (DBConnectionError, OperationalError) as e:
        logger.error(f"Store access failed for report '{report}' with {params}: {e}", exc_info=True)
        raise StoreUnavailable(report, params, f"transaction store unavailable: {e}") from e
