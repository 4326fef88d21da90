"""
Mapping of service errors onto HTTP responses.
"""

import logging

from fastapi import HTTPException

from entity_ledger.errors import LedgerError

logger = logging.getLogger(__name__)


def to_http_exception(e: LedgerError) -> HTTPException:
    """The service message is returned verbatim with the error's status code."""
    logger.warning(
        "Request rejected status_code=%s error=%s: %s",
        e.status_code, type(e).__name__, e.message,
    )
    return HTTPException(status_code=e.status_code, detail=str(e))
