"""
Secure Error Handling

Provides utilities for handling errors securely without leaking sensitive information.
"""

import logging
import uuid
from typing import Optional

from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

ERROR_ID_HEADER = "X-Error-ID"


def log_error(error: Exception, context: str) -> str:
    """
    Log full error details server-side.

    Args:
        error: The exception that occurred
        context: Description of what operation failed (e.g., "List posts")

    Returns:
        Short error ID for correlating the client response with the log line
    """
    # Generate unique error ID for correlation
    error_id = str(uuid.uuid4())[:8]

    logger.error(
        f"{context} failed [{error_id}]: {type(error).__name__}: {str(error)}",
        exc_info=error,
    )
    return error_id


def error_response(
    status_code: int,
    message: str,
    error: Optional[Exception] = None,
    context: Optional[str] = None,
) -> JSONResponse:
    """
    Build a JSON error body that only ever contains the fixed message.

    When an exception is given it is logged server-side and its error ID is
    returned in a response header, never in the body.
    """
    headers = None
    if error is not None:
        error_id = log_error(error, context or message)
        headers = {ERROR_ID_HEADER: error_id}
    return JSONResponse(status_code=status_code, content={"message": message}, headers=headers)
