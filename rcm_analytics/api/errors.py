"""
Shared error response for the API routers.

Request bodies are validated by FastAPI before a handler runs, so a pydantic
ValidationError raised inside a handler comes from building a result record.
It is a server fault even though ValidationError subclasses ValueError, and
routers catch it ahead of their ValueError -> 422 branch.
"""

import logging

from fastapi import HTTPException


def internal_server_error(
    logger: logging.Logger,
    context: str,
    detail: str,
    error: Exception,
) -> HTTPException:
    """
    Log an unexpected failure with its traceback and build the 500 response.

    Args:
        logger: The router's module logger.
        context: Log message prefix, may carry request identifiers.
        detail: Client-facing message prefix.
        error: The exception being handled.
    """
    logger.error(f"{context}: {error}", exc_info=True)
    return HTTPException(status_code=500, detail=f"{detail}: {str(error)}")
