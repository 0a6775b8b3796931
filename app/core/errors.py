"""
Mapping of service errors to HTTP responses.

Services raise ValueError subclasses for bad input or unmet preconditions and
LookupError subclasses for missing records; anything else is an upstream
failure and is reported to the client only as a generic 500.
"""
import logging
from fastapi import HTTPException, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

logger = logging.getLogger(__name__)

INTERNAL_ERROR_DETAIL = "Internal server error"


def http_error_from(exc: Exception, action: str) -> HTTPException:
    """
    Translate an exception raised while performing ``action`` into an HTTPException.

    Unexpected errors are logged with their traceback; their message never
    reaches the client.
    """
    if isinstance(exc, HTTPException):
        return exc

    if isinstance(exc, LookupError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc) or "Not found")

    if isinstance(exc, ValueError) and not isinstance(exc, ValidationError):
        logger.info(f"Rejected request to {action}: {exc}")
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    logger.error(f"Failed to {action}: {exc}", exc_info=exc)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR_DETAIL)


def format_validation_error(exc: RequestValidationError) -> str:
    """First validation problem as a readable sentence, e.g. 'rating_overall: Rating must be between 1 and 5'."""
    errors = exc.errors()
    if not errors:
        return "Invalid form data"

    error = errors[0]
    message = str(error.get("msg", "Invalid value"))
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]

    location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
    if location:
        return f"{'.'.join(location)}: {message}"
    return message


async def validation_exception_handler(request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": format_validation_error(exc)},
    )
