"""
Domain exceptions and the FastAPI handlers that turn them into JSON responses
"""
import logging
import traceback
from typing import List, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from constellation import config
from constellation.models import ErrorResponse

logger = logging.getLogger(__name__)


class ConstellationError(Exception):
    """Base class for errors reported to API clients"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, error: str, message: Optional[str] = None):
        super().__init__(message or error)
        self.error = error
        self.message = message

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(error=self.error, message=self.message)


class InvalidWikipediaResponse(ConstellationError):
    """Wikipedia answered, but without the expected query payload"""

    def __init__(self, message: Optional[str] = None):
        super().__init__('Invalid response from Wikipedia API', message)


class SearchTermTooShort(ConstellationError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self):
        super().__init__(
            'Search term is too short',
            'Please try a longer, more specific search term'
        )


class TopicNotFound(ConstellationError):
    """No search results, even after the wildcard retry"""
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, suggestions: Optional[List[str]] = None):
        super().__init__('No results found for this topic')
        self.suggestions = suggestions or []

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(error=self.error, suggestions=self.suggestions or None)


def error_json(status_code: int, body: ErrorResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def internal_error_response(error: str, exc: Exception) -> JSONResponse:
    """
    Build the 500 response for a failure caught at the request boundary

    Args:
        error: Short summary of what the endpoint was doing
        exc: The exception that was caught

    Returns:
        JSONResponse with the error summary, the exception message and,
        in development mode only, the stack trace
    """
    body = ErrorResponse(
        error=error,
        message=str(exc),
        stack=''.join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        if config.IS_DEVELOPMENT else None
    )
    return error_json(status.HTTP_500_INTERNAL_SERVER_ERROR, body)


async def constellation_error_handler(request: Request, exc: ConstellationError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{exc.error}: {exc.message}", extra={"path": request.url.path})
    else:
        logger.info(f"{exc.error}", extra={"path": request.url.path, "status_code": exc.status_code})
    return error_json(exc.status_code, exc.to_response())


def register_error_handlers(app: FastAPI) -> None:
    """Attach the domain exception handlers to the FastAPI application"""
    app.add_exception_handler(ConstellationError, constellation_error_handler)
