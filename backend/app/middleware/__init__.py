"""
Custom middleware for FastAPI application
Includes request tracking, request logging, CORS headers and error handling
"""
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
import time
import uuid
import logging
from typing import Callable

from app.scanner.schemas import ErrorResponse, SCAN_FAILED_MESSAGE

logger = logging.getLogger(__name__)


#: Attached to every response, including errors and preflight replies
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, X-Client-Info, Apikey",
}


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Add unique request ID to each request for tracking and logging
    """
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id

        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log all incoming requests and responses with timing information
    """
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        request_id = getattr(request.state, "request_id", "unknown")

        logger.info(
            f"Request started: {request.method} {request.url.path} "
            f"(ID: {request_id})"
        )

        response = await call_next(request)

        process_time = time.time() - start_time

        logger.info(
            f"Request completed: {request.method} {request.url.path} "
            f"Status: {response.status_code} "
            f"Duration: {process_time:.3f}s "
            f"(ID: {request_id})"
        )

        response.headers["X-Process-Time"] = str(process_time)

        return response


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """
    Permissive CORS for the browser front end.
    Answers any OPTIONS request with an empty 200 and stamps the fixed
    header set on every other response.
    """
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)

        response = await call_next(request)
        for name, value in CORS_HEADERS.items():
            response.headers[name] = value

        return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """
    Global error handling middleware
    Catches anything that escapes a route and returns the scan error envelope
    """
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            response = await call_next(request)
            return response
        except Exception as exc:
            request_id = getattr(request.state, "request_id", "unknown")

            logger.error(
                f"Unhandled exception in request {request_id}: {exc}",
                exc_info=True
            )

            body = ErrorResponse(error=SCAN_FAILED_MESSAGE, details=str(exc))
            return JSONResponse(
                status_code=500,
                content=body.model_dump(by_alias=True, exclude_none=True),
            )


def setup_middleware(app):
    """
    Set up all middleware for the FastAPI application

    Args:
        app: FastAPI application instance
    """
    # Add middleware in reverse order (last added is executed first)

    # Error handling (innermost, so its responses still get CORS headers)
    app.add_middleware(ErrorHandlingMiddleware)

    # CORS
    app.add_middleware(CORSHeadersMiddleware)

    # Request logging
    app.add_middleware(RequestLoggingMiddleware)

    # Request ID tracking
    app.add_middleware(RequestIDMiddleware)

    logger.info("Middleware setup complete")
