"""
Security Scan API Endpoint

Validates the target URL, runs the scan aggregator and shapes the JSON
response. CORS headers and preflight replies are handled by middleware.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
import logging

from ..scanner import ScanAggregator
from ..scanner.schemas import (
    ALLOWED_SCHEMES,
    INVALID_URL_MESSAGE,
    SCAN_FAILED_MESSAGE,
    ErrorResponse,
    ScanTarget,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Security Scan"])


def get_aggregator(request: Request) -> ScanAggregator:
    """Aggregator configured by ``create_app``; overridden in tests"""
    return request.app.state.aggregator


def _error(status_code: int, error: str, details: Optional[str] = None) -> JSONResponse:
    body = ErrorResponse(error=error, details=details)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True, exclude_none=True),
    )


@router.post("/scan")
async def run_security_scan(
    request: Request,
    aggregator: ScanAggregator = Depends(get_aggregator),
):
    """
    Scan a URL and return its security score breakdown.

    Body: ``{"url": "https://example.com"}``
    """
    try:
        payload = await request.json()
    except Exception as e:
        logger.error(f"Failed to parse scan request body: {e}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, SCAN_FAILED_MESSAGE, str(e))

    if payload is None:
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            SCAN_FAILED_MESSAGE,
            "Request body must not be null",
        )

    # Arrays, strings and numbers carry no url field
    url = payload.get("url") if isinstance(payload, dict) else None

    if url is not None and not isinstance(url, str):
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            SCAN_FAILED_MESSAGE,
            f"url must be a string, got {type(url).__name__}",
        )

    if not url or not url.startswith(ALLOWED_SCHEMES):
        logger.info(f"Rejected scan request with invalid url: {url!r}")
        return _error(status.HTTP_400_BAD_REQUEST, INVALID_URL_MESSAGE)

    try:
        result = await aggregator.scan(ScanTarget(url=url))
    except Exception as e:
        logger.error(f"Security scan failed for {url}: {e}", exc_info=True)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, SCAN_FAILED_MESSAGE, str(e))

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=result.model_dump(by_alias=True, mode="json"),
    )
