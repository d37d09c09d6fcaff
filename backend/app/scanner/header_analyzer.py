"""
Security Header Analyzer

Checks a HEAD response for the six scored security headers. Only presence
is tested; header values are not inspected.
"""

import logging
from typing import Mapping

import httpx

from .base import BaseProbe
from .schemas import ScanTarget, SecurityHeaders

logger = logging.getLogger(__name__)


# Header name -> (SecurityHeaders field, weight). Weights sum to 100.
SECURITY_HEADER_WEIGHTS = {
    "strict-transport-security": ("hsts", 20),
    "content-security-policy": ("csp", 25),
    "x-frame-options": ("x_frame_options", 20),
    "permissions-policy": ("permissions_policy", 15),
    "x-content-type-options": ("x_content_type_options", 10),
    "referrer-policy": ("referrer_policy", 10),
}


def analyse_security_headers(headers: Mapping[str, str]) -> SecurityHeaders:
    """
    Build a SecurityHeaders record from response headers.

    Lookup is case-insensitive whatever mapping type is passed in.
    """
    present = {name.lower() for name in headers.keys()}

    flags = {}
    score = 0
    for header, (field_name, weight) in SECURITY_HEADER_WEIGHTS.items():
        flags[field_name] = header in present
        if flags[field_name]:
            score += weight

    return SecurityHeaders(**flags, score=score)


class HeaderAnalyzer(BaseProbe[SecurityHeaders]):
    """Security header presence probe"""

    NAME = "headers"

    async def _execute(self, target: ScanTarget, client: httpx.AsyncClient) -> SecurityHeaders:
        response = await client.head(target.url)
        result = analyse_security_headers(response.headers)

        missing = [h for h, (field_name, _) in SECURITY_HEADER_WEIGHTS.items()
                   if not getattr(result, field_name)]
        if missing:
            logger.debug(f"{target.url} missing headers: {', '.join(missing)}")

        return result

    def fallback(self) -> SecurityHeaders:
        return SecurityHeaders.failed()
