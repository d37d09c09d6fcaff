"""
Technology Detector Module

Fingerprints the target's server, frontend frameworks and CMS from a GET
response. Detection is a plain marker search over headers and body text.

Detects:
- Web server (Server header)
- Backend platform (X-Powered-By header, reported verbatim)
- Frontend frameworks (React, Vue, Angular, Next.js)
- CMS platforms (WordPress, Drupal, Joomla)
"""

import logging
from typing import List, Mapping, Optional

import httpx

from .base import BaseProbe
from .schemas import ScanTarget, TechStack

logger = logging.getLogger(__name__)


# Body marker -> display name. Matching is case-sensitive.
FRAMEWORK_MARKERS = [
    ("react", "React"),
    ("vue", "Vue"),
    ("angular", "Angular"),
    ("next", "Next.js"),
]

# Checked in order; a later match overrides an earlier one.
CMS_MARKERS = [
    ("wp-content", "WordPress"),
    ("drupal", "Drupal"),
    ("joomla", "Joomla"),
]

#: Fixed score for a completed fingerprint
FINGERPRINT_SCORE = 75
#: Score reported when the fingerprint could not be taken
FALLBACK_SCORE = 50


def fingerprint_response(headers: Mapping[str, str], body: str) -> TechStack:
    """
    Derive a TechStack from response headers and body text.

    Frameworks are not de-duplicated: an X-Powered-By of "Next.js" plus a
    "next" marker in the body yields "Next.js" twice.
    """
    lowered = {k.lower(): v for k, v in headers.items()}

    server = lowered.get("server") or "Unknown"

    frameworks: List[str] = []
    powered_by = lowered.get("x-powered-by")
    if powered_by:
        frameworks.append(powered_by)

    for marker, name in FRAMEWORK_MARKERS:
        if marker in body:
            frameworks.append(name)

    cms: Optional[str] = None
    for marker, name in CMS_MARKERS:
        if marker in body:
            cms = name

    return TechStack(
        server=server,
        framework=frameworks,
        cms=cms,
        score=FINGERPRINT_SCORE,
    )


class TechDetector(BaseProbe[TechStack]):
    """Technology fingerprint probe"""

    NAME = "techStack"

    async def _execute(self, target: ScanTarget, client: httpx.AsyncClient) -> TechStack:
        response = await client.get(target.url)
        result = fingerprint_response(response.headers, response.text)

        if result.framework or result.cms:
            logger.debug(
                f"{target.url}: frameworks={result.framework} cms={result.cms}"
            )

        return result

    def fallback(self) -> TechStack:
        return TechStack.failed()
