"""
Reputation Module

Asks a threat source for a verdict on the target's hostname. No request is
sent to the target itself.
"""

import logging
from typing import Optional

import httpx

from .base import BaseProbe
from .schemas import Reputation, ScanTarget
from .sources import RandomThreatSource, ThreatSource

logger = logging.getLogger(__name__)


class ReputationChecker(BaseProbe[Reputation]):
    """
    Hostname reputation probe.

    A hostname that cannot be parsed from the URL is reported as clean
    rather than as a failure.
    """

    NAME = "reputation"

    def __init__(self, source: Optional[ThreatSource] = None):
        super().__init__()
        self.source = source or RandomThreatSource()

    async def _execute(self, target: ScanTarget, client: httpx.AsyncClient) -> Reputation:
        hostname = target.hostname
        if not hostname:
            logger.debug(f"No hostname in {target.url}, treating as clean")
            return Reputation.clean()

        verdict = await self.source.query(hostname)

        if verdict.flagged:
            logger.info(f"{hostname} flagged: {', '.join(verdict.labels) or 'no label'}")
            return Reputation.flagged(verdict.labels)

        return Reputation.clean()

    def fallback(self) -> Reputation:
        return Reputation.clean()
