"""
Scan Aggregator

Coordinates a scan:
1. Launch the TLS, header, technology and reputation probes concurrently
2. Wait for all four (each bounded by its own timeout)
3. Combine the sub-scores with fixed weights
4. Stamp the completion time and return the ScanResult
"""

import asyncio
import logging
import random
from datetime import datetime, timezone
from typing import Optional

import httpx

from app.core.config import Settings

from .base import BaseProbe
from .header_analyzer import HeaderAnalyzer
from .reputation import ReputationChecker
from .schemas import (
    Reputation,
    ScanResult,
    ScanTarget,
    SecurityHeaders,
    SSLResult,
    TechStack,
)
from .sources import (
    BlocklistThreatSource,
    CertificateSource,
    LiveCertificateSource,
    RandomThreatSource,
    SyntheticCertificateSource,
    ThreatSource,
)
from .tech_detector import TechDetector
from .tls_inspector import TLSInspector

logger = logging.getLogger(__name__)


# Weights in percent; they must sum to 100 (i.e. 1.00).
SCORE_WEIGHTS = {
    "ssl": 30,
    "headers": 35,
    "tech_stack": 15,
    "reputation": 20,
}


def compute_overall_score(
    ssl: SSLResult,
    headers: SecurityHeaders,
    tech_stack: TechStack,
    reputation: Reputation,
) -> int:
    """
    Weighted combination of the four sub-scores, rounded half up.

    The sum is kept in integer hundredths so that halves round exactly,
    e.g. 64.5 -> 65.
    """
    weighted = (
        ssl.score * SCORE_WEIGHTS["ssl"]
        + headers.score * SCORE_WEIGHTS["headers"]
        + tech_stack.score * SCORE_WEIGHTS["tech_stack"]
        + reputation.score * SCORE_WEIGHTS["reputation"]
    )
    return (weighted + 50) // 100


def score_label(score: int) -> str:
    """Verdict label shown next to an overall score"""
    if score >= 80:
        return "SECURE"
    if score >= 60:
        return "MODERATE"
    return "VULNERABLE"


def utc_timestamp(moment: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix"""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ScanAggregator:
    """
    Runs the four probes against one target and merges their results.

    The aggregator holds no per-scan state; one instance can serve
    concurrent scans.
    """

    def __init__(
        self,
        tls_inspector: Optional[TLSInspector] = None,
        header_analyzer: Optional[HeaderAnalyzer] = None,
        tech_detector: Optional[TechDetector] = None,
        reputation_checker: Optional[ReputationChecker] = None,
        request_timeout: float = 10.0,
        probe_timeout: float = 15.0,
        user_agent: str = "SiteSecurityScanner/1.0",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize aggregator.

        Args:
            tls_inspector: TLS/certificate probe
            header_analyzer: Security header probe
            tech_detector: Technology fingerprint probe
            reputation_checker: Reputation probe
            request_timeout: httpx timeout for each request, in seconds
            probe_timeout: Upper bound for a whole probe, in seconds
            user_agent: User-Agent sent with every request
            transport: Optional httpx transport (used by tests)
        """
        self.tls_inspector = tls_inspector or TLSInspector()
        self.header_analyzer = header_analyzer or HeaderAnalyzer()
        self.tech_detector = tech_detector or TechDetector()
        self.reputation_checker = reputation_checker or ReputationChecker()
        self.request_timeout = request_timeout
        self.probe_timeout = probe_timeout
        self.user_agent = user_agent
        self.transport = transport

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        rng: Optional[random.Random] = None,
    ) -> "ScanAggregator":
        """Build an aggregator with the data sources selected in settings"""
        cert_source: CertificateSource
        if settings.TLS_SOURCE == "live":
            cert_source = LiveCertificateSource(timeout=settings.REQUEST_TIMEOUT)
        else:
            cert_source = SyntheticCertificateSource(rng=rng)

        threat_source: ThreatSource
        if settings.REPUTATION_BLOCKLIST:
            threat_source = BlocklistThreatSource(settings.REPUTATION_BLOCKLIST)
        else:
            threat_source = RandomThreatSource(flag_rate=settings.REPUTATION_FLAG_RATE, rng=rng)

        return cls(
            tls_inspector=TLSInspector(source=cert_source),
            header_analyzer=HeaderAnalyzer(),
            tech_detector=TechDetector(),
            reputation_checker=ReputationChecker(source=threat_source),
            request_timeout=settings.REQUEST_TIMEOUT,
            probe_timeout=settings.PROBE_TIMEOUT,
            user_agent=settings.USER_AGENT,
            transport=transport,
        )

    async def scan(self, target: ScanTarget) -> ScanResult:
        """
        Execute a complete scan.

        Returns:
            ScanResult with all four sub-results and the overall score
        """
        logger.info(f"Starting security scan for {target.url}")

        async with self._client() as client:
            ssl_result, headers, tech_stack, reputation = await asyncio.gather(
                self._run_probe(self.tls_inspector, target, client),
                self._run_probe(self.header_analyzer, target, client),
                self._run_probe(self.tech_detector, target, client),
                self._run_probe(self.reputation_checker, target, client),
            )

        overall_score = compute_overall_score(ssl_result, headers, tech_stack, reputation)

        result = ScanResult(
            url=target.url,
            ssl=ssl_result,
            headers=headers,
            tech_stack=tech_stack,
            reputation=reputation,
            overall_score=overall_score,
            scan_date=utc_timestamp(),
        )

        logger.info(
            f"Scan of {target.url} complete: overall={overall_score} "
            f"(ssl={ssl_result.score}, headers={headers.score}, "
            f"tech={tech_stack.score}, reputation={reputation.score})"
        )
        return result

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.request_timeout,
            follow_redirects=True,
            headers={"User-Agent": self.user_agent},
            transport=self.transport,
        )

    async def _run_probe(self, probe: BaseProbe, target: ScanTarget, client: httpx.AsyncClient):
        """Run one probe; a probe that overruns its timeout reports its fallback"""
        try:
            return await asyncio.wait_for(probe.run(target, client), timeout=self.probe_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"{probe.NAME} probe timed out after {self.probe_timeout}s for {target.url}")
            return probe.fallback()
