"""
TLS Inspector Module

TLS/certificate probe. Confirms the target answers a HEAD request, then
scores the scheme, certificate lifetime and protocol reported by the
configured certificate source.
"""

from typing import Optional

import httpx

from .base import BaseProbe
from .schemas import CertificateInfo, ScanTarget, SSLResult
from .sources import CertificateSource, SyntheticCertificateSource


# Score contributions
SECURE_SCHEME_POINTS = 40
EXPIRY_WINDOW_POINTS = 30
MODERN_PROTOCOL_POINTS = 30

#: Certificates expiring within this many days earn no lifetime points
EXPIRY_WARNING_DAYS = 30


def score_tls(is_secure: bool, days_until_expiry: int, protocol: str) -> int:
    """
    Score a TLS configuration.

    Args:
        is_secure: Whether the target uses the https scheme
        days_until_expiry: Days left on the certificate
        protocol: Protocol label, e.g. "TLS 1.3"

    Returns:
        Score between 0 and 100
    """
    score = 0
    if is_secure:
        score += SECURE_SCHEME_POINTS
    if days_until_expiry > EXPIRY_WARNING_DAYS:
        score += EXPIRY_WINDOW_POINTS
    if "1.3" in protocol:
        score += MODERN_PROTOCOL_POINTS
    return min(score, 100)


class TLSInspector(BaseProbe[SSLResult]):
    """
    TLS/certificate probe.

    Features:
    - Reachability check (HEAD request)
    - Scheme validity (https only)
    - Certificate issuer and expiry via a pluggable source
    - Protocol labelling
    """

    NAME = "ssl"

    def __init__(self, source: Optional[CertificateSource] = None):
        """
        Initialize TLS inspector.

        Args:
            source: Certificate data source (synthetic by default)
        """
        super().__init__()
        self.source = source or SyntheticCertificateSource()

    async def _execute(self, target: ScanTarget, client: httpx.AsyncClient) -> SSLResult:
        await client.head(target.url)

        cert: CertificateInfo = await self.source.query(target)

        return SSLResult(
            valid=target.is_secure,
            issuer=cert.issuer,
            expiry_date=cert.expiry_date,
            days_until_expiry=cert.days_until_expiry,
            protocol=cert.protocol,
            score=score_tls(target.is_secure, cert.days_until_expiry, cert.protocol),
        )

    def fallback(self) -> SSLResult:
        return SSLResult.failed()
