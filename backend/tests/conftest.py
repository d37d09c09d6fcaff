"""
Pytest configuration

Shared fixtures for the scanner tests. Remote sites are simulated with
``httpx.MockTransport`` so no test touches the network.
"""
from typing import Callable, Dict, Optional

import httpx
import pytest

from app.core.config import Settings
from app.scanner.schemas import CertificateInfo, ScanTarget
from app.scanner.sources import CertificateSource, RandomThreatSource


class StaticCertificateSource(CertificateSource):
    """Certificate source returning a fixed record"""

    def __init__(self, info: Optional[CertificateInfo] = None):
        self.info = info or CertificateInfo(
            issuer="Let's Encrypt",
            expiry_date="2027-01-01",
            days_until_expiry=90,
            protocol="TLS 1.3",
        )
        self.calls = 0

    async def query(self, target: ScanTarget) -> CertificateInfo:
        self.calls += 1
        return self.info


def site_transport(
    headers: Optional[Dict[str, str]] = None,
    body: str = "",
    status_code: int = 200,
) -> httpx.MockTransport:
    """Transport answering every request with the same response"""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, headers=headers or {}, text=body)

    return httpx.MockTransport(handler)


def failing_transport(exc_factory: Optional[Callable[[httpx.Request], Exception]] = None) -> httpx.MockTransport:
    """Transport raising a connection error for every request"""

    def handler(request: httpx.Request) -> httpx.Response:
        if exc_factory:
            raise exc_factory(request)
        raise httpx.ConnectError("connection refused", request=request)

    return httpx.MockTransport(handler)


@pytest.fixture
def https_target() -> ScanTarget:
    return ScanTarget(url="https://example.com")


@pytest.fixture
def http_target() -> ScanTarget:
    return ScanTarget(url="http://example.com")


@pytest.fixture
def hardened_headers() -> Dict[str, str]:
    """A response carrying all six scored security headers"""
    return {
        "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
        "Content-Security-Policy": "default-src 'self'",
        "X-Frame-Options": "DENY",
        "Permissions-Policy": "geolocation=()",
        "X-Content-Type-Options": "nosniff",
        "Referrer-Policy": "no-referrer",
    }


@pytest.fixture
def static_cert_source() -> StaticCertificateSource:
    return StaticCertificateSource()


@pytest.fixture
def clean_threat_source() -> RandomThreatSource:
    return RandomThreatSource(flag_rate=0.0)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        REQUEST_TIMEOUT=2.0,
        PROBE_TIMEOUT=5.0,
        TLS_SOURCE="synthetic",
        REPUTATION_FLAG_RATE=0.0,
        REPUTATION_BLOCKLIST=[],
    )
