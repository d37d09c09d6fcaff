"""
Probe Data Sources

Pluggable back ends for the probes whose data does not come from the HTTP
response itself: certificate details for the TLS probe and threat verdicts
for the reputation probe.

The synthetic sources reproduce the scanner's reference behaviour (random
expiry window, 10% flag rate). ``LiveCertificateSource`` reads the peer
certificate over a real TLS handshake, and ``BlocklistThreatSource`` checks
hostnames against a configured list.
"""

import abc
import asyncio
import logging
import random
import socket
import ssl
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from cryptography import x509
from cryptography.x509.oid import NameOID

from .schemas import CertificateInfo, ScanTarget, ThreatVerdict, DEFAULT_THREAT_LABEL

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Certificate sources
# ---------------------------------------------------------------------------

class CertificateSource(abc.ABC):
    """Supplies certificate details for a target"""

    @abc.abstractmethod
    async def query(self, target: ScanTarget) -> CertificateInfo:
        """Return certificate details for ``target``. May raise on failure."""


class SyntheticCertificateSource(CertificateSource):
    """
    Stand-in certificate source.

    Draws the expiry window uniformly from [30, 395) days and labels the
    protocol from the URL scheme alone.
    """

    MIN_DAYS = 30
    MAX_DAYS = 395

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    async def query(self, target: ScanTarget) -> CertificateInfo:
        days = self.rng.randrange(self.MIN_DAYS, self.MAX_DAYS)
        expiry = datetime.now(timezone.utc) + timedelta(days=days)

        return CertificateInfo(
            issuer="Let's Encrypt" if target.is_secure else "Unknown",
            expiry_date=expiry.date().isoformat(),
            days_until_expiry=days,
            protocol="TLS 1.3" if target.is_secure else "TLS 1.2",
        )


class LiveCertificateSource(CertificateSource):
    """
    Certificate source backed by a real TLS handshake.

    Reads the leaf certificate and negotiated protocol. The chain is not
    verified; only issuer, expiry and protocol are reported.
    """

    def __init__(self, timeout: float = 10.0):
        self.timeout = timeout

    async def query(self, target: ScanTarget) -> CertificateInfo:
        if not target.is_secure:
            return CertificateInfo(
                issuer="Unknown",
                expiry_date="N/A",
                days_until_expiry=0,
                protocol="Unknown",
            )

        host = target.hostname
        if not host:
            raise ValueError(f"Cannot resolve hostname from {target.url}")

        # Run in thread pool to avoid blocking
        loop = asyncio.get_running_loop()
        cert_der, tls_version = await loop.run_in_executor(
            None,
            self._handshake_sync,
            host,
            target.port,
        )
        return self._parse_certificate(cert_der, tls_version)

    def _handshake_sync(self, host: str, port: int):
        """Synchronous TLS handshake returning (DER certificate, protocol)"""
        context = ssl.create_default_context()
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE

        with socket.create_connection((host, port), timeout=self.timeout) as sock:
            with context.wrap_socket(sock, server_hostname=host) as ssock:
                cert_der = ssock.getpeercert(binary_form=True)
                if not cert_der:
                    raise ssl.SSLError(f"No certificate presented by {host}:{port}")
                return cert_der, ssock.version()

    def _parse_certificate(self, cert_der: bytes, tls_version: Optional[str]) -> CertificateInfo:
        cert = x509.load_der_x509_certificate(cert_der)

        not_after = cert.not_valid_after_utc if hasattr(cert, 'not_valid_after_utc') else cert.not_valid_after
        if not_after.tzinfo is None:
            not_after = not_after.replace(tzinfo=timezone.utc)

        days_until_expiry = (not_after - datetime.now(timezone.utc)).days

        return CertificateInfo(
            issuer=_issuer_name(cert),
            expiry_date=not_after.date().isoformat(),
            days_until_expiry=max(days_until_expiry, 0),
            protocol=format_protocol(tls_version),
        )


def _issuer_name(cert: x509.Certificate) -> str:
    """Prefer the issuer organisation, then its common name"""
    for oid in (NameOID.ORGANIZATION_NAME, NameOID.COMMON_NAME):
        attrs = cert.issuer.get_attributes_for_oid(oid)
        if attrs:
            return str(attrs[0].value)
    return cert.issuer.rfc4514_string() or "Unknown"


def format_protocol(tls_version: Optional[str]) -> str:
    """
    Turn an ``ssl`` version string into a display label.

    ``"TLSv1.3"`` -> ``"TLS 1.3"``, ``"TLSv1"`` -> ``"TLS 1.0"``.
    """
    if not tls_version:
        return "Unknown"
    if tls_version.startswith("TLSv"):
        number = tls_version[len("TLSv"):]
        if "." not in number:
            number = f"{number}.0"
        return f"TLS {number}"
    return tls_version


# ---------------------------------------------------------------------------
# Threat sources
# ---------------------------------------------------------------------------

class ThreatSource(abc.ABC):
    """Supplies a reputation verdict for a hostname"""

    @abc.abstractmethod
    async def query(self, hostname: str) -> ThreatVerdict:
        """Return the verdict for ``hostname``"""


class RandomThreatSource(ThreatSource):
    """Stand-in threat feed flagging a fixed share of hostnames at random"""

    def __init__(self, flag_rate: float = 0.1, rng: Optional[random.Random] = None):
        if not 0.0 <= flag_rate <= 1.0:
            raise ValueError('flag_rate must be between 0 and 1')
        self.flag_rate = flag_rate
        self.rng = rng or random.Random()

    async def query(self, hostname: str) -> ThreatVerdict:
        if self.rng.random() < self.flag_rate:
            return ThreatVerdict(flagged=True, labels=[DEFAULT_THREAT_LABEL])
        return ThreatVerdict(flagged=False)


class BlocklistThreatSource(ThreatSource):
    """Flags hostnames listed in a local blocklist, including their subdomains"""

    LABEL = "Listed in local blocklist"

    def __init__(self, blocked_hosts: Iterable[str]):
        self.blocked_hosts = {h.strip().lower().rstrip('.') for h in blocked_hosts if h.strip()}

    async def query(self, hostname: str) -> ThreatVerdict:
        host = hostname.lower().rstrip('.')
        labels = host.split('.')

        for i in range(len(labels)):
            candidate = '.'.join(labels[i:])
            if candidate in self.blocked_hosts:
                logger.info(f"{hostname} matched blocklist entry {candidate}")
                return ThreatVerdict(flagged=True, labels=[self.LABEL])

        return ThreatVerdict(flagged=False)
