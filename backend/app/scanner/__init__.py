"""
Security Scanner Module

Runs four independent probes against a URL and combines them into a
weighted security score:
- TLS/certificate validity
- Security header presence
- Technology fingerprinting
- Hostname reputation
"""

from .aggregator import ScanAggregator, compute_overall_score, score_label, SCORE_WEIGHTS
from .base import BaseProbe
from .header_analyzer import HeaderAnalyzer, analyse_security_headers
from .reputation import ReputationChecker
from .tech_detector import TechDetector, fingerprint_response
from .tls_inspector import TLSInspector, score_tls
from .sources import (
    CertificateSource,
    SyntheticCertificateSource,
    LiveCertificateSource,
    ThreatSource,
    RandomThreatSource,
    BlocklistThreatSource,
)
from .schemas import (
    ScanTarget,
    SSLResult,
    SecurityHeaders,
    TechStack,
    Reputation,
    ScanResult,
    ErrorResponse,
)

__all__ = [
    'ScanAggregator',
    'compute_overall_score',
    'score_label',
    'SCORE_WEIGHTS',
    'BaseProbe',
    'HeaderAnalyzer',
    'analyse_security_headers',
    'ReputationChecker',
    'TechDetector',
    'fingerprint_response',
    'TLSInspector',
    'score_tls',
    'CertificateSource',
    'SyntheticCertificateSource',
    'LiveCertificateSource',
    'ThreatSource',
    'RandomThreatSource',
    'BlocklistThreatSource',
    'ScanTarget',
    'SSLResult',
    'SecurityHeaders',
    'TechStack',
    'Reputation',
    'ScanResult',
    'ErrorResponse',
]
