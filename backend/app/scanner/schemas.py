"""
Scanner Schemas

Pydantic models for scan targets, per-probe results and the aggregated
scan result. All records are immutable and serialise with the camelCase
field names of the public JSON contract (``model_dump(by_alias=True)``).
"""

from typing import List, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


ALLOWED_SCHEMES = ("http://", "https://")
INVALID_URL_MESSAGE = "Invalid URL. Must start with http:// or https://"
SCAN_FAILED_MESSAGE = "Failed to perform security scan"
DEFAULT_THREAT_LABEL = "Potential phishing detected"


class RecordModel(BaseModel):
    """Base for immutable value records with camelCase wire names"""
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ScanTarget(RecordModel):
    """The URL handed to every probe"""
    url: str

    @field_validator('url')
    @classmethod
    def validate_url(cls, v):
        if not v or not v.startswith(ALLOWED_SCHEMES):
            raise ValueError(INVALID_URL_MESSAGE)
        return v

    @property
    def scheme(self) -> str:
        return "https" if self.url.startswith("https://") else "http"

    @property
    def is_secure(self) -> bool:
        return self.scheme == "https"

    @property
    def hostname(self) -> Optional[str]:
        """Hostname of the target, or None when it cannot be parsed"""
        try:
            return urlparse(self.url).hostname or None
        except ValueError:
            return None

    @property
    def port(self) -> int:
        try:
            port = urlparse(self.url).port
        except ValueError:
            port = None
        return port or (443 if self.is_secure else 80)


class SSLResult(RecordModel):
    """TLS / certificate probe result"""
    valid: bool
    issuer: str
    expiry_date: str
    days_until_expiry: int = Field(ge=0)
    protocol: str
    score: int = Field(ge=0, le=100)

    @classmethod
    def failed(cls) -> "SSLResult":
        return cls(
            valid=False,
            issuer="Unknown",
            expiry_date="N/A",
            days_until_expiry=0,
            protocol="Unknown",
            score=0,
        )


class SecurityHeaders(RecordModel):
    """Presence flags for the six scored security headers"""
    hsts: bool = False
    csp: bool = False
    x_frame_options: bool = False
    permissions_policy: bool = False
    x_content_type_options: bool = False
    referrer_policy: bool = False
    score: int = Field(default=0, ge=0, le=100)

    @classmethod
    def failed(cls) -> "SecurityHeaders":
        return cls()


class TechStack(RecordModel):
    """Technology fingerprint result"""
    server: str = "Unknown"
    framework: List[str] = Field(default_factory=list)
    cms: Optional[str] = None
    score: int = Field(ge=0, le=100)

    @classmethod
    def failed(cls) -> "TechStack":
        return cls(server="Unknown", framework=[], cms=None, score=50)


class Reputation(RecordModel):
    """Reputation verdict; score is 100 when safe and 0 otherwise"""
    safe: bool
    threats: List[str] = Field(default_factory=list)
    score: int = Field(ge=0, le=100)

    @model_validator(mode='after')
    def check_verdict_consistency(self):
        if self.safe and (self.threats or self.score != 100):
            raise ValueError('a safe verdict carries no threats and score 100')
        if not self.safe and (not self.threats or self.score != 0):
            raise ValueError('an unsafe verdict carries at least one threat and score 0')
        return self

    @classmethod
    def clean(cls) -> "Reputation":
        return cls(safe=True, threats=[], score=100)

    @classmethod
    def flagged(cls, threats: List[str]) -> "Reputation":
        return cls(safe=False, threats=list(threats) or [DEFAULT_THREAT_LABEL], score=0)


class ScanResult(RecordModel):
    """Aggregated result of one scan request"""
    url: str
    ssl: SSLResult
    headers: SecurityHeaders
    tech_stack: TechStack
    reputation: Reputation
    overall_score: int = Field(ge=0, le=100)
    scan_date: str


class ErrorResponse(RecordModel):
    """Error envelope returned with 400 / 500 responses"""
    error: str
    details: Optional[str] = None


# Data source payloads

class CertificateInfo(RecordModel):
    """What a certificate source reports about the target"""
    issuer: str
    expiry_date: str
    days_until_expiry: int = Field(ge=0)
    protocol: str


class ThreatVerdict(RecordModel):
    """What a threat source reports about a hostname"""
    flagged: bool = False
    labels: List[str] = Field(default_factory=list)
