"""
Tests for scanner schemas and settings
"""

import pytest
from pydantic import ValidationError

from app.core import config
from app.core.config import Settings, get_settings
from app.scanner.schemas import (
    ErrorResponse,
    Reputation,
    ScanResult,
    ScanTarget,
    SecurityHeaders,
    SSLResult,
    TechStack,
)


class TestScanTarget:
    def test_accepts_http_and_https(self):
        assert ScanTarget(url="http://example.com").scheme == "http"
        assert ScanTarget(url="https://example.com").is_secure is True

    @pytest.mark.parametrize("url", ["", "ftp://example.com", "example.com", "HTTPS://example.com", " https://x.io"])
    def test_rejects_other_urls(self, url):
        with pytest.raises(ValidationError):
            ScanTarget(url=url)

    def test_is_immutable(self):
        target = ScanTarget(url="https://example.com")
        with pytest.raises(ValidationError):
            target.url = "https://other.example"

    def test_hostname_and_port(self):
        target = ScanTarget(url="https://api.example.com:8443/v1")
        assert target.hostname == "api.example.com"
        assert target.port == 8443
        assert ScanTarget(url="http://example.com").port == 80

    def test_unparseable_hostname_is_none(self):
        assert ScanTarget(url="http://[::1").hostname is None


class TestRecords:
    def test_ssl_failed_record(self):
        assert SSLResult.failed().model_dump(by_alias=True) == {
            "valid": False,
            "issuer": "Unknown",
            "expiryDate": "N/A",
            "daysUntilExpiry": 0,
            "protocol": "Unknown",
            "score": 0,
        }

    def test_security_headers_wire_names(self):
        data = SecurityHeaders(hsts=True, score=20).model_dump(by_alias=True)
        assert list(data) == [
            "hsts", "csp", "xFrameOptions", "permissionsPolicy",
            "xContentTypeOptions", "referrerPolicy", "score",
        ]

    def test_score_range_enforced(self):
        with pytest.raises(ValidationError):
            TechStack(score=101)
        with pytest.raises(ValidationError):
            SecurityHeaders(score=-1)

    def test_negative_expiry_rejected(self):
        with pytest.raises(ValidationError):
            SSLResult(valid=True, issuer="x", expiry_date="2020-01-01",
                      days_until_expiry=-1, protocol="TLS 1.3", score=70)

    def test_reputation_consistency(self):
        assert Reputation.clean().model_dump() == {"safe": True, "threats": [], "score": 100}
        assert Reputation.flagged([]).threats == ["Potential phishing detected"]

        with pytest.raises(ValidationError):
            Reputation(safe=True, threats=["malware"], score=100)
        with pytest.raises(ValidationError):
            Reputation(safe=False, threats=[], score=0)
        with pytest.raises(ValidationError):
            Reputation(safe=False, threats=["malware"], score=40)

    def test_scan_result_wire_names(self):
        result = ScanResult(
            url="https://example.com",
            ssl=SSLResult.failed(),
            headers=SecurityHeaders(),
            tech_stack=TechStack.failed(),
            reputation=Reputation.clean(),
            overall_score=28,
            scan_date="2026-10-18T12:00:00.000Z",
        )

        data = result.model_dump(by_alias=True)

        assert set(data) == {"url", "ssl", "headers", "techStack", "reputation", "overallScore", "scanDate"}
        assert data["techStack"]["cms"] is None

    def test_accepts_camel_case_input(self):
        result = SSLResult.model_validate({
            "valid": True, "issuer": "x", "expiryDate": "2027-01-01",
            "daysUntilExpiry": 40, "protocol": "TLS 1.3", "score": 100,
        })
        assert result.days_until_expiry == 40

    def test_error_response_omits_missing_details(self):
        assert ErrorResponse(error="boom").model_dump(exclude_none=True) == {"error": "boom"}


class TestSettings:
    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.API_PREFIX == "/api"
        assert settings.TLS_SOURCE in ("synthetic", "live")
        assert 0.0 <= settings.REPUTATION_FLAG_RATE <= 1.0

    def test_log_level_normalised(self):
        assert Settings(LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"
        with pytest.raises(ValidationError):
            Settings(LOG_LEVEL="chatty")

    def test_blocklist_normalised(self):
        settings = Settings(REPUTATION_BLOCKLIST=[" Evil.Test. ", "", "x.io"])
        assert settings.REPUTATION_BLOCKLIST == ["evil.test", "x.io"]

    def test_flag_rate_bounds(self):
        with pytest.raises(ValidationError):
            Settings(REPUTATION_FLAG_RATE=2)

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("SCANNER_PROBE_TIMEOUT", "3.5")
        monkeypatch.setenv("SCANNER_TLS_SOURCE", "live")

        settings = Settings(_env_file=None)

        assert settings.PROBE_TIMEOUT == 3.5
        assert settings.TLS_SOURCE == "live"

    def test_settings_read_on_first_use(self, monkeypatch):
        assert not hasattr(config, "settings")

        get_settings.cache_clear()
        monkeypatch.setenv("SCANNER_PROBE_TIMEOUT", "7")
        try:
            first = get_settings()
            assert first.PROBE_TIMEOUT == 7.0
            assert get_settings() is first
        finally:
            get_settings.cache_clear()
