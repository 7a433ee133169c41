"""Service tests: health endpoints and config loading."""

from __future__ import annotations

import logging
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError

from webtext.core.config import Settings
from webtext.main import app
from webtext.services.extractors import ExtractionConfig


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def client() -> TestClient:
    return TestClient(app, raise_server_exceptions=False)


# ---------------------------------------------------------------------------
# Health endpoint tests
# ---------------------------------------------------------------------------


class TestHealthEndpoints:
    def test_root_health(self, client: TestClient) -> None:
        """GET /health returns 200 with status ok."""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["name"] == "webtext-service"
        assert "git_sha" in data

    def test_api_v1_health(self, client: TestClient) -> None:
        """GET /api/v1/health returns 200 with status ok."""
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert "environment" in data

    def test_version(self, client: TestClient) -> None:
        """GET /api/v1/version returns name, version and git sha."""
        response = client.get("/api/v1/version")
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "webtext-service"
        assert data["version"] == "0.1.0"
        assert "git_sha" in data

    def test_git_sha_unknown_outside_repo(self, client: TestClient) -> None:
        """The git sha falls back to 'unknown' when git is unavailable."""
        with patch(
            "webtext.routes.health.subprocess.check_output",
            side_effect=FileNotFoundError(),
        ):
            response = client.get("/health")
        assert response.json()["git_sha"] == "unknown"


# ---------------------------------------------------------------------------
# Config tests
# ---------------------------------------------------------------------------


class TestSettings:
    def test_defaults(self) -> None:
        """Settings load with extraction defaults."""
        s = Settings(_env_file=None)
        assert s.port == 15020
        assert s.extraction_timeout_ms == 30_000
        assert s.extraction_max_attempts == 3
        assert s.browser_auto_install is True

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Environment variables override defaults."""
        monkeypatch.setenv("EXTRACTION_TIMEOUT_MS", "45000")
        monkeypatch.setenv("EXTRACTION_MAX_ATTEMPTS", "5")
        monkeypatch.setenv("BROWSER_AUTO_INSTALL", "false")
        s = Settings(_env_file=None)
        assert s.extraction_timeout_ms == 45_000
        assert s.extraction_max_attempts == 5
        assert s.browser_auto_install is False

    def test_invalid_log_level_falls_back(self) -> None:
        """An unknown log level falls back to INFO."""
        s = Settings(_env_file=None, log_level="verbose")
        assert s.log_level == "INFO"
        assert s.get_log_level_int() == logging.INFO

    def test_log_level_normalized(self) -> None:
        s = Settings(_env_file=None, log_level=" debug ")
        assert s.log_level == "DEBUG"
        assert s.get_log_level_int() == logging.DEBUG

    @pytest.mark.parametrize("field", ["extraction_timeout_ms", "extraction_max_attempts"])
    def test_non_positive_values_rejected(self, field: str) -> None:
        """Zero timeouts or attempt counts are configuration errors."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: 0})

    def test_cors_origins_comma_separated(self) -> None:
        s = Settings(_env_file=None, cors_origins="http://a.test, http://b.test,")
        assert s.get_cors_origins() == ["http://a.test", "http://b.test"]

    def test_cors_origins_json_list(self) -> None:
        s = Settings(_env_file=None, cors_origins='["http://a.test"]')
        assert s.get_cors_origins() == ["http://a.test"]

    def test_extraction_config_from_settings(self) -> None:
        """Engine config is derived from service settings."""
        s = Settings(
            _env_file=None,
            extraction_timeout_ms=20_000,
            extraction_wait_for_network_idle=True,
        )
        config = ExtractionConfig.from_settings(s)
        assert config.timeout_ms == 20_000
        assert config.wait_for_network_idle is True
        assert config.max_attempts == 3
