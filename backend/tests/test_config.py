import pytest
from pydantic import ValidationError

from fareview.config import Settings


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("AMADEUS_CLIENT_ID", "abc")
    monkeypatch.setenv("AMADEUS_CLIENT_SECRET", "xyz")
    monkeypatch.setenv("AMADEUS_ENV", "Production")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("CORS_ORIGINS", "http://localhost:3000, https://gotreep.netlify.app,")

    cfg = Settings(_env_file=None)
    assert cfg.amadeus_client_id == "abc"
    assert cfg.amadeus_env == "production"
    assert cfg.amadeus_host == "https://api.amadeus.com"
    assert cfg.port == 8080
    assert cfg.allowed_origins == ["http://localhost:3000", "https://gotreep.netlify.app"]


def test_test_environment_uses_test_host(monkeypatch):
    monkeypatch.setenv("AMADEUS_ENV", "test")
    monkeypatch.delenv("AMADEUS_BASE_URL", raising=False)

    cfg = Settings(_env_file=None)
    assert cfg.amadeus_host == "https://test.api.amadeus.com"


def test_base_url_override(monkeypatch):
    monkeypatch.setenv("AMADEUS_BASE_URL", "http://localhost:9000/")

    assert Settings(_env_file=None).amadeus_host == "http://localhost:9000"


@pytest.mark.parametrize("missing", ["AMADEUS_CLIENT_ID", "AMADEUS_CLIENT_SECRET"])
def test_missing_credentials_prevent_startup(monkeypatch, missing):
    monkeypatch.delenv(missing, raising=False)

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_blank_credentials_are_rejected(monkeypatch):
    monkeypatch.setenv("AMADEUS_CLIENT_SECRET", "   ")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)
