import pytest
from pydantic import ValidationError

from smartplan.app import create_app
from smartplan.config import AppSettings


def test_log_level_read_from_environment(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("SMARTPLAN_LOG_LEVEL", "debug")
    monkeypatch.setenv("SMARTPLAN_CORS_ORIGINS", "https://plan.example, ")

    settings = AppSettings.from_env()

    assert settings.log_level == "DEBUG"
    assert settings.cors_origins == ["https://plan.example"]


def test_unknown_log_level_is_rejected_before_app_starts(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("SMARTPLAN_LOG_LEVEL", "loud")

    with pytest.raises(ValidationError):
        AppSettings.from_env()
    with pytest.raises(ValidationError):
        create_app()


def test_app_uses_configured_log_level():
    app = create_app(AppSettings(log_level="WARNING"))
    assert app.logger.level == 30
