"""Tests for the audit logger and settings."""

from lifeledger.audit import AuditLogger
from lifeledger.config import AppSettings, StorageSettings, get_settings, validate_all_settings
from lifeledger.models.audit import AuditEventBuilder, AuditEventType


class TestAuditLogger:
    def test_history_newest_first(self):
        audit = AuditLogger()
        audit.log(AuditEventBuilder.login_succeeded("u1"))
        audit.log(AuditEventBuilder.logged_out("u1"))

        events = audit.recent_events()
        assert [e.event_type for e in events] == [
            AuditEventType.LOGGED_OUT,
            AuditEventType.LOGIN_SUCCEEDED,
        ]

    def test_history_is_bounded(self):
        audit = AuditLogger(history_size=3)
        for i in range(5):
            audit.log(AuditEventBuilder.record_saved("habits", str(i), "u1"))
        assert [e.entity_id for e in audit.recent_events()] == ["4", "3", "2"]

    def test_helpers(self):
        audit = AuditLogger()
        audit.log_validation_failed("habit", [{"field": "title"}], "u1")
        audit.log_external_service_error("gemini", "timeout")
        failed, error = reversed(audit.recent_events())
        assert failed.event_type is AuditEventType.VALIDATION_FAILED
        assert error.details["service"] == "gemini"


class TestSettings:
    def test_storage_defaults(self):
        settings = StorageSettings()
        assert settings.backend == "json"
        assert settings.json_path.endswith("data.json")

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("STORAGE_BACKEND", "memory")
        assert StorageSettings().backend == "memory"

    def test_supported_currencies_list(self, monkeypatch):
        monkeypatch.setenv("SUPPORTED_CURRENCIES", "usd, eur")
        assert AppSettings().supported_currencies_list == ["USD", "EUR"]

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

    def test_validate_all_reports_missing_gemini_key(self):
        status = validate_all_settings()
        assert status["storage"] is True
        assert status["gemini"] is False
        assert "gemini_error" in status
