import pytest

from splitledger.config import Settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("SPLITLEDGER_MAX_PARTICIPANTS", "SPLITLEDGER_CORS_ORIGINS", "SPLITLEDGER_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings.from_env()

        assert settings.max_participants == 10
        assert settings.cors_origins == ["*"]
        assert settings.log_level == "INFO"

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("SPLITLEDGER_MAX_PARTICIPANTS", "4")
        monkeypatch.setenv("SPLITLEDGER_CORS_ORIGINS", "https://a.example, https://b.example")
        monkeypatch.setenv("SPLITLEDGER_LOG_LEVEL", "debug")

        settings = Settings.from_env()

        assert settings.max_participants == 4
        assert settings.cors_origins == ["https://a.example", "https://b.example"]
        assert settings.log_level == "DEBUG"

    def test_bad_integer_has_single_traceback(self, monkeypatch):
        monkeypatch.setenv("SPLITLEDGER_MAX_PARTICIPANTS", "many")

        with pytest.raises(ValueError, match="SPLITLEDGER_MAX_PARTICIPANTS") as exc:
            Settings.from_env()

        assert exc.value.__cause__ is None
        assert exc.value.__suppress_context__ is True
