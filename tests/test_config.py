"""Tests for settings loading."""

from pathlib import Path

from response2files.config import Settings, get_settings


class TestSettings:
    def test_defaults(self):
        settings = Settings(_env_file=None)
        assert settings.max_response_size == 500_000
        assert settings.max_json_repair_size == 500_000
        assert settings.aggressive_recovery is True
        assert settings.auto_repair_max_rounds == 3
        assert settings.min_file_length == 10
        assert settings.fallback_min_block_length == 50
        assert settings.log_dir == Path("./logs")
        assert settings.log_to_file is False

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("MAX_RESPONSE_SIZE", "1000")
        monkeypatch.setenv("AGGRESSIVE_RECOVERY", "false")
        settings = get_settings()
        assert settings.max_response_size == 1000
        assert settings.aggressive_recovery is False
