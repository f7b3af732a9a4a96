"""
Unit tests for Settings.
"""

from config import Settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        settings = Settings(_env_file=None)

        assert settings.database_url.startswith("sqlite:///")
        assert settings.database_url.endswith("mastery.db")
        assert settings.is_sqlite
        assert settings.curriculum_dir is None
        assert settings.default_profile_id == "default"
        assert settings.log_level == "WARNING"

    def test_environment_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DATABASE_URL", "postgresql://localhost/sproutling")
        monkeypatch.setenv("CURRICULUM_DIR", str(tmp_path))
        monkeypatch.setenv("LOG_LEVEL", "debug")
        settings = Settings(_env_file=None)

        assert not settings.is_sqlite
        assert settings.curriculum_dir == tmp_path
        assert settings.log_level == "DEBUG"
