"""
Postboard Backend — Settings Tests
"""

import pytest
from pydantic import ValidationError

from postboard.config import Settings


class TestSettings:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.delenv("PORT", raising=False)
        monkeypatch.delenv("BACKEND_PORT", raising=False)

        config = Settings(_env_file=None)

        assert config.database_url == "sqlite+aiosqlite:///./blog.db"
        assert config.port == 3001
        assert config.host == "0.0.0.0"
        assert config.api_prefix == "/api"
        assert config.cors_origins_list == ["*"]
        assert config.is_sqlite

    @pytest.mark.parametrize("variable", ["PORT", "BACKEND_PORT"])
    def test_port_from_environment(self, monkeypatch, variable):
        monkeypatch.setenv(variable, "4000")

        assert Settings(_env_file=None).port == 4000

    def test_log_level_is_normalized(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level_rejected(self):
        with pytest.raises(ValidationError):
            Settings(log_level="chatty")

    @pytest.mark.parametrize(
        "raw, expected",
        [("/api", "/api"), ("api/", "/api"), (" /v2/ ", "/v2"), ("", "")],
    )
    def test_api_prefix_normalized(self, raw, expected):
        assert Settings(api_prefix=raw).api_prefix == expected

    def test_cors_origins_split(self):
        config = Settings(cors_origins="http://a.test, http://b.test,")

        assert config.cors_origins_list == ["http://a.test", "http://b.test"]
