"""
Settings 검증 테스트
"""

import pytest
from pydantic import ValidationError

from src.config import DEFAULT_SECURITY_POLICIES_PATH, Settings


class TestSettings:
    def test_defaults(self):
        settings = Settings(_env_file=None)
        assert settings.permission_cache_ttl_seconds == 300
        assert settings.auth_enabled is True
        assert settings.security_policies_path == str(DEFAULT_SECURITY_POLICIES_PATH)

    def test_log_level_is_normalized(self):
        assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"

    def test_invalid_environment_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, environment="qa")

    def test_cache_ttl_bounds(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, permission_cache_ttl_seconds=0)

    def test_production_rejects_debug(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, environment="production", debug=True)

    def test_env_var_override(self, monkeypatch):
        monkeypatch.setenv("PERMISSION_CACHE_TTL_SECONDS", "60")
        assert Settings(_env_file=None).permission_cache_ttl_seconds == 60
