"""
Tests for application settings
"""

from hireflow.config import Settings, get_settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("MASTER_DATABASE_NAME", "TENANT_DATABASE_PREFIX", "SUPER_ADMIN_PATH_PREFIX"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings(_env_file=None)

        assert settings.master_database_name == "master_tenant_db"
        assert settings.tenant_database_prefix == "tenant_"
        assert settings.super_admin_path_prefix == "/api/super-admin"
        assert settings.jwt_algorithm == "HS256"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("PRIMARY_DOMAIN", "hire.example.io")
        monkeypatch.setenv("DB_POOL_SIZE", "3")
        monkeypatch.setenv("MASTER_INIT_ON_STARTUP", "true")

        settings = Settings(_env_file=None)

        assert settings.primary_domain == "hire.example.io"
        assert settings.db_pool_size == 3
        assert settings.master_init_on_startup is True

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()
