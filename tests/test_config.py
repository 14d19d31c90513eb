"""
Settings tests.
Covers: environment parsing, derived solution name, SQLAlchemy URL and ADO.NET connection string.
"""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from tiergen.core.config import Settings
from tiergen.core.exceptions import ConfigurationError

_CLEAN = {
    "DB_SERVER": None,
    "DB_NAME": None,
    "DB_USER": None,
    "DB_PASSWORD": None,
    "DATABASE_URL": None,
}


def _settings(**overrides: object) -> Settings:
    return Settings(_env_file=None, **{**_CLEAN, **overrides})


class TestParsing:
    def test_defaults(self) -> None:
        config = _settings()
        assert config.APP_NAME == "TierGen"
        assert config.TARGET_FRAMEWORK == "net48"
        assert config.LANG_VERSION == "8.0"
        assert config.DB_TRUSTED_CONNECTION is True
        assert config.EXCLUDED_SCHEMAS == ["sys", "INFORMATION_SCHEMA"]

    def test_excluded_schemas_from_comma_list(self) -> None:
        assert _settings(EXCLUDED_SCHEMAS="sys, audit ,").EXCLUDED_SCHEMAS == ["sys", "audit"]

    def test_excluded_schemas_from_json(self) -> None:
        assert _settings(EXCLUDED_SCHEMAS='["staging"]').EXCLUDED_SCHEMAS == ["staging"]

    def test_excluded_schemas_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("EXCLUDED_SCHEMAS", "sys,INFORMATION_SCHEMA,archive")
        assert _settings().EXCLUDED_SCHEMAS == ["sys", "INFORMATION_SCHEMA", "archive"]

    def test_log_level_is_normalized(self) -> None:
        assert _settings(LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"
        with pytest.raises(ValidationError):
            _settings(LOG_LEVEL="chatty")

    def test_password_without_user_is_rejected(self) -> None:
        with pytest.raises(ValidationError, match="DB_USER is required"):
            _settings(DB_TRUSTED_CONNECTION=False, DB_PASSWORD="secret")


class TestDerivedValues:
    def test_solution_name_prefers_database_name(self) -> None:
        assert _settings(DB_NAME="Shop", DATABASE_URL="sqlite+aiosqlite:///other.db").solution_name == "Shop"

    def test_solution_name_from_url(self) -> None:
        assert _settings(DATABASE_URL="sqlite+aiosqlite:///data/shop.db").solution_name == "shop"

    def test_solution_name_required(self) -> None:
        with pytest.raises(ConfigurationError):
            _ = _settings().solution_name

    def test_trusted_sqlalchemy_url(self) -> None:
        url = _settings(DB_SERVER="sql01", DB_NAME="Shop").sqlalchemy_url
        assert url.drivername == "mssql+aioodbc"
        assert url.host == "sql01"
        assert url.database == "Shop"
        assert url.username is None
        assert url.query["Trusted_Connection"] == "yes"
        assert url.query["driver"] == "ODBC Driver 18 for SQL Server"

    def test_sql_auth_sqlalchemy_url(self) -> None:
        url = _settings(
            DB_SERVER="sql01", DB_NAME="Shop", DB_TRUSTED_CONNECTION=False, DB_USER="sa", DB_PASSWORD="pw"
        ).sqlalchemy_url
        assert url.username == "sa"
        assert url.password == "pw"
        assert "Trusted_Connection" not in url.query

    def test_database_url_wins(self) -> None:
        url = _settings(DB_SERVER="sql01", DB_NAME="Shop", DATABASE_URL="sqlite+aiosqlite:///x.db").sqlalchemy_url
        assert url.drivername == "sqlite+aiosqlite"

    def test_sqlalchemy_url_requires_server(self) -> None:
        with pytest.raises(ConfigurationError):
            _ = _settings(DB_NAME="Shop").sqlalchemy_url

    def test_ado_connection_strings(self) -> None:
        assert _settings(DB_SERVER="sql01", DB_NAME="Shop").ado_connection_string == (
            "Server=sql01;Database=Shop;Integrated Security=True;"
        )
        assert _settings(
            DB_SERVER="sql01", DB_NAME="Shop", DB_TRUSTED_CONNECTION=False, DB_USER="sa", DB_PASSWORD="pw"
        ).ado_connection_string == "Server=sql01;Database=Shop;User Id=sa;Password=pw;"
