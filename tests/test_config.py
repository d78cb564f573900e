from src.config import AppConfig, DatabaseConfig, Environment


def test_postgresql_url_is_rewritten_to_async_driver() -> None:
    config = DatabaseConfig(DATABASE_URL="postgresql://app:secret@db:5432/threads")

    assert config.connection_string == "postgresql+asyncpg://app:secret@db:5432/threads"
    assert config.sync_connection_string == "postgresql+psycopg://app:secret@db:5432/threads"
    assert not config.is_sqlite


def test_heroku_style_postgres_scheme_is_accepted() -> None:
    config = DatabaseConfig(DATABASE_URL="postgres://app@db/threads")

    assert config.connection_string == "postgresql+asyncpg://app@db/threads"


def test_sqlite_url_uses_aiosqlite_and_plain_sqlite_for_migrations() -> None:
    config = DatabaseConfig(DATABASE_URL="sqlite:///./threads.db")

    assert config.connection_string == "sqlite+aiosqlite:///./threads.db"
    assert config.sync_connection_string == "sqlite:///./threads.db"
    assert config.is_sqlite


def test_url_is_assembled_from_parts_without_database_url(monkeypatch) -> None:
    monkeypatch.delenv("DATABASE_URL", raising=False)

    config = DatabaseConfig(
        host="db",
        port=5433,
        database="threads",
        username="app",
        password="secret",
    )

    assert config.connection_string == "postgresql+asyncpg://app:secret@db:5433/threads"
    assert config.sync_connection_string == "postgresql+psycopg://app:secret@db:5433/threads"


def test_cors_origins_accept_comma_separated_and_json() -> None:
    comma = AppConfig(cors_origins="http://a.test, http://b.test")
    as_json = AppConfig(cors_origins='["http://a.test"]')

    assert comma.cors_origins == ["http://a.test", "http://b.test"]
    assert as_json.cors_origins == ["http://a.test"]


def test_production_environment_comes_from_app_environment(monkeypatch) -> None:
    monkeypatch.setenv("APP_ENVIRONMENT", "production")

    assert AppConfig().environment is Environment.PRODUCTION
