import pytest

from treasurer_dashboard.api.server import create_app
from treasurer_dashboard.config import Config, ConfigError, load_config


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "TREASURER_DATABASE_URL",
        "DATABASE_URL",
        "TREASURER_DB_PATH",
        "TREASURER_JWT_SECRET",
        "API_PORT",
        "PORT",
        "CORS_ALLOW_ORIGINS",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_secret_is_required(clean_env):
    with pytest.raises(ConfigError):
        load_config().validate()


def test_blank_secret_is_required(clean_env):
    clean_env.setenv("TREASURER_JWT_SECRET", "   ")
    with pytest.raises(ConfigError):
        load_config().validate()


def test_app_refuses_to_start_without_secret(clean_env, tmp_path):
    clean_env.setenv("TREASURER_DB_PATH", str(tmp_path / "x.sqlite"))
    with pytest.raises(ConfigError):
        create_app()
    # Nothing was created before the check failed.
    assert not (tmp_path / "x.sqlite").exists()


def test_env_values_are_read(clean_env):
    clean_env.setenv("TREASURER_JWT_SECRET", "from-env-secret-0123456789abcdef0123")
    clean_env.setenv("DATABASE_URL", "postgresql://u:p@db:5432/treasurer")
    clean_env.setenv("PORT", "8080")
    clean_env.setenv("CORS_ALLOW_ORIGINS", "http://a.example, http://b.example")
    cfg = load_config().validate()
    assert cfg.AUTH_JWT_SECRET == "from-env-secret-0123456789abcdef0123"
    assert cfg.DB_DSN == "postgresql://u:p@db:5432/treasurer"
    assert cfg.API_PORT == 8080
    assert cfg.cors_origins() == ["http://a.example", "http://b.example"]


def test_api_port_wins_over_port(clean_env):
    clean_env.setenv("API_PORT", "9000")
    clean_env.setenv("PORT", "8080")
    assert load_config().API_PORT == 9000


def test_non_integer_port_is_a_config_error(clean_env):
    clean_env.setenv("API_PORT", "eighty")
    with pytest.raises(ConfigError):
        load_config()


def test_out_of_range_port(clean_env):
    clean_env.setenv("TREASURER_JWT_SECRET", "s" * 40)
    with pytest.raises(ConfigError):
        Config(API_PORT=70000).validate()


def test_token_lifetime_is_not_configurable(clean_env):
    clean_env.setenv("AUTH_TOKEN_EXPIRE_MINUTES", "600")
    cfg = load_config()
    assert not hasattr(cfg, "AUTH_TOKEN_EXPIRE_MINUTES")
