# ==============================================
# Tests for Configuration Loading
# ==============================================

import pytest

from term_locks import config

ENV_VARS = (
    "MYSQL_HOST", "MYSQL_PORT", "MYSQL_TABLE_PREFIX", "MONGO_USER", "MONGO_PASSWORD",
    "TERM_LOCKS_BACKEND", "TERM_LOCKS_META_KEY", "TERM_LOCKS_TAXONOMIES", "TERM_LOCKS_MULTISITE",
)


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch):
    monkeypatch.setattr(config, "_config_instance", None)
    monkeypatch.setattr(config, "load_dotenv", lambda **kwargs: False)
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    cfg = config.get_config()

    assert cfg.mysql.port == 3306
    assert cfg.mysql.table_prefix == "wp_"
    assert cfg.mongo.user is None
    assert cfg.locks.meta_key == "locks"
    assert cfg.locks.taxonomies == []
    assert cfg.locks.multisite is False
    assert cfg.locks.backend == "memory"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("MYSQL_PORT", "3307")
    monkeypatch.setenv("MYSQL_TABLE_PREFIX", "site2_")
    monkeypatch.setenv("TERM_LOCKS_BACKEND", "MySQL")
    monkeypatch.setenv("TERM_LOCKS_TAXONOMIES", "category, genre,,")
    monkeypatch.setenv("TERM_LOCKS_MULTISITE", "yes")

    cfg = config.get_config()

    assert cfg.mysql.port == 3307
    assert cfg.mysql.table_prefix == "site2_"
    assert cfg.locks.backend == "mysql"
    assert cfg.locks.taxonomies == ["category", "genre"]
    assert cfg.locks.multisite is True


def test_unknown_backend(monkeypatch):
    monkeypatch.setenv("TERM_LOCKS_BACKEND", "sqlite")
    with pytest.raises(ValueError):
        config.get_config()


def test_singleton():
    assert config.get_config() is config.get_config()
