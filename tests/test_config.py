"""Tests for configuration loading."""

import pytest

from agent_broker.config import (
    BrokerConfig,
    apply_env_overrides,
    create_default_config,
    load_config,
    parse_config,
    parse_bool,
    parse_log_level,
)


def test_defaults(monkeypatch):
    monkeypatch.delenv("PORT", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)

    config = load_config()

    assert config.server.host == "0.0.0.0"
    assert config.server.port == 8080
    assert config.logging.level == "INFO"
    assert config.store.backend == "memory"
    assert config.embedding.enabled is False


def test_load_yaml_with_env_expansion(tmp_path, monkeypatch):
    monkeypatch.delenv("PORT", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.setenv("CHROMA_API_KEY", "secret-key")
    path = tmp_path / "broker.yaml"
    path.write_text(
        "server:\n"
        "  port: 9090\n"
        "logging:\n"
        "  level: debug\n"
        "store:\n"
        "  backend: chroma\n"
        "  chroma:\n"
        "    host: chroma.internal\n"
        "    api_key: ${CHROMA_API_KEY}\n"
        "embedding:\n"
        "  enabled: true\n"
        "  dimensions: 1536\n"
    )

    config = load_config(path)

    assert config.server.port == 9090
    assert config.logging.level == "DEBUG"
    assert config.store.backend == "chroma"
    assert config.store.chroma.host == "chroma.internal"
    assert config.store.chroma.api_key == "secret-key"
    assert config.store.chroma.collection == "agents"
    assert config.embedding.enabled is True
    assert config.embedding.dimensions == 1536


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_unknown_backend():
    with pytest.raises(ValueError):
        parse_config({"store": {"backend": "postgres"}})


def test_env_overrides():
    config = apply_env_overrides(BrokerConfig(), {"PORT": "9999", "LOG_LEVEL": "warn"})

    assert config.server.port == 9999
    assert config.logging.level == "WARNING"


def test_bad_env_values_are_ignored():
    config = apply_env_overrides(BrokerConfig(), {"PORT": "http", "LOG_LEVEL": "loud"})

    assert config.server.port == 8080
    assert config.logging.level == "INFO"


@pytest.mark.parametrize("value,expected", [
    ("debug", "DEBUG"),
    ("INFO", "INFO"),
    ("Warn", "WARNING"),
    ("warning", "WARNING"),
    ("error", "ERROR"),
    ("", "INFO"),
    (None, "INFO"),
])
def test_parse_log_level(value, expected):
    assert parse_log_level(value, "INFO") == expected


def test_default_config_template_loads(tmp_path, monkeypatch):
    monkeypatch.delenv("PORT", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    path = tmp_path / "broker.yaml"
    path.write_text(create_default_config())

    config = load_config(path)

    assert config.server.port == 8080
    assert config.store.backend == "memory"
    assert config.embedding.enabled is False


@pytest.mark.parametrize("raw,expected", [
    ("false", False),
    ("true", True),
    ("", False),
])
def test_booleans_from_env(tmp_path, monkeypatch, raw, expected):
    monkeypatch.setenv("CHROMA_SSL", raw)
    monkeypatch.setenv("EMBEDDING_ENABLED", raw)
    path = tmp_path / "broker.yaml"
    path.write_text(
        "store:\n"
        "  chroma:\n"
        "    ssl: ${CHROMA_SSL}\n"
        "embedding:\n"
        "  enabled: ${EMBEDDING_ENABLED}\n"
    )

    config = load_config(path)

    assert config.store.chroma.ssl is expected
    assert config.embedding.enabled is expected


@pytest.mark.parametrize("value,expected", [
    (True, True),
    (False, False),
    ("yes", True),
    ("FALSE", False),
    ("0", False),
    (1, True),
    (None, False),
])
def test_parse_bool(value, expected):
    assert parse_bool(value) is expected
