"""Tests for configuration loading."""

import pytest
from pydantic import ValidationError

from hello_server.config import DEFAULT_ALLOWED_ORIGINS, ServerConfig, load_config
from hello_server.exceptions import ConfigError


@pytest.mark.unit
def test_port_from_environment():
    config = load_config({"PORT": "8080"})

    assert config.port == 8080
    assert config.host == "0.0.0.0"
    assert config.allowed_origins == DEFAULT_ALLOWED_ORIGINS == ("http://localhost:3000",)
    assert config.url == "http://localhost:8080"


def test_port_is_stripped():
    assert load_config({"PORT": " 3000\n"}).port == 3000


@pytest.mark.parametrize("env", [{}, {"PORT": ""}, {"PORT": "   "}])
def test_missing_port_is_fatal(env):
    with pytest.raises(ConfigError, match="PORT is not set") as excinfo:
        load_config(env)

    assert excinfo.value.variable == "PORT"


@pytest.mark.parametrize("raw", ["abc", "80a", "-1", "8080.0", "0x1f90", "٣٠٠٠"])
def test_non_numeric_port_is_fatal(raw):
    with pytest.raises(ConfigError, match="not a number"):
        load_config({"PORT": raw})


@pytest.mark.parametrize("raw", ["0", "65536", "99999"])
def test_out_of_range_port_is_fatal(raw):
    with pytest.raises(ConfigError, match="outside 1-65535"):
        load_config({"PORT": raw})


def test_other_variables_are_ignored():
    config = load_config({"PORT": "3001", "HOST": "127.0.0.1", "ORIGINS": "*"})

    assert config.host == "0.0.0.0"
    assert config.allowed_origins == DEFAULT_ALLOWED_ORIGINS


def test_dotenv_file_supplies_port(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("PORT=5000\n", encoding="utf-8")

    assert load_config({}, dotenv_path=env_file).port == 5000


def test_environment_wins_over_dotenv(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("PORT=5000\n", encoding="utf-8")

    assert load_config({"PORT": "6000"}, dotenv_path=env_file).port == 6000


def test_process_environment_is_used_by_default(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("PORT", "7000")

    assert load_config().port == 7000


def test_config_is_immutable():
    config = ServerConfig(port=3001)

    with pytest.raises(ValidationError):
        config.port = 4000


def test_origins_are_normalised_to_tuple():
    config = ServerConfig(port=3001, allowed_origins=["http://a.example", "http://b.example"])

    assert config.allowed_origins == ("http://a.example", "http://b.example")
    assert ServerConfig(port=3001, allowed_origins="http://a.example").allowed_origins == (
        "http://a.example",
    )


def test_invalid_log_format():
    with pytest.raises(ValidationError):
        ServerConfig(port=3001, log_format="xml")
