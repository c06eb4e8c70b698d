# tests/test_config.py
import os

import pytest

from congress_client import ClientConfig, CongressClient, ConfigError


def test_empty_api_key_fails_before_any_request(requests_mock):
    with pytest.raises(ConfigError) as exc:
        CongressClient(ClientConfig(api_key=""))
    assert "API key" in str(exc.value)
    assert requests_mock.call_count == 0


def test_whitespace_api_key_rejected():
    with pytest.raises(ValueError):
        ClientConfig(api_key="   ")


@pytest.mark.parametrize("base_url", ["api.congress.gov/v3", "ftp://api.congress.gov", "", "/v3"])
def test_base_url_must_be_absolute(base_url):
    with pytest.raises(ConfigError, match="base_url"):
        ClientConfig(api_key="k", base_url=base_url)


def test_defaults_and_trailing_slash():
    cfg = ClientConfig(api_key=" k ", base_url="https://example.test/v3/")
    assert cfg.api_key == "k"
    assert cfg.base_url == "https://example.test/v3"
    assert cfg.default_params["format"] == "json"
    assert cfg.default_params["limit"] == 250
    assert cfg.max_attempts == 3


def test_format_marker_is_forced_and_key_never_a_default():
    cfg = ClientConfig(api_key="k", default_params={"format": "xml", "api_key": "other", "limit": 20})
    assert dict(cfg.default_params) == {"format": "json", "limit": 20}


def test_default_params_are_read_only():
    cfg = ClientConfig(api_key="k")
    with pytest.raises(TypeError):
        cfg.default_params["limit"] = 1


@pytest.mark.parametrize("kwargs", [
    {"max_attempts": 0},
    {"max_concurrency": 0},
    {"timeout": 0},
    {"backoff_base": -1},
    {"backoff_base": 5, "backoff_cap": 1},
    {"jitter": 1.0},
    {"default_params": {"flag": True}},
    {"default_params": {"limit": 2.5}},
])
def test_invalid_settings_rejected(kwargs):
    with pytest.raises(ConfigError):
        ClientConfig(api_key="k", **kwargs)


def test_config_is_immutable():
    cfg = ClientConfig(api_key="k")
    with pytest.raises(AttributeError):
        cfg.api_key = "other"


ENV_VARS = ("CONGRESS_API_KEY", "CONGRESS_DOT_GOV_API_KEY", "CONGRESS_API_BASE_URL",
            "CONGRESS_API_TIMEOUT", "CONGRESS_API_MAX_ATTEMPTS", "CONGRESS_API_MAX_CONCURRENCY")


@pytest.fixture
def isolated_env(monkeypatch):
    # load_dotenv writes straight into os.environ; keep that out of other tests
    monkeypatch.setattr(os, "environ", dict(os.environ))
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)


def test_from_env_reads_dotenv_file(tmp_path, isolated_env):
    env_file = tmp_path / ".env"
    env_file.write_text("CONGRESS_API_KEY=from_file\nCONGRESS_API_MAX_ATTEMPTS=5\nCONGRESS_API_MAX_CONCURRENCY=8\n")

    cfg = ClientConfig.from_env(str(env_file))
    assert cfg.api_key == "from_file"
    assert cfg.max_attempts == 5
    assert cfg.max_concurrency == 8


def test_from_env_environment_wins_over_file(tmp_path, monkeypatch, isolated_env):
    monkeypatch.setenv("CONGRESS_API_KEY", "from_env")
    monkeypatch.setenv("CONGRESS_API_TIMEOUT", "12.5")
    env_file = tmp_path / ".env"
    env_file.write_text("CONGRESS_API_KEY=from_file\n")

    cfg = ClientConfig.from_env(str(env_file))
    assert cfg.api_key == "from_env"
    assert cfg.timeout == 12.5


def test_from_env_without_key_fails_fast(tmp_path, isolated_env):
    empty = tmp_path / ".env"
    empty.write_text("")
    with pytest.raises(ConfigError, match="CONGRESS_API_KEY"):
        CongressClient.from_env(str(empty))


def test_from_env_bad_number(tmp_path, monkeypatch, isolated_env):
    monkeypatch.setenv("CONGRESS_API_KEY", "k")
    monkeypatch.setenv("CONGRESS_API_MAX_ATTEMPTS", "three")
    empty = tmp_path / ".env"
    empty.write_text("")
    with pytest.raises(ConfigError, match="numeric"):
        ClientConfig.from_env(str(empty))
