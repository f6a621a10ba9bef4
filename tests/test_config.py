import io

import pytest

from papertrail.config import logic
from papertrail.config.loader import load_config
from papertrail.config.logic import deep_merge, load_and_merge_configs
from papertrail.utils.errors import ConfigError


@pytest.fixture(autouse=True)
def isolated(monkeypatch, tmp_path):
    monkeypatch.setattr(logic, "USER_CONFIG_PATH", tmp_path / "user" / "config.yaml")
    monkeypatch.delenv("STUB_LLM", raising=False)
    monkeypatch.chdir(tmp_path)


def test_load_config_substitutes_env(monkeypatch):
    monkeypatch.setenv("PAPERTRAIL_TEST_KEY", "sk-123")
    config = load_config(io.StringIO("model:\n  api_key: ${PAPERTRAIL_TEST_KEY}\n"))
    assert config == {"model": {"api_key": "sk-123"}}


def test_load_config_missing_env(monkeypatch):
    monkeypatch.delenv("PAPERTRAIL_MISSING", raising=False)
    with pytest.raises(ConfigError, match="PAPERTRAIL_MISSING"):
        load_config(io.StringIO("model:\n  api_key: ${PAPERTRAIL_MISSING}\n"))


def test_load_config_empty():
    assert load_config(io.StringIO("")) == {}


def test_load_config_rejects_non_mapping():
    with pytest.raises(ConfigError, match="mapping"):
        load_config(io.StringIO("- a\n- b\n"))


def test_load_config_invalid_yaml():
    with pytest.raises(ConfigError, match="Failed to parse"):
        load_config(io.StringIO("model: [unclosed\n"))


def test_deep_merge():
    target = {"model": {"provider": "claude", "name": "a"}, "paths": [1, 2]}
    merged = deep_merge(target, {"model": {"name": "b"}, "paths": [3]})
    assert merged == {"model": {"provider": "claude", "name": "b"}, "paths": [3]}


def test_defaults():
    config = load_and_merge_configs()
    assert config.model.provider == "claude"
    assert config.source.type == "compare"
    assert config.output.mode == "append"
    assert config.output.path == "papertrail.md"
    assert config.generation.stub is False


def test_user_and_project_layers(tmp_path):
    user_dir = tmp_path / "user"
    user_dir.mkdir()
    (user_dir / "config.yaml").write_text("model:\n  provider: openai\n  name: gpt-4o\n")
    (tmp_path / "pyproject.toml").write_text("[project]\nname = 'demo'\n")
    (tmp_path / ".papertrail.yaml").write_text("model:\n  name: gpt-4o-mini\noutput:\n  path: docs/log.md\n")

    config = load_and_merge_configs()

    assert config.model.provider == "openai"
    assert config.model.name == "gpt-4o-mini"
    assert config.output.path == "docs/log.md"


def test_custom_config_replaces_user_layer(tmp_path):
    user_dir = tmp_path / "user"
    user_dir.mkdir()
    (user_dir / "config.yaml").write_text("model:\n  provider: openai\n")
    custom = tmp_path / "custom.yaml"
    custom.write_text("source:\n  type: local\n")

    config = load_and_merge_configs(custom_config_path=str(custom))

    assert config.model.provider == "claude"
    assert config.source.type == "local"


def test_custom_config_not_found(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_and_merge_configs(custom_config_path=str(tmp_path / "missing.yaml"))


def test_custom_config_unreadable(tmp_path):
    custom = tmp_path / "custom.yaml"
    custom.write_text("model: [unclosed\n")
    with pytest.raises(ConfigError, match="Could not load config"):
        load_and_merge_configs(custom_config_path=str(custom))


def test_invalid_values(tmp_path):
    custom = tmp_path / "custom.yaml"
    custom.write_text("model:\n  temperature: 5\n")
    with pytest.raises(ConfigError, match="validation failed"):
        load_and_merge_configs(custom_config_path=str(custom))


@pytest.mark.parametrize("value,expected", [("true", True), ("1", True), ("false", False), ("0", False)])
def test_stub_env_override(monkeypatch, value, expected):
    monkeypatch.setenv("STUB_LLM", value)
    assert load_and_merge_configs().generation.stub is expected


def test_load_config_substitutes_inside_scalar(monkeypatch):
    monkeypatch.setenv("PAPERTRAIL_TEST_HOST", "ghe.example.com")
    config = load_config(io.StringIO("hosting:\n  api_url: https://${PAPERTRAIL_TEST_HOST}/api/v3\n"))
    assert config == {"hosting": {"api_url": "https://ghe.example.com/api/v3"}}
