import pytest

from reviewgate.config import (
    ENV_CONFIG_PATH,
    AIConfig,
    BotConfig,
    RuleConfig,
    load_config,
    parse_config,
)
from reviewgate.errors import ConfigError

YAML_CONFIG = """
rules:
  performance:
    enabled: true
    thresholds:
      maxFunctionLength: 60
    extras:
      flagImageDecodingOnMain: false
  security:
    enabled: false
ai:
  provider: openai
  maxTokens: 256
  temperature: 0.5
  promptStyle: terse
"""


def test_parse_yaml_config():
    config = parse_config(YAML_CONFIG)

    assert config.rule("performance").threshold("maxFunctionLength", 80) == 60
    assert config.rule("performance").extra("flagImageDecodingOnMain", True) is False
    assert config.rule("security").enabled is False
    assert config.rule("networking") == RuleConfig()
    assert config.ai == AIConfig(provider="openai", max_tokens=256, temperature=0.5, prompt_style="terse")


def test_parse_json_config():
    config = parse_config('{"rules": {"tests": {"enabled": false}}, "ai": {"provider": "none"}}')

    assert config.rule("tests").enabled is False
    assert config.ai.max_tokens == 512


def test_empty_document_yields_defaults():
    assert parse_config("") == BotConfig()


def test_rule_options_fail_closed():
    options = RuleConfig.from_dict({"enabled": "maybe", "extras": {"a": "yes"}, "thresholds": {"b": -3, "c": True}})

    assert options.enabled is True
    assert options.extra("a", True) is True
    assert options.threshold("b", 7) == 7
    assert options.threshold("c", 7) == 7


def test_explicit_malformed_config_is_fatal(tmp_path):
    path = tmp_path / "bad.yml"
    path.write_text("rules: [unclosed", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(str(path))

    with pytest.raises(ConfigError):
        load_config(str(tmp_path / "missing.yml"))


def test_undecodable_explicit_config_is_fatal(tmp_path):
    path = tmp_path / "latin1.yml"
    path.write_bytes(b"rules:\n  security:\n    note: caf\xe9 \xff\n")

    with pytest.raises(ConfigError, match="Cannot read configuration"):
        load_config(str(path))


def test_undecodable_discovered_config_falls_back(tmp_path, monkeypatch):
    monkeypatch.delenv(ENV_CONFIG_PATH, raising=False)
    (tmp_path / "code-review.yml").write_bytes(b"\xff\xfe rules: {}\n")

    assert load_config(cwd=tmp_path) == BotConfig()


def test_discovered_malformed_config_falls_back(tmp_path, monkeypatch):
    monkeypatch.delenv(ENV_CONFIG_PATH, raising=False)
    (tmp_path / "code-review.yml").write_text("rules: 3\n", encoding="utf-8")

    assert load_config(cwd=tmp_path) == BotConfig()


def test_env_config_is_used(tmp_path, monkeypatch):
    path = tmp_path / "env.yml"
    path.write_text("rules:\n  security:\n    enabled: false\n", encoding="utf-8")
    monkeypatch.setenv(ENV_CONFIG_PATH, str(path))

    config = load_config(cwd=tmp_path)

    assert config.rule("security").enabled is False


def test_no_config_anywhere_uses_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv(ENV_CONFIG_PATH, raising=False)

    assert load_config(cwd=tmp_path) == BotConfig()
