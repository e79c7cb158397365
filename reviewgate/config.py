"""Configuration objects and loading for the review gate.

Configuration is read from YAML or JSON (``yaml.safe_load`` accepts both)
with the following shape::

    rules:
      performance:
        enabled: true
        thresholds: {maxFunctionLength: 60}
        extras: {flagImageDecodingOnMain: false}
    ai:
      provider: local
      maxTokens: 512
      temperature: 0.2
      promptStyle: pr-summary

Lookup order: explicit path, ``$CODE_REVIEW_CONFIG``, a ``code-review.yml``
(or ``.yaml``/``.json``) in the working directory, then built-in defaults.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .errors import ConfigError
from .logging_config import get_logger

ENV_CONFIG_PATH = "CODE_REVIEW_CONFIG"
DEFAULT_CONFIG_FILENAMES = ("code-review.yml", "code-review.yaml", "code-review.json")



@dataclass(frozen=True)
class RuleConfig:
    """Options for a single rule; absent entries mean "enabled with defaults"."""

    enabled: bool = True
    extras: Mapping[str, bool] = field(default_factory=dict)
    thresholds: Mapping[str, int] = field(default_factory=dict)

    def extra(self, name: str, default: bool) -> bool:
        value = self.extras.get(name)
        if isinstance(value, bool):
            return value
        return default

    def threshold(self, name: str, default: int) -> int:
        value = self.thresholds.get(name)
        # bool is an int subclass; reject it explicitly
        if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
            return value
        return default

    @classmethod
    def from_dict(cls, data: Any) -> "RuleConfig":
        if not isinstance(data, Mapping):
            return cls()
        enabled = data.get("enabled", True)
        extras = data.get("extras") or {}
        thresholds = data.get("thresholds") or {}
        return cls(
            enabled=enabled if isinstance(enabled, bool) else True,
            extras=dict(extras) if isinstance(extras, Mapping) else {},
            thresholds=dict(thresholds) if isinstance(thresholds, Mapping) else {},
        )


@dataclass(frozen=True)
class AIConfig:
    provider: str = "none"
    max_tokens: int = 512
    temperature: float = 0.2
    prompt_style: str = "pr-summary"

    @classmethod
    def from_dict(cls, data: Any) -> "AIConfig":
        if not isinstance(data, Mapping):
            return cls()
        defaults = cls()
        max_tokens = _first(data, "maxTokens", "max_tokens")
        temperature = _first(data, "temperature")
        prompt_style = _first(data, "promptStyle", "prompt_style")
        provider = _first(data, "provider")
        return cls(
            provider=str(provider) if provider is not None else defaults.provider,
            max_tokens=max_tokens if isinstance(max_tokens, int) and not isinstance(max_tokens, bool) else defaults.max_tokens,
            temperature=float(temperature) if isinstance(temperature, (int, float)) and not isinstance(temperature, bool) else defaults.temperature,
            prompt_style=str(prompt_style) if prompt_style is not None else defaults.prompt_style,
        )


@dataclass(frozen=True)
class BotConfig:
    """Top-level configuration handed to the rule registry and providers."""

    rules: Mapping[str, RuleConfig] = field(default_factory=dict)
    ai: AIConfig = field(default_factory=AIConfig)

    def rule(self, key: str) -> RuleConfig:
        return self.rules.get(key) or RuleConfig()

    @classmethod
    def from_dict(cls, data: Any, logger: Optional[Any] = None) -> "BotConfig":
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise ConfigError("Configuration root must be a mapping")
        rules_data = data.get("rules") or {}
        if not isinstance(rules_data, Mapping):
            raise ConfigError("'rules' must be a mapping of rule name to options")
        log = logger if logger is not None else get_logger(__name__)
        rules: Dict[str, RuleConfig] = {}
        for name, options in rules_data.items():
            if not isinstance(options, Mapping):
                log.warning("rule_config_ignored", rule=str(name), reason="not a mapping")
            rules[str(name)] = RuleConfig.from_dict(options)
        return cls(rules=rules, ai=AIConfig.from_dict(data.get("ai")))


def _first(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


def parse_config(text: str, logger: Optional[Any] = None) -> BotConfig:
    """Parse YAML or JSON configuration text."""

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
    return BotConfig.from_dict(data, logger=logger)


def read_config_file(path: Path, logger: Optional[Any] = None) -> BotConfig:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Cannot read configuration {path}: {exc}") from exc
    return parse_config(text, logger=logger)


def _discover(cwd: Path) -> Optional[Path]:
    env_path = os.environ.get(ENV_CONFIG_PATH)
    if env_path:
        return Path(env_path)
    for filename in DEFAULT_CONFIG_FILENAMES:
        candidate = cwd / filename
        if candidate.is_file():
            return candidate
    return None


def load_config(
    config_path: Optional[str] = None,
    cwd: Optional[Path] = None,
    logger: Optional[Any] = None,
) -> BotConfig:
    """Load configuration, failing loudly only for an explicit ``config_path``."""

    log = logger if logger is not None else get_logger(__name__)
    if config_path:
        return read_config_file(Path(config_path), logger=log)

    discovered = _discover(cwd or Path.cwd())
    if discovered is None:
        return BotConfig()
    try:
        config = read_config_file(discovered, logger=log)
    except ConfigError as exc:
        log.warning("config_fallback_to_defaults", path=str(discovered), error=str(exc))
        return BotConfig()
    log.debug("config_loaded", path=str(discovered))
    return config
