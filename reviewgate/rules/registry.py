"""Build the enabled rule set from configuration."""

from __future__ import annotations

from typing import Any, Callable, List, Optional, Sequence, Tuple

from reviewgate.config import BotConfig, RuleConfig
from reviewgate.logging_config import get_logger

from . import FileRule, ProjectRule
from .accessibility import AccessibilityRule
from .concurrency import ConcurrencyRule
from .networking import NetworkingRule
from .performance import PerformanceRule
from .security import SecurityRule
from .test_coverage import TestCoverageRule

RuleFactory = Callable[[RuleConfig], Any]

# Declaration order is report order.
FILE_RULES: Sequence[Tuple[str, RuleFactory]] = (
    ("accessibility", AccessibilityRule),
    ("concurrency", ConcurrencyRule),
    ("performance", PerformanceRule),
    ("networking", NetworkingRule),
    ("security", lambda _options: SecurityRule()),
)

PROJECT_RULES: Sequence[Tuple[str, RuleFactory]] = (
    ("tests", TestCoverageRule),
)


def _build(entries: Sequence[Tuple[str, RuleFactory]], config: BotConfig, logger: Any) -> List[Any]:
    rules: List[Any] = []
    for key, factory in entries:
        options = config.rule(key)
        if not options.enabled:
            logger.debug("rule_disabled", rule=key)
            continue
        try:
            rule = factory(options)
        except (TypeError, ValueError) as exc:
            logger.warning("rule_options_invalid", rule=key, error=str(exc))
            rule = factory(RuleConfig())
        rules.append(rule)
    return rules


def build_file_rules(config: BotConfig, logger: Optional[Any] = None) -> List[FileRule]:
    """Return enabled file rules; rules without a config entry are enabled."""

    log = logger if logger is not None else get_logger(__name__)
    rules = _build(FILE_RULES, config, log)
    log.info("file_rules_built", rules=[rule.name for rule in rules])
    return rules


def build_project_rules(config: BotConfig, logger: Optional[Any] = None) -> List[ProjectRule]:
    log = logger if logger is not None else get_logger(__name__)
    rules = _build(PROJECT_RULES, config, log)
    log.info("project_rules_built", rules=[rule.name for rule in rules])
    return rules
