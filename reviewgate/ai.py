"""Optional summary providers for review reports.

Summaries are a best-effort side channel: providers return ``None`` instead
of raising, and the gate decision never depends on them.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, Sequence

import httpx

from .config import AIConfig
from .logging_config import get_logger
from .result import Finding
from .runner import count_by_rule


OPENAI_BASE_URL = "https://api.openai.com/v1"
OPENAI_DEFAULT_MODEL = "gpt-4o-mini"
OPENAI_TIMEOUT_SECONDS = 30.0
MAX_FINDINGS_IN_PROMPT = 50

LOCAL_RECOMMENDATIONS = (
    "Add accessibility labels to images and buttons",
    "Move JSON and image decoding off the main thread",
    "Add retry with backoff for transient network failures",
    "Consider Sendable/actor isolation for concurrency-critical types",
)


@dataclass(frozen=True)
class AISummary:
    title: str
    body: str

    def to_dict(self) -> Dict[str, str]:
        return {"title": self.title, "body": self.body}


class SuggestionProvider(Protocol):
    def summarize(self, findings: Sequence[Finding], diff_path: Optional[str] = None) -> Optional[AISummary]:
        """Return a summary for ``findings`` or ``None`` when unavailable."""


class LocalHeuristicsProvider:
    """Offline summary built from finding counts per rule."""

    def __init__(self, config: Optional[AIConfig] = None) -> None:
        self._config = config or AIConfig()

    def summarize(self, findings: Sequence[Finding], diff_path: Optional[str] = None) -> Optional[AISummary]:
        if not findings:
            return None
        areas = "\n".join(f"- {rule}: {count} issues" for rule, count in count_by_rule(findings))
        recommendations = "\n".join(f"- {item}" for item in LOCAL_RECOMMENDATIONS)
        body = f"Top areas:\n{areas}\n\nRecommendations:\n{recommendations}"
        return AISummary(title="Code Review Summary (Local)", body=body)


class OpenAIProvider:
    """Chat-completions summary; requires ``OPENAI_API_KEY``."""

    def __init__(
        self,
        config: Optional[AIConfig] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
        logger: Optional[Any] = None,
    ) -> None:
        self._config = config or AIConfig()
        self._api_key = api_key if api_key is not None else os.environ.get("OPENAI_API_KEY")
        self._model = model or os.environ.get("OPENAI_MODEL") or OPENAI_DEFAULT_MODEL
        self._base_url = (base_url or os.environ.get("OPENAI_BASE_URL") or OPENAI_BASE_URL).rstrip("/")
        self._transport = transport
        self._log = logger if logger is not None else get_logger(__name__)

    def summarize(self, findings: Sequence[Finding], diff_path: Optional[str] = None) -> Optional[AISummary]:
        if not self._api_key:
            self._log.info("ai_summary_skipped", reason="OPENAI_API_KEY not set")
            return None

        payload = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": self._system_prompt()},
                {"role": "user", "content": self._user_prompt(findings, diff_path)},
            ],
            "max_tokens": self._config.max_tokens,
            "temperature": self._config.temperature,
        }
        headers = {"Authorization": f"Bearer {self._api_key}", "Content-Type": "application/json"}
        try:
            with httpx.Client(timeout=OPENAI_TIMEOUT_SECONDS, transport=self._transport) as client:
                response = client.post(f"{self._base_url}/chat/completions", headers=headers, json=payload)
                response.raise_for_status()
                result = response.json()
            content = result["choices"][0]["message"]["content"]
        except (httpx.HTTPError, KeyError, IndexError, TypeError, ValueError) as exc:
            self._log.warning("ai_summary_failed", provider="openai", error=str(exc))
            return None
        return AISummary(title="AI Suggestions", body=str(content).strip())

    def _system_prompt(self) -> str:
        return (
            "You are a senior iOS reviewer. Summarize static-analysis findings for a pull request "
            f"in the '{self._config.prompt_style}' style: group by theme, name the riskiest items first, "
            "and keep recommendations actionable."
        )

    @staticmethod
    def _user_prompt(findings: Sequence[Finding], diff_path: Optional[str]) -> str:
        lines = [f"Findings ({len(findings)}):"]
        for finding in findings[:MAX_FINDINGS_IN_PROMPT]:
            lines.append(
                f"- [{finding.severity.value}] {finding.rule} {finding.file}:{finding.line} {finding.message}"
            )
        if len(findings) > MAX_FINDINGS_IN_PROMPT:
            lines.append(f"... {len(findings) - MAX_FINDINGS_IN_PROMPT} more")
        if diff_path:
            lines.append(f"Changes under review: {diff_path}")
        return "\n".join(lines)


def build_provider(config: AIConfig, logger: Optional[Any] = None, **kwargs: Any) -> SuggestionProvider:
    if config.provider.lower() == "openai":
        return OpenAIProvider(config, logger=logger, **kwargs)
    return LocalHeuristicsProvider(config)
