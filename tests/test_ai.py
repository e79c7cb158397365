import json

import httpx

from reviewgate.ai import LocalHeuristicsProvider, OpenAIProvider, build_provider
from reviewgate.config import AIConfig
from reviewgate.result import Finding
from reviewgate.severity import Severity

FINDINGS = [
    Finding("security", Severity.WARNING, "a.swift", 1, "http"),
    Finding("accessibility", Severity.INFO, "a.swift", 2, "label"),
    Finding("accessibility", Severity.INFO, "a.swift", 3, "label"),
]


def test_local_provider_summarizes_counts():
    summary = LocalHeuristicsProvider().summarize(FINDINGS)

    assert summary.title == "Code Review Summary (Local)"
    assert summary.body.startswith("Top areas:\n- accessibility: 2 issues\n- security: 1 issues")


def test_local_provider_returns_none_without_findings():
    assert LocalHeuristicsProvider().summarize([]) is None


def test_build_provider_selects_by_name():
    assert isinstance(build_provider(AIConfig(provider="OpenAI"), api_key=""), OpenAIProvider)
    assert isinstance(build_provider(AIConfig(provider="none")), LocalHeuristicsProvider)


def test_openai_provider_without_key_is_skipped():
    assert OpenAIProvider(api_key="").summarize(FINDINGS) is None


def test_openai_provider_posts_chat_completion():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"choices": [{"message": {"content": "  Fix HTTP usage.  "}}]})

    provider = OpenAIProvider(
        AIConfig(provider="openai", max_tokens=128, temperature=0.1),
        api_key="sk-test",
        model="gpt-test",
        base_url="https://llm.example/v1",
        transport=httpx.MockTransport(handler),
    )

    summary = provider.summarize(FINDINGS, diff_path="change.diff")

    assert summary.body == "Fix HTTP usage."
    assert seen["url"] == "https://llm.example/v1/chat/completions"
    assert seen["auth"] == "Bearer sk-test"
    assert seen["body"]["model"] == "gpt-test"
    assert seen["body"]["max_tokens"] == 128
    assert "change.diff" in seen["body"]["messages"][1]["content"]


def test_openai_provider_failure_returns_none():
    provider = OpenAIProvider(
        api_key="sk-test",
        transport=httpx.MockTransport(lambda request: httpx.Response(500, json={"error": "down"})),
    )

    assert provider.summarize(FINDINGS) is None
