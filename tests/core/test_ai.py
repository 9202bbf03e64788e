"""Tests for AI enrichment."""

import json
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from webaudit.config.settings import get_config
from webaudit.core.ai import (
    DisabledEnricher,
    GeminiEnricher,
    build_enricher,
    build_prompt,
    parse_reply,
)
from webaudit.errors.exceptions import ProviderError
from webaudit.schemas.audit import AuditResults

REPLY = {
    "insights": ["Strong layout stability.", "Blocking scripts slow interactivity."],
    "recommendations": ["Defer third-party scripts.", "Add a meta description."],
    "summary": "A solid site held back by main-thread work.",
}


def _client(text: str | None = None, error: Exception | None = None) -> MagicMock:
    client = MagicMock()
    if error is not None:
        client.models.generate_content.side_effect = error
    else:
        client.models.generate_content.return_value = SimpleNamespace(text=text)
    return client


class TestBuildPrompt:
    def test_embeds_report_without_prior_analysis(self, sample_results: AuditResults):
        prompt = build_prompt(sample_results)

        assert '"agentReadiness"' in prompt
        assert '"overallScore": 3.3' in prompt
        assert "aiAnalysis" not in prompt


class TestParseReply:
    def test_valid(self):
        insights = parse_reply(json.dumps(REPLY))
        assert insights.insights == REPLY["insights"]
        assert insights.recommendations == REPLY["recommendations"]
        assert insights.summary == REPLY["summary"]

    @pytest.mark.parametrize("text", [None, "", "not json", '{"insights": "one"}'])
    def test_malformed(self, text: str | None):
        with pytest.raises(ProviderError):
            parse_reply(text)


class TestGeminiEnricher:
    @pytest.mark.asyncio
    async def test_enrich(self, sample_results: AuditResults):
        client = _client(json.dumps(REPLY))
        enricher = GeminiEnricher(client, model="gemini-test", timeout=5)

        insights = await enricher.enrich(sample_results)

        assert insights.summary == REPLY["summary"]
        kwargs = client.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "gemini-test"
        assert "https://example.com/" in kwargs["contents"]

    @pytest.mark.asyncio
    async def test_malformed_reply_is_not_retried(self, sample_results: AuditResults):
        client = _client("I cannot help with that.")
        enricher = GeminiEnricher(client, timeout=5)

        with pytest.raises(ProviderError, match="not valid JSON"):
            await enricher.enrich(sample_results)

        assert client.models.generate_content.call_count == 1

    @pytest.mark.asyncio
    async def test_provider_failure_retried_then_raised(self, sample_results: AuditResults):
        client = _client(error=ConnectionError("connection reset"))
        enricher = GeminiEnricher(client, timeout=5)

        with pytest.raises(ProviderError, match="connection reset"):
            await enricher.enrich(sample_results)

        assert client.models.generate_content.call_count == 2


class TestBuildEnricher:
    @pytest.mark.asyncio
    async def test_disabled_without_key(self, sample_results: AuditResults):
        enricher = build_enricher(get_config())

        assert isinstance(enricher, DisabledEnricher)
        insights = await enricher.enrich(sample_results)
        assert insights.insights == []
        assert insights.recommendations == []
        assert insights.summary is None

    def test_gemini_with_key(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("GOOGLE_API_KEY", "test-key")
        monkeypatch.setenv("AI_MODEL", "gemini-test")

        enricher = build_enricher(get_config())

        assert isinstance(enricher, GeminiEnricher)
        assert enricher.model == "gemini-test"
