"""AI enrichment of audit results using Gemini."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Protocol

from google import genai
from google.genai import types
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from webaudit.config.settings import Config
from webaudit.errors.exceptions import ProviderError
from webaudit.schemas.audit import AIInsights, AuditResults

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """
You are a web quality consultant reviewing automated audit results for a website.

Rules:
- Only reference scores, metrics and facts explicitly provided in the input data
- Scores use a 0-5 scale where 5 is best; an "impact" of "high" marks a weak metric
- Pillars: accessibility, trust (security and best practices), performance,
  agentReadiness (how well crawlers and automated agents can read the site)
- Recommendations must map to specific weak metrics found in the data
- Output must be valid JSON and follow the provided schema exactly
"""

USER_PROMPT_TEMPLATE = """
Analyze these web audit results and provide:
1. 3-5 key insights about the website's quality
2. 3-5 actionable recommendations for improvement
3. A short summary paragraph

Audit Results:
{input_json}

Format the response as a JSON object with "insights" and "recommendations" arrays
of strings and a "summary" string.
"""


class AIReply(BaseModel):
    """Response schema requested from the model."""

    insights: list[str]
    recommendations: list[str]
    summary: str


class ProviderUnavailableError(ProviderError):
    """The provider call itself failed or timed out (retryable)."""

    pass


class Enricher(Protocol):
    """Produces narrative insights for a normalized audit."""

    async def enrich(self, results: AuditResults) -> AIInsights: ...


def build_prompt(results: AuditResults) -> str:
    """Embed the normalized report (without any prior AI analysis) in the prompt."""
    input_data: dict[str, Any] = results.model_dump(
        mode="json", by_alias=True, exclude={"ai_analysis", "status"}
    )
    return USER_PROMPT_TEMPLATE.format(input_json=json.dumps(input_data, indent=2))


def parse_reply(text: str | None) -> AIInsights:
    """
    Parse the model's JSON reply.

    Raises:
        ProviderError: If the reply is empty or not the expected shape.
    """
    if not text:
        raise ProviderError("AI provider returned an empty response")
    try:
        return AIInsights.model_validate(json.loads(text))
    except json.JSONDecodeError as e:
        raise ProviderError(f"AI response is not valid JSON: {e}") from e
    except PydanticValidationError as e:
        raise ProviderError(f"AI response has an unexpected shape: {e}") from e


class GeminiEnricher:
    """Enricher backed by a Gemini client supplied at construction."""

    def __init__(self, client: genai.Client, model: str = "gemini-2.5-flash", timeout: float = 60.0):
        self.client = client
        self.model = model
        self.timeout = timeout

    def _generate(self, prompt: str) -> str | None:
        response = self.client.models.generate_content(  # type: ignore
            model=self.model,
            contents=prompt,
            config=types.GenerateContentConfig(
                system_instruction=SYSTEM_PROMPT,
                response_mime_type="application/json",
                response_schema=AIReply,
            ),
        )
        return response.text

    @retry(
        stop=stop_after_attempt(2),
        wait=wait_exponential(multiplier=1, min=1, max=4),
        retry=retry_if_exception_type(ProviderUnavailableError),
        reraise=True,
    )
    async def _call(self, prompt: str) -> str | None:
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self._generate, prompt), timeout=self.timeout
            )
        except TimeoutError as e:
            raise ProviderUnavailableError(
                f"AI provider timed out after {self.timeout:g}s"
            ) from e
        except Exception as e:
            raise ProviderUnavailableError(f"AI provider call failed: {e}") from e

    async def enrich(self, results: AuditResults) -> AIInsights:
        """
        Generate narrative insights for `results`.

        Raises:
            ProviderError: If the provider is unreachable or its reply is malformed.
        """
        text = await self._call(build_prompt(results))
        return parse_reply(text)


class DisabledEnricher:
    """Used when no AI credential is configured: always an empty analysis."""

    async def enrich(self, results: AuditResults) -> AIInsights:
        return AIInsights()


def build_enricher(config: Config) -> Enricher:
    """Select the enricher for the given configuration."""
    if not config.google_api_key:
        logger.info("GOOGLE_API_KEY not set, AI enrichment disabled")
        return DisabledEnricher()

    client = genai.Client(api_key=config.google_api_key)
    return GeminiEnricher(client, model=config.ai_model, timeout=config.ai_timeout)
