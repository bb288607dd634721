"""
Completion clients - BYOK adapters for the critique pipeline.
Supports OpenAI, OpenRouter, DeepSeek, Gemini and Anthropic providers, plus a
deterministic demo client selected when no provider key is configured.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

import google.generativeai as genai
from anthropic import AsyncAnthropic
from openai import AsyncOpenAI

from ..config import CritiqueSettings, LLMProvider
from ..models import CANONICAL_CATEGORIES

logger = logging.getLogger(__name__)


@dataclass
class ModelResponse:
    """Unified response from any LLM provider."""
    content: str
    model: str
    provider: LLMProvider
    usage: Dict[str, int] = field(default_factory=dict)
    finish_reason: str = "stop"

    @property
    def truncated(self) -> bool:
        return self.finish_reason in ("length", "max_tokens", "MAX_TOKENS")


class CompletionClient(Protocol):
    """The external text-completion capability."""

    provider: LLMProvider
    model: str

    async def complete(self, system_prompt: str, user_prompt: str, max_tokens: int) -> ModelResponse:
        ...


def _openai_usage(response: Any) -> Dict[str, int]:
    return {
        "prompt_tokens": response.usage.prompt_tokens if response.usage else 0,
        "completion_tokens": response.usage.completion_tokens if response.usage else 0,
        "total_tokens": response.usage.total_tokens if response.usage else 0,
    }


class UnifiedModelClient:
    """
    Routes completion requests to the provider chosen in CritiqueSettings.
    SDK clients are created lazily and reused across calls.
    """

    def __init__(self, settings: CritiqueSettings):
        self.settings = settings
        self.provider = settings.resolve_provider()
        self.model = settings.resolve_model()
        if self.provider == LLMProvider.DEMO:
            raise ValueError("No provider configured; use DemoCompletionClient")
        self._openai_clients: Dict[LLMProvider, AsyncOpenAI] = {}
        self._anthropic_client: Optional[AsyncAnthropic] = None
        self._gemini_configured = False

    def _get_openai_compatible_client(self, provider: LLMProvider) -> AsyncOpenAI:
        """Get or create an OpenAI-compatible client (OpenAI, OpenRouter, DeepSeek)."""
        if provider not in self._openai_clients:
            config = self.settings.get_provider_config(provider)
            if config is None:
                raise ValueError(f"{provider.value} configuration not provided")
            self._openai_clients[provider] = AsyncOpenAI(
                api_key=config.api_key.get_secret_value(),
                base_url=config.base_url,
                organization=config.organization_id,
                max_retries=0,  # retries belong to the gateway
            )
        return self._openai_clients[provider]

    def _get_anthropic_client(self) -> AsyncAnthropic:
        """Get or create Anthropic client."""
        if self._anthropic_client is None:
            if not self.settings.claude:
                raise ValueError("Claude configuration not provided")
            self._anthropic_client = AsyncAnthropic(
                api_key=self.settings.claude.api_key.get_secret_value(),
                max_retries=0,
            )
        return self._anthropic_client

    def _configure_gemini(self) -> None:
        """Configure Gemini API."""
        if not self._gemini_configured:
            if not self.settings.gemini:
                raise ValueError("Gemini configuration not provided")
            genai.configure(api_key=self.settings.gemini.api_key.get_secret_value())
            self._gemini_configured = True

    async def complete(self, system_prompt: str, user_prompt: str, max_tokens: int) -> ModelResponse:
        """
        Create one completion with the configured provider and model.

        Args:
            system_prompt: System framing
            user_prompt: User payload
            max_tokens: Maximum tokens in the reply

        Returns:
            ModelResponse with unified response format
        """
        if self.provider in (LLMProvider.OPENAI, LLMProvider.OPENROUTER, LLMProvider.DEEPSEEK):
            return await self._openai_completion(system_prompt, user_prompt, max_tokens)
        elif self.provider == LLMProvider.CLAUDE:
            return await self._anthropic_completion(system_prompt, user_prompt, max_tokens)
        elif self.provider == LLMProvider.GEMINI:
            return await self._gemini_completion(system_prompt, user_prompt, max_tokens)
        else:
            raise ValueError(f"Unsupported provider: {self.provider}")

    async def _openai_completion(self, system_prompt: str, user_prompt: str, max_tokens: int) -> ModelResponse:
        """Create completion using an OpenAI-compatible API."""
        client = self._get_openai_compatible_client(self.provider)

        messages: List[Dict[str, str]] = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]
        response = await client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=self.settings.temperature,
            max_tokens=max_tokens,
        )

        return ModelResponse(
            content=response.choices[0].message.content or "",
            model=self.model,
            provider=self.provider,
            usage=_openai_usage(response),
            finish_reason=response.choices[0].finish_reason or "stop",
        )

    async def _anthropic_completion(self, system_prompt: str, user_prompt: str, max_tokens: int) -> ModelResponse:
        """Create completion using Anthropic API."""
        client = self._get_anthropic_client()

        response = await client.messages.create(
            model=self.model,
            max_tokens=max_tokens,
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
            temperature=self.settings.temperature,
        )

        content = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )

        return ModelResponse(
            content=content,
            model=self.model,
            provider=LLMProvider.CLAUDE,
            usage={
                "prompt_tokens": response.usage.input_tokens if response.usage else 0,
                "completion_tokens": response.usage.output_tokens if response.usage else 0,
                "total_tokens": (
                    (response.usage.input_tokens + response.usage.output_tokens)
                    if response.usage else 0
                ),
            },
            finish_reason=response.stop_reason or "stop",
        )

    async def _gemini_completion(self, system_prompt: str, user_prompt: str, max_tokens: int) -> ModelResponse:
        """Create completion using Google Gemini API."""
        self._configure_gemini()

        gemini_model = genai.GenerativeModel(self.model, system_instruction=system_prompt)
        response = await gemini_model.generate_content_async(
            user_prompt,
            generation_config={
                "temperature": self.settings.temperature,
                "max_output_tokens": max_tokens,
            },
        )

        finish_reason = "stop"
        if response.candidates:
            finish_reason = getattr(response.candidates[0].finish_reason, "name", "stop")

        return ModelResponse(
            content=response.text or "",
            model=self.model,
            provider=LLMProvider.GEMINI,
            usage={
                "prompt_tokens": 0,
                "completion_tokens": 0,
                "total_tokens": 0,
            },
            finish_reason=finish_reason,
        )


# ============================================================================
# Demo Mode
# ============================================================================

DEMO_NOTE = "Demo mode: no completion provider is configured, so this critique is a fixed sample."


def _demo_full_analysis(user_prompt: str) -> Dict[str, Any]:
    reply: Dict[str, Any] = {
        "overallScore": 72,
        "scores": {category: 70 for category in CANONICAL_CATEGORIES},
        "strengths": [
            {
                "category": "voice_consistency",
                "title": "Distinct narrative voice",
                "description": "The narration keeps a steady, recognisable tone across the sampled passages.",
                "examples": [],
            }
        ],
        "weaknesses": [
            {
                "category": "pacing",
                "title": "Slow middle section",
                "description": "Scenes in the middle linger on setup after the stakes are already clear.",
                "examples": [],
                "suggestions": ["Cut or merge scenes that restate information the reader already has."],
            }
        ],
        "opportunities": [
            {
                "category": "tension",
                "title": "Sharpen chapter endings",
                "description": "Ending chapters on an open question would pull the reader forward.",
            }
        ],
        "issues": [
            {
                "type": "telling_not_showing",
                "severity": "moderate",
                "category": "show_dont_tell",
                "title": "Emotions stated rather than dramatised",
                "description": "Characters' feelings are named directly instead of shown through action.",
                "suggestion": "Replace named emotions with gesture, dialogue or physical reaction.",
                "autoFixAvailable": False,
            }
        ],
        "executiveSummary": DEMO_NOTE,
        "priorityActions": [
            {
                "priority": 1,
                "category": "pacing",
                "action": "Tighten the middle third by removing repeated setup.",
                "impact": "high",
                "effort": "medium",
                "affectedAreas": ["middle chapters"],
            }
        ],
    }
    reply["scores"]["pacing"] = 62
    reply["scores"]["voice_consistency"] = 81
    if '"genreFit"' in user_prompt:
        genre_match = re.search(r'"genre": "([^"]+)"', user_prompt)
        reply["genreFit"] = {
            "genre": genre_match.group(1) if genre_match else "unspecified",
            "fitScore": 70,
            "expectations": [],
            "gaps": [],
            "recommendations": [],
        }
    if '"similarWorks"' in user_prompt:
        reply["similarWorks"] = []
    return reply


class DemoCompletionClient:
    """
    Offline stand-in for a provider.

    Replies are fixed, schema-conformant JSON chosen from the schema named in
    the prompt, so every downstream step runs unchanged.
    """

    provider = LLMProvider.DEMO
    model = "demo"

    async def complete(self, system_prompt: str, user_prompt: str, max_tokens: int) -> ModelResponse:
        if '"rewriteOptions"' in user_prompt:
            reply: Dict[str, Any] = {
                "rewriteOptions": [
                    "Demo rewrite one.",
                    "Demo rewrite two.",
                    "Demo rewrite three.",
                ],
                "explanation": DEMO_NOTE,
            }
        elif '"changedAspects"' in user_prompt:
            reply = {"improvement": 0, "changedAspects": [], "summary": DEMO_NOTE}
        elif '"overallScore"' in user_prompt:
            reply = _demo_full_analysis(user_prompt)
        else:
            reply = {"score": 70, "feedback": DEMO_NOTE, "suggestions": []}

        logger.info("[DemoCompletionClient.complete] Returning canned reply")
        return ModelResponse(
            content=json.dumps(reply),
            model=self.model,
            provider=self.provider,
        )


def create_completion_client(settings: CritiqueSettings) -> CompletionClient:
    """Pick the provider client once, at construction time."""
    provider = settings.resolve_provider()
    if provider == LLMProvider.DEMO:
        logger.info("[create_completion_client] No provider configured or demo mode set, using demo client")
        return DemoCompletionClient()
    logger.info(f"[create_completion_client] Using provider={provider.value}, model={settings.resolve_model()}")
    return UnifiedModelClient(settings)
