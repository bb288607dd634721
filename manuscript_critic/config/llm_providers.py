"""
LLM Provider Configuration - BYOK (Bring Your Own Key) Support
Supports OpenAI, OpenRouter, Google Gemini, Anthropic Claude and DeepSeek,
plus an offline demo provider used when no key is configured.
"""

import os
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Type

from pydantic import BaseModel, Field, SecretStr


class LLMProvider(str, Enum):
    """Supported LLM providers."""
    OPENAI = "openai"
    OPENROUTER = "openrouter"
    GEMINI = "gemini"
    CLAUDE = "claude"
    DEEPSEEK = "deepseek"
    DEMO = "demo"


class CritiqueOperation(str, Enum):
    """Operations that call the completion model."""
    FULL_ANALYSIS = "full_analysis"
    QUICK_ANALYSIS = "quick_analysis"
    VERSION_COMPARISON = "version_comparison"
    FIX_SUGGESTION = "fix_suggestion"


# Output budgets tuned for the size of each reply schema
OPERATION_MAX_TOKENS: Dict[CritiqueOperation, int] = {
    CritiqueOperation.FULL_ANALYSIS: 8000,       # full critique with issues and actions
    CritiqueOperation.VERSION_COMPARISON: 1500,
    CritiqueOperation.FIX_SUGGESTION: 1500,
    CritiqueOperation.QUICK_ANALYSIS: 1000,      # single-aspect score and notes
}

DEFAULT_MAX_TOKENS = 4096  # Fallback for unknown operations


# ============================================================================
# Model Limits
# ============================================================================

# provider -> model -> token limits; unknown models are not capped
MODEL_CATALOG: Dict[LLMProvider, Dict[str, Dict[str, int]]] = {
    LLMProvider.OPENAI: {
        "gpt-4o": {"context_window": 128_000, "max_output": 16_384},
        "gpt-4o-mini": {"context_window": 128_000, "max_output": 16_384},
    },
    LLMProvider.OPENROUTER: {
        "anthropic/claude-3.5-sonnet": {"context_window": 200_000, "max_output": 8_192},
        "openai/gpt-4o": {"context_window": 128_000, "max_output": 16_384},
        "meta-llama/llama-3.3-70b-instruct": {"context_window": 131_072, "max_output": 4_096},
    },
    LLMProvider.GEMINI: {
        "gemini-1.5-pro": {"context_window": 2_000_000, "max_output": 8_192},
        "gemini-1.5-flash": {"context_window": 1_000_000, "max_output": 8_192},
    },
    LLMProvider.CLAUDE: {
        "claude-sonnet-4-20250514": {"context_window": 200_000, "max_output": 8_192},
        "claude-3-5-haiku-20241022": {"context_window": 200_000, "max_output": 8_192},
    },
    LLMProvider.DEEPSEEK: {
        "deepseek-chat": {"context_window": 64_000, "max_output": 8_192},
    },
}


# ============================================================================
# Provider Configuration Models
# ============================================================================

class ProviderConfig(BaseModel):
    """Credentials and endpoint for one provider."""
    provider: LLMProvider
    api_key: SecretStr
    base_url: Optional[str] = None
    organization_id: Optional[str] = None
    default_model: str
    enabled: bool = True


class OpenAIConfig(ProviderConfig):
    provider: LLMProvider = LLMProvider.OPENAI
    base_url: str = "https://api.openai.com/v1"
    default_model: str = "gpt-4o"


class OpenRouterConfig(ProviderConfig):
    provider: LLMProvider = LLMProvider.OPENROUTER
    base_url: str = "https://openrouter.ai/api/v1"
    default_model: str = "anthropic/claude-3.5-sonnet"


class GeminiConfig(ProviderConfig):
    provider: LLMProvider = LLMProvider.GEMINI
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    default_model: str = "gemini-1.5-pro"


class ClaudeConfig(ProviderConfig):
    provider: LLMProvider = LLMProvider.CLAUDE
    base_url: str = "https://api.anthropic.com/v1"
    default_model: str = "claude-sonnet-4-20250514"


class DeepSeekConfig(ProviderConfig):
    """OpenAI-compatible API."""
    provider: LLMProvider = LLMProvider.DEEPSEEK
    base_url: str = "https://api.deepseek.com"
    default_model: str = "deepseek-chat"


# Config class and key variable per provider, in preference order
PROVIDER_SOURCES: List[Tuple[LLMProvider, Type[ProviderConfig], str]] = [
    (LLMProvider.CLAUDE, ClaudeConfig, "ANTHROPIC_API_KEY"),
    (LLMProvider.OPENAI, OpenAIConfig, "OPENAI_API_KEY"),
    (LLMProvider.OPENROUTER, OpenRouterConfig, "OPENROUTER_API_KEY"),
    (LLMProvider.GEMINI, GeminiConfig, "GEMINI_API_KEY"),
    (LLMProvider.DEEPSEEK, DeepSeekConfig, "DEEPSEEK_API_KEY"),
]


# ============================================================================
# Master Configuration
# ============================================================================

class CritiqueSettings(BaseModel):
    """Master configuration for the critique pipeline."""

    # Provider configurations (user provides their own keys)
    openai: Optional[OpenAIConfig] = None
    openrouter: Optional[OpenRouterConfig] = None
    gemini: Optional[GeminiConfig] = None
    claude: Optional[ClaudeConfig] = None
    deepseek: Optional[DeepSeekConfig] = None

    # Which provider/model to call; first enabled provider when unset
    provider: Optional[LLMProvider] = None
    model: Optional[str] = None
    demo_mode: bool = False

    # Completion gateway
    temperature: float = Field(default=0.4, ge=0.0, le=2.0)
    max_retries: int = Field(default=3, ge=1, le=10)
    timeout_seconds: float = Field(default=120.0, gt=0, le=600)
    retry_base_delay: float = Field(default=1.0, ge=0.0)
    retry_max_jitter: float = Field(default=1.0, ge=0.0)
    operation_max_tokens: Dict[CritiqueOperation, int] = Field(
        default_factory=lambda: dict(OPERATION_MAX_TOKENS)
    )

    # Sampling budgets (tokens, converted with chars_per_token)
    token_budget: int = Field(default=50000, ge=1)
    chars_per_token: int = Field(default=4, ge=1)
    quick_token_budget: int = Field(default=1250, ge=1)
    comparison_token_budget: int = Field(default=750, ge=1)
    fix_excerpt_chars: int = Field(default=500, ge=1)

    # Request validation
    min_word_count: int = Field(default=100, ge=0)

    # Persistence
    supabase_url: Optional[str] = None
    supabase_key: Optional[SecretStr] = None

    def get_provider_config(self, provider: LLMProvider) -> Optional[ProviderConfig]:
        if provider == LLMProvider.DEMO:
            return None
        return getattr(self, provider.value, None)

    def get_enabled_providers(self) -> List[LLMProvider]:
        """Providers with a key configured, in preference order."""
        enabled = []
        for provider, _, _ in PROVIDER_SOURCES:
            config = self.get_provider_config(provider)
            if config and config.enabled:
                enabled.append(provider)
        return enabled

    def resolve_provider(self) -> LLMProvider:
        """Provider to call, falling back to demo when nothing usable is configured."""
        if self.demo_mode:
            return LLMProvider.DEMO
        enabled = self.get_enabled_providers()
        if self.provider is not None and self.provider in enabled:
            return self.provider
        if enabled:
            return enabled[0]
        return LLMProvider.DEMO

    def resolve_model(self) -> str:
        provider = self.resolve_provider()
        if provider == LLMProvider.DEMO:
            return "demo"
        if self.model:
            return self.model
        return self.get_provider_config(provider).default_model

    @property
    def is_demo(self) -> bool:
        return self.resolve_provider() == LLMProvider.DEMO

    def max_tokens_for(self, operation: CritiqueOperation) -> int:
        """Output budget for an operation, capped by the model's max output."""
        limit = self.operation_max_tokens.get(operation, DEFAULT_MAX_TOKENS)
        info = get_model_info(self.resolve_provider(), self.resolve_model())
        if info and info.get("max_output"):
            return min(limit, info["max_output"])
        return limit


# ============================================================================
# Helper Functions
# ============================================================================

def get_model_info(provider: LLMProvider, model: str) -> Optional[Dict[str, Any]]:
    """Catalog entry for a provider's model, if known."""
    return MODEL_CATALOG.get(provider, {}).get(model)


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


def create_default_config_from_env() -> CritiqueSettings:
    """Create configuration from environment variables."""
    config = CritiqueSettings()

    for provider, config_cls, key_var in PROVIDER_SOURCES:
        api_key = os.getenv(key_var)
        if not api_key:
            continue
        provider_config = config_cls(api_key=SecretStr(api_key))
        if provider == LLMProvider.OPENAI:
            provider_config.organization_id = os.getenv("OPENAI_ORG_ID")
        setattr(config, provider.value, provider_config)

    if os.getenv("CRITIQUE_PROVIDER"):
        config.provider = LLMProvider(os.getenv("CRITIQUE_PROVIDER").strip().lower())
    config.model = os.getenv("CRITIQUE_MODEL") or None
    config.demo_mode = _env_flag("CRITIQUE_DEMO_MODE")

    if os.getenv("CRITIQUE_MAX_RETRIES"):
        config.max_retries = int(os.getenv("CRITIQUE_MAX_RETRIES"))
    if os.getenv("CRITIQUE_TIMEOUT_SECONDS"):
        config.timeout_seconds = float(os.getenv("CRITIQUE_TIMEOUT_SECONDS"))

    # Supabase
    config.supabase_url = os.getenv("SUPABASE_URL")
    if os.getenv("SUPABASE_SERVICE_KEY"):
        config.supabase_key = SecretStr(os.getenv("SUPABASE_SERVICE_KEY"))

    return config
