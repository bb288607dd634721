"""
Manuscript Critic Configuration Module
LLM provider configuration and pipeline settings.
"""

from .llm_providers import (
    MODEL_CATALOG,
    OPERATION_MAX_TOKENS,
    ClaudeConfig,
    CritiqueOperation,
    CritiqueSettings,
    DeepSeekConfig,
    GeminiConfig,
    LLMProvider,
    OpenAIConfig,
    OpenRouterConfig,
    ProviderConfig,
    create_default_config_from_env,
    get_model_info,
)
from .logging_setup import configure_logging

__all__ = [
    "LLMProvider",
    "CritiqueOperation",
    "MODEL_CATALOG",
    "OPERATION_MAX_TOKENS",
    "ProviderConfig",
    "OpenAIConfig",
    "OpenRouterConfig",
    "GeminiConfig",
    "ClaudeConfig",
    "DeepSeekConfig",
    "CritiqueSettings",
    "get_model_info",
    "create_default_config_from_env",
    "configure_logging",
]
