"""
Unit tests for configuration loading and provider resolution.
"""

import pytest
from pydantic import SecretStr
from pydantic import ValidationError as SettingsValidationError

from manuscript_critic.config import (
    ClaudeConfig,
    CritiqueOperation,
    CritiqueSettings,
    GeminiConfig,
    LLMProvider,
    OpenAIConfig,
    create_default_config_from_env,
    get_model_info,
)

PROVIDER_ENV_VARS = [
    "ANTHROPIC_API_KEY", "OPENAI_API_KEY", "OPENROUTER_API_KEY", "GEMINI_API_KEY", "DEEPSEEK_API_KEY",
    "CRITIQUE_PROVIDER", "CRITIQUE_MODEL", "CRITIQUE_DEMO_MODE", "CRITIQUE_MAX_RETRIES",
    "CRITIQUE_TIMEOUT_SECONDS", "SUPABASE_URL", "SUPABASE_SERVICE_KEY",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in PROVIDER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestCreateDefaultConfigFromEnv:
    """Tests for environment-driven configuration."""

    def test_no_keys_means_demo(self, clean_env):
        settings = create_default_config_from_env()

        assert settings.is_demo
        assert settings.resolve_model() == "demo"
        assert settings.get_enabled_providers() == []

    def test_reads_keys_and_overrides(self, clean_env):
        clean_env.setenv("ANTHROPIC_API_KEY", "sk-ant")
        clean_env.setenv("OPENAI_API_KEY", "sk-openai")
        clean_env.setenv("CRITIQUE_PROVIDER", "OpenAI")
        clean_env.setenv("CRITIQUE_MODEL", "gpt-4o-mini")
        clean_env.setenv("CRITIQUE_MAX_RETRIES", "5")
        clean_env.setenv("CRITIQUE_TIMEOUT_SECONDS", "45")
        clean_env.setenv("SUPABASE_URL", "https://example.supabase.co")
        clean_env.setenv("SUPABASE_SERVICE_KEY", "service-key")

        settings = create_default_config_from_env()

        assert settings.resolve_provider() == LLMProvider.OPENAI
        assert settings.resolve_model() == "gpt-4o-mini"
        assert settings.max_retries == 5
        assert settings.timeout_seconds == 45.0
        assert settings.claude.api_key.get_secret_value() == "sk-ant"
        assert settings.supabase_key.get_secret_value() == "service-key"

    @pytest.mark.parametrize("flag", ["1", "true", "YES", "on"])
    def test_demo_mode_flag(self, clean_env, flag):
        clean_env.setenv("ANTHROPIC_API_KEY", "sk-ant")
        clean_env.setenv("CRITIQUE_DEMO_MODE", flag)

        assert create_default_config_from_env().is_demo


class TestCritiqueSettings:
    """Tests for CritiqueSettings resolution helpers."""

    def test_claude_preferred_when_no_provider_chosen(self):
        settings = CritiqueSettings(
            openai=OpenAIConfig(api_key=SecretStr("a")),
            claude=ClaudeConfig(api_key=SecretStr("b")),
        )
        assert settings.resolve_provider() == LLMProvider.CLAUDE

    def test_unconfigured_provider_choice_is_ignored(self):
        settings = CritiqueSettings(gemini=GeminiConfig(api_key=SecretStr("g")), provider=LLMProvider.OPENAI)
        assert settings.resolve_provider() == LLMProvider.GEMINI

    def test_max_tokens_per_operation(self):
        settings = CritiqueSettings()

        assert settings.max_tokens_for(CritiqueOperation.FULL_ANALYSIS) == 8000
        assert settings.max_tokens_for(CritiqueOperation.QUICK_ANALYSIS) == 1000
        assert settings.max_tokens_for(CritiqueOperation.VERSION_COMPARISON) == 1500
        assert settings.max_tokens_for(CritiqueOperation.FIX_SUGGESTION) == 1500

    def test_max_tokens_capped_by_model_output_limit(self):
        settings = CritiqueSettings(
            openai=OpenAIConfig(api_key=SecretStr("a")),
            operation_max_tokens={CritiqueOperation.FULL_ANALYSIS: 50_000},
        )
        assert settings.max_tokens_for(CritiqueOperation.FULL_ANALYSIS) == 16384

    @pytest.mark.parametrize("field,value", [("max_retries", 0), ("max_retries", 11), ("timeout_seconds", 0)])
    def test_ranges_are_validated(self, field, value):
        with pytest.raises(SettingsValidationError):
            CritiqueSettings(**{field: value})

    def test_model_catalog_lookup(self):
        assert get_model_info(LLMProvider.CLAUDE, "claude-sonnet-4-20250514")["max_output"] == 8192
        assert get_model_info(LLMProvider.DEMO, "demo") is None
