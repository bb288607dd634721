"""
Unit tests for the completion gateway.

Tests cover:
- Retry on transient errors with bounded attempts
- No retry on non-retryable errors or malformed replies
- Per-attempt deadline and ProviderTimeout
- Cancellation between attempts
- Backoff delay calculation
"""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from manuscript_critic.config import CritiqueSettings
from manuscript_critic.core.errors import AnalysisCancelled, ProviderTimeout, ProviderUnavailable
from manuscript_critic.services.gateway import CompletionGateway, is_retryable_error


class RateLimitError(Exception):
    status_code = 429


class AuthenticationError(Exception):
    status_code = 401


class SlowClient:
    """Client whose first calls never finish within the deadline."""

    provider = None
    model = "slow"

    def __init__(self, slow_calls: int):
        self.slow_calls = slow_calls
        self.calls = 0

    async def complete(self, system_prompt, user_prompt, max_tokens):
        from manuscript_critic.services import ModelResponse

        self.calls += 1
        if self.calls <= self.slow_calls:
            await asyncio.sleep(10)
        return ModelResponse(content='{"ok": true}', model=self.model, provider=None)


class TestIsRetryableError:
    """Tests for transient error classification."""

    @pytest.mark.parametrize("error", [
        RateLimitError("slow down"),
        Exception("Error code: 503 - service unavailable"),
        Exception("Request timed out"),
        Exception("Anthropic API is overloaded"),
        ConnectionError("reset by peer"),
        asyncio.TimeoutError(),
    ])
    def test_transient_errors(self, error):
        assert is_retryable_error(error)

    @pytest.mark.parametrize("error", [
        AuthenticationError("bad key"),
        Exception("Error code: 401 - invalid api key"),
        Exception("model not found: gpt-9"),
        ValueError("something else entirely"),
    ])
    def test_permanent_errors(self, error):
        assert not is_retryable_error(error)

    def test_status_code_takes_precedence_over_message(self):
        error = RateLimitError("401 in the message but 429 on the wire")
        assert is_retryable_error(error)


class TestInvoke:
    """Tests for CompletionGateway.invoke."""

    @pytest.mark.asyncio
    async def test_two_transient_failures_then_success(self, scripted_client, gateway_for):
        client = scripted_client([RateLimitError("rate limit"), RateLimitError("rate limit"), "reply"])
        gateway = gateway_for(client, max_retries=3)

        assert await gateway.invoke("system", "prompt", 100) == "reply"
        assert client.attempts == 3

    @pytest.mark.asyncio
    async def test_always_failing_raises_unavailable_after_max_retries(self, scripted_client, gateway_for):
        client = scripted_client([Exception("503 service unavailable")])
        gateway = gateway_for(client, max_retries=4)

        with pytest.raises(ProviderUnavailable) as exc_info:
            await gateway.invoke("system", "prompt", 100)

        assert client.attempts == 4
        assert exc_info.value.attempts == 4
        assert exc_info.value.retryable is True

    @pytest.mark.asyncio
    async def test_non_retryable_error_fails_immediately(self, scripted_client, gateway_for):
        client = scripted_client([AuthenticationError("invalid api key"), "never reached"])
        gateway = gateway_for(client, max_retries=3)

        with pytest.raises(ProviderUnavailable) as exc_info:
            await gateway.invoke("system", "prompt", 100)

        assert client.attempts == 1
        assert exc_info.value.retryable is False
        assert isinstance(exc_info.value.cause, AuthenticationError)

    @pytest.mark.asyncio
    async def test_malformed_reply_is_not_retried(self, scripted_client, gateway_for):
        client = scripted_client(["this is not json at all"])
        gateway = gateway_for(client)

        assert await gateway.invoke("system", "prompt", 100) == "this is not json at all"
        assert client.attempts == 1

    @pytest.mark.asyncio
    async def test_passes_prompts_and_token_limit(self, scripted_client, gateway_for):
        client = scripted_client(["ok"])
        await gateway_for(client).invoke("the system", "the prompt", 1234)

        assert client.calls[0] == {"system": "the system", "user": "the prompt", "max_tokens": 1234}

    @pytest.mark.asyncio
    async def test_deadline_exceeded_on_every_attempt_raises_timeout(self, gateway_for):
        client = SlowClient(slow_calls=10)
        gateway = gateway_for(client, max_retries=2, timeout_seconds=0.01)

        with pytest.raises(ProviderTimeout) as exc_info:
            await gateway.invoke("system", "prompt", 100)

        assert client.calls == 2
        assert exc_info.value.attempts == 2

    @pytest.mark.asyncio
    async def test_timeout_then_success(self, gateway_for):
        client = SlowClient(slow_calls=1)
        gateway = gateway_for(client, max_retries=3, timeout_seconds=0.01)

        assert await gateway.invoke("system", "prompt", 100) == '{"ok": true}'
        assert client.calls == 2

    @pytest.mark.asyncio
    async def test_last_cause_decides_error_type(self, scripted_client, gateway_for):
        client = scripted_client([asyncio.TimeoutError(), Exception("502 bad gateway")])
        gateway = gateway_for(client, max_retries=2)

        with pytest.raises(ProviderUnavailable):
            await gateway.invoke("system", "prompt", 100)

    @pytest.mark.asyncio
    async def test_cancelled_before_first_attempt(self, scripted_client, gateway_for):
        client = scripted_client(["reply"])
        cancel = asyncio.Event()
        cancel.set()

        with pytest.raises(AnalysisCancelled):
            await gateway_for(client).invoke("system", "prompt", 100, cancel_event=cancel)
        assert client.attempts == 0

    @pytest.mark.asyncio
    async def test_cancelled_between_attempts(self, scripted_client):
        client = scripted_client([RateLimitError("rate limit"), "reply"])
        cancel = asyncio.Event()

        async def cancel_during_backoff(delay):
            cancel.set()

        gateway = CompletionGateway(client, max_retries=3, base_delay=0, max_jitter=0, sleep=cancel_during_backoff)

        with pytest.raises(AnalysisCancelled):
            await gateway.invoke("system", "prompt", 100, cancel_event=cancel)
        assert client.attempts == 1

    @pytest.mark.asyncio
    async def test_backoff_sleeps_between_attempts(self, scripted_client):
        client = scripted_client([RateLimitError("rate limit"), RateLimitError("rate limit"), "reply"])
        sleep = AsyncMock()
        gateway = CompletionGateway(client, max_retries=3, base_delay=1.0, max_jitter=0.0, sleep=sleep)

        await gateway.invoke("system", "prompt", 100)

        assert [call.args[0] for call in sleep.await_args_list] == [1.0, 3.0]


class TestBackoffDelay:
    """Tests for backoff_delay."""

    def test_exponential_growth(self):
        gateway = CompletionGateway(AsyncMock(), base_delay=1.0, max_jitter=0.0)
        assert [gateway.backoff_delay(n) for n in (1, 2, 3)] == [1.0, 3.0, 9.0]

    def test_jitter_is_bounded(self):
        gateway = CompletionGateway(AsyncMock(), base_delay=1.0, max_jitter=1.0)
        with patch("manuscript_critic.services.gateway.random.uniform", return_value=0.5) as uniform:
            assert gateway.backoff_delay(2) == 3.5
        uniform.assert_called_once_with(0, 1.0)

    def test_retry_after_hint_raises_delay(self):
        error = RateLimitError("slow down")
        error.retry_after = 30
        gateway = CompletionGateway(AsyncMock(), base_delay=1.0, max_jitter=0.0)
        assert gateway.backoff_delay(1, error) == 30.0

    def test_from_settings(self):
        settings = CritiqueSettings(max_retries=5, timeout_seconds=30, retry_base_delay=2.0)
        gateway = CompletionGateway.from_settings(AsyncMock(), settings)

        assert gateway.max_retries == 5
        assert gateway.timeout_seconds == 30
        assert gateway.base_delay == 2.0

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            CompletionGateway(AsyncMock(), max_retries=0)
