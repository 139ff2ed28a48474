"""
Ship or Sink: Change
LLM Gateway.

Provider-agnostic LLM router with:
    - Multi-provider support (Anthropic Claude, OpenAI, local stub)
    - Token tracking & cost logging

One attempt per call. A provider error is logged to ai_usage_logs and
re-raised; assistants turn it into a user-facing error string.

Usage:
    from app.ai.gateway import LLMGateway
    gw = LLMGateway(default_model="claude-3-5-haiku-20241022")
    result = gw.chat([{"role": "user", "content": "Hi"}], purpose="chat")
"""

import logging
import os
import time
from abc import ABC, abstractmethod

from app.models import db
from app.models.ai import AIUsageLog, calculate_cost

logger = logging.getLogger(__name__)


# ── Provider Abstract Base ────────────────────────────────────────────────────

class LLMProvider(ABC):
    """Abstract interface for LLM providers."""

    @abstractmethod
    def chat(self, messages: list, model: str, **kwargs) -> dict:
        """
        Send a chat completion request.

        Args:
            messages: List of {"role": "...", "content": "..."} dicts.
            model: Model identifier string.
            **kwargs: temperature, max_tokens, etc.

        Returns:
            dict with keys: content, prompt_tokens, completion_tokens, model
        """
        ...


# ── Anthropic Provider ────────────────────────────────────────────────────────

class AnthropicProvider(LLMProvider):
    """Claude API (Anthropic) provider."""

    def __init__(self):
        self.api_key = os.getenv("ANTHROPIC_API_KEY", "")
        self._client = None

    def _get_client(self):
        if self._client is None:
            try:
                import anthropic
            except ImportError as exc:
                raise RuntimeError("anthropic package not installed. Run: pip install anthropic") from exc
            self._client = anthropic.Anthropic(api_key=self.api_key)
        return self._client

    def chat(self, messages: list, model: str = "claude-3-5-haiku-20241022", **kwargs) -> dict:
        client = self._get_client()

        # Anthropic takes the system prompt separately
        system_msg = ""
        chat_messages = []
        for m in messages:
            if m["role"] == "system":
                system_msg = m["content"]
            else:
                chat_messages.append(m)

        params = {
            "model": model,
            "messages": chat_messages,
            "max_tokens": kwargs.get("max_tokens", 1024),
            "temperature": kwargs.get("temperature", 0.7),
        }
        if system_msg:
            params["system"] = system_msg

        response = client.messages.create(**params)

        return {
            "content": response.content[0].text,
            "prompt_tokens": response.usage.input_tokens,
            "completion_tokens": response.usage.output_tokens,
            "model": model,
        }


# ── OpenAI Provider ───────────────────────────────────────────────────────────

class OpenAIProvider(LLMProvider):
    """OpenAI GPT provider."""

    def __init__(self):
        self.api_key = os.getenv("OPENAI_API_KEY", "")
        self._client = None

    def _get_client(self):
        if self._client is None:
            try:
                import openai
            except ImportError as exc:
                raise RuntimeError("openai package not installed. Run: pip install openai") from exc
            self._client = openai.OpenAI(api_key=self.api_key)
        return self._client

    def chat(self, messages: list, model: str = "gpt-4o-mini", **kwargs) -> dict:
        client = self._get_client()
        response = client.chat.completions.create(
            model=model,
            messages=messages,
            max_tokens=kwargs.get("max_tokens", 1024),
            temperature=kwargs.get("temperature", 0.7),
        )
        choice = response.choices[0]
        return {
            "content": choice.message.content or "",
            "prompt_tokens": response.usage.prompt_tokens,
            "completion_tokens": response.usage.completion_tokens,
            "model": model,
        }


# ── Local Stub Provider (for dev/test without API keys) ──────────────────────

class LocalStubProvider(LLMProvider):
    """
    Local stub that returns deterministic responses for dev/testing.
    No API key required.
    """

    def chat(self, messages: list, model: str = "local-stub", **kwargs) -> dict:
        user_msg = ""
        for m in reversed(messages):
            if m["role"] == "user":
                user_msg = m["content"]
                break

        content = self._generate_stub_response(user_msg)

        return {
            "content": content,
            "prompt_tokens": len(user_msg.split()) * 2,  # rough estimate
            "completion_tokens": len(content.split()) * 2,
            "model": "local-stub",
        }

    @staticmethod
    def _generate_stub_response(user_msg: str) -> str:
        lower = user_msg.lower()

        if "conversation starters" in lower:
            return "\n".join([
                '1. "Good morning, do you have a few minutes to talk about the rollout?" - '
                "A low-pressure way to open the conversation.",
                '2. "What concerns you most about the new process?" - '
                "Surfaces objections early so you can address them.",
                '3. "How do you see this affecting your team day to day?"',
                "   Invites them to describe impact in their own words.",
                '4. "I hear you, and I appreciate you raising that." - '
                "Shows empathy before moving to solutions.",
                '5. "Can we agree on a next step before Friday?" - '
                "Closes with a concrete commitment.",
            ])

        return (
            "Focus on the stakeholders with the lowest engagement first. "
            "Schedule short one-on-one conversations, listen for their concerns, "
            "and tie the change to outcomes they already care about."
        )


# ── LLM Gateway (Main Interface) ─────────────────────────────────────────────

class LLMGateway:
    """
    Central gateway for all LLM calls.

    Features:
        - Provider routing based on model name
        - Token/cost tracking (persisted to DB)

    Usage:
        gw = LLMGateway()
        result = gw.chat(
            messages=[{"role": "user", "content": "Give me 5 conversation starters"}],
            purpose="conversation_starters",
            user_id="auth-subject",
        )
    """

    PROVIDER_MAP = {
        # Anthropic
        "claude-3-5-haiku-20241022": "anthropic",
        "claude-3-5-sonnet-20241022": "anthropic",
        # OpenAI
        "gpt-4o-mini": "openai",
        "gpt-4o": "openai",
        # Local stub (dev/test)
        "local-stub": "local",
    }

    def __init__(self, default_model: str | None = None):
        self._providers = {}
        self.default_model = default_model or os.getenv(
            "LLM_DEFAULT_CHAT_MODEL", "claude-3-5-haiku-20241022"
        )
        self._init_providers()

    def _init_providers(self):
        """Initialize available providers based on environment."""
        self._providers["local"] = LocalStubProvider()

        if os.getenv("ANTHROPIC_API_KEY"):
            self._providers["anthropic"] = AnthropicProvider()
        if os.getenv("OPENAI_API_KEY"):
            self._providers["openai"] = OpenAIProvider()

    def _get_provider(self, model: str) -> tuple[LLMProvider, str]:
        """
        Resolve model to provider. Falls back to local stub if real provider unavailable.
        Returns (provider, provider_name).
        """
        provider_name = self.PROVIDER_MAP.get(model, "local")

        if provider_name in self._providers:
            return self._providers[provider_name], provider_name

        logger.warning(
            "Provider '%s' not available (no API key?). Falling back to local stub for model '%s'.",
            provider_name, model,
        )
        return self._providers["local"], "local"

    def chat(
        self,
        messages: list,
        model: str | None = None,
        *,
        purpose: str = "",
        user_id: str | None = None,
        project_id: int | None = None,
        **kwargs,
    ) -> dict:
        """
        Send a chat completion request.

        Args:
            messages: Chat messages.
            model: Model identifier (defaults to ``default_model``).
            purpose: What the call is for (e.g. "conversation_starters").
            user_id: Who triggered the call.
            project_id: Associated project.
            **kwargs: temperature, max_tokens passed to provider.

        Returns:
            dict: {content, prompt_tokens, completion_tokens, model, cost_usd,
                   latency_ms, provider}

        Raises:
            Whatever the provider raised; the failure is logged first.
        """
        model = model or self.default_model
        provider, provider_name = self._get_provider(model)

        start_time = time.time()
        try:
            result = provider.chat(messages, model, **kwargs)
        except Exception as exc:
            latency_ms = int((time.time() - start_time) * 1000)
            logger.warning(
                "LLM call failed",
                extra={"provider": provider_name, "model": model, "purpose": purpose, "error": str(exc)},
            )
            self._log_usage(
                provider=provider_name, model=model,
                prompt_tokens=0, completion_tokens=0,
                cost_usd=0.0, latency_ms=latency_ms,
                user_id=user_id, purpose=purpose, project_id=project_id,
                success=False, error_message=str(exc),
            )
            raise

        latency_ms = int((time.time() - start_time) * 1000)
        cost = calculate_cost(model, result["prompt_tokens"], result["completion_tokens"])
        result["cost_usd"] = cost
        result["latency_ms"] = latency_ms
        result["provider"] = provider_name

        self._log_usage(
            provider=provider_name, model=model,
            prompt_tokens=result["prompt_tokens"],
            completion_tokens=result["completion_tokens"],
            cost_usd=cost, latency_ms=latency_ms,
            user_id=user_id, purpose=purpose, project_id=project_id,
            success=True,
        )
        return result

    # ── Internal Logging ──────────────────────────────────────────────────

    @staticmethod
    def _log_usage(*, provider, model, prompt_tokens, completion_tokens,
                   cost_usd, latency_ms, user_id, purpose, project_id,
                   success, error_message=None):
        """Persist a usage log record.

        Flushed, not committed: the row lands with the caller's next commit.
        """
        log = AIUsageLog(
            provider=provider, model=model,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
            cost_usd=cost_usd, latency_ms=latency_ms,
            user_id=user_id, purpose=purpose, project_id=project_id,
            success=success, error_message=error_message,
        )
        db.session.add(log)
        db.session.flush()
