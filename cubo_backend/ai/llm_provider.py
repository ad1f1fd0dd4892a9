"""
Cubo Estratégia — LLM Provider Abstraction Layer

Provides a unified interface for the text-generation backends used by the
benchmark / suggestions proxy:
  - AnthropicProvider: Uses Claude API (requires ANTHROPIC_API_KEY on the server)
  - MockProvider: Returns canned responses for testing without API keys

The API key is read on the server only and is never sent to the browser.
Every provider call is bounded by AI_TIMEOUT_SECONDS; failures raise
ProxyError instead of hanging or leaking provider exceptions.

The factory function get_provider() selects the appropriate provider based on
available API keys and the AI_PROVIDER setting.
"""

import os
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from ..errors import ProxyError

logger = logging.getLogger("cubo.ai")

DEFAULT_MODEL = os.environ.get("AI_MODEL", "claude-sonnet-4-20250514")
DEFAULT_TIMEOUT_SECONDS = float(os.environ.get("AI_TIMEOUT_SECONDS", "60"))


@dataclass
class LLMResponse:
    """Unified response from any LLM provider."""
    content: str = ""
    stop_reason: str = "end_turn"
    usage: dict = field(default_factory=dict)
    raw: dict = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Abstract Base Provider
# ---------------------------------------------------------------------------

class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    @abstractmethod
    def complete(self, prompt: str, system_prompt: str = "") -> LLMResponse:
        """Send a single prompt and return the generated text."""
        ...

    @abstractmethod
    def get_name(self) -> str:
        """Return provider name for display."""
        ...


# ---------------------------------------------------------------------------
# Anthropic Provider (Claude)
# ---------------------------------------------------------------------------

class AnthropicProvider(LLMProvider):
    """
    LLM provider using Anthropic's Claude API.

    Requires ANTHROPIC_API_KEY environment variable.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        max_tokens: int = 2048,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        import anthropic

        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY", "")
        if not self.api_key:
            raise ValueError(
                "ANTHROPIC_API_KEY not set. Set it in environment or pass api_key."
            )

        self._anthropic = anthropic
        self.client = anthropic.Anthropic(
            api_key=self.api_key, timeout=timeout, max_retries=1
        )
        self.model = model
        self.max_tokens = max_tokens

    def get_name(self) -> str:
        return f"Claude ({self.model})"

    def complete(self, prompt: str, system_prompt: str = "") -> LLMResponse:
        kwargs = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system_prompt:
            kwargs["system"] = system_prompt

        try:
            response = self.client.messages.create(**kwargs)
        except self._anthropic.APITimeoutError as e:
            logger.error(f"Anthropic API timeout: {e}")
            raise ProxyError(
                "The text-generation service took too long to answer. Try again.",
                error_code="PROXY_TIMEOUT",
            ) from e
        except self._anthropic.APIError as e:
            logger.error(f"Anthropic API error: {e}")
            raise ProxyError("The text-generation service failed. Try again.") from e

        content_text = "".join(
            block.text for block in response.content if block.type == "text"
        )

        return LLMResponse(
            content=content_text,
            stop_reason=response.stop_reason or "end_turn",
            usage={
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens,
            },
            raw={"id": response.id, "model": response.model},
        )


# ---------------------------------------------------------------------------
# Mock Provider (for testing without API key)
# ---------------------------------------------------------------------------

class MockProvider(LLMProvider):
    """
    Mock LLM provider for testing.

    Recognizes which prompt it received and answers with a canned benchmark
    summary or a valid suggestions JSON document, so the whole proxy path can
    run end to end without any API key.
    """

    def __init__(self):
        self.calls: list[str] = []

    def get_name(self) -> str:
        return "Mock AI (testing mode)"

    def complete(self, prompt: str, system_prompt: str = "") -> LLMResponse:
        self.calls.append(prompt)

        if '"projects"' in prompt:
            return LLMResponse(content=json.dumps({
                "projects": [
                    {
                        "name": "Automação do atendimento",
                        "category": "Core",
                        "impact": 7,
                        "complexity": 4,
                        "description": "Chatbot para triagem de chamados recorrentes.",
                        "expectedReturn": "Redução de 20% no custo de atendimento",
                    },
                    {
                        "name": "Marketplace de parceiros",
                        "category": "Adjacente",
                        "impact": 8,
                        "complexity": 7,
                        "description": "Abrir a base de clientes a parceiros selecionados.",
                        "expectedReturn": "Nova linha de receita recorrente",
                    },
                    {
                        "name": "Plataforma de dados como serviço",
                        "category": "Transformacional",
                        "impact": 9,
                        "complexity": 9,
                        "description": "Monetizar dados agregados e anonimizados.",
                        "expectedReturn": "Receita de novos segmentos",
                    },
                ]
            }, ensure_ascii=False))

        return LLMResponse(content=(
            "**Benchmarks de ROI (modo de teste)**\n\n"
            "1. Faixa de ROI comum: 15-25% ao ano\n"
            "2. Fatores: escopo, adoção e maturidade de dados\n"
            "3. Casos de sucesso: consulte relatórios setoriais recentes\n"
            "4. Timeframe típico de retorno: 12 a 24 meses\n"
            "5. Riscos: atrasos de implantação e baixa adesão"
        ))


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

def get_provider(
    provider_name: str | None = None,
    api_key: str | None = None,
    model: str = DEFAULT_MODEL,
) -> LLMProvider:
    """
    Get an LLM provider instance.

    Args:
        provider_name: "anthropic", "mock", or "auto" (tries Anthropic first,
            falls back to mock). Defaults to the AI_PROVIDER env variable.
        api_key: Optional API key override
        model: Model name for Anthropic
    """
    provider_name = provider_name or os.environ.get("AI_PROVIDER", "auto")

    if provider_name == "anthropic":
        return AnthropicProvider(api_key=api_key, model=model)
    elif provider_name == "mock":
        return MockProvider()
    elif provider_name == "auto":
        key = api_key or os.environ.get("ANTHROPIC_API_KEY", "")
        if key:
            try:
                return AnthropicProvider(api_key=key, model=model)
            except (ImportError, ValueError) as e:
                logger.warning(f"Anthropic unavailable ({e}), falling back to mock")
                return MockProvider()
        logger.info("No ANTHROPIC_API_KEY found, using mock provider")
        return MockProvider()
    else:
        raise ValueError(f"Unknown provider: {provider_name}. Use 'anthropic', 'mock', or 'auto'.")
