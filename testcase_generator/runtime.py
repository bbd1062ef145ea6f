"""
Pluggable LLM runtime abstraction for the test case generator.

Provides a unified interface over Google Gemini (default) and OpenAI-compatible
APIs. One call is one round trip: no retries, no caching, no streaming.
"""

from __future__ import annotations
from typing import Optional, Dict, Any, List, Protocol
import logging

from google import genai
from google.genai import types
from openai import OpenAI

from .config import Settings
from .exceptions import AIProviderError, ConfigurationError, EmptyAIResponseError

logger = logging.getLogger(__name__)


class LLMRuntime(Protocol):
    """Protocol for all LLM runtime implementations."""

    def generate(self, prompt: str) -> str:
        """Send the prompt and return the raw text of the first candidate."""
        ...

    def get_model_info(self) -> Dict[str, Any]:
        """Get information about the current model."""
        ...


class GeminiRuntime:
    """Runtime for the Google Gemini API via the google-genai SDK."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash",
        timeout: float = 60.0,
        temperature: Optional[float] = None,
        client: Optional[genai.Client] = None
    ):
        self.model = model
        self.timeout = timeout
        self.temperature = temperature
        self.client = client or genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=int(timeout * 1000))
        )

    def generate(self, prompt: str) -> str:
        """Generate a response and return candidates[0].content.parts[0].text."""
        config = None
        if self.temperature is not None:
            config = types.GenerateContentConfig(temperature=self.temperature)

        try:
            response = self.client.models.generate_content(
                model=self.model,
                contents=prompt,
                config=config
            )
        except Exception as e:
            raise AIProviderError(f"Failed to generate response from gemini ({self.model}): {e}", e) from e

        return self._first_candidate_text(response)

    @staticmethod
    def _first_candidate_text(response: Any) -> str:
        candidates = getattr(response, "candidates", None) or []
        if not candidates:
            raise EmptyAIResponseError("No candidates returned from Gemini")

        content = getattr(candidates[0], "content", None)
        parts = getattr(content, "parts", None) or []
        text = getattr(parts[0], "text", None) if parts else None
        if not text:
            raise EmptyAIResponseError("No content returned from Gemini")
        return text

    def get_model_info(self) -> Dict[str, Any]:
        return {
            "name": "gemini",
            "model": self.model,
            "timeout": self.timeout,
            "type": "gemini"
        }


class OpenAICompatibleRuntime:
    """
    Runtime for OpenAI-compatible APIs.
    Works with OpenAI and with local servers exposing the same chat API.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: Optional[str] = None,
        timeout: float = 60.0,
        temperature: Optional[float] = None,
        name: str = "openai",
        client: Optional[OpenAI] = None
    ):
        self.base_url = base_url
        self.model = model
        self.timeout = timeout
        self.temperature = temperature
        self.name = name
        self.client = client or OpenAI(
            base_url=base_url,
            api_key=api_key,
            timeout=timeout,
            max_retries=0
        )

    def generate(self, prompt: str) -> str:
        """Generate a response and return choices[0].message.content."""
        kwargs: Dict[str, Any] = {}
        if self.temperature is not None:
            kwargs["temperature"] = self.temperature

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                **kwargs
            )
        except Exception as e:
            raise AIProviderError(f"Failed to generate response from {self.name}: {e}", e) from e

        choices = response.choices or []
        if not choices:
            raise EmptyAIResponseError(f"No choices returned from {self.name}")
        content = choices[0].message.content
        if not content:
            raise EmptyAIResponseError(f"No content returned from {self.name}")
        return content

    def get_model_info(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "model": self.model,
            "base_url": self.base_url,
            "type": "openai-compatible"
        }


class MockLLMRuntime:
    """Mock runtime for testing - returns predefined responses."""

    def __init__(self, responses: Dict[str, str], default: str = "[]"):
        """
        Args:
            responses: Map from prompt keywords to mock responses
            default: Response when no keyword matches
        """
        self.responses = responses
        self.default = default
        self.call_count = 0
        self.prompts: List[str] = []

    @property
    def last_prompt(self) -> str:
        return self.prompts[-1] if self.prompts else ""

    def generate(self, prompt: str) -> str:
        """Return mock response based on prompt content."""
        self.call_count += 1
        self.prompts.append(prompt)

        for keyword, response in self.responses.items():
            if keyword.lower() in prompt.lower():
                return response

        return self.default

    def get_model_info(self) -> Dict[str, Any]:
        return {
            "name": "mock",
            "type": "mock",
            "responses_count": len(self.responses)
        }


class RuntimeFactory:
    """Builds the runtime named by the settings' provider."""

    def __init__(self):
        self._runtimes = {
            "gemini": self._create_gemini,
            "openai": self._create_openai,
            "mock": self._create_mock,
        }

    def register_runtime(self, name: str, builder):
        """Register a custom runtime builder taking a Settings instance."""
        self._runtimes[name] = builder

    def create_runtime(self, settings: Settings) -> LLMRuntime:
        if settings.provider not in self._runtimes:
            raise ConfigurationError(f"No runtime registered for provider '{settings.provider}'")

        runtime = self._runtimes[settings.provider](settings)
        info = runtime.get_model_info()
        logger.info(f"Using runtime: {info['name']} ({info.get('model', info['type'])})")
        return runtime

    @staticmethod
    def _create_gemini(settings: Settings) -> LLMRuntime:
        return GeminiRuntime(
            api_key=settings.require_api_key(),
            model=settings.model_name,
            timeout=settings.request_timeout,
            temperature=settings.temperature
        )

    @staticmethod
    def _create_openai(settings: Settings) -> LLMRuntime:
        return OpenAICompatibleRuntime(
            api_key=settings.require_api_key(),
            model=settings.model_name,
            base_url=settings.base_url,
            timeout=settings.request_timeout,
            temperature=settings.temperature
        )

    @staticmethod
    def _create_mock(settings: Settings) -> LLMRuntime:
        return MockLLMRuntime({})


def create_runtime(settings: Settings) -> LLMRuntime:
    """Create the configured runtime, failing fast on missing credentials."""
    return RuntimeFactory().create_runtime(settings)
